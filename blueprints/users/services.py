# blueprints/users/services.py
from __future__ import annotations
import logging
import threading
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, List, Optional

from backend_api import BackendClient, BackendError, Page
from models import User

log = logging.getLogger(__name__)

@dataclass(frozen=True)
class UserFilters:
    page: int = 1
    limit: int = 10
    search: Optional[str] = None
    role: Optional[str] = None
    group_id: Optional[int] = None

    def merged(self, changes: Dict[str, Any]) -> "UserFilters":
        known = {k: v for k, v in changes.items() if k in self.__dataclass_fields__}
        if "search" in known:
            known["search"] = (known["search"] or "").strip() or None
        if "role" in known:
            known["role"] = (known["role"] or "").strip().lower() or None
        if "page" in known:
            known["page"] = max(1, int(known["page"] or 1))
        return replace(self, **known)

    def as_params(self) -> Dict[str, Any]:
        return asdict(self)

class _Ticket:
    """Handle of one in-flight fetch; ``cancel`` marks its result as stale."""

    __slots__ = ("generation", "cancelled")

    def __init__(self, generation: int):
        self.generation = generation
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

class UserListing:
    """Paginated, filterable user list with cancel-previous-on-new-fetch.

    ``fetch_users(**partial)`` merges the partial filters into the current
    ones, cancels whatever fetch is still running and issues a new one. Only
    the most recent fetch may write ``users`` / ``total_pages``; a cancelled
    fetch that resolves later is dropped silently.
    """

    def __init__(self, client: BackendClient, **initial):
        self.client = client
        self.filters = UserFilters().merged(initial)
        self.users: List[User] = []
        self.total_pages = 0
        self.total: Optional[int] = None
        self.loading = False
        self.error: Optional[str] = None
        self._lock = threading.Lock()
        self._generation = 0
        self._inflight: Optional[_Ticket] = None

    def fetch_users(self, **changes) -> bool:
        with self._lock:
            if self._inflight is not None:
                self._inflight.cancel()
            self._generation += 1
            ticket = _Ticket(self._generation)
            self._inflight = ticket
            self.filters = filters = self.filters.merged(changes)
            self.loading = True

        try:
            page: Page = self.client.list_users(**filters.as_params())
        except BackendError as ex:
            with self._lock:
                if not self._is_current(ticket):
                    return False
                self.error = ex.message or "Не удалось загрузить пользователей"
                self.users = []
                self.total_pages = 1
                self._finish()
            return False

        with self._lock:
            if not self._is_current(ticket):
                log.debug("stale user fetch dropped", extra={"event": "user_fetch_stale"})
                return False
            self.users = [User.model_validate(u) for u in page.items]
            self.total_pages = page.total_pages or 1
            self.total = page.total
            self.error = None
            self._finish()
        return True

    def _is_current(self, ticket: _Ticket) -> bool:
        return not ticket.cancelled and ticket.generation == self._generation

    def _finish(self) -> None:
        self.loading = False
        self._inflight = None

    # ---- мутации: вызов + перезагрузка с текущими фильтрами ----
    def _mutate(self, call, default_error: str, refresh: bool = True) -> bool:
        try:
            call()
        except BackendError as ex:
            self.error = ex.message or default_error
            return False
        self.error = None
        # SSR-вид делает redirect и перечитывает список сам
        if refresh:
            self.fetch_users()
        return True

    def create_user(self, username: str, password: str, role: str, first_name: str = "",
                    last_name: str = "", group_id: Optional[int] = None, refresh: bool = True) -> bool:
        return self._mutate(
            lambda: self.client.create_user_manual(username, password, first_name, last_name, role, group_id),
            "Не удалось создать пользователя", refresh,
        )

    def update_user(self, user_id: int, data: Dict[str, Any], refresh: bool = True) -> bool:
        return self._mutate(lambda: self.client.update_user(user_id, data),
                            "Не удалось обновить пользователя", refresh)

    def delete_user(self, user_id: int, refresh: bool = True) -> bool:
        return self._mutate(lambda: self.client.delete_user(user_id),
                            "Не удалось удалить пользователя", refresh)

    def delete_users(self, user_ids: List[int], refresh: bool = True) -> bool:
        return self._mutate(lambda: self.client.delete_users(user_ids),
                            "Не удалось удалить пользователей", refresh)

def changed_fields(current: User, username: str, role: str, first_name: str, last_name: str,
                   password: Optional[str]) -> Dict[str, Any]:
    """Only what the admin actually changed goes to PATCH /users/{id}."""
    out: Dict[str, Any] = {}
    if username and username != current.username:
        out["username"] = username
    if role and role != current.role:
        out["role"] = role
    if first_name != (current.first_name or ""):
        out["firstName"] = first_name
    if last_name != (current.last_name or ""):
        out["lastName"] = last_name
    if password:
        out["password"] = password
    return out

def summarize_upload(data: Dict[str, Any]) -> Dict[str, Any]:
    """Excel upload answer -> what the result panel shows."""
    users = data.get("users") or []
    reactivated = data.get("reactivated") or []
    return {
        "created": users,
        "reactivated": reactivated,
        "valid": list(users) + list(reactivated),
        "duplicates": data.get("duplicates") or [],
        "errors": [str(e) for e in (data.get("errors") or [])],
    }
