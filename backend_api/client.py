from __future__ import annotations
import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Optional

import requests

from .errors import BackendUnavailable, error_from_response
from .pagination import Page, clamp_page

log = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


class BackendClient:
    """Thin proxy over the external REST API.

    One method per endpoint, no retries and no caching: a call either returns
    the decoded JSON body or raises from :mod:`backend_api.errors`.
    The bearer token is pulled from ``token_provider`` on every call unless
    one is passed explicitly.
    """

    def __init__(self, app=None, token_provider: Optional[TokenProvider] = None):
        self.base_url = ""
        self.timeout: float = 10
        self.score_update_method = "PATCH"
        self.token_provider = token_provider
        self.http: requests.Session = requests.Session()
        if app is not None:
            self.init_app(app, token_provider)

    def init_app(self, app, token_provider: Optional[TokenProvider] = None) -> None:
        self.base_url = app.config["BACKEND_API_URL"].rstrip("/")
        self.timeout = app.config.get("BACKEND_TIMEOUT", 10)
        self.score_update_method = str(app.config.get("SCORE_UPDATE_METHOD", "PATCH")).upper()
        if token_provider is not None:
            self.token_provider = token_provider
        self.http = requests.Session()
        self.http.headers.update({"Accept": "application/json"})
        app.extensions["backend"] = self

    # ---------- transport ----------
    def request(self, method: str, path: str, *, params: Optional[Dict[str, Any]] = None,
                json: Any = None, files: Any = None, token: Optional[str] = None) -> Any:
        headers = {}
        if token is None and self.token_provider:
            token = self.token_provider()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if params:
            params = {k: v for k, v in params.items() if v is not None and v != ""}

        started = time.monotonic()
        try:
            resp = self.http.request(
                method, f"{self.base_url}{path}",
                params=params or None, json=json, files=files,
                headers=headers, timeout=self.timeout,
            )
        except requests.RequestException as ex:
            log.warning("backend unreachable", extra={
                "event": "backend_call", "method": method, "path": path, "status": None,
            })
            raise BackendUnavailable("Сервер недоступен, попробуйте позже") from ex

        log.info("backend call", extra={
            "event": "backend_call",
            "method": method,
            "path": path,
            "status": resp.status_code,
            "duration_ms": int((time.monotonic() - started) * 1000),
        })
        if resp.status_code >= 400:
            raise error_from_response(resp)
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return resp.text

    def get(self, path: str, **params) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def patch(self, path: str, json: Any = None) -> Any:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def _page(self, path: str, page: int, limit: int, **params) -> Page:
        page = clamp_page(page)
        payload = self.get(path, page=page, limit=limit, **params)
        return Page.from_payload(payload, page=page, limit=limit)

    @staticmethod
    def _file(upload) -> Dict[str, Any]:
        # werkzeug FileStorage -> (name, stream, mimetype) для requests
        return {"file": (upload.filename, upload.stream, upload.mimetype or "application/octet-stream")}

    # ---------- auth ----------
    def login(self, username: str, password: str) -> Dict[str, Any]:
        return self.post("/auth/login", {"username": username, "password": password}) or {}

    def register_user(self, username: str, password: str, first_name: str, last_name: str) -> Any:
        return self.post("/users/register", {
            "username": username, "password": password,
            "firstName": first_name, "lastName": last_name,
        })

    def get_current_user(self, token: Optional[str] = None) -> Dict[str, Any]:
        # token передают явно, пока сессии ещё нет (вход)
        return self.request("GET", "/users/me", token=token) or {}

    # ---------- users ----------
    def list_users(self, page: int = 1, limit: int = 10, search: Optional[str] = None,
                   role: Optional[str] = None, group_id: Optional[int] = None) -> Page:
        return self._page("/users", page, limit, search=search, role=role, groupId=group_id)

    def create_user_manual(self, username: str, password: str, first_name: str, last_name: str,
                           role: str, group_id: Optional[int] = None) -> Any:
        body = {
            "username": username, "password": password,
            "firstName": first_name, "lastName": last_name, "role": role,
        }
        if group_id is not None:
            body["groupId"] = group_id
        return self.post("/users/manual", body)

    def update_user(self, user_id: int, data: Dict[str, Any]) -> Any:
        return self.patch(f"/users/{user_id}", data)

    def delete_user(self, user_id: int) -> Any:
        return self.delete(f"/users/{user_id}")

    def delete_users(self, user_ids: Iterable[int]) -> Any:
        return self.post("/users/bulk-delete", {"userIds": list(user_ids)})

    def delete_all_students(self) -> Any:
        return self.delete("/users/students")

    def upload_users_excel(self, upload) -> Dict[str, Any]:
        return self.request("POST", "/users/upload-excel", files=self._file(upload)) or {}

    # ---------- courses ----------
    def list_courses(self, page: int = 1, limit: int = 10, search: Optional[str] = None) -> Page:
        return self._page("/courses", page, limit, search=search)

    def create_course(self, data: Dict[str, Any]) -> Any:
        return self.post("/courses", data)

    def update_course(self, course_id: int, data: Dict[str, Any]) -> Any:
        return self.patch(f"/courses/{course_id}", data)

    def delete_course(self, course_id: int) -> Any:
        return self.delete(f"/courses/{course_id}")

    # ---------- academic groups ----------
    def list_groups(self, page: int = 1, limit: int = 10, search: Optional[str] = None) -> Page:
        return self._page("/groups", page, limit, search=search)

    def create_group(self, name: str) -> Any:
        return self.post("/groups", {"name": name})

    def update_group(self, group_id: int, name: str) -> Any:
        return self.patch(f"/groups/{group_id}", {"name": name})

    def delete_group(self, group_id: int) -> Any:
        return self.delete(f"/groups/{group_id}")

    def get_group_students(self, group_id: int) -> Any:
        return self.get(f"/groups/{group_id}/students")

    def add_students_to_group_by_username(self, group_id: int, usernames: List[str]) -> Dict[str, Any]:
        return self.post(f"/groups/{group_id}/students/bulk", {"usernames": usernames}) or {}

    def remove_students_from_group(self, group_id: int, student_ids: List[int]) -> Any:
        return self.post(f"/groups/{group_id}/students/remove", {"studentIds": student_ids})

    # ---------- course groups ----------
    def list_course_groups(self, page: int = 1, limit: int = 10, search: Optional[str] = None,
                           group_id: Optional[int] = None) -> Page:
        return self._page("/course-groups", page, limit, search=search, groupId=group_id)

    def create_course_group(self, course_id: int, professor_id: int, group_id: Optional[int] = None,
                            capacity: Optional[int] = None) -> Any:
        body: Dict[str, Any] = {"courseId": course_id, "professorId": professor_id}
        if group_id is not None:
            body["groupId"] = group_id
        if capacity is not None:
            body["capacity"] = capacity
        return self.post("/course-groups", body)

    def delete_course_group(self, course_group_id: int) -> Any:
        return self.delete(f"/course-groups/{course_group_id}")

    def get_students_in_course_group(self, course_group_id: int) -> Any:
        return self.get(f"/course-groups/{course_group_id}/students")

    def get_course_group_students_status(self, course_group_id: int) -> Any:
        return self.get(f"/course-groups/{course_group_id}/students-status")

    def add_students_to_course_group(self, course_group_id: int, student_ids: List[int]) -> Any:
        return self.post(f"/course-groups/{course_group_id}/students", {"studentIds": student_ids})

    def add_students_to_course_group_by_username(self, course_group_id: int,
                                                 usernames: List[str]) -> Dict[str, Any]:
        return self.post(f"/course-groups/{course_group_id}/students/bulk", {"usernames": usernames}) or {}

    def remove_students_from_course_group(self, course_group_id: int, student_ids: List[int]) -> Any:
        return self.post(f"/course-groups/{course_group_id}/students/remove", {"studentIds": student_ids})

    def submit_group_scores(self, course_group_id: int, scores: List[Dict[str, Any]]) -> Any:
        return self.post(f"/course-groups/{course_group_id}/scores", {"scores": scores})

    def upload_group_scores_excel(self, course_group_id: int, upload) -> Any:
        return self.request("POST", f"/course-groups/{course_group_id}/scores/upload-excel",
                            files=self._file(upload))

    # ---------- enrollments / scores ----------
    def list_enrollments(self, page: int = 1, limit: int = 10, search: Optional[str] = None) -> Page:
        return self._page("/enrollments", page, limit, search=search)

    def create_enrollment(self, student_id: int, group_id: int) -> Any:
        return self.post("/enrollments", {"studentId": student_id, "groupId": group_id})

    def update_score(self, enrollment_id: int, score: float) -> Any:
        return self.request(self.score_update_method, f"/enrollments/{enrollment_id}/score",
                            json={"score": score})

    def get_professor_courses(self) -> Any:
        return self.get("/course-groups/professor/courses")

    def get_student_enrollments(self) -> Any:
        return self.get("/enrollments/student")

    # ---------- tickets ----------
    def list_tickets(self, page: int = 1, limit: int = 10) -> Page:
        return self._page("/tickets", page, limit)

    def create_ticket(self, title: str, description: str) -> Any:
        return self.post("/tickets", {"title": title, "description": description})

    def get_ticket(self, ticket_id: int) -> Dict[str, Any]:
        return self.get(f"/tickets/{ticket_id}") or {}

    def list_ticket_comments(self, ticket_id: int) -> List[Dict[str, Any]]:
        return self.get(f"/tickets/{ticket_id}/comments") or []

    def add_ticket_comment(self, ticket_id: int, text: str) -> Any:
        return self.post(f"/tickets/{ticket_id}/comments", {"text": text})

    # ---------- objections ----------
    def submit_objection(self, enrollment_id: int, reason: str) -> Any:
        return self.post("/objections/submit", {"enrollmentId": enrollment_id, "reason": reason})

    def list_teacher_objections(self) -> Any:
        return self.get("/objections/teacher")

    def list_student_objections(self) -> Any:
        return self.get("/objections/student")

    def resolve_objection(self, objection_id: int, response: str) -> Any:
        return self.post(f"/objections/{objection_id}/resolve", {"response": response})
