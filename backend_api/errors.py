from __future__ import annotations
from typing import Any, Optional

import requests

DEFAULT_MESSAGE = "Сервер вернул ошибку"


class BackendException(Exception):
    """Base for everything raised by the backend client."""

    def __init__(self, message: Optional[str], status: Optional[int] = None, payload: Any = None):
        super().__init__(message or DEFAULT_MESSAGE)
        # None: backend ничего не объяснил, view подставит своё сообщение
        self.message = message
        self.status = status
        self.payload = payload

    def __str__(self) -> str:
        return f"{self.status or '-'}: {self.message or DEFAULT_MESSAGE}"


class BackendUnauthorized(BackendException):
    """401 from the backend. Not a BackendError: views never swallow it,
    the auth blueprint ends the session and redirects to /login."""


class BackendError(BackendException):
    """Any other failed call. Views catch this and flash ``message``."""


class BackendValidationError(BackendError):
    pass


class BackendNotFound(BackendError):
    pass


class BackendUnavailable(BackendError):
    """Connection refused, DNS failure, timeout: no HTTP status at all."""


def extract_message(payload: Any) -> Optional[str]:
    # NestJS-подобные ответы: {"message": "..."} или {"message": ["...", "..."]}
    if isinstance(payload, dict):
        msg = payload.get("message")
        if isinstance(msg, list):
            parts = [str(m).strip() for m in msg if str(m).strip()]
            return "; ".join(parts) or None
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
        err = payload.get("error")
        if isinstance(err, str) and err.strip():
            return err.strip()
    if isinstance(payload, str) and payload.strip():
        return payload.strip()[:300]
    return None


def error_from_response(resp: requests.Response) -> BackendException:
    try:
        payload = resp.json()
    except ValueError:
        payload = resp.text or None
    status = resp.status_code
    message = extract_message(payload)
    if status == 401:
        return BackendUnauthorized(message, status, payload)
    if status == 404:
        return BackendNotFound(message, status, payload)
    if status in (400, 409, 422):
        return BackendValidationError(message, status, payload)
    return BackendError(message, status, payload)
