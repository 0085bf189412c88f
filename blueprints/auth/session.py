"""Unified auth session.

The bearer token and the logged-in user live in one object under one key of
Flask's signed session cookie. The backend client reads the token from here,
Flask-Login's user loader reads the user from here, and ``end_session`` clears
both in one step.
"""
from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from flask import current_app, has_request_context, session
from flask_login import login_user, logout_user

from models import SessionUser


@dataclass
class AuthSession:
    token: str
    user_id: int
    role: str
    username: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "AuthSession":
        return cls(
            token=str(raw["token"]),
            user_id=int(raw["user_id"]),
            role=str(raw.get("role") or "").lower(),
            username=raw.get("username"),
        )

    def user(self) -> SessionUser:
        return SessionUser(self.user_id, self.role, self.username)


def _key() -> str:
    return current_app.config.get("AUTH_SESSION_KEY", "auth")


def load_session() -> Optional[AuthSession]:
    if not has_request_context():
        return None
    raw = session.get(_key())
    if not raw:
        return None
    try:
        return AuthSession.from_dict(raw)
    except (KeyError, TypeError, ValueError):
        # битая кука: выбрасываем целиком
        session.pop(_key(), None)
        return None


def current_token() -> Optional[str]:
    auth = load_session()
    return auth.token if auth else None


def start_session(token: str, user_id: int, role: str, username: Optional[str] = None) -> SessionUser:
    auth = AuthSession(token=token, user_id=int(user_id), role=(role or "").lower(), username=username)
    session[_key()] = auth.to_dict()
    user = auth.user()
    login_user(user)
    return user


def update_session(**changes) -> Optional[AuthSession]:
    auth = load_session()
    if auth is None:
        return None
    data = auth.to_dict()
    data.update({k: v for k, v in changes.items() if v is not None})
    session[_key()] = data
    return AuthSession.from_dict(data)


def end_session() -> None:
    session.pop(_key(), None)
    logout_user()
