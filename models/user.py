from __future__ import annotations
from enum import Enum
from typing import Any, Dict, Optional

from flask_login import UserMixin

from .base import PersonRef


class Role(str, Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"

    @property
    def label(self) -> str:
        return ROLE_LABELS[self]

    @classmethod
    def parse(cls, value: Any) -> Optional["Role"]:
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


ROLE_LABELS = {
    Role.ADMIN: "Администратор",
    Role.TEACHER: "Преподаватель",
    Role.STUDENT: "Студент",
}


class User(PersonRef):
    id: int
    group_name: Optional[str] = None
    group_id: Optional[int] = None
    is_active: Optional[bool] = None

    @property
    def role_label(self) -> str:
        role = Role.parse(self.role)
        return role.label if role else (self.role or "—")

    @property
    def full_name(self) -> str:
        return self.display_name


class SessionUser(UserMixin):
    """Flask-Login user rebuilt from the auth session on every request."""

    def __init__(self, user_id: int, role: Optional[str], username: Optional[str] = None):
        self.id = user_id
        self.role = (role or "").lower()
        self.username = username

    def get_id(self) -> str:
        return str(self.id)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def is_teacher(self) -> bool:
        return self.role == Role.TEACHER.value

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT.value

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "role": self.role, "username": self.username}

    def __repr__(self):
        return f"<SessionUser {self.id} {self.role}>"
