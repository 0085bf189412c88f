from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from models import Role

class UserIn(BaseModel):
    username: str = Field(min_length=1, max_length=150)
    password: str = Field(min_length=1, max_length=200)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    role: Role = Role.STUDENT
    group_id: Optional[int] = None

    @field_validator("username", "first_name", "last_name", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("group_id", mode="before")
    @classmethod
    def _blank_group(cls, v):
        return None if v in ("", None) else v

    @model_validator(mode="after")
    def _student_needs_group(self):
        if self.role is Role.STUDENT and self.group_id is None:
            raise ValueError("для студента нужно выбрать группу")
        return self

class UserUpdateIn(BaseModel):
    username: str = Field(min_length=1, max_length=150)
    role: Role
    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)
    password: Optional[str] = Field(default=None, max_length=200)

    @field_validator("username", "first_name", "last_name", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("password", mode="before")
    @classmethod
    def _blank_password(cls, v):
        return v or None
