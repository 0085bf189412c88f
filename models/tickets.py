from __future__ import annotations
from datetime import datetime
from typing import Optional

from .base import PersonRef, WithAuthor


class Ticket(WithAuthor):
    id: int
    title: Optional[str] = None
    description: Optional[str] = None
    created_by: Optional[PersonRef] = None
    created_at: Optional[datetime] = None


class Comment(WithAuthor):
    id: int
    text: Optional[str] = None
    created_by: Optional[PersonRef] = None
    created_at: Optional[datetime] = None

    @property
    def from_admin(self) -> bool:
        return bool(self.created_by and (self.created_by.role or "").lower() == "admin")
