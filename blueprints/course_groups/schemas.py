from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, Field, field_validator

class CourseGroupIn(BaseModel):
    course_id: int = Field(ge=1)
    professor_id: int = Field(ge=1)
    group_id: Optional[int] = Field(None, ge=1)
    capacity: Optional[int] = Field(None, ge=1, le=1000)

    @field_validator("group_id", "capacity", mode="before")
    @classmethod
    def _blank(cls, v):
        return None if v in ("", None) else v
