from __future__ import annotations
from pydantic import BaseModel, Field

class EnrollmentIn(BaseModel):
    student_id: int = Field(ge=1)
    group_id: int = Field(ge=1)
