from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, Field, field_validator

class CourseIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=1, max_length=50)
    units: int = Field(ge=1, le=30)
    department: Optional[str] = Field(None, max_length=200)

    @field_validator("name", "code", "department", mode="before")
    @classmethod
    def _strip(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v
        return v

    def to_payload(self) -> dict:
        data = {"name": self.name, "code": self.code, "units": self.units}
        if self.department:
            data["department"] = self.department
        return data
