from __future__ import annotations
from pydantic import BaseModel, Field, field_validator

class ObjectionIn(BaseModel):
    enrollment_id: int
    reason: str = Field(min_length=1, max_length=2000)

    @field_validator("reason", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v
