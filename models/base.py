from __future__ import annotations
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class Record(BaseModel):
    """Backend record: camelCase on the wire, snake_case accepted too."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class PersonRef(Record):
    id: Optional[int] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None

    @property
    def display_name(self) -> str:
        parts = [p for p in (_clean(self.first_name), _clean(self.last_name)) if p]
        if parts:
            return " ".join(parts)
        return _clean(self.name) or _clean(self.username) or "Неизвестно"


def coerce_person(value: Any) -> Any:
    # createdBy бывает и объектом, и голым id
    if isinstance(value, int):
        return {"id": value}
    if isinstance(value, str):
        return {"username": value}
    return value


class WithAuthor(Record):
    @field_validator("created_by", mode="before", check_fields=False)
    @classmethod
    def _author(cls, v):
        return coerce_person(v)
