"""Roster reconciliation for group / course-group student screens.

Backends answer "students of a group" in several shapes: one combined list
with enrolled/eligible flags, or separate enrolled/available lists, in
camelCase or snake_case. Everything here folds them into one ``Roster``.
"""
from __future__ import annotations
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

TRUE_WORDS = {"true", "1", "yes", "y", "t"}
FALSE_WORDS = {"false", "0", "no", "n", "f"}

ENROLLED_KEYS = ("enrolledStudents", "enrolled_students", "enrolled")
AVAILABLE_KEYS = ("availableStudents", "available_students", "available")

USERNAME_SEPARATORS = re.compile(r"[\s,;]+")


@dataclass
class RosterStudent:
    id: int
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    is_enrolled: bool = False
    can_enroll: bool = True

    @property
    def display_name(self) -> str:
        return self.full_name or self.username

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "fullName": self.full_name,
            "isEnrolled": self.is_enrolled,
            "canEnroll": self.can_enroll,
        }


@dataclass
class GroupInfo:
    id: Optional[int] = None
    group_number: Optional[int] = None
    course_name: Optional[str] = None
    capacity: Optional[int] = None
    current_enrollment: Optional[int] = None

    @property
    def details(self) -> str:
        parts = []
        if self.course_name:
            parts.append(f"Курс: {self.course_name}")
        if self.group_number is not None:
            parts.append(f"Группа {self.group_number}")
        if self.capacity is not None:
            parts.append(f"Вместимость: {self.capacity}")
        return " | ".join(parts)

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "groupNumber": self.group_number,
            "courseName": self.course_name,
            "capacity": self.capacity,
            "currentEnrollment": self.current_enrollment,
        }

    @property
    def seats_left(self) -> Optional[int]:
        if self.capacity is None or self.current_enrollment is None:
            return None
        return max(0, self.capacity - self.current_enrollment)


@dataclass
class Roster:
    info: Optional[GroupInfo] = None
    enrolled: List[RosterStudent] = field(default_factory=list)
    available: List[RosterStudent] = field(default_factory=list)

    @property
    def enrolled_ids(self) -> List[int]:
        return [s.id for s in self.enrolled]

    def to_json(self) -> Dict[str, Any]:
        return {
            "groupInfo": self.info.to_json() if self.info else None,
            "enrolled": [s.to_json() for s in self.enrolled],
            "available": [s.to_json() for s in self.available],
        }


def parse_boolean(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return value != 0
    if isinstance(value, str):
        word = value.strip().lower()
        if word in TRUE_WORDS:
            return True
        if word in FALSE_WORDS:
            return False
    return None


def _first(*values: Optional[bool]) -> Optional[bool]:
    for v in values:
        if v is not None:
            return v
    return None


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return None


def _number(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return int(parsed) if math.isfinite(parsed) else None
    return None


def _pick(raw: Dict[str, Any], camel: str, snake: str) -> Any:
    value = raw.get(camel)
    return value if value is not None else raw.get(snake)


def normalize_student(raw: Dict[str, Any], *, is_enrolled: Optional[bool] = None,
                      can_enroll: Optional[bool] = None) -> RosterStudent:
    enrolled = _first(
        is_enrolled,
        parse_boolean(raw.get("isEnrolled")),
        parse_boolean(raw.get("is_enrolled")),
    )
    enrolled = bool(enrolled)
    eligible = _first(
        can_enroll,
        parse_boolean(raw.get("canEnroll")),
        parse_boolean(raw.get("can_enroll")),
    )
    first_name = _text(_pick(raw, "firstName", "first_name"))
    last_name = _text(_pick(raw, "lastName", "last_name"))
    full_name = " ".join(p for p in (first_name, last_name) if p) or None
    return RosterStudent(
        id=int(raw["id"]),
        username=str(raw.get("username") or ""),
        first_name=first_name,
        last_name=last_name,
        full_name=full_name,
        is_enrolled=enrolled,
        can_enroll=eligible if eligible is not None else not enrolled,
    )


def normalize_group_info(raw: Optional[Dict[str, Any]]) -> Optional[GroupInfo]:
    if not raw:
        return None
    course_name = _pick(raw, "courseName", "course_name")
    return GroupInfo(
        id=_number(raw.get("id")),
        group_number=_number(_pick(raw, "groupNumber", "group_number")),
        course_name=str(course_name).strip() if course_name is not None else None,
        capacity=_number(raw.get("capacity")),
        current_enrollment=_number(_pick(raw, "currentEnrollment", "current_enrollment")),
    )


def _records(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [r for r in value if isinstance(r, dict) and r.get("id") is not None]


def _list_under(payload: Dict[str, Any], keys: Iterable[str]) -> List[Dict[str, Any]]:
    for key in keys:
        value = payload.get(key)
        if isinstance(value, list):
            return _records(value)
    return []


def reconcile_roster(payload: Any) -> Roster:
    if isinstance(payload, list):
        payload = {"students": payload}
    if not isinstance(payload, dict):
        return Roster()

    enrolled: Dict[int, RosterStudent] = {}
    available: Dict[int, RosterStudent] = {}

    for raw in _records(payload.get("students")):
        student = normalize_student(raw)
        if student.is_enrolled:
            available.pop(student.id, None)
            enrolled[student.id] = student
        elif student.id not in enrolled:
            available[student.id] = student

    # отдельные списки покрывают backend, который отдаёт только одну сторону
    for raw in _list_under(payload, ENROLLED_KEYS):
        student = normalize_student(raw, is_enrolled=True)
        available.pop(student.id, None)
        enrolled[student.id] = student
    for raw in _list_under(payload, AVAILABLE_KEYS):
        student = normalize_student(raw, is_enrolled=False)
        if student.id not in enrolled:
            available[student.id] = student

    info = normalize_group_info(payload.get("groupInfo") or payload.get("group_info"))
    return Roster(
        info=info,
        enrolled=list(enrolled.values()),
        available=[s for s in available.values() if s.can_enroll],
    )


def parse_usernames(text: Optional[str]) -> List[str]:
    seen: Dict[str, None] = {}
    for item in USERNAME_SEPARATORS.split(text or ""):
        item = item.strip()
        if item:
            seen.setdefault(item, None)
    return list(seen)


def filter_roster(students: List[RosterStudent], term: Optional[str]) -> List[RosterStudent]:
    term = (term or "").strip().lower()
    if not term:
        return students
    return [
        s for s in students
        if term in s.username.lower() or (s.full_name and term in s.full_name.lower())
    ]
