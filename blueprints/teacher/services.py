# blueprints/teacher/services.py
from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from models import Objection

@dataclass
class SheetStudent:
    id: int
    username: str
    first_name: str = ""
    last_name: str = ""
    score: Optional[float] = None

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p) or self.username

@dataclass
class TeacherGroup:
    id: int
    group_number: Optional[int]
    enrollment_count: int
    students: List[SheetStudent] = field(default_factory=list)

    @property
    def scored_count(self) -> int:
        return sum(1 for s in self.students if s.score is not None)

@dataclass
class TeacherCourse:
    id: int
    name: str
    code: str = ""
    units: Optional[int] = None
    groups: List[TeacherGroup] = field(default_factory=list)

def _score(value: Any) -> Optional[float]:
    # numeric-колонки часто приходят строкой: "85.00"
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip().replace(",", "."))
        except ValueError:
            return None
    if isinstance(value, (int, float)) and math.isfinite(value):
        return float(value)
    return None

def _student(raw: Dict[str, Any]) -> SheetStudent:
    return SheetStudent(
        id=int(raw["id"]),
        username=str(raw.get("username") or ""),
        first_name=(raw.get("firstName") or raw.get("first_name") or "").strip(),
        last_name=(raw.get("lastName") or raw.get("last_name") or "").strip(),
        score=_score(raw.get("score")),
    )

def _group(raw: Dict[str, Any]) -> TeacherGroup:
    students = [_student(s) for s in raw.get("students") or [] if s.get("id") is not None]
    count = raw.get("enrollmentCount", raw.get("enrollment_count"))
    return TeacherGroup(
        id=int(raw["id"]),
        group_number=raw.get("groupNumber", raw.get("group_number")),
        enrollment_count=int(count) if isinstance(count, int) else len(students),
        students=students,
    )

def parse_courses(payload: Any) -> List[TeacherCourse]:
    raw_courses = payload.get("courses") if isinstance(payload, dict) else payload
    out: List[TeacherCourse] = []
    for c in raw_courses or []:
        if not isinstance(c, dict) or c.get("id") is None:
            continue
        out.append(TeacherCourse(
            id=int(c["id"]),
            name=c.get("name") or "",
            code=c.get("code") or "",
            units=c.get("units"),
            groups=[_group(g) for g in c.get("groups") or [] if g.get("id") is not None],
        ))
    return out

def total_students(courses: List[TeacherCourse]) -> int:
    return sum(g.enrollment_count for c in courses for g in c.groups)

def find_group(courses: List[TeacherCourse], group_id: int) -> Tuple[Optional[TeacherCourse], Optional[TeacherGroup]]:
    for c in courses:
        for g in c.groups:
            if g.id == group_id:
                return c, g
    return None, None

def filter_sheet(students: List[SheetStudent], term: str = "", mode: str = "all") -> List[SheetStudent]:
    term = (term or "").strip().lower()
    out = []
    for s in students:
        if term and not (term in s.username.lower() or term in s.first_name.lower()
                         or term in s.last_name.lower()):
            continue
        if mode == "scored" and s.score is None:
            continue
        if mode == "unscored" and s.score is not None:
            continue
        out.append(s)
    return out

def parse_objections(payload: Any) -> List[Objection]:
    items = payload.get("items") if isinstance(payload, dict) else payload
    return [Objection.model_validate(o) for o in items or [] if isinstance(o, dict)]

def pending_count(objections: List[Objection]) -> int:
    return sum(1 for o in objections if o.is_pending)
