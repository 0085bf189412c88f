from __future__ import annotations
from datetime import datetime
from typing import Optional, Union

from .base import PersonRef, Record


class Course(Record):
    id: int
    name: Optional[str] = None
    code: Optional[str] = None
    units: Optional[int] = None
    department: Optional[str] = None


class CourseRef(Record):
    id: Optional[int] = None
    name: Optional[str] = None
    code: Optional[str] = None
    units: Optional[int] = None


class Group(Record):
    id: int
    name: Optional[str] = None
    created_at: Optional[datetime] = None


class CourseGroup(Record):
    id: int
    group_number: Optional[int] = None
    capacity: Optional[int] = None
    current_enrollment: Optional[int] = None
    course: Optional[CourseRef] = None
    professor: Optional[PersonRef] = None

    @property
    def course_name(self) -> str:
        return (self.course.name if self.course else None) or "Неизвестно"

    @property
    def professor_name(self) -> str:
        return self.professor.username if self.professor and self.professor.username else "Неизвестно"

    @property
    def label(self) -> str:
        number = self.group_number if self.group_number is not None else "—"
        return f"{self.course_name} · гр. {number}"


class EnrollmentGroup(Record):
    id: Optional[int] = None
    group_number: Optional[int] = None
    name: Optional[str] = None
    course: Optional[CourseRef] = None
    professor: Optional[PersonRef] = None


class Enrollment(Record):
    id: int
    student: Optional[PersonRef] = None
    group: Optional[EnrollmentGroup] = None
    score: Optional[float] = None
    created_at: Optional[datetime] = None
    is_active: Optional[bool] = None
    # плоская форма (эндпоинт студента)
    course_name: Optional[str] = None
    course_code: Optional[str] = None
    group_number: Optional[int] = None

    @property
    def course_title(self) -> str:
        if self.group and self.group.course and self.group.course.name:
            return self.group.course.name
        return self.course_name or "Неизвестно"

    @property
    def professor_name(self) -> str:
        if self.group and self.group.professor:
            return self.group.professor.display_name
        return "—"

    @property
    def student_name(self) -> str:
        return self.student.display_name if self.student else "—"

    @property
    def is_graded(self) -> bool:
        return self.score is not None


class Objection(Record):
    id: int
    course_name: Optional[str] = None
    student_name: Optional[str] = None
    student_id: Optional[Union[int, str]] = None
    group_number: Optional[int] = None
    current_score: Optional[float] = None
    requested_score: Optional[float] = None
    reason: Optional[str] = None
    status: Optional[str] = None
    response: Optional[str] = None
    resolved: bool = False
    created_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        if self.status:
            return self.status.lower() == "pending"
        return not self.resolved
