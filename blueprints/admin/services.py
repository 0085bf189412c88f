# blueprints/admin/services.py
from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import Dict

from backend_api import BackendClient, Page

@dataclass
class QuickStats:
    user_count: int = 0
    student_count: int = 0
    teacher_count: int = 0
    course_count: int = 0
    enrollment_count: int = 0

    def to_json(self) -> Dict[str, int]:
        return {
            "userCount": self.user_count,
            "studentCount": self.student_count,
            "teacherCount": self.teacher_count,
            "courseCount": self.course_count,
            "enrollmentCount": self.enrollment_count,
        }

def _count_role(page: Page, role: str) -> int:
    return sum(1 for u in page.items if str(u.get("role", "")).lower() == role)

def collect_stats(client: BackendClient, limit: int = 1000) -> QuickStats:
    users = client.list_users(1, limit)
    courses = client.list_courses(1, limit)
    # для счётчика записей хватает meta.total, сами записи не нужны
    enrollments = client.list_enrollments(1, 1)
    return QuickStats(
        user_count=users.count,
        student_count=_count_role(users, "student"),
        teacher_count=_count_role(users, "teacher"),
        course_count=courses.count,
        enrollment_count=enrollments.total or 0,
    )
