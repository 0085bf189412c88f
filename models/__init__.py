from .base import PersonRef, Record
from .user import Role, SessionUser, User
from .academics import Course, CourseGroup, CourseRef, Enrollment, Group, Objection
from .tickets import Comment, Ticket

__all__ = [
    "Comment",
    "Course",
    "CourseGroup",
    "CourseRef",
    "Enrollment",
    "Group",
    "Objection",
    "PersonRef",
    "Record",
    "Role",
    "SessionUser",
    "Ticket",
    "User",
]
