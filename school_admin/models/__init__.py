# school_admin/models/__init__.py

from .institute import Institute
from .user import User
from .academic_session import AcademicSession
from .institute_class import InstituteClass
from .teacher import Teacher
from .student import Student

__all__ = [
    "Institute",
    "User",
    "AcademicSession",
    "InstituteClass",
    "Teacher",
    "Student",
]
