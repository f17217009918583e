from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field
from typing_extensions import Annotated

from school_admin.schemas.common import ORMModel


# =====================================================
# CLASSES
# =====================================================

class ClassCreateSchema(BaseModel):
    academic_session_id: UUID
    name: Annotated[str, Field(min_length=1, max_length=100)]
    section: Annotated[str, Field(min_length=1, max_length=20)] = "A"
    class_teacher_id: Optional[UUID] = None


class ClassUpdateSchema(BaseModel):
    name: Optional[Annotated[str, Field(min_length=1, max_length=100)]] = None
    section: Optional[Annotated[str, Field(min_length=1, max_length=20)]] = None
    class_teacher_id: Optional[UUID] = None
    is_active: Optional[bool] = None


class ClassOut(ORMModel):
    id: UUID
    institute_id: UUID
    academic_session_id: UUID
    name: str
    section: str
    class_teacher_id: Optional[UUID] = None
    strength: int
    is_active: bool
    is_deleted: bool
    created_at: Optional[datetime] = None


# =====================================================
# TEACHERS
# =====================================================

class Qualification(BaseModel):
    degree: Optional[str] = None
    university: Optional[str] = None
    year: Optional[int] = None


class TeacherCreateSchema(BaseModel):
    user_id: UUID
    designation: Optional[Annotated[str, Field(max_length=100)]] = None
    department: Optional[Annotated[str, Field(max_length=100)]] = None
    qualification: List[Qualification] = []
    experience: Annotated[int, Field(ge=0)] = 0
    joining_date: Optional[date] = None
    specialization: Optional[Annotated[str, Field(max_length=100)]] = None
    subjects: List[str] = []


class TeacherOut(ORMModel):
    id: UUID
    user_id: UUID
    institute_id: UUID
    designation: Optional[str] = None
    department: Optional[str] = None
    qualification: Optional[list] = None
    experience: Optional[int] = None
    joining_date: Optional[date] = None
    specialization: Optional[str] = None
    subjects: Optional[List[str]] = None
    is_active: bool
    is_deleted: bool


# =====================================================
# STUDENTS
# =====================================================

class StudentCreateSchema(BaseModel):
    user_id: UUID
    admission_number: Annotated[str, Field(min_length=1, max_length=50)]
    roll_number: Optional[Annotated[str, Field(max_length=50)]] = None
    current_class_id: Optional[UUID] = None
    admission_date: Optional[date] = None
    blood_group: Optional[Annotated[str, Field(max_length=5)]] = None
    emergency_contact_name: Optional[Annotated[str, Field(max_length=100)]] = None
    emergency_contact_phone: Optional[Annotated[str, Field(max_length=20)]] = None
    emergency_contact_relation: Optional[Annotated[str, Field(max_length=50)]] = None


class StudentUpdateSchema(BaseModel):
    roll_number: Optional[Annotated[str, Field(max_length=50)]] = None
    current_class_id: Optional[UUID] = None
    blood_group: Optional[Annotated[str, Field(max_length=5)]] = None
    emergency_contact_name: Optional[Annotated[str, Field(max_length=100)]] = None
    emergency_contact_phone: Optional[Annotated[str, Field(max_length=20)]] = None
    emergency_contact_relation: Optional[Annotated[str, Field(max_length=50)]] = None
    is_active: Optional[bool] = None


class StudentOut(ORMModel):
    id: UUID
    user_id: UUID
    institute_id: UUID
    admission_number: str
    roll_number: Optional[str] = None
    current_class_id: Optional[UUID] = None
    admission_date: Optional[date] = None
    blood_group: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    emergency_contact_relation: Optional[str] = None
    is_active: bool
    is_deleted: bool
