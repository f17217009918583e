from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from school_admin.core.context import get_user, resolve_institute_id
from school_admin.core.errors import Conflict, Gone, InvalidRequest, NotFound
from school_admin.core.logger import logger
from school_admin.core.permissions import Role
from school_admin.models import InstituteClass, Student, User
from school_admin.schemas.school import StudentCreateSchema, StudentUpdateSchema
from school_admin.services import teacher_service
from school_admin.services.pagination import paginate
from school_admin.services.user_service import get_scoped_user


def _require_class(db: Session, class_id: UUID, institute_id: UUID) -> InstituteClass:
    institute_class = db.query(InstituteClass).filter(
        InstituteClass.id == class_id,
        InstituteClass.institute_id == institute_id,
        InstituteClass.is_deleted == False,  # noqa: E712
    ).first()
    if not institute_class:
        raise NotFound("Class not found")
    return institute_class


def _adjust_strength(db: Session, class_id: Optional[UUID], delta: int) -> None:
    if not class_id:
        return
    institute_class = db.get(InstituteClass, class_id)
    if institute_class is not None:
        institute_class.strength = max(0, (institute_class.strength or 0) + delta)


def create_student(db: Session, data: StudentCreateSchema) -> Student:
    institute_id = resolve_institute_id()
    user = get_scoped_user(db, data.user_id, institute_id)

    if user.role != Role.STUDENT.value:
        raise InvalidRequest("User must have the STUDENT role")
    live = db.query(Student).filter(
        Student.user_id == user.id,
        Student.is_deleted == False,  # noqa: E712
    ).first()
    if live:
        raise Conflict("Student profile already exists for this user")

    admission_number = data.admission_number.strip()
    duplicate = db.query(Student).filter(
        Student.institute_id == institute_id,
        Student.admission_number == admission_number,
    ).first()
    if duplicate:
        raise Conflict("Admission number already exists")

    if data.current_class_id:
        _require_class(db, data.current_class_id, institute_id)

    student = Student(
        user_id=user.id,
        institute_id=institute_id,
        admission_number=admission_number,
        roll_number=data.roll_number,
        current_class_id=data.current_class_id,
        admission_date=data.admission_date,
        blood_group=data.blood_group,
        emergency_contact_name=data.emergency_contact_name,
        emergency_contact_phone=data.emergency_contact_phone,
        emergency_contact_relation=data.emergency_contact_relation,
    )
    db.add(student)
    db.flush()

    user.profile_id = student.id
    _adjust_strength(db, student.current_class_id, +1)

    db.commit()
    db.refresh(student)

    logger.info(
        f"STUDENT CREATED | student_id={student.id} | user_id={user.id} | "
        f"class_id={student.current_class_id}"
    )
    return student


def list_students(
    db: Session,
    class_id: Optional[UUID] = None,
    is_active: Optional[bool] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
):
    query = db.query(Student).filter(
        Student.institute_id == resolve_institute_id(),
        Student.is_deleted == False,  # noqa: E712
    )
    if class_id:
        query = query.filter(Student.current_class_id == class_id)
    if is_active is not None:
        query = query.filter(Student.is_active == is_active)
    query = query.order_by(Student.created_at.desc())
    return paginate(query, page, limit)


def get_student(db: Session, student_id: UUID) -> Student:
    student = db.query(Student).filter(
        Student.id == student_id,
        Student.institute_id == resolve_institute_id(),
    ).first()
    if not student:
        raise NotFound("Student not found")
    if student.is_deleted:
        raise Gone("Student has been deleted")
    return student


def update_student(db: Session, student_id: UUID, data: StudentUpdateSchema) -> Student:
    student = get_student(db, student_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    new_class_id = changes.get("current_class_id")
    if new_class_id and new_class_id != student.current_class_id:
        _require_class(db, new_class_id, student.institute_id)
        _adjust_strength(db, student.current_class_id, -1)
        _adjust_strength(db, new_class_id, +1)

    for field, value in changes.items():
        setattr(student, field, value)

    db.commit()
    db.refresh(student)
    logger.info(f"STUDENT UPDATED | student_id={student_id} | fields={sorted(changes)}")
    return student


def delete_student(db: Session, student_id: UUID) -> Student:
    student = get_student(db, student_id)
    student.is_deleted = True
    student.is_active = False

    user = db.get(User, student.user_id)
    if user is not None and user.profile_id == student.id:
        user.profile_id = None
    _adjust_strength(db, student.current_class_id, -1)

    db.commit()
    db.refresh(student)
    logger.info(f"STUDENT DELETED | student_id={student_id}")
    return student


def get_my_profile(db: Session) -> Student:
    """Student profile of the caller."""
    student = db.query(Student).filter(
        Student.user_id == get_user().id,
        Student.is_deleted == False,  # noqa: E712
    ).first()
    if not student:
        raise NotFound("Student profile not found")
    return student


def list_my_students(db: Session, page: Optional[int] = None, limit: Optional[int] = None):
    """Students of every class the calling teacher is class teacher of."""
    teacher = teacher_service.get_my_profile(db)
    class_ids = select(InstituteClass.id).where(
        InstituteClass.class_teacher_id == teacher.id,
        InstituteClass.is_deleted == False,  # noqa: E712
    )
    query = db.query(Student).filter(
        Student.institute_id == teacher.institute_id,
        Student.current_class_id.in_(class_ids),
        Student.is_deleted == False,  # noqa: E712
    ).order_by(Student.roll_number.asc())
    return paginate(query, page, limit)
