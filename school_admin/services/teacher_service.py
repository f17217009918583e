from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from school_admin.core.context import get_user, resolve_institute_id
from school_admin.core.errors import Conflict, Gone, InvalidRequest, NotFound
from school_admin.core.logger import logger
from school_admin.core.permissions import Role
from school_admin.models import Teacher, User
from school_admin.schemas.school import TeacherCreateSchema
from school_admin.services.pagination import paginate
from school_admin.services.user_service import get_scoped_user


def create_teacher(db: Session, data: TeacherCreateSchema) -> Teacher:
    institute_id = resolve_institute_id()
    # users of another institute are reported as missing
    user = get_scoped_user(db, data.user_id, institute_id)

    if user.role != Role.TEACHER.value:
        raise InvalidRequest("User must have the TEACHER role")
    live = db.query(Teacher).filter(
        Teacher.user_id == user.id,
        Teacher.is_deleted == False,  # noqa: E712
    ).first()
    if live:
        raise Conflict("Teacher profile already exists for this user")

    teacher = Teacher(
        user_id=user.id,
        institute_id=institute_id,
        designation=data.designation or "Assistant Teacher",
        department=data.department,
        qualification=[q.model_dump() for q in data.qualification],
        experience=data.experience,
        joining_date=data.joining_date,
        specialization=data.specialization,
        subjects=list(data.subjects),
    )
    db.add(teacher)
    db.flush()

    user.profile_id = teacher.id
    db.commit()
    db.refresh(teacher)

    logger.info(f"TEACHER CREATED | teacher_id={teacher.id} | user_id={user.id}")
    return teacher


def list_teachers(
    db: Session,
    is_active: Optional[bool] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
):
    query = db.query(Teacher).filter(
        Teacher.institute_id == resolve_institute_id(),
        Teacher.is_deleted == False,  # noqa: E712
    )
    if is_active is not None:
        query = query.filter(Teacher.is_active == is_active)
    query = query.order_by(Teacher.created_at.desc())
    return paginate(query, page, limit)


def get_teacher(db: Session, teacher_id: UUID) -> Teacher:
    teacher = db.query(Teacher).filter(
        Teacher.id == teacher_id,
        Teacher.institute_id == resolve_institute_id(),
    ).first()
    if not teacher:
        raise NotFound("Teacher not found")
    if teacher.is_deleted:
        raise Gone("Teacher has been deleted")
    return teacher


def delete_teacher(db: Session, teacher_id: UUID) -> Teacher:
    teacher = get_teacher(db, teacher_id)
    teacher.is_deleted = True
    teacher.is_active = False

    user = db.get(User, teacher.user_id)
    if user is not None and user.profile_id == teacher.id:
        user.profile_id = None

    db.commit()
    db.refresh(teacher)
    logger.info(f"TEACHER DELETED | teacher_id={teacher_id}")
    return teacher


def get_my_profile(db: Session) -> Teacher:
    """Teacher profile of the caller."""
    user = get_user()
    teacher = db.query(Teacher).filter(
        Teacher.user_id == user.id,
        Teacher.is_deleted == False,  # noqa: E712
    ).first()
    if not teacher:
        raise NotFound("Teacher profile not found")
    return teacher
