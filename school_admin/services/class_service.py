from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from school_admin.core.context import resolve_institute_id
from school_admin.core.errors import Conflict, Gone, NotFound
from school_admin.core.logger import logger
from school_admin.models import AcademicSession, InstituteClass, Teacher
from school_admin.schemas.school import ClassCreateSchema, ClassUpdateSchema
from school_admin.services.pagination import paginate


def _require_session(db: Session, session_id: UUID, institute_id: UUID) -> AcademicSession:
    session = db.query(AcademicSession).filter(
        AcademicSession.id == session_id,
        AcademicSession.institute_id == institute_id,
        AcademicSession.is_deleted == False,  # noqa: E712
    ).first()
    if not session:
        raise NotFound("Academic session not found")
    return session


def _require_teacher(db: Session, teacher_id: UUID, institute_id: UUID) -> Teacher:
    teacher = db.query(Teacher).filter(
        Teacher.id == teacher_id,
        Teacher.institute_id == institute_id,
        Teacher.is_deleted == False,  # noqa: E712
    ).first()
    if not teacher:
        raise NotFound("Class teacher not found")
    return teacher


def _check_duplicate(
    db: Session,
    institute_id: UUID,
    session_id: UUID,
    name: str,
    section: str,
    exclude_id: Optional[UUID] = None,
) -> None:
    query = db.query(InstituteClass).filter(
        InstituteClass.institute_id == institute_id,
        InstituteClass.academic_session_id == session_id,
        InstituteClass.name == name,
        InstituteClass.section == section,
        InstituteClass.is_deleted == False,  # noqa: E712
    )
    if exclude_id is not None:
        query = query.filter(InstituteClass.id != exclude_id)
    if query.first():
        raise Conflict(f"Class {name} - {section} already exists in this session")


def create_class(db: Session, data: ClassCreateSchema) -> InstituteClass:
    institute_id = resolve_institute_id()
    _require_session(db, data.academic_session_id, institute_id)
    if data.class_teacher_id:
        _require_teacher(db, data.class_teacher_id, institute_id)

    name, section = data.name.strip(), data.section.strip().upper()
    _check_duplicate(db, institute_id, data.academic_session_id, name, section)

    institute_class = InstituteClass(
        institute_id=institute_id,
        academic_session_id=data.academic_session_id,
        name=name,
        section=section,
        class_teacher_id=data.class_teacher_id,
    )
    db.add(institute_class)
    db.commit()
    db.refresh(institute_class)

    logger.info(f"CLASS CREATED | class_id={institute_class.id} | {name}-{section}")
    return institute_class


def list_classes(
    db: Session,
    academic_session_id: Optional[UUID] = None,
    is_active: Optional[bool] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
):
    query = db.query(InstituteClass).filter(
        InstituteClass.institute_id == resolve_institute_id(),
        InstituteClass.is_deleted == False,  # noqa: E712
    )
    if academic_session_id:
        query = query.filter(InstituteClass.academic_session_id == academic_session_id)
    if is_active is not None:
        query = query.filter(InstituteClass.is_active == is_active)

    query = query.order_by(InstituteClass.name.asc(), InstituteClass.section.asc())
    return paginate(query, page, limit)


def get_class(db: Session, class_id: UUID) -> InstituteClass:
    institute_class = db.query(InstituteClass).filter(
        InstituteClass.id == class_id,
        InstituteClass.institute_id == resolve_institute_id(),
    ).first()
    if not institute_class:
        raise NotFound("Class not found")
    if institute_class.is_deleted:
        raise Gone("Class has been deleted")
    return institute_class


def update_class(db: Session, class_id: UUID, data: ClassUpdateSchema) -> InstituteClass:
    institute_class = get_class(db, class_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    if "name" in changes or "section" in changes:
        name = changes.get("name", institute_class.name).strip()
        section = changes.get("section", institute_class.section).strip().upper()
        _check_duplicate(
            db, institute_class.institute_id, institute_class.academic_session_id,
            name, section, exclude_id=institute_class.id,
        )
        changes["name"], changes["section"] = name, section

    if changes.get("class_teacher_id"):
        _require_teacher(db, changes["class_teacher_id"], institute_class.institute_id)

    for field, value in changes.items():
        setattr(institute_class, field, value)

    db.commit()
    db.refresh(institute_class)
    logger.info(f"CLASS UPDATED | class_id={class_id} | fields={sorted(changes)}")
    return institute_class


def delete_class(db: Session, class_id: UUID) -> InstituteClass:
    institute_class = get_class(db, class_id)
    institute_class.is_deleted = True
    institute_class.is_active = False
    db.commit()
    db.refresh(institute_class)
    logger.info(f"CLASS DELETED | class_id={class_id}")
    return institute_class
