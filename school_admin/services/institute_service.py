from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from school_admin.core.context import resolve_institute_id
from school_admin.core.errors import Conflict, Forbidden, Gone, InvalidRequest, NotFound
from school_admin.core.logger import logger
from school_admin.core.permissions import Role
from school_admin.models import Institute, User
from school_admin.schemas.institute import InstituteCreateSchema, InstituteUpdateSchema
from school_admin.services.pagination import paginate

# NOT NULL columns a patch may change but never clear
REQUIRED_FIELDS = ("name", "address", "contact_email", "contact_phone", "is_active")


def normalize_code(code: str) -> str:
    return code.strip().upper()


def get_institute_by_code(db: Session, code: str) -> Optional[Institute]:
    return db.query(Institute).filter(Institute.code == normalize_code(code)).first()


def require_usable_institute(db: Session, institute_id: UUID) -> Institute:
    """Institute must exist, not be deleted and be active."""
    institute = db.get(Institute, institute_id)
    if not institute:
        logger.warning(f"INSTITUTE NOT FOUND | institute_id={institute_id}")
        raise NotFound("Institute not found")
    if institute.is_deleted:
        logger.warning(f"INSTITUTE DELETED | institute_id={institute_id}")
        raise Gone("Institute has been deleted")
    if not institute.is_active:
        logger.warning(f"INSTITUTE INACTIVE | institute_id={institute_id}")
        raise Forbidden("Institute is not active")
    return institute


def create_institute(db: Session, data: InstituteCreateSchema) -> Institute:
    code = normalize_code(data.code)

    # deleted institutes keep their code
    if get_institute_by_code(db, code):
        raise Conflict("Institute code already exists")

    institute = Institute(
        name=data.name.strip(),
        code=code,
        address=data.address,
        contact_email=data.contact_email.strip().lower(),
        contact_phone=data.contact_phone,
        max_allowed_users=data.max_allowed_users,
        owner_id=data.owner_id,
    )
    db.add(institute)
    db.commit()
    db.refresh(institute)

    logger.info(f"INSTITUTE CREATED | institute_id={institute.id} | code={institute.code}")
    return institute


def get_institute(db: Session, institute_id: UUID) -> Institute:
    institute = db.get(Institute, institute_id)
    if not institute or institute.is_deleted:
        raise NotFound("Institute not found")
    return institute


def list_institutes(db: Session, page: Optional[int] = None, limit: Optional[int] = None, is_active: Optional[bool] = None):
    query = db.query(Institute).filter(Institute.is_deleted == False)  # noqa: E712
    if is_active is not None:
        query = query.filter(Institute.is_active == is_active)
    query = query.order_by(Institute.created_at.desc())
    return paginate(query, page, limit)


def update_institute(db: Session, institute_id: UUID, data: InstituteUpdateSchema) -> Institute:
    return _apply_changes(db, institute_id, data.model_dump(exclude_unset=True))


def _apply_changes(db: Session, institute_id: UUID, changes: dict) -> Institute:
    institute = get_institute(db, institute_id)
    for field in REQUIRED_FIELDS:
        if field in changes and changes[field] is None:
            raise InvalidRequest(f"{field} cannot be null")

    if "contact_email" in changes and changes["contact_email"]:
        changes["contact_email"] = changes["contact_email"].strip().lower()
    for field, value in changes.items():
        setattr(institute, field, value)

    db.commit()
    db.refresh(institute)
    logger.info(f"INSTITUTE UPDATED | institute_id={institute_id} | fields={sorted(changes)}")
    return institute


def delete_institute(db: Session, institute_id: UUID) -> Institute:
    institute = db.get(Institute, institute_id)
    if not institute:
        raise NotFound("Institute not found")
    if institute.is_deleted:
        raise Gone("Institute has already been deleted")

    institute.is_deleted = True
    db.commit()
    db.refresh(institute)
    logger.info(f"INSTITUTE DELETED | institute_id={institute_id}")
    return institute


def get_institute_admins(db: Session, institute_id: UUID, page: Optional[int] = None, limit: Optional[int] = None):
    """Admins of one institute plus the institute's total non-deleted user count."""
    get_institute(db, institute_id)

    query = (
        db.query(User)
        .filter(
            User.institute_id == institute_id,
            User.role == Role.INSTITUTE_ADMIN.value,
            User.is_deleted == False,  # noqa: E712
        )
        .order_by(User.created_at.desc())
    )
    admins, total, page, limit = paginate(query, page, limit)

    total_users = (
        db.query(User)
        .filter(User.institute_id == institute_id, User.is_deleted == False)  # noqa: E712
        .count()
    )
    return admins, total, page, limit, total_users


# =====================================================
# CALLER'S OWN INSTITUTE
# =====================================================

def get_my_institute(db: Session) -> Institute:
    return get_institute(db, resolve_institute_id())


def update_my_institute(db: Session, data: InstituteUpdateSchema) -> Institute:
    changes = data.model_dump(exclude_unset=True)
    # institute admins may not (de)activate their own tenant
    changes.pop("is_active", None)
    return _apply_changes(db, resolve_institute_id(), changes)
