from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from school_admin.core.context import get_institute_id, get_user, resolve_institute_id
from school_admin.core.errors import (
    Conflict, Forbidden, Gone, InvalidCredentials, InvalidRequest, NotFound, Unauthenticated
)
from school_admin.core.logger import logger
from school_admin.core.permissions import INSTITUTE_USER_ROLES, Role
from school_admin.core.security import create_access_token, hash_password, verify_password
from school_admin.models import User
from school_admin.models.mixins import utcnow
from school_admin.schemas.user import (
    InstituteAdminCreateSchema, InstituteUserCreateSchema, LoginResponse,
    SuperAdminCreateSchema, UserCreateSchema, UserOut, UserUpdateSchema
)
from school_admin.services.institute_service import require_usable_institute
from school_admin.services.pagination import paginate


def normalize_email(email: str) -> str:
    return email.strip().lower()


def sanitize(user: User) -> UserOut:
    return UserOut.model_validate(user)


def _scope(query, column, value):
    # NULL-aware equality
    if value is None:
        return query.filter(column.is_(None))
    return query.filter(column == value)


# =====================================================
# CREATION
# =====================================================

def _require_fields(data: UserCreateSchema) -> None:
    for field in ("first_name", "last_name", "email", "password"):
        value = getattr(data, field, None)
        if value is None or not str(value).strip():
            raise InvalidRequest(f"{field} is required")


def _check_unique(
    db: Session,
    email: str,
    phone_no: Optional[str],
    country_code: Optional[str],
    institute_id: Optional[UUID],
    exclude_id: Optional[UUID] = None,
) -> None:
    """Email and phone must be unique within one institute (or among untenanted users)."""
    if email:
        query = _scope(db.query(User).filter(User.email == email), User.institute_id, institute_id)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise Conflict("User with this email already exists")

    if phone_no:
        query = db.query(User).filter(User.phone_no == phone_no)
        query = _scope(query, User.country_code, country_code)
        query = _scope(query, User.institute_id, institute_id)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise Conflict("User with this phone number already exists")


def _create_user(db: Session, data: UserCreateSchema, role: str, institute_id: Optional[UUID]) -> User:
    _require_fields(data)
    email = normalize_email(data.email)
    _check_unique(db, email, data.phone_no, data.country_code, institute_id)

    user = User(
        first_name=data.first_name.strip(),
        last_name=data.last_name.strip(),
        email=email,
        password_hash=hash_password(data.password),
        country_code=data.country_code,
        phone_no=data.phone_no,
        gender=data.gender,
        dob=data.dob,
        address=data.address,
        role=role,
        institute_id=institute_id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(
        f"USER CREATED | user_id={user.id} | role={role} | institute_id={institute_id}"
    )
    return user


def create_super_admin(db: Session, data: SuperAdminCreateSchema) -> UserOut:
    if data.institute_id is not None:
        raise InvalidRequest("Super admin cannot belong to an institute")
    return sanitize(_create_user(db, data, Role.SUPER_ADMIN.value, None))


def create_institute_admin(
    db: Session,
    data: InstituteAdminCreateSchema,
    institute_id: Optional[UUID] = None,
) -> UserOut:
    institute_id = institute_id or data.institute_id
    if institute_id is None:
        raise InvalidRequest("Institute ID is required for an institute admin")

    require_usable_institute(db, institute_id)
    return sanitize(_create_user(db, data, Role.INSTITUTE_ADMIN.value, institute_id))


def create_institute_user(db: Session, data: InstituteUserCreateSchema) -> UserOut:
    role = data.role.strip().upper()
    if role not in INSTITUTE_USER_ROLES:
        logger.warning(f"INVALID ROLE | role={data.role}")
        raise InvalidRequest(
            f"Invalid role. Allowed roles: {', '.join(sorted(INSTITUTE_USER_ROLES))}"
        )

    institute_id = resolve_institute_id()
    require_usable_institute(db, institute_id)
    return sanitize(_create_user(db, data, role, institute_id))


# =====================================================
# LOGIN
# =====================================================

def _pick_login_candidate(candidates: List[User], password: str) -> User:
    # the same email may exist in several institutes
    live = [c for c in candidates if not c.is_deleted]
    if len(live) > 1:
        for candidate in live:
            if verify_password(password, candidate.password_hash):
                return candidate
    return candidates[0]


def _record_last_login(db: Session, user: User) -> None:
    try:
        user.last_login_at = utcnow()
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"LAST LOGIN NOT RECORDED | user_id={user.id} | {e}")


def login(db: Session, email: str, password: str) -> LoginResponse:
    email = normalize_email(email or "")

    candidates = (
        db.query(User)
        .filter(User.email == email)
        .order_by(User.is_deleted.asc(), User.created_at.asc())
        .all()
    )
    if not candidates:
        logger.warning(f"LOGIN FAILED | email={email} | reason=unknown")
        raise InvalidCredentials()

    user = _pick_login_candidate(candidates, password)

    if not user.is_active:
        logger.warning(f"LOGIN FAILED | user_id={user.id} | reason=inactive")
        raise Forbidden("Account is inactive")
    if user.is_deleted:
        logger.warning(f"LOGIN FAILED | user_id={user.id} | reason=deleted")
        raise Gone("Account has been deleted")

    if not verify_password(password or "", user.password_hash):
        logger.warning(f"LOGIN FAILED | email={email} | reason=password")
        raise InvalidCredentials()

    if user.institute_id is not None:
        require_usable_institute(db, user.institute_id)

    _record_last_login(db, user)

    token = create_access_token({
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "institute_id": str(user.institute_id) if user.institute_id else None,
    })

    logger.info(f"LOGIN SUCCESS | user_id={user.id} | role={user.role}")
    return LoginResponse(user=sanitize(user), token=token)


# =====================================================
# READ / UPDATE / DELETE
# =====================================================

def list_users(
    db: Session,
    role: Optional[str] = None,
    is_active: Optional[bool] = None,
    is_deleted: Optional[bool] = False,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    without_profile: bool = False,
):
    institute_id = resolve_institute_id()

    query = db.query(User).filter(User.institute_id == institute_id)
    if role:
        query = query.filter(User.role == role.strip().upper())
    if is_active is not None:
        query = query.filter(User.is_active == is_active)
    if is_deleted is not None:
        query = query.filter(User.is_deleted == is_deleted)
    if without_profile:
        query = query.filter(User.profile_id.is_(None))

    query = query.order_by(User.created_at.desc())
    users, total, page, limit = paginate(query, page, limit)
    return [sanitize(u) for u in users], total, page, limit


def list_users_without_profile(db: Session, **filters):
    return list_users(db, without_profile=True, **filters)


def get_me() -> UserOut:
    user = get_user()
    if user is None:
        raise Unauthenticated()
    return sanitize(user)


def get_scoped_user(db: Session, user_id: UUID, institute_id: Optional[UUID]) -> User:
    """Load a user by id, restricted to ``institute_id`` when one is given."""
    query = db.query(User).filter(User.id == user_id)
    if institute_id is not None:
        query = query.filter(User.institute_id == institute_id)
    user = query.first()
    if not user:
        raise NotFound("User not found")
    if user.is_deleted:
        raise Gone("User has been deleted")
    return user


def update_user(db: Session, user_id: UUID, data: UserUpdateSchema) -> UserOut:
    institute_id = resolve_institute_id()
    user = get_scoped_user(db, user_id, institute_id)

    changes = data.model_dump(exclude_unset=True)
    for field in ("first_name", "last_name"):
        if field in changes and changes[field] is None:
            raise InvalidRequest(f"{field} cannot be null")
    if "phone_no" in changes or "country_code" in changes:
        _check_unique(
            db,
            email=None,
            phone_no=changes.get("phone_no", user.phone_no),
            country_code=changes.get("country_code", user.country_code),
            institute_id=institute_id,
            exclude_id=user.id,
        )

    for field, value in changes.items():
        setattr(user, field, value)

    db.commit()
    db.refresh(user)
    logger.info(f"USER UPDATED | user_id={user_id} | fields={sorted(changes)}")
    return sanitize(user)


def update_user_status(db: Session, user_id: UUID, is_active: bool) -> UserOut:
    user = get_scoped_user(db, user_id, get_institute_id())
    user.is_active = is_active
    db.commit()
    db.refresh(user)
    logger.info(f"USER STATUS UPDATED | user_id={user_id} | is_active={is_active}")
    return sanitize(user)


def delete_user(db: Session, user_id: UUID) -> UserOut:
    user = get_scoped_user(db, user_id, resolve_institute_id())
    user.is_deleted = True
    db.commit()
    db.refresh(user)
    logger.info(f"USER DELETED | user_id={user_id}")
    return sanitize(user)
