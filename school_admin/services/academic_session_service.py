"""
Academic session consistency rules.

Every tenant has at most one current session. Switching the current session
happens inside one transaction: the institute row is locked, every other
current session of the tenant is unset, then the target is set. The partial
unique index ``uq_academic_sessions_one_current`` backs this up in storage.
"""
from datetime import date
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from school_admin.core.config import settings
from school_admin.core.context import resolve_institute_id
from school_admin.core.dates import DateLike, date_ranges_overlap, parse_date, validate_date_range
from school_admin.core.errors import Conflict, Gone, InvalidDateRange, InvalidRequest, NotFound
from school_admin.core.logger import logger
from school_admin.models import AcademicSession, Institute
from school_admin.schemas.academic_session import (
    AcademicSessionCreateSchema, AcademicSessionUpdateSchema
)
from school_admin.services.institute_service import require_usable_institute


def _tenant(institute_id: Optional[UUID]) -> UUID:
    # super admins have no institute of their own and pass it explicitly
    return resolve_institute_id(institute_id, allow_explicit=True)


def _tenant_sessions(db: Session, institute_id: UUID):
    return db.query(AcademicSession).filter(AcademicSession.institute_id == institute_id)


def _get_tenant_session(db: Session, session_id: UUID, institute_id: UUID) -> AcademicSession:
    session = _tenant_sessions(db, institute_id).filter(AcademicSession.id == session_id).first()
    if not session:
        raise NotFound("Academic session not found")
    if session.is_deleted:
        raise Gone("Academic session has been deleted")
    return session


def _check_name_available(
    db: Session, institute_id: UUID, name: str, exclude_id: Optional[UUID] = None
) -> None:
    query = _tenant_sessions(db, institute_id).filter(AcademicSession.name == name)
    if exclude_id is not None:
        query = query.filter(AcademicSession.id != exclude_id)
    if query.first():
        raise Conflict("Academic session with this name already exists")


def _check_overlap(
    others: Iterable[AcademicSession], start: date, end: date, institute_id: UUID
) -> List[AcademicSession]:
    """
    Sessions in ``others`` whose range overlaps [start, end].

    Overlap is only reported by default; SESSION_OVERLAP_POLICY=reject turns
    it into an InvalidDateRange.
    """
    overlapping = [
        s for s in others
        if date_ranges_overlap((s.start_date, s.end_date), (start, end))
    ]
    if not overlapping:
        return overlapping

    names = ", ".join(s.name for s in overlapping)
    logger.warning(
        f"OVERLAPPING SESSION | institute_id={institute_id} | "
        f"range={start}..{end} | overlaps={names}"
    )
    if settings.SESSION_OVERLAP_POLICY == "reject":
        raise InvalidDateRange(f"Session dates overlap with: {names}")
    return overlapping


def _make_current(db: Session, institute_id: UUID, session: AcademicSession) -> None:
    """Unset every other current session of the tenant, then mark ``session``."""
    # serialize concurrent switches per tenant (no-op on SQLite)
    db.query(Institute).filter(Institute.id == institute_id).with_for_update().first()

    query = _tenant_sessions(db, institute_id).filter(AcademicSession.is_current == True)  # noqa: E712
    if session.id is not None:
        query = query.filter(AcademicSession.id != session.id)
    unset = query.update({AcademicSession.is_current: False}, synchronize_session="fetch")

    session.is_current = True
    logger.info(
        f"CURRENT SESSION SWITCH | institute_id={institute_id} | "
        f"session={session.name} | unset={unset}"
    )


# =====================================================
# CREATE
# =====================================================

def create_session(
    db: Session,
    data: AcademicSessionCreateSchema,
    institute_id: Optional[UUID] = None,
) -> AcademicSession:
    institute_id = _tenant(institute_id)
    start, end = validate_date_range(data.start_date, data.end_date)

    require_usable_institute(db, institute_id)

    existing = _tenant_sessions(db, institute_id).filter(
        AcademicSession.is_deleted == False  # noqa: E712
    ).all()
    _check_overlap([s for s in existing if s.is_active], start, end, institute_id)

    name = data.name.strip()
    _check_name_available(db, institute_id, name)

    session = AcademicSession(
        institute_id=institute_id,
        name=name,
        start_date=start,
        end_date=end,
        is_current=False,
    )
    if data.is_current:
        _make_current(db, institute_id, session)

    db.add(session)
    db.commit()
    db.refresh(session)

    logger.info(
        f"SESSION CREATED | session_id={session.id} | institute_id={institute_id} | "
        f"current={session.is_current}"
    )
    return session


# =====================================================
# READ
# =====================================================

def get_session(db: Session, session_id: UUID, institute_id: Optional[UUID] = None) -> AcademicSession:
    return _get_tenant_session(db, session_id, _tenant(institute_id))


def list_sessions(
    db: Session,
    institute_id: Optional[UUID] = None,
    is_current: Optional[bool] = None,
    is_active: Optional[bool] = None,
) -> List[AcademicSession]:
    query = _tenant_sessions(db, _tenant(institute_id)).filter(
        AcademicSession.is_deleted == False  # noqa: E712
    )
    if is_current is not None:
        query = query.filter(AcademicSession.is_current == is_current)
    if is_active is not None:
        query = query.filter(AcademicSession.is_active == is_active)
    return query.order_by(AcademicSession.start_date.desc()).all()


def get_current_session(db: Session, institute_id: Optional[UUID] = None) -> Optional[AcademicSession]:
    return _tenant_sessions(db, _tenant(institute_id)).filter(
        AcademicSession.is_current == True,  # noqa: E712
        AcademicSession.is_active == True,  # noqa: E712
        AcademicSession.is_deleted == False,  # noqa: E712
    ).first()


def find_session_by_date(
    db: Session, value: DateLike, institute_id: Optional[UUID] = None
) -> Optional[AcademicSession]:
    """
    Active session whose inclusive range contains ``value``.

    When active sessions overlap, whichever matching row the database yields
    first is returned; no tie-break is applied.
    """
    day = parse_date(value)
    if day is None:
        raise InvalidRequest("Invalid date format")

    return _tenant_sessions(db, _tenant(institute_id)).filter(
        AcademicSession.is_active == True,  # noqa: E712
        AcademicSession.is_deleted == False,  # noqa: E712
        AcademicSession.start_date <= day,
        AcademicSession.end_date >= day,
    ).first()


def get_sessions_in_range(
    db: Session, start: DateLike, end: DateLike, institute_id: Optional[UUID] = None
) -> List[AcademicSession]:
    range_start, range_end = parse_date(start), parse_date(end)
    if range_start is None or range_end is None:
        raise InvalidRequest("Invalid date format")

    return _tenant_sessions(db, _tenant(institute_id)).filter(
        AcademicSession.is_active == True,  # noqa: E712
        AcademicSession.is_deleted == False,  # noqa: E712
        AcademicSession.start_date <= range_end,
        AcademicSession.end_date >= range_start,
    ).order_by(AcademicSession.start_date.asc()).all()


# =====================================================
# UPDATE / SET CURRENT / DELETE
# =====================================================

def update_session(
    db: Session,
    session_id: UUID,
    data: AcademicSessionUpdateSchema,
    institute_id: Optional[UUID] = None,
) -> AcademicSession:
    institute_id = _tenant(institute_id)
    session = _get_tenant_session(db, session_id, institute_id)
    changes = data.model_dump(exclude_unset=True)

    if "start_date" in changes or "end_date" in changes:
        start, end = validate_date_range(
            changes.get("start_date", session.start_date),
            changes.get("end_date", session.end_date),
        )
        others = _tenant_sessions(db, institute_id).filter(
            AcademicSession.id != session.id,
            AcademicSession.is_deleted == False,  # noqa: E712
        ).all()
        _check_overlap(others, start, end, institute_id)
        changes["start_date"], changes["end_date"] = start, end

    if changes.get("name") is not None:
        changes["name"] = changes["name"].strip()
        _check_name_available(db, institute_id, changes["name"], exclude_id=session.id)

    is_current = changes.pop("is_current", None)
    if changes.get("is_active") is False:
        if is_current:
            raise InvalidRequest("An inactive session cannot be made current")
        # a deactivated session stops being current
        is_current = False
    if is_current:
        _make_current(db, institute_id, session)
    elif is_current is False:
        session.is_current = False

    for field, value in changes.items():
        if value is not None:
            setattr(session, field, value)

    db.commit()
    db.refresh(session)
    logger.info(f"SESSION UPDATED | session_id={session_id} | fields={sorted(changes)}")
    return session


def set_current_session(
    db: Session, session_id: UUID, institute_id: Optional[UUID] = None
) -> AcademicSession:
    institute_id = _tenant(institute_id)
    session = _get_tenant_session(db, session_id, institute_id)

    _make_current(db, institute_id, session)
    session.is_active = True

    db.commit()
    db.refresh(session)
    return session


def delete_session(db: Session, session_id: UUID, institute_id: Optional[UUID] = None) -> AcademicSession:
    session = _get_tenant_session(db, session_id, _tenant(institute_id))

    session.is_deleted = True
    session.is_active = False
    session.is_current = False

    db.commit()
    db.refresh(session)
    logger.info(f"SESSION DELETED | session_id={session_id}")
    return session
