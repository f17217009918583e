from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from school_admin.core.errors import NotFound
from school_admin.db.session import get_db
from school_admin.dependencies.auth import authorize
from school_admin.models import User
from school_admin.schemas.academic_session import (
    AcademicSessionCreateSchema, AcademicSessionOut, AcademicSessionUpdateSchema
)
from school_admin.services import academic_session_service

router = APIRouter(prefix="/v1/academic-session", tags=["Academic Session"])


@router.post("/create", response_model=AcademicSessionOut, status_code=status.HTTP_201_CREATED)
def create_session(
    data: AcademicSessionCreateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("CREATE_ACADEMIC_SESSION")),
):
    return academic_session_service.create_session(db, data)


@router.get("/get-all", response_model=List[AcademicSessionOut])
def get_all_sessions(
    is_current: Optional[bool] = None,
    is_active: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_ACADEMIC_SESSIONS")),
):
    return academic_session_service.list_sessions(db, is_current=is_current, is_active=is_active)


@router.get("/get-current", response_model=AcademicSessionOut)
def get_current_session(
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_ACADEMIC_SESSIONS")),
):
    session = academic_session_service.get_current_session(db)
    if session is None:
        raise NotFound("No current academic session")
    return session


@router.get("/find-by-date", response_model=Optional[AcademicSessionOut])
def find_session_by_date(
    date: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_ACADEMIC_SESSIONS")),
):
    return academic_session_service.find_session_by_date(db, date)


@router.get("/get-in-range", response_model=List[AcademicSessionOut])
def get_sessions_in_range(
    start_date: str,
    end_date: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_ACADEMIC_SESSIONS")),
):
    return academic_session_service.get_sessions_in_range(db, start_date, end_date)


@router.get("/{session_id}/get-details", response_model=AcademicSessionOut)
def get_session(
    session_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_ACADEMIC_SESSIONS")),
):
    return academic_session_service.get_session(db, session_id)


@router.patch("/{session_id}/update", response_model=AcademicSessionOut)
def update_session(
    session_id: UUID,
    data: AcademicSessionUpdateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("UPDATE_ACADEMIC_SESSION")),
):
    return academic_session_service.update_session(db, session_id, data)


@router.patch("/{session_id}/set-current", response_model=AcademicSessionOut)
def set_current_session(
    session_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("UPDATE_ACADEMIC_SESSION")),
):
    return academic_session_service.set_current_session(db, session_id)


@router.delete("/{session_id}/delete", response_model=AcademicSessionOut)
def delete_session(
    session_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("DELETE_ACADEMIC_SESSION")),
):
    return academic_session_service.delete_session(db, session_id)
