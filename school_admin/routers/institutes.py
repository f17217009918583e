from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from school_admin.db.session import get_db
from school_admin.dependencies.auth import authorize
from school_admin.models import User
from school_admin.schemas.common import Page, Pagination
from school_admin.schemas.institute import InstituteCreateSchema, InstituteOut, InstituteUpdateSchema
from school_admin.schemas.user import UserOut
from school_admin.services import institute_service

router = APIRouter(prefix="/v1/institute", tags=["Institute"])


class InstituteAdminsOut(BaseModel):
    institute_id: UUID
    admins: List[UserOut]
    total_users: int
    pagination: Pagination


@router.post("/create-new-institute", response_model=InstituteOut, status_code=status.HTTP_201_CREATED)
def create_institute(
    data: InstituteCreateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("CREATE_NEW_INSTITUTES")),
):
    return institute_service.create_institute(db, data)


@router.get("/get-all-institute", response_model=Page[InstituteOut])
def get_all_institutes(
    is_active: Optional[bool] = None,
    page: int = 1,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_ALL_INSTITUTES")),
):
    institutes, total, page, limit = institute_service.list_institutes(
        db, page=page, limit=limit, is_active=is_active
    )
    return Page[InstituteOut](
        items=[InstituteOut.model_validate(i) for i in institutes],
        pagination=Pagination.build(total, page, limit),
    )


# =====================================================
# CALLER'S OWN INSTITUTE
# =====================================================

@router.get("/my-institute", response_model=InstituteOut)
def get_my_institute(
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_MY_INSTITUTE")),
):
    return institute_service.get_my_institute(db)


@router.patch("/my-institute", response_model=InstituteOut)
def update_my_institute(
    data: InstituteUpdateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("UPDATE_MY_INSTITUTE")),
):
    return institute_service.update_my_institute(db, data)


# =====================================================
# BY ID
# =====================================================

@router.get("/{institute_id}/get-institute-details", response_model=InstituteOut)
def get_institute(
    institute_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_INSTITUTE_BY_ID")),
):
    return institute_service.get_institute(db, institute_id)


@router.patch("/{institute_id}/update-institute", response_model=InstituteOut)
def update_institute(
    institute_id: UUID,
    data: InstituteUpdateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("UPDATE_INSTITUTE")),
):
    return institute_service.update_institute(db, institute_id, data)


@router.delete("/{institute_id}/delete-institute", response_model=InstituteOut)
def delete_institute(
    institute_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("DELETE_INSTITUTE")),
):
    return institute_service.delete_institute(db, institute_id)


@router.get("/{institute_id}/admins", response_model=InstituteAdminsOut)
def get_institute_admins(
    institute_id: UUID,
    page: int = 1,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_INSTITUTE_BY_ID")),
):
    admins, total, page, limit, total_users = institute_service.get_institute_admins(
        db, institute_id, page=page, limit=limit
    )
    return InstituteAdminsOut(
        institute_id=institute_id,
        admins=[UserOut.model_validate(a) for a in admins],
        total_users=total_users,
        pagination=Pagination.build(total, page, limit),
    )
