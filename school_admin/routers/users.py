from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from school_admin.db.session import get_db
from school_admin.dependencies.auth import authorize, get_current_user
from school_admin.models import User
from school_admin.schemas.common import Page, Pagination
from school_admin.schemas.user import (
    InstituteAdminCreateSchema, InstituteUserCreateSchema, LoginResponse, LoginSchema,
    SuperAdminCreateSchema, UserOut, UserStatusSchema, UserUpdateSchema
)
from school_admin.services import user_service

router = APIRouter(prefix="/v1/user", tags=["User"])


@router.post("/login", response_model=LoginResponse)
def login(data: LoginSchema, db: Session = Depends(get_db)):
    return user_service.login(db, data.email, data.password)


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return user_service.get_me()


# =====================================================
# CREATION
# =====================================================

@router.post("/create-super-admin", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_super_admin(
    data: SuperAdminCreateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("CREATE_SUPER_ADMIN")),
):
    return user_service.create_super_admin(db, data)


@router.post("/create-institute-admin", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_institute_admin(
    data: InstituteAdminCreateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("CREATE_INSTITUTE_ADMIN")),
):
    return user_service.create_institute_admin(db, data)


@router.post("/create-institute-user", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_institute_user(
    data: InstituteUserCreateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("CREATE_USER")),
):
    return user_service.create_institute_user(db, data)


# =====================================================
# LISTING
# =====================================================

@router.get("/get-all-users", response_model=Page[UserOut])
def get_all_users(
    role: Optional[str] = None,
    is_active: Optional[bool] = None,
    is_deleted: Optional[bool] = False,
    page: int = 1,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_INSTITUTE_USERS")),
):
    users, total, page, limit = user_service.list_users(
        db, role=role, is_active=is_active, is_deleted=is_deleted, page=page, limit=limit
    )
    return Page[UserOut](items=users, pagination=Pagination.build(total, page, limit))


@router.get("/get-users-without-profile", response_model=Page[UserOut])
def get_users_without_profile(
    role: Optional[str] = None,
    is_active: Optional[bool] = None,
    page: int = 1,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_INSTITUTE_USERS")),
):
    users, total, page, limit = user_service.list_users_without_profile(
        db, role=role, is_active=is_active, page=page, limit=limit
    )
    return Page[UserOut](items=users, pagination=Pagination.build(total, page, limit))


# =====================================================
# UPDATE / DELETE
# =====================================================

@router.patch("/{user_id}/update", response_model=UserOut)
def update_user(
    user_id: UUID,
    data: UserUpdateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("UPDATE_USER")),
):
    return user_service.update_user(db, user_id, data)


@router.patch("/{user_id}/update-status", response_model=UserOut)
def update_user_status(
    user_id: UUID,
    data: UserStatusSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("UPDATE_USER_STATUS")),
):
    return user_service.update_user_status(db, user_id, data.is_active)


@router.delete("/{user_id}/delete", response_model=UserOut)
def delete_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("DELETE_USER")),
):
    return user_service.delete_user(db, user_id)
