from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from school_admin.db.session import get_db
from school_admin.dependencies.auth import authorize
from school_admin.models import User
from school_admin.schemas.common import Page, Pagination
from school_admin.schemas.school import StudentCreateSchema, StudentOut, StudentUpdateSchema
from school_admin.services import student_service

router = APIRouter(prefix="/v1/student", tags=["Student"])


@router.post("/create", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(
    data: StudentCreateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("CREATE_USER")),
):
    return student_service.create_student(db, data)


@router.get("/get-all", response_model=Page[StudentOut])
def get_all_students(
    class_id: Optional[UUID] = None,
    is_active: Optional[bool] = None,
    page: int = 1,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_INSTITUTE_USERS")),
):
    students, total, page, limit = student_service.list_students(
        db, class_id=class_id, is_active=is_active, page=page, limit=limit
    )
    return Page[StudentOut](
        items=[StudentOut.model_validate(s) for s in students],
        pagination=Pagination.build(total, page, limit),
    )


@router.get("/my-profile", response_model=StudentOut)
def get_my_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_MY_PROFILE")),
):
    return student_service.get_my_profile(db)


@router.get("/{student_id}/get-details", response_model=StudentOut)
def get_student(
    student_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_INSTITUTE_USERS")),
):
    return student_service.get_student(db, student_id)


@router.patch("/{student_id}/update", response_model=StudentOut)
def update_student(
    student_id: UUID,
    data: StudentUpdateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("UPDATE_USER")),
):
    return student_service.update_student(db, student_id, data)


@router.delete("/{student_id}/delete", response_model=StudentOut)
def delete_student(
    student_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("DELETE_USER")),
):
    return student_service.delete_student(db, student_id)
