from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from school_admin.db.session import get_db
from school_admin.dependencies.auth import authorize
from school_admin.models import User
from school_admin.schemas.common import Page, Pagination
from school_admin.schemas.school import StudentOut, TeacherCreateSchema, TeacherOut
from school_admin.services import student_service, teacher_service

router = APIRouter(prefix="/v1/teacher", tags=["Teacher"])


@router.post("/create", response_model=TeacherOut, status_code=status.HTTP_201_CREATED)
def create_teacher(
    data: TeacherCreateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("CREATE_USER")),
):
    return teacher_service.create_teacher(db, data)


@router.get("/get-all", response_model=Page[TeacherOut])
def get_all_teachers(
    is_active: Optional[bool] = None,
    page: int = 1,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_INSTITUTE_USERS")),
):
    teachers, total, page, limit = teacher_service.list_teachers(
        db, is_active=is_active, page=page, limit=limit
    )
    return Page[TeacherOut](
        items=[TeacherOut.model_validate(t) for t in teachers],
        pagination=Pagination.build(total, page, limit),
    )


@router.get("/my-profile", response_model=TeacherOut)
def get_my_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_MY_PROFILE")),
):
    return teacher_service.get_my_profile(db)


@router.get("/my-students", response_model=Page[StudentOut])
def get_my_students(
    page: int = 1,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_MY_STUDENTS")),
):
    students, total, page, limit = student_service.list_my_students(db, page=page, limit=limit)
    return Page[StudentOut](
        items=[StudentOut.model_validate(s) for s in students],
        pagination=Pagination.build(total, page, limit),
    )


@router.get("/{teacher_id}/get-details", response_model=TeacherOut)
def get_teacher(
    teacher_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_INSTITUTE_USERS")),
):
    return teacher_service.get_teacher(db, teacher_id)


@router.delete("/{teacher_id}/delete", response_model=TeacherOut)
def delete_teacher(
    teacher_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("DELETE_USER")),
):
    return teacher_service.delete_teacher(db, teacher_id)
