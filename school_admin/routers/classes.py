from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from school_admin.db.session import get_db
from school_admin.dependencies.auth import authorize
from school_admin.models import User
from school_admin.schemas.common import Page, Pagination
from school_admin.schemas.school import ClassCreateSchema, ClassOut, ClassUpdateSchema
from school_admin.services import class_service

router = APIRouter(prefix="/v1/institute-class", tags=["Institute Class"])


@router.post("/create", response_model=ClassOut, status_code=status.HTTP_201_CREATED)
def create_class(
    data: ClassCreateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("CREATE_CLASS")),
):
    return class_service.create_class(db, data)


@router.get("/get-all", response_model=Page[ClassOut])
def get_all_classes(
    academic_session_id: Optional[UUID] = None,
    is_active: Optional[bool] = None,
    page: int = 1,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_CLASSES")),
):
    classes, total, page, limit = class_service.list_classes(
        db, academic_session_id=academic_session_id, is_active=is_active, page=page, limit=limit
    )
    return Page[ClassOut](
        items=[ClassOut.model_validate(c) for c in classes],
        pagination=Pagination.build(total, page, limit),
    )


@router.get("/{class_id}/get-details", response_model=ClassOut)
def get_class(
    class_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("GET_CLASSES")),
):
    return class_service.get_class(db, class_id)


@router.patch("/{class_id}/update", response_model=ClassOut)
def update_class(
    class_id: UUID,
    data: ClassUpdateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("UPDATE_CLASS")),
):
    return class_service.update_class(db, class_id, data)


@router.delete("/{class_id}/delete", response_model=ClassOut)
def delete_class(
    class_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(authorize("DELETE_CLASS")),
):
    return class_service.delete_class(db, class_id)
