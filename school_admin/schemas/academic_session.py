from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field
from typing_extensions import Annotated

from school_admin.schemas.common import ORMModel


class AcademicSessionCreateSchema(BaseModel):
    name: Annotated[str, Field(min_length=1, max_length=100)]
    # kept as raw strings so range errors come back as INVALID_DATE_RANGE
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    is_current: bool = False


class AcademicSessionUpdateSchema(BaseModel):
    name: Optional[Annotated[str, Field(min_length=1, max_length=100)]] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    is_current: Optional[bool] = None
    is_active: Optional[bool] = None


class AcademicSessionOut(ORMModel):
    id: UUID
    institute_id: UUID
    name: str
    start_date: date
    end_date: date
    duration_days: int
    is_current: bool
    is_active: bool
    is_deleted: bool
    created_at: Optional[datetime] = None
