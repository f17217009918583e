from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field
from typing_extensions import Annotated

from school_admin.schemas.common import ORMModel


class InstituteCreateSchema(BaseModel):
    name: Annotated[str, Field(min_length=1, max_length=150)]
    code: Annotated[str, Field(min_length=1, max_length=50)]
    address: Annotated[str, Field(min_length=1, max_length=255)]
    contact_email: Annotated[str, Field(min_length=3, max_length=255)]
    contact_phone: Annotated[str, Field(min_length=1, max_length=20)]
    max_allowed_users: Optional[int] = 10
    owner_id: Optional[UUID] = None


class InstituteUpdateSchema(BaseModel):
    name: Optional[Annotated[str, Field(min_length=1, max_length=150)]] = None
    address: Optional[Annotated[str, Field(min_length=1, max_length=255)]] = None
    contact_email: Optional[Annotated[str, Field(min_length=3, max_length=255)]] = None
    contact_phone: Optional[Annotated[str, Field(min_length=1, max_length=20)]] = None
    max_allowed_users: Optional[int] = None
    owner_id: Optional[UUID] = None
    is_active: Optional[bool] = None


class InstituteOut(ORMModel):
    id: UUID
    name: str
    code: str
    address: str
    contact_email: str
    contact_phone: str
    max_allowed_users: Optional[int] = None
    owner_id: Optional[UUID] = None
    is_active: bool
    is_deleted: bool
    created_at: Optional[datetime] = None
