from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field
from typing_extensions import Annotated

from school_admin.schemas.common import ORMModel


class UserCreateSchema(BaseModel):
    first_name: Annotated[str, Field(min_length=1, max_length=100)]
    last_name: Annotated[str, Field(min_length=1, max_length=100)]
    email: EmailStr
    password: Annotated[str, Field(min_length=1, max_length=128)]
    phone_no: Optional[Annotated[str, Field(max_length=20)]] = None
    country_code: Optional[Annotated[str, Field(max_length=8)]] = None
    gender: Optional[Annotated[str, Field(max_length=10)]] = None
    dob: Optional[date] = None
    address: Optional[Annotated[str, Field(max_length=255)]] = None


class SuperAdminCreateSchema(UserCreateSchema):
    # accepted only to be rejected: super admins never belong to an institute
    institute_id: Optional[UUID] = None


class InstituteAdminCreateSchema(UserCreateSchema):
    institute_id: Optional[UUID] = None


class InstituteUserCreateSchema(UserCreateSchema):
    # validated against the allowed role set by the service
    role: Annotated[str, Field(min_length=1, max_length=30)]
    institute_id: Optional[UUID] = None


class UserUpdateSchema(BaseModel):
    first_name: Optional[Annotated[str, Field(min_length=1, max_length=100)]] = None
    last_name: Optional[Annotated[str, Field(min_length=1, max_length=100)]] = None
    phone_no: Optional[Annotated[str, Field(max_length=20)]] = None
    country_code: Optional[Annotated[str, Field(max_length=8)]] = None
    gender: Optional[Annotated[str, Field(max_length=10)]] = None
    dob: Optional[date] = None
    address: Optional[Annotated[str, Field(max_length=255)]] = None
    profile_url: Optional[Annotated[str, Field(max_length=500)]] = None


class UserStatusSchema(BaseModel):
    is_active: bool


class LoginSchema(BaseModel):
    email: Annotated[str, Field(min_length=1)]
    password: Annotated[str, Field(min_length=1)]


class UserOut(ORMModel):
    id: UUID
    first_name: str
    last_name: str
    email: str
    role: str
    institute_id: Optional[UUID] = None
    country_code: Optional[str] = None
    phone_no: Optional[str] = None
    gender: Optional[str] = None
    dob: Optional[date] = None
    address: Optional[str] = None
    profile_url: Optional[str] = None
    profile_id: Optional[UUID] = None
    is_active: bool
    is_deleted: bool
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class LoginResponse(BaseModel):
    message: str = "Login successful"
    user: UserOut
    token: str
    token_type: str = "bearer"
