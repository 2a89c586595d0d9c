"""
User Schemas for the Visa Processing System API
Pydantic models for request/response validation
"""

from pydantic import EmailStr, Field, field_validator, validator
from typing import Optional, List
from datetime import datetime
import re
import uuid

from app.models.enums import UserRole
from app.schemas.common import CamelModel, RequestModel, PaginationMeta

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


def check_password_strength(password: str) -> str:
    if not PASSWORD_PATTERN.match(password):
        raise ValueError('Password must contain at least one uppercase letter, one lowercase letter, and one number')
    return password


class UserRegister(RequestModel):
    """Self-registration; always creates a USER account"""
    email: EmailStr = Field(..., description="Login email")
    password: str = Field(..., min_length=8, description="Password")
    first_name: str = Field(..., min_length=2, max_length=100)
    last_name: str = Field(..., min_length=2, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=30)
    nationality: Optional[str] = Field(None, max_length=100)
    passport_number: Optional[str] = Field(None, max_length=50)

    @validator('email')
    def normalize_email(cls, v):
        return v.lower()

    @validator('password')
    def validate_password(cls, v):
        return check_password_strength(v)

    @validator('first_name', 'last_name')
    def strip_names(cls, v):
        v = v.strip()
        if len(v) < 2:
            raise ValueError('Name must be at least 2 characters long')
        return v


class LoginRequest(RequestModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @validator('email')
    def normalize_email(cls, v):
        return v.lower()


class PasswordChange(RequestModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8)

    @validator('new_password')
    def validate_new_password(cls, v):
        return check_password_strength(v)


class PasswordReset(RequestModel):
    """Admin-set password for another account"""
    new_password: str = Field(..., min_length=8)

    @validator('new_password')
    def validate_new_password(cls, v):
        return check_password_strength(v)


class ProfileUpdate(RequestModel):
    """Fields an account holder may change on their own profile"""
    first_name: Optional[str] = Field(None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=30)
    nationality: Optional[str] = Field(None, max_length=100)
    passport_number: Optional[str] = Field(None, max_length=50)

    @field_validator('first_name', 'last_name')
    @classmethod
    def names_not_blank(cls, v):
        if v is None or len(v.strip()) < 2:
            raise ValueError('Name must be at least 2 characters long')
        return v.strip()


class UserAdminUpdate(RequestModel):
    """Fields an administrator may change on any account"""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=30)
    nationality: Optional[str] = Field(None, max_length=100)
    passport_number: Optional[str] = Field(None, max_length=50)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    is_verified: Optional[bool] = None

    @field_validator('first_name', 'last_name', 'role', 'is_active', 'is_verified')
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError('Field cannot be cleared')
        return v


class UserSummary(CamelModel):
    """Minimal user information embedded in other resources"""
    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    role: UserRole


class UserResponse(CamelModel):
    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    role: UserRole
    phone_number: Optional[str] = None
    nationality: Optional[str] = None
    passport_number: Optional[str] = None
    is_active: bool
    is_verified: bool
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class AuthPayload(CamelModel):
    user: UserResponse
    token: str


class UserListPayload(CamelModel):
    users: List[UserResponse]
    pagination: PaginationMeta
