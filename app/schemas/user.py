"""
User schemas for API request/response validation.
Separates internal models from API contracts using Pydantic.
"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from app.models.user import UserRole
from app.schemas.common import CamelModel, EntityResponse

PASSWORD_MIN_LENGTH = 8


def lower_email(value: Optional[str]) -> Optional[str]:
    return value.lower() if value is not None else value


class UserBase(CamelModel):
    """Base user schema with common fields."""

    email: EmailStr
    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(min_length=1, max_length=255)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: Optional[str]) -> Optional[str]:
        return lower_email(value)


class UserCreate(UserBase):
    """Schema for admin-created users."""

    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    role: UserRole = UserRole.STAFF
    is_active: bool = True


class UserUpdate(CamelModel):
    """Partial update; only supplied fields are applied."""

    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=PASSWORD_MIN_LENGTH)
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: Optional[str]) -> Optional[str]:
        return lower_email(value)


class UserResponse(EntityResponse):
    """
    Schema for user data in API responses.
    Excludes the password hash, refresh token and reset token.
    """

    email: str
    first_name: str
    last_name: str
    role: UserRole
    is_active: bool
    is_email_verified: bool
    last_login: Optional[datetime] = None
