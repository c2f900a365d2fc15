"""
Authentication schemas: registration, tokens and password recovery.
"""

from typing import Optional

from pydantic import EmailStr, Field, field_validator

from app.schemas.common import CamelModel
from app.schemas.user import PASSWORD_MIN_LENGTH, UserBase, UserResponse, lower_email


class RegisterRequest(UserBase):
    """Self-registration; the account always gets the staff role."""

    password: str = Field(min_length=PASSWORD_MIN_LENGTH)


class Token(CamelModel):
    """Schema for access token response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthResponse(Token):
    user: UserResponse


class TokenPayload(CamelModel):
    """Schema for decoded JWT payload."""

    sub: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    type: Optional[str] = None


class RefreshRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class ForgotPasswordRequest(CamelModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: Optional[str]) -> Optional[str]:
        return lower_email(value)


class ForgotPasswordResponse(CamelModel):
    message: str
    # Only populated when ENVIRONMENT=development
    reset_token: Optional[str] = None


class ResetPasswordRequest(CamelModel):
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=PASSWORD_MIN_LENGTH)


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=PASSWORD_MIN_LENGTH)
