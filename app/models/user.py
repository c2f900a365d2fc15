"""
User model with role-based access control and login lockout state.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field

from app.models.base import EntityBase


class UserRole(str, Enum):
    """User role enumeration for RBAC."""

    ADMIN = "admin"
    STAFF = "staff"
    DISPATCH = "dispatch"


class User(EntityBase, table=True):
    """
    Back-office user account.

    Attributes:
        email: Lower-cased address, unique among non-deleted users
        hashed_password: Password hash (never the plaintext)
        first_name: Given name
        last_name: Family name
        role: Access-control classifier
        is_active: Inactive accounts cannot authenticate
        last_login: Timestamp of the last successful authentication
        login_attempts: Consecutive failed authentications
        lock_until: Authentication is refused while this is in the future
        refresh_token: Current session-renewal credential
        password_reset_token: SHA-256 digest of the outstanding reset token
        password_reset_expires: Expiry of the outstanding reset token
    """

    __tablename__ = "users"  # type: ignore

    email: str = Field(index=True, max_length=255)
    hashed_password: str
    first_name: str = Field(max_length=255)
    last_name: str = Field(max_length=255)
    role: UserRole = Field(default=UserRole.STAFF, index=True)
    is_active: bool = Field(default=True)
    is_email_verified: bool = Field(default=False)
    last_login: Optional[datetime] = None
    login_attempts: int = Field(default=0)
    lock_until: Optional[datetime] = None
    refresh_token: Optional[str] = None
    password_reset_token: Optional[str] = Field(default=None, index=True)
    password_reset_expires: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
