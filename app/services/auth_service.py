"""
Authentication flows: registration, login with lockout, token refresh,
logout and password recovery.
"""

from datetime import timedelta
from typing import Any, Optional

from jose import JWTError
from sqlmodel import Session

from app.core.config import settings
from app.core.exceptions import (
    AccountLockedError,
    BadRequestError,
    UnauthorizedError,
)
from app.core.logging import AuditLogger, get_audit_logger
from app.core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
    generate_reset_token,
    hash_reset_token,
)
from app.models.base import utcnow
from app.models.user import User, UserRole
from app.schemas.token import RegisterRequest
from app.schemas.user import UserCreate
from app.services.user_service import UserService, compare_password

FORGOT_PASSWORD_MESSAGE = (
    "If an account with that email exists, a password reset link has been sent."
)


class AuthService:
    """Service class for authentication operations."""

    def __init__(self, session: Session, audit: Optional[AuditLogger] = None):
        self.audit = audit or get_audit_logger()
        self.users = UserService(session, audit=self.audit)

    @property
    def context(self) -> str:
        return type(self).__name__

    def issue_tokens(self, user: User) -> dict[str, str]:
        """
        Mint an access/refresh pair and remember the refresh token on the user.
        """
        claims = {"email": user.email, "role": UserRole(user.role).value}
        tokens = {
            "access_token": create_access_token(user.id, claims),
            "refresh_token": create_refresh_token(user.id, claims),
        }
        self.users.update_refresh_token(user, tokens["refresh_token"])
        return tokens

    def register(self, register_in: RegisterRequest) -> tuple[User, dict[str, str]]:
        """
        Self-registration. The new account always receives the staff role.

        Raises:
            ConflictError: Email already registered
        """
        user = self.users.create_user(
            UserCreate(**register_in.model_dump(), role=UserRole.STAFF)
        )
        tokens = self.issue_tokens(user)
        self.audit.audit("USER_REGISTERED", user.id, {"email": user.email}, self.context)
        return user, tokens

    def authenticate(self, email: str, password: str) -> User:
        """
        Verify credentials and drive the lockout state machine.

        A locked account is rejected before the password is checked and
        without counting the attempt. A wrong password counts as a failed
        attempt; a correct one resets the counter.

        Raises:
            AccountLockedError: Lock window still open
            UnauthorizedError: Unknown email, wrong password or inactive account
        """
        user = self.users.get_by_email(email)
        if user is None:
            raise UnauthorizedError("Invalid credentials")

        if self.users.is_locked(user):
            self.audit.warn(f"Login attempt on locked account {user.id}", self.context)
            raise AccountLockedError()

        if not user.is_active:
            raise UnauthorizedError("Account is inactive")

        if not compare_password(user, password):
            self.users.register_failed_login(user)
            raise UnauthorizedError("Invalid credentials")

        return self.users.register_successful_login(user)

    def login(self, email: str, password: str) -> tuple[User, dict[str, str]]:
        user = self.authenticate(email, password)
        tokens = self.issue_tokens(user)
        self.audit.audit("USER_LOGIN", user.id, {"email": user.email}, self.context)
        return user, tokens

    def refresh(self, refresh_token: str) -> dict[str, str]:
        """
        Rotate tokens. The presented refresh token must verify and must be the
        one currently stored for the user.

        Raises:
            UnauthorizedError: Token invalid, expired, revoked or superseded
        """
        try:
            payload = decode_token(refresh_token, REFRESH_TOKEN_TYPE)
        except JWTError:
            raise UnauthorizedError("Invalid refresh token")

        user = self.users.find_active(payload.get("sub"))
        if user is None or not user.refresh_token:
            raise UnauthorizedError("Access denied")
        if user.refresh_token != refresh_token:
            raise UnauthorizedError("Invalid refresh token")
        return self.issue_tokens(user)

    def logout(self, user: User) -> dict[str, str]:
        self.users.update_refresh_token(user, None)
        self.audit.audit("USER_LOGOUT", user.id, {}, self.context)
        return {"message": "Logged out successfully"}

    def forgot_password(self, email: str) -> dict[str, Any]:
        """
        Issue a reset token. The response is the same whether or not the email
        belongs to an account; the raw token is only echoed in development.
        """
        result: dict[str, Any] = {"message": FORGOT_PASSWORD_MESSAGE}
        user = self.users.get_by_email(email)
        if user is None:
            return result

        reset_token = generate_reset_token()
        self.users.set_password_reset_token(
            user,
            hash_reset_token(reset_token),
            utcnow() + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
        )
        self.audit.audit(
            "PASSWORD_RESET_REQUESTED", user.id, {"email": user.email}, self.context
        )
        if settings.ENVIRONMENT == "development":
            result["reset_token"] = reset_token
        return result

    def reset_password(self, token: str, new_password: str) -> dict[str, str]:
        """
        Redeem a reset token and consume it.

        Raises:
            BadRequestError: Token unknown or expired
        """
        user = self.users.find_by_reset_token(hash_reset_token(token))
        if user is None:
            raise BadRequestError("Invalid or expired reset token")

        self.users.update_password(user, new_password)
        self.users.clear_password_reset_token(user)
        self.audit.audit(
            "PASSWORD_RESET_COMPLETED", user.id, {"email": user.email}, self.context
        )
        return {"message": "Password has been reset successfully"}

    def change_password(
        self, user: User, current_password: str, new_password: str
    ) -> dict[str, str]:
        """
        Raises:
            UnauthorizedError: Current password does not match
        """
        if not compare_password(user, current_password):
            raise UnauthorizedError("Current password is incorrect")

        self.users.update_password(user, new_password)
        self.audit.audit("PASSWORD_CHANGED", user.id, {"email": user.email}, self.context)
        return {"message": "Password changed successfully"}
