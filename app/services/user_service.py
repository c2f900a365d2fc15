"""
User service layer implementing business logic for user operations.

Besides the standard record lifecycle it owns the login lockout counters and
the password reset token stored on each account.
"""

from datetime import datetime, timedelta
from typing import Any, Optional

from app.core.config import settings
from app.core.security import get_password_hash, verify_password
from app.models.base import as_utc, utcnow
from app.models.user import User
from app.schemas.user import UserCreate
from app.services.base_service import SoftDeleteService


def compare_password(user: User, candidate: str) -> bool:
    """
    Check a plaintext candidate against the user's stored hash.

    Args:
        user: User record
        candidate: Plain text password

    Returns:
        True if the password matches
    """
    return verify_password(candidate, user.hashed_password)


class UserService(SoftDeleteService[User]):
    """Service class for user-related operations."""

    model = User
    resource_name = "User"
    unique_fields = (("email",),)

    def conflict_message(self, fields: tuple[str, ...], values: dict[str, Any]) -> str:
        return "Email already exists"

    def get_by_email(self, email: str) -> Optional[User]:
        """
        Retrieve a live user by email address (case-insensitive).

        Args:
            email: Email address to search for

        Returns:
            User if found, None otherwise
        """
        statement = self.active_query().where(User.email == email.lower())
        return self.session.exec(statement).first()

    def create_user(self, user_in: UserCreate) -> User:
        """
        Create a new user with hashed password.

        Args:
            user_in: User creation data

        Returns:
            Created user instance

        Raises:
            ConflictError: Email already used by a live user
        """
        data = user_in.model_dump(exclude={"password"})
        data["hashed_password"] = get_password_hash(user_in.password)
        user = self.create(data)
        self.audit.audit("USER_CREATED", user.id, {"email": user.email}, self.context)
        return user

    def update_user(self, user_id: Any, patch: dict[str, Any]) -> User:
        """Partial update; a new password is re-hashed before it is stored."""
        patch = dict(patch)
        if patch.get("password") is not None:
            patch["hashed_password"] = get_password_hash(patch.pop("password"))
        else:
            patch.pop("password", None)
        return self.update(user_id, patch)

    def remove(self, record_id: Any) -> User:
        user = super().remove(record_id)
        self.audit.audit("USER_DELETED", user.id, {"email": user.email}, self.context)
        return user

    # Lockout

    @staticmethod
    def is_locked(user: User, now: Optional[datetime] = None) -> bool:
        """A user is locked while ``lock_until`` lies in the future."""
        lock_until = as_utc(user.lock_until)
        return lock_until is not None and lock_until > (now or utcnow())

    def register_failed_login(self, user: User) -> User:
        """
        Count a failed authentication and lock the account once the count
        reaches ``MAX_LOGIN_ATTEMPTS``.
        """
        user.login_attempts = (user.login_attempts or 0) + 1
        if user.login_attempts >= settings.MAX_LOGIN_ATTEMPTS:
            user.lock_until = utcnow() + timedelta(minutes=settings.LOCK_TIME_MINUTES)
            self.audit.warn(
                f"User {user.id} locked after {user.login_attempts} failed attempts",
                self.context,
            )
        return self.save(user)

    def register_successful_login(self, user: User) -> User:
        user.login_attempts = 0
        user.lock_until = None
        user.last_login = utcnow()
        return self.save(user)

    # Session and recovery credentials

    def update_refresh_token(self, user: User, refresh_token: Optional[str]) -> User:
        user.refresh_token = refresh_token
        return self.save(user)

    def set_password_reset_token(self, user: User, token_hash: str, expires: datetime) -> User:
        """Store a reset token digest, replacing any previous one."""
        user.password_reset_token = token_hash
        user.password_reset_expires = expires
        return self.save(user)

    def find_by_reset_token(self, token_hash: str) -> Optional[User]:
        """
        Find the live user holding this reset token digest, provided the token
        has not expired yet.
        """
        statement = self.active_query().where(User.password_reset_token == token_hash)
        user = self.session.exec(statement).first()
        if user is None:
            return None
        expires = as_utc(user.password_reset_expires)
        if expires is None or expires <= utcnow():
            return None
        return user

    def clear_password_reset_token(self, user: User) -> User:
        user.password_reset_token = None
        user.password_reset_expires = None
        return self.save(user)

    def update_password(self, user: User, new_password: str) -> User:
        user.hashed_password = get_password_hash(new_password)
        return self.save(user)
