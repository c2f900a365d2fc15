"""
API dependencies for FastAPI dependency injection.
Provides reusable dependencies for authentication, authorization,
pagination and the services each route works with.
"""

from typing import Annotated, Callable, Optional

from fastapi import Depends, Query
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlmodel import Session

from app.core.config import settings
from app.core.exceptions import CastError, ForbiddenError, UnauthorizedError
from app.core.logging import AuditLogger, get_audit_logger, get_logger
from app.core.security import decode_token
from app.db.session import get_session
from app.models.user import User, UserRole
from app.schemas.token import TokenPayload
from app.services.base_service import normalize_pagination
from app.services.user_service import UserService

logger = get_logger(__name__)

# OAuth2 scheme for token authentication
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_PREFIX}/auth/login")

SessionDep = Annotated[Session, Depends(get_session)]
AuditDep = Annotated[AuditLogger, Depends(get_audit_logger)]


def get_current_user(
    session: SessionDep,
    token: Annotated[str, Depends(oauth2_scheme)],
) -> User:
    """
    Dependency to get the current authenticated user from JWT token.

    Args:
        session: Database session
        token: JWT access token

    Returns:
        Current user

    Raises:
        UnauthorizedError: If token is invalid, the user is gone or inactive
    """
    try:
        token_data = TokenPayload(**decode_token(token))
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise UnauthorizedError("Could not validate credentials")

    if token_data.sub is None:
        logger.warning("Token missing subject claim")
        raise UnauthorizedError("Could not validate credentials")

    try:
        user = UserService(session).find_active(token_data.sub)
    except CastError:
        logger.warning("Invalid user ID in token")
        raise UnauthorizedError("Could not validate credentials")

    if user is None:
        logger.warning(f"User {token_data.sub} not found")
        raise UnauthorizedError("Could not validate credentials")
    if not user.is_active:
        logger.warning(f"Inactive user {user.id} attempted access")
        raise UnauthorizedError("Account is inactive")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_roles(*roles: UserRole) -> Callable[[User], User]:
    """
    Build a dependency that admits only users holding one of ``roles``.

    Usage:
        @router.post("", dependencies=[Depends(require_roles(UserRole.ADMIN))])
    """

    def check_role(current_user: CurrentUser) -> User:
        if current_user.role not in roles:
            logger.warning(
                f"User {current_user.id} ({current_user.role.value}) denied; "
                f"requires {', '.join(role.value for role in roles)}"
            )
            raise ForbiddenError("Not enough permissions")
        return current_user

    return check_role


ADMIN = (UserRole.ADMIN,)
ADMIN_STAFF = (UserRole.ADMIN, UserRole.STAFF)
ALL_ROLES = (UserRole.ADMIN, UserRole.STAFF, UserRole.DISPATCH)


class Pagination:
    """
    Page/limit query parameters. Values are read as strings so that missing,
    non-numeric or non-positive input falls back to the defaults instead of
    failing validation.
    """

    def __init__(
        self,
        page: Annotated[Optional[str], Query()] = None,
        limit: Annotated[Optional[str], Query()] = None,
    ):
        self.page, self.limit = normalize_pagination(page, limit)
