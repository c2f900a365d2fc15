"""
User routes for profile and account management.
Everything except the profile is restricted to admins.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import ADMIN, AuditDep, CurrentUser, Pagination, SessionDep, require_roles
from app.api.responses import EnvelopeRoute
from app.models.user import UserRole
from app.schemas.common import MessageResponse, Paginated
from app.schemas.user import UserCreate, UserResponse, UserUpdate
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"], route_class=EnvelopeRoute)

admin_only = [Depends(require_roles(*ADMIN))]


@router.get("/me", response_model=UserResponse)
def get_current_user_profile(current_user: CurrentUser) -> UserResponse:
    """
    Get current user's profile.
    This is a protected route that requires authentication.

    Args:
        current_user: Current authenticated user

    Returns:
        User profile data
    """
    return UserResponse.model_validate(current_user)


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_only,
)
def create_user(user_in: UserCreate, session: SessionDep, audit: AuditDep) -> UserResponse:
    return UserResponse.model_validate(UserService(session, audit).create_user(user_in))


@router.get("", response_model=Paginated[UserResponse], dependencies=admin_only)
def list_users(
    session: SessionDep,
    audit: AuditDep,
    pagination: Annotated[Pagination, Depends()],
    role: Optional[UserRole] = None,
    is_active: Annotated[Optional[bool], Query(alias="isActive")] = None,
) -> Paginated[UserResponse]:
    """
    List users, newest first.

    Args:
        role: Only users with this role
        is_active: Only active (true) or inactive (false) users
    """
    page = UserService(session, audit).list(
        pagination.page,
        pagination.limit,
        filters={"role": role, "is_active": is_active},
    )
    return Paginated[UserResponse].model_validate(page)


@router.get("/{user_id}", response_model=UserResponse, dependencies=admin_only)
def get_user(user_id: str, session: SessionDep, audit: AuditDep) -> UserResponse:
    return UserResponse.model_validate(UserService(session, audit).get(user_id))


@router.patch("/{user_id}", response_model=UserResponse, dependencies=admin_only)
def update_user(
    user_id: str, user_in: UserUpdate, session: SessionDep, audit: AuditDep
) -> UserResponse:
    """Apply only the supplied fields; a new password is re-hashed."""
    user = UserService(session, audit).update_user(user_id, user_in.model_dump(exclude_unset=True))
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse, dependencies=admin_only)
def delete_user(user_id: str, session: SessionDep, audit: AuditDep) -> MessageResponse:
    UserService(session, audit).remove(user_id)
    return MessageResponse(message="User deleted successfully")
