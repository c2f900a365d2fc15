"""
Authentication routes: registration, login, token refresh, logout and
password recovery.
Provides JWT token-based authentication.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from app.api.deps import AuditDep, CurrentUser, SessionDep
from app.api.responses import EnvelopeRoute
from app.core.logging import get_logger
from app.schemas.common import MessageResponse
from app.schemas.token import (
    AuthResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
    Token,
)
from app.schemas.user import UserResponse
from app.services.auth_service import AuthService

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"], route_class=EnvelopeRoute)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    register_in: RegisterRequest,
    session: SessionDep,
    audit: AuditDep,
) -> AuthResponse:
    """
    Register a new staff account and sign it in.

    Args:
        register_in: Registration data
        session: Database session
        audit: Audit logger

    Returns:
        Created user plus access and refresh tokens
    """
    user, tokens = AuthService(session, audit).register(register_in)
    logger.info(f"New user registered: {user.email} (ID: {user.id})")
    return AuthResponse(user=UserResponse.model_validate(user), **tokens)


@router.post("/login", response_model=AuthResponse)
def login(
    session: SessionDep,
    audit: AuditDep,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
) -> AuthResponse:
    """
    OAuth2 compatible token login.

    Repeated failures lock the account for ``LOCK_TIME_MINUTES``.

    Args:
        session: Database session
        audit: Audit logger
        form_data: OAuth2 form with username (email) and password

    Returns:
        User plus access and refresh tokens
    """
    user, tokens = AuthService(session, audit).login(form_data.username, form_data.password)
    logger.info(f"User logged in: {user.email} (ID: {user.id})")
    return AuthResponse(user=UserResponse.model_validate(user), **tokens)


@router.post("/refresh", response_model=Token)
def refresh_tokens(body: RefreshRequest, session: SessionDep, audit: AuditDep) -> Token:
    """Exchange the current refresh token for a new token pair."""
    return Token(**AuthService(session, audit).refresh(body.refresh_token))


@router.post("/logout", response_model=MessageResponse)
def logout(current_user: CurrentUser, session: SessionDep, audit: AuditDep) -> MessageResponse:
    """Revoke the stored refresh token."""
    return MessageResponse(**AuthService(session, audit).logout(current_user))


@router.post(
    "/forgot-password",
    response_model=ForgotPasswordResponse,
    response_model_exclude_none=True,
)
def forgot_password(
    body: ForgotPasswordRequest, session: SessionDep, audit: AuditDep
) -> ForgotPasswordResponse:
    """
    Request a password reset token.

    The reply does not reveal whether the email belongs to an account.
    """
    return ForgotPasswordResponse(**AuthService(session, audit).forgot_password(body.email))


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    body: ResetPasswordRequest, session: SessionDep, audit: AuditDep
) -> MessageResponse:
    return MessageResponse(
        **AuthService(session, audit).reset_password(body.token, body.new_password)
    )


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    current_user: CurrentUser,
    session: SessionDep,
    audit: AuditDep,
) -> MessageResponse:
    return MessageResponse(
        **AuthService(session, audit).change_password(
            current_user, body.current_password, body.new_password
        )
    )
