"""Pydantic schemas for request/response validation."""

from app.schemas.common import CamelModel, EntityResponse, MessageResponse, Paginated
from app.schemas.token import AuthResponse, Token, TokenPayload
from app.schemas.user import UserCreate, UserResponse, UserUpdate

__all__ = [
    "AuthResponse",
    "CamelModel",
    "EntityResponse",
    "MessageResponse",
    "Paginated",
    "Token",
    "TokenPayload",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
]
