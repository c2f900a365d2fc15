"""
Security utilities for password hashing and JWT token management.

Default hashing uses ``pbkdf2_sha256`` for stable cross-platform behavior in
tests and local development. ``bcrypt`` verification is still supported for
backward compatibility with existing hashes.
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

# Prefer pbkdf2 for new hashes while still verifying legacy bcrypt hashes.
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def _encode(claims: dict[str, Any], secret: str, expires_delta: timedelta) -> str:
    to_encode = dict(claims)
    to_encode["exp"] = datetime.now(timezone.utc) + expires_delta
    # jti keeps two tokens minted in the same second distinct
    to_encode["jti"] = secrets.token_hex(8)
    return jwt.encode(to_encode, secret, algorithm=settings.ALGORITHM)


def create_access_token(
    subject: str | Any,
    claims: dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        subject: The subject (user ID) to encode in the token
        claims: Additional claims such as email and role
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    payload = {**(claims or {}), "sub": str(subject), "type": ACCESS_TOKEN_TYPE}
    return _encode(
        payload,
        settings.SECRET_KEY,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(
    subject: str | Any,
    claims: dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT refresh token signed with the refresh secret."""
    payload = {**(claims or {}), "sub": str(subject), "type": REFRESH_TOKEN_TYPE}
    return _encode(
        payload,
        settings.REFRESH_SECRET_KEY,
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def decode_token(token: str, token_type: str = ACCESS_TOKEN_TYPE) -> dict[str, Any]:
    """
    Decode and verify a JWT.

    Raises:
        JWTError: If the signature, expiry or token type is invalid
    """
    secret = settings.REFRESH_SECRET_KEY if token_type == REFRESH_TOKEN_TYPE else settings.SECRET_KEY
    payload = jwt.decode(token, secret, algorithms=[settings.ALGORITHM])
    if payload.get("type") != token_type:
        raise JWTError(f"Expected {token_type} token")
    return payload


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password
        hashed_password: The hashed password to compare against

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a password using the configured default scheme.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    return pwd_context.hash(password)


def generate_reset_token() -> str:
    """Random URL-safe token sent to the user for password recovery."""
    return secrets.token_hex(32)


def hash_reset_token(token: str) -> str:
    """Digest stored in place of the raw reset token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
