"""
Domain errors raised by the service layer.
Translated into the error envelope by the handlers in ``app.api.responses``.
"""

from typing import Any, Optional


class AppError(Exception):
    def __init__(
        self,
        message: str,
        *,
        status_code: int = 400,
        errors: Optional[dict[str, str]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors


class BadRequestError(AppError):
    def __init__(self, message: str = "Bad request", errors: Optional[dict[str, str]] = None) -> None:
        super().__init__(message, status_code=400, errors=errors)


class CastError(BadRequestError):
    """A value that cannot be interpreted as the expected type (e.g. an identifier)."""

    def __init__(self, field: str, value: Any) -> None:
        super().__init__(f"Invalid {field}: {value}")
        self.field = field
        self.value = value


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status_code=401)


class AccountLockedError(UnauthorizedError):
    def __init__(
        self,
        message: str = "Account is temporarily locked due to multiple failed login attempts",
    ) -> None:
        super().__init__(message)


class ForbiddenError(AppError):
    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message, status_code=403)


class NotFoundError(AppError):
    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=404)


class ConflictError(AppError):
    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, status_code=409)
