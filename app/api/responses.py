"""
Response envelopes shared by every API route.

Successful JSON responses are wrapped as
``{statusCode, message, data, timestamp}``; paginated payloads (those carrying
``data`` and ``total``) are spread into the envelope instead of nested.
Errors are rendered as ``{statusCode, timestamp, path, message, errors?}``.
"""

import json
import re
from datetime import datetime, timezone
from typing import Any, Callable, Coroutine, Optional

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError, StatementError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import AppError
from app.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MESSAGE = "Success"
REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}

# sqlite: "UNIQUE constraint failed: purchase_orders.po_number"
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: ([\w.]+)")
# postgres: 'Key (po_number)=(PO-2024-0001) already exists.'
_POSTGRES_UNIQUE = re.compile(r"Key \(([\w, ]+)\)=")


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def success_envelope(payload: Any, status_code: int) -> dict[str, Any]:
    message = DEFAULT_MESSAGE
    if isinstance(payload, dict) and payload.get("message"):
        message = payload["message"]

    if isinstance(payload, dict) and "data" in payload and "total" in payload:
        return {
            "statusCode": status_code,
            "message": message,
            **payload,
            "timestamp": _timestamp(),
        }

    data = payload
    if isinstance(payload, dict) and payload.get("data") is not None:
        data = payload["data"]
    return {
        "statusCode": status_code,
        "message": message,
        "data": data,
        "timestamp": _timestamp(),
    }


def error_envelope(
    request: Request,
    status_code: int,
    message: str,
    errors: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "statusCode": status_code,
        "timestamp": _timestamp(),
        "path": request.url.path,
        "message": message,
    }
    if errors:
        body["errors"] = errors
    return body


def is_json_response(response: Response) -> bool:
    """A buffered response whose body is JSON (streamed responses have no ``body``)."""
    content_type = response.headers.get("content-type", "")
    return content_type.startswith("application/json") and hasattr(response, "body")


class EnvelopeRoute(APIRoute):
    """APIRoute that wraps successful JSON responses in the success envelope."""

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        original_handler = super().get_route_handler()

        async def envelope_handler(request: Request) -> Response:
            response = await original_handler(request)
            # Serialized response models arrive as a plain Response, so match on content type
            if (
                not is_json_response(response)
                or response.status_code == 204
                or response.status_code >= 400
            ):
                return response

            payload = json.loads(response.body) if response.body else None
            headers = {
                key: value
                for key, value in response.headers.items()
                if key.lower() not in ("content-length", "content-type")
            }
            return JSONResponse(
                content=success_envelope(payload, response.status_code),
                status_code=response.status_code,
                headers=headers,
                background=response.background,
            )

        return envelope_handler


# Exception handlers


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Domain errors raised by services."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(request, exc.status_code, exc.message, exc.errors),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Framework-raised HTTP errors (missing token, unknown route...)."""
    message = exc.detail if isinstance(exc.detail, str) else "Error"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(request, exc.status_code, message),
        headers=getattr(exc, "headers", None),
    )


def validation_error_map(errors: list[dict[str, Any]]) -> dict[str, str]:
    """
    Collapse Pydantic errors into ``{field: reason}``, keeping the first
    reason per field.
    """
    result: dict[str, str] = {}
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part not in REQUEST_LOCATIONS]
        field = ".".join(location) or "body"
        result.setdefault(field, error.get("msg", "Invalid value"))
    return result


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = validation_error_map(exc.errors())
    logger.warning(f"{request.method} {request.url.path}: validation failed {errors}")
    return JSONResponse(
        status_code=400,
        content=error_envelope(request, 400, "Validation failed", errors),
    )


def duplicate_field(exc: IntegrityError) -> Optional[str]:
    """Name of the column behind a unique-constraint violation, if it was one."""
    text = str(exc.orig)
    match = _SQLITE_UNIQUE.search(text)
    if match:
        return match.group(1).split(",")[0].rsplit(".", 1)[-1]
    match = _POSTGRES_UNIQUE.search(text)
    if match:
        return match.group(1).split(",")[0].strip()
    return None


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Store faults: duplicates become 409, everything else 400."""
    status_code = 400
    message = "Database error occurred"
    if isinstance(exc, IntegrityError):
        field = duplicate_field(exc)
        if field:
            status_code = 409
            message = f"Duplicate value for field: {field}"
    elif isinstance(exc, DataError) or type(exc) is StatementError:
        message = f"Invalid value: {exc.orig}" if exc.orig is not None else message

    logger.error(f"Database Error: {message}", exc_info=exc)
    return JSONResponse(
        status_code=status_code,
        content=error_envelope(request, status_code, message),
    )
