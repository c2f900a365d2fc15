"""
Health check routes for monitoring and service discovery.
Neither endpoint requires a token.
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import SessionDep
from app.api.responses import EnvelopeRoute, error_envelope
from app.core.config import settings
from app.core.logging import get_logger
from app.db.session import ping

logger = get_logger(__name__)

router = APIRouter(tags=["health"], route_class=EnvelopeRoute)


@router.get("/health")
def health_check() -> dict:
    """Service name, version and environment."""
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
    }


@router.get("/health/db")
def database_health_check(request: Request, session: SessionDep):
    """
    Database connectivity check.

    Returns:
        ``{status, database}`` when the database answers ``SELECT 1``, otherwise
        a 503 error envelope
    """
    try:
        ping(session)
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=error_envelope(
                request, status.HTTP_503_SERVICE_UNAVAILABLE, "Database is unreachable"
            ),
        )
    return {"status": "healthy", "database": "ok"}
