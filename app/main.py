"""
Main FastAPI application entry point.
Configures the application, middleware, exception handlers and routes.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.responses import (
    app_error_handler,
    database_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.api.routes import (
    auth,
    bank_orders,
    banks,
    categories,
    couriers,
    delivery_challans,
    health,
    products,
    purchase_orders,
    users,
    vendors,
)
from app.core.config import settings
from app.core.exceptions import AppError
from app.core.logging import (
    AuditLogger,
    get_audit_logger,
    get_logger,
    setup_logging,
    shutdown_logging,
)
from app.db.session import engine, init_db

# Register every table on the metadata before init_db()
from app.models import (  # noqa: F401
    bank,
    bank_order,
    category,
    courier,
    delivery_challan,
    product,
    purchase_order,
    user,
    vendor,
)
from app.models.user import UserRole
from app.schemas.user import UserCreate
from app.services.user_service import UserService

# Setup logging
setup_logging()
logger = get_logger(__name__)


def bootstrap_admin(audit: AuditLogger) -> None:
    """Create the first admin from ``FIRST_SUPERUSER_*`` if no live user has that email."""
    with Session(engine) as session:
        users_service = UserService(session, audit)
        if users_service.get_by_email(settings.FIRST_SUPERUSER_EMAIL) is not None:
            return
        logger.info("Creating first superuser...")
        users_service.create_user(
            UserCreate(
                email=settings.FIRST_SUPERUSER_EMAIL,
                password=settings.FIRST_SUPERUSER_PASSWORD,
                first_name="Admin",
                last_name="User",
                role=UserRole.ADMIN,
            )
        )
        logger.info(f"Superuser created: {settings.FIRST_SUPERUSER_EMAIL}")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.
    Runs startup and shutdown logic.
    """
    # Startup
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")

    init_db()

    audit = get_audit_logger()
    if not settings.DISABLE_BOOTSTRAP_USERS:
        bootstrap_admin(audit)
    else:
        logger.info("User bootstrapping disabled (DISABLE_BOOTSTRAP_USERS=true)")

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    shutdown_logging()


# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    docs_url=f"{settings.API_V1_PREFIX}/docs",
    redoc_url=f"{settings.API_V1_PREFIX}/redoc",
    lifespan=lifespan,
)

if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["authorization", "content-type", "accept"],
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status and duration of every request."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms"
    )
    return response


app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(SQLAlchemyError, database_exception_handler)

# Include API routers
for module in (
    health,
    auth,
    users,
    categories,
    couriers,
    vendors,
    banks,
    products,
    bank_orders,
    purchase_orders,
    delivery_challans,
):
    app.include_router(module.router, prefix=settings.API_V1_PREFIX)
