"""
Structured logging configuration using python-json-logger.
Provides consistent, machine-readable logs for production environments,
plus an audit logger that services receive as a dependency.
"""

import logging
import sys
from typing import Any, Optional

from pythonjsonlogger import jsonlogger

from app.core.config import settings

AUDIT_LOGGER_NAME = "audit"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter that adds application-specific fields."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        """Add custom fields to each log record."""
        super().add_fields(log_record, record, message_dict)
        log_record["service"] = settings.PROJECT_NAME
        log_record["version"] = settings.VERSION
        log_record["level"] = record.levelname


def setup_logging() -> None:
    """
    Configure application-wide logging.
    Uses JSON format in production, simpler format in development.
    Safe to call more than once.
    """
    log_level = logging.DEBUG if settings.DEBUG else logging.INFO

    root_logger = logging.getLogger()
    if getattr(root_logger, "_bank_orders_configured", False):
        return

    handler = logging.StreamHandler(sys.stdout)

    if settings.DEBUG:
        formatter: logging.Formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)

    root_logger.setLevel(log_level)
    root_logger.addHandler(handler)

    if settings.AUDIT_LOG_FILE:
        audit_handler = logging.FileHandler(settings.AUDIT_LOG_FILE, encoding="utf-8")
        audit_handler.setFormatter(
            CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
        )
        logging.getLogger(AUDIT_LOGGER_NAME).addHandler(audit_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    root_logger._bank_orders_configured = True  # type: ignore[attr-defined]


def shutdown_logging() -> None:
    """Flush every handler attached to the root and audit loggers."""
    for name in (None, AUDIT_LOGGER_NAME):
        for handler in logging.getLogger(name).handlers:
            handler.flush()


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Name of the module (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


class AuditLogger:
    """
    Logging capability handed to services.

    Wraps an application logger for ordinary messages and the ``audit`` logger
    for security-relevant actions (user created, login, password reset...).
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        audit_logger: Optional[logging.Logger] = None,
    ):
        self._logger = logger or get_logger("app")
        self._audit = audit_logger or get_logger(AUDIT_LOGGER_NAME)

    def log(self, message: str, context: Optional[str] = None) -> None:
        self._logger.info(message, extra={"context": context})

    def warn(self, message: str, context: Optional[str] = None) -> None:
        self._logger.warning(message, extra={"context": context})

    def error(
        self,
        message: str,
        context: Optional[str] = None,
        exc_info: bool = False,
    ) -> None:
        self._logger.error(message, extra={"context": context}, exc_info=exc_info)

    def audit(
        self,
        action: str,
        user_id: Optional[str],
        details: Optional[dict[str, Any]] = None,
        context: Optional[str] = None,
    ) -> None:
        """
        Record an audit event.

        Args:
            action: Upper-case action name, e.g. ``USER_LOGIN``
            user_id: Subject of the action
            details: Extra JSON-serialisable data
            context: Emitting component (service name)
        """
        self._audit.info(
            action,
            extra={
                "audit": True,
                "action": action,
                "user_id": user_id,
                "details": details or {},
                "context": context,
            },
        )


_audit_logger: Optional[AuditLogger] = None


def get_audit_logger() -> AuditLogger:
    """Return the process-wide audit logger, creating it on first use."""
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger()
    return _audit_logger
