"""
Database engine, schema initialisation and the per-request session dependency.
"""

from typing import Generator

from sqlalchemy import text
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


def build_engine(url: str, echo: bool = False):
    """SQLite gets a thread-shareable connection; server databases get a checked pool."""
    if url.startswith("sqlite"):
        return create_engine(url, echo=echo, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


engine = build_engine(settings.SQLALCHEMY_DATABASE_URI, echo=settings.DEBUG)


def init_db() -> None:
    """
    Create the SQLite data directory when needed and every registered table.
    Model modules must be imported beforehand so their tables are on the metadata.
    """
    sqlite_file = settings.sqlite_file
    if sqlite_file is not None:
        sqlite_file.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Creating database tables...")
    SQLModel.metadata.create_all(engine)


def ping(session: Session) -> bool:
    """Round-trip ``SELECT 1``. Connection faults propagate as ``SQLAlchemyError``."""
    return session.connection().execute(text("SELECT 1")).scalar() == 1


def get_session() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session for FastAPI routes.
    Services commit explicitly and roll back on store faults.

    Yields:
        Database session instance
    """
    with Session(engine) as session:
        yield session
