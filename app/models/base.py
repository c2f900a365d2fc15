"""
Shared columns for every persisted entity.

Records are never physically removed: ``is_deleted`` marks a logical delete and
``deleted_at`` records when it happened. All standard reads filter on
``is_deleted == False``.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def new_id() -> str:
    return str(uuid4())


class EntityBase(SQLModel):
    """Identifier, soft-delete and timestamp fields shared by all tables."""

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    is_deleted: bool = Field(default=False, index=True)
    deleted_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column_kwargs={"onupdate": utcnow},
    )
