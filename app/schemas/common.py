"""
Shared schema building blocks.

API payloads use camelCase on the wire and snake_case in Python; both forms
are accepted on input.
"""

from datetime import datetime
from typing import Annotated, Generic, List, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.models.base import as_utc

T = TypeVar("T")

# Client dates without an offset are taken as UTC
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """Base schema with camelCase aliases and ORM attribute loading."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class EntityResponse(CamelModel):
    """Fields every persisted record exposes."""

    id: str
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class Paginated(CamelModel, Generic[T]):
    """
    One page of a listing.

    The response envelope spreads these keys next to ``statusCode`` instead of
    nesting them under ``data``.
    """

    data: List[T]
    total: int
    page: int
    limit: int
    total_pages: int


class MessageResponse(CamelModel):
    message: str
