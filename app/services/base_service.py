"""
Generic create / list / get / update / soft-delete service.

Every resource service extends ``SoftDeleteService`` and declares its model,
display name and unique field groups. Uniqueness and existence are checked with
separate queries before each mutation; store-level faults raised during commit
are rolled back and propagated to the API error handlers.
"""

import math
from datetime import date, datetime, time, timezone
from typing import Any, ClassVar, Generic, Iterable, Optional, Sequence, Type, TypeVar
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
from sqlmodel.sql.expression import SelectOfScalar

from app.core.exceptions import CastError, ConflictError, NotFoundError
from app.core.logging import AuditLogger, get_audit_logger
from app.models.base import EntityBase, utcnow

ModelT = TypeVar("ModelT", bound=EntityBase)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


def normalize_pagination(
    page: Any = None,
    limit: Any = None,
    default_limit: int = DEFAULT_LIMIT,
) -> tuple[int, int]:
    """
    Coerce raw page/limit values, falling back to defaults for anything
    missing, non-numeric or below 1.
    """

    def _coerce(value: Any, default: int) -> int:
        try:
            number = int(value)
        except (TypeError, ValueError):
            return default
        return number if number >= 1 else default

    return _coerce(page, DEFAULT_PAGE), _coerce(limit, default_limit)


def day_start(day: date) -> datetime:
    """First instant of ``day`` in UTC, for inclusive date filters."""
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def day_end(day: date) -> datetime:
    """Last instant of ``day`` in UTC."""
    return datetime.combine(day, time.max, tzinfo=timezone.utc)


def next_document_number(session: Session, column: Any, prefix: str) -> str:
    """
    Next ``{prefix}-{YYYY}-{NNNN}`` number for the current year.

    Soft-deleted documents keep their numbers, so every row is considered.
    """
    year_prefix = f"{prefix}-{utcnow().year}-"
    last = session.exec(
        select(column).where(column.like(f"{year_prefix}%")).order_by(column.desc())
    ).first()
    next_number = 1
    if last:
        try:
            next_number = int(last.rsplit("-", 1)[-1]) + 1
        except ValueError:
            next_number = 1
    return f"{year_prefix}{next_number:04d}"


class Page(Generic[ModelT]):
    """One slice of a listing plus the counts needed to page through it."""

    def __init__(self, data: list[ModelT], total: int, page: int, limit: int):
        self.data = data
        self.total = total
        self.page = page
        self.limit = limit

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)


class SoftDeleteService(Generic[ModelT]):
    """
    Base service owning the lifecycle of one record type.

    Subclasses set:
        model: SQLModel table class
        resource_name: Human-readable name used in messages ("Category")
        unique_fields: Groups of fields that must be unique among live records,
            e.g. ``(("name",),)`` or ``(("bank_product_number", "product_type"),)``
    """

    model: ClassVar[Type[EntityBase]]
    resource_name: ClassVar[str] = "Resource"
    unique_fields: ClassVar[Sequence[tuple[str, ...]]] = ()

    def __init__(self, session: Session, audit: Optional[AuditLogger] = None):
        self.session = session
        self.audit = audit or get_audit_logger()

    @property
    def context(self) -> str:
        return type(self).__name__

    # Identifiers

    def parse_id(self, raw_id: Any, label: Optional[str] = None) -> str:
        """
        Validate an identifier's format.

        Raises:
            CastError: If the value is not a UUID
        """
        try:
            return str(UUID(str(raw_id)))
        except (TypeError, ValueError):
            raise CastError(f"{(label or self.resource_name).lower()} ID", raw_id)

    # Reads

    def active_query(self) -> SelectOfScalar[ModelT]:
        """Base query for live records; every standard read starts here."""
        return select(self.model).where(self.model.is_deleted == False)  # noqa: E712

    def find_active(self, record_id: Any) -> Optional[ModelT]:
        record_id = self.parse_id(record_id)
        statement = self.active_query().where(self.model.id == record_id)
        return self.session.exec(statement).first()

    def get(self, record_id: Any, include_deleted: bool = False) -> ModelT:
        """
        Fetch one record.

        Args:
            record_id: Record identifier
            include_deleted: Also return soft-deleted records (audit lookups)

        Raises:
            CastError: Malformed identifier
            NotFoundError: No matching record
        """
        if include_deleted:
            record = self.session.get(self.model, self.parse_id(record_id))
        else:
            record = self.find_active(record_id)
        if record is None:
            raise NotFoundError(f"{self.resource_name} with ID {record_id} not found")
        return record

    def list(
        self,
        page: Any = DEFAULT_PAGE,
        limit: Any = DEFAULT_LIMIT,
        filters: Optional[dict[str, Any]] = None,
        clauses: Iterable[Any] = (),
    ) -> Page[ModelT]:
        """
        List live records, newest first.

        Args:
            page: 1-based page number
            limit: Page size
            filters: Equality filters by field name; ``None`` values are ignored
            clauses: Additional SQLAlchemy where-clauses
        """
        page, limit = normalize_pagination(page, limit)
        statement = self.active_query()
        for field, value in (filters or {}).items():
            if value is not None:
                statement = statement.where(getattr(self.model, field) == value)
        for clause in clauses:
            statement = statement.where(clause)

        total = self.session.exec(
            select(func.count()).select_from(statement.subquery())
        ).one()
        rows = self.session.exec(
            statement.order_by(self.model.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        return Page(list(rows), total, page, limit)

    # Uniqueness

    def conflict_message(self, fields: tuple[str, ...], values: dict[str, Any]) -> str:
        shown = ", ".join(f"{field} {values[field]}" for field in fields)
        return f"{self.resource_name} with {shown} already exists"

    def ensure_unique(
        self,
        values: dict[str, Any],
        exclude_id: Optional[str] = None,
        touched: Optional[Iterable[str]] = None,
    ) -> None:
        """
        Reject values that clash with another live record.

        Args:
            values: Full field values of the candidate record
            exclude_id: Record being updated
            touched: Only check groups containing one of these fields
        """
        touched_set = set(touched) if touched is not None else None
        for group in self.unique_fields:
            if touched_set is not None and not touched_set.intersection(group):
                continue
            statement = self.active_query()
            for field in group:
                statement = statement.where(getattr(self.model, field) == values.get(field))
            if exclude_id is not None:
                statement = statement.where(self.model.id != exclude_id)
            if self.session.exec(statement).first() is not None:
                raise ConflictError(self.conflict_message(group, values))

    # Writes

    def commit(self) -> None:
        """Commit, rolling back before any store fault propagates."""
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def save(self, record: ModelT) -> ModelT:
        self.session.add(record)
        self.commit()
        self.session.refresh(record)
        return record

    def create(self, data: dict[str, Any]) -> ModelT:
        """
        Persist a new live record.

        Raises:
            ConflictError: A unique field clashes with a live record
        """
        self.ensure_unique(data)
        record = self.save(self.model(**data))
        self.audit.log(f"{self.resource_name} created: {record.id}", self.context)
        return record

    def update(self, record_id: Any, patch: dict[str, Any]) -> ModelT:
        """
        Apply a partial update.

        Args:
            record_id: Record identifier
            patch: Only the fields supplied by the caller

        Raises:
            NotFoundError: Record absent or soft-deleted
            ConflictError: A unique field in the patch clashes with a live record
        """
        record = self.get(record_id)
        if patch:
            merged = {**record.model_dump(), **patch}
            self.ensure_unique(merged, exclude_id=record.id, touched=patch.keys())
            for field, value in patch.items():
                setattr(record, field, value)
            record = self.save(record)
        self.audit.log(
            f"{self.resource_name} updated: {record.id} ({', '.join(patch) or 'no changes'})",
            self.context,
        )
        return record

    def remove(self, record_id: Any) -> ModelT:
        """
        Soft-delete a record. ``deleted_at`` is stamped once; a record that is
        already deleted is reported as not found.
        """
        record = self.get(record_id)
        record.is_deleted = True
        record.deleted_at = utcnow()
        record = self.save(record)
        self.audit.log(f"{self.resource_name} deleted: {record.id}", self.context)
        return record
