"""Product category model."""

from enum import Enum
from typing import Optional

from sqlmodel import Field

from app.models.base import EntityBase


class CategoryStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Category(EntityBase, table=True):
    __tablename__ = "categories"  # type: ignore

    name: str = Field(index=True, max_length=255)
    description: Optional[str] = None
    status: CategoryStatus = Field(default=CategoryStatus.ACTIVE, index=True)
