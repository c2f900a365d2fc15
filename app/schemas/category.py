"""Category request/response schemas."""

from typing import Optional

from pydantic import Field

from app.models.category import CategoryStatus
from app.schemas.common import CamelModel, EntityResponse


class CategoryCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    status: CategoryStatus = CategoryStatus.ACTIVE


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[CategoryStatus] = None


class CategoryResponse(EntityResponse):
    name: str
    description: Optional[str] = None
    status: CategoryStatus
