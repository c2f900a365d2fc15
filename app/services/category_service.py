"""Category service."""

from typing import Any

from app.models.category import Category
from app.services.base_service import SoftDeleteService


class CategoryService(SoftDeleteService[Category]):
    model = Category
    resource_name = "Category"
    unique_fields = (("name",),)

    def conflict_message(self, fields: tuple[str, ...], values: dict[str, Any]) -> str:
        return "Category name already exists"
