"""Product request/response schemas."""

from typing import Optional

from pydantic import Field

from app.models.product import ProductType
from app.schemas.common import CamelModel, EntityResponse


class ProductCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    category_id: Optional[str] = None
    bank_product_number: str = Field(min_length=1, max_length=128)
    product_type: Optional[ProductType] = None


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    category_id: Optional[str] = None
    bank_product_number: Optional[str] = Field(default=None, min_length=1, max_length=128)
    product_type: Optional[ProductType] = None


class ProductResponse(EntityResponse):
    name: str
    category_id: Optional[str] = None
    bank_product_number: str
    product_type: Optional[ProductType] = None
