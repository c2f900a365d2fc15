"""Catalogue product model."""

from enum import Enum
from typing import Optional

from sqlmodel import Field

from app.models.base import EntityBase


class ProductType(str, Enum):
    BANK_ORDER = "bank_order"
    BIP = "bip"


class Product(EntityBase, table=True):
    """
    A product the bank sponsors.

    The same ``bank_product_number`` (gift code) may exist once per ``product_type``.
    """

    __tablename__ = "products"  # type: ignore

    name: str = Field(index=True, max_length=255)
    category_id: Optional[str] = Field(default=None, foreign_key="categories.id", index=True)
    bank_product_number: str = Field(index=True, max_length=128)
    product_type: Optional[ProductType] = Field(default=None, index=True)
