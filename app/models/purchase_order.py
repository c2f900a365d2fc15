"""
Purchase order model: products ordered from a vendor.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, Column, Field

from app.models.base import EntityBase


class PurchaseOrderStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    MERGED = "merged"
    CANCELLED = "cancelled"


class PurchaseOrder(EntityBase, table=True):
    """
    Attributes:
        po_number: Generated ``PO-YYYY-NNNN`` number
        products: Line items stored as
            ``{product_id, product_name, bank_product_number, quantity,
            unit_price, total_price, serial_number?, source_po?}``
        merged_from: PO numbers combined into this one
        merged_into: Identifier of the PO this one was merged into
    """

    __tablename__ = "purchase_orders"  # type: ignore

    po_number: str = Field(unique=True, index=True, max_length=32)
    vendor_id: str = Field(foreign_key="vendors.id", index=True)
    bank_order_id: Optional[str] = Field(default=None, foreign_key="bank_orders.id", index=True)
    products: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    total_amount: float = Field(default=0, ge=0)
    status: PurchaseOrderStatus = Field(default=PurchaseOrderStatus.ACTIVE, index=True)
    merged_from: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    merged_into: Optional[str] = Field(default=None, max_length=36)
