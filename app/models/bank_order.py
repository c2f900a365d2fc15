"""
Bank order model: one customer redemption of a bank-sponsored product.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, Column, Field

from app.models.base import EntityBase


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    RETURNED = "returned"
    PROCESSING = "processing"
    DISPATCHED = "dispatched"
    SHIPPED = "shipped"
    DELIVERED = "delivered"


# Orders in these states no longer accept edits to customer/product details
LOCKED_ORDER_STATUSES = (OrderStatus.DISPATCHED, OrderStatus.DELIVERED)


class BankOrder(EntityBase, table=True):
    """
    Attributes:
        bank_id: Sponsoring bank
        cnic: Customer national identity number
        gift_code: Bank's product number for the redeemed item
        product_id: Matching catalogue product, when resolved
        ref_no: Bank reference number
        po_number: Bank purchase order number, unique among live orders
        redeemed_points: Points spent (may be negative for reversals)
        status_history: ``[{"status": ..., "timestamp": ISO-8601}, ...]``
    """

    __tablename__ = "bank_orders"  # type: ignore

    bank_id: str = Field(foreign_key="banks.id", index=True)
    cnic: str = Field(index=True, max_length=32)
    customer_name: str = Field(max_length=255)
    mobile1: str = Field(max_length=32)
    mobile2: Optional[str] = Field(default=None, max_length=32)
    phone1: Optional[str] = Field(default=None, max_length=32)
    phone2: Optional[str] = Field(default=None, max_length=32)
    address: str
    city: str = Field(index=True, max_length=128)
    brand: str = Field(max_length=255)
    product: str = Field(max_length=255)
    gift_code: str = Field(index=True, max_length=128)
    product_id: Optional[str] = Field(default=None, foreign_key="products.id", index=True)
    qty: int = Field(ge=1)
    ref_no: str = Field(index=True, max_length=128)
    po_number: str = Field(index=True, max_length=128)
    order_date: datetime = Field(index=True)
    redeemed_points: float
    status: OrderStatus = Field(default=OrderStatus.PENDING, index=True)
    status_history: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
