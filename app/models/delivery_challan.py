"""
Delivery challan model: the printed dispatch note that travels with an order.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field

from app.models.base import EntityBase


class PrintStatus(str, Enum):
    NOT_PRINTED = "not_printed"
    PRINTED = "printed"


class DeliveryChallan(EntityBase, table=True):
    """
    Customer and product details are copied from the order at creation time
    so the challan stays stable if the order is edited later.
    """

    __tablename__ = "delivery_challans"  # type: ignore

    challan_number: str = Field(unique=True, index=True, max_length=32)
    bank_order_id: Optional[str] = Field(default=None, foreign_key="bank_orders.id", index=True)

    customer_name: str = Field(max_length=255)
    customer_cnic: str = Field(max_length=32)
    customer_phone: str = Field(max_length=32)
    customer_address: str
    customer_city: str = Field(max_length=128)

    product_name: str
    product_brand: Optional[str] = Field(default=None, max_length=255)
    product_serial_number: Optional[str] = Field(default=None, max_length=128)
    quantity: int = Field(default=1, ge=1)

    tracking_number: str = Field(index=True, max_length=128)
    consignment_number: Optional[str] = Field(default=None, max_length=128)
    courier_name: str = Field(max_length=255)
    po_number: Optional[str] = Field(default=None, max_length=128)

    challan_date: datetime
    dispatch_date: Optional[datetime] = None
    expected_delivery_date: Optional[datetime] = None
    remarks: Optional[str] = None

    print_status: PrintStatus = Field(default=PrintStatus.NOT_PRINTED, index=True)
    printed_at: Optional[datetime] = None
    print_count: int = Field(default=0)
