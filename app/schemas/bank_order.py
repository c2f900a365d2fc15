"""Bank order request/response schemas, including the Excel import result."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from app.models.bank_order import OrderStatus
from app.schemas.common import CamelModel, EntityResponse, UtcDatetime


class BankOrderCreate(CamelModel):
    bank_id: str
    cnic: str = Field(min_length=1, max_length=32)
    customer_name: str = Field(min_length=1, max_length=255)
    mobile1: str = Field(min_length=1, max_length=32)
    mobile2: Optional[str] = Field(default=None, max_length=32)
    phone1: Optional[str] = Field(default=None, max_length=32)
    phone2: Optional[str] = Field(default=None, max_length=32)
    address: str = Field(min_length=1)
    city: str = Field(min_length=1, max_length=128)
    brand: str = Field(min_length=1, max_length=255)
    product: str = Field(min_length=1, max_length=255)
    gift_code: str = Field(min_length=1, max_length=128)
    product_id: Optional[str] = None
    qty: int = Field(ge=1)
    ref_no: str = Field(min_length=1, max_length=128)
    po_number: str = Field(min_length=1, max_length=128)
    order_date: UtcDatetime
    # May be negative for reversals
    redeemed_points: float


class BankOrderUpdate(CamelModel):
    """Customer and product details; status changes go through ``OrderStatusUpdate``."""

    cnic: Optional[str] = Field(default=None, min_length=1, max_length=32)
    customer_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    mobile1: Optional[str] = Field(default=None, min_length=1, max_length=32)
    mobile2: Optional[str] = Field(default=None, max_length=32)
    phone1: Optional[str] = Field(default=None, max_length=32)
    phone2: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = Field(default=None, min_length=1)
    city: Optional[str] = Field(default=None, min_length=1, max_length=128)
    brand: Optional[str] = Field(default=None, min_length=1, max_length=255)
    product: Optional[str] = Field(default=None, min_length=1, max_length=255)
    gift_code: Optional[str] = Field(default=None, min_length=1, max_length=128)
    product_id: Optional[str] = None
    qty: Optional[int] = Field(default=None, ge=1)


class OrderStatusUpdate(CamelModel):
    status: OrderStatus


class StatusHistoryEntry(CamelModel):
    status: OrderStatus
    timestamp: datetime


class BankOrderResponse(EntityResponse):
    bank_id: str
    cnic: str
    customer_name: str
    mobile1: str
    mobile2: Optional[str] = None
    phone1: Optional[str] = None
    phone2: Optional[str] = None
    address: str
    city: str
    brand: str
    product: str
    gift_code: str
    product_id: Optional[str] = None
    qty: int
    ref_no: str
    po_number: str
    order_date: datetime
    redeemed_points: float
    status: OrderStatus
    status_history: List[StatusHistoryEntry] = []


class ImportSuccessRecord(CamelModel):
    row: int
    id: str
    ref_no: str
    customer_name: str


class ImportFailedRecord(CamelModel):
    row: int
    data: Dict[str, Any]
    errors: List[str]


class ImportResult(CamelModel):
    total_rows: int = 0
    success_count: int = 0
    failed_count: int = 0
    success_records: List[ImportSuccessRecord] = []
    failed_records: List[ImportFailedRecord] = []
