"""Delivery challan request/response schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.models.delivery_challan import PrintStatus
from app.schemas.common import CamelModel, EntityResponse, UtcDatetime


class DeliveryChallanCreate(CamelModel):
    """
    Dispatch details for a challan. When ``product_serial_number`` is omitted
    it is looked up on the purchase order linked to the bank order.
    """

    courier_id: str
    tracking_number: str = Field(min_length=1, max_length=128)
    consignment_number: Optional[str] = Field(default=None, max_length=128)
    product_serial_number: Optional[str] = Field(default=None, max_length=128)
    dispatch_date: Optional[UtcDatetime] = None
    expected_delivery_date: Optional[UtcDatetime] = None
    remarks: Optional[str] = None


class BulkPrintRequest(CamelModel):
    challan_ids: List[str] = Field(min_length=1)


class BulkPrintResult(CamelModel):
    updated_count: int


class DeliveryChallanResponse(EntityResponse):
    challan_number: str
    bank_order_id: Optional[str] = None
    customer_name: str
    customer_cnic: str
    customer_phone: str
    customer_address: str
    customer_city: str
    product_name: str
    product_brand: Optional[str] = None
    product_serial_number: Optional[str] = None
    quantity: int
    tracking_number: str
    consignment_number: Optional[str] = None
    courier_name: str
    po_number: Optional[str] = None
    challan_date: datetime
    dispatch_date: Optional[datetime] = None
    expected_delivery_date: Optional[datetime] = None
    remarks: Optional[str] = None
    print_status: PrintStatus
    printed_at: Optional[datetime] = None
    print_count: int
