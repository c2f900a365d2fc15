"""Purchase order request/response schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.models.purchase_order import PurchaseOrderStatus
from app.schemas.common import CamelModel, EntityResponse


class PurchaseOrderLineCreate(CamelModel):
    product_id: str
    quantity: int = Field(ge=1)
    unit_price: float = Field(ge=0)


class PurchaseOrderCreate(CamelModel):
    vendor_id: str
    bank_order_id: Optional[str] = None
    products: List[PurchaseOrderLineCreate] = Field(min_length=1)


class PurchaseOrderLine(CamelModel):
    """A stored line item; ``source_po`` is set on lines carried over by a merge."""

    product_id: str
    product_name: str
    bank_product_number: str
    quantity: int
    unit_price: float
    total_price: float
    serial_number: Optional[str] = None
    source_po: Optional[str] = Field(default=None, alias="sourcePO")


class ProductSerialNumber(CamelModel):
    product_id: str
    serial_number: Optional[str] = None


class PurchaseOrderUpdate(CamelModel):
    products: List[ProductSerialNumber]


class PurchaseOrderSerialUpdate(PurchaseOrderUpdate):
    po_id: str


class BulkUpdateRequest(CamelModel):
    updates: List[PurchaseOrderSerialUpdate]


class BulkUpdateSuccess(CamelModel):
    po_id: str
    po_number: str


class BulkUpdateFailure(CamelModel):
    po_id: str
    error: str


class BulkUpdateResult(CamelModel):
    success_count: int = 0
    failed_count: int = 0
    successful_updates: List[BulkUpdateSuccess] = []
    failed_updates: List[BulkUpdateFailure] = []


class CombineRequest(CamelModel):
    po_ids: List[str] = Field(min_length=2)


class MergeRequest(CombineRequest):
    new_po_number: Optional[str] = Field(default=None, min_length=1, max_length=32)


class CombinedPreview(CamelModel):
    po_numbers: List[str]
    vendor_id: str
    vendor_name: str
    products: List[PurchaseOrderLine]
    total_amount: float
    bank_order_ids: List[str]
    combined_date: datetime
    original_pos_count: int


class PurchaseOrderResponse(EntityResponse):
    po_number: str
    vendor_id: str
    bank_order_id: Optional[str] = None
    products: List[PurchaseOrderLine]
    total_amount: float
    status: PurchaseOrderStatus
    merged_from: Optional[List[str]] = None
    merged_into: Optional[str] = None


class BulkCreateRequest(CamelModel):
    """One single-line PO per bank order, all for the same vendor and product."""

    vendor_id: str
    unit_price: float = Field(ge=0)
    bank_order_ids: List[str] = Field(min_length=1)


class BulkCreateSuccess(CamelModel):
    order_id: str
    po_number: str
    order_type: str = "bank-order"


class BulkCreateFailure(CamelModel):
    order_id: str
    order_type: str = "bank-order"
    error: str


class BulkCreateResult(CamelModel):
    success_count: int = 0
    failed_count: int = 0
    successful_creations: List[BulkCreateSuccess] = []
    failed_creations: List[BulkCreateFailure] = []
