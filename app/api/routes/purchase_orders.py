"""
Purchase order routes.

Fixed paths (``bulk-create``, ``combinable/list``, ``combine/preview``,
``merge``, ``bulk-update``) are declared before ``/{po_id}`` so they are not captured by
the identifier route.
"""

from datetime import date
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import ADMIN, ADMIN_STAFF, AuditDep, Pagination, SessionDep, require_roles
from app.api.responses import EnvelopeRoute
from app.models.purchase_order import PurchaseOrderStatus
from app.schemas.common import MessageResponse, Paginated
from app.schemas.purchase_order import (
    BulkCreateRequest,
    BulkCreateResult,
    BulkUpdateRequest,
    BulkUpdateResult,
    CombinedPreview,
    CombineRequest,
    MergeRequest,
    PurchaseOrderCreate,
    PurchaseOrderResponse,
    PurchaseOrderUpdate,
)
from app.services.purchase_order_service import PurchaseOrderService

router = APIRouter(
    prefix="/purchase-orders", tags=["purchase-orders"], route_class=EnvelopeRoute
)

admin_only = [Depends(require_roles(*ADMIN))]
admin_or_staff = [Depends(require_roles(*ADMIN_STAFF))]


@router.post(
    "",
    response_model=PurchaseOrderResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_only,
)
def create_purchase_order(
    po_in: PurchaseOrderCreate, session: SessionDep, audit: AuditDep
) -> PurchaseOrderResponse:
    """
    Create a purchase order. Line totals and the order total are computed.

    Raises:
        NotFoundError: Vendor, bank order or a product does not exist
    """
    po = PurchaseOrderService(session, audit).create_order(po_in)
    return PurchaseOrderResponse.model_validate(po)


@router.post(
    "/bulk-create",
    response_model=BulkCreateResult,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_or_staff,
)
def bulk_create_purchase_orders(
    body: BulkCreateRequest, session: SessionDep, audit: AuditDep
) -> BulkCreateResult:
    """
    Create one purchase order per bank order at a shared unit price.

    Raises:
        NotFoundError: Vendor or a bank order does not exist
        BadRequestError: An order has no product, or the orders' products differ
    """
    return PurchaseOrderService(session, audit).bulk_create(
        body.vendor_id, body.unit_price, body.bank_order_ids
    )


@router.get("", response_model=Paginated[PurchaseOrderResponse], dependencies=admin_or_staff)
def list_purchase_orders(
    session: SessionDep,
    audit: AuditDep,
    pagination: Annotated[Pagination, Depends()],
    vendor_id: Annotated[Optional[str], Query(alias="vendorId")] = None,
    status_filter: Annotated[Optional[PurchaseOrderStatus], Query(alias="status")] = None,
) -> Paginated[PurchaseOrderResponse]:
    page = PurchaseOrderService(session, audit).search(
        pagination.page, pagination.limit, vendor_id=vendor_id, status=status_filter
    )
    return Paginated[PurchaseOrderResponse].model_validate(page)


@router.get(
    "/vendor/{vendor_id}",
    response_model=List[PurchaseOrderResponse],
    dependencies=admin_or_staff,
)
def list_vendor_purchase_orders(
    vendor_id: str, session: SessionDep, audit: AuditDep
) -> List[PurchaseOrderResponse]:
    pos = PurchaseOrderService(session, audit).find_by_vendor(vendor_id)
    return [PurchaseOrderResponse.model_validate(po) for po in pos]


@router.get(
    "/combinable/list",
    response_model=List[PurchaseOrderResponse],
    dependencies=admin_or_staff,
)
def list_combinable_purchase_orders(
    session: SessionDep,
    audit: AuditDep,
    vendor_id: Annotated[str, Query(alias="vendorId")],
    start_date: Annotated[Optional[date], Query(alias="startDate")] = None,
    end_date: Annotated[Optional[date], Query(alias="endDate")] = None,
) -> List[PurchaseOrderResponse]:
    pos = PurchaseOrderService(session, audit).find_combinable(vendor_id, start_date, end_date)
    return [PurchaseOrderResponse.model_validate(po) for po in pos]


@router.post("/combine/preview", response_model=CombinedPreview, dependencies=admin_or_staff)
def preview_combined_purchase_orders(
    body: CombineRequest, session: SessionDep, audit: AuditDep
) -> CombinedPreview:
    """Show what merging the given POs would produce without writing anything."""
    return PurchaseOrderService(session, audit).combined_preview(body.po_ids)


@router.post(
    "/merge",
    response_model=PurchaseOrderResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_only,
)
def merge_purchase_orders(
    body: MergeRequest, session: SessionDep, audit: AuditDep
) -> PurchaseOrderResponse:
    """
    Merge two or more POs of one vendor into a new PO.

    Args:
        body: PO identifiers and an optional number for the merged PO

    Returns:
        The merged PO; the originals are marked ``merged``
    """
    po = PurchaseOrderService(session, audit).merge(body.po_ids, body.new_po_number)
    return PurchaseOrderResponse.model_validate(po)


@router.post("/bulk-update", response_model=BulkUpdateResult, dependencies=admin_or_staff)
def bulk_update_purchase_orders(
    body: BulkUpdateRequest, session: SessionDep, audit: AuditDep
) -> BulkUpdateResult:
    return PurchaseOrderService(session, audit).bulk_update(body.updates)


@router.get("/{po_id}", response_model=PurchaseOrderResponse, dependencies=admin_or_staff)
def get_purchase_order(po_id: str, session: SessionDep, audit: AuditDep) -> PurchaseOrderResponse:
    return PurchaseOrderResponse.model_validate(PurchaseOrderService(session, audit).get(po_id))


@router.patch("/{po_id}", response_model=PurchaseOrderResponse, dependencies=admin_or_staff)
def update_purchase_order_serials(
    po_id: str, body: PurchaseOrderUpdate, session: SessionDep, audit: AuditDep
) -> PurchaseOrderResponse:
    po = PurchaseOrderService(session, audit).update_serials(po_id, body.products)
    return PurchaseOrderResponse.model_validate(po)


@router.post("/{po_id}/cancel", response_model=PurchaseOrderResponse, dependencies=admin_or_staff)
def cancel_purchase_order(
    po_id: str, session: SessionDep, audit: AuditDep
) -> PurchaseOrderResponse:
    return PurchaseOrderResponse.model_validate(PurchaseOrderService(session, audit).cancel(po_id))


@router.delete("/{po_id}", response_model=MessageResponse, dependencies=admin_only)
def delete_purchase_order(po_id: str, session: SessionDep, audit: AuditDep) -> MessageResponse:
    PurchaseOrderService(session, audit).remove(po_id)
    return MessageResponse(message="Purchase order deleted successfully")
