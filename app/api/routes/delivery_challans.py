"""Delivery challan routes."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import (
    ADMIN,
    ADMIN_STAFF,
    ALL_ROLES,
    AuditDep,
    Pagination,
    SessionDep,
    require_roles,
)
from app.api.responses import EnvelopeRoute
from app.schemas.common import MessageResponse, Paginated
from app.schemas.delivery_challan import (
    BulkPrintRequest,
    BulkPrintResult,
    DeliveryChallanCreate,
    DeliveryChallanResponse,
)
from app.services.delivery_challan_service import DeliveryChallanService

router = APIRouter(
    prefix="/delivery-challans", tags=["delivery-challans"], route_class=EnvelopeRoute
)

admin_or_staff = [Depends(require_roles(*ADMIN_STAFF))]
any_role = [Depends(require_roles(*ALL_ROLES))]


@router.post(
    "/bank-order/{order_id}",
    response_model=DeliveryChallanResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_or_staff,
)
def create_delivery_challan(
    order_id: str, challan_in: DeliveryChallanCreate, session: SessionDep, audit: AuditDep
) -> DeliveryChallanResponse:
    """
    Issue the delivery challan for a dispatched bank order.

    Raises:
        BadRequestError: Order is not dispatched
        ConflictError: Order already has a challan
        NotFoundError: Order or courier does not exist
    """
    challan = DeliveryChallanService(session, audit).create_for_bank_order(order_id, challan_in)
    return DeliveryChallanResponse.model_validate(challan)


@router.get("", response_model=Paginated[DeliveryChallanResponse], dependencies=any_role)
def list_delivery_challans(
    session: SessionDep,
    audit: AuditDep,
    pagination: Annotated[Pagination, Depends()],
    tracking_number: Annotated[Optional[str], Query(alias="trackingNumber")] = None,
    customer_name: Annotated[Optional[str], Query(alias="customerName")] = None,
) -> Paginated[DeliveryChallanResponse]:
    page = DeliveryChallanService(session, audit).search(
        pagination.page,
        pagination.limit,
        tracking_number=tracking_number,
        customer_name=customer_name,
    )
    return Paginated[DeliveryChallanResponse].model_validate(page)


@router.post("/print", response_model=BulkPrintResult, dependencies=admin_or_staff)
def print_delivery_challans(
    body: BulkPrintRequest, session: SessionDep, audit: AuditDep
) -> BulkPrintResult:
    """Mark several challans printed. Unknown or malformed IDs are ignored."""
    updated = DeliveryChallanService(session, audit).mark_many_printed(body.challan_ids)
    return BulkPrintResult(updated_count=updated)


@router.get("/order/{order_id}", response_model=DeliveryChallanResponse, dependencies=any_role)
def get_delivery_challan_for_order(
    order_id: str, session: SessionDep, audit: AuditDep
) -> DeliveryChallanResponse:
    challan = DeliveryChallanService(session, audit).get_by_order(order_id)
    return DeliveryChallanResponse.model_validate(challan)


@router.get("/{challan_id}", response_model=DeliveryChallanResponse, dependencies=any_role)
def get_delivery_challan(
    challan_id: str, session: SessionDep, audit: AuditDep
) -> DeliveryChallanResponse:
    return DeliveryChallanResponse.model_validate(
        DeliveryChallanService(session, audit).get(challan_id)
    )


@router.post(
    "/{challan_id}/print", response_model=DeliveryChallanResponse, dependencies=admin_or_staff
)
def print_delivery_challan(
    challan_id: str, session: SessionDep, audit: AuditDep
) -> DeliveryChallanResponse:
    return DeliveryChallanResponse.model_validate(
        DeliveryChallanService(session, audit).mark_printed(challan_id)
    )


@router.delete(
    "/{challan_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_roles(*ADMIN))],
)
def delete_delivery_challan(
    challan_id: str, session: SessionDep, audit: AuditDep
) -> MessageResponse:
    DeliveryChallanService(session, audit).remove(challan_id)
    return MessageResponse(message="Delivery challan deleted successfully")
