"""
Bank order routes: manual entry, spreadsheet import, search and status
tracking.
"""

from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

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
from app.core.logging import get_logger
from app.models.bank_order import OrderStatus
from app.schemas.bank_order import (
    BankOrderCreate,
    BankOrderResponse,
    BankOrderUpdate,
    ImportResult,
    OrderStatusUpdate,
)
from app.schemas.common import MessageResponse, Paginated
from app.services.bank_order_service import BankOrderService

logger = get_logger(__name__)

router = APIRouter(prefix="/bank-orders", tags=["bank-orders"], route_class=EnvelopeRoute)

admin_or_staff = [Depends(require_roles(*ADMIN_STAFF))]
any_role = [Depends(require_roles(*ALL_ROLES))]


@router.post(
    "",
    response_model=BankOrderResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_or_staff,
)
def create_bank_order(
    order_in: BankOrderCreate, session: SessionDep, audit: AuditDep
) -> BankOrderResponse:
    order = BankOrderService(session, audit).create(order_in.model_dump())
    return BankOrderResponse.model_validate(order)


@router.post(
    "/import",
    response_model=ImportResult,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_or_staff,
)
async def import_bank_orders(
    session: SessionDep,
    audit: AuditDep,
    bank_id: Annotated[Optional[str], Query(alias="bankId")] = None,
    file: Optional[UploadFile] = File(None),
) -> ImportResult:
    """
    Import orders from an ``.xlsx`` workbook.

    Rows are validated and stored one by one; the result lists the rows that
    were imported and the rows that failed with their reasons.

    Args:
        session: Database session
        audit: Audit logger
        bank_id: Bank the orders belong to
        file: Uploaded workbook

    Returns:
        Per-row import result
    """
    content = await file.read() if file is not None else None
    filename = file.filename if file is not None else None
    logger.info(f"Importing bank orders from {filename} for bank {bank_id}")
    return BankOrderService(session, audit).import_from_excel(content, filename, bank_id)


@router.get("", response_model=Paginated[BankOrderResponse], dependencies=any_role)
def list_bank_orders(
    session: SessionDep,
    audit: AuditDep,
    pagination: Annotated[Pagination, Depends()],
    search: Optional[str] = None,
    status_filter: Annotated[Optional[OrderStatus], Query(alias="status")] = None,
    city: Optional[str] = None,
    bank_id: Annotated[Optional[str], Query(alias="bankId")] = None,
    start_date: Annotated[Optional[date], Query(alias="startDate")] = None,
    end_date: Annotated[Optional[date], Query(alias="endDate")] = None,
) -> Paginated[BankOrderResponse]:
    page = BankOrderService(session, audit).search(
        pagination.page,
        pagination.limit,
        search=search,
        status=status_filter,
        city=city,
        bank_id=bank_id,
        start_date=start_date,
        end_date=end_date,
    )
    return Paginated[BankOrderResponse].model_validate(page)


@router.get("/{order_id}", response_model=BankOrderResponse, dependencies=any_role)
def get_bank_order(order_id: str, session: SessionDep, audit: AuditDep) -> BankOrderResponse:
    return BankOrderResponse.model_validate(BankOrderService(session, audit).get(order_id))


@router.patch("/{order_id}/status", response_model=BankOrderResponse, dependencies=any_role)
def update_bank_order_status(
    order_id: str, status_in: OrderStatusUpdate, session: SessionDep, audit: AuditDep
) -> BankOrderResponse:
    order = BankOrderService(session, audit).update_status(order_id, status_in.status)
    return BankOrderResponse.model_validate(order)


@router.patch("/{order_id}", response_model=BankOrderResponse, dependencies=admin_or_staff)
def update_bank_order(
    order_id: str, order_in: BankOrderUpdate, session: SessionDep, audit: AuditDep
) -> BankOrderResponse:
    order = BankOrderService(session, audit).update(
        order_id, order_in.model_dump(exclude_unset=True)
    )
    return BankOrderResponse.model_validate(order)


@router.delete(
    "/{order_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_roles(*ADMIN))],
)
def delete_bank_order(order_id: str, session: SessionDep, audit: AuditDep) -> MessageResponse:
    BankOrderService(session, audit).remove(order_id)
    return MessageResponse(message="Bank order deleted successfully")
