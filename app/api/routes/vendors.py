"""Vendor routes."""

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
from app.models.vendor import VendorStatus
from app.schemas.common import MessageResponse, Paginated
from app.schemas.vendor import VendorCreate, VendorResponse, VendorUpdate
from app.services.vendor_service import VendorService

router = APIRouter(prefix="/vendors", tags=["vendors"], route_class=EnvelopeRoute)


@router.post(
    "",
    response_model=VendorResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*ADMIN_STAFF))],
)
def create_vendor(vendor_in: VendorCreate, session: SessionDep, audit: AuditDep) -> VendorResponse:
    return VendorResponse.model_validate(
        VendorService(session, audit).create(vendor_in.model_dump())
    )


@router.get(
    "",
    response_model=Paginated[VendorResponse],
    dependencies=[Depends(require_roles(*ALL_ROLES))],
)
def list_vendors(
    session: SessionDep,
    audit: AuditDep,
    pagination: Annotated[Pagination, Depends()],
    status_filter: Annotated[Optional[VendorStatus], Query(alias="status")] = None,
    search: Optional[str] = None,
) -> Paginated[VendorResponse]:
    """
    List vendors.

    Args:
        status_filter: Only vendors with this status
        search: Case-insensitive match on vendor name or email
    """
    page = VendorService(session, audit).search(
        pagination.page, pagination.limit, status=status_filter, search=search
    )
    return Paginated[VendorResponse].model_validate(page)


@router.get(
    "/{vendor_id}",
    response_model=VendorResponse,
    dependencies=[Depends(require_roles(*ALL_ROLES))],
)
def get_vendor(vendor_id: str, session: SessionDep, audit: AuditDep) -> VendorResponse:
    return VendorResponse.model_validate(VendorService(session, audit).get(vendor_id))


@router.patch(
    "/{vendor_id}",
    response_model=VendorResponse,
    dependencies=[Depends(require_roles(*ADMIN_STAFF))],
)
def update_vendor(
    vendor_id: str, vendor_in: VendorUpdate, session: SessionDep, audit: AuditDep
) -> VendorResponse:
    vendor = VendorService(session, audit).update(
        vendor_id, vendor_in.model_dump(exclude_unset=True)
    )
    return VendorResponse.model_validate(vendor)


@router.delete(
    "/{vendor_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_roles(*ADMIN))],
)
def delete_vendor(vendor_id: str, session: SessionDep, audit: AuditDep) -> MessageResponse:
    VendorService(session, audit).remove(vendor_id)
    return MessageResponse(message="Vendor deleted successfully")
