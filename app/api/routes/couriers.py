"""
Courier routes.
Couriers carry integration credentials, so writes are admin-only and the API
secret is never echoed back.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import ADMIN, ALL_ROLES, AuditDep, Pagination, SessionDep, require_roles
from app.api.responses import EnvelopeRoute
from app.models.courier import CourierType
from app.schemas.common import MessageResponse, Paginated
from app.schemas.courier import CourierCreate, CourierResponse, CourierUpdate
from app.services.courier_service import CourierService

router = APIRouter(prefix="/couriers", tags=["couriers"], route_class=EnvelopeRoute)

admin_only = [Depends(require_roles(*ADMIN))]
any_role = [Depends(require_roles(*ALL_ROLES))]


@router.post(
    "",
    response_model=CourierResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_only,
)
def create_courier(
    courier_in: CourierCreate, session: SessionDep, audit: AuditDep
) -> CourierResponse:
    return CourierResponse.model_validate(
        CourierService(session, audit).create(courier_in.model_dump())
    )


@router.get("", response_model=Paginated[CourierResponse], dependencies=any_role)
def list_couriers(
    session: SessionDep,
    audit: AuditDep,
    pagination: Annotated[Pagination, Depends()],
    courier_type: Annotated[Optional[CourierType], Query(alias="courierType")] = None,
    is_active: Annotated[Optional[bool], Query(alias="isActive")] = None,
) -> Paginated[CourierResponse]:
    page = CourierService(session, audit).list(
        pagination.page,
        pagination.limit,
        filters={"courier_type": courier_type, "is_active": is_active},
    )
    return Paginated[CourierResponse].model_validate(page)


@router.get("/{courier_id}", response_model=CourierResponse, dependencies=any_role)
def get_courier(courier_id: str, session: SessionDep, audit: AuditDep) -> CourierResponse:
    return CourierResponse.model_validate(CourierService(session, audit).get(courier_id))


@router.patch("/{courier_id}/toggle-active", response_model=CourierResponse, dependencies=admin_only)
def toggle_courier(courier_id: str, session: SessionDep, audit: AuditDep) -> CourierResponse:
    """Flip ``isActive`` on a courier."""
    return CourierResponse.model_validate(CourierService(session, audit).toggle_active(courier_id))


@router.patch("/{courier_id}", response_model=CourierResponse, dependencies=admin_only)
def update_courier(
    courier_id: str, courier_in: CourierUpdate, session: SessionDep, audit: AuditDep
) -> CourierResponse:
    courier = CourierService(session, audit).update(
        courier_id, courier_in.model_dump(exclude_unset=True)
    )
    return CourierResponse.model_validate(courier)


@router.delete("/{courier_id}", response_model=MessageResponse, dependencies=admin_only)
def delete_courier(courier_id: str, session: SessionDep, audit: AuditDep) -> MessageResponse:
    CourierService(session, audit).remove(courier_id)
    return MessageResponse(message="Courier deleted successfully")
