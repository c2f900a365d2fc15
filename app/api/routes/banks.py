"""Bank routes. Banks sponsor the orders imported from their spreadsheets."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import ADMIN, ADMIN_STAFF, AuditDep, Pagination, SessionDep, require_roles
from app.api.responses import EnvelopeRoute
from app.models.bank import BankStatus
from app.schemas.bank import BankCreate, BankResponse, BankUpdate
from app.schemas.common import MessageResponse, Paginated
from app.services.bank_service import BankService

router = APIRouter(prefix="/banks", tags=["banks"], route_class=EnvelopeRoute)

admin_only = [Depends(require_roles(*ADMIN))]
admin_or_staff = [Depends(require_roles(*ADMIN_STAFF))]


@router.post(
    "", response_model=BankResponse, status_code=status.HTTP_201_CREATED, dependencies=admin_only
)
def create_bank(bank_in: BankCreate, session: SessionDep, audit: AuditDep) -> BankResponse:
    return BankResponse.model_validate(BankService(session, audit).create(bank_in.model_dump()))


@router.get("", response_model=Paginated[BankResponse], dependencies=admin_or_staff)
def list_banks(
    session: SessionDep,
    audit: AuditDep,
    pagination: Annotated[Pagination, Depends()],
    status_filter: Annotated[Optional[BankStatus], Query(alias="status")] = None,
) -> Paginated[BankResponse]:
    page = BankService(session, audit).list(
        pagination.page, pagination.limit, filters={"status": status_filter}
    )
    return Paginated[BankResponse].model_validate(page)


@router.get("/{bank_id}", response_model=BankResponse, dependencies=admin_or_staff)
def get_bank(bank_id: str, session: SessionDep, audit: AuditDep) -> BankResponse:
    return BankResponse.model_validate(BankService(session, audit).get(bank_id))


@router.patch("/{bank_id}", response_model=BankResponse, dependencies=admin_only)
def update_bank(
    bank_id: str, bank_in: BankUpdate, session: SessionDep, audit: AuditDep
) -> BankResponse:
    bank = BankService(session, audit).update(bank_id, bank_in.model_dump(exclude_unset=True))
    return BankResponse.model_validate(bank)


@router.delete("/{bank_id}", response_model=MessageResponse, dependencies=admin_only)
def delete_bank(bank_id: str, session: SessionDep, audit: AuditDep) -> MessageResponse:
    BankService(session, audit).remove(bank_id)
    return MessageResponse(message="Bank deleted successfully")
