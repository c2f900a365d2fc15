"""Category routes."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import ADMIN, ALL_ROLES, AuditDep, Pagination, SessionDep, require_roles
from app.api.responses import EnvelopeRoute
from app.models.category import CategoryStatus
from app.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from app.schemas.common import MessageResponse, Paginated
from app.services.category_service import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"], route_class=EnvelopeRoute)


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*ADMIN))],
)
def create_category(
    category_in: CategoryCreate, session: SessionDep, audit: AuditDep
) -> CategoryResponse:
    category = CategoryService(session, audit).create(category_in.model_dump())
    return CategoryResponse.model_validate(category)


@router.get(
    "",
    response_model=Paginated[CategoryResponse],
    dependencies=[Depends(require_roles(*ALL_ROLES))],
)
def list_categories(
    session: SessionDep,
    audit: AuditDep,
    pagination: Annotated[Pagination, Depends()],
    status_filter: Annotated[Optional[CategoryStatus], Query(alias="status")] = None,
) -> Paginated[CategoryResponse]:
    page = CategoryService(session, audit).list(
        pagination.page, pagination.limit, filters={"status": status_filter}
    )
    return Paginated[CategoryResponse].model_validate(page)


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    dependencies=[Depends(require_roles(*ALL_ROLES))],
)
def get_category(category_id: str, session: SessionDep, audit: AuditDep) -> CategoryResponse:
    return CategoryResponse.model_validate(CategoryService(session, audit).get(category_id))


@router.patch(
    "/{category_id}",
    response_model=CategoryResponse,
    dependencies=[Depends(require_roles(*ADMIN))],
)
def update_category(
    category_id: str, category_in: CategoryUpdate, session: SessionDep, audit: AuditDep
) -> CategoryResponse:
    category = CategoryService(session, audit).update(
        category_id, category_in.model_dump(exclude_unset=True)
    )
    return CategoryResponse.model_validate(category)


@router.delete(
    "/{category_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_roles(*ADMIN))],
)
def delete_category(category_id: str, session: SessionDep, audit: AuditDep) -> MessageResponse:
    CategoryService(session, audit).remove(category_id)
    return MessageResponse(message="Category deleted successfully")
