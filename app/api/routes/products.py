"""Product routes."""

from typing import Annotated, List, Optional

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
from app.models.product import ProductType
from app.schemas.common import MessageResponse, Paginated
from app.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from app.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"], route_class=EnvelopeRoute)

any_role = [Depends(require_roles(*ALL_ROLES))]


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*ADMIN_STAFF))],
)
def create_product(
    product_in: ProductCreate, session: SessionDep, audit: AuditDep
) -> ProductResponse:
    """
    Create a product.

    Raises:
        NotFoundError: Category does not exist
        ConflictError: Number and type already used by a live product
    """
    return ProductResponse.model_validate(
        ProductService(session, audit).create(product_in.model_dump())
    )


@router.get("", response_model=Paginated[ProductResponse], dependencies=any_role)
def list_products(
    session: SessionDep,
    audit: AuditDep,
    pagination: Annotated[Pagination, Depends()],
    category_id: Annotated[Optional[str], Query(alias="categoryId")] = None,
    product_type: Annotated[Optional[ProductType], Query(alias="productType")] = None,
    search: Optional[str] = None,
) -> Paginated[ProductResponse]:
    page = ProductService(session, audit).search(
        pagination.page,
        pagination.limit,
        category_id=category_id,
        product_type=product_type,
        search=search,
    )
    return Paginated[ProductResponse].model_validate(page)


@router.get(
    "/category/{category_id}", response_model=List[ProductResponse], dependencies=any_role
)
def list_products_by_category(
    category_id: str, session: SessionDep, audit: AuditDep
) -> List[ProductResponse]:
    products = ProductService(session, audit).find_by_category(category_id)
    return [ProductResponse.model_validate(product) for product in products]


@router.get("/{product_id}", response_model=ProductResponse, dependencies=any_role)
def get_product(product_id: str, session: SessionDep, audit: AuditDep) -> ProductResponse:
    return ProductResponse.model_validate(ProductService(session, audit).get(product_id))


@router.patch(
    "/{product_id}",
    response_model=ProductResponse,
    dependencies=[Depends(require_roles(*ADMIN_STAFF))],
)
def update_product(
    product_id: str, product_in: ProductUpdate, session: SessionDep, audit: AuditDep
) -> ProductResponse:
    product = ProductService(session, audit).update(
        product_id, product_in.model_dump(exclude_unset=True)
    )
    return ProductResponse.model_validate(product)


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_roles(*ADMIN))],
)
def delete_product(product_id: str, session: SessionDep, audit: AuditDep) -> MessageResponse:
    ProductService(session, audit).remove(product_id)
    return MessageResponse(message="Product deleted successfully")
