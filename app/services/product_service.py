"""Product catalogue service."""

from typing import Any, Optional

from sqlalchemy import func, or_
from sqlmodel import Session

from app.core.logging import AuditLogger
from app.models.product import Product, ProductType
from app.services.base_service import Page, SoftDeleteService
from app.services.category_service import CategoryService


class ProductService(SoftDeleteService[Product]):
    model = Product
    resource_name = "Product"
    unique_fields = (("bank_product_number", "product_type"),)

    def __init__(self, session: Session, audit: Optional[AuditLogger] = None):
        super().__init__(session, audit)
        self.categories = CategoryService(session, audit=self.audit)

    def conflict_message(self, fields: tuple[str, ...], values: dict[str, Any]) -> str:
        product_type = values.get("product_type")
        return (
            f"Product with bank product number {values['bank_product_number']} "
            f"and type {getattr(product_type, 'value', product_type)} already exists"
        )

    def _check_category(self, data: dict[str, Any]) -> dict[str, Any]:
        if data.get("category_id") is not None:
            data["category_id"] = self.categories.get(data["category_id"]).id
        return data

    def create(self, data: dict[str, Any]) -> Product:
        """
        Raises:
            NotFoundError: ``category_id`` does not reference a live category
            ConflictError: Product number already used for this product type
        """
        return super().create(self._check_category(dict(data)))

    def update(self, record_id: Any, patch: dict[str, Any]) -> Product:
        return super().update(record_id, self._check_category(dict(patch)))

    def search(
        self,
        page: Any = 1,
        limit: Any = 10,
        category_id: Optional[str] = None,
        product_type: Optional[ProductType] = None,
        search: Optional[str] = None,
    ) -> Page[Product]:
        clauses = []
        if search and search.strip():
            pattern = f"%{search.strip().lower()}%"
            clauses.append(
                or_(
                    func.lower(Product.name).like(pattern),
                    func.lower(Product.bank_product_number).like(pattern),
                )
            )
        filters = {
            "category_id": self.parse_id(category_id, "category") if category_id else None,
            "product_type": product_type,
        }
        return self.list(page, limit, filters=filters, clauses=clauses)

    def find_by_category(self, category_id: Any) -> list[Product]:
        category = self.categories.get(category_id)
        statement = (
            self.active_query()
            .where(Product.category_id == category.id)
            .order_by(Product.created_at.desc())
        )
        return list(self.session.exec(statement).all())

    def find_by_number(self, bank_product_number: str, product_type: ProductType) -> Optional[Product]:
        statement = self.active_query().where(
            Product.bank_product_number == bank_product_number,
            Product.product_type == product_type,
        )
        return self.session.exec(statement).first()

    def get_or_create(
        self,
        bank_product_number: str,
        name: str,
        product_type: ProductType = ProductType.BANK_ORDER,
    ) -> Product:
        """Return the live product with this number and type, creating it if absent."""
        product = self.find_by_number(bank_product_number, product_type)
        if product is not None:
            return product
        return self.create(
            {
                "name": name,
                "bank_product_number": bank_product_number,
                "product_type": product_type,
            }
        )
