"""Vendor service."""

from typing import Any, Optional

from sqlalchemy import func, or_

from app.models.vendor import Vendor, VendorStatus
from app.services.base_service import Page, SoftDeleteService


class VendorService(SoftDeleteService[Vendor]):
    model = Vendor
    resource_name = "Vendor"
    unique_fields = (("email",),)

    def conflict_message(self, fields: tuple[str, ...], values: dict[str, Any]) -> str:
        return f"Vendor with email {values['email']} already exists"

    def search(
        self,
        page: Any = 1,
        limit: Any = 10,
        status: Optional[VendorStatus] = None,
        search: Optional[str] = None,
    ) -> Page[Vendor]:
        """
        List vendors, optionally matching ``search`` case-insensitively against
        name or email.
        """
        clauses = []
        if search and search.strip():
            pattern = f"%{search.strip().lower()}%"
            clauses.append(
                or_(
                    func.lower(Vendor.vendor_name).like(pattern),
                    func.lower(Vendor.email).like(pattern),
                )
            )
        return self.list(page, limit, filters={"status": status}, clauses=clauses)
