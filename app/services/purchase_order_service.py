"""
Purchase order service.

Purchase orders are numbered ``PO-YYYY-NNNN``. Several live POs of one vendor
can be combined: the preview is read-only, while a merge writes a new PO
carrying every line (tagged with its source PO number) and marks the
originals ``merged``. POs produced by a merge and cancelled POs accept no
serial-number edits.
"""

from datetime import date
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.exceptions import AppError, BadRequestError, ConflictError, NotFoundError
from app.core.logging import AuditLogger
from app.models.base import utcnow
from app.models.purchase_order import PurchaseOrder, PurchaseOrderStatus
from app.schemas.purchase_order import (
    BulkCreateFailure,
    BulkCreateResult,
    BulkCreateSuccess,
    BulkUpdateFailure,
    BulkUpdateResult,
    BulkUpdateSuccess,
    CombinedPreview,
    ProductSerialNumber,
    PurchaseOrderCreate,
    PurchaseOrderLine,
    PurchaseOrderSerialUpdate,
)
from app.services.bank_order_service import BankOrderService
from app.services.base_service import (
    Page,
    SoftDeleteService,
    day_end,
    day_start,
    next_document_number,
)
from app.services.product_service import ProductService
from app.services.vendor_service import VendorService

PO_PREFIX = "PO"


class PurchaseOrderService(SoftDeleteService[PurchaseOrder]):
    model = PurchaseOrder
    resource_name = "Purchase order"

    def __init__(self, session: Session, audit: Optional[AuditLogger] = None):
        super().__init__(session, audit)
        self.vendors = VendorService(session, audit=self.audit)
        self.products = ProductService(session, audit=self.audit)
        self.bank_orders = BankOrderService(session, audit=self.audit)

    def generate_po_number(self) -> str:
        return next_document_number(self.session, PurchaseOrder.po_number, PO_PREFIX)

    def create_order(self, po_in: PurchaseOrderCreate) -> PurchaseOrder:
        """
        Create a PO, copying product names and numbers onto each line and
        computing line and order totals.

        Raises:
            NotFoundError: Vendor, bank order or a product is missing
        """
        vendor = self.vendors.get(po_in.vendor_id)
        bank_order_id = None
        if po_in.bank_order_id:
            bank_order_id = self.bank_orders.get(po_in.bank_order_id).id

        lines = []
        for line_in in po_in.products:
            product = self.products.get(line_in.product_id)
            lines.append(
                PurchaseOrderLine(
                    product_id=product.id,
                    product_name=product.name,
                    bank_product_number=product.bank_product_number,
                    quantity=line_in.quantity,
                    unit_price=line_in.unit_price,
                    total_price=line_in.quantity * line_in.unit_price,
                ).model_dump()
            )

        return self.create(
            {
                "po_number": self.generate_po_number(),
                "vendor_id": vendor.id,
                "bank_order_id": bank_order_id,
                "products": lines,
                "total_amount": sum(line["total_price"] for line in lines),
                "status": PurchaseOrderStatus.ACTIVE,
            }
        )

    def bulk_create(
        self, vendor_id: Any, unit_price: float, bank_order_ids: list[str]
    ) -> BulkCreateResult:
        """
        Create one single-line PO per bank order, all for one vendor.

        Every order is loaded and checked before anything is written: each
        must exist and carry a product, and all must share that product.
        After that, a failing order is reported and the rest still proceed.

        Raises:
            CastError: Malformed vendor or order identifier
            NotFoundError: Vendor or a bank order is missing
            BadRequestError: An order has no product, or products differ
        """
        vendor = self.vendors.get(vendor_id)
        orders = []
        for order_id in dict.fromkeys(bank_order_ids):
            order = self.bank_orders.get(order_id)
            if not order.product_id:
                raise BadRequestError(
                    f"Bank order with ID {order_id} does not have a product assigned"
                )
            orders.append(order)

        product_ids = {order.product_id for order in orders}
        if len(product_ids) > 1:
            raise BadRequestError(
                f"All orders must have the same product. "
                f"Found {len(product_ids)} different products."
            )
        product = self.products.get(product_ids.pop())

        result = BulkCreateResult()
        for order in orders:
            line = PurchaseOrderLine(
                product_id=product.id,
                product_name=product.name,
                bank_product_number=product.bank_product_number,
                quantity=order.qty,
                unit_price=unit_price,
                total_price=order.qty * unit_price,
            ).model_dump()
            try:
                po = self.create(
                    {
                        "po_number": self.generate_po_number(),
                        "vendor_id": vendor.id,
                        "bank_order_id": order.id,
                        "products": [line],
                        "total_amount": line["total_price"],
                        "status": PurchaseOrderStatus.ACTIVE,
                    }
                )
            except (AppError, SQLAlchemyError) as e:
                message = e.message if isinstance(e, AppError) else "Database error occurred"
                self.audit.error(
                    f"Bulk PO creation failed for bank order {order.id}: {e}", self.context
                )
                result.failed_creations.append(BulkCreateFailure(order_id=order.id, error=message))
                continue
            result.successful_creations.append(
                BulkCreateSuccess(order_id=order.id, po_number=po.po_number)
            )
        result.success_count = len(result.successful_creations)
        result.failed_count = len(result.failed_creations)
        self.audit.log(
            f"Bulk PO creation for vendor {vendor.id}: "
            f"{result.success_count} created, {result.failed_count} failed",
            self.context,
        )
        return result

    def search(
        self,
        page: Any = 1,
        limit: Any = 10,
        vendor_id: Optional[str] = None,
        status: Optional[PurchaseOrderStatus] = None,
    ) -> Page[PurchaseOrder]:
        filters = {
            "vendor_id": self.parse_id(vendor_id, "vendor") if vendor_id else None,
            "status": status,
        }
        return self.list(page, limit, filters=filters)

    def find_by_vendor(self, vendor_id: Any) -> list[PurchaseOrder]:
        statement = (
            self.active_query()
            .where(PurchaseOrder.vendor_id == self.parse_id(vendor_id, "vendor"))
            .order_by(PurchaseOrder.created_at.desc())
        )
        return list(self.session.exec(statement).all())

    def find_combinable(
        self,
        vendor_id: Any,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[PurchaseOrder]:
        """Live, not yet merged POs of a vendor, optionally by creation date."""
        statement = self.active_query().where(
            PurchaseOrder.vendor_id == self.parse_id(vendor_id, "vendor"),
            PurchaseOrder.status != PurchaseOrderStatus.MERGED,
        )
        if start_date:
            statement = statement.where(PurchaseOrder.created_at >= day_start(start_date))
        if end_date:
            statement = statement.where(PurchaseOrder.created_at <= day_end(end_date))
        return list(self.session.exec(statement.order_by(PurchaseOrder.created_at.desc())).all())

    # Combining

    def _load_combinable(self, po_ids: list[str]) -> list[PurchaseOrder]:
        ids = [self.parse_id(po_id, "purchase order") for po_id in po_ids]
        unique_ids = list(dict.fromkeys(ids))
        if len(unique_ids) < 2:
            raise BadRequestError("At least 2 distinct POs are required to combine")

        found = {
            po.id: po
            for po in self.session.exec(
                self.active_query().where(PurchaseOrder.id.in_(unique_ids))
            ).all()
        }
        if not found:
            raise NotFoundError("No purchase orders found")
        if len(found) != len(unique_ids):
            raise NotFoundError("Some purchase orders were not found or have been deleted")
        pos = [found[po_id] for po_id in unique_ids]

        if len({po.vendor_id for po in pos}) > 1:
            raise BadRequestError("Cannot combine purchase orders from different vendors")
        merged = [po.po_number for po in pos if po.status == PurchaseOrderStatus.MERGED]
        if merged:
            raise BadRequestError(f"Cannot combine already merged POs: {', '.join(merged)}")
        cancelled = [po.po_number for po in pos if po.status == PurchaseOrderStatus.CANCELLED]
        if cancelled:
            raise BadRequestError(f"Cannot combine cancelled POs: {', '.join(cancelled)}")
        return pos

    def combined_preview(self, po_ids: list[str]) -> CombinedPreview:
        """
        Combined view of several POs. Nothing is written.

        Raises:
            CastError: Malformed identifier
            NotFoundError: Any PO missing or deleted
            BadRequestError: Different vendors, or a PO already merged or cancelled
        """
        return self._preview(self._load_combinable(po_ids))

    def _preview(self, pos: list[PurchaseOrder]) -> CombinedPreview:
        vendor = self.vendors.get(pos[0].vendor_id)
        lines = [
            PurchaseOrderLine.model_validate({**line, "source_po": po.po_number})
            for po in pos
            for line in po.products
        ]
        return CombinedPreview(
            po_numbers=[po.po_number for po in pos],
            vendor_id=vendor.id,
            vendor_name=vendor.vendor_name,
            products=lines,
            total_amount=sum(po.total_amount for po in pos),
            bank_order_ids=[po.bank_order_id for po in pos if po.bank_order_id],
            combined_date=utcnow(),
            original_pos_count=len(pos),
        )

    def merge(self, po_ids: list[str], new_po_number: Optional[str] = None) -> PurchaseOrder:
        """
        Merge POs into a new one and mark the originals ``merged``.

        Raises:
            ConflictError: ``new_po_number`` already used by a live PO
        """
        pos = self._load_combinable(po_ids)
        preview = self._preview(pos)
        if new_po_number:
            existing = self.session.exec(
                self.active_query().where(PurchaseOrder.po_number == new_po_number)
            ).first()
            if existing is not None:
                raise ConflictError(f"PO number {new_po_number} already exists")
        else:
            new_po_number = self.generate_po_number()

        merged_po = PurchaseOrder(
            po_number=new_po_number,
            vendor_id=preview.vendor_id,
            products=[line.model_dump() for line in preview.products],
            total_amount=preview.total_amount,
            status=PurchaseOrderStatus.ACTIVE,
            merged_from=preview.po_numbers,
        )
        self.session.add(merged_po)
        for po in pos:
            po.status = PurchaseOrderStatus.MERGED
            po.merged_into = merged_po.id
            self.session.add(po)
        self.commit()
        self.session.refresh(merged_po)

        self.audit.log(
            f"Purchase orders {', '.join(preview.po_numbers)} merged into {merged_po.po_number}",
            self.context,
        )
        return merged_po

    # Serial numbers and cancellation

    def update_serials(self, record_id: Any, updates: list[ProductSerialNumber]) -> PurchaseOrder:
        """
        Set serial numbers on existing lines.

        Raises:
            BadRequestError: PO produced by a merge, or cancelled
            NotFoundError: A product is not on this PO
        """
        po = self.get(record_id)
        if po.merged_from:
            raise BadRequestError(
                "Cannot update merged purchase orders. Only original POs can be edited."
            )
        if po.status == PurchaseOrderStatus.CANCELLED:
            raise BadRequestError("Cannot update cancelled purchase orders.")

        lines = [dict(line) for line in po.products]
        for update in updates:
            line = next((line for line in lines if line["product_id"] == update.product_id), None)
            if line is None:
                raise NotFoundError(f"Product with ID {update.product_id} not found in this PO")
            line["serial_number"] = update.serial_number
        # Reassign so the JSON column is flagged dirty
        po.products = lines
        po = self.save(po)
        self.audit.log(f"Serial numbers updated on purchase order {po.po_number}", self.context)
        return po

    def bulk_update(self, updates: list[PurchaseOrderSerialUpdate]) -> BulkUpdateResult:
        """Apply serial updates PO by PO; one failing PO does not stop the rest."""
        result = BulkUpdateResult()
        for update in updates:
            try:
                po = self.update_serials(update.po_id, update.products)
            except AppError as e:
                result.failed_updates.append(BulkUpdateFailure(po_id=update.po_id, error=e.message))
                continue
            result.successful_updates.append(BulkUpdateSuccess(po_id=po.id, po_number=po.po_number))
        result.success_count = len(result.successful_updates)
        result.failed_count = len(result.failed_updates)
        return result

    def cancel(self, record_id: Any) -> PurchaseOrder:
        """
        Raises:
            BadRequestError: Already cancelled, or merged
        """
        po = self.get(record_id)
        if po.status == PurchaseOrderStatus.CANCELLED:
            raise BadRequestError("Purchase order is already cancelled")
        if po.status == PurchaseOrderStatus.MERGED:
            raise BadRequestError("Cannot cancel merged purchase orders")
        po.status = PurchaseOrderStatus.CANCELLED
        po = self.save(po)
        self.audit.log(f"Purchase order {po.po_number} cancelled", self.context)
        return po

    def find_serial_for_bank_order(
        self, bank_order_id: str, product_id: Optional[str] = None
    ) -> Optional[str]:
        """
        Serial number recorded on a live PO linked to the bank order: the line
        for the order's product if it has one, otherwise any line with a serial.
        """
        statement = (
            self.active_query()
            .where(PurchaseOrder.bank_order_id == bank_order_id)
            .order_by(PurchaseOrder.created_at.desc())
        )
        for po in self.session.exec(statement).all():
            with_serial = [line for line in po.products if line.get("serial_number")]
            for line in with_serial:
                if product_id and line.get("product_id") == product_id:
                    return line["serial_number"]
            if with_serial:
                return with_serial[0]["serial_number"]
        return None
