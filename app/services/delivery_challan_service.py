"""
Delivery challan service.

A challan is issued once per dispatched bank order and snapshots the
customer, product and courier details at that moment.
"""

from typing import Any, Optional

from sqlalchemy import func
from sqlmodel import Session

from app.core.exceptions import BadRequestError, CastError, ConflictError, NotFoundError
from app.core.logging import AuditLogger
from app.models.bank_order import OrderStatus
from app.models.base import utcnow
from app.models.delivery_challan import DeliveryChallan, PrintStatus
from app.schemas.delivery_challan import DeliveryChallanCreate
from app.services.bank_order_service import BankOrderService
from app.services.base_service import Page, SoftDeleteService, next_document_number
from app.services.courier_service import CourierService
from app.services.purchase_order_service import PurchaseOrderService

CHALLAN_PREFIX = "DC"


class DeliveryChallanService(SoftDeleteService[DeliveryChallan]):
    model = DeliveryChallan
    resource_name = "Delivery challan"

    def __init__(self, session: Session, audit: Optional[AuditLogger] = None):
        super().__init__(session, audit)
        self.bank_orders = BankOrderService(session, audit=self.audit)
        self.couriers = CourierService(session, audit=self.audit)
        self.purchase_orders = PurchaseOrderService(session, audit=self.audit)

    def generate_challan_number(self) -> str:
        return next_document_number(self.session, DeliveryChallan.challan_number, CHALLAN_PREFIX)

    def find_by_order(self, bank_order_id: str) -> Optional[DeliveryChallan]:
        statement = self.active_query().where(DeliveryChallan.bank_order_id == bank_order_id)
        return self.session.exec(statement).first()

    def create_for_bank_order(
        self, bank_order_id: Any, challan_in: DeliveryChallanCreate
    ) -> DeliveryChallan:
        """
        Issue the challan for a dispatched bank order.

        Raises:
            NotFoundError: Order or courier missing
            BadRequestError: Order not dispatched
            ConflictError: Order already has a live challan
        """
        order = self.bank_orders.get(bank_order_id)
        if order.status != OrderStatus.DISPATCHED:
            raise BadRequestError("Cannot create delivery challan for non-dispatched order")
        if self.find_by_order(order.id) is not None:
            raise ConflictError("Delivery challan already exists for this bank order")
        courier = self.couriers.get(challan_in.courier_id)

        serial_number = challan_in.product_serial_number
        if not serial_number:
            serial_number = self.purchase_orders.find_serial_for_bank_order(
                order.id, order.product_id
            )

        challan = self.create(
            {
                "challan_number": self.generate_challan_number(),
                "bank_order_id": order.id,
                "customer_name": order.customer_name,
                "customer_cnic": order.cnic,
                "customer_phone": order.mobile1,
                "customer_address": order.address,
                "customer_city": order.city,
                "product_name": f"{order.brand} {order.product}" if order.brand else order.product,
                "product_brand": order.brand,
                "product_serial_number": serial_number,
                "quantity": 1,
                "tracking_number": challan_in.tracking_number,
                "consignment_number": challan_in.consignment_number,
                "courier_name": courier.courier_name,
                "po_number": order.po_number,
                "challan_date": utcnow(),
                "dispatch_date": challan_in.dispatch_date or utcnow(),
                "expected_delivery_date": challan_in.expected_delivery_date,
                "remarks": challan_in.remarks,
            }
        )
        self.audit.audit(
            "DELIVERY_CHALLAN_CREATED",
            None,
            {"challan_number": challan.challan_number, "bank_order_id": order.id},
            self.context,
        )
        return challan

    def search(
        self,
        page: Any = 1,
        limit: Any = 10,
        tracking_number: Optional[str] = None,
        customer_name: Optional[str] = None,
    ) -> Page[DeliveryChallan]:
        clauses = []
        if tracking_number and tracking_number.strip():
            clauses.append(
                func.lower(DeliveryChallan.tracking_number).like(
                    f"%{tracking_number.strip().lower()}%"
                )
            )
        if customer_name and customer_name.strip():
            clauses.append(
                func.lower(DeliveryChallan.customer_name).like(
                    f"%{customer_name.strip().lower()}%"
                )
            )
        return self.list(page, limit, clauses=clauses)

    def get_by_order(self, bank_order_id: Any) -> DeliveryChallan:
        """
        Raises:
            NotFoundError: The order has no live challan
        """
        challan = self.find_by_order(self.parse_id(bank_order_id, "bank order"))
        if challan is None:
            raise NotFoundError(f"Delivery challan for bank order {bank_order_id} not found")
        return challan

    def _mark_printed(self, challan: DeliveryChallan) -> None:
        challan.print_status = PrintStatus.PRINTED
        challan.printed_at = utcnow()
        challan.print_count = (challan.print_count or 0) + 1
        self.session.add(challan)

    def mark_printed(self, record_id: Any) -> DeliveryChallan:
        challan = self.get(record_id)
        self._mark_printed(challan)
        self.commit()
        self.session.refresh(challan)
        return challan

    def mark_many_printed(self, challan_ids: list[str]) -> int:
        """
        Mark several challans printed. Malformed or unknown identifiers are
        skipped.

        Returns:
            Number of challans updated
        """
        ids = []
        for challan_id in challan_ids:
            try:
                ids.append(self.parse_id(challan_id))
            except CastError:
                self.audit.warn(f"Skipping malformed challan ID {challan_id}", self.context)
        if not ids:
            return 0

        challans = self.session.exec(
            self.active_query().where(DeliveryChallan.id.in_(ids))
        ).all()
        for challan in challans:
            self._mark_printed(challan)
        self.commit()
        self.audit.log(f"Marked {len(challans)} delivery challans printed", self.context)
        return len(challans)
