"""Courier service."""

from typing import Any, Optional

from app.models.courier import Courier, CourierType
from app.services.base_service import SoftDeleteService


class CourierService(SoftDeleteService[Courier]):
    """
    Couriers are looked up by type when dispatching, so only one live
    courier may exist per ``courier_type``.
    """

    model = Courier
    resource_name = "Courier"
    unique_fields = (("courier_type",),)

    def conflict_message(self, fields: tuple[str, ...], values: dict[str, Any]) -> str:
        courier_type = values["courier_type"]
        return f"Courier with type {getattr(courier_type, 'value', courier_type)} already exists"

    def get_active_by_type(self, courier_type: CourierType) -> Optional[Courier]:
        statement = self.active_query().where(
            Courier.courier_type == courier_type,
            Courier.is_active == True,  # noqa: E712
        )
        return self.session.exec(statement).first()

    def toggle_active(self, courier_id: Any) -> Courier:
        courier = self.get(courier_id)
        courier.is_active = not courier.is_active
        courier = self.save(courier)
        self.audit.log(
            f"Courier {courier.id} {'activated' if courier.is_active else 'deactivated'}",
            self.context,
        )
        return courier
