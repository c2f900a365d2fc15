"""Bank service."""

from typing import Any

from app.models.bank import Bank
from app.services.base_service import SoftDeleteService


class BankService(SoftDeleteService[Bank]):
    model = Bank
    resource_name = "Bank"
    unique_fields = (("bank_name",),)

    def conflict_message(self, fields: tuple[str, ...], values: dict[str, Any]) -> str:
        return f'Bank with name "{values["bank_name"]}" already exists'
