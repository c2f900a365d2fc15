"""Bank request/response schemas."""

from typing import Optional

from pydantic import Field

from app.models.bank import BankStatus
from app.schemas.common import CamelModel, EntityResponse


class BankCreate(CamelModel):
    bank_name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    status: BankStatus = BankStatus.ACTIVE


class BankUpdate(CamelModel):
    bank_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[BankStatus] = None


class BankResponse(EntityResponse):
    bank_name: str
    description: Optional[str] = None
    status: BankStatus
