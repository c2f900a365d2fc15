"""Sponsoring bank model."""

from enum import Enum
from typing import Optional

from sqlmodel import Field

from app.models.base import EntityBase


class BankStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Bank(EntityBase, table=True):
    __tablename__ = "banks"  # type: ignore

    bank_name: str = Field(index=True, max_length=255)
    description: Optional[str] = None
    status: BankStatus = Field(default=BankStatus.ACTIVE, index=True)
