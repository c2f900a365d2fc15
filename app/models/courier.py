"""Courier company model."""

from enum import Enum
from typing import Optional

from sqlmodel import Field

from app.models.base import EntityBase


class CourierType(str, Enum):
    LEOPARDS = "leopards"
    TCS = "tcs"
    TCS_OVERLAND = "tcs_overland"


class Courier(EntityBase, table=True):
    """
    Courier integration settings.

    Only one non-deleted courier may exist per ``courier_type``.
    ``is_manual_dispatch`` marks couriers whose tracking numbers are entered by hand.
    """

    __tablename__ = "couriers"  # type: ignore

    courier_name: str = Field(max_length=255)
    courier_type: CourierType = Field(index=True)
    api_url: Optional[str] = None
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    contact_phone: Optional[str] = Field(default=None, max_length=64)
    contact_email: Optional[str] = Field(default=None, max_length=255)
    is_active: bool = Field(default=True, index=True)
    is_manual_dispatch: bool = Field(default=False)
