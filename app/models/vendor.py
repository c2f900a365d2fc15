"""Supplier (vendor) model."""

from enum import Enum

from sqlmodel import Field

from app.models.base import EntityBase


class VendorStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Vendor(EntityBase, table=True):
    __tablename__ = "vendors"  # type: ignore

    vendor_name: str = Field(index=True, max_length=255)
    phone: str = Field(max_length=64)
    email: str = Field(index=True, max_length=255)
    address: str
    city: str = Field(max_length=128)
    status: VendorStatus = Field(default=VendorStatus.ACTIVE, index=True)
