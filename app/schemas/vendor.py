"""Vendor request/response schemas."""

from typing import Optional

from pydantic import EmailStr, Field, field_validator

from app.models.vendor import VendorStatus
from app.schemas.common import CamelModel, EntityResponse
from app.schemas.user import lower_email


class VendorCreate(CamelModel):
    vendor_name: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=1, max_length=64)
    email: EmailStr
    address: str = Field(min_length=1)
    city: str = Field(min_length=1, max_length=128)
    status: VendorStatus = VendorStatus.ACTIVE

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: Optional[str]) -> Optional[str]:
        return lower_email(value)


class VendorUpdate(CamelModel):
    vendor_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    phone: Optional[str] = Field(default=None, min_length=1, max_length=64)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(default=None, min_length=1)
    city: Optional[str] = Field(default=None, min_length=1, max_length=128)
    status: Optional[VendorStatus] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: Optional[str]) -> Optional[str]:
        return lower_email(value)


class VendorResponse(EntityResponse):
    vendor_name: str
    phone: str
    email: str
    address: str
    city: str
    status: VendorStatus
