"""Courier request/response schemas."""

from typing import Optional

from pydantic import Field

from app.models.courier import CourierType
from app.schemas.common import CamelModel, EntityResponse


class CourierCreate(CamelModel):
    courier_name: str = Field(min_length=1, max_length=255)
    courier_type: CourierType
    api_url: Optional[str] = None
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    contact_phone: Optional[str] = Field(default=None, max_length=64)
    contact_email: Optional[str] = Field(default=None, max_length=255)
    is_active: bool = True
    is_manual_dispatch: bool = False


class CourierUpdate(CamelModel):
    courier_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    courier_type: Optional[CourierType] = None
    api_url: Optional[str] = None
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    contact_phone: Optional[str] = Field(default=None, max_length=64)
    contact_email: Optional[str] = Field(default=None, max_length=255)
    is_active: Optional[bool] = None
    is_manual_dispatch: Optional[bool] = None


class CourierResponse(EntityResponse):
    """``api_secret`` is write-only and never returned."""

    courier_name: str
    courier_type: CourierType
    api_url: Optional[str] = None
    api_key: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    is_active: bool
    is_manual_dispatch: bool
