"""Request bodies posted to the backend, one model per operation."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import field_serializer

from .base import WireModel


class DeviceActivationRequest(WireModel):
    email: str
    password: str
    device_name: str
    device_type: str = "MOBILE"


class PINLoginRequest(WireModel):
    pin: str
    location_id: Optional[str] = None


class SwitchLocationRequest(WireModel):
    location_id: str


class ReceiveInventoryRequest(WireModel):
    """Body for ``POST /inventory/receive``. Date-only fields go out as ``YYYY-MM-DD``."""

    location_id: str
    product_id: str
    quantity: int
    unit_cost: float
    supplier_id: Optional[str] = None
    invoice_number: Optional[str] = None
    purchase_order_id: Optional[str] = None
    batch_number: Optional[str] = None
    expiry_date: Optional[dt.date] = None
    manufacturing_date: Optional[dt.date] = None
    received_by: Optional[str] = None
    notes: Optional[str] = None
    sync_to_square: Optional[bool] = None
    selling_price: Optional[float] = None
    sync_price_to_square: Optional[bool] = None

    @field_serializer("expiry_date", "manufacturing_date")
    def _date_only(self, value: Optional[dt.date]) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, dt.datetime):
            value = value.date()
        return value.isoformat()


class CreateAdjustmentRequest(WireModel):
    location_id: str
    product_id: str
    type: str
    quantity: int
    reason: Optional[str] = None
    notes: Optional[str] = None
    unit_cost: Optional[float] = None
    effective_date: Optional[dt.date] = None
    adjusted_by: Optional[str] = None
    sync_to_square: Optional[bool] = None


class QuickAdjustmentRequest(WireModel):
    location_id: str
    product_id: str
    quantity: int
    reason: Optional[str] = None
    notes: Optional[str] = None
    sync_to_square: Optional[bool] = None


class CreateExpenseRequest(WireModel):
    location_id: str
    type: str
    amount: float
    date: dt.date
    description: Optional[str] = None
    vendor: Optional[str] = None
    reference: Optional[str] = None
    is_paid: Optional[bool] = None
    paid_at: Optional[dt.datetime] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None


class UpdateExpenseRequest(WireModel):
    type: Optional[str] = None
    amount: Optional[float] = None
    date: Optional[dt.date] = None
    description: Optional[str] = None
    vendor: Optional[str] = None
    reference: Optional[str] = None
    is_paid: Optional[bool] = None
    paid_at: Optional[dt.datetime] = None
    notes: Optional[str] = None


__all__ = [
    "CreateAdjustmentRequest",
    "CreateExpenseRequest",
    "DeviceActivationRequest",
    "PINLoginRequest",
    "QuickAdjustmentRequest",
    "ReceiveInventoryRequest",
    "SwitchLocationRequest",
    "UpdateExpenseRequest",
]
