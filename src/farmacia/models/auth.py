"""Device activation and PIN session payloads."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from .base import WireModel


class EmployeeRole(str, Enum):
    OWNER = "OWNER"
    MANAGER = "MANAGER"
    CASHIER = "CASHIER"
    ACCOUNTANT = "ACCOUNTANT"

    @classmethod
    def parse(cls, value: Optional[str]) -> "EmployeeRole":
        try:
            return cls(value)
        except ValueError:
            return cls.CASHIER


class ActivatedDevice(WireModel):
    id: str
    name: Optional[str] = None
    device_type: Optional[str] = None


class DeviceActivationResponse(WireModel):
    device_token: str
    device: Optional[ActivatedDevice] = None


class PINLoginEmployee(WireModel):
    id: str
    name: str


class PINLoginLocation(WireModel):
    location_id: str
    location_name: str
    role: str


class PINLoginResponse(WireModel):
    session_token: str
    employee: PINLoginEmployee
    current_location: Optional[PINLoginLocation] = None
    accessible_locations: List[PINLoginLocation] = []
    expires_at: datetime


class SessionRefreshResponse(WireModel):
    session_token: str
    expires_at: datetime


class SwitchLocationResponse(WireModel):
    previous_location: Optional[PINLoginLocation] = None
    current_location: PINLoginLocation


__all__ = [
    "ActivatedDevice",
    "DeviceActivationResponse",
    "EmployeeRole",
    "PINLoginEmployee",
    "PINLoginLocation",
    "PINLoginResponse",
    "SessionRefreshResponse",
    "SwitchLocationResponse",
]
