"""Device activation, PIN sessions and the tokens the API client reads."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional

from farmacia.config import (
    PIN_MAX_LENGTH,
    PIN_MIN_LENGTH,
    SESSION_REFRESH_THRESHOLD_SECONDS,
    Settings,
)
from farmacia.models.auth import (
    DeviceActivationResponse,
    EmployeeRole,
    PINLoginLocation,
    PINLoginResponse,
    SessionRefreshResponse,
    SwitchLocationResponse,
)
from farmacia.models.requests import (
    DeviceActivationRequest,
    PINLoginRequest,
    SwitchLocationRequest,
)
from farmacia.network.client import APIClient
from farmacia.network.endpoints import Operation, endpoint
from farmacia.network.errors import NetworkError, SessionExpired, Unauthorized

logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    LOADING = "loading"
    DEVICE_NOT_ACTIVATED = "device_not_activated"
    NEEDS_PIN = "needs_pin"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class SessionEmployee:
    id: str
    name: str
    role: EmployeeRole = EmployeeRole.CASHIER


@dataclass(frozen=True)
class SessionLocation:
    id: str
    name: str
    role: EmployeeRole = EmployeeRole.CASHIER

    @classmethod
    def from_login(cls, location: PINLoginLocation) -> "SessionLocation":
        return cls(
            id=location.location_id,
            name=location.location_name,
            role=EmployeeRole.parse(location.role),
        )


@dataclass
class AuthSession:
    """Mutable token holder shared by every API client.

    Clients only read from it; :class:`AuthManager` is the sole writer.
    """

    primary_token: Optional[str] = None
    session_token: Optional[str] = None
    employee: Optional[SessionEmployee] = None
    current_location: Optional[SessionLocation] = None
    available_locations: List[SessionLocation] = field(default_factory=list)
    session_expires_at: Optional[datetime] = None
    default_location_id: Optional[str] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthSession":
        return cls(
            primary_token=settings.device_token,
            session_token=settings.session_token,
            default_location_id=settings.location_id,
        )

    @property
    def location_id(self) -> Optional[str]:
        if self.current_location is not None:
            return self.current_location.id
        return self.default_location_id

    @property
    def employee_id(self) -> Optional[str]:
        return self.employee.id if self.employee is not None else None

    def clear(self) -> None:
        with self._lock:
            self.session_token = None
            self.employee = None
            self.current_location = None
            self.available_locations = []
            self.session_expires_at = None


def _as_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def validate_pin(pin: str) -> str:
    cleaned = pin.strip()
    if not cleaned.isdigit() or not PIN_MIN_LENGTH <= len(cleaned) <= PIN_MAX_LENGTH:
        raise ValueError(f"PIN must be {PIN_MIN_LENGTH}-{PIN_MAX_LENGTH} digits")
    return cleaned


class AuthManager:
    """Drives the activation and PIN-login lifecycle for one device."""

    def __init__(self, client: APIClient, session: AuthSession) -> None:
        self.client = client
        self.session = session
        self.state = AuthState.LOADING

    def check_auth_status(self) -> AuthState:
        if not self.session.primary_token:
            self.state = AuthState.DEVICE_NOT_ACTIVATED
        elif self.session.session_token:
            self.state = AuthState.AUTHENTICATED
        else:
            self.state = AuthState.NEEDS_PIN
        return self.state

    def activate_device(self, email: str, password: str, device_name: str) -> DeviceActivationResponse:
        request = DeviceActivationRequest(email=email, password=password, device_name=device_name)
        response = self.client.request(
            endpoint(Operation.DEVICE_ACTIVATE), DeviceActivationResponse, body=request
        )
        self.session.primary_token = response.device_token
        self.state = AuthState.NEEDS_PIN
        logger.info("Device activated")
        return response

    def login_with_pin(self, pin: str, location_id: Optional[str] = None) -> SessionEmployee:
        request = PINLoginRequest(pin=validate_pin(pin), location_id=location_id)
        response = self.client.request(endpoint(Operation.PIN_LOGIN), PINLoginResponse, body=request)

        current = (
            SessionLocation.from_login(response.current_location)
            if response.current_location is not None
            else None
        )
        if current is not None:
            role = current.role
        elif response.accessible_locations:
            role = EmployeeRole.parse(response.accessible_locations[0].role)
        else:
            role = EmployeeRole.CASHIER

        employee = SessionEmployee(id=response.employee.id, name=response.employee.name, role=role)
        with self.session._lock:
            self.session.session_token = response.session_token
            self.session.employee = employee
            self.session.current_location = current
            self.session.available_locations = [
                SessionLocation.from_login(location) for location in response.accessible_locations
            ]
            self.session.session_expires_at = _as_aware(response.expires_at)
        self.state = AuthState.AUTHENTICATED
        logger.info("PIN login succeeded", extra={"employee_id": employee.id})
        return employee

    def switch_location(self, location_id: str) -> SessionLocation:
        response = self.client.request(
            endpoint(Operation.SWITCH_LOCATION),
            SwitchLocationResponse,
            body=SwitchLocationRequest(location_id=location_id),
        )
        location = SessionLocation.from_login(response.current_location)
        with self.session._lock:
            self.session.current_location = location
            if self.session.employee is not None:
                employee = self.session.employee
                self.session.employee = SessionEmployee(employee.id, employee.name, location.role)
        logger.info("Switched location", extra={"location_id": location.id})
        return location

    def needs_refresh(self, now: Optional[datetime] = None) -> bool:
        expires_at = self.session.session_expires_at
        if expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return expires_at - now <= timedelta(seconds=SESSION_REFRESH_THRESHOLD_SECONDS)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        expires_at = self.session.session_expires_at
        if expires_at is None:
            return False
        return expires_at <= (now or datetime.now(timezone.utc))

    def refresh_session(self) -> None:
        try:
            response = self.client.request(endpoint(Operation.PIN_REFRESH), SessionRefreshResponse)
        except (Unauthorized, SessionExpired):
            self._clear_session()
            raise
        with self.session._lock:
            self.session.session_token = response.session_token
            self.session.session_expires_at = _as_aware(response.expires_at)
        logger.info("Session refreshed")

    def validate_session(self, now: Optional[datetime] = None) -> AuthState:
        """Drop an expired session, or refresh one that is about to expire."""

        if self.state is not AuthState.AUTHENTICATED or not self.session.session_token:
            return self.state
        if self.is_expired(now):
            self._clear_session()
        elif self.needs_refresh(now):
            self.refresh_session()
        return self.state

    def logout(self) -> None:
        """End the session on the server; local state is cleared regardless."""

        try:
            self.client.request_void(endpoint(Operation.LOGOUT))
        except NetworkError as exc:
            logger.warning("Logout request failed", extra={"error_kind": exc.kind.value})
        finally:
            self._clear_session()

    def deactivate_device(self) -> None:
        self.session.primary_token = None
        self._clear_session()
        self.state = AuthState.DEVICE_NOT_ACTIVATED

    def _clear_session(self) -> None:
        self.session.clear()
        self.state = AuthState.NEEDS_PIN


__all__ = [
    "AuthManager",
    "AuthSession",
    "AuthState",
    "SessionEmployee",
    "SessionLocation",
    "validate_pin",
]
