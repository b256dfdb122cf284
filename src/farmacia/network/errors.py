"""Typed errors raised by the API client."""

from __future__ import annotations

import asyncio
from datetime import datetime
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Closed set of failure kinds produced by the transport and classifier."""

    INVALID_REQUEST = "invalid_request"
    NO_RESPONSE_BODY = "no_response_body"
    DECODE_FAILURE = "decode_failure"
    ENCODE_FAILURE = "encode_failure"
    HTTP_STATUS = "http_status"
    UNAUTHORIZED = "unauthorized"
    DEVICE_NOT_ACTIVATED = "device_not_activated"
    SESSION_EXPIRED = "session_expired"
    PIN_REQUIRED = "pin_required"
    ACCOUNT_LOCKED = "account_locked"
    NETWORK_UNAVAILABLE = "network_unavailable"
    TIMEOUT = "timeout"
    SERVER_ERROR = "server_error"
    UNKNOWN = "unknown"


_RECOVERABLE = frozenset(
    {
        ErrorKind.SESSION_EXPIRED,
        ErrorKind.PIN_REQUIRED,
        ErrorKind.DEVICE_NOT_ACTIVATED,
        ErrorKind.ACCOUNT_LOCKED,
        ErrorKind.NETWORK_UNAVAILABLE,
        ErrorKind.TIMEOUT,
    }
)

_AUTH_KINDS = frozenset(
    {
        ErrorKind.UNAUTHORIZED,
        ErrorKind.DEVICE_NOT_ACTIVATED,
        ErrorKind.SESSION_EXPIRED,
        ErrorKind.PIN_REQUIRED,
        ErrorKind.ACCOUNT_LOCKED,
    }
)


class NetworkError(Exception):
    """Base class for every failure surfaced by the API client."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    @property
    def description(self) -> str:
        """Short, user-facing message."""

        return str(self)

    @property
    def is_recoverable(self) -> bool:
        """True when waiting, retrying, or re-authenticating can fix the failure."""

        return self.kind in _RECOVERABLE

    @property
    def requires_reauthentication(self) -> bool:
        return self.kind in _AUTH_KINDS and self.kind is not ErrorKind.ACCOUNT_LOCKED

    @property
    def invites_retry(self) -> bool:
        return self.kind in (ErrorKind.NETWORK_UNAVAILABLE, ErrorKind.TIMEOUT)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NetworkError):
            return NotImplemented
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class InvalidRequest(NetworkError):
    kind = ErrorKind.INVALID_REQUEST

    def __init__(self, reason: str = "Invalid URL") -> None:
        super().__init__(reason)
        self.reason = reason


class NoResponseBody(NetworkError):
    kind = ErrorKind.NO_RESPONSE_BODY

    def __init__(self) -> None:
        super().__init__("No data received from server")


class DecodeFailure(NetworkError):
    kind = ErrorKind.DECODE_FAILURE

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to decode response: {reason}")
        self.reason = reason


class EncodeFailure(NetworkError):
    kind = ErrorKind.ENCODE_FAILURE

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to encode request: {reason}")
        self.reason = reason


class HTTPStatusError(NetworkError):
    kind = ErrorKind.HTTP_STATUS

    def __init__(self, status_code: int, message: Optional[str] = None) -> None:
        super().__init__(status_code, message)
        self.status_code = status_code
        self.message = message

    def __str__(self) -> str:
        return self.message or f"HTTP Error: {self.status_code}"


class Unauthorized(NetworkError):
    kind = ErrorKind.UNAUTHORIZED

    def __init__(self) -> None:
        super().__init__("Unauthorized access")


class DeviceNotActivated(NetworkError):
    kind = ErrorKind.DEVICE_NOT_ACTIVATED

    def __init__(self) -> None:
        super().__init__("Device is not activated")


class SessionExpired(NetworkError):
    kind = ErrorKind.SESSION_EXPIRED

    def __init__(self) -> None:
        super().__init__("Session has expired. Please login again.")


class PinRequired(NetworkError):
    kind = ErrorKind.PIN_REQUIRED

    def __init__(self) -> None:
        super().__init__("PIN verification required")


class AccountLocked(NetworkError):
    kind = ErrorKind.ACCOUNT_LOCKED

    def __init__(self, until: Optional[datetime] = None) -> None:
        super().__init__(until)
        self.until = until

    def __str__(self) -> str:
        if self.until is not None:
            return f"Account locked until {self.until.strftime('%H:%M')}"
        return "Account is temporarily locked"


class NetworkUnavailable(NetworkError):
    kind = ErrorKind.NETWORK_UNAVAILABLE

    def __init__(self) -> None:
        super().__init__("Network connection unavailable")


class Timeout(NetworkError):
    kind = ErrorKind.TIMEOUT

    def __init__(self) -> None:
        super().__init__("Request timed out")


class ServerError(NetworkError):
    kind = ErrorKind.SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnknownError(NetworkError):
    kind = ErrorKind.UNKNOWN

    def __init__(self, cause: BaseException) -> None:
        super().__init__(str(cause) or type(cause).__name__)
        self.cause = cause


def is_cancellation(exc: BaseException) -> bool:
    """Return True for cancelled work, which must never be shown to the user."""

    if isinstance(exc, asyncio.CancelledError):
        return True
    if isinstance(exc, UnknownError) and isinstance(exc.cause, asyncio.CancelledError):
        return True
    return "cancel" in str(exc).lower()


__all__ = [
    "AccountLocked",
    "DecodeFailure",
    "DeviceNotActivated",
    "EncodeFailure",
    "ErrorKind",
    "HTTPStatusError",
    "InvalidRequest",
    "NetworkError",
    "NetworkUnavailable",
    "NoResponseBody",
    "PinRequired",
    "ServerError",
    "SessionExpired",
    "Timeout",
    "Unauthorized",
    "UnknownError",
    "is_cancellation",
]
