"""Response envelope decoding and HTTP status classification.

Backend responses come in two shapes: the standard ``{success, data, error, message}``
envelope, or the payload itself. :func:`decode_payload` tries them in a fixed order
and reports which one matched as a tagged value, so callers never depend on
exception-driven control flow. :func:`classify_response` turns an HTTP status plus raw
body into either the decoded payload or a typed :class:`NetworkError`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .errors import (
    AccountLocked,
    DecodeFailure,
    DeviceNotActivated,
    HTTPStatusError,
    NoResponseBody,
    ServerError,
    SessionExpired,
    Unauthorized,
)

T = TypeVar("T")

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"
INTERNAL_SERVER_ERROR_MESSAGE = "Internal server error"


class APIResponse(BaseModel):
    """Standard success envelope. ``data`` stays raw until validated against ``T``."""

    success: bool
    data: Any = None
    error: Optional[str] = None
    message: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @property
    def display_message(self) -> str:
        return self.message or self.error or UNKNOWN_ERROR_MESSAGE


class APIErrorResponse(BaseModel):
    """Standard error envelope."""

    success: bool = False
    error: Optional[str] = None
    message: Optional[str] = None
    status_code: Optional[int] = Field(default=None, alias="statusCode")
    locked_until: Optional[str] = Field(default=None, alias="lockedUntil")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @property
    def display_message(self) -> str:
        return self.message or self.error or UNKNOWN_ERROR_MESSAGE


class EmptyResponse(BaseModel):
    """Placeholder payload for calls whose body is discarded."""

    model_config = ConfigDict(extra="ignore")


@dataclass(frozen=True)
class Enveloped(Generic[T]):
    value: T


@dataclass(frozen=True)
class Bare(Generic[T]):
    value: T


@dataclass(frozen=True)
class Rejected:
    """A well-formed envelope reporting a server-side failure."""

    message: str


@dataclass(frozen=True)
class Failed:
    reason: str


EnvelopeResult = Union[Enveloped[T], Bare[T], Rejected, Failed]

_ENVELOPE_ADAPTER = TypeAdapter(APIResponse)
_DATETIME_ADAPTER = TypeAdapter(datetime)


def _parse_json(raw_body: bytes | str) -> tuple[bool, Any, str]:
    if isinstance(raw_body, bytes):
        try:
            raw_body = raw_body.decode("utf-8")
        except UnicodeDecodeError as exc:
            return False, None, f"body is not UTF-8: {exc}"
    if not raw_body.strip():
        return False, None, "empty body"
    try:
        return True, json.loads(raw_body), ""
    except json.JSONDecodeError as exc:
        return False, None, f"invalid JSON: {exc}"


def _as_envelope(parsed: Any) -> Optional[APIResponse]:
    if not isinstance(parsed, dict) or not isinstance(parsed.get("success"), bool):
        return None
    try:
        return _ENVELOPE_ADAPTER.validate_python(parsed)
    except ValidationError:
        return None


def _validate(adapter: TypeAdapter, value: Any) -> tuple[bool, Any, str]:
    try:
        return True, adapter.validate_python(value), ""
    except ValidationError as exc:
        return False, None, f"{exc.error_count()} validation error(s): {exc.errors()[0]['msg']}"


def decode_payload(raw_body: bytes | str, adapter: TypeAdapter) -> EnvelopeResult:
    """Decode ``raw_body`` as an envelope around ``T``, else as a bare ``T``."""

    ok, parsed, reason = _parse_json(raw_body)
    if not ok:
        return Failed(reason)

    envelope = _as_envelope(parsed)
    if envelope is not None:
        if not envelope.success:
            return Rejected(envelope.display_message)
        if envelope.data is not None:
            valid, value, _ = _validate(adapter, envelope.data)
            if valid:
                return Enveloped(value)

    valid, value, reason = _validate(adapter, parsed)
    if valid:
        return Bare(value)

    if envelope is not None and (envelope.error or envelope.message):
        return Rejected(envelope.display_message)
    return Failed(reason)


def parse_error_envelope(raw_body: bytes | str) -> Optional[APIErrorResponse]:
    """Return the error envelope in ``raw_body`` or ``None`` when it is not one."""

    ok, parsed, _ = _parse_json(raw_body)
    if not ok or not isinstance(parsed, dict):
        return None
    try:
        return APIErrorResponse.model_validate(parsed)
    except ValidationError:
        return None


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, returning ``None`` when it is not one."""

    if not value:
        return None
    try:
        return _DATETIME_ADAPTER.validate_python(value)
    except ValidationError:
        return None


def classify_response(
    status_code: int,
    raw_body: bytes | str,
    adapter: TypeAdapter,
    *,
    expects_body: bool = True,
) -> Any:
    """Return the decoded payload for a successful response or raise a typed error."""

    if 200 <= status_code <= 299:
        if not raw_body or not raw_body.strip():
            if expects_body:
                raise NoResponseBody()
            return None

        result = decode_payload(raw_body, adapter)
        if isinstance(result, (Enveloped, Bare)):
            return result.value if expects_body else None
        if isinstance(result, Rejected):
            raise ServerError(result.message)
        raise DecodeFailure(result.reason)

    error = parse_error_envelope(raw_body)

    if status_code == 401:
        message = (error.message or "").lower() if error else ""
        if "session" in message:
            raise SessionExpired()
        if "device" in message:
            raise DeviceNotActivated()
        raise Unauthorized()

    if status_code == 403:
        if error is not None and error.locked_until is not None:
            raise AccountLocked(until=parse_timestamp(error.locked_until))
        raise Unauthorized()

    if 400 <= status_code <= 499:
        raise HTTPStatusError(status_code, error.display_message if error else None)

    if 500 <= status_code <= 599:
        raise ServerError(error.display_message if error else INTERNAL_SERVER_ERROR_MESSAGE)

    raise HTTPStatusError(status_code, None)


__all__ = [
    "APIErrorResponse",
    "APIResponse",
    "Bare",
    "EmptyResponse",
    "EnvelopeResult",
    "Enveloped",
    "Failed",
    "Rejected",
    "classify_response",
    "decode_payload",
    "parse_error_envelope",
    "parse_timestamp",
]
