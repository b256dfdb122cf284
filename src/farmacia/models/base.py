"""Shared pydantic configuration for backend payloads."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for payloads exchanged with the backend (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def decimal_to_float(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """Coerce backend decimals (often sent as strings) to floats."""

    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


__all__ = ["WireModel", "decimal_to_float"]
