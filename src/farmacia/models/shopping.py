"""Local shopping lists planned before receiving stock into inventory."""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, List, Optional
from uuid import uuid4

from pydantic import ConfigDict, Field, field_validator

from .base import WireModel

COST_EPSILON = 0.001


def _new_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ShoppingListStatus(str, Enum):
    DRAFT = "draft"
    READY = "ready"
    PARTIALLY_RECEIVED = "partiallyReceived"
    COMPLETED = "completed"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    ShoppingListStatus.DRAFT: "Draft",
    ShoppingListStatus.READY: "Ready",
    ShoppingListStatus.PARTIALLY_RECEIVED: "Partially Received",
    ShoppingListStatus.COMPLETED: "Completed",
}

EDITABLE_STATUSES = frozenset({ShoppingListStatus.DRAFT, ShoppingListStatus.READY})
RECEIVABLE_STATUSES = frozenset(
    {ShoppingListStatus.READY, ShoppingListStatus.PARTIALLY_RECEIVED}
)


class _Snapshot(WireModel):
    model_config = ConfigDict(frozen=True)

    def with_changes(self, **changes: Any):
        """Return a validated copy with ``changes`` applied (clamps re-run)."""

        data = self.model_dump()
        data.update(changes)
        return type(self).model_validate(data)


class ShoppingListItem(_Snapshot):
    id: str = Field(default_factory=_new_id)
    product_id: str
    product_name: str
    sku: Optional[str] = None
    planned_quantity: int = 1
    received_quantity: int = 0
    unit_cost: float = 0.0
    previous_cost: Optional[float] = None
    batch_number: Optional[str] = None
    expiry_date: Optional[date] = None
    notes: Optional[str] = None
    is_received: bool = False

    @field_validator("planned_quantity", mode="after")
    @classmethod
    def _clamp_planned(cls, value: int) -> int:
        return max(1, value)

    @field_validator("received_quantity", mode="after")
    @classmethod
    def _clamp_received(cls, value: int) -> int:
        return max(0, value)

    @field_validator("unit_cost", mode="after")
    @classmethod
    def _clamp_cost(cls, value: float) -> float:
        return max(0.0, value)

    @property
    def planned_total(self) -> float:
        return self.planned_quantity * self.unit_cost

    @property
    def received_total(self) -> float:
        return self.received_quantity * self.unit_cost

    @property
    def pending_quantity(self) -> int:
        return max(0, self.planned_quantity - self.received_quantity)

    @property
    def cost_changed(self) -> bool:
        if self.previous_cost is None:
            return False
        return abs(self.previous_cost - self.unit_cost) > COST_EPSILON

    @property
    def cost_change_description(self) -> Optional[str]:
        """Render e.g. ``↑ $10.00 → $12.00 (+20%)`` when the cost moved."""

        if not self.cost_changed:
            return None
        previous = self.previous_cost
        diff = self.unit_cost - previous
        pct = diff / previous * 100 if previous else 0.0
        arrow = "↑" if diff > 0 else "↓"
        return f"{arrow} ${previous:.2f} → ${self.unit_cost:.2f} ({pct:+.0f}%)"


class ShoppingList(_Snapshot):
    """A named, ordered set of items bought from one supplier for one location.

    Instances are immutable snapshots; the store swaps whole lists on every
    mutation so observers never see a half-applied edit.
    """

    id: str = Field(default_factory=_new_id)
    name: str
    status: ShoppingListStatus = ShoppingListStatus.DRAFT
    supplier_id: Optional[str] = None
    supplier_name: Optional[str] = None
    location_id: Optional[str] = None
    location_name: Optional[str] = None
    invoice_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    items: List[ShoppingListItem] = Field(default_factory=list)

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def received_count(self) -> int:
        return sum(1 for item in self.items if item.is_received)

    @property
    def pending_count(self) -> int:
        return sum(1 for item in self.items if not item.is_received)

    @property
    def planned_total(self) -> float:
        return sum(item.planned_total for item in self.items)

    @property
    def received_total(self) -> float:
        return sum(item.received_total for item in self.items if item.is_received)

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES

    @property
    def can_receive(self) -> bool:
        return self.status in RECEIVABLE_STATUSES and self.pending_count > 0

    @property
    def has_unreceived_items(self) -> bool:
        return any(not item.is_received for item in self.items)

    @property
    def is_active(self) -> bool:
        return self.status is not ShoppingListStatus.COMPLETED

    @property
    def items_with_cost_changes(self) -> List[ShoppingListItem]:
        return [item for item in self.items if item.cost_changed]

    def find_item(self, item_id: str) -> Optional[ShoppingListItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def touched(self, **changes: Any) -> "ShoppingList":
        changes.setdefault("updated_at", utcnow())
        return self.with_changes(**changes)

    def with_status_after_receive(self) -> "ShoppingList":
        """Recompute status from item receive flags; unchanged when none are received."""

        received = self.received_count
        if self.items and received == self.item_count:
            return self.with_changes(status=ShoppingListStatus.COMPLETED)
        if received > 0:
            return self.with_changes(status=ShoppingListStatus.PARTIALLY_RECEIVED)
        return self


class CostRefreshChange(WireModel):
    product_name: str
    old_cost: float
    new_cost: float
    percent_change: float
    is_increase: bool

    @property
    def description(self) -> str:
        arrow = "↑" if self.is_increase else "↓"
        return (
            f"{self.product_name} {arrow} ${self.old_cost:.2f} → "
            f"${self.new_cost:.2f} ({self.percent_change:+.0f}%)"
        )


class CostRefreshResult(WireModel):
    updated_count: int = 0
    not_found_count: int = 0
    changes: List[CostRefreshChange] = Field(default_factory=list)


__all__ = [
    "COST_EPSILON",
    "CostRefreshChange",
    "CostRefreshResult",
    "EDITABLE_STATUSES",
    "RECEIVABLE_STATUSES",
    "ShoppingList",
    "ShoppingListItem",
    "ShoppingListStatus",
    "utcnow",
]
