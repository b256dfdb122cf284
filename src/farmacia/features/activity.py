"""Location-wide activity feed merging receivings and adjustments."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import List

from farmacia.models.inventory import (
    AdjustmentListResponse,
    InventoryAdjustment,
    InventoryReceiving,
    ReceivingListResponse,
)
from farmacia.network.client import AsyncAPIClient
from farmacia.network.endpoints import Operation, endpoint
from farmacia.network.errors import NetworkError

from .base import LoadState, report_primary_failure

UNKNOWN_PRODUCT = "Unknown Product"
_NEGATIVE_ADJUSTMENTS = {"DAMAGE", "THEFT", "EXPIRED", "WRITE_OFF"}


@dataclass(frozen=True)
class ActivityEntry:
    id: str
    product_name: str
    title: str
    subtitle: str
    date: datetime
    quantity: int


def _from_receiving(receiving: InventoryReceiving) -> ActivityEntry:
    subtitle = ""
    if receiving.supplier is not None:
        subtitle = receiving.supplier.name
    elif receiving.invoice_number:
        subtitle = receiving.invoice_number
    return ActivityEntry(
        id=f"rcv-{receiving.id}",
        product_name=receiving.product.display_name if receiving.product else UNKNOWN_PRODUCT,
        title=f"Received {receiving.quantity} units",
        subtitle=subtitle,
        date=receiving.received_at,
        quantity=receiving.quantity,
    )


def _from_adjustment(adjustment: InventoryAdjustment) -> ActivityEntry:
    quantity = adjustment.quantity
    if adjustment.type.upper() in _NEGATIVE_ADJUSTMENTS:
        quantity = -abs(quantity)
    return ActivityEntry(
        id=f"adj-{adjustment.id}",
        product_name=adjustment.product.display_name if adjustment.product else UNKNOWN_PRODUCT,
        title=adjustment.type.replace("_", " ").title(),
        subtitle=adjustment.reason or adjustment.notes or "",
        date=adjustment.adjusted_at,
        quantity=quantity,
    )


class ActivityViewModel:
    def __init__(self, client: AsyncAPIClient) -> None:
        self.client = client
        self.state = LoadState()
        self.receivings: List[InventoryReceiving] = []
        self.adjustments: List[InventoryAdjustment] = []

    @property
    def activity(self) -> List[ActivityEntry]:
        entries = [_from_receiving(r) for r in self.receivings]
        entries.extend(_from_adjustment(a) for a in self.adjustments)
        return sorted(entries, key=lambda entry: entry.date, reverse=True)

    async def load_all(self, location_id: str) -> None:
        """Fetch both feeds concurrently; each keeps its old data if its call fails."""

        self.state.begin()
        try:
            await asyncio.gather(
                self._load_receivings(location_id),
                self._load_adjustments(location_id),
            )
        finally:
            self.state.finish()

    async def _load_receivings(self, location_id: str) -> None:
        try:
            response = await self.client.request(
                endpoint(Operation.LIST_RECEIVINGS_BY_LOCATION, location_id=location_id),
                ReceivingListResponse,
            )
        except NetworkError as exc:
            report_primary_failure(self.state, exc, "Failed to load receivings")
            return
        self.receivings = response.data

    async def _load_adjustments(self, location_id: str) -> None:
        try:
            response = await self.client.request(
                endpoint(Operation.ADJUSTMENTS_BY_LOCATION, location_id=location_id),
                AdjustmentListResponse,
            )
        except NetworkError as exc:
            report_primary_failure(self.state, exc, "Failed to load adjustments")
            return
        self.adjustments = response.data


__all__ = ["ActivityEntry", "ActivityViewModel"]
