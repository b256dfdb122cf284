"""Backend-facing shopping list workflows: cost refresh and receiving."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence

from farmacia.models.catalog import (
    Supplier,
    SupplierCatalogItem,
    SupplierCatalogResponse,
    SupplierListResponse,
)
from farmacia.models.inventory import ReceivingCreateResponse
from farmacia.models.requests import ReceiveInventoryRequest
from farmacia.models.shopping import CostRefreshResult, ShoppingList
from farmacia.network.client import APIClient, TokenProvider
from farmacia.network.endpoints import Operation, endpoint
from farmacia.network.errors import NetworkError

from .errors import InvalidListState, ShoppingListItemNotFound
from .store import ShoppingListStore

logger = logging.getLogger(__name__)

NOTES_PREFIX = "Shopping List: "


@dataclass(frozen=True)
class ReceiveSelection:
    item_id: str
    received_quantity: Optional[int] = None
    batch_number: Optional[str] = None
    expiry_date: Optional[date] = None


@dataclass(frozen=True)
class FailedReceiveItem:
    product_name: str
    error: str


@dataclass
class ReceiveOutcome:
    submitted: List[str] = field(default_factory=list)
    failed: List[FailedReceiveItem] = field(default_factory=list)

    @property
    def submitted_count(self) -> int:
        return len(self.submitted)

    @property
    def failed_count(self) -> int:
        return len(self.failed)


class ShoppingListService:
    """Glue between :class:`ShoppingListStore` and the API client.

    The store never talks to the network; everything that needs supplier
    prices or posts receivings goes through here.
    """

    def __init__(
        self,
        store: ShoppingListStore,
        client: APIClient,
        session: Optional[TokenProvider] = None,
    ) -> None:
        self.store = store
        self.client = client
        self.session = session

    def _current_location(self, shopping_list: Optional[ShoppingList] = None) -> Optional[str]:
        location_id = self.session.location_id if self.session is not None else None
        if not location_id and shopping_list is not None:
            location_id = shopping_list.location_id
        return location_id or None

    def fetch_supplier_catalog(self, supplier_id: str) -> List[SupplierCatalogItem]:
        query = {}
        location_id = self._current_location()
        if location_id:
            query["locationId"] = location_id
        response = self.client.request(
            endpoint(Operation.SUPPLIER_CATALOG, supplier_id=supplier_id),
            SupplierCatalogResponse,
            query=query or None,
        )
        return response.products

    def refresh_costs_from_supplier(self, list_id: str) -> CostRefreshResult:
        shopping_list = self.store.get(list_id)
        if not shopping_list.supplier_id:
            raise InvalidListState("No supplier assigned to this list", shopping_list.status)
        catalog = self.fetch_supplier_catalog(shopping_list.supplier_id)
        return self.store.apply_cost_reconciliation(list_id, catalog)

    def list_suppliers(self, active_only: bool = True) -> List[Supplier]:
        response = self.client.request(endpoint(Operation.LIST_SUPPLIERS), SupplierListResponse)
        if not active_only:
            return response.data
        return [supplier for supplier in response.data if supplier.is_active is not False]

    def assign_supplier(self, list_id: str, supplier: Supplier) -> ShoppingList:
        return self.store.assign_supplier(list_id, supplier.id, supplier.name)

    def receive_items(
        self,
        list_id: str,
        selections: Sequence[ReceiveSelection],
        *,
        received_by: Optional[str] = None,
    ) -> ReceiveOutcome:
        """Post one receiving per selected item and mark successes in the store.

        Failures are collected per item; a failed post never stops the rest.
        """

        shopping_list = self.store.get(list_id)
        if not shopping_list.supplier_id:
            raise InvalidListState("No supplier assigned to this list", shopping_list.status)
        location_id = self._current_location(shopping_list)
        if not location_id:
            raise InvalidListState("No location selected", shopping_list.status)
        if not shopping_list.can_receive:
            raise InvalidListState(
                f"List cannot receive items while {shopping_list.status.label.lower()}",
                shopping_list.status,
            )

        pending = []
        for selection in selections:
            item = shopping_list.find_item(selection.item_id)
            if item is None:
                raise ShoppingListItemNotFound(list_id, selection.item_id)
            if item.is_received:
                raise InvalidListState(
                    f"{item.product_name} has already been received", shopping_list.status
                )
            pending.append((item, selection))

        notes = f"{NOTES_PREFIX}{shopping_list.notes}" if shopping_list.notes else None
        outcome = ReceiveOutcome()
        for item, selection in pending:
            quantity = (
                selection.received_quantity
                if selection.received_quantity is not None
                else item.planned_quantity
            )
            request = ReceiveInventoryRequest(
                location_id=location_id,
                product_id=item.product_id,
                quantity=quantity,
                unit_cost=item.unit_cost,
                supplier_id=shopping_list.supplier_id,
                invoice_number=shopping_list.invoice_number or None,
                batch_number=selection.batch_number or None,
                expiry_date=selection.expiry_date,
                received_by=received_by,
                notes=notes,
                sync_to_square=True,
            )
            try:
                self.client.request(
                    endpoint(Operation.RECEIVE_INVENTORY),
                    ReceivingCreateResponse,
                    body=request,
                )
            except NetworkError as exc:
                logger.warning(
                    "Receiving failed for %s",
                    item.product_name,
                    extra={"list_id": list_id, "error_kind": exc.kind.value},
                )
                outcome.failed.append(FailedReceiveItem(item.product_name, exc.description))
                continue

            self.store.mark_item_received(
                list_id,
                item.id,
                quantity,
                batch_number=selection.batch_number,
                expiry_date=selection.expiry_date,
            )
            outcome.submitted.append(item.id)

        logger.info(
            "Received shopping list items",
            extra={
                "list_id": list_id,
                "submitted": outcome.submitted_count,
                "failed": outcome.failed_count,
            },
        )
        return outcome


__all__ = [
    "FailedReceiveItem",
    "NOTES_PREFIX",
    "ReceiveOutcome",
    "ReceiveSelection",
    "ShoppingListService",
]
