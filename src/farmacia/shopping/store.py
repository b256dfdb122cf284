"""Authoritative in-memory collection of shopping lists, persisted on every change."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional

from farmacia.db.shopping_lists import ShoppingListRepository
from farmacia.models.catalog import SupplierCatalogItem
from farmacia.models.shopping import (
    COST_EPSILON,
    CostRefreshResult,
    ShoppingList,
    ShoppingListItem,
    ShoppingListStatus,
)

from .errors import (
    InvalidListState,
    ShoppingListError,
    ShoppingListItemNotFound,
    ShoppingListNotFound,
)
from .reconcile import reconcile_costs

logger = logging.getLogger(__name__)

Observer = Callable[[List[ShoppingList]], None]
ItemMutator = Callable[[ShoppingListItem], ShoppingListItem]


def _ordered(lists: Iterable[ShoppingList]) -> List[ShoppingList]:
    return sorted(
        lists,
        key=lambda entry: (not entry.is_active, -entry.updated_at.timestamp()),
    )


class ShoppingListStore:
    """Owns every shopping list and enforces the status lifecycle.

    Lists move ``draft -> ready -> partiallyReceived -> completed``; the only
    way back is ``ready -> draft``. Each mutation replaces the whole list and
    saves it before the call returns, then observers receive the new snapshot.
    Unknown ids raise :class:`ShoppingListNotFound` /
    :class:`ShoppingListItemNotFound` and edits a status does not allow raise
    :class:`InvalidListState`.
    """

    def __init__(self, repository: ShoppingListRepository) -> None:
        self._repository = repository
        self._lock = threading.RLock()
        self._lists: Dict[str, ShoppingList] = {}
        self._observers: List[Observer] = []
        self._version = 0

    # ------------------------------------------------------------------
    # Observation

    @property
    def version(self) -> int:
        return self._version

    @property
    def lists(self) -> List[ShoppingList]:
        with self._lock:
            return _ordered(self._lists.values())

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """Register ``callback`` for post-mutation snapshots; returns an unsubscribe hook."""

        with self._lock:
            self._observers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._observers:
                    self._observers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        with self._lock:
            observers = list(self._observers)
            snapshot = _ordered(self._lists.values())
        for callback in observers:
            callback(snapshot)

    # ------------------------------------------------------------------
    # Loading and lookup

    def load_all(self) -> List[ShoppingList]:
        with self._lock:
            self._lists = {entry.id: entry for entry in self._repository.load_all()}
            self._version += 1
        logger.info("Loaded shopping lists", extra={"count": len(self._lists)})
        self._notify()
        return self.lists

    def get(self, list_id: str) -> ShoppingList:
        with self._lock:
            found = self._lists.get(list_id)
        if found is None:
            raise ShoppingListNotFound(list_id)
        return found

    def _commit(self, shopping_list: ShoppingList) -> ShoppingList:
        # Callers hold the lock; observers are notified once it is released.
        with self._lock:
            self._repository.save(shopping_list)
            self._lists[shopping_list.id] = shopping_list
            self._version += 1
        return shopping_list

    def _publish(self, shopping_list: ShoppingList) -> ShoppingList:
        self._commit(shopping_list)
        self._notify()
        return shopping_list

    def _modify(
        self,
        list_id: str,
        change: Callable[[ShoppingList], ShoppingList],
    ) -> ShoppingList:
        with self._lock:
            current = self.get(list_id)
            updated = self._commit(change(current))
        self._notify()
        return updated

    @staticmethod
    def _require_editable(shopping_list: ShoppingList, action: str) -> None:
        if not shopping_list.is_editable:
            raise InvalidListState(
                f"Cannot {action}: list is {shopping_list.status.label.lower()}",
                shopping_list.status,
            )

    # ------------------------------------------------------------------
    # List level operations

    def create_list(
        self,
        name: str,
        *,
        supplier_id: Optional[str] = None,
        supplier_name: Optional[str] = None,
        location_id: Optional[str] = None,
        location_name: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ShoppingList:
        cleaned = name.strip()
        if not cleaned:
            raise ShoppingListError("List name cannot be empty")
        created = ShoppingList(
            name=cleaned,
            supplier_id=supplier_id,
            supplier_name=supplier_name,
            location_id=location_id,
            location_name=location_name,
            notes=notes,
        )
        logger.info("Created shopping list", extra={"list_id": created.id})
        return self._publish(created)

    def update(self, shopping_list: ShoppingList) -> ShoppingList:
        """Replace a stored list wholesale (the id must already exist)."""

        with self._lock:
            self.get(shopping_list.id)
            updated = self._commit(shopping_list.touched())
        self._notify()
        return updated

    def rename(self, list_id: str, name: str) -> ShoppingList:
        cleaned = name.strip()
        if not cleaned:
            raise ShoppingListError("List name cannot be empty")

        def change(current: ShoppingList) -> ShoppingList:
            self._require_editable(current, "rename list")
            return current.touched(name=cleaned)

        return self._modify(list_id, change)

    def assign_supplier(
        self,
        list_id: str,
        supplier_id: Optional[str],
        supplier_name: Optional[str] = None,
    ) -> ShoppingList:
        def change(current: ShoppingList) -> ShoppingList:
            self._require_editable(current, "change supplier")
            return current.touched(supplier_id=supplier_id, supplier_name=supplier_name)

        return self._modify(list_id, change)

    def set_invoice_number(self, list_id: str, invoice_number: Optional[str]) -> ShoppingList:
        return self._modify(
            list_id, lambda current: current.touched(invoice_number=invoice_number or None)
        )

    def set_notes(self, list_id: str, notes: Optional[str]) -> ShoppingList:
        return self._modify(list_id, lambda current: current.touched(notes=notes or None))

    def mark_ready(self, list_id: str) -> ShoppingList:
        def change(current: ShoppingList) -> ShoppingList:
            if current.status is not ShoppingListStatus.DRAFT:
                raise InvalidListState(
                    "Only draft lists can be marked ready", current.status
                )
            return current.touched(status=ShoppingListStatus.READY)

        return self._modify(list_id, change)

    def reopen_as_draft(self, list_id: str) -> ShoppingList:
        def change(current: ShoppingList) -> ShoppingList:
            if current.status is not ShoppingListStatus.READY:
                raise InvalidListState(
                    "Only ready lists can be reopened as draft", current.status
                )
            return current.touched(status=ShoppingListStatus.DRAFT)

        return self._modify(list_id, change)

    def duplicate(self, list_id: str, new_name: str) -> ShoppingList:
        """Copy a list as a fresh draft; receive state and cost markers are dropped."""

        source = self.get(list_id)
        cleaned = new_name.strip()
        if not cleaned:
            raise ShoppingListError("List name cannot be empty")
        items = [
            ShoppingListItem(
                product_id=item.product_id,
                product_name=item.product_name,
                sku=item.sku,
                planned_quantity=item.planned_quantity,
                unit_cost=item.unit_cost,
            )
            for item in source.items
        ]
        copy = ShoppingList(
            name=cleaned,
            supplier_id=source.supplier_id,
            supplier_name=source.supplier_name,
            location_id=source.location_id,
            location_name=source.location_name,
            notes=source.notes,
            items=items,
        )
        logger.info(
            "Duplicated shopping list",
            extra={"list_id": copy.id, "source_list_id": list_id},
        )
        return self._publish(copy)

    def delete(self, list_id: str) -> None:
        with self._lock:
            self.get(list_id)
            self._repository.delete(list_id)
            del self._lists[list_id]
            self._version += 1
        logger.info("Deleted shopping list", extra={"list_id": list_id})
        self._notify()

    def delete_completed(self) -> int:
        with self._lock:
            doomed = [entry.id for entry in self._lists.values() if not entry.is_active]
            if not doomed:
                return 0
            self._repository.delete_many(doomed)
            for list_id in doomed:
                del self._lists[list_id]
            self._version += 1
        logger.info("Deleted completed shopping lists", extra={"count": len(doomed)})
        self._notify()
        return len(doomed)

    # ------------------------------------------------------------------
    # Item operations

    def add_item(self, list_id: str, item: ShoppingListItem) -> ShoppingList:
        def change(current: ShoppingList) -> ShoppingList:
            self._require_editable(current, "add items")
            return current.touched(items=[*current.items, item])

        return self._modify(list_id, change)

    def remove_items(self, list_id: str, indices: Iterable[int]) -> ShoppingList:
        positions = set(indices)

        def change(current: ShoppingList) -> ShoppingList:
            self._require_editable(current, "remove items")
            invalid = sorted(p for p in positions if p < 0 or p >= current.item_count)
            if invalid:
                raise InvalidListState(f"No items at positions {invalid}", current.status)
            kept = [item for index, item in enumerate(current.items) if index not in positions]
            return current.touched(items=kept)

        return self._modify(list_id, change)

    def update_item(self, list_id: str, item_id: str, mutator: ItemMutator) -> ShoppingList:
        """Apply ``mutator`` to one unreceived item.

        A ``unit_cost`` move larger than a tenth of a cent records the old
        cost in ``previous_cost`` unless the mutator set it itself. Identity
        and receipt fields always keep their stored values; receiving goes
        through ``mark_item_received``.
        """

        def change(current: ShoppingList) -> ShoppingList:
            if current.status is ShoppingListStatus.COMPLETED:
                raise InvalidListState("Completed lists cannot be edited", current.status)
            original = current.find_item(item_id)
            if original is None:
                raise ShoppingListItemNotFound(list_id, item_id)
            if original.is_received:
                raise InvalidListState("Received items cannot be edited", current.status)

            edited = mutator(original)
            changes = {
                "id": original.id,
                "product_id": original.product_id,
                "is_received": original.is_received,
                "received_quantity": original.received_quantity,
            }
            cost_moved = abs(edited.unit_cost - original.unit_cost) > COST_EPSILON
            if cost_moved and edited.previous_cost == original.previous_cost:
                changes["previous_cost"] = original.unit_cost
            edited = edited.with_changes(**changes)

            items = [edited if item.id == item_id else item for item in current.items]
            return current.touched(items=items)

        return self._modify(list_id, change)

    def set_unit_cost(self, list_id: str, item_id: str, unit_cost: float) -> ShoppingList:
        return self.update_item(
            list_id, item_id, lambda item: item.with_changes(unit_cost=unit_cost)
        )

    def mark_item_received(
        self,
        list_id: str,
        item_id: str,
        received_quantity: int,
        *,
        batch_number: Optional[str] = None,
        expiry_date=None,
    ) -> ShoppingList:
        def change(current: ShoppingList) -> ShoppingList:
            if not current.can_receive:
                raise InvalidListState(
                    f"List cannot receive items while {current.status.label.lower()}",
                    current.status,
                )
            original = current.find_item(item_id)
            if original is None:
                raise ShoppingListItemNotFound(list_id, item_id)
            if original.is_received:
                raise InvalidListState("Item has already been received", current.status)

            updates = {"is_received": True, "received_quantity": received_quantity}
            if batch_number:
                updates["batch_number"] = batch_number
            if expiry_date is not None:
                updates["expiry_date"] = expiry_date
            received = original.with_changes(**updates)
            items = [received if item.id == item_id else item for item in current.items]
            return current.touched(items=items).with_status_after_receive()

        return self._modify(list_id, change)

    def apply_cost_reconciliation(
        self,
        list_id: str,
        catalog: Iterable[SupplierCatalogItem],
    ) -> CostRefreshResult:
        with self._lock:
            current = self.get(list_id)
            reconciled, result = reconcile_costs(current, catalog)
            if result.updated_count:
                self._commit(reconciled.touched())
        if result.updated_count:
            self._notify()
        logger.info(
            "Reconciled shopping list costs",
            extra={
                "list_id": list_id,
                "updated": result.updated_count,
                "not_found": result.not_found_count,
            },
        )
        return result

    # ------------------------------------------------------------------
    # Queries

    @property
    def active_lists(self) -> List[ShoppingList]:
        return [entry for entry in self.lists if entry.is_active]

    @property
    def draft_lists(self) -> List[ShoppingList]:
        return [entry for entry in self.lists if entry.status is ShoppingListStatus.DRAFT]

    @property
    def completed_lists(self) -> List[ShoppingList]:
        return [entry for entry in self.lists if not entry.is_active]

    @property
    def total_pending_items(self) -> int:
        return sum(entry.pending_count for entry in self.active_lists)


__all__ = ["ShoppingListStore"]
