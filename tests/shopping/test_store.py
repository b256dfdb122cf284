"""Behavioural tests for the shopping list store."""

from __future__ import annotations

from datetime import date

import pytest

from farmacia.models.catalog import SupplierCatalogItem
from farmacia.models.shopping import ShoppingListStatus
from farmacia.shopping.errors import (
    InvalidListState,
    ShoppingListError,
    ShoppingListItemNotFound,
    ShoppingListNotFound,
)
from farmacia.shopping.store import ShoppingListStore


def _ready_list(store, *items):
    created = store.create_list("Pedido semanal", supplier_id="S1", supplier_name="Distribuidora")
    for item in items:
        store.add_item(created.id, item)
    return store.mark_ready(created.id)


def test_create_list_starts_as_empty_draft(store):
    created = store.create_list("  Semanal  ", location_id="LOC1")

    assert created.status is ShoppingListStatus.DRAFT
    assert created.name == "Semanal"
    assert created.items == []
    assert store.get(created.id) == created


def test_create_list_rejects_blank_names(store):
    with pytest.raises(ShoppingListError):
        store.create_list("   ")


def test_receive_everything_completes_the_list(store, make_item):
    first, second = make_item("P1", planned_quantity=10), make_item("P2", planned_quantity=5)
    shopping_list = _ready_list(store, first, second)

    partial = store.mark_item_received(shopping_list.id, first.id, 10)
    assert partial.status is ShoppingListStatus.PARTIALLY_RECEIVED
    assert partial.received_count == 1
    assert partial.can_receive

    done = store.mark_item_received(shopping_list.id, second.id, 4)
    assert done.status is ShoppingListStatus.COMPLETED
    assert done.find_item(second.id).received_quantity == 4
    assert not done.can_receive
    assert not done.is_editable


def test_draft_cannot_receive(store, make_item):
    item = make_item()
    created = store.create_list("Borrador")
    store.add_item(created.id, item)

    with pytest.raises(InvalidListState):
        store.mark_item_received(created.id, item.id, 1)
    assert store.get(created.id).find_item(item.id).is_received is False


def test_receiving_twice_is_rejected(store, make_item):
    first, second = make_item("P1"), make_item("P2")
    shopping_list = _ready_list(store, first, second)
    store.mark_item_received(shopping_list.id, first.id, 1)

    with pytest.raises(InvalidListState):
        store.mark_item_received(shopping_list.id, first.id, 1)


def test_receive_records_batch_and_expiry(store, make_item):
    item = make_item()
    shopping_list = _ready_list(store, item)

    updated = store.mark_item_received(
        shopping_list.id, item.id, 1, batch_number="L-42", expiry_date=date(2027, 3, 1)
    )
    received = updated.find_item(item.id)
    assert received.batch_number == "L-42"
    assert received.expiry_date == date(2027, 3, 1)


def test_edits_blocked_after_receiving_starts(store, make_item):
    first, second = make_item("P1"), make_item("P2")
    shopping_list = _ready_list(store, first, second)
    store.mark_item_received(shopping_list.id, first.id, 1)

    with pytest.raises(InvalidListState):
        store.add_item(shopping_list.id, make_item("P3"))
    with pytest.raises(InvalidListState):
        store.remove_items(shopping_list.id, [1])
    with pytest.raises(InvalidListState):
        store.rename(shopping_list.id, "Otro")
    with pytest.raises(InvalidListState):
        store.assign_supplier(shopping_list.id, "S2", "Otro")
    with pytest.raises(InvalidListState):
        store.update_item(shopping_list.id, first.id, lambda item: item.with_changes(notes="x"))


def test_unreceived_items_stay_editable_while_partially_received(store, make_item):
    first, second = make_item("P1"), make_item("P2", unit_cost=5.0)
    shopping_list = _ready_list(store, first, second)
    store.mark_item_received(shopping_list.id, first.id, 1)

    updated = store.set_unit_cost(shopping_list.id, second.id, 6.0)
    assert updated.find_item(second.id).unit_cost == 6.0


def test_completed_lists_reject_item_edits(store, make_item):
    item = make_item()
    shopping_list = _ready_list(store, item)
    store.mark_item_received(shopping_list.id, item.id, 1)

    with pytest.raises(InvalidListState):
        store.update_item(shopping_list.id, item.id, lambda current: current)


def test_invoice_and_notes_editable_in_any_status(store, make_item):
    item = make_item()
    shopping_list = _ready_list(store, item)
    store.mark_item_received(shopping_list.id, item.id, 1)

    updated = store.set_invoice_number(shopping_list.id, "FAC-001")
    assert updated.invoice_number == "FAC-001"
    assert store.set_notes(shopping_list.id, "").notes is None


def test_status_transitions(store):
    created = store.create_list("Semanal")

    with pytest.raises(InvalidListState):
        store.reopen_as_draft(created.id)

    ready = store.mark_ready(created.id)
    assert ready.status is ShoppingListStatus.READY
    with pytest.raises(InvalidListState):
        store.mark_ready(created.id)

    assert store.reopen_as_draft(created.id).status is ShoppingListStatus.DRAFT


def test_unknown_ids_raise(store, make_item):
    with pytest.raises(ShoppingListNotFound):
        store.get("missing")
    with pytest.raises(ShoppingListNotFound):
        store.delete("missing")
    with pytest.raises(ShoppingListNotFound):
        store.add_item("missing", make_item())

    created = store.create_list("Semanal")
    with pytest.raises(ShoppingListItemNotFound):
        store.set_unit_cost(created.id, "nope", 1.0)


def test_remove_items_by_position(store, make_item):
    items = [make_item("P1"), make_item("P2"), make_item("P3")]
    created = store.create_list("Semanal")
    for item in items:
        store.add_item(created.id, item)

    updated = store.remove_items(created.id, [0, 2])
    assert [item.product_id for item in updated.items] == ["P2"]

    with pytest.raises(InvalidListState):
        store.remove_items(created.id, [5])


def test_update_item_keeps_id_and_records_previous_cost(store, make_item):
    item = make_item(unit_cost=10.0)
    created = store.create_list("Semanal")
    store.add_item(created.id, item)

    updated = store.update_item(
        created.id,
        item.id,
        lambda current: current.model_copy(update={"id": "other", "unit_cost": 12.0}),
    )
    edited = updated.items[0]
    assert edited.id == item.id
    assert edited.unit_cost == 12.0
    assert edited.previous_cost == 10.0

    unchanged = store.update_item(created.id, item.id, lambda current: current.with_changes(notes="x"))
    assert unchanged.items[0].previous_cost == 10.0


def test_update_item_clamps_quantity(store, make_item):
    item = make_item()
    created = store.create_list("Semanal")
    store.add_item(created.id, item)

    updated = store.update_item(
        created.id, item.id, lambda current: current.with_changes(planned_quantity=0)
    )
    assert updated.items[0].planned_quantity == 1


def test_update_item_cannot_receive_or_swap_product(store, make_item):
    first = make_item(product_id="P1", planned_quantity=3)
    second = make_item(product_id="P2")
    shopping_list = _ready_list(store, first, second)

    updated = store.update_item(
        shopping_list.id,
        first.id,
        lambda current: current.with_changes(
            is_received=True, received_quantity=3, product_id="P9", notes="revisado"
        ),
    )

    edited = updated.find_item(first.id)
    assert edited.notes == "revisado"
    assert edited.product_id == "P1"
    assert not edited.is_received
    assert edited.received_quantity == 0
    assert updated.status is ShoppingListStatus.READY
    assert updated.received_count == 0


def test_duplicate_makes_fresh_draft(store, make_item):
    item = make_item(planned_quantity=3, unit_cost=4.0)
    shopping_list = _ready_list(store, item)
    store.set_unit_cost(shopping_list.id, item.id, 5.0)
    store.mark_item_received(shopping_list.id, item.id, 3, batch_number="B1")

    copy = store.duplicate(shopping_list.id, "Copia")

    assert copy.id != shopping_list.id
    assert copy.status is ShoppingListStatus.DRAFT
    assert copy.supplier_id == "S1"
    copied = copy.items[0]
    assert copied.id != item.id
    assert copied.planned_quantity == 3
    assert copied.unit_cost == 5.0
    assert copied.is_received is False
    assert copied.received_quantity == 0
    assert copied.batch_number is None
    assert copied.previous_cost is None


def test_delete_and_delete_completed(store, make_item):
    item = make_item()
    finished = _ready_list(store, item)
    store.mark_item_received(finished.id, item.id, 1)
    keep = store.create_list("Activa")
    doomed = store.create_list("Borrar")

    store.delete(doomed.id)
    assert store.delete_completed() == 1
    assert store.delete_completed() == 0
    assert [entry.id for entry in store.lists] == [keep.id]


def test_lists_order_active_first_then_most_recent(store, make_item):
    item = make_item()
    finished = _ready_list(store, item)
    store.mark_item_received(finished.id, item.id, 1)
    older = store.create_list("Vieja")
    newer = store.create_list("Nueva")
    store.set_notes(older.id, "touched")

    ids = [entry.id for entry in store.lists]
    assert ids == [older.id, newer.id, finished.id]
    assert [entry.id for entry in store.completed_lists] == [finished.id]
    assert {entry.id for entry in store.draft_lists} == {older.id, newer.id}


def test_total_pending_items_counts_active_lists(store, make_item):
    created = store.create_list("Semanal")
    store.add_item(created.id, make_item("P1"))
    store.add_item(created.id, make_item("P2"))
    assert store.total_pending_items == 2


def test_observers_see_every_mutation(store):
    seen = []
    unsubscribe = store.subscribe(lambda lists: seen.append([entry.name for entry in lists]))
    start = store.version

    created = store.create_list("Semanal")
    store.rename(created.id, "Mensual")
    unsubscribe()
    store.rename(created.id, "Anual")

    assert seen == [["Semanal"], ["Mensual"]]
    assert store.version == start + 3


def test_failed_mutation_does_not_notify(store):
    created = store.create_list("Semanal")
    seen = []
    store.subscribe(seen.append)
    version = store.version

    with pytest.raises(InvalidListState):
        store.reopen_as_draft(created.id)

    assert seen == []
    assert store.version == version


def test_observer_may_read_the_store(store):
    reads = []
    store.subscribe(lambda lists: reads.append(store.total_pending_items))
    store.create_list("Semanal")
    assert reads == [0]


def test_mutations_are_persisted_before_returning(store, repository, make_item):
    item = make_item()
    created = store.create_list("Semanal")
    store.add_item(created.id, item)

    reloaded = ShoppingListStore(repository)
    reloaded.load_all()

    assert reloaded.get(created.id).items[0].id == item.id


def test_cost_reconciliation_updates_unreceived_items(store, make_item):
    item = make_item("P1", unit_cost=10.0)
    shopping_list = _ready_list(store, item)
    catalog = [SupplierCatalogItem(product_id="P1", product_name="A", last_cost=12.0)]
    seen = []
    store.subscribe(seen.append)

    result = store.apply_cost_reconciliation(shopping_list.id, catalog)
    assert result.updated_count == 1
    refreshed = store.get(shopping_list.id).items[0]
    assert refreshed.unit_cost == 12.0
    assert refreshed.previous_cost == 10.0
    assert len(seen) == 1

    again = store.apply_cost_reconciliation(shopping_list.id, catalog)
    assert again.updated_count == 0
    assert len(seen) == 1
