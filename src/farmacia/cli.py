"""Command-line interface for the local shopping list cache."""

from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, Iterator, List, Optional

import typer

from farmacia.app import Application, build_application
from farmacia.models.shopping import ShoppingList, ShoppingListItem
from farmacia.network.endpoints import CATALOG
from farmacia.network.errors import NetworkError
from farmacia.shopping.errors import ShoppingListError

app = typer.Typer(help="Farmacia inventory client commands.")

PrettyOption = typer.Option(False, "--pretty", help="Pretty-print output JSON.")


@contextmanager
def _application() -> Iterator[Application]:
    application = build_application()
    try:
        yield application
    except (ShoppingListError, NetworkError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    finally:
        application.close()


def _emit(payload: Any, pretty: bool) -> None:
    if pretty:
        typer.echo(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))
    else:
        typer.echo(json.dumps(payload, ensure_ascii=False))


def _list_payload(shopping_list: ShoppingList) -> Dict[str, Any]:
    payload = shopping_list.model_dump(mode="json", by_alias=True)
    payload.update(
        {
            "itemCount": shopping_list.item_count,
            "receivedCount": shopping_list.received_count,
            "pendingCount": shopping_list.pending_count,
            "plannedTotal": round(shopping_list.planned_total, 2),
            "receivedTotal": round(shopping_list.received_total, 2),
            "isEditable": shopping_list.is_editable,
            "canReceive": shopping_list.can_receive,
        }
    )
    return payload


def _summary(shopping_list: ShoppingList) -> Dict[str, Any]:
    return {
        "id": shopping_list.id,
        "name": shopping_list.name,
        "status": shopping_list.status.value,
        "supplierName": shopping_list.supplier_name,
        "itemCount": shopping_list.item_count,
        "pendingCount": shopping_list.pending_count,
        "plannedTotal": round(shopping_list.planned_total, 2),
        "updatedAt": shopping_list.updated_at.isoformat(),
    }


@app.command("lists")
def list_lists(
    status: Optional[str] = typer.Option(
        None, "--status", help="Only lists with this status (draft/ready/partiallyReceived/completed)."
    ),
    pretty: bool = PrettyOption,
) -> None:
    """Show every shopping list, active lists first."""

    with _application() as application:
        lists = application.store.lists
        if status:
            lists = [entry for entry in lists if entry.status.value == status]
        _emit(
            {
                "lists": [_summary(entry) for entry in lists],
                "totalPendingItems": application.store.total_pending_items,
            },
            pretty,
        )


@app.command()
def create(
    name: str = typer.Argument(..., help="List name."),
    supplier_id: Optional[str] = typer.Option(None, "--supplier-id"),
    supplier_name: Optional[str] = typer.Option(None, "--supplier-name"),
    location_id: Optional[str] = typer.Option(None, "--location-id"),
    location_name: Optional[str] = typer.Option(None, "--location-name"),
    notes: Optional[str] = typer.Option(None, "--notes"),
    pretty: bool = PrettyOption,
) -> None:
    """Create a new draft shopping list."""

    with _application() as application:
        created = application.store.create_list(
            name,
            supplier_id=supplier_id,
            supplier_name=supplier_name,
            location_id=location_id or application.session.location_id,
            location_name=location_name,
            notes=notes,
        )
        _emit(_list_payload(created), pretty)


@app.command()
def show(list_id: str, pretty: bool = PrettyOption) -> None:
    """Show one list with its items and totals."""

    with _application() as application:
        _emit(_list_payload(application.store.get(list_id)), pretty)


@app.command("add-item")
def add_item(
    list_id: str,
    product_id: str,
    product_name: str,
    quantity: int = typer.Option(1, "--quantity", "-q", help="Planned quantity (min 1)."),
    unit_cost: float = typer.Option(0.0, "--unit-cost", help="Expected unit cost."),
    sku: Optional[str] = typer.Option(None, "--sku"),
    notes: Optional[str] = typer.Option(None, "--notes"),
    pretty: bool = PrettyOption,
) -> None:
    """Append an item to an editable list."""

    item = ShoppingListItem(
        product_id=product_id,
        product_name=product_name,
        sku=sku,
        planned_quantity=quantity,
        unit_cost=unit_cost,
        notes=notes,
    )
    with _application() as application:
        _emit(_list_payload(application.store.add_item(list_id, item)), pretty)


@app.command()
def ready(list_id: str, pretty: bool = PrettyOption) -> None:
    """Mark a draft list ready to order."""

    with _application() as application:
        _emit(_list_payload(application.store.mark_ready(list_id)), pretty)


@app.command()
def reopen(list_id: str, pretty: bool = PrettyOption) -> None:
    """Move a ready list back to draft."""

    with _application() as application:
        _emit(_list_payload(application.store.reopen_as_draft(list_id)), pretty)


@app.command("receive-local")
def receive_local(
    list_id: str,
    item_id: str,
    quantity: Optional[int] = typer.Option(
        None, "--quantity", "-q", help="Received quantity (defaults to planned)."
    ),
    batch_number: Optional[str] = typer.Option(None, "--batch"),
    expiry_date: Optional[str] = typer.Option(None, "--expiry", help="Expiry date (YYYY-MM-DD)."),
    pretty: bool = PrettyOption,
) -> None:
    """Mark an item received locally without posting a receiving to the backend."""

    expiry: Optional[date] = None
    if expiry_date:
        try:
            expiry = date.fromisoformat(expiry_date)
        except ValueError as exc:
            raise typer.BadParameter("expiry must be YYYY-MM-DD", param_hint="--expiry") from exc

    with _application() as application:
        current = application.store.get(list_id)
        item = current.find_item(item_id)
        received = quantity
        if received is None and item is not None:
            received = item.planned_quantity
        updated = application.store.mark_item_received(
            list_id,
            item_id,
            received or 0,
            batch_number=batch_number,
            expiry_date=expiry,
        )
        _emit(_list_payload(updated), pretty)


@app.command()
def duplicate(list_id: str, new_name: str, pretty: bool = PrettyOption) -> None:
    """Copy a list as a fresh draft."""

    with _application() as application:
        _emit(_list_payload(application.store.duplicate(list_id, new_name)), pretty)


@app.command()
def delete(list_id: str) -> None:
    """Delete one list."""

    with _application() as application:
        application.store.delete(list_id)
        typer.echo(f"Deleted {list_id}")


@app.command("purge-completed")
def purge_completed() -> None:
    """Delete every completed list."""

    with _application() as application:
        removed = application.store.delete_completed()
        typer.echo(f"Deleted {removed} completed list(s).")


@app.command("refresh-costs")
def refresh_costs(list_id: str, pretty: bool = PrettyOption) -> None:
    """Pull the supplier's latest costs into a list's unreceived items."""

    with _application() as application:
        result = application.service.refresh_costs_from_supplier(list_id)
        payload = result.model_dump(mode="json", by_alias=True)
        payload["descriptions"] = [change.description for change in result.changes]
        _emit(payload, pretty)


@app.command()
def endpoints(pretty: bool = PrettyOption) -> None:
    """Print the backend operation catalog."""

    rows: List[Dict[str, Any]] = [
        {
            "operation": spec.name,
            "method": spec.method.value,
            "path": spec.path_template,
            "requiresPrimaryToken": spec.requires_primary_token,
            "requiresSessionToken": spec.requires_session_token,
        }
        for spec in CATALOG.values()
    ]
    _emit(rows, pretty)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the `farmacia` console script."""
    app(prog_name="farmacia", args=argv)


if __name__ == "__main__":
    main()
