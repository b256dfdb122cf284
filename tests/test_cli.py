"""End-to-end tests for the ``farmacia`` command line."""

from __future__ import annotations

import json
import logging

import httpx
import pytest
from typer.testing import CliRunner

from farmacia import cli
from farmacia.app import build_application

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


def _run(*args):
    return runner.invoke(cli.app, list(args))


def _json(*args):
    result = _run(*args)
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


def test_create_add_and_show_list():
    created = _json("create", "Pedido semanal", "--supplier-id", "S1", "--supplier-name", "Distribuidora")
    assert created["status"] == "draft"
    assert created["itemCount"] == 0

    updated = _json(
        "add-item", created["id"], "P1", "Amoxicilina", "--quantity", "3", "--unit-cost", "4.5"
    )
    assert updated["itemCount"] == 1
    assert updated["plannedTotal"] == 13.5
    assert updated["items"][0]["productId"] == "P1"

    shown = _json("show", created["id"])
    assert shown["items"][0]["plannedQuantity"] == 3
    assert shown["isEditable"] is True


def test_lifecycle_through_receive_and_purge():
    created = _json("create", "Pedido")
    with_item = _json("add-item", created["id"], "P1", "Ibuprofeno")
    item_id = with_item["items"][0]["id"]

    assert _json("ready", created["id"])["status"] == "ready"
    assert _json("reopen", created["id"])["status"] == "draft"
    _json("ready", created["id"])

    received = _json(
        "receive-local", created["id"], item_id, "--batch", "L9", "--expiry", "2027-02-28"
    )
    assert received["status"] == "completed"
    assert received["items"][0]["receivedQuantity"] == 1
    assert received["items"][0]["expiryDate"] == "2027-02-28"

    listing = _json("lists", "--status", "completed")
    assert [entry["id"] for entry in listing["lists"]] == [created["id"]]

    result = _run("purge-completed")
    assert result.exit_code == 0
    assert "Deleted 1 completed list(s)." in result.output
    assert _json("lists")["lists"] == []


def test_duplicate_and_delete():
    created = _json("create", "Original")
    copy = _json("duplicate", created["id"], "Copia")
    assert copy["name"] == "Copia"
    assert copy["id"] != created["id"]

    result = _run("delete", created["id"])
    assert result.exit_code == 0
    assert f"Deleted {created['id']}" in result.output
    assert [entry["name"] for entry in _json("lists")["lists"]] == ["Copia"]


def test_rule_violations_exit_with_error():
    created = _json("create", "Pedido")

    result = _run("reopen", created["id"])
    assert result.exit_code == 1
    assert "Error: Only ready lists can be reopened as draft" in result.output

    missing = _run("show", "nope")
    assert missing.exit_code == 1
    assert "not found" in missing.output


def test_bad_expiry_is_rejected():
    created = _json("create", "Pedido")
    result = _run("receive-local", created["id"], "item", "--expiry", "31/12/2027")
    assert result.exit_code != 0


def test_refresh_costs_uses_supplier_catalog(monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/products/supplier-catalog/S1"
        return httpx.Response(
            200,
            json={
                "success": True,
                "data": {"products": [{"productId": "P1", "productName": "A", "lastCost": 12}]},
            },
        )

    monkeypatch.setattr(
        cli,
        "build_application",
        lambda: build_application(transport=httpx.MockTransport(handler)),
    )
    created = _json("create", "Pedido", "--supplier-id", "S1")
    _json("add-item", created["id"], "P1", "A", "--unit-cost", "10")

    payload = _json("refresh-costs", created["id"])

    assert payload["updatedCount"] == 1
    assert payload["notFoundCount"] == 0
    assert payload["descriptions"] == ["A ↑ $10.00 → $12.00 (+20%)"]
    assert _json("show", created["id"])["items"][0]["previousCost"] == 10.0


def test_refresh_costs_network_failure(monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    monkeypatch.setattr(
        cli,
        "build_application",
        lambda: build_application(transport=httpx.MockTransport(handler)),
    )
    created = _json("create", "Pedido", "--supplier-id", "S1")
    _json("add-item", created["id"], "P1", "A")

    result = _run("refresh-costs", created["id"])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_endpoints_lists_the_catalog():
    rows = _json("endpoints")
    by_name = {row["operation"]: row for row in rows}
    assert by_name["pin_login"]["path"] == "/auth/pin"
    assert by_name["pin_login"]["requiresSessionToken"] is False
    assert by_name["setup_status"]["requiresPrimaryToken"] is False
