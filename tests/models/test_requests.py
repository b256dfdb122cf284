"""Wire format of request bodies."""

from __future__ import annotations

import json
from datetime import date, datetime, timezone

from farmacia.models.requests import (
    CreateAdjustmentRequest,
    CreateExpenseRequest,
    QuickAdjustmentRequest,
    UpdateExpenseRequest,
)
from farmacia.network.client import encode_body


def _encoded(body):
    return json.loads(encode_body(body))


def test_expense_body_uses_iso_dates_and_camel_case():
    body = CreateExpenseRequest(
        location_id="LOC1",
        type="RENT",
        amount=1500.0,
        date=date(2026, 10, 1),
        is_paid=True,
        paid_at=datetime(2026, 10, 2, 9, 30, tzinfo=timezone.utc),
    )

    payload = _encoded(body)

    assert payload["locationId"] == "LOC1"
    assert payload["date"] == "2026-10-01"
    assert payload["isPaid"] is True
    assert payload["paidAt"].startswith("2026-10-02T09:30:00")
    assert "vendor" not in payload


def test_partial_update_only_sends_set_fields():
    assert _encoded(UpdateExpenseRequest(amount=99.5)) == {"amount": 99.5}


def test_adjustment_bodies():
    full = _encoded(
        CreateAdjustmentRequest(
            location_id="LOC1",
            product_id="P1",
            type="DAMAGE",
            quantity=-2,
            effective_date=date(2026, 10, 18),
        )
    )
    assert full == {
        "locationId": "LOC1",
        "productId": "P1",
        "type": "DAMAGE",
        "quantity": -2,
        "effectiveDate": "2026-10-18",
    }

    quick = _encoded(QuickAdjustmentRequest(location_id="LOC1", product_id="P1", quantity=5, sync_to_square=True))
    assert quick["syncToSquare"] is True
