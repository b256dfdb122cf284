"""Tests for request building and the blocking/async API clients."""

from __future__ import annotations

import asyncio
import gzip
import json
import time
from datetime import date

import httpx
import pytest

from farmacia.models.catalog import SupplierListResponse
from farmacia.models.requests import ReceiveInventoryRequest
from farmacia.network.client import (
    APIClient,
    AsyncAPIClient,
    StaticTokens,
    build_request,
)
from farmacia.network.endpoints import Operation, endpoint
from farmacia.network.errors import (
    EncodeFailure,
    InvalidRequest,
    NetworkUnavailable,
    ServerError,
    Timeout,
)

BASE_URL = "https://api.test"

TOKENS = StaticTokens(primary_token="device-123", session_token="sess-456")


def test_unauthenticated_endpoint_never_sends_primary_token():
    prepared = build_request(endpoint(Operation.DEVICE_ACTIVATE), base_url=BASE_URL, tokens=TOKENS)
    assert "Authorization" not in prepared.headers
    assert "X-Session-Token" not in prepared.headers


def test_pin_login_sends_primary_but_not_session_token():
    prepared = build_request(endpoint(Operation.PIN_LOGIN), base_url=BASE_URL, tokens=TOKENS)
    assert prepared.headers["Authorization"] == "Bearer device-123"
    assert "X-Session-Token" not in prepared.headers


def test_missing_session_token_omits_header_instead_of_sending_empty():
    tokens = StaticTokens(primary_token="device-123", session_token=None)
    prepared = build_request(endpoint(Operation.LIST_SUPPLIERS), base_url=BASE_URL, tokens=tokens)
    assert prepared.headers["Authorization"] == "Bearer device-123"
    assert "X-Session-Token" not in prepared.headers


def test_standard_headers_and_query_string():
    prepared = build_request(
        endpoint(Operation.LIST_PRODUCTS),
        query={"locationId": "LOC 1", "search": "ibuprofeno"},
        base_url=BASE_URL + "/",
        tokens=TOKENS,
        user_agent="FarmaciaApp/2.1",
    )
    assert prepared.method == "GET"
    assert prepared.url == f"{BASE_URL}/products?locationId=LOC+1&search=ibuprofeno"
    assert prepared.headers["Content-Type"] == "application/json"
    assert prepared.headers["Accept"] == "application/json"
    assert prepared.headers["User-Agent"] == "FarmaciaApp/2.1"
    assert prepared.headers["X-Session-Token"] == "sess-456"
    assert prepared.content is None


def test_body_uses_camel_case_and_date_only_expiry():
    body = ReceiveInventoryRequest(
        location_id="LOC1",
        product_id="P1",
        quantity=5,
        unit_cost=10.0,
        expiry_date=date(2026, 3, 31),
        sync_to_square=True,
    )
    prepared = build_request(endpoint(Operation.RECEIVE_INVENTORY), body, base_url=BASE_URL)
    payload = json.loads(prepared.content)
    assert payload == {
        "locationId": "LOC1",
        "productId": "P1",
        "quantity": 5,
        "unitCost": 10.0,
        "expiryDate": "2026-03-31",
        "syncToSquare": True,
    }


def test_unserializable_body_is_encode_failure():
    with pytest.raises(EncodeFailure):
        build_request(endpoint(Operation.CREATE_EXPENSE), {"amount": object()}, base_url=BASE_URL)


@pytest.mark.parametrize("base_url", ["not a url", "ftp://api.test", "https://"])
def test_invalid_base_url_is_invalid_request(base_url):
    with pytest.raises(InvalidRequest):
        build_request(endpoint(Operation.LIST_SUPPLIERS), base_url=base_url)


def test_request_decodes_enveloped_payload(api_client, backend):
    backend.add(
        "GET",
        "/admin/inventory/cutover/suppliers",
        payload={"success": True, "data": {"data": [{"id": "S1", "name": "Acme"}], "count": 1}},
    )

    response = api_client.request(endpoint(Operation.LIST_SUPPLIERS), SupplierListResponse)

    assert [supplier.id for supplier in response.data] == ["S1"]
    sent = backend.requests[0]
    assert sent.headers["Authorization"] == "Bearer device-123"
    assert sent.headers["X-Session-Token"] == "sess-456"


def test_request_void_accepts_empty_body(api_client, backend):
    backend.add("POST", "/auth/logout", status_code=204, raw=b"")
    assert api_client.request_void(endpoint(Operation.LOGOUT)) is None


def test_request_void_raises_on_failure_envelope(api_client, backend):
    backend.add("POST", "/auth/logout", payload={"success": False, "message": "boom"})
    with pytest.raises(ServerError):
        api_client.request_void(endpoint(Operation.LOGOUT))


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (httpx.ReadTimeout("slow"), Timeout),
        (httpx.ConnectError("offline"), NetworkUnavailable),
    ],
)
def test_transport_failures_are_translated(exc, expected):
    def handler(request):
        raise exc

    with APIClient(base_url=BASE_URL, transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(expected):
            client.request(endpoint(Operation.LIST_SUPPLIERS), SupplierListResponse)


def test_upload_image_sends_multipart(backend, api_client):
    backend.add("POST", "/products", payload={"success": True, "data": {"id": "P9", "name": "Photo"}})

    result = api_client.upload_image(endpoint(Operation.CREATE_PRODUCT), b"\xff\xd8jpeg", dict)

    assert result["id"] == "P9"
    sent = backend.requests[0]
    assert sent.headers["Content-Type"].startswith("multipart/form-data")
    assert b'name="image"' in sent.content


@pytest.mark.asyncio
async def test_async_client_round_trip(backend):
    backend.add(
        "GET",
        "/admin/inventory/cutover/suppliers",
        payload={"data": [{"id": "S2", "name": "Beta"}], "count": 1},
    )
    async with AsyncAPIClient(
        base_url=BASE_URL, tokens=TOKENS, transport=httpx.MockTransport(backend)
    ) as client:
        response = await client.request(endpoint(Operation.LIST_SUPPLIERS), SupplierListResponse)
    assert response.data[0].name == "Beta"


@pytest.mark.asyncio
async def test_async_client_enforces_resource_timeout():
    async def handler(request):
        await asyncio.sleep(1)
        return httpx.Response(200, json={})

    async with AsyncAPIClient(
        base_url=BASE_URL, resource_timeout=0.05, transport=httpx.MockTransport(handler)
    ) as client:
        with pytest.raises(Timeout):
            await client.request_void(endpoint(Operation.LOGOUT))


def test_sync_client_enforces_resource_timeout():
    def handler(request):
        time.sleep(0.2)
        return httpx.Response(200, json={"success": True})

    with APIClient(
        base_url=BASE_URL, resource_timeout=0.05, transport=httpx.MockTransport(handler)
    ) as client:
        with pytest.raises(Timeout):
            client.request_void(endpoint(Operation.LOGOUT))


def test_sync_client_keeps_gzip_bodies_decodable(backend, api_client):
    body = json.dumps({"data": [{"id": "S1", "name": "Alfa"}], "count": 1}).encode()
    backend.routes[("GET", "/admin/inventory/cutover/suppliers")] = lambda request: httpx.Response(
        200, headers={"Content-Encoding": "gzip"}, content=gzip.compress(body)
    )

    response = api_client.request(endpoint(Operation.LIST_SUPPLIERS), SupplierListResponse)

    assert [supplier.name for supplier in response.data] == ["Alfa"]


@pytest.mark.asyncio
async def test_async_upload_image_sends_multipart(backend):
    backend.add("POST", "/products", payload={"success": True, "data": {"id": "P9", "name": "Photo"}})

    async with AsyncAPIClient(
        base_url=BASE_URL, tokens=TOKENS, transport=httpx.MockTransport(backend)
    ) as client:
        result = await client.upload_image(
            endpoint(Operation.CREATE_PRODUCT), b"\xff\xd8jpeg", dict, filename="foto.jpg"
        )

    assert result["id"] == "P9"
    sent = backend.requests[0]
    assert sent.headers["Content-Type"].startswith("multipart/form-data")
    assert b'filename="foto.jpg"' in sent.content
