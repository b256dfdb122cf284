"""Shared pytest fixtures for the Farmacia test suite."""

from __future__ import annotations

import json
from typing import Callable, Dict, Generator, List

import httpx
import pytest

from farmacia.config import get_settings
from farmacia.db.shopping_lists import ShoppingListRepository
from farmacia.models.shopping import ShoppingListItem
from farmacia.network.client import APIClient, StaticTokens
from farmacia.shopping.store import ShoppingListStore

BASE_URL = "https://api.test"

_ENV_KEYS = (
    "FARMACIA_ENVIRONMENT",
    "FARMACIA_API_BASE_URL",
    "FARMACIA_DEVICE_TOKEN",
    "FARMACIA_SESSION_TOKEN",
    "FARMACIA_LOCATION_ID",
    "FARMACIA_LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Ensure each test uses an isolated SQLite database location."""

    db_path = tmp_path / "test_farmacia.db"
    monkeypatch.chdir(tmp_path)
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("FARMACIA_DATABASE_PATH", str(db_path))
    monkeypatch.setenv("FARMACIA_LOG_LEVEL", "WARNING")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def repository(tmp_path) -> Generator[ShoppingListRepository, None, None]:
    repo = ShoppingListRepository(tmp_path / "lists.db")
    yield repo
    repo.close()


@pytest.fixture()
def store(repository) -> ShoppingListStore:
    shopping_store = ShoppingListStore(repository)
    shopping_store.load_all()
    return shopping_store


@pytest.fixture()
def make_item() -> Callable[..., ShoppingListItem]:
    def _make(product_id: str = "P1", **overrides) -> ShoppingListItem:
        fields = {
            "product_id": product_id,
            "product_name": f"Product {product_id}",
            "planned_quantity": 1,
            "unit_cost": 10.0,
        }
        fields.update(overrides)
        return ShoppingListItem(**fields)

    return _make


class RecordingBackend:
    """Scripted ``httpx.MockTransport`` handler that remembers every request."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.routes: Dict[tuple, Callable[[httpx.Request], httpx.Response]] = {}

    def add(self, method: str, path: str, status_code: int = 200, payload=None, raw=None):
        def responder(request: httpx.Request) -> httpx.Response:
            if raw is not None:
                return httpx.Response(status_code, content=raw)
            return httpx.Response(status_code, json=payload)

        self.routes[(method.upper(), path)] = responder
        return self

    def json_bodies(self, path: str) -> List[dict]:
        return [json.loads(r.content) for r in self.requests if r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responder = self.routes.get((request.method, request.url.path))
        if responder is None:
            return httpx.Response(404, json={"success": False, "message": "Not found"})
        return responder(request)


@pytest.fixture()
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture()
def api_client(backend) -> Generator[APIClient, None, None]:
    client = APIClient(
        base_url=BASE_URL,
        tokens=StaticTokens(primary_token="device-123", session_token="sess-456", location_id="LOC1"),
        transport=httpx.MockTransport(backend),
    )
    yield client
    client.close()
