"""Fixtures for the asyncio view-model tests."""

from __future__ import annotations

import httpx
import pytest

from farmacia.network.client import AsyncAPIClient, StaticTokens


@pytest.fixture()
def async_client(backend) -> AsyncAPIClient:
    return AsyncAPIClient(
        base_url="https://api.test",
        tokens=StaticTokens(primary_token="device-123", session_token="sess-456", location_id="LOC1"),
        transport=httpx.MockTransport(backend),
    )
