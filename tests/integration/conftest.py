"""In-process FastAPI stand-in for the inventory backend."""

from __future__ import annotations

from typing import Any, Dict, Optional

import pytest
from fastapi import FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from farmacia.app import build_application
from farmacia.config import Settings

DEVICE_TOKEN = "device-int"
SESSION_TOKEN = "sess-int"
SUPPLIER_COSTS = {"P1": 12.0, "P2": 5.0}


def _require_tokens(authorization: Optional[str], session_token: Optional[str]) -> None:
    if authorization != f"Bearer {DEVICE_TOKEN}" or session_token != SESSION_TOKEN:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing credentials")


def create_fake_backend() -> FastAPI:
    app = FastAPI()
    app.state.receivings = []

    @app.exception_handler(HTTPException)
    async def _envelope_errors(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.detail, "statusCode": exc.status_code},
        )

    @app.get("/products/supplier-catalog/{supplier_id}")
    async def supplier_catalog(
        supplier_id: str,
        locationId: Optional[str] = None,
        authorization: Optional[str] = Header(default=None),
        x_session_token: Optional[str] = Header(default=None),
    ) -> Dict[str, Any]:
        _require_tokens(authorization, x_session_token)
        products = [
            {"productId": product_id, "productName": product_id, "lastCost": f"{cost:.2f}"}
            for product_id, cost in SUPPLIER_COSTS.items()
        ]
        return {
            "success": True,
            "data": {"supplierId": supplier_id, "products": products, "count": len(products)},
        }

    @app.post("/inventory/receive", status_code=status.HTTP_201_CREATED)
    async def receive(
        request: Request,
        authorization: Optional[str] = Header(default=None),
        x_session_token: Optional[str] = Header(default=None),
    ) -> Dict[str, Any]:
        _require_tokens(authorization, x_session_token)
        body = await request.json()
        if body["productId"] == "REJECT":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Product is discontinued"
            )
        app.state.receivings.append(body)
        return {"success": True, "data": {"message": "Inventory received"}}

    @app.post("/auth/logout")
    async def logout() -> Dict[str, Any]:
        return {"success": True}

    return app


@pytest.fixture()
def backend_app() -> FastAPI:
    return create_fake_backend()


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        api_base_url="http://testserver",
        device_token=DEVICE_TOKEN,
        session_token=SESSION_TOKEN,
        location_id="LOC1",
        database_path=tmp_path / "integration.db",
    )


@pytest.fixture()
def application(settings, backend_app):
    app = build_application(settings, http_client=TestClient(backend_app), configure_logging=False)
    yield app
    app.close()
