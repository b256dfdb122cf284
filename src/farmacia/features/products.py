"""Product catalog screens: listing, search, aging risk and expiry badges."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Set

from farmacia.models.catalog import Product, ProductListResponse
from farmacia.models.inventory import (
    ExpiringProduct,
    ExpiringProductsResponse,
    ExpiringProductsSummary,
    InventoryRiskLevel,
    ProductAgingResponse,
)
from farmacia.network.client import AsyncAPIClient
from farmacia.network.endpoints import Operation, endpoint
from farmacia.network.errors import NetworkError

from .base import LoadState, report_primary_failure, report_supplementary_failure
from .pagination import Paginator
from .search import DEFAULT_DEBOUNCE_SECONDS, Debouncer

logger = logging.getLogger(__name__)

AGING_PRODUCT_LIMIT = 500
EXPIRY_WINDOW_DAYS = 90


class ProductsViewModel:
    """Paged product list for one location with debounced server-side search."""

    def __init__(
        self,
        client: AsyncAPIClient,
        *,
        page_size: int = 50,
        debounce: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self.client = client
        self.state = LoadState()
        self.search_text = ""
        self.location_id: Optional[str] = None
        self._paginator: Paginator[Product] = Paginator(self._fetch_page, page_size)
        self._debouncer = Debouncer(debounce)

    @property
    def products(self) -> List[Product]:
        return self._paginator.items

    @property
    def has_more(self) -> bool:
        return self._paginator.has_more

    @property
    def is_loading_more(self) -> bool:
        return self._paginator.is_loading_more

    async def _fetch_page(self, offset: int, limit: int) -> List[Product]:
        query = {"limit": str(limit), "offset": str(offset)}
        if self.location_id:
            query["locationId"] = self.location_id
        if self.search_text:
            query["search"] = self.search_text
        response = await self.client.request(
            endpoint(Operation.LIST_PRODUCTS), ProductListResponse, query=query
        )
        return response.data

    async def load_products(self, location_id: Optional[str] = None) -> None:
        if location_id is not None:
            self.location_id = location_id
        self.state.begin()
        try:
            await self._paginator.refresh()
        except NetworkError as exc:
            report_primary_failure(self.state, exc, "Failed to load products")
        finally:
            self.state.finish()

    def search(self, text: str) -> asyncio.Task:
        """Schedule a reload for ``text``; earlier pending searches are dropped."""

        self.search_text = text.strip()
        return self._debouncer.submit(self.load_products)

    async def load_more(self) -> None:
        try:
            await self._paginator.load_more()
        except NetworkError as exc:
            report_primary_failure(self.state, exc, "Failed to load more products")

    def cancel_search(self) -> None:
        self._debouncer.cancel()


class ProductsAgingViewModel:
    """Risk badges from the aging service; failures keep the last known badges."""

    def __init__(self, client: AsyncAPIClient) -> None:
        self.client = client
        self.is_loading = False
        self.at_risk_product_ids: Set[str] = set()
        self.product_risk_levels: Dict[str, InventoryRiskLevel] = {}

    async def load_at_risk_products(self, location_id: str) -> None:
        self.is_loading = True
        try:
            response = await self.client.request(
                endpoint(Operation.AGING_PRODUCTS),
                ProductAgingResponse,
                query={"locationId": location_id, "limit": str(AGING_PRODUCT_LIMIT)},
            )
        except NetworkError as exc:
            report_supplementary_failure("aging data", exc)
            return
        finally:
            self.is_loading = False

        self.product_risk_levels = {
            product.product_id: product.risk_level for product in response.products
        }
        self.at_risk_product_ids = {
            product_id
            for product_id, level in self.product_risk_levels.items()
            if level.is_at_risk
        }


class ExpiringProductsViewModel:
    """Products with batches expiring within 90 days, expired ones included."""

    def __init__(self, client: AsyncAPIClient) -> None:
        self.client = client
        self.is_loading = False
        self.expiring_products: List[ExpiringProduct] = []
        self.summary: Optional[ExpiringProductsSummary] = None

    @property
    def expiring_product_ids(self) -> Set[str]:
        return {product.product_id for product in self.expiring_products}

    async def load_expiring_products(self, location_id: str) -> None:
        self.is_loading = True
        try:
            response = await self.client.request(
                endpoint(Operation.AGING_EXPIRING),
                ExpiringProductsResponse,
                query={
                    "locationId": location_id,
                    "withinDays": str(EXPIRY_WINDOW_DAYS),
                    "includeExpired": "true",
                },
            )
        except NetworkError as exc:
            report_supplementary_failure("expiring products", exc)
            return
        finally:
            self.is_loading = False

        self.expiring_products = response.products
        self.summary = response.summary


__all__ = [
    "AGING_PRODUCT_LIMIT",
    "EXPIRY_WINDOW_DAYS",
    "ExpiringProductsViewModel",
    "ProductsAgingViewModel",
    "ProductsViewModel",
]
