"""Async view-models backing the catalog and activity screens."""

from farmacia.features.activity import ActivityEntry, ActivityViewModel
from farmacia.features.base import LoadState
from farmacia.features.pagination import Paginator
from farmacia.features.products import (
    ExpiringProductsViewModel,
    ProductsAgingViewModel,
    ProductsViewModel,
)
from farmacia.features.search import Debouncer

__all__ = [
    "ActivityEntry",
    "ActivityViewModel",
    "Debouncer",
    "ExpiringProductsViewModel",
    "LoadState",
    "Paginator",
    "ProductsAgingViewModel",
    "ProductsViewModel",
]
