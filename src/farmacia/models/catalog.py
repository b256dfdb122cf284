"""Product, supplier, and supplier-catalog payloads."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import field_validator

from .base import WireModel, decimal_to_float

_NO_VARIATION_MARKERS = ("sin variaci", "no variation")


def _usable_name(value: Optional[str]) -> Optional[str]:
    cleaned = (value or "").strip()
    if not cleaned:
        return None
    lowered = cleaned.lower()
    if any(marker in lowered for marker in _NO_VARIATION_MARKERS):
        return None
    return cleaned


class Category(WireModel):
    id: str
    name: str
    square_category_id: Optional[str] = None


class Product(WireModel):
    """Catalog product as returned by ``/products``."""

    id: str
    name: str
    sku: Optional[str] = None
    category_id: Optional[str] = None
    square_product_name: Optional[str] = None
    square_description: Optional[str] = None
    square_image_url: Optional[str] = None
    square_variation_name: Optional[str] = None
    square_data_synced_at: Optional[datetime] = None
    category: Optional[Category] = None
    supplier_count: Optional[int] = None
    total_inventory: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        """Prefer the Square product name, then the variation name, then ``name``."""

        return (
            _usable_name(self.square_product_name)
            or _usable_name(self.square_variation_name)
            or self.name
        )


class Supplier(WireModel):
    id: str
    name: str
    normalized_name: Optional[str] = None
    initials: Optional[List[str]] = None
    contact_info: Optional[str] = None
    is_active: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SupplierCatalogItem(WireModel):
    """A product a supplier sells, with the last cost paid to that supplier."""

    product_id: str
    product_name: str
    sku: Optional[str] = None
    last_cost: float = 0.0
    current_stock: int = 0

    @field_validator("last_cost", mode="before")
    @classmethod
    def _coerce_last_cost(cls, value):
        return decimal_to_float(value)

    @field_validator("current_stock", mode="before")
    @classmethod
    def _coerce_stock(cls, value):
        if value is None:
            return 0
        return value


class SupplierCatalogResponse(WireModel):
    supplier_id: Optional[str] = None
    supplier_name: Optional[str] = None
    products: List[SupplierCatalogItem]
    count: Optional[int] = None


class ProductListResponse(WireModel):
    data: List[Product]
    count: int = 0


class SupplierListResponse(WireModel):
    data: List[Supplier]
    count: int = 0


__all__ = [
    "Category",
    "Product",
    "ProductListResponse",
    "Supplier",
    "SupplierCatalogItem",
    "SupplierCatalogResponse",
    "SupplierListResponse",
]
