"""Receiving, adjustment, and aging payloads consumed by the feature view-models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from .base import WireModel, decimal_to_float
from .catalog import Product, Supplier


class InventoryReceiving(WireModel):
    id: str
    location_id: str
    product_id: str
    supplier_id: Optional[str] = None
    quantity: int
    unit_cost: str
    total_cost: str
    invoice_number: Optional[str] = None
    purchase_order_id: Optional[str] = None
    batch_number: Optional[str] = None
    expiry_date: Optional[datetime] = None
    notes: Optional[str] = None
    received_by: Optional[str] = None
    received_at: datetime
    square_synced: Optional[bool] = None
    square_sync_error: Optional[str] = None
    inventory_batch_id: Optional[str] = None
    product: Optional[Product] = None
    supplier: Optional[Supplier] = None

    @property
    def unit_cost_value(self) -> float:
        return decimal_to_float(self.unit_cost)

    @property
    def total_cost_value(self) -> float:
        return decimal_to_float(self.total_cost)


class SquareSyncResult(WireModel):
    success: bool
    synced_at: Optional[datetime] = None
    error: Optional[str] = None


class ReceivingCreateResponse(WireModel):
    """Result of ``POST /inventory/receive``."""

    receiving: Optional[InventoryReceiving] = None
    message: Optional[str] = None
    square_sync: Optional[SquareSyncResult] = None


class ReceivingListResponse(WireModel):
    data: List[InventoryReceiving]
    count: int = 0


class InventoryAdjustment(WireModel):
    id: str
    location_id: str
    product_id: str
    type: str
    quantity: int
    unit_cost: Optional[str] = None
    total_cost: Optional[str] = None
    reason: Optional[str] = None
    notes: Optional[str] = None
    adjusted_by: Optional[str] = None
    adjusted_at: datetime
    effective_date: Optional[datetime] = None
    product: Optional[Product] = None


class AdjustmentListResponse(WireModel):
    success: bool = True
    count: int = 0
    data: List[InventoryAdjustment]


class InventoryRiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def is_at_risk(self) -> bool:
        return self in (InventoryRiskLevel.HIGH, InventoryRiskLevel.CRITICAL)


class ProductAgingAnalysis(WireModel):
    product_id: str
    product_name: str
    category_name: Optional[str] = None
    total_cash_tied_up: float = 0.0
    total_units: int = 0
    oldest_batch_age: int = 0
    risk_level: InventoryRiskLevel


class ProductAgingResponse(WireModel):
    products: List[ProductAgingAnalysis]
    total: int = 0
    limit: int = 0
    offset: int = 0


class ExpiringProduct(WireModel):
    product_id: str
    product_name: str
    sku: Optional[str] = None
    total_units: int = 0
    total_cash_at_risk: float = 0.0
    batch_count: int = 0
    expired_count: int = 0
    soonest_expiry_date: datetime
    soonest_days_until_expiry: int
    severity: str


class ExpiringProductsSummary(WireModel):
    total_products: int = 0
    total_units: int = 0
    total_cash_at_risk: float = 0.0
    expired_products: int = 0


class ExpiringProductsResponse(WireModel):
    products: List[ExpiringProduct]
    summary: Optional[ExpiringProductsSummary] = None
    within_days: Optional[int] = None


__all__ = [
    "AdjustmentListResponse",
    "ExpiringProduct",
    "ExpiringProductsResponse",
    "ExpiringProductsSummary",
    "InventoryAdjustment",
    "InventoryReceiving",
    "InventoryRiskLevel",
    "ProductAgingAnalysis",
    "ProductAgingResponse",
    "ReceivingCreateResponse",
    "ReceivingListResponse",
    "SquareSyncResult",
]
