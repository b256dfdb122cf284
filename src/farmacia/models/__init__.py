"""Pydantic models defining shared data contracts."""

from farmacia.models.auth import (
    DeviceActivationResponse,
    EmployeeRole,
    PINLoginEmployee,
    PINLoginLocation,
    PINLoginResponse,
    SessionRefreshResponse,
    SwitchLocationResponse,
)
from farmacia.models.base import WireModel, decimal_to_float
from farmacia.models.catalog import (
    Category,
    Product,
    ProductListResponse,
    Supplier,
    SupplierCatalogItem,
    SupplierCatalogResponse,
    SupplierListResponse,
)
from farmacia.models.inventory import (
    AdjustmentListResponse,
    ExpiringProduct,
    ExpiringProductsResponse,
    InventoryAdjustment,
    InventoryReceiving,
    InventoryRiskLevel,
    ProductAgingAnalysis,
    ProductAgingResponse,
    ReceivingCreateResponse,
    ReceivingListResponse,
)
from farmacia.models.requests import (
    CreateAdjustmentRequest,
    CreateExpenseRequest,
    DeviceActivationRequest,
    PINLoginRequest,
    QuickAdjustmentRequest,
    ReceiveInventoryRequest,
    SwitchLocationRequest,
    UpdateExpenseRequest,
)
from farmacia.models.shopping import (
    CostRefreshChange,
    CostRefreshResult,
    ShoppingList,
    ShoppingListItem,
    ShoppingListStatus,
)

__all__ = [
    "WireModel",
    "decimal_to_float",
    "DeviceActivationResponse",
    "EmployeeRole",
    "PINLoginEmployee",
    "PINLoginLocation",
    "PINLoginResponse",
    "SessionRefreshResponse",
    "SwitchLocationResponse",
    "Category",
    "Product",
    "ProductListResponse",
    "Supplier",
    "SupplierCatalogItem",
    "SupplierCatalogResponse",
    "SupplierListResponse",
    "AdjustmentListResponse",
    "ExpiringProduct",
    "ExpiringProductsResponse",
    "InventoryAdjustment",
    "InventoryReceiving",
    "InventoryRiskLevel",
    "ProductAgingAnalysis",
    "ProductAgingResponse",
    "ReceivingCreateResponse",
    "ReceivingListResponse",
    "CreateAdjustmentRequest",
    "CreateExpenseRequest",
    "DeviceActivationRequest",
    "PINLoginRequest",
    "QuickAdjustmentRequest",
    "ReceiveInventoryRequest",
    "SwitchLocationRequest",
    "UpdateExpenseRequest",
    "CostRefreshChange",
    "CostRefreshResult",
    "ShoppingList",
    "ShoppingListItem",
    "ShoppingListStatus",
]
