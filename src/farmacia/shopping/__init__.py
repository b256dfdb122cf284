"""Local shopping list lifecycle, cost reconciliation and receiving."""

from farmacia.shopping.errors import (
    InvalidListState,
    ShoppingListError,
    ShoppingListItemNotFound,
    ShoppingListNotFound,
)
from farmacia.shopping.reconcile import reconcile_costs
from farmacia.shopping.service import (
    FailedReceiveItem,
    ReceiveOutcome,
    ReceiveSelection,
    ShoppingListService,
)
from farmacia.shopping.store import ShoppingListStore

__all__ = [
    "FailedReceiveItem",
    "InvalidListState",
    "ReceiveOutcome",
    "ReceiveSelection",
    "ShoppingListError",
    "ShoppingListItemNotFound",
    "ShoppingListNotFound",
    "ShoppingListService",
    "ShoppingListStore",
    "reconcile_costs",
]
