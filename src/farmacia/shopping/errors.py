"""Errors raised by the shopping list store."""

from __future__ import annotations


class ShoppingListError(Exception):
    """Base class for shopping list rule violations."""


class ShoppingListNotFound(ShoppingListError):
    def __init__(self, list_id: str) -> None:
        super().__init__(f"Shopping list {list_id} not found")
        self.list_id = list_id


class ShoppingListItemNotFound(ShoppingListError):
    def __init__(self, list_id: str, item_id: str) -> None:
        super().__init__(f"Item {item_id} not found in shopping list {list_id}")
        self.list_id = list_id
        self.item_id = item_id


class InvalidListState(ShoppingListError):
    """The list's current status does not allow the requested change."""

    def __init__(self, message: str, status=None) -> None:
        super().__init__(message)
        self.status = status


__all__ = [
    "InvalidListState",
    "ShoppingListError",
    "ShoppingListItemNotFound",
    "ShoppingListNotFound",
]
