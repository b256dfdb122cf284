"""SQLite persistence for locally cached shopping lists."""

from farmacia.db.repository import Database
from farmacia.db.shopping_lists import ShoppingListRepository

__all__ = ["Database", "ShoppingListRepository"]
