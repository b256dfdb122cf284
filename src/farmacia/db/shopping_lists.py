"""Shopping list persistence helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from farmacia.config import get_settings
from farmacia.models.shopping import ShoppingList

from .models import ShoppingListORM
from .repository import Database

logger = logging.getLogger(__name__)


def _to_row(shopping_list: ShoppingList) -> ShoppingListORM:
    return ShoppingListORM(
        id=shopping_list.id,
        name=shopping_list.name,
        status=shopping_list.status.value,
        payload=shopping_list.model_dump_json(by_alias=True),
        updated_at=shopping_list.updated_at,
    )


class ShoppingListRepository:
    """Durable local copy of every shopping list, one JSON document per row.

    The backend is the system of record, so a missing or unreadable database
    loads as an empty collection instead of failing start-up.
    """

    def __init__(self, database_path: Optional[Path] = None) -> None:
        path = database_path or get_settings().database_path
        self.database = Database(path)

    def load_all(self) -> List[ShoppingList]:
        try:
            with self.database.session_scope() as session:
                rows = session.execute(select(ShoppingListORM)).scalars().all()
                payloads = [(row.id, row.payload) for row in rows]
        except (SQLAlchemyError, OSError) as exc:
            logger.error(
                "Shopping list storage unreadable; starting empty",
                extra={"error": str(exc), "path": str(self.database.database_path)},
            )
            self.database.dispose()
            return []

        lists: List[ShoppingList] = []
        for list_id, payload in payloads:
            try:
                lists.append(ShoppingList.model_validate_json(payload))
            except ValidationError as exc:
                logger.warning(
                    "Skipping corrupt shopping list %s",
                    list_id,
                    extra={"error_count": exc.error_count()},
                )
        return lists

    def save(self, shopping_list: ShoppingList) -> None:
        with self.database.session_scope() as session:
            session.merge(_to_row(shopping_list))

    def delete(self, list_id: str) -> None:
        with self.database.session_scope() as session:
            session.execute(delete(ShoppingListORM).where(ShoppingListORM.id == list_id))

    def delete_many(self, list_ids: Iterable[str]) -> None:
        ids = list(list_ids)
        if not ids:
            return
        with self.database.session_scope() as session:
            session.execute(delete(ShoppingListORM).where(ShoppingListORM.id.in_(ids)))

    def close(self) -> None:
        self.database.dispose()


__all__ = ["ShoppingListRepository"]
