"""Offset pagination with a re-entrancy guard."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Generic, List, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)

PageFetcher = Callable[[int, int], Awaitable[List[T]]]


class Paginator(Generic[T]):
    """Accumulates pages returned by ``fetch_page(offset, limit)``.

    ``load_more`` while a page is in flight is a no-op. A failed fetch leaves
    the accumulated items and page counter untouched. ``refresh`` and
    ``reset`` start a new generation; pages fetched under an older one are
    discarded when they arrive.
    """

    def __init__(self, fetch_page: PageFetcher, page_size: int = 50) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self._fetch_page = fetch_page
        self._generation = 0
        self.page_size = page_size
        self.items: List[T] = []
        self.page = 0
        self.has_more = True
        self.is_loading_more = False

    def reset(self) -> None:
        self._generation += 1
        self.items = []
        self.page = 0
        self.has_more = True
        self.is_loading_more = False

    async def refresh(self) -> List[T]:
        """Fetch the first page and replace the accumulated items on success."""

        self._generation += 1
        generation = self._generation
        self.is_loading_more = False
        batch = await self._fetch_page(0, self.page_size)
        if generation != self._generation:
            logger.debug("Discarding superseded first page")
            return self.items
        self.items = list(batch)
        self.page = 1
        self.has_more = len(batch) >= self.page_size
        return self.items

    async def load_more(self) -> List[T]:
        if self.is_loading_more or not self.has_more:
            return []
        generation = self._generation
        self.is_loading_more = True
        try:
            batch = await self._fetch_page(self.page * self.page_size, self.page_size)
        finally:
            if generation == self._generation:
                self.is_loading_more = False
        if generation != self._generation:
            logger.debug("Discarding page %d fetched for a previous query", self.page)
            return []
        self.items.extend(batch)
        self.page += 1
        self.has_more = len(batch) >= self.page_size
        return list(batch)


__all__ = ["PageFetcher", "Paginator"]
