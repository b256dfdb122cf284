"""Debounced search input."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional

DEFAULT_DEBOUNCE_SECONDS = 0.4


class Debouncer:
    """Run only the latest submitted call once input has been quiet for ``delay``.

    Each ``submit`` cancels the task from the previous one, so a burst of
    keystrokes produces a single fetch for the final text.
    """

    def __init__(self, delay: float = DEFAULT_DEBOUNCE_SECONDS) -> None:
        self.delay = delay
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, action: Callable[..., Awaitable[Any]], *args: Any) -> asyncio.Task:
        self.cancel()
        self._task = asyncio.create_task(self._run(action, args))
        return self._task

    async def _run(self, action: Callable[..., Awaitable[Any]], args: tuple) -> Any:
        await asyncio.sleep(self.delay)
        return await action(*args)

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def flush(self) -> Any:
        """Await the pending call, if any (mainly useful in tests and shutdown)."""

        task = self._task
        if task is None:
            return None
        return await task


__all__ = ["DEFAULT_DEBOUNCE_SECONDS", "Debouncer"]
