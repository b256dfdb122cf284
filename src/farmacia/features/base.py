"""Load-state bookkeeping shared by the feature view-models."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from farmacia.network.errors import NetworkError, is_cancellation

logger = logging.getLogger(__name__)


@dataclass
class LoadState:
    """What a screen needs to render a spinner or an error banner."""

    is_loading: bool = False
    error_message: Optional[str] = None

    @property
    def show_error(self) -> bool:
        return self.error_message is not None

    def begin(self) -> None:
        self.is_loading = True
        self.error_message = None

    def finish(self) -> None:
        self.is_loading = False

    def dismiss_error(self) -> None:
        self.error_message = None


def user_message(exc: BaseException, fallback: str) -> str:
    if isinstance(exc, NetworkError):
        return exc.description
    return str(exc) or fallback


def report_primary_failure(state: LoadState, exc: BaseException, fallback: str) -> None:
    """Surface a failed primary load, except for cancellations which stay silent."""

    if is_cancellation(exc):
        logger.debug("Load cancelled: %s", exc)
        return
    state.error_message = user_message(exc, fallback)
    logger.warning(fallback, extra={"error": state.error_message})


def report_supplementary_failure(what: str, exc: BaseException) -> None:
    if is_cancellation(exc):
        logger.debug("%s cancelled", what)
        return
    logger.warning("Failed to load %s", what, extra={"error": user_message(exc, what)})


__all__ = [
    "LoadState",
    "report_primary_failure",
    "report_supplementary_failure",
    "user_message",
]
