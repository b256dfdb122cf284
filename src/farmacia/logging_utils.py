"""Root logger setup for the client, with credential masking."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Tuple

REDACTED = "[redacted]"

# (pattern, replacement) pairs for credentials that appear in request dumps.
_CREDENTIAL_RULES: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"(Bearer\s+)[A-Za-z0-9\-._~+/=]+", re.IGNORECASE), r"\g<1>" + REDACTED),
    (re.compile(r"(X-Session-Token[:=]\s*)[^\s,;&]+", re.IGNORECASE), r"\g<1>" + REDACTED),
    (re.compile(r"(\"pin\"\s*:\s*\")[^\"]*(\")", re.IGNORECASE), r"\g<1>" + REDACTED + r"\g<2>"),
)

PLAIN_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"

_NOISY_LOGGERS = ("httpx", "httpcore")


class SensitiveDataFilter(logging.Filter):
    """Masks device/session tokens, PINs and any explicitly supplied secrets.

    Applied to the rendered message and to every string attribute attached
    through ``extra=``.
    """

    def __init__(self, secrets: Iterable[Optional[str]]):
        super().__init__()
        stripped = ((secret or "").strip() for secret in secrets)
        self._secrets = tuple(secret for secret in stripped if secret)

    def redact(self, text: str) -> str:
        for pattern, replacement in _CREDENTIAL_RULES:
            text = pattern.sub(replacement, text)
        for secret in self._secrets:
            text = text.replace(secret, REDACTED)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        rendered = record.getMessage()
        masked = self.redact(rendered)
        if masked != rendered:
            record.msg, record.args = masked, ()

        for name, value in vars(record).copy().items():
            if name != "msg" and isinstance(value, str):
                setattr(record, name, self.redact(value))
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line, carrying the list/endpoint context fields."""

    context_fields = ("endpoint", "status_code", "list_id", "count")

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: Dict[str, Any] = dict(
            timestamp=created.isoformat(),
            level=record.levelname,
            logger=record.name,
            message=record.getMessage(),
        )
        entry.update(
            (name, getattr(record, name))
            for name in self.context_fields
            if getattr(record, name, None) is not None
        )
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=True)


def _formatter_for(fmt: Optional[str]) -> logging.Formatter:
    if (fmt or "").lower() == "json":
        return JsonFormatter()
    return logging.Formatter(PLAIN_FORMAT)


def configure_logging(level_name: str, fmt: str, secrets: Iterable[Optional[str]] = ()) -> None:
    """Route everything through one stderr handler that masks credentials.

    httpx logs each request line at INFO, so its loggers are held at WARNING
    or above regardless of ``level_name``.
    """

    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO

    redactor = SensitiveDataFilter(secrets)
    handler = logging.StreamHandler()
    handler.setFormatter(_formatter_for(fmt))
    handler.addFilter(redactor)

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        library_logger = logging.getLogger(name)
        library_logger.setLevel(max(level, logging.WARNING))
        library_logger.addFilter(redactor)


__all__ = ["REDACTED", "JsonFormatter", "SensitiveDataFilter", "configure_logging"]
