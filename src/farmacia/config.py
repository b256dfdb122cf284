"""Application configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from farmacia import __version__

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))

Environment = Literal["development", "staging", "production"]

BASE_URLS: dict[str, str] = {
    "development": "http://localhost:3000",
    "staging": "https://farmacia-api-staging.railway.app",
    "production": "https://farmacia-api.railway.app",
}

SESSION_DURATION_SECONDS = 4 * 60 * 60
SESSION_REFRESH_THRESHOLD_SECONDS = 30 * 60
PIN_MIN_LENGTH = 4
PIN_MAX_LENGTH = 6


class Settings(BaseModel):
    """Global client settings loaded from environment variables or .env files."""

    environment: Environment = Field(
        default="development",
        description="Backend environment (development/staging/production).",
    )
    api_base_url: Optional[str] = Field(
        default=None,
        description="Explicit backend base URL; overrides the environment default.",
    )
    request_timeout: float = Field(
        default=30.0,
        description="Connect/request timeout in seconds.",
    )
    resource_timeout: float = Field(
        default=60.0,
        description="Total per-call timeout in seconds.",
    )
    app_version: str = Field(
        default=__version__,
        description="Version reported in the User-Agent client identifier.",
    )
    database_path: Path = Field(
        default=Path("./data/farmacia.db"),
        description="SQLite file holding local shopping lists.",
    )
    device_token: Optional[str] = Field(
        default=None,
        description="Primary (device) token issued at device activation.",
    )
    session_token: Optional[str] = Field(
        default=None,
        description="Employee session token issued at PIN login.",
    )
    location_id: Optional[str] = Field(
        default=None,
        description="Current location scope for location-aware calls.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    search_debounce_seconds: float = Field(
        default=0.4,
        description="Quiet period before a search keystroke triggers a fetch.",
    )
    page_size: int = Field(
        default=50,
        description="Page size used by paginated product listings.",
    )

    model_config = ConfigDict(frozen=True)

    @property
    def resolved_base_url(self) -> str:
        base = self.api_base_url or BASE_URLS[self.environment]
        return base.rstrip("/")

    @property
    def user_agent(self) -> str:
        return f"FarmaciaApp/{self.app_version}"


def _parse_env_file(path: Path) -> dict[str, str]:
    payload: dict[str, str] = {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                payload[key.strip()] = raw_value.strip()
    except FileNotFoundError:
        return {}
    return payload


def _load_env_file_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        values.update(_parse_env_file(candidate))
    return values


def _load_from_env() -> dict[str, object]:
    """Load optional overrides from env vars (with .env fallbacks)."""

    file_values = _load_env_file_values()

    def _env(key: str) -> Optional[str]:
        return os.environ.get(key) or file_values.get(key)

    payload: dict[str, object] = {}
    if (environment := _env("FARMACIA_ENVIRONMENT")):
        normalized = environment.strip().lower()
        if normalized in BASE_URLS:
            payload["environment"] = normalized
    if (base_url := _env("FARMACIA_API_BASE_URL")):
        payload["api_base_url"] = base_url
    if (request_timeout := _env("FARMACIA_REQUEST_TIMEOUT")):
        try:
            payload["request_timeout"] = float(request_timeout)
        except ValueError:
            pass
    if (resource_timeout := _env("FARMACIA_RESOURCE_TIMEOUT")):
        try:
            payload["resource_timeout"] = float(resource_timeout)
        except ValueError:
            pass
    if (app_version := _env("FARMACIA_APP_VERSION")):
        payload["app_version"] = app_version
    if (db_path := _env("FARMACIA_DATABASE_PATH")):
        payload["database_path"] = Path(db_path)
    if (device_token := _env("FARMACIA_DEVICE_TOKEN")):
        payload["device_token"] = device_token
    if (session_token := _env("FARMACIA_SESSION_TOKEN")):
        payload["session_token"] = session_token
    if (location_id := _env("FARMACIA_LOCATION_ID")):
        payload["location_id"] = location_id
    if (log_level := _env("FARMACIA_LOG_LEVEL")):
        payload["log_level"] = log_level
    if (log_format := _env("FARMACIA_LOG_FORMAT")):
        payload["log_format"] = log_format
    if (debounce := _env("FARMACIA_SEARCH_DEBOUNCE")):
        try:
            payload["search_debounce_seconds"] = float(debounce)
        except ValueError:
            pass
    if (page_size := _env("FARMACIA_PAGE_SIZE")):
        try:
            payload["page_size"] = int(page_size)
        except ValueError:
            pass
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
