"""Composition root wiring settings, tokens, transport and the shopping store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from farmacia.auth import AuthManager, AuthSession
from farmacia.config import Settings, get_settings
from farmacia.db.shopping_lists import ShoppingListRepository
from farmacia.logging_utils import configure_logging as configure_app_logging
from farmacia.network.client import APIClient, AsyncAPIClient
from farmacia.shopping.service import ShoppingListService
from farmacia.shopping.store import ShoppingListStore

logger = logging.getLogger(__name__)


def _configure_logging(settings: Settings) -> None:
    secrets = [settings.device_token or "", settings.session_token or ""]
    configure_app_logging(settings.log_level, settings.log_format, secrets)


@dataclass
class Application:
    settings: Settings
    session: AuthSession
    client: APIClient
    repository: ShoppingListRepository
    store: ShoppingListStore
    service: ShoppingListService
    auth: AuthManager

    def async_client(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> AsyncAPIClient:
        """New asyncio client sharing this application's tokens."""

        return AsyncAPIClient.from_settings(self.settings, self.session, transport=transport)

    def close(self) -> None:
        self.client.close()
        self.repository.close()


def build_application(
    settings: Optional[Settings] = None,
    *,
    transport: Optional[httpx.BaseTransport] = None,
    http_client: Optional[httpx.Client] = None,
    configure_logging: bool = True,
) -> Application:
    """Construct every long-lived collaborator once and load persisted lists."""

    settings = settings or get_settings()
    if configure_logging:
        _configure_logging(settings)

    session = AuthSession.from_settings(settings)
    if http_client is not None:
        client = APIClient(
            base_url=settings.resolved_base_url,
            tokens=session,
            user_agent=settings.user_agent,
            request_timeout=settings.request_timeout,
            resource_timeout=settings.resource_timeout,
            http_client=http_client,
        )
    else:
        client = APIClient.from_settings(settings, session, transport=transport)

    repository = ShoppingListRepository(settings.database_path)
    store = ShoppingListStore(repository)
    store.load_all()
    auth = AuthManager(client, session)
    auth.check_auth_status()

    logger.debug(
        "Application ready",
        extra={"environment": settings.environment, "base_url": settings.resolved_base_url},
    )
    return Application(
        settings=settings,
        session=session,
        client=client,
        repository=repository,
        store=store,
        service=ShoppingListService(store, client, session),
        auth=auth,
    )


__all__ = ["Application", "build_application"]
