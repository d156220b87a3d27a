"""
FastAPI dependency injection functions for the HTTP client, repositories and the admin gate.

Usage in FastAPI Routes:
    from fastapi import Depends
    from nomadisch.core.dependencies import get_event_repository

    @router.get("/events")
    async def list_events(repo: EventRepository = Depends(get_event_repository)):
        return await repo.list_events()

Testing with Dependency Override:
    transport = httpx.MockTransport(handler)

    async def override_get_http_client():
        return httpx.AsyncClient(transport=transport)

    app.dependency_overrides[get_http_client] = override_get_http_client
"""

import hmac

import httpx
from fastapi import Depends, Header

from nomadisch.core.airtable import AirtableClient
from nomadisch.core.exceptions import AuthorizationError, ConfigurationError
from nomadisch.core.rest_api import HttpxRestClientPool
from nomadisch.main_config import (
    AdminConfig,
    AirtableConfig,
    CloudinaryConfig,
    SiteConfig,
    get_admin_config,
    get_airtable_config,
    get_cloudinary_config,
    get_site_config,
)
from nomadisch.repository import EventRepository, SettingsRepository


async def get_http_client() -> httpx.AsyncClient:
    """Shared outbound HTTP client from the lifespan-managed pool."""
    return await HttpxRestClientPool.get_client()


def get_airtable_settings() -> AirtableConfig:
    return get_airtable_config()


def get_cloudinary_settings() -> CloudinaryConfig:
    return get_cloudinary_config()


def get_site_settings() -> SiteConfig:
    return get_site_config()


def get_admin_settings() -> AdminConfig:
    return get_admin_config()


def get_airtable(
    config: AirtableConfig = Depends(get_airtable_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> AirtableClient:
    """Airtable client. Missing credentials surface on first call, not here."""
    return AirtableClient(config, client)


def get_event_repository(
    store: AirtableClient = Depends(get_airtable),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> EventRepository:
    return EventRepository(store, client, store.config.events_table)


def get_settings_repository(store: AirtableClient = Depends(get_airtable)) -> SettingsRepository:
    return SettingsRepository(store, store.config.settings_table)


def require_admin(
    x_admin_password: str | None = Header(default=None),
    config: AdminConfig = Depends(get_admin_settings),
) -> None:
    """Gate for admin routes. Runs before any repository call.

    Raises:
        ConfigurationError: ADMIN_PASSWORD is not configured on the server
        AuthorizationError: header missing or wrong (same message either way)
    """
    expected = config.password.get_secret_value() if config.password else ""
    if not expected:
        raise ConfigurationError("ADMIN_PASSWORD")
    supplied = x_admin_password or ""
    if not hmac.compare_digest(supplied.encode(), expected.encode()):
        raise AuthorizationError()
