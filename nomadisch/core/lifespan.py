"""
Application lifespan management for FastAPI.

Startup builds the shared HTTP client from the HTTP_* settings; shutdown
closes it. There is no database: Airtable is the system of record.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from nomadisch.core.rest_api import ClientConfig, http_pool_lifespan
from nomadisch.main_config import get_airtable_config, get_http_client_config

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle events.

    Startup:
        - Initialize HTTP client connection pool
        - Warn when Airtable credentials are absent (pages will render empty)

    Shutdown:
        - Cleanup HTTP client pool
    """
    airtable = get_airtable_config()
    if airtable.token is None or not airtable.base_id:
        logger.warning("airtable_not_configured", events_table=airtable.events_table)

    client_config = ClientConfig.from_settings(get_http_client_config())
    async with http_pool_lifespan(app, config=client_config):
        logger.info("http_pool_ready", read_timeout=client_config.timeout.read)
        yield
