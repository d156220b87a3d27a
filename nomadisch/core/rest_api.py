"""
Shared httpx connection pool for outbound calls (Airtable, Cloudinary, cover probes).

Key Features:
    - One AsyncClient per process, created lazily and disposed in the lifespan
    - Explicit timeouts (10s by default) so a hanging upstream cannot hang a request
    - HTTP/2 and keep-alive handled by httpx, not by application code
    - No automatic retries: writes to Airtable are not idempotent

Usage in FastAPI:
    # Lifespan (see nomadisch.core.lifespan)
    await HttpxRestClientPool.get_client()
    ...
    await HttpxRestClientPool.dispose()

    # Dependencies hand the shared client to repositories
    client = await HttpxRestClientPool.get_client()
    store = AirtableClient(get_airtable_config(), client)

Tests swap the client for one built on httpx.MockTransport through
FastAPI dependency_overrides.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from pydantic import BaseModel, Field

from nomadisch.main_config import HttpClientConfig

__all__ = [
    "ClientConfig",
    "HttpxRestClientPool",
    "http_pool_lifespan",
]


class TimeoutConfig(BaseModel):
    """HTTP client timeout settings."""

    connect: float = Field(default=5.0, description="Connection timeout (seconds)")
    read: float = Field(default=10.0, description="Read timeout (seconds)")
    write: float = Field(default=10.0, description="Write timeout (seconds)")
    pool: float = Field(default=10.0, description="Pool timeout (seconds)")

    def to_httpx_timeout(self) -> httpx.Timeout:
        """Convert to httpx.Timeout."""
        return httpx.Timeout(**self.model_dump())


class PoolConfig(BaseModel):
    """Connection pool settings."""

    max_connections: int = Field(default=20, description="Max total connections")
    max_keepalive: int = Field(default=10, description="Max idle connections")
    keepalive_expiry: float = Field(default=30.0, description="Idle connection TTL (seconds)")


class ClientConfig(BaseModel):
    """HTTP client configuration."""

    timeout: TimeoutConfig = Field(default_factory=TimeoutConfig)
    pool: PoolConfig = Field(default_factory=PoolConfig)
    http2: bool = Field(default=True, description="Enable HTTP/2")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    follow_redirects: bool = Field(default=True, description="Follow redirects")

    @classmethod
    def from_settings(cls, settings: HttpClientConfig) -> "ClientConfig":
        """Build from the HTTP_* environment settings."""
        return cls(
            timeout=TimeoutConfig(
                connect=settings.connect_timeout,
                read=settings.timeout,
                write=settings.timeout,
                pool=settings.timeout,
            ),
            pool=PoolConfig(max_connections=settings.max_connections),
            http2=settings.http2,
        )


class HttpxRestClientPool:
    """Singleton HTTP client pool with connection reuse."""

    _client: httpx.AsyncClient | None = None
    _config: ClientConfig = ClientConfig()
    _lock: asyncio.Lock | None = None

    @classmethod
    def _get_lock(cls) -> asyncio.Lock:
        """Get or create lock for current event loop."""
        if cls._lock is None:
            cls._lock = asyncio.Lock()
        return cls._lock

    @classmethod
    def configure(cls, config: ClientConfig | None = None) -> None:
        """Set custom client configuration."""
        if config is not None:
            cls._config = config

    @classmethod
    async def get_client(cls) -> httpx.AsyncClient:
        """Get shared HTTP client (async-safe)."""
        if cls._client is None:
            async with cls._get_lock():
                if cls._client is None:
                    limits = httpx.Limits(
                        max_connections=cls._config.pool.max_connections,
                        max_keepalive_connections=cls._config.pool.max_keepalive,
                        keepalive_expiry=cls._config.pool.keepalive_expiry,
                    )

                    cls._client = httpx.AsyncClient(
                        http2=cls._config.http2,
                        limits=limits,
                        timeout=cls._config.timeout.to_httpx_timeout(),
                        verify=cls._config.verify_ssl,
                        follow_redirects=cls._config.follow_redirects,
                    )
        return cls._client

    @classmethod
    async def dispose(cls) -> None:
        """Close client and release resources."""
        if cls._client is not None:
            await cls._client.aclose()
            cls._client = None
            cls._lock = None


@asynccontextmanager
async def http_pool_lifespan(
    _app: FastAPI, config: ClientConfig | None = None
) -> AsyncIterator[None]:
    """FastAPI lifespan for HTTP pool management.

    Example:
        app = FastAPI(lifespan=http_pool_lifespan)

        # With custom config:
        from functools import partial
        app = FastAPI(lifespan=partial(http_pool_lifespan, config=my_config))
    """
    HttpxRestClientPool.configure(config)

    await HttpxRestClientPool.get_client()
    try:
        yield
    finally:
        await HttpxRestClientPool.dispose()
