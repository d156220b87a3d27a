"""
Core infrastructure components for the application.

This module contains the Airtable client, the shared HTTP pool, logging,
lifespan and route discovery. FastAPI dependencies live in
``nomadisch.core.dependencies`` and are imported from there directly.
"""

from .lifespan import app_lifespan
from .logging_config import setup_logging
from .rest_api import HttpxRestClientPool
from .route_discovery import RouterDiscoveryError, discover_routers, register_routers

__all__ = [
    "HttpxRestClientPool",
    "RouterDiscoveryError",
    "app_lifespan",
    "discover_routers",
    "register_routers",
    "setup_logging",
]
