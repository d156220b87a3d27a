"""
FastAPI application entry point for the Nomadisch Labs site backend.

This module initializes the FastAPI application with:
- Structured logging with request correlation IDs
- Shared httpx client pool for Airtable, Cloudinary and cover probes
- CORS middleware configuration
- Automatic route discovery and registration

Architecture:
    - Logging configured before app creation (JSON/console)
    - Lifespan context manager owns the HTTP client pool
    - Routes are auto-discovered from nomadisch/routes/
    - Configuration is loaded from environment-specific .env files
"""

from uuid import uuid4

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nomadisch.core import app_lifespan, register_routers, setup_logging
from nomadisch.core.exceptions import register_exception_handlers
from nomadisch.main_config import cors_config, fastapi_config, settings

# =============================================================================
# Setup Logging (before app creation)
# =============================================================================
setup_logging()

app = FastAPI(
    title=fastapi_config.title,
    description=fastapi_config.description,
    version=fastapi_config.version,
    docs_url=fastapi_config.docs_url,
    redoc_url=fastapi_config.redoc_url,
    openapi_url=fastapi_config.openapi_url,
    lifespan=app_lifespan,
    debug=fastapi_config.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_config.origins_list,
    allow_credentials=cors_config.allow_credentials,
    allow_methods=cors_config.methods_list,
    allow_headers=cors_config.headers_list,
)

# Adds request_id to the logging context
app.add_middleware(
    CorrelationIdMiddleware,
    header_name="X-Request-ID",
    generator=lambda: uuid4().hex[:16],
    validator=None,
    transformer=lambda x: x,
)

register_exception_handlers(app)

# =============================================================================
# Auto-register all routes
# =============================================================================
register_routers(app)

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "nomadisch.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_config=None,  # keep the structlog setup
    )
