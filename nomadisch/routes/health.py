"""Health check endpoints for monitoring."""
from fastapi import APIRouter

from nomadisch.main_config import fastapi_config

router = APIRouter(
    prefix="/api",
    tags=["health"],
)


@router.get("/")
async def root():
    """API root endpoint."""
    return {
        "message": fastapi_config.title,
        "version": fastapi_config.version,
        "docs": fastapi_config.docs_url,
    }


@router.get("/health")
async def health_check():
    """Liveness only; Airtable is not contacted."""
    return {"status": "healthy"}
