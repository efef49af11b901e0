"""
Health check endpoint.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from datetime import datetime

from app.api.dependencies import get_library
from app.utils.config import get_settings
from app.utils.helpers import utc_now
from domains.media_catalog.library import MediaLibrary

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    timestamp: datetime
    catalog_entries: int
    uploads_in_flight: int
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check(library: MediaLibrary = Depends(get_library)):
    """
    Health check endpoint.

    Reports:
    - API is running
    - Catalog size and uploads still staging
    """
    settings = get_settings()

    return HealthResponse(
        status="healthy",
        timestamp=utc_now(),
        catalog_entries=len(library.catalog),
        uploads_in_flight=library.pipeline.in_flight,
        version=settings.api_version
    )
