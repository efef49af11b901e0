"""
Media Shelf - Main FastAPI Application

Personal media catalog service:
- Upload staging with simulated transfer progress
- In-memory catalog of video, audio and document files
- Search, type filter, dashboard stats and previews
- Optional watched inbox folder
"""

import asyncio
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
import sys

from app.utils.config import get_settings
from app.api import files, health, uploads
from domains.media_catalog.inbox import InboxWatcher
from domains.media_catalog.library import MediaLibrary
from domains.media_catalog.models import OutcomeEvent, OutcomeKind


# Configure logging
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
    level=get_settings().log_level.upper()
)


def log_outcome(event: OutcomeEvent):
    """Default outcome listener until a push channel exists."""
    level = "WARNING" if event.kind in (OutcomeKind.REJECTED, OutcomeKind.STAGING_FAILED) else "INFO"
    logger.log(level, f"[{event.kind.value}] {event.message}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(f"Starting {settings.api_title} v{settings.api_version}")

    library = getattr(app.state, "library", None)
    if library is None:
        library = MediaLibrary(settings, on_outcome=log_outcome)
        app.state.library = library

    watcher = None
    if settings.inbox_dir is not None:
        try:
            watcher = InboxWatcher(
                settings.inbox_dir,
                asyncio.get_running_loop(),
                library.ingest,
                poll_seconds=settings.inbox_poll_seconds,
            )
            watcher.start()
        except OSError as e:
            logger.error(f"Failed to watch inbox {settings.inbox_dir}: {e}")
            watcher = None

    yield

    # Cleanup
    logger.info("Shutting down application...")
    if watcher is not None:
        watcher.stop()
    await library.close()
    app.state.library = None
    logger.success("Application shut down complete")


# Create FastAPI app
settings = get_settings()
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="Personal media catalog with staged uploads",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.log_level == "DEBUG" else "An error occurred"
        }
    )


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(uploads.router, prefix="/uploads", tags=["Uploads"])
app.include_router(files.router, prefix="/files", tags=["Files"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "Media Shelf",
        "version": settings.api_version,
        "status": "operational",
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower()
    )
