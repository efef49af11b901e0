"""
Shared FastAPI dependencies.
"""

from fastapi import Request

from domains.media_catalog.library import MediaLibrary


def get_library(request: Request) -> MediaLibrary:
    """Media library created by the application lifespan."""
    return request.app.state.library
