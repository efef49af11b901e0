"""
Catalog browsing endpoints.

Includes:
- Search and type filter
- Dashboard stats and recent files
- Entry lookup, content preview and deletion
"""

from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Response
from loguru import logger

from app.api.dependencies import get_library
from app.models.schemas import (
    CatalogStatsOut,
    MediaEntryList,
    MediaEntryOut,
    RemoveResponse,
)
from domains.media_catalog.library import MediaLibrary
from domains.media_catalog.query import ALL_CATEGORIES, MediaQuery

router = APIRouter()


@router.get("", response_model=MediaEntryList)
async def list_files(
    text: str = "",
    category: str = ALL_CATEGORIES,
    library: MediaLibrary = Depends(get_library),
):
    """
    Search the catalog.

    Args:
        text: Case-insensitive substring of the file name
        category: all, video, audio or document

    Returns:
        Matching entries in insertion order
    """
    try:
        media_query = MediaQuery(text=text, category=category)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown category '{category}'")

    files = library.query(media_query)
    return MediaEntryList(
        files=[MediaEntryOut.from_entry(entry) for entry in files],
        total=len(files),
        catalog_total=len(library.catalog),
    )


@router.get("/stats", response_model=CatalogStatsOut)
async def get_stats(library: MediaLibrary = Depends(get_library)):
    """Per-category counts and total storage used."""
    return CatalogStatsOut.from_stats(library.stats())


@router.get("/recent", response_model=MediaEntryList)
async def get_recent(limit: int = 5, library: MediaLibrary = Depends(get_library)):
    """Most recently added files, newest first."""
    files = library.recent(limit)
    return MediaEntryList(
        files=[MediaEntryOut.from_entry(entry) for entry in files],
        total=len(files),
        catalog_total=len(library.catalog),
    )


@router.get("/{entry_id}", response_model=MediaEntryOut)
async def get_file(entry_id: str, library: MediaLibrary = Depends(get_library)):
    """Get a single catalog entry."""
    entry = library.get(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"File '{entry_id}' not found")
    return MediaEntryOut.from_entry(entry)


@router.get("/{entry_id}/content")
async def get_file_content(
    entry_id: str,
    download: bool = False,
    library: MediaLibrary = Depends(get_library),
):
    """
    Stream stored bytes for preview or download.

    Args:
        download: Ask the client to save instead of display
    """
    entry = library.get(entry_id)
    data: Optional[bytes] = library.resolve_content(entry_id) if entry else None
    if entry is None or data is None:
        raise HTTPException(status_code=404, detail=f"File '{entry_id}' not found")

    disposition = "attachment" if download else "inline"
    return Response(
        content=data,
        media_type=entry.media_type,
        headers={"Content-Disposition": f"{disposition}; filename*=UTF-8''{quote(entry.name)}"},
    )


@router.delete("/{entry_id}", response_model=RemoveResponse)
async def delete_file(entry_id: str, library: MediaLibrary = Depends(get_library)):
    """Delete a file; deleting an unknown id succeeds with removed=false."""
    removed = library.remove(entry_id)
    if removed:
        logger.info(f"File deleted via API: {entry_id}")
    return RemoveResponse(id=entry_id, removed=removed)
