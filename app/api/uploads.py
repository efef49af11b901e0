"""
Upload endpoints.

Includes:
- Batch submission (multipart)
- Staging progress and cancellation
- Outcome feed for user notifications
"""

from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from loguru import logger

from app.api.dependencies import get_library
from app.models.schemas import (
    OperationStatus,
    OutcomeOut,
    StagingList,
    StagingOut,
    UploadResponse,
)
from domains.media_catalog.library import MediaLibrary
from domains.media_catalog.models import Candidate

router = APIRouter()


@router.post("", response_model=UploadResponse, status_code=202)
async def upload_files(
    files: List[UploadFile] = File(...),
    library: MediaLibrary = Depends(get_library),
):
    """
    Submit a batch of files for staging.

    Files are validated immediately; accepted ones continue in the
    background and show up under GET /uploads until they finish.

    Returns:
        Ids of accepted files and the rejection outcomes
    """
    limit = library.pipeline.max_size_bytes
    candidates = [await _candidate_from_upload(upload, limit) for upload in files]

    logger.info(f"Upload batch received: {len(candidates)} file(s)")
    receipt = library.ingest(candidates)

    return UploadResponse(
        accepted=list(receipt.accepted),
        rejected=[OutcomeOut.from_event(event) for event in receipt.rejected],
    )


@router.get("", response_model=StagingList)
async def list_uploads(library: MediaLibrary = Depends(get_library)):
    """In-flight uploads with their progress."""
    uploads = [StagingOut.from_snapshot(snapshot) for snapshot in library.staging()]
    return StagingList(uploads=uploads, total=len(uploads))


@router.get("/outcomes", response_model=List[OutcomeOut])
async def list_outcomes(limit: int = 20, library: MediaLibrary = Depends(get_library)):
    """Most recent upload outcomes, newest first."""
    return [OutcomeOut.from_event(event) for event in library.outcomes(limit)]


@router.delete("/{entry_id}", response_model=OperationStatus)
async def cancel_upload(entry_id: str, library: MediaLibrary = Depends(get_library)):
    """
    Cancel an in-flight upload.

    Args:
        entry_id: Staging id returned by POST /uploads
    """
    if not library.cancel_staging(entry_id):
        raise HTTPException(status_code=404, detail=f"No upload in progress with id '{entry_id}'")

    return OperationStatus(status="cancelled", message=f"Upload {entry_id} cancelled")


async def _candidate_from_upload(upload: UploadFile, limit: int) -> Candidate:
    """
    Build a candidate without buffering bodies that exceed ``limit``.

    Parts over the limit keep an empty source; the classifier rejects them on
    size before the source is ever used.
    """
    name = upload.filename or "untitled"
    media_type = upload.content_type or ""

    if upload.size is not None and upload.size > limit:
        return Candidate(name=name, media_type=media_type, size_bytes=upload.size, source=b"")

    # Size unknown: read one byte past the limit at most
    data = await upload.read(limit + 1)
    if len(data) > limit:
        return Candidate(name=name, media_type=media_type, size_bytes=len(data), source=b"")

    return Candidate.from_bytes(name=name, media_type=media_type, data=data)
