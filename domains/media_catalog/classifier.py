"""
Candidate validation and classification.

Pure functions only: reporting rejections is the pipeline's job.
"""

from typing import AbstractSet, Optional

from app.utils.helpers import format_bytes, normalise_media_type
from domains.media_catalog.errors import RejectReason
from domains.media_catalog.models import (
    Accepted,
    Candidate,
    Category,
    Classification,
    Rejected,
)

DEFAULT_MAX_SIZE_BYTES = 50 * 1024 * 1024
DEFAULT_DOCUMENT_TYPES = frozenset({"application/pdf"})


def category_for(
    media_type: Optional[str],
    document_types: AbstractSet[str] = DEFAULT_DOCUMENT_TYPES,
) -> Optional[Category]:
    """
    Map a declared MIME type to a catalog category.

    Args:
        media_type: Declared MIME type, parameters allowed
        document_types: Exact MIME types treated as documents

    Returns:
        Category, or None if the type is not supported
    """
    mime = normalise_media_type(media_type)

    if mime.startswith("video/"):
        return Category.VIDEO
    if mime.startswith("audio/"):
        return Category.AUDIO
    if mime in document_types:
        return Category.DOCUMENT

    return None


def classify(
    candidate: Candidate,
    max_size_bytes: int = DEFAULT_MAX_SIZE_BYTES,
    document_types: AbstractSet[str] = DEFAULT_DOCUMENT_TYPES,
) -> Classification:
    """
    Decide whether a candidate may enter staging.

    The size limit is checked first, so an oversize file is TooLarge
    whatever its type. A file exactly at the limit is accepted.

    Returns:
        Accepted with the category, or Rejected with reason and message
    """
    if candidate.size_bytes > max_size_bytes:
        return Rejected(
            reason=RejectReason.TOO_LARGE,
            message=(
                f"{candidate.name} is too large. "
                f"Maximum file size is {format_bytes(max_size_bytes)}."
            ),
        )

    category = category_for(candidate.media_type, document_types)
    if category is None:
        return Rejected(
            reason=RejectReason.UNSUPPORTED_TYPE,
            message=(
                f"{candidate.name} is not supported. "
                "Please upload video, audio, or PDF files."
            ),
        )

    return Accepted(category=category)
