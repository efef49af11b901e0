"""
Helper utilities for Media Shelf.

Common functions used across the API and the media catalog domain.
"""

import mimetypes
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from uuid import uuid4

_SIZE_UNITS = ['B', 'KB', 'MB', 'GB', 'TB']


def generate_uuid() -> str:
    """Generate a unique identifier."""
    return str(uuid4())


def utc_now() -> datetime:
    """Get current timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def format_bytes(bytes_count: int) -> str:
    """
    Format bytes as human-readable string.

    Uses 1024 steps and at most two decimals, dropping trailing zeros
    (``1536`` -> ``"1.5 KB"``, ``0`` -> ``"0 B"``).
    """
    value = float(max(bytes_count, 0))
    unit = 0
    while value >= 1024.0 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024.0
        unit += 1

    text = f"{value:.2f}".rstrip('0').rstrip('.') or "0"
    return f"{text} {_SIZE_UNITS[unit]}"


def guess_media_type(path: Path) -> Optional[str]:
    """Guess a MIME type from the file extension."""
    media_type, _ = mimetypes.guess_type(path.name)
    return media_type


def normalise_media_type(media_type: Optional[str]) -> str:
    """Lower-case a MIME type and strip any parameters."""
    if not media_type:
        return ""
    return media_type.split(';', 1)[0].strip().lower()
