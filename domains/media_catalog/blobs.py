"""In-memory content store handing out ``blob:`` references."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Dict, Optional, Protocol

from loguru import logger

from app.utils.helpers import generate_uuid
from domains.media_catalog.errors import MaterializationError
from domains.media_catalog.models import SourceHandle

BLOB_SCHEME = "blob:"


class Materializer(Protocol):
    """Turns raw candidate bytes into a releasable content reference."""

    def materialize(self, source: SourceHandle, expected_size: Optional[int] = None) -> str: ...

    def release(self, content_ref: str) -> None: ...


class BlobStore:
    """
    Process-local blob registry.

    Each materialized source gets its own ``blob:<uuid>`` reference that stays
    resolvable until released.
    """

    def __init__(self) -> None:
        self._blobs: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def materialize(self, source: SourceHandle, expected_size: Optional[int] = None) -> str:
        """
        Copy ``source`` into the store and return its reference.

        Args:
            source: Bytes or a file path
            expected_size: Size the candidate was validated with; the copy is
                refused when the bytes read differ (file still being written,
                truncated or replaced)

        Raises:
            MaterializationError: Source unreadable or size changed
        """

        if isinstance(source, Path):
            try:
                data = source.read_bytes()
            except OSError as e:
                raise MaterializationError(f"Could not read {source}: {e}") from e
        elif isinstance(source, (bytes, bytearray, memoryview)):
            data = bytes(source)
        else:
            raise MaterializationError(f"Unsupported source handle: {type(source).__name__}")

        if expected_size is not None and len(data) != expected_size:
            raise MaterializationError(
                f"Size changed since validation: expected {expected_size} bytes, read {len(data)}"
            )

        content_ref = f"{BLOB_SCHEME}{generate_uuid()}"
        with self._lock:
            self._blobs[content_ref] = data

        logger.debug(f"Materialized {content_ref} ({len(data)} bytes)")
        return content_ref

    def resolve(self, content_ref: str) -> Optional[bytes]:
        """Return the bytes behind ``content_ref`` or None once released."""

        with self._lock:
            return self._blobs.get(content_ref)

    def release(self, content_ref: str) -> None:
        """Drop the bytes behind ``content_ref``; unknown refs are ignored."""

        with self._lock:
            data = self._blobs.pop(content_ref, None)

        if data is None:
            logger.debug(f"Release of unknown blob ignored: {content_ref}")
        else:
            logger.debug(f"Released {content_ref}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._blobs)
