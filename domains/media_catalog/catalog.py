"""
Authoritative in-memory store of ready media entries.

Provides:
- Insertion-ordered storage keyed by entry id
- Atomic add/remove guarded by a lock
- Release of each entry's content reference on removal
"""

from __future__ import annotations

import threading
from typing import Dict, Iterator, Optional, Tuple

from loguru import logger

from domains.media_catalog.blobs import Materializer
from domains.media_catalog.errors import DuplicateIdError
from domains.media_catalog.models import MediaEntry


class Catalog:
    """Media catalog owned by a single MediaLibrary."""

    def __init__(self, materializer: Materializer):
        """
        Initialize catalog.

        Args:
            materializer: Releases content references of removed entries
        """
        self._materializer = materializer
        self._entries: Dict[str, MediaEntry] = {}
        self._lock = threading.Lock()

    def add(self, entry: MediaEntry) -> None:
        """
        Insert a fully formed entry.

        Raises:
            DuplicateIdError: If an entry with the same id exists
        """
        with self._lock:
            if entry.id in self._entries:
                raise DuplicateIdError(entry.id)
            self._entries[entry.id] = entry

        logger.info(f"Catalogued {entry.name} ({entry.category.value}, id={entry.id})")

    def remove(self, entry_id: str) -> bool:
        """
        Delete an entry and release its content.

        Removing an absent id is a no-op.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            entry = self._entries.pop(entry_id, None)

        if entry is None:
            return False

        self._materializer.release(entry.content_ref)
        logger.info(f"Removed {entry.name} (id={entry.id})")
        return True

    def get(self, entry_id: str) -> Optional[MediaEntry]:
        """Return the entry or None if not found."""
        with self._lock:
            return self._entries.get(entry_id)

    def list(self) -> Tuple[MediaEntry, ...]:
        """Snapshot of all entries in insertion order."""
        with self._lock:
            return tuple(self._entries.values())

    def clear(self) -> int:
        """Remove every entry, releasing content. Returns the count removed."""
        with self._lock:
            entries = tuple(self._entries.values())
            self._entries.clear()

        for entry in entries:
            self._materializer.release(entry.content_ref)
        return len(entries)

    def __iter__(self) -> Iterator[MediaEntry]:
        return iter(self.list())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        with self._lock:
            return entry_id in self._entries
