"""
Watched inbox folder for the media catalog.

Files written into (or moved into) the inbox directory become candidates for
the ingestion pipeline once the writer closes them, so the size recorded on
the candidate is the final one. Watchdog delivers events on its own observer
thread, so candidates are handed to the event loop with ``call_soon_threadsafe`` and
pipeline state is only ever touched from the loop.
"""

import asyncio
from pathlib import Path
from typing import Callable, List, Optional

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from app.utils.helpers import guess_media_type
from domains.media_catalog.models import Candidate

IngestFn = Callable[[List[Candidate]], object]


def candidate_from_path(path: Path) -> Optional[Candidate]:
    """
    Build a candidate for a file on disk.

    Args:
        path: File path

    Returns:
        Candidate reading lazily from ``path``, or None if it is not a file
    """
    try:
        if not path.is_file():
            return None
        size = path.stat().st_size
    except OSError as e:
        logger.warning(f"Cannot stat {path}: {e}")
        return None

    return Candidate(
        name=path.name,
        media_type=guess_media_type(path) or "application/octet-stream",
        size_bytes=size,
        source=path,
    )


class InboxEventHandler(FileSystemEventHandler):
    """Turns new files in the inbox into ingestion batches."""

    def __init__(self, loop: asyncio.AbstractEventLoop, ingest: IngestFn):
        """
        Initialize event handler.

        Args:
            loop: Event loop that owns the pipeline
            ingest: Called on the loop with a one-file batch
        """
        super().__init__()
        self.loop = loop
        self.ingest = ingest
        self.excluded_suffixes = {".part", ".crdownload", ".tmp", ".swp"}

    def should_process(self, path: Path) -> bool:
        """Skip hidden files and partial downloads."""
        if path.name.startswith('.'):
            return False
        return path.suffix.lower() not in self.excluded_suffixes

    def on_closed(self, event: FileSystemEvent):
        """Handle a file closed after writing."""
        if event.is_directory:
            return
        self._submit(Path(event.src_path))

    def on_moved(self, event: FileSystemEvent):
        """Handle a file renamed into place (e.g. finished download)."""
        if event.is_directory:
            return
        dest = getattr(event, "dest_path", None)
        if dest:
            self._submit(Path(dest))

    def _submit(self, path: Path) -> None:
        if not self.should_process(path):
            return

        candidate = candidate_from_path(path)
        if candidate is None:
            return

        logger.info(f"Inbox picked up: {path}")
        self.loop.call_soon_threadsafe(self.ingest, [candidate])


class InboxWatcher:
    """Inbox monitoring orchestrator."""

    def __init__(
        self,
        inbox_dir: Path,
        loop: asyncio.AbstractEventLoop,
        ingest: IngestFn,
        poll_seconds: float = 1.0,
    ):
        """
        Initialize watcher.

        Args:
            inbox_dir: Directory to watch (created on start)
            loop: Event loop that owns the pipeline
            ingest: Called on the loop with a one-file batch
            poll_seconds: How long the observer thread waits for events per cycle
        """
        self.inbox_dir = inbox_dir.expanduser()
        self.event_handler = InboxEventHandler(loop, ingest)
        self.observer = Observer(timeout=poll_seconds)

    def start(self) -> None:
        """Start watching the inbox directory."""
        self.inbox_dir.mkdir(parents=True, exist_ok=True)
        self.observer.schedule(self.event_handler, str(self.inbox_dir), recursive=False)
        self.observer.daemon = True
        self.observer.start()
        logger.success(f"Started watching inbox: {self.inbox_dir}")

    def stop(self) -> None:
        """Stop watching."""
        self.observer.stop()
        self.observer.join()
        logger.info("Inbox observer stopped")
