"""
MediaLibrary: the single object the presentation layer talks to.

Owns the blob store, catalog and ingestion pipeline for one session and
exposes ingest/cancel/list/get/remove/query plus the outcome feed.
"""

from __future__ import annotations

import asyncio
import random
from collections import deque
from datetime import datetime
from typing import Callable, Deque, List, Optional, Sequence

from loguru import logger

from app.utils.config import Settings
from app.utils.helpers import generate_uuid, utc_now
from domains.media_catalog.blobs import BlobStore
from domains.media_catalog.catalog import Catalog
from domains.media_catalog.models import (
    BatchReceipt,
    Candidate,
    MediaEntry,
    OutcomeEvent,
    StagingSnapshot,
)
from domains.media_catalog.pipeline import IngestionPipeline, OutcomeHook, ProgressHook
from domains.media_catalog.query import (
    CatalogStats,
    MediaQuery,
    catalog_stats,
    query,
    recent,
)
from domains.media_catalog.transport import SimulatedTransport, SleepFn, Transport


class MediaLibrary:
    """Catalog plus ingestion pipeline for one user session."""

    def __init__(
        self,
        settings: Settings,
        on_outcome: Optional[OutcomeHook] = None,
        on_progress: Optional[ProgressHook] = None,
        blobs: Optional[BlobStore] = None,
        transport: Optional[Transport] = None,
        sleep: Optional[SleepFn] = None,
        rng: Optional[random.Random] = None,
        id_factory: Callable[[], str] = generate_uuid,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize media library.

        Args:
            settings: Size limit, document types and staging timing
            on_outcome: Extra listener for outcome events
            on_progress: Listener for staging progress snapshots
            blobs: Content store (a fresh BlobStore by default)
            transport: Replaces the simulated transport when given
            sleep: Timer used by the simulated transport
            rng: Randomness used by the simulated transport
            id_factory: Produces unique entry ids
            clock: Produces entry timestamps
        """
        self.settings = settings
        self.blobs = blobs if blobs is not None else BlobStore()
        self.catalog = Catalog(self.blobs)
        self._listener = on_outcome
        self._outcomes: Deque[OutcomeEvent] = deque(maxlen=max(settings.outcome_history, 1))

        if transport is None:
            transport = SimulatedTransport(
                self.blobs,
                tick_min_ms=settings.staging_tick_min_ms,
                tick_jitter_ms=settings.staging_tick_jitter_ms,
                max_increment=settings.staging_max_increment,
                sleep=sleep or asyncio.sleep,
                rng=rng,
            )

        self.pipeline = IngestionPipeline(
            catalog=self.catalog,
            transport=transport,
            materializer=self.blobs,
            on_outcome=self._record_outcome,
            on_progress=on_progress,
            max_size_bytes=settings.max_upload_bytes,
            document_types=settings.get_document_types(),
            id_factory=id_factory,
            clock=clock,
        )

    # Ingestion -----------------------------------------------------------------------

    def ingest(self, candidates: Sequence[Candidate]) -> BatchReceipt:
        """Begin staging a batch; returns accepted ids and rejections."""
        return self.pipeline.ingest(candidates)

    def cancel_staging(self, entry_id: str) -> bool:
        """Best-effort cancel of an in-flight staging entry."""
        return self.pipeline.cancel(entry_id)

    def staging(self) -> List[StagingSnapshot]:
        return self.pipeline.staging()

    # Catalog -------------------------------------------------------------------------

    def list(self) -> Sequence[MediaEntry]:
        return self.catalog.list()

    def get(self, entry_id: str) -> Optional[MediaEntry]:
        return self.catalog.get(entry_id)

    def remove(self, entry_id: str) -> bool:
        return self.catalog.remove(entry_id)

    def resolve_content(self, entry_id: str) -> Optional[bytes]:
        """Bytes of a catalogued entry, for preview or download."""
        entry = self.catalog.get(entry_id)
        if entry is None:
            return None
        return self.blobs.resolve(entry.content_ref)

    # Views ---------------------------------------------------------------------------

    def query(self, media_query: MediaQuery = MediaQuery()) -> List[MediaEntry]:
        return query(self.catalog.list(), media_query)

    def stats(self) -> CatalogStats:
        return catalog_stats(self.catalog.list())

    def recent(self, limit: int = 5) -> List[MediaEntry]:
        return recent(self.catalog.list(), limit)

    def outcomes(self, limit: Optional[int] = None) -> List[OutcomeEvent]:
        """Most recent outcome events, newest first."""
        events = list(reversed(self._outcomes))
        return events if limit is None else events[:max(limit, 0)]

    # Lifecycle -----------------------------------------------------------------------

    async def close(self) -> None:
        """Cancel staging and release every catalogued blob."""
        await self.pipeline.shutdown()
        released = self.catalog.clear()
        logger.info(f"Media library closed, released {released} blob(s)")

    def _record_outcome(self, event: OutcomeEvent) -> None:
        self._outcomes.append(event)
        if self._listener is not None:
            self._listener(event)
