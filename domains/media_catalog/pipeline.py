"""
Ingestion pipeline for the media catalog.

Runs every candidate of a batch through the classifier, stages the accepted
ones and drives each staging entry to a terminal state on its own asyncio
task:

    staging --(progress reaches 100, content materialized)--> ready
    staging --(cancelled, transfer or materialization error)--> failed

Terminal entries leave the pipeline immediately. Ready entries are handed to
the catalog; failed ones are reported and dropped. Nothing is retried.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from functools import partial
from typing import AbstractSet, Callable, Dict, Iterable, List, Optional

from loguru import logger

from app.utils.helpers import generate_uuid, utc_now
from domains.media_catalog.blobs import Materializer
from domains.media_catalog.catalog import Catalog
from domains.media_catalog.classifier import (
    DEFAULT_DOCUMENT_TYPES,
    DEFAULT_MAX_SIZE_BYTES,
    classify,
)
from domains.media_catalog.errors import CANCELLED, DuplicateIdError, StagingError
from domains.media_catalog.models import (
    BatchReceipt,
    Candidate,
    MediaEntry,
    OutcomeEvent,
    OutcomeKind,
    Rejected,
    StagingEntry,
    StagingSnapshot,
    StagingState,
)
from domains.media_catalog.transport import Transport

OutcomeHook = Callable[[OutcomeEvent], None]
ProgressHook = Callable[[StagingSnapshot], None]


class IngestionPipeline:
    """Staging sessions feeding a catalog."""

    def __init__(
        self,
        catalog: Catalog,
        transport: Transport,
        materializer: Materializer,
        on_outcome: Optional[OutcomeHook] = None,
        on_progress: Optional[ProgressHook] = None,
        max_size_bytes: int = DEFAULT_MAX_SIZE_BYTES,
        document_types: AbstractSet[str] = DEFAULT_DOCUMENT_TYPES,
        id_factory: Callable[[], str] = generate_uuid,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize ingestion pipeline.

        Args:
            catalog: Receives entries that reach the ready state
            transport: Moves bytes and reports progress for each entry
            materializer: Releases content refs the catalog refused
            on_outcome: Called once per accept/reject/complete/fail event
            on_progress: Called with a snapshot after every progress tick
            max_size_bytes: Per-file size limit
            document_types: Exact MIME types accepted as documents
            id_factory: Produces unique entry ids
            clock: Produces the ``added_at`` timestamp
        """
        self._catalog = catalog
        self._transport = transport
        self._materializer = materializer
        self._on_outcome = on_outcome
        self._on_progress = on_progress
        self.max_size_bytes = max_size_bytes
        self.document_types = frozenset(document_types)
        self._id_factory = id_factory
        self._clock = clock

        self._entries: Dict[str, StagingEntry] = {}
        self._tasks: Dict[str, asyncio.Task] = {}

    # Public API ----------------------------------------------------------------------

    def ingest(self, candidates: Iterable[Candidate]) -> BatchReceipt:
        """
        Start staging a batch of candidates.

        Returns immediately; every accepted candidate progresses on its own
        task. Must be called from a running event loop.

        Returns:
            Ids of the staging entries created and the rejection events,
            both in batch order
        """
        loop = asyncio.get_running_loop()
        staged: List[str] = []
        rejected: List[OutcomeEvent] = []

        for candidate in candidates:
            outcome = classify(candidate, self.max_size_bytes, self.document_types)

            if isinstance(outcome, Rejected):
                logger.warning(f"Rejected {candidate.name}: {outcome.reason.value}")
                event = OutcomeEvent(
                    kind=OutcomeKind.REJECTED,
                    name=candidate.name,
                    message=outcome.message,
                    reason=outcome.reason.value,
                )
                rejected.append(event)
                self._notify(event)
                continue

            entry = StagingEntry(
                id=self._id_factory(),
                name=candidate.name,
                category=outcome.category,
                media_type=candidate.media_type,
                size_bytes=candidate.size_bytes,
                source=candidate.source,
                started_at=self._clock(),
            )
            self._entries[entry.id] = entry

            logger.info(f"Staging {entry.name} as {entry.category.value} (id={entry.id})")
            self._notify(OutcomeEvent(
                kind=OutcomeKind.ACCEPTED,
                name=entry.name,
                message=f"{entry.name} is being uploaded.",
                entry_id=entry.id,
            ))

            task = loop.create_task(self._run(entry), name=f"staging-{entry.id}")
            self._tasks[entry.id] = task
            task.add_done_callback(partial(self._forget_task, entry.id))
            staged.append(entry.id)

        return BatchReceipt(accepted=tuple(staged), rejected=tuple(rejected))

    def cancel(self, entry_id: str) -> bool:
        """
        Cancel an in-flight staging entry.

        The entry is dropped whatever its progress and its task is torn down.
        Unknown or already terminal ids are a no-op.

        Returns:
            True if an in-flight entry was cancelled
        """
        entry = self._entries.get(entry_id)
        if entry is None:
            logger.debug(f"Cancel ignored, no staging entry {entry_id}")
            return False

        task = self._tasks.pop(entry_id, None)
        self._fail(entry, CANCELLED)
        if task is not None and not task.done():
            task.cancel()
        return True

    def staging(self) -> List[StagingSnapshot]:
        """Snapshots of in-flight entries in the order they were staged."""
        return [entry.snapshot() for entry in self._entries.values()]

    def get_staging(self, entry_id: str) -> Optional[StagingSnapshot]:
        entry = self._entries.get(entry_id)
        return entry.snapshot() if entry else None

    @property
    def in_flight(self) -> int:
        return len(self._entries)

    async def drain(self) -> None:
        """Wait until every in-flight entry has reached a terminal state."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel every in-flight entry and wait for the tasks to unwind."""
        tasks = list(self._tasks.values())
        for entry_id in list(self._entries):
            self.cancel(entry_id)

        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Cancelled {len(tasks)} staging task(s)")

    # State machine -------------------------------------------------------------------

    async def _run(self, entry: StagingEntry) -> None:
        try:
            content_ref = await self._transport.transfer(entry, partial(self._advance, entry))
        except StagingError as e:
            self._fail(entry, str(e))
            return
        except Exception as e:
            logger.exception(f"Unexpected error while staging {entry.name}")
            self._fail(entry, f"Unexpected error: {e}")
            return

        self._complete(entry, content_ref)

    def _advance(self, entry: StagingEntry, progress: float) -> None:
        if entry.state is not StagingState.STAGING:
            return

        progress = min(progress, 100.0)
        if progress < entry.progress:
            logger.warning(
                f"Ignoring backwards progress for {entry.name}: "
                f"{entry.progress:.1f} -> {progress:.1f}"
            )
            return

        entry.progress = progress
        logger.debug(f"{entry.name}: {progress:.1f}%")

        if self._on_progress is not None:
            try:
                self._on_progress(entry.snapshot())
            except Exception:
                logger.exception("Progress hook failed")

    def _complete(self, entry: StagingEntry, content_ref: str) -> None:
        if entry.state is not StagingState.STAGING:
            # Lost a race with cancellation; nobody owns this content
            self._materializer.release(content_ref)
            return

        entry.progress = 100.0
        entry.state = StagingState.READY
        self._discard(entry)

        media = MediaEntry(
            id=entry.id,
            name=entry.name,
            category=entry.category,
            size_bytes=entry.size_bytes,
            media_type=entry.media_type,
            content_ref=content_ref,
            added_at=self._clock(),
        )

        try:
            self._catalog.add(media)
        except DuplicateIdError as e:
            logger.error(f"Staging produced a duplicate id: {e}")
            self._materializer.release(content_ref)
            entry.state = StagingState.FAILED
            entry.failure_reason = "DuplicateId"
            self._notify(OutcomeEvent(
                kind=OutcomeKind.STAGING_FAILED,
                name=entry.name,
                message=f"{entry.name} could not be added to the library.",
                entry_id=entry.id,
                reason=entry.failure_reason,
            ))
            return

        logger.success(f"Upload complete: {entry.name}")
        self._notify(OutcomeEvent(
            kind=OutcomeKind.STAGING_COMPLETE,
            name=entry.name,
            message=f"{entry.name} has been uploaded successfully.",
            entry_id=entry.id,
        ))

    def _fail(self, entry: StagingEntry, reason: str) -> None:
        if entry.state is not StagingState.STAGING:
            return

        entry.state = StagingState.FAILED
        entry.failure_reason = reason
        self._discard(entry)

        logger.warning(f"Staging failed for {entry.name}: {reason}")
        self._notify(OutcomeEvent(
            kind=OutcomeKind.STAGING_FAILED,
            name=entry.name,
            message=f"{entry.name} was not uploaded: {reason}",
            entry_id=entry.id,
            reason=reason,
        ))

    def _discard(self, entry: StagingEntry) -> None:
        self._entries.pop(entry.id, None)
        entry.source = None

    def _forget_task(self, entry_id: str, task: asyncio.Task) -> None:
        if self._tasks.get(entry_id) is task:
            del self._tasks[entry_id]

    def _notify(self, event: OutcomeEvent) -> None:
        if self._on_outcome is None:
            return
        try:
            self._on_outcome(event)
        except Exception:
            logger.exception(f"Outcome hook failed for {event.kind.value} {event.name}")
