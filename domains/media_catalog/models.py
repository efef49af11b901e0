"""Data shapes shared across the media catalog domain."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

from domains.media_catalog.errors import RejectReason

# Raw candidate bytes, either already in memory or still on disk.
SourceHandle = Union[bytes, Path]


class Category(str, Enum):
    """Kind of media a catalog entry holds."""

    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"


class StagingState(str, Enum):
    """States a staging entry moves through."""

    STAGING = "staging"
    READY = "ready"
    FAILED = "failed"


class OutcomeKind(str, Enum):
    """Kinds of events reported to the outcome hook."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"
    STAGING_COMPLETE = "staging_complete"
    STAGING_FAILED = "staging_failed"


@dataclass(frozen=True, slots=True)
class Candidate:
    """A raw file offered for ingestion, not yet validated."""

    name: str
    media_type: str
    size_bytes: int
    source: SourceHandle = field(repr=False)

    @classmethod
    def from_bytes(cls, name: str, media_type: str, data: bytes) -> "Candidate":
        return cls(name=name, media_type=media_type, size_bytes=len(data), source=data)


@dataclass(frozen=True, slots=True)
class Accepted:
    category: Category


@dataclass(frozen=True, slots=True)
class Rejected:
    reason: RejectReason
    message: str


Classification = Union[Accepted, Rejected]


@dataclass(frozen=True, slots=True)
class MediaEntry:
    """A validated, fully ingested catalog record."""

    id: str
    name: str
    category: Category
    size_bytes: int
    media_type: str
    content_ref: str
    added_at: datetime


@dataclass(slots=True)
class StagingEntry:
    """
    In-progress ingestion owned by exactly one pipeline task.

    Never handed out directly; readers get a StagingSnapshot instead.
    """

    id: str
    name: str
    category: Category
    media_type: str
    size_bytes: int
    source: Optional[SourceHandle] = field(repr=False)
    started_at: datetime
    progress: float = 0.0
    state: StagingState = StagingState.STAGING
    failure_reason: Optional[str] = None

    def snapshot(self) -> "StagingSnapshot":
        return StagingSnapshot(
            id=self.id,
            name=self.name,
            category=self.category,
            size_bytes=self.size_bytes,
            progress=self.progress,
            state=self.state,
            failure_reason=self.failure_reason,
            started_at=self.started_at,
        )


@dataclass(frozen=True, slots=True)
class StagingSnapshot:
    """Read-only view of a staging entry at one point in time."""

    id: str
    name: str
    category: Category
    size_bytes: int
    progress: float
    state: StagingState
    failure_reason: Optional[str]
    started_at: datetime


@dataclass(frozen=True, slots=True)
class OutcomeEvent:
    """Notification delivered to the presentation layer."""

    kind: OutcomeKind
    name: str
    message: str
    entry_id: Optional[str] = None
    reason: Optional[str] = None


@dataclass(frozen=True, slots=True)
class BatchReceipt:
    """What happened to a batch at submission time."""

    accepted: Tuple[str, ...] = ()
    rejected: Tuple[OutcomeEvent, ...] = ()
