"""
Pydantic models for the Media Shelf API.

Response shapes for catalog entries, staging progress and outcome events.
"""

from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel

from app.utils.helpers import format_bytes
from domains.media_catalog.models import (
    Category,
    MediaEntry,
    OutcomeEvent,
    OutcomeKind,
    StagingSnapshot,
    StagingState,
)
from domains.media_catalog.query import CatalogStats


# =====================================================
# Catalog Models
# =====================================================

class MediaEntryOut(BaseModel):
    """Catalogued file."""
    id: str
    name: str
    category: Category
    size_bytes: int
    size_label: str
    media_type: str
    content_url: str
    added_at: datetime

    @classmethod
    def from_entry(cls, entry: MediaEntry) -> "MediaEntryOut":
        return cls(
            id=entry.id,
            name=entry.name,
            category=entry.category,
            size_bytes=entry.size_bytes,
            size_label=format_bytes(entry.size_bytes),
            media_type=entry.media_type,
            content_url=f"/files/{entry.id}/content",
            added_at=entry.added_at,
        )


class MediaEntryList(BaseModel):
    """Query result."""
    files: List[MediaEntryOut]
    total: int
    catalog_total: int


class CatalogStatsOut(BaseModel):
    """Dashboard aggregates."""
    total_count: int
    total_size_bytes: int
    total_size_label: str
    by_category: Dict[Category, int]

    @classmethod
    def from_stats(cls, stats: CatalogStats) -> "CatalogStatsOut":
        return cls(
            total_count=stats.total_count,
            total_size_bytes=stats.total_size_bytes,
            total_size_label=format_bytes(stats.total_size_bytes),
            by_category=dict(stats.by_category),
        )


class RemoveResponse(BaseModel):
    """Delete result; deleting a missing id is not an error."""
    id: str
    removed: bool


# =====================================================
# Staging Models
# =====================================================

class StagingOut(BaseModel):
    """In-flight upload."""
    id: str
    name: str
    category: Category
    size_bytes: int
    size_label: str
    progress: float
    state: StagingState
    failure_reason: Optional[str] = None
    started_at: datetime

    @classmethod
    def from_snapshot(cls, snapshot: StagingSnapshot) -> "StagingOut":
        return cls(
            id=snapshot.id,
            name=snapshot.name,
            category=snapshot.category,
            size_bytes=snapshot.size_bytes,
            size_label=format_bytes(snapshot.size_bytes),
            progress=round(snapshot.progress, 2),
            state=snapshot.state,
            failure_reason=snapshot.failure_reason,
            started_at=snapshot.started_at,
        )


class OutcomeOut(BaseModel):
    """Outcome event for display."""
    kind: OutcomeKind
    name: str
    message: str
    entry_id: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def from_event(cls, event: OutcomeEvent) -> "OutcomeOut":
        return cls(
            kind=event.kind,
            name=event.name,
            message=event.message,
            entry_id=event.entry_id,
            reason=event.reason,
        )


class UploadResponse(BaseModel):
    """Result of submitting a batch."""
    accepted: List[str]
    rejected: List[OutcomeOut]


class StagingList(BaseModel):
    """In-flight uploads."""
    uploads: List[StagingOut]
    total: int


# =====================================================
# Response Models
# =====================================================

class OperationStatus(BaseModel):
    """Generic operation status."""
    status: str
    message: str
