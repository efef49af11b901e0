"""
Read-only projections over catalog contents.

Every function takes a snapshot of entries and recomputes from it, so
results always match the catalog at call time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Union

from domains.media_catalog.models import Category, MediaEntry

ALL_CATEGORIES = "all"

CategoryFilter = Union[Category, str]


@dataclass(frozen=True, slots=True)
class MediaQuery:
    """Search text plus category filter, ANDed together."""

    text: str = ""
    category: CategoryFilter = ALL_CATEGORIES

    def __post_init__(self):
        if self.category != ALL_CATEGORIES:
            # Raises ValueError for anything that is not a category name
            object.__setattr__(self, "category", Category(self.category))

    def matches(self, entry: MediaEntry) -> bool:
        if self.category != ALL_CATEGORIES and entry.category != self.category:
            return False
        needle = self.text.lower()
        return not needle or needle in entry.name.lower()


@dataclass(slots=True)
class CatalogStats:
    """Aggregates shown on the dashboard."""

    total_count: int = 0
    total_size_bytes: int = 0
    by_category: Dict[Category, int] = field(
        default_factory=lambda: {category: 0 for category in Category}
    )


def query(entries: Iterable[MediaEntry], media_query: MediaQuery = MediaQuery()) -> List[MediaEntry]:
    """Filter entries by name substring and category, keeping input order."""
    return [entry for entry in entries if media_query.matches(entry)]


def catalog_stats(entries: Iterable[MediaEntry]) -> CatalogStats:
    """Count entries per category and total their size in one pass."""
    stats = CatalogStats()
    for entry in entries:
        stats.total_count += 1
        stats.total_size_bytes += entry.size_bytes
        stats.by_category[entry.category] += 1
    return stats


def recent(entries: Iterable[MediaEntry], limit: int = 5) -> List[MediaEntry]:
    """Most recently added entries first."""
    if limit <= 0:
        return []
    return list(reversed(list(entries)))[:limit]
