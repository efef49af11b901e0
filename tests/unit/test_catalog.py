from datetime import datetime, timezone

import pytest

from domains.media_catalog.catalog import Catalog
from domains.media_catalog.errors import DuplicateIdError
from domains.media_catalog.models import Category, MediaEntry


class RecordingMaterializer:
    def __init__(self):
        self.released: list[str] = []

    def materialize(self, source, expected_size=None) -> str:
        raise AssertionError("catalog never materializes")

    def release(self, content_ref: str) -> None:
        self.released.append(content_ref)


def make_entry(entry_id: str, name: str = "clip.mp4", category: Category = Category.VIDEO) -> MediaEntry:
    return MediaEntry(
        id=entry_id,
        name=name,
        category=category,
        size_bytes=2048,
        media_type="video/mp4",
        content_ref=f"blob:{entry_id}",
        added_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def materializer():
    return RecordingMaterializer()


@pytest.fixture
def catalog(materializer):
    return Catalog(materializer)


def test_add_then_get_returns_same_entry(catalog):
    entry = make_entry("a")
    catalog.add(entry)

    assert catalog.get("a") == entry
    assert "a" in catalog


def test_get_missing_returns_none(catalog):
    assert catalog.get("missing") is None


def test_add_duplicate_id_raises(catalog):
    catalog.add(make_entry("a"))

    with pytest.raises(DuplicateIdError) as excinfo:
        catalog.add(make_entry("a", name="other.mp4"))

    assert excinfo.value.entry_id == "a"
    assert catalog.get("a").name == "clip.mp4"
    assert len(catalog) == 1


def test_remove_releases_content_once(catalog, materializer):
    catalog.add(make_entry("a"))

    assert catalog.remove("a") is True
    assert catalog.get("a") is None
    assert materializer.released == ["blob:a"]

    assert catalog.remove("a") is False
    assert materializer.released == ["blob:a"]


def test_remove_missing_is_noop(catalog, materializer):
    assert catalog.remove("never-added") is False
    assert materializer.released == []


def test_list_keeps_insertion_order(catalog):
    for entry_id in ["c", "a", "b"]:
        catalog.add(make_entry(entry_id))
    catalog.remove("a")
    catalog.add(make_entry("d"))

    assert [entry.id for entry in catalog.list()] == ["c", "b", "d"]
    assert len(catalog) == 3


def test_iteration_is_restartable_snapshot(catalog):
    catalog.add(make_entry("a"))
    snapshot = catalog.list()
    catalog.add(make_entry("b"))

    assert [e.id for e in snapshot] == ["a"]
    assert [e.id for e in catalog] == ["a", "b"]
    assert [e.id for e in catalog] == ["a", "b"]


def test_clear_releases_everything(catalog, materializer):
    catalog.add(make_entry("a"))
    catalog.add(make_entry("b"))

    assert catalog.clear() == 2
    assert len(catalog) == 0
    assert sorted(materializer.released) == ["blob:a", "blob:b"]


if __name__ == "__main__":  # pragma: no cover
    pytest.main([__file__])
