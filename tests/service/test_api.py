"""
Service-level tests for the Media Shelf API.

These drive the real FastAPI application through TestClient, with the
lifespan running, so uploads stage on the client's event loop exactly as
they would under uvicorn. Only the staging timing is shortened.
"""

import time

import pytest
from fastapi.testclient import TestClient
from starlette.datastructures import UploadFile as StarletteUploadFile

from app.main import app
from app.utils.config import Settings
from domains.media_catalog.library import MediaLibrary


def _client_with(settings: Settings):
    app.state.library = MediaLibrary(settings)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def client():
    """Client whose uploads finish almost immediately."""
    yield from _client_with(
        Settings(_env_file=None, staging_tick_min_ms=0, staging_tick_jitter_ms=0)
    )


@pytest.fixture
def slow_client():
    """Client whose uploads stay in staging for the whole test."""
    yield from _client_with(
        Settings(_env_file=None, staging_tick_min_ms=60_000, staging_tick_jitter_ms=0)
    )


def wait_for_uploads(client: TestClient, timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if client.get("/uploads").json()["total"] == 0:
            return
        time.sleep(0.01)
    raise AssertionError("uploads did not finish in time")


def upload(client: TestClient, *files):
    return client.post(
        "/uploads",
        files=[("files", (name, data, media_type)) for name, data, media_type in files],
    )


def test_upload_then_browse(client):
    response = upload(
        client,
        ("clip.mp4", b"\x00\x01\x02", "video/mp4"),
        ("backup.zip", b"PK", "application/zip"),
    )

    assert response.status_code == 202
    body = response.json()
    assert len(body["accepted"]) == 1
    assert body["rejected"][0]["reason"] == "UnsupportedType"
    assert body["rejected"][0]["name"] == "backup.zip"

    wait_for_uploads(client)

    listing = client.get("/files").json()
    assert listing["total"] == 1
    entry = listing["files"][0]
    assert entry["id"] == body["accepted"][0]
    assert entry["category"] == "video"
    assert entry["size_bytes"] == 3
    assert entry["content_url"] == f"/files/{entry['id']}/content"

    content = client.get(entry["content_url"])
    assert content.status_code == 200
    assert content.content == b"\x00\x01\x02"
    assert content.headers["content-type"].startswith("video/mp4")

    kinds = [event["kind"] for event in client.get("/uploads/outcomes").json()]
    assert kinds == ["staging_complete", "rejected", "accepted"]


def test_search_and_filter(client):
    upload(
        client,
        ("Report.pdf", b"%PDF-a", "application/pdf"),
        ("report2.pdf", b"%PDF-b", "application/pdf"),
        ("theme.mp3", b"ID3", "audio/mpeg"),
    )
    wait_for_uploads(client)

    names = lambda resp: sorted(f["name"] for f in resp.json()["files"])  # noqa: E731

    assert names(client.get("/files", params={"text": "REPORT"})) == ["Report.pdf", "report2.pdf"]
    assert names(client.get("/files", params={"text": "report", "category": "video"})) == []
    assert names(client.get("/files", params={"category": "audio"})) == ["theme.mp3"]
    assert client.get("/files", params={"category": "all"}).json()["catalog_total"] == 3
    assert client.get("/files", params={"category": "pictures"}).status_code == 422


def test_stats_and_recent(client):
    upload(client, ("a.mp4", b"1" * 1024, "video/mp4"))
    wait_for_uploads(client)
    upload(client, ("b.mp3", b"2" * 512, "audio/mpeg"))
    wait_for_uploads(client)

    stats = client.get("/files/stats").json()
    assert stats["total_count"] == 2
    assert stats["total_size_bytes"] == 1536
    assert stats["total_size_label"] == "1.5 KB"
    assert stats["by_category"] == {"video": 1, "audio": 1, "document": 0}

    recent = client.get("/files/recent", params={"limit": 1}).json()
    assert [f["name"] for f in recent["files"]] == ["b.mp3"]


def test_delete_is_idempotent(client):
    accepted = upload(client, ("talk.webm", b"webm", "video/webm")).json()["accepted"]
    wait_for_uploads(client)
    entry_id = accepted[0]

    first = client.delete(f"/files/{entry_id}")
    second = client.delete(f"/files/{entry_id}")

    assert first.json() == {"id": entry_id, "removed": True}
    assert second.status_code == 200
    assert second.json() == {"id": entry_id, "removed": False}
    assert client.get(f"/files/{entry_id}").status_code == 404
    assert client.get(f"/files/{entry_id}/content").status_code == 404


def test_oversize_upload_rejected(client):
    app.state.library.pipeline.max_size_bytes = 8

    body = upload(client, ("big.mp3", b"123456789", "audio/mpeg")).json()

    assert body["accepted"] == []
    assert body["rejected"][0]["reason"] == "TooLarge"
    assert client.get("/files").json()["total"] == 0


def test_oversize_upload_body_is_not_buffered(client, monkeypatch):
    reads = []
    original_read = StarletteUploadFile.read

    async def recording_read(self, size=-1):
        reads.append((self.filename, size))
        return await original_read(self, size)

    monkeypatch.setattr(StarletteUploadFile, "read", recording_read)
    app.state.library.pipeline.max_size_bytes = 8

    body = upload(
        client,
        ("big.mp4", b"0123456789" * 100, "video/mp4"),
        ("small.mp3", b"1234", "audio/mpeg"),
    ).json()

    assert [(r["name"], r["reason"]) for r in body["rejected"]] == [("big.mp4", "TooLarge")]
    assert len(body["accepted"]) == 1
    assert reads == [("small.mp3", 9)]


def test_cancel_staging(slow_client):
    entry_id = upload(slow_client, ("long.mp4", b"frames", "video/mp4")).json()["accepted"][0]

    staging = slow_client.get("/uploads").json()
    assert staging["total"] == 1
    assert staging["uploads"][0]["state"] == "staging"
    assert staging["uploads"][0]["progress"] < 100

    cancelled = slow_client.delete(f"/uploads/{entry_id}")
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"

    assert slow_client.delete(f"/uploads/{entry_id}").status_code == 404
    assert slow_client.get("/uploads").json()["total"] == 0
    assert slow_client.get(f"/files/{entry_id}").status_code == 404

    latest = slow_client.get("/uploads/outcomes", params={"limit": 1}).json()[0]
    assert latest["kind"] == "staging_failed"
    assert latest["reason"] == "Cancelled"


def test_health(slow_client):
    upload(slow_client, ("a.mp4", b"1", "video/mp4"))

    health = slow_client.get("/health").json()

    assert health["status"] == "healthy"
    assert health["timestamp"].endswith(("Z", "+00:00"))
    assert health["uploads_in_flight"] == 1
    assert health["catalog_entries"] == 0


if __name__ == "__main__":  # pragma: no cover
    pytest.main([__file__])
