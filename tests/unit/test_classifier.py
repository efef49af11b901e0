import pytest

from domains.media_catalog.classifier import DEFAULT_MAX_SIZE_BYTES, category_for, classify
from domains.media_catalog.errors import RejectReason
from domains.media_catalog.models import Accepted, Candidate, Category, Rejected

MiB = 1024 * 1024


def candidate(name: str, media_type: str, size: int) -> Candidate:
    return Candidate(name=name, media_type=media_type, size_bytes=size, source=b"")


@pytest.mark.parametrize(
    ("media_type", "expected"),
    [
        ("video/mp4", Category.VIDEO),
        ("video/x-matroska", Category.VIDEO),
        ("audio/mpeg", Category.AUDIO),
        ("audio/flac", Category.AUDIO),
        ("application/pdf", Category.DOCUMENT),
        ("Video/MP4; codecs=avc1", Category.VIDEO),
        ("APPLICATION/PDF", Category.DOCUMENT),
    ],
)
def test_supported_types_are_accepted(media_type, expected):
    outcome = classify(candidate("file", media_type, 1024))

    assert outcome == Accepted(category=expected)


@pytest.mark.parametrize(
    "media_type",
    ["application/zip", "image/png", "text/plain", "application/pdfx", "videos/mp4", "", None],
)
def test_unsupported_types_are_rejected(media_type):
    outcome = classify(candidate("file.bin", media_type, 1024))

    assert isinstance(outcome, Rejected)
    assert outcome.reason is RejectReason.UNSUPPORTED_TYPE
    assert "file.bin is not supported" in outcome.message


def test_zip_archive_is_rejected_as_unsupported():
    outcome = classify(candidate("backup.zip", "application/zip", 1024))

    assert outcome.reason is RejectReason.UNSUPPORTED_TYPE


def test_oversize_audio_is_rejected_as_too_large():
    outcome = classify(candidate("mix.mp3", "audio/mpeg", 60 * MiB), max_size_bytes=50 * MiB)

    assert isinstance(outcome, Rejected)
    assert outcome.reason is RejectReason.TOO_LARGE
    assert outcome.message == "mix.mp3 is too large. Maximum file size is 50 MB."


def test_size_limit_is_exclusive():
    at_limit = classify(candidate("a.mp4", "video/mp4", DEFAULT_MAX_SIZE_BYTES))
    over_limit = classify(candidate("b.mp4", "video/mp4", DEFAULT_MAX_SIZE_BYTES + 1))

    assert isinstance(at_limit, Accepted)
    assert over_limit.reason is RejectReason.TOO_LARGE


def test_oversize_wins_over_unsupported_type():
    outcome = classify(candidate("huge.zip", "application/zip", 100 * MiB))

    assert outcome.reason is RejectReason.TOO_LARGE


def test_zero_byte_file_is_accepted():
    assert classify(candidate("empty.pdf", "application/pdf", 0)) == Accepted(Category.DOCUMENT)


def test_custom_document_types():
    docs = frozenset({"application/pdf", "application/epub+zip"})

    assert category_for("application/epub+zip", docs) is Category.DOCUMENT
    assert category_for("application/epub+zip") is None


def test_classify_is_deterministic():
    item = candidate("talk.webm", "video/webm", 5 * MiB)

    outcomes = {classify(item) for _ in range(10)}

    assert outcomes == {Accepted(Category.VIDEO)}


if __name__ == "__main__":  # pragma: no cover
    pytest.main([__file__])
