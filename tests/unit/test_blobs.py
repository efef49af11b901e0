import pytest

from domains.media_catalog.blobs import BLOB_SCHEME, BlobStore
from domains.media_catalog.errors import MaterializationError


def test_materialize_bytes_and_resolve():
    store = BlobStore()

    ref = store.materialize(b"frames")

    assert ref.startswith(BLOB_SCHEME)
    assert store.resolve(ref) == b"frames"
    assert len(store) == 1


def test_each_materialization_gets_its_own_ref():
    store = BlobStore()

    first = store.materialize(b"same")
    second = store.materialize(b"same")

    assert first != second
    store.release(first)
    assert store.resolve(second) == b"same"


def test_materialize_path(tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"\x00\x01")
    store = BlobStore()

    ref = store.materialize(path)

    assert store.resolve(ref) == b"\x00\x01"


def test_materialize_missing_path_raises(tmp_path):
    with pytest.raises(MaterializationError):
        BlobStore().materialize(tmp_path / "missing.mp4")


def test_materialize_unsupported_handle_raises():
    with pytest.raises(MaterializationError):
        BlobStore().materialize(12345)


def test_materialize_refuses_size_mismatch(tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"x" * 5000)
    store = BlobStore()

    with pytest.raises(MaterializationError, match="expected 0 bytes, read 5000"):
        store.materialize(path, expected_size=0)

    assert len(store) == 0
    assert store.resolve(store.materialize(path, expected_size=5000)) == b"x" * 5000


def test_release_is_idempotent():
    store = BlobStore()
    ref = store.materialize(b"x")

    store.release(ref)
    store.release(ref)
    store.release("blob:unknown")

    assert store.resolve(ref) is None
    assert len(store) == 0


if __name__ == "__main__":  # pragma: no cover
    pytest.main([__file__])
