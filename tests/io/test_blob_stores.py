"""Unit tests for BlobStore implementations."""

import pytest

from manga_tracker.io import BlobStoreError, FileBlobStore, InMemoryBlobStore, SqliteBlobStore


@pytest.fixture(params=["memory", "file", "sqlite"])
def store(request, tmp_path):
    """Provide a fresh store of each implementation."""
    if request.param == "memory":
        yield InMemoryBlobStore()
    elif request.param == "file":
        yield FileBlobStore(tmp_path / "data")
    else:
        sqlite_store = SqliteBlobStore(tmp_path / "blobs.db")
        yield sqlite_store
        sqlite_store.close()


class TestBlobStoreContract:
    """Tests validating the BlobStore abstraction contract."""

    def test_get_returns_none_for_missing_key(self, store):
        assert store.get("mangaTrackerData") is None

    def test_set_then_get(self, store):
        assert store.set("mangaTrackerData", b'{"manga": []}') is True
        assert store.get("mangaTrackerData") == b'{"manga": []}'

    def test_set_overwrites(self, store):
        store.set("mangaTrackerData", b"old")
        store.set("mangaTrackerData", b"new")
        assert store.get("mangaTrackerData") == b"new"

    def test_delete_removes_key(self, store):
        store.set("mangaTrackerData", b"data")
        store.delete("mangaTrackerData")
        assert store.get("mangaTrackerData") is None
        assert store.keys() == []

    def test_delete_missing_key_does_not_raise(self, store):
        store.delete("missing")

    def test_keys_lists_every_key(self, store):
        store.set("a", b"1")
        store.set("b", b"2")
        assert sorted(store.keys()) == ["a", "b"]

    def test_non_ascii_payload_survives(self, store):
        payload = "{\"title\": \"俺だけレベルアップな件\"}".encode("utf-8")
        store.set("doc", payload)
        assert store.get("doc").decode("utf-8") == "{\"title\": \"俺だけレベルアップな件\"}"


class TestInMemoryBlobStore:
    def test_write_count_tracks_attempts(self):
        store = InMemoryBlobStore()
        store.set("k", b"1")
        store.set("k", b"2")
        assert store.write_count == 2

    def test_fail_writes_reports_failure_and_keeps_nothing(self):
        store = InMemoryBlobStore(fail_writes=True)
        assert store.set("k", b"1") is False
        assert store.get("k") is None
        assert store.write_count == 1


class TestFileBlobStore:
    def test_writes_one_json_file_per_key(self, tmp_path):
        store = FileBlobStore(tmp_path)
        store.set("mangaTrackerData", b"{}")
        assert (tmp_path / "mangaTrackerData.json").read_bytes() == b"{}"
        assert not (tmp_path / "mangaTrackerData.json.tmp").exists()

    def test_creates_missing_directory(self, tmp_path):
        store = FileBlobStore(tmp_path / "nested" / "dir")
        assert store.set("k", b"1") is True
        assert store.get("k") == b"1"

    def test_rejects_unsafe_keys(self, tmp_path):
        store = FileBlobStore(tmp_path)
        with pytest.raises(ValueError, match="Invalid blob key"):
            store.set("../escape", b"1")

    def test_write_failure_returns_false(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("file in the way")
        store = FileBlobStore(blocker)
        assert store.set("k", b"1") is False

    def test_unreadable_blob_raises(self, tmp_path):
        store = FileBlobStore(tmp_path)
        (tmp_path / "k.json").mkdir()
        with pytest.raises(BlobStoreError, match="Failed to read blob file"):
            store.get("k")


class TestSqliteBlobStore:
    def test_data_survives_reconnect(self, tmp_path):
        db_path = tmp_path / "blobs.db"
        first = SqliteBlobStore(db_path)
        first.set("mangaTrackerData", b"payload")
        first.close()

        second = SqliteBlobStore(db_path)
        assert second.get("mangaTrackerData") == b"payload"
        second.close()

    def test_write_after_close_returns_false(self, tmp_path):
        store = SqliteBlobStore(tmp_path / "blobs.db")
        store.close()
        assert store.set("k", b"1") is False

    def test_read_after_close_raises(self, tmp_path):
        store = SqliteBlobStore(tmp_path / "blobs.db")
        store.close()
        with pytest.raises(BlobStoreError):
            store.get("k")
