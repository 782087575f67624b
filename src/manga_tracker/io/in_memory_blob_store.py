"""In-memory blob store for testing and throwaway sessions."""

from typing import List, Optional

from manga_tracker.io.blob_store import BlobStore


class InMemoryBlobStore(BlobStore):
    """
    Simple in-memory store. No persistence.

    ``write_count`` counts every write attempt; setting ``fail_writes`` makes
    ``set`` report failure without storing anything.
    """

    def __init__(self, fail_writes: bool = False):
        self._store: dict[str, bytes] = {}
        self.fail_writes = fail_writes
        self.write_count = 0

    def get(self, key: str) -> Optional[bytes]:
        return self._store.get(key)

    def set(self, key: str, data: bytes) -> bool:
        self.write_count += 1
        if self.fail_writes:
            return False
        self._store[key] = bytes(data)
        return True

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._store.keys())
