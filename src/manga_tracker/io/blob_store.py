"""Blob store abstraction - plugin interface for the tracker document storage."""

from abc import ABC, abstractmethod
from typing import List, Optional


class BlobStoreError(RuntimeError):
    """Raised when a blob store cannot be read."""


class BlobStore(ABC):
    """
    Abstract durable key-value store holding opaque byte blobs.

    Implementations (InMemoryBlobStore, FileBlobStore, SqliteBlobStore) handle
    storage details. The record store depends on this abstraction only, so
    tests can hand it an in-memory stub.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """
        Retrieve the blob stored under ``key``.

        Returns:
            The stored bytes, or None if the key is absent.

        Raises:
            BlobStoreError: If the backing storage cannot be read.
        """
        pass

    @abstractmethod
    def set(self, key: str, data: bytes) -> bool:
        """
        Store or overwrite the blob under ``key``.

        Returns:
            True on success, False if the write failed.
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``; missing keys are ignored."""
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """List stored keys. Useful for diagnostics and testing."""
        pass
