"""I/O layer - Blob storage backends and the tracker document codec."""

from .blob_store import BlobStore, BlobStoreError
from .file_blob_store import FileBlobStore
from .in_memory_blob_store import InMemoryBlobStore
from .sqlite_blob_store import SqliteBlobStore
from .tracker_document import DEFAULT_TAGS, TrackerDocument

__all__ = [
    "BlobStore",
    "BlobStoreError",
    "InMemoryBlobStore",
    "FileBlobStore",
    "SqliteBlobStore",
    "TrackerDocument",
    "DEFAULT_TAGS",
]
