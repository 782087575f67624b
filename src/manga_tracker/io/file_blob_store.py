"""File-based blob store keeping one JSON file per key."""

import logging
import re
from pathlib import Path
from typing import List, Optional

from manga_tracker.io.blob_store import BlobStore, BlobStoreError

logger = logging.getLogger(__name__)


class FileBlobStore(BlobStore):
    """
    Stores each key as ``<key>.json`` inside a data directory.

    Writes go to a temporary sibling file first and are then moved into
    place, so a crash mid-write leaves the previous blob intact.
    """

    FILE_SUFFIX = ".json"
    _KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def get(self, key: str) -> Optional[bytes]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise BlobStoreError(f"Failed to read blob file {path}: {e}") from e

    def set(self, key: str, data: bytes) -> bool:
        path = self._path_for(key)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(data)
            tmp_path.replace(path)
        except OSError as e:
            logger.error("Error writing blob file %s: %s", path, e)
            return False
        return True

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        if path.exists():
            try:
                path.unlink()
            except OSError as e:
                logger.error("Error deleting blob file %s: %s", path, e)

    def keys(self) -> List[str]:
        if not self.data_dir.exists():
            return []
        return sorted(
            p.name[: -len(self.FILE_SUFFIX)]
            for p in self.data_dir.glob(f"*{self.FILE_SUFFIX}")
        )

    def _path_for(self, key: str) -> Path:
        """Get the file path for a key.

        Raises:
            ValueError: If the key contains characters unsafe for a file name.
        """
        if not self._KEY_PATTERN.match(key):
            raise ValueError(f"Invalid blob key: {key!r}")
        return self.data_dir / f"{key}{self.FILE_SUFFIX}"
