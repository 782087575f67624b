"""SQLite-backed blob store."""

import logging
import sqlite3
from pathlib import Path
from typing import List, Optional

from manga_tracker.io.blob_store import BlobStore, BlobStoreError

logger = logging.getLogger(__name__)


class SqliteBlobStore(BlobStore):
    """Owns a SQLite connection holding blobs in a single key/value table."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        if str(db_path) != ":memory:":
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.connection = sqlite3.connect(str(db_path))
        self.connection.row_factory = sqlite3.Row
        self.ensure_schema()

    def ensure_schema(self) -> None:
        """Create the blob table if it does not exist."""
        cur = self.connection.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS blobs (
                key TEXT PRIMARY KEY,
                value BLOB NOT NULL,
                updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
            );
            """
        )
        self.connection.commit()

    def get(self, key: str) -> Optional[bytes]:
        try:
            cur = self.connection.cursor()
            cur.execute("SELECT value FROM blobs WHERE key = ?", (key,))
            row = cur.fetchone()
        except sqlite3.Error as e:
            raise BlobStoreError(f"Failed to read blob '{key}': {e}") from e
        return bytes(row["value"]) if row else None

    def set(self, key: str, data: bytes) -> bool:
        try:
            cur = self.connection.cursor()
            cur.execute(
                """
                INSERT INTO blobs (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, sqlite3.Binary(data)),
            )
            self.connection.commit()
        except sqlite3.Error as e:
            logger.error("Failed to write blob '%s': %s", key, e)
            return False
        return True

    def delete(self, key: str) -> None:
        try:
            self.connection.execute("DELETE FROM blobs WHERE key = ?", (key,))
            self.connection.commit()
        except sqlite3.Error as e:
            logger.error("Failed to delete blob '%s': %s", key, e)

    def keys(self) -> List[str]:
        cur = self.connection.cursor()
        cur.execute("SELECT key FROM blobs ORDER BY key ASC")
        return [row["key"] for row in cur.fetchall()]

    def close(self) -> None:
        self.connection.close()
