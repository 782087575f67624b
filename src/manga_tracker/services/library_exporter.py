"""Library exporter - writes a JSON snapshot of the catalog and its statistics.

Fail-fast philosophy: ``export_to`` raises RuntimeError on failure.
"""

import json
from pathlib import Path
from typing import Any, Dict

from manga_tracker.io.tracker_document import format_timestamp, title_to_dict
from manga_tracker.services.record_store import RecordStore


class LibraryExporter:
    """Builds ``manga-library-YYYY-MM-DD.json`` exports.

    Format:
    {
        "exportDate": "2026-01-19T12:34:56+00:00",
        "manga": [ ...title records as stored... ],
        "stats": { "totalManga": 3, "currentlyReading": 1, ... }
    }
    """

    FILENAME_TEMPLATE = "manga-library-{date}.json"

    def __init__(self, store: RecordStore) -> None:
        if store is None:
            raise ValueError("RecordStore must not be None")
        self._store = store

    def build_export(self) -> Dict[str, Any]:
        return {
            "exportDate": format_timestamp(self._store.now()),
            "manga": [title_to_dict(t) for t in self._store.list_titles()],
            "stats": self._store.compute_statistics().to_dict(),
        }

    def export_to(self, directory: Path) -> Path:
        """Write an export file into ``directory``.

        Returns:
            Path to the written file.

        Raises:
            RuntimeError: If the file cannot be written.
        """
        payload = self.build_export()
        export_date = payload["exportDate"].split("T")[0]
        out_path = Path(directory) / self.FILENAME_TEMPLATE.format(date=export_date)
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_path.write_text(
                json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8"
            )
        except OSError as e:
            raise RuntimeError(f"Failed to write library export {out_path}: {e}") from e
        return out_path
