"""Main entry point for the manga tracker."""

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QCoreApplication

from manga_tracker.coordinators import LibraryCoordinator, SessionTimerCoordinator
from manga_tracker.io import BlobStore, FileBlobStore, InMemoryBlobStore, SqliteBlobStore
from manga_tracker.services import LibraryExporter, RecordStore, SessionTimer, SettingsManager

logger = logging.getLogger("manga_tracker")

SQLITE_FILENAME = "manga_tracker.db"


@dataclass
class TrackerComponents:
    """Everything the presentation layer needs, wired once at start-up."""

    settings: SettingsManager
    blob_store: BlobStore
    store: RecordStore
    timer: SessionTimer
    exporter: LibraryExporter
    library_coordinator: LibraryCoordinator
    timer_coordinator: SessionTimerCoordinator


def create_blob_store(settings: SettingsManager) -> BlobStore:
    backend = settings.get_storage_backend()
    if backend == "memory":
        return InMemoryBlobStore()
    data_dir = settings.get_data_dir()
    if backend == "sqlite":
        return SqliteBlobStore(data_dir / SQLITE_FILENAME)
    return FileBlobStore(data_dir)


def build_components(settings: Optional[SettingsManager] = None) -> TrackerComponents:
    """
    Composition Root: the only place that knows how to instantiate and wire
    all components. The record store is created here once and passed by
    reference to everything that needs it.
    """
    settings = settings or SettingsManager()

    # 1. Infrastructure
    blob_store = create_blob_store(settings)

    # 2. Services (Dependency Injection)
    store = RecordStore(blob_store, progress_policy=settings.get_progress_policy())
    timer = SessionTimer(store)
    exporter = LibraryExporter(store)

    # 3. Coordinators
    library_coordinator = LibraryCoordinator(store)
    timer_coordinator = SessionTimerCoordinator(timer)

    return TrackerComponents(
        settings=settings,
        blob_store=blob_store,
        store=store,
        timer=timer,
        exporter=exporter,
        library_coordinator=library_coordinator,
        timer_coordinator=timer_coordinator,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="manga-tracker", description="Manga reading tracker")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("stats", help="Print library statistics as JSON")
    export = sub.add_parser("export", help="Write a library export file")
    export.add_argument("--output", type=Path, default=Path.cwd(), help="Target directory")
    history = sub.add_parser("history", help="Print recent activity")
    history.add_argument("--limit", type=int, default=10)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    args = _build_parser().parse_args(argv)

    # Coordinators own QTimers and need an application instance
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])  # noqa: F841
    components = build_components()

    if args.command == "export":
        try:
            path = components.exporter.export_to(args.output)
        except RuntimeError as e:
            logger.error("%s", e)
            return 1
        print(path)
    elif args.command == "history":
        for entry in components.store.recent_history(args.limit):
            print(f"{entry.timestamp.isoformat()}  {entry.action.value:<16} {entry.details.title}")
    else:
        print(json.dumps(components.store.compute_statistics().to_dict(), indent=2))

    return 0


if __name__ == "__main__":
    sys.exit(main())
