"""
Manga Tracker - A reading log for manga, manhwa and manhua.

This package provides the data layer of a personal tracking application:
- A record store for titles, reading sessions, bookmarks and history
- A single-session reading timer
- Reading statistics and library export
"""

__version__ = "0.1.0"

# Make key components available at package level
from manga_tracker.core import MangaKind, ReadingSession, ReadingStatus, Title
from manga_tracker.services import RecordStore, SessionTimer

__all__ = [
    "Title",
    "MangaKind",
    "ReadingStatus",
    "ReadingSession",
    "RecordStore",
    "SessionTimer",
]
