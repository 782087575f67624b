"""Domain layer - Pure entities representing the tracked library."""

from .bookmark import Bookmark
from .history_entry import (
    DETAILS_BY_ACTION,
    HistoryAction,
    HistoryDetails,
    HistoryEntry,
    ProgressDetails,
    ReadDetails,
    TitleDetails,
)
from .reading_session import ReadingSession
from .title import MangaKind, ReadingStatus, Title
from .tracker_settings import TrackerSettings

__all__ = [
    "Title",
    "MangaKind",
    "ReadingStatus",
    "ReadingSession",
    "Bookmark",
    "HistoryEntry",
    "HistoryAction",
    "HistoryDetails",
    "TitleDetails",
    "ReadDetails",
    "ProgressDetails",
    "DETAILS_BY_ACTION",
    "TrackerSettings",
]
