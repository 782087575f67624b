"""Services layer - record store, session timer and derived views."""

from manga_tracker.services.library_exporter import LibraryExporter
from manga_tracker.services.progress_policy import (
    RECOMMENDED_TRANSITIONS,
    ProgressPolicy,
    is_recommended_transition,
)
from manga_tracker.services.record_store import RecordStore
from manga_tracker.services.session_timer import SessionTimer
from manga_tracker.services.settings_manager import SettingsManager
from manga_tracker.services.statistics import (
    Statistics,
    compute_statistics,
    daily_progress_series,
    days_since_first_title,
    kind_distribution,
    tag_frequency,
    top_titles_by_progress,
)
from manga_tracker.services.title_query import SortKey, filter_titles, sort_titles

__all__ = [
    "RecordStore",
    "SessionTimer",
    "SettingsManager",
    "LibraryExporter",
    "ProgressPolicy",
    "RECOMMENDED_TRANSITIONS",
    "is_recommended_transition",
    "Statistics",
    "compute_statistics",
    "daily_progress_series",
    "days_since_first_title",
    "kind_distribution",
    "tag_frequency",
    "top_titles_by_progress",
    "SortKey",
    "filter_titles",
    "sort_titles",
]
