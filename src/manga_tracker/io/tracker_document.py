"""Tracker document codec - converts entities to and from the persisted JSON blob.

Format (single key, camelCase field names kept compatible with existing data):
{
    "manga": [
        {
            "id": "...", "title": "Solo Leveling", "type": "manhwa",
            "status": "reading", "currentChapter": 5, "totalChapters": 200,
            "rating": null, "tags": ["Action"], "notes": "", "coverImage": null,
            "author": "", "startDate": "2026-01-19T12:34:56+00:00",
            "endDate": null, "lastRead": null,
            "createdAt": "...", "updatedAt": "..."
        }
    ],
    "readingSessions": [
        {"id": "...", "mangaId": "...", "startTime": "...", "endTime": null,
         "chaptersRead": 0, "active": true}
    ],
    "settings": {"dailyGoal": 5, "theme": "light", "notifications": true},
    "tags": ["Action", "Romance", ...],
    "bookmarks": [
        {"id": "...", "mangaId": "...", "chapterNumber": 12, "note": "", "createdAt": "..."}
    ],
    "history": [
        {"id": "...", "mangaId": "...", "action": "read",
         "details": {"title": "...", "chaptersRead": 5, "sessionDuration": 1800},
         "timestamp": "..."}
    ]
}
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from manga_tracker.core import (
    Bookmark,
    HistoryAction,
    HistoryDetails,
    HistoryEntry,
    MangaKind,
    ProgressDetails,
    ReadDetails,
    ReadingSession,
    ReadingStatus,
    Title,
    TitleDetails,
    TrackerSettings,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TAGS = ("Action", "Romance", "Comedy", "Drama", "Fantasy", "Sci-Fi")

COLLECTION_KEYS = ("manga", "readingSessions", "settings", "tags", "bookmarks", "history")


@dataclass
class TrackerDocument:
    """All collections owned by the record store."""

    titles: List[Title] = field(default_factory=list)
    sessions: List[ReadingSession] = field(default_factory=list)
    settings: TrackerSettings = field(default_factory=TrackerSettings)
    tags: List[str] = field(default_factory=lambda: list(DEFAULT_TAGS))
    bookmarks: List[Bookmark] = field(default_factory=list)
    history: List[HistoryEntry] = field(default_factory=list)
    skipped_records: int = field(default=0, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "manga": [title_to_dict(t) for t in self.titles],
            "readingSessions": [session_to_dict(s) for s in self.sessions],
            "settings": settings_to_dict(self.settings),
            "tags": list(self.tags),
            "bookmarks": [bookmark_to_dict(b) for b in self.bookmarks],
            "history": [history_to_dict(h) for h in self.history],
        }

    def to_json_bytes(self) -> bytes:
        return json.dumps(self.to_dict(), ensure_ascii=False).encode("utf-8")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrackerDocument":
        """Build a document, filling any missing collection with its default.

        A record that cannot be parsed (unknown enum value, bad timestamp,
        missing field) is logged and left out; the rest of its collection
        still loads. The number of records left out is kept in
        ``skipped_records``.
        """
        doc = cls()
        if data.get("manga") is not None:
            doc.titles = doc._parse_records("manga", data["manga"], title_from_dict)
        if data.get("readingSessions") is not None:
            doc.sessions = doc._parse_records(
                "readingSessions", data["readingSessions"], session_from_dict
            )
        if data.get("settings") is not None:
            try:
                doc.settings = settings_from_dict(data["settings"])
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("Ignoring unreadable settings, using defaults: %s", e)
                doc.skipped_records += 1
        if isinstance(data.get("tags"), list):
            doc.tags = [str(t) for t in data["tags"]]
        if data.get("bookmarks") is not None:
            doc.bookmarks = doc._parse_records("bookmarks", data["bookmarks"], bookmark_from_dict)
        if data.get("history") is not None:
            doc.history = doc._parse_records("history", data["history"], history_from_dict)
        return doc

    def _parse_records(
        self, collection: str, items: Iterable[Any], parse: Callable[[Dict[str, Any]], T]
    ) -> List[T]:
        if not isinstance(items, list):
            self.skipped_records += 1
            logger.warning("Ignoring %s: expected a list, got %s", collection, type(items).__name__)
            return []
        records = []
        for position, item in enumerate(items):
            try:
                records.append(parse(item))
            except (ValueError, KeyError, TypeError, AttributeError) as e:
                self.skipped_records += 1
                logger.warning("Skipping unreadable %s record #%d: %s", collection, position, e)
        return records

    @classmethod
    def from_json_bytes(cls, raw: bytes) -> "TrackerDocument":
        """Parse a stored blob.

        Raises:
            ValueError: If the blob is not valid JSON or not a JSON object
                (json.JSONDecodeError is a ValueError subclass).
        """
        data = json.loads(raw.decode("utf-8"))
        if not isinstance(data, dict):
            raise ValueError("Tracker document must be a JSON object")
        return cls.from_dict(data)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string; naive values and a trailing 'Z' are read as UTC."""
    if value is None or value == "":
        return None
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(text))


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat a naive datetime as UTC; aware values pass through."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def title_to_dict(title: Title) -> Dict[str, Any]:
    return {
        "id": title.id,
        "title": title.name,
        "type": title.kind.value,
        "status": title.status.value,
        "currentChapter": title.current_progress,
        "totalChapters": title.total_units,
        "rating": title.rating,
        "tags": list(title.tags),
        "notes": title.notes,
        "coverImage": title.cover_image,
        "author": title.author,
        "startDate": format_timestamp(title.started_at),
        "endDate": format_timestamp(title.finished_at),
        "lastRead": format_timestamp(title.last_progress_at),
        "createdAt": format_timestamp(title.created_at),
        "updatedAt": format_timestamp(title.updated_at),
    }


def title_from_dict(data: Dict[str, Any]) -> Title:
    created_at = parse_timestamp(data["createdAt"])
    return Title(
        id=str(data["id"]),
        name=data.get("title") or "",
        kind=MangaKind(data.get("type") or MangaKind.MANGA.value),
        status=ReadingStatus(data.get("status") or ReadingStatus.READING.value),
        current_progress=int(data.get("currentChapter") or 0),
        created_at=created_at,
        updated_at=parse_timestamp(data.get("updatedAt")) or created_at,
        started_at=parse_timestamp(data.get("startDate")),
        total_units=data.get("totalChapters"),
        rating=data.get("rating"),
        tags=tuple(data.get("tags") or ()),
        notes=data.get("notes") or "",
        author=data.get("author") or "",
        cover_image=data.get("coverImage"),
        finished_at=parse_timestamp(data.get("endDate")),
        last_progress_at=parse_timestamp(data.get("lastRead")),
    )


def session_to_dict(session: ReadingSession) -> Dict[str, Any]:
    return {
        "id": session.id,
        "mangaId": session.title_id,
        "startTime": format_timestamp(session.started_at),
        "endTime": format_timestamp(session.ended_at),
        "chaptersRead": session.units_read,
        "active": session.active,
    }


def session_from_dict(data: Dict[str, Any]) -> ReadingSession:
    return ReadingSession(
        id=str(data["id"]),
        title_id=data.get("mangaId"),
        started_at=parse_timestamp(data["startTime"]),
        ended_at=parse_timestamp(data.get("endTime")),
        units_read=int(data.get("chaptersRead") or 0),
        active=bool(data.get("active", False)),
    )


def settings_to_dict(settings: TrackerSettings) -> Dict[str, Any]:
    return {
        "dailyGoal": settings.daily_goal,
        "theme": settings.theme,
        "notifications": settings.notifications,
    }


def settings_from_dict(data: Dict[str, Any]) -> TrackerSettings:
    defaults = TrackerSettings()
    return TrackerSettings(
        daily_goal=int(data.get("dailyGoal", defaults.daily_goal)),
        theme=data.get("theme", defaults.theme),
        notifications=bool(data.get("notifications", defaults.notifications)),
    )


def bookmark_to_dict(bookmark: Bookmark) -> Dict[str, Any]:
    return {
        "id": bookmark.id,
        "mangaId": bookmark.title_id,
        "chapterNumber": bookmark.position,
        "note": bookmark.note,
        "createdAt": format_timestamp(bookmark.created_at),
    }


def bookmark_from_dict(data: Dict[str, Any]) -> Bookmark:
    return Bookmark(
        id=str(data["id"]),
        title_id=data["mangaId"],
        position=int(data.get("chapterNumber") or 0),
        note=data.get("note") or "",
        created_at=parse_timestamp(data["createdAt"]),
    )


_READ_DETAIL_KEYS = ("title", "chaptersRead", "sessionDuration")
_PROGRESS_DETAIL_KEYS = ("title", "oldChapter", "newChapter", "chaptersRead")


def details_to_dict(details: HistoryDetails) -> Dict[str, Any]:
    data = dict(details.extra)
    if isinstance(details, ReadDetails):
        data.update(
            title=details.title,
            chaptersRead=details.units_read,
            sessionDuration=details.session_duration,
        )
    elif isinstance(details, ProgressDetails):
        data.update(
            title=details.title,
            oldChapter=details.old_progress,
            newChapter=details.new_progress,
            chaptersRead=details.units_read,
        )
    else:
        data["title"] = details.title
    return data


def details_from_dict(action: HistoryAction, data: Dict[str, Any]) -> HistoryDetails:
    title = data.get("title") or ""
    if action is HistoryAction.READ:
        return ReadDetails(
            title=title,
            units_read=int(data.get("chaptersRead") or 0),
            session_duration=int(data.get("sessionDuration") or 0),
            extra=_unmodelled(data, _READ_DETAIL_KEYS),
        )
    if action is HistoryAction.PROGRESS_UPDATE:
        return ProgressDetails(
            title=title,
            old_progress=int(data.get("oldChapter") or 0),
            new_progress=int(data.get("newChapter") or 0),
            extra=_unmodelled(data, _PROGRESS_DETAIL_KEYS),
        )
    return TitleDetails(title=title, extra=_unmodelled(data, ("title",)))


def _unmodelled(data: Dict[str, Any], known: Iterable[str]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if key not in known}


def history_to_dict(entry: HistoryEntry) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "mangaId": entry.title_id,
        "action": entry.action.value,
        "details": details_to_dict(entry.details),
        "timestamp": format_timestamp(entry.timestamp),
    }


def history_from_dict(data: Dict[str, Any]) -> HistoryEntry:
    action = HistoryAction(data["action"])
    return HistoryEntry(
        id=str(data["id"]),
        title_id=data.get("mangaId"),
        action=action,
        details=details_from_dict(action, data.get("details") or {}),
        timestamp=parse_timestamp(data["timestamp"]),
    )
