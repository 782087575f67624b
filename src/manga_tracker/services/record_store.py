"""Record Store - sole owner of the tracker collections and sole writer to storage."""

import logging
import uuid
from dataclasses import fields, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from manga_tracker.core import (
    Bookmark,
    HistoryAction,
    HistoryDetails,
    HistoryEntry,
    MangaKind,
    ProgressDetails,
    ReadingSession,
    ReadingStatus,
    Title,
    TrackerSettings,
)
from manga_tracker.io import BlobStore, BlobStoreError, TrackerDocument
from manga_tracker.io.tracker_document import as_utc
from manga_tracker.services.progress_policy import ProgressPolicy
from manga_tracker.services.statistics import Statistics, compute_statistics
from manga_tracker.services.title_query import SortKey, filter_titles, sort_titles

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_TIMESTAMP_FIELDS = ("started_at", "finished_at", "last_progress_at")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


class RecordStore:
    """CRUD and derived queries over every tracker collection.

    The store is built once at application start and handed to its consumers.
    Every mutation writes the whole document to the injected BlobStore before
    returning. A failed write is logged and counted in ``persist_failures``
    but never rolled back or raised: in-memory state stays authoritative for
    the rest of the process lifetime.

    Lookups, updates and deletes return None when the id matches nothing.
    """

    DEFAULT_STORAGE_KEY = "mangaTrackerData"
    HISTORY_LIMIT = 100
    CORRUPT_SUFFIX = ".corrupt"

    _EDITABLE_TITLE_FIELDS = frozenset(
        f.name for f in fields(Title) if f.name not in ("id", "created_at", "updated_at")
    )

    def __init__(
        self,
        blob_store: BlobStore,
        storage_key: str = DEFAULT_STORAGE_KEY,
        clock: Optional[Clock] = None,
        id_factory: Optional[Callable[[], str]] = None,
        progress_policy: Optional[ProgressPolicy] = None,
    ) -> None:
        if blob_store is None:
            raise ValueError("BlobStore must not be None")
        self._blob_store = blob_store
        self._storage_key = storage_key
        self._clock = clock or utc_now
        self._new_id = id_factory or new_id
        self.progress_policy = progress_policy or ProgressPolicy()
        self.persist_failures = 0
        self.load_failed = False

        loaded = self._load()
        if loaded is None:
            self._document = TrackerDocument()
            self._persist()
        else:
            self._document = loaded

    # ==================== Persistence ====================

    def _load(self) -> Optional[TrackerDocument]:
        """Read the stored document.

        Data that is unreadable, or readable only in part, is copied to
        ``<storage_key>.corrupt`` before anything can overwrite it. When the
        blob store itself fails, ``load_failed`` is set and an empty document
        is returned without touching storage.

        Returns:
            The loaded document, or None when nothing is stored yet.
        """
        self.load_failed = False
        try:
            raw = self._blob_store.get(self._storage_key)
        except BlobStoreError as e:
            self.load_failed = True
            logger.error("Error loading tracker data under '%s': %s", self._storage_key, e)
            return TrackerDocument()
        if raw is None:
            return None
        try:
            document = TrackerDocument.from_json_bytes(raw)
        except ValueError as e:
            logger.warning("Unreadable tracker data under '%s': %s", self._storage_key, e)
            self._back_up(raw)
            return TrackerDocument()
        if document.skipped_records:
            logger.warning(
                "%d unreadable record(s) left out of tracker data under '%s'",
                document.skipped_records,
                self._storage_key,
            )
            self._back_up(raw)
        return document

    def _back_up(self, raw: bytes) -> None:
        backup_key = f"{self._storage_key}{self.CORRUPT_SUFFIX}"
        try:
            saved = self._blob_store.set(backup_key, raw)
        except BlobStoreError as e:
            logger.error("Error backing up tracker data: %s", e)
            saved = False
        if saved:
            logger.warning("Original tracker data kept under '%s'", backup_key)
        else:
            logger.error("Could not keep a copy of the original tracker data under '%s'", backup_key)

    def _persist(self) -> bool:
        try:
            ok = self._blob_store.set(self._storage_key, self._document.to_json_bytes())
        except BlobStoreError as e:
            logger.error("Error saving tracker data: %s", e)
            ok = False
        if not ok:
            self.persist_failures += 1
            logger.error(
                "Tracker data under '%s' was not saved; changes may not survive a reload",
                self._storage_key,
            )
        return ok

    def reload(self) -> None:
        """Discard in-memory state and re-read the document from storage.

        If storage cannot be read, the in-memory state is kept.
        """
        loaded = self._load()
        if self.load_failed:
            logger.warning("Keeping in-memory tracker data; storage could not be read")
            return
        self._document = loaded if loaded is not None else TrackerDocument()

    def now(self) -> datetime:
        """Current time according to the injected clock."""
        return self._clock()

    def _later_than(self, previous: Optional[datetime]) -> datetime:
        """Current time, nudged forward so it is strictly after ``previous``."""
        now = self.now()
        if previous is not None and now <= previous:
            now = previous + timedelta(microseconds=1)
        return now

    # ==================== Titles ====================

    def create_title(
        self,
        name: str,
        kind: Union[MangaKind, str] = MangaKind.MANGA,
        status: Union[ReadingStatus, str] = ReadingStatus.READING,
        current_progress: int = 0,
        total_units: Optional[int] = None,
        rating: Optional[float] = None,
        tags: Iterable[str] = (),
        notes: str = "",
        author: str = "",
        cover_image: Optional[str] = None,
        started_at: Optional[datetime] = None,
        finished_at: Optional[datetime] = None,
        last_progress_at: Optional[datetime] = None,
    ) -> Title:
        """Create, store and return a new title. Names need not be unique.

        Raises:
            ValueError: For an unknown kind/status, negative progress or a
                rating outside 0-10.
        """
        now = self.now()
        values = self._coerce_title_fields(
            {
                "kind": kind,
                "status": status,
                "current_progress": current_progress,
                "rating": rating,
                "tags": tags,
                "started_at": started_at or now,
                "finished_at": finished_at,
                "last_progress_at": last_progress_at,
            }
        )
        title = Title(
            id=self._new_id(),
            name=name,
            total_units=total_units,
            notes=notes,
            author=author,
            cover_image=cover_image,
            created_at=now,
            updated_at=now,
            **values,
        )
        self._document.titles.append(title)
        self._persist()
        logger.info("Title added: %s (%s)", title.name, title.id)
        return title

    def update_title(self, title_id: str, **changes: Any) -> Optional[Title]:
        """Shallow-merge ``changes`` into a title and refresh ``updated_at``.

        Returns:
            The updated title, or None if ``title_id`` matches nothing.

        Raises:
            ValueError: If a field name is unknown or a value is invalid.
        """
        unknown = set(changes) - self._EDITABLE_TITLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown title fields: {', '.join(sorted(unknown))}")

        index = self._title_index(title_id)
        if index is None:
            return None

        current = self._document.titles[index]
        values = self._coerce_title_fields(changes)
        now = self._later_than(current.updated_at)

        if "current_progress" in values:
            total = values.get("total_units", current.total_units)
            values["current_progress"] = self.progress_policy.apply_limit(
                values["current_progress"], total
            )
            if "status" not in values and self.progress_policy.should_complete(
                values["current_progress"], total
            ):
                values["status"] = ReadingStatus.COMPLETED
                values.setdefault("finished_at", current.finished_at or now)

        updated = replace(current, updated_at=now, **values)
        self._document.titles[index] = updated
        self._persist()
        return updated

    def update_progress(self, title_id: str, new_progress: int) -> Optional[Title]:
        """Quick progress update: set progress, auto-complete, and log history.

        Marks the title completed when its total is known and reached, and
        records a ``progress_update`` history entry with the old and new values.

        Returns:
            The updated title, or None if ``title_id`` matches nothing.

        Raises:
            ValueError: If ``new_progress`` is negative.
        """
        if new_progress < 0:
            raise ValueError(f"Progress cannot be negative: {new_progress}")
        index = self._title_index(title_id)
        if index is None:
            return None

        current = self._document.titles[index]
        now = self._later_than(current.updated_at)
        updated = self._with_progress(current, new_progress, now, quick_update=True)
        self._document.titles[index] = updated
        self._prepend_history(
            title_id,
            HistoryAction.PROGRESS_UPDATE,
            ProgressDetails(
                title=updated.name,
                old_progress=current.current_progress,
                new_progress=updated.current_progress,
            ),
            now,
        )
        self._persist()
        return updated

    def delete_title(self, title_id: str) -> Optional[Title]:
        """Hard-delete a title. Returns the removed record or None."""
        index = self._title_index(title_id)
        if index is None:
            return None
        removed = self._document.titles.pop(index)
        self._persist()
        logger.info("Title deleted: %s (%s)", removed.name, removed.id)
        return removed

    def get_title(self, title_id: str) -> Optional[Title]:
        index = self._title_index(title_id)
        return self._document.titles[index] if index is not None else None

    def list_titles(self) -> List[Title]:
        return list(self._document.titles)

    def search(
        self,
        query: str = "",
        status: Optional[Union[ReadingStatus, str]] = None,
        kind: Optional[Union[MangaKind, str]] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> List[Title]:
        """Filter titles by text, status, kind and tags without touching the store."""
        return filter_titles(self._document.titles, query, status=status, kind=kind, tags=tags)

    def sorted_titles(
        self,
        sort_key: Union[SortKey, str] = SortKey.TITLE,
        titles: Optional[Iterable[Title]] = None,
    ) -> List[Title]:
        """Sort ``titles`` (all titles by default) into a new list."""
        return sort_titles(self._document.titles if titles is None else titles, sort_key)

    def _title_index(self, title_id: str) -> Optional[int]:
        for idx, title in enumerate(self._document.titles):
            if title.id == title_id:
                return idx
        return None

    def _with_progress(
        self, title: Title, progress: int, now: datetime, quick_update: bool
    ) -> Title:
        """Copy of ``title`` at ``progress`` with the progress policy applied."""
        progress = self.progress_policy.apply_limit(progress, title.total_units)
        changes: Dict[str, Any] = {
            "current_progress": progress,
            "last_progress_at": now,
            "updated_at": now,
        }
        if self.progress_policy.should_complete(progress, title.total_units, quick_update):
            changes["status"] = ReadingStatus.COMPLETED
            changes["finished_at"] = title.finished_at or now
        return replace(title, **changes)

    @staticmethod
    def _coerce_title_fields(values: Dict[str, Any]) -> Dict[str, Any]:
        coerced = dict(values)
        if "kind" in coerced:
            coerced["kind"] = MangaKind(coerced["kind"])
        if "status" in coerced:
            coerced["status"] = ReadingStatus(coerced["status"])
        if "tags" in coerced:
            tags = coerced["tags"] or ()
            coerced["tags"] = (tags,) if isinstance(tags, str) else tuple(tags)
        for name in _TIMESTAMP_FIELDS:
            if name in coerced:
                coerced[name] = as_utc(coerced[name])
        progress = coerced.get("current_progress")
        if progress is not None and progress < 0:
            raise ValueError(f"Progress cannot be negative: {progress}")
        rating = coerced.get("rating")
        if rating is not None and not 0 <= rating <= 10:
            raise ValueError(f"Rating must be between 0 and 10: {rating}")
        return coerced

    # ==================== Reading sessions ====================

    def start_session(self, title_id: Optional[str] = None) -> ReadingSession:
        """Open a new active session.

        Does not check for an already active session; SessionTimer guards
        the single-active-session rule.
        """
        session = ReadingSession(
            id=self._new_id(),
            title_id=title_id,
            started_at=self.now(),
        )
        self._document.sessions.append(session)
        self._persist()
        logger.info("Reading session started: %s, title: %s", session.id, title_id or "(none)")
        return session

    def end_session(self, session_id: str, units_read: int = 0) -> Optional[ReadingSession]:
        """Close a session and credit its units to the bound title.

        When ``units_read`` is positive and the session is bound to an
        existing title, that title's progress grows by exactly ``units_read``
        in the same write. Ending an already closed session returns it
        unchanged.

        Returns:
            The closed session, or None if ``session_id`` matches nothing.

        Raises:
            ValueError: If ``units_read`` is negative.
        """
        if units_read < 0:
            raise ValueError(f"Units read cannot be negative: {units_read}")
        index = self._session_index(session_id)
        if index is None:
            return None

        session = self._document.sessions[index]
        if not session.active:
            logger.warning("Reading session already ended: %s", session_id)
            return session

        now = self.now()
        closed = replace(session, ended_at=now, units_read=units_read, active=False)
        self._document.sessions[index] = closed

        if units_read > 0 and closed.title_id:
            title_index = self._title_index(closed.title_id)
            if title_index is not None:
                title = self._document.titles[title_index]
                self._document.titles[title_index] = self._with_progress(
                    title,
                    title.current_progress + units_read,
                    self._later_than(title.updated_at),
                    quick_update=False,
                )

        self._persist()
        logger.info("Reading session ended: %s, units read: %d", session_id, units_read)
        return closed

    def get_active_session(self) -> Optional[ReadingSession]:
        return next((s for s in self._document.sessions if s.active), None)

    def get_session(self, session_id: str) -> Optional[ReadingSession]:
        index = self._session_index(session_id)
        return self._document.sessions[index] if index is not None else None

    def list_sessions(self, active: Optional[bool] = None) -> List[ReadingSession]:
        if active is None:
            return list(self._document.sessions)
        return [s for s in self._document.sessions if s.active == active]

    def _session_index(self, session_id: str) -> Optional[int]:
        for idx, session in enumerate(self._document.sessions):
            if session.id == session_id:
                return idx
        return None

    # ==================== Statistics ====================

    def compute_statistics(self) -> Statistics:
        return compute_statistics(self._document.titles, self._document.sessions, self.now())

    # ==================== Bookmarks ====================

    def add_bookmark(self, title_id: str, position: int, note: str = "") -> Bookmark:
        bookmark = Bookmark(
            id=self._new_id(),
            title_id=title_id,
            position=position,
            note=note,
            created_at=self.now(),
        )
        self._document.bookmarks.append(bookmark)
        self._persist()
        return bookmark

    def remove_bookmark(self, bookmark_id: str) -> Optional[Bookmark]:
        for idx, bookmark in enumerate(self._document.bookmarks):
            if bookmark.id == bookmark_id:
                removed = self._document.bookmarks.pop(idx)
                self._persist()
                return removed
        return None

    def list_bookmarks(self, title_id: Optional[str] = None) -> List[Bookmark]:
        if title_id is None:
            return list(self._document.bookmarks)
        return [b for b in self._document.bookmarks if b.title_id == title_id]

    # ==================== History ====================

    def record_history(
        self,
        title_id: str,
        action: Union[HistoryAction, str],
        details: HistoryDetails,
    ) -> HistoryEntry:
        """Prepend an activity entry, keeping only the newest HISTORY_LIMIT.

        Raises:
            ValueError: If ``details`` does not match the action's payload type.
        """
        entry = self._prepend_history(title_id, HistoryAction(action), details, self.now())
        self._persist()
        return entry

    def recent_history(self, limit: int = 10) -> List[HistoryEntry]:
        """Newest entries first."""
        return self._document.history[:limit]

    def _prepend_history(
        self,
        title_id: str,
        action: HistoryAction,
        details: HistoryDetails,
        timestamp: datetime,
    ) -> HistoryEntry:
        entry = HistoryEntry(
            id=self._new_id(),
            title_id=title_id,
            action=action,
            details=details,
            timestamp=timestamp,
        )
        self._document.history.insert(0, entry)
        del self._document.history[self.HISTORY_LIMIT:]
        return entry

    # ==================== Tag catalog ====================

    def list_tags(self) -> List[str]:
        return list(self._document.tags)

    def add_tag(self, tag: str) -> bool:
        """Add a tag to the catalog. Returns False if it is already there.

        Raises:
            ValueError: If the tag is blank.
        """
        tag = (tag or "").strip()
        if not tag:
            raise ValueError("Tag cannot be empty")
        if tag in self._document.tags:
            return False
        self._document.tags.append(tag)
        self._persist()
        return True

    def remove_tag(self, tag: str) -> bool:
        if tag not in self._document.tags:
            return False
        self._document.tags.remove(tag)
        self._persist()
        return True

    # ==================== Settings ====================

    def get_settings(self) -> TrackerSettings:
        return self._document.settings

    def update_settings(self, **changes: Any) -> TrackerSettings:
        """Replace individual settings.

        Raises:
            ValueError: If a setting name is unknown.
        """
        known = {f.name for f in fields(TrackerSettings)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")
        self._document.settings = replace(self._document.settings, **changes)
        self._persist()
        return self._document.settings

    def to_document_dict(self) -> Dict[str, Any]:
        """Snapshot of the persisted document shape."""
        return self._document.to_dict()
