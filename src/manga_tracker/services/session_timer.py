"""Session Timer - single active reading session on top of the record store."""

import logging
from typing import Optional

from manga_tracker.core import HistoryAction, ReadDetails, ReadingSession
from manga_tracker.services.record_store import Clock, RecordStore, utc_now

logger = logging.getLogger(__name__)


class SessionTimer:
    """
    Starts and stops reading sessions, allowing at most one at a time.

    The record store itself does not refuse a second active session, so the
    check happens here: ``start`` is a no-op while a session is running.
    """

    def __init__(self, store: RecordStore, clock: Optional[Clock] = None) -> None:
        if store is None:
            raise ValueError("RecordStore must not be None")
        self._store = store
        self._clock = clock or utc_now

    @property
    def active_session(self) -> Optional[ReadingSession]:
        return self._store.get_active_session()

    @property
    def is_running(self) -> bool:
        return self.active_session is not None

    def start(self, title_id: Optional[str] = None) -> Optional[ReadingSession]:
        """Start a session, optionally bound to a title.

        Returns:
            The new session, or None if one is already active.
        """
        if self.is_running:
            logger.warning("A reading session is already active; start ignored")
            return None
        return self._store.start_session(title_id)

    def stop(self, units_read: int = 0) -> Optional[ReadingSession]:
        """Stop the active session and log a ``read`` history entry.

        The history entry is only written when the session is bound to a
        title that still exists.

        Returns:
            The closed session, or None if no session was active.
        """
        session = self.active_session
        if session is None:
            logger.warning("No active reading session to stop")
            return None

        elapsed = self.elapsed_seconds()
        closed = self._store.end_session(session.id, units_read)
        if closed is None:
            return None

        if closed.title_id:
            title = self._store.get_title(closed.title_id)
            if title is not None:
                self._store.record_history(
                    closed.title_id,
                    HistoryAction.READ,
                    ReadDetails(
                        title=title.name,
                        units_read=units_read,
                        session_duration=elapsed,
                    ),
                )
        return closed

    def toggle(
        self, title_id: Optional[str] = None, units_read: int = 0
    ) -> Optional[ReadingSession]:
        """Stop the running session with ``units_read``, or start one for ``title_id``."""
        if self.is_running:
            return self.stop(units_read)
        return self.start(title_id)

    def elapsed_seconds(self) -> int:
        """Whole seconds since the active session started; 0 when idle."""
        session = self.active_session
        if session is None:
            return 0
        return session.duration_seconds(self._clock())
