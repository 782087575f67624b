"""Session Timer Coordinator - exposes the reading timer to the presentation layer."""

from typing import Optional

from PySide6.QtCore import QObject, QTimer, Signal, Slot

from manga_tracker.core import ReadingSession
from manga_tracker.services import SessionTimer


class SessionTimerCoordinator(QObject):
    """Routes timer actions from the UI to SessionTimer and reports back via signals.

    Responsibilities:
    - Start/stop/toggle the single reading session
    - Tick once per second while a session runs, emitting elapsed seconds
    - Announce session start and stop so views can refresh
    """

    # Emitted with the new session id
    session_started = Signal(str)
    # Emitted with the closed session id and units read
    session_stopped = Signal(str, int)
    # Emitted every tick with elapsed whole seconds
    elapsed_changed = Signal(int)

    TICK_INTERVAL_MS = 1000

    def __init__(self, timer: SessionTimer, parent: Optional[QObject] = None):
        super().__init__(parent)

        if timer is None:
            raise ValueError("SessionTimer must not be None")

        self.timer = timer
        self._ticker = QTimer(self)
        self._ticker.setInterval(self.TICK_INTERVAL_MS)
        self._ticker.timeout.connect(self.handle_tick)

        # Resume ticking for a session left running by a previous launch
        if self.timer.is_running:
            self._ticker.start()

    @property
    def is_ticking(self) -> bool:
        return self._ticker.isActive()

    def start_session(self, title_id: Optional[str] = None) -> Optional[ReadingSession]:
        session = self.timer.start(title_id)
        if session is None:
            return None
        self._ticker.start()
        self.session_started.emit(session.id)
        self.elapsed_changed.emit(0)
        return session

    def stop_session(self, units_read: int = 0) -> Optional[ReadingSession]:
        session = self.timer.stop(units_read)
        self._ticker.stop()
        if session is None:
            return None
        self.session_stopped.emit(session.id, session.units_read)
        return session

    @Slot()
    def handle_start(self):
        """Start an unbound session."""
        self.start_session()

    @Slot(str)
    def handle_start_for_title(self, title_id: str):
        self.start_session(title_id or None)

    @Slot(int)
    def handle_stop(self, units_read: int):
        self.stop_session(units_read)

    @Slot(str, int)
    def handle_toggle(self, title_id: str, units_read: int):
        """Stop with ``units_read`` if running, otherwise start for ``title_id``."""
        if self.timer.is_running:
            self.stop_session(units_read)
        else:
            self.start_session(title_id or None)

    @Slot()
    def handle_tick(self):
        if not self.timer.is_running:
            self._ticker.stop()
            return
        self.elapsed_changed.emit(self.timer.elapsed_seconds())
