"""Library Coordinator - Orchestrates title management and the activity feed."""

from typing import Any, Optional

from PySide6.QtCore import QObject, Signal, Slot

from manga_tracker.core import HistoryAction, ReadingStatus, Title, TitleDetails
from manga_tracker.services import RecordStore


class LibraryCoordinator(QObject):
    """Manages title changes requested by the presentation layer.

    Responsibilities:
    - Add, edit and delete titles
    - Record the matching activity history entry for each change
    - Apply quick progress updates
    - Notify views when the library changed or a title was missing
    """

    library_changed = Signal()
    # Emitted with (title, message) when an action cannot be applied
    error_occurred = Signal(str, str)

    def __init__(self, store: RecordStore, parent: Optional[QObject] = None):
        super().__init__(parent)

        if store is None:
            raise ValueError("RecordStore must not be None")

        self.store = store

    def add_title(self, name: str, **fields: Any) -> Title:
        """Create a title and log an ``added`` entry.

        Raises:
            ValueError: If the name is empty or a field value is invalid.
        """
        if not name or not name.strip():
            raise ValueError("Title name cannot be empty")

        title = self.store.create_title(name.strip(), **fields)
        self.store.record_history(title.id, HistoryAction.ADDED, TitleDetails(title=title.name))
        self.library_changed.emit()
        return title

    def edit_title(self, title_id: str, **changes: Any) -> Optional[Title]:
        """Apply field changes and log ``completed`` or ``updated``.

        ``completed`` is logged when this edit moves the title into the
        completed status.
        """
        before = self.store.get_title(title_id)
        if before is None:
            self.error_occurred.emit("Edit Error", f"Title not found: {title_id}")
            return None

        updated = self.store.update_title(title_id, **changes)
        if updated is None:
            self.error_occurred.emit("Edit Error", f"Title not found: {title_id}")
            return None

        just_completed = (
            updated.status is ReadingStatus.COMPLETED
            and before.status is not ReadingStatus.COMPLETED
        )
        action = HistoryAction.COMPLETED if just_completed else HistoryAction.UPDATED
        self.store.record_history(title_id, action, TitleDetails(title=updated.name))
        self.library_changed.emit()
        return updated

    @Slot(str)
    def handle_title_deleted(self, title_id: str):
        self.delete_title(title_id)

    def delete_title(self, title_id: str) -> Optional[Title]:
        removed = self.store.delete_title(title_id)
        if removed is None:
            self.error_occurred.emit("Delete Error", f"Title not found: {title_id}")
            return None

        self.store.record_history(title_id, HistoryAction.DELETED, TitleDetails(title=removed.name))
        self.library_changed.emit()
        return removed

    @Slot(str, int)
    def handle_quick_update(self, title_id: str, new_progress: int):
        self.quick_update_progress(title_id, new_progress)

    def quick_update_progress(self, title_id: str, new_progress: int) -> Optional[Title]:
        """Set a title's progress directly; negative values are reported, not applied."""
        if new_progress < 0:
            self.error_occurred.emit("Progress Error", f"Invalid chapter number: {new_progress}")
            return None

        updated = self.store.update_progress(title_id, new_progress)
        if updated is None:
            self.error_occurred.emit("Progress Error", f"Title not found: {title_id}")
            return None

        self.library_changed.emit()
        return updated
