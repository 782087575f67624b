#!/usr/bin/env python3
"""
Tests for LibraryCoordinator - validates title management and history wiring.
"""

import pytest
from PySide6.QtCore import QCoreApplication

from manga_tracker.coordinators import LibraryCoordinator
from manga_tracker.core import HistoryAction, ProgressDetails, ReadingStatus, TitleDetails
from manga_tracker.io import InMemoryBlobStore
from manga_tracker.services import RecordStore


def ensure_qt_app():
    if QCoreApplication.instance() is None:
        QCoreApplication([])


@pytest.fixture
def store():
    return RecordStore(InMemoryBlobStore())


@pytest.fixture
def coordinator(store):
    ensure_qt_app()
    return LibraryCoordinator(store)


@pytest.fixture
def signals(coordinator):
    """Collect emitted signals."""
    received = {"changed": 0, "errors": []}

    def on_changed():
        received["changed"] += 1

    coordinator.library_changed.connect(on_changed)
    coordinator.error_occurred.connect(lambda title, message: received["errors"].append((title, message)))
    return received


def test_library_coordinator_fails_fast_on_none_store():
    """LibraryCoordinator should raise on None store."""
    ensure_qt_app()

    with pytest.raises(ValueError, match="RecordStore must not be None"):
        LibraryCoordinator(None)


def test_add_title_records_history(coordinator, store, signals):
    title = coordinator.add_title("  Vinland Saga ", author="Makoto Yukimura", tags=["Drama"])

    assert title.name == "Vinland Saga"
    assert store.get_title(title.id) == title
    entry = store.recent_history(1)[0]
    assert entry.action is HistoryAction.ADDED
    assert entry.details == TitleDetails(title="Vinland Saga")
    assert signals["changed"] == 1


def test_add_title_rejects_blank_name(coordinator, store):
    with pytest.raises(ValueError, match="Title name cannot be empty"):
        coordinator.add_title("   ")
    assert store.list_titles() == []


def test_edit_title_records_updated(coordinator, store, signals):
    title = coordinator.add_title("Berserk")

    updated = coordinator.edit_title(title.id, notes="Golden Age", rating=10)

    assert updated.rating == 10
    assert store.recent_history(1)[0].action is HistoryAction.UPDATED
    assert signals["changed"] == 2


def test_edit_title_to_completed_records_completed(coordinator, store):
    title = coordinator.add_title("Berserk")

    coordinator.edit_title(title.id, status="completed")

    assert store.recent_history(1)[0].action is HistoryAction.COMPLETED


def test_edit_already_completed_title_records_updated(coordinator, store):
    title = coordinator.add_title("Berserk", status=ReadingStatus.COMPLETED)

    coordinator.edit_title(title.id, rating=8)

    assert store.recent_history(1)[0].action is HistoryAction.UPDATED


def test_edit_missing_title_reports_error(coordinator, store, signals):
    assert coordinator.edit_title("missing", rating=3) is None
    assert signals["errors"] == [("Edit Error", "Title not found: missing")]
    assert store.recent_history() == []


def test_delete_title_records_history(coordinator, store, signals):
    title = coordinator.add_title("Berserk")

    coordinator.handle_title_deleted(title.id)

    assert store.get_title(title.id) is None
    entry = store.recent_history(1)[0]
    assert entry.action is HistoryAction.DELETED
    assert entry.title_id == title.id
    assert entry.details.title == "Berserk"


def test_delete_missing_title_reports_error(coordinator, signals):
    assert coordinator.delete_title("missing") is None
    assert signals["errors"] == [("Delete Error", "Title not found: missing")]


def test_quick_update_sets_progress(coordinator, store, signals):
    title = coordinator.add_title("Solo Leveling", total_units=200, current_progress=40)

    coordinator.handle_quick_update(title.id, 45)

    assert store.get_title(title.id).current_progress == 45
    entry = store.recent_history(1)[0]
    assert entry.action is HistoryAction.PROGRESS_UPDATE
    assert entry.details == ProgressDetails(title="Solo Leveling", old_progress=40, new_progress=45)
    assert signals["changed"] == 2


def test_quick_update_to_total_completes(coordinator, store):
    title = coordinator.add_title("Solo Leveling", total_units=200, current_progress=199)

    updated = coordinator.quick_update_progress(title.id, 200)

    assert updated.status is ReadingStatus.COMPLETED


def test_quick_update_rejects_negative(coordinator, store, signals):
    title = coordinator.add_title("Berserk", current_progress=3)

    assert coordinator.quick_update_progress(title.id, -1) is None

    assert signals["errors"] == [("Progress Error", "Invalid chapter number: -1")]
    assert store.get_title(title.id).current_progress == 3


def test_quick_update_missing_title_reports_error(coordinator, signals):
    coordinator.handle_quick_update("missing", 4)
    assert signals["errors"] == [("Progress Error", "Title not found: missing")]
