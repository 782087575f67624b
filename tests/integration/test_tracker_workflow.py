#!/usr/bin/env python3
"""
Integration tests for the tracker - full workflow validation.

Tests the complete journey through the composition root:
1. Start with empty storage → default document written
2. Add a title → history logged
3. Read with the session timer → progress credited
4. Restart → everything reloaded from storage
5. Print statistics and export the library from the command line
"""

import json

import pytest
from PySide6.QtCore import QCoreApplication

from manga_tracker.core import HistoryAction, ReadingStatus
from manga_tracker.main import build_components, main
from manga_tracker.services import SettingsManager


def ensure_qt_app():
    if QCoreApplication.instance() is None:
        QCoreApplication([])


@pytest.fixture(params=["file", "sqlite"])
def tracker_env(request, tmp_path, monkeypatch):
    """Point the tracker at a temporary data directory."""
    data_dir = tmp_path / "data"
    monkeypatch.setenv("MANGA_TRACKER_DATA_DIR", str(data_dir))
    monkeypatch.setenv("MANGA_TRACKER_STORAGE", request.param)
    monkeypatch.delenv("MANGA_TRACKER_CLAMP_PROGRESS", raising=False)
    monkeypatch.delenv("MANGA_TRACKER_COMPLETE_ON_ANY_UPDATE", raising=False)
    return data_dir


def build(tmp_path):
    ensure_qt_app()
    return build_components(SettingsManager(project_root=tmp_path))


def close(components):
    close_store = getattr(components.blob_store, "close", None)
    if close_store is not None:
        close_store()


def test_reading_workflow_survives_restart(tracker_env, tmp_path):
    components = build(tmp_path)
    title = components.library_coordinator.add_title(
        "Solo Leveling", kind="manhwa", total_units=200, tags=["Action"]
    )
    components.timer_coordinator.start_session(title.id)
    components.timer_coordinator.stop_session(5)
    components.library_coordinator.quick_update_progress(title.id, 200)
    close(components)

    restarted = build(tmp_path)
    reloaded = restarted.store.get_title(title.id)

    assert reloaded.current_progress == 200
    assert reloaded.status is ReadingStatus.COMPLETED
    assert [e.action for e in restarted.store.recent_history()] == [
        HistoryAction.PROGRESS_UPDATE,
        HistoryAction.READ,
        HistoryAction.ADDED,
    ]
    assert len(restarted.store.list_sessions(active=False)) == 1
    assert not restarted.timer.is_running
    assert restarted.store.persist_failures == 0
    close(restarted)


def test_memory_backend_starts_empty_each_time(tmp_path, monkeypatch):
    monkeypatch.setenv("MANGA_TRACKER_STORAGE", "memory")

    first = build(tmp_path)
    first.store.create_title("Berserk")
    second = build(tmp_path)

    assert second.store.list_titles() == []


def test_stats_command_prints_json(tracker_env, tmp_path, capsys):
    components = build(tmp_path)
    components.store.create_title("Berserk", status="completed", current_progress=364)
    close(components)

    assert main(["stats"]) == 0

    out = capsys.readouterr().out
    stats = json.loads(out[out.index("{"):])
    assert stats["totalManga"] == 1
    assert stats["completed"] == 1
    assert stats["totalChaptersRead"] == 364


def test_export_command_writes_file(tracker_env, tmp_path, capsys):
    components = build(tmp_path)
    components.store.create_title("Frieren")
    close(components)
    out_dir = tmp_path / "exports"

    assert main(["export", "--output", str(out_dir)]) == 0

    exported = list(out_dir.glob("manga-library-*.json"))
    assert len(exported) == 1
    payload = json.loads(exported[0].read_text(encoding="utf-8"))
    assert [m["title"] for m in payload["manga"]] == ["Frieren"]


def test_export_command_reports_failure(tracker_env, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    assert main(["export", "--output", str(blocker)]) == 1


def test_unknown_backend_fails_fast(tmp_path, monkeypatch):
    monkeypatch.setenv("MANGA_TRACKER_STORAGE", "redis")

    with pytest.raises(ValueError, match="Unsupported storage backend"):
        build(tmp_path)
