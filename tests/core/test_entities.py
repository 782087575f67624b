"""Unit tests for domain entities."""

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone

import pytest

from manga_tracker.core import (
    HistoryAction,
    HistoryEntry,
    MangaKind,
    ProgressDetails,
    ReadDetails,
    ReadingSession,
    ReadingStatus,
    Title,
    TitleDetails,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_title(**overrides):
    values = dict(
        id="t1",
        name="Vagabond",
        kind=MangaKind.MANGA,
        status=ReadingStatus.READING,
        current_progress=0,
        created_at=NOW,
        updated_at=NOW,
    )
    values.update(overrides)
    return Title(**values)


class TestTitle:
    def test_progress_ratio_with_known_total(self):
        title = make_title(current_progress=50, total_units=200)
        assert title.progress_ratio == 0.25

    def test_progress_ratio_is_zero_for_unknown_length(self):
        title = make_title(current_progress=50, total_units=None)
        assert title.progress_ratio == 0.0

    def test_has_reached_end(self):
        assert make_title(current_progress=200, total_units=200).has_reached_end
        assert make_title(current_progress=250, total_units=200).has_reached_end
        assert not make_title(current_progress=199, total_units=200).has_reached_end
        assert not make_title(current_progress=500, total_units=None).has_reached_end

    def test_has_tag_is_exact(self):
        title = make_title(tags=("Action", "Drama"))
        assert title.has_tag("Drama")
        assert not title.has_tag("drama")

    def test_title_is_immutable(self):
        title = make_title()
        with pytest.raises(FrozenInstanceError):
            title.name = "Other"

    def test_status_values_match_stored_strings(self):
        assert ReadingStatus("on-hold") is ReadingStatus.ON_HOLD
        assert ReadingStatus("plan-to-read") is ReadingStatus.PLAN_TO_READ
        with pytest.raises(ValueError):
            ReadingStatus("paused")


class TestReadingSession:
    def test_duration_of_closed_session(self):
        session = ReadingSession(
            id="s1",
            started_at=NOW,
            ended_at=NOW + timedelta(minutes=25, seconds=30),
            units_read=2,
            active=False,
        )
        assert session.is_closed
        assert session.duration_seconds() == 1530

    def test_duration_of_active_session_uses_now(self):
        session = ReadingSession(id="s1", started_at=NOW)
        assert session.duration_seconds(NOW + timedelta(seconds=90)) == 90

    def test_duration_never_negative(self):
        session = ReadingSession(id="s1", started_at=NOW)
        assert session.duration_seconds(NOW - timedelta(seconds=5)) == 0


class TestHistoryEntry:
    def test_accepts_matching_payload(self):
        entry = HistoryEntry(
            id="h1",
            title_id="t1",
            action=HistoryAction.READ,
            details=ReadDetails(title="Vagabond", units_read=3, session_duration=600),
            timestamp=NOW,
        )
        assert entry.details.units_read == 3

    def test_rejects_mismatched_payload(self):
        with pytest.raises(ValueError, match="expects ReadDetails"):
            HistoryEntry(
                id="h1",
                title_id="t1",
                action=HistoryAction.READ,
                details=TitleDetails(title="Vagabond"),
                timestamp=NOW,
            )

    def test_progress_details_units_read(self):
        details = ProgressDetails(title="Vagabond", old_progress=10, new_progress=14)
        assert details.units_read == 4
