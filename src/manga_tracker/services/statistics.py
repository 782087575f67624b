"""Statistics and analytics derived from titles and reading sessions.

All functions are pure: they take entity lists plus a reference ``now`` and
never touch storage.
"""

import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Sequence, Tuple

from manga_tracker.core import MangaKind, ReadingSession, ReadingStatus, Title

WEEK = timedelta(days=7)
MONTH = timedelta(days=30)


@dataclass(frozen=True)
class Statistics:
    """Aggregate view of the library."""

    total_titles: int = 0
    status_counts: Dict[ReadingStatus, int] = field(default_factory=dict)
    total_progress: int = 0
    total_sessions: int = 0
    average_session_minutes: int = 0
    daily_progress: int = 0
    weekly_progress: int = 0
    monthly_progress: int = 0

    def count(self, status: ReadingStatus) -> int:
        return self.status_counts.get(status, 0)

    def to_dict(self) -> Dict[str, int]:
        """Flat camelCase mapping, as shown on the dashboard and in exports."""
        return {
            "totalManga": self.total_titles,
            "currentlyReading": self.count(ReadingStatus.READING),
            "completed": self.count(ReadingStatus.COMPLETED),
            "onHold": self.count(ReadingStatus.ON_HOLD),
            "dropped": self.count(ReadingStatus.DROPPED),
            "planToRead": self.count(ReadingStatus.PLAN_TO_READ),
            "totalChaptersRead": self.total_progress,
            "totalReadingSessions": self.total_sessions,
            "averageSessionTime": self.average_session_minutes,
            "dailyProgress": self.daily_progress,
            "weeklyProgress": self.weekly_progress,
            "monthlyProgress": self.monthly_progress,
        }


def _closed(sessions: Iterable[ReadingSession]) -> List[ReadingSession]:
    return [s for s in sessions if not s.active]


def _local_day(moment: datetime) -> date:
    return moment.astimezone().date()


def average_session_minutes(sessions: Sequence[ReadingSession]) -> int:
    """Mean duration of closed sessions in whole minutes, 0 when there are none."""
    closed = _closed(sessions)
    if not closed:
        return 0
    total_seconds = sum(
        (s.ended_at - s.started_at).total_seconds()
        for s in closed
        if s.ended_at is not None
    )
    return int(math.floor(total_seconds / len(closed) / 60 + 0.5))


def progress_since(sessions: Iterable[ReadingSession], since: datetime) -> int:
    """Units read in closed sessions that ended at or after ``since``."""
    return sum(
        s.units_read
        for s in _closed(sessions)
        if s.ended_at is not None and s.ended_at >= since
    )


def progress_on_day(sessions: Iterable[ReadingSession], day: date) -> int:
    """Units read in closed sessions that ended on the given local calendar day."""
    return sum(
        s.units_read
        for s in _closed(sessions)
        if s.ended_at is not None and _local_day(s.ended_at) == day
    )


def compute_statistics(
    titles: Sequence[Title], sessions: Sequence[ReadingSession], now: datetime
) -> Statistics:
    status_counts = Counter(t.status for t in titles)
    return Statistics(
        total_titles=len(titles),
        status_counts={status: status_counts.get(status, 0) for status in ReadingStatus},
        total_progress=sum(t.current_progress for t in titles),
        total_sessions=len(_closed(sessions)),
        average_session_minutes=average_session_minutes(sessions),
        daily_progress=progress_on_day(sessions, _local_day(now)),
        weekly_progress=progress_since(sessions, now - WEEK),
        monthly_progress=progress_since(sessions, now - MONTH),
    )


def daily_progress_series(
    sessions: Iterable[ReadingSession], now: datetime, days: int = 30
) -> List[Tuple[date, int]]:
    """Units read per local day for the last ``days`` days, oldest first, zero-filled."""
    today = _local_day(now)
    series = {today - timedelta(days=offset): 0 for offset in range(days)}
    for session in _closed(sessions):
        if session.ended_at is None:
            continue
        day = _local_day(session.ended_at)
        if day in series:
            series[day] += session.units_read
    return sorted(series.items())


def kind_distribution(titles: Iterable[Title]) -> Dict[MangaKind, int]:
    counts = Counter(t.kind for t in titles)
    return {kind: counts[kind] for kind in MangaKind if counts[kind]}


def top_titles_by_progress(titles: Iterable[Title], limit: int = 5) -> List[Title]:
    return sorted(titles, key=lambda t: t.current_progress, reverse=True)[:limit]


def days_since_first_title(titles: Sequence[Title], now: datetime) -> int:
    """Days since the oldest title was added, rounded up, never below 1."""
    if not titles:
        return 1
    first = min(t.created_at for t in titles)
    days = math.ceil((now - first).total_seconds() / 86400)
    return max(days, 1)


def tag_frequency(titles: Iterable[Title], limit: int = 20) -> List[Tuple[str, int]]:
    """Most used tags with their counts, most frequent first."""
    counts = Counter(tag for t in titles for tag in t.tags)
    return counts.most_common(limit)
