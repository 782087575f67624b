"""ReadingSession entity - a timed reading interval."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class ReadingSession:
    """A reading interval, optionally bound to a title.

    ``ended_at`` stays None and ``active`` True until the session is closed;
    ``units_read`` is only set when the session ends.
    """

    id: str
    started_at: datetime
    title_id: Optional[str] = None
    ended_at: Optional[datetime] = None
    units_read: int = 0
    active: bool = True

    @property
    def is_closed(self) -> bool:
        return not self.active

    def duration_seconds(self, now: Optional[datetime] = None) -> int:
        """Whole seconds between start and end (or ``now`` while active)."""
        end = self.ended_at
        if end is None:
            end = now or datetime.now(timezone.utc)
        seconds = int((end - self.started_at).total_seconds())
        return max(seconds, 0)
