"""Title entity - a tracked manga, manhwa or manhua entry."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


class MangaKind(str, Enum):
    """Origin format of a title."""

    MANGA = "manga"
    MANHWA = "manhwa"
    MANHUA = "manhua"


class ReadingStatus(str, Enum):
    """Where the user stands with a title."""

    READING = "reading"
    COMPLETED = "completed"
    ON_HOLD = "on-hold"
    DROPPED = "dropped"
    PLAN_TO_READ = "plan-to-read"


@dataclass(frozen=True)
class Title:
    """Represents one entry in the user's catalog.

    Attributes:
        id: Opaque unique identifier assigned by the record store.
        name: Display name (no uniqueness constraint).
        kind: Manga, manhwa or manhua.
        status: Current reading status.
        current_progress: Chapters read so far (non-negative).
        created_at: When the title was added.
        updated_at: Refreshed on every mutation.
        started_at: When the user started reading.
        total_units: Total chapters, or None when the length is unknown.
        rating: Optional 0-10 score.
        tags: Tag names in display order.
        notes: Free text.
        author: Author name (may be empty).
        cover_image: Optional cover image reference.
        finished_at: When the title was finished, if it was.
        last_progress_at: When progress last changed.
    """

    id: str
    name: str
    kind: MangaKind
    status: ReadingStatus
    current_progress: int
    created_at: datetime
    updated_at: datetime
    started_at: Optional[datetime] = None
    total_units: Optional[int] = None
    rating: Optional[float] = None
    tags: Tuple[str, ...] = ()
    notes: str = ""
    author: str = ""
    cover_image: Optional[str] = None
    finished_at: Optional[datetime] = None
    last_progress_at: Optional[datetime] = None

    @property
    def progress_ratio(self) -> float:
        """Fraction of known chapters read; 0.0 when the length is unknown."""
        if not self.total_units:
            return 0.0
        return self.current_progress / self.total_units

    @property
    def has_reached_end(self) -> bool:
        """True when the total is known and progress has reached it."""
        return bool(self.total_units) and self.current_progress >= self.total_units

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags
