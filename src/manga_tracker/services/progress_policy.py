"""Progress rules shared by every path that changes a title's progress."""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from manga_tracker.core import ReadingStatus

RECOMMENDED_TRANSITIONS: Dict[ReadingStatus, FrozenSet[ReadingStatus]] = {
    ReadingStatus.PLAN_TO_READ: frozenset({ReadingStatus.READING}),
    ReadingStatus.READING: frozenset(
        {ReadingStatus.COMPLETED, ReadingStatus.DROPPED, ReadingStatus.ON_HOLD}
    ),
    ReadingStatus.ON_HOLD: frozenset({ReadingStatus.READING}),
    ReadingStatus.DROPPED: frozenset({ReadingStatus.READING}),
    ReadingStatus.COMPLETED: frozenset(),
}


def is_recommended_transition(old: ReadingStatus, new: ReadingStatus) -> bool:
    """Advisory only: status stays free-form and any value may be set."""
    if old == new:
        return True
    return new in RECOMMENDED_TRANSITIONS.get(old, frozenset())


@dataclass(frozen=True)
class ProgressPolicy:
    """Product decision on how progress interacts with a title's length.

    Defaults keep the long-standing behavior: progress may run past the known
    total, and only the quick-update path marks a title completed.

    Attributes:
        clamp_to_total: Cap progress at ``total_units`` on every progress path.
        complete_on_any_update: Also auto-complete from session ends and
            direct field updates, not only from quick updates.
    """

    clamp_to_total: bool = False
    complete_on_any_update: bool = False

    def apply_limit(self, progress: int, total_units: Optional[int]) -> int:
        if self.clamp_to_total and total_units is not None:
            return min(progress, total_units)
        return progress

    def should_complete(
        self, progress: int, total_units: Optional[int], quick_update: bool = False
    ) -> bool:
        if not total_units or progress < total_units:
            return False
        return quick_update or self.complete_on_any_update
