"""History entities - audit records for the activity feed.

Each action carries its own typed payload instead of a free-form dict:

- ``added`` / ``updated`` / ``completed`` / ``deleted`` -> TitleDetails
- ``read`` -> ReadDetails
- ``progress_update`` -> ProgressDetails

Stored keys a payload does not model are kept in ``extra`` and written back
unchanged.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Type, Union


class HistoryAction(str, Enum):
    ADDED = "added"
    READ = "read"
    UPDATED = "updated"
    COMPLETED = "completed"
    DELETED = "deleted"
    PROGRESS_UPDATE = "progress_update"


@dataclass(frozen=True)
class TitleDetails:
    """Payload naming the title an action applied to."""

    title: str
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ReadDetails:
    """Payload of a finished reading session."""

    title: str
    units_read: int
    session_duration: int  # seconds
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProgressDetails:
    """Payload of a direct progress change."""

    title: str
    old_progress: int
    new_progress: int
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def units_read(self) -> int:
        return self.new_progress - self.old_progress


HistoryDetails = Union[TitleDetails, ReadDetails, ProgressDetails]

DETAILS_BY_ACTION: Dict[HistoryAction, Type] = {
    HistoryAction.ADDED: TitleDetails,
    HistoryAction.UPDATED: TitleDetails,
    HistoryAction.COMPLETED: TitleDetails,
    HistoryAction.DELETED: TitleDetails,
    HistoryAction.READ: ReadDetails,
    HistoryAction.PROGRESS_UPDATE: ProgressDetails,
}


@dataclass(frozen=True)
class HistoryEntry:
    """A single activity record.

    Raises:
        ValueError: If ``details`` is not the payload type of ``action``.
    """

    id: str
    title_id: str
    action: HistoryAction
    details: HistoryDetails
    timestamp: datetime

    def __post_init__(self) -> None:
        expected = DETAILS_BY_ACTION[self.action]
        if not isinstance(self.details, expected):
            raise ValueError(
                f"History action '{self.action.value}' expects {expected.__name__}, "
                f"got {type(self.details).__name__}"
            )
