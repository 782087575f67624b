"""Bookmark entity."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Bookmark:
    id: str
    title_id: str
    position: int
    created_at: datetime
    note: str = ""
