"""User preferences stored inside the tracker document."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TrackerSettings:
    daily_goal: int = 5
    theme: str = "light"
    notifications: bool = True
