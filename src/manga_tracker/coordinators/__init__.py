"""Coordinators - Orchestration layer connecting the UI with the record store."""

from .library_coordinator import LibraryCoordinator
from .session_timer_coordinator import SessionTimerCoordinator

__all__ = [
    "LibraryCoordinator",
    "SessionTimerCoordinator",
]
