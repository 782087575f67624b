"""Settings Manager - Handles storage location and progress policy configuration."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from manga_tracker.services.progress_policy import ProgressPolicy

STORAGE_BACKENDS = ("file", "sqlite", "memory")

_TRUTHY = {"1", "true", "yes", "on"}


class SettingsManager:
    """
    Manages application configuration.

    Reads values from the environment, loading a ``.env`` file in the
    project root first:

    - MANGA_TRACKER_DATA_DIR: where stored data lives (default ~/.manga_tracker)
    - MANGA_TRACKER_STORAGE: "file", "sqlite" or "memory" (default "file")
    - MANGA_TRACKER_CLAMP_PROGRESS: cap progress at a title's known length
    - MANGA_TRACKER_COMPLETE_ON_ANY_UPDATE: auto-complete on every progress path
    """

    def __init__(self, project_root: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            project_root: Path to project root where .env is located.
                         If None, searches upward from current file.
        """
        if project_root is None:
            current = Path(__file__).resolve()
            project_root = current.parent.parent.parent.parent

        env_path = project_root / ".env"
        load_dotenv(dotenv_path=env_path)

        self._project_root = project_root

    def get_data_dir(self) -> Path:
        value = os.getenv("MANGA_TRACKER_DATA_DIR")
        if value and value.strip():
            return Path(value.strip()).expanduser()
        return Path.home() / ".manga_tracker"

    def get_storage_backend(self) -> str:
        """Configured storage backend name.

        Raises:
            ValueError: If the configured backend is not supported.
        """
        value = (os.getenv("MANGA_TRACKER_STORAGE") or "file").strip().lower() or "file"
        if value not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unsupported storage backend '{value}', expected one of {', '.join(STORAGE_BACKENDS)}"
            )
        return value

    def get_progress_policy(self) -> ProgressPolicy:
        return ProgressPolicy(
            clamp_to_total=self._get_flag("MANGA_TRACKER_CLAMP_PROGRESS"),
            complete_on_any_update=self._get_flag("MANGA_TRACKER_COMPLETE_ON_ANY_UPDATE"),
        )

    def reload_env(self) -> None:
        """Reload environment variables from .env file."""
        env_path = self._project_root / ".env"
        load_dotenv(dotenv_path=env_path, override=True)

    @staticmethod
    def _get_flag(name: str) -> bool:
        value = os.getenv(name)
        return bool(value) and value.strip().lower() in _TRUTHY
