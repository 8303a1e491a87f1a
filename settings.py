"""
Persisted user settings.

Integers are stored as a flat JSON object in the user's config directory.
A missing key reads as 0, so callers fall back to their own defaults.
"""

import json
import logging
import os
from typing import Dict, Optional

import config
from errors import SettingsError

logger = logging.getLogger(__name__)


def default_settings_path() -> str:
    """Get path to the settings file in the user config directory."""
    return os.path.join(config.SETTINGS_DIR, config.SETTINGS_FILE)


class SettingsStore:
    """Key/value integer store backed by a JSON file."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path: str = path or default_settings_path()

    def _load(self) -> Dict[str, object]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: not a JSON object", self.path)
            return {}
        return data

    def get_int(self, key: str) -> int:
        """
        Read an integer setting.

        Returns:
            The stored value, or 0 if it is missing or not an integer.
        """
        value = self._load().get(key)
        if isinstance(value, bool) or not isinstance(value, int):
            return 0
        return value

    def set_int(self, key: str, value: int) -> None:
        """Store an integer setting and write the file immediately."""
        data = self._load()
        data[key] = int(value)
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with open(self.path, 'w') as f:
                json.dump(data, f, indent=2)
        except OSError as exc:
            raise SettingsError(f"Could not write {self.path}: {exc}") from exc
        logger.debug("Saved %s=%d to %s", key, value, self.path)


class MemorySettingsStore:
    """In-memory store with the same interface as SettingsStore."""

    def __init__(self, values: Optional[Dict[str, int]] = None) -> None:
        self.values: Dict[str, int] = dict(values or {})

    def get_int(self, key: str) -> int:
        return self.values.get(key, 0)

    def set_int(self, key: str, value: int) -> None:
        self.values[key] = int(value)
