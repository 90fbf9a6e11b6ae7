"""Persisted operator preferences (currently the default remote)."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union


logger = logging.getLogger(__name__)


DEFAULT_PREFERENCES_PATH = Path("~/.config/rclone-icloud-auth/preferences.json").expanduser()


class Preferences:
    """Small JSON-backed key/value store."""

    DEFAULT_REMOTE_KEY = "default_remote"

    def __init__(self, path: Union[str, Path] = DEFAULT_PREFERENCES_PATH):
        self.path = Path(path)

    def load(self) -> Dict[str, Any]:
        """Load preferences; a missing or unreadable file yields an empty dict."""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable preferences file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        logger.debug(f"Saved preferences to {self.path}")

    def get_default_remote(self) -> Optional[str]:
        value = self.load().get(self.DEFAULT_REMOTE_KEY)
        return value if isinstance(value, str) and value else None

    def set_default_remote(self, remote_name: str) -> None:
        data = self.load()
        data[self.DEFAULT_REMOTE_KEY] = remote_name
        self.save(data)
