"""Reading and writing rclone.conf."""

import os
import logging
from pathlib import Path
from typing import Optional, Union


logger = logging.getLogger(__name__)


DEFAULT_RCLONE_CONFIG_PATH = Path("~/.config/rclone/rclone.conf").expanduser()
RCLONE_CONFIG_FILE_MODE = 0o600


def read_rclone_config_content(path: Union[str, Path] = DEFAULT_RCLONE_CONFIG_PATH) -> Optional[str]:
    """Return the config text, or None if the file does not exist."""
    path = Path(path)
    if not path.exists():
        logger.info(f"No rclone config found at {path}")
        return None
    return path.read_text(encoding="utf-8")


def write_rclone_config_content(content: str, path: Union[str, Path] = DEFAULT_RCLONE_CONFIG_PATH) -> None:
    """Write the config text, readable by the owner only.

    The file holds session credentials, so it is (re)created with mode 0600.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, RCLONE_CONFIG_FILE_MODE)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(content)
    os.chmod(path, RCLONE_CONFIG_FILE_MODE)
    logger.info(f"Wrote rclone config to {path}")
