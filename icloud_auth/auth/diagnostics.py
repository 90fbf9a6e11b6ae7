"""Best-effort page screenshots written at checkpoints and on failures."""

import logging
from pathlib import Path
from typing import Optional, Union

from playwright.sync_api import Page


logger = logging.getLogger(__name__)


class Snapshot:
    """Well-known screenshot file names, one per checkpoint."""
    AFTER_SIGN_IN_CLICK = "icloud-debug-01-after-signin-click.png"
    NO_APPLE_ID_INPUT = "icloud-debug-02-no-appleid-input.png"
    AFTER_APPLE_ID = "icloud-debug-03-after-appleid.png"
    NO_PASSWORD_INPUT = "icloud-debug-04-no-password-input.png"
    AFTER_PASSWORD = "icloud-debug-05-after-password.png"
    NO_SIGN_IN_BUTTON = "icloud-debug-06-no-signin-button.png"
    TWO_FACTOR_SCREEN = "icloud-debug-07-2fa-screen.png"
    TWO_FACTOR_NOT_FOUND = "icloud-debug-07-2fa-not-found.png"
    AFTER_TWO_FACTOR = "icloud-debug-08-after-2fa.png"
    TRUST_COOKIE_TIMEOUT = "icloud-debug-09-timeout.png"


class DiagnosticCapture:
    """Writes page screenshots for post-mortem debugging.

    Checkpoint screenshots are only taken in debug mode; failure screenshots
    are always taken. A failed write is logged and never raised, so it cannot
    mask the error being diagnosed.
    """

    def __init__(self, enabled: bool = False, directory: Union[str, Path] = "/tmp"):
        """Initialize diagnostic capture.

        Args:
            enabled: Take checkpoint screenshots (debug mode)
            directory: Directory screenshots are written to (default: /tmp)
        """
        self.enabled = enabled
        self.directory = Path(directory)

    def path_for(self, name: str) -> Path:
        return self.directory / name

    def checkpoint(self, page: Optional[Page], name: str) -> Optional[str]:
        if not self.enabled:
            return None
        path = self._capture(page, name)
        if path:
            logger.info(f"  [debug] screenshot: {path}")
        return path

    def failure(self, page: Optional[Page], name: str) -> Optional[str]:
        return self._capture(page, name)

    def _capture(self, page: Optional[Page], name: str) -> Optional[str]:
        if page is None:
            return None
        path = self.path_for(name)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            page.screenshot(path=str(path), full_page=True)
            return str(path)
        except Exception as e:
            logger.warning(f"  Could not write screenshot {path}: {e}")
            return None
