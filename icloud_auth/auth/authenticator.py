"""Authenticator used by the CLI: wires a driver and a prompter into the flow."""

import logging
from typing import Callable, Optional

from .driver import AuthFlowDriver
from .flow import run_auth_flow, run_manual_flow
from .models import AuthResult
from .prompter import Prompter, close_prompt_channel


logger = logging.getLogger(__name__)


class ICloudAuthenticator:
    """Harvests the iCloud trust token and session cookies."""

    def __init__(
        self,
        driver: AuthFlowDriver,
        prompter: Optional[Prompter] = None,
        manual: bool = False,
        on_step: Optional[Callable[[str], None]] = print,
    ):
        """Initialize authenticator.

        Args:
            driver: Browser driver that performs each step
            prompter: Credential and 2FA code source (required unless manual)
            manual: Let the operator log in by hand in a visible browser
            on_step: Receives operator-facing progress messages (default: print)
        """
        if not manual and prompter is None:
            raise ValueError("A prompter is required for automated login")
        self.driver = driver
        self.prompter = prompter
        self.manual = manual
        self.on_step = on_step

    def authenticate(self) -> AuthResult:
        """Run the login flow once.

        Returns:
            AuthResult: Trust token and full cookie header

        Raises:
            AuthFlowError: If any step of the flow fails
        """
        logger.info(f"Starting {'manual' if self.manual else 'automated'} iCloud login")
        try:
            if self.manual:
                result = run_manual_flow(self.driver, self.on_step)
            else:
                result = run_auth_flow(self.driver, self.prompter, self.on_step)
        finally:
            close_prompt_channel()

        logger.info("✓ Authentication completed successfully")
        return result
