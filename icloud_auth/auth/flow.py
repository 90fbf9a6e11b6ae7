"""Authentication flow state machine.

The flow walks a fixed sequence of states, strictly forward:

    INIT -> CREDENTIALS_COLLECTED -> BROWSER_LAUNCHED -> SIGN_IN_PAGE_REACHED
         -> IDENTIFIER_SUBMITTED -> SECRET_SUBMITTED -> TWO_FACTOR_CHECKED
         -> [TWO_FACTOR_SUBMITTED] -> TRUST_CONFIRMED -> RESULT_COLLECTED -> CLOSED

Retries only happen inside a step (the driver's polling). A failed step ends
the run, and the browser is closed on every path once a launch was attempted.
"""

import logging
from enum import Enum
from typing import Callable, List, Optional

from ..messages import Messages
from .driver import AuthFlowDriver
from .errors import AuthFlowError, EmptyCredential, EmptyTwoFactorCode
from .models import AuthResult, Credentials
from .prompter import Prompter


logger = logging.getLogger(__name__)


EMPTY_APPLE_ID_ERROR = "Apple ID must not be empty"
EMPTY_PASSWORD_ERROR = "Password must not be empty"


class FlowState(Enum):
    INIT = "init"
    CREDENTIALS_COLLECTED = "credentials collected"
    BROWSER_LAUNCHED = "browser launched"
    SIGN_IN_PAGE_REACHED = "sign-in page reached"
    IDENTIFIER_SUBMITTED = "apple id submitted"
    SECRET_SUBMITTED = "password submitted"
    TWO_FACTOR_CHECKED = "two-factor checked"
    TWO_FACTOR_SUBMITTED = "two-factor submitted"
    TRUST_CONFIRMED = "trust confirmed"
    RESULT_COLLECTED = "result collected"
    CLOSED = "closed"


class AuthFlow:
    """Runs one sign-in against an :class:`AuthFlowDriver`.

    Instances are single-use; start a new one to retry from the beginning.
    """

    def __init__(
        self,
        driver: AuthFlowDriver,
        prompter: Prompter,
        on_step: Optional[Callable[[str], None]] = None,
    ):
        """Initialize the flow.

        Args:
            driver: Browser-side implementation of each step
            prompter: Source of credentials and the two-factor code
            on_step: Receives an operator-facing message before each step
        """
        self.driver = driver
        self.prompter = prompter
        self.on_step = on_step
        self.state = FlowState.INIT
        self.history: List[FlowState] = [FlowState.INIT]

    def run(self) -> AuthResult:
        """Execute the flow from INIT to CLOSED.

        Returns:
            AuthResult: Trust token and full cookie header

        Raises:
            EmptyCredential: If the Apple ID or password is empty (no browser started)
            EmptyTwoFactorCode: If a 2FA challenge was answered with an empty code
            StepTimeout: If a driver step ran out of attempts
            RuntimeError: If the flow has already been run
        """
        if self.state != FlowState.INIT:
            raise RuntimeError("AuthFlow has already run; create a new one to retry")

        credentials = self.prompter.prompt_credentials()
        if not credentials.apple_id:
            raise EmptyCredential(EMPTY_APPLE_ID_ERROR)
        if not credentials.password:
            raise EmptyCredential(EMPTY_PASSWORD_ERROR)
        self._advance(FlowState.CREDENTIALS_COLLECTED)

        try:
            return self._drive(credentials)
        except AuthFlowError as e:
            logger.error(f"Authentication failed after '{self.state.value}': {e}")
            raise
        except Exception as e:
            logger.error(f"Authentication failed after '{self.state.value}' with exception: {e}", exc_info=True)
            raise
        finally:
            self._close()

    def _drive(self, credentials: Credentials) -> AuthResult:
        self._emit(Messages.LAUNCHING_BROWSER)
        self.driver.launch()
        self._advance(FlowState.BROWSER_LAUNCHED)

        self._emit(Messages.NAVIGATING_TO_ICLOUD)
        self.driver.navigate_to_sign_in()
        self._advance(FlowState.SIGN_IN_PAGE_REACHED)

        self._emit(Messages.ENTERING_APPLE_ID)
        self.driver.enter_apple_id(credentials.apple_id)
        self._advance(FlowState.IDENTIFIER_SUBMITTED)

        self._emit(Messages.ENTERING_PASSWORD)
        self.driver.enter_password(credentials.password)
        self._advance(FlowState.SECRET_SUBMITTED)

        self._emit(Messages.CHECKING_FOR_TWO_FACTOR)
        two_factor_required = self.driver.check_two_factor()
        self._advance(FlowState.TWO_FACTOR_CHECKED)

        if two_factor_required:
            self._emit(Messages.TWO_FACTOR_REQUIRED)
            code = self.prompter.prompt_two_factor_code()
            if not code:
                raise EmptyTwoFactorCode()

            self._emit(Messages.SUBMITTING_TWO_FACTOR)
            self.driver.submit_two_factor_code(code)
            self._advance(FlowState.TWO_FACTOR_SUBMITTED)
        else:
            logger.info("  No 2FA challenge detected, continuing")

        self._emit(Messages.WAITING_FOR_AUTH)
        result = self.driver.wait_for_result()
        self._advance(FlowState.TRUST_CONFIRMED)
        self._advance(FlowState.RESULT_COLLECTED)
        return result

    def _close(self) -> None:
        try:
            self.driver.close()
        except Exception as e:
            logger.warning(f"Error while closing browser (ignored): {e}")
        self._advance(FlowState.CLOSED)

    def _advance(self, state: FlowState) -> None:
        logger.debug(f"Auth flow: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def _emit(self, message: str) -> None:
        logger.info(message.strip())
        if self.on_step is not None:
            self.on_step(message)


def run_auth_flow(
    driver: AuthFlowDriver,
    prompter: Prompter,
    on_step: Optional[Callable[[str], None]] = None,
) -> AuthResult:
    """Run a fresh :class:`AuthFlow` and return its result."""
    return AuthFlow(driver, prompter, on_step).run()


def run_manual_flow(
    driver: AuthFlowDriver,
    on_step: Optional[Callable[[str], None]] = None,
) -> AuthResult:
    """Open the sign-in dialog and wait for the operator to log in by hand.

    The driver should be headed and configured with a trust-cookie budget
    long enough for a human to type credentials and a 2FA code.

    Args:
        driver: Browser driver (normally a headed PlaywrightBrowserDriver)
        on_step: Receives operator-facing messages

    Returns:
        AuthResult: Trust token and full cookie header
    """
    def emit(message: str) -> None:
        logger.info(message.strip())
        if on_step is not None:
            on_step(message)

    try:
        emit(Messages.LAUNCHING_VISIBLE_BROWSER)
        driver.launch()
        emit(Messages.NAVIGATING_TO_ICLOUD)
        driver.navigate_to_sign_in()
        emit(Messages.MANUAL_LOGIN)
        emit(Messages.WAITING_FOR_AUTH)
        return driver.wait_for_result()
    finally:
        try:
            driver.close()
        except Exception as e:
            logger.warning(f"Error while closing browser (ignored): {e}")
