"""Exceptions raised by the iCloud authentication flow."""

from typing import Optional


class AuthFlowError(Exception):
    """Base class for authentication flow failures.

    Attributes:
        step: Name of the step that failed
    """

    def __init__(self, message: str, step: str = ""):
        super().__init__(message)
        self.step = step


class EmptyCredential(AuthFlowError):
    """Apple ID or password was empty after prompting."""

    def __init__(self, message: str):
        super().__init__(message, step="credentials")


class EmptyTwoFactorCode(AuthFlowError):
    """The operator supplied an empty two-factor code."""

    def __init__(self, message: str = "Two-factor code must not be empty"):
        super().__init__(message, step="two-factor code")


class StepTimeout(AuthFlowError):
    """A polled step exhausted its attempt budget.

    Attributes:
        step: Name of the step that timed out
        snapshot_path: Screenshot written at the time of failure, if any
    """

    def __init__(self, step: str, message: Optional[str] = None, snapshot_path: Optional[str] = None):
        self.snapshot_path = snapshot_path
        text = message or f"Timed out during step '{step}'"
        if snapshot_path:
            text = f"{text} (see {snapshot_path})"
        super().__init__(text, step=step)


class SignInButtonNotFound(StepTimeout):
    pass


class IdentifierFieldNotFound(StepTimeout):
    pass


class SecretFieldNeverEnabled(StepTimeout):
    pass


class TrustCookieTimeout(StepTimeout):
    pass
