"""Capability set the authentication flow drives."""

from abc import ABC, abstractmethod

from .models import AuthResult


class AuthFlowDriver(ABC):
    """Browser-side operations sequenced by :class:`~icloud_auth.auth.flow.AuthFlow`.

    The flow only depends on this interface, so tests can substitute a fake
    and alternative browser backends can be dropped in.
    """

    @abstractmethod
    def launch(self) -> None:
        """Start a browser session and install request interception."""
        pass

    @abstractmethod
    def navigate_to_sign_in(self) -> None:
        """Open iCloud and click through to the sign-in dialog."""
        pass

    @abstractmethod
    def enter_apple_id(self, apple_id: str) -> None:
        pass

    @abstractmethod
    def enter_password(self, password: str) -> None:
        pass

    @abstractmethod
    def check_two_factor(self) -> bool:
        """Return True if a two-factor code input is showing."""
        pass

    @abstractmethod
    def submit_two_factor_code(self, code: str) -> None:
        """Enter the code and confirm the "trust this browser" prompt if shown."""
        pass

    @abstractmethod
    def wait_for_result(self) -> AuthResult:
        """Block until the trust cookie is set and return the harvested session."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the browser session. Must be safe to call more than once."""
        pass
