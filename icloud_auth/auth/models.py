"""Value types passed between the prompter, the flow and its callers."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Credentials:
    """Apple ID credentials, held in memory for a single flow run."""

    apple_id: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(apple_id={self.apple_id!r}, password='***')"


@dataclass(frozen=True)
class AuthResult:
    """Output of a successful flow.

    Attributes:
        trust_token: Value of the X-APPLE-WEBAUTH-HSA-TRUST cookie
        cookies: Every session cookie as ``name=value`` pairs joined by ``"; "``
    """

    trust_token: str
    cookies: str
