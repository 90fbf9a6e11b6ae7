"""Cookie helpers for assembling the rclone trust token and cookie header."""

from typing import Any, Dict, Iterable, List, Optional

from .models import AuthResult


TRUST_COOKIE_NAME = "X-APPLE-WEBAUTH-HSA-TRUST"


def parse_cookie_header(header: str) -> List[str]:
    """Split a ``Cookie`` header into ``name=value`` entries.

    Args:
        header: Raw header value (e.g. ``"a=1; b=2"``)

    Returns:
        List of trimmed, non-empty entries
    """
    if not header:
        return []
    return [entry.strip() for entry in header.split(";") if entry.strip()]


def extract_trust_token(cookies: Iterable[str]) -> Optional[str]:
    """Return the trust cookie's value from ``name=value`` entries, or None."""
    prefix = f"{TRUST_COOKIE_NAME}="
    for entry in cookies:
        if entry.startswith(prefix):
            return entry[len(prefix):]
    return None


def format_cookies_array(cookies: Iterable[str]) -> str:
    return "; ".join(cookies)


def build_auth_result(browser_cookies: List[Dict[str, Any]]) -> Optional[AuthResult]:
    """Build an AuthResult from cookies reported by the browser context.

    The full cookie set is serialized because rclone needs the whole session,
    while the trust token is the trust cookie's value alone.

    Args:
        browser_cookies: Cookie dicts as returned by ``BrowserContext.cookies()``

    Returns:
        AuthResult, or None if the trust cookie is not present yet
    """
    entries = [f"{cookie['name']}={cookie['value']}" for cookie in browser_cookies]
    trust_token = extract_trust_token(entries)
    if not trust_token:
        return None
    return AuthResult(trust_token=trust_token, cookies=format_cookies_array(entries))
