"""Locate the document hosting Apple's sign-in UI.

Apple renders the login form inside an ``idmsa.apple.com`` iframe most of the
time, but occasionally inline. The frame can be swapped or detached between
steps, so nothing here caches a reference: every lookup walks ``page.frames``
again.
"""

import logging
from typing import Optional, Union

from playwright.sync_api import ElementHandle, Error as PlaywrightError, Frame, Page


logger = logging.getLogger(__name__)


AUTH_FRAME_URL_FRAGMENTS = ("idmsa.apple.com", "appleid")


def locate_auth_frame(page: Page) -> Optional[Frame]:
    """Return the first frame whose URL contains a known Apple auth fragment.

    Args:
        page: Playwright page object

    Returns:
        Matching frame, or None when no frame matches
    """
    for frame in page.frames:
        frame_url = frame.url
        if any(fragment in frame_url for fragment in AUTH_FRAME_URL_FRAGMENTS):
            return frame
    return None


def resolve_auth_target(page: Page) -> Union[Frame, Page]:
    """Return the auth frame if there is one, else the top-level page."""
    return locate_auth_frame(page) or page


def query_auth_target(page: Page, selector: str) -> Optional[ElementHandle]:
    """Resolve the auth document and query it for ``selector``.

    A frame that detaches between enumeration and the query raises a
    Playwright error; that is reported as "not found yet" so the caller's
    poll loop re-resolves on its next attempt.

    Args:
        page: Playwright page object
        selector: CSS selector to query

    Returns:
        Element handle, or None if absent or the frame went away
    """
    target = resolve_auth_target(page)
    try:
        return target.query_selector(selector)
    except PlaywrightError as e:
        logger.debug(f"Auth document query for '{selector}' failed, will re-resolve: {e}")
        return None
