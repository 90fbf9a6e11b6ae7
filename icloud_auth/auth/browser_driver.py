"""Playwright-driven iCloud sign-in."""

import re
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from playwright.sync_api import (
    sync_playwright,
    Browser,
    BrowserContext,
    ElementHandle,
    Error as PlaywrightError,
    Page,
    Playwright,
    Request,
    Route,
    TimeoutError as PlaywrightTimeoutError,
)

from .cookies import build_auth_result
from .diagnostics import DiagnosticCapture, Snapshot
from .driver import AuthFlowDriver
from .errors import (
    IdentifierFieldNotFound,
    SecretFieldNeverEnabled,
    SignInButtonNotFound,
    StepTimeout,
    TrustCookieTimeout,
)
from .frames import query_auth_target, resolve_auth_target
from .models import AuthResult
from .polling import PollPolicy, poll_until


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DriverTimings:
    """Per-step poll budgets and settle delays.

    Each step is tuned separately: field lookups resolve in well under a
    second, while the trust cookie can take tens of seconds to appear.
    """

    apple_id: PollPolicy = field(default_factory=lambda: PollPolicy(20, 500))
    password: PollPolicy = field(default_factory=lambda: PollPolicy(30, 500))
    two_factor: PollPolicy = field(default_factory=lambda: PollPolicy(20, 1000))
    two_factor_relocate: PollPolicy = field(default_factory=lambda: PollPolicy(5, 500))
    trust_cookie: PollPolicy = field(default_factory=lambda: PollPolicy(60, 2000))

    sign_in_button_timeout_ms: int = 15000
    navigation_timeout_ms: int = 30000
    network_idle_timeout_ms: int = 15000

    auth_frame_settle_ms: int = 6000
    post_apple_id_settle_ms: int = 3000
    post_password_settle_ms: int = 5000
    pre_two_factor_enter_ms: int = 1000
    post_two_factor_settle_ms: int = 3000
    post_trust_settle_ms: int = 2000

    type_delay_ms: int = 50
    two_factor_type_delay_ms: int = 200


class PlaywrightBrowserDriver(AuthFlowDriver):
    """Drives icloud.com in Chromium through Playwright's sync API."""

    ICLOUD_URL = "https://www.icloud.com"
    COOKIE_URLS = ["https://www.icloud.com", "https://idmsa.apple.com", "https://apple.com"]

    # Sign-in request whose JSON body gets extended_login forced on
    ACCOUNT_LOGIN_PATTERN = re.compile(r"/accountLogin")

    # Selectors for the iCloud landing page and the Apple ID widget
    SIGN_IN_BUTTON = ".sign-in-button"
    APPLE_ID_FIELD = "#account_name_text_field"
    PASSWORD_FIELD = "#password_text_field"
    # Apple renders one of several digit-box variants for the 2FA code
    TWO_FACTOR_FIELD = (
        "input[name='code'], input[data-mode='number'], input.digit-input, "
        "input[inputmode='numeric'], input[autocomplete='one-time-code'], "
        "input[type='number'], input[type='tel']"
    )
    TRUST_BUTTON = "button#trust-browser, button[name='trust'], button[data-mode='trust']"
    TRUST_BUTTON_TEXT = "Trust"

    USER_AGENT = (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    LAUNCH_ARGS = [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-blink-features=AutomationControlled",
    ]

    def __init__(
        self,
        headless: bool = True,
        timings: Optional[DriverTimings] = None,
        diagnostics: Optional[DiagnosticCapture] = None,
    ):
        """Initialize the driver.

        Args:
            headless: Run Chromium without a window (default: True)
            timings: Poll budgets and settle delays (default: DriverTimings())
            diagnostics: Screenshot writer (default: failures only, in /tmp)
        """
        self.headless = headless
        self.timings = timings or DriverTimings()
        self.diagnostics = diagnostics or DiagnosticCapture()

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._route_installed = False
        self._cookie_count = 0

    def launch(self) -> None:
        logger.debug(f"Launching Chromium ({'headless' if self.headless else 'headed'})...")
        self._playwright = sync_playwright().start()
        self._browser = self._playwright.chromium.launch(
            headless=self.headless,
            args=self.LAUNCH_ARGS + [f"--user-agent={self.USER_AGENT}"],
        )
        self._context = self._browser.new_context(user_agent=self.USER_AGENT)
        self._page = self._context.new_page()
        self._install_extended_login_route()

    def navigate_to_sign_in(self) -> None:
        page = self._require_page()
        logger.info(f"  Navigating to {self.ICLOUD_URL}")
        page.goto(self.ICLOUD_URL, wait_until="domcontentloaded", timeout=self.timings.navigation_timeout_ms)
        try:
            page.wait_for_load_state("networkidle", timeout=self.timings.network_idle_timeout_ms)
        except PlaywrightTimeoutError:
            logger.warning("  Network idle timeout - continuing anyway")

        try:
            sign_in_button = page.wait_for_selector(
                self.SIGN_IN_BUTTON, timeout=self.timings.sign_in_button_timeout_ms
            )
        except PlaywrightTimeoutError:
            sign_in_button = None
        if sign_in_button is None:
            snapshot = self.diagnostics.failure(page, Snapshot.NO_SIGN_IN_BUTTON)
            raise SignInButtonNotFound(
                "sign-in button", "Could not find sign-in button on iCloud page", snapshot
            )

        sign_in_button.click()
        logger.info("  Clicked sign-in button, waiting for Apple auth frame...")

        # The auth iframe is attached some time after the click
        self._sleep(self.timings.auth_frame_settle_ms)
        logger.debug(f"  Frames: {' | '.join(frame.url for frame in page.frames)}")
        self.diagnostics.checkpoint(page, Snapshot.AFTER_SIGN_IN_CLICK)

    def enter_apple_id(self, apple_id: str) -> None:
        page = self._require_page()
        policy = self.timings.apple_id

        def fill(field_handle: ElementHandle) -> None:
            field_handle.click(click_count=3)
            field_handle.type(apple_id, delay=self.timings.type_delay_ms)
            # Apple binds submission to Enter rather than a separate button
            field_handle.press("Enter")
            logger.info("  Apple ID filled, pressed Enter")

        poll_until(
            lambda: query_auth_target(page, self.APPLE_ID_FIELD),
            policy.max_attempts,
            policy.interval_ms,
            fill,
            step="apple id",
            sleep=self._sleep,
            timeout_error=IdentifierFieldNotFound,
            message="Could not find Apple ID input field",
            on_timeout=lambda: self._failure_snapshot(Snapshot.NO_APPLE_ID_INPUT),
            retry_on=(PlaywrightError,),
        )

        self._sleep(self.timings.post_apple_id_settle_ms)
        self.diagnostics.checkpoint(page, Snapshot.AFTER_APPLE_ID)

    def enter_password(self, password: str) -> None:
        page = self._require_page()
        policy = self.timings.password

        def fill(field_handle: ElementHandle) -> None:
            field_handle.click(click_count=3)
            field_handle.type(password, delay=self.timings.type_delay_ms)
            field_handle.press("Enter")
            logger.info("  Password filled, pressed Enter")

        poll_until(
            lambda: self._find_enabled_password_field(page),
            policy.max_attempts,
            policy.interval_ms,
            fill,
            step="password",
            sleep=self._sleep,
            timeout_error=SecretFieldNeverEnabled,
            message="Password field never became accessible",
            on_timeout=lambda: self._failure_snapshot(Snapshot.NO_PASSWORD_INPUT),
            retry_on=(PlaywrightError,),
        )

        self._sleep(self.timings.post_password_settle_ms)
        self.diagnostics.checkpoint(page, Snapshot.AFTER_PASSWORD)

    def check_two_factor(self) -> bool:
        page = self._require_page()
        policy = self.timings.two_factor

        try:
            poll_until(
                lambda: query_auth_target(page, self.TWO_FACTOR_FIELD),
                policy.max_attempts,
                policy.interval_ms,
                lambda _field: True,
                step="two-factor check",
                sleep=self._sleep,
                on_timeout=lambda: self.diagnostics.checkpoint(page, Snapshot.TWO_FACTOR_NOT_FOUND),
            )
        except StepTimeout:
            logger.warning(
                f"  2FA input not found after {policy.budget_ms / 1000:.0f}s - proceeding without it"
            )
            return False

        self.diagnostics.checkpoint(page, Snapshot.TWO_FACTOR_SCREEN)
        return True

    def submit_two_factor_code(self, code: str) -> None:
        page = self._require_page()
        policy = self.timings.two_factor_relocate

        def enter_code(field_handle: ElementHandle) -> None:
            field_handle.click()
            # Typing into the first box; Apple moves focus across the digit boxes
            field_handle.type(code, delay=self.timings.two_factor_type_delay_ms)
            self._sleep(self.timings.pre_two_factor_enter_ms)
            field_handle.press("Enter")

        # The operator prompt can take arbitrarily long, so the input found by
        # check_two_factor may be stale by now: look it up again.
        poll_until(
            lambda: query_auth_target(page, self.TWO_FACTOR_FIELD),
            policy.max_attempts,
            policy.interval_ms,
            enter_code,
            step="two-factor submit",
            sleep=self._sleep,
            message="Two-factor input disappeared before the code could be entered",
            on_timeout=lambda: self._failure_snapshot(Snapshot.TWO_FACTOR_NOT_FOUND),
            retry_on=(PlaywrightError,),
        )
        logger.info("  2FA submitted, waiting for Apple to verify...")

        self._sleep(self.timings.post_two_factor_settle_ms)
        self.diagnostics.checkpoint(page, Snapshot.AFTER_TWO_FACTOR)

        self._click_trust_button_if_present(page)
        self._sleep(self.timings.post_trust_settle_ms)

    def wait_for_result(self) -> AuthResult:
        self._require_page()
        policy = self.timings.trust_cookie

        def report_progress(attempt: int) -> None:
            if attempt % 5 == 0:
                elapsed = (attempt + 1) * policy.interval_ms / 1000
                logger.info(f"  Waiting... ({elapsed:.0f}s elapsed, {self._cookie_count} cookies so far)")

        result = poll_until(
            self._collect_auth_result,
            policy.max_attempts,
            policy.interval_ms,
            lambda auth_result: auth_result,
            step="trust cookie",
            sleep=self._sleep,
            timeout_error=TrustCookieTimeout,
            message="Timed out waiting for trust cookie",
            on_timeout=lambda: self._failure_snapshot(Snapshot.TRUST_COOKIE_TIMEOUT),
            on_miss=report_progress,
            delay_first=True,
        )
        logger.info(f"  ✓ Trust cookie found ({self._cookie_count} cookies in session)")
        return result

    def close(self) -> None:
        browser, playwright = self._browser, self._playwright
        self._browser = None
        self._playwright = None
        self._context = None
        self._page = None
        self._route_installed = False

        try:
            if browser is not None:
                logger.debug("Closing browser...")
                browser.close()
        finally:
            if playwright is not None:
                playwright.stop()

    def _install_extended_login_route(self) -> None:
        """Route the accountLogin call through the extended_login rewrite, once."""
        if self._route_installed:
            return
        self._context.route(self.ACCOUNT_LOGIN_PATTERN, self._force_extended_login)
        self._route_installed = True
        logger.debug("Installed accountLogin interception (extended_login=true)")

    @staticmethod
    def _force_extended_login(route: Route, request: Request) -> None:
        """Rewrite the sign-in request body to ask for a long-lived session.

        Bodies that are empty or not a JSON object are sent through unchanged.
        Setting the flag again on a retried request yields the same body.
        """
        raw_body = request.post_data
        if not raw_body:
            route.continue_()
            return

        try:
            payload = json.loads(raw_body)
        except ValueError:
            logger.debug("accountLogin body is not JSON, passing through")
            route.continue_()
            return

        if not isinstance(payload, dict):
            route.continue_()
            return

        payload["extended_login"] = True
        logger.info("  → Intercepted accountLogin, setting extended_login=true")
        route.continue_(post_data=json.dumps(payload))

    def _find_enabled_password_field(self, page: Page) -> Optional[ElementHandle]:
        """Return the password field only once Apple has enabled it.

        The field is in the DOM from the start with ``tabindex="-1"``; Apple
        flips it after validating the Apple ID server-side.
        """
        field_handle = query_auth_target(page, self.PASSWORD_FIELD)
        if field_handle is None:
            return None
        try:
            tab_index = field_handle.get_attribute("tabindex")
        except PlaywrightError as e:
            logger.debug(f"  Password field detached, will look again: {e}")
            return None
        logger.debug(f"  Password field tabindex: {tab_index}")
        if tab_index == "-1":
            return None
        return field_handle

    def _click_trust_button_if_present(self, page: Page) -> bool:
        """Confirm "Trust this browser?" if Apple asks. Absence is not an error.

        The auth frame often navigates right after the 2FA code is accepted,
        so a detached frame is treated like a missing button.
        """
        trust_button = query_auth_target(page, self.TRUST_BUTTON)
        if trust_button is not None:
            logger.info("  Clicking Trust button...")
            try:
                trust_button.click()
                return True
            except PlaywrightError as e:
                logger.info(f"  Trust button went away before the click: {e}")

        try:
            clicked = resolve_auth_target(page).evaluate(
                """(label) => {
                    const buttons = Array.from(document.querySelectorAll("button"));
                    const trust = buttons.find((b) => (b.textContent || "").trim() === label);
                    if (trust) {
                        trust.click();
                        return true;
                    }
                    return false;
                }""",
                self.TRUST_BUTTON_TEXT,
            )
        except PlaywrightError as e:
            logger.info(f"  Trust button lookup failed, auth frame changed: {e}")
            return False

        if clicked:
            logger.info("  Clicked Trust button (matched by text)")
        else:
            logger.info("  Trust button not found - may proceed anyway")
        return bool(clicked)

    def _collect_auth_result(self) -> Optional[AuthResult]:
        cookies: List[Dict[str, Any]] = self._context.cookies(self.COOKIE_URLS)
        self._cookie_count = len(cookies)
        return build_auth_result(cookies)

    def _failure_snapshot(self, name: str) -> Optional[str]:
        return self.diagnostics.failure(self._page, name)

    def _sleep(self, ms: int) -> None:
        # wait_for_timeout keeps Playwright dispatching route handlers meanwhile
        self._require_page().wait_for_timeout(ms)

    def _require_page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser not launched. Call launch() first.")
        return self._page
