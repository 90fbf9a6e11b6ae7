"""In-memory stand-ins for the browser, the driver and the prompter."""

from typing import Any, Dict, List, Optional

from icloud_auth.auth.driver import AuthFlowDriver
from icloud_auth.auth.models import AuthResult, Credentials
from icloud_auth.auth.prompter import Prompter


class FakeElement:
    def __init__(self, name: str = "element", attributes: Optional[Dict[str, str]] = None):
        self.name = name
        self.attributes = attributes or {}
        self.actions: List[tuple] = []
        # Raised by click(), one per call, e.g. once the element has detached
        self.click_errors: List[Exception] = []

    def click(self, click_count: int = 1):
        if self.click_errors:
            raise self.click_errors.pop(0)
        self.actions.append(("click", click_count))

    def type(self, text: str, delay: int = 0):
        self.actions.append(("type", text, delay))

    def press(self, key: str):
        self.actions.append(("press", key))

    def get_attribute(self, name: str):
        return self.attributes.get(name)


class FakeDocument:
    """Answers query_selector from a selector -> responses table.

    A list of responses is consumed one per query, the last one repeating.
    """

    def __init__(self, elements: Optional[Dict[str, Any]] = None, evaluate_result: Any = False):
        self.elements = elements or {}
        self.evaluate_result = evaluate_result
        self.queries: List[str] = []
        self.evaluations: List[tuple] = []
        self.error: Optional[Exception] = None
        self.selector_errors: Dict[str, Exception] = {}
        self.evaluate_error: Optional[Exception] = None

    def query_selector(self, selector: str):
        self.queries.append(selector)
        if self.error is not None:
            raise self.error
        if selector in self.selector_errors:
            raise self.selector_errors[selector]
        response = self.elements.get(selector)
        if isinstance(response, list):
            return response.pop(0) if len(response) > 1 else response[0]
        return response

    def evaluate(self, script: str, arg: Any = None):
        self.evaluations.append((script, arg))
        if self.evaluate_error is not None:
            raise self.evaluate_error
        return self.evaluate_result


class FakeFrame(FakeDocument):
    def __init__(self, url: str, elements: Optional[Dict[str, Any]] = None, evaluate_result: Any = False):
        super().__init__(elements, evaluate_result)
        self.url = url


class FakePage(FakeDocument):
    """Page whose frame list can change from one lookup to the next."""

    def __init__(self, frames: Any = None, elements: Optional[Dict[str, Any]] = None, evaluate_result: Any = False):
        super().__init__(elements, evaluate_result)
        self.main_frame = FakeFrame("https://www.icloud.com/")
        self._frames = frames if frames is not None else []
        self.sleeps: List[int] = []
        self.screenshots: List[str] = []
        self.screenshot_error: Optional[Exception] = None
        self.visited: List[str] = []
        self.sign_in_button: Optional[FakeElement] = None
        self.wait_for_selector_error: Optional[Exception] = None

    @property
    def frames(self):
        frames = self._frames
        # A list of lists is a sequence of frame snapshots
        if frames and isinstance(frames[0], list):
            frames = frames.pop(0) if len(frames) > 1 else frames[0]
        return [self.main_frame] + list(frames)

    def wait_for_timeout(self, ms: int):
        self.sleeps.append(ms)

    def screenshot(self, path: str, full_page: bool = False):
        if self.screenshot_error is not None:
            raise self.screenshot_error
        self.screenshots.append(path)

    def goto(self, url: str, **kwargs):
        self.visited.append(url)

    def wait_for_load_state(self, state: str, **kwargs):
        pass

    def wait_for_selector(self, selector: str, **kwargs):
        if self.wait_for_selector_error is not None:
            raise self.wait_for_selector_error
        return self.sign_in_button


class FakeContext:
    def __init__(self, cookie_jars: Optional[List[List[Dict[str, Any]]]] = None, page: Optional[FakePage] = None):
        self.cookie_jars = cookie_jars or [[]]
        self.cookie_requests: List[List[str]] = []
        self.routes: List[tuple] = []
        self.page = page or FakePage()

    def cookies(self, urls: List[str]):
        self.cookie_requests.append(list(urls))
        return self.cookie_jars.pop(0) if len(self.cookie_jars) > 1 else self.cookie_jars[0]

    def route(self, pattern, handler):
        self.routes.append((pattern, handler))

    def new_page(self):
        return self.page


class FakeRequest:
    def __init__(self, post_data: Optional[str]):
        self.post_data = post_data


class FakeRoute:
    def __init__(self):
        self.continued: List[Dict[str, Any]] = []

    def continue_(self, **kwargs):
        self.continued.append(kwargs)


def cookie(name: str, value: str) -> Dict[str, Any]:
    return {"name": name, "value": value, "domain": ".icloud.com", "path": "/"}


class FakeDriver(AuthFlowDriver):
    """Records every call; individual steps can be made to fail."""

    def __init__(
        self,
        two_factor: bool = False,
        result: Optional[AuthResult] = None,
        fail_on: Optional[str] = None,
        error: Optional[Exception] = None,
        close_error: Optional[Exception] = None,
    ):
        self.two_factor = two_factor
        self.result = result or AuthResult(trust_token="trust-123", cookies="a=1; X-APPLE-WEBAUTH-HSA-TRUST=trust-123")
        self.fail_on = fail_on
        self.error = error or RuntimeError(f"{fail_on} failed")
        self.close_error = close_error
        self.calls: List[tuple] = []

    def _record(self, name: str, *args):
        self.calls.append((name,) + args)
        if name == self.fail_on:
            raise self.error

    @property
    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]

    def launch(self):
        self._record("launch")

    def navigate_to_sign_in(self):
        self._record("navigate_to_sign_in")

    def enter_apple_id(self, apple_id):
        self._record("enter_apple_id", apple_id)

    def enter_password(self, password):
        self._record("enter_password", password)

    def check_two_factor(self):
        self._record("check_two_factor")
        return self.two_factor

    def submit_two_factor_code(self, code):
        self._record("submit_two_factor_code", code)

    def wait_for_result(self):
        self._record("wait_for_result")
        return self.result

    def close(self):
        self.calls.append(("close",))
        if self.close_error is not None:
            raise self.close_error


class FakePrompter(Prompter):
    def __init__(self, apple_id: str = "user@example.com", password: str = "hunter2", code: str = "000000"):
        self.apple_id = apple_id
        self.password = password
        self.code = code
        self.credential_prompts = 0
        self.code_prompts = 0

    def prompt_credentials(self):
        self.credential_prompts += 1
        return Credentials(apple_id=self.apple_id, password=self.password)

    def prompt_two_factor_code(self):
        self.code_prompts += 1
        return self.code
