import pytest

from icloud_auth.auth.errors import StepTimeout, TrustCookieTimeout
from icloud_auth.auth.polling import PollPolicy, poll_until


class Locator:
    """Returns None until the given attempt, then the target."""

    def __init__(self, found_on=None, target="target"):
        self.found_on = found_on
        self.target = target
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.found_on is not None and self.calls >= self.found_on:
            return self.target
        return None


def test_found_target_is_passed_to_on_found():
    sleeps = []
    locate = Locator(found_on=3)

    result = poll_until(locate, 5, 500, lambda target: target.upper(), step="test", sleep=sleeps.append)

    assert result == "TARGET"
    assert locate.calls == 3
    assert sleeps == [500, 500]


def test_found_on_first_attempt_does_not_sleep():
    sleeps = []

    poll_until(Locator(found_on=1), 5, 500, lambda target: None, step="test", sleep=sleeps.append)

    assert sleeps == []


def test_exhausted_budget_raises_after_exact_attempts():
    sleeps = []
    locate = Locator()

    with pytest.raises(StepTimeout) as exc_info:
        poll_until(locate, 4, 250, lambda target: target, step="apple id", sleep=sleeps.append)

    assert locate.calls == 4
    # Fixed spacing, no sleep after the final attempt
    assert sleeps == [250, 250, 250]
    assert exc_info.value.step == "apple id"


def test_timeout_uses_error_class_message_and_snapshot():
    with pytest.raises(TrustCookieTimeout) as exc_info:
        poll_until(
            Locator(),
            2,
            10,
            lambda target: target,
            step="trust cookie",
            sleep=lambda ms: None,
            timeout_error=TrustCookieTimeout,
            message="Timed out waiting for trust cookie",
            on_timeout=lambda: "/tmp/icloud-debug-09-timeout.png",
        )

    error = exc_info.value
    assert error.snapshot_path == "/tmp/icloud-debug-09-timeout.png"
    assert str(error) == "Timed out waiting for trust cookie (see /tmp/icloud-debug-09-timeout.png)"


def test_on_timeout_not_called_on_success():
    calls = []

    poll_until(
        Locator(found_on=2), 3, 10, lambda target: target,
        step="test", sleep=lambda ms: None, on_timeout=lambda: calls.append("timeout"),
    )

    assert calls == []


def test_on_miss_reports_each_missed_attempt():
    misses = []

    poll_until(
        Locator(found_on=3), 5, 10, lambda target: target,
        step="test", sleep=lambda ms: None, on_miss=misses.append,
    )

    assert misses == [0, 1]


def test_delay_first_sleeps_before_every_attempt():
    events = []
    locate = Locator(found_on=2)

    def recording_locate():
        events.append("check")
        return locate()

    poll_until(
        recording_locate, 5, 2000, lambda target: target,
        step="test", sleep=lambda ms: events.append(ms), delay_first=True,
    )

    assert events == [2000, "check", 2000, "check"]


@pytest.mark.parametrize("max_attempts", [0, -1])
def test_max_attempts_must_be_positive(max_attempts):
    with pytest.raises(ValueError):
        poll_until(Locator(), max_attempts, 10, lambda target: target, step="test", sleep=lambda ms: None)


def test_poll_policy_budget():
    assert PollPolicy(60, 2000).budget_ms == 120000


class StaleTarget(Exception):
    pass


def test_listed_error_from_on_found_counts_as_a_miss():
    sleeps = []
    misses = []
    uses = []

    def use(target):
        uses.append(target)
        if len(uses) == 1:
            raise StaleTarget("detached")
        return "done"

    result = poll_until(
        Locator(found_on=1), 3, 500, use,
        step="test", sleep=sleeps.append, on_miss=misses.append, retry_on=(StaleTarget,),
    )

    assert result == "done"
    assert len(uses) == 2
    assert misses == [0]
    assert sleeps == [500]


def test_target_stale_on_every_attempt_raises_step_timeout():
    def use(target):
        raise StaleTarget("detached")

    with pytest.raises(StepTimeout) as exc_info:
        poll_until(
            Locator(found_on=1), 3, 10, use,
            step="password", sleep=lambda ms: None, retry_on=(StaleTarget,),
            on_timeout=lambda: "/tmp/icloud-debug-error-no-password-input.png",
        )

    assert exc_info.value.step == "password"
    assert exc_info.value.snapshot_path == "/tmp/icloud-debug-error-no-password-input.png"


def test_unlisted_error_from_on_found_propagates():
    def use(target):
        raise StaleTarget("detached")

    with pytest.raises(StaleTarget):
        poll_until(Locator(found_on=1), 3, 10, use, step="test", sleep=lambda ms: None)
