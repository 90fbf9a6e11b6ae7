"""Fixed-interval polling used by every interactive step of the flow."""

import time
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Type, TypeVar

from .errors import StepTimeout


logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class PollPolicy:
    """Attempt budget and fixed spacing for one step."""

    max_attempts: int
    interval_ms: int

    @property
    def budget_ms(self) -> int:
        return self.max_attempts * self.interval_ms


def _sleep_ms(ms: int) -> None:
    time.sleep(ms / 1000)


def poll_until(
    locate: Callable[[], Optional[T]],
    max_attempts: int,
    interval_ms: int,
    on_found: Callable[[T], R],
    *,
    step: str,
    sleep: Callable[[int], None] = _sleep_ms,
    timeout_error: Type[StepTimeout] = StepTimeout,
    message: Optional[str] = None,
    on_timeout: Optional[Callable[[], Optional[str]]] = None,
    on_miss: Optional[Callable[[int], None]] = None,
    delay_first: bool = False,
    retry_on: Tuple[Type[BaseException], ...] = (),
) -> R:
    """Poll ``locate`` until it yields a target, then hand it to ``on_found``.

    Attempts are spaced by a fixed interval. Apple's UI transitions are
    push-driven, so backing off would only delay success.

    Args:
        locate: Returns the target, or None when it is not there yet
        max_attempts: Number of ``locate`` calls before giving up
        interval_ms: Pause between attempts in milliseconds
        on_found: Called with the first target found; its result is returned
        step: Step name used in logs and in the raised error
        sleep: Sleep function taking milliseconds
        timeout_error: StepTimeout subclass raised when the budget runs out
        message: Error message for the raised error
        on_timeout: Called once the budget runs out; returns a snapshot path
        on_miss: Called with the attempt index after each miss
        delay_first: Sleep before each attempt instead of after each miss
        retry_on: Exceptions from ``on_found`` that count as a miss (the
            target went stale between lookup and use)

    Returns:
        Whatever ``on_found`` returns

    Raises:
        StepTimeout: (or ``timeout_error``) if no attempt found a target
        ValueError: If ``max_attempts`` is less than 1
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    for attempt in range(max_attempts):
        if delay_first:
            sleep(interval_ms)

        target = locate()
        if target is not None:
            logger.debug(f"  [{step}] found on attempt {attempt + 1}/{max_attempts}")
            try:
                return on_found(target)
            except retry_on as e:
                logger.debug(f"  [{step}] target went stale on attempt {attempt + 1}, retrying: {e}")

        if on_miss is not None:
            on_miss(attempt)

        if not delay_first and attempt < max_attempts - 1:
            sleep(interval_ms)

    logger.debug(f"  [{step}] not found after {max_attempts} attempts ({interval_ms} ms apart)")
    snapshot_path = on_timeout() if on_timeout is not None else None
    raise timeout_error(step, message, snapshot_path)
