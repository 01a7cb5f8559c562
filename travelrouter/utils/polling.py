"""
Bounded polling helpers for Travel Router.

Every wait in the application is a fixed-interval, fixed-timeout poll.
There is no backoff and no unbounded wait.
"""

import time
from typing import Callable, NamedTuple, Optional


class PollResult(NamedTuple):
    """Outcome of poll_until(); ``timed_out`` is the distinguishable failure."""

    succeeded: bool
    elapsed: int
    attempts: int

    @property
    def timed_out(self) -> bool:
        return not self.succeeded


def poll_until(
    condition: Callable[[], bool],
    timeout: int,
    interval: int = 1,
    sleep: Callable[[float], None] = time.sleep,
    on_tick: Optional[Callable[[int], None]] = None,
) -> PollResult:
    """
    Evaluate ``condition`` until it is true or ``timeout`` seconds have passed.

    The condition is checked immediately, then once after every ``interval``
    sleep. Elapsed time is counted in sleep intervals so that slow checks do
    not eat into the budget unpredictably.

    Args:
        condition: Zero-argument callable returning True when done
        timeout: Budget in seconds
        interval: Seconds between checks
        sleep: Sleep function (injectable for tests)
        on_tick: Called with the elapsed seconds after each unsuccessful tick

    Returns:
        PollResult
    """
    elapsed = 0
    attempts = 1
    while not condition():
        sleep(interval)
        elapsed += interval
        if on_tick:
            on_tick(elapsed)
        if elapsed >= timeout:
            return PollResult(False, elapsed, attempts)
        attempts += 1
    return PollResult(True, elapsed, attempts)
