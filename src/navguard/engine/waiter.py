"""navguard Condition Waiter: Poll a condition until it holds or time runs out.

Every bounded wait in navguard goes through ``ConditionWaiter.wait``.  The
application under test mutates the DOM asynchronously, so a condition that
raises mid-check (stale handle, detached node, navigation in flight) is
treated as "not yet satisfied" and polled again.  Only ``FatalMismatch``
stops the wait early.

Waits block the calling thread.  Sleeps are clipped to the remaining budget,
so a wait never overruns its timeout by more than one poll interval.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from navguard.engine.protocols import BrowserSession, FatalMismatch, TimedOut, WaitCondition, WaitResult
from navguard.models import DEFAULT_POLL_INTERVAL

logger = logging.getLogger("navguard.engine.waiter")

T = TypeVar("T")


class ConditionWaiter:
    """Evaluates wait conditions against a single browser session."""

    def __init__(
        self,
        session: BrowserSession,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Args:
            session: The browser session conditions are evaluated against.
            poll_interval: Default seconds between polls.
            clock: Monotonic clock in seconds (injectable for tests).
            sleep: Sleep function in seconds (injectable for tests).
        """
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval!r}")
        self._session = session
        self._poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep

    @property
    def session(self) -> BrowserSession:
        return self._session

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    def now(self) -> float:
        return self._clock()

    def wait(
        self,
        condition: WaitCondition[T],
        timeout: float,
        poll_interval: float | None = None,
        description: str = "",
    ) -> WaitResult[T]:
        """Poll *condition* until it returns a non-None value or *timeout* elapses.

        A zero (or negative) timeout evaluates the condition exactly once.
        Returns a WaitResult carrying the value, ``TimedOut``, or the
        ``FatalMismatch`` the condition raised.  Never raises for a timeout.
        """
        interval = poll_interval if poll_interval is not None else self._poll_interval
        timeout = max(timeout, 0.0)
        start = self._clock()
        deadline = start + timeout
        polls = 0
        last_error: Exception | None = None

        while True:
            polls += 1
            try:
                value = condition(self._session)
            except FatalMismatch as exc:
                elapsed = self._clock() - start
                logger.info("Wait for %s aborted after %d poll(s): %s", description or "condition", polls, exc)
                return WaitResult(error=exc, elapsed_s=elapsed, polls=polls)
            except Exception as exc:
                # Transient: element detached, navigation in flight, etc.
                value = None
                last_error = exc
                logger.debug("Poll %d for %s raised %s: %s", polls, description or "condition", type(exc).__name__, exc)

            if value is not None:
                elapsed = self._clock() - start
                logger.debug("Condition %s satisfied after %d poll(s), %.2fs", description or "", polls, elapsed)
                return WaitResult(value=value, elapsed_s=elapsed, polls=polls)

            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            self._sleep(min(interval, remaining))

        elapsed = self._clock() - start
        if last_error is not None:
            logger.debug("Last transient error before timeout: %s", last_error)
        timed_out = TimedOut(elapsed_s=elapsed, timeout_s=timeout, description=description)
        logger.debug("%s after %d poll(s)", timed_out, polls)
        return WaitResult(error=timed_out, elapsed_s=elapsed, polls=polls)


class Deadline:
    """An overall time budget shared by several consecutive waits."""

    def __init__(self, waiter: ConditionWaiter, timeout: float) -> None:
        self._waiter = waiter
        self._start = waiter.now()
        self._end = self._start + max(timeout, 0.0)

    def remaining(self) -> float:
        return max(self._end - self._waiter.now(), 0.0)

    def elapsed(self) -> float:
        return self._waiter.now() - self._start

    def expired(self) -> bool:
        return self.remaining() <= 0

    def budget(self, share: float) -> float:
        """Return *share* seconds, clipped to what is left of the deadline."""
        return min(max(share, 0.0), self.remaining())
