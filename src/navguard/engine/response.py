"""navguard Response Watcher: Detect that an async content stream grew.

Arrival and quality are separate concerns: ``ResponseWatcher.await_growth``
only answers "did another matching element appear?", while
``classify_response`` is a pure function deciding whether a piece of
retrieved text is a meaningful answer or a failure placeholder.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Sequence

from navguard.config import NavGuardConfig
from navguard.engine import conditions
from navguard.engine.protocols import BrowserSession, Locator, WaitResult
from navguard.engine.waiter import ConditionWaiter
from navguard.models import FAILURE_MARKERS, LENGTHY_RESPONSE_CHARS, MIN_RESPONSE_LENGTH

logger = logging.getLogger("navguard.engine.response")


@dataclasses.dataclass(frozen=True)
class ResponseQuality:
    meaningful: bool
    reason: str = ""


def classify_response(
    text: str | None,
    failure_markers: Sequence[str] = FAILURE_MARKERS,
    min_length: int = MIN_RESPONSE_LENGTH,
) -> ResponseQuality:
    """Decide whether *text* is a meaningful response.

    Empty text, any failure marker, or fewer than *min_length* non-blank
    characters make it a failure.
    """
    if not text or not text.strip():
        return ResponseQuality(False, "empty response")
    for marker in failure_markers:
        if marker and marker in text:
            return ResponseQuality(False, f"contains failure marker {marker!r}")
    if len(text.strip()) < min_length:
        return ResponseQuality(False, f"shorter than {min_length} characters")
    return ResponseQuality(True, "ok")


def has_meaningful_response(
    texts: Iterable[str],
    failure_markers: Sequence[str] = FAILURE_MARKERS,
    min_length: int = MIN_RESPONSE_LENGTH,
    lengthy_override: int = LENGTHY_RESPONSE_CHARS,
) -> bool:
    """True if the latest text is meaningful, or any text is lengthy.

    Streamed replies sometimes end with a short status line after a long
    answer, so a response longer than *lengthy_override* characters anywhere
    in the list also counts.
    """
    texts = [t for t in texts if t is not None]
    if not texts:
        return False
    verdict = classify_response(texts[-1], failure_markers, min_length)
    if verdict.meaningful:
        return True
    logger.info("Latest response rejected: %s", verdict.reason)
    for text in texts:
        if len(text) > lengthy_override:
            logger.info("Accepting lengthy response (%d chars) instead", len(text))
            return True
    return False


class ResponseWatcher:
    """Waits for elements matching a locator to increase in number."""

    def __init__(
        self,
        session: BrowserSession,
        config: NavGuardConfig | None = None,
        waiter: ConditionWaiter | None = None,
    ) -> None:
        self._session = session
        self._config = config or NavGuardConfig()
        self._waiter = waiter or ConditionWaiter(session, poll_interval=self._config.poll_interval)

    def count(self, locator: Locator) -> int:
        return len(self._session.find_elements(locator))

    def await_growth(self, locator: Locator, previous_count: int, timeout: float | None = None) -> WaitResult[int]:
        """Wait until more than *previous_count* elements match *locator*.

        The result value is the new count.
        """
        timeout = self._config.response_timeout if timeout is None else timeout
        logger.info("Waiting for %s to grow beyond %d element(s)", locator, previous_count)
        result = self._waiter.wait(
            conditions.count_greater_than(locator, previous_count),
            timeout,
            description=f"more than {previous_count} x {locator}",
        )
        if result.ok:
            logger.info("New content arrived: %d element(s)", result.value)
        else:
            logger.warning("No new content after %.1fs (still %d)", result.elapsed_s, previous_count)
        return result
