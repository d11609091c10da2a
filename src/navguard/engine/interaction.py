"""navguard Interaction Executor: Clicks and text input with fallback.

Overlays and menu animations on the target application frequently leave an
element visible but briefly unable to receive pointer events.  Each
interaction therefore walks an ordered tuple of strategies:

- ``Strategy.NATIVE`` -- a real pointer click / keyboard fill through the
  driver, attempted only once the element is interactable.
- ``Strategy.SCRIPT_INJECTED`` -- the same action dispatched from page script
  on the same resolved element.

Every call returns an ``ActionOutcome``; nothing here raises on an
interaction failure.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from navguard.config import NavGuardConfig
from navguard.engine import conditions
from navguard.engine.protocols import (
    ActionOutcome,
    BrowserSession,
    ErrorKind,
    Locator,
    Strategy,
    WaitResult,
)
from navguard.engine.readiness import ReadinessDetector, ReadinessScope
from navguard.engine.waiter import ConditionWaiter, Deadline

logger = logging.getLogger("navguard.engine.interaction")

CLICK_STRATEGIES: tuple[Strategy, ...] = (Strategy.NATIVE, Strategy.SCRIPT_INJECTED)
TYPE_STRATEGIES: tuple[Strategy, ...] = (Strategy.NATIVE, Strategy.SCRIPT_INJECTED)

SCRIPT_CLICK = "(el) => el.click()"

# Uses the prototype's value setter so React controlled inputs see the change.
SCRIPT_SET_VALUE = """([el, value]) => {
    el.focus();
    const proto = Object.getPrototypeOf(el);
    const descriptor = Object.getOwnPropertyDescriptor(proto, 'value');
    if (descriptor && descriptor.set) {
        descriptor.set.call(el, '');
        descriptor.set.call(el, value);
    } else if (el.isContentEditable) {
        el.textContent = value;
    } else {
        el.value = value;
    }
    el.dispatchEvent(new Event('input', {bubbles: true}));
    el.dispatchEvent(new Event('change', {bubbles: true}));
}"""

READ_VALUE = "(el) => (el.value !== undefined ? el.value : el.textContent)"

# Native click gets a short driver-side timeout; the overall budget is ours.
_NATIVE_CLICK_TIMEOUT_MS = 3000


class InteractionError(Exception):
    """A single strategy failed to deliver an interaction."""


class InteractionExecutor:
    """Performs clicks and text entry against one browser session."""

    def __init__(
        self,
        session: BrowserSession,
        config: NavGuardConfig | None = None,
        waiter: ConditionWaiter | None = None,
        readiness: ReadinessDetector | None = None,
        readiness_scope: ReadinessScope | None = None,
        check_readiness: bool = True,
    ) -> None:
        """
        Args:
            session: Browser session to act on.
            config: Timeouts; defaults when omitted.
            waiter: Shared condition waiter (built from config when omitted).
            readiness: Detector consulted before each action.
            readiness_scope: Signals the pre-action readiness check evaluates.
            check_readiness: Set False to act without a readiness check.
        """
        self._session = session
        self._config = config or NavGuardConfig()
        self._waiter = waiter or ConditionWaiter(session, poll_interval=self._config.poll_interval)
        self._readiness: ReadinessDetector | None = None
        if check_readiness:
            self._readiness = readiness or ReadinessDetector(session, self._config, self._waiter)
        self._readiness_scope = readiness_scope or ReadinessScope()

    # -- Public API ----------------------------------------------------------

    def click(self, target: Locator | Any, timeout: float | None = None) -> ActionOutcome:
        """Click *target* (a Locator or a resolved element handle)."""
        return self._perform(
            "click",
            target,
            CLICK_STRATEGIES,
            {Strategy.NATIVE: self._native_click, Strategy.SCRIPT_INJECTED: self._script_click},
            timeout,
        )

    def type(self, target: Locator | Any, text: str, timeout: float | None = None) -> ActionOutcome:
        """Replace the content of *target* with *text*.  Never appends."""
        return self._perform(
            "type",
            target,
            TYPE_STRATEGIES,
            {
                Strategy.NATIVE: lambda el: self._native_fill(el, text),
                Strategy.SCRIPT_INJECTED: lambda el: self._script_fill(el, text),
            },
            timeout,
        )

    # -- Strategy runner -----------------------------------------------------

    def _perform(
        self,
        action: str,
        target: Locator | Any,
        strategies: tuple[Strategy, ...],
        handlers: dict[Strategy, Callable[[Any], None]],
        timeout: float | None,
    ) -> ActionOutcome:
        start = time.monotonic()
        label = str(target) if isinstance(target, Locator) else "<element>"

        def _outcome(succeeded: bool, strategy: Strategy | None, error: ErrorKind | None, detail: str) -> ActionOutcome:
            return ActionOutcome(
                succeeded=succeeded,
                strategy_used=strategy,
                error=error,
                action=action,
                target=label,
                detail=detail,
                duration_ms=(time.monotonic() - start) * 1000,
            )

        if self._readiness is not None:
            report = self._readiness.await_ready(self._readiness_scope)
            if not report.ok:
                logger.error("Cannot %s %s: page not ready", action, label)
                return _outcome(False, None, ErrorKind.NOT_READY, report.error.detail if report.error else "")

        timeout = self._config.interaction_timeout if timeout is None else timeout
        deadline = Deadline(self._waiter, timeout)

        resolved = self._resolve(target, deadline)
        if not resolved.ok:
            logger.error("Cannot %s %s: target never appeared (%s)", action, label, resolved.error)
            return _outcome(False, None, ErrorKind.INTERACTION_FAILED, f"target not found: {resolved.error}")
        element = resolved.value

        interactable = self._waiter.wait(
            conditions.element_interactable(element),
            deadline.remaining(),
            description=f"{label} to accept pointer events",
        )

        failures: list[str] = []
        for strategy in strategies:
            if strategy is Strategy.NATIVE and not interactable.ok:
                failures.append("native: element not interactable")
                logger.warning("%s is not interactable; skipping native %s", label, action)
                continue
            try:
                handlers[strategy](element)
            except Exception as exc:
                failures.append(f"{strategy.value}: {exc}")
                logger.warning("%s %s via %s failed: %s", action.capitalize(), label, strategy.value, exc)
                continue
            if strategy is not strategies[0]:
                logger.info("%s %s succeeded via fallback %s", action.capitalize(), label, strategy.value)
            else:
                logger.info("%s %s succeeded", action.capitalize(), label)
            return _outcome(True, strategy, None, "")

        logger.error("All %s strategies failed for %s", action, label)
        return _outcome(False, None, ErrorKind.INTERACTION_FAILED, "; ".join(failures))

    def _resolve(self, target: Locator | Any, deadline: Deadline) -> WaitResult[Any]:
        if not isinstance(target, Locator):
            return WaitResult(value=target)
        return self._waiter.wait(
            conditions.element_present(target),
            deadline.remaining(),
            description=f"{target} to be present",
        )

    # -- Strategies ----------------------------------------------------------

    def _native_click(self, element: Any) -> None:
        element.click(timeout=_NATIVE_CLICK_TIMEOUT_MS)

    def _script_click(self, element: Any) -> None:
        self._session.execute_script(SCRIPT_CLICK, element)

    def _native_fill(self, element: Any, text: str) -> None:
        element.fill("")
        element.fill(text)
        self._verify_value(element, text)

    def _script_fill(self, element: Any, text: str) -> None:
        self._session.execute_script(SCRIPT_SET_VALUE, [element, text])
        self._verify_value(element, text)

    def _verify_value(self, element: Any, text: str) -> None:
        # Controlled inputs may reset the value after the driver fills it.
        actual = self._session.execute_script(READ_VALUE, element)
        if actual is not None and actual != text:
            raise InteractionError(f"value is {actual!r} after fill, expected {text!r}")
