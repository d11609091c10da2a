"""navguard Readiness Detector: Decide when a page has stopped changing.

The application under test mixes legacy jQuery/Angular screens with a React
SPA, so readiness is the conjunction of several signals, checked in order:

1. ``DOCUMENT_COMPLETE`` -- ``document.readyState == "complete"``.  Mandatory;
   the only signal whose timeout fails readiness.
2. ``LEGACY_AJAX_IDLE`` -- ``jQuery.active == 0`` when jQuery is loaded.
3. ``FRAMEWORK_DIGEST_IDLE`` -- no pending ``$http`` requests when an Angular
   injector is present.
4. ``DOM_MUTATION_QUIET`` -- no DOM mutation under the scope root for the
   stability window.  Advisory: hitting the quiet cap just stops waiting.

Signals 2-4 degrade to satisfied on timeout or probe error, because most
pages never load those frameworks at all.

The mutation signal relies on a small instrumentation script injected into
the page once (guarded by a window-global).  The same script records fetch
and XHR responses with status >= 400 so a failing scenario can report e.g. a
403 from the backend; see ``http_errors()``.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from navguard.config import NavGuardConfig
from navguard.engine import conditions
from navguard.engine.protocols import (
    BrowserSession,
    FatalMismatch,
    Locator,
    NotReady,
    ReadinessSignal,
    SignalStatus,
    WaitResult,
)
from navguard.engine.waiter import ConditionWaiter, Deadline

logger = logging.getLogger("navguard.engine.readiness")

# Returns null when jQuery is absent, else the active request count.
LEGACY_AJAX_PROBE = """() => {
    const jq = window.jQuery;
    if (typeof jq === 'undefined' || jq === null || typeof jq.active === 'undefined') return null;
    return jq.active;
}"""

# Returns null when no Angular injector is reachable, else pending $http count.
FRAMEWORK_DIGEST_PROBE = """() => {
    const ng = window.angular;
    if (typeof ng === 'undefined' || ng === null) return null;
    const injector = ng.element(document).injector();
    if (!injector) return null;
    return injector.get('$http').pendingRequests.length;
}"""

INSTRUMENTATION_SCRIPT = """(rootSelector) => {
    if (window.__navguard) return false;
    const state = {
        installedAt: performance.now(),
        lastMutation: performance.now(),
        mutations: 0,
        httpErrors: [],
    };
    window.__navguard = state;
    const root = (rootSelector && document.querySelector(rootSelector)) || document.documentElement;
    new MutationObserver((records) => {
        state.mutations += records.length;
        state.lastMutation = performance.now();
    }).observe(root, {childList: true, subtree: true, attributes: true, characterData: true});

    const record = (url, status) => {
        if (status >= 400) state.httpErrors.push({url: String(url), status: status, at: Date.now()});
    };
    if (window.fetch) {
        const originalFetch = window.fetch;
        window.fetch = function (...args) {
            return originalFetch.apply(this, args).then((response) => {
                record(response.url || args[0], response.status);
                return response;
            });
        };
    }
    const originalOpen = XMLHttpRequest.prototype.open;
    XMLHttpRequest.prototype.open = function (method, url, ...rest) {
        this.addEventListener('loadend', () => record(url, this.status));
        return originalOpen.call(this, method, url, ...rest);
    };
    return true;
}"""

# Milliseconds since the last recorded mutation, or null if not instrumented.
QUIET_PROBE = "() => window.__navguard ? performance.now() - window.__navguard.lastMutation : null"

HTTP_ERRORS_PROBE = "() => window.__navguard ? window.__navguard.httpErrors.slice() : []"

_LEGACY_SIGNAL_TIMEOUT = 10.0


@dataclasses.dataclass(frozen=True)
class ReadinessScope:
    """Which signals to evaluate, and where to watch for DOM mutations."""

    root_selector: str = "body"
    check_legacy_ajax: bool = True
    check_framework_digest: bool = True
    await_dom_quiet: bool = True
    stability_window: float | None = None  # seconds; config default when None
    quiet_cap: float | None = None  # seconds; config default when None
    signal_timeout: float = _LEGACY_SIGNAL_TIMEOUT


@dataclasses.dataclass(frozen=True)
class ReadinessReport:
    """Per-signal verdicts of one readiness check."""

    ok: bool
    signals: dict[ReadinessSignal, SignalStatus]
    error: NotReady | None = None
    elapsed_s: float = 0.0


class ReadinessDetector:
    """Waits out document load, legacy AJAX/digest cycles and DOM churn."""

    def __init__(
        self,
        session: BrowserSession,
        config: NavGuardConfig | None = None,
        waiter: ConditionWaiter | None = None,
    ) -> None:
        self._session = session
        self._config = config or NavGuardConfig()
        self._waiter = waiter or ConditionWaiter(session, poll_interval=self._config.poll_interval)

    @property
    def waiter(self) -> ConditionWaiter:
        return self._waiter

    def await_ready(self, scope: ReadinessScope | None = None, timeout: float | None = None) -> ReadinessReport:
        """Evaluate every applicable readiness signal within *timeout* seconds."""
        scope = scope or ReadinessScope()
        timeout = self._config.page_load_timeout if timeout is None else timeout
        deadline = Deadline(self._waiter, timeout)
        signals: dict[ReadinessSignal, SignalStatus] = {}

        # 1. Mandatory: document load
        doc = self._waiter.wait(
            conditions.document_complete(),
            deadline.remaining(),
            description="document.readyState == complete",
        )
        if not doc.ok:
            signals[ReadinessSignal.DOCUMENT_COMPLETE] = SignalStatus.FAILED
            error = NotReady(
                signal=ReadinessSignal.DOCUMENT_COMPLETE,
                elapsed_s=deadline.elapsed(),
                detail=str(doc.error),
            )
            logger.error("Page not ready: %s", error.detail)
            return ReadinessReport(ok=False, signals=signals, error=error, elapsed_s=deadline.elapsed())
        signals[ReadinessSignal.DOCUMENT_COMPLETE] = SignalStatus.SATISFIED

        # 2./3. Best-effort framework idleness
        signals[ReadinessSignal.LEGACY_AJAX_IDLE] = (
            self._await_counter_idle(ReadinessSignal.LEGACY_AJAX_IDLE, LEGACY_AJAX_PROBE, scope, deadline)
            if scope.check_legacy_ajax
            else SignalStatus.SKIPPED
        )
        signals[ReadinessSignal.FRAMEWORK_DIGEST_IDLE] = (
            self._await_counter_idle(ReadinessSignal.FRAMEWORK_DIGEST_IDLE, FRAMEWORK_DIGEST_PROBE, scope, deadline)
            if scope.check_framework_digest
            else SignalStatus.SKIPPED
        )

        # 4. Advisory DOM quiescence
        signals[ReadinessSignal.DOM_MUTATION_QUIET] = (
            self._await_dom_quiet(scope, deadline) if scope.await_dom_quiet else SignalStatus.SKIPPED
        )

        logger.debug(
            "Page ready in %.2fs: %s",
            deadline.elapsed(),
            ", ".join(f"{s.value}={v.value}" for s, v in signals.items()),
        )
        return ReadinessReport(ok=True, signals=signals, elapsed_s=deadline.elapsed())

    def _await_counter_idle(
        self,
        signal: ReadinessSignal,
        probe: str,
        scope: ReadinessScope,
        deadline: Deadline,
    ) -> SignalStatus:
        """Wait for a framework's pending-request counter to reach zero."""
        try:
            initial = self._session.execute_script(probe)
        except Exception as exc:
            logger.debug("%s probe failed, treating as satisfied: %s", signal.value, exc)
            return SignalStatus.DEGRADED
        if initial is None:
            return SignalStatus.NOT_APPLICABLE
        if initial == 0:
            return SignalStatus.SATISFIED

        def _idle(session: BrowserSession) -> bool | None:
            pending = session.execute_script(probe)
            # Framework unloaded mid-wait (client-side navigation) counts as idle.
            return True if pending is None or pending == 0 else None

        result = self._waiter.wait(_idle, deadline.budget(scope.signal_timeout), description=f"{signal.value}")
        if result.ok:
            return SignalStatus.SATISFIED
        logger.warning("%s did not settle (%s); continuing", signal.value, result.error)
        return SignalStatus.DEGRADED

    def _await_dom_quiet(self, scope: ReadinessScope, deadline: Deadline) -> SignalStatus:
        window = self._config.stability_window if scope.stability_window is None else scope.stability_window
        cap = self._config.quiet_cap if scope.quiet_cap is None else scope.quiet_cap
        try:
            self.install_instrumentation(scope.root_selector)
        except Exception as exc:
            logger.debug("Instrumentation install failed, skipping DOM quiet wait: %s", exc)
            return SignalStatus.DEGRADED

        window_ms = window * 1000

        def _quiet(session: BrowserSession) -> float | None:
            idle_ms = session.execute_script(QUIET_PROBE)
            if idle_ms is None:
                raise FatalMismatch("mutation instrumentation missing from page")
            return idle_ms if idle_ms >= window_ms else None

        result = self._waiter.wait(_quiet, deadline.budget(cap), description="DOM mutation quiet")
        if result.ok:
            return SignalStatus.SATISFIED
        logger.info("DOM still changing after %.2fs; proceeding anyway", result.elapsed_s)
        return SignalStatus.DEGRADED

    def install_instrumentation(self, root_selector: str = "body") -> bool:
        """Inject the mutation/HTTP-error tracker once.  Returns True if newly installed."""
        installed = bool(self._session.execute_script(INSTRUMENTATION_SCRIPT, root_selector))
        if installed:
            logger.debug("Installed page instrumentation (root=%s)", root_selector)
        return installed

    def http_errors(self) -> list[dict[str, Any]]:
        """Fetch/XHR responses with status >= 400 seen since instrumentation."""
        try:
            errors = self._session.execute_script(HTTP_ERRORS_PROBE)
        except Exception as exc:
            logger.debug("Could not read HTTP error log: %s", exc)
            return []
        return list(errors or [])

    def await_loading_complete(self, indicator: Locator, timeout: float | None = None) -> WaitResult[bool]:
        """Wait until a loading indicator is absent or shows no text."""
        timeout = self._config.default_timeout if timeout is None else timeout
        result = self._waiter.wait(
            conditions.indicator_cleared(indicator),
            timeout,
            description=f"loading indicator {indicator} to clear",
        )
        if not result.ok:
            logger.warning("Loading indicator %s still present after %.1fs", indicator, timeout)
        return result
