"""navguard engine: synchronization and navigation verification core.

- ConditionWaiter: polling-until-true primitive with a hard timeout
- ReadinessDetector: document load, legacy AJAX/digest idleness, DOM quiescence
- InteractionExecutor: clicks and text entry with script fallback
- NavigationVerifier: tiered confirmation that a destination was reached
- ResponseWatcher: growth of asynchronous content streams
- ReportGenerator: markdown report of a check run

``PlaywrightSession`` / ``launch_session`` live in ``navguard.engine.session``
and import Playwright lazily.
"""

from navguard.engine.interaction import InteractionExecutor
from navguard.engine.navigation import NavigationVerifier, VerificationSpec
from navguard.engine.protocols import (
    ActionOutcome,
    BrowserSession,
    ErrorKind,
    FatalMismatch,
    InvalidSpec,
    Locator,
    NavigationResult,
    NotReady,
    ReadinessSignal,
    SignalStatus,
    Strategy,
    Tier,
    TimedOut,
    WaitResult,
)
from navguard.engine.readiness import ReadinessDetector, ReadinessReport, ReadinessScope
from navguard.engine.report_generator import CheckRun, DestinationReport, ReportGenerator
from navguard.engine.response import ResponseQuality, ResponseWatcher, classify_response, has_meaningful_response
from navguard.engine.waiter import ConditionWaiter

__all__ = [
    "ActionOutcome",
    "BrowserSession",
    "CheckRun",
    "ConditionWaiter",
    "DestinationReport",
    "ErrorKind",
    "FatalMismatch",
    "InteractionExecutor",
    "InvalidSpec",
    "Locator",
    "NavigationResult",
    "NavigationVerifier",
    "NotReady",
    "ReadinessDetector",
    "ReadinessReport",
    "ReadinessScope",
    "ReadinessSignal",
    "ReportGenerator",
    "ResponseQuality",
    "ResponseWatcher",
    "SignalStatus",
    "Strategy",
    "Tier",
    "TimedOut",
    "VerificationSpec",
    "WaitResult",
    "classify_response",
    "has_meaningful_response",
]
