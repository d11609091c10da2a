"""Menu navigation: reach catalog destinations by menu click or direct path.

``MenuNavigator`` holds the synchronization core as collaborators: it asks
the executor to click the menu link and the verifier to confirm the
destination.  It never decides pass/fail itself; callers inspect the
returned ``NavigationAttempt``.
"""

from __future__ import annotations

import dataclasses
import logging

from navguard.engine import conditions
from navguard.engine.interaction import InteractionExecutor
from navguard.engine.navigation import NavigationVerifier
from navguard.engine.protocols import ActionOutcome, BrowserSession, NavigationResult, Tier
from navguard.engine.readiness import ReadinessDetector, ReadinessReport
from navguard.engine.waiter import ConditionWaiter
from navguard.pages.catalog import Destination, DestinationCatalog

logger = logging.getLogger("navguard.pages.menu")

_MENU_TIMEOUT = 10.0


@dataclasses.dataclass(frozen=True)
class NavigationAttempt:
    destination: Destination
    via: str  # menu, path
    outcome: ActionOutcome | None
    result: NavigationResult
    readiness: ReadinessReport | None = None

    @property
    def succeeded(self) -> bool:
        if self.outcome is not None and not self.outcome.succeeded:
            return False
        if self.readiness is not None and not self.readiness.ok:
            return False
        return self.result.confirmed


class MenuNavigator:
    """Navigates between catalog destinations."""

    def __init__(
        self,
        session: BrowserSession,
        catalog: DestinationCatalog,
        base_url: str,
        executor: InteractionExecutor,
        verifier: NavigationVerifier,
        readiness: ReadinessDetector,
        waiter: ConditionWaiter | None = None,
    ) -> None:
        self._session = session
        self._catalog = catalog
        self._base_url = base_url.rstrip("/")
        self._executor = executor
        self._verifier = verifier
        self._readiness = readiness
        self._waiter = waiter or readiness.waiter

    @property
    def readiness(self) -> ReadinessDetector:
        return self._readiness

    def navigate_home(self) -> ReadinessReport:
        """Load the home path and wait for the main menu to render."""
        report = self.navigate_to_path(self._catalog.home_path)
        menu = self._waiter.wait(
            conditions.element_visible(self._catalog.menu_container),
            _MENU_TIMEOUT,
            description="main menu",
        )
        if not menu.ok:
            logger.warning("Main menu %s not visible: %s", self._catalog.menu_container, menu.error)
        return report

    def navigate_to_path(self, path: str) -> ReadinessReport:
        url = f"{self._base_url}{path}"
        logger.info("Navigating directly to URL: %s", url)
        self._session.navigate(url)
        return self._readiness.await_ready()

    def open(self, name: str, timeout: float | None = None) -> NavigationAttempt:
        """Load a destination by its path and verify it."""
        destination = self._catalog.resolve(name)
        if not destination.path:
            logger.warning("%s has no path; falling back to the menu", destination.name)
            return self.navigate_via_menu(name, timeout)
        readiness = self.navigate_to_path(destination.path)
        if not readiness.ok:
            return NavigationAttempt(
                destination,
                "path",
                None,
                NavigationResult(confirmed=False, tier_satisfied=Tier.NONE, detail="page not ready"),
                readiness,
            )
        result = self._verifier.verify(destination.spec, timeout)
        return NavigationAttempt(destination, "path", None, result, readiness)

    def navigate_via_menu(self, name: str, timeout: float | None = None) -> NavigationAttempt:
        """Click the destination's menu link, then verify it loaded."""
        destination = self._catalog.resolve(name)
        link = self._catalog.menu_locator(destination)
        logger.info("Navigating to %s via main menu (%s)", destination.name, link)

        outcome = self._executor.click(link)
        if not outcome.succeeded:
            logger.error("Menu item for %s could not be clicked: %s", destination.name, outcome.detail)
            return NavigationAttempt(
                destination,
                "menu",
                outcome,
                NavigationResult(confirmed=False, tier_satisfied=Tier.NONE, detail="menu click failed"),
            )

        readiness = self._readiness.await_ready()
        result = self._verifier.verify(destination.spec, timeout)
        return NavigationAttempt(destination, "menu", outcome, result, readiness)
