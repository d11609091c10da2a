"""navguard Playwright Session: BrowserSession backed by Playwright's sync API.

``launch_session`` owns the browser lifecycle for exactly one scenario:
start Playwright, launch the configured browser, open a context at the
configured viewport, yield a ``PlaywrightSession``, then tear it all down.
Parallel scenarios each call ``launch_session`` themselves; there is no
shared or thread-local driver.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING, Any

from navguard.config import NavGuardConfig
from navguard.engine.protocols import Locator

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle, Page

logger = logging.getLogger("navguard.engine.session")


class PlaywrightSession:
    """Adapts a Playwright ``Page`` to the ``BrowserSession`` protocol."""

    def __init__(self, page: Page, page_load_timeout: float = 30.0) -> None:
        self._page = page
        self._page_load_timeout_ms = page_load_timeout * 1000

    @property
    def page(self) -> Page:
        return self._page

    def navigate(self, url: str) -> None:
        logger.info("Navigating to: %s", url)
        # Readiness is decided by ReadinessDetector, not by Playwright's load event.
        self._page.goto(url, wait_until="commit", timeout=self._page_load_timeout_ms)

    def current_url(self) -> str:
        return self._page.url

    def find_elements(self, locator: Locator) -> list[ElementHandle]:
        return self._page.query_selector_all(locator.selector)

    def execute_script(self, script: str, arg: Any = None) -> Any:
        return self._page.evaluate(script, arg)

    def title(self) -> str:
        return self._page.title()

    def screenshot(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        self._page.screenshot(path=str(path), full_page=True)
        return path


@contextlib.contextmanager
def launch_session(config: NavGuardConfig) -> Iterator[PlaywrightSession]:
    """Launch a browser per *config* and yield a session bound to a fresh page."""
    from playwright.sync_api import sync_playwright

    playwright = sync_playwright().start()
    browser: Any = None
    context: Any = None
    try:
        browser_type = getattr(playwright, config.browser)
        browser = browser_type.launch(headless=config.headless)
        context = browser.new_context(
            viewport={"width": config.viewport[0], "height": config.viewport[1]},
            ignore_https_errors=True,
        )
        page = context.new_page()
        logger.info(
            "Launched %s (headless=%s, viewport=%dx%d)",
            config.browser,
            config.headless,
            config.viewport[0],
            config.viewport[1],
        )
        yield PlaywrightSession(page, page_load_timeout=config.page_load_timeout)
    finally:
        for name, closeable in (("context", context), ("browser", browser)):
            if closeable is None:
                continue
            try:
                closeable.close()
            except Exception as exc:
                logger.warning("Error closing %s: %s", name, exc)
        try:
            playwright.stop()
        except Exception as exc:
            logger.warning("Error stopping Playwright: %s", exc)
