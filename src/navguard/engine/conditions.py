"""Reusable wait conditions.

Each factory returns a pure ``WaitCondition``: a callable taking the session
and returning a value when satisfied, ``None`` otherwise.  Conditions only
read from the page, apart from scrolling a click target into view.
"""

from __future__ import annotations

from typing import Any

from navguard.engine.protocols import BrowserSession, Locator, WaitCondition

READY_STATE_SCRIPT = "() => document.readyState"

# Visible, enabled, and the element (or a descendant) is what a pointer
# event at its centre would hit.
INTERACTABLE_SCRIPT = """(el) => {
    if (!el || !el.isConnected) return false;
    const style = window.getComputedStyle(el);
    if (style.visibility === 'hidden' || style.display === 'none') return false;
    if (style.pointerEvents === 'none' || el.disabled) return false;
    const rect = el.getBoundingClientRect();
    if (rect.width === 0 || rect.height === 0) return false;
    const x = rect.left + rect.width / 2;
    const y = rect.top + rect.height / 2;
    const hit = document.elementFromPoint(x, y);
    return hit === el || el.contains(hit);
}"""


def document_complete() -> WaitCondition[str]:
    def _check(session: BrowserSession) -> str | None:
        state = session.execute_script(READY_STATE_SCRIPT)
        return state if state == "complete" else None

    return _check


def url_contains(segment: str) -> WaitCondition[str]:
    """Case-sensitive substring match against the current URL."""

    def _check(session: BrowserSession) -> str | None:
        url = session.current_url()
        return url if segment in url else None

    return _check


def element_present(locator: Locator) -> WaitCondition[Any]:
    """First element matching *locator*, visible or not."""

    def _check(session: BrowserSession) -> Any | None:
        elements = session.find_elements(locator)
        return elements[0] if elements else None

    return _check


def element_visible(locator: Locator) -> WaitCondition[Any]:
    def _check(session: BrowserSession) -> Any | None:
        for element in session.find_elements(locator):
            if element.is_visible():
                return element
        return None

    return _check


def element_interactable(element: Any) -> WaitCondition[Any]:
    """*element* is visible, enabled and accepts pointer events.

    The element is scrolled into view before every hit test; a centre point
    outside the viewport would otherwise never hit.
    """

    def _check(session: BrowserSession) -> Any | None:
        if not element.is_visible() or not element.is_enabled():
            return None
        element.scroll_into_view_if_needed()
        return element if session.execute_script(INTERACTABLE_SCRIPT, element) else None

    return _check


def visible_text_contains(locator: Locator, expected: str) -> WaitCondition[Any]:
    """A visible element whose text contains *expected*, ignoring case."""
    needle = expected.casefold()

    def _check(session: BrowserSession) -> Any | None:
        for element in session.find_elements(locator):
            if element.is_visible() and needle in (element.inner_text() or "").casefold():
                return element
        return None

    return _check


def count_greater_than(locator: Locator, previous_count: int) -> WaitCondition[int]:
    def _check(session: BrowserSession) -> int | None:
        count = len(session.find_elements(locator))
        return count if count > previous_count else None

    return _check


def indicator_cleared(locator: Locator) -> WaitCondition[bool]:
    """Loading indicator is gone, or present with empty text."""

    def _check(session: BrowserSession) -> bool | None:
        indicators = session.find_elements(locator)
        if not indicators:
            return True
        return True if not (indicators[0].inner_text() or "").strip() else None

    return _check
