"""navguard Navigation Verifier: Confirm a destination was actually reached.

Class names in the target application's markup change with every build, so
no single selector can be trusted to prove a navigation succeeded.  The
verifier cascades through evidence tiers, strongest first:

1. ``Tier.URL`` -- the current URL contains the expected path segment
   (case-sensitive).  Cheapest and most reliable when available.
2. ``Tier.PRIMARY_ELEMENT`` -- the primary indicator is visible and its text
   contains the expected text (case-insensitive).
3. ``Tier.ALTERNATIVE_ELEMENT`` -- the first alternative locator matching at
   least one element, visible or not.
4. ``Tier.TEXT_HEURISTIC`` -- a keyword appears in one of the first N
   visible text nodes on the page.

Each tier gets a weighted share of the overall timeout; tiers with no
evidence in the VerificationSpec are skipped and their share redistributed.
A primary element that is found but whose text does not match still falls
through to the weaker tiers; the result flags it as ``primary_text_mismatch``.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Sequence
from typing import Callable

from navguard.config import NavGuardConfig
from navguard.engine import conditions
from navguard.engine.protocols import (
    BrowserSession,
    InvalidSpec,
    Locator,
    NavigationResult,
    Tier,
    WaitCondition,
)
from navguard.engine.waiter import ConditionWaiter, Deadline

logger = logging.getLogger("navguard.engine.navigation")

# Relative share of the overall timeout per tier.
TIER_WEIGHTS: dict[Tier, float] = {
    Tier.URL: 0.25,
    Tier.PRIMARY_ELEMENT: 0.35,
    Tier.ALTERNATIVE_ELEMENT: 0.2,
    Tier.TEXT_HEURISTIC: 0.2,
}

TIER_ORDER: tuple[Tier, ...] = (
    Tier.URL,
    Tier.PRIMARY_ELEMENT,
    Tier.ALTERNATIVE_ELEMENT,
    Tier.TEXT_HEURISTIC,
)

VISIBLE_TEXT_SCRIPT = """(limit) => {
    const out = [];
    if (!document.body) return out;
    const walker = document.createTreeWalker(document.body, NodeFilter.SHOW_TEXT, {
        acceptNode(node) {
            const text = node.textContent;
            if (!text || !text.trim()) return NodeFilter.FILTER_REJECT;
            const el = node.parentElement;
            if (!el || el.closest('script, style, noscript, template')) return NodeFilter.FILTER_REJECT;
            const style = window.getComputedStyle(el);
            if (style.display === 'none' || style.visibility === 'hidden') return NodeFilter.FILTER_REJECT;
            const rect = el.getBoundingClientRect();
            if (rect.width === 0 && rect.height === 0) return NodeFilter.FILTER_REJECT;
            return NodeFilter.FILTER_ACCEPT;
        },
    });
    while (out.length < limit && walker.nextNode()) {
        out.push(walker.currentNode.textContent.trim());
    }
    return out;
}"""


@dataclasses.dataclass(frozen=True)
class VerificationSpec:
    """Evidence that a named destination was reached.

    At least one of ``url_path_segment`` or ``primary_locator`` is required.
    ``keywords`` feed the text heuristic tier and default to
    ``(expected_text,)``.
    """

    primary_locator: Locator | None = None
    expected_text: str = ""
    alternative_locators: tuple[Locator, ...] = ()
    url_path_segment: str = ""
    keywords: tuple[str, ...] = ()
    name: str = ""

    def __post_init__(self) -> None:
        if not self.url_path_segment and self.primary_locator is None:
            raise InvalidSpec(
                f"Verification spec {self.name or '<unnamed>'} needs a url_path_segment or a primary_locator"
            )
        # Accept lists from callers building specs by hand.
        object.__setattr__(self, "alternative_locators", tuple(self.alternative_locators))
        object.__setattr__(self, "keywords", tuple(k for k in self.keywords if k))

    @property
    def effective_keywords(self) -> tuple[str, ...]:
        if self.keywords:
            return self.keywords
        return (self.expected_text,) if self.expected_text else ()

    def applicable_tiers(self) -> tuple[Tier, ...]:
        present = {
            Tier.URL: bool(self.url_path_segment),
            Tier.PRIMARY_ELEMENT: self.primary_locator is not None,
            Tier.ALTERNATIVE_ELEMENT: bool(self.alternative_locators),
            Tier.TEXT_HEURISTIC: bool(self.effective_keywords),
        }
        return tuple(t for t in TIER_ORDER if present[t])


def match_keywords(texts: Iterable[str], keywords: Sequence[str]) -> str | None:
    """Return the first keyword found (case-insensitively) in any text."""
    needles = [(k, k.casefold()) for k in keywords if k]
    for text in texts:
        folded = (text or "").casefold()
        for keyword, needle in needles:
            if needle in folded:
                return keyword
    return None


def tier_budgets(tiers: Sequence[Tier], timeout: float) -> dict[Tier, float]:
    """Split *timeout* across *tiers* in proportion to their weights."""
    total = sum(TIER_WEIGHTS[t] for t in tiers)
    if not tiers or total <= 0:
        return {}
    return {t: timeout * TIER_WEIGHTS[t] / total for t in tiers}


class NavigationVerifier:
    """Confirms destinations using cascading evidence tiers."""

    def __init__(
        self,
        session: BrowserSession,
        config: NavGuardConfig | None = None,
        waiter: ConditionWaiter | None = None,
    ) -> None:
        self._session = session
        self._config = config or NavGuardConfig()
        self._waiter = waiter or ConditionWaiter(session, poll_interval=self._config.poll_interval)

    def verify(self, spec: VerificationSpec, timeout: float | None = None) -> NavigationResult:
        """Check *spec* tier by tier within *timeout* seconds overall."""
        timeout = self._config.navigation_timeout if timeout is None else timeout
        deadline = Deadline(self._waiter, timeout)
        tiers = spec.applicable_tiers()
        budgets = tier_budgets(tiers, timeout)
        label = spec.name or spec.url_path_segment or str(spec.primary_locator)
        primary_mismatch = False

        for i, tier in enumerate(tiers):
            # The last tier takes whatever is left so the budgets sum to timeout.
            budget = deadline.remaining() if i == len(tiers) - 1 else deadline.budget(budgets[tier])
            condition = self._condition_for(tier, spec)
            result = self._waiter.wait(condition, budget, description=f"{label} [{tier.value}]")

            if result.ok:
                alt_index = result.value if tier is Tier.ALTERNATIVE_ELEMENT else None
                detail = self._describe(tier, spec, result.value)
                logger.info("Navigation to %s confirmed by %s tier (%s)", label, tier.value, detail)
                return NavigationResult(
                    confirmed=True,
                    tier_satisfied=tier,
                    alternative_index=alt_index,
                    primary_text_mismatch=primary_mismatch,
                    elapsed_s=deadline.elapsed(),
                    detail=detail,
                )

            logger.debug("%s tier not satisfied for %s after %.2fs", tier.value, label, result.elapsed_s)
            if tier is Tier.PRIMARY_ELEMENT:
                primary_mismatch = self._primary_found(spec)
                if primary_mismatch:
                    logger.warning(
                        "Primary indicator %s is visible but lacks text %r; trying weaker evidence",
                        spec.primary_locator,
                        spec.expected_text,
                    )

        logger.error("Navigation to %s not confirmed after %.2fs", label, deadline.elapsed())
        return NavigationResult(
            confirmed=False,
            tier_satisfied=Tier.NONE,
            primary_text_mismatch=primary_mismatch,
            elapsed_s=deadline.elapsed(),
            detail="no tier satisfied",
        )

    # -- Tier conditions -----------------------------------------------------

    def _condition_for(self, tier: Tier, spec: VerificationSpec) -> WaitCondition:
        factories: dict[Tier, Callable[[VerificationSpec], WaitCondition]] = {
            Tier.URL: lambda s: conditions.url_contains(s.url_path_segment),
            Tier.PRIMARY_ELEMENT: lambda s: conditions.visible_text_contains(s.primary_locator, s.expected_text),
            Tier.ALTERNATIVE_ELEMENT: lambda s: self._first_alternative(s.alternative_locators),
            Tier.TEXT_HEURISTIC: lambda s: self._keyword_visible(s.effective_keywords),
        }
        return factories[tier](spec)

    def _first_alternative(self, locators: Sequence[Locator]) -> WaitCondition[int]:
        def _check(session: BrowserSession) -> int | None:
            for index, locator in enumerate(locators):
                if session.find_elements(locator):
                    return index
            return None

        return _check

    def _keyword_visible(self, keywords: Sequence[str]) -> WaitCondition[str]:
        limit = self._config.text_scan_limit

        def _check(session: BrowserSession) -> str | None:
            texts = session.execute_script(VISIBLE_TEXT_SCRIPT, limit) or []
            return match_keywords(texts[:limit], keywords)

        return _check

    def _primary_found(self, spec: VerificationSpec) -> bool:
        try:
            return conditions.element_visible(spec.primary_locator)(self._session) is not None
        except Exception:
            return False

    @staticmethod
    def _describe(tier: Tier, spec: VerificationSpec, value: object) -> str:
        if tier is Tier.URL:
            return f"url {value}"
        if tier is Tier.PRIMARY_ELEMENT:
            return f"{spec.primary_locator} contains {spec.expected_text!r}"
        if tier is Tier.ALTERNATIVE_ELEMENT:
            return f"alternative #{value} {spec.alternative_locators[value]}"
        return f"keyword {value!r}"
