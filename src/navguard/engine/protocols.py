"""Browser Session Protocols and Outcome Types.

These protocols define the contract between navguard's synchronization core
and whatever drives the browser (Playwright in production, fakes in unit
tests).  Every component receives a ``BrowserSession`` explicitly; nothing
looks one up from a global registry.

The dataclasses here are the only values the core hands back to callers.
"""

from __future__ import annotations

import dataclasses
import enum
from typing import Any, Callable, Generic, Optional, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")

XPATH_PREFIX = "xpath="


@dataclasses.dataclass(frozen=True)
class Locator:
    """An opaque selector expression.

    Equality and hashing use the selector string only, so two locators built
    from the same string are interchangeable (and usable as dict keys).
    """

    selector: str

    @classmethod
    def css(cls, selector: str) -> Locator:
        return cls(selector)

    @classmethod
    def xpath(cls, path: str) -> Locator:
        if path.startswith(XPATH_PREFIX):
            return cls(path)
        return cls(f"{XPATH_PREFIX}{path}")

    @property
    def is_xpath(self) -> bool:
        return self.selector.startswith((XPATH_PREFIX, "//", "(//"))

    def __str__(self) -> str:
        return self.selector


@runtime_checkable
class ElementHandle(Protocol):
    """A resolved DOM element.  Playwright's ``ElementHandle`` satisfies this."""

    def click(self, timeout: float | None = None) -> None: ...

    def fill(self, value: str, timeout: float | None = None) -> None: ...

    def inner_text(self) -> str: ...

    def is_visible(self) -> bool: ...

    def is_enabled(self) -> bool: ...

    def scroll_into_view_if_needed(self, timeout: float | None = None) -> None: ...


@runtime_checkable
class BrowserSession(Protocol):
    """The sole boundary between the core and the browser.

    ``execute_script`` follows Playwright's ``evaluate`` convention: *script*
    is a JavaScript function expression and *arg* (optionally an element
    handle, or a list/dict containing them) is passed as its argument.
    """

    def navigate(self, url: str) -> None: ...

    def current_url(self) -> str: ...

    def find_elements(self, locator: Locator) -> list[Any]: ...

    def execute_script(self, script: str, arg: Any = None) -> Any: ...

    def title(self) -> str: ...


# -- Enumerations ------------------------------------------------------------


class ErrorKind(str, enum.Enum):
    TIMED_OUT = "timed_out"
    INTERACTION_FAILED = "interaction_failed"
    NOT_READY = "not_ready"
    INVALID_SPEC = "invalid_spec"


class Strategy(str, enum.Enum):
    """How an interaction was delivered to the element."""

    NATIVE = "native"
    SCRIPT_INJECTED = "script_injected"


class Tier(str, enum.Enum):
    """Evidence that confirmed a navigation, strongest first."""

    URL = "url"
    PRIMARY_ELEMENT = "primary_element"
    ALTERNATIVE_ELEMENT = "alternative_element"
    TEXT_HEURISTIC = "text_heuristic"
    NONE = "none"


class ReadinessSignal(str, enum.Enum):
    DOCUMENT_COMPLETE = "document_complete"
    LEGACY_AJAX_IDLE = "legacy_ajax_idle"
    FRAMEWORK_DIGEST_IDLE = "framework_digest_idle"
    DOM_MUTATION_QUIET = "dom_mutation_quiet"


class SignalStatus(str, enum.Enum):
    SATISFIED = "satisfied"
    NOT_APPLICABLE = "not_applicable"  # framework absent from the page
    DEGRADED = "degraded"  # gave up waiting, treated as satisfied
    SKIPPED = "skipped"  # disabled by the scope
    FAILED = "failed"  # mandatory signal never resolved


# -- Errors ------------------------------------------------------------------


class InvalidSpec(ValueError):
    """Raised when a VerificationSpec carries no usable evidence source."""

    kind = ErrorKind.INVALID_SPEC


class FatalMismatch(Exception):
    """Raised by a wait condition to stop polling immediately.

    Any other exception from a condition is treated as "not yet satisfied".
    """


@dataclasses.dataclass(frozen=True)
class TimedOut:
    """A bounded wait never resolved."""

    elapsed_s: float
    timeout_s: float
    description: str = ""
    kind: ErrorKind = ErrorKind.TIMED_OUT

    def __str__(self) -> str:
        what = f" waiting for {self.description}" if self.description else ""
        return f"Timed out after {self.elapsed_s:.2f}s{what} (limit: {self.timeout_s:.2f}s)"


@dataclasses.dataclass(frozen=True)
class NotReady:
    """The mandatory document-complete signal never resolved."""

    signal: ReadinessSignal
    elapsed_s: float
    detail: str = ""
    kind: ErrorKind = ErrorKind.NOT_READY


# -- Results -----------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class WaitResult(Generic[T]):
    """Outcome of a bounded wait: a value, or the reason there is none."""

    value: T | None = None
    error: TimedOut | FatalMismatch | None = None
    elapsed_s: float = 0.0
    polls: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclasses.dataclass(frozen=True)
class ActionOutcome:
    """Result of an interaction.  Callers decide whether a failure is fatal."""

    succeeded: bool
    strategy_used: Strategy | None
    error: ErrorKind | None = None
    action: str = ""
    target: str = ""
    detail: str = ""
    duration_ms: float = 0.0


@dataclasses.dataclass(frozen=True)
class NavigationResult:
    """Outcome of a navigation verification attempt."""

    confirmed: bool
    tier_satisfied: Tier = Tier.NONE
    alternative_index: int | None = None
    primary_text_mismatch: bool = False
    elapsed_s: float = 0.0
    detail: str = ""


WaitCondition = Callable[[BrowserSession], Optional[T]]
