"""Shared fixtures for navguard unit tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from navguard.config import NavGuardConfig
from navguard.engine.conditions import INTERACTABLE_SCRIPT, READY_STATE_SCRIPT
from navguard.engine.interaction import READ_VALUE, SCRIPT_CLICK, SCRIPT_SET_VALUE
from navguard.engine.navigation import VISIBLE_TEXT_SCRIPT
from navguard.engine.protocols import Locator
from navguard.engine.readiness import (
    FRAMEWORK_DIGEST_PROBE,
    HTTP_ERRORS_PROBE,
    INSTRUMENTATION_SCRIPT,
    LEGACY_AJAX_PROBE,
    QUIET_PROBE,
)
from navguard.engine.waiter import ConditionWaiter


# ---------------------------------------------------------------------------
# Fakes: clock, element, session
# ---------------------------------------------------------------------------

class FakeClock:
    """Monotonic clock that only advances when something sleeps."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeElement:
    """Stands in for a Playwright ElementHandle."""

    def __init__(
        self,
        text: str = "",
        visible: bool = True,
        enabled: bool = True,
        click_error: Exception | None = None,
        fill_error: Exception | None = None,
        value: str = "",
        in_viewport: bool = True,
    ) -> None:
        self.text = text
        self.in_viewport = in_viewport
        self.scrolls = 0
        self.visible = visible
        self.enabled = enabled
        self.click_error = click_error
        self.fill_error = fill_error
        self.value = value
        self.clicks = 0
        self.script_clicks = 0
        self.fills: list[str] = []

    def click(self, timeout: float | None = None) -> None:
        if self.click_error is not None:
            raise self.click_error
        self.clicks += 1

    def fill(self, value: str, timeout: float | None = None) -> None:
        if self.fill_error is not None:
            raise self.fill_error
        self.fills.append(value)
        self.value = value

    def inner_text(self) -> str:
        return self.text

    def is_visible(self) -> bool:
        return self.visible

    def is_enabled(self) -> bool:
        return self.enabled

    def scroll_into_view_if_needed(self, timeout: float | None = None) -> None:
        self.scrolls += 1
        self.in_viewport = True



class FakeSession:
    """In-memory BrowserSession.

    ``elements`` maps selector strings to a list of elements, or to a
    zero-argument callable returning one (for pages that change over time).
    ``scripts`` maps script source to a return value, or to a callable
    taking the script argument.  An Exception value is raised.
    """

    def __init__(self, url: str = "about:blank") -> None:
        self.url = url
        self.elements: dict[str, Any] = {}
        self.visible_texts: list[str] = []
        self.http_error_log: list[dict[str, Any]] = []
        self.navigations: list[str] = []
        self.executed: list[str] = []
        self.scripts: dict[str, Any] = {
            READY_STATE_SCRIPT: "complete",
            LEGACY_AJAX_PROBE: None,
            FRAMEWORK_DIGEST_PROBE: None,
            INSTRUMENTATION_SCRIPT: True,
            QUIET_PROBE: 60_000.0,
            HTTP_ERRORS_PROBE: lambda _arg: list(self.http_error_log),
            INTERACTABLE_SCRIPT: lambda el: el.in_viewport,
            SCRIPT_CLICK: self._script_click,
            SCRIPT_SET_VALUE: self._script_set_value,
            READ_VALUE: lambda el: el.value,
            VISIBLE_TEXT_SCRIPT: lambda limit: self.visible_texts[:limit],
        }

    def add(self, selector: str | Locator, *elements: FakeElement) -> None:
        self.elements[str(selector)] = list(elements)

    # -- BrowserSession ------------------------------------------------------

    def navigate(self, url: str) -> None:
        self.navigations.append(url)
        self.url = url

    def current_url(self) -> str:
        return self.url

    def find_elements(self, locator: Locator) -> list[FakeElement]:
        source = self.elements.get(locator.selector, [])
        return list(source() if callable(source) else source)

    def execute_script(self, script: str, arg: Any = None) -> Any:
        self.executed.append(script)
        if script not in self.scripts:
            raise RuntimeError(f"unexpected script: {script[:40]}")
        handler = self.scripts[script]
        if isinstance(handler, Exception):
            raise handler
        return handler(arg) if callable(handler) else handler

    def title(self) -> str:
        return "Fake Page"

    # -- Script handlers -----------------------------------------------------

    @staticmethod
    def _script_click(element: FakeElement) -> None:
        element.script_clicks += 1

    @staticmethod
    def _script_set_value(arg: list[Any]) -> None:
        element, value = arg
        element.value = value


# ---------------------------------------------------------------------------
# Fixtures: fakes wired together
# ---------------------------------------------------------------------------

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def config() -> NavGuardConfig:
    return NavGuardConfig(base_url="https://app.example.test")


@pytest.fixture
def waiter(session: FakeSession, clock: FakeClock) -> ConditionWaiter:
    return ConditionWaiter(session, poll_interval=0.25, clock=clock, sleep=clock.sleep)


# ---------------------------------------------------------------------------
# Fixture: temporary project directory with .navguard/ structure
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_destinations() -> dict[str, Any]:
    return {
        "home_path": "/tokens/top",
        "menu": {"container": "#main-menu", "link_template": "//a[@data-tooltip-content='{label}']"},
        "destinations": [
            {
                "name": "Actions",
                "path": "/tasks",
                "menu_label": "Actions",
                "aliases": ["Tasks"],
                "verify": {
                    "url_path_segment": "/tasks",
                    "primary": "//h1[contains(text(), 'Actions')]",
                    "expected_text": "Actions",
                    "alternatives": [".TasksPage_container__r7VvT", ".MainTasks_container__LNbdF"],
                    "keywords": ["Actions"],
                },
            },
            {
                "name": "Portfolio",
                "path": "/portfolio",
                "verify": {
                    "primary": "h1.Portfolio_title",
                    "expected_text": "Portfolio",
                },
            },
        ],
    }


@pytest.fixture
def tmp_project_dir(tmp_path: Path, sample_destinations: dict[str, Any]) -> Path:
    """Create a temporary .navguard/ project directory."""
    navguard_dir = tmp_path / ".navguard"
    (navguard_dir / "evidence").mkdir(parents=True)

    config_data = {
        "base_url": "https://app.example.test",
        "browser": "chromium",
        "headless": True,
        "viewport": {"width": 1280, "height": 720},
    }
    (navguard_dir / "config.yaml").write_text(yaml.dump(config_data, default_flow_style=False), encoding="utf-8")
    (navguard_dir / "destinations.yaml").write_text(
        yaml.dump(sample_destinations, default_flow_style=False, sort_keys=False), encoding="utf-8"
    )
    return navguard_dir


@pytest.fixture
def sample_config_yaml() -> str:
    """Return a valid navguard config.yaml as a string."""
    return """\
base_url: "https://app.example.test/"
browser: Firefox
headless: false
viewport:
  width: 1280
  height: 720
destinations_file: catalog.yaml
evidence_dir: shots
text_scan_limit: 25
timeouts:
  default: 20
  poll_interval: 0.1
  interaction: 5
  navigation: 12
  stability_window: 0.3
"""
