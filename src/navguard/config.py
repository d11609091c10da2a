"""navguard configuration management."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from navguard.models import (
    DEFAULT_BROWSER,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_QUIET_CAP,
    DEFAULT_STABILITY_WINDOW,
    DEFAULT_TIMEOUT,
    DEFAULT_VIEWPORT,
    INTERACTION_TIMEOUT,
    NAVIGATION_TIMEOUT,
    PAGE_LOAD_TIMEOUT,
    RESPONSE_TIMEOUT,
    SUPPORTED_BROWSERS,
    TEXT_SCAN_LIMIT,
)

logger = logging.getLogger("navguard.config")

# YAML key under ``timeouts:`` -> config attribute
_TIMEOUT_KEYS = {
    "default": "default_timeout",
    "poll_interval": "poll_interval",
    "page_load": "page_load_timeout",
    "interaction": "interaction_timeout",
    "navigation": "navigation_timeout",
    "response": "response_timeout",
    "stability_window": "stability_window",
    "quiet_cap": "quiet_cap",
}

_TRUTHY = ("1", "true", "yes", "on")


class NavGuardConfigError(Exception):
    """Raised when configuration is invalid or missing."""

    pass


@dataclass
class NavGuardConfig:
    """Configuration for a navguard session.

    Read once when a browser session is set up; waits never re-read it.
    """

    base_url: str = ""
    browser: str = DEFAULT_BROWSER
    headless: bool = True
    viewport: tuple[int, int] = DEFAULT_VIEWPORT

    # Paths
    project_dir: Path = field(default_factory=lambda: Path(".navguard"))
    destinations_file: Path = field(default_factory=lambda: Path(".navguard/destinations.yaml"))
    evidence_dir: Path = field(default_factory=lambda: Path(".navguard/evidence"))

    # Timeouts (seconds)
    default_timeout: float = DEFAULT_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    page_load_timeout: float = PAGE_LOAD_TIMEOUT
    interaction_timeout: float = INTERACTION_TIMEOUT
    navigation_timeout: float = NAVIGATION_TIMEOUT
    response_timeout: float = RESPONSE_TIMEOUT
    stability_window: float = DEFAULT_STABILITY_WINDOW
    quiet_cap: float = DEFAULT_QUIET_CAP

    text_scan_limit: int = TEXT_SCAN_LIMIT

    @classmethod
    def from_file(cls, config_path: Path) -> NavGuardConfig:
        """Load config from a YAML file, then apply environment overrides."""
        if not config_path.exists():
            raise NavGuardConfigError(f"Config file not found: {config_path}\n\nTo fix: navguard init")
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise NavGuardConfigError(f"Config file must be a YAML mapping: {config_path}")
        config = cls._from_dict(data, config_path.parent)
        config.apply_env_overrides()
        return config

    @classmethod
    def _from_dict(cls, data: dict[str, Any], project_dir: Path) -> NavGuardConfig:
        """Create config from a dictionary."""
        config = cls()
        config.project_dir = project_dir
        config.destinations_file = project_dir / data.get("destinations_file", "destinations.yaml")
        config.evidence_dir = project_dir / data.get("evidence_dir", "evidence")

        if "base_url" in data:
            config.base_url = str(data["base_url"]).rstrip("/")
        if "browser" in data:
            config.browser = str(data["browser"]).lower()
        if "headless" in data:
            config.headless = bool(data["headless"])
        if "viewport" in data:
            vp = data["viewport"]
            if isinstance(vp, dict):
                config.viewport = (vp.get("width", DEFAULT_VIEWPORT[0]), vp.get("height", DEFAULT_VIEWPORT[1]))
        if "text_scan_limit" in data:
            config.text_scan_limit = int(data["text_scan_limit"])

        timeouts = data.get("timeouts", {})
        if isinstance(timeouts, dict):
            for key, attr in _TIMEOUT_KEYS.items():
                if key in timeouts:
                    try:
                        setattr(config, attr, float(timeouts[key]))
                    except (TypeError, ValueError):
                        raise NavGuardConfigError(
                            f"timeouts.{key} must be a number, got: {timeouts[key]!r}"
                        ) from None

        config.validate()
        return config

    def apply_env_overrides(self) -> None:
        """Override file values with NAVGUARD_* environment variables."""
        if base_url := os.environ.get("NAVGUARD_BASE_URL"):
            logger.debug("Overriding base_url from environment")
            self.base_url = base_url.rstrip("/")
        if browser := os.environ.get("NAVGUARD_BROWSER"):
            self.browser = browser.lower()
        if headless := os.environ.get("NAVGUARD_HEADLESS"):
            self.headless = headless.strip().lower() in _TRUTHY
        self.validate()

    def validate(self) -> None:
        if self.browser not in SUPPORTED_BROWSERS:
            raise NavGuardConfigError(
                f"Unsupported browser: {self.browser}\n\n"
                f"To fix: set browser to one of {', '.join(SUPPORTED_BROWSERS)}"
            )
        for attr in _TIMEOUT_KEYS.values():
            if getattr(self, attr) < 0:
                raise NavGuardConfigError(f"{attr} must not be negative")
        if self.poll_interval <= 0:
            raise NavGuardConfigError("poll_interval must be positive")
