"""Destination catalog: named screens and the evidence that proves each was reached.

The catalog is data, not code: a YAML file lists every destination with its
path, menu label, aliases and verification spec.  Locator strings starting
with ``//`` or ``xpath=`` are XPath; everything else is CSS.

Example::

    home_path: /tokens/top
    menu:
      container: "#main-menu"
      link_template: "//a[@data-tooltip-content='{label}']"
    destinations:
      - name: Actions
        path: /tasks
        menu_label: Actions
        aliases: [Tasks]
        verify:
          url_path_segment: /tasks
          primary: "//h1[contains(text(), 'Actions')]"
          expected_text: Actions
          alternatives: [".TasksPage_container__r7VvT", ".MainTasks_container__LNbdF"]
          keywords: [Actions]
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any

import yaml

from navguard.config import NavGuardConfigError
from navguard.engine.navigation import VerificationSpec
from navguard.engine.protocols import InvalidSpec, Locator

logger = logging.getLogger("navguard.pages.catalog")

DEFAULT_MENU_LINK_TEMPLATE = "//a[@data-tooltip-content='{label}']"
DEFAULT_MENU_CONTAINER = "#main-menu"


class CatalogError(NavGuardConfigError):
    """Raised when the destination catalog is missing, malformed or lacks a name."""


def parse_locator(value: str) -> Locator:
    value = value.strip()
    if value.startswith(("//", "(//", "xpath=")):
        return Locator.xpath(value)
    return Locator.css(value)


@dataclasses.dataclass(frozen=True)
class Destination:
    """A named screen of the application."""

    name: str
    path: str
    spec: VerificationSpec
    menu_label: str = ""
    aliases: tuple[str, ...] = ()

    def matches(self, name: str) -> bool:
        wanted = name.strip().casefold()
        return wanted in {n.casefold() for n in (self.name, self.menu_label, *self.aliases) if n}


class DestinationCatalog:
    """Lookup of destinations by name, menu label or alias."""

    def __init__(
        self,
        destinations: list[Destination],
        home_path: str = "/",
        menu_container: str = DEFAULT_MENU_CONTAINER,
        menu_link_template: str = DEFAULT_MENU_LINK_TEMPLATE,
    ) -> None:
        self._destinations = list(destinations)
        self.home_path = home_path
        self.menu_container = parse_locator(menu_container)
        self.menu_link_template = menu_link_template

    def __iter__(self):
        return iter(self._destinations)

    def __len__(self) -> int:
        return len(self._destinations)

    @property
    def names(self) -> list[str]:
        return [d.name for d in self._destinations]

    def resolve(self, name: str) -> Destination:
        for destination in self._destinations:
            if destination.matches(name):
                return destination
        raise CatalogError(
            f"Unknown destination: {name}\n\n"
            f"Known destinations: {', '.join(self.names) or '(none)'}\n"
            "To fix: add it to destinations.yaml"
        )

    def menu_locator(self, destination: Destination) -> Locator:
        label = destination.menu_label or destination.name
        return parse_locator(self.menu_link_template.format(label=label))

    @classmethod
    def from_file(cls, path: Path) -> DestinationCatalog:
        if not path.exists():
            raise CatalogError(f"Destination catalog not found: {path}\n\nTo fix: navguard init")
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DestinationCatalog:
        errors = [i for i in validate_catalog(data) if i["severity"] == "error"]
        if errors:
            details = "\n".join(f"  {i['field']}: {i['message']}" for i in errors)
            raise CatalogError(f"Invalid destination catalog:\n{details}\n\nTo fix: navguard validate")

        menu = data.get("menu") or {}
        destinations = [_destination_from_dict(entry) for entry in data.get("destinations", [])]
        logger.debug("Loaded %d destination(s)", len(destinations))
        return cls(
            destinations,
            home_path=data.get("home_path") or "/",
            menu_container=menu.get("container") or DEFAULT_MENU_CONTAINER,
            menu_link_template=menu.get("link_template") or DEFAULT_MENU_LINK_TEMPLATE,
        )


def _destination_from_dict(entry: dict[str, Any]) -> Destination:
    verify = entry.get("verify") or {}
    primary = verify.get("primary")
    spec = VerificationSpec(
        primary_locator=parse_locator(primary) if primary else None,
        expected_text=str(verify.get("expected_text") or ""),
        alternative_locators=tuple(parse_locator(a) for a in verify.get("alternatives") or []),
        url_path_segment=str(verify.get("url_path_segment") or ""),
        keywords=tuple(str(k) for k in verify.get("keywords") or []),
        name=entry["name"],
    )
    return Destination(
        name=entry["name"],
        path=entry.get("path") or "",
        spec=spec,
        menu_label=entry.get("menu_label") or "",
        aliases=tuple(entry.get("aliases") or []),
    )


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def validate_catalog(data: Any) -> list[dict[str, Any]]:
    """Check a parsed catalog without launching a browser.  Returns issue dicts."""
    issues: list[dict[str, Any]] = []

    if not isinstance(data, dict):
        issues.append({"severity": "error", "field": "root", "message": "Catalog must be a YAML mapping"})
        return issues

    entries = data.get("destinations")
    if not isinstance(entries, list) or not entries:
        issues.append({"severity": "error", "field": "destinations", "message": "No destinations defined"})
        return issues

    menu = data.get("menu") or {}
    if not isinstance(menu, dict):
        issues.append({"severity": "error", "field": "menu", "message": "menu must be a mapping"})
        menu = {}
    template = menu.get("link_template") or DEFAULT_MENU_LINK_TEMPLATE
    if not isinstance(template, str) or "{label}" not in template:
        issues.append(
            {"severity": "error", "field": "menu.link_template", "message": "link_template must contain {label}"}
        )

    seen: dict[str, str] = {}
    for i, entry in enumerate(entries):
        prefix = f"destinations[{i}]"
        if not isinstance(entry, dict):
            issues.append({"severity": "error", "field": prefix, "message": "Destination must be a mapping"})
            continue
        name = entry.get("name")
        if not name or not isinstance(name, str):
            issues.append({"severity": "error", "field": f"{prefix}.name", "message": "Missing required field: name"})
            continue
        aliases = entry.get("aliases") or []
        if not _is_string_list(aliases):
            issues.append(
                {"severity": "error", "field": f"{prefix}.aliases", "message": "aliases must be a list of strings"}
            )
            aliases = []
        for key in (name, entry.get("menu_label"), *aliases):
            if not key:
                continue
            folded = str(key).casefold()
            if folded in seen and seen[folded] != name:
                issues.append(
                    {
                        "severity": "error",
                        "field": f"{prefix}.name",
                        "message": f"'{key}' is already used by destination '{seen[folded]}'",
                    }
                )
            seen[folded] = name

        path = entry.get("path") or ""
        if not path:
            issues.append(
                {"severity": "warning", "field": f"{prefix}.path", "message": f"'{name}' has no path; menu-only"}
            )
        elif not str(path).startswith("/"):
            issues.append({"severity": "error", "field": f"{prefix}.path", "message": "path must start with '/'"})

        verify = entry.get("verify")
        if not isinstance(verify, dict):
            issues.append({"severity": "error", "field": f"{prefix}.verify", "message": "Missing verify mapping"})
            continue
        if not verify.get("url_path_segment") and not verify.get("primary"):
            issues.append(
                {
                    "severity": "error",
                    "field": f"{prefix}.verify",
                    "message": f"{InvalidSpec.__name__}: set url_path_segment or primary",
                }
            )
        if verify.get("primary") and not verify.get("expected_text"):
            issues.append(
                {
                    "severity": "info",
                    "field": f"{prefix}.verify.expected_text",
                    "message": "No expected_text; any visible primary element will match",
                }
            )
        for key in ("alternatives", "keywords"):
            if not _is_string_list(verify.get(key) or []):
                issues.append(
                    {
                        "severity": "error",
                        "field": f"{prefix}.verify.{key}",
                        "message": f"{key} must be a list of strings",
                    }
                )

    return issues
