"""navguard Report Generator: Markdown report for a destination check run.

Lists every destination checked, which evidence tier confirmed it, whether
the click needed the script fallback, and any HTTP error responses the page
instrumentation recorded while the check ran.
"""

from __future__ import annotations

import dataclasses
from typing import Any


@dataclasses.dataclass
class DestinationReport:
    """Outcome of checking a single destination."""

    name: str
    via: str  # menu, path
    passed: bool
    duration_seconds: float
    tier: str = "none"
    url: str = ""
    strategy: str | None = None  # native, script_injected
    error: str | None = None
    primary_text_mismatch: bool = False
    http_errors: list[dict[str, Any]] = dataclasses.field(default_factory=list)
    screenshot: str | None = None


@dataclasses.dataclass
class CheckRun:
    """Complete result of a ``navguard check`` run."""

    run_id: str
    base_url: str
    browser: str
    headless: bool
    start_time: str
    end_time: str
    duration_seconds: float
    destinations: list[DestinationReport]

    @property
    def passed(self) -> bool:
        return bool(self.destinations) and all(d.passed for d in self.destinations)


class ReportGenerator:
    """Generates markdown reports from check runs."""

    def generate(self, run: CheckRun) -> str:
        sections = [
            self._header(run),
            self._summary(run),
            self._results_table(run),
            self._weak_evidence(run),
            self._http_errors(run),
            self._screenshots(run),
        ]
        return "\n\n".join(s for s in sections if s)

    def _header(self, r: CheckRun) -> str:
        verdict = "PASS" if r.passed else "FAIL"
        return (
            f"# navguard Report\n"
            f"\n"
            f"**Run ID:** {r.run_id}\n"
            f"**Base URL:** {r.base_url}\n"
            f"**Browser:** {r.browser} ({'headless' if r.headless else 'headed'})\n"
            f"**Date:** {r.start_time}\n"
            f"**Verdict:** {verdict}"
        )

    def _summary(self, r: CheckRun) -> str:
        passed = sum(1 for d in r.destinations if d.passed)
        fallbacks = sum(1 for d in r.destinations if d.strategy == "script_injected")
        return (
            f"## Summary\n"
            f"- Destinations: {passed}/{len(r.destinations)} confirmed\n"
            f"- Script-click fallbacks: {fallbacks}\n"
            f"- Duration: {r.duration_seconds:.1f}s"
        )

    def _results_table(self, r: CheckRun) -> str:
        lines = [
            "## Results",
            "| Destination | Via | Result | Tier | Duration | Notes |",
            "|-------------|-----|--------|------|----------|-------|",
        ]
        for d in r.destinations:
            result_str = "PASS" if d.passed else "FAIL"
            notes = d.error or ""
            if len(notes) > 80:
                notes = notes[:77] + "..."
            lines.append(f"| {d.name} | {d.via} | {result_str} | {d.tier} | {d.duration_seconds:.1f}s | {notes} |")
        return "\n".join(lines)

    def _weak_evidence(self, r: CheckRun) -> str:
        flagged = [
            d for d in r.destinations if d.passed and (d.tier not in ("url", "primary_element") or d.primary_text_mismatch)
        ]
        if not flagged:
            return ""
        lines = [
            "## Weak Evidence",
            "",
            "Confirmed by fallback tiers; indicator selectors may be stale.",
            "",
        ]
        for d in flagged:
            note = " (primary indicator found with unexpected text)" if d.primary_text_mismatch else ""
            lines.append(f"- **{d.name}**: {d.tier}{note}")
        return "\n".join(lines)

    def _http_errors(self, r: CheckRun) -> str:
        rows = [(d.name, e) for d in r.destinations for e in d.http_errors]
        if not rows:
            return "## HTTP Errors\n\nNo HTTP error responses recorded."
        lines = [
            "## HTTP Errors",
            "| Destination | Status | URL |",
            "|-------------|--------|-----|",
        ]
        for name, err in rows:
            lines.append(f"| {name} | {err.get('status', '?')} | {err.get('url', '')} |")
        return "\n".join(lines)

    def _screenshots(self, r: CheckRun) -> str:
        shots = [(d.name, d.screenshot) for d in r.destinations if d.screenshot]
        if not shots:
            return ""
        lines = ["## Screenshots", ""]
        for name, path in shots:
            lines.append(f"- **{name}**: `{path}`")
        return "\n".join(lines)
