"""navguard check: Open catalog destinations in a real browser and verify each.

For every requested destination the check navigates (by menu click or by
direct path), waits for readiness, runs the tiered verifier and records
which evidence confirmed it.  Failures get a full-page screenshot in the
evidence directory.  A markdown report is written at the end.

Exit codes: 0 all confirmed, 1 any destination failed, 2 configuration
error, 3 browser/infrastructure error.
"""

from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from navguard.cli.validate import load_config, project_dir_option
from navguard.config import NavGuardConfig, NavGuardConfigError
from navguard.engine.interaction import InteractionExecutor
from navguard.engine.navigation import NavigationVerifier
from navguard.engine.protocols import BrowserSession
from navguard.engine.readiness import ReadinessDetector
from navguard.engine.report_generator import CheckRun, DestinationReport, ReportGenerator
from navguard.engine.waiter import ConditionWaiter
from navguard.pages.catalog import DestinationCatalog
from navguard.pages.menu import MenuNavigator, NavigationAttempt

console = Console(stderr=True)

logger = logging.getLogger("navguard.cli.check")

VIA_CHOICES = ("menu", "path")


def build_navigator(session: BrowserSession, config: NavGuardConfig, catalog: DestinationCatalog) -> MenuNavigator:
    """Wire the synchronization core around one session."""
    waiter = ConditionWaiter(session, poll_interval=config.poll_interval)
    readiness = ReadinessDetector(session, config, waiter)
    executor = InteractionExecutor(session, config, waiter, readiness=readiness)
    verifier = NavigationVerifier(session, config, waiter)
    return MenuNavigator(session, catalog, config.base_url, executor, verifier, readiness, waiter)


def _failure_reason(attempt: NavigationAttempt) -> str | None:
    if attempt.succeeded:
        return None
    if attempt.outcome is not None and not attempt.outcome.succeeded:
        return attempt.outcome.detail or "interaction failed"
    if attempt.readiness is not None and not attempt.readiness.ok and attempt.readiness.error is not None:
        return f"not ready: {attempt.readiness.error.detail}"
    return attempt.result.detail or "not confirmed"


def run_checks(
    session: BrowserSession,
    config: NavGuardConfig,
    catalog: DestinationCatalog,
    names: list[str],
    via: str = "menu",
    evidence_dir: Path | None = None,
) -> list[DestinationReport]:
    """Check each destination in *names* in order on one session."""
    navigator = build_navigator(session, config, catalog)
    readiness = navigator.readiness

    if via == "menu":
        home = navigator.navigate_home()
        if not home.ok:
            logger.error("Home page not ready: %s", home.error)

    reports: list[DestinationReport] = []
    seen_errors = 0
    for name in names:
        start = time.monotonic()
        if via == "menu":
            attempt = navigator.navigate_via_menu(name, config.navigation_timeout)
        else:
            attempt = navigator.open(name, config.navigation_timeout)
        duration = time.monotonic() - start

        # A menu click keeps the page, so its error log is cumulative until
        # a full page load resets it.
        errors = readiness.http_errors()
        if len(errors) < seen_errors:
            seen_errors = 0
        new_errors = errors[seen_errors:] if attempt.via == "menu" else errors
        seen_errors = len(errors)

        screenshot = None
        if not attempt.succeeded and evidence_dir is not None and hasattr(session, "screenshot"):
            path = evidence_dir / f"{attempt.destination.name.lower().replace(' ', '-')}-failed.png"
            try:
                screenshot = str(session.screenshot(path))
            except Exception as exc:
                logger.warning("Screenshot failed for %s: %s", attempt.destination.name, exc)

        reports.append(
            DestinationReport(
                name=attempt.destination.name,
                via=attempt.via,
                passed=attempt.succeeded,
                duration_seconds=duration,
                tier=attempt.result.tier_satisfied.value,
                url=session.current_url(),
                strategy=attempt.outcome.strategy_used.value
                if attempt.outcome is not None and attempt.outcome.strategy_used is not None
                else None,
                error=_failure_reason(attempt),
                primary_text_mismatch=attempt.result.primary_text_mismatch,
                http_errors=list(new_errors),
                screenshot=screenshot,
            )
        )
        logger.info("%s: %s (%s)", attempt.destination.name, "PASS" if attempt.succeeded else "FAIL", reports[-1].tier)
    return reports


def _print_results(reports: list[DestinationReport]) -> None:
    table = Table(title="Destinations", border_style="cyan")
    table.add_column("Destination", style="bold")
    table.add_column("Via")
    table.add_column("Result")
    table.add_column("Tier")
    table.add_column("Duration", justify="right")
    table.add_column("Notes")
    for r in reports:
        result = Text("PASS", style="green") if r.passed else Text("FAIL", style="bold red")
        notes = r.error or ""
        if r.strategy == "script_injected":
            notes = f"script click; {notes}" if notes else "script click"
        if len(notes) > 80:
            notes = notes[:77] + "..."
        table.add_row(r.name, r.via, result, r.tier, f"{r.duration_seconds:.1f}s", notes)
    console.print(table)


def check(
    destinations: Optional[list[str]] = typer.Argument(
        None,
        help="Destinations to check (name, menu label or alias). Default: every destination in the catalog.",
    ),
    via: str = typer.Option(
        "menu",
        "--via",
        help="How to reach each destination: menu or path.",
    ),
    headless: Optional[bool] = typer.Option(
        None,
        "--headless/--headed",
        help="Override the headless setting from config.yaml.",
    ),
    report: Optional[Path] = typer.Option(
        None,
        "--report",
        "-r",
        help="Where to write the markdown report. Default: <evidence_dir>/<run-id>/report.md.",
    ),
    dir: Optional[Path] = typer.Option(
        None,
        "--dir",
        "-d",
        help="navguard project directory. Defaults to auto-detected .navguard/ from cwd.",
    ),
) -> None:
    """Open destinations in a browser and verify each one loaded.

    \b
    Examples:
      navguard check
      navguard check Actions Portfolio --via path
      navguard check Actions --headed
    """
    if via not in VIA_CHOICES:
        console.print(
            Panel(
                f"[red]Invalid --via:[/red] {via}\n\nValid values: {', '.join(VIA_CHOICES)}",
                title="[red]Config Error[/red]",
                border_style="red",
            )
        )
        raise typer.Exit(code=2)

    project_dir = project_dir_option(dir)
    try:
        config = load_config(project_dir)
        if headless is not None:
            config.headless = headless
        if not config.base_url:
            raise NavGuardConfigError("No base_url configured.\n\nTo fix: set base_url in config.yaml or NAVGUARD_BASE_URL")
        catalog = DestinationCatalog.from_file(config.destinations_file)
        names = list(destinations) if destinations else catalog.names
        for name in names:
            catalog.resolve(name)
    except NavGuardConfigError as exc:
        console.print(Panel(f"[red]{exc}[/red]", title="[red]Config Error[/red]", border_style="red"))
        raise typer.Exit(code=2)

    run_id = f"NG-{datetime.now(timezone.utc).strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:6]}"
    run_dir = config.evidence_dir / run_id

    console.print()
    console.print(
        Panel(
            f"[bold]Base URL:[/bold]  {config.base_url}\n"
            f"[bold]Browser:[/bold]   {config.browser} ({'headless' if config.headless else 'headed'})\n"
            f"[bold]Via:[/bold]       {via}\n"
            f"[bold]Checking:[/bold]  {', '.join(names)}",
            title=f"[bold cyan]navguard check {run_id}[/bold cyan]",
            border_style="cyan",
        )
    )

    from navguard.engine.session import launch_session

    start_time = datetime.now(timezone.utc)
    started = time.monotonic()
    try:
        with launch_session(config) as session:
            reports = run_checks(session, config, catalog, names, via, evidence_dir=run_dir)
    except KeyboardInterrupt:
        console.print("\n[yellow]Check interrupted by user.[/yellow]")
        raise typer.Exit(code=1)
    except Exception as exc:
        logger.exception("Browser session failed")
        console.print(
            Panel(
                f"[red]Browser session failed:[/red] {exc}\n\n"
                "Is Playwright installed? Try: [bold]playwright install chromium[/bold]\n"
                "Run with [bold]--verbose[/bold] for full traceback.",
                title="[red]Infrastructure Error[/red]",
                border_style="red",
            )
        )
        raise typer.Exit(code=3)

    run = CheckRun(
        run_id=run_id,
        base_url=config.base_url,
        browser=config.browser,
        headless=config.headless,
        start_time=start_time.isoformat(),
        end_time=datetime.now(timezone.utc).isoformat(),
        duration_seconds=time.monotonic() - started,
        destinations=reports,
    )

    _print_results(reports)

    report_path = report or run_dir / "report.md"
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(ReportGenerator().generate(run), encoding="utf-8")
    console.print(f"[dim]Report written to: {report_path}[/dim]")

    passed = sum(1 for r in reports if r.passed)
    if run.passed:
        console.print(Panel(f"[bold green]All {passed} destination(s) confirmed.[/bold green]", border_style="green"))
    else:
        console.print(
            Panel(
                f"[bold red]{len(reports) - passed} of {len(reports)} destination(s) failed.[/bold red]",
                border_style="red",
            )
        )
        raise typer.Exit(code=1)
