"""navguard validate: Check the destination catalog without launching a browser.

Parses ``destinations.yaml`` and reports errors, warnings and hints.  Use
this to catch catalog mistakes (a destination with neither a URL segment
nor a primary indicator, duplicate names) before a real check run.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
import yaml
from rich.console import Console
from rich.panel import Panel

from navguard.config import NavGuardConfig, NavGuardConfigError
from navguard.pages.catalog import validate_catalog

console = Console(stderr=True)

_SEVERITY_ORDER = {"error": 0, "warning": 1, "info": 2}


def resolve_project_dir() -> Path:
    """Find the .navguard/ project directory, searching upward from cwd."""
    current = Path.cwd()
    for parent in (current, *current.parents):
        candidate = parent / ".navguard"
        if candidate.is_dir():
            return candidate
    return current / ".navguard"


def project_dir_option(dir: Path | None) -> Path:
    if dir is None:
        return resolve_project_dir()
    project_dir = dir.resolve()
    if project_dir.name != ".navguard":
        project_dir = project_dir / ".navguard"
    return project_dir


def load_config(project_dir: Path) -> NavGuardConfig:
    """Load config.yaml if present, else defaults rooted at *project_dir*."""
    config_path = project_dir / "config.yaml"
    if config_path.is_file():
        return NavGuardConfig.from_file(config_path)
    config = NavGuardConfig._from_dict({}, project_dir)
    config.apply_env_overrides()
    return config


def validate(
    dir: Path | None = typer.Option(
        None,
        "--dir",
        "-d",
        help="navguard project directory. Defaults to auto-detected .navguard/ from cwd.",
    ),
    catalog: Path | None = typer.Option(
        None,
        "--catalog",
        "-c",
        help="Destination catalog to validate. Defaults to destinations_file from config.yaml.",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit 1 on warnings as well as errors (default: exit 1 on errors only).",
    ),
) -> None:
    """Validate config.yaml and the destination catalog.

    \b
    Examples:
      navguard validate
      navguard validate --strict
      navguard validate -c staging-destinations.yaml
    """
    project_dir = project_dir_option(dir)
    if not project_dir.is_dir():
        console.print(
            Panel(
                f"[red]Project not initialized.[/red]\n\n"
                f"Looked for .navguard/ in: {project_dir.parent}\n\n"
                "Fix: [bold]navguard init[/bold]",
                title="[red]Not Initialized[/red]",
                border_style="red",
            )
        )
        raise typer.Exit(code=2)

    try:
        config = load_config(project_dir)
    except NavGuardConfigError as exc:
        console.print(Panel(f"[red]{exc}[/red]", title="[red]Config Error[/red]", border_style="red"))
        raise typer.Exit(code=2)

    path = catalog.resolve() if catalog is not None else config.destinations_file
    if not path.is_file():
        console.print(
            Panel(
                f"[yellow]No destination catalog found.[/yellow]\n\n"
                f"Looked for: {path}\n\n"
                "Run [bold]navguard init[/bold] to scaffold a sample.",
                title="No Catalog",
                border_style="yellow",
            )
        )
        raise typer.Exit(code=2)

    try:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
        issues = validate_catalog(data)
    except yaml.YAMLError as exc:
        issues = [{"severity": "error", "field": "yaml_syntax", "message": f"YAML parse error: {exc}"}]

    if not config.base_url:
        issues.append(
            {
                "severity": "warning",
                "field": "config.base_url",
                "message": "No base_url set. Set it in config.yaml or NAVGUARD_BASE_URL",
            }
        )

    _print_file_result(path, issues, project_dir)

    errors = sum(1 for i in issues if i["severity"] == "error")
    warnings = sum(1 for i in issues if i["severity"] == "warning")

    console.print()
    if errors == 0 and warnings == 0:
        console.print(Panel("[bold green]Catalog valid. No errors or warnings.[/bold green]", border_style="green"))
    elif errors > 0:
        console.print(
            Panel(
                f"[bold red]Validation failed.[/bold red]  {errors} error(s), {warnings} warning(s)\n\n"
                "Fix the errors above before running checks.",
                border_style="red",
            )
        )
        raise typer.Exit(code=1)
    elif strict:
        console.print(
            Panel(
                f"[bold yellow]Validation warnings found (--strict mode).[/bold yellow]  {warnings} warning(s)",
                border_style="yellow",
            )
        )
        raise typer.Exit(code=1)
    else:
        console.print(
            Panel(
                f"[yellow]Validation passed with {warnings} warning(s).[/yellow]  "
                "Use [bold]--strict[/bold] to fail on warnings.",
                border_style="yellow",
            )
        )


def _print_file_result(path: Path, issues: list[dict[str, Any]], project_dir: Path) -> None:
    try:
        display_path = path.relative_to(project_dir.parent)
    except ValueError:
        display_path = path

    if not issues:
        console.print(f"  [green]✓[/green] [dim]{display_path}[/dim]  [green]OK[/green]")
        return

    errors = [i for i in issues if i["severity"] == "error"]
    warnings = [i for i in issues if i["severity"] == "warning"]
    if errors:
        status = f"[bold red]{len(errors)} error(s)[/bold red]"
        if warnings:
            status += f", [yellow]{len(warnings)} warning(s)[/yellow]"
        console.print(f"  [red]✗[/red] [bold]{display_path}[/bold]  {status}")
    else:
        console.print(f"  [yellow]![/yellow] [dim]{display_path}[/dim]  [yellow]{len(warnings)} warning(s)[/yellow]")

    for issue in sorted(issues, key=lambda i: _SEVERITY_ORDER.get(i["severity"], 99)):
        sev_label = {
            "error": "[bold red]ERROR[/bold red]",
            "warning": "[yellow]WARN[/yellow]",
            "info": "[dim]INFO[/dim]",
        }.get(issue["severity"], issue["severity"])
        field = issue.get("field", "")
        field_str = f"[dim] ({field})[/dim]" if field else ""
        console.print(f"      {sev_label}{field_str}  {issue['message']}")
