"""navguard init: Initialize a .navguard/ project directory.

Creates the config template, a sample destination catalog and the
evidence directory that ``navguard check`` writes screenshots into.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.tree import Tree

console = Console()

_SAMPLE_CONFIG = """\
# navguard project configuration
# NAVGUARD_BASE_URL, NAVGUARD_BROWSER and NAVGUARD_HEADLESS override these values.

base_url: "http://localhost:3000"

# chromium, firefox or webkit
browser: chromium
headless: true

viewport:
  width: 1920
  height: 1080

destinations_file: destinations.yaml
evidence_dir: evidence

# Seconds
timeouts:
  default: 30
  poll_interval: 0.25
  page_load: 30
  interaction: 10
  navigation: 15
  response: 15
  stability_window: 0.5
  quiet_cap: 5
"""

_SAMPLE_DESTINATIONS = """\
home_path: /

menu:
  container: "#main-menu"
  link_template: "//a[@data-tooltip-content='{label}']"

destinations:
  - name: Dashboard
    path: /dashboard
    menu_label: Dashboard
    verify:
      url_path_segment: /dashboard
      primary: "//h1[contains(text(), 'Dashboard')]"
      expected_text: Dashboard
      alternatives:
        - ".dashboard-container"
      keywords: [Dashboard, Overview]

  - name: Settings
    path: /settings
    aliases: [Preferences]
    verify:
      url_path_segment: /settings
      primary: "h1"
      expected_text: Settings
"""


def init(
    dir: Path = typer.Option(
        Path("."),
        "--dir",
        "-d",
        help="Parent directory for .navguard/ project. Defaults to current directory.",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing .navguard/ directory.",
    ),
) -> None:
    """Initialize a new navguard project directory.

    Creates .navguard/ with config.yaml, destinations.yaml and evidence/.
    """
    project_dir = dir.resolve() / ".navguard"

    if project_dir.exists() and not force:
        console.print(
            Panel(
                f"[yellow]Directory already exists:[/yellow] {project_dir}\n\nUse [bold]--force[/bold] to overwrite.",
                title="Already Initialized",
                border_style="yellow",
            )
        )
        raise typer.Exit(code=2)

    (project_dir / "evidence").mkdir(parents=True, exist_ok=True)
    (project_dir / "config.yaml").write_text(_SAMPLE_CONFIG, encoding="utf-8")
    (project_dir / "destinations.yaml").write_text(_SAMPLE_DESTINATIONS, encoding="utf-8")

    tree = Tree(f"[bold green]{project_dir}[/bold green]", guide_style="dim")
    tree.add("[cyan]config.yaml[/cyan]")
    tree.add("[cyan]destinations.yaml[/cyan]")
    tree.add("[blue]evidence/[/blue]")

    console.print()
    console.print(
        Panel(
            tree,
            title="[bold green]navguard Initialized[/bold green]",
            border_style="green",
        )
    )
    console.print()
    console.print("[dim]Next steps:[/dim]")
    console.print("  1. Set [cyan]base_url[/cyan] in [cyan].navguard/config.yaml[/cyan]")
    console.print("  2. Describe your screens in [cyan].navguard/destinations.yaml[/cyan]")
    console.print("  3. Run [bold]playwright install chromium[/bold] once")
    console.print()
    console.print("  Run: [bold]navguard check[/bold]")
    console.print()
