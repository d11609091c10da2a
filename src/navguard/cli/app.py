"""navguard CLI: Main Typer entry point.

Registers all subcommands and provides --version / --verbose global options.
"""

from __future__ import annotations

import typer
from rich.console import Console

from navguard import __version__

TAGLINE = "Know the page is ready. Prove you got where you meant to go."

console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print("navguard", style="bold cyan")
        console.print(f"  {TAGLINE}", style="dim")
        console.print(f"  v{__version__}\n", style="bold")
        raise typer.Exit()


app = typer.Typer(
    name="navguard",
    help=f"navguard\n{TAGLINE}",
    rich_markup_mode="rich",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show navguard version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
) -> None:
    """navguard -- readiness waits and navigation checks for browser tests."""
    if verbose:
        import logging

        logging.basicConfig(level=logging.DEBUG, format="%(name)s  %(message)s")


# ── Register subcommands ──────────────────────────────────────────────────

from navguard.cli.check import check  # noqa: E402
from navguard.cli.init_cmd import init  # noqa: E402
from navguard.cli.validate import validate  # noqa: E402

app.command(name="init", help="Initialize a .navguard/ project directory.")(init)
app.command(name="validate", help="Validate the destination catalog without a browser.")(validate)
app.command(name="check", help="Open destinations in a browser and verify each one loaded.")(check)
