"""HorizonFetch CLI.

Commands:
    horizonfetch parse  — Extract vectors from a saved Horizons response (exit 0/1)
    horizonfetch fetch  — Fetch the (year × body) grid and emit the dataset

Diagnostics go to stderr; stdout carries only the emitted dataset.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from horizonfetch.config import settings
from horizonfetch.errors import ConfigurationError
from horizonfetch.utils import setup_logging

# Initialize logging on import
setup_logging()

app = typer.Typer(
    name="horizonfetch",
    help="🪐 HorizonFetch — bounded-concurrency state vectors from JPL Horizons",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console(stderr=True)


def _fmt_vec(v: tuple[float, float, float]) -> str:
    return ", ".join(f"{x:.6e}" for x in v)


# ── horizonfetch parse ────────────────────────────────────────


@app.command()
def parse(
    file: Path = typer.Argument(..., help="Saved Horizons text response"),
):
    """🔬 Parse a local Horizons response — exit 0 if both vectors are found."""
    from horizonfetch.fetch.extractor import extract_file

    console.print(f"[dim]Parsing data file: {file}[/]")
    vectors = extract_file(file)
    if vectors is None:
        console.print("[red]No complete position/velocity pair found.[/]")
        raise typer.Exit(1)

    position, velocity = vectors
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Vector", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Position [km]", _fmt_vec(position))
    table.add_row("Velocity [km/s]", _fmt_vec(velocity))
    console.print(table)


# ── horizonfetch fetch ────────────────────────────────────────


@app.command()
def fetch(
    year_min: Optional[int] = typer.Argument(None, help="First year (Jan 1st)"),
    year_max: Optional[int] = typer.Argument(None, help="Last year, inclusive"),
    body_count: Optional[int] = typer.Argument(None, help="Number of bodies from Mercury on"),
    barycenter: bool = typer.Option(False, "--barycenter", "-b", help="Use system barycenter ids"),
    output_format: str = typer.Option("c", "--format", "-f", help="Output format: c | json"),
    max_connections: Optional[int] = typer.Option(
        None, "--max-connections", "-n", help="Concurrency cap (default from settings)"
    ),
):
    """🛰 Fetch the state-vector grid and print it to stdout.

    Examples:
        horizonfetch fetch
        horizonfetch fetch 2020 2024 9
        horizonfetch fetch 2020 2020 5 --barycenter --format json
    """
    from horizonfetch.export.emitter import EMITTERS
    from horizonfetch.fetch.orchestrator import FetchOrchestrator, grid_ranges

    given = [v for v in (year_min, year_max, body_count) if v is not None]
    if given and len(given) != 3:
        console.print("[red]Give all of YEAR_MIN YEAR_MAX BODY_COUNT, or none of them.[/]")
        raise typer.Exit(1)
    if output_format not in EMITTERS:
        console.print(f"[red]Unknown format '{output_format}'. Use: {' | '.join(EMITTERS)}[/]")
        raise typer.Exit(1)

    if not given:
        year_min, year_max, body_count = settings.year_min, settings.year_max, settings.body_count

    try:
        years, bodies = grid_ranges(year_min, year_max, body_count)
        orchestrator = FetchOrchestrator(max_connections=max_connections)
        console.print(
            f"[dim]Requesting {len(years) * len(bodies)} data sets for {len(bodies)} bodies "
            f"[1..{bodies[-1]}] over {len(years)} years [{years[0]}..{years[-1]}], "
            f"barycenter {barycenter}[/]"
        )
        outcome = asyncio.run(orchestrator.run(years, bodies, use_barycenter=barycenter))
    except ConfigurationError as exc:
        console.print(f"[red]{exc}[/]")
        raise typer.Exit(1)

    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("Metric", style="cyan")
    summary.add_column("Value", style="white")
    summary.add_row("Requests", str(outcome.request_count))
    summary.add_row("Completed", str(outcome.completed))
    summary.add_row("With data", str(outcome.succeeded))
    summary.add_row("No data", f"[yellow]{outcome.no_data}[/]" if outcome.no_data else "0")
    summary.add_row("Errors", f"[red]{outcome.errors}[/]" if outcome.errors else "[green]0[/]")
    summary.add_row("Peak in flight", str(outcome.peak_in_flight))
    console.print(Panel(summary, title="[bold cyan]Horizons fetch[/]", border_style="cyan"))

    if not outcome.ok:
        console.print(f"[red]Errors: {outcome.errors} — dataset not emitted.[/]")
        raise typer.Exit(1)

    typer.echo(EMITTERS[output_format](outcome.grid), nl=False)


if __name__ == "__main__":
    app()
