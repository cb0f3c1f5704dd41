from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import (
    render_bin_stats,
    render_daily,
    render_rankings,
    render_reading,
    render_readings,
    render_score,
)
from models.records import WasteTag


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for recording and inspecting waste-bin readings.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Binlytics API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("submit")
def submit_command(
    ctx: typer.Context,
    bin_id: str = typer.Argument(..., help="Identifier of the bin, e.g. BIN-001."),
    weight: float = typer.Option(..., "--weight", "-w", min=0, help="Weight in kilograms."),
    moisture: int = typer.Option(..., "--moisture", "-m", min=0, help="Raw moisture sensor value."),
    tag: WasteTag = typer.Option(WasteTag.organic, "--tag", "-t", help="Waste category."),
) -> None:
    """Record a new waste reading."""
    state = _get_state(ctx)
    payload = state.client.submit_reading(bin_id, weight, moisture, tag.value)
    typer.secho(f"Reading recorded. id={payload.get('id')}", fg=typer.colors.GREEN)
    render_reading(payload)


@app.command("recent")
def recent_command(ctx: typer.Context) -> None:
    """Show the most recent readings, newest first."""
    render_readings(_get_state(ctx).client.recent())


@app.command("daily")
def daily_command(
    ctx: typer.Context,
    days: Optional[int] = typer.Option(None, "--days", "-d", help="Window length (default 7, max 30)."),
) -> None:
    """Show per-day totals for the trailing window."""
    render_daily(_get_state(ctx).client.daily(days))


@app.command("stats")
def stats_command(
    ctx: typer.Context,
    days: Optional[int] = typer.Option(None, "--days", "-d", help="Window length (default 7)."),
) -> None:
    """Show per-bin statistics for the trailing window."""
    render_bin_stats(_get_state(ctx).client.bin_stats(days))


@app.command("score")
def score_command(
    ctx: typer.Context,
    bin_id: str = typer.Argument(..., help="Identifier of the bin to score."),
) -> None:
    """Fetch the segregation score of a bin."""
    render_score(_get_state(ctx).client.score(bin_id))


@app.command("top")
def top_command(ctx: typer.Context) -> None:
    """List the best and worst scoring bins."""
    render_rankings(_get_state(ctx).client.top())
