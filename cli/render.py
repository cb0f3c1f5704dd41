from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _fmt(value: Any, digits: int = 2) -> str:
    if isinstance(value, float):
        return f"{value:.{digits}f}"
    return "-" if value is None else str(value)


def echo_table(columns: Sequence[str], rows: Iterable[Dict[str, Any]]) -> None:
    """Print ``rows`` as left-aligned columns keyed by their wire names."""
    cells = [[_fmt(row.get(column)) for column in columns] for row in rows]
    widths = [
        max([len(column)] + [len(line[index]) for line in cells])
        for index, column in enumerate(columns)
    ]
    typer.echo("  ".join(column.ljust(width) for column, width in zip(columns, widths)))
    for line in cells:
        typer.echo("  ".join(cell.ljust(width) for cell, width in zip(line, widths)))


def render_reading(payload: Dict[str, Any]) -> None:
    echo_heading("Reading")
    echo_key_values(
        (key, payload.get(key))
        for key in ("id", "binId", "weightKg", "moistureRaw", "wasteTag", "timestamp")
    )


def render_readings(readings: List[Dict[str, Any]]) -> None:
    echo_heading("Recent Readings")
    if not readings:
        typer.echo("No readings recorded.")
        return
    echo_table(("binId", "weightKg", "moistureRaw", "wasteTag", "timestamp"), readings)


def render_daily(buckets: List[Dict[str, Any]]) -> None:
    echo_heading("Daily Totals")
    if not buckets:
        typer.echo("No readings in the selected window.")
        return
    echo_table(("date", "totalKg", "avgMoisture", "count"), buckets)


def render_bin_stats(stats: List[Dict[str, Any]]) -> None:
    echo_heading("Bin Statistics")
    if not stats:
        typer.echo("No readings in the selected window.")
        return
    echo_table(("binId", "totalKg", "avgWeight", "avgMoisture", "entries"), stats)


def render_score(payload: Dict[str, Any]) -> None:
    echo_heading(f"Segregation Score: {payload.get('score')} / 100")
    echo_key_values(
        [
            ("binId", payload.get("binId")),
            ("totalKg", _fmt(payload.get("totalKg"))),
            ("avgWeight", _fmt(payload.get("avgWeight"))),
            ("avgMoisture", _fmt(payload.get("avgMoisture"))),
            ("entries", payload.get("entries")),
        ]
    )


def render_rankings(payload: Dict[str, Any]) -> None:
    for title, key in (("Top Performers", "performers"), ("Top Offenders", "offenders")):
        echo_heading(title)
        bins = payload.get(key) or []
        if bins:
            echo_table(("binId", "score", "entries"), bins)
        else:
            typer.echo("No data available.")
        typer.echo()
