from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

import typer

from cadence.config import settings
from cadence.data.loader import load_series
from cadence.exceptions import DataSourceError, InvalidInputError
from cadence.services.analytics import HabitAnalytics
from cadence.services.exporter import HeatmapExporter

cli = typer.Typer(help="Cadence CLI (habit analytics over snapshot files)")


def _emit(payload: Any) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


def _day(value: Optional[datetime]) -> Optional[date]:
    return value.date() if value else None


def _fail(exc: Exception) -> typer.Exit:
    typer.echo(f"Error: {exc}", err=True)
    return typer.Exit(code=2)


@cli.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level")) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.logging.level.upper(), logging.INFO)
    logging.basicConfig(level=level)


@cli.command()
def version() -> None:
    """Print runtime version."""
    typer.echo(f"Cadence {settings.app.version}")


@cli.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host to bind"),
    port: int = typer.Option(8000, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable autoreload for local development"),
) -> None:
    """Run the Cadence API server."""
    import uvicorn

    uvicorn.run(
        "cadence.api.main:app",
        host=host,
        port=port,
        reload=reload,
        app_dir="src",
    )


@cli.command()
def heatmap(
    file: Path = typer.Argument(..., help="Snapshot file (json, yaml or csv)"),
    year: int = typer.Option(date.today().year, help="Calendar year to aggregate"),
    habit: Optional[str] = typer.Option(None, help="Restrict to a single series id"),
    include_inactive: bool = typer.Option(False, help="Include inactive series"),
    days: bool = typer.Option(False, help="Include every aggregated day in the output"),
    export: Optional[Path] = typer.Option(None, help="Write the heatmap to .xlsx or .csv"),
) -> None:
    """Aggregate habits onto a yearly calendar."""
    try:
        snapshot = load_series(file)
        report = HabitAnalytics().heatmap(
            snapshot.completion, year, habit_id=habit, include_inactive=include_inactive
        )
        exported = HeatmapExporter().export(report, export) if export else None
    except (InvalidInputError, DataSourceError) as e:
        raise _fail(e)

    payload = {
        "year": report.year,
        "series_ids": report.series_ids,
        "empty_selection": report.empty_selection,
        "overall_completion_rate": round(report.overall_completion_rate, 2),
        "perfect_days": sum(1 for d in report.days if d.total_count and d.completed_count == d.total_count),
    }
    if days:
        payload["days"] = [asdict(d) for d in report.days]
    if exported:
        payload["exported"] = str(exported)
    _emit(payload)


@cli.command()
def streaks(
    file: Path = typer.Argument(..., help="Snapshot file (json, yaml or csv)"),
    as_of: Optional[datetime] = typer.Option(None, formats=["%Y-%m-%d"], help="Reference day (default: today)"),
    include_inactive: bool = typer.Option(False, help="Include inactive series"),
) -> None:
    """Current and longest streak per habit."""
    try:
        snapshot = load_series(file)
        results = HabitAnalytics().streaks(snapshot.completion, as_of=_day(as_of), include_inactive=include_inactive)
    except (InvalidInputError, DataSourceError) as e:
        raise _fail(e)
    _emit([asdict(r) for r in results])


@cli.command()
def weekly(
    file: Path = typer.Argument(..., help="Snapshot file (json, yaml or csv)"),
    as_of: Optional[datetime] = typer.Option(None, formats=["%Y-%m-%d"], help="Day inside the week (default: today)"),
) -> None:
    """Completion per habit for the week containing the reference day."""
    try:
        snapshot = load_series(file)
        stats = HabitAnalytics().weekly_completion(snapshot.completion, as_of=_day(as_of))
    except (InvalidInputError, DataSourceError) as e:
        raise _fail(e)
    _emit(asdict(stats))


@cli.command()
def compare(
    file: Path = typer.Argument(..., help="Snapshot file (json, yaml or csv)"),
    weeks: Optional[int] = typer.Option(None, help="Number of weeks to compare (default from settings)"),
    offset: int = typer.Option(0, help="Move the newest week back this many weeks"),
    as_of: Optional[datetime] = typer.Option(None, formats=["%Y-%m-%d"], help="Day inside the newest week (default: today)"),
) -> None:
    """Completed days per habit across consecutive weeks."""
    try:
        snapshot = load_series(file)
        comparison = HabitAnalytics().weekly_comparison(
            snapshot.completion, weeks=weeks, week_offset=offset, as_of=_day(as_of)
        )
    except (InvalidInputError, DataSourceError) as e:
        raise _fail(e)
    _emit(asdict(comparison))


@cli.command()
def performance(
    file: Path = typer.Argument(..., help="Snapshot file (json, yaml or csv)"),
    start: datetime = typer.Option(..., formats=["%Y-%m-%d"], help="First day of the range"),
    end: datetime = typer.Option(..., formats=["%Y-%m-%d"], help="Last day of the range"),
    as_of: Optional[datetime] = typer.Option(None, formats=["%Y-%m-%d"], help="Reference day for streaks (default: today)"),
    days: bool = typer.Option(False, help="Include the daily completion trend"),
) -> None:
    """Completion rate per habit over a date range."""
    try:
        snapshot = load_series(file)
        report = HabitAnalytics().performance(snapshot.completion, start.date(), end.date(), as_of=_day(as_of))
    except (InvalidInputError, DataSourceError) as e:
        raise _fail(e)

    payload = asdict(report)
    if days:
        payload["daily"] = [
            {"date": d.date, "completed": d.completed_count, "total": d.total_count, "rate": d.completion_rate}
            for d in report.daily
        ]
    else:
        payload.pop("daily")
    _emit(payload)


@cli.command()
def trends(
    file: Path = typer.Argument(..., help="Snapshot file (json, yaml or csv)"),
    recent: Optional[int] = typer.Option(None, help="Recent window size in records"),
    prior: Optional[int] = typer.Option(None, help="Prior window size in records"),
    as_of: Optional[datetime] = typer.Option(None, formats=["%Y-%m-%d"], help="Ignore records after this day"),
    points: bool = typer.Option(False, help="Attach the latest chart points to each result"),
) -> None:
    """Reduction progress per habit to reduce."""
    try:
        snapshot = load_series(file)
        analytics = HabitAnalytics()
        results = analytics.trends(
            snapshot.count, recent_window_days=recent, prior_window_days=prior, as_of=_day(as_of)
        )
        lines = analytics.trend_lines(snapshot.count, as_of=_day(as_of)) if points else {}
    except (InvalidInputError, DataSourceError) as e:
        raise _fail(e)

    payload = [asdict(r) for r in results]
    if points:
        for entry in payload:
            entry["points"] = [asdict(p) for p in lines[entry["series_id"]]]
    _emit(payload)


@cli.command()
def impact(
    file: Path = typer.Argument(..., help="Snapshot file (json, yaml or csv)"),
    window: Optional[int] = typer.Option(None, help="Trailing window in days"),
    cost: Optional[float] = typer.Option(None, help="Per-unit cost applied to every series"),
    as_of: Optional[datetime] = typer.Option(None, formats=["%Y-%m-%d"], help="Window end day (default: today)"),
) -> None:
    """Monthly and yearly cost projection per habit to reduce."""
    try:
        snapshot = load_series(file)
        costs = {s.id: cost for s in snapshot.count} if cost is not None else None
        overview = HabitAnalytics().reduction_overview(
            snapshot.count, costs=costs, window_days=window, as_of=_day(as_of)
        )
    except (InvalidInputError, DataSourceError) as e:
        raise _fail(e)
    _emit(asdict(overview))


if __name__ == "__main__":
    cli()
