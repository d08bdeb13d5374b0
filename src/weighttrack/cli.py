"""CLI interface using Typer."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from weighttrack.config import get_settings, reload_settings
from weighttrack.db import DatabaseConnection, get_db
from weighttrack.output import Envelope, emit, failure, ok
from weighttrack.tracking.chart import TimePeriod, build_chart, resolve_period
from weighttrack.tracking.goals import Goal, goal_guideline, goal_progress
from weighttrack.tracking.milestones import (
    milestone_message,
    milestone_target_weight,
    new_milestones,
    next_milestone,
)
from weighttrack.tracking.models import TrendDirection, TrendPeriod
from weighttrack.tracking.moving_average import MovingAverageType
from weighttrack.tracking.queries import GoalQueries, MilestoneQueries, StreakQueries, WeightQueries

app = typer.Typer(
    help="Personal weight tracking: daily averages, trends, streaks and milestones",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

weight_app = typer.Typer(help="Log, list and import weight entries")
goal_app = typer.Typer(help="Manage the target-weight goal")
summary_app = typer.Typer(help="Weekly and monthly summaries")
config_app = typer.Typer(help="Show or initialize configuration")

app.add_typer(weight_app, name="weight")
app.add_typer(goal_app, name="goal")
app.add_typer(summary_app, name="summary")
app.add_typer(config_app, name="config")

logger = logging.getLogger("weighttrack")

_DIRECTION_STYLE = {
    TrendDirection.DOWN: ("green", "Trending down"),
    TrendDirection.UP: ("red", "Trending up"),
    TrendDirection.STABLE: ("white", "Stable"),
}


# ============================================================================
# Helpers
# ============================================================================


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config.yaml"),
    today: Optional[str] = typer.Option(
        None, "--today", help="Reference date (YYYY-MM-DD, default: system date)"
    ),
) -> None:
    """Set up logging, settings and the reference date."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    if config is not None:
        reload_settings(config)
    try:
        ctx.obj = {"today": date.fromisoformat(today) if today else date.today()}
    except ValueError:
        err_console.print(f"[red]Invalid --today date: {today}[/red]")
        raise typer.Exit(1)


def _today(ctx: typer.Context) -> date:
    obj = ctx.obj or {}
    return obj.get("today") or date.today()


def _db() -> DatabaseConnection:
    db = get_db()
    logger.debug("Using database %s", db.db_path)
    db.ensure_schema()
    return db


def _user(user_id: Optional[int]) -> int:
    return user_id if user_id is not None else get_settings().defaults.user_id


def _unit() -> str:
    return get_settings().defaults.weight_unit


def _fail(
    json_output: bool, command: str, message: str, suggestions: Optional[list[str]] = None
) -> NoReturn:
    """Report an error in the requested format and exit with status 1."""
    if json_output:
        emit(failure(command, message, suggestions))
    else:
        console.print(f"[red]{message}[/red]")
        for suggestion in suggestions or []:
            console.print(f"  {suggestion}")
    raise typer.Exit(1)


def _parse_date(value: Optional[str], json_output: bool, command: str, default: date) -> date:
    if not value:
        return default
    try:
        return date.fromisoformat(value)
    except ValueError:
        _fail(json_output, command, f"Invalid date '{value}', expected YYYY-MM-DD")


def _signed(value: Optional[float], places: int = 1) -> str:
    if value is None:
        return "-"
    return f"{value:+.{places}f}"


def _load(user_id: int) -> list:
    with _db().get_connection() as conn:
        return WeightQueries.get_observations(conn, user_id)


def _emit_or_print(json_output: bool, envelope: Envelope) -> bool:
    """Emit JSON when requested. Returns True if output is done."""
    if json_output:
        emit(envelope)
        return True
    return False


# ============================================================================
# Weight entries
# ============================================================================


@weight_app.command("add")
def weight_add(
    ctx: typer.Context,
    weight: float = typer.Argument(..., help="Weight value"),
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
    memo: Optional[str] = typer.Option(None, "--memo", "-m", help="Optional note"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Log a weight entry. Several entries on one day are averaged."""
    today = _today(ctx)
    entry_date = _parse_date(date_str, json_output, "weight add", today)
    if entry_date > today:
        _fail(json_output, "weight add", "Cannot log weight for a future date")

    user = _user(user_id)
    try:
        with _db().get_connection() as conn:
            entry = WeightQueries.add_entry(conn, user, weight, entry_date, memo)
            same_day = WeightQueries.get_observations(conn, user, entry_date, entry_date)
    except ValueError as e:
        _fail(json_output, "weight add", str(e))

    summary = f"Logged {weight:.1f} {_unit()} on {entry_date}"
    if len(same_day) > 1:
        summary += f" ({len(same_day)} entries that day, averaged)"

    if _emit_or_print(json_output, ok("weight add", {"entry": entry.to_dict()}, summary)):
        return
    console.print(f"[green]{summary}[/green]")


@weight_app.command("list")
def weight_list(
    ctx: typer.Context,
    days: Optional[int] = typer.Option(None, "--days", help="Only the last N days"),
    raw: bool = typer.Option(False, "--raw", help="Show individual entries with IDs"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List weight history as daily averages (or raw entries)."""
    from weighttrack.tracking.bucketing import bucket, sort_points

    start = _today(ctx) - timedelta(days=days) if days else None
    with _db().get_connection() as conn:
        observations = WeightQueries.get_observations(conn, _user(user_id), start=start)

    if raw:
        if _emit_or_print(
            json_output,
            ok(
                "weight list",
                {"entries": [o.to_dict() for o in observations]},
                f"{len(observations)} entries",
            ),
        ):
            return
        table = Table(title="Weight Entries")
        table.add_column("ID", justify="right", style="dim")
        table.add_column("Date", style="cyan")
        table.add_column("Weight", justify="right")
        table.add_column("Memo")
        for obs in sorted(observations, key=lambda o: o.date, reverse=True):
            table.add_row(str(obs.id), obs.date.isoformat(), f"{obs.weight:.2f}", obs.memo or "")
        console.print(table)
        return

    points = sort_points(bucket(observations), descending=True)
    if _emit_or_print(
        json_output,
        ok(
            "weight list",
            {"days": [p.to_dict() | {"display_memo": p.display_memo} for p in points]},
            f"{len(points)} days logged",
        ),
    ):
        return

    if not points:
        console.print("No weight entries found")
        return

    table = Table(title="Weight History (daily averages)")
    table.add_column("Date", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Entries", justify="right")
    table.add_column("Memo")
    for point in points:
        marker = "*" if point.is_averaged else ""
        table.add_row(
            point.date.isoformat(),
            f"{point.display_weight:.1f}{marker}",
            str(point.source_count),
            point.display_memo or "",
        )
    console.print(table)


@weight_app.command("delete")
def weight_delete(
    entry_id: int = typer.Argument(..., help="Entry ID (see 'weight list --raw')"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Delete a weight entry."""
    with _db().get_connection() as conn:
        deleted = WeightQueries.delete_entry(conn, _user(user_id), entry_id)

    if not deleted:
        _fail(json_output, "weight delete", f"Entry {entry_id} not found")

    if _emit_or_print(
        json_output, ok("weight delete", {"entry_id": entry_id}, f"Deleted entry {entry_id}")
    ):
        return
    console.print(f"[green]Deleted entry {entry_id}[/green]")


@weight_app.command("import")
def weight_import(
    path: Path = typer.Argument(..., help="CSV file with date,weight[,memo,created_at]"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Import weight entries from a CSV file."""
    from weighttrack.data.csv_io import load_observations_csv

    user = _user(user_id)
    try:
        observations = load_observations_csv(path, user)
    except (FileNotFoundError, ValueError) as e:
        _fail(json_output, "weight import", str(e))

    with _db().get_connection() as conn:
        count = WeightQueries.add_entries(conn, observations)

    summary = f"Imported {count} entries from {path.name}"
    if _emit_or_print(json_output, ok("weight import", {"imported": count}, summary)):
        return
    console.print(f"[green]{summary}[/green]")


@weight_app.command("export")
def weight_export(
    path: Path = typer.Argument(..., help="Destination CSV file"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Export all weight entries to a CSV file."""
    from weighttrack.data.csv_io import export_observations_csv

    count = export_observations_csv(_load(_user(user_id)), path)
    summary = f"Exported {count} entries to {path}"
    if _emit_or_print(json_output, ok("weight export", {"exported": count}, summary)):
        return
    console.print(f"[green]{summary}[/green]")


# ============================================================================
# Chart and milestones
# ============================================================================


@app.command("chart")
def chart(
    ctx: typer.Context,
    period: Optional[TimePeriod] = typer.Option(None, "--period", "-p", help="Time window"),
    show_ma: Optional[bool] = typer.Option(
        None, "--ma/--no-ma", help="Include the moving average"
    ),
    window: Optional[int] = typer.Option(None, "--window", "-w", help="Moving average window"),
    ma_type: Optional[MovingAverageType] = typer.Option(
        None, "--ma-type", help="Moving average kind"
    ),
    fallback: Optional[bool] = typer.Option(
        None, "--fallback/--no-fallback", help="Widen an empty window to all time"
    ),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the chart series: daily weight, change, moving average, milestones."""
    from weighttrack.tracking.moving_average import create_weight_ma_config

    settings = get_settings()
    config = settings.chart.to_chart_config()
    if period is not None:
        config.period = period
    if show_ma is not None:
        config.show_moving_average = show_ma
    if ma_type is not None:
        config.moving_average_type = ma_type
    if window is not None:
        config.moving_average_window = create_weight_ma_config(window).window_size
    if fallback is not None:
        config.auto_fallback = fallback

    user = _user(user_id)
    with _db().get_connection() as conn:
        observations = WeightQueries.get_observations(conn, user)
        achieved = MilestoneQueries.get_achieved_thresholds(conn, user)

    # Recorded thresholds count from the all-time start, so they only apply
    # when the chart covers all time
    resolved = resolve_period(observations, config.period, _today(ctx), config.auto_fallback)
    data = build_chart(
        observations,
        config,
        _today(ctx),
        previously_achieved=achieved if resolved == TimePeriod.ALL else frozenset(),
        milestone_size=settings.analytics.milestone_size,
    )

    warnings = []
    if data.fell_back:
        warnings.append(f"No entries in the last {config.period.value}; showing all time")

    summary = f"{len(data.points)} days ({data.period.value})"
    if _emit_or_print(json_output, ok("chart", data.to_dict(), summary, warnings)):
        return

    for warning in warnings:
        console.print(f"[yellow]{warning}[/yellow]")
    if not data.points:
        console.print("No weight entries found")
        return

    unit = _unit()
    table = Table(title=f"Weight Trend ({data.period.value})")
    table.add_column("Date", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("%", justify="right")
    if config.show_moving_average:
        table.add_column("MA", justify="right", style="blue")
    table.add_column("Milestone")

    for point in data.points:
        milestone = ""
        if point.is_milestone:
            milestone = f"#{point.milestone_threshold}"
            if point.is_new_milestone:
                milestone = f"[bold green]{milestone} new[/bold green]"
        row = [
            point.date.isoformat(),
            f"{point.display_weight:.1f}",
            _signed(point.change),
            _signed(point.change_percent),
        ]
        if config.show_moving_average:
            row.append(f"{point.moving_average:.1f}" if point.moving_average is not None else "")
        row.append(milestone)
        table.add_row(*row)

    console.print(table)
    if data.total_weight_lost is not None:
        console.print(
            f"Start: {data.starting_weight:.1f} {unit}  "
            f"Current: {data.current_weight:.1f} {unit}  "
            f"Lost: {data.total_weight_lost:.1f} {unit}"
        )


@app.command("milestones")
def milestones(
    ctx: typer.Context,
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Detect and record newly reached milestones (every 3 units lost)."""
    from weighttrack.tracking.chart import ChartConfig

    settings = get_settings()
    size = settings.analytics.milestone_size
    user = _user(user_id)

    with _db().get_connection() as conn:
        observations = WeightQueries.get_observations(conn, user)
        achieved = MilestoneQueries.get_achieved_thresholds(conn, user)
        data = build_chart(
            observations,
            ChartConfig(period=TimePeriod.ALL, show_moving_average=False),
            _today(ctx),
            previously_achieved=achieved,
            milestone_size=size,
        )
        recorded = []
        if data.starting_weight is not None:
            for candidate in new_milestones(data.points, data.starting_weight):
                if MilestoneQueries.record_achievement(conn, user, candidate):
                    recorded.append(candidate)
        history = MilestoneQueries.list_achievements(conn, user)

    upcoming = None
    if data.starting_weight is not None and data.current_weight is not None:
        number = next_milestone(data.starting_weight, data.current_weight, size)
        upcoming = {
            "threshold": number,
            "target_weight": milestone_target_weight(data.starting_weight, number, size),
        }

    payload: dict[str, Any] = {
        "new": [c.to_dict() for c in recorded],
        "achieved": history,
        "next": upcoming,
    }
    summary = f"{len(recorded)} new milestone(s), {len(history)} total"
    if _emit_or_print(json_output, ok("milestones", payload, summary)):
        return

    unit = _unit()
    for candidate in recorded:
        console.print(
            Panel(
                milestone_message(candidate.threshold, candidate.weight_lost, unit),
                title=f"Milestone on {candidate.date}",
                style="green",
            )
        )
    if not history:
        console.print("No milestones reached yet")
    else:
        table = Table(title="Milestones")
        table.add_column("#", justify="right")
        table.add_column("Reached on", style="cyan")
        table.add_column("Weight", justify="right")
        for item in history:
            table.add_row(str(item["threshold"]), item["achieved_on"], f"{item['weight']:.1f}")
        console.print(table)
    if upcoming:
        console.print(
            f"Next: milestone {upcoming['threshold']} at {upcoming['target_weight']:.1f} {unit}"
        )


# ============================================================================
# Streaks, summaries, trends, projection
# ============================================================================


@app.command("streak")
def streak(
    ctx: typer.Context,
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show current and best logging streaks."""
    from weighttrack.tracking.streaks import format_streak_text, is_streak_at_risk

    today = _today(ctx)
    with _db().get_connection() as conn:
        state = StreakQueries.get_streak(conn, _user(user_id), today)

    at_risk = is_streak_at_risk(state.last_entry_date, today)
    payload = state.to_dict() | {"at_risk": at_risk}
    if _emit_or_print(json_output, ok("streak", payload, format_streak_text(state.current_streak))):
        return

    console.print(f"[bold]{format_streak_text(state.current_streak)}[/bold]")
    console.print(f"Best streak: {state.best_streak} days")
    if state.last_entry_date:
        console.print(f"Last entry: {state.last_entry_date}")
    if at_risk:
        console.print("[yellow]Log today to keep your streak going![/yellow]")


def _print_report(title: str, report) -> None:
    table = Table(title=title)
    table.add_column("", style="cyan")
    table.add_column("Current", justify="right")
    table.add_column("Previous", justify="right")
    current, previous = report.current, report.previous

    def fmt(value: Optional[float]) -> str:
        return "No data" if value is None else f"{value:.1f}"

    table.add_row(
        "Period",
        f"{current.period_start} - {current.period_end}",
        f"{previous.period_start} - {previous.period_end}",
    )
    table.add_row("Average", fmt(current.average_weight), fmt(previous.average_weight))
    table.add_row("Change", _signed(current.total_change), _signed(previous.total_change))
    table.add_row("Days logged", str(current.days_logged), str(previous.days_logged))
    table.add_row("Entries", str(current.entry_count), str(previous.entry_count))
    console.print(table)

    comparison = report.comparison
    if comparison.is_improvement:
        console.print("[green]Improved vs previous period[/green]")
    else:
        console.print("[yellow]No improvement vs previous period[/yellow]")


@summary_app.command("week")
def summary_week(
    ctx: typer.Context,
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """This week (Mon-Sun) compared with last week."""
    from weighttrack.tracking.summaries import this_week_progress, weekly_summary

    today = _today(ctx)
    observations = _load(_user(user_id))
    report = weekly_summary(observations, today)
    progress = this_week_progress(
        observations, today, get_settings().analytics.trend_deadband
    )

    payload = report.to_dict() | {"progress": progress.to_dict()}
    summary = f"{report.current.days_logged} day(s) logged this week"
    if _emit_or_print(json_output, ok("summary week", payload, summary)):
        return

    _print_report("Weekly Summary", report)
    if progress.best_day is not None:
        console.print(
            f"Best day: {progress.best_day.date} ({progress.best_day.display_weight:.1f} {_unit()})"
        )


@summary_app.command("month")
def summary_month(
    ctx: typer.Context,
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """This calendar month compared with last month."""
    from weighttrack.tracking.summaries import monthly_summary

    report = monthly_summary(_load(_user(user_id)), _today(ctx))
    summary = f"{report.current.days_logged} day(s) logged this month"
    if _emit_or_print(json_output, ok("summary month", report.to_dict(), summary)):
        return
    _print_report("Monthly Summary", report)


def _print_trend(trend: Optional[TrendPeriod], empty_label: str) -> None:
    if trend is None:
        console.print(f"{empty_label}: not enough data yet")
        return

    style, text = _DIRECTION_STYLE[trend.direction]
    table = Table(title=trend.label)
    table.add_column("Period", style="cyan")
    table.add_column("Average", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("%", justify="right")
    for point in trend.points:
        table.add_row(
            point.label,
            f"{point.value:.1f}",
            _signed(point.change),
            _signed(point.change_percent),
        )
    console.print(table)
    console.print(
        f"[{style}]{text}[/{style}] (avg change {trend.average_change:+.2f}, "
        f"total {trend.total_change:+.1f})"
    )


@app.command("trend")
def trend(
    ctx: typer.Context,
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Weekly and monthly trend direction."""
    from weighttrack.tracking.trends import monthly_trend, weekly_trend

    analytics = get_settings().analytics
    today = _today(ctx)
    observations = _load(_user(user_id))
    weekly = weekly_trend(observations, today, analytics.weekly_lookback, analytics.trend_deadband)
    monthly = monthly_trend(
        observations, today, analytics.monthly_lookback, analytics.trend_deadband
    )

    payload = {
        "weekly": weekly.to_dict() if weekly else None,
        "monthly": monthly.to_dict() if monthly else None,
    }
    summary = weekly.direction.value if weekly else "insufficient data"
    if _emit_or_print(json_output, ok("trend", payload, f"Weekly trend: {summary}")):
        return

    _print_trend(weekly, "Weekly trend")
    _print_trend(monthly, "Monthly trend")


@app.command("project")
def project_cmd(
    days: int = typer.Option(30, "--days", "-d", help="Days to project forward"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Project weight forward with a linear fit of the recent trend."""
    from weighttrack.tracking.bucketing import bucket
    from weighttrack.tracking.trends import estimate_date_for_weight, project, regression

    analytics = get_settings().analytics
    user = _user(user_id)
    with _db().get_connection() as conn:
        observations = WeightQueries.get_observations(conn, user)
        goal = GoalQueries.get_active_goal(conn, user)

    series = bucket(observations)
    fit = regression(series, analytics.regression_points)
    points = project(series, days, analytics.projection_bounds(), analytics.regression_points)
    goal_date = None
    if goal is not None:
        goal_date = estimate_date_for_weight(series, goal.target_weight, analytics.regression_points)

    payload = {
        "slope_per_day": round(fit[0], 4) if fit else None,
        "points": [p.to_dict() for p in points],
        "goal_reached_on": goal_date.isoformat() if goal_date else None,
    }
    if fit is None:
        if _emit_or_print(json_output, ok("project", payload, "Not enough data to project")):
            return
        console.print("Not enough data to project (need at least 2 days)")
        return

    summary = f"{fit[0] * 7:+.2f} {_unit()}/week"
    if _emit_or_print(json_output, ok("project", payload, summary)):
        return

    console.print(f"Recent trend: {summary}")
    if points:
        last = points[-1]
        console.print(f"Projected on {last.date}: {last.weight:.1f} {_unit()}")
    else:
        console.print("[yellow]Projection falls outside the plausible range[/yellow]")
    if goal_date is not None:
        console.print(f"Goal {goal.target_weight:.1f} reached around {goal_date}")


# ============================================================================
# Goals and stats
# ============================================================================


@goal_app.command("set")
def goal_set(
    ctx: typer.Context,
    target: float = typer.Option(..., "--target", "-t", help="Target weight"),
    deadline: str = typer.Option(..., "--deadline", help="Deadline (YYYY-MM-DD)"),
    starting: Optional[float] = typer.Option(
        None, "--starting", help="Starting weight (default: latest daily average)"
    ),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Set a new active goal, replacing the current one."""
    from weighttrack.tracking.bucketing import bucket

    deadline_date = _parse_date(deadline, json_output, "goal set", _today(ctx))
    if deadline_date <= _today(ctx):
        _fail(json_output, "goal set", "Deadline must be in the future")

    user = _user(user_id)
    with _db().get_connection() as conn:
        if starting is None:
            daily = bucket(WeightQueries.get_observations(conn, user))
            starting = daily[-1].weight if daily else None
        try:
            goal = Goal(target_weight=target, deadline=deadline_date, starting_weight=starting)
            goal = GoalQueries.create_goal(conn, user, goal)
        except ValueError as e:
            _fail(json_output, "goal set", str(e))

    summary = f"Goal: {target:.1f} {_unit()} by {deadline_date}"
    if _emit_or_print(json_output, ok("goal set", {"goal": goal.to_dict()}, summary)):
        return
    console.print(f"[green]{summary}[/green]")


@goal_app.command("show")
def goal_show(
    ctx: typer.Context,
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the active goal and progress toward it."""
    from weighttrack.tracking.bucketing import bucket

    user = _user(user_id)
    with _db().get_connection() as conn:
        goal = GoalQueries.get_active_goal(conn, user)
        daily = bucket(WeightQueries.get_observations(conn, user))

    if goal is None:
        _fail(
            json_output,
            "goal show",
            "No active goal",
            ["Set one with: weighttrack goal set --target 75 --deadline YYYY-MM-DD"],
        )

    progress = goal_progress(goal, daily[-1].weight, _today(ctx)) if daily else None
    payload = {
        "goal": goal.to_dict(),
        "progress": progress.to_dict() if progress else None,
        "guideline": [p.to_dict() for p in goal_guideline(daily, goal)],
    }
    unit = _unit()
    summary = f"Goal {goal.target_weight:.1f} {unit} by {goal.deadline}"
    if _emit_or_print(json_output, ok("goal show", payload, summary)):
        return

    console.print(f"[bold]{summary}[/bold]")
    if progress is None:
        console.print("No weight entries yet")
        return
    console.print(f"  Progress:  {progress.progress:.1f}%")
    console.print(f"  Remaining: {progress.remaining_weight:.1f} {unit}")
    console.print(f"  Days left: {progress.days_remaining}")
    if progress.is_completed:
        console.print("[green]  Goal reached![/green]")
    elif progress.daily_change_required is not None:
        console.print(f"  Needed:    {progress.daily_change_required * 7:+.2f} {unit}/week")


@goal_app.command("clear")
def goal_clear(
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Deactivate the active goal."""
    with _db().get_connection() as conn:
        count = GoalQueries.deactivate_goals(conn, _user(user_id))

    summary = "Goal cleared" if count else "No active goal"
    if _emit_or_print(json_output, ok("goal clear", {"deactivated": count}, summary)):
        return
    console.print(summary)


@app.command("stats")
def stats(
    ctx: typer.Context,
    period: TimePeriod = typer.Option(TimePeriod.MONTH, "--period", "-p", help="Time window"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Headline statistics for a period."""
    from weighttrack.tracking.stats import dashboard_stats, weight_stats

    today = _today(ctx)
    user = _user(user_id)
    with _db().get_connection() as conn:
        observations = WeightQueries.get_observations(conn, user)
        goals = GoalQueries.list_goals(conn, user)

    period_stats = weight_stats(observations, period, today)
    dashboard = dashboard_stats(observations, goals, today)
    payload = {"period": period.value, "weight": period_stats.to_dict(), "dashboard": dashboard.to_dict()}
    summary = f"{dashboard.entry_count} entries, {dashboard.day_streak} day streak"
    if _emit_or_print(json_output, ok("stats", payload, summary)):
        return

    table = Table(title=f"Statistics ({period.value})")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Days logged", str(period_stats.total_days))
    table.add_row("Average", f"{period_stats.average_weight:.1f}")
    table.add_row("Min / Max", f"{period_stats.min_weight:.1f} / {period_stats.max_weight:.1f}")
    table.add_row("Total change", _signed(period_stats.total_change))
    table.add_row("Avg change", _signed(period_stats.average_change, 2))
    table.add_row("All entries", str(dashboard.entry_count))
    table.add_row("Active goals", str(dashboard.active_goals))
    table.add_row("Current streak", str(dashboard.day_streak))
    console.print(table)


# ============================================================================
# Configuration
# ============================================================================


@config_app.command("show")
def config_show(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the effective settings."""
    import yaml

    data = get_settings().to_dict()
    if _emit_or_print(json_output, ok("config show", data, "Current settings")):
        return
    console.print(yaml.dump(data, default_flow_style=False, sort_keys=False))


@config_app.command("init")
def config_init(
    path: Optional[Path] = typer.Option(None, "--path", help="Where to write config.yaml"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Write a config.yaml with the default settings."""
    from weighttrack.config.settings import Settings, default_config_path

    target = path or default_config_path()
    if target.exists() and not force:
        _fail(
            json_output,
            "config init",
            f"{target} already exists",
            ["Use --force to overwrite"],
        )
    Settings().save(target)

    summary = f"Wrote {target}"
    if _emit_or_print(json_output, ok("config init", {"path": str(target)}, summary)):
        return
    console.print(f"[green]{summary}[/green]")


if __name__ == "__main__":
    app()
