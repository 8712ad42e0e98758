"""Command line interface for HabitVault."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

import click

from .config import BaseConfig
from .domain.habit import HabitStatus, TargetDays
from .infra.database import bootstrap_database
from .infra.repositories import SQLModelHabitRepository
from .logging_config import get_logger, setup_logging
from .services.analytics import AnalyticsWindow, month_grid
from .services.export_csv import export_log_csv
from .services.export_json import export_state_json, import_state_json
from .services.habit_log import status_on
from .services.reports import export_daily_png
from .services.schedule import DAY_ABBREVIATIONS, describe_schedule
from .tracker import HabitNotFoundError, HabitTracker, HabitValidationError

logger = get_logger(__name__)

DATE_TYPE = click.DateTime(formats=["%Y-%m-%d"])
_HEATMAP_SYMBOLS = {HabitStatus.COMPLETED: "#", HabitStatus.MISSED: "x", None: "."}


class CliContext:
    """Per-invocation wiring: config, repository and the scoped user id."""

    def __init__(self, config: BaseConfig):
        self.config = config
        self.user_id = config.USER_ID
        _, session_factory = bootstrap_database(config)
        self.repo = SQLModelHabitRepository(session_factory)

    def tracker(self, today: date | None = None) -> HabitTracker:
        state = self.repo.load_state(user_id=self.user_id)
        if today is None:
            return HabitTracker(state)
        return HabitTracker(state, clock=lambda: today)


pass_cli = click.make_pass_decorator(CliContext)


def _as_date(value: datetime | None) -> date | None:
    return value.date() if value is not None else None


def _run(action):
    """Turn domain errors into click errors with a non-zero exit code."""
    try:
        return action()
    except (HabitValidationError, HabitNotFoundError, LookupError, ValueError) as exc:
        logger.warning("Command failed", extra={"error": str(exc)})
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Track recurring habits, streaks and completion analytics."""

    if ctx.obj is None:
        config = BaseConfig()
        setup_logging(config)
        ctx.obj = CliContext(config)


@cli.command("add")
@click.argument("name")
@click.option(
    "--days",
    "target_days",
    type=click.Choice([t.value for t in TargetDays]),
    default=TargetDays.EVERYDAY.value,
    show_default=True,
)
@click.option("--on", "custom_days", type=click.IntRange(0, 6), multiple=True,
              help="Weekday index for custom schedules (0=Sunday). Repeatable.")
@click.option("--start", "start_date", type=DATE_TYPE, default=None, help="Start date (YYYY-MM-DD).")
@pass_cli
def add_habit(ctx: CliContext, name, target_days, custom_days, start_date) -> None:
    """Create a habit."""

    tracker = ctx.tracker()
    habit = _run(
        lambda: tracker.add_habit(
            name,
            target_days=TargetDays(target_days),
            custom_days=custom_days,
            start_date=_as_date(start_date),
        )
    )
    ctx.repo.create(habit, user_id=ctx.user_id)
    click.echo(f"Created {habit.id}: {habit.name} ({describe_schedule(habit)})")


@cli.command("edit")
@click.argument("habit_id")
@click.option("--name", default=None)
@click.option("--days", "target_days", type=click.Choice([t.value for t in TargetDays]), default=None)
@click.option("--on", "custom_days", type=click.IntRange(0, 6), multiple=True)
@click.option("--start", "start_date", type=DATE_TYPE, default=None)
@pass_cli
def edit_habit(ctx: CliContext, habit_id, name, target_days, custom_days, start_date) -> None:
    """Change a habit's name, schedule or start date."""

    tracker = ctx.tracker()
    kwargs = {}
    if custom_days:
        kwargs["custom_days"] = custom_days
    habit = _run(
        lambda: tracker.update_habit(
            habit_id,
            name=name,
            target_days=TargetDays(target_days) if target_days else None,
            start_date=_as_date(start_date),
            **kwargs,
        )
    )
    ctx.repo.update(habit, user_id=ctx.user_id)
    click.echo(f"Updated {habit.id}: {habit.name} ({describe_schedule(habit)})")


@cli.command("remove")
@click.argument("habit_id")
@pass_cli
def remove_habit(ctx: CliContext, habit_id) -> None:
    """Delete a habit and its history."""

    tracker = ctx.tracker()
    _run(lambda: tracker.delete_habit(habit_id))
    ctx.repo.delete(habit_id, user_id=ctx.user_id)
    click.echo(f"Removed {habit_id}")


@cli.command("list")
@click.option("--today", "today", type=DATE_TYPE, default=None)
@pass_cli
def list_habits(ctx: CliContext, today) -> None:
    """Show habits with their current and longest streaks."""

    tracker = ctx.tracker(_as_date(today))
    if not tracker.habits:
        click.echo("No habits yet")
        return
    streaks = tracker.recompute().streaks
    for habit in tracker.habits:
        streak = streaks[habit.id]
        click.echo(
            f"{habit.id}  {habit.name}  [{describe_schedule(habit)}]  "
            f"current={streak.current} longest={streak.longest}"
        )


def _record(ctx: CliContext, habit_id: str, status: HabitStatus, day) -> None:
    tracker = ctx.tracker()
    target_day = _as_date(day) or tracker.today()
    state = _run(lambda: tracker.set_status(habit_id, status, target_day))
    new_status = status_on(state.log, habit_id, target_day)
    if new_status is None:
        ctx.repo.delete_entry(habit_id, target_day, user_id=ctx.user_id)
        click.echo(f"Cleared {habit_id} on {target_day.isoformat()}")
    else:
        ctx.repo.upsert_entry(habit_id, target_day, new_status, user_id=ctx.user_id)
        click.echo(f"{habit_id} {new_status.value} on {target_day.isoformat()}")


@cli.command("mark")
@click.argument("habit_id")
@click.option("--date", "day", type=DATE_TYPE, default=None, help="Defaults to today.")
@pass_cli
def mark_completed(ctx: CliContext, habit_id, day) -> None:
    """Mark a day completed; marking it again clears it."""

    _record(ctx, habit_id, HabitStatus.COMPLETED, day)


@cli.command("miss")
@click.argument("habit_id")
@click.option("--date", "day", type=DATE_TYPE, default=None, help="Defaults to today.")
@pass_cli
def mark_missed(ctx: CliContext, habit_id, day) -> None:
    """Mark a day missed; marking it again clears it."""

    _record(ctx, habit_id, HabitStatus.MISSED, day)


@cli.command("analytics")
@click.option("--window", type=click.Choice([w.value for w in AnalyticsWindow]), default=None)
@click.option("--today", "today", type=DATE_TYPE, default=None)
@pass_cli
def show_analytics(ctx: CliContext, window, today) -> None:
    """Print completion statistics for a time window."""

    tracker = ctx.tracker(_as_date(today))
    selected = _run(lambda: AnalyticsWindow(window or ctx.config.DEFAULT_WINDOW))
    snapshot = tracker.recompute(selected).analytics

    click.echo(f"Window: {snapshot.start.isoformat()} .. {snapshot.end.isoformat()}")
    click.echo(f"Habits: {snapshot.total_habits}")
    click.echo(
        f"Completion rate: {snapshot.completion_rate}% "
        f"({snapshot.total_completions} of {snapshot.total_completions + snapshot.total_missed} check-ins)"
    )
    if snapshot.best_habit is None:
        click.echo("Best habit: none")
    else:
        click.echo(
            f"Best habit: {snapshot.best_habit.habit.name} "
            f"(longest streak {snapshot.best_habit.longest_streak} days)"
        )
    for row in snapshot.habit_performance:
        click.echo(
            f"  {row.name}: {row.completions} completed, {row.missed} missed, {row.completion_rate}%"
        )


@cli.command("heatmap")
@click.argument("habit_id")
@click.option("--month", "month", type=click.DateTime(formats=["%Y-%m"]), default=None,
              help="Month to render (YYYY-MM); defaults to the current month.")
@pass_cli
def show_heatmap(ctx: CliContext, habit_id, month) -> None:
    """Render one month of a habit's history as a text grid."""

    tracker = ctx.tracker()
    habit = _run(lambda: tracker.get(habit_id))
    anchor = month.date() if month else tracker.today()

    click.echo(f"{habit.name}: {anchor.strftime('%B %Y')}")
    click.echo(" ".join(f"{d[:2]:>2}" for d in DAY_ABBREVIATIONS))
    for week in month_grid(habit.id, tracker.log, anchor.year, anchor.month):
        cells = []
        for day, status in week:
            cells.append("  " if day is None else f"{_HEATMAP_SYMBOLS[status]:>2}")
        click.echo(" ".join(cells))


@cli.command("export")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--format", "fmt", type=click.Choice(["json", "csv"]), default="json", show_default=True)
@pass_cli
def export_data(ctx: CliContext, output: Path, fmt: str) -> None:
    """Export habits and status log."""

    tracker = ctx.tracker()
    if fmt == "csv":
        path = export_log_csv(habits=tracker.habits, log=tracker.log, output_path=output)
    else:
        path = export_state_json(state=tracker.state, output_path=output)
    click.echo(f"Export written: {path}")


@cli.command("import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@pass_cli
def import_data(ctx: CliContext, source: Path) -> None:
    """Replace stored habits and log with a JSON export."""

    state = _run(lambda: import_state_json(source))
    _run(lambda: ctx.repo.save_state(state, user_id=ctx.user_id))
    click.echo(f"Imported {len(state.habits)} habits")


@cli.command("chart")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--window", type=click.Choice([w.value for w in AnalyticsWindow]), default=None)
@click.option("--today", "today", type=DATE_TYPE, default=None)
@pass_cli
def export_chart(ctx: CliContext, output: Path, window, today) -> None:
    """Save a PNG bar chart of daily check-ins."""

    tracker = ctx.tracker(_as_date(today))
    selected = _run(lambda: AnalyticsWindow(window or ctx.config.DEFAULT_WINDOW))
    snapshot = tracker.recompute(selected).analytics
    path = export_daily_png(snapshot=snapshot, output_path=output)
    click.echo(f"Chart written: {path}")


def main() -> None:  # pragma: no cover - console entry point
    cli()


__all__ = ["cli", "main"]
