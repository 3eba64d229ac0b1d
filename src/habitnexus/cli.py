"""Command-line interface for HabitNexus."""

from __future__ import annotations

import time
import uuid
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .dates import parse_date, today_date
from .errors import HabitNexusError
from .logging_config import setup_logging
from .models.habit import Frequency, FrequencyType, Habit, HabitType, Reminder
from .services import analytics, backup, records, reports
from .services.habits import is_completed
from .services.reminders import ReminderPoller

_STATUS_MARKS = {"full": "#", "partial": "+", "skipped": "~", "none": "."}


class _Obj:
    """Lazily-built context shared by subcommands."""

    def __init__(self, today: Optional[date]):
        self._ctx: Optional[AppContext] = None
        self.today = today or today_date()

    @property
    def ctx(self) -> AppContext:
        if self._ctx is None:
            config = BaseConfig()
            setup_logging(config)
            self._ctx = create_app_context(config)
        return self._ctx


def _parse_int_list(value: Optional[str]) -> Optional[list[int]]:
    if not value:
        return None
    try:
        return [int(part) for part in value.split(",") if part.strip()]
    except ValueError as exc:
        raise click.BadParameter(f"expected comma-separated integers, got {value!r}") from exc


def _parse_date_option(_ctx, _param, value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as exc:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}") from exc


def _parse_time_option(_ctx, _param, value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%H:%M").strftime("%H:%M")
    except ValueError as exc:
        raise click.BadParameter(f"expected HH:MM, got {value!r}") from exc


def _resolve_habit(ctx: AppContext, ref: str) -> Habit:
    habit = ctx.state.find_habit(ref)
    if habit is not None:
        return habit
    matches = [h for h in ctx.state.habits if h.name.lower() == ref.lower()]
    if len(matches) == 1:
        return matches[0]
    if matches:
        raise click.ClickException(f"Several habits are named {ref!r}; use the id instead")
    raise click.ClickException(f"No habit matches {ref!r}")


def _run(ctx: AppContext, mutator, *args, **kwargs):
    try:
        return ctx.apply(mutator, *args, **kwargs)
    except HabitNexusError as exc:
        raise click.ClickException(str(exc)) from exc


def _frequency_label(habit: Habit) -> str:
    freq = habit.frequency
    kind = freq.type.value if isinstance(freq.type, FrequencyType) else str(freq.type)
    if freq.type == FrequencyType.WEEKDAYS:
        return f"{kind} {','.join(str(d) for d in freq.weekdays or [])}"
    if freq.type == FrequencyType.INTERVAL:
        return f"{kind} every {freq.interval or 1}d"
    if freq.type == FrequencyType.MONTHLY:
        return f"{kind} {','.join(str(d) for d in freq.monthly_days or [])}"
    return kind


@click.group()
@click.option(
    "--today",
    "today",
    default=None,
    callback=_parse_date_option,
    hidden=True,
    help="Override today's date (YYYY-MM-DD).",
)
@click.pass_context
def main(click_ctx: click.Context, today: Optional[date]) -> None:
    """Track habits, streaks and reminders from the terminal."""

    click_ctx.obj = _Obj(today)


@main.command("today")
@click.pass_obj
def today_cmd(obj: _Obj) -> None:
    """Show habits due today and their progress."""

    ctx = obj.ctx
    due = analytics.habits_due_on(ctx.state, obj.today)
    if not due:
        click.echo("No habits due today")
        return

    for habit in due:
        record = ctx.state.find_record(habit.id, obj.today)
        streak = ctx.streak(habit.id, today=obj.today)
        if is_completed(habit, record):
            mark = "[x]"
        elif record is not None and record.is_skipped:
            mark = "[~]"
        else:
            mark = "[ ]"
        value = record.value if record else 0
        click.echo(f"{mark} {habit.name}  {value}/{habit.target_value}  streak {streak.current}d")

    stats = analytics.daily_stats(ctx.state, today=obj.today)
    click.echo(f"{stats.completed}/{stats.total} done ({stats.percentage}%)")


@main.command("habits")
@click.option("--all", "show_all", is_flag=True, help="Include archived habits.")
@click.pass_obj
def habits_cmd(obj: _Obj, show_all: bool) -> None:
    """List habits."""

    for habit in obj.ctx.state.habits:
        if habit.is_archived and not show_all:
            continue
        flags = [name for name, on in (("paused", habit.is_paused), ("archived", habit.is_archived)) if on]
        suffix = f" ({', '.join(flags)})" if flags else ""
        click.echo(f"{habit.id}  {habit.name}  [{_frequency_label(habit)}]{suffix}")


@main.command("add")
@click.argument("name")
@click.option(
    "--type",
    "habit_type",
    type=click.Choice([t.value for t in HabitType], case_sensitive=False),
    default=HabitType.YES_NO.value,
    show_default=True,
)
@click.option("--target", type=int, default=None, help="Count, seconds (TIME) or sessions (POMODORO).")
@click.option(
    "--frequency",
    type=click.Choice([f.value for f in FrequencyType], case_sensitive=False),
    default=FrequencyType.DAILY.value,
    show_default=True,
)
@click.option("--weekdays", default=None, help="Comma-separated weekdays, 0=Sunday.")
@click.option("--interval", type=click.IntRange(min=1), default=None, help="Every N days.")
@click.option("--days", "monthly_days", default=None, help="Comma-separated days of the month.")
@click.option("--start", default=None, callback=_parse_date_option, help="Start date (YYYY-MM-DD).")
@click.option("--end", default=None, callback=_parse_date_option, help="End date (YYYY-MM-DD).")
@click.option("--remind-at", default=None, callback=_parse_time_option, help="Daily reminder time (HH:MM).")
@click.pass_obj
def add_cmd(
    obj: _Obj,
    name: str,
    habit_type: str,
    target: Optional[int],
    frequency: str,
    weekdays: Optional[str],
    interval: Optional[int],
    monthly_days: Optional[str],
    start: Optional[date],
    end: Optional[date],
    remind_at: Optional[str],
) -> None:
    """Create a habit."""

    freq_type = FrequencyType(frequency.upper())
    freq = Frequency(
        type=freq_type,
        weekdays=_parse_int_list(weekdays) if freq_type == FrequencyType.WEEKDAYS else None,
        interval=(interval or 2) if freq_type == FrequencyType.INTERVAL else None,
        monthly_days=_parse_int_list(monthly_days) if freq_type == FrequencyType.MONTHLY else None,
    )
    reminders = [Reminder(id=str(uuid.uuid4()), time=remind_at)] if remind_at else []

    habit = _run(
        obj.ctx,
        records.create_habit,
        name=name,
        habit_type=HabitType(habit_type.upper()),
        target_value=target,
        frequency=freq,
        today=start or obj.today,
        end_date=end,
        reminders=reminders,
    )
    click.echo(f"Created {habit.name} ({habit.id})")


@main.command("log")
@click.argument("habit_ref")
@click.argument("value", type=int, required=False)
@click.pass_obj
def log_cmd(obj: _Obj, habit_ref: str, value: Optional[int]) -> None:
    """Record today's progress (defaults to the habit's target)."""

    ctx = obj.ctx
    habit = _resolve_habit(ctx, habit_ref)
    amount = value if value is not None else habit.target_value
    _run(ctx, records.update_record, habit.id, amount, today=obj.today)
    streak = ctx.streak(habit.id, today=obj.today)
    click.echo(f"{habit.name}: {amount}/{habit.target_value}, streak {streak.current}d")


@main.command("skip")
@click.argument("habit_ref")
@click.pass_obj
def skip_cmd(obj: _Obj, habit_ref: str) -> None:
    """Toggle today's skip marker."""

    ctx = obj.ctx
    habit = _resolve_habit(ctx, habit_ref)
    _run(ctx, records.toggle_skip, habit.id, today=obj.today)
    record = ctx.state.find_record(habit.id, obj.today)
    state = "skipped" if record is not None and record.is_skipped else "unskipped"
    click.echo(f"{habit.name}: {state} for {obj.today.isoformat()}")


@main.command("pause")
@click.argument("habit_ref")
@click.option("--resume", is_flag=True, help="Resume a paused habit.")
@click.pass_obj
def pause_cmd(obj: _Obj, habit_ref: str, resume: bool) -> None:
    """Pause (or resume) a habit."""

    habit = _resolve_habit(obj.ctx, habit_ref)
    _run(obj.ctx, records.set_paused, habit.id, not resume)
    click.echo(f"{habit.name}: {'resumed' if resume else 'paused'}")


@main.command("archive")
@click.argument("habit_ref")
@click.option("--restore", is_flag=True, help="Un-archive the habit.")
@click.pass_obj
def archive_cmd(obj: _Obj, habit_ref: str, restore: bool) -> None:
    """Archive (or restore) a habit."""

    habit = _resolve_habit(obj.ctx, habit_ref)
    _run(obj.ctx, records.set_archived, habit.id, not restore)
    click.echo(f"{habit.name}: {'restored' if restore else 'archived'}")


@main.command("delete")
@click.argument("habit_ref")
@click.confirmation_option(prompt="Delete this habit and all of its records?")
@click.pass_obj
def delete_cmd(obj: _Obj, habit_ref: str) -> None:
    """Delete a habit and its records."""

    habit = _resolve_habit(obj.ctx, habit_ref)
    _run(obj.ctx, records.delete_habit, habit.id)
    click.echo(f"Deleted {habit.name}")


@main.command("streaks")
@click.pass_obj
def streaks_cmd(obj: _Obj) -> None:
    """Show current and longest streak per habit."""

    stats = analytics.global_stats(obj.ctx.state, today=obj.today)
    for entry in stats.streaks:
        if entry.habit.is_archived:
            continue
        pending = " (pending)" if entry.streak.is_pending else ""
        click.echo(f"{entry.habit.name}: {entry.streak.current}d current, {entry.longest}d best{pending}")


@main.command("stats")
@click.pass_obj
def stats_cmd(obj: _Obj) -> None:
    """Show overall statistics."""

    stats = analytics.global_stats(obj.ctx.state, today=obj.today)
    click.echo(f"Active streak:     {stats.active_streak}d")
    click.echo(f"Best streak:       {stats.best_streak}d")
    click.echo(f"7-day score:       {stats.week_percentage}%")
    click.echo(f"Active habits:     {stats.active_count}")
    click.echo(f"Total completions: {stats.total_completions}")


@main.command("calendar")
@click.option("--month", default=None, help="Month as YYYY-MM (default: current month).")
@click.option("--habit", "habit_ref", default=None, help="Limit to one habit (id or name).")
@click.pass_obj
def calendar_cmd(obj: _Obj, month: Optional[str], habit_ref: Optional[str]) -> None:
    """Print a month grid: # complete, + partial, ~ skipped, . none."""

    if month:
        try:
            year, mon = (int(part) for part in month.split("-"))
        except ValueError as exc:
            raise click.BadParameter(f"expected YYYY-MM, got {month!r}", param_hint="--month") from exc
    else:
        year, mon = obj.today.year, obj.today.month

    ctx = obj.ctx
    habit_id = _resolve_habit(ctx, habit_ref).id if habit_ref else analytics.ALL_HABITS
    try:
        weeks = analytics.calendar_month(ctx.state, year, mon, habit_id=habit_id)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--month") from exc

    click.echo(f"{date(year, mon, 1):%B %Y}")
    click.echo(" Su Mo Tu We Th Fr Sa")
    for week in weeks:
        line = ""
        for cell in week:
            line += "   " if cell is None else f"{cell.day.day:>2}{_STATUS_MARKS[cell.status]}"
        click.echo(line.rstrip())


@main.command("export")
@click.option("--dir", "export_dir", type=click.Path(file_okay=False, path_type=Path), default=None)
@click.pass_obj
def export_cmd(obj: _Obj, export_dir: Optional[Path]) -> None:
    """Write a JSON backup of all data."""

    ctx = obj.ctx
    path = backup.export_backup(ctx.state, export_dir or ctx.config.backup_dir, today=obj.today)
    click.echo(f"Backup written: {path}")


@main.command("restore")
@click.argument("backup_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.confirmation_option(prompt="Replace all current data with this backup?")
@click.pass_obj
def restore_cmd(obj: _Obj, backup_file: Path) -> None:
    """Replace current data with a JSON backup."""

    try:
        restored = backup.load_backup(backup_file)
    except HabitNexusError as exc:
        raise click.ClickException(str(exc)) from exc
    _run(obj.ctx, lambda _state: restored)
    click.echo(f"Restored {len(restored.habits)} habits and {len(restored.records)} records")


@main.command("heatmap")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.option("--habit", "habit_ref", default=None, help="Limit to one habit (id or name).")
@click.pass_obj
def heatmap_cmd(obj: _Obj, output: Optional[Path], habit_ref: Optional[str]) -> None:
    """Export a 20-week activity heatmap as PNG."""

    ctx = obj.ctx
    selected = ctx.state.records
    color = ctx.state.settings.theme_color
    if habit_ref:
        habit = _resolve_habit(ctx, habit_ref)
        selected = [r for r in selected if r.habit_id == habit.id]
        color = habit.color
    output = output or ctx.config.reports_dir / f"heatmap_{obj.today.isoformat()}.png"
    path = reports.export_heatmap_png(records=selected, output_path=output, today=obj.today, color=color)
    click.echo(f"Heatmap written: {path}")


@main.command("remind")
@click.option("--once", is_flag=True, help="Poll a single time and exit.")
@click.option("--interval", type=click.IntRange(min=1), default=None, help="Seconds between polls.")
@click.pass_obj
def remind_cmd(obj: _Obj, once: bool, interval: Optional[int]) -> None:
    """Watch for due reminders and print them."""

    ctx = obj.ctx

    def notify(habit, reminder) -> None:
        click.echo(f"[{reminder.time}] Reminder: {habit.name}")

    if once:
        fired = ReminderPoller(lambda: ctx.state.habits, notify).poll()
        if not fired:
            click.echo("No reminders due")
        return

    from .scheduler import ReminderScheduler

    scheduler = ReminderScheduler(ctx, notify, interval_seconds=interval)
    scheduler.start()
    click.echo("Watching reminders; press Ctrl+C to stop")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        scheduler.stop()


if __name__ == "__main__":  # pragma: no cover
    main()
