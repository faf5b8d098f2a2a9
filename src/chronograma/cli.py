"""Chronograma CLI - calendar, tasks and habits on one timeline."""

import json
import logging
import sys
from datetime import date, datetime

import click

from .config import load_config
from .core.habits import HabitColor, format_days, parse_days, parse_time
from .core.tasks import Priority
from .core.timeline import format_timeline_line
from .workflows import (
    build_timeline,
    get_calendar_source,
    get_habit_store,
    get_storage,
    get_task_store,
)


def _parse_date(value: str | None) -> date:
    if not value:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}")


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM-DDTHH:MM, got {value!r}")


def _resolve_id(items: list, prefix: str) -> str:
    """Resolve a unique id prefix, exiting on no match or ambiguity."""
    matches = [item.id for item in items if item.id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        click.echo(f"Error: no item matching '{prefix}'", err=True)
    else:
        click.echo(f"Error: '{prefix}' is ambiguous ({len(matches)} matches)", err=True)
    sys.exit(1)


def _warn_if_unsaved(store) -> None:
    if store.last_error:
        click.echo(f"Warning: {store.last_error}", err=True)


@click.group()
@click.version_option(package_name="chronograma")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Chronograma - calendar, tasks and habits in one daily timeline."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
@click.option("--date", "-d", "target_date", default=None,
              help="Date to view (YYYY-MM-DD), defaults to today")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def today(target_date: str | None, as_json: bool):
    """Show the merged timeline for a day."""
    config = load_config()
    day = _parse_date(target_date)
    storage = get_storage(config)
    source = get_calendar_source(config)
    items = build_timeline(day, source, get_task_store(config, storage), get_habit_store(config, storage))

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "time": i.time.strftime("%H:%M") if i.time else None,
                        "end": i.end.strftime("%H:%M") if i.end else None,
                        "title": i.title,
                        "kind": i.kind.value,
                        "completed": i.completed,
                        "source_id": i.source_id,
                    }
                    for i in items
                ],
                indent=2,
            )
        )
        return

    click.echo(f"### {day.strftime('%A, %B %d')}")
    if not items:
        click.echo("Nothing scheduled.")
    for item in items:
        click.echo(f"  {format_timeline_line(item)}")
    if not source.has_access:
        click.echo("\n(Calendar not connected - showing tasks and habits only)")


# ============== Tasks ==============


@main.group()
def tasks():
    """Manage tasks."""


@tasks.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tasks_list(as_json: bool):
    """List all tasks."""
    store = get_task_store(load_config())

    if as_json:
        click.echo(json.dumps([t.to_dict() for t in store.all()], indent=2))
        return

    if not len(store):
        click.echo("No tasks.")
        return

    for task in store.all():
        mark = "x" if task.completed else " "
        when = task.timeline_at.strftime(" (%Y-%m-%d %H:%M)") if task.timeline_at else ""
        click.echo(f"[{mark}] {task.id[:8]} {task.priority.value:6} {task.title}{when}")


@tasks.command("add")
@click.argument("title")
@click.option("--priority", "-p", default="medium",
              type=click.Choice([p.value for p in Priority]), help="Task priority")
@click.option("--due", default=None, help="Due date/time (YYYY-MM-DDTHH:MM)")
@click.option("--scheduled", default=None, help="Scheduled date/time (YYYY-MM-DDTHH:MM)")
def tasks_add(title: str, priority: str, due: str | None, scheduled: str | None):
    """Add a task."""
    store = get_task_store(load_config())
    try:
        task = store.add(
            title,
            priority=Priority(priority),
            due=_parse_datetime(due),
            scheduled=_parse_datetime(scheduled),
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    _warn_if_unsaved(store)
    click.echo(f"Added task {task.id[:8]}: {task.title}")


@tasks.command("done")
@click.argument("task_id")
def tasks_done(task_id: str):
    """Toggle a task's completion."""
    store = get_task_store(load_config())
    full_id = _resolve_id(store.all(), task_id)
    store.toggle_completion(full_id)
    _warn_if_unsaved(store)
    task = store.get(full_id)
    click.echo(f"{'Completed' if task.completed else 'Reopened'}: {task.title}")


@tasks.command("edit")
@click.argument("task_id")
@click.option("--title", default=None, help="New title")
@click.option("--priority", "-p", default=None,
              type=click.Choice([p.value for p in Priority]), help="New priority")
@click.option("--due", default=None, help="New due date/time (YYYY-MM-DDTHH:MM)")
@click.option("--scheduled", default=None, help="New scheduled date/time (YYYY-MM-DDTHH:MM)")
def tasks_edit(task_id: str, title, priority, due, scheduled):
    """Edit a task."""
    store = get_task_store(load_config())
    full_id = _resolve_id(store.all(), task_id)

    fields = {}
    if title is not None:
        fields["title"] = title
    if priority is not None:
        fields["priority"] = Priority(priority)
    if due is not None:
        fields["due"] = _parse_datetime(due)
    if scheduled is not None:
        fields["scheduled"] = _parse_datetime(scheduled)

    try:
        task = store.update(full_id, **fields)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    _warn_if_unsaved(store)
    click.echo(f"Updated task {task.id[:8]}: {task.title}")


@tasks.command("rm")
@click.argument("task_id")
def tasks_rm(task_id: str):
    """Delete a task."""
    store = get_task_store(load_config())
    full_id = _resolve_id(store.all(), task_id)
    store.remove(full_id)
    _warn_if_unsaved(store)
    click.echo(f"Deleted task {full_id[:8]}")


@tasks.command("reset")
@click.confirmation_option(prompt="Delete all stored tasks?")
def tasks_reset():
    """Delete all tasks, including unreadable stored data."""
    store = get_task_store(load_config())
    if not store.reset():
        click.echo(f"Error: {store.last_error}", err=True)
        sys.exit(1)
    click.echo("All tasks deleted.")


# ============== Habits ==============


@main.group()
def habits():
    """Manage habits."""


@habits.command("list")
@click.option("--weekday", "-w", type=click.IntRange(0, 6), default=None,
              help="Only habits active on this weekday (0=Monday)")
def habits_list(weekday: int | None):
    """List habits."""
    store = get_habit_store(load_config())
    items = store.all() if weekday is None else store.for_weekday(weekday)

    if not items:
        click.echo("No habits yet.")
        return

    today_date = date.today()
    for habit in items:
        mark = "x" if habit.is_completed_on(today_date) else " "
        streak = f" (streak {habit.streak})" if habit.streak else ""
        click.echo(
            f"[{mark}] {habit.id[:8]} {habit.format_time_range():13} "
            f"{habit.title} [{format_days(habit.days)}, {habit.color.value}]{streak}"
        )


@habits.command("add")
@click.argument("title")
@click.option("--days", default="daily", help="e.g. mon,wed,fri | weekdays | daily | 1111100")
@click.option("--start", required=True, help="Start time (HH:MM)")
@click.option("--end", default=None, help="End time (HH:MM), defaults to start")
@click.option("--color", default="red",
              type=click.Choice([c.value for c in HabitColor]), help="Colour tag")
def habits_add(title: str, days: str, start: str, end: str | None, color: str):
    """Add a habit."""
    store = get_habit_store(load_config())
    try:
        habit = store.add(
            title,
            days=parse_days(days),
            start=parse_time(start),
            end=parse_time(end) if end else None,
            color=HabitColor(color),
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    _warn_if_unsaved(store)
    click.echo(f"Added habit {habit.id[:8]}: {habit.title}")


@habits.command("done")
@click.argument("habit_id")
@click.option("--date", "-d", "target_date", default=None,
              help="Day to mark (YYYY-MM-DD), defaults to today")
def habits_done(habit_id: str, target_date: str | None):
    """Toggle a habit's completion for a day."""
    store = get_habit_store(load_config())
    day = _parse_date(target_date)
    full_id = _resolve_id(store.all(), habit_id)
    store.toggle_completion(full_id, day)
    _warn_if_unsaved(store)
    habit = store.get(full_id)
    state = "Done" if habit.is_completed_on(day) else "Not done"
    click.echo(f"{state}: {habit.title} on {day} (streak {habit.streak})")


@habits.command("rm")
@click.argument("habit_id")
def habits_rm(habit_id: str):
    """Delete a habit."""
    store = get_habit_store(load_config())
    full_id = _resolve_id(store.all(), habit_id)
    store.remove(full_id)
    _warn_if_unsaved(store)
    click.echo(f"Deleted habit {full_id[:8]}")


@habits.command("reset")
@click.confirmation_option(prompt="Delete all stored habits?")
def habits_reset():
    """Delete all habits, including unreadable stored data."""
    store = get_habit_store(load_config())
    if not store.reset():
        click.echo(f"Error: {store.last_error}", err=True)
        sys.exit(1)
    click.echo("All habits deleted.")


@habits.command("seed")
def habits_seed():
    """Add the example habits (only when there are none)."""
    store = get_habit_store(load_config())
    if store.seed_defaults():
        _warn_if_unsaved(store)
        click.echo(f"Added {len(store)} example habits.")
    else:
        click.echo("Habits already exist; nothing seeded.")


# ============== Calendar ==============


@main.group()
def calendar():
    """Show and edit calendar events."""


@calendar.command("day")
@click.option("--date", "-d", "target_date", default=None,
              help="Date to view (YYYY-MM-DD), defaults to today")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def calendar_day(target_date: str | None, as_json: bool):
    """Show a day's events."""
    source = get_calendar_source(load_config())
    day = _parse_date(target_date)
    events = source.events(day)

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "id": e.id,
                        "title": e.title,
                        "start": e.start.isoformat(),
                        "end": e.end.isoformat() if e.end else None,
                        "location": e.location,
                        "calendar": e.calendar,
                        "all_day": e.all_day,
                    }
                    for e in events
                ],
                indent=2,
            )
        )
        return

    if not source.has_access:
        click.echo("Calendar not connected.")
        return
    if not events:
        click.echo("No events.")
        return

    for event in events:
        loc = f" @ {event.location}" if event.location else ""
        click.echo(f"  {event.format_time():8} {event.title}{loc}")


@calendar.command("add")
@click.argument("title")
@click.option("--start", required=True, help="Start (YYYY-MM-DDTHH:MM)")
@click.option("--end", required=True, help="End (YYYY-MM-DDTHH:MM)")
@click.option("--notes", default=None, help="Event notes")
def calendar_add(title: str, start: str, end: str, notes: str | None):
    """Create a calendar event."""
    source = get_calendar_source(load_config())
    event = source.create_event(title, _parse_datetime(start), _parse_datetime(end), notes)
    if event is None:
        click.echo("Error: event not created (calendar not connected or read-only)", err=True)
        sys.exit(1)
    click.echo(f"Created event {event.id}: {event.title}")


@calendar.command("rm")
@click.argument("event_id")
def calendar_rm(event_id: str):
    """Delete a calendar event."""
    source = get_calendar_source(load_config())
    if not source.delete_event(event_id):
        click.echo(f"Error: event {event_id} not deleted", err=True)
        sys.exit(1)
    click.echo(f"Deleted event {event_id}")


@main.command("cal-auth")
@click.option("--account", default=None, help="Label of account to authenticate (default: all)")
def cal_auth(account: str | None):
    """Authenticate with Google Calendar."""
    config = load_config()

    if not config.google_accounts:
        click.echo("No Google accounts configured in chronograma.conf", err=True)
        sys.exit(1)

    if not config.google_client_secret_file:
        click.echo("GOOGLE_CLIENT_SECRET_FILE not set in chronograma.conf", err=True)
        sys.exit(1)

    from .adapters.google_calendar import GoogleCalendarAdapter

    for acct in config.google_accounts:
        if account and acct.label != account:
            continue

        click.echo(f"\nAuthenticating: {acct.label or acct.config_folder}")
        adapter = GoogleCalendarAdapter(
            config_folder=acct.config_folder,
            label=acct.label,
            client_secret_file=config.google_client_secret_file,
            timezone=config.timezone,
        )
        if adapter.authenticate():
            click.echo(f"  ✓ Token saved to {adapter._token_path}")
        else:
            click.echo("  ✗ Authentication failed", err=True)


if __name__ == "__main__":
    main()
