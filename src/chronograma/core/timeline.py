"""Pure timeline assembly logic - no I/O dependencies."""

from dataclasses import dataclass
from datetime import date, time, tzinfo
from enum import Enum

from .calendar import Event, day_window, to_local_naive
from .habits import Habit, habits_for_weekday, weekday_index
from .tasks import Task


class ItemKind(Enum):
    """Where a timeline item came from. Declaration order is the tie-break order."""

    EVENT = "event"
    TASK = "task"
    HABIT = "habit"


_KIND_ORDER = {kind: i for i, kind in enumerate(ItemKind)}


@dataclass(frozen=True)
class TimelineItem:
    """A transient, display-oriented projection of an event, task or habit."""

    time: time | None
    title: str
    kind: ItemKind
    completed: bool = False
    source_id: str | None = None
    end: time | None = None
    color: str = ""

    def format_time(self) -> str:
        if self.time is None:
            return "All day"
        return self.time.strftime("%H:%M")


def _event_item(event: Event, day: date, tz: tzinfo | None) -> TimelineItem:
    day_start, day_end = day_window(day)
    start = to_local_naive(event.start, tz)
    end = to_local_naive(event.end, tz) if event.end else None

    if event.all_day:
        item_time = None
    elif start < day_start:
        # Started on an earlier day
        item_time = time(0, 0)
    else:
        item_time = start.time()

    end_time = None
    if end and not event.all_day and end < day_end:
        end_time = end.time()

    return TimelineItem(
        time=item_time,
        title=event.title,
        kind=ItemKind.EVENT,
        end=end_time,
        color=event.calendar,
    )


def _task_item(task: Task, tz: tzinfo | None) -> TimelineItem:
    at = to_local_naive(task.timeline_at, tz)
    return TimelineItem(
        time=at.time(),
        title=task.title,
        kind=ItemKind.TASK,
        completed=task.completed,
        source_id=task.id,
        color=task.priority.value,
    )


def _habit_item(habit: Habit, day: date) -> TimelineItem:
    return TimelineItem(
        time=habit.start,
        title=habit.title,
        kind=ItemKind.HABIT,
        completed=habit.is_completed_on(day),
        source_id=habit.id,
        end=habit.end if habit.end != habit.start else None,
        color=habit.color.value,
    )


def aggregate(
    day: date,
    events: list[Event],
    tasks: list[Task],
    habits: list[Habit],
    tz: tzinfo | None = None,
) -> list[TimelineItem]:
    """
    Merge calendar events, tasks and habits into one ordered list for a day.

    Pure function - no I/O, never mutates its inputs.

    Args:
        day: The local date to build the timeline for
        events: Calendar events (anything not overlapping the day is dropped)
        tasks: All tasks (those whose scheduled/due instant is on the day are kept)
        habits: All habits (those active on the day's weekday are kept)
        tz: Zone used to read aware datetimes (system local time when None)

    Returns:
        TimelineItems sorted by time of day. Items without a time (all-day
        events) sort first, as if at 00:00. Ties keep kind order (events,
        tasks, habits) and then each source's original order.
    """
    items: list[TimelineItem] = []

    for event in events:
        if event.overlaps_day(day, tz):
            items.append(_event_item(event, day, tz))

    for task in tasks:
        at = task.timeline_at
        if at and to_local_naive(at, tz).date() == day:
            items.append(_task_item(task, tz))

    for habit in habits_for_weekday(habits, weekday_index(day)):
        items.append(_habit_item(habit, day))

    def sort_key(indexed: tuple[int, TimelineItem]) -> tuple[time, int, int]:
        index, item = indexed
        return (item.time or time(0, 0), _KIND_ORDER[item.kind], index)

    return [item for _, item in sorted(enumerate(items), key=sort_key)]


_KIND_LABELS = {ItemKind.EVENT: "event", ItemKind.TASK: "task", ItemKind.HABIT: "habit"}


def format_timeline_line(item: TimelineItem) -> str:
    """
    Format a single timeline item for display.

    Pure function - no I/O.
    """
    mark = "x" if item.completed else " "
    time_str = item.format_time()
    if item.end:
        time_str = f"{time_str}-{item.end.strftime('%H:%M')}"
    return f"[{mark}] {time_str:11} {item.title} ({_KIND_LABELS[item.kind]})"
