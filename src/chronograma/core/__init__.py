"""Functional core - pure business logic with no I/O."""

from .tasks import Task, Priority
from .habits import Habit, HabitColor, habits_for_weekday, weekday_index, default_habits
from .calendar import Event, filter_events_on_day, sort_events_by_start, to_local_naive
from .timeline import ItemKind, TimelineItem, aggregate, format_timeline_line

__all__ = [
    # Tasks
    "Task",
    "Priority",
    # Habits
    "Habit",
    "HabitColor",
    "habits_for_weekday",
    "weekday_index",
    "default_habits",
    # Calendar
    "Event",
    "filter_events_on_day",
    "sort_events_by_start",
    "to_local_naive",
    # Timeline
    "ItemKind",
    "TimelineItem",
    "aggregate",
    "format_timeline_line",
]
