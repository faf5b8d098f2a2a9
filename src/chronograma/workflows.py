"""Shared workflow layer: builds stores and sources from config.

The CLI (or any other front end) asks here for ready-to-use stores and for a
day's timeline, so wiring lives in one place.
"""

import logging
from datetime import date
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .adapters.file_store import FileKeyValueStore
from .calendar import CalendarSource, build_provider
from .config import Config
from .core.timeline import TimelineItem, aggregate
from .ports.kv_store import KeyValueStore
from .stores import HabitStore, TaskStore

logger = logging.getLogger(__name__)


def get_storage(config: Config) -> FileKeyValueStore:
    """Resolve the key/value store directory from config."""
    return FileKeyValueStore(config.data_path)


def get_timezone(config: Config) -> ZoneInfo | None:
    try:
        return ZoneInfo(config.timezone) if config.timezone else None
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {config.timezone!r}; using system local time")
        return None


def get_task_store(config: Config, storage: KeyValueStore | None = None) -> TaskStore:
    store = TaskStore(storage if storage is not None else get_storage(config))
    store.load()
    return store


def get_habit_store(config: Config, storage: KeyValueStore | None = None) -> HabitStore:
    """Load habits, seeding the examples only when the config opts in."""
    store = HabitStore(storage if storage is not None else get_storage(config))
    if store.load() and config.seed_default_habits:
        store.seed_defaults()
    return store


def get_calendar_source(config: Config) -> CalendarSource:
    return CalendarSource(build_provider(config), tz=get_timezone(config))


def build_timeline(
    day: date,
    source: CalendarSource,
    tasks: TaskStore,
    habits: HabitStore,
) -> list[TimelineItem]:
    """Pull from the calendar and both stores, then merge for one day."""
    return aggregate(
        day,
        source.events(day),
        tasks.all(),
        habits.for_weekday(day.weekday()),
        tz=source.tz,
    )


def compile_today(config: Config, day: date | None = None) -> list[TimelineItem]:
    """Build the timeline for a day straight from config."""
    day = day or date.today()
    storage = get_storage(config)
    return build_timeline(
        day,
        get_calendar_source(config),
        get_task_store(config, storage),
        get_habit_store(config, storage),
    )
