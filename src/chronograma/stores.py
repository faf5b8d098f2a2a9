"""Task and habit stores: in-memory collections persisted to a key/value store."""

import json
import logging
from datetime import date, datetime, time
from typing import Callable, Iterable

from .core.habits import Habit, HabitColor, default_habits, habits_for_weekday
from .core.tasks import Priority, Task
from .ports.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"
HABITS_KEY = "habits"


class StoreError(Exception):
    """Raised (and recorded) when a collection can't be loaded or saved."""


class _CollectionStore:
    """
    Shared persistence and notification for a list of records.

    Every mutation re-serializes the whole collection under one key. A failed
    save or load never raises; it returns False and is kept in `last_error`,
    leaving the in-memory collection authoritative.

    After a failed load nothing is written until a load succeeds or `reset()`
    is called, so unreadable data is never replaced by a partial collection.
    """

    key = ""
    record_type: type = object

    def __init__(self, storage: KeyValueStore):
        self._storage = storage
        self._items: list = []
        self._listeners: list[Callable[[list], None]] = []
        self.last_error: StoreError | None = None
        self._load_failed = False

    def __len__(self) -> int:
        return len(self._items)

    def all(self) -> list:
        """Current records, insertion order preserved."""
        return list(self._items)

    def get(self, item_id: str):
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def _index_of(self, item_id: str) -> int | None:
        for i, item in enumerate(self._items):
            if item.id == item_id:
                return i
        return None

    # ---- persistence ----

    def load(self) -> bool:
        """Replace the in-memory collection with the persisted one."""
        try:
            raw = self._storage.get(self.key)
            if raw is None:
                items = []
            else:
                data = json.loads(raw)
                if not isinstance(data, list):
                    raise ValueError(f"expected a JSON array, got {type(data).__name__}")
                items = [self.record_type.from_dict(record) for record in data]
        except Exception as e:
            self.last_error = StoreError(f"Failed to load {self.key!r}: {e}")
            self.last_error.__cause__ = e
            logger.warning(str(self.last_error))
            self._load_failed = True
            return False

        self._items = items
        self.last_error = None
        self._load_failed = False
        logger.debug(f"Loaded {len(items)} records from {self.key!r}")
        return True

    def save(self) -> bool:
        """Serialize the whole collection to storage."""
        if self._load_failed:
            self.last_error = StoreError(
                f"Not saving {self.key!r}: stored data could not be loaded (reset to discard it)"
            )
            logger.warning(str(self.last_error))
            return False

        try:
            payload = json.dumps([item.to_dict() for item in self._items], ensure_ascii=False)
            self._storage.set(self.key, payload.encode("utf-8"))
        except Exception as e:
            self.last_error = StoreError(f"Failed to save {self.key!r}: {e}")
            self.last_error.__cause__ = e
            logger.warning(str(self.last_error))
            return False

        self.last_error = None
        return True

    def reset(self) -> bool:
        """Discard the stored collection and start empty."""
        self._items = []
        self._load_failed = False
        logger.info(f"Resetting {self.key!r}")
        self._changed()
        return self.last_error is None

    # ---- notifications ----

    def subscribe(self, listener: Callable[[list], None]) -> Callable[[], None]:
        """Register a listener called with the collection after every mutation."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        self.save()
        snapshot = self.all()
        for listener in list(self._listeners):
            listener(snapshot)

    # ---- shared mutations ----

    def _append(self, item) -> None:
        if self.get(item.id) is not None:
            raise ValueError(f"Duplicate id: {item.id}")
        self._items.append(item)
        self._changed()

    def remove(self, item_id: str) -> bool:
        """Delete the record with this id. Returns False if not found."""
        index = self._index_of(item_id)
        if index is None:
            return False
        del self._items[index]
        self._changed()
        return True

    def remove_at(self, indices: Iterable[int]) -> int:
        """Delete records by position. Out-of-range positions are ignored."""
        doomed = {i for i in indices if 0 <= i < len(self._items)}
        if not doomed:
            return 0
        self._items = [item for i, item in enumerate(self._items) if i not in doomed]
        self._changed()
        return len(doomed)


def _require_title(title: str) -> str:
    if not title or not title.strip():
        raise ValueError("title is required")
    return title.strip()


class TaskStore(_CollectionStore):
    """Owns the task collection."""

    key = TASKS_KEY
    record_type = Task

    def add(
        self,
        title: str,
        priority: Priority = Priority.MEDIUM,
        due: datetime | None = None,
        scheduled: datetime | None = None,
    ) -> Task:
        task = Task(title=_require_title(title), priority=priority, due=due, scheduled=scheduled)
        self._append(task)
        logger.debug(f"Task added id={task.id} priority={priority.value} due={due}")
        return task

    def toggle_completion(self, task_id: str) -> bool:
        """Flip completion. Returns False (and changes nothing) if not found."""
        task = self.get(task_id)
        if task is None:
            return False
        task.completed = not task.completed
        self._changed()
        return True

    def update(self, task_id: str, **fields) -> Task | None:
        """Edit title/priority/due/scheduled in place."""
        task = self.get(task_id)
        if task is None:
            return None
        for name, value in fields.items():
            if name not in ("title", "priority", "due", "scheduled"):
                raise TypeError(f"Unknown task field: {name}")
            if name == "title":
                value = _require_title(value)
            setattr(task, name, value)
        self._changed()
        return task


class HabitStore(_CollectionStore):
    """Owns the habit collection."""

    key = HABITS_KEY
    record_type = Habit

    def add(
        self,
        title: str,
        days: Iterable[bool],
        start: time,
        end: time | None = None,
        color: HabitColor = HabitColor.RED,
    ) -> Habit:
        habit = Habit(
            title=_require_title(title),
            days=tuple(days),
            start=start,
            end=end or start,
            color=color,
        )
        self._append(habit)
        logger.debug(f"Habit added id={habit.id} start={start}")
        return habit

    def toggle_completion(self, habit_id: str, day: date | None = None) -> bool:
        """Flip completion for a day. Returns False (and changes nothing) if not found."""
        habit = self.get(habit_id)
        if habit is None:
            return False
        habit.toggle(day or date.today())
        self._changed()
        return True

    def update(self, habit_id: str, **fields) -> Habit | None:
        """Edit title/days/start/end/color in place."""
        habit = self.get(habit_id)
        if habit is None:
            return None
        for name, value in fields.items():
            if name not in ("title", "days", "start", "end", "color"):
                raise TypeError(f"Unknown habit field: {name}")
            if name == "title":
                value = _require_title(value)
            elif name == "days":
                value = tuple(bool(d) for d in value)
                if len(value) != 7:
                    raise ValueError(f"Habit days must have 7 entries, got {len(value)}")
            setattr(habit, name, value)
        self._changed()
        return habit

    def for_weekday(self, index: int) -> list[Habit]:
        """Habits active on a weekday index (0=Monday .. 6=Sunday)."""
        return habits_for_weekday(self._items, index)

    def seed_defaults(self) -> bool:
        """Add the example habits if the store is empty. Returns True if seeded."""
        if self._items:
            return False
        self._items = default_habits()
        self._changed()
        logger.info(f"Seeded {len(self._items)} default habits")
        return True
