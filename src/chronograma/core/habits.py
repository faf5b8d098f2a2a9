"""Pure habit domain logic - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import date, time, timedelta
from enum import Enum

from .tasks import new_id

WEEKDAY_NAMES = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]
WEEKDAYS = (True, True, True, True, True, False, False)
EVERY_DAY = (True,) * 7


class HabitColor(Enum):
    """Display colour tag for a habit."""

    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    PURPLE = "purple"
    ORANGE = "orange"
    GRAY = "gray"

    @classmethod
    def parse(cls, value: str | None) -> "HabitColor":
        """Parse a colour name; unknown names fall back to gray."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.GRAY


def weekday_index(day: date) -> int:
    """Weekday index, 0=Monday .. 6=Sunday."""
    return day.weekday()


def check_weekday_index(index: int) -> int:
    if not 0 <= index <= 6:
        raise ValueError(f"Weekday index must be 0-6, got {index}")
    return index


def parse_days(value: str) -> tuple[bool, ...]:
    """
    Parse a day set like "mon,wed,fri", "weekdays", "daily" or "1111100".

    Pure function - no I/O.
    """
    value = value.strip().lower()
    if value in ("daily", "everyday", "all"):
        return EVERY_DAY
    if value == "weekdays":
        return WEEKDAYS
    if value == "weekends":
        return (False,) * 5 + (True, True)
    if len(value) == 7 and set(value) <= {"0", "1"}:
        return tuple(c == "1" for c in value)

    days = [False] * 7
    for name in value.split(","):
        name = name.strip()[:3]
        if not name:
            continue
        if name not in WEEKDAY_NAMES:
            raise ValueError(f"Unknown weekday: {name!r}")
        days[WEEKDAY_NAMES.index(name)] = True
    return tuple(days)


def format_days(days: tuple[bool, ...]) -> str:
    """Format a day set for display, e.g. "mon,tue,wed"."""
    if all(days):
        return "daily"
    if tuple(days) == WEEKDAYS:
        return "weekdays"
    return ",".join(name for name, on in zip(WEEKDAY_NAMES, days) if on) or "never"


def parse_time(value: str) -> time:
    """Parse "HH:MM" into a time."""
    hours, _, minutes = value.strip().partition(":")
    return time(int(hours), int(minutes or 0))


@dataclass
class Habit:
    """A recurring habit on a fixed set of weekdays."""

    title: str
    days: tuple[bool, ...]
    start: time
    end: time
    color: HabitColor = HabitColor.RED
    completed_dates: set[date] = field(default_factory=set)
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        self.days = tuple(bool(d) for d in self.days)
        if len(self.days) != 7:
            raise ValueError(f"Habit days must have 7 entries, got {len(self.days)}")
        self.completed_dates = set(self.completed_dates)

    def is_active_on(self, index: int) -> bool:
        return self.days[check_weekday_index(index)]

    def is_completed_on(self, day: date) -> bool:
        return day in self.completed_dates

    @property
    def completed_on(self) -> date | None:
        """Most recent completed day."""
        return max(self.completed_dates, default=None)

    @property
    def streak(self) -> int:
        """Run of consecutive completed days ending at the most recent one."""
        count = 0
        day = self.completed_on
        while day is not None and day in self.completed_dates:
            count += 1
            day -= timedelta(days=1)
        return count

    def toggle(self, day: date) -> None:
        """Flip completion for one day; other days are left alone."""
        if day in self.completed_dates:
            self.completed_dates.remove(day)
        else:
            self.completed_dates.add(day)

    def format_time_range(self) -> str:
        start = self.start.strftime("%H:%M")
        if self.start == self.end:
            return start
        return f"{start} - {self.end.strftime('%H:%M')}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "days": list(self.days),
            "start": self.start.strftime("%H:%M"),
            "end": self.end.strftime("%H:%M"),
            "color": self.color.value,
            "completed_dates": [d.isoformat() for d in sorted(self.completed_dates)],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Habit":
        """Create Habit from a persisted record."""
        return cls(
            id=data["id"],
            title=data["title"],
            days=tuple(data["days"]),
            start=parse_time(data["start"]),
            end=parse_time(data.get("end") or data["start"]),
            color=HabitColor.parse(data.get("color")),
            completed_dates={date.fromisoformat(d) for d in data.get("completed_dates") or []},
        )


def habits_for_weekday(habits: list[Habit], index: int) -> list[Habit]:
    """
    Filter to habits active on a weekday index.

    Pure function - no I/O.
    """
    check_weekday_index(index)
    return [h for h in habits if h.days[index]]


def default_habits() -> list[Habit]:
    """Example habits offered to a new user."""
    return [
        Habit(title="Wake up", days=WEEKDAYS, start=time(7, 0), end=time(7, 0), color=HabitColor.ORANGE),
        Habit(title="Work", days=WEEKDAYS, start=time(9, 0), end=time(17, 0), color=HabitColor.BLUE),
        Habit(title="Sleep", days=EVERY_DAY, start=time(22, 0), end=time(22, 0), color=HabitColor.PURPLE),
    ]
