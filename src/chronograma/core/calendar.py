"""Pure calendar domain logic - no I/O dependencies."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo


@dataclass
class Event:
    """A calendar event, owned by the calendar provider."""

    id: str
    title: str
    start: datetime
    end: datetime | None
    location: str = ""
    calendar: str = ""
    all_day: bool = False
    source: str = ""

    def format_time(self) -> str:
        """Format the event time for display."""
        if self.all_day:
            return "All day"
        return self.start.strftime("%H:%M")

    def overlaps_day(self, day: date, tz: tzinfo | None = None) -> bool:
        """Check if this event intersects the 24 hours from local midnight of a day."""
        day_start, day_end = day_window(day)
        start = to_local_naive(self.start, tz)
        end = to_local_naive(self.end, tz) if self.end else start
        if end <= start:
            # Zero-length (or inverted) events count where they start
            return day_start <= start < day_end
        return start < day_end and end > day_start


def day_window(day: date) -> tuple[datetime, datetime]:
    """Local-midnight window [start, end) for a date."""
    start = datetime.combine(day, time(0, 0))
    return start, start + timedelta(days=1)


def to_local_naive(dt: datetime, tz: tzinfo | None = None) -> datetime:
    """
    Convert a datetime to naive local time.

    Aware datetimes are converted into tz (system local time when tz is None);
    naive datetimes are assumed to be local already.
    """
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(tz).replace(tzinfo=None)


def filter_events_on_day(events: list[Event], day: date, tz: tzinfo | None = None) -> list[Event]:
    """
    Filter events to those overlapping a date.

    Pure function - no I/O.
    """
    return [e for e in events if e.overlaps_day(day, tz)]


def sort_events_by_start(events: list[Event], tz: tzinfo | None = None) -> list[Event]:
    """Sort events by start time."""
    return sorted(events, key=lambda e: to_local_naive(e.start, tz))
