"""Calendar provider interface."""

from datetime import datetime
from typing import Protocol

from chronograma.core.calendar import Event


class CalendarProvider(Protocol):
    """Interface for reading (and optionally writing) a device or account calendar."""

    def request_read_access(self) -> bool:
        """Ask for calendar read access. Returns True if granted."""
        ...

    def query_events(self, start: datetime, end: datetime) -> list[Event]:
        """Fetch events intersecting [start, end)."""
        ...

    def create_event(
        self, title: str, start: datetime, end: datetime, notes: str | None = None
    ) -> Event | None:
        """Create an event. Returns None if the provider can't write."""
        ...

    def delete_event(self, event_id: str) -> bool:
        """Delete an event by id. Returns True on success."""
        ...
