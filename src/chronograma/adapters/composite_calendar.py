"""Composite calendar adapter - combines multiple calendar providers."""

import logging
from datetime import datetime

from chronograma.core.calendar import Event, sort_events_by_start
from chronograma.ports.calendar_provider import CalendarProvider

logger = logging.getLogger(__name__)


class CompositeCalendarAdapter:
    """
    Composite calendar adapter that merges several providers.

    Implements CalendarProvider protocol. Only providers that granted read
    access are queried; writes go to the first granted provider that accepts them.
    """

    def __init__(self, providers: list[CalendarProvider]):
        self._providers = list(providers)
        self._granted: list[CalendarProvider] = []

    def request_read_access(self) -> bool:
        """Granted if at least one provider grants access."""
        self._granted = [p for p in self._providers if p.request_read_access()]
        logger.debug(f"{len(self._granted)}/{len(self._providers)} calendar providers granted access")
        return bool(self._granted)

    def query_events(self, start: datetime, end: datetime) -> list[Event]:
        """Fetch events from all granted providers, sorted by start."""
        events = []
        for provider in self._granted:
            events.extend(provider.query_events(start, end))
        return sort_events_by_start(events)

    def create_event(
        self, title: str, start: datetime, end: datetime, notes: str | None = None
    ) -> Event | None:
        for provider in self._granted:
            event = provider.create_event(title, start, end, notes)
            if event:
                return event
        return None

    def delete_event(self, event_id: str) -> bool:
        return any(provider.delete_event(event_id) for provider in self._granted)
