"""Calendar source: permission-gated reads from the configured calendar provider."""

import logging
from datetime import date, datetime, tzinfo

from .adapters.composite_calendar import CompositeCalendarAdapter
from .adapters.google_calendar import GoogleCalendarAdapter
from .adapters.icalpal import IcalPalAdapter
from .config import Config
from .core.calendar import Event, day_window, filter_events_on_day, sort_events_by_start
from .ports.calendar_provider import CalendarProvider

logger = logging.getLogger(__name__)


class NoCalendarAdapter:
    """
    Provider used when no calendar backend is configured.

    Implements CalendarProvider protocol; access is always denied.
    """

    def request_read_access(self) -> bool:
        return False

    def query_events(self, start: datetime, end: datetime) -> list[Event]:
        return []

    def create_event(
        self, title: str, start: datetime, end: datetime, notes: str | None = None
    ) -> Event | None:
        return None

    def delete_event(self, event_id: str) -> bool:
        return False


class CalendarSource:
    """
    Read-only view of a calendar provider, one day at a time.

    Read access is requested once, before the first read. When it is denied
    every read returns an empty list rather than failing.
    """

    def __init__(self, provider: CalendarProvider, tz: tzinfo | None = None):
        self.provider = provider
        self.tz = tz
        self._access: bool | None = None

    @property
    def has_access(self) -> bool:
        if self._access is None:
            self.refresh_access()
        return bool(self._access)

    def refresh_access(self) -> bool:
        """Ask the provider for read access again."""
        try:
            self._access = bool(self.provider.request_read_access())
        except Exception as e:
            logger.warning(f"Calendar access request failed: {e}")
            self._access = False
        if not self._access:
            logger.info("Calendar read access not granted; calendar events will be empty")
        return self._access

    def events(self, day: date) -> list[Event]:
        """All events overlapping the 24 hours from local midnight of a day."""
        if not self.has_access:
            return []

        start, end = day_window(day)
        try:
            events = self.provider.query_events(start, end)
        except Exception as e:
            logger.warning(f"Calendar query failed for {day}: {e}")
            return []

        return sort_events_by_start(filter_events_on_day(events, day, self.tz), self.tz)

    def create_event(
        self, title: str, start: datetime, end: datetime, notes: str | None = None
    ) -> Event | None:
        if not self.has_access:
            return None
        return self.provider.create_event(title, start, end, notes)

    def delete_event(self, event_id: str) -> bool:
        if not self.has_access:
            return False
        return self.provider.delete_event(event_id)


def build_provider(config: Config) -> CalendarProvider:
    """Pick the calendar provider named by CALENDAR_BACKEND."""
    match config.calendar_backend:
        case "google":
            adapters = [
                GoogleCalendarAdapter(
                    config_folder=account.config_folder,
                    label=account.label,
                    calendars=account.calendars or None,
                    client_secret_file=config.google_client_secret_file,
                    timezone=config.timezone,
                )
                for account in config.google_accounts
            ]
            if not adapters:
                logger.warning("CALENDAR_BACKEND=google but no GOOGLE_ACCOUNTS configured")
            return CompositeCalendarAdapter(adapters)
        case "icalpal":
            return IcalPalAdapter(
                include_calendars=config.icalpal_include_calendars or None,
                exclude_calendars=config.icalpal_exclude_calendars or None,
            )
        case _:
            return NoCalendarAdapter()
