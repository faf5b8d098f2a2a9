"""Adapters - I/O implementations of ports."""

from .file_store import FileKeyValueStore, MemoryKeyValueStore
from .google_calendar import GoogleCalendarAdapter
from .icalpal import IcalPalAdapter
from .composite_calendar import CompositeCalendarAdapter

__all__ = [
    "FileKeyValueStore",
    "MemoryKeyValueStore",
    "GoogleCalendarAdapter",
    "IcalPalAdapter",
    "CompositeCalendarAdapter",
]
