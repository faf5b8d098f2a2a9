"""Ports - interfaces/protocols for external dependencies."""

from .calendar_provider import CalendarProvider
from .kv_store import KeyValueStore

__all__ = [
    "CalendarProvider",
    "KeyValueStore",
]
