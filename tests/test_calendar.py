"""Tests for core calendar logic."""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from chronograma.core.calendar import (
    Event,
    day_window,
    filter_events_on_day,
    sort_events_by_start,
    to_local_naive,
)


@pytest.fixture
def today():
    return date(2025, 3, 17)


@pytest.fixture
def make_event(today):
    """Factory for creating events."""

    def _make(title: str, start_hour: int, end_hour: int | None, all_day: bool = False, day=None) -> Event:
        d = day or today
        start = datetime.combine(d, time(start_hour, 0))
        end = datetime.combine(d, time(end_hour, 0)) if end_hour is not None else None
        return Event(id=title, title=title, start=start, end=end, calendar="Test", all_day=all_day, source="test")

    return _make


class TestEvent:
    def test_format_time_regular(self, make_event):
        assert make_event("Meeting", 14, 15).format_time() == "14:00"

    def test_format_time_all_day(self, make_event):
        assert make_event("Holiday", 0, None, all_day=True).format_time() == "All day"


class TestOverlapsDay:
    def test_inside_day(self, make_event, today):
        assert make_event("Meeting", 10, 11).overlaps_day(today) is True

    def test_other_day(self, make_event, today):
        assert make_event("Meeting", 10, 11, day=today + timedelta(days=1)).overlaps_day(today) is False

    def test_spans_midnight_into_day(self, today):
        event = Event(
            id="1",
            title="Overnight",
            start=datetime.combine(today - timedelta(days=1), time(22, 0)),
            end=datetime.combine(today, time(2, 0)),
        )
        assert event.overlaps_day(today) is True

    def test_ends_exactly_at_midnight(self, today):
        event = Event(
            id="1",
            title="Late",
            start=datetime.combine(today - timedelta(days=1), time(22, 0)),
            end=datetime.combine(today, time(0, 0)),
        )
        assert event.overlaps_day(today) is False

    def test_zero_length_at_midnight(self, today):
        at = datetime.combine(today, time(0, 0))
        assert Event(id="1", title="Ping", start=at, end=at).overlaps_day(today) is True
        assert Event(id="1", title="Ping", start=at, end=None).overlaps_day(today) is True

    def test_zero_length_at_next_midnight(self, today):
        at = datetime.combine(today + timedelta(days=1), time(0, 0))
        assert Event(id="1", title="Ping", start=at, end=None).overlaps_day(today) is False

    def test_aware_event_uses_given_zone(self, today):
        # 23:30 UTC on the 16th is 00:30 on the 17th at UTC+1
        plus_one = timezone(timedelta(hours=1))
        event = Event(
            id="1",
            title="Call",
            start=datetime(2025, 3, 16, 23, 30, tzinfo=timezone.utc),
            end=datetime(2025, 3, 16, 23, 45, tzinfo=timezone.utc),
        )
        assert event.overlaps_day(today, plus_one) is True
        assert event.overlaps_day(today, timezone.utc) is False


class TestHelpers:
    def test_day_window(self, today):
        start, end = day_window(today)
        assert start == datetime(2025, 3, 17, 0, 0)
        assert end == datetime(2025, 3, 18, 0, 0)

    def test_to_local_naive_keeps_naive(self):
        dt = datetime(2025, 3, 17, 10, 0)
        assert to_local_naive(dt) is dt

    def test_to_local_naive_converts_aware(self):
        dt = datetime(2025, 3, 17, 10, 0, tzinfo=timezone.utc)
        assert to_local_naive(dt, timezone(timedelta(hours=9))) == datetime(2025, 3, 17, 19, 0)

    def test_filter_events_on_day(self, make_event, today):
        events = [
            make_event("Yesterday", 10, 11, day=today - timedelta(days=1)),
            make_event("Today", 10, 11),
        ]
        assert [e.title for e in filter_events_on_day(events, today)] == ["Today"]

    def test_sort_events_by_start(self, make_event):
        events = [make_event("Late", 15, 16), make_event("Early", 8, 9), make_event("Mid", 12, 13)]
        assert [e.title for e in sort_events_by_start(events)] == ["Early", "Mid", "Late"]
