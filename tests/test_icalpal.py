"""Tests for icalPal adapter."""

import json
import subprocess
from datetime import datetime
from unittest.mock import patch, MagicMock

from chronograma.adapters.icalpal import IcalPalAdapter

START = datetime(2025, 3, 17, 0, 0)
END = datetime(2025, 3, 18, 0, 0)

SAMPLE = [
    {
        "UUID": "u1",
        "title": "Standup",
        "calendar": "Work",
        "sctime": "2025-03-17 10:00:00 +0900",
        "ectime": "2025-03-17 10:15:00 +0900",
        "location": "Room A",
        "all_day": 0,
    },
    {
        "UUID": "u2",
        "title": "Dentist",
        "calendar": "Home",
        "sctime": "2025-03-17 15:00:00 +0900",
        "ectime": "2025-03-17 16:00:00 +0900",
        "address": "1 Main St",
    },
    {
        "UUID": "u3",
        "title": "Holiday",
        "calendar": "Holidays",
        "sctime": "2025-03-17 00:00:00 +0000",
        "all_day": 1,
    },
]


def completed(data) -> MagicMock:
    return MagicMock(stdout=json.dumps(data), returncode=0)


class TestIcalPalAdapter:
    @patch("chronograma.adapters.icalpal.shutil.which")
    def test_access_requires_binary(self, mock_which):
        mock_which.return_value = None
        assert IcalPalAdapter().request_read_access() is False
        mock_which.return_value = "/opt/homebrew/bin/icalPal"
        assert IcalPalAdapter().request_read_access() is True

    @patch("chronograma.adapters.icalpal.subprocess.run")
    def test_command_uses_date_range(self, mock_run):
        mock_run.return_value = completed([])
        IcalPalAdapter().query_events(START, END)

        cmd = mock_run.call_args[0][0]
        assert cmd == ["icalPal", "events", "--from", "2025-03-17", "--to", "2025-03-17", "-o", "json"]

    @patch("chronograma.adapters.icalpal.subprocess.run")
    def test_parses_events(self, mock_run):
        mock_run.return_value = completed(SAMPLE)
        events = IcalPalAdapter().query_events(START, END)

        assert [e.title for e in events] == ["Standup", "Dentist", "Holiday"]
        assert events[0].id == "u1"
        assert events[0].start == datetime(2025, 3, 17, 10, 0)
        assert events[0].end == datetime(2025, 3, 17, 10, 15)
        assert events[0].location == "Room A"
        assert events[1].location == "1 Main St"
        assert events[2].all_day is True
        assert events[2].end is None
        assert all(e.source == "icalpal" for e in events)

    @patch("chronograma.adapters.icalpal.subprocess.run")
    def test_include_filter(self, mock_run):
        mock_run.return_value = completed(SAMPLE)
        events = IcalPalAdapter(include_calendars=["Work"]).query_events(START, END)
        assert [e.title for e in events] == ["Standup"]

    @patch("chronograma.adapters.icalpal.subprocess.run")
    def test_exclude_filter(self, mock_run):
        mock_run.return_value = completed(SAMPLE)
        events = IcalPalAdapter(exclude_calendars=["Holidays"]).query_events(START, END)
        assert [e.title for e in events] == ["Standup", "Dentist"]

    @patch("chronograma.adapters.icalpal.subprocess.run")
    def test_skips_malformed_events(self, mock_run):
        mock_run.return_value = completed([{"title": "No start"}, {"title": "Bad", "sctime": "garbage"}])
        assert IcalPalAdapter().query_events(START, END) == []

    @patch("chronograma.adapters.icalpal.subprocess.run")
    def test_command_failure_returns_empty(self, mock_run):
        mock_run.side_effect = subprocess.CalledProcessError(1, "icalPal")
        assert IcalPalAdapter().query_events(START, END) == []

    @patch("chronograma.adapters.icalpal.subprocess.run")
    def test_missing_binary_returns_empty(self, mock_run):
        mock_run.side_effect = FileNotFoundError()
        assert IcalPalAdapter().query_events(START, END) == []

    @patch("chronograma.adapters.icalpal.subprocess.run")
    def test_timeout_returns_empty(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired("icalPal", 30)
        assert IcalPalAdapter().query_events(START, END) == []

    @patch("chronograma.adapters.icalpal.subprocess.run")
    def test_bad_json_returns_empty(self, mock_run):
        mock_run.return_value = MagicMock(stdout="not json", returncode=0)
        assert IcalPalAdapter().query_events(START, END) == []

    def test_read_only(self):
        adapter = IcalPalAdapter()
        assert adapter.create_event("x", START, END) is None
        assert adapter.delete_event("u1") is False
