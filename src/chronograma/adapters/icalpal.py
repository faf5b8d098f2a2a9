"""icalPal adapter - subprocess wrapper for macOS Calendar."""

import json
import logging
import shutil
import subprocess
from datetime import datetime, timedelta

from chronograma.core.calendar import Event

logger = logging.getLogger(__name__)


class IcalPalAdapter:
    """
    icalPal subprocess adapter.

    Implements CalendarProvider protocol (read-only). Read access is granted
    when the icalPal CLI is installed.
    """

    def __init__(
        self,
        include_calendars: list[str] | None = None,
        exclude_calendars: list[str] | None = None,
        timeout: int = 30,
        binary: str = "icalPal",
    ):
        self.include_calendars = include_calendars
        self.exclude_calendars = exclude_calendars
        self.timeout = timeout
        self.binary = binary

    def request_read_access(self) -> bool:
        if shutil.which(self.binary) is None:
            logger.warning("icalPal not found - install with 'brew install icalpal'")
            return False
        return True

    def query_events(self, start: datetime, end: datetime) -> list[Event]:
        """Fetch events intersecting [start, end)."""
        # --to is inclusive of the whole day
        last_day = (end - timedelta(microseconds=1)).date()
        try:
            cmd = [
                self.binary,
                "events",
                "--from",
                start.date().isoformat(),
                "--to",
                last_day.isoformat(),
                "-o",
                "json",
            ]
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
            data = json.loads(result.stdout) if result.stdout else []
        except subprocess.CalledProcessError as e:
            logger.warning(f"icalPal command failed: {e}")
            return []
        except FileNotFoundError:
            logger.warning("icalPal not found - install with 'brew install icalpal'")
            return []
        except subprocess.TimeoutExpired:
            logger.warning(f"icalPal timed out after {self.timeout}s")
            return []
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse icalPal output: {e}")
            return []

        return self._parse_events(data)

    def create_event(
        self, title: str, start: datetime, end: datetime, notes: str | None = None
    ) -> Event | None:
        logger.warning("icalPal is read-only; event not created")
        return None

    def delete_event(self, event_id: str) -> bool:
        logger.warning("icalPal is read-only; event not deleted")
        return False

    def _parse_events(self, data: list[dict]) -> list[Event]:
        """Parse icalPal JSON output into Event objects."""
        events = []

        for item in data:
            cal_name = item.get("calendar", "")

            # Apply calendar filters
            if self.include_calendars and cal_name not in self.include_calendars:
                continue
            if self.exclude_calendars and cal_name in self.exclude_calendars:
                continue

            try:
                event = self._parse_event(item)
                if event:
                    events.append(event)
            except (ValueError, KeyError, TypeError) as e:
                logger.debug(f"Skipping malformed event: {e}")
                continue

        return events

    def _parse_event(self, item: dict) -> Event | None:
        """Parse a single event from icalPal data."""
        is_all_day = item.get("all_day") == 1

        # Use sctime/ectime strings - they have correct dates for recurring events
        sctime = item.get("sctime", "")
        ectime = item.get("ectime", "")

        if sctime:
            start = datetime.strptime(sctime[:19], "%Y-%m-%d %H:%M:%S")
        elif item.get("sseconds"):
            start = datetime.fromtimestamp(item["sseconds"])
        else:
            return None

        if ectime:
            end = datetime.strptime(ectime[:19], "%Y-%m-%d %H:%M:%S")
        elif item.get("eseconds"):
            end = datetime.fromtimestamp(item["eseconds"])
        else:
            end = None

        return Event(
            id=str(item.get("UUID") or item.get("ROWID") or ""),
            title=item.get("title", "Untitled"),
            start=start,
            end=end,
            location=item.get("location") or item.get("address") or "",
            calendar=item.get("calendar", ""),
            all_day=is_all_day,
            source="icalpal",
        )