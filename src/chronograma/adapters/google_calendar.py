"""Google Calendar API adapter."""

import logging
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from chronograma.core.calendar import Event

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/calendar.readonly",
    "https://www.googleapis.com/auth/calendar.events",
]


class GoogleCalendarAdapter:
    """
    Reads and writes events in Google Calendar via the API.

    Implements CalendarProvider protocol. Read access is granted when a
    usable OAuth token exists for the account (see `authenticate`).
    """

    def __init__(
        self,
        config_folder: str,
        label: str | None = None,
        calendars: list[str] | None = None,
        client_secret_file: str = "",
        timezone: str = "UTC",
    ):
        self.config_folder = config_folder
        self.label = label or Path(config_folder).name
        self.calendars = calendars
        self.client_secret_file = client_secret_file
        self.timezone = timezone
        self._token_path = Path(config_folder).expanduser() / "token.json"

    def _get_credentials(self):
        """Load credentials from token.json, refreshing if needed."""
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials

        if not self._token_path.exists():
            logger.warning(f"No token.json for {self.label} — run 'chronograma cal-auth'")
            return None

        creds = Credentials.from_authorized_user_file(str(self._token_path), SCOPES)

        if creds.expired and creds.refresh_token:
            try:
                creds.refresh(Request())
                self._token_path.write_text(creds.to_json())
                self._token_path.chmod(0o600)
            except Exception as e:
                logger.warning(f"Failed to refresh token for {self.label}: {e}")
                return None

        return creds

    def _build_service(self):
        """Build a Google Calendar API service."""
        from googleapiclient.discovery import build

        creds = self._get_credentials()
        if not creds:
            return None
        return build("calendar", "v3", credentials=creds)

    def _resolve_calendar_ids(self, service) -> list[str]:
        """Resolve display name filters to calendar IDs."""
        if not self.calendars:
            return ["primary"]

        result = service.calendarList().list().execute()
        cal_map = {}
        for entry in result.get("items", []):
            cal_map[entry["summary"]] = entry["id"]

        ids = []
        for name in self.calendars:
            if name in cal_map:
                ids.append(cal_map[name])
            else:
                logger.warning(f"Calendar '{name}' not found for {self.label}")
        return ids or ["primary"]

    def _aware(self, dt: datetime) -> datetime:
        if dt.tzinfo is None:
            return dt.replace(tzinfo=ZoneInfo(self.timezone))
        return dt

    def authenticate(self) -> bool:
        """Run OAuth flow for this account. Returns True on success."""
        from google_auth_oauthlib.flow import InstalledAppFlow

        if not self.client_secret_file:
            logger.error("No client secret file configured")
            return False

        secret_path = Path(self.client_secret_file).expanduser()
        if not secret_path.exists():
            logger.error(f"Client secret file not found: {secret_path}")
            return False

        flow = InstalledAppFlow.from_client_secrets_file(str(secret_path), SCOPES)
        creds = flow.run_local_server(port=0)

        token_dir = self._token_path.parent
        token_dir.mkdir(parents=True, exist_ok=True)
        self._token_path.write_text(creds.to_json())
        self._token_path.chmod(0o600)
        return True

    def request_read_access(self) -> bool:
        """Access is granted when a token exists and can be refreshed."""
        try:
            return self._get_credentials() is not None
        except Exception as e:
            logger.warning(f"Unusable token for {self.label}: {e}")
            return False

    def query_events(self, start: datetime, end: datetime) -> list[Event]:
        """Fetch events intersecting [start, end)."""
        try:
            return self._query_api(start, end)
        except Exception as e:
            logger.warning(f"Google Calendar API error for {self.label}: {e}")
            return []

    def _query_api(self, start: datetime, end: datetime) -> list[Event]:
        service = self._build_service()
        if not service:
            return []

        time_min = self._aware(start).isoformat()
        time_max = self._aware(end).isoformat()

        events = []
        for cal_id in self._resolve_calendar_ids(service):
            result = (
                service.events()
                .list(
                    calendarId=cal_id,
                    timeMin=time_min,
                    timeMax=time_max,
                    singleEvents=True,
                    orderBy="startTime",
                    timeZone=self.timezone,
                )
                .execute()
            )

            for item in result.get("items", []):
                if _is_declined(item):
                    continue
                event = self._parse_event(item)
                if event:
                    events.append(event)

        return events

    def _parse_event(self, item: dict) -> Event | None:
        start_raw = item.get("start", {})
        end_raw = item.get("end", {})

        if "date" in start_raw:
            # All-day event — attach timezone so sorting with timed events works
            tz = ZoneInfo(self.timezone)
            start_dt = datetime.fromisoformat(start_raw["date"]).replace(tzinfo=tz)
            end_dt = datetime.fromisoformat(end_raw["date"]).replace(tzinfo=tz) if "date" in end_raw else None
            all_day = True
        elif "dateTime" in start_raw:
            start_dt = datetime.fromisoformat(start_raw["dateTime"])
            end_dt = datetime.fromisoformat(end_raw["dateTime"]) if "dateTime" in end_raw else None
            all_day = False
        else:
            return None

        return Event(
            id=item.get("id", ""),
            title=item.get("summary", "Untitled"),
            start=start_dt,
            end=end_dt,
            location=item.get("location", ""),
            calendar=self.label,
            all_day=all_day,
            source="google_calendar",
        )

    def create_event(
        self, title: str, start: datetime, end: datetime, notes: str | None = None
    ) -> Event | None:
        """Create an event in the first configured calendar."""
        try:
            service = self._build_service()
            if not service:
                return None
            cal_id = self._resolve_calendar_ids(service)[0]
            body = {
                "summary": title,
                "start": {"dateTime": self._aware(start).isoformat(), "timeZone": self.timezone},
                "end": {"dateTime": self._aware(end).isoformat(), "timeZone": self.timezone},
            }
            if notes:
                body["description"] = notes
            created = service.events().insert(calendarId=cal_id, body=body).execute()
        except Exception as e:
            logger.warning(f"Failed to create event for {self.label}: {e}")
            return None
        return self._parse_event(created)

    def delete_event(self, event_id: str) -> bool:
        """Delete an event from whichever configured calendar holds it."""
        try:
            service = self._build_service()
            if not service:
                return False
            cal_ids = self._resolve_calendar_ids(service)
        except Exception as e:
            logger.warning(f"Google Calendar API error for {self.label}: {e}")
            return False

        for cal_id in cal_ids:
            try:
                service.events().delete(calendarId=cal_id, eventId=event_id).execute()
                return True
            except Exception as e:
                logger.debug(f"Event {event_id} not deleted from {cal_id}: {e}")
        return False


def _is_declined(item: dict) -> bool:
    """True if the account owner declined this event."""
    for attendee in item.get("attendees", []):
        if attendee.get("self") and attendee.get("responseStatus") == "declined":
            return True
    return False
