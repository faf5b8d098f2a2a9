"""Configuration management for Chronograma."""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

CHRONOGRAMA_HOME = Path(os.environ.get("CHRONOGRAMA_HOME", Path.home() / "chronograma"))
CONFIG_FILE = CHRONOGRAMA_HOME / "config" / "chronograma.conf"
DATA_DIR = CHRONOGRAMA_HOME / "data"

CALENDAR_BACKENDS = ("google", "icalpal", "none")


@dataclass
class GoogleAccount:
    """A Google Calendar account configuration."""

    config_folder: str
    label: str | None = None
    calendars: list[str] = field(default_factory=list)


@dataclass
class Config:
    """Chronograma configuration."""

    timezone: str = "UTC"
    data_dir: str = ""
    calendar_backend: str = "none"
    google_accounts: list[GoogleAccount] = field(default_factory=list)
    google_client_secret_file: str = ""
    icalpal_include_calendars: list[str] = field(default_factory=list)
    icalpal_exclude_calendars: list[str] = field(default_factory=list)
    seed_default_habits: bool = False

    @property
    def data_path(self) -> Path:
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_list(value: str) -> list[str]:
    return [c.strip() for c in value.split(",") if c.strip()]


def _parse_google_accounts(value: str) -> list[GoogleAccount]:
    # JSON format: [{"config_folder": "...", "label": "...", "calendars": [...]}]
    # Simple format: "path1:label1,path2:label2"
    accounts = []
    if value.startswith("["):
        try:
            data = json.loads(value)
            for item in data:
                accounts.append(
                    GoogleAccount(
                        config_folder=item["config_folder"],
                        label=item.get("label"),
                        calendars=item.get("calendars", []),
                    )
                )
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning(f"Failed to parse GOOGLE_ACCOUNTS JSON: {e}")
        return accounts

    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        if ":" in entry:
            folder, label = entry.split(":", 1)
            accounts.append(GoogleAccount(folder.strip(), label.strip()))
        else:
            accounts.append(GoogleAccount(entry))
    return accounts


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from chronograma.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "timezone":
                config.timezone = value
            case "data_dir":
                config.data_dir = value
            case "calendar_backend":
                backend = value.lower()
                if backend in CALENDAR_BACKENDS:
                    config.calendar_backend = backend
                else:
                    logger.warning(f"Unknown CALENDAR_BACKEND {value!r}; using 'none'")
            case "google_accounts":
                config.google_accounts = _parse_google_accounts(value)
            case "google_client_secret_file":
                config.google_client_secret_file = value
            case "icalpal_include_calendars":
                config.icalpal_include_calendars = _parse_list(value)
            case "icalpal_exclude_calendars":
                config.icalpal_exclude_calendars = _parse_list(value)
            case "seed_default_habits":
                config.seed_default_habits = _parse_bool(value)

    return config
