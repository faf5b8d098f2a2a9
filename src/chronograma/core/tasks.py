"""Pure task domain logic - no I/O dependencies."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Priority(Enum):
    """Task priority, highest first."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


def new_id() -> str:
    return uuid.uuid4().hex


def _dt_to_str(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _str_to_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass
class Task:
    """A to-do item."""

    title: str
    priority: Priority = Priority.MEDIUM
    completed: bool = False
    due: datetime | None = None
    scheduled: datetime | None = None
    id: str = field(default_factory=new_id)

    @property
    def timeline_at(self) -> datetime | None:
        """The instant this task occupies on the timeline (scheduled wins over due)."""
        return self.scheduled or self.due

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "priority": self.priority.value,
            "completed": self.completed,
            "due": _dt_to_str(self.due),
            "scheduled": _dt_to_str(self.scheduled),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from a persisted record."""
        return cls(
            id=data["id"],
            title=data["title"],
            priority=Priority(data.get("priority", "medium")),
            completed=bool(data.get("completed", False)),
            due=_str_to_dt(data.get("due")),
            scheduled=_str_to_dt(data.get("scheduled")),
        )

