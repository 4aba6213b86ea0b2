"""Capture data models.

Defines the profile inputs and the parsed result for the capture pipeline:
    raw text -> ParsedCapture
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class ReminderTone(str, Enum):
    """How reminders should sound."""

    GENTLE = "gentle"
    FIRM = "firm"


@dataclass
class UserProfile:
    """The parts of a user profile the capture pipeline cares about."""

    name: str = "Me"
    tone: ReminderTone = ReminderTone.GENTLE
    morning_hour: int = 9
    afternoon_hour: int = 13
    evening_hour: int = 19
    default_focus_minutes: int = 45

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserProfile:
        defaults = cls()
        return cls(
            name=data.get("name", defaults.name),
            tone=ReminderTone(data.get("tone", defaults.tone.value)),
            morning_hour=int(data.get("morning_hour", defaults.morning_hour)),
            afternoon_hour=int(data.get("afternoon_hour", defaults.afternoon_hour)),
            evening_hour=int(data.get("evening_hour", defaults.evening_hour)),
            default_focus_minutes=int(
                data.get("default_focus_minutes", defaults.default_focus_minutes)
            ),
        )


@dataclass(frozen=True)
class ParsedCapture:
    """A capture turned into something startable.

    ``scheduled_at`` is None for items that belong in the inbox.
    """

    title: str
    start_step: str
    estimate_minutes: int
    scheduled_at: datetime | None = None

    @property
    def is_scheduled(self) -> bool:
        return self.scheduled_at is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "start_step": self.start_step,
            "estimate_minutes": self.estimate_minutes,
            "scheduled_at": self.scheduled_at.isoformat() if self.scheduled_at else None,
        }
