"""Item models the stuck chooser picks from.

Plain in-memory records; whoever owns persistence hands them in.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from withyou.capture.models import ParsedCapture


class ItemSource(str, Enum):
    """Where an inbox item was captured."""

    SIRI = "siri"
    APP = "app"
    WIDGET = "widget"


HELP_ME_START_HINT = "Tap “Help me start” if you’re stuck."


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class InboxItem:
    content: str
    title: str
    start_step: str
    estimate_minutes: int = 3
    source: ItemSource = ItemSource.APP
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_capture(
        cls,
        content: str,
        parsed: ParsedCapture,
        source: ItemSource = ItemSource.APP,
        created_at: datetime | None = None,
    ) -> InboxItem:
        return cls(
            content=content,
            title=parsed.title,
            start_step=parsed.start_step,
            estimate_minutes=parsed.estimate_minutes,
            source=source,
            created_at=created_at or datetime.now(),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InboxItem:
        created_at = data.get("created_at")
        return cls(
            content=data.get("content", data.get("title", "")),
            title=data.get("title", ""),
            start_step=data.get("start_step", ""),
            estimate_minutes=int(data.get("estimate_minutes", 3)),
            source=ItemSource(data.get("source", ItemSource.APP.value)),
            created_at=datetime.fromisoformat(created_at) if created_at else datetime.now(),
            id=data.get("id") or _new_id(),
        )


@dataclass
class Reminder:
    title: str
    start_step: str
    scheduled_at: datetime
    why: str = ""
    estimate_minutes: int = 5
    is_started: bool = False
    is_done: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_capture(cls, parsed: ParsedCapture, why: str = "") -> Reminder:
        """A scheduled capture becomes a reminder; unscheduled ones belong in the inbox."""
        if parsed.scheduled_at is None:
            raise ValueError(f"capture {parsed.title!r} has no scheduled time")
        return cls(
            title=parsed.title,
            start_step=parsed.start_step,
            scheduled_at=parsed.scheduled_at,
            why=why,
            estimate_minutes=parsed.estimate_minutes,
        )

    def notification_body(self) -> str:
        return (
            f"Start: {self.start_step} ({self.estimate_minutes} min)\n"
            f"{HELP_ME_START_HINT}"
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Reminder:
        created_at = data.get("created_at")
        return cls(
            title=data.get("title", ""),
            start_step=data.get("start_step", ""),
            scheduled_at=datetime.fromisoformat(data["scheduled_at"]),
            why=data.get("why", ""),
            estimate_minutes=int(data.get("estimate_minutes", 5)),
            is_started=bool(data.get("is_started", False)),
            is_done=bool(data.get("is_done", False)),
            created_at=datetime.fromisoformat(created_at) if created_at else datetime.now(),
            id=data.get("id") or _new_id(),
        )


class FocusSourceKind(str, Enum):
    """What a focus session was started from."""

    INBOX = "inbox"
    REMINDER = "reminder"


@dataclass
class FocusSession:
    focus_title: str
    duration_seconds: int
    focus_start_step: str = ""
    started_at: datetime | None = None
    ended_at: datetime | None = None
    is_active: bool = True
    paused_seconds: int = 0
    completed_logged_at: datetime | None = None
    source_kind: FocusSourceKind | None = None
    source_id: str | None = None
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=_new_id)

    @property
    def is_running(self) -> bool:
        return self.is_active and self.ended_at is None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FocusSession:
        def moment(key: str) -> datetime | None:
            value = data.get(key)
            return datetime.fromisoformat(value) if value else None

        source_kind = data.get("source_kind")
        return cls(
            focus_title=data.get("focus_title", data.get("title", "")),
            duration_seconds=int(data.get("duration_seconds", 0)),
            focus_start_step=data.get("focus_start_step", ""),
            started_at=moment("started_at"),
            ended_at=moment("ended_at"),
            is_active=bool(data.get("is_active", True)),
            paused_seconds=int(data.get("paused_seconds", 0)),
            completed_logged_at=moment("completed_logged_at"),
            source_kind=FocusSourceKind(source_kind) if source_kind else None,
            source_id=data.get("source_id"),
            created_at=moment("created_at") or datetime.now(),
            id=data.get("id") or _new_id(),
        )
