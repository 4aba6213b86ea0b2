"""
Tool: Stuck Chooser
Purpose: When the user taps "I'm stuck", offer one or two tiny ways back in.

Order of preference:
    A) An active focus session. If one is running, it is the only answer.
    B1) The next reminder due within 6 hours that isn't done
    B2) The smallest inbox item
    B3) The most recent inbox item, if B2 didn't already pick it

Every estimate is capped at 5 minutes; stuck is not the moment for big asks.
An empty list means there is nothing to suggest.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Iterable

from withyou.tasks.models import FocusSession, InboxItem, Reminder

SOON_WINDOW_HOURS = 6
MAX_STUCK_ESTIMATE = 5
ACTIVE_FOCUS_ESTIMATE = 2

EVEN_SMALLER_STEP = "Only open what you need. One click is enough."

# (keywords, fallback step) evaluated against the lower-cased title
FALLBACK_STEP_RULES: list[tuple[tuple[str, ...], str]] = [
    (("email",), "Open Mail and draft one sentence."),
    (("text", "message"), "Open Messages and type one sentence."),
    (("call",), "Open Phone and find the number."),
    (("pay",), "Open the bill and locate the amount due."),
    (("schedule",), "Open your calendar and pick a time."),
]
GENERIC_FALLBACK_STEP = "Open what you need and do the smallest possible step for 2 minutes."


class SuggestionSource(str, Enum):
    ACTIVE_FOCUS = "active_focus"
    REMINDER = "reminder"
    INBOX = "inbox"


@dataclass(frozen=True)
class StuckSuggestion:
    source: SuggestionSource
    title: str
    start_step: str
    estimate_minutes: int
    reminder_id: str | None = None
    inbox_id: str | None = None
    focus_session_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source.value,
            "title": self.title,
            "start_step": self.start_step,
            "estimate_minutes": self.estimate_minutes,
            "reminder_id": self.reminder_id,
            "inbox_id": self.inbox_id,
            "focus_session_id": self.focus_session_id,
        }


def suggestions(
    focus_sessions: Iterable[FocusSession] = (),
    reminders: Iterable[Reminder] = (),
    inbox_items: Iterable[InboxItem] = (),
    now: datetime | None = None,
) -> list[StuckSuggestion]:
    """Pick the ways back in, most preferred first."""
    now = now or datetime.now()
    inbox = list(inbox_items)

    active = next((s for s in focus_sessions if s.is_running), None)
    if active is not None:
        return [
            StuckSuggestion(
                source=SuggestionSource.ACTIVE_FOCUS,
                title=active.focus_title,
                start_step=normalize_start_step(active.focus_start_step, active.focus_title),
                estimate_minutes=ACTIVE_FOCUS_ESTIMATE,
                focus_session_id=active.id,
            )
        ]

    out: list[StuckSuggestion] = []

    soon = next_soon_reminder(reminders, now, hours=SOON_WINDOW_HOURS)
    if soon is not None:
        out.append(
            StuckSuggestion(
                source=SuggestionSource.REMINDER,
                title=soon.title,
                start_step=normalize_start_step(soon.start_step, soon.title),
                estimate_minutes=min(soon.estimate_minutes, MAX_STUCK_ESTIMATE),
                reminder_id=soon.id,
            )
        )

    if inbox:
        tiny = min(inbox, key=lambda item: item.estimate_minutes)
        out.append(_inbox_suggestion(tiny))

        recent = max(inbox, key=lambda item: _aware(item.created_at, now))
        if all(s.inbox_id != recent.id for s in out):
            out.append(_inbox_suggestion(recent))

    return out


def _inbox_suggestion(item: InboxItem) -> StuckSuggestion:
    return StuckSuggestion(
        source=SuggestionSource.INBOX,
        title=item.title,
        start_step=normalize_start_step(item.start_step, item.title),
        estimate_minutes=min(item.estimate_minutes, MAX_STUCK_ESTIMATE),
        inbox_id=item.id,
    )


def next_soon_reminder(
    reminders: Iterable[Reminder],
    now: datetime,
    hours: int = SOON_WINDOW_HOURS,
) -> Reminder | None:
    window = timedelta(hours=hours)
    upcoming: list[tuple[timedelta, Reminder]] = []
    for reminder in reminders:
        if reminder.is_done:
            continue
        at = _aware(reminder.scheduled_at, now)
        lead = at - _aware(now, at)
        if timedelta(0) <= lead <= window:
            upcoming.append((lead, reminder))
    if not upcoming:
        return None
    return min(upcoming, key=lambda pair: pair[0])[1]


def _aware(moment: datetime, reference: datetime) -> datetime:
    """Read a naive time in the reference's zone (UTC when it has none)."""
    if moment.tzinfo is not None:
        return moment
    return moment.replace(tzinfo=reference.tzinfo or timezone.utc)


def normalize_start_step(step: str, fallback_title: str) -> str:
    trimmed = (step or "").strip()
    if trimmed:
        return trimmed

    lower = fallback_title.lower()
    for keywords, fallback in FALLBACK_STEP_RULES:
        if any(keyword in lower for keyword in keywords):
            return fallback
    return GENERIC_FALLBACK_STEP


def make_even_smaller(current_step: str) -> str:
    return EVEN_SMALLER_STEP


__all__ = [
    "StuckSuggestion",
    "SuggestionSource",
    "make_even_smaller",
    "next_soon_reminder",
    "normalize_start_step",
    "suggestions",
]
