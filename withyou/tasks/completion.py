"""
Tool: Completion
Purpose: Mark something done and leave a record that it happened.

Finishing a focus session clears whatever it was started from (an inbox
item disappears, a reminder is marked done) and ends the session. Completing
an inbox item or reminder directly logs a zero-length finished session, so
"what did I get done today" sees both paths the same way.

Completion is logged once. A session that already has ``completed_logged_at``
is left alone.

The caller owns persistence: inbox lists are edited in place and records are
mutated; nothing here touches storage.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from withyou.tasks.models import FocusSession, FocusSourceKind, InboxItem, Reminder

logger = logging.getLogger(__name__)


def complete_from_session(
    session: FocusSession,
    inbox_items: list[InboxItem],
    reminders: Iterable[Reminder] = (),
    now: datetime | None = None,
) -> bool:
    """Complete ``session`` and clear its source item.

    Returns:
        False if the completion was already logged, True otherwise
    """
    if session.completed_logged_at is not None:
        return False

    now = now or datetime.now()
    session.completed_logged_at = now

    if session.source_kind == FocusSourceKind.INBOX and session.source_id:
        _remove_inbox_item(inbox_items, session.source_id)
    elif session.source_kind == FocusSourceKind.REMINDER and session.source_id:
        reminder = next((r for r in reminders if r.id == session.source_id), None)
        if reminder is not None:
            reminder.is_done = True
        else:
            logger.debug(f"Reminder {session.source_id} already gone")

    session.is_active = False
    if session.ended_at is None:
        session.ended_at = now
    return True


def complete_inbox_item(
    item: InboxItem,
    inbox_items: list[InboxItem],
    now: datetime | None = None,
) -> FocusSession:
    """Remove ``item`` from the inbox and return the finished session that records it."""
    _remove_inbox_item(inbox_items, item.id)
    return _finished_session(item.title, item.start_step, FocusSourceKind.INBOX, item.id, now)


def complete_reminder(reminder: Reminder, now: datetime | None = None) -> FocusSession:
    """Mark ``reminder`` done and return the finished session that records it."""
    reminder.is_done = True
    return _finished_session(
        reminder.title, reminder.start_step, FocusSourceKind.REMINDER, reminder.id, now
    )


def _finished_session(
    title: str,
    start_step: str,
    kind: FocusSourceKind,
    source_id: str,
    now: datetime | None,
) -> FocusSession:
    now = now or datetime.now()
    return FocusSession(
        focus_title=title,
        focus_start_step=start_step,
        duration_seconds=0,
        ended_at=now,
        is_active=False,
        completed_logged_at=now,
        source_kind=kind,
        source_id=source_id,
        created_at=now,
    )


def _remove_inbox_item(inbox_items: list[InboxItem], item_id: str) -> None:
    inbox_items[:] = [i for i in inbox_items if i.id != item_id]


__all__ = [
    "complete_from_session",
    "complete_inbox_item",
    "complete_reminder",
]
