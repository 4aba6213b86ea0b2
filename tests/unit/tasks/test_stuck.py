"""Tests for withyou/tasks/stuck.py

The stuck chooser offers at most a couple of tiny ways back in:
- An active focus session trumps everything
- Otherwise a reminder due soon, the smallest inbox item, the newest one
- Estimates never exceed 5 minutes
"""

from datetime import datetime, timedelta, timezone

import pytest

from withyou.capture.parser import parse_capture
from withyou.tasks.models import FocusSession, InboxItem, ItemSource, Reminder
from withyou.tasks.stuck import (
    EVEN_SMALLER_STEP,
    GENERIC_FALLBACK_STEP,
    SuggestionSource,
    make_even_smaller,
    next_soon_reminder,
    normalize_start_step,
    suggestions,
)


@pytest.fixture
def now(reference_now):
    return reference_now


@pytest.fixture
def inbox(now):
    return [
        InboxItem(
            content="sort the garage",
            title="Sort the garage",
            start_step="Open the garage door",
            estimate_minutes=30,
            created_at=now - timedelta(days=2),
        ),
        InboxItem(
            content="text Jo back",
            title="Text Jo back",
            start_step="",
            estimate_minutes=2,
            created_at=now - timedelta(days=1),
        ),
        InboxItem(
            content="renew library books",
            title="Renew library books",
            start_step="Open the library site",
            estimate_minutes=8,
            created_at=now - timedelta(hours=1),
        ),
    ]


class TestActiveFocus:
    def test_active_session_is_the_only_suggestion(self, now, inbox):
        session = FocusSession(focus_title="Write report", duration_seconds=2700)
        result = suggestions(focus_sessions=[session], inbox_items=inbox, now=now)

        assert len(result) == 1
        assert result[0].source == SuggestionSource.ACTIVE_FOCUS
        assert result[0].focus_session_id == session.id
        assert result[0].estimate_minutes == 2
        assert result[0].start_step == GENERIC_FALLBACK_STEP

    def test_ended_session_is_ignored(self, now, inbox):
        session = FocusSession(
            focus_title="Write report",
            duration_seconds=2700,
            ended_at=now - timedelta(minutes=5),
        )
        result = suggestions(focus_sessions=[session], inbox_items=inbox, now=now)
        assert all(s.source == SuggestionSource.INBOX for s in result)


class TestReminders:
    def test_soon_reminder_comes_first(self, now, inbox):
        reminder = Reminder(
            title="Pay the phone bill",
            start_step="",
            estimate_minutes=15,
            scheduled_at=now + timedelta(hours=2),
        )
        result = suggestions(reminders=[reminder], inbox_items=inbox, now=now)

        assert result[0].source == SuggestionSource.REMINDER
        assert result[0].reminder_id == reminder.id
        assert result[0].estimate_minutes == 5
        assert result[0].start_step == "Open the bill and locate the amount due."

    def test_reminder_outside_window_skipped(self, now):
        later = Reminder(title="Later", start_step="x", scheduled_at=now + timedelta(hours=7))
        assert next_soon_reminder([later], now) is None

    def test_done_and_past_reminders_skipped(self, now):
        done = Reminder(title="Done", start_step="x", scheduled_at=now + timedelta(hours=1), is_done=True)
        past = Reminder(title="Past", start_step="x", scheduled_at=now - timedelta(minutes=1))
        assert next_soon_reminder([done, past], now) is None

    def test_offset_reminder_against_plain_now(self, now):
        reminder = Reminder(
            title="Standup",
            start_step="x",
            scheduled_at=datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc),
        )
        assert next_soon_reminder([reminder], now) is reminder

    def test_plain_reminder_against_offset_now(self):
        now = datetime(2026, 1, 5, 10, 0, tzinfo=timezone(timedelta(hours=2)))
        inside = Reminder(title="Inside", start_step="x", scheduled_at=datetime(2026, 1, 5, 15, 0))
        outside = Reminder(title="Outside", start_step="x", scheduled_at=datetime(2026, 1, 5, 17, 0))
        assert next_soon_reminder([outside, inside], now) is inside

    def test_mixed_inbox_timestamps(self, now):
        plain = InboxItem(content="a", title="Plain", start_step="x", created_at=datetime(2026, 1, 4, 9, 0))
        offset = InboxItem(
            content="b",
            title="Offset",
            start_step="x",
            estimate_minutes=1,
            created_at=datetime(2026, 1, 4, 12, 0, tzinfo=timezone.utc),
        )
        result = suggestions(inbox_items=[plain, offset], now=now)
        assert [s.title for s in result] == ["Offset"]

    def test_soonest_reminder_wins(self, now):
        second = Reminder(title="Second", start_step="x", scheduled_at=now + timedelta(hours=3))
        first = Reminder(title="First", start_step="x", scheduled_at=now + timedelta(hours=1))
        assert next_soon_reminder([second, first], now) is first


class TestInbox:
    def test_smallest_then_most_recent(self, now, inbox):
        result = suggestions(inbox_items=inbox, now=now)

        assert [s.title for s in result] == ["Text Jo back", "Renew library books"]
        assert result[0].start_step == "Open Messages and type one sentence."
        assert result[1].estimate_minutes == 5

    def test_single_item_not_repeated(self, now):
        item = InboxItem(content="x", title="Only one", start_step="Do it", estimate_minutes=1)
        result = suggestions(inbox_items=[item], now=now)
        assert len(result) == 1
        assert result[0].inbox_id == item.id

    def test_nothing_to_suggest(self, now):
        assert suggestions(now=now) == []

    def test_inbox_item_from_capture(self, now):
        parsed = parse_capture("remind me to email the landlord", now=now)
        item = InboxItem.from_capture("remind me to email the landlord", parsed, source=ItemSource.SIRI)
        assert item.title == "Email the landlord"
        assert item.estimate_minutes == 4
        assert item.source == ItemSource.SIRI


class TestStartStepFallbacks:
    @pytest.mark.parametrize(
        "title, expected",
        [
            ("Email the school", "Open Mail and draft one sentence."),
            ("Message the group", "Open Messages and type one sentence."),
            ("Call the vet", "Open Phone and find the number."),
            ("Pay council tax", "Open the bill and locate the amount due."),
            ("Schedule a review", "Open your calendar and pick a time."),
            ("Water plants", GENERIC_FALLBACK_STEP),
        ],
    )
    def test_fallbacks(self, title, expected):
        assert normalize_start_step("   ", title) == expected

    def test_existing_step_is_trimmed(self):
        assert normalize_start_step("  Open the app  ", "Call the vet") == "Open the app"

    def test_make_even_smaller(self):
        assert make_even_smaller("Open Mail and draft one sentence.") == EVEN_SMALLER_STEP


def test_suggestion_to_dict(now, inbox):
    data = suggestions(inbox_items=inbox, now=now)[0].to_dict()
    assert data["source"] == "inbox"
    assert data["reminder_id"] is None
    assert isinstance(data["inbox_id"], str)


def test_reminder_from_dict():
    reminder = Reminder.from_dict({"title": "Dentist", "scheduled_at": "2026-01-05T12:00:00"})
    assert reminder.scheduled_at == datetime(2026, 1, 5, 12, 0)
    assert reminder.estimate_minutes == 5
