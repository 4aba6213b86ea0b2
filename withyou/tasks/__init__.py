"""Task helpers - what to offer when starting feels impossible

Philosophy:
    A list of five things is zero things when you are stuck. The chooser
    hands back at most a couple of tiny, concrete ways in, with the first
    step already written.

Components:
    models.py: InboxItem, Reminder, FocusSession
    stuck.py: "I'm stuck" suggestions and start-step fallbacks
    completion.py: Finishing sessions, inbox items and reminders
"""

from withyou.tasks.completion import (
    complete_from_session,
    complete_inbox_item,
    complete_reminder,
)
from withyou.tasks.models import (
    FocusSession,
    FocusSourceKind,
    InboxItem,
    ItemSource,
    Reminder,
)
from withyou.tasks.stuck import (
    StuckSuggestion,
    SuggestionSource,
    make_even_smaller,
    normalize_start_step,
    suggestions,
)

__all__ = [
    "FocusSession",
    "FocusSourceKind",
    "InboxItem",
    "ItemSource",
    "Reminder",
    "StuckSuggestion",
    "SuggestionSource",
    "complete_from_session",
    "complete_inbox_item",
    "complete_reminder",
    "make_even_smaller",
    "normalize_start_step",
    "suggestions",
]
