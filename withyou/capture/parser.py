"""
Tool: Capture Parser
Purpose: Turn whatever the user typed into a startable item.

Rule-based on purpose: no network, no model, no surprises. The user sees
the result instantly and can edit it, so a plausible guess beats a slow
perfect one.

Pipeline:
    1. Trim, strip a leading "remind me to" style phrase
    2. Title: first 80 characters, first letter upper-cased
    3. Start step + estimate: ordered keyword rules, first match wins
    4. Schedule: explicit date/time, else "tomorrow" + part of day, else inbox

Usage:
    from withyou.capture.parser import CaptureParser

    parsed = CaptureParser().parse("remind me to call mom tomorrow evening")
    parsed.title         # "Call mom tomorrow evening"
    parsed.start_step    # "Open Phone → search contact → tap call"
    parsed.scheduled_at  # tomorrow at 19:00
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable

from withyou.capture.datetime_detector import detect_datetime
from withyou.capture.models import ParsedCapture, UserProfile

MAX_TITLE_LENGTH = 80
DEFAULT_ESTIMATE_MINUTES = 5

LEADING_PHRASES = (
    "remind me to ",
    "remind me ",
    "i need to ",
    "dont forget to ",
    "don't forget to ",
    "capture ",
    "note to ",
)

GENERIC_START_STEP = "Open the first app you’ll use → do the smallest next step"

Rule = tuple[Callable[[str], bool], object]


def _starts_or_contains(word: str) -> Callable[[str], bool]:
    """Match ``word`` at the very start or as a space-delimited word."""
    return lambda lower: lower.startswith(f"{word} ") or f" {word} " in lower


def _contains_any(*needles: str) -> Callable[[str], bool]:
    return lambda lower: any(needle in lower for needle in needles)


# Evaluated top to bottom against the lower-cased title.
START_STEP_RULES: list[Rule] = [
    (_starts_or_contains("email"), "Open Mail → find the thread → write 2 sentences"),
    (_starts_or_contains("call"), "Open Phone → search contact → tap call"),
    (_contains_any("pay ", " bill", "rent"), "Open the app/site → pay minimum/amount → confirm"),
    (_contains_any("schedule", "appointment"), "Open Phone → call office → ask next available"),
    (_contains_any("buy ", "pick up "), "Add it to your shopping list / cart"),
]

ESTIMATE_RULES: list[Rule] = [
    (_contains_any("pay"), 5),
    (_contains_any("email"), 4),
    (_contains_any("call"), 6),
    (_contains_any("buy"), 3),
]

# (keywords, profile attribute holding the hour)
PART_OF_DAY_RULES: list[tuple[tuple[str, ...], str]] = [
    (("morning",), "morning_hour"),
    (("afternoon",), "afternoon_hour"),
    (("evening", "tonight"), "evening_hour"),
]


def first_match(rules: list[Rule], text: str, default: object) -> object:
    for predicate, result in rules:
        if predicate(text):
            return result
    return default


def strip_leading_phrase(text: str) -> str:
    """Drop the first known leading phrase, matched case-insensitively."""
    lower = text.lower()
    for phrase in LEADING_PHRASES:
        if lower.startswith(phrase):
            return text[len(phrase):]
    return text


def capitalize_sentence(text: str) -> str:
    if not text:
        return text
    return text[0].upper() + text[1:]


class CaptureParser:
    """Free text -> ParsedCapture. Pure: same inputs, same output."""

    def parse(
        self,
        raw: str,
        profile: UserProfile | None = None,
        now: datetime | None = None,
    ) -> ParsedCapture:
        now = now or datetime.now()
        cleaned = raw.strip()

        title = self.extract_title(cleaned)
        scheduled_at = detect_datetime(cleaned, now) or self.detect_part_of_day(
            cleaned, now, profile
        )

        return ParsedCapture(
            title=title,
            start_step=self.suggest_start_step(title),
            estimate_minutes=self.suggest_estimate_minutes(title),
            scheduled_at=scheduled_at,
        )

    def extract_title(self, text: str) -> str:
        title = strip_leading_phrase(text).strip()
        # upper-casing can lengthen a character ("ß" -> "SS")
        return capitalize_sentence(title[:MAX_TITLE_LENGTH])[:MAX_TITLE_LENGTH]

    def suggest_start_step(self, title: str) -> str:
        return str(first_match(START_STEP_RULES, title.lower(), GENERIC_START_STEP))

    def suggest_estimate_minutes(self, title: str) -> int:
        return int(first_match(ESTIMATE_RULES, title.lower(), DEFAULT_ESTIMATE_MINUTES))

    def detect_part_of_day(
        self,
        text: str,
        now: datetime,
        profile: UserProfile | None = None,
    ) -> datetime | None:
        """"tomorrow morning" -> tomorrow at the profile's morning hour."""
        lower = text.lower()
        profile = profile or UserProfile()

        base = now + timedelta(days=1) if "tomorrow" in lower else now

        for keywords, attribute in PART_OF_DAY_RULES:
            if any(keyword in lower for keyword in keywords):
                hour = getattr(profile, attribute)
                return base.replace(hour=hour, minute=0, second=0, microsecond=0)

        return None


_default_parser = CaptureParser()


def parse_capture(
    raw: str,
    profile: UserProfile | None = None,
    now: datetime | None = None,
) -> ParsedCapture:
    """Parse with a shared parser instance."""
    return _default_parser.parse(raw, profile=profile, now=now)


__all__ = [
    "CaptureParser",
    "ESTIMATE_RULES",
    "LEADING_PHRASES",
    "START_STEP_RULES",
    "capitalize_sentence",
    "parse_capture",
    "strip_leading_phrase",
]
