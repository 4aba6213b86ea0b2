"""Date/time detection for captured text.

Finds a calendar date and/or clock time in free text and resolves it
against a reference time. Best effort: anything not recognised simply
yields no date.

Handles: "2026-03-02", "3/14", "jan 10", "10th of january, 2027",
"friday", "next monday", "in 20 minutes", "in 3 days", "at 3pm",
"3:30 pm", "15:00", "noon", "tomorrow at 9", "tonight at 8".

"tomorrow", "today" and "tonight" on their own are not a date here; they
only anchor a clock time. Part-of-day handling ("tomorrow morning") lives in
the parser.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta

from dateutil.parser import parse as parse_date
from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta

_MONTH = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|"
    r"aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)

ISO_DATE_RE = re.compile(r"\b(\d{4})-(\d{1,2})-(\d{1,2})\b")
NUMERIC_DATE_RE = re.compile(r"\b(\d{1,2})/(\d{1,2})(?:/(\d{4}|\d{2}))?\b")
MONTH_DAY_RE = re.compile(
    rf"\b{_MONTH}\.?\s+\d{{1,2}}(?:st|nd|rd|th)?\b(?:,?\s+(\d{{4}}))?"
)
DAY_MONTH_RE = re.compile(
    rf"\b\d{{1,2}}(?:st|nd|rd|th)?\s+(?:of\s+)?{_MONTH}\b(?:,?\s+(\d{{4}}))?"
)
WEEKDAY_RE = re.compile(
    r"\b(?:(?:next|this|on)\s+)?(monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b"
)
RELATIVE_RE = re.compile(r"\bin\s+(\d+|an?)\s+(minute|min|hour|hr|day)s?\b")

MERIDIEM_TIME_RE = re.compile(r"\b(\d{1,2})(?::([0-5]\d))?\s*([ap])\.?m\.?(?!\w)")
CLOCK_TIME_RE = re.compile(r"\b([01]?\d|2[0-3]):([0-5]\d)\b")
AT_HOUR_RE = re.compile(r"\bat\s+(\d{1,2})\b(?![:/\d])")
NOON_RE = re.compile(r"\bnoon\b")
MIDNIGHT_RE = re.compile(r"\bmidnight\b")

PM_HINT_RE = re.compile(r"\b(?:tonight|evening|afternoon)\b")

WEEKDAYS = {
    "monday": MO,
    "tuesday": TU,
    "wednesday": WE,
    "thursday": TH,
    "friday": FR,
    "saturday": SA,
    "sunday": SU,
}

DATE_ONLY_TIME = time(12, 0)


def detect_datetime(text: str, now: datetime | None = None) -> datetime | None:
    """Detect a date and/or time in ``text`` relative to ``now``.

    Returns a datetime carrying ``now``'s tzinfo, or None when the text
    has no recognisable date or clock time.
    """
    now = now or datetime.now()
    lower = text.lower()

    try:
        relative = _match_relative(lower)
        shifted = now + relative[0] if relative is not None else None
    except (OverflowError, ValueError):
        # "in 9999999 days" lands past datetime.max; a huge digit run can
        # also exceed int() conversion limits
        return None

    if relative is not None and relative[1] != "day":
        return shifted.replace(second=0, microsecond=0)

    day = _match_explicit_date(lower, now)
    if day is None and shifted is not None:
        day = shifted.date()
    if day is None:
        day = _match_weekday(lower, now)

    clock = _match_clock(lower)

    if day is None and clock is None:
        return None

    if day is None:
        if re.search(r"\btomorrow\b", lower):
            day = (now + timedelta(days=1)).date()
        elif re.search(r"\b(?:today|tonight)\b", lower):
            day = now.date()

    if day is None:
        # bare clock time: the next time it comes around
        candidate = datetime.combine(now.date(), clock, tzinfo=now.tzinfo)
        if candidate <= now:
            candidate += timedelta(days=1)
        return candidate

    return datetime.combine(day, clock or DATE_ONLY_TIME, tzinfo=now.tzinfo)


def _match_relative(text: str) -> tuple[timedelta, str] | None:
    """"in 20 minutes", "in an hour", "in 3 days".

    Raises OverflowError when the amount does not fit a timedelta.
    Raises ValueError when the amount exceeds int() conversion limits.
    """
    match = RELATIVE_RE.search(text)
    if not match:
        return None

    raw_amount, unit = match.groups()
    amount = 1 if raw_amount in ("a", "an") else int(raw_amount)

    if unit in ("hour", "hr"):
        return timedelta(hours=amount), "hour"
    if unit == "day":
        return timedelta(days=amount), "day"
    return timedelta(minutes=amount), "minute"


def _match_explicit_date(text: str, now: datetime) -> date | None:
    match = ISO_DATE_RE.search(text)
    if match:
        year, month, day = (int(g) for g in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            pass

    for pattern in (MONTH_DAY_RE, DAY_MONTH_RE):
        match = pattern.search(text)
        if not match:
            continue
        default = now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
        try:
            parsed = parse_date(match.group(0), default=default).date()
        except (ValueError, OverflowError):
            continue
        return _roll_forward(parsed, now, has_year=match.group(1) is not None)

    match = NUMERIC_DATE_RE.search(text)
    if match:
        month, day, year = match.groups()
        if year is None:
            year_value = now.year
        elif len(year) == 2:
            year_value = 2000 + int(year)
        else:
            year_value = int(year)
        try:
            parsed = date(year_value, int(month), int(day))
        except ValueError:
            return None
        return _roll_forward(parsed, now, has_year=year is not None)

    return None


def _roll_forward(day: date, now: datetime, has_year: bool) -> date:
    """A yearless date that has already passed means next year."""
    if not has_year and day < now.date():
        return day + relativedelta(years=1)
    return day


def _match_weekday(text: str, now: datetime) -> date | None:
    """Next strictly-future occurrence of a named weekday."""
    match = WEEKDAY_RE.search(text)
    if not match:
        return None
    weekday = WEEKDAYS[match.group(1)]
    return (now + relativedelta(days=+1, weekday=weekday(+1))).date()


def _match_clock(text: str) -> time | None:
    match = MERIDIEM_TIME_RE.search(text)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2) or 0)
        if 1 <= hour <= 12:
            if match.group(3) == "p" and hour < 12:
                hour += 12
            elif match.group(3) == "a" and hour == 12:
                hour = 0
            return time(hour, minute)

    match = CLOCK_TIME_RE.search(text)
    if match:
        return time(int(match.group(1)), int(match.group(2)))

    if NOON_RE.search(text):
        return time(12, 0)
    if MIDNIGHT_RE.search(text):
        return time(0, 0)

    match = AT_HOUR_RE.search(text)
    if match:
        hour = int(match.group(1))
        if hour > 23:
            return None
        # "at 3" means the afternoon; so does "at 8" tonight
        if 1 <= hour <= 7 or (hour < 12 and PM_HINT_RE.search(text)):
            hour += 12
        return time(hour, 0)

    return None


__all__ = ["detect_datetime"]
