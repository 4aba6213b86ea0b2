"""Capture parsing: free text -> title, first step, estimate, schedule."""

from withyou.capture.datetime_detector import detect_datetime
from withyou.capture.models import ParsedCapture, ReminderTone, UserProfile
from withyou.capture.parser import CaptureParser, parse_capture

__all__ = [
    "CaptureParser",
    "ParsedCapture",
    "ReminderTone",
    "UserProfile",
    "detect_datetime",
    "parse_capture",
]
