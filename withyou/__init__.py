"""WithYou - capture parsing and push device registration

Philosophy:
    Capturing a thought should cost nothing. The parser turns whatever the
    user typed into something they can start on right away: a clean title,
    one tiny first step, and a rough time estimate. Scheduling is a guess,
    never a question.

Components:
    capture/: Free text -> ParsedCapture (title, first step, estimate, time)
    tasks/: "I'm stuck" chooser over focus sessions, reminders and inbox
    devices/: Push token registration with the WithYou backend
    config.py: args/withyou.yaml + environment overrides
    logging_config.py: structlog setup

Database: data/withyou.db
    - preferences: durable key-value bookkeeping (install id, push token,
      registration signatures)
"""

from pathlib import Path

__version__ = "0.3.0"

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
ARGS_DIR = PROJECT_ROOT / "args"
DATA_PATH = PROJECT_ROOT / "data"

__all__ = [
    "__version__",
    "PROJECT_ROOT",
    "ARGS_DIR",
    "DATA_PATH",
]
