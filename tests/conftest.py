"""Shared test fixtures for WithYou tests.

This module provides common fixtures used across all test modules:
- Database isolation with temporary files
- A fixed reference time and default profile for the parser
- A clean environment (no WITHYOU_* overrides leaking in)

Usage:
    def test_something(temp_db):
        # temp_db is automatically cleaned up after the test
        ...
"""

import os
import tempfile
from collections.abc import Generator
from datetime import datetime
from pathlib import Path

import pytest

from withyou.capture.models import UserProfile


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE_DIR = PROJECT_ROOT / "withyou"


# ─────────────────────────────────────────────────────────────────────────────
# Environment
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def clean_withyou_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop WITHYOU_* variables so the developer's shell can't skew a test."""
    for key in list(os.environ):
        if key.startswith("WITHYOU_"):
            monkeypatch.delenv(key, raising=False)


# ─────────────────────────────────────────────────────────────────────────────
# Database Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_db() -> Generator[Path, None, None]:
    """Create a temporary database file for testing.

    The database file is automatically deleted after the test completes.

    Yields:
        Path to the temporary database file
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    yield db_path

    # Cleanup
    if db_path.exists():
        os.unlink(db_path)


@pytest.fixture
def temp_data_dir(tmp_path: Path) -> Path:
    """Create a temporary data directory structure.

    Returns:
        Path to temporary data directory
    """
    data_dir = tmp_path / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


# ─────────────────────────────────────────────────────────────────────────────
# Capture Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def reference_now() -> datetime:
    """Monday 5 January 2026, 10:00 local time."""
    return datetime(2026, 1, 5, 10, 0, 0)


@pytest.fixture
def default_profile() -> UserProfile:
    """Profile with the stock 9/13/19 part-of-day hours."""
    return UserProfile(name="Test")


@pytest.fixture
def early_bird_profile() -> UserProfile:
    """Profile whose day starts and ends early."""
    return UserProfile(name="Early", morning_hour=6, afternoon_hour=12, evening_hour=17)


# ─────────────────────────────────────────────────────────────────────────────
# Registration Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def sample_token() -> str:
    """A hex APNs token."""
    return "a1b2c3d4e5f60718293a4b5c6d7e8f90a1b2c3d4e5f60718293a4b5c6d7e8f90"


# ─────────────────────────────────────────────────────────────────────────────
# Async Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def anyio_backend() -> str:
    """Backend for async tests."""
    return "asyncio"
