"""Device registration - tell the backend where to send push notifications

Philosophy:
    Registration is invisible plumbing. It must never nag the user, never
    block the app, and never hammer the backend. It is best effort: if it
    fails now, the next launch tries again.

Design Principles:
    1. Idempotent - an unchanged (token, push, timezone, environment)
       combination is never re-sent
    2. Single flight - one registration call in the air at a time;
       duplicates are dropped, not queued
    3. Cool-down - a failed signature rests for 60 seconds
    4. Bounded retry - three attempts on transient errors, fixed delays

Components:
    store.py: Durable key-value bookkeeping (install id, token, signatures)
    backend.py: HTTP client for POST /v1/devices/register
    runtime.py: Push authorization, timezone and APNs environment lookup
    registrar.py: The registration gate and retry flow

Database: data/withyou.db
    - preferences: key/value rows, keys prefixed "withyou."
"""

import sqlite3
from pathlib import Path

from withyou import DATA_PATH


# Path constants
DB_PATH = DATA_PATH / "withyou.db"


def get_connection(db_path: Path | None = None) -> sqlite3.Connection:
    """
    Get database connection, creating tables if needed.

    Args:
        db_path: Database file (defaults to data/withyou.db)

    Returns:
        SQLite connection with row_factory set
    """
    path = Path(db_path) if db_path else DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row

    cursor = conn.cursor()
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS preferences (
            key TEXT PRIMARY KEY,
            value TEXT,
            updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """)

    conn.commit()
    return conn
