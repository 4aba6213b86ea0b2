"""
Durable key-value bookkeeping for device registration.

Keys (all prefixed "withyou."):
    install_id                   - random lowercase UUID, generated once
    apns_token                   - last push token seen, for re-registration
    apns_last_sent_signature     - signature of the last successful register
    apns_last_failure_signature  - signature of the last failed register
    apns_last_failure_at         - ISO-8601 UTC time of that failure

Only the registrar writes the signature keys.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from withyou.devices import get_connection

logger = logging.getLogger(__name__)

KEY_PREFIX = "withyou."
INSTALL_ID_KEY = f"{KEY_PREFIX}install_id"
TOKEN_KEY = f"{KEY_PREFIX}apns_token"
LAST_SENT_SIGNATURE_KEY = f"{KEY_PREFIX}apns_last_sent_signature"
LAST_FAILURE_SIGNATURE_KEY = f"{KEY_PREFIX}apns_last_failure_signature"
LAST_FAILURE_AT_KEY = f"{KEY_PREFIX}apns_last_failure_at"


@dataclass
class RegistrationState:
    """Persisted registration bookkeeping. The in-flight flag is not here."""

    last_sent_signature: str | None = None
    last_failure_signature: str | None = None
    last_failure_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "last_sent_signature": self.last_sent_signature,
            "last_failure_signature": self.last_failure_signature,
            "last_failure_at": self.last_failure_at.isoformat() if self.last_failure_at else None,
        }


class PreferenceStore:
    """A small string key-value store backed by the preferences table."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path

    def get(self, key: str) -> str | None:
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT value FROM preferences WHERE key = ?", (key,)
            ).fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def set(self, key: str, value: str) -> None:
        conn = get_connection(self.db_path)
        try:
            conn.execute(
                """
                INSERT INTO preferences (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, value),
            )
            conn.commit()
        finally:
            conn.close()

    def delete(self, *keys: str) -> None:
        if not keys:
            return
        conn = get_connection(self.db_path)
        try:
            placeholders = ", ".join("?" for _ in keys)
            conn.execute(f"DELETE FROM preferences WHERE key IN ({placeholders})", keys)
            conn.commit()
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # Install id and token cache
    # -------------------------------------------------------------------------

    def install_id(self) -> str:
        """Stable per-install identifier, created on first use."""
        existing = self.get(INSTALL_ID_KEY)
        if existing:
            return existing
        fresh = str(uuid.uuid4()).lower()
        self.set(INSTALL_ID_KEY, fresh)
        logger.info(f"Generated install id {fresh}")
        return fresh

    def store_token(self, token: str) -> None:
        self.set(TOKEN_KEY, token)

    def cached_token(self) -> str | None:
        return self.get(TOKEN_KEY) or None

    # -------------------------------------------------------------------------
    # Registration bookkeeping
    # -------------------------------------------------------------------------

    def registration_state(self) -> RegistrationState:
        failure_at = self.get(LAST_FAILURE_AT_KEY)
        parsed_failure_at = None
        if failure_at:
            try:
                parsed_failure_at = datetime.fromisoformat(failure_at)
            except ValueError:
                logger.warning(f"Ignoring unreadable {LAST_FAILURE_AT_KEY}: {failure_at!r}")

        return RegistrationState(
            last_sent_signature=self.get(LAST_SENT_SIGNATURE_KEY),
            last_failure_signature=self.get(LAST_FAILURE_SIGNATURE_KEY),
            last_failure_at=parsed_failure_at,
        )

    def record_success(self, signature: str) -> None:
        self.set(LAST_SENT_SIGNATURE_KEY, signature)
        self.delete(LAST_FAILURE_SIGNATURE_KEY, LAST_FAILURE_AT_KEY)

    def record_failure(self, signature: str, at: datetime) -> None:
        self.set(LAST_FAILURE_SIGNATURE_KEY, signature)
        self.set(LAST_FAILURE_AT_KEY, at.isoformat())

    def clear_registration(self) -> None:
        """Forget every registration signature (the next call re-sends)."""
        self.delete(LAST_SENT_SIGNATURE_KEY, LAST_FAILURE_SIGNATURE_KEY, LAST_FAILURE_AT_KEY)


__all__ = [
    "INSTALL_ID_KEY",
    "LAST_FAILURE_AT_KEY",
    "LAST_FAILURE_SIGNATURE_KEY",
    "LAST_SENT_SIGNATURE_KEY",
    "TOKEN_KEY",
    "PreferenceStore",
    "RegistrationState",
]
