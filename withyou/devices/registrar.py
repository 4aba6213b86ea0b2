"""
Device Registrar - register a push token with the backend, at most once per change

Flow for one call:
    Idle -> SignatureCheck -> CooldownCheck -> GateAcquire
         -> Sending (attempt 1..3) -> Success | Failure -> Idle

    SignatureCheck  - same (token, push, timezone, environment) as the last
                      success: nothing to do
    CooldownCheck   - same signature failed less than 60s ago: rest
    GateAcquire     - another registration in flight: drop this one
    Sending         - transient errors (429, 5xx, connectivity) are retried
                      after fixed delays of 0.5s, 1.5s, 3s; anything else
                      stops immediately

Failures never reach the caller. They land in the cool-down bookkeeping and
the log; the next trigger (token refresh, app launch) tries again.

Usage:
    registrar = DeviceRegistrar.from_config(load_config())
    registrar.store_token(token)
    outcome = await registrar.register_if_needed(token)
"""

from __future__ import annotations

import asyncio
import sqlite3
import threading
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Protocol, Sequence

import httpx

from withyou.config import WithYouConfig
from withyou.devices.backend import (
    BackendClient,
    DeviceRegisterPayload,
    is_transient_error,
)
from withyou.devices.runtime import RuntimeEnvironment
from withyou.devices.store import PreferenceStore, RegistrationState
from withyou.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_RETRY_DELAYS: tuple[float, ...] = (0.5, 1.5, 3.0)
FAILURE_COOLDOWN_SECONDS = 60.0


class RegistrationOutcome(str, Enum):
    REGISTERED = "registered"
    FAILED = "failed"
    SKIPPED_UNCHANGED = "skipped_unchanged"
    SKIPPED_COOLDOWN = "skipped_cooldown"
    SKIPPED_IN_FLIGHT = "skipped_in_flight"
    NO_TOKEN = "no_token"


class RegistrationClient(Protocol):
    async def register_device(self, payload: DeviceRegisterPayload) -> None: ...


class RegistrationGate:
    """One registration in flight at a time. Check-and-set is atomic."""

    def __init__(self) -> None:
        self._in_flight = False
        self._lock = threading.Lock()

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def begin(self) -> bool:
        with self._lock:
            if self._in_flight:
                return False
            self._in_flight = True
            return True

    def end(self) -> None:
        with self._lock:
            self._in_flight = False


def build_signature(
    token: str,
    push_enabled: bool,
    timezone_name: str,
    environment: str | None,
) -> str:
    push = "true" if push_enabled else "false"
    return f"{token}|{push}|{timezone_name}|{environment or 'none'}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DeviceRegistrar:
    def __init__(
        self,
        store: PreferenceStore,
        client: RegistrationClient,
        runtime: RuntimeEnvironment | None = None,
        retry_delays: Sequence[float] = DEFAULT_RETRY_DELAYS,
        failure_cooldown: float = FAILURE_COOLDOWN_SECONDS,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ):
        if not retry_delays:
            raise ValueError("retry_delays needs at least one entry")
        self.store = store
        self.client = client
        self.runtime = runtime or RuntimeEnvironment()
        self.retry_delays = tuple(retry_delays)
        self.failure_cooldown = timedelta(seconds=failure_cooldown)
        self.gate = RegistrationGate()
        self._clock = clock or _utcnow
        self._sleep = sleep or asyncio.sleep

    @classmethod
    def from_config(
        cls,
        config: WithYouConfig,
        db_path: Path | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> DeviceRegistrar:
        return cls(
            store=PreferenceStore(db_path),
            client=BackendClient.from_config(config.backend, transport=transport),
            runtime=RuntimeEnvironment.from_config(config),
            retry_delays=config.registration.retry_delays,
            failure_cooldown=config.registration.failure_cooldown_seconds,
        )

    # -------------------------------------------------------------------------
    # Token cache
    # -------------------------------------------------------------------------

    def store_token(self, token: str) -> None:
        self.store.store_token(token)

    def cached_token(self) -> str | None:
        return self.store.cached_token()

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    async def refresh(self, force: bool = False) -> RegistrationOutcome:
        """Re-register the cached token, e.g. on app launch."""
        token = self.cached_token()
        if not token:
            logger.info("device_registration_skipped", reason="no cached token")
            return RegistrationOutcome.NO_TOKEN
        return await self.register_if_needed(token, force=force)

    async def register_if_needed(self, token: str, force: bool = False) -> RegistrationOutcome:
        """Register ``token`` unless nothing changed. Never raises for backend or storage failures."""
        push_enabled = await self.runtime.push_enabled()
        timezone_name = self.runtime.timezone()
        environment = self.runtime.apns_environment()
        signature = build_signature(token, push_enabled, timezone_name, environment)

        try:
            state = self.store.registration_state()
        except sqlite3.Error as e:
            logger.error("device_registration_failed", error=str(e), stage="read_state")
            return RegistrationOutcome.FAILED

        if not force and signature == state.last_sent_signature:
            logger.info("device_registration_skipped", reason="unchanged")
            return RegistrationOutcome.SKIPPED_UNCHANGED

        if not force and self._cooling_down(signature, state):
            logger.info("device_registration_skipped", reason="recent failure")
            return RegistrationOutcome.SKIPPED_COOLDOWN

        if not self.gate.begin():
            logger.info("device_registration_skipped", reason="already in flight")
            return RegistrationOutcome.SKIPPED_IN_FLIGHT

        try:
            try:
                payload = DeviceRegisterPayload(
                    install_id=self.store.install_id(),
                    device_token=token,
                    timezone=timezone_name,
                    push_enabled=push_enabled,
                    apns_environment=environment,
                )
                await self._register_with_retry(payload)
            except Exception as e:
                self._record_failure(signature)
                logger.error("device_registration_failed", error=str(e), forced=force)
                return RegistrationOutcome.FAILED

            try:
                self.store.record_success(signature)
            except sqlite3.Error as e:
                # the backend has the token; the next call just re-sends it
                logger.warning("device_registration_unrecorded", error=str(e))
            logger.info("device_registered", timezone=timezone_name, environment=environment)
            return RegistrationOutcome.REGISTERED
        finally:
            self.gate.end()

    def _record_failure(self, signature: str) -> None:
        try:
            self.store.record_failure(signature, self._clock())
        except sqlite3.Error as e:
            logger.warning("device_registration_failure_unrecorded", error=str(e))

    def _cooling_down(self, signature: str, state: RegistrationState) -> bool:
        if signature != state.last_failure_signature or state.last_failure_at is None:
            return False
        failed_at = state.last_failure_at
        if failed_at.tzinfo is None:
            failed_at = failed_at.replace(tzinfo=timezone.utc)
        return self._clock() - failed_at < self.failure_cooldown

    async def _register_with_retry(self, payload: DeviceRegisterPayload) -> None:
        last_error: Exception | None = None
        for attempt, delay in enumerate(self.retry_delays, start=1):
            try:
                await self.client.register_device(payload)
                return
            except Exception as e:
                if not is_transient_error(e):
                    raise
                last_error = e
                logger.warning(
                    "device_registration_retrying",
                    attempt=attempt,
                    delay=delay,
                    error=str(e),
                )
                await self._sleep(delay)

        if last_error is not None:
            raise last_error


__all__ = [
    "DEFAULT_RETRY_DELAYS",
    "FAILURE_COOLDOWN_SECONDS",
    "DeviceRegistrar",
    "RegistrationGate",
    "RegistrationOutcome",
    "build_signature",
]
