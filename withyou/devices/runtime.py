"""
Runtime facts that go into a device registration.

    push_enabled     - the user allowed notifications (authorized/provisional)
    timezone         - IANA name, e.g. "America/New_York"
    apns_environment - "sandbox" for debug builds, "production" otherwise
"""

from __future__ import annotations

import os
from pathlib import Path

from withyou.config import PushConfig, RuntimeConfig, WithYouConfig

PUSH_ALLOWED_STATUSES = ("authorized", "provisional")

APNS_SANDBOX = "sandbox"
APNS_PRODUCTION = "production"
APNS_ENVIRONMENTS = (APNS_SANDBOX, APNS_PRODUCTION)

LOCALTIME_PATH = Path("/etc/localtime")
DEFAULT_TIMEZONE = "UTC"


def local_timezone_name(localtime: Path = LOCALTIME_PATH) -> str:
    """Best guess at the host's IANA timezone name.

    TZ wins, then the /etc/localtime symlink target, then UTC.
    """
    env_tz = os.environ.get("TZ", "").strip().lstrip(":")
    if ("/" in env_tz and not env_tz.startswith("/")) or env_tz == "UTC":
        return env_tz

    try:
        target = str(localtime.resolve())
    except OSError:
        return DEFAULT_TIMEZONE
    marker = "zoneinfo/"
    if marker in target:
        return target.split(marker, 1)[1]
    return DEFAULT_TIMEZONE


class RuntimeEnvironment:
    """Answers the three runtime questions a registration needs."""

    def __init__(
        self,
        push: PushConfig | None = None,
        runtime: RuntimeConfig | None = None,
    ):
        self.push = push or PushConfig()
        self.runtime = runtime or RuntimeConfig()

    @classmethod
    def from_config(cls, config: WithYouConfig) -> RuntimeEnvironment:
        return cls(push=config.push, runtime=config.runtime)

    async def push_enabled(self) -> bool:
        status = self.push.authorization_status.strip().lower()
        return status in PUSH_ALLOWED_STATUSES

    def timezone(self) -> str:
        return self.runtime.timezone or local_timezone_name()

    def apns_environment(self) -> str | None:
        override = (self.runtime.apns_environment or "").lower()
        if override in APNS_ENVIRONMENTS:
            return override
        if override == "none":
            return None
        return APNS_SANDBOX if self.runtime.debug else APNS_PRODUCTION


__all__ = [
    "APNS_PRODUCTION",
    "APNS_SANDBOX",
    "RuntimeEnvironment",
    "local_timezone_name",
]
