from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from withyou import ARGS_DIR

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://withyou-backend.fly.dev"
DEFAULT_CONFIG_PATH = ARGS_DIR / "withyou.yaml"
ENV_CONFIG_PATH = "WITHYOU_CONFIG_PATH"

# env var -> (section, key)
ENV_OVERRIDES = {
    "WITHYOU_API_BASE_URL": ("backend", "base_url"),
    "WITHYOU_API_KEY": ("backend", "api_key"),
    "WITHYOU_TIMEZONE": ("runtime", "timezone"),
    "WITHYOU_APNS_ENVIRONMENT": ("runtime", "apns_environment"),
    "WITHYOU_DEBUG": ("runtime", "debug"),
}


def normalize_base_url(raw: Optional[str]) -> Optional[str]:
    """Normalize a configured backend URL.

    Adds ``https://`` when no scheme is given and drops a trailing slash.
    Returns None for values that do not name a host ("", "https:",
    "https://", "ftp://x").
    """
    if raw is None:
        return None
    value = str(raw).strip()
    if not value:
        return None

    if "://" not in value:
        if value.lower().rstrip("/") in ("http:", "https:"):
            return None
        value = f"https://{value}"

    parsed = urlparse(value)
    if parsed.scheme.lower() not in ("http", "https") or not parsed.hostname:
        return None
    return value.rstrip("/")


def _clean_optional(value: Any) -> Optional[str]:
    if value is None:
        return None
    trimmed = str(value).strip()
    return trimmed or None


# =============================================================================
# Sections
# =============================================================================

class BackendConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    base_url: str = Field(default=DEFAULT_BASE_URL)
    api_key: Optional[str] = None
    timeout_seconds: float = Field(default=15.0, gt=0)

    @field_validator("base_url", mode="before")
    @classmethod
    def _normalize_base_url(cls, value: Any) -> str:
        normalized = normalize_base_url(value)
        if normalized is None:
            if _clean_optional(value) is not None:
                logger.warning(f"Ignoring unusable backend base_url {value!r}, using {DEFAULT_BASE_URL}")
            return DEFAULT_BASE_URL
        return normalized

    @field_validator("api_key", mode="before")
    @classmethod
    def _trim_api_key(cls, value: Any) -> Optional[str]:
        return _clean_optional(value)


class RegistrationConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    retry_delays: list[float] = Field(default_factory=lambda: [0.5, 1.5, 3.0], min_length=1)
    failure_cooldown_seconds: float = Field(default=60.0, ge=0)

    @field_validator("retry_delays")
    @classmethod
    def _non_negative_delays(cls, value: list[float]) -> list[float]:
        if any(delay < 0 for delay in value):
            raise ValueError("retry_delays must be non-negative")
        return value


class PushConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    authorization_status: str = Field(default="authorized")


class RuntimeConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    debug: bool = Field(default=False)
    timezone: Optional[str] = None
    apns_environment: Optional[str] = None

    @field_validator("timezone", "apns_environment", mode="before")
    @classmethod
    def _trim(cls, value: Any) -> Optional[str]:
        return _clean_optional(value)


class ProfileConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    name: str = Field(default="Me")
    tone: str = Field(default="gentle")
    morning_hour: int = Field(default=9, ge=0, le=23)
    afternoon_hour: int = Field(default=13, ge=0, le=23)
    evening_hour: int = Field(default=19, ge=0, le=23)
    default_focus_minutes: int = Field(default=45, ge=1)


class WithYouConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    backend: BackendConfig = Field(default_factory=BackendConfig)
    registration: RegistrationConfig = Field(default_factory=RegistrationConfig)
    push: PushConfig = Field(default_factory=PushConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    profile: ProfileConfig = Field(default_factory=ProfileConfig)


# =============================================================================
# Loading
# =============================================================================

def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    merged = {section: dict(values or {}) for section, values in raw.items() if isinstance(values, dict)}
    for env_key, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(env_key)
        if value is None:
            continue
        merged.setdefault(section, {})[key] = value
    return merged


def get_config_path() -> Path:
    return Path(os.environ.get(ENV_CONFIG_PATH, DEFAULT_CONFIG_PATH))


def load_config(path: Optional[Path | str] = None) -> WithYouConfig:
    """Load args/withyou.yaml (or ``path``) with environment overrides applied.

    A missing file means defaults. A file that fails validation is logged
    and replaced by defaults, keeping any environment overrides.
    """
    yaml_path = Path(path) if path else get_config_path()

    try:
        if yaml_path.exists():
            with open(yaml_path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            raw = {}
        if not isinstance(raw, dict):
            raise ValueError(f"expected a mapping, got {type(raw).__name__}")
        return WithYouConfig.model_validate(_apply_env_overrides(raw))
    except Exception as e:
        logger.warning(f"Config validation failed for {yaml_path}: {e}, using defaults")

    try:
        return WithYouConfig.model_validate(_apply_env_overrides({}))
    except Exception as e:
        logger.warning(f"Environment overrides rejected: {e}, using defaults")
        return WithYouConfig()


__all__ = [
    "DEFAULT_BASE_URL",
    "BackendConfig",
    "PushConfig",
    "ProfileConfig",
    "RegistrationConfig",
    "RuntimeConfig",
    "WithYouConfig",
    "get_config_path",
    "load_config",
    "normalize_base_url",
]
