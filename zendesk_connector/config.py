"""Centralized connector settings.

Reads environment variables with sensible defaults. Never exposes secrets in
repr or serialization.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List

from zendesk_connector.errors import ConfigError
from zendesk_connector.secrets import mask

ENV_PREFIX = "ZENDESK_"


def _bool_env(key: str, default: bool) -> bool:
    """Parse a 0/1 env var to bool."""
    val = os.environ.get(key)
    if val is None:
        return default
    return val.strip() in ("1", "true", "yes", "True", "TRUE")


def _int_env(key: str, default: int) -> int:
    """Parse an int env var with fallback."""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        return default


def _float_env(key: str, default: float) -> float:
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        return default


def _str_list_env(key: str) -> List[str]:
    """Parse comma-separated env var to list."""
    val = os.environ.get(key, "")
    if not val:
        return []
    return [v.strip() for v in val.split(",") if v.strip()]


@dataclass(frozen=True)
class Settings:
    """Immutable connector configuration. Safe to log — secrets are masked."""

    # ── Upstream account ───────────────────────────────────────────
    subdomain: str = ""
    email: str = ""
    api_token: str = field(default="", repr=False)

    # ── Sync scope ─────────────────────────────────────────────────
    orgs: List[str] = field(default_factory=list)
    sync_users: bool = False
    page_size: int = 100

    # ── HTTP ───────────────────────────────────────────────────────
    timeout: float = 60.0
    retries: int = 0

    # ── Logging ────────────────────────────────────────────────────
    log_format: str = "text"
    log_level: str = "INFO"

    @property
    def base_url(self) -> str:
        return f"https://{self.subdomain}.zendesk.com/api/v2"

    def __repr__(self) -> str:
        return (
            f"Settings(subdomain={self.subdomain!r}, email={self.email!r}, "
            f"api_token={mask(self.api_token)!r}, orgs={self.orgs!r}, "
            f"sync_users={self.sync_users}, page_size={self.page_size}, "
            f"timeout={self.timeout}, retries={self.retries}, "
            f"log_format={self.log_format!r}, log_level={self.log_level!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe dict with api_token masked."""
        return {
            "subdomain": self.subdomain,
            "email": self.email,
            "api_token": "configured" if self.api_token else "not set",
            "orgs": list(self.orgs),
            "sync_users": self.sync_users,
            "page_size": self.page_size,
            "timeout": self.timeout,
            "retries": self.retries,
            "log_format": self.log_format,
            "log_level": self.log_level,
        }


def load_settings(**overrides: Any) -> Settings:
    """Load settings from environment with optional overrides.

    Overrides whose value is None are ignored, so CLI options that were not
    passed fall through to the environment.
    """
    settings = Settings(
        subdomain=os.environ.get(f"{ENV_PREFIX}SUBDOMAIN", ""),
        email=os.environ.get(f"{ENV_PREFIX}EMAIL", ""),
        api_token=os.environ.get(f"{ENV_PREFIX}API_TOKEN", ""),
        orgs=_str_list_env(f"{ENV_PREFIX}ORGS"),
        sync_users=_bool_env(f"{ENV_PREFIX}SYNC_USERS", False),
        page_size=_int_env(f"{ENV_PREFIX}PAGE_SIZE", 100),
        timeout=_float_env(f"{ENV_PREFIX}TIMEOUT", 60.0),
        retries=_int_env(f"{ENV_PREFIX}RETRIES", 0),
        log_format=os.environ.get(f"{ENV_PREFIX}LOG_FORMAT", "text"),
        log_level=os.environ.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO"),
    )

    applied = {k: v for k, v in overrides.items() if v is not None}
    if applied:
        unknown = set(applied) - {f.name for f in dataclasses.fields(Settings)}
        if unknown:
            raise ConfigError(f"Unknown settings: {sorted(unknown)}")
        settings = dataclasses.replace(settings, **applied)

    return settings


def validate_settings(settings: Settings) -> None:
    """Raise ConfigError if required settings are missing or invalid."""
    if not settings.subdomain:
        raise ConfigError("subdomain is required")
    if not settings.api_token:
        raise ConfigError("api-token is required")
    if settings.page_size <= 0:
        raise ConfigError(f"page_size must be positive, got {settings.page_size}")
    if settings.log_format not in ("text", "json"):
        raise ConfigError(f"log_format must be 'text' or 'json', got {settings.log_format!r}")
