"""
Runtime configuration read from the process environment.

Settings are loaded once at startup and handed to the DI container;
adapters receive their keys through constructor arguments and never read
the environment themselves.

Environment variables:
    COURT_LISTENER_API_KEY            CourtListener token
    CASELAW_ACCESS_PROJECT_API_KEY    CAP token (alias: CAP_API_KEY)
    CASETEXT_API_KEY                  Casetext bearer token
    LAWPIPE_API_KEY                   LawPipe bearer token
    GOVINFO_API_KEY                   GovInfo key (alias: GOV_API_KEY)
    LEGAL_SEARCH_HTTP_TIMEOUT         Per-request timeout, seconds (30)
    LEGAL_SEARCH_DEADLINE             Per-source deadline in a search, seconds (45)
    LEGAL_SEARCH_PROBE_TIMEOUT        Status probe timeout, seconds (30)
    LEGAL_SEARCH_STATUS_TTL           Status cache TTL, seconds; 0 disables (60)
    LEGAL_SEARCH_DISABLED_SOURCES     Comma-separated source ids to deactivate
    LEGAL_SEARCH_HOST / _PORT         API bind address (127.0.0.1:8765)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from legal_search.shared.exceptions import ConfigurationError

DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_SEARCH_DEADLINE = 45.0
DEFAULT_PROBE_TIMEOUT = 30.0
DEFAULT_STATUS_TTL = 60.0
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8765

# source id -> environment variables holding its key, first match wins
API_KEY_ENV: dict[str, tuple[str, ...]] = {
    "court_listener": ("COURT_LISTENER_API_KEY",),
    "caselaw_access_project": ("CASELAW_ACCESS_PROJECT_API_KEY", "CAP_API_KEY"),
    "casetext": ("CASETEXT_API_KEY",),
    "lawpipe": ("LAWPIPE_API_KEY",),
    "govinfo": ("GOVINFO_API_KEY", "GOV_API_KEY"),
}


@dataclass
class Settings:
    api_keys: dict[str, str] = field(default_factory=dict)
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    search_deadline: float = DEFAULT_SEARCH_DEADLINE
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    status_ttl: float = DEFAULT_STATUS_TTL
    disabled_sources: list[str] = field(default_factory=list)
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables (os.environ by default)."""
        env = os.environ if environ is None else environ

        api_keys: dict[str, str] = {}
        for source_id, names in API_KEY_ENV.items():
            for name in names:
                value = env.get(name, "").strip()
                if value:
                    api_keys[source_id] = value
                    break

        disabled = [
            s.strip()
            for s in env.get("LEGAL_SEARCH_DISABLED_SOURCES", "").split(",")
            if s.strip()
        ]

        return cls(
            api_keys=api_keys,
            http_timeout=_positive_float(env, "LEGAL_SEARCH_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
            search_deadline=_positive_float(env, "LEGAL_SEARCH_DEADLINE", DEFAULT_SEARCH_DEADLINE),
            probe_timeout=_positive_float(env, "LEGAL_SEARCH_PROBE_TIMEOUT", DEFAULT_PROBE_TIMEOUT),
            status_ttl=_positive_float(env, "LEGAL_SEARCH_STATUS_TTL", DEFAULT_STATUS_TTL, allow_zero=True),
            disabled_sources=disabled,
            host=env.get("LEGAL_SEARCH_HOST", DEFAULT_HOST),
            port=_port(env.get("LEGAL_SEARCH_PORT")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain dict for `container.config.from_dict()`."""
        return asdict(self)

    def describe_keys(self) -> dict[str, str]:
        """Key presence per keyed source, safe to log."""
        return {
            source_id: "Set" if source_id in self.api_keys else "Not set"
            for source_id in API_KEY_ENV
        }


def _positive_float(env: Mapping[str, str], name: str, default: float, *, allow_zero: bool = False) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
    if value < 0 or (value == 0 and not allow_zero):
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


def _port(raw: str | None) -> int:
    if not raw or not raw.strip():
        return DEFAULT_PORT
    try:
        port = int(raw)
    except ValueError:
        raise ConfigurationError(f"LEGAL_SEARCH_PORT must be an integer, got {raw!r}") from None
    if not 0 < port < 65536:
        raise ConfigurationError(f"LEGAL_SEARCH_PORT out of range: {port}")
    return port


def load_settings() -> Settings:
    return Settings.from_env()
