"""Connection status entities reported by the status checker."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(UTC).isoformat()


class SourceStatus(Enum):
    """Reachability of a provider."""

    ONLINE = "online"
    LIMITED = "limited"  # reachable, running without a key
    OFFLINE = "offline"
    BLOCKED = "blocked"  # bot wall / captcha


@dataclass(frozen=True)
class ConnectionProbe:
    """What an adapter reports about itself from test_connection()."""

    status: SourceStatus
    message: str
    has_api_key: bool = False


@dataclass(frozen=True)
class ConnectionStatus:
    """One source's entry in a status report."""

    source_id: str
    name: str
    status: SourceStatus
    has_api_key: bool
    message: str
    timestamp: str = field(default_factory=utc_now_iso)

    @classmethod
    def from_probe(cls, source_id: str, name: str, probe: ConnectionProbe) -> ConnectionStatus:
        return cls(
            source_id=source_id,
            name=name,
            status=probe.status,
            has_api_key=probe.has_api_key,
            message=probe.message,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "sourceId": self.source_id,
            "name": self.name,
            "status": self.status.value,
            "hasApiKey": self.has_api_key,
            "message": self.message,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class StatusReport:
    sources: tuple[ConnectionStatus, ...]
    timestamp: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sources": [s.to_dict() for s in self.sources],
            "timestamp": self.timestamp,
        }
