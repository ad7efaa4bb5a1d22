"""
Health domain entities.

This module defines the value objects produced by probe evaluation: the
tri-state status with its dominance ordering, the failure detail attached to
isolated results, and the immutable report assembled from every probe entry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Tuple


class HealthStatus(str, Enum):
    """Tri-state probe status, ordered by severity."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, HealthStatus):
            return NotImplemented
        return self.severity < other.severity

    def __le__(self, other: object) -> bool:
        if not isinstance(other, HealthStatus):
            return NotImplemented
        return self.severity <= other.severity

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, HealthStatus):
            return NotImplemented
        return self.severity > other.severity

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, HealthStatus):
            return NotImplemented
        return self.severity >= other.severity

    @classmethod
    def worst(cls, statuses: Iterable["HealthStatus"]) -> "HealthStatus":
        """Dominance rule: the most severe status, ``HEALTHY`` when empty."""
        return max(statuses, default=cls.HEALTHY)


_SEVERITY = {
    HealthStatus.HEALTHY: 0,
    HealthStatus.DEGRADED: 1,
    HealthStatus.UNHEALTHY: 2,
}


class FailureKind(str, Enum):
    """Why a probe result carries failure detail."""

    DOMAIN = "domain"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    FAULT = "fault"


@dataclass(frozen=True, slots=True)
class ProbeFailure:
    """Failure detail attached to a result that did not come out clean."""

    kind: FailureKind
    message: str
    exception_type: Optional[str] = None
    exception: Optional[BaseException] = field(
        default=None, compare=False, repr=False
    )

    @classmethod
    def from_exception(cls, kind: FailureKind, exc: BaseException) -> "ProbeFailure":
        return cls(
            kind=kind,
            message=str(exc) or type(exc).__name__,
            exception_type=type(exc).__name__,
            exception=exc,
        )


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """Outcome of a single probe execution.

    ``duration`` is left unset by probes and filled in by the isolation
    wrapper; once a result is part of a report it is always populated.
    """

    status: HealthStatus
    description: str
    data: Mapping[str, Any] = field(default_factory=dict)
    error: Optional[ProbeFailure] = None
    duration: Optional[timedelta] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))
        if self.duration is not None and self.duration < timedelta(0):
            object.__setattr__(self, "duration", timedelta(0))

    @classmethod
    def healthy(
        cls, description: str, data: Optional[Mapping[str, Any]] = None
    ) -> "ProbeResult":
        return cls(HealthStatus.HEALTHY, description, data or {})

    @classmethod
    def degraded(
        cls,
        description: str,
        data: Optional[Mapping[str, Any]] = None,
        error: Optional[ProbeFailure] = None,
    ) -> "ProbeResult":
        return cls(HealthStatus.DEGRADED, description, data or {}, error)

    @classmethod
    def unhealthy(
        cls,
        description: str,
        data: Optional[Mapping[str, Any]] = None,
        error: Optional[ProbeFailure] = None,
    ) -> "ProbeResult":
        return cls(HealthStatus.UNHEALTHY, description, data or {}, error)


@dataclass(frozen=True, slots=True)
class ProbeEntry:
    """A named probe result inside a report."""

    name: str
    result: ProbeResult
    tags: FrozenSet[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", frozenset(self.tags))

    @property
    def status(self) -> HealthStatus:
        return self.result.status


@dataclass(frozen=True, slots=True)
class HealthReport:
    """Aggregated, immutable outcome of one evaluation."""

    status: HealthStatus
    entries: Tuple[ProbeEntry, ...] = ()
    total_duration: timedelta = timedelta(0)
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple(self.entries))

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[ProbeEntry],
        total_duration: timedelta = timedelta(0),
    ) -> "HealthReport":
        """Build a report whose status follows the dominance rule."""
        entries = tuple(entries)
        return cls(
            status=HealthStatus.worst(entry.status for entry in entries),
            entries=entries,
            total_duration=max(total_duration, timedelta(0)),
        )

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(entry.name for entry in self.entries)

    @property
    def description(self) -> Optional[str]:
        """Description of the first entry carrying the report status."""
        for entry in self.entries:
            if entry.status is self.status:
                return entry.result.description
        return None

    def entry(self, name: str) -> Optional[ProbeEntry]:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None
