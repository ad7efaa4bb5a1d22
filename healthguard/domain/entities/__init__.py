from .errors import DomainError, ProbeRegistrationError
from .health import (
    FailureKind,
    HealthReport,
    HealthStatus,
    ProbeEntry,
    ProbeFailure,
    ProbeResult,
)

__all__ = [
    "DomainError",
    "FailureKind",
    "HealthReport",
    "HealthStatus",
    "ProbeEntry",
    "ProbeFailure",
    "ProbeRegistrationError",
    "ProbeResult",
]
