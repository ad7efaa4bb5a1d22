"""
healthguard - resilient health-probe aggregator.

Layer Structure:
- Domain: health entities, probe contract and selection predicates
- Application: use cases exposed to transport layers
- Infrastructure: isolation wrapper, aggregator and built-in probes
- Shared: cross-cutting concerns (constants, structured logging)
- Main: settings and the composition root registering configured probes
"""

from healthguard.domain.entities import (
    FailureKind,
    HealthReport,
    HealthStatus,
    ProbeEntry,
    ProbeFailure,
    ProbeResult,
)
from healthguard.infrastructure.probes import FunctionProbe
from healthguard.infrastructure.services import HealthCheckService, run_isolated

__version__ = "0.1.0"

__all__ = [
    "FailureKind",
    "FunctionProbe",
    "HealthCheckService",
    "HealthReport",
    "HealthStatus",
    "ProbeEntry",
    "ProbeFailure",
    "ProbeResult",
    "run_isolated",
]
