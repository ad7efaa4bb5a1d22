"""Domain service abstraction for health checks."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol, Sequence

from healthguard.domain.entities.health import HealthReport
from healthguard.domain.ports.probe import IProbe

ProbePredicate = Callable[[IProbe], bool]


class IHealthCheckService(Protocol):
    """Interface for evaluating registered probes into a report."""

    async def evaluate(
        self,
        predicate: Optional[ProbePredicate] = None,
        *,
        probes: Optional[Sequence[IProbe]] = None,
        overall_timeout: Optional[float] = None,
        cancellation: Optional[asyncio.Event] = None,
    ) -> HealthReport:
        """Run the selected probes and aggregate their results. Never raises."""
        ...
