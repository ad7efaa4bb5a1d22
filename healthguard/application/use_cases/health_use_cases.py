"""Use cases for health reporting."""

from typing import Iterable, Optional

from healthguard.domain.entities.health import HealthReport
from healthguard.domain.ports.health_check import IHealthCheckService
from healthguard.domain.services.probe_filters import has_any_tag


class GetHealthReportUseCase:
    """Use case responsible for returning the aggregated health report."""

    def __init__(self, health_check_service: IHealthCheckService) -> None:
        self._health_check_service = health_check_service

    async def execute(self, tags: Optional[Iterable[str]] = None) -> HealthReport:
        """Evaluate every probe, or only those carrying one of ``tags``."""
        tags = tuple(tags or ())
        predicate = has_any_tag(*tags) if tags else None
        return await self._health_check_service.evaluate(predicate)
