"""
Composition root - Main Layer

Registers the probes described by ``AppSettings`` on a new
``HealthCheckService``: memory first, then disk space, then every configured
HTTP dependency, in that order.
"""

from typing import Any, Iterable, Optional

from healthguard.domain.ports.probe import IProbe
from healthguard.infrastructure.probes import DiskSpaceProbe, HttpProbe, MemoryProbe
from healthguard.infrastructure.services import HealthCheckService
from healthguard.shared import get_logger, update_logging_from_settings

from .config import AppSettings, get_settings

logger = get_logger(__name__)


def build_probes(settings: AppSettings) -> list:
    probes: list = []

    memory = settings.memory_check
    if memory.enabled:
        probes.append(
            MemoryProbe(
                max_memory_mb=memory.max_memory_mb,
                warning_threshold=memory.warning_threshold,
                name=memory.name,
                tags=memory.tags,
            )
        )

    disk = settings.disk_check
    if disk.enabled:
        probes.append(
            DiskSpaceProbe(
                min_free_space_gb=disk.min_free_space_gb,
                path=disk.path,
                warning_threshold_multiplier=disk.warning_threshold_multiplier,
                name=disk.name,
                tags=disk.tags,
            )
        )

    for http in settings.http_checks:
        probes.append(
            HttpProbe(
                http.url,
                name=http.name,
                tags=http.tags,
                expected_status=http.expected_status,
                request_timeout=http.request_timeout,
                timeout=http.timeout,
                slow_response_threshold_ms=http.slow_response_threshold_ms,
            )
        )

    return probes


def build_health_check_service(
    settings: Optional[AppSettings] = None,
    *,
    extra_probes: Iterable[IProbe] = (),
    logger: Any = None,
    configure_logs: bool = True,
) -> HealthCheckService:
    """
    Create the aggregator with every configured probe registered.

    Args:
        settings: Loaded settings; read from the environment when omitted.
        extra_probes: Application-specific probes registered after the
            built-in ones.
        logger: Logging sink handed to the aggregator.
        configure_logs: Apply ``settings.logging`` and ``settings.environment``
            to the process logging configuration. Hosts that own logging
            pass ``False``.
    """
    settings = settings or get_settings()
    if configure_logs:
        update_logging_from_settings(settings)

    service = HealthCheckService(
        probe_timeout=settings.health.probe_timeout,
        overall_timeout=settings.health.overall_timeout,
        logger=logger,
    )
    for probe in [*build_probes(settings), *extra_probes]:
        service.add_probe(probe)

    _log_registered(service)
    return service


def _log_registered(service: HealthCheckService) -> None:
    logger.info(
        "health.service.built",
        probes=[probe.name for probe in service.probes],
        probe_timeout=service.probe_timeout,
        overall_timeout=service.overall_timeout,
    )
