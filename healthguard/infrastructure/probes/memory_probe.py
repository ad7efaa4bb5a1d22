"""Probe comparing the process resident memory to a configured limit."""

from __future__ import annotations

from typing import FrozenSet, Iterable, Optional

import psutil
import structlog

from healthguard.domain.entities.health import FailureKind, ProbeFailure, ProbeResult

logger = structlog.get_logger(__name__)

_MB = 1024 * 1024


class MemoryProbe:
    """Report the process RSS against ``max_memory_mb``."""

    def __init__(
        self,
        max_memory_mb: int = 1024,
        warning_threshold: float = 0.8,
        *,
        name: str = "memory",
        tags: Iterable[str] = (),
        timeout: Optional[float] = None,
        process: Optional[psutil.Process] = None,
    ) -> None:
        if max_memory_mb <= 0:
            raise ValueError("max_memory_mb must be positive")
        if not 0 < warning_threshold <= 1:
            raise ValueError("warning_threshold must be in (0, 1]")
        self.name = name
        self.tags: FrozenSet[str] = frozenset(tags)
        self.timeout = timeout
        self.max_memory_mb = max_memory_mb
        self.warning_threshold = warning_threshold
        self._process = process

    async def check(self) -> ProbeResult:
        try:
            process = self._process or psutil.Process()
            memory_mb = process.memory_info().rss // _MB
        except psutil.Error as exc:
            logger.error("health.memory.check_error", probe=self.name, error=str(exc))
            return ProbeResult.degraded(
                "Unable to check memory usage",
                error=ProbeFailure.from_exception(FailureKind.DOMAIN, exc),
            )

        data = {
            "memory_mb": memory_mb,
            "max_allowed_mb": self.max_memory_mb,
            "warning_threshold": self.warning_threshold,
        }

        if memory_mb > self.max_memory_mb:
            message = (
                f"Memory usage {memory_mb}MB exceeds limit of {self.max_memory_mb}MB"
            )
            logger.warning("health.memory.unhealthy", probe=self.name, memory_mb=memory_mb)
            return ProbeResult.unhealthy(message, data)

        if memory_mb > self.max_memory_mb * self.warning_threshold:
            message = (
                f"Memory usage {memory_mb}MB is approaching limit of "
                f"{self.max_memory_mb}MB"
            )
            logger.info("health.memory.degraded", probe=self.name, memory_mb=memory_mb)
            return ProbeResult.degraded(message, data)

        return ProbeResult.healthy(
            f"Memory usage {memory_mb}MB is within acceptable limits", data
        )
