"""Probe checking free disk space on the volume holding a path."""

from __future__ import annotations

import asyncio
import os
from typing import FrozenSet, Iterable, Optional

import psutil
import structlog

from healthguard.domain.entities.health import FailureKind, ProbeFailure, ProbeResult

logger = structlog.get_logger(__name__)

_GB = 1024 * 1024 * 1024


class DiskSpaceProbe:
    """Compare free space under ``path`` to ``min_free_space_gb``.

    Free space below the minimum is unhealthy; below
    ``min_free_space_gb * warning_threshold_multiplier`` it is degraded.
    """

    def __init__(
        self,
        min_free_space_gb: int = 1,
        path: Optional[str] = None,
        warning_threshold_multiplier: float = 2.0,
        *,
        name: str = "disk_space",
        tags: Iterable[str] = (),
        timeout: Optional[float] = None,
    ) -> None:
        if min_free_space_gb < 0:
            raise ValueError("min_free_space_gb must not be negative")
        if warning_threshold_multiplier < 1:
            raise ValueError("warning_threshold_multiplier must be at least 1")
        self.name = name
        self.tags: FrozenSet[str] = frozenset(tags)
        self.timeout = timeout
        self.min_free_space_gb = min_free_space_gb
        self.path = path or os.getcwd()
        self.warning_threshold_multiplier = warning_threshold_multiplier

    async def check(self) -> ProbeResult:
        try:
            # statvfs can block on network mounts
            usage = await asyncio.to_thread(psutil.disk_usage, self.path)
        except FileNotFoundError as exc:
            return self._unavailable(f"Directory not found: {self.path}", exc)
        except PermissionError as exc:
            return self._unavailable(f"Access denied to path: {self.path}", exc)
        except (OSError, ValueError) as exc:
            return self._unavailable(f"Invalid path: {self.path}", exc)

        free_gb = usage.free // _GB
        total_gb = usage.total // _GB
        free_percentage = (usage.free / usage.total * 100) if usage.total else 0.0

        data = {
            "free_space_gb": free_gb,
            "total_space_gb": total_gb,
            "used_space_gb": total_gb - free_gb,
            "free_space_percentage": round(free_percentage, 2),
            "min_required_gb": self.min_free_space_gb,
            "path": self.path,
        }

        if free_gb < self.min_free_space_gb:
            message = (
                f"Free disk space {free_gb}GB is below minimum requirement of "
                f"{self.min_free_space_gb}GB at {self.path}"
            )
            logger.warning("health.disk.unhealthy", probe=self.name, free_gb=free_gb)
            return ProbeResult.unhealthy(message, data)

        if free_gb < self.min_free_space_gb * self.warning_threshold_multiplier:
            logger.info("health.disk.degraded", probe=self.name, free_gb=free_gb)
            return ProbeResult.degraded(
                f"Free disk space {free_gb}GB is getting low at {self.path}", data
            )

        return ProbeResult.healthy(
            f"Disk space {free_gb}GB ({free_percentage:.1f}%) is sufficient at {self.path}",
            data,
        )

    def _unavailable(self, message: str, exc: Exception) -> ProbeResult:
        logger.error(
            "health.disk.check_error", probe=self.name, path=self.path, error=str(exc)
        )
        return ProbeResult.degraded(
            message, error=ProbeFailure.from_exception(FailureKind.DOMAIN, exc)
        )
