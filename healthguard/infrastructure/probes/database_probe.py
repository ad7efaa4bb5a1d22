"""
Infrastructure Probe - Database

Pings a database through a caller-supplied callable so that no driver is
imposed on the host application. Blocking drivers (pymongo, psycopg, ...)
are run in a worker thread; async drivers are awaited directly.
"""

from __future__ import annotations

import asyncio
import inspect
from time import perf_counter
from typing import Any, Callable, Dict, FrozenSet, Iterable, Optional

import structlog

from healthguard.domain.entities.health import FailureKind, ProbeFailure, ProbeResult

logger = structlog.get_logger(__name__)


class DatabaseProbe:
    """Report whether ``ping`` succeeds.

    ``ping`` takes no arguments; it may be a plain function or a coroutine
    function, e.g. ``lambda: client.admin.command("ping")``. Any exception it
    raises marks the database unhealthy.
    """

    def __init__(
        self,
        ping: Callable[[], Any],
        *,
        name: str = "database",
        tags: Iterable[str] = (),
        timeout: Optional[float] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not callable(ping):
            raise ValueError("ping must be callable")
        self.name = name
        self.tags: FrozenSet[str] = frozenset(tags)
        self.timeout = timeout
        self._ping = ping
        self._details = dict(details or {})

    async def check(self) -> ProbeResult:
        start = perf_counter()
        try:
            if inspect.iscoroutinefunction(self._ping):
                await self._ping()
            else:
                outcome = await asyncio.to_thread(self._ping)
                if inspect.isawaitable(outcome):
                    await outcome
        except Exception as exc:
            latency_ms = round((perf_counter() - start) * 1000, 1)
            logger.error(
                "health.database.unreachable", probe=self.name, error=str(exc)
            )
            return ProbeResult.unhealthy(
                f"Database ping failed: {exc}",
                {**self._details, "latency_ms": latency_ms},
                ProbeFailure.from_exception(FailureKind.DOMAIN, exc),
            )

        latency_ms = round((perf_counter() - start) * 1000, 1)
        return ProbeResult.healthy(
            "Database ping successful", {**self._details, "latency_ms": latency_ms}
        )
