"""Infrastructure implementation of the probe aggregator."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from time import perf_counter
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from healthguard.domain.entities.errors import ProbeRegistrationError
from healthguard.domain.entities.health import (
    FailureKind,
    HealthReport,
    HealthStatus,
    ProbeEntry,
    ProbeFailure,
    ProbeResult,
)
from healthguard.domain.ports.health_check import IHealthCheckService, ProbePredicate
from healthguard.domain.ports.probe import IProbe
from healthguard.infrastructure.services.isolation import (
    elapsed_since,
    probe_name,
    run_isolated,
)
from healthguard.shared import (
    DEFAULT_OVERALL_TIMEOUT_SECONDS,
    DEFAULT_PROBE_TIMEOUT_SECONDS,
    EVALUATION_ENTRY_NAME,
    get_logger,
    log_safely,
)

STRAGGLER_TIMEOUT_MESSAGE = "evaluation timed out before this check completed"
STRAGGLER_CANCELLED_MESSAGE = "evaluation was cancelled before this check completed"


def _probe_tags(probe: Any) -> frozenset:
    try:
        return frozenset(getattr(probe, "tags", None) or ())
    except Exception:
        return frozenset()


class HealthCheckService(IHealthCheckService):
    """Run registered probes concurrently and fold them into a report.

    Holds the registered probes in registration order and nothing else between
    calls; every ``evaluate`` builds a fresh report.
    """

    def __init__(
        self,
        probes: Iterable[IProbe] = (),
        *,
        probe_timeout: Optional[float] = DEFAULT_PROBE_TIMEOUT_SECONDS,
        overall_timeout: Optional[float] = DEFAULT_OVERALL_TIMEOUT_SECONDS,
        logger: Any = None,
    ) -> None:
        self._probes: List[IProbe] = []
        self._probe_timeout = probe_timeout
        self._overall_timeout = overall_timeout
        self._logger = logger if logger is not None else get_logger(__name__)
        for probe in probes:
            self.add_probe(probe)

    @property
    def probes(self) -> Tuple[IProbe, ...]:
        return tuple(self._probes)

    @property
    def probe_timeout(self) -> Optional[float]:
        return self._probe_timeout

    @property
    def overall_timeout(self) -> Optional[float]:
        return self._overall_timeout

    def add_probe(self, probe: IProbe) -> "HealthCheckService":
        """Register ``probe`` after the ones already registered."""
        name = getattr(probe, "name", None)
        if not isinstance(name, str) or not name.strip():
            raise ProbeRegistrationError("Probe name must be a non-empty string")
        if not callable(getattr(probe, "check", None)):
            raise ProbeRegistrationError(
                f"Probe '{name}' does not define a check() coroutine", name
            )
        if any(existing.name == name for existing in self._probes):
            raise ProbeRegistrationError(
                f"A probe named '{name}' is already registered", name
            )

        self._probes.append(probe)
        log_safely(self._logger, "debug", "health.probe.registered", probe=name)
        return self

    async def remove_probe(self, name: str) -> IProbe:
        """Deregister the probe called ``name`` and release its resources."""
        for index, probe in enumerate(self._probes):
            if probe_name(probe) == name:
                del self._probes[index]
                await self._release(probe)
                return probe
        raise ProbeRegistrationError(f"No probe named '{name}' is registered", name)

    async def aclose(self) -> None:
        """Deregister every probe, releasing resources in reverse order."""
        probes, self._probes = self._probes, []
        for probe in reversed(probes):
            await self._release(probe)

    async def __aenter__(self) -> "HealthCheckService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def _release(self, probe: IProbe) -> None:
        close = getattr(probe, "aclose", None)
        if close is None:
            return
        try:
            await close()
        except Exception as exc:
            log_safely(
                self._logger,
                "warning",
                "health.probe.release_failed",
                probe=probe_name(probe),
                error=str(exc),
            )

    async def evaluate(
        self,
        predicate: Optional[ProbePredicate] = None,
        *,
        probes: Optional[Sequence[IProbe]] = None,
        overall_timeout: Optional[float] = None,
        cancellation: Optional[asyncio.Event] = None,
    ) -> HealthReport:
        """
        Run the selected probes concurrently and aggregate the outcome.

        Args:
            predicate: Optional filter; only probes for which it returns true
                are evaluated.
            probes: Probes to evaluate instead of the registered ones.
            overall_timeout: Total budget in seconds, overriding the default.
            cancellation: Event the caller sets to stop the evaluation early.

        Returns:
            A new report. Never raises: checks still running when the budget
            runs out are reported as ``DEGRADED`` stragglers and internal
            failures collapse into a single synthetic ``DEGRADED`` entry.
        """
        start = perf_counter()
        try:
            return await self._evaluate(
                predicate, probes, overall_timeout, cancellation, start
            )
        except Exception as exc:
            log_safely(
                self._logger,
                "error",
                "health.evaluation.failure",
                error=str(exc),
                exc_info=exc,
            )
            return self._failure_report(exc, start)

    async def _evaluate(
        self,
        predicate: Optional[ProbePredicate],
        probes: Optional[Sequence[IProbe]],
        overall_timeout: Optional[float],
        cancellation: Optional[asyncio.Event],
        start: float,
    ) -> HealthReport:
        candidates = tuple(self._probes if probes is None else probes)
        budget = self._overall_timeout if overall_timeout is None else overall_timeout

        selected = self._select(candidates, predicate)
        names = self._entry_names(probe for probe, _ in selected)

        tasks: Dict[int, "asyncio.Task[ProbeResult]"] = {}
        for index, (probe, preset) in enumerate(selected):
            if preset is None:
                tasks[index] = asyncio.create_task(
                    run_isolated(
                        probe,
                        self._probe_timeout,
                        cancellation=cancellation,
                        log=self._logger,
                    ),
                    name=f"health-{names[index]}",
                )

        pending = await self._wait(tasks.values(), budget)
        if pending:
            log_safely(
                self._logger,
                "warning",
                "health.evaluation.partial",
                pending=[names[i] for i, task in tasks.items() if task in pending],
                timeout=budget,
            )

        entries: List[ProbeEntry] = []
        for index, (probe, preset) in enumerate(selected):
            if preset is not None:
                result = preset
            elif tasks[index] in pending:
                result = self._straggler(cancellation, start)
            else:
                result = self._collect(names[index], tasks[index], start)
            entries.append(
                ProbeEntry(name=names[index], result=result, tags=_probe_tags(probe))
            )

        report = HealthReport.from_entries(entries, total_duration=elapsed_since(start))
        log_safely(
            self._logger,
            "debug",
            "health.evaluation.completed",
            status=report.status.value,
            entries=len(report.entries),
            duration_ms=round(report.total_duration.total_seconds() * 1000, 1),
        )
        return report

    def _select(
        self,
        candidates: Sequence[IProbe],
        predicate: Optional[ProbePredicate],
    ) -> List[Tuple[IProbe, Optional[ProbeResult]]]:
        """Apply ``predicate``; a probe it fails on is reported, not dropped."""
        selected: List[Tuple[IProbe, Optional[ProbeResult]]] = []
        for probe in candidates:
            if predicate is None:
                selected.append((probe, None))
                continue
            try:
                if predicate(probe):
                    selected.append((probe, None))
            except Exception as exc:
                log_safely(
                    self._logger,
                    "error",
                    "health.probe.filter_failed",
                    probe=probe_name(probe),
                    error=str(exc),
                )
                selected.append(
                    (
                        probe,
                        ProbeResult(
                            status=HealthStatus.DEGRADED,
                            description=f"{probe_name(probe)} could not be selected: {exc}",
                            error=ProbeFailure.from_exception(FailureKind.FAULT, exc),
                            duration=timedelta(0),
                        ),
                    )
                )
        return selected

    @staticmethod
    def _entry_names(probes: Iterable[IProbe]) -> List[str]:
        # Explicit probe sequences may repeat a name; keep report names unique.
        names: List[str] = []
        seen: Dict[str, int] = {}
        for probe in probes:
            name = probe_name(probe)
            seen[name] = seen.get(name, 0) + 1
            names.append(name if seen[name] == 1 else f"{name}#{seen[name]}")
        return names

    async def _wait(
        self, tasks: Iterable["asyncio.Task[ProbeResult]"], budget: Optional[float]
    ) -> set:
        """Wait for ``tasks`` up to ``budget``; cancel and return stragglers."""
        tasks = list(tasks)
        if not tasks:
            return set()
        try:
            _, pending = await asyncio.wait(tasks, timeout=budget)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise
        for task in pending:
            task.cancel()
        return pending

    def _collect(
        self, name: str, task: "asyncio.Task[ProbeResult]", start: float
    ) -> ProbeResult:
        if task.cancelled():
            return self._straggler(None, start)
        exc = task.exception()
        if exc is not None:
            # run_isolated does not raise; this only guards against regressions.
            log_safely(
                self._logger, "error", "health.probe.failure", probe=name, error=str(exc)
            )
            return ProbeResult(
                status=HealthStatus.DEGRADED,
                description=f"{name} failed: {type(exc).__name__}: {exc}",
                error=ProbeFailure.from_exception(FailureKind.FAULT, exc),
                duration=elapsed_since(start),
            )
        return task.result()

    @staticmethod
    def _straggler(
        cancellation: Optional[asyncio.Event], start: float
    ) -> ProbeResult:
        if cancellation is not None and cancellation.is_set():
            kind, message = FailureKind.CANCELLED, STRAGGLER_CANCELLED_MESSAGE
        else:
            kind, message = FailureKind.TIMEOUT, STRAGGLER_TIMEOUT_MESSAGE
        return ProbeResult(
            status=HealthStatus.DEGRADED,
            description=message,
            error=ProbeFailure(kind=kind, message=message),
            duration=elapsed_since(start),
        )

    @staticmethod
    def _failure_report(exc: Exception, start: float) -> HealthReport:
        message = f"Health check evaluation failed: {type(exc).__name__}: {exc}"
        entry = ProbeEntry(
            name=EVALUATION_ENTRY_NAME,
            result=ProbeResult(
                status=HealthStatus.DEGRADED,
                description=message,
                error=ProbeFailure.from_exception(FailureKind.FAULT, exc),
                duration=elapsed_since(start),
            ),
        )
        return HealthReport(
            status=HealthStatus.DEGRADED,
            entries=(entry,),
            total_duration=elapsed_since(start),
        )
