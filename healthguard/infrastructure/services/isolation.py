"""
Probe isolation wrapper.

Runs a single probe under its own time budget and turns every way a probe can
go wrong (raising, hanging, being cancelled, returning garbage) into a
``DEGRADED`` result instead of an exception.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import timedelta
from time import perf_counter
from typing import Any, Optional

from healthguard.domain.entities.health import (
    FailureKind,
    HealthStatus,
    ProbeFailure,
    ProbeResult,
)
from healthguard.domain.ports.probe import IProbe
from healthguard.shared import get_logger, log_safely

logger = get_logger(__name__)


def probe_name(probe: Any) -> str:
    try:
        name = getattr(probe, "name", None)
    except Exception:
        name = None
    if isinstance(name, str) and name:
        return name
    return type(probe).__name__


def resolve_timeout(probe: Any, default: Optional[float]) -> Optional[float]:
    """Per-probe override wins over the aggregator default."""
    override = getattr(probe, "timeout", None)
    if isinstance(override, (int, float)) and override > 0:
        return float(override)
    return default


def elapsed_since(start: float) -> timedelta:
    return timedelta(seconds=max(0.0, perf_counter() - start))


def _discard_outcome(task: "asyncio.Future[Any]") -> None:
    # Abandoned probes may still fail later; retrieve it so asyncio stays quiet.
    if not task.cancelled():
        task.exception()


def _completed(name: str, result: Any, start: float) -> ProbeResult:
    if not isinstance(result, ProbeResult):
        raise TypeError(
            f"check() returned {type(result).__name__}, expected ProbeResult"
        )
    if not isinstance(result.status, HealthStatus):
        raise TypeError(f"check() returned an invalid status {result.status!r}")

    changes: dict = {}
    if result.duration is None:
        changes["duration"] = elapsed_since(start)
    if not result.description:
        changes["description"] = f"{name} reported {result.status.value}"
    return replace(result, **changes) if changes else result


def _timed_out(name: str, timeout: Optional[float], start: float, log: Any) -> ProbeResult:
    log_safely(log, "warning", "health.probe.timeout", probe=name, timeout=timeout)
    message = f"{name} timed out after {timeout:g}s"
    return ProbeResult(
        status=HealthStatus.DEGRADED,
        description=message,
        error=ProbeFailure(
            kind=FailureKind.TIMEOUT,
            message=message,
            exception_type=TimeoutError.__name__,
        ),
        duration=elapsed_since(start),
    )


def _cancelled(name: str, start: float, log: Any) -> ProbeResult:
    log_safely(log, "warning", "health.probe.cancelled", probe=name)
    message = f"{name} was cancelled"
    return ProbeResult(
        status=HealthStatus.DEGRADED,
        description=message,
        error=ProbeFailure(
            kind=FailureKind.CANCELLED,
            message=message,
            exception_type=asyncio.CancelledError.__name__,
        ),
        duration=elapsed_since(start),
    )


def _faulted(name: str, exc: Exception, start: float, log: Any) -> ProbeResult:
    log_safely(
        log,
        "error",
        "health.probe.failure",
        probe=name,
        error=str(exc),
        exc_info=exc,
    )
    summary = f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__
    return ProbeResult(
        status=HealthStatus.DEGRADED,
        description=f"{name} failed: {summary}",
        error=ProbeFailure.from_exception(FailureKind.FAULT, exc),
        duration=elapsed_since(start),
    )


async def run_isolated(
    probe: IProbe,
    timeout: Optional[float],
    *,
    cancellation: Optional[asyncio.Event] = None,
    log: Any = None,
) -> ProbeResult:
    """
    Execute ``probe`` and always come back with a result.

    The probe runs in its own task and the wrapper waits for whichever happens
    first: the probe finishing, ``timeout`` seconds elapsing (or the probe's
    own ``timeout`` override), or ``cancellation`` being set. A probe that
    loses the race is cancelled and abandoned, so one that swallows
    cancellation cannot hold the caller back.

    Probe malfunctions are reported as ``DEGRADED``: they mean the signal
    could not be determined, not that it is bad. Only cancellation of the
    wrapper's own task propagates, after the probe task has been cancelled.
    """
    log = log if log is not None else logger
    name = type(probe).__name__
    start = perf_counter()
    probe_task: Optional["asyncio.Future[Any]"] = None
    cancel_waiter: Optional["asyncio.Task[Any]"] = None

    try:
        name = probe_name(probe)
        budget = resolve_timeout(probe, timeout)
        if cancellation is not None and cancellation.is_set():
            return _cancelled(name, start, log)

        probe_task = asyncio.ensure_future(probe.check())
        waiters = {probe_task}
        if cancellation is not None:
            cancel_waiter = asyncio.create_task(cancellation.wait())
            waiters.add(cancel_waiter)

        done, _ = await asyncio.wait(
            waiters, timeout=budget, return_when=asyncio.FIRST_COMPLETED
        )

        if probe_task in done:
            if probe_task.cancelled():
                return _cancelled(name, start, log)
            return _completed(name, probe_task.result(), start)
        if cancel_waiter is not None and cancel_waiter in done:
            return _cancelled(name, start, log)
        return _timed_out(name, budget, start, log)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        return _faulted(name, exc, start, log)
    finally:
        if cancel_waiter is not None and not cancel_waiter.done():
            cancel_waiter.cancel()
        if probe_task is not None and not probe_task.done():
            probe_task.cancel()
            probe_task.add_done_callback(_discard_outcome)
