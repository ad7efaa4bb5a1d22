from __future__ import annotations

import asyncio
from datetime import timedelta
from time import perf_counter

import pytest

from healthguard.domain.entities.health import (
    FailureKind,
    HealthStatus,
    ProbeResult,
)
from healthguard.infrastructure.probes import FunctionProbe
from healthguard.infrastructure.services.isolation import resolve_timeout, run_isolated


@pytest.mark.asyncio
async def test_result_passes_through_with_duration(make_probe) -> None:
    probe = make_probe("api", HealthStatus.UNHEALTHY, description="api is down")

    result = await run_isolated(probe, 1.0)

    assert result.status is HealthStatus.UNHEALTHY
    assert result.description == "api is down"
    assert result.error is None
    assert result.duration is not None and result.duration >= timedelta(0)


@pytest.mark.asyncio
async def test_existing_duration_is_kept() -> None:
    async def _check() -> ProbeResult:
        return ProbeResult(
            HealthStatus.HEALTHY, "ok", duration=timedelta(milliseconds=42)
        )

    result = await run_isolated(FunctionProbe("fixed", _check), 1.0)

    assert result.duration == timedelta(milliseconds=42)


@pytest.mark.asyncio
async def test_empty_description_is_filled_in() -> None:
    async def _check() -> ProbeResult:
        return ProbeResult(HealthStatus.DEGRADED, "")

    result = await run_isolated(FunctionProbe("quiet", _check), 1.0)

    assert result.status is HealthStatus.DEGRADED
    assert result.description == "quiet reported degraded"


@pytest.mark.asyncio
async def test_raising_probe_is_degraded(make_probe, recording_logger) -> None:
    probe = make_probe("db", raises=AttributeError("'NoneType' has no attribute"))

    result = await run_isolated(probe, 5.0, log=recording_logger)

    assert result.status is HealthStatus.DEGRADED
    assert "failed" in result.description
    assert result.description.startswith("db failed: AttributeError")
    assert result.error.kind is FailureKind.FAULT
    assert result.error.exception_type == "AttributeError"
    assert "health.probe.failure" in recording_logger.events()


@pytest.mark.asyncio
async def test_slow_probe_times_out(make_probe, recording_logger) -> None:
    probe = make_probe("slow", delay=10)

    started = perf_counter()
    result = await run_isolated(probe, 0.05, log=recording_logger)
    elapsed = perf_counter() - started

    assert elapsed < 1.0
    assert result.status is HealthStatus.DEGRADED
    assert "timed out" in result.description
    assert result.description == "slow timed out after 0.05s"
    assert result.error.kind is FailureKind.TIMEOUT
    assert "health.probe.timeout" in recording_logger.events()


@pytest.mark.asyncio
async def test_probe_timeout_override_wins(make_probe) -> None:
    probe = make_probe("slow", delay=10, timeout=0.05)

    started = perf_counter()
    result = await run_isolated(probe, 30.0)

    assert perf_counter() - started < 1.0
    assert result.error.kind is FailureKind.TIMEOUT


def test_resolve_timeout_ignores_invalid_override(make_probe) -> None:
    assert resolve_timeout(make_probe("a", timeout=2.5), 30.0) == 2.5
    assert resolve_timeout(make_probe("a"), 30.0) == 30.0
    assert resolve_timeout(make_probe("a", timeout=0), 30.0) == 30.0


@pytest.mark.asyncio
async def test_probe_ignoring_cancellation_does_not_block() -> None:
    async def _stubborn() -> ProbeResult:
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            pass
        await asyncio.sleep(0.2)
        return ProbeResult.healthy("finally")

    started = perf_counter()
    result = await run_isolated(FunctionProbe("stubborn", _stubborn), 0.05)

    assert perf_counter() - started < 1.0
    assert result.error.kind is FailureKind.TIMEOUT


@pytest.mark.asyncio
async def test_cancellation_event_yields_cancelled_result(make_probe) -> None:
    cancellation = asyncio.Event()
    probe = make_probe("slow", delay=10)

    task = asyncio.create_task(run_isolated(probe, 30.0, cancellation=cancellation))
    await asyncio.sleep(0.01)
    cancellation.set()
    result = await asyncio.wait_for(task, timeout=1.0)

    assert result.status is HealthStatus.DEGRADED
    assert result.description == "slow was cancelled"
    assert result.error.kind is FailureKind.CANCELLED


@pytest.mark.asyncio
async def test_already_cancelled_does_not_start_probe() -> None:
    calls = []

    async def _check() -> ProbeResult:
        calls.append(1)
        return ProbeResult.healthy("ok")

    cancellation = asyncio.Event()
    cancellation.set()

    result = await run_isolated(
        FunctionProbe("never", _check), 1.0, cancellation=cancellation
    )

    assert calls == []
    assert result.error.kind is FailureKind.CANCELLED


@pytest.mark.asyncio
async def test_result_completed_before_signal_is_kept(make_probe) -> None:
    cancellation = asyncio.Event()
    probe = make_probe("fast", HealthStatus.UNHEALTHY)

    result = await run_isolated(probe, 1.0, cancellation=cancellation)
    cancellation.set()

    assert result.status is HealthStatus.UNHEALTHY


@pytest.mark.asyncio
async def test_probe_cancelling_itself_is_reported_as_cancelled() -> None:
    async def _check() -> ProbeResult:
        raise asyncio.CancelledError()

    result = await run_isolated(FunctionProbe("self-cancel", _check), 1.0)

    assert result.status is HealthStatus.DEGRADED
    assert result.error.kind is FailureKind.CANCELLED


@pytest.mark.asyncio
async def test_malformed_return_value_is_degraded() -> None:
    async def _check():
        return {"status": "healthy"}

    result = await run_isolated(FunctionProbe("odd", _check), 1.0)

    assert result.status is HealthStatus.DEGRADED
    assert "expected ProbeResult" in result.description
    assert result.error.kind is FailureKind.FAULT


@pytest.mark.asyncio
async def test_invalid_status_is_degraded() -> None:
    async def _check() -> ProbeResult:
        return ProbeResult("healthy", "string status")  # type: ignore[arg-type]

    result = await run_isolated(FunctionProbe("odd", _check), 1.0)

    assert result.status is HealthStatus.DEGRADED
    assert result.error.kind is FailureKind.FAULT


@pytest.mark.asyncio
async def test_synchronous_check_is_degraded() -> None:
    class _SyncProbe:
        name = "sync"
        tags = frozenset()
        timeout = None

        def check(self) -> ProbeResult:
            return ProbeResult.healthy("not awaitable")

    result = await run_isolated(_SyncProbe(), 1.0)

    assert result.status is HealthStatus.DEGRADED
    assert result.error.kind is FailureKind.FAULT


@pytest.mark.asyncio
async def test_broken_logger_does_not_change_result(make_probe, exploding_logger) -> None:
    probe = make_probe("db", raises=RuntimeError("boom"))

    result = await run_isolated(probe, 1.0, log=exploding_logger)

    assert result.status is HealthStatus.DEGRADED
    assert result.description == "db failed: RuntimeError: boom"


@pytest.mark.asyncio
async def test_wrapper_cancellation_cancels_probe() -> None:
    started = asyncio.Event()
    cancelled = asyncio.Event()

    async def _check() -> ProbeResult:
        started.set()
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise
        return ProbeResult.healthy("unreachable")

    task = asyncio.create_task(run_isolated(FunctionProbe("slow", _check), 30.0))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    await asyncio.wait_for(cancelled.wait(), timeout=1.0)


@pytest.mark.asyncio
async def test_unreadable_name_still_yields_result() -> None:
    class _Nameless:
        tags = frozenset()
        timeout = None

        @property
        def name(self) -> str:
            raise LookupError("name not configured")

        async def check(self) -> ProbeResult:
            raise RuntimeError("backend down")

    result = await run_isolated(_Nameless(), 1.0)

    assert result.status is HealthStatus.DEGRADED
    assert result.description.startswith("_Nameless failed")
    assert result.error.kind is FailureKind.FAULT
