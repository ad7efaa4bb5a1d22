from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Tuple

import pytest

from healthguard.domain.entities.health import HealthStatus, ProbeResult
from healthguard.infrastructure.probes import FunctionProbe

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


ProbeFactory = Callable[..., FunctionProbe]


@pytest.fixture()
def make_probe() -> ProbeFactory:
    """Build a FunctionProbe that sleeps, then returns or raises."""

    def _factory(
        name: str,
        status: HealthStatus = HealthStatus.HEALTHY,
        *,
        delay: float = 0.0,
        raises: Optional[BaseException] = None,
        tags: Iterable[str] = (),
        timeout: Optional[float] = None,
        description: Optional[str] = None,
    ) -> FunctionProbe:
        async def _check() -> ProbeResult:
            if delay:
                await asyncio.sleep(delay)
            if raises is not None:
                raise raises
            return ProbeResult(status, description or f"{name} is {status.value}")

        return FunctionProbe(name=name, func=_check, tags=frozenset(tags), timeout=timeout)

    return _factory


class RecordingLogger:
    """Logging sink capturing (level, event, fields) triples."""

    def __init__(self) -> None:
        self.records: List[Tuple[str, str, dict]] = []

    def _record(self, level: str, event: str, **fields: Any) -> None:
        self.records.append((level, event, fields))

    def debug(self, event: str, **fields: Any) -> None:
        self._record("debug", event, **fields)

    def info(self, event: str, **fields: Any) -> None:
        self._record("info", event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._record("warning", event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        self._record("error", event, **fields)

    def events(self) -> List[str]:
        return [event for _, event, _ in self.records]


class ExplodingLogger:
    """Logging sink whose every call fails."""

    def __getattr__(self, name: str) -> Callable[..., None]:
        def _explode(*args: Any, **kwargs: Any) -> None:
            raise RuntimeError("logging backend unavailable")

        return _explode


@pytest.fixture()
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture()
def exploding_logger() -> ExplodingLogger:
    return ExplodingLogger()
