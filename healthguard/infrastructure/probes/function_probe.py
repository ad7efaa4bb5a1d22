"""Probe registered as plain data plus an async function."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable, FrozenSet, Optional

from healthguard.domain.entities.health import ProbeResult

CheckFunction = Callable[[], Awaitable[ProbeResult]]


@dataclass(frozen=True)
class FunctionProbe:
    """Wrap an ``async def`` returning a :class:`ProbeResult` as a probe."""

    name: str
    func: CheckFunction
    tags: FrozenSet[str] = field(default_factory=frozenset)
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", frozenset(self.tags))

    async def check(self) -> ProbeResult:
        return await self.func()
