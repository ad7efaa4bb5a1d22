"""Probe contract consumed by the aggregator."""

from __future__ import annotations

from typing import FrozenSet, Optional, Protocol, runtime_checkable

from healthguard.domain.entities.health import ProbeResult


@runtime_checkable
class IProbe(Protocol):
    """A single independent health signal.

    ``check`` must return expected failures as ``DEGRADED``/``UNHEALTHY``
    results and react to task cancellation at its await points. Unexpected
    failures may be raised; the isolation wrapper converts them.
    ``timeout`` overrides the aggregator's per-probe budget when set.
    """

    name: str
    tags: FrozenSet[str]
    timeout: Optional[float]

    async def check(self) -> ProbeResult:
        ...


@runtime_checkable
class IClosableProbe(IProbe, Protocol):
    """A probe owning resources that must be released on deregistration."""

    async def aclose(self) -> None:
        ...
