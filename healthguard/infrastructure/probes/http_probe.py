"""
Infrastructure Probe - HTTP endpoint

Checks that an external HTTP dependency answers with a success status within
an acceptable response time.
"""

from __future__ import annotations

from time import perf_counter
from typing import FrozenSet, Iterable, Optional

import httpx
import structlog

from healthguard.domain.entities.health import FailureKind, ProbeFailure, ProbeResult

logger = structlog.get_logger(__name__)


class HttpProbe:
    """GET ``url`` and classify the response.

    The probe owns its ``httpx.AsyncClient`` for its whole registration
    lifetime unless a client is injected, in which case the caller keeps
    ownership and :meth:`aclose` leaves it open.
    """

    def __init__(
        self,
        url: str,
        *,
        name: str = "http_endpoint",
        tags: Iterable[str] = (),
        expected_status: Optional[int] = None,
        request_timeout: float = 30.0,
        timeout: Optional[float] = None,
        slow_response_threshold_ms: float = 5000,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize the HTTP probe.

        Args:
            url: Absolute http(s) URL to request.
            name: Entry name in the report.
            tags: Labels used to select the probe.
            expected_status: Required status code; any 2xx when omitted.
            request_timeout: Timeout in seconds of the owned ``httpx`` client.
            timeout: Optional budget override for this probe; the
                aggregator's ``probe_timeout`` applies when omitted.
            slow_response_threshold_ms: Successful responses slower than this
                are reported as degraded.
            client: Optional shared client; not closed by this probe.

        Raises:
            ValueError: If ``url`` is empty or not an absolute http(s) URL.
        """
        if not url or not url.strip():
            raise ValueError("URL cannot be empty")
        try:
            parsed = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as exc:
            raise ValueError(f"Invalid URL format: {url}") from exc
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise ValueError(f"Invalid URL format: {url}")

        self.name = name
        self.tags: FrozenSet[str] = frozenset(tags)
        self.url = str(parsed)
        self.expected_status = expected_status
        self.request_timeout = request_timeout
        self.timeout = timeout
        self.slow_response_threshold_ms = slow_response_threshold_ms
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=request_timeout)

    async def check(self) -> ProbeResult:
        start = perf_counter()
        try:
            response = await self._client.get(self.url)
        except httpx.TimeoutException as exc:
            message = f"HTTP endpoint {self.url} request timed out"
            logger.warning("health.http.timeout", probe=self.name, url=self.url)
            return ProbeResult.degraded(
                message,
                {"url": self.url},
                ProbeFailure.from_exception(FailureKind.DOMAIN, exc),
            )
        except httpx.RequestError as exc:
            message = f"HTTP endpoint {self.url} is unreachable"
            logger.error(
                "health.http.unreachable", probe=self.name, url=self.url, error=str(exc)
            )
            return ProbeResult.unhealthy(
                message,
                {"url": self.url},
                ProbeFailure.from_exception(FailureKind.DOMAIN, exc),
            )

        response_time_ms = round((perf_counter() - start) * 1000, 1)
        is_success = self._is_success(response.status_code)
        data = {
            "url": self.url,
            "status_code": response.status_code,
            "response_time_ms": response_time_ms,
            "is_success_status_code": is_success,
        }

        if not is_success:
            message = (
                f"HTTP endpoint {self.url} returned status code {response.status_code}"
            )
            logger.warning("health.http.failure", probe=self.name, message=message)
            return ProbeResult.unhealthy(
                message,
                data,
                ProbeFailure(kind=FailureKind.DOMAIN, message=message),
            )

        if response_time_ms > self.slow_response_threshold_ms:
            return ProbeResult.degraded(
                f"HTTP endpoint {self.url} responded slowly in {response_time_ms:.0f}ms",
                data,
            )

        return ProbeResult.healthy(
            f"HTTP endpoint {self.url} responded successfully in {response_time_ms:.0f}ms",
            data,
        )

    def _is_success(self, status_code: int) -> bool:
        if self.expected_status is not None:
            return status_code == self.expected_status
        return 200 <= status_code < 300

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
