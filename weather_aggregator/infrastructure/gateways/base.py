"""
Infrastructure Gateway - HTTP weather source base

Common plumbing for the provider adapters: one resilience executor (and so
one circuit breaker) per source, request issuing through
``httpx.AsyncClient`` and small payload coercion helpers.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

import httpx
import structlog

from weather_aggregator.domain.entities.errors import RemoteRejectedError
from weather_aggregator.domain.entities.resilience import BreakerState
from weather_aggregator.domain.gateways.weather_source import IWeatherSource
from weather_aggregator.infrastructure.resilience.executor import ResilienceExecutor

logger = structlog.get_logger(__name__)


def to_float(value: Any) -> Optional[float]:
    """Coerce a payload value to float, ``None`` when absent or malformed."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def from_unix(value: Any) -> Optional[datetime]:
    """Convert unix seconds to an aware UTC datetime; 0 and junk map to ``None``."""
    seconds = to_float(value)
    if not seconds:
        return None
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def from_iso(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string, assuming UTC when it carries no offset."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class HttpWeatherSource(IWeatherSource):
    """Base class for weather sources reached over HTTP."""

    def __init__(
        self,
        name: str,
        base_url: str,
        executor: ResilienceExecutor,
        request_timeout: float = 10.0,
    ):
        """
        Args:
            name: Source identifier used in logs and contributions
            base_url: Provider API root, without trailing slash
            executor: Retry and circuit breaker wrapper owned by this source
            request_timeout: Per-request HTTP timeout in seconds
        """
        self._name = name
        self.base_url = base_url.rstrip("/")
        self.executor = executor
        self.request_timeout = request_timeout

    @property
    def name(self) -> str:
        return self._name

    def breaker_state(self) -> Optional[BreakerState]:
        return self.executor.breaker.state

    async def _get_json(
        self,
        url: str,
        params: Mapping[str, Any],
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        GET ``url`` under the source's resilience policy and decode the body.

        Raises:
            SourceError: When the request fails or the body is not a JSON object
        """

        async def _attempt() -> httpx.Response:
            async with httpx.AsyncClient(timeout=self.request_timeout) as client:
                return await client.get(url, params=dict(params))

        response = await self.executor.execute(_attempt, timeout=timeout)

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning(
                "Weather source returned invalid JSON",
                source=self.name,
                url=url,
                status_code=response.status_code,
            )
            raise RemoteRejectedError(self.name, "response body is not valid JSON") from exc

        if not isinstance(payload, dict):
            raise RemoteRejectedError(
                self.name,
                "unexpected payload shape",
                details={"type": type(payload).__name__},
            )
        return payload
