from __future__ import annotations

from typing import Any, Dict, List, Tuple

import httpx
import pytest

from weather_aggregator.domain.entities.resilience import BreakerSettings, RetryPolicy
from weather_aggregator.infrastructure.resilience.circuit_breaker import CircuitBreaker
from weather_aggregator.infrastructure.resilience.executor import ResilienceExecutor


class StubHttp:
    """
    Replacement for ``httpx.AsyncClient`` that serves canned responses.

    Routes are matched by path suffix; each route replays its responses in
    order and repeats the last one. Every request is recorded.
    """

    def __init__(self) -> None:
        self.routes: Dict[str, List[Any]] = {}
        self.requests: List[Tuple[str, Dict[str, Any]]] = []

    def add(self, path: str, *outcomes: Any) -> None:
        self.routes[path] = list(outcomes)

    def params_for(self, path: str) -> List[Dict[str, Any]]:
        return [params for url, params in self.requests if url.endswith(path)]

    def client(self, timeout: Any = None) -> "_StubAsyncClient":
        return _StubAsyncClient(self)

    def respond(self, url: str, params: Dict[str, Any]) -> httpx.Response:
        self.requests.append((url, params))
        for path, outcomes in self.routes.items():
            if url.endswith(path):
                outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
                if isinstance(outcome, BaseException):
                    raise outcome
                if isinstance(outcome, httpx.Response):
                    return outcome
                return httpx.Response(200, json=outcome)
        return httpx.Response(404, json={"error": "no route"})


class _StubAsyncClient:
    def __init__(self, stub: StubHttp) -> None:
        self._stub = stub

    async def __aenter__(self) -> "_StubAsyncClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        return None

    async def get(self, url: str, params: Dict[str, Any] = None) -> httpx.Response:
        return self._stub.respond(url, dict(params or {}))


@pytest.fixture()
def http_stub(monkeypatch) -> StubHttp:
    stub = StubHttp()
    monkeypatch.setattr(httpx, "AsyncClient", stub.client)
    return stub


@pytest.fixture()
def make_executor(fake_clock):
    def _make(name: str, max_retries: int = 1) -> ResilienceExecutor:
        breaker = CircuitBreaker(name, BreakerSettings(failure_threshold=5), fake_clock)
        return ResilienceExecutor(
            name, RetryPolicy(max_retries=max_retries, initial_delay=0.1), breaker, fake_clock
        )

    return _make
