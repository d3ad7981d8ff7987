"""
Shared fixtures for SDK tests.

A real EventLoopThread hosts executions; time and the network are
replaced by MockClock and FakeTransport.
"""

import asyncio
import threading
from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from oneinch_sdk.aggregator import RequestAggregator
from oneinch_sdk.cache import ResponseCache
from oneinch_sdk.clock import MockClock
from oneinch_sdk.execution import ExecutionCore
from oneinch_sdk.loop import EventLoopThread


# ============================================================
# FAKES
# ============================================================

class CountingProducer:
    """Async producer that records how often it ran."""

    def __init__(
        self,
        result: Any = None,
        error: Optional[BaseException] = None,
        delay: float = 0.0,
    ) -> None:
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = 0
        self.started = threading.Event()
        self.finished = threading.Event()

    async def __call__(self) -> Any:
        self.calls += 1
        self.started.set()
        if self.delay:
            await asyncio.sleep(self.delay)
        self.finished.set()
        if self.error is not None:
            raise self.error
        return self.result


class FakeTransport:
    """
    In-memory stand-in for HttpTransport.

    Responses are registered per (method, path); a registered
    exception is raised instead of returned.
    """

    def __init__(self) -> None:
        self.responses: dict[tuple[str, str], Any] = {}
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def respond(self, method: str, path: str, response: Any) -> None:
        self.responses[(method, path)] = response

    def calls_to(self, path: str) -> list[dict[str, Any]]:
        return [call for call in self.calls if call["path"] == path]

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return self._reply("GET", path, params, None)

    async def post(self, path: str, body: Any = None, params: Optional[dict[str, Any]] = None) -> Any:
        return self._reply("POST", path, params, body)

    def _reply(self, method: str, path: str, params: Any, body: Any) -> Any:
        self.calls.append({"method": method, "path": path, "params": params, "body": body})
        response = self.responses.get((method, path), {})
        if isinstance(response, BaseException):
            raise response
        return response

    def get_stats(self) -> dict[str, int]:
        return {"requests": len(self.calls), "errors": 0}

    async def close(self) -> None:
        self.closed = True


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def runner():
    loop_thread = EventLoopThread(name="test-loop").start()
    yield loop_thread
    loop_thread.stop(timeout=2.0)


@pytest.fixture
def clock():
    return MockClock(datetime(2025, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def cache(clock):
    return ResponseCache(clock=clock)


@pytest.fixture
def core(runner, cache):
    return ExecutionCore(runner=runner, cache=cache)


@pytest.fixture
def aggregator(core):
    return RequestAggregator(core)


@pytest.fixture
def producer_factory():
    return CountingProducer


@pytest.fixture
def fake_transport():
    return FakeTransport()
