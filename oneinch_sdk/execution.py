"""
Execution Core - One async pipeline, three calling conventions.

============================================================
PIPELINE
============================================================
validators -> cache lookup -> producer -> decoder -> cache store

Any failure along the way is normalized by the ErrorClassifier and
raised as one OneInchError subclass.

============================================================
FACADES
============================================================
reactive(op)  -> Single       cold; runs on subscribe
future(op)    -> Future       reactive(op).to_future()
blocking(op)  -> value        reactive(op).blocking_get()

All three observe the same value or the same ErrorEnvelope for
one execution, because they are adapters over the same Single.

============================================================
"""

import asyncio
import concurrent.futures
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from oneinch_sdk.cache import ResponseCache
from oneinch_sdk.classifier import ErrorClassifier, InvalidParameterError, ResponseDecodeError
from oneinch_sdk.exceptions import ClientClosedError, OneInchError
from oneinch_sdk.loop import EventLoopThread
from oneinch_sdk.operation import Operation
from oneinch_sdk.reactive import Single, SingleEmitter


logger = logging.getLogger(__name__)

T = TypeVar("T")


# ============================================================
# STATISTICS
# ============================================================

@dataclass
class ExecutionStats:
    """Counters across all executions of one core."""
    executions: int = 0
    successes: int = 0
    producer_calls: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    cancellations: int = 0
    failures: dict[str, int] = field(default_factory=dict)

    @property
    def total_failures(self) -> int:
        return sum(self.failures.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "executions": self.executions,
            "successes": self.successes,
            "producer_calls": self.producer_calls,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "cancellations": self.cancellations,
            "failures": dict(self.failures),
            "total_failures": self.total_failures,
        }


# ============================================================
# EXECUTION CORE
# ============================================================

class ExecutionCore:
    """
    Runs Operations and exposes them through three facades.

    Usage:
        core = ExecutionCore(EventLoopThread().start(), ResponseCache())
        op = Operation(producer=fetch_prices, name="price.get_prices")

        value = core.blocking(op, timeout=10)
        future = core.future(op)
        core.reactive(op).subscribe(on_success, on_error)
    """

    def __init__(
        self,
        runner: EventLoopThread,
        cache: Optional[ResponseCache] = None,
        classifier: Optional[ErrorClassifier] = None,
        blocking_timeout: Optional[float] = None,
    ) -> None:
        self._runner = runner
        self._cache = cache
        self._classifier = classifier or ErrorClassifier()
        self.blocking_timeout = blocking_timeout
        self._stats = ExecutionStats()
        self._stats_lock = threading.Lock()

    @property
    def runner(self) -> EventLoopThread:
        return self._runner

    @property
    def cache(self) -> Optional[ResponseCache]:
        return self._cache

    # ------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------

    async def execute(self, op: Operation[T]) -> T:
        """Run one execution of `op` on the current loop."""
        self._count("executions")
        started = time.monotonic()
        try:
            self._validate(op)

            if op.cacheable and self._cache is not None:
                entry = self._cache.get(op.cache_key)
                if entry is not None:
                    self._count("cache_hits")
                    self._count("successes")
                    logger.debug(f"[{op.name}] Cache hit {op.cache_key}")
                    return entry.value
                self._count("cache_misses")

            self._count("producer_calls")
            raw = await op.producer()
            value = self._decode(op, raw)

            if op.cacheable and self._cache is not None:
                self._cache.put_for(op.cache_key, value, op.resource_class)

            self._count("successes")
            logger.debug(f"[{op.name}] Completed in {(time.monotonic() - started) * 1000:.0f}ms")
            return value

        except asyncio.CancelledError:
            self._count("cancellations")
            logger.debug(f"[{op.name}] Cancelled")
            raise

        except Exception as e:
            error = self._classifier.to_exception(e, operation=op.name)
            with self._stats_lock:
                kind = error.envelope.kind.value
                self._stats.failures[kind] = self._stats.failures.get(kind, 0) + 1
            logger.warning(f"[{op.name}] Failed: {error.envelope}")
            if error is e:
                raise
            raise error from e

    @staticmethod
    def _validate(op: Operation) -> None:
        for validator in op.validators:
            try:
                validator()
            except (InvalidParameterError, OneInchError):
                raise
            except Exception as e:
                raise InvalidParameterError(str(e) or e.__class__.__name__) from e

    @staticmethod
    def _decode(op: Operation, raw: Any) -> Any:
        if op.decoder is None:
            return raw
        try:
            return op.decoder(raw)
        except (ResponseDecodeError, OneInchError):
            raise
        except Exception as e:
            raise ResponseDecodeError(
                f"Unexpected response shape: {e}",
                body=repr(raw)[:200],
                original_error=e,
            ) from e

    # ------------------------------------------------------------
    # Facades
    # ------------------------------------------------------------

    def reactive(self, op: Operation[T]) -> Single:
        """Cold handle; each subscribe runs the pipeline on the worker loop."""

        def on_subscribe(emitter: SingleEmitter) -> None:
            self._ensure_running(op)
            future = self._runner.submit(self.execute(op))
            emitter.set_cancellable(future.cancel)
            future.add_done_callback(lambda done: self._settle(done, emitter))

        return Single.create(on_subscribe, name=op.name)

    def future(self, op: Operation[T]) -> "concurrent.futures.Future[T]":
        """Start now; cancel() before completion suppresses the result."""
        self._ensure_running(op)
        return self.reactive(op).to_future()

    def blocking(self, op: Operation[T], timeout: Optional[float] = None) -> T:
        """Wait for the value; raises OneInchError on failure."""
        self._ensure_running(op)
        if self._runner.in_loop_thread():
            raise RuntimeError(
                f"[{op.name}] Blocking call from the worker loop would deadlock; "
                f"await the operation instead"
            )
        if timeout is None:
            timeout = self.blocking_timeout
        return self.reactive(op).blocking_get(timeout)

    async def run(self, op: Operation[T]) -> T:
        """Await the operation from any event loop."""
        return await asyncio.wrap_future(self.future(op))

    def call(self, op: Operation[T]) -> "Call[T]":
        return Call(self, op)

    def get_stats(self) -> ExecutionStats:
        with self._stats_lock:
            return ExecutionStats(
                executions=self._stats.executions,
                successes=self._stats.successes,
                producer_calls=self._stats.producer_calls,
                cache_hits=self._stats.cache_hits,
                cache_misses=self._stats.cache_misses,
                cancellations=self._stats.cancellations,
                failures=dict(self._stats.failures),
            )

    # ------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------

    def _ensure_running(self, op: Operation) -> None:
        if not self._runner.is_running:
            raise ClientClosedError(
                f"[{op.name}] Worker loop is not running; the client is closed or not started",
                operation=op.name,
            )

    @staticmethod
    def _settle(done: concurrent.futures.Future, emitter: SingleEmitter) -> None:
        # Dropped by the emitter if the subscriber disposed; otherwise the
        # loop was shut down under a live subscriber.
        if done.cancelled():
            emitter.on_error(concurrent.futures.CancelledError())
            return
        error = done.exception()
        if error is not None:
            emitter.on_error(error)
        else:
            emitter.on_success(done.result())

    def _count(self, counter: str) -> None:
        with self._stats_lock:
            setattr(self._stats, counter, getattr(self._stats, counter) + 1)


# ============================================================
# CALL
# ============================================================

class Call(Generic[T]):
    """
    One Operation bound to a core, ready to run in any convention.

    Usage:
        call = client.price.get_prices(1, [WETH])
        prices = call.get()                 # blocking
        future = call.future()              # future
        call.single().subscribe(print)      # reactive
        prices = await call.aget()          # from async code
    """

    def __init__(self, core: ExecutionCore, operation: Operation[T]) -> None:
        self._core = core
        self.operation = operation

    @property
    def name(self) -> str:
        return self.operation.name

    def get(self, timeout: Optional[float] = None) -> T:
        return self._core.blocking(self.operation, timeout)

    def future(self) -> "concurrent.futures.Future[T]":
        return self._core.future(self.operation)

    def single(self) -> Single:
        return self._core.reactive(self.operation)

    async def aget(self) -> T:
        return await self._core.run(self.operation)

    def __repr__(self) -> str:
        return f"Call({self.operation.name!r}, cache_key={self.operation.cache_key!r})"
