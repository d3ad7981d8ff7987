"""
Reactive Single - Cold, single-value handle.

============================================================
SEMANTICS
============================================================
- Nothing happens until subscribe()
- Every subscribe() runs the work again
- Exactly one terminal event: success OR error
- Nothing is delivered after the subscription is disposed

to_future() and blocking_get() are the adapters the future and
blocking calling conventions are built on.

============================================================
"""

import concurrent.futures
import logging
import threading
from typing import Any, Callable, Generic, Optional, TypeVar

from oneinch_sdk.exceptions import RequestTimeoutError


logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[BaseException], None]


def _ignore_error(error: BaseException) -> None:
    pass


# ============================================================
# EMITTER & SUBSCRIPTION
# ============================================================

class SingleEmitter(Generic[T]):
    """Delivers at most one terminal event to a subscriber."""

    def __init__(self, on_success: SuccessCallback, on_error: ErrorCallback, name: str) -> None:
        self._on_success = on_success
        self._on_error = on_error
        self._name = name
        self._lock = threading.Lock()
        self._terminated = False
        self._disposed = False
        self._cancel: Optional[Callable[[], Any]] = None

    @property
    def is_disposed(self) -> bool:
        with self._lock:
            return self._disposed

    def set_cancellable(self, cancel: Callable[[], Any]) -> None:
        """Register the action that aborts the underlying work on dispose."""
        with self._lock:
            if not self._disposed:
                self._cancel = cancel
                return
        cancel()

    def on_success(self, value: T) -> None:
        if self._claim_terminal():
            self._deliver(self._on_success, value)

    def on_error(self, error: BaseException) -> None:
        if self._claim_terminal():
            self._deliver(self._on_error, error)

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            cancel = self._cancel
            self._cancel = None
        if cancel is not None and not self._terminated:
            cancel()

    def _claim_terminal(self) -> bool:
        with self._lock:
            if self._terminated or self._disposed:
                return False
            self._terminated = True
            self._cancel = None
            return True

    def _deliver(self, callback: Callable[[Any], None], payload: Any) -> None:
        try:
            callback(payload)
        except Exception as e:
            logger.error(f"[{self._name}] Subscriber callback raised: {e}", exc_info=True)


class Subscription:
    """Handle returned by subscribe(); dispose() detaches and cancels."""

    def __init__(self, emitter: SingleEmitter) -> None:
        self._emitter = emitter

    @property
    def disposed(self) -> bool:
        return self._emitter.is_disposed

    def dispose(self) -> None:
        self._emitter.dispose()


# ============================================================
# SINGLE
# ============================================================

class Single(Generic[T]):
    """
    Lazy single-value computation.

    Usage:
        single = Single.create(lambda emitter: emitter.on_success(42))
        single.subscribe(print, lambda e: print("failed", e))
        value = single.map(lambda v: v + 1).blocking_get(timeout=5)
    """

    def __init__(
        self,
        on_subscribe: Callable[[SingleEmitter], None],
        name: str = "single",
    ) -> None:
        self._on_subscribe = on_subscribe
        self.name = name

    @classmethod
    def create(
        cls,
        on_subscribe: Callable[[SingleEmitter], None],
        name: str = "single",
    ) -> "Single":
        return cls(on_subscribe, name)

    @classmethod
    def just(cls, value: Any, name: str = "single") -> "Single":
        return cls(lambda emitter: emitter.on_success(value), name)

    @classmethod
    def error(cls, error: BaseException, name: str = "single") -> "Single":
        return cls(lambda emitter: emitter.on_error(error), name)

    def subscribe(
        self,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """Start the work; exactly one of the callbacks fires later."""
        emitter = SingleEmitter(
            on_success or (lambda value: None),
            on_error or _ignore_error,
            self.name,
        )
        try:
            self._on_subscribe(emitter)
        except Exception as e:
            emitter.on_error(e)
        return Subscription(emitter)

    def map(self, fn: Callable[[T], R]) -> "Single[R]":
        """Transform the success value; a raising `fn` becomes the error."""

        def on_subscribe(emitter: SingleEmitter) -> None:
            def on_success(value: Any) -> None:
                try:
                    mapped = fn(value)
                except Exception as e:
                    emitter.on_error(e)
                    return
                emitter.on_success(mapped)

            upstream = self.subscribe(on_success, emitter.on_error)
            emitter.set_cancellable(upstream.dispose)

        return Single(on_subscribe, self.name)

    # ------------------------------------------------------------
    # Adapters
    # ------------------------------------------------------------

    def to_future(self) -> "concurrent.futures.Future[T]":
        """
        Subscribe now and expose the outcome as a Future.

        Cancelling the future before it settles disposes the
        subscription, so no value is ever delivered to it.
        """
        future: concurrent.futures.Future = concurrent.futures.Future()

        def on_success(value: Any) -> None:
            try:
                future.set_result(value)
            except concurrent.futures.InvalidStateError:
                pass

        def on_error(error: BaseException) -> None:
            try:
                future.set_exception(error)
            except concurrent.futures.InvalidStateError:
                pass

        subscription = self.subscribe(on_success, on_error)

        def on_done(done: concurrent.futures.Future) -> None:
            if done.cancelled():
                logger.debug(f"[{self.name}] Future cancelled, disposing subscription")
                subscription.dispose()

        future.add_done_callback(on_done)
        return future

    def blocking_get(self, timeout: Optional[float] = None) -> T:
        """
        Park the calling thread until the terminal event.

        Raises the delivered error, or RequestTimeoutError if nothing
        arrived within `timeout` seconds. On timeout the work is
        detached and cancelled.
        """
        done = threading.Event()
        outcome: dict[str, Any] = {}

        def on_success(value: Any) -> None:
            outcome["value"] = value
            done.set()

        def on_error(error: BaseException) -> None:
            outcome["error"] = error
            done.set()

        subscription = self.subscribe(on_success, on_error)

        if not done.wait(timeout):
            subscription.dispose()
            # The terminal event may have raced with the timeout.
            if not done.is_set():
                raise RequestTimeoutError.from_message(
                    f"Blocking call timed out after {timeout}s",
                    operation=self.name,
                )

        if "error" in outcome:
            raise outcome["error"]
        return outcome["value"]
