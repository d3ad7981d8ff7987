"""
Event Loop Thread - The internal worker hosting every execution.

============================================================
RESPONSIBILITY
============================================================
Run one private asyncio loop on a daemon thread so that
synchronous callers (blocking facade, future facade) can submit
coroutines without owning a loop themselves.

- submit() is thread-safe and returns a concurrent.futures.Future
- stop() cancels pending tasks, then stops and closes the loop

============================================================
"""

import asyncio
import concurrent.futures
import logging
import threading
from typing import Any, Coroutine, Optional, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


class EventLoopThread:
    """
    Private asyncio loop on a background thread.

    Usage:
        runner = EventLoopThread()
        runner.start()
        future = runner.submit(fetch())
        value = future.result()
        runner.stop()
    """

    def __init__(self, name: str = "oneinch-loop") -> None:
        self._name = name
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._started = threading.Event()
        self._lock = threading.Lock()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            raise RuntimeError(f"[{self._name}] Event loop thread is not running")
        return self._loop

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "EventLoopThread":
        """Start the loop thread. Idempotent."""
        with self._lock:
            if self.is_running:
                return self
            self._started.clear()
            self._loop = asyncio.new_event_loop()
            self._thread = threading.Thread(
                target=self._run,
                name=self._name,
                daemon=True,
            )
            self._thread.start()
        self._started.wait()
        logger.info(f"[{self._name}] Event loop thread started")
        return self

    def _run(self) -> None:
        loop = self._loop
        asyncio.set_event_loop(loop)
        loop.call_soon(self._started.set)
        try:
            loop.run_forever()
        finally:
            try:
                loop.run_until_complete(loop.shutdown_asyncgens())
            finally:
                loop.close()

    def in_loop_thread(self) -> bool:
        return self._thread is not None and threading.current_thread() is self._thread

    def submit(self, coro: Coroutine[Any, Any, T]) -> "concurrent.futures.Future[T]":
        """Schedule a coroutine on the loop from any thread."""
        if not self.is_running:
            coro.close()
            raise RuntimeError(f"[{self._name}] Event loop thread is not running")
        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Cancel pending tasks, stop the loop and join the thread."""
        with self._lock:
            if not self.is_running:
                return
            loop = self._loop
            thread = self._thread

        if self.in_loop_thread():
            raise RuntimeError(f"[{self._name}] Cannot stop the loop from its own thread")

        try:
            asyncio.run_coroutine_threadsafe(self._cancel_pending(), loop).result(timeout)
        except concurrent.futures.TimeoutError:
            logger.warning(f"[{self._name}] Pending tasks did not finish within {timeout}s")

        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout)
        if thread.is_alive():
            logger.warning(f"[{self._name}] Loop thread did not exit within {timeout}s")
        else:
            logger.info(f"[{self._name}] Event loop thread stopped")

        with self._lock:
            self._thread = None
            self._loop = None

    @staticmethod
    async def _cancel_pending() -> None:
        current = asyncio.current_task()
        pending = [task for task in asyncio.all_tasks() if task is not current]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def __enter__(self) -> "EventLoopThread":
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
