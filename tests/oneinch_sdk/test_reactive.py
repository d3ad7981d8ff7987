"""
Reactive Primitive and Event Loop Thread Tests.
"""

import asyncio
import concurrent.futures

import pytest

from oneinch_sdk.exceptions import RequestTimeoutError
from oneinch_sdk.loop import EventLoopThread
from oneinch_sdk.reactive import Single


# ============================================================
# SINGLE
# ============================================================

class TestSingle:
    """Tests for Single."""

    def test_only_first_terminal_event_delivered(self):
        """Test later events after the first are dropped."""
        received = []

        def emit_twice(emitter):
            emitter.on_success(1)
            emitter.on_success(2)
            emitter.on_error(ValueError("late"))

        Single.create(emit_twice).subscribe(received.append, received.append)

        assert received == [1]

    def test_subscribe_error_becomes_error_event(self):
        """Test a raising on_subscribe is delivered as an error."""
        errors = []

        def explode(emitter):
            raise ValueError("boom")

        Single.create(explode).subscribe(on_error=errors.append)

        assert isinstance(errors[0], ValueError)

    def test_dispose_runs_cancel(self):
        """Test disposing before the terminal event runs the cancel action."""
        cancelled = []
        single = Single.create(lambda emitter: emitter.set_cancellable(lambda: cancelled.append(True)))

        subscription = single.subscribe()
        subscription.dispose()
        subscription.dispose()

        assert cancelled == [True]
        assert subscription.disposed

    def test_map_error(self):
        """Test a raising map function becomes the error."""
        single = Single.just(0).map(lambda v: 1 / v)

        with pytest.raises(ZeroDivisionError):
            single.blocking_get(timeout=1)

    def test_error_single(self):
        """Test Single.error delivers the given error."""
        with pytest.raises(KeyError):
            Single.error(KeyError("x")).blocking_get(timeout=1)

    def test_blocking_get_timeout(self):
        """Test a never-terminating single times out."""
        cancelled = []
        single = Single.create(
            lambda emitter: emitter.set_cancellable(lambda: cancelled.append(True)),
            name="test.never",
        )

        with pytest.raises(RequestTimeoutError) as info:
            single.blocking_get(timeout=0.05)

        assert info.value.envelope.operation == "test.never"
        assert cancelled == [True]

    def test_to_future_cancel_disposes(self):
        """Test cancelling the adapted future disposes the subscription."""
        cancelled = []
        single = Single.create(lambda emitter: emitter.set_cancellable(lambda: cancelled.append(True)))

        future = single.to_future()
        assert future.cancel()

        assert cancelled == [True]
        with pytest.raises(concurrent.futures.CancelledError):
            future.result(timeout=1)


# ============================================================
# EVENT LOOP THREAD
# ============================================================

class TestEventLoopThread:
    """Tests for EventLoopThread."""

    def test_submit_runs_on_loop_thread(self):
        """Test coroutines run on the worker thread."""
        with EventLoopThread(name="test-submit") as runner:
            async def where():
                return runner.in_loop_thread()

            assert runner.submit(where()).result(timeout=5) is True
            assert runner.in_loop_thread() is False

    def test_submit_when_stopped(self):
        """Test submitting to a stopped loop raises."""
        runner = EventLoopThread(name="test-stopped")

        async def noop():
            return None

        with pytest.raises(RuntimeError):
            runner.submit(noop())

    def test_stop_cancels_pending(self):
        """Test stop cancels tasks still running."""
        runner = EventLoopThread(name="test-stop").start()
        future = runner.submit(asyncio.sleep(10))

        runner.stop(timeout=2)

        assert future.cancelled()
        assert not runner.is_running

    def test_start_idempotent(self):
        """Test starting twice keeps one loop."""
        runner = EventLoopThread(name="test-start").start()
        loop = runner.loop

        assert runner.start().loop is loop
        runner.stop()
