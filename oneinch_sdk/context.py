"""
Client Context - Explicit owner of all shared client state.

============================================================
OWNS
============================================================
- The worker loop thread every execution runs on
- The HTTP transport (and its aiohttp session)
- The response cache and its optional sweeper task
- The classifier, execution core and aggregator built on them

Nothing here is process-global: two contexts never share a cache,
a session or a loop.

============================================================
"""

import concurrent.futures
import logging
from typing import Optional

from oneinch_sdk.aggregator import RequestAggregator
from oneinch_sdk.cache import CacheStore, ResponseCache
from oneinch_sdk.classifier import ErrorClassifier
from oneinch_sdk.clock import ClockProtocol
from oneinch_sdk.config import ClientConfig
from oneinch_sdk.exceptions import ConfigurationError
from oneinch_sdk.execution import ExecutionCore
from oneinch_sdk.http import HttpTransport
from oneinch_sdk.loop import EventLoopThread


logger = logging.getLogger(__name__)


class ClientContext:
    """
    Wires the execution stack together and manages its lifecycle.

    Usage:
        with ClientContext(ClientConfig.from_env()) as context:
            value = context.core.blocking(op)
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[HttpTransport] = None,
        cache_store: Optional[CacheStore] = None,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        errors = config.validate()
        if errors:
            raise ConfigurationError(
                f"Invalid client configuration: {'; '.join(errors)}",
                errors=errors,
            )

        self._config = config
        self._runner = EventLoopThread()
        self._transport = transport or HttpTransport(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeouts.request_seconds,
            connect_timeout=config.timeouts.connect_seconds,
        )
        self._cache = ResponseCache(
            store=cache_store,
            policy=config.cache.to_policy(),
            clock=clock,
            enabled=config.cache.enabled,
        )
        self._classifier = ErrorClassifier()
        self._core = ExecutionCore(
            runner=self._runner,
            cache=self._cache,
            classifier=self._classifier,
            blocking_timeout=config.timeouts.blocking_seconds,
        )
        self._aggregator = RequestAggregator(
            core=self._core,
            timeout=config.timeouts.aggregate_seconds,
            classifier=self._classifier,
        )
        self._sweeper: Optional[concurrent.futures.Future] = None
        self._closed = False

    # ------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    @property
    def classifier(self) -> ErrorClassifier:
        return self._classifier

    @property
    def core(self) -> ExecutionCore:
        return self._core

    @property
    def aggregator(self) -> RequestAggregator:
        return self._aggregator

    @property
    def is_running(self) -> bool:
        return self._runner.is_running

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------

    def start(self) -> "ClientContext":
        """Start the worker loop and the cache sweeper. Idempotent."""
        if self._closed:
            raise RuntimeError("ClientContext is closed")
        if self._runner.is_running:
            return self

        self._runner.start()
        interval = self._config.cache.sweep_interval_seconds
        if interval and self._cache.enabled:
            self._sweeper = self._runner.submit(self._cache.run_sweeper(interval))
        logger.info(f"[context] Started (base_url={self._config.base_url})")
        return self

    def close(self) -> None:
        """Cancel the sweeper, close the transport and stop the loop."""
        if self._closed:
            return
        self._closed = True
        if not self._runner.is_running:
            return

        timeout = self._config.timeouts.shutdown_seconds
        if self._sweeper is not None:
            self._sweeper.cancel()
            self._sweeper = None

        try:
            self._runner.submit(self._transport.close()).result(timeout)
        except concurrent.futures.TimeoutError:
            logger.warning(f"[context] Transport did not close within {timeout}s")
        except Exception as e:
            logger.warning(f"[context] Transport close failed: {e}")

        self._runner.stop(timeout)
        logger.info("[context] Closed")

    def __enter__(self) -> "ClientContext":
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
