"""
OneInch Client - Entry point bundling all endpoint services.
"""

import dataclasses
import logging
from typing import Any, Optional

from oneinch_sdk.aggregator import AggregatedResult, OperationInput
from oneinch_sdk.cache import CacheStore
from oneinch_sdk.clock import ClockProtocol
from oneinch_sdk.config import ClientConfig
from oneinch_sdk.context import ClientContext
from oneinch_sdk.http import HttpTransport
from oneinch_sdk.services import (
    BalanceService,
    CrossChainOrdersService,
    CrossChainQuoterService,
    FusionOrdersService,
    FusionQuoterService,
    HistoryService,
    OrderbookService,
    PortfolioService,
    PriceService,
    SwapService,
    TokenDetailsService,
    TokenService,
)


logger = logging.getLogger(__name__)


class OneInchClient:
    """
    1inch API client.

    Usage:
        with OneInchClient(api_key="...") as client:
            quote = client.swap.get_quote(1, USDC, WETH, "1000000").get()
            future = client.price.get_prices(1, [USDC, WETH]).future()
            client.token.search_tokens(1, "usdc").single().subscribe(print)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: Optional[ClientConfig] = None,
        transport: Optional[HttpTransport] = None,
        cache_store: Optional[CacheStore] = None,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        if config is None:
            config = ClientConfig.from_env(api_key=api_key)
        elif api_key:
            config = dataclasses.replace(config, api_key=api_key)

        self._context = ClientContext(
            config,
            transport=transport,
            cache_store=cache_store,
            clock=clock,
        ).start()

        core = self._context.core
        transport = self._context.transport
        aggregator = self._context.aggregator

        self.swap = SwapService(core, transport, aggregator)
        self.token = TokenService(core, transport, aggregator)
        self.token_details = TokenDetailsService(core, transport, aggregator)
        self.price = PriceService(core, transport, aggregator)
        self.balance = BalanceService(core, transport, aggregator)
        self.portfolio = PortfolioService(core, transport, aggregator)
        self.history = HistoryService(core, transport, aggregator)
        self.orderbook = OrderbookService(core, transport, aggregator)
        self.fusion_orders = FusionOrdersService(core, transport, aggregator)
        self.fusion_quoter = FusionQuoterService(core, transport, aggregator)
        self.cross_chain_orders = CrossChainOrdersService(core, transport, aggregator)
        self.cross_chain_quoter = CrossChainQuoterService(core, transport, aggregator)

    @property
    def context(self) -> ClientContext:
        return self._context

    def aggregate(
        self,
        operations: OperationInput,
        timeout: Optional[float] = None,
    ) -> AggregatedResult:
        """
        Run keyed operations concurrently.

        Example:
            result = client.aggregate({
                "eth": client.price.get_prices(1, [WETH]).operation,
                "bsc": client.price.get_prices(56, [WBNB]).operation,
            })
        """
        return self._context.aggregator.aggregate(operations, timeout=timeout)

    def clear_cache(self) -> None:
        self._context.cache.clear()

    def get_stats(self) -> dict[str, Any]:
        return {
            "execution": self._context.core.get_stats().to_dict(),
            "cache": self._context.cache.get_stats().to_dict(),
            "transport": self._context.transport.get_stats(),
        }

    def close(self) -> None:
        self._context.close()

    def __enter__(self) -> "OneInchClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"OneInchClient(base_url={self._context.config.base_url!r})"
