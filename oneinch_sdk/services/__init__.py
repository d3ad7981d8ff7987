"""
Endpoint services.

Each service method returns a Call (or, for fan-out helpers, an
AggregatedResult) built on the shared execution core.
"""

from oneinch_sdk.services.balance import BalanceService
from oneinch_sdk.services.base import BaseService
from oneinch_sdk.services.cross_chain import CrossChainOrdersService, CrossChainQuoterService
from oneinch_sdk.services.fusion import FusionOrdersService, FusionQuoterService
from oneinch_sdk.services.history import HistoryService
from oneinch_sdk.services.orderbook import OrderbookService
from oneinch_sdk.services.portfolio import PortfolioService
from oneinch_sdk.services.price import PriceService
from oneinch_sdk.services.swap import SwapService
from oneinch_sdk.services.token import TokenService
from oneinch_sdk.services.token_details import TokenDetailsService


__all__ = [
    "BaseService",
    "BalanceService",
    "CrossChainOrdersService",
    "CrossChainQuoterService",
    "FusionOrdersService",
    "FusionQuoterService",
    "HistoryService",
    "OrderbookService",
    "PortfolioService",
    "PriceService",
    "SwapService",
    "TokenService",
    "TokenDetailsService",
]
