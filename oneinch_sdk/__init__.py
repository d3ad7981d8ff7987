"""
OneInch SDK - Client for the 1inch DeFi aggregation API.

Every endpoint is written once as an async pipeline and can be used
three ways: blocking, as a future, or as a reactive Single. All three
share one error taxonomy, one response cache and one aggregation
discipline for multi-address queries.

Quick Start:
    from oneinch_sdk import OneInchClient, OneInchError

    USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
    WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"

    with OneInchClient(api_key="...") as client:
        # Blocking
        quote = client.swap.get_quote(1, USDC, WETH, "1000000").get()

        # Future
        future = client.price.get_prices(1, [USDC, WETH]).future()
        prices = future.result(timeout=10)

        # Reactive
        client.token.search_tokens(1, "usdc").single().subscribe(
            on_success=print,
            on_error=lambda e: print("failed:", e),
        )

        # Fan-out with partial failure
        result = client.balance.get_balances_for_wallets(1, [wallet_a, wallet_b])
        if not result.all_succeeded:
            print(result.errors())

Error Handling:
    try:
        client.price.get_price(1, WETH).get()
    except OneInchError as e:
        print(e.envelope.kind, e.http_status, e.request_id, e.metadata)

Configuration (environment or .env):
    ONEINCH_API_KEY                         API key (required)
    ONEINCH_BASE_URL                        API root
    ONEINCH_CACHE_ENABLED                   true/false
    ONEINCH_CACHE_PRICE_TTL_SECONDS         default 30
    ONEINCH_CACHE_TOKEN_METADATA_TTL_SECONDS default 3600
    ONEINCH_CACHE_PORTFOLIO_TTL_SECONDS     default 300
    ONEINCH_REQUEST_TIMEOUT_SECONDS         default 30
"""

from oneinch_sdk.aggregator import AggregatedResult, Outcome, RequestAggregator
from oneinch_sdk.cache import (
    CacheEntry,
    CacheStats,
    CacheStore,
    InMemoryCacheStore,
    ResourceClass,
    ResponseCache,
    TTLPolicy,
)
from oneinch_sdk.classifier import (
    ErrorClassifier,
    HttpStatusError,
    InvalidParameterError,
    ResponseDecodeError,
)
from oneinch_sdk.client import OneInchClient
from oneinch_sdk.clock import ClockProtocol, MockClock, SystemClock
from oneinch_sdk.config import CacheConfig, ClientConfig, TimeoutConfig
from oneinch_sdk.context import ClientContext
from oneinch_sdk.exceptions import (
    ApiError,
    ClientClosedError,
    ConfigurationError,
    ErrorEnvelope,
    ErrorKind,
    MetaEntry,
    OneInchError,
    RequestTimeoutError,
    SerializationError,
    TransportError,
    UnknownError,
    ValidationError,
)
from oneinch_sdk.execution import Call, ExecutionCore, ExecutionStats
from oneinch_sdk.http import HttpTransport
from oneinch_sdk.loop import EventLoopThread
from oneinch_sdk.operation import Operation, build_cache_key
from oneinch_sdk.reactive import Single, SingleEmitter, Subscription


__version__ = "1.0.0"

__all__ = [
    # Client
    "OneInchClient",
    "ClientContext",
    "ClientConfig",
    "CacheConfig",
    "TimeoutConfig",
    # Execution
    "Operation",
    "build_cache_key",
    "ExecutionCore",
    "ExecutionStats",
    "Call",
    "EventLoopThread",
    "Single",
    "SingleEmitter",
    "Subscription",
    # Aggregation
    "RequestAggregator",
    "AggregatedResult",
    "Outcome",
    # Cache
    "ResponseCache",
    "CacheEntry",
    "CacheStats",
    "CacheStore",
    "InMemoryCacheStore",
    "ResourceClass",
    "TTLPolicy",
    # Errors
    "ErrorClassifier",
    "ErrorEnvelope",
    "ErrorKind",
    "MetaEntry",
    "OneInchError",
    "ApiError",
    "TransportError",
    "RequestTimeoutError",
    "SerializationError",
    "ValidationError",
    "UnknownError",
    "ClientClosedError",
    "ConfigurationError",
    "HttpStatusError",
    "ResponseDecodeError",
    "InvalidParameterError",
    # Transport / time
    "HttpTransport",
    "ClockProtocol",
    "SystemClock",
    "MockClock",
]
