"""
Price Service - Spot prices (price/v1.1).

============================================================
REQUEST SHAPE
============================================================
- No addresses   -> GET  price/v1.1/{chain}            (whitelist)
- One address    -> GET  price/v1.1/{chain}/{address}
- Many addresses -> POST price/v1.1/{chain}  {tokens, currency}

POST keeps long address lists out of the URL.

============================================================
"""

import logging
from functools import partial
from typing import Any, Optional, Sequence

from oneinch_sdk.aggregator import AggregatedResult
from oneinch_sdk.cache import ResourceClass
from oneinch_sdk.classifier import ResponseDecodeError
from oneinch_sdk.execution import Call
from oneinch_sdk.operation import Operation, unordered
from oneinch_sdk.services.base import BaseService
from oneinch_sdk.validation import (
    validate_address,
    validate_addresses,
    validate_chain_id,
    validate_positive,
)


logger = logging.getLogger(__name__)

BASE_PATH = "price/v1.1"
DEFAULT_BATCH_SIZE = 100


def _lookup_price(prices: Any, address: str) -> Any:
    """Price of `address` from a `{address: price}` response."""
    if not isinstance(prices, dict):
        raise ResponseDecodeError(
            f"Expected a price map, got {type(prices).__name__}",
            body=repr(prices)[:200],
        )
    if address in prices:
        return prices[address]
    lowered = address.lower()
    for key, value in prices.items():
        if key.lower() == lowered:
            return value
    raise ResponseDecodeError(f"Price not found for address: {address}")


class PriceService(BaseService):
    """Token prices in native wei or a fiat currency."""

    name = "price"

    def get_whitelist_prices(self, chain_id: int, currency: Optional[str] = None) -> Call:
        return self._core.call(self._prices_operation("get_whitelist_prices", chain_id, [], currency))

    def get_prices(
        self,
        chain_id: int,
        addresses: Optional[Sequence[str]] = None,
        currency: Optional[str] = None,
    ) -> Call:
        """`{address: price}` for the given tokens (whitelist if none)."""
        return self._core.call(
            self._prices_operation("get_prices", chain_id, list(addresses or []), currency)
        )

    def get_price(self, chain_id: int, address: str, currency: Optional[str] = None) -> Call:
        """Price of a single token; a response without it is a decode failure."""
        op = self._prices_operation("get_price", chain_id, [address], currency)
        return self._core.call(Operation(
            producer=op.producer,
            name=op.name,
            cache_key=op.cache_key,
            resource_class=op.resource_class,
            validators=op.validators,
            decoder=partial(_lookup_price, address=address),
        ))

    def get_currencies(self, chain_id: int) -> Call:
        """Currency codes accepted by the `currency` parameter."""
        return self._get(
            "get_currencies",
            f"{BASE_PATH}/{chain_id}/currencies",
            cache_key=self._key("get_currencies", chain_id),
            resource_class=ResourceClass.TOKEN_METADATA,
            validators=(partial(validate_chain_id, chain_id),),
        )

    def get_prices_in_batches(
        self,
        chain_id: int,
        addresses: Sequence[str],
        currency: Optional[str] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        timeout: Optional[float] = None,
    ) -> AggregatedResult:
        """
        Fetch prices for many tokens as concurrent batches.

        Returns an AggregatedResult keyed by batch index; a failed
        batch does not affect the others.
        """
        validate_positive(batch_size, "batch_size")
        addresses = list(addresses or [])
        batches = [
            list(addresses[start:start + batch_size])
            for start in range(0, len(addresses), batch_size)
        ]
        logger.debug(f"[price] {len(addresses)} addresses in {len(batches)} batches")
        return self._aggregate(
            (
                (index, self._prices_operation("get_prices", chain_id, batch, currency))
                for index, batch in enumerate(batches)
            ),
            timeout=timeout,
        )

    def _prices_operation(
        self,
        method: str,
        chain_id: int,
        addresses: list[str],
        currency: Optional[str],
    ) -> Operation:
        validators = [partial(validate_chain_id, chain_id)]
        cache_key = self._key(method, chain_id, unordered(addresses), currency)
        options = dict(
            cache_key=cache_key,
            resource_class=ResourceClass.PRICE,
            validators=validators,
        )

        if not addresses:
            return self._get_operation(method, f"{BASE_PATH}/{chain_id}", {"currency": currency}, **options)

        if len(addresses) == 1:
            validators.append(partial(validate_address, addresses[0]))
            return self._get_operation(
                method,
                f"{BASE_PATH}/{chain_id}/{addresses[0]}",
                {"currency": currency},
                **options,
            )

        validators.append(partial(validate_addresses, addresses))
        body: dict[str, Any] = {"tokens": addresses}
        if currency:
            body["currency"] = currency
        return self._post_operation(method, f"{BASE_PATH}/{chain_id}", body, **options)
