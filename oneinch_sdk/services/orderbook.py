"""
Orderbook Service - Limit order protocol reads (orderbook/v4.0).

Order state changes continuously, so nothing here is cached.
"""

from functools import partial
from typing import Any, Optional, Sequence

from oneinch_sdk.execution import Call
from oneinch_sdk.services.base import BaseService
from oneinch_sdk.validation import (
    validate_address,
    validate_chain_id,
    validate_non_empty,
    validate_positive,
)


class OrderbookService(BaseService):
    """Limit orders and their events."""

    name = "orderbook"

    @staticmethod
    def _path(chain_id: int, endpoint: str) -> str:
        return f"orderbook/v4.0/{chain_id}/{endpoint}"

    @staticmethod
    def _paging_validators(chain_id: int, page: Optional[int], limit: Optional[int]) -> list:
        validators = [partial(validate_chain_id, chain_id)]
        if page is not None:
            validators.append(partial(validate_positive, page, "page"))
        if limit is not None:
            validators.append(partial(validate_positive, limit, "limit"))
        return validators

    @staticmethod
    def _filters(
        statuses: Optional[Sequence[int]],
        taker_asset: Optional[str],
        maker_asset: Optional[str],
    ) -> dict[str, Any]:
        return {
            "statuses": ",".join(str(s) for s in statuses) if statuses else None,
            "takerAsset": taker_asset,
            "makerAsset": maker_asset,
        }

    def get_orders_by_address(
        self,
        chain_id: int,
        address: str,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        statuses: Optional[Sequence[int]] = None,
        sort_by: Optional[str] = None,
        taker_asset: Optional[str] = None,
        maker_asset: Optional[str] = None,
    ) -> Call:
        """Orders created by `address`."""
        validators = self._paging_validators(chain_id, page, limit)
        validators.append(partial(validate_address, address))
        params = {"page": page, "limit": limit, "sortBy": sort_by}
        params.update(self._filters(statuses, taker_asset, maker_asset))
        return self._get(
            "get_orders_by_address",
            self._path(chain_id, f"address/{address}"),
            params,
            validators=validators,
        )

    def get_all_orders(
        self,
        chain_id: int,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        statuses: Optional[Sequence[int]] = None,
        sort_by: Optional[str] = None,
        taker_asset: Optional[str] = None,
        maker_asset: Optional[str] = None,
    ) -> Call:
        params = {"page": page, "limit": limit, "sortBy": sort_by}
        params.update(self._filters(statuses, taker_asset, maker_asset))
        return self._get(
            "get_all_orders",
            self._path(chain_id, "all"),
            params,
            validators=self._paging_validators(chain_id, page, limit),
        )

    def get_orders_count(
        self,
        chain_id: int,
        statuses: Optional[Sequence[int]] = None,
        taker_asset: Optional[str] = None,
        maker_asset: Optional[str] = None,
    ) -> Call:
        return self._get(
            "get_orders_count",
            self._path(chain_id, "count"),
            self._filters(statuses, taker_asset, maker_asset),
            validators=(partial(validate_chain_id, chain_id),),
        )

    def get_order(self, chain_id: int, order_hash: str) -> Call:
        return self._get(
            "get_order",
            self._path(chain_id, f"order/{order_hash}"),
            validators=(
                partial(validate_chain_id, chain_id),
                partial(validate_non_empty, order_hash, "order_hash"),
            ),
        )

    def get_events(self, chain_id: int, limit: Optional[int] = None) -> Call:
        """Latest fill and cancel events across all orders."""
        return self._get(
            "get_events",
            self._path(chain_id, "events"),
            {"limit": limit},
            validators=self._paging_validators(chain_id, None, limit),
        )

    def get_order_events(self, chain_id: int, order_hash: str) -> Call:
        return self._get(
            "get_order_events",
            self._path(chain_id, f"events/{order_hash}"),
            validators=(
                partial(validate_chain_id, chain_id),
                partial(validate_non_empty, order_hash, "order_hash"),
            ),
        )

    def get_unique_active_pairs(
        self,
        chain_id: int,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Call:
        return self._get(
            "get_unique_active_pairs",
            self._path(chain_id, "unique-active-pairs"),
            {"page": page, "limit": limit},
            validators=self._paging_validators(chain_id, page, limit),
        )

    def has_active_orders_with_permit(self, chain_id: int, wallet_address: str, token: str) -> Call:
        return self._get(
            "has_active_orders_with_permit",
            self._path(chain_id, f"has-active-orders-with-permit/{wallet_address}/{token}"),
            validators=(
                partial(validate_chain_id, chain_id),
                partial(validate_address, wallet_address, "wallet_address"),
                partial(validate_address, token, "token"),
            ),
        )
