"""
Cross-Chain Services - Fusion+ order and quote reads.

Orders live under cross-chain/v1.0 and quotes under quoter/v1.0.
Only the supported chain list is cached.
"""

from functools import partial
from typing import Any, Optional, Sequence

from oneinch_sdk.cache import ResourceClass
from oneinch_sdk.execution import Call
from oneinch_sdk.services.base import BaseService
from oneinch_sdk.validation import (
    validate_address,
    validate_amount,
    validate_chain_id,
    validate_non_empty,
    validate_positive,
)


BASE_PATH = "cross-chain/v1.0"


def _chain_validators(src_chain: Optional[int], dst_chain: Optional[int]) -> list:
    validators = []
    if src_chain is not None:
        validators.append(partial(validate_chain_id, src_chain, "src_chain"))
    if dst_chain is not None:
        validators.append(partial(validate_chain_id, dst_chain, "dst_chain"))
    return validators


def _paging_validators(page: Optional[int], limit: Optional[int]) -> list:
    validators = []
    if page is not None:
        validators.append(partial(validate_positive, page, "page"))
    if limit is not None:
        validators.append(partial(validate_positive, limit, "limit"))
    return validators


class CrossChainOrdersService(BaseService):
    """Fusion+ orders, their escrow events and supported chains."""

    name = "cross_chain_orders"

    def get_active_orders(
        self,
        src_chain: Optional[int] = None,
        dst_chain: Optional[int] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort_by: Optional[str] = None,
    ) -> Call:
        """Cross-chain orders awaiting resolution, optionally for one route."""
        return self._get(
            "get_active_orders",
            f"{BASE_PATH}/order/active",
            {"srcChain": src_chain, "dstChain": dst_chain, "page": page, "limit": limit, "sortBy": sort_by},
            validators=_chain_validators(src_chain, dst_chain) + _paging_validators(page, limit),
        )

    def get_order(
        self,
        order_hash: str,
        src_chain: Optional[int] = None,
        dst_chain: Optional[int] = None,
    ) -> Call:
        validators = _chain_validators(src_chain, dst_chain)
        validators.append(partial(validate_non_empty, order_hash, "order_hash"))
        return self._get(
            "get_order",
            f"{BASE_PATH}/order/{order_hash}",
            {"srcChain": src_chain, "dstChain": dst_chain},
            validators=validators,
        )

    def get_orders_by_hashes(
        self,
        order_hashes: Sequence[str],
        src_chain: Optional[int] = None,
        dst_chain: Optional[int] = None,
    ) -> Call:
        validators = _chain_validators(src_chain, dst_chain)
        validators.append(partial(validate_non_empty, order_hashes, "order_hashes"))
        joined = ",".join(str(h) for h in order_hashes) if order_hashes else None
        return self._get(
            "get_orders_by_hashes",
            f"{BASE_PATH}/order/batch",
            {"srcChain": src_chain, "dstChain": dst_chain, "orderHashes": joined},
            validators=validators,
        )

    def get_orders_by_maker(
        self,
        address: str,
        src_chain: Optional[int] = None,
        dst_chain: Optional[int] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Call:
        validators = _chain_validators(src_chain, dst_chain) + _paging_validators(page, limit)
        validators.append(partial(validate_address, address))
        return self._get(
            "get_orders_by_maker",
            f"{BASE_PATH}/order/maker/{address}",
            {"srcChain": src_chain, "dstChain": dst_chain, "page": page, "limit": limit},
            validators=validators,
        )

    def get_escrow_events(
        self,
        order_hash: str,
        src_chain: Optional[int] = None,
        dst_chain: Optional[int] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Call:
        validators = _chain_validators(src_chain, dst_chain) + _paging_validators(page, limit)
        validators.append(partial(validate_non_empty, order_hash, "order_hash"))
        return self._get(
            "get_escrow_events",
            f"{BASE_PATH}/order/{order_hash}/events",
            {"srcChain": src_chain, "dstChain": dst_chain, "page": page, "limit": limit},
            validators=validators,
        )

    def get_public_actions(
        self,
        order_hash: str,
        src_chain: Optional[int] = None,
        dst_chain: Optional[int] = None,
    ) -> Call:
        validators = _chain_validators(src_chain, dst_chain)
        validators.append(partial(validate_non_empty, order_hash, "order_hash"))
        return self._get(
            "get_public_actions",
            f"{BASE_PATH}/order/{order_hash}/public-actions",
            {"srcChain": src_chain, "dstChain": dst_chain},
            validators=validators,
        )

    def get_supported_chains(self) -> Call:
        return self._get(
            "get_supported_chains",
            f"{BASE_PATH}/chains",
            cache_key=self._key("get_supported_chains"),
            resource_class=ResourceClass.TOKEN_METADATA,
        )


class CrossChainQuoterService(BaseService):
    """Fusion+ quotes between two chains."""

    name = "cross_chain_quoter"

    def get_quote(
        self,
        src_chain: int,
        dst_chain: int,
        src_token_address: str,
        dst_token_address: str,
        amount: str,
        wallet_address: str,
        enable_estimate: bool = False,
        fee: Optional[int] = None,
        is_permit2: Optional[str] = None,
        permit: Optional[str] = None,
        custom_preset: Optional[dict[str, Any]] = None,
    ) -> Call:
        """Quote for moving `amount` of a token from `src_chain` to `dst_chain`."""
        params: dict[str, Any] = {
            "srcChain": src_chain,
            "dstChain": dst_chain,
            "srcTokenAddress": src_token_address,
            "dstTokenAddress": dst_token_address,
            "amount": amount,
            "walletAddress": wallet_address,
            "enableEstimate": enable_estimate,
            "fee": fee,
            "isPermit2": is_permit2,
            "permit": permit,
        }
        path = "quoter/v1.0/quote/receive"
        validators = (
            partial(validate_chain_id, src_chain, "src_chain"),
            partial(validate_chain_id, dst_chain, "dst_chain"),
            partial(validate_address, src_token_address, "src_token_address"),
            partial(validate_address, dst_token_address, "dst_token_address"),
            partial(validate_amount, amount),
            partial(validate_address, wallet_address, "wallet_address"),
        )
        if custom_preset is not None:
            return self._post("get_quote", path, custom_preset, params, validators=validators)
        return self._get("get_quote", path, params, validators=validators)
