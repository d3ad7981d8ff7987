"""
Fusion Services - Intent-based swap reads (fusion/v2.0).

Orders and quotes are live auction state and are never cached; the
settlement contract address is static and cached as metadata.
Order submission is not offered.
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


def _paging_validators(chain_id: int, page: Optional[int], limit: Optional[int]) -> list:
    validators = [partial(validate_chain_id, chain_id)]
    if page is not None:
        validators.append(partial(validate_positive, page, "page"))
    if limit is not None:
        validators.append(partial(validate_positive, limit, "limit"))
    return validators


class FusionOrdersService(BaseService):
    """Active Fusion orders, order status and fills by maker."""

    name = "fusion_orders"

    @staticmethod
    def _path(chain_id: int, endpoint: str) -> str:
        return f"fusion/v2.0/{chain_id}/orders/order/{endpoint}"

    def get_active_orders(
        self,
        chain_id: int,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        version: Optional[str] = None,
    ) -> Call:
        """Orders currently in auction."""
        return self._get(
            "get_active_orders",
            self._path(chain_id, "active"),
            {"page": page, "limit": limit, "version": version},
            validators=_paging_validators(chain_id, page, limit),
        )

    def get_settlement_contract(self, chain_id: int) -> Call:
        return self._get(
            "get_settlement_contract",
            self._path(chain_id, "settlement"),
            cache_key=self._key("get_settlement_contract", chain_id),
            resource_class=ResourceClass.TOKEN_METADATA,
            validators=(partial(validate_chain_id, chain_id),),
        )

    def get_order_status(self, chain_id: int, order_hash: str) -> Call:
        """Status and fills of one order."""
        return self._get(
            "get_order_status",
            self._path(chain_id, f"status/{order_hash}"),
            validators=(
                partial(validate_chain_id, chain_id),
                partial(validate_non_empty, order_hash, "order_hash"),
            ),
        )

    def get_orders_status(self, chain_id: int, order_hashes: Sequence[str]) -> Call:
        """Status of several orders in one request."""
        return self._post(
            "get_orders_status",
            self._path(chain_id, "status"),
            {"orderHashes": list(order_hashes or [])},
            validators=(
                partial(validate_chain_id, chain_id),
                partial(validate_non_empty, order_hashes, "order_hashes"),
            ),
        )

    def get_orders_by_maker(
        self,
        chain_id: int,
        address: str,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        timestamp_from: Optional[int] = None,
        timestamp_to: Optional[int] = None,
        maker_token: Optional[str] = None,
        taker_token: Optional[str] = None,
        with_token: Optional[str] = None,
        version: Optional[str] = None,
    ) -> Call:
        validators = _paging_validators(chain_id, page, limit)
        validators.append(partial(validate_address, address))
        params: dict[str, Any] = {
            "page": page,
            "limit": limit,
            "timestampFrom": timestamp_from,
            "timestampTo": timestamp_to,
            "makerToken": maker_token,
            "takerToken": taker_token,
            "withToken": with_token,
            "version": version,
        }
        return self._get(
            "get_orders_by_maker",
            self._path(chain_id, f"maker/{address}"),
            params,
            validators=validators,
        )


class FusionQuoterService(BaseService):
    """Auction quotes for a Fusion swap."""

    name = "fusion_quoter"

    def get_quote(
        self,
        chain_id: int,
        from_token_address: str,
        to_token_address: str,
        amount: str,
        wallet_address: str,
        enable_estimate: bool = False,
        fee: Optional[int] = None,
        show_dest_amount_minus_fee: Optional[bool] = None,
        is_permit2: Optional[str] = None,
        surplus: Optional[bool] = None,
        permit: Optional[str] = None,
        slippage: Optional[Any] = None,
        source: Optional[str] = None,
        custom_preset: Optional[dict[str, Any]] = None,
    ) -> Call:
        """
        Quote with auction presets for selling `amount` of a token.

        Passing `custom_preset` posts it as the request body, otherwise
        the server's default presets are returned.
        """
        params: dict[str, Any] = {
            "fromTokenAddress": from_token_address,
            "toTokenAddress": to_token_address,
            "amount": amount,
            "walletAddress": wallet_address,
            "enableEstimate": enable_estimate,
            "fee": fee,
            "showDestAmountMinusFee": show_dest_amount_minus_fee,
            "isPermit2": is_permit2,
            "surplus": surplus,
            "permit": permit,
            "slippage": slippage,
            "source": source,
        }
        path = f"fusion/v2.0/{chain_id}/quoter/quote/receive"
        validators = (
            partial(validate_chain_id, chain_id),
            partial(validate_address, from_token_address, "from_token_address"),
            partial(validate_address, to_token_address, "to_token_address"),
            partial(validate_amount, amount),
            partial(validate_address, wallet_address, "wallet_address"),
        )
        if custom_preset is not None:
            return self._post("get_quote", path, custom_preset, params, validators=validators)
        return self._get("get_quote", path, params, validators=validators)
