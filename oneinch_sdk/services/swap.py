"""
Swap Service - Classic aggregation swap API (swap/v6.1).
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
    validate_positive,
)


def _join(values: Optional[Sequence[str]]) -> Optional[str]:
    return ",".join(values) if values else None


class SwapService(BaseService):
    """Quotes, swap transactions and token approvals."""

    name = "swap"

    @staticmethod
    def _path(chain_id: int, endpoint: str) -> str:
        return f"swap/v6.1/{chain_id}/{endpoint}"

    def get_quote(
        self,
        chain_id: int,
        src: str,
        dst: str,
        amount: Any,
        protocols: Optional[Sequence[str]] = None,
        fee: Optional[float] = None,
        gas_price: Optional[Any] = None,
        complexity_level: Optional[int] = None,
        parts: Optional[int] = None,
        main_route_parts: Optional[int] = None,
        gas_limit: Optional[Any] = None,
        include_tokens_info: Optional[bool] = None,
        include_protocols: Optional[bool] = None,
        include_gas: Optional[bool] = None,
        connector_tokens: Optional[Sequence[str]] = None,
        excluded_protocols: Optional[Sequence[str]] = None,
    ) -> Call:
        """Best route quote for swapping `amount` of `src` into `dst`."""
        params = {
            "src": src,
            "dst": dst,
            "amount": amount,
            "protocols": _join(protocols),
            "fee": fee,
            "gasPrice": gas_price,
            "complexityLevel": complexity_level,
            "parts": parts,
            "mainRouteParts": main_route_parts,
            "gasLimit": gas_limit,
            "includeTokensInfo": include_tokens_info,
            "includeProtocols": include_protocols,
            "includeGas": include_gas,
            "connectorTokens": _join(connector_tokens),
            "excludedProtocols": _join(excluded_protocols),
        }
        return self._get(
            "get_quote",
            self._path(chain_id, "quote"),
            params,
            cache_key=self._key("get_quote", chain_id, sorted(params.items())),
            resource_class=ResourceClass.PRICE,
            validators=(
                partial(validate_chain_id, chain_id),
                partial(validate_address, src, "src"),
                partial(validate_address, dst, "dst"),
                partial(validate_amount, amount),
            ),
        )

    def get_swap(
        self,
        chain_id: int,
        src: str,
        dst: str,
        amount: Any,
        from_address: str,
        slippage: float,
        origin: Optional[str] = None,
        receiver: Optional[str] = None,
        referrer: Optional[str] = None,
        fee: Optional[float] = None,
        protocols: Optional[Sequence[str]] = None,
        gas_price: Optional[Any] = None,
        complexity_level: Optional[int] = None,
        parts: Optional[int] = None,
        main_route_parts: Optional[int] = None,
        gas_limit: Optional[Any] = None,
        include_tokens_info: Optional[bool] = None,
        include_protocols: Optional[bool] = None,
        include_gas: Optional[bool] = None,
        connector_tokens: Optional[Sequence[str]] = None,
        excluded_protocols: Optional[Sequence[str]] = None,
        permit: Optional[str] = None,
        allow_partial_fill: Optional[bool] = None,
        disable_estimate: Optional[bool] = None,
        use_permit2: Optional[bool] = None,
    ) -> Call:
        """
        Swap transaction calldata.

        Never cached: the response embeds a transaction for the
        current chain state.
        """
        params = {
            "src": src,
            "dst": dst,
            "amount": amount,
            "from": from_address,
            "origin": origin or from_address,
            "slippage": slippage,
            "protocols": _join(protocols),
            "fee": fee,
            "gasPrice": gas_price,
            "complexityLevel": complexity_level,
            "parts": parts,
            "mainRouteParts": main_route_parts,
            "gasLimit": gas_limit,
            "includeTokensInfo": include_tokens_info,
            "includeProtocols": include_protocols,
            "includeGas": include_gas,
            "connectorTokens": _join(connector_tokens),
            "excludedProtocols": _join(excluded_protocols),
            "permit": permit,
            "receiver": receiver,
            "referrer": referrer,
            "allowPartialFill": allow_partial_fill,
            "disableEstimate": disable_estimate,
            "usePermit2": use_permit2,
        }
        return self._get(
            "get_swap",
            self._path(chain_id, "swap"),
            params,
            idempotent=False,
            validators=(
                partial(validate_chain_id, chain_id),
                partial(validate_address, src, "src"),
                partial(validate_address, dst, "dst"),
                partial(validate_amount, amount),
                partial(validate_address, from_address, "from_address"),
                partial(validate_positive, slippage, "slippage"),
            ),
        )

    def get_spender(self, chain_id: int) -> Call:
        """Router address that must be approved to spend tokens."""
        return self._get(
            "get_spender",
            self._path(chain_id, "approve/spender"),
            cache_key=self._key("get_spender", chain_id),
            resource_class=ResourceClass.TOKEN_METADATA,
            validators=(partial(validate_chain_id, chain_id),),
        )

    def get_approve_transaction(
        self,
        chain_id: int,
        token_address: str,
        amount: Optional[Any] = None,
    ) -> Call:
        """Approval transaction calldata (unlimited if `amount` is None)."""
        validators = [
            partial(validate_chain_id, chain_id),
            partial(validate_address, token_address, "token_address"),
        ]
        if amount is not None:
            validators.append(partial(validate_amount, amount))
        return self._get(
            "get_approve_transaction",
            self._path(chain_id, "approve/transaction"),
            {"tokenAddress": token_address, "amount": amount},
            idempotent=False,
            validators=validators,
        )

    def get_allowance(self, chain_id: int, token_address: str, wallet_address: str) -> Call:
        """Current router allowance; read live, never cached."""
        return self._get(
            "get_allowance",
            self._path(chain_id, "approve/allowance"),
            {"tokenAddress": token_address, "walletAddress": wallet_address},
            validators=(
                partial(validate_chain_id, chain_id),
                partial(validate_address, token_address, "token_address"),
                partial(validate_address, wallet_address, "wallet_address"),
            ),
        )
