"""
Portfolio Service - Portfolio analytics (portfolio/v5.0).

Most endpoints answer with a `{result, meta}` envelope, returned
as-is.
"""

from functools import partial
from typing import Any, Optional, Sequence

from oneinch_sdk.aggregator import AggregatedResult
from oneinch_sdk.cache import ResourceClass
from oneinch_sdk.execution import Call
from oneinch_sdk.operation import unordered
from oneinch_sdk.services.base import BaseService
from oneinch_sdk.validation import validate_addresses, validate_chain_id


BASE_PATH = "portfolio/v5.0"


class PortfolioService(BaseService):
    """Wallet value, snapshots and metrics across protocols and tokens."""

    name = "portfolio"

    # ------------------------------------------------------------
    # General
    # ------------------------------------------------------------

    def get_service_status(self) -> Call:
        """Live service status; never cached."""
        return self._get("get_service_status", f"{BASE_PATH}/general/status")

    def get_supported_chains(self) -> Call:
        return self._get(
            "get_supported_chains",
            f"{BASE_PATH}/general/supported_chains",
            cache_key=self._key("get_supported_chains"),
            resource_class=ResourceClass.TOKEN_METADATA,
        )

    def get_supported_protocols(self) -> Call:
        return self._get(
            "get_supported_protocols",
            f"{BASE_PATH}/general/supported_protocols",
            cache_key=self._key("get_supported_protocols"),
            resource_class=ResourceClass.TOKEN_METADATA,
        )

    def check_address(
        self,
        addresses: Sequence[str],
        chain_id: Optional[int] = None,
        use_cache: Optional[bool] = None,
    ) -> Call:
        """Whether the addresses are supported for portfolio analysis."""
        return self._general("check_address", "address_check", addresses, chain_id, use_cache=use_cache)

    def get_current_value(
        self,
        addresses: Sequence[str],
        chain_id: Optional[int] = None,
        use_cache: Optional[bool] = None,
    ) -> Call:
        """Current USD value broken down by chain, protocol and category."""
        return self._general("get_current_value", "current_value", addresses, chain_id, use_cache=use_cache)

    def get_value_chart(
        self,
        addresses: Sequence[str],
        chain_id: Optional[int] = None,
        timerange: Optional[str] = None,
        use_cache: Optional[bool] = None,
    ) -> Call:
        return self._general(
            "get_value_chart", "chart", addresses, chain_id,
            timerange=timerange, use_cache=use_cache,
        )

    # ------------------------------------------------------------
    # Snapshots & metrics
    # ------------------------------------------------------------

    def get_tokens_snapshot(
        self,
        addresses: Sequence[str],
        chain_id: Optional[int] = None,
        timestamp: Optional[int] = None,
        use_cache: Optional[bool] = None,
    ) -> Call:
        return self._portfolio(
            "get_tokens_snapshot", "tokens/snapshot", addresses, chain_id,
            timestamp=timestamp, use_cache=use_cache,
        )

    def get_protocols_snapshot(
        self,
        addresses: Sequence[str],
        chain_id: Optional[int] = None,
        timestamp: Optional[int] = None,
        use_cache: Optional[bool] = None,
    ) -> Call:
        return self._portfolio(
            "get_protocols_snapshot", "protocols/snapshot", addresses, chain_id,
            timestamp=timestamp, use_cache=use_cache,
        )

    def get_tokens_metrics(
        self,
        addresses: Sequence[str],
        chain_id: Optional[int] = None,
        timerange: Optional[str] = None,
        use_cache: Optional[bool] = None,
    ) -> Call:
        return self._portfolio(
            "get_tokens_metrics", "tokens/metrics", addresses, chain_id,
            timerange=timerange, use_cache=use_cache,
        )

    def get_protocols_metrics(
        self,
        addresses: Sequence[str],
        chain_id: Optional[int] = None,
        protocol_group_id: Optional[str] = None,
        contract_address: Optional[str] = None,
        token_id: Optional[int] = None,
        use_cache: Optional[bool] = None,
    ) -> Call:
        return self._portfolio(
            "get_protocols_metrics", "protocols/metrics", addresses, chain_id,
            protocol_group_id=protocol_group_id,
            contract_address=contract_address,
            token_id=token_id,
            use_cache=use_cache,
        )

    def get_current_value_for_wallets(
        self,
        wallets: Sequence[str],
        chain_id: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> AggregatedResult:
        """
        Current value per wallet as concurrent requests.

        Returns an AggregatedResult keyed by wallet address.
        """
        return self._aggregate(
            ((wallet, self.get_current_value([wallet], chain_id).operation) for wallet in wallets),
            timeout=timeout,
        )

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def _general(
        self,
        method: str,
        endpoint: str,
        addresses: Sequence[str],
        chain_id: Optional[int],
        **extra: Any,
    ) -> Call:
        return self._portfolio(method, f"general/{endpoint}", addresses, chain_id, **extra)

    def _portfolio(
        self,
        method: str,
        endpoint: str,
        addresses: Sequence[str],
        chain_id: Optional[int],
        **extra: Any,
    ) -> Call:
        params: dict[str, Any] = {
            "addresses": list(addresses) if addresses else None,
            "chain_id": chain_id,
        }
        params.update(extra)

        validators = [partial(validate_addresses, addresses)]
        if chain_id is not None:
            validators.append(partial(validate_chain_id, chain_id))

        return self._get(
            method,
            f"{BASE_PATH}/{endpoint}",
            params,
            cache_key=self._key(method, unordered(addresses), chain_id, sorted(extra.items())),
            resource_class=ResourceClass.PORTFOLIO,
            validators=validators,
        )
