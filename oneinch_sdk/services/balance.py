"""
Balance Service - Wallet balances and allowances (balance/v1.2).
"""

from functools import partial
from typing import Optional, Sequence

from oneinch_sdk.aggregator import AggregatedResult
from oneinch_sdk.cache import ResourceClass
from oneinch_sdk.execution import Call
from oneinch_sdk.operation import unordered
from oneinch_sdk.services.base import BaseService
from oneinch_sdk.validation import validate_address, validate_addresses, validate_chain_id


BASE_PATH = "balance/v1.2"


class BalanceService(BaseService):
    """Balances and allowances, cached with the portfolio TTL."""

    name = "balance"

    def get_balances(self, chain_id: int, wallet_address: str) -> Call:
        """All token balances of one wallet."""
        return self._get(
            "get_balances",
            f"{BASE_PATH}/{chain_id}/balances/{wallet_address}",
            cache_key=self._key("get_balances", chain_id, wallet_address),
            resource_class=ResourceClass.PORTFOLIO,
            validators=(
                partial(validate_chain_id, chain_id),
                partial(validate_address, wallet_address, "wallet_address"),
            ),
        )

    def get_custom_balances(self, chain_id: int, wallet_address: str, tokens: Sequence[str]) -> Call:
        """Balances of the given tokens only."""
        return self._post(
            "get_custom_balances",
            f"{BASE_PATH}/{chain_id}/balances/{wallet_address}",
            {"tokens": list(tokens or [])},
            cache_key=self._key("get_custom_balances", chain_id, wallet_address, unordered(tokens)),
            resource_class=ResourceClass.PORTFOLIO,
            validators=(
                partial(validate_chain_id, chain_id),
                partial(validate_address, wallet_address, "wallet_address"),
                partial(validate_addresses, tokens, "tokens"),
            ),
        )

    def get_allowances(
        self,
        chain_id: int,
        spender: str,
        wallet_address: str,
        tokens: Optional[Sequence[str]] = None,
    ) -> Call:
        """Allowances granted to `spender`; limited to `tokens` if given."""
        path = f"{BASE_PATH}/{chain_id}/allowances/{spender}/{wallet_address}"
        validators = [
            partial(validate_chain_id, chain_id),
            partial(validate_address, spender, "spender"),
            partial(validate_address, wallet_address, "wallet_address"),
        ]
        cache_key = self._key("get_allowances", chain_id, spender, wallet_address, unordered(tokens))
        if tokens:
            validators.append(partial(validate_addresses, tokens, "tokens"))
            return self._post(
                "get_allowances", path, {"tokens": list(tokens)},
                cache_key=cache_key,
                resource_class=ResourceClass.PORTFOLIO,
                validators=validators,
            )
        return self._get(
            "get_allowances", path,
            cache_key=cache_key,
            resource_class=ResourceClass.PORTFOLIO,
            validators=validators,
        )

    def get_balances_and_allowances(
        self,
        chain_id: int,
        spender: str,
        wallet_address: str,
        tokens: Optional[Sequence[str]] = None,
    ) -> Call:
        path = f"{BASE_PATH}/{chain_id}/allowancesAndBalances/{spender}/{wallet_address}"
        validators = [
            partial(validate_chain_id, chain_id),
            partial(validate_address, spender, "spender"),
            partial(validate_address, wallet_address, "wallet_address"),
        ]
        cache_key = self._key("get_balances_and_allowances", chain_id, spender, wallet_address, unordered(tokens))
        if tokens:
            validators.append(partial(validate_addresses, tokens, "tokens"))
            return self._post(
                "get_balances_and_allowances", path, {"tokens": list(tokens)},
                cache_key=cache_key,
                resource_class=ResourceClass.PORTFOLIO,
                validators=validators,
            )
        return self._get(
            "get_balances_and_allowances", path,
            cache_key=cache_key,
            resource_class=ResourceClass.PORTFOLIO,
            validators=validators,
        )

    def get_aggregated_balances_and_allowances(
        self,
        chain_id: int,
        spender: str,
        wallets: Sequence[str],
        filter_empty: Optional[bool] = None,
    ) -> Call:
        """Server-side aggregation of balances and allowances over several wallets."""
        return self._get(
            "get_aggregated_balances_and_allowances",
            f"{BASE_PATH}/{chain_id}/aggregatedBalancesAndAllowances/{spender}",
            {"wallets": list(wallets) if wallets else None, "filterEmpty": filter_empty},
            cache_key=self._key(
                "get_aggregated_balances_and_allowances", chain_id, spender, unordered(wallets), filter_empty,
            ),
            resource_class=ResourceClass.PORTFOLIO,
            validators=(
                partial(validate_chain_id, chain_id),
                partial(validate_address, spender, "spender"),
                partial(validate_addresses, wallets, "wallets"),
            ),
        )

    def get_balances_multiple_wallets(
        self,
        chain_id: int,
        wallets: Sequence[str],
        tokens: Sequence[str],
    ) -> Call:
        """`{wallet: {token: balance}}` in one server-side request."""
        return self._post(
            "get_balances_multiple_wallets",
            f"{BASE_PATH}/{chain_id}/balances/multiple/walletsAndTokens",
            {"wallets": list(wallets or []), "tokens": list(tokens or [])},
            cache_key=self._key("get_balances_multiple_wallets", chain_id, unordered(wallets), unordered(tokens)),
            resource_class=ResourceClass.PORTFOLIO,
            validators=(
                partial(validate_chain_id, chain_id),
                partial(validate_addresses, wallets, "wallets"),
                partial(validate_addresses, tokens, "tokens"),
            ),
        )

    def get_balances_for_wallets(
        self,
        chain_id: int,
        wallets: Sequence[str],
        timeout: Optional[float] = None,
    ) -> AggregatedResult:
        """
        Balances of several wallets as concurrent per-wallet requests.

        Returns an AggregatedResult keyed by wallet address.
        """
        return self._aggregate(
            ((wallet, self.get_balances(chain_id, wallet).operation) for wallet in wallets),
            timeout=timeout,
        )
