"""
Token Service - Token lists, search and custom token lookup (token/v1.3).
"""

from functools import partial
from typing import Optional, Sequence

from oneinch_sdk.cache import ResourceClass
from oneinch_sdk.execution import Call
from oneinch_sdk.services.base import BaseService
from oneinch_sdk.validation import (
    validate_address,
    validate_addresses,
    validate_chain_id,
    validate_non_empty,
    validate_positive,
)


BASE_PATH = "token/v1.3"


class TokenService(BaseService):
    """Token metadata. Every read is cached with the token-metadata TTL."""

    name = "token"

    def get_tokens(
        self,
        chain_id: Optional[int] = None,
        provider: Optional[str] = None,
        country: Optional[str] = None,
    ) -> Call:
        """Whitelisted tokens keyed by address; all chains if `chain_id` is None."""
        path = f"{BASE_PATH}/{chain_id}" if chain_id is not None else f"{BASE_PATH}/multi-chain"
        validators = (partial(validate_chain_id, chain_id),) if chain_id is not None else ()
        return self._get(
            "get_tokens",
            path,
            {"provider": provider, "country": country},
            cache_key=self._key("get_tokens", chain_id, provider, country),
            resource_class=ResourceClass.TOKEN_METADATA,
            validators=validators,
        )

    def get_token_list(
        self,
        chain_id: Optional[int] = None,
        provider: Optional[str] = None,
        country: Optional[str] = None,
    ) -> Call:
        """Token list in the token-list standard format."""
        base = f"{BASE_PATH}/{chain_id}" if chain_id is not None else f"{BASE_PATH}/multi-chain"
        validators = (partial(validate_chain_id, chain_id),) if chain_id is not None else ()
        return self._get(
            "get_token_list",
            f"{base}/token-list",
            {"provider": provider, "country": country},
            cache_key=self._key("get_token_list", chain_id, provider, country),
            resource_class=ResourceClass.TOKEN_METADATA,
            validators=validators,
        )

    def search_tokens(
        self,
        chain_id: int,
        query: str,
        ignore_listed: Optional[bool] = None,
        only_positive_rating: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> Call:
        """Search tokens on one chain by name, symbol or address."""
        validators = [
            partial(validate_chain_id, chain_id),
            partial(validate_non_empty, query, "query"),
        ]
        if limit is not None:
            validators.append(partial(validate_positive, limit, "limit"))
        return self._get(
            "search_tokens",
            f"{BASE_PATH}/{chain_id}/search",
            self._search_params(query, ignore_listed, only_positive_rating, limit),
            cache_key=self._key("search_tokens", chain_id, query, ignore_listed, only_positive_rating, limit),
            resource_class=ResourceClass.TOKEN_METADATA,
            validators=validators,
        )

    def search_tokens_multi_chain(
        self,
        query: str,
        ignore_listed: Optional[bool] = None,
        only_positive_rating: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> Call:
        """Search tokens across all supported chains."""
        validators = [partial(validate_non_empty, query, "query")]
        if limit is not None:
            validators.append(partial(validate_positive, limit, "limit"))
        return self._get(
            "search_tokens_multi_chain",
            f"{BASE_PATH}/search",
            self._search_params(query, ignore_listed, only_positive_rating, limit),
            cache_key=self._key("search_tokens_multi_chain", query, ignore_listed, only_positive_rating, limit),
            resource_class=ResourceClass.TOKEN_METADATA,
            validators=validators,
        )

    def get_custom_token(self, chain_id: int, address: str) -> Call:
        """Metadata for any token, listed or not."""
        return self._get(
            "get_custom_token",
            f"{BASE_PATH}/{chain_id}/custom/{address}",
            cache_key=self._key("get_custom_token", chain_id, address),
            resource_class=ResourceClass.TOKEN_METADATA,
            validators=(
                partial(validate_chain_id, chain_id),
                partial(validate_address, address),
            ),
        )

    def get_custom_tokens(self, chain_id: int, addresses: Sequence[str]) -> Call:
        return self._get(
            "get_custom_tokens",
            f"{BASE_PATH}/{chain_id}/custom",
            {"addresses": list(addresses) if addresses else None},
            cache_key=self._key("get_custom_tokens", chain_id, addresses),
            resource_class=ResourceClass.TOKEN_METADATA,
            validators=(
                partial(validate_chain_id, chain_id),
                partial(validate_addresses, addresses),
            ),
        )

    @staticmethod
    def _search_params(
        query: str,
        ignore_listed: Optional[bool],
        only_positive_rating: Optional[bool],
        limit: Optional[int],
    ) -> dict:
        return {
            "query": query,
            "ignore_listed": ignore_listed,
            "only_positive_rating": only_positive_rating,
            "limit": limit,
        }
