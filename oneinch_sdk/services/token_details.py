"""
Token Details Service - Token profiles, charts and price change (token-details/v1.0).

Methods taking an optional `address` target the chain's native
token when it is None.
"""

from functools import partial
from typing import Optional

from oneinch_sdk.cache import ResourceClass
from oneinch_sdk.execution import Call
from oneinch_sdk.services.base import BaseService
from oneinch_sdk.validation import validate_address, validate_chain_id, validate_non_empty


BASE_PATH = "token-details/v1.0"


class TokenDetailsService(BaseService):
    """Token profile data and price history."""

    name = "token_details"

    @staticmethod
    def _path(section: str, chain_id: int, address: Optional[str]) -> str:
        path = f"{BASE_PATH}/{section}/{chain_id}"
        return f"{path}/{address}" if address else path

    @staticmethod
    def _validators(chain_id: int, address: Optional[str]) -> list:
        validators = [partial(validate_chain_id, chain_id)]
        if address is not None:
            validators.append(partial(validate_address, address))
        return validators

    def get_native_details(self, chain_id: int, provider: Optional[str] = None) -> Call:
        return self.get_token_details(chain_id, None, provider)

    def get_token_details(
        self,
        chain_id: int,
        address: Optional[str],
        provider: Optional[str] = None,
    ) -> Call:
        """Description, social links and supply info of a token."""
        return self._get(
            "get_token_details",
            self._path("details", chain_id, address),
            {"provider": provider},
            cache_key=self._key("get_token_details", chain_id, address, provider),
            resource_class=ResourceClass.TOKEN_METADATA,
            validators=self._validators(chain_id, address),
        )

    def get_price_change(
        self,
        chain_id: int,
        interval: str,
        address: Optional[str] = None,
    ) -> Call:
        """Price change over `interval` (e.g. `24h`, `7d`)."""
        validators = self._validators(chain_id, address)
        validators.append(partial(validate_non_empty, interval, "interval"))
        return self._get(
            "get_price_change",
            self._path("prices/change", chain_id, address),
            {"interval": interval},
            cache_key=self._key("get_price_change", chain_id, address, interval),
            resource_class=ResourceClass.PRICE,
            validators=validators,
        )

    def get_chart_by_range(
        self,
        chain_id: int,
        from_timestamp: int,
        to_timestamp: int,
        address: Optional[str] = None,
        provider: Optional[str] = None,
        from_time: Optional[int] = None,
    ) -> Call:
        """Price chart between two unix timestamps (seconds)."""
        return self._get(
            "get_chart_by_range",
            self._path("charts/range", chain_id, address),
            {"from": from_timestamp, "to": to_timestamp, "provider": provider, "from_time": from_time},
            cache_key=self._key(
                "get_chart_by_range", chain_id, address, from_timestamp, to_timestamp, provider, from_time,
            ),
            resource_class=ResourceClass.PRICE,
            validators=self._validators(chain_id, address),
        )

    def get_chart_by_interval(
        self,
        chain_id: int,
        interval: str,
        address: Optional[str] = None,
        provider: Optional[str] = None,
        from_time: Optional[int] = None,
    ) -> Call:
        """Price chart for a named interval ending now."""
        validators = self._validators(chain_id, address)
        validators.append(partial(validate_non_empty, interval, "interval"))
        return self._get(
            "get_chart_by_interval",
            self._path("charts/interval", chain_id, address),
            {"interval": interval, "provider": provider, "from_time": from_time},
            cache_key=self._key("get_chart_by_interval", chain_id, address, interval, provider, from_time),
            resource_class=ResourceClass.PRICE,
            validators=validators,
        )
