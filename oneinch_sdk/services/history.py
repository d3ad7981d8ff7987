"""
History Service - Wallet transaction history (history/v2.0).
"""

from functools import partial
from typing import Optional

from oneinch_sdk.execution import Call
from oneinch_sdk.services.base import BaseService
from oneinch_sdk.validation import validate_address, validate_chain_id, validate_positive


class HistoryService(BaseService):
    """History events. Never cached: new events may appear at any time."""

    name = "history"

    def get_history_events(
        self,
        address: str,
        limit: Optional[int] = None,
        token_address: Optional[str] = None,
        chain_id: Optional[int] = None,
        from_timestamp_ms: Optional[int] = None,
        to_timestamp_ms: Optional[int] = None,
    ) -> Call:
        validators = [partial(validate_address, address)]
        if limit is not None:
            validators.append(partial(validate_positive, limit, "limit"))
        if token_address is not None:
            validators.append(partial(validate_address, token_address, "token_address"))
        if chain_id is not None:
            validators.append(partial(validate_chain_id, chain_id))

        return self._get(
            "get_history_events",
            f"history/v2.0/history/{address}/events",
            {
                "limit": limit,
                "tokenAddress": token_address,
                "chainId": chain_id,
                "fromTimestampMs": from_timestamp_ms,
                "toTimestampMs": to_timestamp_ms,
            },
            validators=validators,
        )
