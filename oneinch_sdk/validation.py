"""
Parameter validation helpers.

Each helper raises InvalidParameterError on bad input. Services bind
them into an Operation's validators, so they run before the cache
lookup and before any request is made.
"""

import re
from typing import Any, Optional, Sequence

from oneinch_sdk.classifier import InvalidParameterError


ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")
AMOUNT_PATTERN = re.compile(r"^[0-9]+$")


def validate_address(value: Any, field_name: str = "address") -> None:
    """EVM address: `0x` followed by 40 hex characters."""
    if not isinstance(value, str) or not value:
        raise InvalidParameterError(f"{field_name} is required", field_name, value)
    if not ADDRESS_PATTERN.match(value):
        raise InvalidParameterError(
            f"{field_name} is not a valid address: {value}",
            field_name,
            value,
        )


def validate_addresses(
    values: Optional[Sequence[str]],
    field_name: str = "addresses",
) -> None:
    validate_non_empty(values, field_name)
    for index, value in enumerate(values):
        validate_address(value, f"{field_name}[{index}]")


def validate_amount(value: Any, field_name: str = "amount") -> None:
    """Token amount in minimal units, as a decimal integer string."""
    if value is None or value == "":
        raise InvalidParameterError(f"{field_name} is required", field_name, value)
    if isinstance(value, bool) or not AMOUNT_PATTERN.match(str(value)):
        raise InvalidParameterError(
            f"{field_name} must be a non-negative integer in minimal units: {value}",
            field_name,
            value,
        )


def validate_chain_id(value: Any, field_name: str = "chain_id") -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidParameterError(
            f"{field_name} must be a positive integer: {value}",
            field_name,
            value,
        )


def validate_non_empty(value: Any, field_name: str) -> None:
    if value is None:
        raise InvalidParameterError(f"{field_name} is required", field_name, value)
    if isinstance(value, str):
        if not value.strip():
            raise InvalidParameterError(f"{field_name} must not be blank", field_name, value)
        return
    if len(value) == 0:
        raise InvalidParameterError(f"{field_name} must not be empty", field_name, value)


def validate_positive(value: Any, field_name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise InvalidParameterError(
            f"{field_name} must be positive: {value}",
            field_name,
            value,
        )
