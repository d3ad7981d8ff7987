"""
Validation and Cache Key Tests.
"""

import pytest

from oneinch_sdk.classifier import InvalidParameterError
from oneinch_sdk.operation import Operation, build_cache_key
from oneinch_sdk.validation import (
    validate_address,
    validate_addresses,
    validate_amount,
    validate_chain_id,
    validate_non_empty,
    validate_positive,
)


USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


class TestValidators:
    """Tests for input validators."""

    def test_valid_inputs_pass(self):
        """Test well-formed inputs raise nothing."""
        validate_address(USDC)
        validate_addresses([USDC, USDC.lower()])
        validate_amount("1000000000000000000")
        validate_amount(5)
        validate_chain_id(137)
        validate_positive(0.5, "slippage")

    @pytest.mark.parametrize("value", ["", "0x123", USDC + "00", "A0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48", None])
    def test_bad_address(self, value):
        """Test malformed addresses are rejected."""
        with pytest.raises(InvalidParameterError):
            validate_address(value, "src")

    def test_bad_address_in_list_names_index(self):
        """Test the failing list position is reported."""
        with pytest.raises(InvalidParameterError) as info:
            validate_addresses([USDC, "nope"])

        assert info.value.field_name == "addresses[1]"

    @pytest.mark.parametrize("value", ["1.5", "-1", "1e18", True, None])
    def test_bad_amount(self, value):
        """Test amounts must be integers in minimal units."""
        with pytest.raises(InvalidParameterError):
            validate_amount(value)

    @pytest.mark.parametrize("value", [0, -1, "1", True])
    def test_bad_chain_id(self, value):
        """Test chain ids must be positive integers."""
        with pytest.raises(InvalidParameterError):
            validate_chain_id(value)

    def test_non_empty(self):
        """Test empty collections and blank strings are rejected."""
        for value in (None, [], "   "):
            with pytest.raises(InvalidParameterError):
                validate_non_empty(value, "tokens")


class TestCacheKey:
    """Tests for build_cache_key and Operation.cacheable."""

    def test_normalization(self):
        """Test case, None, booleans and sequences are normalized."""
        key = build_cache_key("price.get_prices", 1, ["0xAB", "0xCD"], None, True)

        assert key == "price.get_prices:1:0xab,0xcd::true"

    def test_case_insensitive(self):
        """Test address case does not change the key."""
        assert build_cache_key("p", USDC) == build_cache_key("p", USDC.lower())

    def test_dict_parts_sorted(self):
        """Test mapping parts do not depend on insertion order."""
        assert build_cache_key("q", {"b": 1, "a": 2}) == build_cache_key("q", {"a": 2, "b": 1}) == "q:a=2,b=1"

    def test_cacheable(self):
        """Test cacheability needs a key and idempotency."""
        async def producer():
            return None

        assert Operation(producer=producer, cache_key="k").cacheable
        assert not Operation(producer=producer).cacheable
        assert not Operation(producer=producer, cache_key="k", idempotent=False).cacheable
