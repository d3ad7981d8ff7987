"""
Client Tests.

OneInchClient wiring and lifecycle with a fake transport.
"""

import pytest

from oneinch_sdk.cache import InMemoryCacheStore
from oneinch_sdk.client import OneInchClient
from oneinch_sdk.config import ClientConfig, TimeoutConfig
from oneinch_sdk.context import ClientContext
from oneinch_sdk.exceptions import ClientClosedError, ConfigurationError


WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
WBNB = "0xbb4CdB9CBd36B01bD1cBaEBF2De08d9173bc095c"


@pytest.fixture
def client(fake_transport, clock):
    client = OneInchClient(config=ClientConfig(api_key="k"), transport=fake_transport, clock=clock)
    yield client
    client.close()


class TestOneInchClient:
    """Tests for OneInchClient."""

    def test_services_share_core(self, client):
        """Test every service executes on the same core."""
        assert client.price._core is client.context.core
        assert client.swap._core is client.context.core
        assert client.context.is_running

    def test_call_and_stats(self, client, fake_transport):
        """Test a cached read shows up in the stats."""
        client.price.get_prices(1, [WETH]).get(timeout=5)
        client.price.get_prices(1, [WETH]).get(timeout=5)

        stats = client.get_stats()

        assert stats["execution"]["executions"] == 2
        assert stats["execution"]["cache_hits"] == 1
        assert stats["cache"]["writes"] == 1
        assert stats["transport"]["requests"] == 1

    def test_clear_cache(self, client, fake_transport):
        """Test clearing the cache forces a new request."""
        client.price.get_prices(1, [WETH]).get(timeout=5)
        client.clear_cache()
        client.price.get_prices(1, [WETH]).get(timeout=5)

        assert len(fake_transport.calls) == 2

    def test_aggregate_across_chains(self, client):
        """Test client-level aggregation of service operations."""
        result = client.aggregate({
            "eth": client.price.get_prices(1, [WETH]).operation,
            "bsc": client.price.get_prices(56, [WBNB]).operation,
        })

        assert result.all_succeeded
        assert result.keys() == ["eth", "bsc"]

    def test_close(self, fake_transport, clock):
        """Test close stops the loop and closes the transport."""
        client = OneInchClient(config=ClientConfig(api_key="k"), transport=fake_transport, clock=clock)

        with client:
            pass

        assert fake_transport.closed
        assert not client.context.is_running

    def test_call_after_close(self, fake_transport, clock):
        """Test calls on a closed client raise ClientClosedError."""
        client = OneInchClient(config=ClientConfig(api_key="k"), transport=fake_transport, clock=clock)
        client.close()

        with pytest.raises(ClientClosedError):
            client.price.get_prices(1, [WETH]).get(timeout=5)

        assert fake_transport.calls == []

    def test_empty_cache_store_used(self, fake_transport, clock):
        """Test a caller-supplied store is used even while empty."""
        store = InMemoryCacheStore()

        with OneInchClient(
            config=ClientConfig(api_key="k"),
            transport=fake_transport,
            cache_store=store,
            clock=clock,
        ) as client:
            client.price.get_prices(1, [WETH]).get(timeout=5)

        assert len(store) == 1

    def test_explicit_key_overrides_config(self, fake_transport):
        """Test api_key replaces the key in a given config."""
        with OneInchClient(api_key="new", config=ClientConfig(api_key="old"), transport=fake_transport) as client:
            assert client.context.config.api_key == "new"


class TestClientContext:
    """Tests for ClientContext construction and lifecycle."""

    def test_invalid_config_rejected(self, fake_transport):
        """Test validation errors are raised together."""
        config = ClientConfig(api_key="", timeouts=TimeoutConfig(connect_seconds=-1))

        with pytest.raises(ConfigurationError) as info:
            ClientContext(config, transport=fake_transport)

        assert "api_key is required" in info.value.errors
        assert "timeouts.connect_seconds must be positive" in info.value.errors

    def test_start_after_close_rejected(self, fake_transport):
        """Test a closed context cannot be restarted."""
        context = ClientContext(ClientConfig(api_key="k"), transport=fake_transport).start()
        context.close()
        context.close()

        with pytest.raises(RuntimeError):
            context.start()
