"""
Configuration Tests.

Environment loading, API key resolution and validation.
"""

import pytest

from oneinch_sdk.cache import ResourceClass
from oneinch_sdk.config import (
    API_KEY_ENV_VARS,
    CacheConfig,
    ClientConfig,
    TimeoutConfig,
    resolve_api_key,
)
from oneinch_sdk.exceptions import ConfigurationError
from oneinch_sdk.http import DEFAULT_BASE_URL


ENV_VARS = API_KEY_ENV_VARS + (
    "ONEINCH_BASE_URL",
    "ONEINCH_CACHE_ENABLED",
    "ONEINCH_CACHE_PRICE_TTL_SECONDS",
    "ONEINCH_CACHE_SWEEP_INTERVAL_SECONDS",
    "ONEINCH_REQUEST_TIMEOUT_SECONDS",
    "ONEINCH_BLOCKING_TIMEOUT_SECONDS",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# ============================================================
# API KEY
# ============================================================

class TestApiKey:
    """Tests for API key resolution."""

    def test_explicit_wins(self, clean_env):
        """Test an explicit key beats the environment."""
        clean_env.setenv("ONEINCH_API_KEY", "from-env")

        assert resolve_api_key("explicit") == "explicit"

    def test_fallback_variable(self, clean_env):
        """Test the alternate variable name is honoured."""
        clean_env.setenv("ONE_INCH_API_KEY", "alt")

        assert resolve_api_key() == "alt"

    def test_missing_key(self, clean_env):
        """Test a missing key raises ConfigurationError."""
        with pytest.raises(ConfigurationError) as info:
            resolve_api_key()

        assert info.value.config_key == "ONEINCH_API_KEY"


# ============================================================
# ENVIRONMENT LOADING
# ============================================================

class TestFromEnv:
    """Tests for ClientConfig.from_env."""

    def test_defaults(self, clean_env):
        """Test defaults when only the key is set."""
        clean_env.setenv("ONEINCH_API_KEY", "k")

        config = ClientConfig.from_env(load_env_file=False)

        assert config.api_key == "k"
        assert config.base_url == DEFAULT_BASE_URL
        assert config.cache.enabled is True
        assert config.cache.sweep_interval_seconds is None
        assert config.timeouts.request_seconds == 30.0
        assert config.timeouts.blocking_seconds is None
        assert config.validate() == []

    def test_overrides(self, clean_env):
        """Test environment overrides."""
        clean_env.setenv("ONEINCH_API_KEY", "k")
        clean_env.setenv("ONEINCH_BASE_URL", "http://localhost:8080")
        clean_env.setenv("ONEINCH_CACHE_ENABLED", "false")
        clean_env.setenv("ONEINCH_CACHE_PRICE_TTL_SECONDS", "5")
        clean_env.setenv("ONEINCH_BLOCKING_TIMEOUT_SECONDS", "2.5")

        config = ClientConfig.from_env(load_env_file=False)

        assert config.base_url == "http://localhost:8080"
        assert config.cache.enabled is False
        assert config.cache.price_ttl_seconds == 5.0
        assert config.timeouts.blocking_seconds == 2.5

    def test_invalid_number(self, clean_env):
        """Test a non-numeric value is a configuration error."""
        clean_env.setenv("ONEINCH_API_KEY", "k")
        clean_env.setenv("ONEINCH_REQUEST_TIMEOUT_SECONDS", "soon")

        with pytest.raises(ConfigurationError) as info:
            ClientConfig.from_env(load_env_file=False)

        assert info.value.config_key == "ONEINCH_REQUEST_TIMEOUT_SECONDS"


# ============================================================
# VALIDATION
# ============================================================

class TestValidate:
    """Tests for validate()."""

    def test_collects_all_errors(self):
        """Test every problem is reported."""
        config = ClientConfig(
            api_key=None,
            base_url="ftp://example",
            cache=CacheConfig(price_ttl_seconds=-1),
            timeouts=TimeoutConfig(request_seconds=0),
        )

        errors = config.validate()

        assert "api_key is required" in errors
        assert any("base_url" in e for e in errors)
        assert "cache.price_ttl_seconds must not be negative" in errors
        assert "timeouts.request_seconds must be positive" in errors

    def test_to_policy(self):
        """Test cache settings become a TTL policy."""
        policy = CacheConfig(price_ttl_seconds=10, default_ttl_seconds=20).to_policy()

        assert policy.ttl_for(ResourceClass.PRICE) == 10
        assert policy.ttl_for(ResourceClass.TOKEN_METADATA) == 3600
        assert policy.ttl_for(None) == 20
