"""
SDK Configuration.

============================================================
RESPONSIBILITY
============================================================
Client settings with environment overrides.

- API key resolution (explicit > ONEINCH_API_KEY > ONE_INCH_API_KEY)
- Cache TTLs per resource class
- Request, blocking, aggregation and shutdown timeouts
- `.env` files are honoured through python-dotenv

============================================================
"""

from dataclasses import dataclass, field
from typing import List, Optional
import os

from dotenv import load_dotenv

from oneinch_sdk.cache import ResourceClass, TTLPolicy
from oneinch_sdk.exceptions import ConfigurationError
from oneinch_sdk.http import DEFAULT_BASE_URL


API_KEY_ENV_VARS = ("ONEINCH_API_KEY", "ONE_INCH_API_KEY")


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}", config_key=name)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def resolve_api_key(explicit: Optional[str] = None) -> str:
    """
    Resolve the API key.

    Raises:
        ConfigurationError: If no key is configured anywhere
    """
    if explicit:
        return explicit
    for name in API_KEY_ENV_VARS:
        value = os.getenv(name)
        if value:
            return value
    raise ConfigurationError(
        f"API key not found. Pass api_key or set one of: {', '.join(API_KEY_ENV_VARS)}",
        config_key=API_KEY_ENV_VARS[0],
    )


# ============================================================
# CACHE CONFIGURATION
# ============================================================

@dataclass
class CacheConfig:
    """Response cache settings."""

    enabled: bool = True
    """Serve idempotent reads from cache."""

    price_ttl_seconds: float = 30.0
    """TTL for spot prices and quotes."""

    token_metadata_ttl_seconds: float = 3600.0
    """TTL for token lists, token details and spender addresses."""

    portfolio_ttl_seconds: float = 300.0
    """TTL for balances and portfolio analytics."""

    default_ttl_seconds: float = 60.0
    """TTL for cacheable operations without a resource class."""

    sweep_interval_seconds: Optional[float] = None
    """Periodic expiry sweep interval (None = lazy expiry only)."""

    @classmethod
    def from_env(cls) -> "CacheConfig":
        """Load configuration from environment variables."""
        return cls(
            enabled=_env_bool("ONEINCH_CACHE_ENABLED", True),
            price_ttl_seconds=_env_float("ONEINCH_CACHE_PRICE_TTL_SECONDS", 30.0),
            token_metadata_ttl_seconds=_env_float("ONEINCH_CACHE_TOKEN_METADATA_TTL_SECONDS", 3600.0),
            portfolio_ttl_seconds=_env_float("ONEINCH_CACHE_PORTFOLIO_TTL_SECONDS", 300.0),
            default_ttl_seconds=_env_float("ONEINCH_CACHE_DEFAULT_TTL_SECONDS", 60.0),
            sweep_interval_seconds=_env_float("ONEINCH_CACHE_SWEEP_INTERVAL_SECONDS", None),
        )

    def to_policy(self) -> TTLPolicy:
        return TTLPolicy(
            {
                ResourceClass.PRICE: self.price_ttl_seconds,
                ResourceClass.TOKEN_METADATA: self.token_metadata_ttl_seconds,
                ResourceClass.PORTFOLIO: self.portfolio_ttl_seconds,
            },
            default_ttl=self.default_ttl_seconds,
        )

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []
        for name in (
            "price_ttl_seconds",
            "token_metadata_ttl_seconds",
            "portfolio_ttl_seconds",
            "default_ttl_seconds",
        ):
            if getattr(self, name) < 0:
                errors.append(f"cache.{name} must not be negative")
        if self.sweep_interval_seconds is not None and self.sweep_interval_seconds <= 0:
            errors.append("cache.sweep_interval_seconds must be positive")
        return errors


# ============================================================
# TIMEOUT CONFIGURATION
# ============================================================

@dataclass
class TimeoutConfig:
    """Timeouts, all in seconds."""

    request_seconds: float = 30.0
    """Total time for one HTTP request."""

    connect_seconds: float = 10.0
    """Time to establish a connection."""

    blocking_seconds: Optional[float] = None
    """Default wait of the blocking facade (None = wait forever)."""

    aggregate_seconds: Optional[float] = None
    """Default overall wait of an aggregation (None = wait forever)."""

    shutdown_seconds: float = 5.0
    """Time allowed for in-flight work when the client closes."""

    @classmethod
    def from_env(cls) -> "TimeoutConfig":
        """Load configuration from environment variables."""
        return cls(
            request_seconds=_env_float("ONEINCH_REQUEST_TIMEOUT_SECONDS", 30.0),
            connect_seconds=_env_float("ONEINCH_CONNECT_TIMEOUT_SECONDS", 10.0),
            blocking_seconds=_env_float("ONEINCH_BLOCKING_TIMEOUT_SECONDS", None),
            aggregate_seconds=_env_float("ONEINCH_AGGREGATE_TIMEOUT_SECONDS", None),
            shutdown_seconds=_env_float("ONEINCH_SHUTDOWN_TIMEOUT_SECONDS", 5.0),
        )

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []
        if self.request_seconds <= 0:
            errors.append("timeouts.request_seconds must be positive")
        if self.connect_seconds <= 0:
            errors.append("timeouts.connect_seconds must be positive")
        if self.blocking_seconds is not None and self.blocking_seconds <= 0:
            errors.append("timeouts.blocking_seconds must be positive")
        if self.aggregate_seconds is not None and self.aggregate_seconds <= 0:
            errors.append("timeouts.aggregate_seconds must be positive")
        if self.shutdown_seconds < 0:
            errors.append("timeouts.shutdown_seconds must not be negative")
        return errors


# ============================================================
# CLIENT CONFIGURATION
# ============================================================

@dataclass
class ClientConfig:
    """Top-level client configuration."""

    api_key: Optional[str] = None
    """Bearer token for the 1inch API."""

    base_url: str = DEFAULT_BASE_URL
    """API root."""

    cache: CacheConfig = field(default_factory=CacheConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)

    @classmethod
    def from_env(
        cls,
        api_key: Optional[str] = None,
        load_env_file: bool = True,
    ) -> "ClientConfig":
        """
        Load configuration from environment variables.

        Args:
            api_key: Explicit key, takes precedence over the environment
            load_env_file: Read a `.env` file into the environment first

        Raises:
            ConfigurationError: If no API key is configured
        """
        if load_env_file:
            load_dotenv()
        return cls(
            api_key=resolve_api_key(api_key),
            base_url=os.getenv("ONEINCH_BASE_URL", DEFAULT_BASE_URL),
            cache=CacheConfig.from_env(),
            timeouts=TimeoutConfig.from_env(),
        )

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []
        if not self.api_key:
            errors.append("api_key is required")
        if not self.base_url.startswith(("http://", "https://")):
            errors.append(f"base_url must be an http(s) URL: {self.base_url}")
        errors.extend(self.cache.validate())
        errors.extend(self.timeouts.validate())
        return errors
