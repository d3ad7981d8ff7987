"""
Operation - One remote request, authored once.

An Operation is a stateless description of a request: how to produce
it, how to decode it, whether and for how long its result may be
cached. It is reusable; every execution calls the producer anew.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from oneinch_sdk.cache import ResourceClass


T = TypeVar("T")

Producer = Callable[[], Awaitable[Any]]
Validator = Callable[[], None]
Decoder = Callable[[Any], Any]


@dataclass(frozen=True)
class Operation(Generic[T]):
    """
    Description of one asynchronous request.

    Attributes:
        producer: No-arg coroutine function performing the request
        name: Label used in logs and error envelopes
        cache_key: Key for the response cache (None = never cached)
        resource_class: Selects the TTL of cached results
        idempotent: False for requests that must never be served from cache
        validators: Run before the cache and the producer; raise on bad input
        decoder: Maps the raw response onto the returned value
    """
    producer: Producer
    name: str = "operation"
    cache_key: Optional[str] = None
    resource_class: Optional[ResourceClass] = None
    idempotent: bool = True
    validators: tuple[Validator, ...] = ()
    decoder: Optional[Decoder] = None

    @property
    def cacheable(self) -> bool:
        return self.cache_key is not None and self.idempotent


def _normalize_part(part: Any) -> str:
    if part is None:
        return ""
    if isinstance(part, bool):
        return "true" if part else "false"
    if isinstance(part, str):
        return part.lower()
    if isinstance(part, (list, tuple)):
        return ",".join(_normalize_part(item) for item in part)
    if isinstance(part, dict):
        return ",".join(
            f"{_normalize_part(k)}={_normalize_part(v)}"
            for k, v in sorted(part.items())
        )
    return str(part)


def unordered(values: Any) -> Any:
    """
    Order-independent form of a collection key part.

    Items sort by their normalized form, so None and mixed types are
    accepted here and left for the validators to reject.
    """
    if values is None:
        return []
    if isinstance(values, (list, tuple, set, frozenset)):
        return sorted(values, key=_normalize_part)
    return values


def build_cache_key(namespace: str, *parts: Any) -> str:
    """
    Build a cache key from a namespace and request parameters.

    Example:
        build_cache_key("price", 1, ["0xA", "0xB"], "USD")
        -> "price:1:0xa,0xb:usd"
    """
    return ":".join([namespace] + [_normalize_part(part) for part in parts])
