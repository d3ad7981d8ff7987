"""
Base Service - Shared plumbing for endpoint services.

Every endpoint method builds one Operation and returns it bound to
the execution core as a Call, so each endpoint is written once and
is usable blocking, as a future, or reactively.
"""

import logging
from typing import Any, Callable, Iterable, Optional

from oneinch_sdk.aggregator import AggregatedResult, RequestAggregator
from oneinch_sdk.cache import ResourceClass
from oneinch_sdk.execution import Call, ExecutionCore
from oneinch_sdk.http import HttpTransport
from oneinch_sdk.operation import Decoder, Operation, Validator, build_cache_key


logger = logging.getLogger(__name__)


class BaseService:
    """
    Base class for endpoint services.

    Subclasses set `name` and expose one method per endpoint:

        class PriceService(BaseService):
            name = "price"

            def get_currencies(self, chain_id: int) -> Call:
                return self._get(
                    "get_currencies",
                    f"price/v1.1/{chain_id}/currencies",
                    cache_key=self._key("get_currencies", chain_id),
                    resource_class=ResourceClass.TOKEN_METADATA,
                )
    """

    name = "service"

    def __init__(
        self,
        core: ExecutionCore,
        transport: HttpTransport,
        aggregator: Optional[RequestAggregator] = None,
    ) -> None:
        self._core = core
        self._transport = transport
        self._aggregator = aggregator or RequestAggregator(core)

    def _key(self, method: str, *parts: Any) -> str:
        return build_cache_key(f"{self.name}.{method}", *parts)

    def _operation(
        self,
        method: str,
        producer: Callable[[], Any],
        cache_key: Optional[str] = None,
        resource_class: Optional[ResourceClass] = None,
        idempotent: bool = True,
        validators: Iterable[Validator] = (),
        decoder: Optional[Decoder] = None,
    ) -> Operation:
        return Operation(
            producer=producer,
            name=f"{self.name}.{method}",
            cache_key=cache_key,
            resource_class=resource_class,
            idempotent=idempotent,
            validators=tuple(validators),
            decoder=decoder,
        )

    def _get_operation(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        **options: Any,
    ) -> Operation:
        async def producer() -> Any:
            return await self._transport.get(path, params)

        return self._operation(method, producer, **options)

    def _post_operation(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: Optional[dict[str, Any]] = None,
        **options: Any,
    ) -> Operation:
        async def producer() -> Any:
            return await self._transport.post(path, body, params)

        return self._operation(method, producer, **options)

    def _get(self, method: str, path: str, params: Optional[dict[str, Any]] = None, **options: Any) -> Call:
        return self._core.call(self._get_operation(method, path, params, **options))

    def _post(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: Optional[dict[str, Any]] = None,
        **options: Any,
    ) -> Call:
        return self._core.call(self._post_operation(method, path, body, params, **options))

    def _aggregate(
        self,
        operations: Iterable[tuple[Any, Operation]],
        timeout: Optional[float] = None,
    ) -> AggregatedResult:
        return self._aggregator.aggregate(list(operations), timeout=timeout)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
