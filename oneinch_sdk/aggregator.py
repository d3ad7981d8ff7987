"""
Request Aggregator - Fan out independent operations, join outcomes.

============================================================
RULES
============================================================
- Every sub-operation is dispatched through the future facade
- A failing sub-operation never aborts the others
- Every input key appears exactly once in the result
- Partial failure is data, not an exception
- Raises only for bad input: empty (when required), duplicate keys

============================================================
"""

import concurrent.futures
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Generic, Hashable, Iterable, Iterator, Mapping, Optional, TypeVar, Union

from oneinch_sdk.classifier import ErrorClassifier
from oneinch_sdk.exceptions import (
    ErrorEnvelope,
    ErrorKind,
    OneInchError,
    ValidationError,
    error_for,
)
from oneinch_sdk.execution import ExecutionCore
from oneinch_sdk.operation import Operation


logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")

OperationInput = Union[Mapping[Any, Operation], Iterable[tuple[Any, Operation]]]


# ============================================================
# RESULT TYPES
# ============================================================

@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Value or error of one sub-operation."""
    value: Optional[T] = None
    error: Optional[ErrorEnvelope] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def get(self) -> T:
        """Return the value, or raise the recorded error."""
        if self.error is not None:
            raise error_for(self.error)
        return self.value


class AggregatedResult(Generic[K, T]):
    """
    Read-only outcome per key, in input order.

    Usage:
        result = aggregator.aggregate({"eth": op1, "bnb": op2})
        if not result.all_succeeded:
            for key, envelope in result.errors().items():
                logger.warning(f"{key}: {envelope}")
        prices = result.values()
    """

    def __init__(self, outcomes: dict[K, Outcome[T]]) -> None:
        self._outcomes = MappingProxyType(dict(outcomes))

    @property
    def outcomes(self) -> Mapping[K, Outcome[T]]:
        return self._outcomes

    @property
    def all_succeeded(self) -> bool:
        return all(outcome.succeeded for outcome in self._outcomes.values())

    def values(self) -> dict[K, T]:
        """Successful values by key."""
        return {key: o.value for key, o in self._outcomes.items() if o.succeeded}

    def errors(self) -> dict[K, ErrorEnvelope]:
        """Error envelopes by key."""
        return {key: o.error for key, o in self._outcomes.items() if not o.succeeded}

    def succeeded_keys(self) -> list[K]:
        return [key for key, o in self._outcomes.items() if o.succeeded]

    def failed_keys(self) -> list[K]:
        return [key for key, o in self._outcomes.items() if not o.succeeded]

    def keys(self) -> list[K]:
        return list(self._outcomes.keys())

    def __getitem__(self, key: K) -> Outcome[T]:
        return self._outcomes[key]

    def __contains__(self, key: object) -> bool:
        return key in self._outcomes

    def __iter__(self) -> Iterator[K]:
        return iter(self._outcomes)

    def __len__(self) -> int:
        return len(self._outcomes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "all_succeeded": self.all_succeeded,
            "values": {str(k): v for k, v in self.values().items()},
            "errors": {str(k): e.to_dict() for k, e in self.errors().items()},
        }

    def __repr__(self) -> str:
        return (
            f"AggregatedResult(succeeded={len(self.succeeded_keys())}, "
            f"failed={len(self.failed_keys())})"
        )


# ============================================================
# AGGREGATOR
# ============================================================

class RequestAggregator:
    """
    Runs keyed operations concurrently and merges their outcomes.

    Usage:
        aggregator = RequestAggregator(core)
        result = aggregator.aggregate([
            ("wallet-1", balance_op_1),
            ("wallet-2", balance_op_2),
        ])
    """

    def __init__(
        self,
        core: ExecutionCore,
        require_non_empty: bool = True,
        timeout: Optional[float] = None,
        classifier: Optional[ErrorClassifier] = None,
    ) -> None:
        self._core = core
        self._require_non_empty = require_non_empty
        self._timeout = timeout
        self._classifier = classifier or ErrorClassifier()

    def aggregate(
        self,
        operations: OperationInput,
        timeout: Optional[float] = None,
    ) -> AggregatedResult:
        """
        Dispatch all operations and wait for every one to settle.

        Args:
            operations: Mapping or ordered (key, Operation) pairs
            timeout: Overall wait in seconds; unfinished sub-operations
                are cancelled and recorded as TIMEOUT_ERROR

        Raises:
            ValidationError: Empty input (when required), duplicate or
                unhashable keys, or items that are not (key, Operation) pairs
        """
        pairs = self._normalize(operations)
        if not pairs:
            return AggregatedResult({})

        if self._core.runner.in_loop_thread():
            raise RuntimeError("Aggregation from the worker loop would deadlock")

        if timeout is None:
            timeout = self._timeout

        futures = [(key, op, self._core.future(op)) for key, op in pairs]
        concurrent.futures.wait([future for _, _, future in futures], timeout=timeout)

        outcomes: dict[Any, Outcome] = {}
        for key, op, future in futures:
            outcomes[key] = self._collect(op, future, timeout)

        result = AggregatedResult(outcomes)
        if not result.all_succeeded:
            logger.info(
                f"[aggregator] {len(result.failed_keys())}/{len(result)} "
                f"sub-operations failed: {result.failed_keys()}"
            )
        return result

    def _normalize(self, operations: OperationInput) -> list[tuple[Any, Operation]]:
        if isinstance(operations, Mapping):
            pairs = list(operations.items())
        else:
            pairs = []
            for index, pair in enumerate(operations):
                try:
                    key, op = pair
                except (TypeError, ValueError) as e:
                    raise ValidationError.from_message(
                        f"Aggregation item {index} is not a (key, operation) pair: {e}",
                        operation="aggregate",
                    ) from e
                pairs.append((key, op))

        if not pairs and self._require_non_empty:
            raise ValidationError.from_message(
                "Aggregation requires at least one operation",
                operation="aggregate",
            )

        seen: set = set()
        duplicates = []
        for key, op in pairs:
            if not isinstance(op, Operation):
                raise ValidationError.from_message(
                    f"Aggregation value for {key!r} is not an Operation: {type(op).__name__}",
                    operation="aggregate",
                )
            try:
                duplicate = key in seen
            except TypeError as e:
                raise ValidationError.from_message(
                    f"Aggregation key {key!r} is not hashable",
                    operation="aggregate",
                ) from e
            if duplicate:
                duplicates.append(key)
            seen.add(key)
        if duplicates:
            raise ValidationError.from_message(
                f"Duplicate aggregation keys: {duplicates}",
                operation="aggregate",
            )
        return pairs

    def _collect(
        self,
        op: Operation,
        future: concurrent.futures.Future,
        timeout: Optional[float],
    ) -> Outcome:
        # cancel() fails only if the sub-operation settled meanwhile.
        if not future.done() and future.cancel():
            return Outcome(error=ErrorEnvelope(
                kind=ErrorKind.TIMEOUT_ERROR,
                message=f"Sub-operation did not complete within {timeout}s",
                operation=op.name,
            ))

        if future.cancelled():
            return Outcome(error=ErrorEnvelope(
                kind=ErrorKind.UNKNOWN_ERROR,
                message="Sub-operation was cancelled",
                operation=op.name,
            ))

        error = future.exception()
        if error is None:
            return Outcome(value=future.result())
        if isinstance(error, OneInchError):
            return Outcome(error=error.envelope)
        return Outcome(error=self._classifier.classify(error, operation=op.name))
