"""
SDK Exceptions - Error taxonomy shared by every calling convention.

============================================================
ERROR KINDS
============================================================
1. API_ERROR           - Upstream rejected the request
2. TRANSPORT_ERROR     - No response obtained (refused, reset, DNS)
3. TIMEOUT_ERROR       - No response obtained in time
4. SERIALIZATION_ERROR - Response received but not decodable
5. VALIDATION_ERROR    - Input rejected before any network attempt
6. UNKNOWN_ERROR       - Unclassified

============================================================
EXCEPTION HIERARCHY
============================================================
OneInchError (carries an ErrorEnvelope)
├── ApiError
├── TransportError
│   └── RequestTimeoutError
├── SerializationError
├── ValidationError
└── UnknownError

ConfigurationError is separate: it is raised while building a
client, never by an operation.

============================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Optional


# ============================================================
# ERROR TAXONOMY
# ============================================================

class ErrorKind(Enum):
    """Normalized failure kinds."""

    API_ERROR = "API_ERROR"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    SERIALIZATION_ERROR = "SERIALIZATION_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"

    @property
    def retryable(self) -> bool:
        """Whether the caller may safely retry. This layer never does."""
        return self in (ErrorKind.TRANSPORT_ERROR, ErrorKind.TIMEOUT_ERROR)


@dataclass(frozen=True)
class MetaEntry:
    """One `{type, value}` item from an API error body."""

    type: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "value": self.value}


# ============================================================
# ERROR ENVELOPE
# ============================================================

@dataclass(frozen=True)
class ErrorEnvelope:
    """
    Facade-agnostic representation of a failure.

    Immutable; the same instance travels to the blocking exception,
    the failed future and the reactive error event.
    """

    kind: ErrorKind
    message: str
    http_status: Optional[int] = None
    request_id: Optional[str] = None
    metadata: tuple[MetaEntry, ...] = ()

    # Upstream error body fields
    error_code: Optional[str] = None
    description: Optional[str] = None

    # Context
    operation: Optional[str] = None
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
        compare=False,
    )

    def is_retryable(self) -> bool:
        return self.kind.retryable

    def meta_value(self, meta_type: str) -> Optional[str]:
        """Value of the first metadata entry with the given type."""
        for entry in self.metadata:
            if entry.type == meta_type:
                return entry.value
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "http_status": self.http_status,
            "request_id": self.request_id,
            "metadata": [entry.to_dict() for entry in self.metadata],
            "error_code": self.error_code,
            "description": self.description,
            "operation": self.operation,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        parts = [f"[{self.kind.value}] {self.message}"]
        if self.http_status is not None:
            parts.append(f"(status={self.http_status})")
        if self.request_id:
            parts.append(f"(request_id={self.request_id})")
        return " ".join(parts)


def meta_entries(raw: Optional[Iterable[Any]]) -> tuple[MetaEntry, ...]:
    """Build ordered metadata from `[{type, value}]` or `(type, value)` items."""
    if not raw:
        return ()
    entries: list[MetaEntry] = []
    for item in raw:
        if isinstance(item, MetaEntry):
            entries.append(item)
        elif isinstance(item, dict):
            entries.append(MetaEntry(
                type=str(item.get("type", "")),
                value=str(item.get("value", "")),
            ))
        else:
            meta_type, value = item
            entries.append(MetaEntry(type=str(meta_type), value=str(value)))
    return tuple(entries)


# ============================================================
# OPERATION FAILURES
# ============================================================

class OneInchError(Exception):
    """Base exception for every failed operation."""

    kind: ErrorKind = ErrorKind.UNKNOWN_ERROR

    def __init__(
        self,
        envelope: ErrorEnvelope,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(str(envelope))
        self.envelope = envelope
        self.original_error = original_error

    @classmethod
    def from_message(cls, message: str, **kwargs: Any) -> "OneInchError":
        """Create an error of this class's kind from a plain message."""
        return cls(ErrorEnvelope(kind=cls.kind, message=message, **kwargs))

    @property
    def message(self) -> str:
        return self.envelope.message

    @property
    def http_status(self) -> Optional[int]:
        return self.envelope.http_status

    @property
    def request_id(self) -> Optional[str]:
        return self.envelope.request_id

    @property
    def metadata(self) -> tuple[MetaEntry, ...]:
        return self.envelope.metadata

    @property
    def description(self) -> Optional[str]:
        return self.envelope.description

    @property
    def error_code(self) -> Optional[str]:
        return self.envelope.error_code

    def is_retryable(self) -> bool:
        return self.envelope.is_retryable()

    def to_dict(self) -> dict[str, Any]:
        data = self.envelope.to_dict()
        data["error_type"] = self.__class__.__name__
        data["original_error"] = repr(self.original_error) if self.original_error else None
        return data


class ApiError(OneInchError):
    """Upstream rejected the request."""

    kind = ErrorKind.API_ERROR

    def is_rate_limited(self) -> bool:
        return self.http_status == 429

    def is_server_error(self) -> bool:
        return self.http_status is not None and 500 <= self.http_status < 600

    def is_client_error(self) -> bool:
        return self.http_status is not None and 400 <= self.http_status < 500


class TransportError(OneInchError):
    """No response was obtained."""

    kind = ErrorKind.TRANSPORT_ERROR


class RequestTimeoutError(TransportError):
    """No response was obtained in time."""

    kind = ErrorKind.TIMEOUT_ERROR


class SerializationError(OneInchError):
    """Response body could not be decoded into the expected shape."""

    kind = ErrorKind.SERIALIZATION_ERROR


class ValidationError(OneInchError):
    """Caller input rejected before any network attempt."""

    kind = ErrorKind.VALIDATION_ERROR


class UnknownError(OneInchError):
    """Failure that matched no other kind."""

    kind = ErrorKind.UNKNOWN_ERROR


ERROR_TYPES: dict[ErrorKind, type[OneInchError]] = {
    ErrorKind.API_ERROR: ApiError,
    ErrorKind.TRANSPORT_ERROR: TransportError,
    ErrorKind.TIMEOUT_ERROR: RequestTimeoutError,
    ErrorKind.SERIALIZATION_ERROR: SerializationError,
    ErrorKind.VALIDATION_ERROR: ValidationError,
    ErrorKind.UNKNOWN_ERROR: UnknownError,
}


def error_for(
    envelope: ErrorEnvelope,
    original_error: Optional[BaseException] = None,
) -> OneInchError:
    """Instantiate the exception class matching the envelope's kind."""
    return ERROR_TYPES[envelope.kind](envelope, original_error)


# ============================================================
# CONFIGURATION
# ============================================================

class ConfigurationError(Exception):
    """Invalid or missing client configuration."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        errors: Optional[list[str]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.config_key = config_key
        self.errors = errors or []

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "config_key": self.config_key,
            "errors": self.errors,
        }


# ============================================================
# LIFECYCLE
# ============================================================

class ClientClosedError(RuntimeError):
    """Operation started on a client whose worker loop is not running."""

    def __init__(self, message: str, operation: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "operation": self.operation,
        }
