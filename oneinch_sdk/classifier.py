"""
Error Classifier - Normalizes any failure into one ErrorEnvelope.

============================================================
RULES (priority order)
============================================================
0. Already an OneInchError        -> its envelope, unchanged
1. Rejected before any request    -> VALIDATION_ERROR
2. Structured API error body      -> API_ERROR (fields verbatim)
3. Response body not decodable    -> SERIALIZATION_ERROR
4. Transport fault / timeout      -> TRANSPORT_ERROR / TIMEOUT_ERROR
5. Anything else                  -> UNKNOWN_ERROR

Pure with respect to its input: no network, no shared state.

============================================================
"""

import asyncio
import json
import logging
from typing import Any, Optional

import aiohttp

from oneinch_sdk.exceptions import (
    ErrorEnvelope,
    ErrorKind,
    OneInchError,
    error_for,
    meta_entries,
)


logger = logging.getLogger(__name__)

MAX_BODY_CHARS = 1000

API_ERROR_FIELDS = ("error", "description", "statusCode", "requestId")


# ============================================================
# RAW FAILURES (raised below the core)
# ============================================================

class HttpStatusError(Exception):
    """HTTP response with an error status."""

    def __init__(
        self,
        status: int,
        body: Optional[str] = None,
        url: Optional[str] = None,
        reason: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> None:
        super().__init__(f"HTTP {status} for {url}")
        self.status = status
        self.body = body
        self.url = url
        self.reason = reason
        self.request_id = request_id


class ResponseDecodeError(Exception):
    """Response body could not be decoded into the expected shape."""

    def __init__(
        self,
        message: str,
        body: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.body = body
        self.original_error = original_error


class InvalidParameterError(ValueError):
    """Caller-supplied parameter rejected before any request was made."""

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        value: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field_name = field_name
        self.value = value


# ============================================================
# CLASSIFIER
# ============================================================

class ErrorClassifier:
    """
    Maps raised failures onto the SDK error taxonomy.

    Usage:
        classifier = ErrorClassifier()
        envelope = classifier.classify(exc)
        raise classifier.to_exception(exc, operation="price.get_prices")
    """

    def classify(
        self,
        error: BaseException,
        operation: Optional[str] = None,
    ) -> ErrorEnvelope:
        """Convert a failure into exactly one ErrorEnvelope."""
        if isinstance(error, OneInchError):
            return error.envelope

        if isinstance(error, InvalidParameterError):
            return ErrorEnvelope(
                kind=ErrorKind.VALIDATION_ERROR,
                message=error.message,
                metadata=meta_entries([("field", error.field_name)]) if error.field_name else (),
                operation=operation,
            )

        if isinstance(error, HttpStatusError):
            return self._from_http_status(
                status=error.status,
                body=error.body,
                reason=error.reason,
                request_id=error.request_id,
                operation=operation,
            )

        # ContentTypeError is a ClientResponseError raised for a body that
        # is not JSON, so it is checked first.
        if isinstance(error, (ResponseDecodeError, json.JSONDecodeError, aiohttp.ContentTypeError)):
            return ErrorEnvelope(
                kind=ErrorKind.SERIALIZATION_ERROR,
                message=f"Failed to decode response: {self._describe(error)}",
                operation=operation,
            )

        if isinstance(error, aiohttp.ClientResponseError):
            return self._from_http_status(
                status=error.status,
                body=None,
                reason=error.message,
                request_id=None,
                operation=operation,
            )

        # Timeouts before generic transport faults: both asyncio.TimeoutError
        # and aiohttp.ServerTimeoutError are also OSError / ClientError.
        if isinstance(error, (asyncio.TimeoutError, TimeoutError, aiohttp.ServerTimeoutError)):
            return ErrorEnvelope(
                kind=ErrorKind.TIMEOUT_ERROR,
                message=f"Request timed out: {self._describe(error)}",
                operation=operation,
            )

        if isinstance(error, (aiohttp.ClientError, ConnectionError, OSError)):
            return ErrorEnvelope(
                kind=ErrorKind.TRANSPORT_ERROR,
                message=f"Network error: {self._describe(error)}",
                operation=operation,
            )

        return ErrorEnvelope(
            kind=ErrorKind.UNKNOWN_ERROR,
            message=self._describe(error),
            operation=operation,
        )

    def to_exception(
        self,
        error: BaseException,
        operation: Optional[str] = None,
    ) -> OneInchError:
        """Typed exception for a failure; OneInchError instances pass through."""
        if isinstance(error, OneInchError):
            return error
        return error_for(self.classify(error, operation), original_error=error)

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def _from_http_status(
        self,
        status: int,
        body: Optional[str],
        reason: Optional[str],
        request_id: Optional[str],
        operation: Optional[str],
    ) -> ErrorEnvelope:
        parsed = self._parse_api_error(body)

        if parsed is not None:
            body_status = parsed.get("statusCode")
            description = parsed.get("description")
            error_code = parsed.get("error")
            message = f"API Error [{status}]: {error_code} - {description}"
            return ErrorEnvelope(
                kind=ErrorKind.API_ERROR,
                message=message,
                http_status=status if status else self._as_int(body_status),
                request_id=parsed.get("requestId") or request_id,
                metadata=meta_entries(parsed.get("meta")),
                error_code=error_code,
                description=description,
                operation=operation,
            )

        text = (body or "")[:MAX_BODY_CHARS]
        return ErrorEnvelope(
            kind=ErrorKind.API_ERROR,
            message=f"HTTP {status}: {text or reason or 'no response body'}",
            http_status=status,
            request_id=request_id,
            error_code=reason,
            description=text or None,
            operation=operation,
        )

    @staticmethod
    def _parse_api_error(body: Optional[str]) -> Optional[dict[str, Any]]:
        """Structured `{error, description, statusCode, requestId, meta}` body, if any."""
        if not body:
            return None
        try:
            data = json.loads(body)
        except ValueError:
            logger.debug(f"Error body is not JSON: {body[:200]}")
            return None
        if not isinstance(data, dict):
            return None
        if not any(name in data for name in API_ERROR_FIELDS):
            return None
        meta = data.get("meta")
        if meta is not None and not isinstance(meta, list):
            data = {**data, "meta": None}
        return data

    @staticmethod
    def _as_int(value: Any) -> Optional[int]:
        try:
            return int(value) if value is not None else None
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _describe(error: BaseException) -> str:
        text = str(error)
        return text if text else error.__class__.__name__
