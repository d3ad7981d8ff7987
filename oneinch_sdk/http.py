"""
HTTP Transport - Authenticated JSON requests to the 1inch API.

Raises raw failures only (HttpStatusError, ResponseDecodeError,
aiohttp / asyncio errors); the execution core classifies them.
"""

import json
import logging
import time
from typing import Any, Optional

import aiohttp

from oneinch_sdk.classifier import HttpStatusError, ResponseDecodeError


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.1inch.dev"
DEFAULT_USER_AGENT = "oneinch-sdk-python/1.0"
REQUEST_ID_HEADERS = ("x-request-id", "request-id", "x-amzn-requestid")


def _param_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def normalize_params(params: Optional[dict[str, Any]]) -> list[tuple[str, str]]:
    """
    Query parameters as ordered string pairs.

    None values are dropped, booleans become `true`/`false`,
    sequences become one repeated parameter per item.
    """
    if not params:
        return []
    normalized: list[tuple[str, str]] = []
    for name, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            normalized.extend((name, _param_value(item)) for item in value)
        else:
            normalized.append((name, _param_value(value)))
    return normalized


class HttpTransport:
    """
    aiohttp-based transport bound to one API key.

    The session is created lazily on first use, on the loop that
    runs the request.

    Usage:
        transport = HttpTransport(api_key="...")
        quote = await transport.get("swap/v6.1/1/quote", {"src": ..., "dst": ..., "amount": ...})
        await transport.close()
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        connect_timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._connect_timeout = connect_timeout
        self._session = session
        self._owns_session = session is None
        self._user_agent = user_agent

        # Counters
        self._request_count = 0
        self._error_count = 0

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(
                    total=self._timeout,
                    connect=self._connect_timeout,
                ),
                headers=self._get_default_headers(),
            )
            self._owns_session = True
        return self._session

    def _get_default_headers(self) -> dict[str, str]:
        """Get default HTTP headers."""
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {self._api_key}",
            "User-Agent": self._user_agent,
        }

    def url_for(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(
        self,
        path: str,
        body: Any = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        return await self.request("POST", path, params=params, body=body)

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        body: Any = None,
    ) -> Any:
        """Make HTTP request and decode the JSON body."""
        session = await self._get_session()
        url = self.url_for(path)
        headers = None if self._owns_session else self._get_default_headers()

        self._request_count += 1
        start_time = time.time()
        async with session.request(
            method,
            url,
            params=normalize_params(params),
            json=body,
            headers=headers,
        ) as response:
            if response.status >= 400:
                text = await response.text(errors="replace")
                latency_ms = (time.time() - start_time) * 1000
                self._error_count += 1
                logger.debug(f"[http] {method} {path} -> {response.status} in {latency_ms:.1f}ms")
                raise HttpStatusError(
                    status=response.status,
                    body=text,
                    url=url,
                    reason=response.reason,
                    request_id=self._request_id(response.headers),
                )

            try:
                text = await response.text()
            except UnicodeDecodeError as e:
                raise ResponseDecodeError(
                    f"Undecodable body from {url}: {e}",
                    body=repr(e.object[:200]),
                    original_error=e,
                ) from e

            latency_ms = (time.time() - start_time) * 1000
            logger.debug(f"[http] {method} {path} -> {response.status} in {latency_ms:.1f}ms")
            return self._decode(text, url)

    @staticmethod
    def _decode(text: str, url: str) -> Any:
        if not text or not text.strip():
            return None
        try:
            return json.loads(text)
        except ValueError as e:
            raise ResponseDecodeError(
                f"Invalid JSON from {url}: {e}",
                body=text[:1000],
                original_error=e,
            ) from e

    @staticmethod
    def _request_id(headers: Any) -> Optional[str]:
        if not headers:
            return None
        for name in REQUEST_ID_HEADERS:
            value = headers.get(name) or headers.get(name.title())
            if value:
                return value
        return None

    def get_stats(self) -> dict[str, int]:
        return {
            "requests": self._request_count,
            "errors": self._error_count,
        }

    async def close(self) -> None:
        if self._session and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"HttpTransport(base_url={self._base_url!r})"
