"""
HTTP client for the CLOB API.

Handles request execution, response processing and error classification.
Requests are issued once; there is no retry layer.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Mapping, Optional, Tuple

import aiohttp
from aiohttp import ClientResponse, ClientSession

from .exceptions import ExchangeRejection, TransportError
from .models.config import ConnectionConfig

logger = logging.getLogger(__name__)

# Rejection wording that points at the auth headers rather than the order
_AUTH_MARKERS = (
    "signature",
    "api key",
    "api-key",
    "apikey",
    "timestamp",
    "passphrase",
    "unauthorized",
    "credentials",
)


def is_auth_failure(status: int, response_data: Any, response_text: str) -> bool:
    """Decide whether a rejection was caused by authentication."""
    if status in (401, 403):
        return True
    if isinstance(response_data, dict):
        message = " ".join(str(v) for v in response_data.values())
    else:
        message = response_text
    message = message.lower()
    return any(marker in message for marker in _AUTH_MARKERS)


class HttpClient:
    """HTTP client specialized for CLOB API interactions."""

    def __init__(self, config: ConnectionConfig):
        """Initialize HTTP client with configuration."""
        self._config = config

    @property
    def base_url(self) -> str:
        return self._config.base_url

    async def get_json(
        self,
        session: ClientSession,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Execute a public GET request and return the decoded JSON."""
        url = f"{self.base_url}{path}"
        try:
            async with session.get(url, params=params) as response:
                data, text = await self._process_response(response)
                if response.status >= 300:
                    raise self._rejection("Request rejected", response.status, data, text)
                if data is None:
                    raise ExchangeRejection(
                        f"Invalid JSON response (Status {response.status}): {text[:200]}",
                        status_code=response.status,
                        response_text=text,
                    )
                return data
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"GET {path} failed: {e!r}") from e

    async def post_bytes(
        self,
        session: ClientSession,
        path: str,
        body: bytes,
        headers: Mapping[str, str],
    ) -> Tuple[int, Any]:
        """
        POST pre-serialized body bytes exactly as given.

        Returns:
            Tuple of (status, decoded body). The body falls back to the raw
            text when it is not JSON.

        Raises:
            ExchangeRejection: non-2xx status, with the payload attached
            TransportError: connection or IO failure
        """
        url = f"{self.base_url}{path}"
        try:
            async with session.post(url, data=body, headers=dict(headers)) as response:
                data, text = await self._process_response(response)
                if not 200 <= response.status < 300:
                    raise self._rejection("Order rejected", response.status, data, text)
                return response.status, data if data is not None else text
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"POST {path} failed: {e!r}") from e

    async def _process_response(self, response: ClientResponse) -> Tuple[Any, str]:
        """Read the response body; returns (parsed JSON or None, raw text)."""
        # Proxy error pages are not always valid UTF-8
        response_text = (await response.read()).decode("utf-8", errors="replace")

        if not response_text:
            return None, ""

        try:
            return json.loads(response_text), response_text
        except json.JSONDecodeError:
            return None, response_text

    def _rejection(
        self, default_kind: str, status: int, data: Any, text: str
    ) -> ExchangeRejection:
        auth_failure = is_auth_failure(status, data, text)
        kind = "Authentication failed" if auth_failure else default_kind
        logger.warning(f"{kind}: HTTP {status}: {text[:500]}")
        return ExchangeRejection(
            f"{kind} (HTTP {status}): {text[:500]}",
            status_code=status,
            response_data=data if data is not None else text,
            response_text=text,
            auth_failure=auth_failure,
        )
