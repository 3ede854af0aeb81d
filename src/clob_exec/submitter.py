"""
Order submitter.

Attaches fresh auth headers computed over the exact body bytes and POSTs
them over the shared keep-alive session.
"""

import hashlib
import logging
import time
from typing import Any, Optional

from aiohttp import ClientSession

from .auth import HeaderSigner
from .exceptions import ClobExecError
from .http_client import HttpClient
from .models.orders import SubmitResult

logger = logging.getLogger(__name__)


def extract_order_id(body: Any) -> Optional[str]:
    """Pull the order identifier out of a success payload."""
    if not isinstance(body, dict):
        return None
    for key in ("orderID", "orderId", "order_id", "id"):
        value = body.get(key)
        if value:
            return str(value)
    return None


class Submitter:
    """POSTs serialized orders and times the network leg."""

    def __init__(self, http_client: HttpClient, header_signer: HeaderSigner, order_path: str):
        self._http_client = http_client
        self._header_signer = header_signer
        self._order_path = order_path
        self.last_post_ms = 0.0

    @property
    def order_path(self) -> str:
        return self._order_path

    async def submit(self, session: ClientSession, body: bytes) -> SubmitResult:
        """
        Authenticate and POST one order body.

        ``last_post_ms`` holds the POST duration even when the call raises.

        Raises:
            AuthHeaderError: headers could not be computed
            ExchangeRejection: non-2xx response, payload attached
            TransportError: connection or IO failure
        """
        self.last_post_ms = 0.0
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Body SHA256: {hashlib.sha256(body).hexdigest()}")

        headers = self._header_signer.build_headers("POST", self._order_path, body)

        start = time.perf_counter()
        try:
            status, response_body = await self._http_client.post_bytes(
                session, self._order_path, body, headers
            )
        except ClobExecError:
            self.last_post_ms = (time.perf_counter() - start) * 1000
            raise
        post_ms = (time.perf_counter() - start) * 1000
        self.last_post_ms = post_ms

        return SubmitResult(
            status=status,
            body=response_body,
            post_ms=post_ms,
            order_id=extract_order_id(response_body),
        )
