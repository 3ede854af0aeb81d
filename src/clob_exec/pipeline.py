"""
Order pipeline: build, sign and serialize.

Each order is built against cached metadata, signed exactly once by the
signing capability, and serialized exactly once. The serialized bytes are
what both the request body and the auth signature use.
"""

import asyncio
import json
import logging
import time
from concurrent.futures import Executor
from typing import Any, Mapping, Optional, Protocol

from .exceptions import OrderBuildError, SigningError
from .metadata import MetadataCache
from .models.orders import OrderRequest, OrderType, Side, SignedOrder, UnsignedOrder

logger = logging.getLogger(__name__)


class OrderSigningCapability(Protocol):
    """Produces the signed typed-data order for an unsigned order."""

    def sign_order(self, unsigned: UnsignedOrder) -> Mapping[str, Any]:
        ...


def _json_default(value: Any) -> Any:
    # Decimals and other non-JSON scalars go out as exact strings
    return str(value)


class OrderPipeline:
    """Turns order requests into signed, serialized orders."""

    def __init__(
        self,
        metadata: MetadataCache,
        signer: OrderSigningCapability,
        executor: Optional[Executor] = None,
    ):
        self._metadata = metadata
        self._signer = signer
        self._executor = executor

    def build(self, request: OrderRequest) -> UnsignedOrder:
        """
        Validate a request against its cached metadata.

        Raises:
            OrderBuildError: invalid fields or no cached metadata
        """
        try:
            metadata = self._metadata.get(request.token_id)
        except KeyError:
            raise OrderBuildError(
                f"No cached metadata for token {request.token_id}; warm up first"
            ) from None

        if not isinstance(request.side, Side):
            raise OrderBuildError(f"Invalid side: {request.side!r}")
        if request.order_type is not OrderType.GTC:
            raise OrderBuildError(f"Unsupported order type: {request.order_type!r}")
        if request.size <= 0:
            raise OrderBuildError(f"Size must be positive, got {request.size}")
        if request.price <= 0:
            raise OrderBuildError(f"Price must be positive, got {request.price}")

        tick = metadata.tick_size
        if request.price < tick or request.price > 1 - tick:
            raise OrderBuildError(
                f"Price {request.price} outside [{tick}, {1 - tick}] for tick size {tick}"
            )

        return UnsignedOrder(request=request, metadata=metadata)

    async def sign(self, unsigned: UnsignedOrder) -> SignedOrder:
        """
        Sign the order through the signing capability, once.

        Raises:
            SigningError: the capability rejected the order
        """
        loop = asyncio.get_running_loop()
        start = time.perf_counter()
        try:
            payload = await loop.run_in_executor(
                self._executor, self._signer.sign_order, unsigned
            )
        except Exception as e:
            raise SigningError(f"Order signing failed: {e}") from e
        sign_ms = (time.perf_counter() - start) * 1000

        if not isinstance(payload, Mapping):
            raise SigningError(f"Signer returned {type(payload).__name__}, expected a mapping")

        return SignedOrder(request=unsigned.request, payload=payload, sign_ms=sign_ms)

    @staticmethod
    def serialize(signed: SignedOrder, owner: str) -> bytes:
        """Serialize the order body. Call once per order and reuse the bytes."""
        body = {
            "order": dict(signed.payload),
            "owner": owner,
            "orderType": signed.request.order_type.value,
        }
        return json.dumps(
            body, separators=(",", ":"), ensure_ascii=False, default=_json_default
        ).encode("utf-8")
