"""
Order-related models for the CLOB execution client.

Immutable data structures for order construction and submission.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from ..utils import parse_token_id, to_decimal
from .market import InstrumentMetadata


class Side(Enum):
    """Order side enumeration."""
    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def parse(cls, value: Union[str, "Side"]) -> "Side":
        if isinstance(value, Side):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Invalid order side: {value!r}") from None


class OrderType(Enum):
    """Order type enumeration. Only good-till-canceled is submitted."""
    GTC = "GTC"


@dataclass(frozen=True)
class OrderRequest:
    """User-supplied order parameters."""
    token_id: int
    price: Decimal
    size: Decimal
    side: Side
    order_type: OrderType = OrderType.GTC

    @classmethod
    def parse(
        cls,
        token_id: Union[str, int],
        price: Union[str, Decimal],
        size: Union[str, Decimal],
        side: Union[str, Side] = Side.BUY,
    ) -> "OrderRequest":
        """Build a request from raw input, rejecting malformed values."""
        return cls(
            token_id=parse_token_id(token_id),
            price=to_decimal(price),
            size=to_decimal(size),
            side=Side.parse(side),
        )

    def to_dict(self) -> Dict[str, str]:
        """Plain representation with decimals kept as exact strings."""
        return {
            "token_id": str(self.token_id),
            "price": str(self.price),
            "size": str(self.size),
            "side": self.side.value,
            "order_type": self.order_type.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OrderRequest":
        request = cls.parse(data["token_id"], data["price"], data["size"], data["side"])
        order_type = data.get("order_type", OrderType.GTC.value)
        if order_type != OrderType.GTC.value:
            raise ValueError(f"Unsupported order type: {order_type!r}")
        return request


@dataclass(frozen=True)
class UnsignedOrder:
    """A validated order bound to its instrument metadata."""
    request: OrderRequest
    metadata: InstrumentMetadata

    @property
    def token_id(self) -> int:
        return self.request.token_id


@dataclass(frozen=True)
class SignedOrder:
    """
    Signed order as produced by the signing capability.

    ``payload`` is the opaque signed order mapping (salt, amounts,
    signature, ...) and is serialized unchanged.
    """
    request: OrderRequest
    payload: Mapping[str, Any]
    sign_ms: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    @property
    def signature(self) -> Optional[str]:
        return self.payload.get("signature")


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of a successful order POST."""
    status: int
    body: Any
    post_ms: float
    order_id: Optional[str] = None
