"""
Data models for the CLOB execution client.

This package contains the data structures used throughout the client,
following the state-first principle with immutable data structures.
"""

from .config import ConnectionConfig, LoopConfig
from .market import InstrumentMetadata
from .orders import (
    OrderRequest,
    OrderType,
    Side,
    SignedOrder,
    SubmitResult,
    UnsignedOrder,
)

__all__ = [
    # Configuration
    "ConnectionConfig",
    "LoopConfig",
    # Market
    "InstrumentMetadata",
    # Orders
    "OrderRequest",
    "OrderType",
    "Side",
    "SignedOrder",
    "SubmitResult",
    "UnsignedOrder",
]
