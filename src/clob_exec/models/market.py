"""
Market-related models for the CLOB execution client.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class InstrumentMetadata:
    """Per-instrument trading parameters, fixed for the session."""
    token_id: int
    tick_size: Decimal
    neg_risk: bool
    fee_rate_bps: int
