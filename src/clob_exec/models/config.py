"""
Configuration models for the CLOB execution client.

Immutable configuration structures following state-first design.
"""

import os
from dataclasses import dataclass
from typing import Optional

from ..constants import (
    DEFAULT_CHAIN_ID,
    DEFAULT_DELAY_SECONDS,
    DEFAULT_HOST,
    DEFAULT_ITERATIONS,
    DEFAULT_ORDER_PATH,
    DEFAULT_TIMEOUT,
    SIGNATURE_TYPE_POLY_GNOSIS_SAFE,
)
from ..utils import validate_path, validate_url


@dataclass(frozen=True)
class ConnectionConfig:
    """Configuration for the exchange connection."""
    host: str = DEFAULT_HOST
    chain_id: int = DEFAULT_CHAIN_ID
    order_path: str = DEFAULT_ORDER_PATH
    timeout: float = DEFAULT_TIMEOUT
    signature_type: int = SIGNATURE_TYPE_POLY_GNOSIS_SAFE
    funder: Optional[str] = None
    raw_secret_key: bool = False  # HMAC keyed with the secret string instead of its decoded bytes

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not validate_url(self.host):
            raise ValueError(f"Host must be a valid HTTP/HTTPS URL, got {self.host!r}")
        if not validate_path(self.order_path):
            raise ValueError(
                f"Order path must be an absolute path without query, got {self.order_path!r}"
            )
        if self.timeout <= 0:
            raise ValueError("Timeout must be positive")
        if self.chain_id <= 0:
            raise ValueError("Chain id must be positive")

    @property
    def base_url(self) -> str:
        return self.host.rstrip("/")

    @property
    def order_url(self) -> str:
        return f"{self.base_url}{self.order_path}"

    @classmethod
    def from_env(cls) -> "ConnectionConfig":
        """Create configuration from environment variables."""
        funder = os.getenv("CLOB_FUNDER") or None
        return cls(
            host=os.getenv("CLOB_HOST", DEFAULT_HOST),
            chain_id=int(os.getenv("CLOB_CHAIN_ID", str(DEFAULT_CHAIN_ID))),
            order_path=os.getenv("CLOB_ORDER_PATH", DEFAULT_ORDER_PATH),
            timeout=float(os.getenv("CLOB_TIMEOUT", str(DEFAULT_TIMEOUT))),
            signature_type=int(
                os.getenv("CLOB_SIGNATURE_TYPE", str(SIGNATURE_TYPE_POLY_GNOSIS_SAFE))
            ),
            funder=funder,
            raw_secret_key=os.getenv("CLOB_RAW_SECRET_KEY", "").lower() in ("1", "true", "yes"),
        )


@dataclass(frozen=True)
class LoopConfig:
    """Configuration for the submission loop."""
    iterations: int = DEFAULT_ITERATIONS
    delay: float = DEFAULT_DELAY_SECONDS
    warmup: int = 0
    max_consecutive_failures: int = 0  # 0 = never stop early

    def __post_init__(self):
        if self.iterations < 1:
            raise ValueError("Iterations must be at least 1")
        if self.delay < 0:
            raise ValueError("Delay cannot be negative")
        if self.warmup < 0:
            raise ValueError("Warmup count cannot be negative")
        if self.max_consecutive_failures < 0:
            raise ValueError("max_consecutive_failures cannot be negative")
