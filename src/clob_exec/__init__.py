"""
clob-exec - latency-focused execution client for an off-chain CLOB.

Derives API credentials from a private key, caches instrument metadata,
signs orders through the exchange SDK and submits them with HMAC
authenticated headers while timing every stage.
"""

from .auth import ApiCredentials, HeaderSigner, Secret
from .credentials import CredentialStore
from .exceptions import (
    AuthHeaderError,
    ClobExecError,
    CredentialDerivationError,
    ExchangeRejection,
    MetadataFetchError,
    OrderBuildError,
    SigningError,
    TransportError,
)
from .http_client import HttpClient
from .metadata import MetadataCache
from .models import (
    # Configuration
    ConnectionConfig,
    LoopConfig,
    # Market
    InstrumentMetadata,
    # Orders
    OrderRequest,
    OrderType,
    Side,
    SignedOrder,
    SubmitResult,
    UnsignedOrder,
)
from .monitoring import LatencySample, StatsCollector, StatsSummary
from .pipeline import OrderPipeline
from .runner import LatencyRunner, OrderReport, RunReport
from .submitter import Submitter

__all__ = [
    # Orchestration
    "LatencyRunner",
    "OrderReport",
    "RunReport",
    # Components
    "ApiCredentials",
    "Secret",
    "HeaderSigner",
    "CredentialStore",
    "HttpClient",
    "MetadataCache",
    "OrderPipeline",
    "Submitter",
    "StatsCollector",
    "LatencySample",
    "StatsSummary",
    # Models
    "ConnectionConfig",
    "LoopConfig",
    "InstrumentMetadata",
    "OrderRequest",
    "OrderType",
    "Side",
    "SignedOrder",
    "SubmitResult",
    "UnsignedOrder",
    # Errors
    "ClobExecError",
    "CredentialDerivationError",
    "MetadataFetchError",
    "OrderBuildError",
    "SigningError",
    "AuthHeaderError",
    "TransportError",
    "ExchangeRejection",
]
