"""
Latency runner - main orchestration module.

Coordinates setup and the submission loop:
- Credentials are derived once (credentials.py)
- Metadata is warmed once, concurrently (metadata.py)
- Each order is built, signed and serialized (pipeline.py)
- Headers and the POST are handled by submitter.py
- Stage timings go to the StatsCollector (monitoring.py)
"""

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional

from .auth import HeaderSigner
from .credentials import CredentialSource, CredentialStore
from .exceptions import ClobExecError, ExchangeRejection
from .http_client import HttpClient
from .metadata import MetadataCache
from .models import ConnectionConfig, LoopConfig, OrderRequest, SubmitResult
from .monitoring import LatencySample, StatsCollector, StatsSummary
from .pipeline import OrderPipeline, OrderSigningCapability
from .session_manager import SessionManager
from .submitter import Submitter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderReport:
    """
    Outcome of one loop iteration.

    Attributes:
        index: 1-based position in the loop
        sample: Stage timings, present once the order reached the POST
        result: Success payload
        error: Failure, with its category telling auth, business and
            transport problems apart
    """
    index: int
    sample: Optional[LatencySample] = None
    result: Optional[SubmitResult] = None
    error: Optional[ClobExecError] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def category(self) -> Optional[str]:
        return self.error.category if self.error is not None else None

    @property
    def response_data(self):
        if isinstance(self.error, ExchangeRejection):
            return self.error.response_data
        return self.result.body if self.result is not None else None


@dataclass(frozen=True)
class RunReport:
    """Reports for every attempted order plus the latency summary."""
    orders: List[OrderReport] = field(default_factory=list)
    summary: Optional[StatsSummary] = None
    stopped_early: bool = False

    @property
    def failures(self) -> List[OrderReport]:
        return [report for report in self.orders if not report.success]


class LatencyRunner:
    """
    Authenticated order-submission loop with per-stage latency tracking.

    Shared state (credentials, metadata) is written once during setup and
    only read inside the loop.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        credential_source: CredentialSource,
        order_signer: OrderSigningCapability,
        loop_config: Optional[LoopConfig] = None,
    ):
        """Initialize the runner with configuration and SDK capabilities."""
        self._config = config
        self._loop_config = loop_config or LoopConfig()
        self._session_manager = SessionManager(config)
        self._http_client = HttpClient(config)
        # One worker keeps SDK calls off the event loop and in order
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="clob-sdk")
        self._credentials = CredentialStore(credential_source, self._executor)
        self._metadata = MetadataCache(self._http_client)
        self._pipeline = OrderPipeline(self._metadata, order_signer, self._executor)
        self._stats = StatsCollector(warmup=self._loop_config.warmup)
        self._submitter: Optional[Submitter] = None
        self._closed = False

    @classmethod
    def from_private_key(
        cls,
        private_key: str,
        config: ConnectionConfig,
        loop_config: Optional[LoopConfig] = None,
    ) -> "LatencyRunner":
        """Create a runner backed by the exchange SDK."""
        from .sdk import SdkCredentialSource, SdkOrderSigner, SignerIdentity

        identity = SignerIdentity(private_key, config.chain_id)
        return cls(
            config,
            SdkCredentialSource(identity, config),
            SdkOrderSigner(identity, config.signature_type, config.funder),
            loop_config,
        )

    @property
    def stats(self) -> StatsCollector:
        return self._stats

    @property
    def metadata(self) -> MetadataCache:
        return self._metadata

    @property
    def credentials(self) -> CredentialStore:
        return self._credentials

    async def setup(self, request: OrderRequest) -> None:
        """
        Derive credentials and warm the metadata cache.

        Both failures are fatal: no order is attempted without them.
        """
        credentials = await self._credentials.derive()
        if self._submitter is None:
            header_signer = HeaderSigner(credentials, raw_secret_key=self._config.raw_secret_key)
            self._submitter = Submitter(self._http_client, header_signer, self._config.order_path)

        session = await self._session_manager.create_session()
        await self._metadata.warmup(session, [request.token_id])

    async def submit_order(self, index: int, request: OrderRequest) -> OrderReport:
        """Build, sign, serialize and post one order; never raises ClobExecError."""
        if self._submitter is None:
            raise RuntimeError("Runner is not set up. Call setup() first.")

        session = await self._session_manager.create_session()
        start = time.perf_counter()
        try:
            unsigned = self._pipeline.build(request)
            build_ms = (time.perf_counter() - start) * 1000

            signed = await self._pipeline.sign(unsigned)
            body = self._pipeline.serialize(signed, self._credentials.credentials.api_key)
        except ClobExecError as e:
            logger.error(f"Order #{index} failed before submission [{e.category}]: {e}")
            return OrderReport(index=index, error=e)

        try:
            result = await self._submitter.submit(session, body)
        except ClobExecError as e:
            sample = self._record(build_ms, signed.sign_ms, self._submitter.last_post_ms, start, False)
            logger.error(f"Order #{index} | {sample.post_ms:.0f}ms | [{e.category}] {e}")
            return OrderReport(index=index, sample=sample, error=e)

        sample = self._record(build_ms, signed.sign_ms, result.post_ms, start, True)
        logger.info(
            f"Order #{index} | {result.post_ms:.0f}ms | {result.status} | id={result.order_id}"
        )
        return OrderReport(index=index, sample=sample, result=result)

    def _record(
        self, build_ms: float, sign_ms: float, post_ms: float, start: float, success: bool
    ) -> LatencySample:
        sample = LatencySample(
            build_ms=build_ms,
            sign_ms=sign_ms,
            post_ms=post_ms,
            total_ms=(time.perf_counter() - start) * 1000,
            success=success,
        )
        self._stats.record(sample)
        return sample

    async def run(self, request: OrderRequest) -> RunReport:
        """
        Run the full flow for ``loop_config.iterations`` orders.

        Raises:
            CredentialDerivationError: handshake failed; nothing was sent
            MetadataFetchError: warm-up failed; nothing was sent
        """
        await self.setup(request)

        logger.info(f"Starting submission loop: {self._loop_config.iterations} order(s)")
        reports: List[OrderReport] = []
        consecutive_failures = 0
        stopped_early = False
        limit = self._loop_config.max_consecutive_failures

        for index in range(1, self._loop_config.iterations + 1):
            report = await self.submit_order(index, request)
            reports.append(report)

            consecutive_failures = 0 if report.success else consecutive_failures + 1
            if limit and consecutive_failures >= limit:
                logger.warning(f"Stopping after {consecutive_failures} consecutive failures")
                stopped_early = True
                break

            if index < self._loop_config.iterations and self._loop_config.delay > 0:
                await asyncio.sleep(self._loop_config.delay)

        summary = self._stats.summary()
        if summary.count:
            logger.info(
                f"Latency avg={summary.avg_total_ms:.1f}ms min={summary.min_total_ms:.1f}ms "
                f"max={summary.max_total_ms:.1f}ms ({summary.bottleneck})"
            )
        return RunReport(orders=reports, summary=summary, stopped_early=stopped_early)

    async def close(self) -> None:
        """Close the HTTP session and the SDK worker."""
        if self._closed:
            return
        await self._session_manager.close_session()
        self._executor.shutdown(wait=False)
        self._closed = True

    async def __aenter__(self) -> "LatencyRunner":
        """Async context manager entry."""
        await self._session_manager.create_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
