"""
Instrument metadata cache.

Tick size, negative-risk flag and fee rate are fetched once per
instrument before trading starts, then read from memory for every order.
"""

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Iterable, List, Union

from aiohttp import ClientSession

from .constants import FEE_RATE_PATH, NEG_RISK_PATH, TICK_SIZE_PATH
from .exceptions import ClobExecError, MetadataFetchError
from .http_client import HttpClient
from .models.market import InstrumentMetadata
from .utils import parse_token_id

logger = logging.getLogger(__name__)


def _parse_tick_size(data: Any) -> Decimal:
    tick_size = Decimal(str(data["minimum_tick_size"]))
    if not tick_size.is_finite() or tick_size <= 0:
        raise ValueError(f"tick size must be positive, got {tick_size}")
    return tick_size


def _parse_neg_risk(data: Any) -> bool:
    value = data["neg_risk"]
    if not isinstance(value, bool):
        raise ValueError(f"neg_risk must be a boolean, got {value!r}")
    return value


def _parse_fee_rate(data: Any) -> int:
    value = data["base_fee"]
    if isinstance(value, bool) or int(value) != value or int(value) < 0:
        raise ValueError(f"fee rate must be a non-negative integer, got {value!r}")
    return int(value)


class MetadataCache:
    """
    Write-once cache of per-instrument trading parameters.

    An entry is stored only when all three attributes were fetched, so a
    failed warm-up never leaves a partial record behind.
    """

    def __init__(self, http_client: HttpClient):
        self._http_client = http_client
        self._cache: Dict[int, InstrumentMetadata] = {}
        self._pending: Dict[int, "asyncio.Future[InstrumentMetadata]"] = {}

        self.endpoints = {
            "tick_size": TICK_SIZE_PATH,
            "neg_risk": NEG_RISK_PATH,
            "fee_rate": FEE_RATE_PATH,
        }

    def __contains__(self, token_id: int) -> bool:
        return token_id in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def get(self, token_id: int) -> InstrumentMetadata:
        """In-memory lookup; raises KeyError on a miss."""
        return self._cache[token_id]

    async def _fetch_attribute(
        self,
        session: ClientSession,
        token_id: int,
        attribute: str,
        parse: Callable[[Any], Any],
    ) -> Any:
        endpoint = self.endpoints[attribute]
        try:
            data = await self._http_client.get_json(
                session, endpoint, {"token_id": str(token_id)}
            )
        except ClobExecError as e:
            raise MetadataFetchError(token_id, attribute, str(e)) from e

        try:
            return parse(data)
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            raise MetadataFetchError(
                token_id, attribute, f"unexpected response {data!r}"
            ) from e

    async def fetch(self, session: ClientSession, token_id: int) -> InstrumentMetadata:
        """
        Fetch and cache one instrument; cached entries are returned as-is.

        Concurrent calls for the same token share a single in-flight fetch.
        """
        if token_id in self._cache:
            logger.debug(f"Returning cached metadata for {token_id}")
            return self._cache[token_id]

        pending = self._pending.get(token_id)
        if pending is None:
            pending = asyncio.ensure_future(self._fetch_uncached(session, token_id))
            self._pending[token_id] = pending
            pending.add_done_callback(lambda _: self._pending.pop(token_id, None))
        return await asyncio.shield(pending)

    async def _fetch_uncached(self, session: ClientSession, token_id: int) -> InstrumentMetadata:
        results = await asyncio.gather(
            self._fetch_attribute(session, token_id, "tick_size", _parse_tick_size),
            self._fetch_attribute(session, token_id, "neg_risk", _parse_neg_risk),
            self._fetch_attribute(session, token_id, "fee_rate", _parse_fee_rate),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

        tick_size, neg_risk, fee_rate_bps = results
        metadata = InstrumentMetadata(
            token_id=token_id,
            tick_size=tick_size,
            neg_risk=neg_risk,
            fee_rate_bps=fee_rate_bps,
        )
        self._cache[token_id] = metadata
        logger.info(
            f"Metadata for {token_id}: tick={tick_size} neg_risk={neg_risk} fee={fee_rate_bps}bps"
        )
        return metadata

    async def warmup(
        self,
        session: ClientSession,
        token_ids: Iterable[Union[int, str]],
    ) -> List[InstrumentMetadata]:
        """
        Warm up the cache for every given instrument concurrently.

        Any failure fails the whole warm-up with MetadataFetchError.
        Duplicate ids are fetched once.

        Returns:
            Metadata records in the order of ``token_ids``
        """
        parsed: List[int] = []
        for token_id in token_ids:
            try:
                parsed.append(parse_token_id(token_id))
            except ValueError as e:
                raise MetadataFetchError(token_id, "token_id", str(e)) from e

        unique = list(dict.fromkeys(parsed))
        logger.info(f"Warming up metadata cache for {len(unique)} instrument(s)...")
        results = await asyncio.gather(*(self.fetch(session, t) for t in unique))
        by_token = dict(zip(unique, results))
        return [by_token[t] for t in parsed]
