"""
Latency statistics for the submission loop.

Tracks per-order stage timings and classifies where time is spent.
"""

import math
from dataclasses import dataclass
from typing import List, Optional

from .constants import BALANCED, BOTTLENECK_RATIO, CRYPTO_BOUND, NETWORK_BOUND


@dataclass(frozen=True)
class LatencySample:
    """Stage durations for a single order, in milliseconds."""
    build_ms: float
    sign_ms: float
    post_ms: float
    total_ms: float
    success: bool = True


@dataclass(frozen=True)
class StatsSummary:
    """Aggregates over the samples that were not excluded as warm-up."""
    count: int
    excluded: int
    avg_total_ms: float = 0.0
    min_total_ms: float = 0.0
    max_total_ms: float = 0.0
    avg_build_ms: float = 0.0
    avg_sign_ms: float = 0.0
    avg_post_ms: float = 0.0
    bottleneck: Optional[str] = None


def classify_bottleneck(avg_sign_ms: float, avg_post_ms: float) -> str:
    """Post more than twice sign is network-bound, and vice versa."""
    if avg_post_ms > BOTTLENECK_RATIO * avg_sign_ms:
        return NETWORK_BOUND
    if avg_sign_ms > BOTTLENECK_RATIO * avg_post_ms:
        return CRYPTO_BOUND
    return BALANCED


class StatsCollector:
    """Accumulates latency samples across the submission loop."""

    def __init__(self, warmup: int = 0):
        """
        Initialize the collector.

        Args:
            warmup: Number of leading samples left out of the aggregates,
                since the first order may pay for connection setup
        """
        if warmup < 0:
            raise ValueError("Warmup count cannot be negative")
        self._warmup = warmup
        self._samples: List[LatencySample] = []

    @property
    def samples(self) -> List[LatencySample]:
        return list(self._samples)

    @property
    def warmup(self) -> int:
        return self._warmup

    def record(self, sample: LatencySample) -> None:
        self._samples.append(sample)

    def measured_samples(self) -> List[LatencySample]:
        """Samples that count towards the aggregates."""
        return self._samples[self._warmup:]

    def summary(self) -> StatsSummary:
        """Compute aggregates over the measured samples."""
        measured = self.measured_samples()
        excluded = len(self._samples) - len(measured)
        if not measured:
            return StatsSummary(count=0, excluded=excluded)

        count = len(measured)
        totals = [s.total_ms for s in measured]
        min_total, max_total = min(totals), max(totals)
        # Clamp rounding error so min <= avg <= max always holds
        avg_total = min(max(math.fsum(totals) / count, min_total), max_total)
        avg_sign = math.fsum(s.sign_ms for s in measured) / count
        avg_post = math.fsum(s.post_ms for s in measured) / count

        return StatsSummary(
            count=count,
            excluded=excluded,
            avg_total_ms=avg_total,
            min_total_ms=min_total,
            max_total_ms=max_total,
            avg_build_ms=math.fsum(s.build_ms for s in measured) / count,
            avg_sign_ms=avg_sign,
            avg_post_ms=avg_post,
            bottleneck=classify_bottleneck(avg_sign, avg_post),
        )

    def reset(self) -> None:
        """Drop all recorded samples."""
        self._samples.clear()
