"""Latency bucket table and iteration planning."""

from __future__ import annotations

import bisect
import math
from dataclasses import dataclass
from typing import Sequence

from .constants import (
    BOUND_HUNDREDS_OF_NS,
    BOUND_MICROSECONDS,
    BOUND_MILLISECONDS,
    BOUND_TENS_OF_NS,
)


@dataclass(frozen=True)
class LatencyBucket:
    upper_bound_ns: float
    iterations_per_round: int
    max_rounds: int


@dataclass(frozen=True)
class IterationPolicy:
    iterations_per_round: int
    max_rounds: int


DEFAULT_BUCKETS: tuple[LatencyBucket, ...] = (
    LatencyBucket(BOUND_TENS_OF_NS, 128_000, 10_000),  # tens of nanoseconds
    LatencyBucket(BOUND_HUNDREDS_OF_NS, 64_000, 5_000),  # hundreds of nanoseconds
    LatencyBucket(BOUND_MICROSECONDS, 32_000, 1_000),  # microseconds
    LatencyBucket(BOUND_MILLISECONDS, 4_000, 100),  # milliseconds
    LatencyBucket(math.inf, 1_000, 10),  # seconds
)


def validate_buckets(buckets: Sequence[LatencyBucket]) -> None:
    """Check that a bucket table partitions [0, inf) without gaps or overlap."""
    if not buckets:
        raise ValueError("Bucket table must not be empty")
    previous = 0.0
    for bucket in buckets:
        if not bucket.upper_bound_ns > previous:
            raise ValueError(
                f"Bucket bounds must be strictly ascending and positive (got {bucket.upper_bound_ns} after {previous})"
            )
        if bucket.iterations_per_round <= 0 or bucket.max_rounds <= 0:
            raise ValueError(f"Bucket counts must be > 0: {bucket}")
        previous = bucket.upper_bound_ns
    if not math.isinf(buckets[-1].upper_bound_ns):
        raise ValueError("Last bucket must be unbounded (upper_bound_ns=math.inf)")


def plan_iterations(
    estimate_ns: float, buckets: Sequence[LatencyBucket] = DEFAULT_BUCKETS
) -> IterationPolicy:
    """Map a single-call latency estimate to an iteration/round policy.

    The selected bucket is the first one whose upper bound is strictly greater
    than the estimate, so an estimate sitting exactly on a bound belongs to the
    next bucket up.
    """
    if math.isnan(estimate_ns) or estimate_ns < 0:
        raise ValueError(f"Latency estimate must be >= 0, got {estimate_ns}")
    bounds = [b.upper_bound_ns for b in buckets]
    # The last bucket is unbounded regardless of its stored bound
    idx = min(bisect.bisect_right(bounds, estimate_ns), len(buckets) - 1)
    bucket = buckets[idx]
    return IterationPolicy(bucket.iterations_per_round, bucket.max_rounds)
