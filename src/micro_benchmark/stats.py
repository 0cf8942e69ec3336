from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from .constants import INITIAL_LOWEST_RSD


@dataclass(frozen=True)
class RoundStatistics:
    mean: float
    variance: float
    standard_deviation: float
    relative_standard_deviation: float


def compute_round_statistics(samples_ns: Sequence[float]) -> RoundStatistics:
    """Reduce one round's per-call durations.

    Variance is the population estimator (divides by N). A round whose mean is
    exactly zero reports an RSD of 0.0.
    """
    n = len(samples_ns)
    if n == 0:
        raise ValueError("Cannot compute statistics of an empty round")
    mean = sum(samples_ns) / n
    variance = sum((x - mean) ** 2 for x in samples_ns) / n
    stddev = math.sqrt(variance)
    rsd = stddev * 100 / mean if mean != 0 else 0.0
    return RoundStatistics(
        mean=mean,
        variance=variance,
        standard_deviation=stddev,
        relative_standard_deviation=rsd,
    )


@dataclass
class ConvergenceState:
    """Best (lowest RSD) round seen so far within one benchmark execution.

    The 100 % sentinel is always replaced by the first measured round.
    """

    lowest_rsd: float = INITIAL_LOWEST_RSD
    lowest_rsd_index: int = 0
    lowest_rsd_mean: float = 0.0
    lowest_rsd_iterations: int = 0
    rounds_observed: int = 0
    frozen: bool = False

    def observe(self, round_index: int, stats: RoundStatistics, iterations: int) -> bool:
        """Record a round if it beats the best so far.

        Only a strictly lower RSD replaces the current best, so ties keep the
        earlier round. The first round is always recorded.
        """
        if self.frozen:
            raise RuntimeError("ConvergenceState is frozen")
        first = self.rounds_observed == 0
        self.rounds_observed += 1
        rsd = stats.relative_standard_deviation
        if not first and not rsd < self.lowest_rsd:
            return False
        self.lowest_rsd = rsd
        self.lowest_rsd_index = round_index
        self.lowest_rsd_mean = stats.mean
        self.lowest_rsd_iterations = iterations
        return True

    def freeze(self) -> None:
        self.frozen = True
