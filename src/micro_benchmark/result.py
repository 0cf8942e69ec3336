from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from .stats import ConvergenceState

NS_PER_SECOND = 1e9


def iterations_per_second(duration_ns: float) -> float:
    if duration_ns == 0:
        return float("inf")
    return NS_PER_SECOND / duration_ns


@dataclass(frozen=True)
class BenchmarkResult:
    name: str
    num_runs: int
    num_iterations: int
    mean_execution_time: float
    fastest_execution_time: float
    slowest_execution_time: float
    lowest_rsd: float
    lowest_rsd_index: int
    average_iteration_performance: float
    fastest_iteration_performance: float
    slowest_iteration_performance: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def reduce_result(
    name: str,
    num_runs: int,
    num_iterations: int,
    state: ConvergenceState,
    fastest_ns: float,
    slowest_ns: float,
) -> BenchmarkResult:
    """Build the final record from a finished sampling loop.

    The mean comes from the best-RSD round, while the extremes cover every
    call of every round.
    """
    mean = state.lowest_rsd_mean
    return BenchmarkResult(
        name=name,
        num_runs=num_runs,
        num_iterations=num_iterations,
        mean_execution_time=mean,
        fastest_execution_time=fastest_ns,
        slowest_execution_time=slowest_ns,
        lowest_rsd=state.lowest_rsd,
        lowest_rsd_index=state.lowest_rsd_index,
        average_iteration_performance=iterations_per_second(mean),
        fastest_iteration_performance=iterations_per_second(fastest_ns),
        slowest_iteration_performance=iterations_per_second(slowest_ns),
    )
