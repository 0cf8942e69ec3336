"""Adaptive sampling loop.

Each round walks ``PLANNING -> MEASURING -> REDUCING`` and then either
``CONTINUE`` (back to planning) or ``DONE``:

* PLANNING re-runs the warm-up estimator and picks an iteration policy from the
  latency bucket table. With ``ReplanCadence.EVERY_ROUND`` the round budget can
  change mid-sequence.
* MEASURING times exactly ``iterations_per_round`` calls. Nothing else happens
  inside the timed loop.
* REDUCING turns the round's samples into statistics, updates the global
  extremes and the convergence state, reports progress and drops the samples.

Cancellation is cooperative and only checked while planning, so a round is
never cut short.
"""

from __future__ import annotations

import enum
import math
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, NamedTuple, Optional, Sequence

from .constants import DEFAULT_WARMUP_RUNS, REPLAN_EVERY_ROUND, REPLAN_ONCE
from .estimator import estimate_execution_time
from .exceptions import BenchmarkCancelled
from .logging_config import logger
from .planner import DEFAULT_BUCKETS, IterationPolicy, LatencyBucket, plan_iterations, validate_buckets
from .result import BenchmarkResult, reduce_result
from .stats import ConvergenceState, compute_round_statistics


class LoopState(enum.Enum):
    PLANNING = "planning"
    MEASURING = "measuring"
    REDUCING = "reducing"
    CONTINUE = "continue"
    DONE = "done"


class ReplanCadence(enum.Enum):
    EVERY_ROUND = REPLAN_EVERY_ROUND
    ONCE = REPLAN_ONCE


@dataclass(frozen=True)
class SamplingPolicy:
    buckets: Sequence[LatencyBucket] = DEFAULT_BUCKETS
    warmup_runs: int = DEFAULT_WARMUP_RUNS
    replan_cadence: ReplanCadence = ReplanCadence.EVERY_ROUND
    # Never let a re-plan shrink the round budget
    clamp_max_rounds: bool = False


class RoundProgress(NamedTuple):
    round_index: int
    max_rounds: int
    lowest_rsd_mean: float
    lowest_rsd: float
    lowest_rsd_iterations: int


ProgressSink = Callable[[RoundProgress], None]


class CancellationToken:
    """Cooperative stop signal, optionally with a deadline."""

    def __init__(
        self,
        deadline: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._event = threading.Event()
        self._deadline = deadline
        self._clock = clock

    @classmethod
    def with_timeout(
        cls, seconds: float, clock: Callable[[], float] = time.monotonic
    ) -> "CancellationToken":
        return cls(deadline=clock() + seconds, clock=clock)

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and self._clock() >= self._deadline


def _measure_round(fn: Callable[[], Any], iterations: int, clock: Callable[[], int]) -> list[int]:
    samples: list[int] = []
    append = samples.append
    for _ in range(iterations):
        start = clock()
        fn()
        end = clock()
        append(end - start)
    return samples


def _replan(
    fn: Callable[[], Any],
    policy: SamplingPolicy,
    previous: Optional[IterationPolicy],
    clock: Callable[[], int],
) -> IterationPolicy:
    estimate = estimate_execution_time(fn, policy.warmup_runs, clock)
    plan = plan_iterations(estimate, policy.buckets)
    if previous is not None and policy.clamp_max_rounds and plan.max_rounds < previous.max_rounds:
        plan = IterationPolicy(plan.iterations_per_round, previous.max_rounds)
    if plan != previous:
        logger.debug(
            "Estimate %.0f ns -> %d iterations/round, %d max rounds",
            estimate,
            plan.iterations_per_round,
            plan.max_rounds,
        )
    return plan


def run_sampling_loop(
    name: str,
    fn: Callable[[], Any],
    policy: SamplingPolicy | None = None,
    progress: ProgressSink | None = None,
    cancel_token: CancellationToken | None = None,
    clock: Callable[[], int] = time.perf_counter_ns,
) -> BenchmarkResult:
    """Benchmark ``fn`` until the round budget is exhausted.

    Args:
        name: Benchmark name copied into the result.
        fn: Zero-argument callable under test. Its return value is ignored and
            any exception it raises aborts the run unchanged.
        policy: Bucket table, warm-up runs and re-planning behaviour.
        progress: Called with a ``RoundProgress`` after every round.
        cancel_token: Checked before each round is planned.
        clock: Integer nanosecond clock.

    Returns:
        The reduced ``BenchmarkResult``.

    Raises:
        BenchmarkCancelled: If cancelled before the first round completed.
    """
    policy = policy or SamplingPolicy()
    validate_buckets(policy.buckets)

    state = ConvergenceState()
    plan: Optional[IterationPolicy] = None
    max_rounds = 0
    samples: list[int] = []
    fastest = math.inf
    slowest = -math.inf
    round_index = 0
    rounds_completed = 0
    last_iterations = 0

    step = LoopState.PLANNING
    while step is not LoopState.DONE:
        if step is LoopState.PLANNING:
            if cancel_token is not None and cancel_token.cancelled:
                if rounds_completed == 0:
                    raise BenchmarkCancelled("Benchmark cancelled before the first round", benchmark=name)
                logger.warning("%s cancelled after %d/%d rounds", name, rounds_completed, max_rounds)
                step = LoopState.DONE
                continue
            if plan is None or policy.replan_cadence is ReplanCadence.EVERY_ROUND:
                plan = _replan(fn, policy, plan, clock)
            last_iterations = plan.iterations_per_round
            max_rounds = plan.max_rounds
            step = LoopState.MEASURING

        elif step is LoopState.MEASURING:
            samples = _measure_round(fn, last_iterations, clock)
            step = LoopState.REDUCING

        elif step is LoopState.REDUCING:
            round_stats = compute_round_statistics(samples)
            fastest = min(fastest, min(samples))
            slowest = max(slowest, max(samples))
            state.observe(round_index, round_stats, last_iterations)
            samples = []
            rounds_completed += 1

            if progress is not None:
                progress(
                    RoundProgress(
                        round_index=round_index,
                        max_rounds=max_rounds,
                        lowest_rsd_mean=state.lowest_rsd_mean,
                        lowest_rsd=state.lowest_rsd,
                        lowest_rsd_iterations=state.lowest_rsd_iterations,
                    )
                )
            step = LoopState.DONE if rounds_completed >= max_rounds else LoopState.CONTINUE

        elif step is LoopState.CONTINUE:
            round_index += 1
            step = LoopState.PLANNING

    state.freeze()
    logger.debug(
        "%s done: %d rounds, best round %d (rsd %.3f%%)",
        name,
        rounds_completed,
        state.lowest_rsd_index,
        state.lowest_rsd,
    )
    return reduce_result(name, rounds_completed, last_iterations, state, float(fastest), float(slowest))
