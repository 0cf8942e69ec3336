import itertools

import pytest

from conftest import SMALL_BUCKETS
from micro_benchmark.exceptions import BenchmarkCancelled
from micro_benchmark.planner import DEFAULT_BUCKETS, IterationPolicy, plan_iterations
from micro_benchmark.sampler import (
    CancellationToken,
    ReplanCadence,
    RoundProgress,
    SamplingPolicy,
    run_sampling_loop,
)


def _policy(**kwargs) -> SamplingPolicy:
    return SamplingPolicy(buckets=SMALL_BUCKETS, **kwargs)


def test_constant_100ns_callable(clock):
    # 100 ns is not < 100, so the hundreds-of-nanoseconds bucket applies
    assert plan_iterations(100, DEFAULT_BUCKETS) == IterationPolicy(64_000, 5_000)
    reports: list[RoundProgress] = []

    result = run_sampling_loop(
        "constant", lambda: clock.advance(100), _policy(), progress=reports.append, clock=clock
    )

    assert result.num_runs == 5
    assert result.num_iterations == 8
    assert result.mean_execution_time == 100
    assert result.fastest_execution_time == 100
    assert result.slowest_execution_time == 100
    assert result.lowest_rsd == 0
    assert result.lowest_rsd_index == 0
    assert [r.lowest_rsd for r in reports] == [0] * 5


def test_alternating_callable_converges_to_fifty_percent(clock):
    durations = itertools.cycle([50, 150])
    reports: list[RoundProgress] = []

    result = run_sampling_loop(
        "alternating", lambda: clock.advance(next(durations)), _policy(), progress=reports.append, clock=clock
    )

    assert result.mean_execution_time == 100
    assert result.lowest_rsd == 50
    assert result.fastest_execution_time == 50
    assert result.slowest_execution_time == 150
    assert all(r.lowest_rsd == 50 for r in reports)


def test_progress_reported_after_every_round(clock):
    reports: list[RoundProgress] = []
    run_sampling_loop("p", lambda: clock.advance(500), _policy(), progress=reports.append, clock=clock)

    assert [r.round_index for r in reports] == [0, 1, 2, 3, 4]
    assert all(r.max_rounds == 5 for r in reports)
    assert all(r.lowest_rsd_iterations == 8 for r in reports)
    assert all(r.lowest_rsd_mean == 500 for r in reports)


def test_each_round_calls_fn_warmup_plus_iterations_times(clock):
    calls = []

    def work():
        calls.append(1)
        clock.advance(10)

    run_sampling_loop("count", work, _policy(warmup_runs=3), clock=clock)
    # 3 rounds of 4 iterations, each preceded by 3 warm-up calls
    assert len(calls) == 3 * (3 + 4)


def test_replan_once_only_estimates_before_first_round(clock):
    calls = []

    def work():
        calls.append(1)
        clock.advance(10)

    run_sampling_loop("once", work, _policy(warmup_runs=3, replan_cadence=ReplanCadence.ONCE), clock=clock)
    assert len(calls) == 3 + 3 * 4


class _Cost:
    """Callable whose per-call cost can be switched from the progress sink."""

    def __init__(self, clock, ns):
        self.clock = clock
        self.ns = ns

    def __call__(self):
        self.clock.advance(self.ns)


def _switch_after(cost, round_index, ns):
    def sink(progress):
        if progress.round_index == round_index:
            cost.ns = ns

    return sink


def test_budget_grows_when_cost_changes(clock):
    cost = _Cost(clock, 50)
    result = run_sampling_loop("grow", cost, _policy(), progress=_switch_after(cost, 0, 500), clock=clock)

    assert result.num_runs == 5
    assert result.num_iterations == 8
    assert result.fastest_execution_time == 50
    assert result.slowest_execution_time == 500
    # Every round has zero RSD, so the first round keeps the record
    assert result.mean_execution_time == 50
    assert result.lowest_rsd_index == 0


def test_replan_once_keeps_initial_budget(clock):
    cost = _Cost(clock, 50)
    result = run_sampling_loop(
        "once",
        cost,
        _policy(replan_cadence=ReplanCadence.ONCE),
        progress=_switch_after(cost, 0, 500),
        clock=clock,
    )
    assert result.num_runs == 3
    assert result.num_iterations == 4


def test_budget_can_shrink_below_completed_rounds(clock):
    cost = _Cost(clock, 500)
    result = run_sampling_loop("shrink", cost, _policy(), progress=_switch_after(cost, 2, 5_000), clock=clock)
    # Round 3 is planned with a budget of 2 and ends the run straight away
    assert result.num_runs == 4
    assert result.num_iterations == 2


def test_clamp_keeps_budget_from_shrinking(clock):
    cost = _Cost(clock, 500)
    result = run_sampling_loop(
        "clamped",
        cost,
        _policy(clamp_max_rounds=True),
        progress=_switch_after(cost, 2, 5_000),
        clock=clock,
    )
    assert result.num_runs == 5
    assert result.num_iterations == 2


def test_global_extremes_bound_best_mean(clock):
    durations = itertools.cycle([40, 60, 200, 100, 100, 100, 100, 100])
    result = run_sampling_loop("mixed", lambda: clock.advance(next(durations)), _policy(), clock=clock)
    assert result.fastest_execution_time <= result.mean_execution_time <= result.slowest_execution_time
    assert result.fastest_execution_time == 40
    assert result.slowest_execution_time == 200


def test_callable_failure_propagates(clock):
    calls = itertools.count()

    def flaky():
        clock.advance(500)
        if next(calls) == 20:
            raise KeyError("boom")

    with pytest.raises(KeyError):
        run_sampling_loop("flaky", flaky, _policy(), clock=clock)


def test_cancel_before_first_round_raises(clock):
    token = CancellationToken()
    token.cancel()
    with pytest.raises(BenchmarkCancelled):
        run_sampling_loop("cancelled", lambda: clock.advance(500), _policy(), cancel_token=token, clock=clock)


def test_cancel_between_rounds_returns_completed_rounds(clock):
    token = CancellationToken()

    def sink(progress):
        if progress.round_index == 1:
            token.cancel()

    result = run_sampling_loop(
        "cancelled", lambda: clock.advance(500), _policy(), progress=sink, cancel_token=token, clock=clock
    )
    assert result.num_runs == 2
    assert result.num_iterations == 8
    assert result.mean_execution_time == 500


def test_cancellation_token_deadline():
    now = [0.0]
    token = CancellationToken.with_timeout(5.0, clock=lambda: now[0])
    assert not token.cancelled
    now[0] = 4.9
    assert not token.cancelled
    now[0] = 5.0
    assert token.cancelled


def test_invalid_bucket_table_rejected(clock):
    with pytest.raises(ValueError):
        run_sampling_loop("bad", lambda: None, SamplingPolicy(buckets=()), clock=clock)
