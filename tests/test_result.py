import math

import pytest

from micro_benchmark.result import BenchmarkResult, iterations_per_second, reduce_result
from micro_benchmark.stats import ConvergenceState, RoundStatistics


def _state(mean: float, rsd: float, index: int = 0) -> ConvergenceState:
    state = ConvergenceState()
    state.observe(index, RoundStatistics(mean, 0.0, 0.0, rsd), 8)
    state.freeze()
    return state


def test_reduce_result_copies_convergence_state():
    result = reduce_result("bench", 5, 8, _state(200.0, 3.5, index=2), 150.0, 400.0)
    assert result.name == "bench"
    assert result.num_runs == 5
    assert result.num_iterations == 8
    assert result.mean_execution_time == 200.0
    assert result.lowest_rsd == 3.5
    assert result.lowest_rsd_index == 2
    assert result.fastest_execution_time <= result.mean_execution_time <= result.slowest_execution_time


def test_throughput_is_inverse_of_duration():
    result = reduce_result("bench", 1, 8, _state(250.0, 1.0), 200.0, 1_000.0)
    assert result.average_iteration_performance == pytest.approx(1e9 / result.mean_execution_time)
    assert result.fastest_iteration_performance == pytest.approx(5e6)
    assert result.slowest_iteration_performance == pytest.approx(1e6)


def test_zero_duration_throughput_is_infinite():
    assert math.isinf(iterations_per_second(0))


def test_result_is_immutable():
    result = reduce_result("bench", 1, 8, _state(1.0, 0.0), 1.0, 1.0)
    with pytest.raises(AttributeError):
        result.num_runs = 2  # type: ignore[misc]


def test_to_dict_has_every_field():
    result = reduce_result("bench", 1, 8, _state(1.0, 0.0), 1.0, 1.0)
    data = result.to_dict()
    assert set(data) == set(BenchmarkResult.__dataclass_fields__)
    assert data["name"] == "bench"
