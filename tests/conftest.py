import math

import pytest

from micro_benchmark.planner import LatencyBucket
from micro_benchmark.registry import default_registry

# Same shape as the default table, with counts small enough for unit tests
SMALL_BUCKETS = (
    LatencyBucket(100, 4, 3),
    LatencyBucket(1_000, 8, 5),
    LatencyBucket(math.inf, 2, 2),
)


class FakeClock:
    """Integer nanosecond clock that only moves when work is simulated."""

    def __init__(self) -> None:
        self.now = 0

    def __call__(self) -> int:
        return self.now

    def advance(self, ns: int) -> None:
        self.now += ns


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def _clean_default_registry():
    default_registry.clear()
    yield
    default_registry.clear()
