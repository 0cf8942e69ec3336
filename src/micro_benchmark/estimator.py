from __future__ import annotations

import time
from typing import Any, Callable

from .constants import DEFAULT_WARMUP_RUNS


def estimate_execution_time(
    fn: Callable[[], Any],
    runs: int = DEFAULT_WARMUP_RUNS,
    clock: Callable[[], int] = time.perf_counter_ns,
) -> float:
    """Return a rough single-call latency of ``fn`` in nanoseconds.

    The first call only sets a baseline and is discarded. The minimum of the
    remaining calls is returned, since warm-up noise only ever inflates a
    sample. Exceptions raised by ``fn`` propagate.
    """
    if runs < 2:
        raise ValueError(f"Warm-up needs at least 2 runs, got {runs}")

    fastest = float("inf")
    for i in range(runs):
        start = clock()
        fn()
        end = clock()
        if i == 0:
            continue
        fastest = min(fastest, float(end - start))
    return fastest
