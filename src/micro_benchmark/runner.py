from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable

from .exceptions import BenchmarkError
from .logging_config import logger
from .progress import LiveProgress, hidden_cursor
from .registry import BenchmarkDefinition, BenchmarkRegistry
from .result import BenchmarkResult
from .sampler import CancellationToken, SamplingPolicy, run_sampling_loop


@dataclass
class HarnessConfig:
    modules: list[str]
    export_format: str | None
    export_file: str | None
    live_progress: bool
    timeout_sec: float | None
    policy: SamplingPolicy = field(default_factory=SamplingPolicy)
    verbose: bool = False
    log_file: str | None = None


class BenchmarkRunner:
    def __init__(
        self,
        registry: BenchmarkRegistry,
        policy: SamplingPolicy | None = None,
        live_progress: bool = True,
        timeout_sec: float | None = None,
        clock: Callable[[], int] = time.perf_counter_ns,
    ) -> None:
        self.registry = registry
        self.policy = policy or SamplingPolicy()
        self.live_progress = live_progress
        self.timeout_sec = timeout_sec
        self.clock = clock
        logger.debug("Initialized BenchmarkRunner with %d benchmarks", len(registry))

    def run_one(self, definition: BenchmarkDefinition) -> BenchmarkResult:
        token = CancellationToken.with_timeout(self.timeout_sec) if self.timeout_sec else None
        sink = LiveProgress(definition.name, enabled=self.live_progress)
        logger.debug("Starting benchmark %s", definition.name)
        try:
            with hidden_cursor(enabled=self.live_progress):
                return run_sampling_loop(
                    definition.name,
                    definition.fn,
                    self.policy,
                    progress=sink,
                    cancel_token=token,
                    clock=self.clock,
                )
        except BenchmarkError:
            raise
        except Exception as e:
            raise BenchmarkError(
                "Benchmark failed",
                benchmark=definition.name,
                error=f"{type(e).__name__}: {e}",
            ) from e
        finally:
            sink.finish()

    def run_all(
        self,
        results: list[BenchmarkResult],
        on_result: Callable[[BenchmarkResult], None] | None = None,
    ) -> list[BenchmarkResult]:
        """Run every registered benchmark in order, appending to ``results``.

        Benchmarks never overlap; the next one starts only after the previous
        result has been reduced. ``results`` is filled in place so a caller can
        still report what finished if the run is interrupted.
        """
        for definition in self.registry:
            result = self.run_one(definition)
            results.append(result)
            if on_result is not None:
                on_result(result)
        return results
