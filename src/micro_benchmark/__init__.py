"""Micro Benchmark package.

Time Python callables with adaptively sized rounds and report the most stable round.
"""

__version__ = "0.1.0"

from .constants import (
    DEFAULT_WARMUP_RUNS,
    EXIT_ERROR,
    EXIT_INTERRUPTED,
    EXIT_NO_BENCHMARKS,
    EXIT_SUCCESS,
    EXPORT_FORMATS,
)
from .console_writer import format_duration, ordinal, write_result
from .estimator import estimate_execution_time
from .exceptions import BenchmarkCancelled, BenchmarkError
from .io_utils import export_results, write_json_atomic, write_text_atomic
from .logging_config import logger, setup_logging
from .planner import DEFAULT_BUCKETS, IterationPolicy, LatencyBucket, plan_iterations, validate_buckets
from .progress import LiveProgress, hidden_cursor, render_progress_line
from .registry import BenchmarkDefinition, BenchmarkRegistry, benchmark, default_registry, load_benchmark_file
from .result import BenchmarkResult, reduce_result
from .runner import BenchmarkRunner, HarnessConfig
from .sampler import (
    CancellationToken,
    LoopState,
    ReplanCadence,
    RoundProgress,
    SamplingPolicy,
    run_sampling_loop,
)
from .stats import ConvergenceState, RoundStatistics, compute_round_statistics
from .cli import main

__all__ = [
    "__version__",
    # Constants
    "DEFAULT_WARMUP_RUNS",
    "EXIT_ERROR",
    "EXIT_INTERRUPTED",
    "EXIT_NO_BENCHMARKS",
    "EXIT_SUCCESS",
    "EXPORT_FORMATS",
    # Core
    "DEFAULT_BUCKETS",
    "IterationPolicy",
    "LatencyBucket",
    "plan_iterations",
    "validate_buckets",
    "estimate_execution_time",
    "RoundStatistics",
    "ConvergenceState",
    "compute_round_statistics",
    "CancellationToken",
    "LoopState",
    "ReplanCadence",
    "RoundProgress",
    "SamplingPolicy",
    "run_sampling_loop",
    "BenchmarkResult",
    "reduce_result",
    # Classes and exceptions
    "BenchmarkError",
    "BenchmarkCancelled",
    "logger",
    "setup_logging",
    "BenchmarkDefinition",
    "BenchmarkRegistry",
    "benchmark",
    "default_registry",
    "load_benchmark_file",
    "BenchmarkRunner",
    "HarnessConfig",
    # Output
    "format_duration",
    "ordinal",
    "write_result",
    "export_results",
    "write_json_atomic",
    "write_text_atomic",
    "LiveProgress",
    "hidden_cursor",
    "render_progress_line",
    "main",
]
