"""Default constants for micro-benchmark configuration."""

from __future__ import annotations

# Warm-up
DEFAULT_WARMUP_RUNS = 10  # First call is discarded as baseline

# Latency bucket upper bounds (ns); the last bucket is unbounded
BOUND_TENS_OF_NS = 100
BOUND_HUNDREDS_OF_NS = 1_000
BOUND_MICROSECONDS = 1_000_000
BOUND_MILLISECONDS = 1_000_000_000

# Re-planning
REPLAN_EVERY_ROUND = "every-round"
REPLAN_ONCE = "once"
DEFAULT_REPLAN_CADENCE = REPLAN_EVERY_ROUND

# Convergence sentinel, in percent
INITIAL_LOWEST_RSD = 100.0

# Output
EXPORT_FORMATS = ("csv", "json", "md")

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_NO_BENCHMARKS = 2
EXIT_INTERRUPTED = 130
