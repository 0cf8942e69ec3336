from __future__ import annotations

import argparse
import sys

from .console_writer import write_result
from .constants import (
    DEFAULT_REPLAN_CADENCE,
    DEFAULT_WARMUP_RUNS,
    EXIT_ERROR,
    EXIT_INTERRUPTED,
    EXIT_NO_BENCHMARKS,
    EXIT_SUCCESS,
    EXPORT_FORMATS,
    REPLAN_EVERY_ROUND,
    REPLAN_ONCE,
)
from .exceptions import BenchmarkError
from .io_utils import export_results
from .logging_config import logger, setup_logging
from .registry import BenchmarkRegistry, default_registry, load_benchmark_file
from .result import BenchmarkResult
from .runner import BenchmarkRunner, HarnessConfig
from .sampler import ReplanCadence, SamplingPolicy


def parse_args(argv: list[str] | None = None) -> tuple[HarnessConfig, bool, bool]:
    p = argparse.ArgumentParser(
        prog="micro-benchmark",
        description="Repeatedly execute registered functions and statistically analyze their timing",
    )
    p.add_argument(
        "modules",
        nargs="*",
        default=[],
        help="Python files declaring @benchmark functions",
    )
    p.add_argument(
        "-e",
        "--export_results",
        nargs=2,
        metavar=("FORMAT", "FILENAME"),
        default=None,
        dest="export_results",
        help=f"Export benchmark results to file; FORMAT is one of {{{','.join(EXPORT_FORMATS)}}}",
    )
    p.add_argument(
        "--timeout",
        type=float,
        default=None,
        dest="timeout_sec",
        help="Stop starting new rounds of a benchmark after this many seconds",
    )
    p.add_argument(
        "--replan",
        choices=[REPLAN_EVERY_ROUND, REPLAN_ONCE],
        default=DEFAULT_REPLAN_CADENCE,
        dest="replan",
        help=f"When to re-estimate the iteration policy (default: {DEFAULT_REPLAN_CADENCE})",
    )
    p.add_argument(
        "--clamp-max-rounds",
        action="store_true",
        default=False,
        dest="clamp_max_rounds",
        help="Never let re-planning lower the round budget",
    )
    p.add_argument(
        "--warmup-runs",
        type=int,
        default=DEFAULT_WARMUP_RUNS,
        dest="warmup_runs",
        help=f"Calls used to estimate latency, first one discarded (default: {DEFAULT_WARMUP_RUNS})",
    )
    p.add_argument(
        "--no-live", action="store_true", default=False, dest="no_live", help="Disable live single-line progress output"
    )
    p.add_argument(
        "--log-file", type=str, default=None, dest="log_file", help="Also write debug logs to this file"
    )
    p.add_argument(
        "-v", "--verbose", action="store_true", default=False, help="Enable verbose/debug logging"
    )
    p.add_argument(
        "-q", "--quiet", action="store_true", default=False, help="Suppress info messages, only show warnings and errors"
    )
    args = p.parse_args(argv)

    export_format, export_file = args.export_results if args.export_results else (None, None)
    policy = SamplingPolicy(
        warmup_runs=args.warmup_runs,
        replan_cadence=ReplanCadence(args.replan),
        clamp_max_rounds=args.clamp_max_rounds,
    )
    return HarnessConfig(
        modules=args.modules,
        export_format=export_format,
        export_file=export_file,
        live_progress=(not args.no_live),
        timeout_sec=args.timeout_sec,
        policy=policy,
        verbose=args.verbose,
        log_file=args.log_file,
    ), args.verbose, args.quiet


def validate_config(cfg: HarnessConfig) -> None:
    """Validate configuration argument consistency."""
    if cfg.export_format is not None and cfg.export_format not in EXPORT_FORMATS:
        raise ValueError(f"--export_results format must be one of {', '.join(EXPORT_FORMATS)}")
    if cfg.timeout_sec is not None and cfg.timeout_sec <= 0:
        raise ValueError("--timeout must be > 0")
    if cfg.policy.warmup_runs < 2:
        raise ValueError("--warmup-runs must be >= 2")


def export_if_requested(results: list[BenchmarkResult], cfg: HarnessConfig) -> None:
    if cfg.export_format is None or cfg.export_file is None:
        return
    export_results(results, cfg.export_format, cfg.export_file)


def handle_keyboard_interrupt(results: list[BenchmarkResult], cfg: HarnessConfig) -> int:
    """Graceful handling of Ctrl+C interruption."""
    if cfg.live_progress and sys.stdout.isatty():
        sys.stdout.write("\n")
        sys.stdout.flush()
    if results:
        try:
            export_if_requested(results, cfg)
        except BenchmarkError as e:
            logger.error("Export failed: %s", e)
    print(f"Benchmarks completed before interrupt: {len(results)}")
    return EXIT_INTERRUPTED


def main(argv: list[str] | None = None, registry: BenchmarkRegistry | None = None) -> int:
    cfg, verbose, quiet = parse_args(argv)
    registry = registry if registry is not None else default_registry

    # Set up logging before anything else
    setup_logging(verbose=verbose, quiet=quiet, log_file=cfg.log_file)

    try:
        validate_config(cfg)
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_ERROR

    try:
        for path in cfg.modules:
            load_benchmark_file(path)
    except BenchmarkError as e:
        logger.error("Failed to load benchmarks: %s", e)
        return EXIT_ERROR

    if not len(registry):
        logger.error("No benchmarks registered.")
        return EXIT_NO_BENCHMARKS

    logger.info("Running %d benchmarks", len(registry))
    logger.debug(
        "Policy: warmup_runs=%d, replan=%s, clamp_max_rounds=%s",
        cfg.policy.warmup_runs,
        cfg.policy.replan_cadence.value,
        cfg.policy.clamp_max_rounds,
    )

    runner = BenchmarkRunner(
        registry,
        policy=cfg.policy,
        live_progress=cfg.live_progress,
        timeout_sec=cfg.timeout_sec,
    )
    results: list[BenchmarkResult] = []

    try:
        runner.run_all(results, on_result=write_result)
        export_if_requested(results, cfg)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return handle_keyboard_interrupt(results, cfg)
    except BenchmarkError as e:
        logger.error("Benchmark error: %s", e)
        return EXIT_ERROR

    logger.info("Completed successfully")
    return EXIT_SUCCESS
