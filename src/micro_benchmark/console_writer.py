"""Human-readable summary of a benchmark result."""

from __future__ import annotations

import sys
from typing import TextIO

from .result import BenchmarkResult

BOLD = "\x1b[1m"
UNDERLINE = "\x1b[4m"
GREEN = "\x1b[32m"
RED = "\x1b[31m"
RESET = "\x1b[0m"

_ORDINAL_SUFFIXES = ("th", "st", "nd", "rd", "th", "th", "th", "th", "th", "th")


def format_duration(ns: float, signed: bool = False) -> str:
    """Scale a nanosecond duration to ns/us/ms/s, rounded to whole units."""
    magnitude = abs(ns)
    if magnitude < 1e3:
        text = f"{magnitude:.0f} ns"
    elif magnitude < 1e6:
        text = f"{magnitude / 1e3:.0f} us"
    elif magnitude < 1e9:
        text = f"{magnitude / 1e6:.0f} ms"
    else:
        text = f"{magnitude / 1e9:.0f} s"
    if signed:
        return ("-" if ns < 0 else "+") + text
    return text


def ordinal(n: int) -> str:
    if 11 <= n % 100 <= 13:
        return f"{n}th"
    return f"{n}{_ORDINAL_SUFFIXES[n % 10]}"


def percent_difference(value: float, reference: float) -> float:
    if reference == 0:
        return 0.0
    return (value - reference) / reference * 100.0


def _throughput(value: float) -> str:
    return "inf" if value == float("inf") else f"{value:.0f}"


def write_result(result: BenchmarkResult, stream: TextIO | None = None) -> None:
    out = stream if stream is not None else sys.stdout
    color = out.isatty()

    def style(text: str, *codes: str) -> str:
        if not color or not codes:
            return text
        return "".join(codes) + text + RESET

    mean = result.mean_execution_time
    fastest_delta = result.fastest_execution_time - mean
    slowest_delta = result.slowest_execution_time - mean

    lines = [
        style(f"✓ {result.name}", BOLD, GREEN),
        "    " + style("Configuration", BOLD, UNDERLINE),
        f"      {result.num_runs} runs, {result.num_iterations} iterations per run",
        "    " + style("Execution Time", BOLD, UNDERLINE),
        f"      Average    {format_duration(mean):>10}",
        f"      Fastest    {format_duration(result.fastest_execution_time):>10} ("
        + style(
            f"{format_duration(fastest_delta, signed=True)} / "
            f"{percent_difference(result.fastest_execution_time, mean):.1f} %",
            GREEN,
        )
        + ")",
        f"      Slowest    {format_duration(result.slowest_execution_time):>10} ("
        + style(
            f"{format_duration(slowest_delta, signed=True)} / "
            f"{percent_difference(result.slowest_execution_time, mean):.1f} %",
            RED,
        )
        + ")",
        style(
            f"      Best Run   {format_duration(mean):>10} ± {result.lowest_rsd:.2f}% "
            f"({ordinal(result.lowest_rsd_index + 1)} run)",
            BOLD,
        ),
        "    " + style("Performance", BOLD, UNDERLINE),
        f"      Average    {_throughput(result.average_iteration_performance):>10} iterations/s",
        f"      Fastest    {_throughput(result.fastest_iteration_performance):>10} iterations/s",
        f"      Slowest    {_throughput(result.slowest_iteration_performance):>10} iterations/s",
        "",
    ]
    out.write("\n".join(lines) + "\n")
    out.flush()
