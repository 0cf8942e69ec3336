from __future__ import annotations

import contextlib
import sys
from typing import Iterator, TextIO

from .sampler import RoundProgress

HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"


def short_duration(ns: float) -> str:
    if ns < 1e3:
        return f"{ns:.3g}ns"
    if ns < 1e6:
        return f"{ns / 1e3:.3g}us"
    if ns < 1e9:
        return f"{ns / 1e6:.3g}ms"
    return f"{ns / 1e9:.3g}s"


def render_progress_line(name: str, progress: RoundProgress) -> str:
    width = 20
    done = progress.round_index + 1
    ratio = min(1.0, done / progress.max_rounds if progress.max_rounds > 0 else 0.0)
    filled = int(width * ratio)
    bar = "█" * filled + "░" * (width - filled)
    return (
        f"{name} [{bar}] {done}/{progress.max_rounds} "
        f"μ = {short_duration(progress.lowest_rsd_mean)} ± {progress.lowest_rsd:.3g}%, "
        f"N = {progress.lowest_rsd_iterations}"
    )


def print_live_progress(line: str, enabled: bool) -> None:
    if enabled and sys.stdout.isatty():
        sys.stdout.write("\r\x1b[2K" + line)
        sys.stdout.flush()


class LiveProgress:
    """Progress sink redrawing a single terminal line per benchmark."""

    def __init__(self, name: str, enabled: bool = True) -> None:
        self.name = name
        self.enabled = enabled
        self.last: RoundProgress | None = None

    def __call__(self, progress: RoundProgress) -> None:
        self.last = progress
        print_live_progress(render_progress_line(self.name, progress), self.enabled)

    def finish(self) -> None:
        # Move off the live line
        if self.enabled and self.last is not None and sys.stdout.isatty():
            sys.stdout.write("\n")
            sys.stdout.flush()


@contextlib.contextmanager
def hidden_cursor(enabled: bool = True, stream: TextIO | None = None) -> Iterator[None]:
    """Hide the terminal cursor for the duration of the block.

    The cursor is shown again on every exit path, including exceptions and
    KeyboardInterrupt.
    """
    out = stream if stream is not None else sys.stdout
    active = enabled and out.isatty()
    if active:
        out.write(HIDE_CURSOR)
        out.flush()
    try:
        yield
    finally:
        if active:
            out.write(SHOW_CURSOR)
            out.flush()
