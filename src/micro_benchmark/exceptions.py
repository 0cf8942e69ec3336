"""Custom exceptions for micro-benchmark."""

from __future__ import annotations


class BenchmarkError(Exception):
    """Exception raised when a benchmark operation fails."""

    def __init__(
        self,
        message: str,
        *,
        benchmark: str | None = None,
        path: str | None = None,
        error: str | None = None,
    ) -> None:
        super().__init__(message)
        self.benchmark = benchmark
        self.path = path
        self.error = error

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.benchmark:
            parts.append(f"Benchmark: {self.benchmark}")
        if self.path:
            parts.append(f"Path: {self.path}")
        if self.error:
            parts.append(f"Error: {self.error}")
        return "\n".join(parts)


class BenchmarkCancelled(BenchmarkError):
    """Raised when a benchmark is cancelled before completing a single round."""
