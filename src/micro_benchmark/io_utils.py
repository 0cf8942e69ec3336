from __future__ import annotations

import contextlib
import csv
import dataclasses
import io
import json
import math
import os
import tempfile
from typing import Any, Callable, Sequence

from .constants import EXPORT_FORMATS
from .exceptions import BenchmarkError
from .logging_config import logger
from .result import BenchmarkResult

RESULT_FIELDS = [f.name for f in dataclasses.fields(BenchmarkResult)]


def write_text_atomic(output_file: str, text: str) -> None:
    """Write text atomically to avoid corruption.

    Writes to a temporary file first, then atomically replaces the target file.
    This ensures the output file is never in a partially-written state.
    """
    dir_path = os.path.dirname(output_file) or "."
    temp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=dir_path,
            delete=False,
            suffix=".tmp",
            encoding="utf-8",
            newline="",
        ) as f:
            temp_path = f.name
            f.write(text)
        os.replace(temp_path, output_file)  # Atomic on POSIX
    except OSError as e:
        if temp_path and os.path.exists(temp_path):
            with contextlib.suppress(OSError):
                os.unlink(temp_path)
        raise BenchmarkError(
            f"Failed to write to {output_file}",
            path=output_file,
            error=str(e),
        ) from e


def write_json_atomic(output_file: str, data: Any) -> None:
    write_text_atomic(output_file, json.dumps(data, indent=2, allow_nan=False) + "\n")


def _json_safe(row: dict[str, Any]) -> dict[str, Any]:
    # JSON has no infinity; an unmeasurably fast call exports null throughput
    return {k: None if isinstance(v, float) and not math.isfinite(v) else v for k, v in row.items()}


def results_to_json(results: Sequence[BenchmarkResult]) -> dict:
    return {
        "version": 1,
        "benchmarks": [_json_safe(r.to_dict()) for r in results],
    }


def results_to_csv(results: Sequence[BenchmarkResult]) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=RESULT_FIELDS, lineterminator="\n")
    writer.writeheader()
    for r in results:
        writer.writerow(r.to_dict())
    return buf.getvalue()


def _md_cell(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value).replace("|", "\\|")


def results_to_markdown(results: Sequence[BenchmarkResult]) -> str:
    lines = [
        "| " + " | ".join(RESULT_FIELDS) + " |",
        "|" + "|".join("---" for _ in RESULT_FIELDS) + "|",
    ]
    for r in results:
        row = r.to_dict()
        lines.append("| " + " | ".join(_md_cell(row[name]) for name in RESULT_FIELDS) + " |")
    return "\n".join(lines) + "\n"


def _write_json(results: Sequence[BenchmarkResult], output_file: str) -> None:
    write_json_atomic(output_file, results_to_json(results))


def _write_csv(results: Sequence[BenchmarkResult], output_file: str) -> None:
    write_text_atomic(output_file, results_to_csv(results))


def _write_markdown(results: Sequence[BenchmarkResult], output_file: str) -> None:
    write_text_atomic(output_file, results_to_markdown(results))


_EXPORTERS: dict[str, Callable[[Sequence[BenchmarkResult], str], None]] = {
    "csv": _write_csv,
    "json": _write_json,
    "md": _write_markdown,
}


def export_results(results: Sequence[BenchmarkResult], fmt: str, output_file: str) -> None:
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unknown export format: {fmt} (expected one of {', '.join(EXPORT_FORMATS)})")
    _EXPORTERS[fmt](results, output_file)
    logger.info("Exported %d results to %s (%s)", len(results), output_file, fmt)
