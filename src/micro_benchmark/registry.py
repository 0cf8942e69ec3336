"""Benchmark declaration and discovery.

Benchmarks are plain functions registered with the ``benchmark`` decorator::

    @benchmark
    def sort_small_list():
        sorted([3, 1, 2])

    @benchmark(name="StringSplit", params={"/csv": ("a,b,c",)})
    def string_split(text):
        text.split(",")

A ``params`` mapping registers one zero-argument benchmark per entry, named by
appending the key to the benchmark name and binding the values as positional
arguments.
"""

from __future__ import annotations

import functools
import importlib.util
import os
import sys
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Mapping, Sequence

from .exceptions import BenchmarkError
from .logging_config import logger


@dataclass(frozen=True)
class BenchmarkDefinition:
    name: str
    fn: Callable[[], Any]


class BenchmarkRegistry:
    def __init__(self) -> None:
        self._definitions: dict[str, BenchmarkDefinition] = {}

    def add(self, name: str, fn: Callable[[], Any]) -> BenchmarkDefinition:
        if name in self._definitions:
            raise ValueError(f"Benchmark already registered: {name}")
        definition = BenchmarkDefinition(name, fn)
        self._definitions[name] = definition
        logger.debug("Registered benchmark %s", name)
        return definition

    def register(
        self,
        fn: Callable[..., Any] | None = None,
        *,
        name: str | None = None,
        params: Mapping[str, Sequence[Any]] | None = None,
    ) -> Any:
        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            base = name or func.__name__
            if params is None:
                self.add(base, func)
            else:
                for suffix, args in params.items():
                    self.add(f"{base}{suffix}", functools.partial(func, *args))
            return func

        if fn is not None:
            return decorator(fn)
        return decorator

    def clear(self) -> None:
        self._definitions.clear()

    def __iter__(self) -> Iterator[BenchmarkDefinition]:
        return iter(list(self._definitions.values()))

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions


default_registry = BenchmarkRegistry()


def benchmark(
    fn: Callable[..., Any] | None = None,
    *,
    name: str | None = None,
    params: Mapping[str, Sequence[Any]] | None = None,
    registry: BenchmarkRegistry | None = None,
) -> Any:
    """Register ``fn`` as a benchmark, with or without arguments."""
    target = registry if registry is not None else default_registry
    return target.register(fn, name=name, params=params)


def load_benchmark_file(path: str) -> None:
    """Import a Python file so that its ``@benchmark`` declarations register."""
    if not os.path.isfile(path):
        raise BenchmarkError("Benchmark file not found", path=path)
    module_name = "_micro_benchmark_" + os.path.splitext(os.path.basename(path))[0]
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise BenchmarkError("Cannot import benchmark file", path=path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise BenchmarkError("Failed to import benchmark file", path=path, error=str(e)) from e
    logger.debug("Loaded benchmarks from %s", path)
