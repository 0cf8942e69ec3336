"""Example benchmarks.

Run with::

    micro-benchmark samples/string_split_benchmark.py -e md results.md
"""

from micro_benchmark import benchmark


def split(text: str, delimiter: str) -> list[str]:
    return text.split(delimiter)


@benchmark(
    name="StringSplit",
    params={
        "/csv": ("Year,Make,Model,Description,Price\n1997,Ford,E350,\"ac, abs, moon\",3000.00",),
        "/empty": ("",),
    },
)
def string_split(text):
    split(text, ",")


@benchmark
def sort_small_list():
    sorted([5, 3, 9, 1, 7, 2])
