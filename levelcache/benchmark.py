"""Write and read latency benchmarks for the cache."""

from __future__ import annotations

import argparse
import logging
import random
import shutil
import string
import sys
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from levelcache.cache import LevelCache

_CHARSET = string.ascii_lowercase + string.ascii_uppercase + string.digits
_KEY_LEN = 31
_VALUE_LEN = 127
_PERCENTILES = (("p50(ns)", 0.50), ("p90(ns)", 0.90), ("p95(ns)", 0.95), ("p99(ns)", 0.99))


@dataclass
class BenchmarkResult:
    """Outcome of one benchmark run."""

    name: str
    iterations: int
    elapsed_ns: int
    counters: dict[str, float] = field(default_factory=dict)

    @property
    def items_per_second(self) -> float:
        if self.elapsed_ns <= 0:
            return 0.0
        return self.iterations * 1e9 / self.elapsed_ns

    def __str__(self) -> str:
        counters = " ".join(f"{name}={value:.0f}" for name, value in self.counters.items())
        return (
            f"{self.name:<12} {self.iterations:>10} iters "
            f"{self.items_per_second:>14.1f} items/s  {counters}"
        )


def random_string(size: int) -> str:
    """Return ``size`` random letters and digits."""
    if size < 0:
        raise ValueError("size must not be negative")
    return "".join(random.choices(_CHARSET, k=size))


def percentiles(latencies: Sequence[float]) -> dict[str, float]:
    """Return the p50, p90, p95 and p99 of ``latencies``."""
    if not latencies:
        raise ValueError("no latencies to summarise")
    ordered = sorted(latencies)
    return {name: ordered[int(len(ordered) * q)] for name, q in _PERCENTILES}


def bench_write(cache: LevelCache, iterations: int) -> BenchmarkResult:
    """Time ``iterations`` puts of random keys and values."""
    if iterations <= 0:
        raise ValueError("iterations must be positive")
    latencies = []
    total = 0
    for _ in range(iterations):
        key = random_string(_KEY_LEN)
        value = random_string(_VALUE_LEN)
        start = time.perf_counter_ns()
        cache.put(key, value, 0)
        elapsed = time.perf_counter_ns() - start
        latencies.append(elapsed)
        total += elapsed
    return BenchmarkResult("BM_Write", iterations, total, percentiles(latencies))


def bench_read(cache: LevelCache, keys: Sequence[str], iterations: int) -> BenchmarkResult:
    """Time ``iterations`` gets of keys drawn at random from ``keys``."""
    if not keys:
        raise ValueError("No keys to read")
    if iterations <= 0:
        raise ValueError("iterations must be positive")
    latencies = []
    total = 0
    for _ in range(iterations):
        key = random.choice(keys)
        start = time.perf_counter_ns()
        cache.get(key)
        elapsed = time.perf_counter_ns() - start
        latencies.append(elapsed)
        total += elapsed
    return BenchmarkResult("BM_Read", iterations, total, percentiles(latencies))


def main(argv: list[str] | None = None) -> int:
    """Run the write and read benchmarks and print their results."""
    parser = argparse.ArgumentParser(description="Benchmark cache writes and reads.")
    parser.add_argument(
        "--path",
        default=str(Path(tempfile.gettempdir()) / "levelcache_gbenchmark_db"),
        help="database directory, removed before and after the run",
    )
    parser.add_argument("--memory-mb", type=int, default=100)
    parser.add_argument("--prepopulate", type=int, default=20000)
    parser.add_argument("--iterations", type=int, default=100000)
    parser.add_argument("--repetitions", type=int, default=3)
    args = parser.parse_args(argv)

    shutil.rmtree(args.path, ignore_errors=True)
    try:
        cache = LevelCache(args.path, args.memory_mb, 0, 0, logging.CRITICAL)
    except Exception as exc:
        print(f"Failed to open database. Aborting benchmarks. ({exc})", file=sys.stderr)
        return 1

    try:
        with cache:
            keys = []
            for _ in range(args.prepopulate):
                key = random_string(_KEY_LEN)
                cache.put(key, random_string(_VALUE_LEN), 0)
                keys.append(key)

            for _ in range(args.repetitions):
                print(bench_write(cache, args.iterations))
            if keys:
                for _ in range(args.repetitions):
                    print(bench_read(cache, keys, args.iterations))
            else:
                print("BM_Read      skipped: No keys to read")
    finally:
        shutil.rmtree(args.path, ignore_errors=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())