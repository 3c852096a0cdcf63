"""
Measurement runner.

Runs code under instrumentation, either in-process (`measure_function`) or
through an execution provider across a ladder of input sizes
(`MeasurementRunner`), then summarises the counts and infers the growth
rate they follow.
"""
from __future__ import annotations

import asyncio
import json
import math
import random
import time
from typing import Any, Callable, Iterable, Optional, Sequence

from pydantic import ValidationError

from .config import logger
from .instrument import InstrumentedList
from .models import (
    COUNT_FIELDS,
    ComplexityEstimate,
    CountAverages,
    CountsSnapshot,
    Measurement,
    MeasurementResult,
    MeasurementStats,
    OperationCounts,
)

MeasuredFn = Callable[[InstrumentedList, OperationCounts], Any]
InputGenerator = Callable[[int], list]

DEFAULT_SIZES = (100, 500, 1000, 5000, 10000)


def generate_random_input(size: int) -> list[int]:
    """Deterministic random permutation of range(size)."""
    values = list(range(size))
    random.Random(size).shuffle(values)
    return values


def combine_counts(*parts: OperationCounts) -> CountsSnapshot:
    """Sum several accumulators field by field."""
    return CountsSnapshot(**{
        name: sum(getattr(part, name) for part in parts) for name in COUNT_FIELDS
    })


# ---------------------------------------------------------------------------
# In-process measurement
# ---------------------------------------------------------------------------


def measure_function(fn: MeasuredFn, input: Iterable[Any]) -> MeasurementResult:
    """
    Execute `fn` once and measure its operations.

    `fn` receives an instrumented copy of `input` and a fresh shared
    accumulator for anything it wants to count by hand; both tallies are
    merged additively.
    """
    arr = InstrumentedList(input)
    shared = OperationCounts()

    start = time.perf_counter_ns()
    return_value = fn(arr, shared)
    elapsed_ns = time.perf_counter_ns() - start

    return MeasurementResult(
        return_value=return_value,
        counts=combine_counts(arr.counts, shared),
        execution_time_ms=max(0, elapsed_ns) / 1_000_000,
    )


def measure_at_sizes(
    generate_input: InputGenerator,
    fn: MeasuredFn,
    sizes: Sequence[int] = DEFAULT_SIZES,
) -> list[Measurement]:
    """Run `fn` in-process at each size, one fresh accumulator per size."""
    measurements = []
    for size in sizes:
        result = measure_function(fn, generate_input(size))
        measurements.append(Measurement(
            input_size=size,
            counts=result.counts,
            time_ns=result.execution_time_ms * 1_000_000,
        ))
    return measurements


# ---------------------------------------------------------------------------
# Sandboxed ladder
# ---------------------------------------------------------------------------


def parse_run_output(stdout: str, size: int) -> Optional[Measurement]:
    """Read the last `{counts, timeNs}` line of a harness run."""
    for line in reversed(stdout.splitlines()):
        line = line.strip()
        if not line.startswith("{"):
            continue
        try:
            payload = json.loads(line)
            return Measurement(
                input_size=size,
                counts=payload["counts"],
                time_ns=payload["timeNs"],
            )
        except (json.JSONDecodeError, KeyError, TypeError, ValidationError):
            continue
    return None


class MeasurementRunner:
    """
    Drives instrumented source through an execution provider.

    Each size runs independently with its own accumulator. Sizes that time
    out, exit non-zero or print nothing usable are dropped from the ladder.
    """

    def __init__(
        self,
        provider,
        timeout: Optional[float] = None,
        max_concurrency: int = 4,
    ):
        self.provider = provider
        self.timeout = timeout
        self._semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def run_size(self, instrumented_source: str, size: int, input: list) -> Optional[Measurement]:
        input_json = json.dumps({"input": input})

        async with self._semaphore:
            try:
                result = await self.provider.run(instrumented_source, input_json, timeout=self.timeout)
            except Exception as e:
                logger.warning(f"Execution provider failed at n={size}: {e}")
                return None

        if result.timed_out:
            logger.warning(f"Run timed out at n={size}, dropping size")
            return None
        if result.exit_code != 0:
            logger.warning(f"Run exited with code {result.exit_code} at n={size}, dropping size")
            return None

        measurement = parse_run_output(result.stdout, size)
        if measurement is None:
            logger.warning(f"Malformed run output at n={size}: {result.stdout[-200:]!r}")
        return measurement

    async def run_ladder(
        self,
        instrumented_source: str,
        sizes: Sequence[int],
        generate_input: InputGenerator = generate_random_input,
    ) -> list[Measurement]:
        tasks = [
            self.run_size(instrumented_source, size, generate_input(size))
            for size in sizes
        ]
        results = await asyncio.gather(*tasks)
        measurements = [m for m in results if m is not None]
        logger.info(f"Measured {len(measurements)}/{len(sizes)} sizes")
        return measurements


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


def calculate_stats(measurements: Sequence[Measurement]) -> MeasurementStats:
    """Average, min and max counts plus variance of the core operation total."""
    if not measurements:
        return MeasurementStats(
            avg_counts=CountAverages(),
            min_counts=CountsSnapshot(),
            max_counts=CountsSnapshot(),
            variance=0.0,
        )

    avg, low, high = {}, {}, {}
    for name in COUNT_FIELDS:
        values = [getattr(m.counts, name) for m in measurements]
        avg[name] = sum(values) / len(values)
        low[name] = min(values)
        high[name] = max(values)

    totals = [
        m.counts.comparisons + m.counts.swaps + m.counts.reads + m.counts.writes
        for m in measurements
    ]
    mean = sum(totals) / len(totals)
    variance = sum((t - mean) ** 2 for t in totals) / len(totals)

    return MeasurementStats(
        avg_counts=CountAverages(**avg),
        min_counts=CountsSnapshot(**low),
        max_counts=CountsSnapshot(**high),
        variance=variance,
    )


# ---------------------------------------------------------------------------
# Complexity inference
# ---------------------------------------------------------------------------


def _log2(n: float) -> float:
    return math.log2(max(n, 2.0))


# Lowest order first; ties go to the earlier entry.
GROWTH_CANDIDATES: tuple[tuple[str, Callable[[float], float]], ...] = (
    ("O(1)", lambda n: 1.0),
    ("O(log n)", _log2),
    ("O(n)", lambda n: n),
    ("O(n log n)", lambda n: n * _log2(n)),
    ("O(n²)", lambda n: n ** 2),
    ("O(n³)", lambda n: n ** 3),
)

SUPER_CUBIC = "O(2^n) or worse"


def _collapse(points: Iterable[Any]) -> list[tuple[float, float]]:
    """Average duplicate sizes and sort by size."""
    grouped: dict[float, list[float]] = {}
    for point in points:
        if isinstance(point, dict):
            n, ops = point["n"], point["ops"]
        else:
            n, ops = point
        n, ops = float(n), float(ops)
        if n <= 0 or ops < 0 or not (math.isfinite(n) and math.isfinite(ops)):
            continue
        grouped.setdefault(n, []).append(ops)
    return sorted((n, sum(v) / len(v)) for n, v in grouped.items())


def infer_complexity(points: Iterable[Any]) -> ComplexityEstimate:
    """
    Infer the growth class of operation counts across input sizes.

    `points` are (n, ops) pairs or {"n", "ops"} dicts; the ladder may be
    partial or non-contiguous. For each consecutive pair the observed growth
    is compared with each candidate's growth in log space, normalised by the
    log of the size step, so the error reads as an exponent difference.
    """
    series = _collapse(points)
    if len(series) < 2:
        return ComplexityEstimate(complexity="unknown", confidence=0.0)

    steps = []
    for (n_a, ops_a), (n_b, ops_b) in zip(series, series[1:]):
        if ops_a == 0 and ops_b == 0:
            observed = 1.0
        elif ops_a == 0 or ops_b == 0:
            continue
        else:
            observed = ops_b / ops_a
        steps.append((n_a, n_b, observed))

    if not steps:
        return ComplexityEstimate(complexity="unknown", confidence=0.0)

    slopes = [math.log(obs) / math.log(n_b / n_a) for n_a, n_b, obs in steps]
    if sum(slopes) / len(slopes) > 3.5:
        return ComplexityEstimate(complexity=SUPER_CUBIC, confidence=0.5)

    best_name, best_error = "unknown", math.inf
    for name, growth in GROWTH_CANDIDATES:
        errors = [
            abs(math.log(observed / (growth(n_b) / growth(n_a)))) / math.log(n_b / n_a)
            for n_a, n_b, observed in steps
        ]
        error = sum(errors) / len(errors)
        if error < best_error - 1e-9:
            best_name, best_error = name, error

    confidence = max(0.0, min(1.0, 1.0 - best_error))
    return ComplexityEstimate(complexity=best_name, confidence=round(confidence, 4))
