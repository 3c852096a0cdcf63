"""
Classifier benchmark.

Scores `classify_code` against the labelled fixture of 100 snippets, ten
per registered problem class, split across easy/medium/hard.
"""
from __future__ import annotations

import time
from collections import Counter
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Union

from pydantic import TypeAdapter

from .classifier import classify_code
from .config import logger
from .models import (
    BenchmarkCase,
    BenchmarkResult,
    BenchmarkSummary,
    ClassAccuracy,
    ProblemClass,
)

if TYPE_CHECKING:
    from providers.oracle import ClassificationOracle


BENCHMARK_PATH = Path(__file__).resolve().parent / "data" / "classification_benchmark.json"

_CASES_ADAPTER = TypeAdapter(list[BenchmarkCase])


def load_benchmark(path: Union[str, Path, None] = None) -> list[BenchmarkCase]:
    """Load and validate the benchmark cases from a JSON file."""
    source = Path(path) if path is not None else BENCHMARK_PATH
    return _CASES_ADAPTER.validate_json(source.read_bytes())


def get_cases_by_class(cases: Iterable[BenchmarkCase], problem_class: ProblemClass) -> list[BenchmarkCase]:
    return [case for case in cases if case.expected_class == problem_class]


def get_cases_by_difficulty(cases: Iterable[BenchmarkCase], difficulty: str) -> list[BenchmarkCase]:
    return [case for case in cases if case.difficulty == difficulty]


def get_benchmark_stats(cases: Sequence[BenchmarkCase]) -> dict:
    """Case counts overall, per class and per difficulty."""
    return {
        "total": len(cases),
        "byClass": dict(Counter(case.expected_class.value for case in cases)),
        "byDifficulty": dict(Counter(case.difficulty for case in cases)),
    }


def _accuracy(results: Iterable[BenchmarkResult]) -> ClassAccuracy:
    results = list(results)
    correct = sum(1 for r in results if r.correct)
    return ClassAccuracy(
        total=len(results),
        correct=correct,
        accuracy=correct / len(results) if results else 0.0,
    )


async def run_benchmark(
    cases: Optional[Sequence[BenchmarkCase]] = None,
    oracle: Optional[ClassificationOracle] = None,
) -> BenchmarkSummary:
    """
    Classify every case and aggregate accuracy.

    Cases run one after another so per-case timings are comparable.
    """
    if cases is None:
        cases = load_benchmark()

    results: list[BenchmarkResult] = []
    difficulty_of: dict[str, str] = {}

    for case in cases:
        start = time.perf_counter()
        verdict = await classify_code(case.code, oracle=oracle)
        elapsed_ms = (time.perf_counter() - start) * 1000

        results.append(BenchmarkResult(
            case_id=case.id,
            predicted_class=verdict.problem_class,
            expected_class=case.expected_class,
            correct=verdict.problem_class == case.expected_class,
            confidence=verdict.confidence,
            time_ms=elapsed_ms,
        ))
        difficulty_of[case.id] = case.difficulty

    by_class = {
        cls.value: _accuracy(r for r in results if r.expected_class == cls)
        for cls in sorted({r.expected_class for r in results}, key=lambda c: c.value)
    }
    by_difficulty = {
        level: _accuracy(r for r in results if difficulty_of[r.case_id] == level)
        for level in ("easy", "medium", "hard")
        if level in difficulty_of.values()
    }

    total = len(results)
    correct = sum(1 for r in results if r.correct)
    logger.info(f"Benchmark: {correct}/{total} correct")

    return BenchmarkSummary(
        total_cases=total,
        correct_predictions=correct,
        accuracy=correct / total if total else 0.0,
        by_class=by_class,
        by_difficulty=by_difficulty,
        average_confidence=sum(r.confidence for r in results) / total if total else 0.0,
        average_time_ms=sum(r.time_ms for r in results) / total if total else 0.0,
        results=results,
    )
