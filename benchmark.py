"""
Classifier benchmark script.

Scores the problem classifier on the labelled fixture and prints accuracy
per class and per difficulty. Set ORACLE_PROVIDER to include an oracle.
"""

import asyncio
import time

from auditor.benchmark import get_benchmark_stats, load_benchmark, run_benchmark
from auditor.calculator import generate_efficiency_bar
from auditor.config import settings
from providers.oracle import create_oracle


async def run_classifier_benchmark():
    """Run every fixture case through the classifier and print the report."""
    cases = load_benchmark()
    stats = get_benchmark_stats(cases)
    oracle = create_oracle(settings)

    print("=" * 80)
    print(f"CLASSIFIER BENCHMARK - {stats['total']} cases - oracle: {settings.ORACLE_PROVIDER}")
    print("=" * 80)
    print()

    overall_start = time.time()
    try:
        summary = await run_benchmark(cases, oracle=oracle)
    finally:
        if oracle is not None:
            await oracle.close()
    overall_elapsed = time.time() - overall_start

    expected_by_id = {case.id: case for case in cases}

    print("MISCLASSIFIED CASES:")
    print("-" * 80)
    print(f"{'Case':<12} {'Expected':<24} {'Predicted':<24} {'Conf.'}")
    print("-" * 80)
    for result in summary.results:
        if result.correct:
            continue
        case = expected_by_id[result.case_id]
        print(
            f"{case.id:<12} {result.expected_class.value:<24} "
            f"{result.predicted_class.value:<24} {result.confidence:.2f}"
        )

    print()
    print("=" * 80)
    print("ACCURACY BY CLASS")
    print("=" * 80)
    for name, acc in summary.by_class.items():
        bar = generate_efficiency_bar(acc.accuracy * 100, width=20)
        print(f"{name:<24} {bar} {acc.correct:>3}/{acc.total:<3} {acc.accuracy:>6.1%}")

    print()
    print("ACCURACY BY DIFFICULTY")
    print("-" * 80)
    for level, acc in summary.by_difficulty.items():
        print(f"{level:<24} {acc.correct:>3}/{acc.total:<3} {acc.accuracy:>6.1%}")

    print()
    print("=" * 80)
    print("STATISTICS")
    print("=" * 80)
    print(f"Total cases:           {summary.total_cases}")
    print(f"Correct:               {summary.correct_predictions}")
    print(f"Accuracy:              {summary.accuracy:.1%}")
    print(f"Average confidence:    {summary.average_confidence:.2f}")
    print(f"Average time:          {summary.average_time_ms:.2f}ms")
    print(f"Total time:            {overall_elapsed:.3f}s")
    print("=" * 80)


if __name__ == "__main__":
    print("\nStarting classifier benchmark...\n")

    try:
        asyncio.run(run_classifier_benchmark())
    except KeyboardInterrupt:
        print("\n\nBenchmark interrupted by user")
    except Exception as e:
        print(f"\n\nBenchmark failed: {e}")
