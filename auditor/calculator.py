"""
Efficiency calculator.

Turns a classification plus measured operation counts into an
EfficiencyCalculation: theoretical minimum, actual operations, ratio and
waste. Also holds the presentation helpers used by the API and the
benchmark script.
"""
from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Optional, Sequence

from .bounds import (
    ParamsLike,
    calculate_theoretical_minimum,
    get_bound,
    get_optimal_algorithm,
)
from .classifier import classify_code
from .config import logger
from .measurement import (
    DEFAULT_SIZES,
    InputGenerator,
    MeasuredFn,
    infer_complexity,
    measure_at_sizes,
)
from .models import (
    BoundParams,
    ClassificationResult,
    EfficiencyCalculation,
    OperationCounts,
    OperationType,
    ProblemClass,
    SizedEfficiency,
)

if TYPE_CHECKING:
    from providers.oracle import ClassificationOracle


def select_operations(counts: OperationCounts, operation_type: OperationType) -> int:
    """Sum the counters a bound of the given operation type is stated in."""
    if operation_type == "comparisons":
        return counts.comparisons
    if operation_type == "accesses":
        return counts.reads + counts.writes
    return counts.comparisons + counts.swaps + counts.reads + counts.writes


def _params(params: ParamsLike) -> BoundParams:
    if params is None:
        return BoundParams()
    if isinstance(params, BoundParams):
        return params
    return BoundParams.model_validate(dict(params))


def _clamp_ratio(ratio: float) -> float:
    if math.isnan(ratio):
        return 0.0
    return min(100.0, max(0.0, ratio))


def calculate_efficiency_from_counts(
    problem_class: Any,
    counts: OperationCounts,
    params: ParamsLike = None,
    classification_confidence: float = 0.0,
) -> EfficiencyCalculation:
    """
    Efficiency of a run with known counts.

    An unregistered class reports `unknown` with ratio 0 rather than raising.
    Zero actual operations means no work was performed: ratio 0 and an
    infinite overhead ratio.
    """
    bound_params = _params(params)
    input_size = bound_params.n or 0
    bound = get_bound(problem_class)

    if bound is None:
        return EfficiencyCalculation(
            problem_class=ProblemClass.UNKNOWN,
            classification_confidence=classification_confidence,
            input_size=input_size,
            theoretical_minimum=0,
            actual_operations=counts.comparisons + counts.swaps + counts.reads + counts.writes,
            efficiency_ratio=0.0,
            wasted_operations=0,
            overhead_ratio=math.inf,
            notation="unknown",
            optimal_algorithm="Unknown problem class",
            is_tight_bound=False,
        )

    theoretical = calculate_theoretical_minimum(bound.problem_class, bound_params)
    actual = select_operations(counts, bound.operation_type)

    if actual <= 0:
        ratio, overhead = 0.0, math.inf
    else:
        ratio = _clamp_ratio(theoretical / actual * 100)
        overhead = actual / theoretical if theoretical > 0 else math.inf

    return EfficiencyCalculation(
        problem_class=bound.problem_class,
        classification_confidence=classification_confidence,
        input_size=input_size,
        theoretical_minimum=theoretical,
        actual_operations=actual,
        efficiency_ratio=ratio,
        wasted_operations=max(0, actual - theoretical),
        overhead_ratio=overhead,
        notation=bound.notation,
        optimal_algorithm=get_optimal_algorithm(bound.problem_class),
        is_tight_bound=bound.tight,
    )


async def calculate_efficiency(
    code: str,
    input_size: int,
    actual_operations: OperationCounts,
    classification: Optional[ClassificationResult] = None,
    params: ParamsLike = None,
    oracle: Optional[ClassificationOracle] = None,
) -> EfficiencyCalculation:
    """
    Classify `code` (unless a classification is supplied) and compute its
    efficiency for the given counts.
    """
    if classification is None:
        classification = await classify_code(code, oracle=oracle)

    bound_params = _params(params)
    if bound_params.n is None:
        bound_params = bound_params.model_copy(update={"n": float(input_size)})

    return calculate_efficiency_from_counts(
        classification.problem_class,
        actual_operations,
        bound_params,
        classification_confidence=classification.confidence,
    )


def analyze_at_sizes(
    problem_class: Any,
    generate_input: InputGenerator,
    fn: MeasuredFn,
    sizes: Sequence[int] = DEFAULT_SIZES,
    params: ParamsLike = None,
) -> list[SizedEfficiency]:
    """
    Measure `fn` in-process across `sizes` and compute efficiency at each.

    Every result carries the complexity inferred from the whole ladder.
    """
    measurements = measure_at_sizes(generate_input, fn, sizes)
    base = _params(params)
    bound = get_bound(problem_class)
    operation_type = bound.operation_type if bound is not None else "operations"

    empirical = infer_complexity(
        (m.input_size, select_operations(m.counts, operation_type)) for m in measurements
    )
    logger.debug(f"Empirical complexity for {problem_class}: {empirical.complexity}")

    results = []
    for measurement in measurements:
        efficiency = calculate_efficiency_from_counts(
            problem_class,
            measurement.counts,
            base.model_copy(update={"n": float(measurement.input_size)}),
        )
        results.append(SizedEfficiency(
            measurement=measurement,
            efficiency=efficiency.model_copy(update={"empirical_complexity": empirical.complexity}),
        ))
    return results


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_efficiency(ratio: float) -> str:
    """
    Format an efficiency ratio for display.

    Whole percent from 10% up, one decimal between 1% and 10%, two decimals
    below 1% so that near-zero ratios stay visible.
    """
    if not math.isfinite(ratio):
        ratio = 0.0
    ratio = max(0.0, ratio)
    if ratio >= 99.5:
        return "100%"
    # Promote when rounding reaches the next precision band, e.g. 9.96 -> 10%
    if ratio < 1 and f"{ratio:.2f}" != "1.00":
        return f"{ratio:.2f}%"
    if ratio < 10 and f"{ratio:.1f}" != "10.0":
        return f"{ratio:.1f}%"
    return f"{_round_half_up(ratio)}%"


def format_operations(count: float) -> str:
    """Format an operation count with a K/M/B suffix, e.g. 1500 -> '1.5K'."""
    if count < 1_000:
        return str(int(count))
    for scale, suffix in ((1_000, "K"), (1_000_000, "M")):
        scaled = f"{count / scale:.1f}"
        if float(scaled) < 1_000:
            return f"{scaled}{suffix}"
    return f"{count / 1_000_000_000:.1f}B"


def generate_efficiency_bar(score: float, width: int = 50) -> str:
    """Fixed-width bar proportional to a 0-100 score."""
    width = max(0, int(width))
    if not math.isfinite(score):
        score = 0.0
    score = min(100.0, max(0.0, score))
    filled = min(width, _round_half_up(score / 100 * width))
    return "█" * filled + "░" * (width - filled)
