"""Core module for algorithmic efficiency auditing."""

from .models import (
    AuditReport,
    ClassificationResult,
    CodePatterns,
    EfficiencyCalculation,
    OperationCounts,
    ProblemClass,
)
from .bounds import (
    calculate_theoretical_minimum,
    format_citation,
    get_bound,
    get_bounds_map,
    get_optimal_algorithm,
    is_tight_bound,
)
from .patterns import detect_code_patterns
from .classifier import classify_code, heuristic_classify
from .instrument import InstrumentedList, numeric_comparator, reset_counts
from .measurement import calculate_stats, infer_complexity, measure_function
from .calculator import (
    calculate_efficiency,
    calculate_efficiency_from_counts,
    format_efficiency,
    format_operations,
    generate_efficiency_bar,
)
from .analyzer import EfficiencyAuditor

__all__ = [
    "AuditReport",
    "ClassificationResult",
    "CodePatterns",
    "EfficiencyCalculation",
    "OperationCounts",
    "ProblemClass",
    "calculate_theoretical_minimum",
    "format_citation",
    "get_bound",
    "get_bounds_map",
    "get_optimal_algorithm",
    "is_tight_bound",
    "detect_code_patterns",
    "classify_code",
    "heuristic_classify",
    "InstrumentedList",
    "numeric_comparator",
    "reset_counts",
    "calculate_stats",
    "infer_complexity",
    "measure_function",
    "calculate_efficiency",
    "calculate_efficiency_from_counts",
    "format_efficiency",
    "format_operations",
    "generate_efficiency_bar",
    "EfficiencyAuditor",
]
