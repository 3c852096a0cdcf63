"""
Data models for the efficiency auditor.

Pydantic models shared by the detector, classifier, bounds database,
measurement runner and calculator. Attributes are snake_case; the wire
format (API, oracle replies, sandbox output) uses camelCase aliases.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ProblemClass(str, Enum):
    """Canonical computational problems the auditor knows about."""

    COMPARISON_SORT = "comparison-sort"
    COUNTING_SORT = "counting-sort"
    BINARY_SEARCH = "binary-search"
    LINEAR_SEARCH = "linear-search"
    GRAPH_BFS = "graph-bfs"
    GRAPH_DFS = "graph-dfs"
    SHORTEST_PATH_DIJKSTRA = "shortest-path-dijkstra"
    STRING_MATCH_NAIVE = "string-match-naive"
    STRING_MATCH_KMP = "string-match-kmp"
    MATRIX_MULTIPLY = "matrix-multiply"
    TREE_TRAVERSAL = "tree-traversal"
    HASH_LOOKUP = "hash-lookup"
    MEDIAN_FINDING = "median-finding"
    UNKNOWN = "unknown"


PROBLEM_CLASS_LABELS: dict[ProblemClass, str] = {
    ProblemClass.COMPARISON_SORT: "Comparison-Based Sort",
    ProblemClass.COUNTING_SORT: "Counting/Bucket Sort",
    ProblemClass.BINARY_SEARCH: "Binary Search",
    ProblemClass.LINEAR_SEARCH: "Linear Search",
    ProblemClass.GRAPH_BFS: "Breadth-First Search",
    ProblemClass.GRAPH_DFS: "Depth-First Search",
    ProblemClass.SHORTEST_PATH_DIJKSTRA: "Dijkstra Shortest Path",
    ProblemClass.STRING_MATCH_NAIVE: "Naive String Matching",
    ProblemClass.STRING_MATCH_KMP: "KMP String Matching",
    ProblemClass.MATRIX_MULTIPLY: "Matrix Multiplication",
    ProblemClass.TREE_TRAVERSAL: "Tree Traversal",
    ProblemClass.HASH_LOOKUP: "Hash Table Lookup",
    ProblemClass.MEDIAN_FINDING: "Median/Selection",
    ProblemClass.UNKNOWN: "Unknown Problem Class",
}


def get_class_label(problem_class: ProblemClass) -> str:
    """Human-readable label for a problem class."""
    return PROBLEM_CLASS_LABELS[ProblemClass(problem_class)]


OperationType = Literal["comparisons", "operations", "accesses"]


class CamelModel(BaseModel):
    """Base model serialising to camelCase and accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Static analysis
# ---------------------------------------------------------------------------


class CodePatterns(CamelModel):
    """Boolean feature vector produced by the pattern detector."""

    model_config = ConfigDict(frozen=True)

    has_comparisons: bool = False
    has_graph_structure: bool = False
    has_hash_access: bool = False
    has_loops: bool = False
    has_recursion: bool = False
    has_queue_operations: bool = False
    has_stack_operations: bool = False
    has_array_swaps: bool = False


class AlternativeClass(CamelModel):
    problem_class: ProblemClass = Field(alias="class")
    confidence: float = Field(ge=0.0, le=1.0)


class ClassificationResult(CamelModel):
    """Verdict of the classifier (heuristic, oracle, or both)."""

    problem_class: ProblemClass = Field(alias="class")
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    reasoning: str = ""
    alternative_classes: list[AlternativeClass] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Theoretical bounds
# ---------------------------------------------------------------------------


class Citation(CamelModel):
    model_config = ConfigDict(frozen=True)

    authors: tuple[str, ...] = ()
    title: str
    venue: str
    year: int
    theorem: Optional[str] = None


class BoundParams(CamelModel):
    """Formula parameters; which ones matter depends on the problem class."""

    n: Optional[float] = None  # Input size
    m: Optional[float] = None  # Secondary size (pattern length)
    v: Optional[float] = None  # Vertices
    e: Optional[float] = None  # Edges
    k: Optional[float] = None  # Range / buckets
    d: Optional[float] = None  # Depth / dimension


class TheoreticalBound(CamelModel):
    """Lower-bound formula for one problem class, with its source."""

    model_config = ConfigDict(frozen=True)

    problem_class: ProblemClass = Field(alias="class")
    notation: str
    formula: Callable[[BoundParams], float] = Field(exclude=True)
    operation_type: OperationType
    citation: Citation
    tight: bool
    assumptions: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Instrumentation and measurement
# ---------------------------------------------------------------------------


class OperationCounts(CamelModel):
    """
    Mutable tally of primitive operations for one run.

    Counters only ever grow; `reset()` is the single way back to zero and
    works in place so held references stay valid.
    """

    comparisons: int = Field(default=0, ge=0)
    swaps: int = Field(default=0, ge=0)
    reads: int = Field(default=0, ge=0)
    writes: int = Field(default=0, ge=0)
    allocations: int = Field(default=0, ge=0)
    function_calls: int = Field(default=0, ge=0)

    def reset(self) -> None:
        for name in COUNT_FIELDS:
            setattr(self, name, 0)

    def snapshot(self) -> "CountsSnapshot":
        return CountsSnapshot(**self.model_dump())


class CountsSnapshot(OperationCounts):
    """Frozen copy of an accumulator, taken once a run completes."""

    model_config = ConfigDict(frozen=True)


COUNT_FIELDS: tuple[str, ...] = (
    "comparisons",
    "swaps",
    "reads",
    "writes",
    "allocations",
    "function_calls",
)


class CountAverages(CamelModel):
    comparisons: float = 0.0
    swaps: float = 0.0
    reads: float = 0.0
    writes: float = 0.0
    allocations: float = 0.0
    function_calls: float = 0.0


class Measurement(CamelModel):
    """One executed, timed, counted run at a fixed input size."""

    model_config = ConfigDict(frozen=True)

    input_size: int = Field(ge=0)
    counts: CountsSnapshot
    time_ns: float = Field(ge=0)


class MeasurementResult(CamelModel):
    return_value: Any = None
    counts: CountsSnapshot
    execution_time_ms: float = Field(ge=0)


class MeasurementStats(CamelModel):
    avg_counts: CountAverages
    min_counts: CountsSnapshot
    max_counts: CountsSnapshot
    variance: float = 0.0


class ComplexityEstimate(CamelModel):
    complexity: str = "unknown"
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class ExecutionResult(CamelModel):
    """What the execution provider reports for a single sandboxed run."""

    stdout: str = ""
    exit_code: int = 0
    timed_out: bool = False


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


class EfficiencyCalculation(CamelModel):
    """
    Efficiency of one run against the theoretical minimum.

    `overhead_ratio` is the only field allowed to be infinite: it means no
    work was performed, or that there is no bound to judge against.
    """

    model_config = ConfigDict(ser_json_inf_nan="strings")

    problem_class: ProblemClass
    classification_confidence: float = 0.0
    input_size: float = 0
    theoretical_minimum: float = 0
    actual_operations: float = 0
    efficiency_ratio: float = Field(default=0.0, ge=0.0, le=100.0)
    wasted_operations: float = 0
    overhead_ratio: float = float("inf")
    notation: str = "unknown"
    optimal_algorithm: str = ""
    is_tight_bound: bool = False
    empirical_complexity: str = "unknown"


class SizedEfficiency(CamelModel):
    measurement: Measurement
    efficiency: EfficiencyCalculation


class AuditReport(CamelModel):
    """Everything one audit produced, from patterns to the final ratio."""

    model_config = ConfigDict(ser_json_inf_nan="strings")

    classification: ClassificationResult
    patterns: CodePatterns
    measurements: list[Measurement] = Field(default_factory=list)
    efficiencies: list[EfficiencyCalculation] = Field(default_factory=list)
    summary: Optional[EfficiencyCalculation] = None
    empirical: ComplexityEstimate = Field(default_factory=ComplexityEstimate)
    stats: MeasurementStats
    citation: str = ""
    formatted_efficiency: str = "0.00%"
    efficiency_bar: str = ""


# ---------------------------------------------------------------------------
# Benchmark
# ---------------------------------------------------------------------------


BenchmarkDifficulty = Literal["easy", "medium", "hard"]


class BenchmarkCase(CamelModel):
    id: str
    name: str
    language: Literal["typescript", "javascript", "python"]
    expected_class: ProblemClass
    difficulty: BenchmarkDifficulty
    description: str
    code: str
    expected_efficiency: Optional[float] = None


class BenchmarkResult(CamelModel):
    case_id: str
    predicted_class: ProblemClass
    expected_class: ProblemClass
    correct: bool
    confidence: float
    time_ms: float


class ClassAccuracy(CamelModel):
    total: int = 0
    correct: int = 0
    accuracy: float = 0.0


class BenchmarkSummary(CamelModel):
    total_cases: int
    correct_predictions: int
    accuracy: float
    by_class: dict[str, ClassAccuracy] = Field(default_factory=dict)
    by_difficulty: dict[str, ClassAccuracy] = Field(default_factory=dict)
    average_confidence: float = 0.0
    average_time_ms: float = 0.0
    results: list[BenchmarkResult] = Field(default_factory=list)
