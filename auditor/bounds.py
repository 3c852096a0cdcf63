"""
Theoretical bounds database.

Curated lower bounds, one per registered problem class, each with the
citation it comes from. The efficiency ratio is
(theoretical_minimum / actual_operations) * 100.
"""
from __future__ import annotations

import math
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from .models import BoundParams, Citation, ProblemClass, TheoreticalBound


ParamsLike = Union[BoundParams, Mapping[str, Any], None]


# ---------------------------------------------------------------------------
# Citations
# ---------------------------------------------------------------------------

CLRS = Citation(
    authors=("Cormen", "Leiserson", "Rivest", "Stein"),
    title="Introduction to Algorithms",
    venue="MIT Press",
    year=2009,
)

KNUTH_VOL3 = Citation(
    authors=("Knuth",),
    title="The Art of Computer Programming, Vol. 3: Sorting and Searching",
    venue="Addison-Wesley",
    year=1998,
)

KMP_PAPER = Citation(
    authors=("Knuth", "Morris", "Pratt"),
    title="Fast Pattern Matching in Strings",
    venue="SIAM Journal on Computing",
    year=1977,
)

DIJKSTRA_PAPER = Citation(
    authors=("Dijkstra",),
    title="A Note on Two Problems in Connexion with Graphs",
    venue="Numerische Mathematik",
    year=1959,
)

BLUM_MEDIAN = Citation(
    authors=("Blum", "Floyd", "Pratt", "Rivest", "Tarjan"),
    title="Time Bounds for Selection",
    venue="Journal of Computer and System Sciences",
    year=1973,
)

FOLKLORE = Citation(
    authors=(),
    title="Information-theoretic lower bound",
    venue="Folklore",
    year=0,
)


def _value(raw: Optional[float], default: float) -> float:
    return default if raw is None else raw


# ---------------------------------------------------------------------------
# Formulas
# ---------------------------------------------------------------------------


def _comparison_sort(p: BoundParams) -> float:
    # ceil(log2(n!)) ~ n log2 n - n log2 e, Stirling
    n = _value(p.n, 1)
    if n <= 1:
        return 0
    return n * math.log2(n) - 1.44 * n


def _binary_search(p: BoundParams) -> float:
    n = _value(p.n, 1)
    if n <= 1:
        return 1
    return math.ceil(math.log2(n))


def _linear(p: BoundParams) -> float:
    return _value(p.n, 1)


def _vertices_plus_edges(p: BoundParams) -> float:
    return _value(p.v, 0) + _value(p.e, 0)


def _dijkstra(p: BoundParams) -> float:
    v = _value(p.v, 1)
    if v <= 1:
        return 0
    return (v + _value(p.e, 0)) * math.log2(v)


def _naive_string_match(p: BoundParams) -> float:
    # Worst case of the sliding window: (n - m + 1) positions, m chars each
    n = _value(p.n, 0)
    m = _value(p.m, 0)
    if n == 0 or m == 0 or m > n:
        return 0
    return (n - m + 1) * m


def _kmp(p: BoundParams) -> float:
    return _value(p.n, 0) + _value(p.m, 0)


def _matrix_multiply(p: BoundParams) -> float:
    n = _value(p.n, 0)
    return n * n


def _selection(p: BoundParams) -> float:
    return _value(p.n, 0)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

_BOUNDS = (
    # Decision-tree argument: n! leaves need log2(n!) comparisons.
    TheoreticalBound(
        problem_class=ProblemClass.COMPARISON_SORT,
        notation="Ω(n log n)",
        formula=_comparison_sort,
        operation_type="comparisons",
        citation=CLRS.model_copy(update={"theorem": "Theorem 8.1"}),
        tight=True,
        assumptions=(
            "Comparison-based sorting only",
            "All elements are distinct",
            "Random access memory model",
        ),
    ),
    # Each comparison yields at most one bit; log2(n) bits pick a position.
    TheoreticalBound(
        problem_class=ProblemClass.BINARY_SEARCH,
        notation="Ω(log n)",
        formula=_binary_search,
        operation_type="comparisons",
        citation=FOLKLORE,
        tight=True,
        assumptions=(
            "Sorted input array",
            "Random access memory",
            "Element may or may not exist",
        ),
    ),
    # Adversary places the target in the last position examined.
    TheoreticalBound(
        problem_class=ProblemClass.LINEAR_SEARCH,
        notation="Ω(n)",
        formula=_linear,
        operation_type="comparisons",
        citation=FOLKLORE,
        tight=True,
        assumptions=(
            "Unsorted input",
            "No preprocessing allowed",
            "Element may not exist",
        ),
    ),
    TheoreticalBound(
        problem_class=ProblemClass.GRAPH_BFS,
        notation="Ω(V + E)",
        formula=_vertices_plus_edges,
        operation_type="operations",
        citation=CLRS.model_copy(update={"theorem": "Theorem 22.2"}),
        tight=True,
        assumptions=(
            "Adjacency list representation",
            "Must visit all reachable vertices",
            "Unweighted graph",
        ),
    ),
    TheoreticalBound(
        problem_class=ProblemClass.GRAPH_DFS,
        notation="Ω(V + E)",
        formula=_vertices_plus_edges,
        operation_type="operations",
        citation=CLRS.model_copy(update={"theorem": "Theorem 22.3"}),
        tight=True,
        assumptions=(
            "Adjacency list representation",
            "Must visit all reachable vertices",
        ),
    ),
    # Binary heap bound; Fibonacci heaps give O(V log V + E).
    TheoreticalBound(
        problem_class=ProblemClass.SHORTEST_PATH_DIJKSTRA,
        notation="Ω((V + E) log V)",
        formula=_dijkstra,
        operation_type="operations",
        citation=DIJKSTRA_PAPER,
        tight=True,
        assumptions=(
            "Binary heap priority queue",
            "Non-negative edge weights",
            "Single-source shortest paths",
        ),
    ),
    # Not a lower bound: the naive worst case. The true lower bound is Ω(n).
    TheoreticalBound(
        problem_class=ProblemClass.STRING_MATCH_NAIVE,
        notation="Ω(nm)",
        formula=_naive_string_match,
        operation_type="comparisons",
        citation=KNUTH_VOL3,
        tight=False,
        assumptions=(
            "Naive sliding window approach",
            "No preprocessing of pattern",
            "Worst case adversarial input",
        ),
    ),
    TheoreticalBound(
        problem_class=ProblemClass.STRING_MATCH_KMP,
        notation="Ω(n + m)",
        formula=_kmp,
        operation_type="comparisons",
        citation=KMP_PAPER,
        tight=True,
        assumptions=(
            "Pattern preprocessing allowed",
            "Single pattern matching",
            "Sequential text scanning",
        ),
    ),
    # n² output cells must be written; best known upper bound is ~O(n^2.37).
    TheoreticalBound(
        problem_class=ProblemClass.MATRIX_MULTIPLY,
        notation="Ω(n²)",
        formula=_matrix_multiply,
        operation_type="operations",
        citation=FOLKLORE,
        tight=False,
        assumptions=(
            "n × n square matrices",
            "Standard algebraic operations",
            "No sparsity exploitation",
        ),
    ),
    TheoreticalBound(
        problem_class=ProblemClass.MEDIAN_FINDING,
        notation="Ω(n)",
        formula=_selection,
        operation_type="comparisons",
        citation=BLUM_MEDIAN,
        tight=True,
        assumptions=(
            "Finding exact median or kth element",
            "No preprocessing/sorting allowed",
            "Comparison-based model",
        ),
    ),
)

BOUNDS_DATABASE: Mapping[ProblemClass, TheoreticalBound] = MappingProxyType(
    {bound.problem_class: bound for bound in _BOUNDS}
)


_OPTIMAL_ALGORITHMS: Mapping[ProblemClass, str] = MappingProxyType({
    ProblemClass.COMPARISON_SORT: "Merge sort or heap sort: O(n log n) comparisons, stable",
    ProblemClass.COUNTING_SORT: "Counting sort: O(n + k) where k is range, non-comparison",
    ProblemClass.BINARY_SEARCH: "Iterative binary search: O(log n) comparisons, space O(1)",
    ProblemClass.LINEAR_SEARCH: "Sequential scan: O(n) comparisons worst case, O(1) space",
    ProblemClass.GRAPH_BFS: "Queue-based BFS: O(V + E) with adjacency list representation",
    ProblemClass.GRAPH_DFS: "Recursive or stack-based DFS: O(V + E) with adjacency list",
    ProblemClass.SHORTEST_PATH_DIJKSTRA: "Dijkstra with binary heap: O((V + E) log V)",
    ProblemClass.STRING_MATCH_NAIVE: "Sliding window: O(nm) worst case, O(1) space",
    ProblemClass.STRING_MATCH_KMP: "Knuth-Morris-Pratt: O(n + m) with O(m) preprocessing",
    ProblemClass.MATRIX_MULTIPLY: "Strassen: O(n^2.807), practical for large matrices",
    ProblemClass.TREE_TRAVERSAL: "Iterative with stack or Morris traversal: O(n)",
    ProblemClass.HASH_LOOKUP: "Hash table with good hash function: O(1) amortized",
    ProblemClass.MEDIAN_FINDING: "Quickselect: O(n) expected, or median-of-medians: O(n) worst case",
    ProblemClass.UNKNOWN: "Unable to determine optimal algorithm for unknown problem class",
})


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def _coerce_class(problem_class: Any) -> Optional[ProblemClass]:
    try:
        return ProblemClass(problem_class)
    except ValueError:
        return None


def _coerce_params(params: ParamsLike) -> BoundParams:
    if params is None:
        return BoundParams()
    if isinstance(params, BoundParams):
        return params
    return BoundParams.model_validate(dict(params))


def get_bound(problem_class: Any) -> Optional[TheoreticalBound]:
    """Get the theoretical bound for a problem class, or None if unregistered."""
    cls = _coerce_class(problem_class)
    if cls is None:
        return None
    return BOUNDS_DATABASE.get(cls)


def calculate_theoretical_minimum(problem_class: Any, params: ParamsLike) -> float:
    """
    Minimum operations for a problem class at the given parameters.

    Returns +inf for unregistered classes, meaning "cannot judge".
    """
    bound = get_bound(problem_class)
    if bound is None:
        return math.inf
    raw = bound.formula(_coerce_params(params))
    if not math.isfinite(raw):
        return 0
    return max(0, math.ceil(raw))


def get_bounds_map() -> dict[ProblemClass, TheoreticalBound]:
    """All registered bounds as a fresh dict."""
    return dict(BOUNDS_DATABASE)


def get_optimal_algorithm(problem_class: Any) -> str:
    cls = _coerce_class(problem_class) or ProblemClass.UNKNOWN
    return _OPTIMAL_ALGORITHMS[cls]


def is_tight_bound(problem_class: Any) -> bool:
    """True when no gap is known between the lower and upper bound."""
    bound = get_bound(problem_class)
    return bound.tight if bound is not None else False


def format_citation(citation: Citation) -> str:
    """Format a citation for display, e.g. 'Cormen et al. "..." MIT Press, 2009'."""
    if not citation.authors:
        return citation.title

    if len(citation.authors) > 2:
        authors = f"{citation.authors[0]} et al."
    else:
        authors = " and ".join(citation.authors)

    theorem = f", {citation.theorem}" if citation.theorem else ""
    return f'{authors}. "{citation.title}" {citation.venue}, {citation.year}{theorem}'
