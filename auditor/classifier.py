"""
Problem classifier.

Heuristic classification from code patterns, optionally checked against an
external oracle. Heuristics answer `None` rather than guess; the oracle is
there to resolve those cases and never overrides a strong static signal
outright.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from .config import logger
from .models import (
    AlternativeClass,
    ClassificationResult,
    CodePatterns,
    ProblemClass,
    get_class_label,
)
from .patterns import count_loops, detect_code_patterns

if TYPE_CHECKING:
    from providers.oracle import ClassificationOracle


HEURISTIC_CONFIDENCE = 0.7
FALLBACK_CONFIDENCE = 0.5
CONTRADICTION_DISCOUNT = 0.5


# ---------------------------------------------------------------------------
# Text signals
# ---------------------------------------------------------------------------

MID_RE = re.compile(r"\bmid\w*\s*=\s*[^\n;]{0,120}?(?:/\s*2\b|>>\s*1\b|//\s*2\b)", re.IGNORECASE)
NARROWING_RE = re.compile(
    r"\b(?:lo|low|left|l|start|begin|first)\s*=\s*mid\w*\s*\+\s*1\b"
    r"|\b(?:hi|high|right|r|end|last)\s*=\s*mid\w*\s*(?:-\s*1\b|[;\n)])",
    re.IGNORECASE,
)
SEARCH_WORD_RE = re.compile(r"find|search|indexOf|includes|contains|target|lookup", re.IGNORECASE)
SORT_NAME_RE = re.compile(r"sort", re.IGNORECASE)
# Re-sorting a priority queue is not a sort
QUEUE_SORT_RE = re.compile(r"\b(?:pq|heap|priority|frontier)\w*\s*\.sort\s*\(", re.IGNORECASE)
STRING_RE = re.compile(
    r"\b(?:text|pattern|needle|haystack|substring|substr|txt|pat)\b"
    r"|\.(?:substring|substr|charAt|charCodeAt|startsWith|indexOf)\s*\(",
    re.IGNORECASE,
)
KMP_RE = re.compile(r"\blps\w*|LPS|[Ff]ailure|prefix_?[Ff]unction|\b[zZ]_?[Ff]unction|\bkmp|KMP")
DISTANCE_RE = re.compile(r"dijkstra|\bdist\w*", re.IGNORECASE)
HEAP_RE = re.compile(r"dijkstra|priority|heapq|heap|\bpq\b", re.IGNORECASE)
MATRIX_RE = re.compile(r"matri(?:x|ces)", re.IGNORECASE)
MATRIX_PRODUCT_RE = re.compile(r"\]\s*\[\s*\w+\s*\]\s*\*\s*\w+\s*\[")
RANK_RE = re.compile(r"median|kth|select|percentile|nth_?element|largest|smallest", re.IGNORECASE)
PARTITION_RE = re.compile(r"partition|pivot", re.IGNORECASE)
COUNTER_RE = re.compile(r"\b(?:count|counts|freq|buckets?)\s*\[[^\]\n]{0,80}\]\s*(?:\+\+|\+=\s*1)")
TREE_RE = re.compile(r"\.(?:left|right)\b|\b(?:inorder|preorder|postorder)\b", re.IGNORECASE)


@dataclass(frozen=True)
class Signals:
    """Patterns plus the text-level signals the signatures need."""

    patterns: CodePatterns
    nested_loops: bool
    narrowing: bool
    mid: bool
    search_words: bool
    sort_name: bool
    string: bool
    kmp: bool
    heap: bool
    distance: bool
    matrix: bool
    multiply: bool
    rank: bool
    partition: bool
    counter: bool
    tree: bool


def _signals(text: str, patterns: CodePatterns) -> Signals:
    return Signals(
        patterns=patterns,
        nested_loops=count_loops(text) >= 2,
        narrowing=NARROWING_RE.search(text) is not None,
        mid=MID_RE.search(text) is not None,
        search_words=SEARCH_WORD_RE.search(text) is not None,
        sort_name=SORT_NAME_RE.search(QUEUE_SORT_RE.sub("", text)) is not None,
        string=STRING_RE.search(text) is not None,
        kmp=KMP_RE.search(text) is not None,
        heap=HEAP_RE.search(text) is not None,
        distance=DISTANCE_RE.search(text) is not None,
        matrix=MATRIX_RE.search(text) is not None or MATRIX_PRODUCT_RE.search(text) is not None,
        multiply="*" in text,
        rank=RANK_RE.search(text) is not None,
        partition=PARTITION_RE.search(text) is not None,
        counter=COUNTER_RE.search(text) is not None,
        tree=TREE_RE.search(text) is not None,
    )


# ---------------------------------------------------------------------------
# Signatures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Signature:
    """A conjunction of features. Strength is how many must co-occur."""

    problem_class: ProblemClass
    strength: int
    matches: Callable[[Signals], bool]


SIGNATURES: tuple[Signature, ...] = (
    # Graph traversals
    Signature(ProblemClass.SHORTEST_PATH_DIJKSTRA, 3, lambda s: (
        (s.patterns.has_graph_structure or s.distance) and s.heap and s.patterns.has_comparisons
    )),
    Signature(ProblemClass.GRAPH_BFS, 2, lambda s: (
        s.patterns.has_graph_structure and s.patterns.has_queue_operations
    )),
    Signature(ProblemClass.GRAPH_DFS, 2, lambda s: (
        s.patterns.has_graph_structure and s.patterns.has_recursion and not s.tree
    )),
    Signature(ProblemClass.GRAPH_DFS, 2, lambda s: (
        s.patterns.has_graph_structure and s.patterns.has_stack_operations
        and not s.patterns.has_queue_operations
    )),

    # Strings
    Signature(ProblemClass.STRING_MATCH_KMP, 3, lambda s: (
        s.kmp and s.string and s.patterns.has_loops
    )),
    Signature(ProblemClass.STRING_MATCH_NAIVE, 2, lambda s: (
        s.string and s.patterns.has_loops and not s.kmp
    )),

    # Searching
    Signature(ProblemClass.BINARY_SEARCH, 3, lambda s: (
        s.mid and s.narrowing and s.patterns.has_comparisons
    )),
    Signature(ProblemClass.LINEAR_SEARCH, 3, lambda s: (
        s.search_words and s.patterns.has_loops and s.patterns.has_comparisons
        and not (s.nested_loops or s.narrowing or s.patterns.has_recursion
                 or s.patterns.has_graph_structure or s.string)
    )),
    Signature(ProblemClass.LINEAR_SEARCH, 2, lambda s: (
        s.patterns.has_loops and s.patterns.has_comparisons
        and not (s.nested_loops or s.narrowing or s.patterns.has_recursion
                 or s.patterns.has_graph_structure or s.string)
    )),

    # Sorting and selection
    Signature(ProblemClass.MEDIAN_FINDING, 4, lambda s: (
        s.rank and s.partition and s.patterns.has_comparisons
        and (s.patterns.has_array_swaps or s.patterns.has_recursion or s.patterns.has_loops)
    )),
    Signature(ProblemClass.COUNTING_SORT, 3, lambda s: (
        s.counter and s.patterns.has_loops and s.sort_name
    )),
    Signature(ProblemClass.COMPARISON_SORT, 3, lambda s: (
        s.nested_loops and s.patterns.has_comparisons and s.patterns.has_array_swaps
        and not (s.patterns.has_graph_structure or s.string)
    )),
    Signature(ProblemClass.COMPARISON_SORT, 3, lambda s: (
        s.sort_name and s.patterns.has_comparisons
        and (s.patterns.has_loops or s.patterns.has_recursion)
        and not (s.patterns.has_graph_structure or s.string or s.counter)
    )),

    # Everything else
    Signature(ProblemClass.MATRIX_MULTIPLY, 3, lambda s: (
        s.matrix and s.nested_loops and s.multiply
    )),
    Signature(ProblemClass.TREE_TRAVERSAL, 2, lambda s: (
        s.tree and s.patterns.has_recursion
        and not (s.patterns.has_graph_structure or s.sort_name)
    )),
    Signature(ProblemClass.HASH_LOOKUP, 1, lambda s: (
        s.patterns.has_hash_access and not s.patterns.has_loops
    )),
)


def heuristic_classify(text: str, patterns: Optional[CodePatterns] = None) -> Optional[ProblemClass]:
    """
    Best-guess problem class from static signals, or None.

    The strongest matching signature wins. When signatures of equal strength
    name different classes the signals are contradictory and the answer is
    None, as it is when nothing matches.
    """
    if not isinstance(text, str) or not text.strip():
        return None
    if patterns is None:
        patterns = detect_code_patterns(text)

    signals = _signals(text, patterns)
    matched = [sig for sig in SIGNATURES if sig.matches(signals)]
    if not matched:
        return None

    strongest = max(sig.strength for sig in matched)
    winners = {sig.problem_class for sig in matched if sig.strength == strongest}
    if len(winners) != 1:
        logger.debug(f"Contradictory signatures at strength {strongest}: {sorted(w.value for w in winners)}")
        return None
    return winners.pop()


def reconcile_verdicts(
    heuristic: Optional[ProblemClass],
    verdict: ClassificationResult,
) -> ClassificationResult:
    """Combine a heuristic guess with an oracle verdict."""
    if heuristic is None:
        return verdict

    label = get_class_label(heuristic)

    if verdict.problem_class == ProblemClass.UNKNOWN:
        return ClassificationResult(
            problem_class=heuristic,
            confidence=FALLBACK_CONFIDENCE,
            reasoning=f"Oracle could not decide; heuristic match: {label}",
            alternative_classes=verdict.alternative_classes,
        )

    if verdict.problem_class == heuristic:
        return verdict.model_copy(update={
            "confidence": max(HEURISTIC_CONFIDENCE, verdict.confidence),
        })

    # Static signal wins, the oracle's answer is kept as a discounted alternative
    alternatives = [AlternativeClass(
        problem_class=verdict.problem_class,
        confidence=verdict.confidence * CONTRADICTION_DISCOUNT,
    )]
    alternatives.extend(
        alt for alt in verdict.alternative_classes
        if alt.problem_class not in (heuristic, verdict.problem_class)
    )
    logger.info(
        f"Oracle verdict {verdict.problem_class.value} contradicts heuristic "
        f"{heuristic.value}; discounted to {alternatives[0].confidence:.2f}"
    )
    return ClassificationResult(
        problem_class=heuristic,
        confidence=HEURISTIC_CONFIDENCE,
        reasoning=f"Heuristic match: {label} (oracle suggested {get_class_label(verdict.problem_class)})",
        alternative_classes=alternatives[:3],
    )


async def classify_code(
    code: str,
    oracle: Optional[ClassificationOracle] = None,
    use_oracle: bool = True,
) -> ClassificationResult:
    """
    Classify code into a problem class.

    Args:
        code: Source code (any language the pattern detector understands)
        oracle: Optional external judge consulted alongside the heuristics
        use_oracle: Set False to skip the oracle even when one is given

    Returns:
        ClassificationResult; never raises for bad input or oracle failures
    """
    heuristic = heuristic_classify(code)

    if oracle is None or not use_oracle or not isinstance(code, str) or not code.strip():
        if heuristic is None:
            return ClassificationResult(
                problem_class=ProblemClass.UNKNOWN,
                confidence=0.0,
                reasoning="No heuristic signature matched",
            )
        return ClassificationResult(
            problem_class=heuristic,
            confidence=HEURISTIC_CONFIDENCE,
            reasoning=f"Heuristic match: {get_class_label(heuristic)}",
        )

    try:
        verdict = await oracle.classify(code)
    except Exception as e:
        logger.error(f"Oracle raised during classification: {e}")
        verdict = ClassificationResult(
            problem_class=ProblemClass.UNKNOWN,
            confidence=0.0,
            reasoning=f"Oracle request failed: {e}",
        )

    return reconcile_verdicts(heuristic, verdict)
