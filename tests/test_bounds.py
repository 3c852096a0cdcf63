"""Tests for the theoretical bounds database."""

import math

import pytest

from auditor.bounds import (
    BOUNDS_DATABASE,
    calculate_theoretical_minimum,
    format_citation,
    get_bound,
    get_bounds_map,
    get_optimal_algorithm,
    is_tight_bound,
)
from auditor.models import BoundParams, Citation, ProblemClass


REGISTERED = [
    ProblemClass.COMPARISON_SORT,
    ProblemClass.BINARY_SEARCH,
    ProblemClass.LINEAR_SEARCH,
    ProblemClass.GRAPH_BFS,
    ProblemClass.GRAPH_DFS,
    ProblemClass.SHORTEST_PATH_DIJKSTRA,
    ProblemClass.STRING_MATCH_NAIVE,
    ProblemClass.STRING_MATCH_KMP,
    ProblemClass.MATRIX_MULTIPLY,
    ProblemClass.MEDIAN_FINDING,
]

UNREGISTERED = [
    ProblemClass.COUNTING_SORT,
    ProblemClass.TREE_TRAVERSAL,
    ProblemClass.HASH_LOOKUP,
    ProblemClass.UNKNOWN,
]


class TestRegistry:
    """Test which classes carry a bound."""

    def test_ten_registered_classes(self):
        assert set(BOUNDS_DATABASE) == set(REGISTERED)

    @pytest.mark.parametrize("cls", UNREGISTERED)
    def test_unregistered_has_no_bound(self, cls):
        assert get_bound(cls) is None

    def test_get_bound_accepts_string(self):
        bound = get_bound("comparison-sort")
        assert bound is not None
        assert bound.notation == "Ω(n log n)"

    def test_get_bound_rejects_unknown_string(self):
        assert get_bound("bogosort") is None

    def test_database_is_read_only(self):
        with pytest.raises(TypeError):
            BOUNDS_DATABASE[ProblemClass.HASH_LOOKUP] = BOUNDS_DATABASE[ProblemClass.LINEAR_SEARCH]

    def test_bounds_map_is_a_copy(self):
        bounds = get_bounds_map()
        bounds.pop(ProblemClass.COMPARISON_SORT)
        assert ProblemClass.COMPARISON_SORT in get_bounds_map()

    def test_bound_is_frozen(self):
        bound = get_bound(ProblemClass.LINEAR_SEARCH)
        with pytest.raises(Exception):
            bound.tight = False

    def test_formula_not_serialised(self):
        dumped = get_bound(ProblemClass.LINEAR_SEARCH).model_dump(by_alias=True)
        assert "formula" not in dumped
        assert dumped["class"] == ProblemClass.LINEAR_SEARCH
        assert dumped["operationType"] == "comparisons"


class TestTheoreticalMinimum:
    """Test calculate_theoretical_minimum."""

    @pytest.mark.parametrize("cls", REGISTERED)
    @pytest.mark.parametrize("n", [0, 1, 2, 10, 1000])
    def test_never_negative(self, cls, n):
        params = BoundParams(n=n, m=max(1, n // 10), v=n, e=2 * n)
        assert calculate_theoretical_minimum(cls, params) >= 0

    @pytest.mark.parametrize("cls", UNREGISTERED)
    def test_unregistered_is_infinite(self, cls):
        assert calculate_theoretical_minimum(cls, {"n": 100}) == math.inf

    def test_comparison_sort(self):
        expected = math.ceil(1000 * math.log2(1000) - 1.44 * 1000)
        assert calculate_theoretical_minimum(ProblemClass.COMPARISON_SORT, {"n": 1000}) == expected

    def test_comparison_sort_small_n(self):
        assert calculate_theoretical_minimum(ProblemClass.COMPARISON_SORT, {"n": 1}) == 0
        assert calculate_theoretical_minimum(ProblemClass.COMPARISON_SORT, {"n": 0}) == 0

    def test_binary_search(self):
        assert calculate_theoretical_minimum(ProblemClass.BINARY_SEARCH, {"n": 1024}) == 10
        assert calculate_theoretical_minimum(ProblemClass.BINARY_SEARCH, {"n": 1000}) == 10
        assert calculate_theoretical_minimum(ProblemClass.BINARY_SEARCH, {"n": 1}) == 1

    def test_linear_search(self):
        assert calculate_theoretical_minimum(ProblemClass.LINEAR_SEARCH, BoundParams(n=500)) == 500

    def test_graph_traversal(self):
        params = {"v": 100, "e": 250}
        assert calculate_theoretical_minimum(ProblemClass.GRAPH_BFS, params) == 350
        assert calculate_theoretical_minimum(ProblemClass.GRAPH_DFS, params) == 350

    def test_dijkstra(self):
        assert calculate_theoretical_minimum(ProblemClass.SHORTEST_PATH_DIJKSTRA, {"v": 1, "e": 5}) == 0
        expected = math.ceil((16 + 20) * 4)
        assert calculate_theoretical_minimum(ProblemClass.SHORTEST_PATH_DIJKSTRA, {"v": 16, "e": 20}) == expected

    def test_naive_string_match(self):
        assert calculate_theoretical_minimum(ProblemClass.STRING_MATCH_NAIVE, {"n": 10, "m": 3}) == 24
        assert calculate_theoretical_minimum(ProblemClass.STRING_MATCH_NAIVE, {"n": 3, "m": 10}) == 0
        assert calculate_theoretical_minimum(ProblemClass.STRING_MATCH_NAIVE, {"n": 10, "m": 0}) == 0

    def test_kmp(self):
        assert calculate_theoretical_minimum(ProblemClass.STRING_MATCH_KMP, {"n": 100, "m": 7}) == 107

    def test_matrix_multiply(self):
        assert calculate_theoretical_minimum(ProblemClass.MATRIX_MULTIPLY, {"n": 12}) == 144

    def test_missing_params_default(self):
        assert calculate_theoretical_minimum(ProblemClass.LINEAR_SEARCH, None) == 1
        assert calculate_theoretical_minimum(ProblemClass.STRING_MATCH_KMP, {}) == 0


class TestTightness:
    """Test is_tight_bound and the gap-carrying bounds."""

    @pytest.mark.parametrize("cls", REGISTERED)
    def test_matches_bound_flag(self, cls):
        assert is_tight_bound(cls) == get_bound(cls).tight

    def test_open_gaps(self):
        assert is_tight_bound(ProblemClass.MATRIX_MULTIPLY) is False
        assert is_tight_bound(ProblemClass.STRING_MATCH_NAIVE) is False

    def test_tight_bounds(self):
        for cls in (
            ProblemClass.COMPARISON_SORT,
            ProblemClass.BINARY_SEARCH,
            ProblemClass.GRAPH_BFS,
            ProblemClass.GRAPH_DFS,
            ProblemClass.STRING_MATCH_KMP,
            ProblemClass.MEDIAN_FINDING,
        ):
            assert is_tight_bound(cls) is True

    @pytest.mark.parametrize("cls", UNREGISTERED)
    def test_unregistered_not_tight(self, cls):
        assert is_tight_bound(cls) is False


class TestOptimalAlgorithm:
    """Test get_optimal_algorithm."""

    @pytest.mark.parametrize("cls", list(ProblemClass))
    def test_every_class_described(self, cls):
        assert get_optimal_algorithm(cls)

    def test_garbage_falls_back_to_unknown(self):
        assert get_optimal_algorithm("nonsense") == get_optimal_algorithm(ProblemClass.UNKNOWN)


class TestFormatCitation:
    """Test format_citation."""

    def test_many_authors_collapse(self):
        text = format_citation(get_bound(ProblemClass.COMPARISON_SORT).citation)
        assert text.startswith("Cormen et al.")
        assert "Introduction to Algorithms" in text
        assert "Theorem 8.1" in text

    def test_two_authors_joined(self):
        citation = Citation(authors=("Aho", "Ullman"), title="Foundations", venue="W. H. Freeman", year=1992)
        assert format_citation(citation).startswith("Aho and Ullman.")

    def test_single_author(self):
        text = format_citation(get_bound(ProblemClass.SHORTEST_PATH_DIJKSTRA).citation)
        assert text.startswith("Dijkstra.")
        assert "1959" in text

    def test_no_authors_gives_title(self):
        citation = get_bound(ProblemClass.BINARY_SEARCH).citation
        assert format_citation(citation) == citation.title
