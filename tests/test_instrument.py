"""Tests for the instrumentation harness."""

import math
from functools import cmp_to_key

import pytest

from auditor.instrument import (
    InstrumentedList,
    create_comparator,
    create_instrumented_list,
    instrument_source,
    numeric_comparator,
    reset_counts,
)
from auditor.models import OperationCounts


class TestElementAccess:
    """Test reads and writes through indexing."""

    def test_read_counts_one(self):
        arr = InstrumentedList([5, 6, 7])
        assert arr[1] == 6
        assert arr[-1] == 7
        assert arr.counts.reads == 2
        assert arr.counts.writes == 0

    def test_write_counts_one(self):
        arr = InstrumentedList([1, 2, 3])
        arr[0] = 9
        assert arr == [9, 2, 3]
        assert arr.counts.writes == 1

    def test_slice_write_counts_length(self):
        arr = InstrumentedList([1, 2, 3, 4])
        arr[1:3] = [7, 8, 9]
        assert arr == [1, 7, 8, 9, 4]
        assert arr.counts.writes == 3

    def test_slice_read_returns_plain_list(self):
        arr = InstrumentedList([1, 2, 3, 4])
        assert arr[1:3] == [2, 3]
        assert arr.counts.reads == 0

    def test_out_of_range_raises_like_list(self):
        arr = InstrumentedList([1])
        with pytest.raises(IndexError):
            arr[5]
        assert arr.counts.reads == 0

    def test_swap_counts_reads_and_writes(self):
        arr = InstrumentedList([2, 1])
        arr[0], arr[1] = arr[1], arr[0]
        assert arr == [1, 2]
        assert arr.counts.reads == 2
        assert arr.counts.writes == 2


class TestGrowth:
    """Test append/insert/extend/pop."""

    def test_append(self):
        arr = InstrumentedList()
        arr.append(1)
        arr.append(2)
        assert arr == [1, 2]
        assert arr.counts.writes == 2
        assert arr.counts.allocations == 2

    def test_insert(self):
        arr = InstrumentedList([1, 3])
        arr.insert(1, 2)
        assert arr == [1, 2, 3]
        assert arr.counts.writes == 1
        assert arr.counts.allocations == 1

    def test_extend_counts_k(self):
        arr = InstrumentedList([0])
        arr.extend(range(1, 5))
        assert arr == [0, 1, 2, 3, 4]
        assert arr.counts.writes == 4
        assert arr.counts.allocations == 4

    def test_pop(self):
        arr = InstrumentedList([1, 2, 3])
        assert arr.pop() == 3
        assert arr.pop(0) == 1
        assert arr == [2]
        assert arr.counts.reads == 2
        assert arr.counts.writes == 2

    def test_pop_empty_raises(self):
        with pytest.raises(IndexError):
            InstrumentedList().pop()


class TestScans:
    """Test full-scan operations."""

    def test_contains(self):
        arr = InstrumentedList([1, 2, 3, 4])
        assert 3 in arr
        assert arr.counts.function_calls == 4
        assert arr.counts.comparisons == 4

    def test_index_and_count(self):
        arr = InstrumentedList([1, 2, 2, 3])
        assert arr.index(2) == 1
        assert arr.count(2) == 2
        assert arr.counts.function_calls == 8
        assert arr.counts.comparisons == 8

    def test_iteration(self):
        arr = InstrumentedList([1, 2, 3])
        assert [x * 2 for x in arr] == [2, 4, 6]
        assert arr.counts.function_calls == 3
        assert arr.counts.comparisons == 0
        assert arr.counts.reads == 0

    def test_reverse(self):
        arr = InstrumentedList([1, 2, 3, 4, 5])
        arr.reverse()
        assert arr == [5, 4, 3, 2, 1]
        assert arr.counts.swaps == 2

    def test_sort_without_key(self):
        arr = InstrumentedList([3, 1, 2, 5, 4])
        arr.sort()
        assert arr == [1, 2, 3, 4, 5]
        assert arr.counts.comparisons == math.ceil(5 * math.log2(6))

    def test_sort_with_counting_key(self):
        arr = InstrumentedList([3, 1, 2])
        arr.sort(key=cmp_to_key(numeric_comparator(arr.counts)))
        assert arr == [1, 2, 3]
        assert arr.counts.comparisons > 0


class TestListBehaviour:
    """Test the wrapper behaves like a list."""

    def test_len_and_repr(self):
        arr = InstrumentedList([1, 2])
        assert len(arr) == 2
        assert repr(arr) == "InstrumentedList([1, 2])"

    def test_equality(self):
        assert InstrumentedList([1, 2]) == InstrumentedList([1, 2])
        assert InstrumentedList([1, 2]) == [1, 2]
        assert InstrumentedList([1, 2]) != [2, 1]

    def test_copy_is_plain_list(self):
        arr = InstrumentedList([1, 2])
        copied = arr.copy()
        copied.append(3)
        assert arr == [1, 2]
        assert isinstance(copied, list)

    def test_shared_accumulator(self):
        counts = OperationCounts()
        a = create_instrumented_list([1], counts)
        b = create_instrumented_list([2], counts)
        a[0]
        b[0]
        assert counts.reads == 2


class TestCounters:
    """Test snapshots and resets."""

    def test_snapshot_is_frozen_copy(self):
        arr = InstrumentedList([1, 2])
        arr[0]
        snapshot = arr.get_operation_counts()
        arr[1]
        assert snapshot.reads == 1
        assert arr.counts.reads == 2
        with pytest.raises(Exception):
            snapshot.reads = 5

    def test_reset_in_place(self):
        counts = OperationCounts(comparisons=3, reads=4)
        held = counts
        reset_counts(counts)
        assert held.comparisons == 0
        assert held.reads == 0

    def test_list_reset_keeps_accumulator(self):
        counts = OperationCounts()
        arr = InstrumentedList([1, 2], counts)
        arr[0]
        arr.reset_counts()
        assert arr.counts is counts
        assert counts.reads == 0

    def test_counts_reject_negative(self):
        with pytest.raises(Exception):
            OperationCounts(comparisons=-1)


class TestComparators:
    """Test counting comparators."""

    def test_numeric_comparator_ordering(self):
        counts = OperationCounts()
        compare = numeric_comparator(counts)
        assert compare(1, 2) < 0
        assert compare(2, 1) > 0
        assert compare(2, 2) == 0
        assert counts.comparisons == 3

    def test_sorted_with_comparator(self):
        counts = OperationCounts()
        values = [5, 3, 9, 1]
        result = sorted(values, key=cmp_to_key(numeric_comparator(counts)))
        assert result == [1, 3, 5, 9]
        assert counts.comparisons >= len(values) - 1

    def test_custom_comparator(self):
        counts = OperationCounts()
        compare = create_comparator(lambda a, b: len(a) - len(b), counts)
        assert sorted(["ccc", "a", "bb"], key=cmp_to_key(compare)) == ["a", "bb", "ccc"]
        assert counts.comparisons > 0


class TestInstrumentSource:
    """Test harness script generation."""

    def test_wraps_source(self):
        script = instrument_source("def solve(arr, counts):\n    return len(arr)\n", "solve")
        assert "def solve(arr, counts):" in script
        assert "measure_function(solve," in script
        assert "timeNs" in script
        compile(script, "harness.py", "exec")

    @pytest.mark.parametrize("entry_point", ["", "1abc", "solve()", "a b"])
    def test_rejects_bad_entry_point(self, entry_point):
        with pytest.raises(ValueError):
            instrument_source("def solve(arr, counts): pass", entry_point)
