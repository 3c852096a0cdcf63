"""
Instrumentation harness.

`InstrumentedList` wraps a list and tallies primitive operations into an
`OperationCounts` accumulator while behaving exactly like the list it wraps.
Comparators and a source-level harness for sandboxed runs live here too.
"""
from __future__ import annotations

import math
from collections.abc import MutableSequence
from typing import Any, Callable, Iterable, Iterator, Optional, TypeVar

from .models import CountsSnapshot, OperationCounts

T = TypeVar("T")

Comparator = Callable[[T, T], int]


def reset_counts(counts: OperationCounts) -> None:
    """Zero an accumulator in place."""
    counts.reset()


class InstrumentedList(MutableSequence):
    """
    List wrapper that counts reads, writes and scans.

    Counting rules:
        index read              reads += 1
        index write             writes += 1 (slice: += len(values))
        append / insert         writes += 1, allocations += 1
        extend(k items)         writes += k, allocations += k
        pop                     reads += 1, writes += 1
        del                     reads += removed
        index / count / in      function_calls += n, comparisons += n
        iteration               function_calls += n
        reverse                 swaps += n // 2
        sort() without key      comparisons += ceil(n log2(n + 1))
    """

    def __init__(self, initial: Iterable[Any] = (), counts: Optional[OperationCounts] = None):
        self._items = list(initial)
        self.counts = counts if counts is not None else OperationCounts()

    # -- element access -----------------------------------------------------

    def __getitem__(self, index):
        if isinstance(index, slice):
            return self._items[index]
        value = self._items[index]
        self.counts.reads += 1
        return value

    def __setitem__(self, index, value):
        if isinstance(index, slice):
            values = list(value)
            self._items[index] = values
            self.counts.writes += len(values)
            return
        self._items[index] = value
        self.counts.writes += 1

    def __delitem__(self, index):
        before = len(self._items)
        del self._items[index]
        self.counts.reads += before - len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    # -- growth and shrink --------------------------------------------------

    def insert(self, index: int, value: Any) -> None:
        self._items.insert(index, value)
        self.counts.writes += 1
        self.counts.allocations += 1

    def append(self, value: Any) -> None:
        self._items.append(value)
        self.counts.writes += 1
        self.counts.allocations += 1

    def extend(self, values: Iterable[Any]) -> None:
        values = list(values)
        self._items.extend(values)
        self.counts.writes += len(values)
        self.counts.allocations += len(values)

    def __iadd__(self, values: Iterable[Any]) -> "InstrumentedList":
        self.extend(values)
        return self

    def pop(self, index: int = -1) -> Any:
        value = self._items.pop(index)
        self.counts.reads += 1
        self.counts.writes += 1
        return value

    def remove(self, value: Any) -> None:
        self._scan(compare=True)
        self._items.remove(value)
        self.counts.writes += 1

    def clear(self) -> None:
        self._items.clear()

    # -- full scans ---------------------------------------------------------

    def _scan(self, compare: bool) -> None:
        n = len(self._items)
        self.counts.function_calls += n
        if compare:
            self.counts.comparisons += n

    def __iter__(self) -> Iterator[Any]:
        self._scan(compare=False)
        return iter(self._items)

    def __reversed__(self) -> Iterator[Any]:
        self._scan(compare=False)
        return reversed(self._items)

    def __contains__(self, value: Any) -> bool:
        self._scan(compare=True)
        return value in self._items

    def index(self, value: Any, start: int = 0, stop: Optional[int] = None) -> int:
        self._scan(compare=True)
        if stop is None:
            return self._items.index(value, start)
        return self._items.index(value, start, stop)

    def count(self, value: Any) -> int:
        self._scan(compare=True)
        return self._items.count(value)

    # -- reordering ---------------------------------------------------------

    def reverse(self) -> None:
        self.counts.swaps += len(self._items) // 2
        self._items.reverse()

    def sort(self, *, key: Optional[Callable[[Any], Any]] = None, reverse: bool = False) -> None:
        if key is None:
            n = len(self._items)
            self.counts.comparisons += math.ceil(n * math.log2(n + 1))
        self._items.sort(key=key, reverse=reverse)

    # -- plain list behaviour -----------------------------------------------

    def copy(self) -> list:
        return list(self._items)

    def tolist(self) -> list:
        return list(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, InstrumentedList):
            return self._items == other._items
        if isinstance(other, list):
            return self._items == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"InstrumentedList({self._items!r})"

    # -- counters -----------------------------------------------------------

    def get_operation_counts(self) -> CountsSnapshot:
        return self.counts.snapshot()

    def reset_counts(self) -> None:
        reset_counts(self.counts)


def create_instrumented_list(initial: Iterable[Any] = (), counts: Optional[OperationCounts] = None) -> InstrumentedList:
    return InstrumentedList(initial, counts)


# ---------------------------------------------------------------------------
# Comparators
# ---------------------------------------------------------------------------


def create_comparator(compare_fn: Comparator, counts: OperationCounts) -> Comparator:
    """Wrap a three-way comparator so every call counts one comparison."""

    def compare(a, b) -> int:
        counts.comparisons += 1
        return compare_fn(a, b)

    return compare


def numeric_comparator(counts: OperationCounts) -> Comparator:
    """
    Standard ascending comparator with tracking.

    Use with functools.cmp_to_key, e.g.
    ``values.sort(key=cmp_to_key(numeric_comparator(counts)))``.
    """
    return create_comparator(lambda a, b: (a > b) - (a < b), counts)


# ---------------------------------------------------------------------------
# Sandbox harness
# ---------------------------------------------------------------------------

HARNESS_TEMPLATE = '''\
import json
import sys

from auditor.measurement import measure_function

{source}


def _audit_main():
    payload = json.loads(sys.stdin.read() or "{{}}")
    result = measure_function({entry_point}, payload.get("input", []))
    sys.stdout.write("\\n" + json.dumps({{
        "counts": result.counts.model_dump(by_alias=True),
        "timeNs": int(result.execution_time_ms * 1_000_000),
    }}) + "\\n")


if __name__ == "__main__":
    _audit_main()
'''


def instrument_source(source: str, entry_point: str) -> str:
    """
    Wrap a Python snippet into a stand-alone measurement script.

    The script reads ``{"input": [...]}`` on stdin, calls
    ``entry_point(arr, counts)`` on an instrumented copy of the input and
    prints one JSON line ``{"counts": {...}, "timeNs": int}``.

    Raises:
        ValueError: If entry_point is not a valid identifier
    """
    if not entry_point or not entry_point.isidentifier():
        raise ValueError(f"Invalid entry point: {entry_point!r}")
    return HARNESS_TEMPLATE.format(source=source.strip("\n"), entry_point=entry_point)
