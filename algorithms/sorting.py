"""
sorting.py — Sorting Step Generator
====================================
generate(values, algorithm_id) unrolls a sort into its complete list of
SortSnapshots before playback starts; SortingStepper then replays that list
one snapshot per step().

Emission discipline shared by every algorithm:

    comparing – emitted BEFORE a comparison, on the indices being compared
    swapping  – emitted AFTER a swap / write, on the indices just changed
    sorted    – the set of settled indices; it only ever grows, and the
                final snapshot of every sequence covers every index

Per algorithm:
    bubble     compare each adjacent pair; swap if out of order; settle the
               boundary element after each pass
    insertion  select a key; compare + swap it leftwards while its left
               neighbour is larger; settle the finished prefix
    selection  compare each candidate against the running minimum; swap only if
               the minimum moved; settle the position
    quick      Lomuto partition, pivot = last element of the range; compare
               every element against the pivot, swap on every partition swap
               and on the pivot placement; low range before high range
    merge      top-down; compare the write slot with the right-hand candidate,
               write the winner
    heap       sift-down compares / swaps; settle each extracted maximum
    shell      gapped insertion with gaps n/2, n/4, … 1
    cocktail   alternating bubble passes; settle both ends
    counting   tally each element, then write the output (each write final)
    radix      LSD base 10; tally digits, then rewrite the array per pass

Counting and radix sort need integer values.
"""

import logging
import random
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from algorithms.errors import ConfigurationError
from algorithms.step import AlgorithmStepper, Outcome, SortSnapshot, StepResult

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Trace: the mutable scratch-pad every algorithm records into
# ---------------------------------------------------------------------------
class SortTrace:
    """
    Attributes:
        array     : Working copy being sorted in place.
        settled   : Indices marked sorted so far.
        snapshots : Every snapshot emitted, in order.
    """

    def __init__(self, values: Sequence[float]):
        self.array:     List[float]        = list(values)
        self.settled:   set                = set()
        self.snapshots: List[SortSnapshot] = []

    def emit(self, comparing=(), swapping=(), explanation: str = "", is_final: bool = False):
        self.snapshots.append(SortSnapshot(
            array=tuple(self.array),
            comparing=frozenset(comparing),
            swapping=frozenset(swapping),
            sorted=frozenset(self.settled),
            step_index=len(self.snapshots),
            explanation=explanation,
            is_final=is_final,
        ))

    def compare(self, i: int, j: int):
        a = self.array
        self.emit(comparing=(i, j), explanation=f"Compare a[{i}]={a[i]} with a[{j}]={a[j]}")

    def swap(self, i: int, j: int):
        a = self.array
        a[i], a[j] = a[j], a[i]
        self.emit(swapping=(i, j), explanation=f"Swap a[{i}] and a[{j}] → {a[i]}, {a[j]}")

    def write(self, k: int, value: float, settle: bool = False):
        self.array[k] = value
        if settle:
            self.settled.add(k)
        self.emit(swapping=(k,), explanation=f"Write {value} to a[{k}]")

    def settle(self, *indices: int):
        """Mark indices sorted without emitting; shows up in the next snapshot."""
        self.settled.update(indices)

    def mark_sorted(self, *indices: int):
        self.settled.update(indices)
        where = ", ".join(str(i) for i in indices)
        self.emit(explanation=f"Position(s) {where} sorted")

    def finish(self):
        self.settled.update(range(len(self.array)))
        self.emit(explanation="Array sorted", is_final=True)


# ---------------------------------------------------------------------------
# Algorithms
# ---------------------------------------------------------------------------
def _bubble(t: SortTrace):
    a, n = t.array, len(t.array)
    for i in range(n - 1):
        for j in range(n - i - 1):
            t.compare(j, j + 1)
            if a[j] > a[j + 1]:
                t.swap(j, j + 1)
        t.mark_sorted(n - 1 - i)
    t.finish()


def _insertion(t: SortTrace):
    a, n = t.array, len(t.array)
    for i in range(1, n):
        t.emit(comparing=(i,), explanation=f"Select key {a[i]} at index {i}")
        j = i
        while j > 0 and a[j - 1] > a[j]:
            t.compare(j - 1, j)
            t.swap(j - 1, j)
            j -= 1
        t.mark_sorted(*range(i + 1))
    t.finish()


def _selection(t: SortTrace):
    a, n = t.array, len(t.array)
    for i in range(n - 1):
        smallest = i
        for j in range(i + 1, n):
            t.compare(j, smallest)
            if a[j] < a[smallest]:
                smallest = j
        if smallest != i:
            t.swap(i, smallest)
        t.mark_sorted(i)
    t.finish()


def _quick(t: SortTrace):
    a = t.array
    # explicit stack (no Python recursion limit issues); pushing the high
    # range first keeps the recursive low-then-high order
    ranges: List[Tuple[int, int]] = [(0, len(a) - 1)]
    while ranges:
        low, high = ranges.pop()
        if low >= high:
            if low == high:
                t.settle(low)
            continue

        pivot = a[high]
        i = low - 1
        for j in range(low, high):
            t.compare(j, high)
            if a[j] < pivot:
                i += 1
                t.swap(i, j)
        p = i + 1
        t.swap(p, high)
        t.settle(p)

        ranges.append((p + 1, high))
        ranges.append((low, p - 1))
    t.finish()


def _merge(t: SortTrace):
    a = t.array

    def merge_sort(lo: int, hi: int):
        if lo >= hi:
            return
        mid = (lo + hi) // 2
        merge_sort(lo, mid)
        merge_sort(mid + 1, hi)

        left = a[lo:mid + 1]
        i, j, k = 0, mid + 1, lo
        while i < len(left) and j <= hi:
            # a[j] is untouched until k reaches it
            t.emit(comparing=(k, j), explanation=f"Compare {left[i]} (left run) with {a[j]} (right run)")
            if left[i] <= a[j]:
                t.write(k, left[i])
                i += 1
            else:
                t.write(k, a[j])
                j += 1
            k += 1
        while i < len(left):
            t.write(k, left[i])
            i += 1
            k += 1

    merge_sort(0, len(a) - 1)
    t.finish()


def _heap(t: SortTrace):
    a, n = t.array, len(t.array)

    def sift_down(root: int, end: int):
        while 2 * root + 1 < end:
            largest = root
            for child in (2 * root + 1, 2 * root + 2):
                if child < end:
                    t.compare(largest, child)
                    if a[child] > a[largest]:
                        largest = child
            if largest == root:
                return
            t.swap(root, largest)
            root = largest

    for start in range(n // 2 - 1, -1, -1):
        sift_down(start, n)
    for end in range(n - 1, 0, -1):
        t.swap(0, end)
        t.mark_sorted(end)
        sift_down(0, end)
    t.finish()


def _shell(t: SortTrace):
    a, n = t.array, len(t.array)
    gap = n // 2
    while gap > 0:
        for i in range(gap, n):
            j = i
            while j >= gap:
                t.compare(j - gap, j)
                if a[j - gap] <= a[j]:
                    break
                t.swap(j - gap, j)
                j -= gap
        gap //= 2
    t.finish()


def _cocktail(t: SortTrace):
    a = t.array
    lo, hi = 0, len(a) - 1
    while lo < hi:
        swapped = False
        for j in range(lo, hi):
            t.compare(j, j + 1)
            if a[j] > a[j + 1]:
                t.swap(j, j + 1)
                swapped = True
        t.mark_sorted(hi)
        hi -= 1
        if not swapped:
            break

        swapped = False
        for j in range(hi, lo, -1):
            t.compare(j - 1, j)
            if a[j - 1] > a[j]:
                t.swap(j - 1, j)
                swapped = True
        t.mark_sorted(lo)
        lo += 1
        if not swapped:
            break
    t.finish()


def _counting(t: SortTrace):
    a = t.array
    lowest = int(min(a))
    counts = [0] * (int(max(a)) - lowest + 1)
    for i, v in enumerate(a):
        t.emit(comparing=(i,), explanation=f"Count value {v}")
        counts[int(v) - lowest] += 1

    k = 0
    for offset, count in enumerate(counts):
        for _ in range(count):
            t.write(k, offset + lowest, settle=True)
            k += 1
    t.finish()


def _radix(t: SortTrace):
    a = t.array
    shift = min(0, int(min(a)))
    largest = int(max(a)) - shift
    exp = 1
    while largest // exp > 0:
        buckets: List[List[float]] = [[] for _ in range(10)]
        for i, v in enumerate(a):
            digit = ((int(v) - shift) // exp) % 10
            t.emit(comparing=(i,), explanation=f"Digit {digit} of {v} (place value {exp})")
            buckets[digit].append(v)
        k = 0
        for bucket in buckets:
            for v in bucket:
                t.write(k, v)
                k += 1
        exp *= 10
    t.finish()


SortFn = Callable[[SortTrace], None]

SORTERS: Dict[str, SortFn] = {
    "bubble":    _bubble,
    "insertion": _insertion,
    "selection": _selection,
    "merge":     _merge,
    "quick":     _quick,
    "heap":      _heap,
    "shell":     _shell,
    "radix":     _radix,
    "counting":  _counting,
    "cocktail":  _cocktail,
}

_INTEGER_ONLY = ("counting", "radix")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def generate(values: Sequence[float], algorithm_id: str) -> List[SortSnapshot]:
    """
    Unroll `algorithm_id` over a copy of `values`.

    Raises:
        ConfigurationError for an unknown algorithm, non-numeric values, or
        non-integer values given to counting / radix sort.
    """
    sorter = SORTERS.get(algorithm_id) if isinstance(algorithm_id, str) else None
    if sorter is None:
        raise ConfigurationError(f"Unknown sorting algorithm: {algorithm_id!r}")
    if not isinstance(values, (list, tuple)):
        raise ConfigurationError(f"Expected a list of numbers, got {type(values).__name__}")
    for v in values:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ConfigurationError(f"Cannot sort non-numeric value {v!r}")
    if algorithm_id in _INTEGER_ONLY and any(not float(v).is_integer() for v in values):
        raise ConfigurationError(f"{algorithm_id} sort needs integer values")

    trace = SortTrace(values)
    if not values:
        trace.emit(explanation="Nothing to sort", is_final=True)
    else:
        sorter(trace)

    logger.debug(f"{algorithm_id} sort of {len(values)} value(s) → {len(trace.snapshots)} snapshot(s)")
    return trace.snapshots


def random_array(size: int = 20, seed: Optional[int] = None) -> List[int]:
    """Values in 10..309, the range the bar chart is scaled for."""
    rng = random.Random(seed)
    return [rng.randint(10, 309) for _ in range(size)]


class SortingStepper(AlgorithmStepper):
    """Replays a pre-generated snapshot list, one snapshot per step()."""

    def __init__(self, values: Sequence[float], algorithm_id: str):
        super().__init__()
        self.algorithm_id = algorithm_id
        self.snapshots    = generate(values, algorithm_id)
        self.values       = tuple(values)

    def step(self) -> StepResult:
        if self.is_complete:
            return StepResult.HALT
        self.snapshot = self.snapshots[self.steps_taken]
        self.steps_taken += 1
        if self.snapshot.is_final:
            self.outcome = Outcome.FINISHED
            logger.info(f"{self.algorithm_id} sort finished after {self.steps_taken} step(s)")
            return StepResult.HALT
        return StepResult.CONTINUE

    def progress(self) -> Tuple[int, int]:
        settled = len(self.snapshot.sorted) if self.snapshot is not None else 0
        return settled, len(self.values)
