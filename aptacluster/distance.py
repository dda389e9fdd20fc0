"""Edit distance between sequences.

Any callable taking two sequences and returning a non-negative integer can be
used as the engine's distance function. Two implementations are provided:
edlib (the default) and a numpy dynamic-programming reference.

Both accept an optional max_distance bound. Distances at or below the bound
are exact; anything above it is reported as max_distance + 1, which is all a
threshold comparison needs.
"""

from functools import partial
from typing import Callable, Optional

import edlib
import numpy as np

DistanceFunction = Callable[[str, str], int]


def _bounded(distance: int, max_distance: Optional[int]) -> int:
    if max_distance is not None and distance > max_distance:
        return max_distance + 1
    return distance


def edit_distance(seq1: str, seq2: str, max_distance: Optional[int] = None) -> int:
    """Levenshtein distance using edlib global (NW) alignment."""
    if len(seq1) == 0 or len(seq2) == 0:
        return _bounded(max(len(seq1), len(seq2)), max_distance)

    k = -1 if max_distance is None else max_distance
    result = edlib.align(seq1, seq2, mode="NW", task="distance", k=k)

    if result["editDistance"] == -1:
        # Only happens when the k bound is exceeded
        return max_distance + 1

    return result["editDistance"]


def levenshtein_distance(seq1: str, seq2: str, max_distance: Optional[int] = None) -> int:
    """Levenshtein distance by the classic dynamic-programming recurrence.

    Rows are computed with numpy: substitutions and deletions come from the
    previous row, insertions are resolved with a running minimum along the row.
    """
    if len(seq1) < len(seq2):
        seq1, seq2 = seq2, seq1

    if len(seq2) == 0:
        return _bounded(len(seq1), max_distance)

    columns = np.array([ord(c) for c in seq2], dtype=np.int64)
    offsets = np.arange(len(seq2) + 1, dtype=np.int64)
    previous = offsets.copy()

    for i, symbol in enumerate(seq1, start=1):
        mismatch = (columns != ord(symbol)).astype(np.int64)
        row = np.empty_like(previous)
        row[0] = i
        row[1:] = np.minimum(previous[1:] + 1, previous[:-1] + mismatch)
        previous = np.minimum.accumulate(row - offsets) + offsets

        # Row minima never decrease, so the final distance is already out of bounds
        if max_distance is not None and previous.min() > max_distance:
            return max_distance + 1

    return _bounded(int(previous[-1]), max_distance)


DISTANCE_IMPLEMENTATIONS = {
    "edlib": edit_distance,
    "dp": levenshtein_distance,
}


def get_distance_function(method: str = "edlib", max_distance: Optional[int] = None) -> DistanceFunction:
    """Return a two-argument distance function for the named method."""
    try:
        implementation = DISTANCE_IMPLEMENTATIONS[method]
    except KeyError:
        raise ValueError(f"Unknown distance method: {method}") from None

    if max_distance is None:
        return implementation
    return partial(implementation, max_distance=max_distance)
