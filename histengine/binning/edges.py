from __future__ import annotations

import math
from typing import Iterable

import numpy as np

from histengine.stats.descriptive import sample_max, sample_min


def validate_edges(edges: Iterable[float] | np.ndarray) -> np.ndarray:
    """
    Return `edges` as a float array, or raise ValueError.

    Edges are never repaired: a zero-width pair would give a bin that can
    never receive a value, so it is rejected like any other non-ascending pair.
    """
    arr = np.asarray(list(edges) if not isinstance(edges, np.ndarray) else edges, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"edges must be 1-D, got shape {arr.shape}")
    if arr.size < 2:
        raise ValueError(f"edges must have at least 2 values, got {arr.size}")
    if not np.isfinite(arr).all():
        raise ValueError("edges must be finite")

    steps = np.diff(arr)
    bad = np.flatnonzero(steps <= 0)
    if bad.size:
        i = int(bad[0])
        raise ValueError(
            f"edges must be strictly ascending: edges[{i}]={arr[i]!r} >= edges[{i + 1}]={arr[i + 1]!r}"
        )
    return arr


def uniform_edges(lo: float, hi: float, num_bins: int) -> np.ndarray:
    """num_bins + 1 edges; left edges are lo + i * width, the last one is hi."""
    width = (hi - lo) / num_bins
    edges = lo + np.arange(num_bins + 1, dtype=float) * width
    edges[-1] = hi
    return edges


def integer_edges(x: Iterable[float] | np.ndarray) -> np.ndarray:
    """
    Unit-width edges on integer boundaries covering the sample.

    Always at least one bin, so an integral constant sample [3, 3] yields [3, 4].
    """
    start = int(math.floor(sample_min(x)))
    end = int(math.ceil(sample_max(x)))
    num_bins = max(1, end - start)
    return start + np.arange(num_bins + 1, dtype=float)
