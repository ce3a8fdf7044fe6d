from __future__ import annotations

import math
from typing import Dict, Iterable

import numpy as np


def to_1d_float(x: Iterable[float] | np.ndarray) -> np.ndarray:
    if isinstance(x, np.ndarray):
        arr = np.asarray(x, dtype=float)
    else:
        arr = np.asarray(list(x), dtype=float)
    if arr.ndim != 1:
        arr = arr.reshape(-1)
    return arr


def finite_values(x: Iterable[float] | np.ndarray) -> np.ndarray:
    """Drop NaN and +/-inf. Statistics and auto-ranging only look at these."""
    arr = to_1d_float(x)
    return arr[np.isfinite(arr)]


def sample_min(x: Iterable[float] | np.ndarray) -> float:
    arr = finite_values(x)
    if arr.size == 0:
        return 0.0
    return float(arr.min())


def sample_max(x: Iterable[float] | np.ndarray) -> float:
    arr = finite_values(x)
    if arr.size == 0:
        return 0.0
    return float(arr.max())


def mean(x: Iterable[float] | np.ndarray) -> float:
    arr = finite_values(x)
    if arr.size == 0:
        return 0.0
    return float(arr.mean())


def sample_std(x: Iterable[float] | np.ndarray) -> float:
    """
    Unbiased (n - 1) standard deviation.

    NaN for fewer than two values; callers treat NaN as "no spread".
    """
    arr = finite_values(x)
    n = arr.size
    if n < 2:
        return float("nan")
    d = arr - arr.mean()
    return math.sqrt(float(np.sum(d * d)) / (n - 1))


def percentile(sorted_sample: Iterable[float] | np.ndarray, p: float) -> float:
    """
    Linear-interpolation quantile (R-7): position = p/100 * (n - 1), blended
    between the neighbouring order statistics.

    `sorted_sample` must already be sorted ascending.
    """
    arr = to_1d_float(sorted_sample)
    n = arr.size
    if n == 0:
        return float("nan")
    if not 0.0 <= p <= 100.0:
        raise ValueError(f"percentile p must be within [0, 100], got {p}")

    pos = p / 100.0 * (n - 1)
    idx = int(math.floor(pos))
    frac = pos - idx
    if idx + 1 < n:
        return float(arr[idx] * (1.0 - frac) + arr[idx + 1] * frac)
    return float(arr[idx])


def iqr(x: Iterable[float] | np.ndarray) -> float:
    arr = np.sort(finite_values(x))
    return percentile(arr, 75.0) - percentile(arr, 25.0)


def describe(x: Iterable[float] | np.ndarray) -> Dict[str, float]:
    arr = np.sort(finite_values(x))
    if arr.size == 0:
        return {
            "count": 0.0,
            "mean": 0.0,
            "std": 0.0,
            "min": 0.0,
            "p25": 0.0,
            "median": 0.0,
            "p75": 0.0,
            "max": 0.0,
            "iqr": 0.0,
        }

    p25 = percentile(arr, 25.0)
    p75 = percentile(arr, 75.0)
    std = sample_std(arr)
    return {
        "count": float(arr.size),
        "mean": float(arr.mean()),
        "std": 0.0 if math.isnan(std) else std,
        "min": float(arr[0]),
        "p25": p25,
        "median": percentile(arr, 50.0),
        "p75": p75,
        "max": float(arr[-1]),
        "iqr": p75 - p25,
    }
