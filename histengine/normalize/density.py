from __future__ import annotations

import math
from enum import Enum

import numpy as np

from histengine.binning.histograms import HistogramResult

_INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)


class Normalization(str, Enum):
    COUNT = "count"
    COUNT_DENSITY = "count_density"
    PROBABILITY = "probability"
    PDF = "pdf"


def to_count(result: HistogramResult) -> np.ndarray:
    return np.array(result.counts, dtype=float)


def to_count_density(result: HistogramResult) -> np.ndarray:
    """Count per unit width, comparable across unequal bins."""
    return result.counts / result.widths


def to_probability(result: HistogramResult) -> np.ndarray:
    """
    Fraction of the binned values in each bin.

    Normalized by the result's own total, so values dropped as out-of-range
    are not part of the denominator. All zeros for an empty histogram.
    """
    total = result.total_count
    if total <= 0:
        return np.zeros_like(result.counts)
    return result.counts / total


def to_pdf_estimate(result: HistogramResult) -> np.ndarray:
    """counts / (total * width): integrates to 1 over the binned domain."""
    total = result.total_count
    if total <= 0:
        return np.zeros_like(result.counts)
    return result.counts / (total * result.widths)


def to_cdf(result: HistogramResult) -> np.ndarray:
    """
    Empirical CDF evaluated at each edge, shape (num_bins + 1,).
    cdf[0] = 0 and, for a non-empty histogram, cdf[-1] = 1.
    """
    cdf = np.zeros(result.num_bins + 1, dtype=float)
    cdf[1:] = np.cumsum(to_probability(result))
    return cdf


def normalize(result: HistogramResult, how: Normalization | str = Normalization.COUNT) -> np.ndarray:
    try:
        mode = Normalization(how)
    except ValueError:
        valid = [m.value for m in Normalization]
        raise ValueError(f"Unknown normalization {how!r}. Expected one of: {valid}") from None

    if mode is Normalization.COUNT:
        return to_count(result)
    if mode is Normalization.COUNT_DENSITY:
        return to_count_density(result)
    if mode is Normalization.PROBABILITY:
        return to_probability(result)
    return to_pdf_estimate(result)


def _check_stddev(stddev: float) -> float:
    stddev = float(stddev)
    if not math.isfinite(stddev) or stddev <= 0.0:
        raise ValueError(f"stddev must be positive and finite, got {stddev}")
    return stddev


def normal_pdf(x: float, mean: float, stddev: float) -> float:
    stddev = _check_stddev(stddev)
    z = (float(x) - mean) / stddev
    factor = 1.0 / (stddev * math.sqrt(2.0 * math.pi))
    return factor * math.exp(-0.5 * z * z)


def normal_pdf_at_centers(result: HistogramResult, mean: float, stddev: float) -> np.ndarray:
    """Gaussian reference curve at the bin centers, for overlay on to_pdf_estimate."""
    stddev = _check_stddev(stddev)
    z = (result.centers - mean) / stddev
    return (_INV_SQRT_2PI / stddev) * np.exp(-0.5 * z * z)
