from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import numpy as np

from histengine.binning.edges import integer_edges, uniform_edges, validate_edges
from histengine.binning.estimators import BinRule, compute_bin_count
from histengine.stats.descriptive import finite_values, to_1d_float

logger = logging.getLogger(__name__)

DEGENERATE_RANGE_NUDGE = 1e-9
INTEGERS_RULE = "integers"


@dataclass(frozen=True, eq=False)
class HistogramResult:
    """
    Binned summary of one sample.

    centers, counts and widths are parallel arrays of length num_bins; edges
    has num_bins + 1 entries. All arrays are read-only.
    """
    centers: np.ndarray
    counts: np.ndarray
    widths: np.ndarray
    edges: np.ndarray

    def __post_init__(self) -> None:
        for name in ("centers", "counts", "widths", "edges"):
            arr = np.array(getattr(self, name), dtype=float)
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)

        n = self.counts.size
        if self.centers.size != n or self.widths.size != n or self.edges.size != n + 1:
            raise ValueError(
                "HistogramResult arrays out of shape: "
                f"centers={self.centers.size}, counts={n}, widths={self.widths.size}, edges={self.edges.size}"
            )

    @classmethod
    def from_edges(cls, edges: np.ndarray, counts: np.ndarray) -> "HistogramResult":
        edges = np.asarray(edges, dtype=float)
        return cls(
            centers=(edges[:-1] + edges[1:]) / 2.0,
            counts=counts,
            widths=edges[1:] - edges[:-1],
            edges=edges,
        )

    @property
    def num_bins(self) -> int:
        return int(self.counts.size)

    @property
    def total_count(self) -> float:
        return float(self.counts.sum())


def _check_num_bins(num_bins: int) -> int:
    if isinstance(num_bins, bool) or not isinstance(num_bins, (int, np.integer)):
        raise ValueError(f"num_bins must be an integer, got {num_bins!r}")
    if num_bins <= 0:
        raise ValueError(f"num_bins must be positive, got {num_bins}")
    return int(num_bins)


def _check_range(lo: float, hi: float) -> Tuple[float, float]:
    lo, hi = float(lo), float(hi)
    if not (math.isfinite(lo) and math.isfinite(hi)):
        raise ValueError(f"histogram range must be finite, got [{lo}, {hi}]")
    if hi < lo:
        raise ValueError(f"histogram range is inverted: max={hi} < min={lo}")
    if not math.isfinite(hi - lo):
        raise ValueError(f"histogram range [{lo}, {hi}] is too wide: max - min overflows")
    return lo, hi


def _nudge_degenerate(lo: float, hi: float) -> float:
    if hi != lo:
        return hi
    nudged = lo + DEGENERATE_RANGE_NUDGE
    if nudged == lo:
        # 1e-9 is below the float spacing at this magnitude
        nudged = lo + abs(lo) * DEGENERATE_RANGE_NUDGE
    logger.debug("Degenerate range [%s, %s], upper bound nudged to %r", lo, hi, nudged)
    return nudged


def histogram_uniform_in_range(
    x: Iterable[float] | np.ndarray,
    min_value: float,
    max_value: float,
    num_bins: int,
) -> HistogramResult:
    """
    Equal-width bins over [min_value, max_value].

    Bins are [left, right) except the last, which is closed, so a value equal
    to max_value is counted. Values outside the range are dropped (not
    clipped) and NaN is skipped; total_count only reflects what was binned.
    """
    num_bins = _check_num_bins(num_bins)
    lo, hi = _check_range(min_value, max_value)
    hi = _nudge_degenerate(lo, hi)

    arr = to_1d_float(x)
    arr = arr[~np.isnan(arr)]
    arr = arr[(arr >= lo) & (arr <= hi)]

    bin_width = (hi - lo) / num_bins
    idx = np.floor((arr - lo) / bin_width).astype(np.int64)
    # v == hi, and values a rounding error below it, belong to the last bin
    idx = np.clip(idx, 0, num_bins - 1)
    counts = np.bincount(idx, minlength=num_bins).astype(float)

    return HistogramResult.from_edges(uniform_edges(lo, hi, num_bins), counts)


def histogram_uniform(x: Iterable[float] | np.ndarray, num_bins: int) -> HistogramResult:
    """Equal-width bins spanning the sample's own [min, max]."""
    num_bins = _check_num_bins(num_bins)
    arr = to_1d_float(x)
    fin = finite_values(arr)
    if fin.size == 0:
        lo = hi = 0.0
    else:
        lo, hi = float(fin.min()), float(fin.max())
    hi = _nudge_degenerate(lo, hi)
    return histogram_uniform_in_range(arr, lo, hi, num_bins)


def histogram_fixed_width(
    x: Iterable[float] | np.ndarray,
    min_value: float,
    max_value: float,
    bin_width: float,
) -> HistogramResult:
    """
    Bins of exactly `bin_width` starting at min_value.

    The upper bound is pushed out to min_value + num_bins * bin_width so the
    last bin is full width; values in that overshoot are counted.
    """
    bin_width = float(bin_width)
    if not math.isfinite(bin_width) or bin_width <= 0.0:
        raise ValueError(f"bin_width must be positive and finite, got {bin_width}")
    lo, hi = _check_range(min_value, max_value)

    num_bins = max(1, int(math.ceil((hi - lo) / bin_width)))
    extended_max = lo + num_bins * bin_width
    return histogram_uniform_in_range(x, lo, extended_max, num_bins)


def histogram_custom_edges(
    x: Iterable[float] | np.ndarray,
    edges: Iterable[float] | np.ndarray,
) -> HistogramResult:
    """
    Bins defined by explicit, possibly unequal, edges.

    Each value goes to the first bin with edges[i] <= v < edges[i + 1]; the
    last bin also takes v == edges[-1]. Values outside the edges are dropped.
    """
    e = validate_edges(edges)
    num_bins = e.size - 1

    arr = to_1d_float(x)
    arr = arr[~np.isnan(arr)]
    arr = arr[(arr >= e[0]) & (arr <= e[-1])]

    idx = np.searchsorted(e, arr, side="right") - 1
    idx = np.minimum(idx, num_bins - 1)
    counts = np.bincount(idx, minlength=num_bins).astype(float)

    return HistogramResult.from_edges(e, counts)


def histogram_auto(
    x: Iterable[float] | np.ndarray,
    rule: BinRule | str = BinRule.FREEDMAN_DIACONIS,
) -> HistogramResult:
    """Uniform histogram over the sample's range with a rule-chosen bin count."""
    if str(getattr(rule, "value", rule)).lower() == INTEGERS_RULE:
        return histogram_custom_edges(x, integer_edges(x))
    return histogram_uniform(x, compute_bin_count(x, rule))


@dataclass(frozen=True)
class HistSpec:
    """
    Declarative binning request.

    - edges: explicit edges, exclusive with every other field
    - bin_width: fixed-width bins over `range` (or the sample range)
    - bins: an int count, or a rule name (including "integers");
      None means the Freedman-Diaconis rule
    - range: (min, max) for bins/bin_width; None derives it from the sample
    """
    bins: int | str | None = None
    range: Optional[Tuple[float, float]] = None
    bin_width: Optional[float] = None
    edges: Optional[List[float]] = None


def compute_histogram(x: Iterable[float] | np.ndarray, spec: HistSpec) -> HistogramResult:
    arr = to_1d_float(x)

    if spec.edges is not None:
        if spec.bins is not None or spec.range is not None or spec.bin_width is not None:
            raise ValueError("HistSpec.edges cannot be combined with bins, range or bin_width")
        return histogram_custom_edges(arr, spec.edges)

    if spec.range is not None:
        if len(spec.range) != 2:
            raise ValueError(f"HistSpec.range must be (min, max), got {spec.range!r}")
        lo, hi = float(spec.range[0]), float(spec.range[1])
    else:
        fin = finite_values(arr)
        lo, hi = (float(fin.min()), float(fin.max())) if fin.size else (0.0, 0.0)

    if spec.bin_width is not None:
        if spec.bins is not None:
            raise ValueError("HistSpec.bin_width cannot be combined with bins")
        return histogram_fixed_width(arr, lo, hi, spec.bin_width)

    bins = spec.bins if spec.bins is not None else BinRule.FREEDMAN_DIACONIS
    if isinstance(bins, str) and bins.strip().lower() == INTEGERS_RULE:
        if spec.range is not None:
            return histogram_custom_edges(arr, integer_edges([lo, hi]))
        return histogram_custom_edges(arr, integer_edges(arr))
    if isinstance(bins, (str, BinRule)):
        bins = compute_bin_count(arr, bins)

    if spec.range is None:
        return histogram_uniform(arr, bins)
    return histogram_uniform_in_range(arr, lo, hi, bins)
