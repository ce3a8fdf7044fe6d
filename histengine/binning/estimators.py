from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Callable, Dict, Iterable

import numpy as np

from histengine.stats.descriptive import finite_values, iqr, sample_std

logger = logging.getLogger(__name__)

MIN_BINS = 5
MAX_BINS = 100


class BinRule(str, Enum):
    FREEDMAN_DIACONIS = "freedman_diaconis"
    SCOTT = "scott"
    STURGES = "sturges"
    SQRT = "sqrt"


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def clamp_bin_count(raw: float) -> int:
    """
    Shared post-processing for every rule: round, then clamp to [5, 100].

    Extreme data (huge range over a tiny IQR, a handful of points) gets its
    rule output overridden here instead of producing 0 or thousands of bins.
    """
    if math.isnan(raw):
        return MIN_BINS
    if math.isinf(raw):
        return MAX_BINS if raw > 0 else MIN_BINS
    return max(MIN_BINS, min(MAX_BINS, _round_half_up(raw)))


def _sqrt_raw(arr: np.ndarray) -> float:
    return float(_round_half_up(math.sqrt(arr.size)))


def _sturges_raw(arr: np.ndarray) -> float:
    n = arr.size
    if n < 1:
        return 1.0
    return float(math.ceil(math.log2(n) + 1.0))


def _freedman_diaconis_raw(arr: np.ndarray) -> float:
    spread = iqr(arr)
    if math.isnan(spread) or spread <= 0.0:
        logger.debug("Freedman-Diaconis: IQR=%s, falling back to sqrt rule (n=%d)", spread, arr.size)
        return _sqrt_raw(arr)

    n = arr.size
    h = 2.0 * spread * n ** (-1.0 / 3.0)
    data_range = float(arr.max() - arr.min())
    return float(_round_half_up(data_range / h))


def _scott_raw(arr: np.ndarray) -> float:
    sigma = sample_std(arr)
    if math.isnan(sigma) or sigma == 0.0:
        logger.debug("Scott: sigma=%s, falling back to sqrt rule (n=%d)", sigma, arr.size)
        return _sqrt_raw(arr)

    n = arr.size
    h = 3.5 * sigma * n ** (-1.0 / 3.0)
    data_range = float(arr.max() - arr.min())
    return float(_round_half_up(data_range / h))


_RULES: Dict[BinRule, Callable[[np.ndarray], float]] = {
    BinRule.FREEDMAN_DIACONIS: _freedman_diaconis_raw,
    BinRule.SCOTT: _scott_raw,
    BinRule.STURGES: _sturges_raw,
    BinRule.SQRT: _sqrt_raw,
}


def parse_rule(rule: BinRule | str) -> BinRule:
    if isinstance(rule, BinRule):
        return rule
    try:
        return BinRule(str(rule).strip().lower())
    except ValueError:
        valid = [r.value for r in BinRule]
        raise ValueError(f"Unknown bin rule {rule!r}. Expected one of: {valid}") from None


def compute_bin_count(x: Iterable[float] | np.ndarray, rule: BinRule | str) -> int:
    """
    Number of bins suggested by `rule` for sample `x`, clamped to [5, 100].
    NaN and infinite values do not take part in the estimate.
    """
    r = parse_rule(rule)
    arr = finite_values(x)
    raw = _RULES[r](arr)
    bins = clamp_bin_count(raw)
    if bins != raw:
        logger.debug("%s: raw bin count %s clamped to %d", r.value, raw, bins)
    return bins


def freedman_diaconis_bins(x: Iterable[float] | np.ndarray) -> int:
    return compute_bin_count(x, BinRule.FREEDMAN_DIACONIS)


def scott_bins(x: Iterable[float] | np.ndarray) -> int:
    return compute_bin_count(x, BinRule.SCOTT)


def sturges_bins(x: Iterable[float] | np.ndarray) -> int:
    return compute_bin_count(x, BinRule.STURGES)


def sqrt_bins(x: Iterable[float] | np.ndarray) -> int:
    return compute_bin_count(x, BinRule.SQRT)
