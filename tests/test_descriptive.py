import math

import numpy as np
import pytest

from histengine.stats.descriptive import (
    describe,
    finite_values,
    iqr,
    mean,
    percentile,
    sample_max,
    sample_min,
    sample_std,
)


def test_min_max_ignore_nan():
    x = [3.0, float("nan"), -1.0, 2.0]
    assert sample_min(x) == -1.0
    assert sample_max(x) == 3.0


def test_empty_sample_sentinels():
    assert sample_min([]) == 0.0
    assert sample_max([]) == 0.0
    assert mean([]) == 0.0
    assert math.isnan(percentile([], 50.0))


def test_sample_std_uses_n_minus_one():
    x = [2, 4, 4, 4, 5, 5, 7, 9]
    assert sample_std(x) == pytest.approx(math.sqrt(32.0 / 7.0))


def test_sample_std_single_value_is_nan():
    assert math.isnan(sample_std([1.0]))


@pytest.mark.parametrize(
    "p, expected",
    [(0.0, 1.0), (25.0, 1.75), (50.0, 2.5), (75.0, 3.25), (100.0, 4.0)],
)
def test_percentile_linear_interpolation(p, expected):
    assert percentile([1.0, 2.0, 3.0, 4.0], p) == pytest.approx(expected)


def test_percentile_matches_numpy_default():
    x = np.sort(np.random.default_rng(7).normal(size=101))
    for p in (5.0, 33.3, 90.0):
        assert percentile(x, p) == pytest.approx(float(np.percentile(x, p)))


def test_percentile_rejects_out_of_range_p():
    with pytest.raises(ValueError):
        percentile([1.0, 2.0], 101.0)


def test_iqr_and_describe():
    x = np.arange(1, 6, dtype=float)
    assert iqr(x) == pytest.approx(2.0)

    d = describe([5.0, 1.0, 3.0, float("nan")])
    assert d["count"] == 3.0
    assert d["min"] == 1.0
    assert d["max"] == 5.0
    assert d["median"] == 3.0


def test_describe_empty_is_zero_filled():
    d = describe([])
    assert set(d.values()) == {0.0}


def test_finite_values_flattens_and_drops_non_finite():
    arr = finite_values(np.array([[1.0, np.nan], [np.inf, 2.0]]))
    assert arr.tolist() == [1.0, 2.0]
