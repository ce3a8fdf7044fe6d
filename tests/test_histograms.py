import dataclasses

import numpy as np
import pytest

from histengine.binning.edges import integer_edges, uniform_edges, validate_edges
from histengine.binning.histograms import (
    HistSpec,
    compute_histogram,
    histogram_auto,
    histogram_custom_edges,
    histogram_fixed_width,
    histogram_uniform,
    histogram_uniform_in_range,
)


@pytest.fixture
def normal_sample():
    x = np.random.default_rng(42).normal(size=2000)
    x[::97] = np.nan
    return x


def _assert_midpoints(res):
    np.testing.assert_allclose(res.centers, (res.edges[:-1] + res.edges[1:]) / 2.0)
    np.testing.assert_allclose(res.widths, np.diff(res.edges))


# -----------------------------
# Uniform bins
# -----------------------------

def test_uniform_in_range_conserves_in_range_values(normal_sample):
    res = histogram_uniform_in_range(normal_sample, -1.0, 1.0, 10)
    valid = normal_sample[~np.isnan(normal_sample)]
    expected = np.count_nonzero((valid >= -1.0) & (valid <= 1.0))
    assert res.total_count == expected
    assert res.counts.sum() == expected
    assert res.num_bins == 10


def test_uniform_auto_range_counts_every_value(normal_sample):
    res = histogram_uniform(normal_sample, 37)
    assert res.total_count == np.count_nonzero(~np.isnan(normal_sample))
    _assert_midpoints(res)


def test_max_value_lands_in_last_bin():
    res = histogram_uniform_in_range([0.0, 1.0, 2.0, 3.0, 4.0], 0.0, 4.0, 4)
    assert res.counts.tolist() == [1.0, 1.0, 1.0, 2.0]


def test_out_of_range_values_are_dropped_not_clipped():
    res = histogram_uniform_in_range([-1.0, 0.25, 0.75, 2.0], 0.0, 1.0, 2)
    assert res.counts.tolist() == [1.0, 1.0]
    assert res.total_count == 2


def test_nan_values_are_skipped():
    res = histogram_uniform_in_range([np.nan, 0.5, np.nan], 0.0, 1.0, 2)
    assert res.total_count == 1


def test_degenerate_range_is_nudged():
    res = histogram_uniform([5.0, 5.0, 5.0], 5)
    assert res.total_count == 3
    assert res.counts[0] == 3
    assert np.all(res.widths > 0)
    assert np.all(np.isfinite(res.centers))


def test_degenerate_range_with_large_values():
    res = histogram_uniform([1e12, 1e12], 2)
    assert res.total_count == 2
    assert np.all(res.widths > 0)


def test_empty_sample_keeps_geometry():
    res = histogram_uniform_in_range([], 0.0, 1.0, 4)
    assert res.counts.tolist() == [0.0] * 4
    assert res.total_count == 0
    np.testing.assert_allclose(res.centers, [0.125, 0.375, 0.625, 0.875])
    np.testing.assert_allclose(res.widths, [0.25] * 4)

    auto = histogram_uniform([], 3)
    assert auto.total_count == 0
    assert auto.num_bins == 3


@pytest.mark.parametrize("num_bins", [0, -1, 2.5, True, "4"])
def test_invalid_num_bins_rejected(num_bins):
    with pytest.raises(ValueError):
        histogram_uniform_in_range([1.0], 0.0, 1.0, num_bins)


def test_inverted_range_rejected():
    with pytest.raises(ValueError, match="inverted"):
        histogram_uniform_in_range([1.0], 1.0, 0.0, 3)


def test_overflowing_range_rejected():
    with pytest.raises(ValueError, match="too wide"):
        histogram_uniform_in_range([0.0], -1e308, 1e308, 2)
    with pytest.raises(ValueError, match="too wide"):
        histogram_fixed_width([0.0], -1e308, 1e308, 1e308)


# -----------------------------
# Fixed width
# -----------------------------

def test_fixed_width_extends_last_bin():
    res = histogram_fixed_width([0.0, 0.1, 0.95, 1.0], 0.0, 1.0, 0.3)
    assert res.num_bins == 4
    assert res.edges[-1] == pytest.approx(1.2)
    np.testing.assert_allclose(res.widths, [0.3] * 4)
    assert res.counts.tolist() == [2.0, 0.0, 0.0, 2.0]
    _assert_midpoints(res)


def test_fixed_width_counts_overshoot():
    res = histogram_fixed_width([1.1, 1.3], 0.0, 1.0, 0.3)
    assert res.total_count == 1


def test_fixed_width_on_empty_range_gives_one_bin():
    res = histogram_fixed_width([2.0], 2.0, 2.0, 0.5)
    assert res.num_bins == 1
    assert res.total_count == 1


@pytest.mark.parametrize("width", [0.0, -0.5, float("nan"), float("inf")])
def test_fixed_width_rejects_bad_width(width):
    with pytest.raises(ValueError):
        histogram_fixed_width([1.0], 0.0, 1.0, width)


# -----------------------------
# Custom edges
# -----------------------------

def test_custom_edges_law():
    res = histogram_custom_edges([0.0, 0.5, 1.0, 1.999, 2.0, 3.0], [0.0, 1.0, 2.0, 3.0])
    assert res.counts.tolist() == [2.0, 2.0, 2.0]
    assert res.total_count == 6
    _assert_midpoints(res)


def test_custom_edges_unequal_widths_and_drops():
    res = histogram_custom_edges(
        [-0.1, 0.0, 0.2, 0.9, 5.0, 10.0, 10.1, np.nan],
        [0.0, 0.5, 1.0, 10.0],
    )
    assert res.counts.tolist() == [2.0, 1.0, 2.0]
    assert res.widths.tolist() == [0.5, 0.5, 9.0]
    assert res.centers.tolist() == [0.25, 0.75, 5.5]


@pytest.mark.parametrize(
    "edges",
    [[1.0], [], [0.0, 1.0, 1.0, 2.0], [0.0, 2.0, 1.0], [[0.0, 1.0], [1.0, 2.0]], [0.0, np.nan, 2.0]],
)
def test_invalid_edges_rejected(edges):
    with pytest.raises(ValueError):
        histogram_custom_edges([0.5], edges)


def test_validate_edges_reports_offending_pair():
    with pytest.raises(ValueError, match=r"edges\[1\]"):
        validate_edges([0.0, 1.0, 1.0])


def test_uniform_edges_end_exactly_at_upper_bound():
    e = uniform_edges(0.0, 1.0, 3)
    assert e[0] == 0.0
    assert e[-1] == 1.0
    assert e.size == 4


def test_integer_edges():
    assert integer_edges([0.5, 2.5]).tolist() == [0.0, 1.0, 2.0, 3.0]
    assert integer_edges([3.0, 3.0]).tolist() == [3.0, 4.0]
    assert integer_edges([-1.5, 0.2]).tolist() == [-2.0, -1.0, 0.0, 1.0]


# -----------------------------
# Result object / dispatch
# -----------------------------

def test_result_is_immutable():
    res = histogram_uniform([1.0, 2.0, 3.0], 2)
    with pytest.raises(ValueError):
        res.counts[0] = 10.0
    with pytest.raises(dataclasses.FrozenInstanceError):
        res.counts = np.zeros(2)


def test_histogram_auto_integers_rule():
    res = histogram_auto([0.5, 1.5, 2.5], "integers")
    assert res.counts.tolist() == [1.0, 1.0, 1.0]


def test_histogram_auto_uses_rule_count():
    x = np.zeros(400)
    x[:200] = 1.0
    assert histogram_auto(x, "sqrt").num_bins == 20


def test_compute_histogram_dispatch():
    x = [0.0, 1.0, 2.0, 3.0, 4.0]
    a = compute_histogram(x, HistSpec(bins=4, range=(0.0, 4.0)))
    b = histogram_uniform_in_range(x, 0.0, 4.0, 4)
    assert a.counts.tolist() == b.counts.tolist()

    c = compute_histogram(x, HistSpec(edges=[0.0, 2.0, 4.0]))
    assert c.counts.tolist() == [2.0, 3.0]

    d = compute_histogram(x, HistSpec(bin_width=1.5))
    assert d.num_bins == 3
    assert d.total_count == 5

    e = compute_histogram(x, HistSpec(bins="sturges"))
    assert e.num_bins == 5


def test_compute_histogram_rejects_conflicting_fields():
    with pytest.raises(ValueError):
        compute_histogram([1.0], HistSpec(bins=3, edges=[0.0, 1.0]))
    with pytest.raises(ValueError):
        compute_histogram([1.0], HistSpec(bins=3, bin_width=0.5))
