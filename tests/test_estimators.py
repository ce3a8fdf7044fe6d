import numpy as np
import pytest

from histengine.binning import estimators
from histengine.binning.estimators import (
    MAX_BINS,
    MIN_BINS,
    BinRule,
    clamp_bin_count,
    compute_bin_count,
    freedman_diaconis_bins,
    parse_rule,
    scott_bins,
    sqrt_bins,
    sturges_bins,
)


@pytest.mark.parametrize("rule", list(BinRule))
@pytest.mark.parametrize("sample", [[0.7], [1.0, 2.0], []])
def test_tiny_samples_are_clamped(rule, sample):
    bins = compute_bin_count(sample, rule)
    assert MIN_BINS <= bins <= MAX_BINS


@pytest.mark.parametrize(
    "raw, expected",
    [(0, 5), (-3, 5), (4.4, 5), (42.5, 43), (99.6, 100), (1000, 100), (float("nan"), 5), (float("inf"), 100)],
)
def test_clamp_bin_count(raw, expected):
    assert clamp_bin_count(raw) == expected


def test_sqrt_rule():
    assert sqrt_bins(np.zeros(400)) == 20
    assert sqrt_bins(np.zeros(10_000)) == 100
    assert sqrt_bins(np.zeros(1_000_000)) == 100


def test_sturges_rule():
    # ceil(log2(1000) + 1) = ceil(10.97)
    assert sturges_bins(np.arange(1000.0)) == 11


def test_freedman_diaconis_rule():
    # IQR = 499.5, h = 2 * 499.5 / 10, range = 999
    assert freedman_diaconis_bins(np.arange(1000.0)) == 10


def test_scott_rule():
    # sigma = 288.68, h = 3.5 * sigma / 10, range = 999
    assert scott_bins(np.arange(1000.0)) == 10


def test_constant_sample_falls_back_to_sqrt():
    x = np.full(400, 2.0)
    assert freedman_diaconis_bins(x) == 20
    assert scott_bins(x) == 20


def test_freedman_diaconis_uses_descriptive_iqr(monkeypatch):
    monkeypatch.setattr(estimators, "iqr", lambda arr: 0.0)
    assert freedman_diaconis_bins(np.arange(400.0)) == 20


def test_nan_values_do_not_count_towards_n():
    x = np.concatenate([np.zeros(400), np.full(100, np.nan)])
    assert sqrt_bins(x) == 20


def test_rule_accepts_strings():
    assert parse_rule("SQRT") is BinRule.SQRT
    assert compute_bin_count(np.zeros(400), "sqrt") == 20


def test_unknown_rule_raises():
    with pytest.raises(ValueError, match="Unknown bin rule"):
        compute_bin_count([1.0, 2.0], "doane")


def test_estimators_are_deterministic():
    x = np.random.default_rng(0).normal(size=5000)
    for rule in BinRule:
        assert compute_bin_count(x, rule) == compute_bin_count(x.copy(), rule)
