"""Tests for the sub-grid wind distribution."""

import logging
import math

import pytest

from blowsnow.wind import bin_bounds, expected_wind, partition_wind


@pytest.mark.parametrize(
    "uo,sigma_w,n_bins",
    [(10.0, 1.0, 10), (5.0, 0.5, 10), (17.4, 0.73, 10), (8.0, 1.0, 4), (10.0, 1.0, 20)],
)
def test_probabilities_sum_to_one(uo: float, sigma_w: float, n_bins: int) -> None:
    bins = partition_wind(uo, sigma_w, n_bins=n_bins)
    assert len(bins) == n_bins
    assert math.fsum(b.probability for b in bins) == pytest.approx(1.0)
    assert all(b.probability == 1.0 / n_bins for b in bins)


@pytest.mark.parametrize(
    "uo,sigma_w,n_bins",
    [(10.0, 1.0, 10), (5.0, 0.5, 10), (17.4, 0.73, 10), (8.0, 1.0, 4), (10.0, 1.0, 20)],
)
def test_representative_wind_monotonic(uo: float, sigma_w: float, n_bins: int) -> None:
    winds = [b.wind for b in partition_wind(uo, sigma_w, n_bins=n_bins)]
    assert all(w1 <= w2 for w1, w2 in zip(winds, winds[1:]))


def test_bins_are_contiguous() -> None:
    bins = partition_wind(10.0, 1.0)
    assert bins[0].lower == 0.0
    assert bins[-1].upper == 20.0
    for b1, b2 in zip(bins, bins[1:]):
        assert b1.upper == pytest.approx(b2.lower)
    # Median split
    assert bins[4].upper == pytest.approx(10.0)


def test_representative_wind_inside_bin() -> None:
    for b in partition_wind(10.0, 1.0):
        assert b.lower <= b.wind <= b.upper
        assert not b.fallback


def test_expected_wind_first_bin() -> None:
    uo, sigma_w = 10.0, 1.0
    lower, upper = bin_bounds(0, 10, uo, sigma_w)
    value = expected_wind(lower, upper, uo, sigma_w)
    assert value == pytest.approx(upper - sigma_w, rel=1e-4)


def test_expected_wind_straddling_bin() -> None:
    assert expected_wind(9.0, 11.0, 10.0, 1.0) is None


def test_odd_bin_count_uses_fallback(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger='blowsnow.wind'):
        bins = partition_wind(10.0, 1.0, n_bins=5)
    middle = bins[2]
    assert middle.fallback
    assert middle.wind == 0.4
    assert "Problem with probability ranges" in caplog.text


def test_representative_wind_clipped() -> None:
    assert all(b.wind <= 25.0 for b in partition_wind(30.0, 1.0))
    assert all(b.wind >= 0.4 for b in partition_wind(0.3, 0.05))


def test_degenerate_bounds_clamped() -> None:
    # Upper tail beyond 2 Uo collapses onto 2 Uo
    lower, upper = bin_bounds(9, 10, 1.0, 1.0)
    assert lower == upper == 2.0
    lower, upper = bin_bounds(1, 10, 1.0, 2.0)
    assert lower == 0.0 and upper == 0.0


def test_too_few_bins() -> None:
    with pytest.raises(ValueError):
        partition_wind(10.0, 1.0, n_bins=1)


@pytest.mark.parametrize(
    "uo,sigma_w",
    [(6.0, 3.9), (5.0, 5.0), (5.0, 3.0), (2.0, 10.0)],
    ids=["upper-tail-cut", "both-tails-cut", "moderate-spread", "spread-exceeds-mean"],
)
def test_wide_spread_stays_monotonic(uo: float, sigma_w: float) -> None:
    bins = partition_wind(uo, sigma_w)
    winds = [b.wind for b in bins]
    assert all(w1 <= w2 for w1, w2 in zip(winds, winds[1:]))
    for b in bins:
        assert 0.0 <= b.lower <= b.upper <= 2.0 * uo
        assert not b.fallback
    assert winds[-1] > uo


def test_upper_bounds_capped_at_twice_mean() -> None:
    lower, upper = bin_bounds(8, 10, 6.0, 3.9)
    assert upper == 12.0
    assert lower < upper
    lower, upper = bin_bounds(9, 10, 6.0, 3.9)
    assert lower == upper == 12.0


def test_expected_wind_zero_width_bin() -> None:
    assert expected_wind(12.0, 12.0, 6.0, 3.9) == 12.0
    assert expected_wind(0.0, 0.0, 5.0, 5.0) == 0.0


def test_expected_wind_truncated_bin_inside_bounds() -> None:
    lower, upper = bin_bounds(8, 10, 6.0, 3.9)
    value = expected_wind(lower, upper, 6.0, 3.9)
    assert lower < value < upper
