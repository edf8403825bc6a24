import math
import random

import pytest

from mccalc.stats import (
    format_number,
    histogram,
    mean,
    percentile,
    sigma_zone,
    std_dev,
    valid_values,
)


def test_valid_values_drop_non_finite():
    assert valid_values([1, math.nan, math.inf, -math.inf, 2]) == [1, 2]


def test_mean():
    assert mean([1, 2, 3]) == 2
    assert mean([math.nan, 1, math.inf, 3]) == 2
    assert math.isnan(mean([]))
    assert math.isnan(mean([math.nan]))


def test_sample_std_dev():
    assert std_dev([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(math.sqrt(32 / 7))


@pytest.mark.parametrize("data", [[], [5], [5, math.nan], [5, 5, 5]])
def test_std_dev_is_zero_without_spread(data):
    assert std_dev(data) == 0


def test_percentile_interpolates():
    data = [4, 1, 3, 2]
    assert percentile(data, 50) == 2.5
    assert percentile(data, 25) == 1.75
    assert percentile(data, 90) == pytest.approx(3.7)


def test_percentile_extremes():
    data = [random.Random(1).uniform(-5, 5) for _ in range(101)]
    assert percentile(data, 0) == min(data)
    assert percentile(data, 100) == max(data)
    assert percentile(data, -10) == min(data)
    assert percentile(data, 150) == max(data)
    assert math.isnan(percentile([], 50))


def test_histogram_bins():
    bins = histogram([1, 2, 3, 4, 5], 4)
    assert [b.probability for b in bins] == [0.2, 0.2, 0.2, 0.4]
    assert bins[0].lower_bound == 1
    assert bins[-1].upper_bound == 5
    assert bins[0].center == 1.5
    assert bins[0].label == "1 ~ 2"


def test_histogram_probabilities_sum_to_one():
    rng = random.Random(2)
    data = [rng.gauss(0, 1) for _ in range(5000)] + [math.nan]
    bins = histogram(data, 23)
    assert len(bins) == 23
    assert sum(b.probability for b in bins) == pytest.approx(1.0)


def test_histogram_of_identical_values():
    (only,) = histogram([3, 3, 3, math.nan], 23)
    assert only.lower_bound == only.upper_bound == only.center == 3
    assert only.probability == 1
    assert only.sigma_zone == "1"


def test_histogram_without_valid_values():
    assert histogram([math.nan], 5) == []


@pytest.mark.parametrize("num_bins", [0, -1, 2.5, True])
def test_histogram_rejects_bad_bin_counts(num_bins):
    with pytest.raises(ValueError):
        histogram([1, 2], num_bins)


def test_sigma_zones():
    assert sigma_zone(5.5, 5, 1) == "1"
    assert sigma_zone(3.5, 5, 1) == "2"
    assert sigma_zone(7.5, 5, 1) == "3"
    assert sigma_zone(9, 5, 1) == "other"
    assert sigma_zone(1, math.nan, 1) == "other"


def test_format_number():
    assert format_number(3.0) == "3"
    assert format_number(1234.5) == "1,234.50"
    assert format_number(-0.125) == "-0.12"
    assert format_number(math.nan) == "N/A"


def test_statistics_of_values_near_the_float_limit():
    data = [-1e308, 1e308, 1e308]
    assert mean(data) == pytest.approx(1e308 / 3)
    assert mean([1e308, 1e308]) == 1e308
    assert std_dev([-1e308, 1e308]) == pytest.approx(math.sqrt(2) * 1e308)
    assert percentile([-1e308, 1e308], 50) == 0


def test_percentile_of_nan_is_nan():
    assert math.isnan(percentile([1, 2, 3], math.nan))


def test_histogram_of_values_near_the_float_limit():
    bins = histogram([-1e308, 1e308], 4)
    assert [b.lower_bound for b in bins] == pytest.approx([-1e308, -5e307, 0, 5e307])
    assert bins[-1].upper_bound == 1e308
    assert [b.probability for b in bins] == [0.5, 0, 0, 0.5]
    assert all(math.isfinite(b.center) for b in bins)
