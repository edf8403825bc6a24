import json
import math
import random

import pytest

from mccalc.calculator import calculate
from mccalc.settings import Settings


def test_deterministic_expression():
    outcome = calculate("2 + 3 * 4")
    assert outcome.ok
    assert outcome.deterministic
    assert outcome.results == [14]
    assert outcome.analytical_min == outcome.analytical_max == 14
    assert outcome.mean == 14
    assert outcome.std_dev == 0
    assert len(outcome.histogram) == 1


@pytest.mark.parametrize("iterations", [1, 10, 500])
def test_degenerate_range(iterations):
    outcome = calculate("5~5", iterations=iterations)
    assert not outcome.deterministic
    assert outcome.analytical_min == outcome.analytical_max == 5
    assert outcome.simulated_min == outcome.simulated_max == 5
    assert outcome.std_dev == 0
    assert len(outcome.histogram) == 1


def test_probabilistic_expression():
    outcome = calculate("1~2 + 1~2", iterations=2000, rng=random.Random(1))
    assert outcome.ok
    assert (outcome.analytical_min, outcome.analytical_max) == (2, 4)
    assert 2 <= outcome.simulated_min <= outcome.simulated_max <= 4
    assert outcome.mean == pytest.approx(3, abs=0.1)
    assert list(outcome.percentiles) == [5, 10, 50, 90, 95]
    assert outcome.median == outcome.percentiles[50]
    assert len(outcome.histogram) == 23
    assert sum(b.probability for b in outcome.histogram) == pytest.approx(1.0)
    assert outcome.invalid == 0
    assert outcome.warnings == []


def test_custom_bins_and_percentiles():
    outcome = calculate("0~100", iterations=300, bins=5, percentiles=[25, 75])
    assert len(outcome.histogram) == 5
    assert list(outcome.percentiles) == [25, 75]


def test_many_ranges_flag_approximation():
    outcome = calculate(" + ".join(["1~2"] * 9), iterations=100)
    assert outcome.ok
    assert outcome.approximate
    assert "approximate" in outcome.analytical_note


def test_partially_invalid_run(stub_random):
    outcome = calculate("1 / (-1~1)", iterations=3, rng=stub_random([0.0, 0.5, -0.25]))
    assert outcome.ok
    assert outcome.invalid == 1
    assert outcome.results == [2.0, -4.0]
    assert outcome.mean == -1
    assert math.isfinite(outcome.std_dev)
    assert (outcome.analytical_min, outcome.analytical_max) == (-1, 1)
    assert "1 of 3 iterations" in outcome.warnings[0]


def test_all_iterations_invalid():
    outcome = calculate("1 / (0~0)", iterations=50)
    assert not outcome.ok
    assert "all 50 iterations" in outcome.error
    assert outcome.invalid == 50


@pytest.mark.parametrize(
    "expression, message",
    [
        ("", "empty expression"),
        ("   ", "empty expression"),
        ("foo + 1", "unknown identifier foo"),
        ("1 / 0", "non-finite"),
        ("(1 + 2", "syntax error"),
    ],
)
def test_errors(expression, message):
    outcome = calculate(expression, iterations=10)
    assert not outcome.ok
    assert message in outcome.error


def test_invalid_range_bound_is_reported():
    outcome = calculate("%s~2 + 1~3" % ("9" * 400), iterations=10)
    assert any("could not parse min" in w for w in outcome.warnings)
    assert not outcome.ok


def test_seed_from_settings_is_reproducible():
    settings = Settings(iterations=200, seed=3)
    first = calculate("1~10 * 2~3", settings=settings)
    second = calculate("1~10 * 2~3", settings=settings)
    assert first.results == second.results


def test_bad_arguments():
    with pytest.raises(ValueError):
        calculate("1~2", iterations=0)
    with pytest.raises(ValueError):
        calculate("1~2", bins=0)


def test_to_dict_is_json_ready():
    outcome = calculate("1 / (0~0)", iterations=5)
    data = outcome.to_dict()
    assert data["mean"] is None
    assert "results" not in data
    json.dumps(data, allow_nan=False)

    data = calculate("1~2", iterations=5).to_dict(include_results=True)
    assert len(data["results"]) == 5
    assert set(data["percentiles"]) == {"5", "10", "50", "90", "95"}


def test_results_near_the_float_limit():
    outcome = calculate("1e308 * (-1~1)", iterations=100, rng=random.Random(3))
    assert outcome.ok
    assert (outcome.analytical_min, outcome.analytical_max) == (-1e308, 1e308)
    assert math.isfinite(outcome.mean)
    assert math.isfinite(outcome.std_dev)
    assert len(outcome.histogram) == 23
    assert all(math.isfinite(b.lower_bound) for b in outcome.histogram)


def test_range_times_paren_agrees_with_simulation():
    outcome = calculate("1~2(3)", iterations=200, rng=random.Random(4))
    assert outcome.ok
    assert (outcome.analytical_min, outcome.analytical_max) == (3, 6)
    assert outcome.analytical_note is None
    assert 3 <= outcome.simulated_min <= outcome.simulated_max <= 6
