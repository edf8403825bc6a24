import math
import typing
from dataclasses import dataclass


def format_number(value: float) -> str:
    if math.isnan(value):
        return "N/A"
    result = f"{value:,.2f}"
    if result.endswith(".00"):
        result = result[:-3]
    return result


@dataclass(frozen=True)
class HistogramBin:
    lower_bound: float
    upper_bound: float
    center: float
    label: str
    probability: float
    sigma_zone: str = "other"


def valid_values(data: typing.Iterable[float]) -> typing.List[float]:
    return [x for x in data if math.isfinite(x)]


def mean(data: typing.Iterable[float]) -> float:
    values = valid_values(data)
    if not values:
        return math.nan
    try:
        return math.fsum(values) / len(values)
    except OverflowError:
        return math.fsum(x / len(values) for x in values)


def std_dev(data: typing.Iterable[float]) -> float:
    """Sample standard deviation (``n - 1`` denominator); 0 for fewer than two values."""
    values = valid_values(data)
    if len(values) < 2:
        return 0.0
    mu = mean(values)
    # deviations are taken relative to the largest magnitude so squaring stays finite
    scale = max(abs(x) for x in values)
    if scale == 0:
        return 0.0
    squares = math.fsum((x / scale - mu / scale) ** 2 for x in values)
    return scale * math.sqrt(squares / (len(values) - 1))


def percentile(data: typing.Iterable[float], p: float) -> float:
    """Linearly interpolated percentile (R-7, as in Excel's PERCENTILE.INC)."""
    values = sorted(valid_values(data))
    if not values or math.isnan(p):
        return math.nan
    if p <= 0:
        return values[0]
    if p >= 100:
        return values[-1]
    rank = p / 100 * (len(values) - 1)
    lower = math.floor(rank)
    upper = math.ceil(rank)
    fraction = rank - lower
    delta = values[upper] - values[lower]
    if math.isinf(delta):
        return values[lower] * (1 - fraction) + values[upper] * fraction
    return values[lower] + delta * fraction


def sigma_zone(value: float, mu: float, sigma: float) -> str:
    """Which band of standard deviations around the mean ``value`` falls in."""
    if math.isnan(mu) or math.isnan(sigma):
        return "other"
    distance = abs(value - mu)
    for zone in (1, 2, 3):
        if distance <= zone * sigma:
            return str(zone)
    return "other"


def _bin(lower: float, upper: float, count: int, total: int, mu, sigma) -> HistogramBin:
    center = lower / 2 + upper / 2
    return HistogramBin(
        lower_bound=lower,
        upper_bound=upper,
        center=center,
        label="%s ~ %s" % (format_number(lower), format_number(upper)),
        probability=count / total,
        sigma_zone=sigma_zone(center, mu, sigma),
    )


def histogram(data: typing.Iterable[float], num_bins: int) -> typing.List[HistogramBin]:
    """Split the valid values into ``num_bins`` equal-width bins.

    Bins are closed on the left and open on the right, except the last,
    which also holds the maximum. Identical values, or a range too narrow
    to split, give a single bin.
    """
    if isinstance(num_bins, bool) or not isinstance(num_bins, int) or num_bins < 1:
        raise ValueError("number of bins must be a positive integer, got %r" % (num_bins,))
    values = valid_values(data)
    if not values:
        return []
    total = len(values)
    mu = mean(values)
    sigma = std_dev(values)
    lo = min(values)
    hi = max(values)
    # bin on halved values when the span itself overflows
    scale = 2.0 if math.isinf(hi - lo) else 1.0
    width = (hi / scale - lo / scale) / num_bins
    if lo == hi or width <= 0:
        return [_bin(lo, hi, total, total, mu, sigma)]

    counts = [0] * num_bins
    for x in values:
        if x == hi:
            index = num_bins - 1
        else:
            index = min(max(int((x / scale - lo / scale) / width), 0), num_bins - 1)
        counts[index] += 1

    return [
        _bin(
            (lo / scale + width * i) * scale,
            hi if i == num_bins - 1 else (lo / scale + width * (i + 1)) * scale,
            count,
            total,
            mu,
            sigma,
        )
        for i, count in enumerate(counts)
    ]
