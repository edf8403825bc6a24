import logging
import math
import random
import typing
from dataclasses import asdict, dataclass, field

import mccalc.evaluator as evaluator
import mccalc.stats as stats
from mccalc.bounds import solve_bounds
from mccalc.calc import AllInvalidError, CalcError, NonFiniteResult
from mccalc.normalize import ProcessedExpression, normalize
from mccalc.ranges import RangeExtraction, extract_ranges
from mccalc.settings import Settings
from mccalc.simulation import run_simulation

logger = logging.getLogger(__name__)


@dataclass
class CalculationOutcome:
    expression: str
    iterations: int
    normalized: str = ""
    deterministic: bool = False
    analytical_min: float = math.nan
    analytical_max: float = math.nan
    analytical_note: typing.Optional[str] = None
    approximate: bool = False
    simulated_min: float = math.nan
    simulated_max: float = math.nan
    mean: float = math.nan
    std_dev: float = math.nan
    median: float = math.nan
    percentiles: typing.Dict[float, float] = field(default_factory=dict)
    histogram: typing.List[stats.HistogramBin] = field(default_factory=list)
    results: typing.List[float] = field(default_factory=list)
    invalid: int = 0
    warnings: typing.List[str] = field(default_factory=list)
    error: typing.Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self, include_results: bool = False) -> typing.Dict[str, typing.Any]:
        """Plain data for JSON output, with NaN written as ``None``."""

        def clean(value):
            if isinstance(value, float) and math.isnan(value):
                return None
            if isinstance(value, dict):
                return {str(k): clean(v) for k, v in value.items()}
            if isinstance(value, list):
                return [clean(v) for v in value]
            return value

        data = asdict(self)
        if not include_results:
            del data["results"]
        return clean(data)


def _summarize(
    outcome: CalculationOutcome,
    values: typing.List[float],
    bins: int,
    percentiles: typing.Sequence[float],
) -> None:
    outcome.results = values
    outcome.simulated_min = min(values)
    outcome.simulated_max = max(values)
    outcome.mean = stats.mean(values)
    outcome.std_dev = stats.std_dev(values)
    outcome.median = stats.percentile(values, 50)
    outcome.percentiles = {p: stats.percentile(values, p) for p in percentiles}
    outcome.histogram = stats.histogram(values, bins)


def _evaluate(
    outcome: CalculationOutcome,
    processed: ProcessedExpression,
    bins: int,
    percentiles: typing.Sequence[float],
) -> None:
    value = evaluator.evaluate_deterministic(processed.expression)
    if not math.isfinite(value):
        raise NonFiniteResult(value)
    outcome.deterministic = True
    outcome.analytical_min = outcome.analytical_max = value
    _summarize(outcome, [value], bins, percentiles)


def _simulate(
    outcome: CalculationOutcome,
    processed: ProcessedExpression,
    extraction: RangeExtraction,
    settings: Settings,
    bins: int,
    percentiles: typing.Sequence[float],
    rng,
) -> None:
    bounds = solve_bounds(
        extraction.placeholder_expr, extraction.ranges, settings.max_exact_ranges
    )
    outcome.analytical_min = bounds.min
    outcome.analytical_max = bounds.max
    outcome.analytical_note = bounds.error
    outcome.approximate = bounds.approximate

    samples = run_simulation(processed, outcome.iterations, rng)
    values = stats.valid_values(samples)
    outcome.invalid = len(samples) - len(values)
    if not values:
        raise AllInvalidError(
            "calculation resulted in errors for all %d iterations" % len(samples)
        )
    if outcome.invalid:
        outcome.warnings.append(
            "%d of %d iterations gave no valid result and were excluded"
            % (outcome.invalid, len(samples))
        )
    _summarize(outcome, values, bins, percentiles)


def calculate(
    expression: str,
    iterations: typing.Optional[int] = None,
    bins: typing.Optional[int] = None,
    percentiles: typing.Optional[typing.Sequence[float]] = None,
    settings: typing.Optional[Settings] = None,
    rng=None,
) -> CalculationOutcome:
    """Run the whole pipeline for one expression.

    Expressions without ranges are evaluated once. Otherwise the analytical
    range is solved from the range endpoints and the expression is
    simulated ``iterations`` times. Failures are reported in
    ``outcome.error`` rather than raised.
    """
    settings = settings or Settings()
    iterations = settings.iterations if iterations is None else iterations
    bins = settings.bins if bins is None else bins
    percentiles = settings.percentiles if percentiles is None else percentiles
    if iterations < 1:
        raise ValueError("iterations must be positive, got %s" % iterations)
    if bins < 1:
        raise ValueError("bins must be positive, got %s" % bins)
    if rng is None and settings.seed is not None:
        rng = random.Random(settings.seed)

    outcome = CalculationOutcome(expression=expression, iterations=iterations)
    if not expression.strip():
        outcome.error = "empty expression"
        return outcome

    try:
        extraction = extract_ranges(expression)
        outcome.warnings.extend(str(e) for e in extraction.errors)
        processed = normalize(expression, extraction.ranges)
        outcome.normalized = processed.expression
        if processed.is_probabilistic:
            _simulate(
                outcome, processed, extraction, settings, bins, percentiles, rng
            )
        else:
            _evaluate(outcome, processed, bins, percentiles)
    except CalcError as e:
        logger.info("calculation of %r failed: %s", expression, e)
        outcome.error = str(e)
    return outcome
