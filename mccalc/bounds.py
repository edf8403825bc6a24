import logging
import math
import typing
from dataclasses import dataclass

import mccalc.evaluator as evaluator
from mccalc.calc import AllInvalidError, CalcError, NonFiniteResult
from mccalc.ranges import RangeSpec

logger = logging.getLogger(__name__)

MAX_EXACT_RANGES = 8

APPROXIMATION_NOTE = (
    "approximate: with more than %d ranges only the all-minimum and "
    "all-maximum combinations are evaluated, which does not bound "
    "non-monotonic expressions"
)


@dataclass
class Bounds:
    min: float
    max: float
    error: typing.Optional[str] = None
    approximate: bool = False
    invalid: int = 0

    @property
    def found(self) -> bool:
        return not (math.isnan(self.min) or math.isnan(self.max))


def corner_combinations(
    ranges: typing.Sequence[RangeSpec],
) -> typing.Iterator[typing.Dict[str, float]]:
    """Yield all ``2**n`` endpoint assignments; bit ``j`` of ``i`` picks range ``j``'s max."""
    for i in range(2 ** len(ranges)):
        yield {
            r.placeholder: r.max_val if (i >> j) & 1 else r.min_val
            for j, r in enumerate(ranges)
        }


def extreme_combinations(
    ranges: typing.Sequence[RangeSpec],
) -> typing.Iterator[typing.Dict[str, float]]:
    yield {r.placeholder: r.min_val for r in ranges}
    yield {r.placeholder: r.max_val for r in ranges}


def _evaluate_combinations(
    placeholder_expr: str,
    combinations: typing.Iterable[typing.Dict[str, float]],
) -> typing.Tuple[typing.List[float], int]:
    program = evaluator.compile_expression(placeholder_expr)
    values = []
    invalid = 0
    for combination in combinations:
        if any(math.isnan(v) for v in combination.values()):
            invalid += 1
            continue
        try:
            values.append(evaluator.evaluate_finite(program, combination))
        except CalcError as e:
            logger.debug("combination %s failed: %s", combination, e)
            invalid += 1
    if not values:
        raise AllInvalidError(
            "no combination of range endpoints gave a finite result"
        )
    return values, invalid


def solve_bounds(
    placeholder_expr: str,
    ranges: typing.Sequence[RangeSpec],
    max_exact: int = MAX_EXACT_RANGES,
) -> Bounds:
    """Compute the min and max of an expression over its range endpoints.

    Up to ``max_exact`` ranges every corner of the box is evaluated, which
    is exact for expressions that are monotonic in each range. Beyond that
    only the all-min and all-max corners are tried and the result is
    flagged as approximate.
    """
    notes = []
    for index, r in enumerate(ranges):
        if not r.valid:
            notes.append(
                "range %d has an invalid bound; combinations using it were skipped"
                % (index + 1)
            )

    if not ranges:
        try:
            value = evaluator.evaluate_deterministic(placeholder_expr)
            if not math.isfinite(value):
                raise NonFiniteResult(value)
        except CalcError as e:
            return Bounds(math.nan, math.nan, str(e), invalid=1)
        return Bounds(value, value)

    approximate = len(ranges) > max_exact
    if approximate:
        notes.append(APPROXIMATION_NOTE % max_exact)
        logger.warning("%s ranges, using approximate bounds", len(ranges))
        combinations = extreme_combinations(ranges)
    else:
        combinations = corner_combinations(ranges)

    try:
        values, invalid = _evaluate_combinations(placeholder_expr, combinations)
    except CalcError as e:
        notes.insert(0, str(e))
        return Bounds(math.nan, math.nan, "; ".join(notes), approximate)

    return Bounds(
        min(values),
        max(values),
        "; ".join(notes) if notes else None,
        approximate,
        invalid,
    )
