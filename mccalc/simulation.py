import logging
import math
import typing

import mccalc.evaluator as evaluator
from mccalc.calc import CalcError
from mccalc.normalize import ProcessedExpression

logger = logging.getLogger(__name__)


def run_simulation(
    processed: ProcessedExpression, iterations: int, rng=None
) -> typing.List[float]:
    """Evaluate ``processed`` ``iterations`` times with fresh random draws.

    The expression is compiled once. A compile failure gives ``iterations``
    NaNs; an evaluation failure or non-finite value only invalidates its
    own iteration.
    """
    if iterations < 1:
        raise ValueError("iterations must be positive, got %s" % iterations)
    try:
        program = evaluator.compile_expression(processed.expression)
    except CalcError as e:
        logger.warning("could not compile %r: %s", processed.expression, e)
        return [math.nan] * iterations

    results = []
    failures = 0
    for _ in range(iterations):
        try:
            results.append(evaluator.evaluate_finite(program, rng=rng))
        except CalcError:
            failures += 1
            results.append(math.nan)
    if failures:
        logger.debug("%s of %s iterations were invalid", failures, iterations)
    return results
