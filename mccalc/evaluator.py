import logging
import math
import typing

import mccalc.calc as calc
import mccalc.calc_parser as calc_parser

logger = logging.getLogger(__name__)


def compile_expression(text: str) -> calc.Expression:
    logger.debug("compiling %r", text)
    return calc_parser.parse(text)


def evaluate(
    program: calc.Expression,
    variables: typing.Optional[typing.Mapping[str, float]] = None,
    rng=None,
) -> float:
    """Evaluate a compiled expression and normalise the result to a float.

    Non-finite results are returned as-is; use :func:`evaluate_finite` when
    they should be rejected.
    """
    result = program.evaluate(calc.Environment(variables, rng))
    if isinstance(result, calc.UniformRange):
        raise calc.CalcError("'%s' is a range, not a number; use sample()" % result)
    return calc.number(result)


def evaluate_finite(
    program: calc.Expression,
    variables: typing.Optional[typing.Mapping[str, float]] = None,
    rng=None,
) -> float:
    result = evaluate(program, variables, rng)
    if not math.isfinite(result):
        raise calc.NonFiniteResult(result)
    return result


def evaluate_deterministic(text: str) -> float:
    """Evaluate an expression that contains no ranges or sampling calls.

    Raises :class:`ParseError` for malformed input or unknown identifiers.
    Division by zero and similar produce ``inf``/``nan`` rather than an
    exception, so callers must check ``math.isfinite`` themselves.
    """
    program = compile_expression(text)
    if program.probabilistic():
        raise calc.CalcError("'%s' contains sampling calls" % text)
    return evaluate(program)
