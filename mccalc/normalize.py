import logging
import typing
from dataclasses import dataclass

import mccalc.lexical as lexical
from mccalc.ranges import RangeSpec, parse_range

logger = logging.getLogger(__name__)

_SAMPLING_CALLS = ("sample(", "uniform(")


@dataclass(frozen=True)
class ProcessedExpression:
    expression: str
    is_probabilistic: bool
    ranges: typing.Tuple[RangeSpec, ...] = ()


def _sampling_call(token: lexical.RangeToken) -> str:
    min_val, max_val, _ = parse_range(token)
    return "sample(uniform(%s, %s))" % (
        lexical.plain_number(min_val) if min_val == min_val else "nan",
        lexical.plain_number(max_val) if max_val == max_val else "nan",
    )


def normalize(
    raw: str, ranges: typing.Sequence[RangeSpec] = ()
) -> ProcessedExpression:
    """Rewrite ``raw`` into the sampling form the simulator compiles.

    Each ``min~max`` becomes ``sample(uniform(min, max))``. ``ranges`` is
    carried through untouched for callers that extracted them beforehand.
    """
    text = lexical.expand_shorthand(raw)
    text = lexical.substitute_ranges(text, _sampling_call)
    text = lexical.finish(text)
    lowered = text.lower()
    is_probabilistic = any(call in lowered for call in _SAMPLING_CALLS)
    logger.debug("normalized %r to %r (probabilistic: %s)", raw, text, is_probabilistic)
    return ProcessedExpression(text, is_probabilistic, tuple(ranges))
