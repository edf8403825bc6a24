import logging
import math
import typing
from dataclasses import dataclass, field

import mccalc.lexical as lexical
from mccalc.calc import RangeParseError

logger = logging.getLogger(__name__)

PLACEHOLDER_PREFIX = "__range"


@dataclass(frozen=True)
class RangeSpec:
    placeholder: str
    min_val: float
    max_val: float

    @property
    def valid(self) -> bool:
        return not (math.isnan(self.min_val) or math.isnan(self.max_val))


@dataclass
class RangeExtraction:
    ranges: typing.List[RangeSpec]
    placeholder_expr: str
    errors: typing.List[RangeParseError] = field(default_factory=list)

    @property
    def substituted_expr(self) -> str:
        # without ranges there is nothing to bind, so this is plain arithmetic
        return self.placeholder_expr

    @property
    def error(self) -> typing.Optional[str]:
        if not self.errors:
            return None
        return "; ".join(str(e) for e in self.errors)


def _parse_bound(text: str, percent: bool) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(text)
    return value / 100 if percent else value


def parse_range(
    token: lexical.RangeToken,
) -> typing.Tuple[float, float, typing.List[RangeParseError]]:
    """Parse both bounds of a range token.

    A bound that is not a finite decimal comes back as NaN together with a
    :class:`RangeParseError`; reversed bounds are swapped.
    """
    errors = []
    bounds = []
    for part, text, percent in (
        ("min", token.min_text, token.min_percent),
        ("max", token.max_text, token.max_percent),
    ):
        try:
            bounds.append(_parse_bound(text, percent))
        except ValueError:
            errors.append(RangeParseError(token.text, "%s '%s'" % (part, text)))
            bounds.append(math.nan)
    min_val, max_val = bounds
    if min_val > max_val:
        logger.warning(
            "min greater than max in range '%s', swapped to %s~%s",
            token.text,
            max_val,
            min_val,
        )
        min_val, max_val = max_val, min_val
    return min_val, max_val, errors


def placeholder_prefix(text: str) -> str:
    prefix = PLACEHOLDER_PREFIX
    while prefix in text:
        prefix = "_" + prefix
    return prefix


def extract_ranges(raw: str) -> RangeExtraction:
    """Find every ``min~max`` token in ``raw`` and replace it with a placeholder.

    Placeholders are numbered in order of first occurrence. The returned
    ``placeholder_expr`` has had the usual shorthand and implicit
    multiplication rewrites applied, so it compiles as-is once each
    placeholder is bound to a number.
    """
    text = lexical.expand_shorthand(raw)
    prefix = placeholder_prefix(text)
    ranges: typing.List[RangeSpec] = []
    errors: typing.List[RangeParseError] = []

    def _replace(token: lexical.RangeToken) -> str:
        placeholder = "%s%d__" % (prefix, len(ranges))
        min_val, max_val, token_errors = parse_range(token)
        for error in token_errors:
            logger.warning("%s", error)
        errors.extend(token_errors)
        ranges.append(RangeSpec(placeholder, min_val, max_val))
        return placeholder

    placeholder_expr = lexical.finish(
        lexical.substitute_ranges(text, _replace), placeholder_prefix=prefix
    )
    return RangeExtraction(
        ranges=ranges,
        placeholder_expr=placeholder_expr,
        errors=errors,
    )
