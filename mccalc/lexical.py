"""Regex rewrite passes shared by range extraction and normalization.

Every pass is a global substitution over the output of the previous one, so
the order in which :func:`expand_shorthand` and :func:`finish` apply them is
part of the expression syntax.
"""

import decimal
import re
import typing

_NUM = r"\d+(?:\.\d+)?"
_SIGNED_NUM = r"-?\d+(?:\.\d+)?"

_THOUSANDS_SEPARATOR = re.compile(r"(?<=\d),(?=\d{3}(?!\d))")
# (10-20%) or (10~20%), where the first number lacks its own percent sign
_INCOMPLETE_PERCENT_RANGE = re.compile(
    r"\(\s*(%s)(?![\d.]|\s*%%)\s*([~-])\s*(%s)%%\s*\)" % (_SIGNED_NUM, _SIGNED_NUM)
)
# 500 (10%~20%) or 500 (10% - 20%)
_APPLIED_PERCENT_RANGE = re.compile(
    r"(?<![\w.])(%s)\s*\(\s*(%s)%%\s*[~-]\s*(%s)%%\s*\)"
    % (_SIGNED_NUM, _SIGNED_NUM, _SIGNED_NUM)
)
_EXPLICIT_PERCENT_RANGE = re.compile(
    r"(%s)%%\s*-\s*(%s)%%" % (_SIGNED_NUM, _SIGNED_NUM)
)
_TIMES_SIGN = re.compile(r"(?<![A-Za-z_])[xX](?![A-Za-z_])")

RANGE_PATTERN = re.compile(
    r"(?<![\w.])(?P<min>[-+]?%s)(?P<min_percent>%%)?"
    r"\s*~\s*"
    r"(?P<max>[-+]?%s)(?P<max_percent>%%)?" % (_NUM, _NUM)
)

_PERCENT = re.compile(r"(?<![\w.])(%s)%%" % _NUM)
_NUMBER_PAREN = re.compile(r"(?<![\w.])(%s)\s*\(" % _NUM)
_PAREN_PAREN = re.compile(r"\)\s*\(")
# 2e3 stays a scientific literal instead of becoming 2*e3
_NUMBER_NAME = re.compile(r"(?<![\w.])(%s)\s*(?![eE][+-]?\d)([A-Za-z_])" % _NUM)
_PAREN_NAME = re.compile(r"\)\s*([A-Za-z_])")
_WHITESPACE = re.compile(r"\s+")


class RangeToken(typing.NamedTuple):
    text: str
    min_text: str
    max_text: str
    min_percent: bool
    max_percent: bool


def plain_number(value: float) -> str:
    """Format ``value`` as a decimal literal without an exponent."""
    result = format(decimal.Decimal(repr(value)), "f")
    if "." in result:
        result = result.rstrip("0").rstrip(".")
    return "0" if result == "-0" else result


def _expand_applied_percent_range(match: typing.Match) -> str:
    p1 = float(match.group(2))
    p2 = float(match.group(3))
    factor1 = 1 + p1 / 100
    factor2 = 1 + p2 / 100
    return "%s * (%s~%s)" % (
        match.group(1),
        plain_number(min(factor1, factor2)),
        plain_number(max(factor1, factor2)),
    )


def expand_shorthand(text: str) -> str:
    """Rewrite thousands separators, percent-range shorthand and ``x`` signs.

    Runs before ranges are located, so ``500 (10%~20%)`` is already
    ``500 * (1.1~1.2)`` by the time a range pattern sees it.
    """
    text = _THOUSANDS_SEPARATOR.sub("", text)
    text = _INCOMPLETE_PERCENT_RANGE.sub(r"(\1% \2 \3%)", text)
    text = _APPLIED_PERCENT_RANGE.sub(_expand_applied_percent_range, text)
    text = _EXPLICIT_PERCENT_RANGE.sub(r"\1% ~ \2%", text)
    text = _TIMES_SIGN.sub("*", text)
    return text


def _sign_is_operator(text: str, pos: int) -> bool:
    # "3 -1~2" subtracts the range; "(-1~2)" is a signed bound
    pos -= 1
    while pos >= 0 and text[pos].isspace():
        pos -= 1
    return pos >= 0 and (text[pos].isalnum() or text[pos] in "_.)%")


def substitute_ranges(
    text: str, replace: typing.Callable[[RangeToken], str]
) -> str:
    """Replace every ``min~max`` token, left to right, with ``replace(token)``."""

    def _sub(match: typing.Match) -> str:
        prefix = ""
        min_text = match.group("min")
        matched = match.group(0)
        if min_text[0] in "+-" and _sign_is_operator(text, match.start()):
            prefix = min_text[0] + " "
            min_text = min_text[1:]
            matched = matched[1:]
        token = RangeToken(
            matched,
            min_text,
            match.group("max"),
            match.group("min_percent") is not None,
            match.group("max_percent") is not None,
        )
        return prefix + replace(token)

    return RANGE_PATTERN.sub(_sub, text)


def insert_implicit_multiplication(
    text: str, placeholder_prefix: typing.Optional[str] = None
) -> str:
    if placeholder_prefix is not None:
        # a placeholder stands for a number, so "__range0__(3)" is a product
        placeholder = re.compile(
            r"(?<![\w.])(%s\d+__)\s*(?=[(A-Za-z_])" % re.escape(placeholder_prefix)
        )
        text = placeholder.sub(r"\1*", text)
    text = _NUMBER_PAREN.sub(r"\1*(", text)
    text = _PAREN_PAREN.sub(")*(", text)
    text = _NUMBER_NAME.sub(r"\1*\2", text)
    text = _PAREN_NAME.sub(r")*\1", text)
    return text


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def finish(text: str, placeholder_prefix: typing.Optional[str] = None) -> str:
    text = _PERCENT.sub(r"(\1/100)", text)
    text = insert_implicit_multiplication(text, placeholder_prefix)
    return collapse_whitespace(text)
