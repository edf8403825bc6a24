import math
import typing

from .calc import (
    Environment,
    Expression,
    ParseError,
    UniformRange,
    number,
)


def round_half_away(value: float, digits: int = 0) -> float:
    if not math.isfinite(value):
        return value
    try:
        factor = 10.0 ** digits
    except OverflowError:
        return value
    if factor == 0:
        return math.copysign(0.0, value)
    scaled = abs(value) * factor
    # at or above 2**52 a double has no fractional part left to round
    if scaled >= 2 ** 52:
        return value
    return math.copysign(math.floor(scaled + 0.5) / factor, value)


class FnOp(Expression):
    min_args = 1
    max_args: typing.Optional[int] = 1

    @classmethod
    def name(cls) -> str:
        raise NotImplementedError

    @classmethod
    def description(cls) -> str:
        return ""

    @classmethod
    def help(cls) -> str:
        return "No help text available for this function."

    def __init__(self, *args: Expression):
        if len(args) < self.min_args or (
            self.max_args is not None and len(args) > self.max_args
        ):
            if self.min_args == self.max_args:
                expected = "%s" % self.min_args
            elif self.max_args is None:
                expected = "at least %s" % self.min_args
            else:
                expected = "%s to %s" % (self.min_args, self.max_args)
            raise ParseError(
                "'%s' expected %s arguments, got %s" % (self.name(), expected, len(args))
            )
        self.args = tuple(args)

    def probabilistic(self) -> bool:
        return any(arg.probabilistic() for arg in self.args)

    def __repr__(self):
        return "%s(%s)" % (self.name(), ", ".join(str(arg) for arg in self.args))


class MathFnOp(FnOp):
    def op(self, *args: float) -> float:
        raise NotImplementedError

    def evaluate(self, env: Environment):
        values = [number(arg.evaluate(env)) for arg in self.args]
        try:
            return self.op(*values)
        except OverflowError:
            return math.inf
        except (ValueError, ZeroDivisionError):
            return math.nan


class Round(MathFnOp):
    max_args = 2

    def op(self, *args: float) -> float:
        digits = 0 if len(args) == 1 else args[1]
        if digits != int(digits):
            return math.nan
        return round_half_away(args[0], int(digits))

    @classmethod
    def name(cls):
        return "round"

    @classmethod
    def description(cls) -> str:
        return "round to the nearest integer or decimal place"

    @classmethod
    def help(cls) -> str:
        return """round(<x>[, <digits>])

Arguments:
    x - A number
    digits - Optional. Number of decimal places to keep.

Result:
    Rounds x, with halves rounded away from zero
    (round(2.5) is 3, round(-2.5) is -3).

Examples:
    round(1~6)
    round(1~6) + round(1~6)
    round(pi, 2)
"""


class Abs(MathFnOp):
    op = staticmethod(abs)

    @classmethod
    def name(cls):
        return "abs"

    @classmethod
    def description(cls) -> str:
        return "absolute value"


class Sqrt(MathFnOp):
    op = staticmethod(math.sqrt)

    @classmethod
    def name(cls):
        return "sqrt"

    @classmethod
    def description(cls) -> str:
        return "square root"

    @classmethod
    def help(cls) -> str:
        return """sqrt(<x>)

Result:
    Square root of x. Negative x gives an invalid result.

Examples:
    sqrt(16)
    sqrt(10~20)
"""


class Exp(MathFnOp):
    op = staticmethod(math.exp)

    @classmethod
    def name(cls):
        return "exp"

    @classmethod
    def description(cls) -> str:
        return "e raised to a power"


class Log(MathFnOp):
    max_args = 2

    def op(self, *args: float) -> float:
        return math.log(*args)

    @classmethod
    def name(cls):
        return "log"

    @classmethod
    def description(cls) -> str:
        return "logarithm (natural unless a base is given)"

    @classmethod
    def help(cls) -> str:
        return """log(<x>[, <base>])

Arguments:
    x - A positive number
    base - Optional. Defaults to e.

Examples:
    log(e)
    log(8, 2)
"""


class Log10(MathFnOp):
    op = staticmethod(math.log10)

    @classmethod
    def name(cls):
        return "log10"

    @classmethod
    def description(cls) -> str:
        return "base 10 logarithm"


class Sin(MathFnOp):
    op = staticmethod(math.sin)

    @classmethod
    def name(cls):
        return "sin"

    @classmethod
    def description(cls) -> str:
        return "sine (radians)"


class Cos(MathFnOp):
    op = staticmethod(math.cos)

    @classmethod
    def name(cls):
        return "cos"

    @classmethod
    def description(cls) -> str:
        return "cosine (radians)"


class Tan(MathFnOp):
    op = staticmethod(math.tan)

    @classmethod
    def name(cls):
        return "tan"

    @classmethod
    def description(cls) -> str:
        return "tangent (radians)"


class Floor(MathFnOp):
    def op(self, *args: float) -> float:
        return float(math.floor(args[0]))

    @classmethod
    def name(cls):
        return "floor"

    @classmethod
    def description(cls) -> str:
        return "round down"


class Ceil(MathFnOp):
    def op(self, *args: float) -> float:
        return float(math.ceil(args[0]))

    @classmethod
    def name(cls):
        return "ceil"

    @classmethod
    def description(cls) -> str:
        return "round up"


class Min(MathFnOp):
    max_args = None

    def op(self, *args: float) -> float:
        return min(args)

    @classmethod
    def name(cls):
        return "min"

    @classmethod
    def description(cls) -> str:
        return "smallest of the arguments"

    @classmethod
    def help(cls) -> str:
        return """min(<x>, <y>, ...)

Result:
    Returns the smallest argument.

Examples:
    min(1~10, 5)
"""


class Max(MathFnOp):
    max_args = None

    def op(self, *args: float) -> float:
        return max(args)

    @classmethod
    def name(cls):
        return "max"

    @classmethod
    def description(cls) -> str:
        return "largest of the arguments"

    @classmethod
    def help(cls) -> str:
        return """max(<x>, <y>, ...)

Result:
    Returns the largest argument.

Examples:
    max(1~10, 5)
    (100~200) / max(0.5~2, 1)
"""


class Uniform(FnOp):
    min_args = 2
    max_args = 2

    def evaluate(self, env: Environment):
        return UniformRange(
            number(self.args[0].evaluate(env)), number(self.args[1].evaluate(env))
        )

    def probabilistic(self) -> bool:
        return True

    @classmethod
    def name(cls):
        return "uniform"

    @classmethod
    def description(cls) -> str:
        return "a uniform range, for use with sample"

    @classmethod
    def help(cls) -> str:
        return """uniform(<min>, <max>)

Result:
    Describes the interval [min, max]. On its own it is
    not a number; pass it to sample to draw from it.
    The range syntax min~max is shorthand for
    sample(uniform(min, max)).

Examples:
    sample(uniform(1, 6))
"""


class Sample(FnOp):
    def evaluate(self, env: Environment):
        value = self.args[0].evaluate(env)
        if isinstance(value, UniformRange):
            return value.sample(env.rng)
        return number(value)

    def probabilistic(self) -> bool:
        return True

    @classmethod
    def name(cls):
        return "sample"

    @classmethod
    def description(cls) -> str:
        return "draw a random value from a range"

    @classmethod
    def help(cls) -> str:
        return """sample(<range>)

Arguments:
    range - A range built with uniform, or a plain number.

Result:
    Draws one value uniformly from the range every time the
    expression is evaluated. If min equals max the result is
    exactly that value; if min is greater than max the draw
    is invalid. A plain number is returned unchanged.

Examples:
    sample(uniform(0.55, 0.65))
    1400~1700 * 0.55~0.65
"""


NAMES_TO_FUNCTIONS: typing.Dict[str, typing.Type[FnOp]] = {
    fn.name(): fn
    for fn in (
        Round,
        Abs,
        Sqrt,
        Exp,
        Log,
        Log10,
        Sin,
        Cos,
        Tan,
        Floor,
        Ceil,
        Min,
        Max,
        Uniform,
        Sample,
    )
}


def resolve_function_call(name: str, args: typing.Sequence[Expression]) -> FnOp:
    name = name.lower()
    if name in NAMES_TO_FUNCTIONS:
        return NAMES_TO_FUNCTIONS[name](*args)
    else:
        raise ParseError("unknown function %s" % name)
