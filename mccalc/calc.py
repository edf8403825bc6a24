import math
import random
import typing


class CalcError(ValueError):
    pass


class RangeParseError(CalcError):
    def __init__(self, token: str, part: str) -> None:
        super().__init__(
            "invalid numeric value in range '%s' (could not parse %s)" % (token, part)
        )
        self.token = token
        self.part = part


class ParseError(CalcError):
    pass


class NonFiniteResult(CalcError):
    def __init__(self, value: float) -> None:
        super().__init__("expression evaluated to a non-finite value (%s)" % value)
        self.value = value


class AllInvalidError(CalcError):
    pass


class UniformRange:
    """A closed interval ``[min, max]`` that ``sample`` draws uniformly from."""

    def __init__(self, min_val: float, max_val: float) -> None:
        self.min = min_val
        self.max = max_val

    def sample(self, rng) -> float:
        # reversed or undefined bounds invalidate the draw, not the run
        if not (self.min <= self.max):
            return math.nan
        if self.min == self.max:
            return self.min
        return rng.uniform(self.min, self.max)

    def __repr__(self) -> str:
        return "%s~%s" % (self.min, self.max)


class Environment:
    def __init__(
        self,
        variables: typing.Optional[typing.Mapping[str, float]] = None,
        rng=None,
    ) -> None:
        self.variables = dict(variables or {})
        self.rng = random if rng is None else rng


def number(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CalcError("number expected, got %s" % (value,))
    return float(value)


class Expression:
    def evaluate(self, env: Environment):
        raise NotImplementedError

    def probabilistic(self) -> bool:
        return False


class Number(Expression):
    def __init__(self, value):
        self.value = float(value)

    def evaluate(self, env: Environment):
        return self.value

    def __repr__(self):
        return repr(self.value)


class Constant(Expression):
    def __init__(self, name: str, value: float):
        self.name = name
        self.value = value

    def evaluate(self, env: Environment):
        return self.value

    def __repr__(self):
        return self.name


class Var(Expression):
    def __init__(self, name: str) -> None:
        self.name = name

    def evaluate(self, env: Environment):
        try:
            return env.variables[self.name]
        except KeyError:
            raise ParseError("unknown identifier %s" % self.name) from None

    def __repr__(self) -> str:
        return self.name


class BiMathOp(Expression):
    def op(self, lhs: float, rhs: float) -> float:
        raise NotImplementedError

    def __init__(self, lhs: Expression, rhs: Expression):
        self.lhs = lhs
        self.rhs = rhs

    def evaluate(self, env: Environment):
        return self.op(number(self.lhs.evaluate(env)), number(self.rhs.evaluate(env)))

    def probabilistic(self) -> bool:
        return self.lhs.probabilistic() or self.rhs.probabilistic()


class Add(BiMathOp):
    def op(self, lhs: float, rhs: float) -> float:
        return lhs + rhs

    def __repr__(self):
        return "(%s + %s)" % (self.lhs, self.rhs)


class Sub(BiMathOp):
    def op(self, lhs: float, rhs: float) -> float:
        return lhs - rhs

    def __repr__(self):
        return "(%s - %s)" % (self.lhs, self.rhs)


class Mul(BiMathOp):
    def op(self, lhs: float, rhs: float) -> float:
        return lhs * rhs

    def __repr__(self):
        return "(%s * %s)" % (self.lhs, self.rhs)


class Div(BiMathOp):
    def op(self, lhs: float, rhs: float) -> float:
        try:
            return lhs / rhs
        except ZeroDivisionError:
            if lhs == 0 or math.isnan(lhs):
                return math.nan
            return math.copysign(math.inf, lhs) * math.copysign(1.0, rhs)

    def __repr__(self):
        return "(%s / %s)" % (self.lhs, self.rhs)


class Pow(BiMathOp):
    def op(self, lhs: float, rhs: float) -> float:
        try:
            result = lhs ** rhs
        except ZeroDivisionError:
            return math.inf
        except OverflowError:
            return math.inf
        if isinstance(result, complex):
            return math.nan
        return result

    def __repr__(self):
        return "(%s ^ %s)" % (self.lhs, self.rhs)


class Neg(Expression):
    def __init__(self, lhs: Expression):
        self.lhs = lhs

    def evaluate(self, env: Environment):
        return -number(self.lhs.evaluate(env))

    def probabilistic(self) -> bool:
        return self.lhs.probabilistic()

    def __repr__(self):
        return "-%s" % (self.lhs,)


class Pos(Neg):
    def evaluate(self, env: Environment):
        return number(self.lhs.evaluate(env))

    def __repr__(self):
        return "+%s" % (self.lhs,)
