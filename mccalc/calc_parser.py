import math
import os
import typing

import lark

import mccalc.calc as calc
import mccalc.functions as functions

CONSTANTS: typing.Dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
    "inf": math.inf,
    "nan": math.nan,
}


@lark.v_args(inline=True)
class _CalcParser(lark.Transformer):
    number = calc.Number
    add = calc.Add
    sub = calc.Sub
    mul = calc.Mul
    div = calc.Div
    pow = calc.Pow
    neg = calc.Neg
    pos = calc.Pos
    arguments = lambda self, *args: list(args)

    def fn_call(self, name, args):
        return functions.resolve_function_call(str(name), args or [])

    def var(self, name):
        name = str(name)
        if name.lower() in CONSTANTS:
            return calc.Constant(name.lower(), CONSTANTS[name.lower()])
        return calc.Var(name)


_grammar_file = os.path.join(os.path.dirname(__file__), "calc.lark")
with open(_grammar_file) as _f:
    _grammar = lark.Lark(_f.read(), parser="lalr")


def parse(text: str) -> calc.Expression:
    """Compile ``text`` into an expression tree that can be evaluated repeatedly."""
    try:
        return _CalcParser().transform(_grammar.parse(text))
    except lark.exceptions.VisitError as e:
        if isinstance(e.orig_exc, calc.CalcError):
            raise e.orig_exc
        raise
    except lark.exceptions.UnexpectedInput as e:
        raise calc.ParseError("syntax error in '%s':\n%s" % (text, e)) from None
