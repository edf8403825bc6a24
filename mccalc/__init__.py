from mccalc.calc import (
    AllInvalidError,
    CalcError,
    NonFiniteResult,
    ParseError,
    RangeParseError,
)
from mccalc.calculator import CalculationOutcome, calculate
