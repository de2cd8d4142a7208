"""Extended-arithmetic numbers with selectable representation."""

from __future__ import annotations

from netcalc.numbers.backends import RationalBigInt, RationalInt, RealDouble, RealSingle
from netcalc.numbers.factory import NumBackend, NumFactory
from netcalc.numbers.num import (
    NAN,
    NEGATIVE_INFINITY,
    POSITIVE_INFINITY,
    NaN,
    NegativeInfinity,
    Num,
    PositiveInfinity,
)
from netcalc.numbers.utils import maximum, minimum, select_minimum, total

__all__ = [
    "Num",
    "NumBackend",
    "NumFactory",
    "RealDouble",
    "RealSingle",
    "RationalInt",
    "RationalBigInt",
    "PositiveInfinity",
    "NegativeInfinity",
    "NaN",
    "POSITIVE_INFINITY",
    "NEGATIVE_INFINITY",
    "NAN",
    "maximum",
    "minimum",
    "select_minimum",
    "total",
]
