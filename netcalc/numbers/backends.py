"""Finite value representations behind `Num`.

Four representations trade speed for exactness:

- `RealDouble`: Python ``float`` (IEEE double).
- `RealSingle`: ``numpy.float32``; fastest to drift, useful to study rounding.
- `RationalInt`: exact fraction whose numerator and denominator must stay in
  the signed 32-bit range. Long accumulations can exceed it, which raises
  `NumOverflowError`.
- `RationalBigInt`: ``fractions.Fraction`` with unbounded integers. Exact and
  overflow free; the fallback when long paths must stay exact.

Every class converts float overflow into the shared infinities, so callers
only ever see `Num` values.
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Any

import numpy as np

from netcalc.exceptions import NumOverflowError
from netcalc.numbers.num import NAN, NEGATIVE_INFINITY, POSITIVE_INFINITY, Num

#: Bounds of the 32-bit integers backing `RationalInt`.
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


def _special_from_float(value: float) -> Num | None:
    if math.isnan(value):
        return NAN
    if math.isinf(value):
        return POSITIVE_INFINITY if value > 0 else NEGATIVE_INFINITY
    return None


class RealDouble(Num):
    """Finite double-precision value."""

    __slots__ = ("_value",)

    def __init__(self, value: float):
        self._value = float(value)

    @classmethod
    def of(cls, value: float) -> Num:
        special = _special_from_float(float(value))
        return special if special is not None else cls(value)

    @classmethod
    def from_fraction(cls, value: Fraction) -> Num:
        try:
            return cls.of(float(value))
        except OverflowError:
            return POSITIVE_INFINITY if value > 0 else NEGATIVE_INFINITY

    @classmethod
    def from_decimal(cls, text: str) -> Num:
        return cls.of(float(text))

    @property
    def value(self) -> float:
        return self._value

    def is_zero(self) -> bool:
        return self._value == 0.0

    def sign(self) -> int:
        return (self._value > 0) - (self._value < 0)

    def _finite_add(self, other: Num) -> Num:
        return RealDouble.of(self._value + other._value)  # type: ignore[attr-defined]

    def _finite_mul(self, other: Num) -> Num:
        return RealDouble.of(self._value * other._value)  # type: ignore[attr-defined]

    def _finite_div(self, other: Num) -> Num:
        return RealDouble.of(self._value / other._value)  # type: ignore[attr-defined]

    def _finite_lt(self, other: Num) -> bool:
        return self._value < other._value  # type: ignore[attr-defined]

    def _finite_eq(self, other: Num) -> bool:
        return self._value == other._value  # type: ignore[attr-defined]

    def _zero_like(self) -> Num:
        return RealDouble(0.0)

    def __neg__(self) -> Num:
        return RealDouble(-self._value)

    def _hash_key(self) -> Any:
        return self._value

    def __float__(self) -> float:
        return self._value

    def __str__(self) -> str:
        return repr(self._value)

    def __repr__(self) -> str:
        return f"RealDouble({self._value!r})"


class RealSingle(Num):
    """Finite single-precision value stored as ``numpy.float32``."""

    __slots__ = ("_value",)

    def __init__(self, value: Any):
        self._value = np.float32(value)

    @classmethod
    def of(cls, value: Any) -> Num:
        v = np.float32(value)
        special = _special_from_float(float(v))
        return special if special is not None else cls(v)

    @classmethod
    def from_fraction(cls, value: Fraction) -> Num:
        try:
            as_double = float(value)
        except OverflowError:
            return POSITIVE_INFINITY if value > 0 else NEGATIVE_INFINITY
        with np.errstate(over="ignore"):
            return cls.of(as_double)

    @classmethod
    def from_decimal(cls, text: str) -> Num:
        with np.errstate(over="ignore"):
            return cls.of(np.float32(text))

    @property
    def value(self) -> np.float32:
        return self._value

    def _apply(self, op, other: Num) -> Num:
        with np.errstate(over="ignore", under="ignore", invalid="ignore"):
            return RealSingle.of(op(self._value, other._value))  # type: ignore[attr-defined]

    def is_zero(self) -> bool:
        return bool(self._value == 0)

    def sign(self) -> int:
        return int(np.sign(self._value))

    def _finite_add(self, other: Num) -> Num:
        return self._apply(np.add, other)

    def _finite_mul(self, other: Num) -> Num:
        return self._apply(np.multiply, other)

    def _finite_div(self, other: Num) -> Num:
        return self._apply(np.divide, other)

    def _finite_lt(self, other: Num) -> bool:
        return bool(self._value < other._value)  # type: ignore[attr-defined]

    def _finite_eq(self, other: Num) -> bool:
        return bool(self._value == other._value)  # type: ignore[attr-defined]

    def _zero_like(self) -> Num:
        return RealSingle(0)

    def __neg__(self) -> Num:
        return RealSingle(-self._value)

    def _hash_key(self) -> Any:
        return float(self._value)

    def __float__(self) -> float:
        return float(self._value)

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"RealSingle({str(self._value)})"


class RationalBigInt(Num):
    """Exact fraction with arbitrary-precision numerator and denominator."""

    __slots__ = ("_value",)

    def __init__(self, value: Fraction | int):
        self._value = Fraction(value)

    @classmethod
    def of(cls, value: Fraction) -> Num:
        return cls(value)

    @classmethod
    def from_fraction(cls, value: Fraction) -> Num:
        return cls.of(value)

    @classmethod
    def from_float(cls, value: float) -> Num:
        special = _special_from_float(value)
        if special is not None:
            return special
        # Decimal reading of the shortest repr: 0.1 becomes 1/10.
        return cls.of(Fraction(repr(float(value))))

    @classmethod
    def from_decimal(cls, text: str) -> Num:
        return cls.of(Fraction(text))

    @property
    def value(self) -> Fraction:
        return self._value

    @property
    def numerator(self) -> int:
        return self._value.numerator

    @property
    def denominator(self) -> int:
        return self._value.denominator

    def is_zero(self) -> bool:
        return self._value == 0

    def sign(self) -> int:
        return (self._value > 0) - (self._value < 0)

    def _finite_add(self, other: Num) -> Num:
        return type(self).of(self._value + other._value)  # type: ignore[attr-defined]

    def _finite_mul(self, other: Num) -> Num:
        return type(self).of(self._value * other._value)  # type: ignore[attr-defined]

    def _finite_div(self, other: Num) -> Num:
        return type(self).of(self._value / other._value)  # type: ignore[attr-defined]

    def _finite_lt(self, other: Num) -> bool:
        return self._value < other._value  # type: ignore[attr-defined]

    def _finite_eq(self, other: Num) -> bool:
        return self._value == other._value  # type: ignore[attr-defined]

    def _zero_like(self) -> Num:
        return type(self).of(Fraction(0))

    def __neg__(self) -> Num:
        return type(self).of(-self._value)

    def _hash_key(self) -> Any:
        return self._value

    def __float__(self) -> float:
        return float(self._value)

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self._value)!r})"


class RationalInt(RationalBigInt):
    """Exact fraction limited to 32-bit numerator and denominator.

    Every constructed value is checked after reduction; a value outside
    ``[INT32_MIN, INT32_MAX]`` raises `NumOverflowError`.
    """

    __slots__ = ()

    def __init__(self, value: Fraction | int):
        value = Fraction(value)
        if not (
            INT32_MIN <= value.numerator <= INT32_MAX
            and value.denominator <= INT32_MAX
        ):
            raise NumOverflowError(
                f"{value} exceeds the 32-bit rational range; "
                "use the RATIONAL_BIGINTEGER backend for long accumulations"
            )
        super().__init__(value)

    @classmethod
    def from_float(cls, value: float) -> Num:
        special = _special_from_float(value)
        if special is not None:
            return special
        exact = Fraction(repr(float(value)))
        if exact.denominator > INT32_MAX:
            exact = Fraction(value).limit_denominator(INT32_MAX)
        return cls.of(exact)
