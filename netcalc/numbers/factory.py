"""Numeric representation selection.

A `NumFactory` is an explicit handle for one representation. It is created
once, handed to the server graph, and every curve and bound derived from that
graph is built with it. Several factories may coexist in one process; values
of different factories must not be mixed in one computation.

Example:
    >>> nums = NumFactory(NumBackend.RATIONAL_BIGINTEGER)
    >>> nums.create(395, 2) == nums.create("197.5")
    True
"""

from __future__ import annotations

import re
from enum import IntEnum
from fractions import Fraction
from typing import Dict, Optional, Type, Union

from netcalc.exceptions import ParseError
from netcalc.logging import get_logger
from netcalc.numbers.backends import RationalBigInt, RationalInt, RealDouble, RealSingle
from netcalc.numbers.num import (
    NAN,
    NEGATIVE_INFINITY,
    POSITIVE_INFINITY,
    NaN,
    NegativeInfinity,
    Num,
    PositiveInfinity,
)

logger = get_logger(__name__)

_DECIMAL_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_POSITIVE_INFINITY_WORDS = {"inf", "+inf", "infinity", "+infinity"}
_NEGATIVE_INFINITY_WORDS = {"-inf", "-infinity"}


class NumBackend(IntEnum):
    """Available numeric representations."""

    REAL_DOUBLE = 1
    REAL_SINGLE = 2
    RATIONAL_INTEGER = 3
    RATIONAL_BIGINTEGER = 4

    @classmethod
    def from_string(cls, value: str) -> "NumBackend":
        """Parse a string into a NumBackend enum value.

        Accepts the member name in any case, with or without the ``REAL_`` /
        ``RATIONAL_`` prefix spelled out (``"double"``, ``"rational_bigint"``).

        Raises:
            ValueError: If the string doesn't match any backend.
        """
        key = value.strip().upper()
        key = _BACKEND_ALIASES.get(key, key)
        try:
            return cls[key]
        except KeyError:
            valid = ", ".join(e.name for e in cls)
            raise ValueError(
                f"Invalid numeric backend '{value}'. Valid values are: {valid}"
            ) from None


_BACKEND_ALIASES: Dict[str, str] = {
    "DOUBLE": "REAL_DOUBLE",
    "SINGLE": "REAL_SINGLE",
    "RATIONAL_INT": "RATIONAL_INTEGER",
    "RATIONAL_BIGINT": "RATIONAL_BIGINTEGER",
}

_BACKEND_CLASSES: Dict[NumBackend, Type[Num]] = {
    NumBackend.REAL_DOUBLE: RealDouble,
    NumBackend.REAL_SINGLE: RealSingle,
    NumBackend.RATIONAL_INTEGER: RationalInt,
    NumBackend.RATIONAL_BIGINTEGER: RationalBigInt,
}

_EPSILON: Dict[NumBackend, Union[float, Fraction]] = {
    NumBackend.REAL_DOUBLE: 1e-9,
    NumBackend.REAL_SINGLE: 1e-6,
    NumBackend.RATIONAL_INTEGER: Fraction(1, 1_000_000_000),
    NumBackend.RATIONAL_BIGINTEGER: Fraction(1, 1_000_000_000),
}


class NumFactory:
    """Creates `Num` values of one representation.

    Special values (infinities, NaN) are shared between representations;
    ``create_*`` variants return fresh objects that compare equal to the
    shared ones (NaN never compares equal, by definition).

    Args:
        backend: Representation used for every finite value.
    """

    def __init__(self, backend: NumBackend = NumBackend.REAL_DOUBLE):
        if not isinstance(backend, NumBackend):
            backend = NumBackend.from_string(str(backend))
        self._backend = backend
        self._cls = _BACKEND_CLASSES[backend]
        self._zero = self._from_fraction(Fraction(0))
        self._epsilon = self._from_epsilon()

    @classmethod
    def from_name(cls, name: str) -> "NumFactory":
        """Build a factory from a backend name such as ``"rational_bigint"``."""
        return cls(NumBackend.from_string(name))

    @property
    def backend(self) -> NumBackend:
        return self._backend

    def owns(self, value: Num) -> bool:
        """Return True if ``value`` can be combined with this factory's values."""
        return (not value.is_finite()) or type(value) is self._cls

    # ---- shared values ----

    @property
    def zero(self) -> Num:
        return self._zero

    @property
    def epsilon(self) -> Num:
        return self._epsilon

    @property
    def positive_infinity(self) -> Num:
        return POSITIVE_INFINITY

    @property
    def negative_infinity(self) -> Num:
        return NEGATIVE_INFINITY

    @property
    def nan(self) -> Num:
        return NAN

    # ---- fresh values ----

    def create_zero(self) -> Num:
        return self._from_fraction(Fraction(0))

    def create_epsilon(self) -> Num:
        return self._from_epsilon()

    def create_positive_infinity(self) -> Num:
        return PositiveInfinity()

    def create_negative_infinity(self) -> Num:
        return NegativeInfinity()

    def create_nan(self) -> Num:
        return NaN()

    # ---- construction ----

    def create(
        self, value: Union[int, float, str, Num], den: Optional[int] = None
    ) -> Num:
        """Create a value of this factory's representation.

        Args:
            value: An int, a float, a numeric string (``"197.5"``, ``"395/2"``,
                ``"1e-3"``, ``"inf"``, ``"-Infinity"``, ``"NaN"``) or a `Num`
                of this representation (returned unchanged). With ``den`` it is
                the integer numerator.
            den: Optional integer denominator.

        Returns:
            The created value.

        Raises:
            ParseError: If a string is malformed or ``den`` is zero.
            TypeError: If the argument types are not supported, or a `Num` of
                another representation is passed.
            NumOverflowError: If the value does not fit a bounded representation.
        """
        if den is not None:
            if isinstance(value, bool) or not isinstance(value, int) or not isinstance(den, int):
                raise TypeError("numerator and denominator must both be integers")
            if den == 0:
                logger.error("Zero denominator in create(%r, %r)", value, den)
                raise ParseError(f"zero denominator: {value}/{den}")
            return self._from_fraction(Fraction(value, den))
        if isinstance(value, Num):
            if not self.owns(value):
                raise TypeError(
                    f"{type(value).__name__} does not belong to the {self._backend.name} factory"
                )
            return value
        if isinstance(value, str):
            return self.parse(value)
        if isinstance(value, bool):
            raise TypeError("booleans are not numeric values")
        if isinstance(value, int):
            return self._from_fraction(Fraction(value))
        if isinstance(value, float):
            return self._from_float(value)
        raise TypeError(f"cannot create a number from {type(value).__name__}")

    def parse(self, text: str) -> Num:
        """Parse a numeric literal.

        Raises:
            ParseError: If ``text`` is not a number.
        """
        literal = text.strip()
        lowered = literal.lower()
        if lowered in _POSITIVE_INFINITY_WORDS:
            return self.create_positive_infinity()
        if lowered in _NEGATIVE_INFINITY_WORDS:
            return self.create_negative_infinity()
        if lowered in {"nan", "+nan", "-nan"}:
            return self.create_nan()
        if "/" in literal:
            try:
                return self._from_fraction(Fraction(literal))
            except (ValueError, ZeroDivisionError) as exc:
                logger.error("Malformed numeric literal: %r", text)
                raise ParseError(f"malformed numeric literal: {text!r}") from exc
        if not _DECIMAL_RE.fullmatch(literal):
            logger.error("Malformed numeric literal: %r", text)
            raise ParseError(f"malformed numeric literal: {text!r}")
        return self._cls.from_decimal(literal)  # type: ignore[attr-defined]

    # ---- internals ----

    def _from_fraction(self, value: Fraction) -> Num:
        return self._cls.from_fraction(value)  # type: ignore[attr-defined]

    def _from_float(self, value: float) -> Num:
        if self._backend in (NumBackend.RATIONAL_INTEGER, NumBackend.RATIONAL_BIGINTEGER):
            return self._cls.from_float(value)  # type: ignore[attr-defined]
        return self._cls.of(value)  # type: ignore[attr-defined]

    def _from_epsilon(self) -> Num:
        eps = _EPSILON[self._backend]
        if isinstance(eps, Fraction):
            return self._from_fraction(eps)
        return self._from_float(eps)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NumFactory):
            return NotImplemented
        return self._backend == other._backend

    def __hash__(self) -> int:
        return hash(self._backend)

    def __repr__(self) -> str:
        return f"NumFactory({self._backend.name})"
