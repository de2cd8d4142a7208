"""Extended-arithmetic scalar used by every bound computation.

`Num` is the abstract value type. Finite values live in one of the backend
classes of `netcalc.numbers.backends`; the three special values
(`PositiveInfinity`, `NegativeInfinity`, `NaN`) are shared by every backend.

Arithmetic follows extended-real rules:

- any operation with NaN yields NaN and every ordered comparison with NaN is
  False (NaN is not even equal to itself);
- infinities absorb finite operands; ``+inf + -inf`` and ``inf * 0`` are NaN;
- division by zero and ``inf / inf`` are NaN, ``finite / inf`` is zero.

Finite operands of two different backends are never combined: such an
operation raises ``TypeError``.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any


class Num(ABC):
    """Immutable extended scalar.

    Subclasses implement the ``_finite_*`` hooks for finite operands only;
    the special-value rules are resolved here before dispatching.
    """

    __slots__ = ()

    # ---- classification ----

    def is_nan(self) -> bool:
        return False

    def is_infinite(self) -> bool:
        return False

    def is_finite(self) -> bool:
        return not (self.is_nan() or self.is_infinite())

    @abstractmethod
    def is_zero(self) -> bool:
        """Return True if the value is a finite zero."""

    @abstractmethod
    def sign(self) -> int:
        """Return -1, 0 or 1. NaN reports 0."""

    # ---- hooks for finite backends ----

    def _finite_add(self, other: Num) -> Num:
        raise NotImplementedError

    def _finite_mul(self, other: Num) -> Num:
        raise NotImplementedError

    def _finite_div(self, other: Num) -> Num:
        raise NotImplementedError

    def _finite_lt(self, other: Num) -> bool:
        raise NotImplementedError

    def _finite_eq(self, other: Num) -> bool:
        raise NotImplementedError

    def _zero_like(self) -> Num:
        raise NotImplementedError

    @abstractmethod
    def _hash_key(self) -> Any:
        """Return a builtin value whose hash represents this number."""

    def _check_same_backend(self, other: Num) -> None:
        if type(self) is not type(other):
            raise TypeError(
                f"cannot combine {type(self).__name__} and {type(other).__name__}; "
                "use a single NumFactory per analysis"
            )

    # ---- arithmetic ----

    def __add__(self, other: Any) -> Num:
        if not isinstance(other, Num):
            return NotImplemented
        if self.is_nan() or other.is_nan():
            return NAN
        if self.is_infinite() or other.is_infinite():
            if self.is_infinite() and other.is_infinite():
                return self if self.sign() == other.sign() else NAN
            return self if self.is_infinite() else other
        self._check_same_backend(other)
        return self._finite_add(other)

    def __sub__(self, other: Any) -> Num:
        if not isinstance(other, Num):
            return NotImplemented
        return self + (-other)

    def __mul__(self, other: Any) -> Num:
        if not isinstance(other, Num):
            return NotImplemented
        if self.is_nan() or other.is_nan():
            return NAN
        if self.is_infinite() or other.is_infinite():
            if self.is_zero() or other.is_zero():
                return NAN
            return POSITIVE_INFINITY if self.sign() * other.sign() > 0 else NEGATIVE_INFINITY
        self._check_same_backend(other)
        return self._finite_mul(other)

    def __truediv__(self, other: Any) -> Num:
        if not isinstance(other, Num):
            return NotImplemented
        if self.is_nan() or other.is_nan() or other.is_zero():
            return NAN
        if self.is_infinite():
            if other.is_infinite():
                return NAN
            return POSITIVE_INFINITY if self.sign() * other.sign() > 0 else NEGATIVE_INFINITY
        if other.is_infinite():
            return self._zero_like()
        self._check_same_backend(other)
        return self._finite_div(other)

    @abstractmethod
    def __neg__(self) -> Num: ...

    def __abs__(self) -> Num:
        return -self if self.sign() < 0 else self

    # ---- comparisons ----

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Num):
            return NotImplemented
        if self.is_nan() or other.is_nan():
            return False
        if self.is_infinite() or other.is_infinite():
            return (
                self.is_infinite()
                and other.is_infinite()
                and self.sign() == other.sign()
            )
        if type(self) is not type(other):
            return NotImplemented
        return self._finite_eq(other)

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, Num):
            return NotImplemented
        if self.is_nan() or other.is_nan():
            return False
        if self.is_infinite() or other.is_infinite():
            if self.is_infinite() and other.is_infinite():
                return self.sign() < other.sign()
            if self.is_infinite():
                return self.sign() < 0
            return other.sign() > 0
        self._check_same_backend(other)
        return self._finite_lt(other)

    def __le__(self, other: Any) -> bool:
        if not isinstance(other, Num):
            return NotImplemented
        return self < other or self == other

    def __gt__(self, other: Any) -> bool:
        if not isinstance(other, Num):
            return NotImplemented
        return other < self

    def __ge__(self, other: Any) -> bool:
        if not isinstance(other, Num):
            return NotImplemented
        return other <= self

    def __hash__(self) -> int:
        return hash(self._hash_key())

    @abstractmethod
    def __float__(self) -> float: ...


class PositiveInfinity(Num):
    """Positive infinity; shared by every backend."""

    __slots__ = ()

    def is_infinite(self) -> bool:
        return True

    def is_zero(self) -> bool:
        return False

    def sign(self) -> int:
        return 1

    def __neg__(self) -> Num:
        return NEGATIVE_INFINITY

    def _hash_key(self) -> Any:
        return math.inf

    def __float__(self) -> float:
        return math.inf

    def __str__(self) -> str:
        return "Infinity"

    def __repr__(self) -> str:
        return "PositiveInfinity()"


class NegativeInfinity(Num):
    """Negative infinity; shared by every backend."""

    __slots__ = ()

    def is_infinite(self) -> bool:
        return True

    def is_zero(self) -> bool:
        return False

    def sign(self) -> int:
        return -1

    def __neg__(self) -> Num:
        return POSITIVE_INFINITY

    def _hash_key(self) -> Any:
        return -math.inf

    def __float__(self) -> float:
        return -math.inf

    def __str__(self) -> str:
        return "-Infinity"

    def __repr__(self) -> str:
        return "NegativeInfinity()"


class NaN(Num):
    """Not-a-number. Unequal to everything, itself included."""

    __slots__ = ()

    def is_nan(self) -> bool:
        return True

    def is_zero(self) -> bool:
        return False

    def sign(self) -> int:
        return 0

    def __neg__(self) -> Num:
        return self

    def _hash_key(self) -> Any:
        return id(self)

    def __float__(self) -> float:
        return math.nan

    def __str__(self) -> str:
        return "NaN"

    def __repr__(self) -> str:
        return "NaN()"


POSITIVE_INFINITY: Num = PositiveInfinity()
NEGATIVE_INFINITY: Num = NegativeInfinity()
NAN: Num = NaN()
