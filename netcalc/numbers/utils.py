"""Helpers over `Num` values that do not belong on the value type itself."""

from __future__ import annotations

from typing import Iterable, Optional

from netcalc.numbers.num import NAN, POSITIVE_INFINITY, Num


def maximum(a: Num, b: Num) -> Num:
    """Return the larger of two values; NaN if either is NaN."""
    if a.is_nan() or b.is_nan():
        return NAN
    return b if b > a else a


def minimum(a: Num, b: Num) -> Num:
    """Return the smaller of two values; NaN if either is NaN."""
    if a.is_nan() or b.is_nan():
        return NAN
    return b if b < a else a


def total(values: Iterable[Num], start: Num) -> Num:
    """Sum ``values`` onto ``start`` with extended-arithmetic rules."""
    result = start
    for value in values:
        result = result + value
    return result


def select_minimum(candidates: Iterable[Num]) -> Num:
    """Pick the tightest of several independently valid bounds.

    NaN never wins over a determinate candidate. Only when every candidate
    is NaN does NaN become the result. An empty iterable yields +inf, the
    bound that holds without any information.

    Ties are order independent: equal values are indistinguishable.
    """
    best: Optional[Num] = None
    saw_nan = False
    for candidate in candidates:
        if candidate.is_nan():
            saw_nan = True
            continue
        if best is None or candidate <= best:
            best = candidate
    if best is not None:
        return best
    return NAN if saw_nan else POSITIVE_INFINITY
