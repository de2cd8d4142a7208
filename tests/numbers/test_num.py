"""Extended arithmetic of `Num` values."""

from __future__ import annotations

import math

import pytest

from netcalc.exceptions import NumOverflowError
from netcalc.numbers import NumBackend, NumFactory, maximum, minimum, select_minimum, total


def test_nan_poisons_arithmetic(nums):
    """Any operation with NaN yields NaN."""
    x = nums.create(3)
    for result in (x + nums.nan, nums.nan - x, x * nums.nan, nums.nan / x, -nums.nan):
        assert result.is_nan()


def test_nan_comparisons_are_false(nums):
    x = nums.create(3)
    assert not (x < nums.nan)
    assert not (x > nums.nan)
    assert not (x <= nums.nan)
    assert not (nums.nan >= x)
    assert not (nums.nan == nums.nan)
    assert nums.nan != nums.nan
    assert x != nums.nan


def test_infinity_rules(nums):
    inf = nums.positive_infinity
    ninf = nums.negative_infinity
    x = nums.create(7)

    assert (inf + ninf).is_nan()
    assert (inf - inf).is_nan()
    assert (ninf - ninf).is_nan()
    assert inf + x == inf
    assert ninf - x == ninf
    assert x - inf == ninf
    assert inf * x == inf
    assert ninf * x == ninf
    assert (inf * nums.zero).is_nan()
    assert (nums.zero * ninf).is_nan()
    assert -inf == ninf


def test_division_rules(nums):
    x = nums.create(5)
    assert (x / nums.zero).is_nan()
    assert (nums.positive_infinity / nums.zero).is_nan()
    assert (nums.positive_infinity / nums.positive_infinity).is_nan()
    assert (x / nums.positive_infinity).is_zero()
    assert nums.positive_infinity / x == nums.positive_infinity
    assert nums.create(10) / nums.create(4) == nums.create(5, 2)


def test_ordering_with_infinities(nums):
    x = nums.create(-1000)
    assert nums.negative_infinity < x < nums.positive_infinity
    assert nums.positive_infinity >= nums.positive_infinity
    assert not (nums.positive_infinity < nums.positive_infinity)


def test_classification(nums):
    assert nums.zero.is_zero()
    assert nums.zero.is_finite()
    assert nums.positive_infinity.is_infinite()
    assert not nums.positive_infinity.is_finite()
    assert nums.nan.is_nan()
    assert not nums.nan.is_finite()
    assert abs(nums.create(-3)) == nums.create(3)


def test_float_conversion(nums):
    assert float(nums.create(3, 4)) == pytest.approx(0.75)
    assert float(nums.positive_infinity) == math.inf
    assert float(nums.negative_infinity) == -math.inf
    assert math.isnan(float(nums.nan))


def test_maximum_minimum(nums):
    a = nums.create(2)
    b = nums.create(9)
    assert maximum(a, b) == b
    assert minimum(a, b) == a
    assert maximum(a, nums.positive_infinity) == nums.positive_infinity
    assert minimum(a, nums.negative_infinity) == nums.negative_infinity
    assert maximum(a, nums.nan).is_nan()
    assert minimum(nums.nan, b).is_nan()


def test_total(nums):
    values = [nums.create(1), nums.create(2), nums.create(3)]
    assert total(values, nums.zero) == nums.create(6)
    assert total([nums.positive_infinity, nums.create(1)], nums.zero) == nums.positive_infinity


def test_select_minimum_skips_nan(nums):
    """NaN never replaces a determinate candidate."""
    a = nums.create(4)
    b = nums.create(2)
    assert select_minimum([nums.nan, a, b]) == b
    assert select_minimum([a, nums.nan]) == a
    assert select_minimum([nums.nan, nums.nan]).is_nan()
    assert select_minimum([]) == nums.positive_infinity


def test_select_minimum_order_independent(nums):
    values = [nums.create(3), nums.create(1), nums.positive_infinity, nums.create(1)]
    assert select_minimum(values) == select_minimum(list(reversed(values)))


def test_mixing_backends_raises():
    double = NumFactory(NumBackend.REAL_DOUBLE)
    exact = NumFactory(NumBackend.RATIONAL_BIGINTEGER)
    with pytest.raises(TypeError):
        double.create(1) + exact.create(1)
    with pytest.raises(TypeError):
        double.create(1) < exact.create(2)


def test_infinities_are_shared_across_backends():
    double = NumFactory(NumBackend.REAL_DOUBLE)
    exact = NumFactory(NumBackend.RATIONAL_BIGINTEGER)
    assert double.positive_infinity == exact.positive_infinity
    assert exact.create(1) + double.positive_infinity == exact.positive_infinity


def test_float_overflow_becomes_infinity():
    nums = NumFactory(NumBackend.REAL_DOUBLE)
    huge = nums.create(1e308)
    assert (huge * nums.create(10)) == nums.positive_infinity
    assert (-huge * nums.create(10)) == nums.negative_infinity


def test_single_precision_overflow_becomes_infinity():
    nums = NumFactory(NumBackend.REAL_SINGLE)
    huge = nums.create(3e38)
    assert huge * nums.create(10) == nums.positive_infinity


def test_rational_int_overflow():
    nums = NumFactory(NumBackend.RATIONAL_INTEGER)
    big = nums.create(2**31 - 1)
    with pytest.raises(NumOverflowError):
        big + nums.create(1)
    with pytest.raises(OverflowError):
        nums.create(2**40)


def test_rational_bigint_never_overflows():
    nums = NumFactory(NumBackend.RATIONAL_BIGINTEGER)
    big = nums.create(2**31 - 1)
    assert big * big == nums.create((2**31 - 1) ** 2)


def test_hash_consistent_with_equality(nums):
    assert hash(nums.create(1, 2)) == hash(nums.create("0.5"))
    assert len({nums.create(3), nums.create(6, 2)}) == 1
