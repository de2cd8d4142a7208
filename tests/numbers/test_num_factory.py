"""Construction and parsing through `NumFactory`."""

from __future__ import annotations

import pytest

from netcalc.exceptions import ParseError
from netcalc.numbers import NumBackend, NumFactory


def test_shared_and_fresh_values_are_equal(nums):
    """create_* returns values equal to the shared accessors."""
    assert nums.create_zero() == nums.zero
    assert nums.create_epsilon() == nums.epsilon
    assert nums.create_positive_infinity() == nums.positive_infinity
    assert nums.create_negative_infinity() == nums.negative_infinity
    assert nums.create_nan().is_nan()
    assert nums.nan.is_nan()


def test_create_positive_infinity_is_positive(nums):
    value = nums.create_positive_infinity()
    assert value.is_infinite()
    assert value > nums.zero
    assert value != nums.negative_infinity


def test_epsilon_values():
    assert float(NumFactory(NumBackend.REAL_DOUBLE).epsilon) == pytest.approx(1e-9)
    assert float(NumFactory(NumBackend.REAL_SINGLE).epsilon) == pytest.approx(1e-6)
    exact = NumFactory(NumBackend.RATIONAL_BIGINTEGER)
    assert exact.epsilon == exact.create(1, 1_000_000_000)


@pytest.mark.parametrize(
    "num,den,text",
    [(395, 2, "197.5"), (1375, 1, "1375"), (875, 4, "875/4"), (-3, 4, "-0.75"), (1, 1000, "1e-3")],
)
def test_create_fraction_matches_parsed_text(nums, num, den, text):
    """create(num, den) equals create(text) in every representation."""
    assert nums.create(num, den) == nums.create(text)


def test_str_round_trips(nums):
    value = nums.create(875, 4)
    assert nums.create(str(value)) == value
    assert nums.create(str(nums.positive_infinity)) == nums.positive_infinity
    assert nums.create(str(nums.negative_infinity)) == nums.negative_infinity
    assert nums.create(str(nums.nan)).is_nan()


@pytest.mark.parametrize("text", ["inf", "+inf", "Infinity", " infinity "])
def test_parse_positive_infinity(nums, text):
    assert nums.create(text) == nums.positive_infinity


@pytest.mark.parametrize("text", ["-inf", "-Infinity"])
def test_parse_negative_infinity(nums, text):
    assert nums.create(text) == nums.negative_infinity


@pytest.mark.parametrize("text", ["", "abc", "1.2.3", "3/", "/4", "1/0", "1e", "--1"])
def test_parse_rejects_malformed(nums, text):
    with pytest.raises(ParseError):
        nums.create(text)


def test_parse_error_is_value_error(nums):
    with pytest.raises(ValueError):
        nums.parse("twelve")


def test_zero_denominator(nums):
    with pytest.raises(ParseError):
        nums.create(1, 0)


def test_create_rejects_bad_types(nums):
    with pytest.raises(TypeError):
        nums.create(True)
    with pytest.raises(TypeError):
        nums.create(1.5, 2)
    with pytest.raises(TypeError):
        nums.create([1])


def test_create_rejects_foreign_num():
    double = NumFactory(NumBackend.REAL_DOUBLE)
    exact = NumFactory(NumBackend.RATIONAL_BIGINTEGER)
    with pytest.raises(TypeError):
        double.create(exact.create(1))
    assert double.create(exact.positive_infinity) == double.positive_infinity


def test_rational_float_reads_decimal():
    exact = NumFactory(NumBackend.RATIONAL_BIGINTEGER)
    assert exact.create(0.1) == exact.create(1, 10)


def test_backend_from_string():
    assert NumBackend.from_string("double") == NumBackend.REAL_DOUBLE
    assert NumBackend.from_string("rational_bigint") == NumBackend.RATIONAL_BIGINTEGER
    assert NumBackend.from_string("Real_Single") == NumBackend.REAL_SINGLE
    assert NumFactory.from_name("rational_int").backend == NumBackend.RATIONAL_INTEGER
    with pytest.raises(ValueError, match="Invalid numeric backend"):
        NumBackend.from_string("quad")


def test_factory_equality():
    assert NumFactory() == NumFactory(NumBackend.REAL_DOUBLE)
    assert NumFactory() != NumFactory(NumBackend.REAL_SINGLE)
    assert len({NumFactory(), NumFactory()}) == 1
