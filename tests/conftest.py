"""Global pytest configuration and shared server-graph fixtures."""

from __future__ import annotations

from fractions import Fraction

import pytest

from netcalc.model.network import ServerGraph
from netcalc.numbers.factory import NumBackend, NumFactory

RATIONAL_BACKENDS = (NumBackend.RATIONAL_INTEGER, NumBackend.RATIONAL_BIGINTEGER)


def _build_sink_tree(nums: NumFactory) -> ServerGraph:
    # Turns:
    #   s0 ──► s1 ──► s2 ──┐
    #                      ▼
    #   s3 ──► s4 ───────► s5 ──► s6
    #
    # Flows (token bucket b=25, r=5):
    #   f0:       s1 -> s2 -> s5 -> s6
    #   f1: s0 -> s1 -> s2 -> s5 -> s6
    #   f2: s3 -> s4 -------> s5 -> s6
    #
    # Every server: rate-latency R=20, T=20.
    g = ServerGraph(nums, name="sink_tree_7s")
    for i in range(7):
        g.add_server(f"s{i}", g.curves.rate_latency(20, 20))
    for src, dst in (("s0", "s1"), ("s1", "s2"), ("s2", "s5"), ("s3", "s4"), ("s4", "s5"), ("s5", "s6")):
        g.add_turn(src, dst)
    g.add_flow("f0", g.curves.token_bucket(25, 5), ["s1", "s2", "s5", "s6"])
    g.add_flow("f1", g.curves.token_bucket(25, 5), ["s0", "s1", "s2", "s5", "s6"])
    g.add_flow("f2", g.curves.token_bucket(25, 5), ["s3", "s4", "s5", "s6"])
    return g


@pytest.fixture(params=list(NumBackend), ids=lambda b: b.name.lower())
def nums(request) -> NumFactory:
    """Numeric factory for every available representation."""
    return NumFactory(request.param)


@pytest.fixture
def double_nums() -> NumFactory:
    return NumFactory(NumBackend.REAL_DOUBLE)


@pytest.fixture
def sink_tree(nums) -> ServerGraph:
    """Seven-server sink tree with three flows, in every representation."""
    return _build_sink_tree(nums)


@pytest.fixture
def sink_tree_double(double_nums) -> ServerGraph:
    return _build_sink_tree(double_nums)


@pytest.fixture
def line2(double_nums) -> ServerGraph:
    # A ──► B, one flow over both servers.
    #   A: R=10, T=1    B: R=5, T=2
    #   f: b=4, r=2
    g = ServerGraph(double_nums, name="line2")
    g.add_server("A", g.curves.rate_latency(10, 1))
    g.add_server("B", g.curves.rate_latency(5, 2))
    g.add_turn("A", "B")
    g.add_flow("f", g.curves.token_bucket(4, 2), ["A", "B"])
    return g


@pytest.fixture
def check_num(nums):
    """Compare a bound with an exact fraction in the fixture's representation.

    Rational representations must match exactly; float ones within rounding.
    """

    def _check(value, expected: Fraction) -> None:
        expected = Fraction(expected)
        if nums.backend in RATIONAL_BACKENDS:
            assert value == nums.create(expected.numerator, expected.denominator)
        else:
            rel = 1e-5 if nums.backend == NumBackend.REAL_SINGLE else 1e-9
            assert float(value) == pytest.approx(float(expected), rel=rel)

    return _check
