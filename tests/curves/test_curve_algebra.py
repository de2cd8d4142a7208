"""Closed-form curve operations."""

from __future__ import annotations

from fractions import Fraction

import pytest

from netcalc.curves import ArrivalCurve, CurveAlgebra, ServiceCurve
from netcalc.numbers import select_minimum


@pytest.fixture
def algebra(nums) -> CurveAlgebra:
    return CurveAlgebra(nums)


def test_constructors_accept_raw_numbers(algebra, nums):
    alpha = algebra.token_bucket(25, "5")
    beta = algebra.rate_latency(nums.create(20), 20.0)
    assert alpha == ArrivalCurve(nums.create(25), nums.create(5))
    assert beta == ServiceCurve(nums.create(20), nums.create(20))
    assert str(alpha).startswith("TB(b=")
    assert str(beta).startswith("RL(R=")


@pytest.mark.parametrize("args", [(-1, 5), (1, -5), ("nan", 1)])
def test_token_bucket_rejects_negative(algebra, args):
    with pytest.raises(ValueError):
        algebra.token_bucket(*args)


def test_rate_latency_rejects_negative(algebra):
    with pytest.raises(ValueError):
        algebra.rate_latency(-1, 0)


def test_zero_curves(algebra):
    assert algebra.zero_arrival().is_zero()
    assert algebra.zero_service().is_zero()
    assert not algebra.identity_service().is_zero()


def test_backlog_bound(algebra, check_num):
    """b + r*T when r < R, +inf otherwise."""
    beta = algebra.rate_latency(20, 20)
    check_num(algebra.backlog_bound(algebra.token_bucket(25, 5), beta), 125)
    assert algebra.backlog_bound(algebra.token_bucket(25, 20), beta).is_infinite()
    assert algebra.backlog_bound(algebra.token_bucket(25, 30), beta).is_infinite()
    assert algebra.backlog_bound(algebra.zero_arrival(), beta).is_zero()


def test_delay_bound_fifo(algebra, check_num):
    """T + b/R when r <= R."""
    beta = algebra.rate_latency(20, 20)
    check_num(algebra.delay_bound_fifo(algebra.token_bucket(150, 10), beta), Fraction(55, 2))
    check_num(algebra.delay_bound_fifo(algebra.token_bucket(20, 20), beta), 21)
    assert algebra.delay_bound_fifo(algebra.token_bucket(20, 21), beta).is_infinite()
    assert algebra.delay_bound_fifo(algebra.zero_arrival(), beta).is_zero()


def test_delay_bound_arbitrary(algebra, check_num):
    """(b + R*T) / (R - r) when r < R."""
    beta = algebra.rate_latency(20, 20)
    check_num(algebra.delay_bound_arbitrary(algebra.token_bucket(150, 10), beta), 55)
    assert algebra.delay_bound_arbitrary(algebra.token_bucket(20, 20), beta).is_infinite()
    assert algebra.delay_bound_arbitrary(algebra.zero_arrival(), beta).is_zero()


@pytest.mark.parametrize("burst,rate", [(0, 1), (25, 5), (1075, 15), (7, 19)])
@pytest.mark.parametrize("service", [(20, 20), ("inf", 0), ("inf", 3)], ids=["rl", "ideal", "pure-delay"])
def test_arbitrary_delay_never_below_fifo(algebra, burst, rate, service):
    beta = algebra.rate_latency(*service)
    alpha = algebra.token_bucket(burst, rate)
    arbitrary = algebra.delay_bound_arbitrary(alpha, beta)
    assert not arbitrary.is_nan()
    assert arbitrary >= algebra.delay_bound_fifo(alpha, beta)


def test_infinite_rate_server(algebra, check_num):
    """R = inf leaves only the latency: R*T is never formed."""
    alpha = algebra.token_bucket(10, 1)
    ideal = algebra.rate_latency("inf", 0)
    assert algebra.delay_bound_arbitrary(alpha, ideal).is_zero()
    assert algebra.delay_bound_fifo(alpha, ideal).is_zero()
    check_num(algebra.backlog_bound(alpha, ideal), 10)
    check_num(algebra.delay_bound_arbitrary(alpha, algebra.rate_latency("inf", 3)), 3)

    left = algebra.leftover_arbitrary(ideal, alpha)
    assert left.rate.is_infinite()
    assert left.latency.is_zero()
    left = algebra.leftover_arbitrary(algebra.rate_latency("inf", 3), alpha)
    check_num(left.latency, 3)
    left = algebra.leftover_fifo(ideal, alpha)
    assert left.rate.is_infinite()
    assert left.latency.is_zero()


@pytest.mark.parametrize("bound", ["backlog_bound", "delay_bound_fifo", "delay_bound_arbitrary"])
def test_looser_candidate_never_changes_selection(algebra, bound):
    """Adding a pointwise larger arrival curve keeps the selected minimum."""
    beta = algebra.rate_latency(20, 20)
    tight = getattr(algebra, bound)(algebra.token_bucket(25, 5), beta)
    loose = getattr(algebra, bound)(algebra.token_bucket(50, 8), beta)
    assert tight < loose
    assert select_minimum([tight]) == tight
    assert select_minimum([tight, loose]) == tight
    assert select_minimum([loose, tight]) == tight
    assert select_minimum([loose, tight, algebra.nums.nan]) == tight


def test_deconvolve(algebra, check_num):
    out = algebra.deconvolve(algebra.token_bucket(25, 5), algebra.rate_latency(20, 20))
    check_num(out.burst, 125)
    check_num(out.rate, 5)
    unbounded = algebra.deconvolve(algebra.token_bucket(25, 25), algebra.rate_latency(20, 20))
    assert unbounded.is_unbounded()
    assert algebra.deconvolve(algebra.token_bucket(25, 5), algebra.zero_service()).is_unbounded()


def test_convolve(algebra, check_num):
    beta = algebra.convolve(
        [algebra.rate_latency(15, 20), algebra.rate_latency(10, 5), algebra.rate_latency(30, 1)]
    )
    check_num(beta.rate, 10)
    check_num(beta.latency, 26)
    assert algebra.convolve([]) == algebra.identity_service()
    assert algebra.convolve([algebra.rate_latency(5, 1), algebra.zero_service()]).is_zero()


def test_aggregate(algebra, check_num):
    total = algebra.aggregate([algebra.token_bucket(25, 5), algebra.token_bucket(125, 5)])
    check_num(total.burst, 150)
    check_num(total.rate, 10)
    assert algebra.aggregate([]).is_zero()


def test_leftover_arbitrary(algebra, check_num):
    beta = algebra.leftover_arbitrary(algebra.rate_latency(20, 20), algebra.token_bucket(550, 10))
    check_num(beta.rate, 10)
    check_num(beta.latency, 95)
    saturated = algebra.leftover_arbitrary(
        algebra.rate_latency(20, 20), algebra.token_bucket(1, 20)
    )
    assert saturated.is_zero()


def test_leftover_fifo(algebra, check_num):
    beta = algebra.leftover_fifo(algebra.rate_latency(20, 20), algebra.token_bucket(550, 10))
    check_num(beta.rate, 10)
    check_num(beta.latency, Fraction(95, 2))
    assert algebra.leftover_fifo(
        algebra.rate_latency(20, 20), algebra.token_bucket(1, 25)
    ).is_zero()


def test_leftover_without_cross_traffic(algebra):
    beta = algebra.rate_latency(20, 20)
    assert algebra.leftover_fifo(beta, algebra.zero_arrival()) == beta
    assert algebra.leftover_arbitrary(beta, algebra.zero_arrival()) == beta
