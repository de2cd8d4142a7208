"""Min-plus operations on token-bucket and rate-latency curves.

`CurveAlgebra` is bound to one `NumFactory`; it builds curves from raw
numbers and derives output bounds, left-over service and the backlog and
delay bounds used by every analysis.

With ``alpha = (b, r)`` and ``beta = (R, T)``:

==========================  ==================================  ===========
operation                   closed form                         when
==========================  ==================================  ===========
backlog bound               ``b + r*T``                         ``r < R``
FIFO delay bound            ``T + b/R``                         ``r <= R``
arbitrary delay bound       ``(b + R*T) / (R - r)``             ``r < R``
output bound                ``(b + r*T, r)``                    ``r <= R``
arbitrary left-over         ``(R - r, (R*T + b) / (R - r))``    ``r < R``
FIFO left-over              ``(R - r, T + b/R)``                ``r < R``
==========================  ==================================  ===========

Outside the stated conditions bounds are +inf and left-over service is the
zero curve. The arbitrary delay bound is never below the FIFO one for the
same inputs.
"""

from __future__ import annotations

from typing import Iterable, Union

from netcalc.curves.curve import ArrivalCurve, ServiceCurve
from netcalc.logging import get_logger
from netcalc.numbers.factory import NumFactory
from netcalc.numbers.num import POSITIVE_INFINITY, Num
from netcalc.numbers.utils import minimum

logger = get_logger(__name__)

NumLike = Union[Num, int, float, str]


class CurveAlgebra:
    """Curve constructors and operations over one numeric representation.

    Args:
        nums: Factory used for every number the algebra creates.
    """

    def __init__(self, nums: NumFactory):
        self.nums = nums

    # ---- constructors ----

    def token_bucket(self, burst: NumLike, rate: NumLike) -> ArrivalCurve:
        """Build a token-bucket arrival curve.

        Raises:
            ValueError: If burst or rate is negative or NaN.
        """
        b = self.nums.create(burst)
        r = self.nums.create(rate)
        self._check_non_negative("burst", b)
        self._check_non_negative("rate", r)
        return ArrivalCurve(burst=b, rate=r)

    def rate_latency(self, rate: NumLike, latency: NumLike) -> ServiceCurve:
        """Build a rate-latency service curve.

        Raises:
            ValueError: If rate or latency is negative or NaN.
        """
        rate_num = self.nums.create(rate)
        latency_num = self.nums.create(latency)
        self._check_non_negative("rate", rate_num)
        self._check_non_negative("latency", latency_num)
        return ServiceCurve(rate=rate_num, latency=latency_num)

    def zero_arrival(self) -> ArrivalCurve:
        return ArrivalCurve(burst=self.nums.zero, rate=self.nums.zero)

    def zero_service(self) -> ServiceCurve:
        return ServiceCurve(rate=self.nums.zero, latency=POSITIVE_INFINITY)

    def identity_service(self) -> ServiceCurve:
        """Neutral element of convolution (infinite rate, no latency)."""
        return ServiceCurve(rate=POSITIVE_INFINITY, latency=self.nums.zero)

    # ---- combinators ----

    def aggregate(self, alphas: Iterable[ArrivalCurve]) -> ArrivalCurve:
        """Sum arrival curves; the empty sum is the zero curve."""
        burst = self.nums.zero
        rate = self.nums.zero
        for alpha in alphas:
            burst = burst + alpha.burst
            rate = rate + alpha.rate
        return ArrivalCurve(burst=burst, rate=rate)

    def convolve(self, betas: Iterable[ServiceCurve]) -> ServiceCurve:
        """Concatenate servers in tandem: minimum rate, summed latency."""
        result = self.identity_service()
        for beta in betas:
            if beta.is_zero():
                return self.zero_service()
            result = ServiceCurve(
                rate=minimum(result.rate, beta.rate),
                latency=result.latency + beta.latency,
            )
        return result

    def deconvolve(self, alpha: ArrivalCurve, beta: ServiceCurve) -> ArrivalCurve:
        """Output bound of ``alpha`` after crossing ``beta``."""
        if alpha.is_zero():
            return alpha
        if alpha.rate.is_zero():
            return alpha
        if alpha.rate > beta.rate or beta.is_zero():
            return ArrivalCurve(burst=POSITIVE_INFINITY, rate=alpha.rate)
        return ArrivalCurve(
            burst=alpha.burst + alpha.rate * beta.latency, rate=alpha.rate
        )

    def leftover_arbitrary(
        self, beta: ServiceCurve, cross: ArrivalCurve
    ) -> ServiceCurve:
        """Service left to an aggregate under arbitrary multiplexing."""
        if cross.is_zero():
            return beta
        if beta.is_zero() or cross.is_unbounded():
            return self.zero_service()
        residual_rate = beta.rate - cross.rate
        if residual_rate <= self.nums.zero:
            return self.zero_service()
        if beta.rate.is_infinite():
            return ServiceCurve(rate=residual_rate, latency=beta.latency)
        latency = (self._service_term(beta) + cross.burst) / residual_rate
        return ServiceCurve(rate=residual_rate, latency=latency)

    def leftover_fifo(self, beta: ServiceCurve, cross: ArrivalCurve) -> ServiceCurve:
        """Service left to an aggregate at a FIFO server.

        Uses the FIFO residual family with ``theta = T + b/R``, which keeps
        the result rate-latency.
        """
        if cross.is_zero():
            return beta
        if beta.is_zero() or cross.is_unbounded():
            return self.zero_service()
        residual_rate = beta.rate - cross.rate
        if residual_rate <= self.nums.zero:
            return self.zero_service()
        latency = beta.latency + cross.burst / beta.rate
        return ServiceCurve(rate=residual_rate, latency=latency)

    # ---- bounds ----

    def backlog_bound(self, alpha: ArrivalCurve, beta: ServiceCurve) -> Num:
        """Maximal vertical deviation of ``alpha`` above ``beta``."""
        if alpha.is_zero():
            return self.nums.zero
        if beta.is_zero() or not alpha.rate < beta.rate:
            return POSITIVE_INFINITY
        if alpha.rate.is_zero():
            return alpha.burst
        return alpha.burst + alpha.rate * beta.latency

    def delay_bound_fifo(self, alpha: ArrivalCurve, beta: ServiceCurve) -> Num:
        """Maximal horizontal deviation; valid at FIFO servers."""
        if alpha.is_zero():
            return self.nums.zero
        if beta.is_zero() or alpha.rate > beta.rate:
            return POSITIVE_INFINITY
        return beta.latency + alpha.burst / beta.rate

    def delay_bound_arbitrary(self, alpha: ArrivalCurve, beta: ServiceCurve) -> Num:
        """Busy-period bound: first time ``beta`` catches up with ``alpha``.

        Valid without any ordering assumption among the flows.
        """
        if alpha.is_zero():
            return self.nums.zero
        if beta.is_zero() or not alpha.rate < beta.rate:
            return POSITIVE_INFINITY
        if beta.rate.is_infinite():
            return beta.latency
        return (alpha.burst + self._service_term(beta)) / (beta.rate - alpha.rate)

    def _service_term(self, beta: ServiceCurve) -> Num:
        # R * T with 0 * inf taken as zero
        if beta.latency.is_zero():
            return self.nums.zero
        return beta.rate * beta.latency

    # ---- internals ----

    @staticmethod
    def _check_non_negative(name: str, value: Num) -> None:
        if value.is_nan() or value.sign() < 0:
            logger.error("Curve %s must be non-negative: %s", name, value)
            raise ValueError(f"curve {name} must be non-negative, got {value}")
