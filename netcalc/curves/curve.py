"""Affine arrival and service curves.

Only the two shapes the bound derivations need are represented: the token
bucket for arrivals and the rate-latency curve for service. Both are
immutable and compare by value, so they can be collected in sets of
candidates.
"""

from __future__ import annotations

from dataclasses import dataclass

from netcalc.numbers.num import Num


@dataclass(frozen=True)
class ArrivalCurve:
    """Token-bucket arrival curve ``alpha(t) = burst + rate * t`` for ``t > 0``.

    Attributes:
        burst: Maximal instantaneous burst. +inf marks an unbounded output.
        rate: Sustained rate.
    """

    burst: Num
    rate: Num

    def is_zero(self) -> bool:
        """Return True for the curve of a flow that never sends."""
        return self.burst.is_zero() and self.rate.is_zero()

    def is_unbounded(self) -> bool:
        return not self.burst.is_finite() or not self.rate.is_finite()

    def __str__(self) -> str:
        return f"TB(b={self.burst}, r={self.rate})"


@dataclass(frozen=True)
class ServiceCurve:
    """Rate-latency service curve ``beta(t) = rate * max(t - latency, 0)``.

    Attributes:
        rate: Guaranteed service rate once the latency has elapsed.
        latency: Worst-case delay before service starts. A zero rate with
            infinite latency is the curve of a server that guarantees nothing.
    """

    rate: Num
    latency: Num

    def is_zero(self) -> bool:
        """Return True if the curve guarantees no service at all."""
        return self.rate.is_zero() or not self.latency.is_finite()

    def __str__(self) -> str:
        return f"RL(R={self.rate}, T={self.latency})"
