"""Arrival/service curves and the operations the analyses consume."""

from netcalc.curves.algebra import CurveAlgebra
from netcalc.curves.curve import ArrivalCurve, ServiceCurve

__all__ = ["ArrivalCurve", "ServiceCurve", "CurveAlgebra"]
