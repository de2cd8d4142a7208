"""Delay and backlog bound analyses."""

from __future__ import annotations

from netcalc.analysis.arrival_bound import ArrivalBounder
from netcalc.analysis.base import Analysis, HopStrategy, TraversalContext
from netcalc.analysis.pmoo import PmooAnalysis
from netcalc.analysis.sfa import SeparateFlowAnalysis
from netcalc.analysis.tfa import TotalFlowAnalysis

__all__ = [
    "Analysis",
    "ArrivalBounder",
    "HopStrategy",
    "PmooAnalysis",
    "SeparateFlowAnalysis",
    "TotalFlowAnalysis",
    "TraversalContext",
]
