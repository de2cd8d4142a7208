"""Analysis results."""

from __future__ import annotations

from netcalc.results.bounds import (
    BoundResult,
    PartialTrace,
    PmooResult,
    SeparateFlowResult,
    TotalFlowResult,
    TraceBuilder,
)

__all__ = [
    "BoundResult",
    "PartialTrace",
    "PmooResult",
    "SeparateFlowResult",
    "TotalFlowResult",
    "TraceBuilder",
]
