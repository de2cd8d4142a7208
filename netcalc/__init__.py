"""NetCalc: deterministic network calculus bounds.

NetCalc bounds the worst-case end-to-end delay and the worst-case backlog of
flows crossing a feed-forward network of queuing servers. Traffic is
described by token-bucket arrival curves and servers by rate-latency service
curves.

Primary API:
    ServerGraph - Servers, turns and flows
    TotalFlowAnalysis - Per-hop aggregate analysis
    SeparateFlowAnalysis - Concatenated left-over service analysis
    PmooAnalysis - Pay multiplexing only once (arbitrary multiplexing)
    AnalysisConfig - Multiplexing discipline and arrival bound methods
    NumFactory - Numeric representation of every computed value

Example:
    from netcalc import NumFactory, NumBackend, ServerGraph, TotalFlowAnalysis

    g = ServerGraph(NumFactory(NumBackend.RATIONAL_BIGINTEGER))
    s0 = g.add_server("s0", g.curves.rate_latency(20, 20), "fifo")
    s1 = g.add_server("s1", g.curves.rate_latency(20, 20), "fifo")
    g.add_turn(s0, s1)
    f0 = g.add_flow("f0", g.curves.token_bucket(25, 5), [s0, s1])

    result = TotalFlowAnalysis(g).analyze(f0)
    print(result.delay_bound, result.backlog_bound)
"""

from __future__ import annotations

from netcalc import logging
from netcalc._version import __version__
from netcalc.analysis import (
    Analysis,
    ArrivalBounder,
    PmooAnalysis,
    SeparateFlowAnalysis,
    TotalFlowAnalysis,
)
from netcalc.config import DEFAULT_CONFIG, AnalysisConfig
from netcalc.curves import ArrivalCurve, CurveAlgebra, ServiceCurve
from netcalc.exceptions import (
    AnalysisError,
    ConfigurationError,
    NumOverflowError,
    ParseError,
    TopologyError,
)
from netcalc.model import Flow, Path, Server, ServerGraph
from netcalc.numbers import Num, NumBackend, NumFactory
from netcalc.results import (
    PartialTrace,
    PmooResult,
    SeparateFlowResult,
    TotalFlowResult,
)
from netcalc.types import ArrivalBoundMethod, Multiplexing, MuxDiscipline

__all__ = [
    # Version
    "__version__",
    # Numbers
    "Num",
    "NumBackend",
    "NumFactory",
    # Curves
    "ArrivalCurve",
    "ServiceCurve",
    "CurveAlgebra",
    # Model
    "ServerGraph",
    "Server",
    "Flow",
    "Path",
    # Configuration
    "AnalysisConfig",
    "DEFAULT_CONFIG",
    "Multiplexing",
    "MuxDiscipline",
    "ArrivalBoundMethod",
    # Analyses
    "Analysis",
    "ArrivalBounder",
    "TotalFlowAnalysis",
    "SeparateFlowAnalysis",
    "PmooAnalysis",
    # Results
    "TotalFlowResult",
    "SeparateFlowResult",
    "PmooResult",
    "PartialTrace",
    # Errors
    "AnalysisError",
    "ConfigurationError",
    "NumOverflowError",
    "ParseError",
    "TopologyError",
    # Utilities
    "logging",
]
