"""Total Flow Analysis.

Bounds every server of the path in isolation for the aggregate of all flows
crossing it. The end-to-end delay bound is the sum of the per-server delay
bounds; the backlog bound is the largest per-server backlog bound.
"""

from __future__ import annotations

from netcalc.analysis.base import Analysis, TraversalContext
from netcalc.logging import get_logger
from netcalc.model.network import Server
from netcalc.numbers.utils import maximum, select_minimum
from netcalc.results.bounds import TotalFlowResult

logger = get_logger(__name__)


class TotalFlowAnalysis(Analysis):
    """Per-hop aggregate analysis.

    Example:
        >>> tfa = TotalFlowAnalysis(graph, AnalysisConfig(multiplexing="global_fifo"))
        >>> tfa.analyze("f0").delay_bound
    """

    name = "TFA"
    requires_flow_route = False

    def process_hop(self, ctx: TraversalContext, server: Server) -> None:
        alphas = ctx.bounder.compute_arrival_bounds(server)
        ctx.builder.record_arrival_curves(server, alphas)

        beta = server.service_curve
        backlogs = [self.curves.backlog_bound(alpha, beta) for alpha in alphas]
        ctx.builder.record_backlog_bounds(server, backlogs)

        if self.is_fifo(server):
            delays = [self.curves.delay_bound_fifo(alpha, beta) for alpha in alphas]
        else:
            delays = [self.curves.delay_bound_arbitrary(alpha, beta) for alpha in alphas]
        ctx.builder.record_delay_bounds(server, delays)

        delay = select_minimum(delays)
        backlog = select_minimum(backlogs)
        ctx.delay = ctx.delay + delay
        ctx.backlog = maximum(ctx.backlog, backlog)
        logger.debug(
            "TFA %s at %s (%s): delay %s, backlog %s",
            ctx.flow.alias,
            server.alias,
            "FIFO" if self.is_fifo(server) else "arbitrary",
            delay,
            backlog,
        )

    def finish(self, ctx: TraversalContext) -> TotalFlowResult:
        return ctx.builder.build_total_flow(ctx.delay, ctx.backlog)
