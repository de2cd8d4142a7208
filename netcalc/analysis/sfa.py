"""Separate Flow Analysis.

Computes, at every server, the service left to the flow of interest once
the cross traffic is served, concatenates these left-over curves along the
path and bounds the flow once against the concatenation.
"""

from __future__ import annotations

from itertools import product

from netcalc.analysis.arrival_bound import dedupe
from netcalc.analysis.base import Analysis, TraversalContext
from netcalc.logging import get_logger
from netcalc.model.network import Server
from netcalc.numbers.utils import select_minimum
from netcalc.results.bounds import SeparateFlowResult

logger = get_logger(__name__)


class SeparateFlowAnalysis(Analysis):
    """Left-over service analysis of a single flow."""

    name = "SFA"

    def process_hop(self, ctx: TraversalContext, server: Server) -> None:
        cross = tuple(f for f in self.graph.flows(server) if f != ctx.flow)
        ctx.cross_flows[server] = cross
        if not cross:
            leftovers = (server.service_curve,)
        else:
            alphas = ctx.bounder.compute_arrival_bounds(server, cross, ctx.flow)
            ctx.builder.record_arrival_curves(server, alphas)
            leftovers = tuple(dict.fromkeys(self.leftover(server, a) for a in alphas))
        ctx.builder.record_leftover_curves(server, leftovers)
        ctx.leftover_sets.append(leftovers)
        logger.debug(
            "SFA %s at %s: left-over %s",
            ctx.flow.alias,
            server.alias,
            [str(b) for b in leftovers],
        )

    def finish(self, ctx: TraversalContext) -> SeparateFlowResult:
        betas = tuple(
            dict.fromkeys(self.curves.convolve(combo) for combo in product(*ctx.leftover_sets))
        )
        alphas = dedupe(self.source_curves(ctx))
        delays = [self.curves.delay_bound_fifo(a, b) for a in alphas for b in betas]
        backlogs = [self.curves.backlog_bound(a, b) for a in alphas for b in betas]
        return ctx.builder.build_separate_flow(
            select_minimum(delays), select_minimum(backlogs), betas
        )
