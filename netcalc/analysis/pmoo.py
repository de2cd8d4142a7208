"""Pay Multiplexing Only Once analysis.

Derives one left-over service curve for the whole tandem of the path, so
the burst of every cross flow is paid once rather than at each server it
shares with the flow of interest. The closed form holds for rate-latency
servers under arbitrary multiplexing only.

Cross flows are grouped by the tandem servers they cross. With ``r_g``,
``b_g`` the aggregate arrival of group ``g`` at its first tandem server::

    R = min_s (R_s - sum_{g at s} r_g)
    T = sum_s T_s + sum_g (b_g + r_g * sum_{s in g} T_s) / R
"""

from __future__ import annotations

from itertools import product
from typing import Dict, List, Sequence, Tuple

from netcalc.analysis.arrival_bound import dedupe
from netcalc.analysis.base import Analysis, TraversalContext
from netcalc.curves.curve import ArrivalCurve, ServiceCurve
from netcalc.exceptions import ConfigurationError
from netcalc.logging import get_logger
from netcalc.model.network import Flow, Server
from netcalc.numbers.utils import minimum, select_minimum
from netcalc.results.bounds import PmooResult
from netcalc.types.base import MuxDiscipline

logger = get_logger(__name__)


class PmooAnalysis(Analysis):
    """Tandem left-over analysis for arbitrary multiplexing.

    Raises:
        ConfigurationError: On construction under ``GLOBAL_FIFO``.
    """

    name = "PMOO"

    def _check_config(self) -> None:
        if self.config.multiplexing == MuxDiscipline.GLOBAL_FIFO:
            logger.error("PMOO is only valid for arbitrary multiplexing")
            raise ConfigurationError(
                "PMOO analysis requires arbitrary multiplexing; got GLOBAL_FIFO"
            )

    def process_hop(self, ctx: TraversalContext, server: Server) -> None:
        ctx.cross_flows[server] = tuple(
            f for f in self.graph.flows(server) if f != ctx.flow
        )

    def finish(self, ctx: TraversalContext) -> PmooResult:
        groups = self._group_cross_flows(ctx)
        keys = list(groups)
        candidate_sets = [
            ctx.bounder.compute_arrival_bounds(key[0], groups[key], ctx.flow)
            for key in keys
        ]
        for key, alphas in zip(keys, candidate_sets):
            ctx.builder.record_arrival_curves(key[0], alphas)

        betas = tuple(
            dict.fromkeys(
                self._tandem_leftover(ctx, keys, combo)
                for combo in product(*candidate_sets)
            )
        )
        alphas = dedupe(self.source_curves(ctx))
        delays = [self.curves.delay_bound_fifo(a, b) for a in alphas for b in betas]
        backlogs = [self.curves.backlog_bound(a, b) for a in alphas for b in betas]
        logger.debug(
            "PMOO %s: tandem left-over %s", ctx.flow.alias, [str(b) for b in betas]
        )
        return ctx.builder.build_pmoo(
            select_minimum(delays), select_minimum(backlogs), betas
        )

    def _group_cross_flows(
        self, ctx: TraversalContext
    ) -> Dict[Tuple[Server, ...], List[Flow]]:
        """Group cross flows by the tandem servers they cross, in path order."""
        crossed: Dict[Flow, List[Server]] = {}
        for server in ctx.path:
            for flow in ctx.cross_flows[server]:
                crossed.setdefault(flow, []).append(server)
        groups: Dict[Tuple[Server, ...], List[Flow]] = {}
        for flow, servers in crossed.items():
            groups.setdefault(tuple(servers), []).append(flow)
        return groups

    def _tandem_leftover(
        self,
        ctx: TraversalContext,
        keys: Sequence[Tuple[Server, ...]],
        alphas: Sequence[ArrivalCurve],
    ) -> ServiceCurve:
        nums = self.graph.nums
        rate = None
        latency = nums.zero
        for server in ctx.path:
            beta = server.service_curve
            if beta.is_zero():
                return self.curves.zero_service()
            residual = beta.rate
            for key, alpha in zip(keys, alphas):
                if server in key:
                    residual = residual - alpha.rate
            rate = residual if rate is None else minimum(rate, residual)
            latency = latency + beta.latency
        if rate is None or not rate > nums.zero:
            return self.curves.zero_service()
        for key, alpha in zip(keys, alphas):
            if alpha.is_zero():
                continue
            if alpha.is_unbounded():
                return self.curves.zero_service()
            group_latency = nums.zero
            for server in key:
                group_latency = group_latency + server.service_curve.latency
            latency = latency + (alpha.burst + alpha.rate * group_latency) / rate
        return ServiceCurve(rate=rate, latency=latency)
