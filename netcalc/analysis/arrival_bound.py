"""Arrival bounds of flow aggregates inside the network.

The traffic of a flow changes shape as it crosses servers, so the source
arrival curve only holds at the first server of its path. `ArrivalBounder`
derives a token bucket for an aggregate of flows at any server of a
feed-forward graph by walking the flows backwards to their sources.

Flows are grouped by the server they arrive from. For each group:

- ``PBOO_PER_HOP`` bounds the group at its predecessor, computes the
  left-over service there and deconvolves (one output bound per hop);
- ``PBOO_CONCATENATION`` walks back along the longest segment every member
  of the group shares, concatenates the left-over service of that segment
  and deconvolves once, paying the burst only once.

Each configured method is evaluated with its own recursion, so it yields
one curve. The flow of interest of the calling analysis never counts as
interfering traffic during the walk.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from netcalc.config import DEFAULT_CONFIG, AnalysisConfig
from netcalc.curves.curve import ArrivalCurve, ServiceCurve
from netcalc.exceptions import TopologyError
from netcalc.logging import get_logger
from netcalc.model.network import Flow, Server, ServerGraph
from netcalc.types.base import ArrivalBoundMethod

logger = get_logger(__name__)

_MemoKey = Tuple[ArrivalBoundMethod, str, FrozenSet[str], Optional[str]]


def dedupe(curves: Iterable[ArrivalCurve]) -> Tuple[ArrivalCurve, ...]:
    """Drop curves equal by value, keeping the first occurrence."""
    seen = set()
    unique: List[ArrivalCurve] = []
    for curve in curves:
        if curve not in seen:
            seen.add(curve)
            unique.append(curve)
    return tuple(unique)


class ArrivalBounder:
    """Computes arrival curves of flow aggregates at servers.

    Results are memoised for the lifetime of the instance; analyses create
    one bounder per ``analyze`` call.

    Args:
        graph: Feed-forward server graph.
        config: Selects the arrival bound methods and the multiplexing rule
            of the left-over service computations.
    """

    def __init__(self, graph: ServerGraph, config: AnalysisConfig = DEFAULT_CONFIG):
        self.graph = graph
        self.config = config
        self.curves = graph.curves
        self._memo: Dict[_MemoKey, ArrivalCurve] = {}

    def compute_arrival_bounds(
        self,
        server: Server,
        flows: Optional[Iterable[Flow]] = None,
        flow_of_interest: Optional[Flow] = None,
    ) -> Tuple[ArrivalCurve, ...]:
        """Bound the aggregate arrival of ``flows`` at ``server``.

        Args:
            server: Server where the aggregate is bounded.
            flows: Flows to bound; every flow crossing ``server`` when omitted.
                An empty selection yields the zero curve.
            flow_of_interest: Flow excluded from the interfering traffic of
                every upstream server. It is still bounded if it is part of
                ``flows``.

        Returns:
            One curve per configured method, duplicates removed.

        Raises:
            TopologyError: If the graph is cyclic or a flow does not cross
                ``server``.
        """
        server = self.graph.server(server)
        if not self.graph.is_feed_forward():
            logger.error("Arrival bounding requires a feed-forward graph")
            raise TopologyError("Server graph contains a cycle; arrival bounds need a feed-forward graph.")
        selected = self._select(server, flows)
        if not selected:
            return (self.curves.zero_arrival(),)
        foi = flow_of_interest.alias if flow_of_interest is not None else None
        methods = sorted(self.config.arrival_bound_methods)
        bounds = dedupe(self._bound(m, server, selected, foi) for m in methods)
        logger.debug(
            "Arrival bounds at %s for %s: %s",
            server.alias,
            [f.alias for f in selected],
            [str(c) for c in bounds],
        )
        return bounds

    # ---- recursion ----

    def _select(self, server: Server, flows: Optional[Iterable[Flow]]) -> Tuple[Flow, ...]:
        present = self.graph.flows(server)
        if flows is None:
            return present
        wanted = {f.alias for f in flows}
        missing = wanted - {f.alias for f in present}
        if missing:
            logger.error("Flows %s do not cross %s", sorted(missing), server.alias)
            raise TopologyError(
                f"Flows {sorted(missing)} do not cross server '{server.alias}'."
            )
        return tuple(f for f in present if f.alias in wanted)

    def _bound(
        self,
        method: ArrivalBoundMethod,
        server: Server,
        flows: Sequence[Flow],
        foi: Optional[str],
    ) -> ArrivalCurve:
        if not flows:
            return self.curves.zero_arrival()
        key = (method, server.alias, frozenset(f.alias for f in flows), foi)
        cached = self._memo.get(key)
        if cached is not None:
            return cached

        parts: List[ArrivalCurve] = []
        groups: Dict[Server, List[Flow]] = {}
        for flow in flows:
            predecessor = flow.path.predecessor(server)
            if predecessor is None:
                parts.append(flow.arrival_curve)
            else:
                groups.setdefault(predecessor, []).append(flow)

        for predecessor, group in groups.items():
            if method == ArrivalBoundMethod.PBOO_CONCATENATION:
                parts.append(self._concatenation(predecessor, group, foi))
            else:
                parts.append(self._per_hop(predecessor, group, foi))

        result = self.curves.aggregate(parts)
        self._memo[key] = result
        return result

    def _per_hop(self, predecessor: Server, group: Sequence[Flow], foi: Optional[str]) -> ArrivalCurve:
        alpha = self._bound(ArrivalBoundMethod.PBOO_PER_HOP, predecessor, group, foi)
        beta = self._leftover(ArrivalBoundMethod.PBOO_PER_HOP, predecessor, group, foi)
        return self.curves.deconvolve(alpha, beta)

    def _concatenation(
        self, predecessor: Server, group: Sequence[Flow], foi: Optional[str]
    ) -> ArrivalCurve:
        segment = self._shared_segment(predecessor, group)
        alpha = self._bound(ArrivalBoundMethod.PBOO_CONCATENATION, segment[0], group, foi)
        beta = self.curves.convolve(
            self._leftover(ArrivalBoundMethod.PBOO_CONCATENATION, s, group, foi)
            for s in segment
        )
        return self.curves.deconvolve(alpha, beta)

    def _shared_segment(self, last: Server, group: Sequence[Flow]) -> List[Server]:
        """Longest run of servers ending at ``last`` crossed by every member in sequence."""
        segment = [last]
        current = last
        while True:
            previous = {f.path.predecessor(current) for f in group}
            if len(previous) != 1:
                break
            (candidate,) = previous
            if candidate is None:
                break
            segment.append(candidate)
            current = candidate
        segment.reverse()
        return segment

    def _leftover(
        self,
        method: ArrivalBoundMethod,
        server: Server,
        group: Sequence[Flow],
        foi: Optional[str],
    ) -> ServiceCurve:
        members = {f.alias for f in group}
        cross = [
            f
            for f in self.graph.flows(server)
            if f.alias not in members and f.alias != foi
        ]
        beta = server.service_curve
        if not cross:
            return beta
        alpha_cross = self._bound(method, server, cross, foi)
        if self.config.configured_fifo(server):
            return self.curves.leftover_fifo(beta, alpha_cross)
        return self.curves.leftover_arbitrary(beta, alpha_cross)

