"""Traversal skeleton shared by the bound analyses.

`Analysis` walks the servers of a path in order, hands every server to the
per-hop step of the concrete analysis and asks it for the final result
once the whole path was processed. Any failure during the walk aborts it:
no result is published and the diagnostics gathered so far are attached to
the raised `AnalysisError` as an incomplete `PartialTrace`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import (
    Dict,
    FrozenSet,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Union,
    runtime_checkable,
)

from netcalc.analysis.arrival_bound import ArrivalBounder
from netcalc.config import DEFAULT_CONFIG, AnalysisConfig
from netcalc.curves.curve import ArrivalCurve, ServiceCurve
from netcalc.exceptions import AnalysisError, ConfigurationError, TopologyError
from netcalc.logging import get_logger
from netcalc.model.network import Flow, Server, ServerGraph
from netcalc.model.path import Path
from netcalc.numbers.num import Num
from netcalc.results.bounds import BoundResult, TraceBuilder

logger = get_logger(__name__)


@dataclass
class TraversalContext:
    """Mutable state of one ``analyze`` call.

    Attributes:
        flow: Flow of interest.
        path: Servers to traverse.
        builder: Diagnostics accumulator.
        bounder: Arrival bounder, memoised for this call only.
        delay: Running delay bound (sum over processed servers).
        backlog: Running backlog bound (maximum over processed servers).
        leftover_sets: Per-server left-over service candidates, in path order.
        cross_flows: Cross flows seen per server, in path order.
    """

    flow: Flow
    path: Path
    builder: TraceBuilder
    bounder: ArrivalBounder
    delay: Num
    backlog: Num
    leftover_sets: List[Tuple[ServiceCurve, ...]] = field(default_factory=list)
    cross_flows: Dict[Server, Tuple[Flow, ...]] = field(default_factory=dict)


@runtime_checkable
class HopStrategy(Protocol):
    """Derivations an analysis plugs into the traversal."""

    def process_hop(self, ctx: TraversalContext, server: Server) -> None:
        """Derive and record the candidates of one server."""
        ...

    def finish(self, ctx: TraversalContext) -> BoundResult:
        """Turn the recorded candidates into the final result."""
        ...


class Analysis(ABC):
    """Base class of the bound analyses.

    Args:
        graph: Server graph to analyse. It must be feed-forward.
        config: Analysis settings. When ``config.num_backend`` is set it must
            match the numeric representation of ``graph``.

    Raises:
        ConfigurationError: If the numeric representation does not match or
            the analysis cannot honour the configuration.
    """

    #: Label used in logs.
    name = "analysis"
    #: Whether an explicit path must be a contiguous part of the flow's
    #: route. When False any route along the turns of the graph is accepted.
    requires_flow_route = True

    def __init__(self, graph: ServerGraph, config: Optional[AnalysisConfig] = None):
        self.graph = graph
        self.config = config if config is not None else DEFAULT_CONFIG
        self.curves = graph.curves
        self.result: Optional[BoundResult] = None
        backend = self.config.num_backend
        if backend is not None and backend != graph.nums.backend:
            logger.error(
                "Configured backend %s does not match graph backend %s",
                backend.name,
                graph.nums.backend.name,
            )
            raise ConfigurationError(
                f"Configured numeric backend {backend.name} does not match the "
                f"graph's {graph.nums.backend.name}"
            )
        self._check_config()

    def _check_config(self) -> None:
        """Reject configurations the analysis cannot honour."""

    # ---- hooks ----

    @abstractmethod
    def process_hop(self, ctx: TraversalContext, server: Server) -> None: ...

    @abstractmethod
    def finish(self, ctx: TraversalContext) -> BoundResult: ...

    # ---- traversal ----

    def analyze(
        self,
        flow: Union[Flow, str],
        path: Optional[Union[Path, Sequence[Union[Server, str]]]] = None,
    ) -> BoundResult:
        """Bound the delay and backlog of ``flow``.

        Args:
            flow: Flow of interest (object or alias).
            path: Servers to traverse; the whole flow path when omitted.
                Must be a contiguous part of the flow's path unless the
                analysis sets ``requires_flow_route`` to False, in which
                case any route along the turns of the graph is accepted.

        Returns:
            The result of a complete traversal.

        Raises:
            TopologyError: If the flow or path is not part of the graph, or
                the graph is cyclic.
            AnalysisError: If the traversal fails. ``exc.partial`` holds the
                incomplete diagnostics.
        """
        foi = self.graph.flow(flow)
        route = self._resolve_path(foi, path)
        if not self.graph.is_feed_forward():
            logger.error("%s needs a feed-forward graph", self.name)
            raise TopologyError("Server graph contains a cycle.")

        self.result = None
        ctx = TraversalContext(
            flow=foi,
            path=route,
            builder=TraceBuilder(foi, route),
            bounder=ArrivalBounder(self.graph, self.config),
            delay=self.graph.nums.zero,
            backlog=self.graph.nums.zero,
        )
        logger.debug("Starting %s for flow %s over %s", self.name, foi.alias, route)
        try:
            for server in route:
                self.process_hop(ctx, server)
                ctx.builder.mark_processed(server)
            result = self.finish(ctx)
        except Exception as exc:
            partial = ctx.builder.partial()
            logger.error(
                "%s of flow %s aborted after %d of %d servers: %s",
                self.name,
                foi.alias,
                len(partial.processed),
                len(route),
                exc,
            )
            raise AnalysisError(
                f"{self.name} of flow '{foi.alias}' failed: {exc}", partial
            ) from exc

        self.result = result
        logger.info(
            "%s flow %s: delay bound %s, backlog bound %s",
            self.name,
            foi.alias,
            result.delay_bound,
            result.backlog_bound,
        )
        return result

    def _resolve_path(
        self,
        flow: Flow,
        path: Optional[Union[Path, Sequence[Union[Server, str]]]],
    ) -> Path:
        if path is None:
            return flow.path
        servers = tuple(self.graph.server(s) for s in path)
        aliases = [s.alias for s in servers]
        if self.requires_flow_route:
            if servers and servers[0] in flow.path:
                start = flow.path.index(servers[0])
                if flow.path.servers[start : start + len(servers)] == servers:
                    return Path(servers)
            logger.error("Path %s is not part of flow %s", aliases, flow.alias)
            raise TopologyError(
                f"Path {aliases} is not a contiguous part of "
                f"flow '{flow.alias}' ({flow.path})."
            )

        if not servers:
            logger.error("Empty path given for flow %s", flow.alias)
            raise TopologyError(f"Path for flow '{flow.alias}' is empty.")
        for src, dst in zip(servers, servers[1:]):
            if not self.graph.has_turn(src, dst):
                logger.error("Path %s has no turn %s -> %s", aliases, src.alias, dst.alias)
                raise TopologyError(
                    f"Path {aliases} is not a route of the graph: no turn "
                    f"'{src.alias}' -> '{dst.alias}'."
                )
        try:
            return Path(servers)
        except ValueError as exc:
            logger.error("Path %s revisits a server", aliases)
            raise TopologyError(str(exc)) from exc

    # ---- helpers for the strategies ----

    def is_fifo(self, server: Server) -> bool:
        """Effective multiplexing of ``server``: FIFO when configured so or when
        a single flow crosses it."""
        return self.config.configured_fifo(server) or len(self.graph.flows(server)) == 1

    def leftover(self, server: Server, cross: ArrivalCurve) -> ServiceCurve:
        """Left-over service of ``server`` under its effective multiplexing."""
        if self.is_fifo(server):
            return self.curves.leftover_fifo(server.service_curve, cross)
        return self.curves.leftover_arbitrary(server.service_curve, cross)

    def source_curves(self, ctx: TraversalContext) -> Tuple[ArrivalCurve, ...]:
        """Arrival curves of the flow of interest at the first server of the path."""
        if ctx.path.source == ctx.flow.path.source:
            return (ctx.flow.arrival_curve,)
        return ctx.bounder.compute_arrival_bounds(ctx.path.source, [ctx.flow])

    # ---- last result ----

    @property
    def delay_bound(self) -> Optional[Num]:
        return self.result.delay_bound if self.result is not None else None

    @property
    def backlog_bound(self) -> Optional[Num]:
        return self.result.backlog_bound if self.result is not None else None

    def server_delay_bound_map(self) -> Mapping[Server, FrozenSet[Num]]:
        """Per-server delay candidates of the last successful run (empty before)."""
        if self.result is None:
            return MappingProxyType({})
        return self.result.server_delay_bound_map()

    def server_delay_bound_map_string(self) -> str:
        if self.result is None:
            return "{}"
        return self.result.server_delay_bound_map_string()

    def server_backlog_bound_map(self) -> Mapping[Server, FrozenSet[Num]]:
        """Per-server backlog candidates of the last successful run (empty before)."""
        if self.result is None:
            return MappingProxyType({})
        return self.result.server_backlog_bound_map()

    def server_backlog_bound_map_string(self) -> str:
        if self.result is None:
            return "{}"
        return self.result.server_backlog_bound_map_string()
