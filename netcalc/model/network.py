"""Server graph: servers, turns and the flows routed over them.

This module provides the model classes (Server, Flow, ServerGraph). Servers
are nodes and turns are edges of a ``networkx.DiGraph``; flows are stored
beside the graph together with an index of the flows crossing each server.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import networkx as nx

from netcalc.curves.algebra import CurveAlgebra
from netcalc.curves.curve import ArrivalCurve, ServiceCurve
from netcalc.exceptions import TopologyError
from netcalc.logging import get_logger
from netcalc.model.path import Path
from netcalc.numbers.factory import NumFactory
from netcalc.types.base import Multiplexing

LOGGER = get_logger(__name__)

ServerRef = Union["Server", str]
FlowRef = Union["Flow", str]


@dataclass(eq=False)
class Server:
    """Represents a queuing point of the network.

    Servers are identified by their alias: two servers with the same alias
    compare equal and hash alike.

    Attributes:
        alias (str): Unique identifier for the server.
        service_curve (ServiceCurve): Guaranteed service.
        multiplexing (Multiplexing): Ordering among the flows it serves.
        attrs (Dict[str, Any]): Additional metadata.
    """

    alias: str
    service_curve: ServiceCurve
    multiplexing: Multiplexing = Multiplexing.ARBITRARY
    attrs: Dict[str, Any] = field(default_factory=dict)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Server):
            return NotImplemented
        return self.alias == other.alias

    def __hash__(self) -> int:
        return hash(("server", self.alias))

    def __str__(self) -> str:
        return self.alias


@dataclass(eq=False)
class Flow:
    """Represents a traffic source routed along a fixed path.

    Attributes:
        alias (str): Unique identifier for the flow.
        arrival_curve (ArrivalCurve): Constraint on the traffic it emits.
        path (Path): Servers crossed, in order.
        attrs (Dict[str, Any]): Additional metadata.
    """

    alias: str
    arrival_curve: ArrivalCurve
    path: Path
    attrs: Dict[str, Any] = field(default_factory=dict)

    @property
    def source(self) -> Server:
        return self.path.source

    @property
    def sink(self) -> Server:
        return self.path.sink

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Flow):
            return NotImplemented
        return self.alias == other.alias

    def __hash__(self) -> int:
        return hash(("flow", self.alias))

    def __str__(self) -> str:
        return self.alias


class ServerGraph:
    """Container for servers, turns and flows.

    Every number stored in the graph comes from one `NumFactory`; analyses
    read the representation from here.

    Args:
        nums: Numeric factory. Defaults to double precision.
        name: Optional label used in logs and reports.

    Example:
        >>> g = ServerGraph()
        >>> s0 = g.add_server("s0", g.curves.rate_latency(20, 20))
        >>> s1 = g.add_server("s1", g.curves.rate_latency(20, 20))
        >>> g.add_turn(s0, s1)
        >>> f = g.add_flow("f0", g.curves.token_bucket(25, 5), [s0, s1])
        >>> [s.alias for s in g.path(f)]
        ['s0', 's1']
    """

    def __init__(self, nums: Optional[NumFactory] = None, name: str = ""):
        self.nums = nums if nums is not None else NumFactory()
        self.curves = CurveAlgebra(self.nums)
        self.name = name
        self._graph: nx.DiGraph = nx.DiGraph()
        self._servers: Dict[str, Server] = {}
        self._flows: Dict[str, Flow] = {}
        self._flows_at: Dict[str, List[Flow]] = {}

    # ---- construction ----

    def add_server(
        self,
        alias: str,
        service_curve: ServiceCurve,
        multiplexing: Union[Multiplexing, str] = Multiplexing.ARBITRARY,
        **attrs: Any,
    ) -> Server:
        """Add a server to the graph.

        Args:
            alias: Unique server alias.
            service_curve: Rate-latency service curve.
            multiplexing: FIFO or arbitrary; strings are parsed.
            **attrs: Free-form metadata kept on the server.

        Returns:
            The new server.

        Raises:
            TopologyError: If the alias is already used.
            TypeError: If the curve was built with another numeric factory.
        """
        if alias in self._servers:
            LOGGER.error("Duplicate server alias: %s", alias)
            raise TopologyError(f"Server '{alias}' already exists in the graph.")
        self._check_service_curve(service_curve)
        if isinstance(multiplexing, str):
            multiplexing = Multiplexing.from_string(multiplexing)
        server = Server(alias, service_curve, multiplexing, dict(attrs))
        self._servers[alias] = server
        self._flows_at[alias] = []
        self._graph.add_node(alias, server=server)
        return server

    def add_turn(self, source: ServerRef, target: ServerRef) -> None:
        """Add a directed turn between two existing servers.

        Raises:
            TopologyError: If a server is unknown, the turn is a self-loop or
                the turn already exists.
        """
        src = self.server(source)
        dst = self.server(target)
        if src == dst:
            LOGGER.error("Self-loop turn at %s", src.alias)
            raise TopologyError(f"Turn from '{src.alias}' to itself is not allowed.")
        if self._graph.has_edge(src.alias, dst.alias):
            LOGGER.error("Duplicate turn: %s -> %s", src.alias, dst.alias)
            raise TopologyError(f"Turn '{src.alias}' -> '{dst.alias}' already exists.")
        self._graph.add_edge(src.alias, dst.alias)

    def add_flow(
        self,
        alias: str,
        arrival_curve: ArrivalCurve,
        path: Union[Path, Sequence[ServerRef]],
        add_turns: bool = False,
        **attrs: Any,
    ) -> Flow:
        """Add a flow routed along ``path``.

        Args:
            alias: Unique flow alias.
            arrival_curve: Token-bucket arrival curve at the source.
            path: Servers (or aliases) in traversal order.
            add_turns: Create the turns the path needs instead of rejecting
                a path that leaves the graph.
            **attrs: Free-form metadata kept on the flow.

        Returns:
            The new flow.

        Raises:
            TopologyError: If the alias is used, the path is empty, repeats a
                server, names an unknown server or misses a turn.
        """
        if alias in self._flows:
            LOGGER.error("Duplicate flow alias: %s", alias)
            raise TopologyError(f"Flow '{alias}' already exists in the graph.")
        self._check_arrival_curve(arrival_curve)
        route = self._resolve_path(path)
        for src, dst in zip(route, route[1:]):
            if self._graph.has_edge(src.alias, dst.alias):
                continue
            if add_turns:
                self._graph.add_edge(src.alias, dst.alias)
                continue
            LOGGER.error(
                "Flow %s uses missing turn %s -> %s", alias, src.alias, dst.alias
            )
            raise TopologyError(
                f"Path of flow '{alias}' uses turn '{src.alias}' -> '{dst.alias}' "
                "which is not part of the graph."
            )
        flow = Flow(alias, arrival_curve, Path(tuple(route)), dict(attrs))
        self._flows[alias] = flow
        for server in route:
            self._flows_at[server.alias].append(flow)
        return flow

    def add_flow_between(
        self,
        alias: str,
        arrival_curve: ArrivalCurve,
        source: ServerRef,
        sink: ServerRef,
        **attrs: Any,
    ) -> Flow:
        """Add a flow routed along a shortest turn sequence from source to sink.

        Raises:
            TopologyError: If no route exists.
        """
        src = self.server(source)
        dst = self.server(sink)
        try:
            aliases = nx.shortest_path(self._graph, src.alias, dst.alias)
        except nx.NetworkXNoPath:
            LOGGER.error("No route from %s to %s for flow %s", src.alias, dst.alias, alias)
            raise TopologyError(
                f"No route from '{src.alias}' to '{dst.alias}' for flow '{alias}'."
            ) from None
        return self.add_flow(alias, arrival_curve, aliases, **attrs)

    # ---- lookup ----

    def server(self, ref: ServerRef) -> Server:
        """Return the registered server for an alias or a server object.

        Raises:
            TopologyError: If the server is not part of the graph.
        """
        alias = ref.alias if isinstance(ref, Server) else ref
        try:
            return self._servers[alias]
        except KeyError:
            LOGGER.error("Unknown server: %s", alias)
            raise TopologyError(f"Server '{alias}' not found in graph.") from None

    def flow(self, ref: FlowRef) -> Flow:
        """Return the registered flow for an alias or a flow object.

        Raises:
            TopologyError: If the flow is not part of the graph.
        """
        alias = ref.alias if isinstance(ref, Flow) else ref
        try:
            return self._flows[alias]
        except KeyError:
            LOGGER.error("Unknown flow: %s", alias)
            raise TopologyError(f"Flow '{alias}' not found in graph.") from None

    @property
    def servers(self) -> Tuple[Server, ...]:
        """All servers in insertion order."""
        return tuple(self._servers.values())

    @property
    def turns(self) -> Tuple[Tuple[Server, Server], ...]:
        return tuple((self._servers[u], self._servers[v]) for u, v in self._graph.edges)

    def flows(self, server: Optional[ServerRef] = None) -> Tuple[Flow, ...]:
        """Return the flows crossing ``server``, or every flow when omitted.

        Flows are returned in insertion order.
        """
        if server is None:
            return tuple(self._flows.values())
        return tuple(self._flows_at[self.server(server).alias])

    def path(self, flow: FlowRef) -> Path:
        return self.flow(flow).path

    def has_turn(self, source: ServerRef, target: ServerRef) -> bool:
        return self._graph.has_edge(self.server(source).alias, self.server(target).alias)

    def predecessors(self, server: ServerRef) -> Tuple[Server, ...]:
        """Servers with a turn into ``server``."""
        alias = self.server(server).alias
        return tuple(self._servers[a] for a in self._graph.predecessors(alias))

    def successors(self, server: ServerRef) -> Tuple[Server, ...]:
        """Servers reachable from ``server`` through one turn."""
        alias = self.server(server).alias
        return tuple(self._servers[a] for a in self._graph.successors(alias))

    def is_feed_forward(self) -> bool:
        """Return True if the turns form no cycle."""
        return nx.is_directed_acyclic_graph(self._graph)

    def topological_order(self) -> Tuple[Server, ...]:
        """Servers ordered so that every turn points forward.

        Raises:
            TopologyError: If the graph is cyclic.
        """
        try:
            return tuple(self._servers[a] for a in nx.topological_sort(self._graph))
        except nx.NetworkXUnfeasible:
            LOGGER.error("Server graph %s is not feed-forward", self.name or "<unnamed>")
            raise TopologyError("Server graph contains a cycle.") from None

    def to_networkx(self) -> nx.DiGraph:
        """Return a copy of the turn graph (nodes keyed by server alias)."""
        return self._graph.copy()

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Server):
            return item.alias in self._servers
        if isinstance(item, Flow):
            return item.alias in self._flows
        return False

    def __len__(self) -> int:
        return len(self._servers)

    # ---- mutation ----

    def set_service_curve(self, server: ServerRef, service_curve: ServiceCurve) -> None:
        """Replace the service curve of ``server``."""
        self._check_service_curve(service_curve)
        self.server(server).service_curve = service_curve

    def set_arrival_curve(self, flow: FlowRef, arrival_curve: ArrivalCurve) -> None:
        """Replace the source arrival curve of ``flow``."""
        self._check_arrival_curve(arrival_curve)
        self.flow(flow).arrival_curve = arrival_curve

    def set_multiplexing(
        self,
        multiplexing: Union[Multiplexing, str],
        servers: Optional[Iterable[ServerRef]] = None,
    ) -> None:
        """Set the multiplexing of ``servers`` (every server when omitted)."""
        if isinstance(multiplexing, str):
            multiplexing = Multiplexing.from_string(multiplexing)
        targets = self.servers if servers is None else [self.server(s) for s in servers]
        for server in targets:
            server.multiplexing = multiplexing

    # ---- internals ----

    def _resolve_path(self, path: Union[Path, Sequence[ServerRef]]) -> List[Server]:
        route = [self.server(s) for s in path]
        if not route:
            LOGGER.error("Empty flow path")
            raise TopologyError("A flow path needs at least one server.")
        if len(set(route)) != len(route):
            LOGGER.error("Flow path repeats a server: %s", [s.alias for s in route])
            raise TopologyError("A flow path must not visit a server twice.")
        return route

    def _check_service_curve(self, curve: ServiceCurve) -> None:
        if not (self.nums.owns(curve.rate) and self.nums.owns(curve.latency)):
            raise TypeError(f"Service curve {curve} was built with another numeric factory")

    def _check_arrival_curve(self, curve: ArrivalCurve) -> None:
        if not (self.nums.owns(curve.burst) and self.nums.owns(curve.rate)):
            raise TypeError(f"Arrival curve {curve} was built with another numeric factory")

    def __repr__(self) -> str:
        return (
            f"ServerGraph(name={self.name!r}, servers={len(self._servers)}, "
            f"flows={len(self._flows)}, backend={self.nums.backend.name})"
        )
