"""Immutable bound results and the accumulator that builds them.

An analysis records its per-server candidates in a `TraceBuilder` while it
walks a path. Only when every server was processed does it freeze the
builder into a result; a traversal that fails freezes it into a
`PartialTrace` instead, which is attached to the raised `AnalysisError` and
never carries final bounds.

Objects expose `to_dict()` that returns JSON-safe primitives and
`to_dataframe()` that returns one row per server and candidate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Set, Tuple, TypeVar

import pandas as pd

from netcalc.curves.curve import ArrivalCurve, ServiceCurve
from netcalc.logging import get_logger
from netcalc.model.network import Flow, Server
from netcalc.model.path import Path
from netcalc.numbers.num import Num

logger = get_logger(__name__)

_T = TypeVar("_T")

#: Column order of `to_dataframe()`.
DATAFRAME_COLUMNS = ["server", "hop", "kind", "candidate", "value"]


def _empty_map() -> Mapping[Server, FrozenSet[Any]]:
    return MappingProxyType({})


def _freeze(source: Mapping[Server, Set[_T]]) -> Mapping[Server, FrozenSet[_T]]:
    return MappingProxyType({k: frozenset(v) for k, v in source.items()})


def num_to_json(value: Num) -> Any:
    """Return a finite value as ``float`` and a special value as its name."""
    return float(value) if value.is_finite() else str(value)


def _sorted_nums(values: Iterable[Num]) -> List[Num]:
    return sorted(values, key=float)


def _sorted_curves(curves: Iterable[Any]) -> List[Any]:
    return sorted(curves, key=str)


def map_string(path: Path, mapping: Mapping[Server, FrozenSet[Any]]) -> str:
    """Render a server map as ``{s0={1.5, 2.0}, s1={...}}`` in path order."""
    parts = []
    for server in path:
        if server not in mapping:
            continue
        values = mapping[server]
        if all(isinstance(v, Num) for v in values):
            items = _sorted_nums(values)
        else:
            items = _sorted_curves(values)
        parts.append(f"{server.alias}={{{', '.join(str(v) for v in items)}}}")
    return "{" + ", ".join(parts) + "}"


@dataclass(frozen=True)
class PartialTrace:
    """Diagnostics of an aborted traversal.

    Attributes:
        flow: Flow of interest.
        path: Path that was being analysed.
        processed: Servers fully processed before the failure.
        server_arrival_curves: Recorded candidate arrival curves.
        server_delay_bounds: Recorded candidate delay bounds.
        server_backlog_bounds: Recorded candidate backlog bounds.
        server_leftover_curves: Recorded left-over service curves.
        complete: Always False.
    """

    flow: Flow
    path: Path
    processed: Tuple[Server, ...]
    server_arrival_curves: Mapping[Server, FrozenSet[ArrivalCurve]] = field(
        default_factory=_empty_map
    )
    server_delay_bounds: Mapping[Server, FrozenSet[Num]] = field(
        default_factory=_empty_map
    )
    server_backlog_bounds: Mapping[Server, FrozenSet[Num]] = field(
        default_factory=_empty_map
    )
    server_leftover_curves: Mapping[Server, FrozenSet[ServiceCurve]] = field(
        default_factory=_empty_map
    )
    complete: bool = field(default=False, init=False)

    def __str__(self) -> str:
        done = ", ".join(s.alias for s in self.processed) or "none"
        return f"PartialTrace(flow={self.flow.alias}, path={self.path}, processed=[{done}])"


@dataclass(frozen=True)
class BoundResult:
    """End-to-end bounds of one flow plus per-server diagnostics.

    Attributes:
        flow: Flow of interest.
        path: Analysed path.
        delay_bound: Final delay bound.
        backlog_bound: Final backlog bound.
        server_arrival_curves: Server -> candidate arrival curves.
        server_delay_bounds: Server -> candidate delay bounds.
        server_backlog_bounds: Server -> candidate backlog bounds.
    """

    flow: Flow
    path: Path
    delay_bound: Num
    backlog_bound: Num
    server_arrival_curves: Mapping[Server, FrozenSet[ArrivalCurve]] = field(
        default_factory=_empty_map
    )
    server_delay_bounds: Mapping[Server, FrozenSet[Num]] = field(
        default_factory=_empty_map
    )
    server_backlog_bounds: Mapping[Server, FrozenSet[Num]] = field(
        default_factory=_empty_map
    )

    #: Short analysis label used in reports.
    analysis = "bound"

    @property
    def complete(self) -> bool:
        return True

    def server_delay_bound_map(self) -> Mapping[Server, FrozenSet[Num]]:
        return self.server_delay_bounds

    def server_delay_bound_map_string(self) -> str:
        return map_string(self.path, self.server_delay_bounds)

    def server_backlog_bound_map(self) -> Mapping[Server, FrozenSet[Num]]:
        return self.server_backlog_bounds

    def server_backlog_bound_map_string(self) -> str:
        return map_string(self.path, self.server_backlog_bounds)

    def server_arrival_curve_map_string(self) -> str:
        return map_string(self.path, self.server_arrival_curves)

    def _server_entries(self, server: Server) -> Dict[str, Any]:
        return {
            "server": server.alias,
            "arrival_curves": [
                {"burst": num_to_json(c.burst), "rate": num_to_json(c.rate)}
                for c in _sorted_curves(self.server_arrival_curves.get(server, ()))
            ],
            "delay_bounds": [
                num_to_json(v) for v in _sorted_nums(self.server_delay_bounds.get(server, ()))
            ],
            "backlog_bounds": [
                num_to_json(v)
                for v in _sorted_nums(self.server_backlog_bounds.get(server, ()))
            ],
        }

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary representation."""
        return {
            "analysis": self.analysis,
            "flow": self.flow.alias,
            "path": list(self.path.aliases),
            "delay_bound": num_to_json(self.delay_bound),
            "backlog_bound": num_to_json(self.backlog_bound),
            "servers": [self._server_entries(s) for s in self.path],
        }

    def _dataframe_rows(self) -> List[Dict[str, Any]]:
        rows: List[Dict[str, Any]] = []
        for hop, server in enumerate(self.path):
            for curve in _sorted_curves(self.server_arrival_curves.get(server, ())):
                rows.append(
                    {
                        "server": server.alias,
                        "hop": hop,
                        "kind": "arrival_curve",
                        "candidate": str(curve),
                        "value": float(curve.burst),
                    }
                )
            for kind, mapping in (
                ("delay_bound", self.server_delay_bounds),
                ("backlog_bound", self.server_backlog_bounds),
            ):
                for value in _sorted_nums(mapping.get(server, ())):
                    rows.append(
                        {
                            "server": server.alias,
                            "hop": hop,
                            "kind": kind,
                            "candidate": str(value),
                            "value": float(value),
                        }
                    )
        return rows

    def to_dataframe(self) -> pd.DataFrame:
        """Return the per-server candidates as a DataFrame.

        Columns are ``server``, ``hop`` (position on the path), ``kind``,
        ``candidate`` (string rendering) and ``value`` (float; the burst for
        arrival curves, the latency for left-over service curves).
        """
        return pd.DataFrame(self._dataframe_rows(), columns=DATAFRAME_COLUMNS)

    def __str__(self) -> str:
        return (
            f"{self.analysis}(flow={self.flow.alias}, delay={self.delay_bound}, "
            f"backlog={self.backlog_bound})"
        )


@dataclass(frozen=True)
class TotalFlowResult(BoundResult):
    """Result of a Total Flow Analysis."""

    analysis = "TFA"


@dataclass(frozen=True)
class _LeftoverResult(BoundResult):
    server_leftover_curves: Mapping[Server, FrozenSet[ServiceCurve]] = field(
        default_factory=_empty_map
    )
    leftover_curves: FrozenSet[ServiceCurve] = frozenset()

    def server_leftover_curve_map_string(self) -> str:
        return map_string(self.path, self.server_leftover_curves)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["leftover_curves"] = [
            {"rate": num_to_json(c.rate), "latency": num_to_json(c.latency)}
            for c in _sorted_curves(self.leftover_curves)
        ]
        return data

    def _dataframe_rows(self) -> List[Dict[str, Any]]:
        rows = super()._dataframe_rows()
        for hop, server in enumerate(self.path):
            for curve in _sorted_curves(self.server_leftover_curves.get(server, ())):
                rows.append(
                    {
                        "server": server.alias,
                        "hop": hop,
                        "kind": "leftover_curve",
                        "candidate": str(curve),
                        "value": float(curve.latency),
                    }
                )
        return rows


@dataclass(frozen=True)
class SeparateFlowResult(_LeftoverResult):
    """Result of a Separate Flow Analysis.

    Attributes:
        server_leftover_curves: Server -> left-over service curves of the
            flow of interest.
        leftover_curves: End-to-end (concatenated) left-over service curves.
    """

    analysis = "SFA"


@dataclass(frozen=True)
class PmooResult(_LeftoverResult):
    """Result of a Pay Multiplexing Only Once analysis.

    Attributes:
        leftover_curves: Tandem left-over service curves, one per cross
            traffic candidate combination.
    """

    analysis = "PMOO"


class TraceBuilder:
    """Mutable accumulator of per-server diagnostics.

    Args:
        flow: Flow of interest.
        path: Path being analysed.
    """

    def __init__(self, flow: Flow, path: Path):
        self.flow = flow
        self.path = path
        self.processed: List[Server] = []
        self.arrival_curves: Dict[Server, Set[ArrivalCurve]] = {}
        self.delay_bounds: Dict[Server, Set[Num]] = {}
        self.backlog_bounds: Dict[Server, Set[Num]] = {}
        self.leftover_curves: Dict[Server, Set[ServiceCurve]] = {}

    def record_arrival_curves(self, server: Server, curves: Iterable[ArrivalCurve]) -> None:
        self.arrival_curves.setdefault(server, set()).update(curves)

    def record_delay_bounds(self, server: Server, values: Iterable[Num]) -> None:
        self.delay_bounds.setdefault(server, set()).update(values)

    def record_backlog_bounds(self, server: Server, values: Iterable[Num]) -> None:
        self.backlog_bounds.setdefault(server, set()).update(values)

    def record_leftover_curves(self, server: Server, curves: Iterable[ServiceCurve]) -> None:
        self.leftover_curves.setdefault(server, set()).update(curves)

    def mark_processed(self, server: Server) -> None:
        self.processed.append(server)

    def partial(self) -> PartialTrace:
        """Freeze what was recorded so far into an incomplete trace."""
        return PartialTrace(
            flow=self.flow,
            path=self.path,
            processed=tuple(self.processed),
            server_arrival_curves=_freeze(self.arrival_curves),
            server_delay_bounds=_freeze(self.delay_bounds),
            server_backlog_bounds=_freeze(self.backlog_bounds),
            server_leftover_curves=_freeze(self.leftover_curves),
        )

    def build_total_flow(self, delay_bound: Num, backlog_bound: Num) -> TotalFlowResult:
        return TotalFlowResult(
            flow=self.flow,
            path=self.path,
            delay_bound=delay_bound,
            backlog_bound=backlog_bound,
            server_arrival_curves=_freeze(self.arrival_curves),
            server_delay_bounds=_freeze(self.delay_bounds),
            server_backlog_bounds=_freeze(self.backlog_bounds),
        )

    def build_separate_flow(
        self,
        delay_bound: Num,
        backlog_bound: Num,
        leftover_curves: Iterable[ServiceCurve],
    ) -> SeparateFlowResult:
        return SeparateFlowResult(
            flow=self.flow,
            path=self.path,
            delay_bound=delay_bound,
            backlog_bound=backlog_bound,
            server_arrival_curves=_freeze(self.arrival_curves),
            server_delay_bounds=_freeze(self.delay_bounds),
            server_backlog_bounds=_freeze(self.backlog_bounds),
            server_leftover_curves=_freeze(self.leftover_curves),
            leftover_curves=frozenset(leftover_curves),
        )

    def build_pmoo(
        self,
        delay_bound: Num,
        backlog_bound: Num,
        leftover_curves: Iterable[ServiceCurve],
    ) -> PmooResult:
        return PmooResult(
            flow=self.flow,
            path=self.path,
            delay_bound=delay_bound,
            backlog_bound=backlog_bound,
            server_arrival_curves=_freeze(self.arrival_curves),
            server_delay_bounds=_freeze(self.delay_bounds),
            server_backlog_bounds=_freeze(self.backlog_bounds),
            server_leftover_curves=_freeze(self.leftover_curves),
            leftover_curves=frozenset(leftover_curves),
        )
