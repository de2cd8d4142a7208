"""Ordered route of a flow through the server graph.

`Path` is an immutable sequence of servers. The graph validates, when a flow
is added, that every consecutive pair of servers is a turn; a `Path` on its
own only guarantees that no server repeats.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, Any, Iterator, Optional, Tuple, Union, overload

if TYPE_CHECKING:
    from netcalc.model.network import Server


@dataclass(frozen=True)
class Path:
    """Represents the route of a flow.

    Attributes:
        servers: Servers in traversal order.
    """

    servers: Tuple["Server", ...]

    def __post_init__(self) -> None:
        """Freeze the sequence and reject repeated servers.

        Raises:
            ValueError: If a server appears twice.
        """
        object.__setattr__(self, "servers", tuple(self.servers))
        if len(set(self.servers)) != len(self.servers):
            raise ValueError(f"Path visits a server twice: {self}")

    @overload
    def __getitem__(self, idx: int) -> "Server": ...

    @overload
    def __getitem__(self, idx: slice) -> Tuple["Server", ...]: ...

    def __getitem__(self, idx: Union[int, slice]) -> Any:
        """Return the server (or servers) at ``idx``."""
        return self.servers[idx]

    def __iter__(self) -> Iterator["Server"]:
        return iter(self.servers)

    def __len__(self) -> int:
        return len(self.servers)

    def __contains__(self, server: object) -> bool:
        return server in self.servers

    @property
    def source(self) -> "Server":
        """Return the first server of the path."""
        return self.servers[0]

    @property
    def sink(self) -> "Server":
        """Return the last server of the path."""
        return self.servers[-1]

    @cached_property
    def aliases(self) -> Tuple[str, ...]:
        """Return the server aliases in traversal order."""
        return tuple(s.alias for s in self.servers)

    def index(self, server: "Server") -> int:
        """Return the position of ``server``.

        Raises:
            ValueError: If the server is not on the path.
        """
        return self.servers.index(server)

    def predecessor(self, server: "Server") -> Optional["Server"]:
        """Return the server visited right before ``server``, if any."""
        idx = self.index(server)
        return self.servers[idx - 1] if idx > 0 else None

    def subpath(self, start: "Server", end: "Server") -> "Path":
        """Return the inclusive sub-path from ``start`` to ``end``.

        Raises:
            ValueError: If either server is missing or ``end`` precedes ``start``.
        """
        i = self.index(start)
        j = self.index(end)
        if j < i:
            raise ValueError(f"{end.alias} precedes {start.alias} on {self}")
        return Path(self.servers[i : j + 1])

    def __str__(self) -> str:
        return " -> ".join(self.aliases)

    def __repr__(self) -> str:
        return f"Path({list(self.aliases)})"
