"""Base enums shared by the model and the analyses."""

from __future__ import annotations

from enum import IntEnum
from typing import Type, TypeVar

_E = TypeVar("_E", bound=IntEnum)


def _parse_enum(cls: Type[_E], value: str, label: str) -> _E:
    try:
        return cls[value.strip().upper()]
    except KeyError:
        valid = ", ".join(e.name for e in cls)
        raise ValueError(
            f"Invalid {label} '{value}'. Valid values are: {valid}"
        ) from None


class Multiplexing(IntEnum):
    """Ordering a single server applies among the flows it serves."""

    #: First-in first-out across all flows of the server.
    FIFO = 1
    #: No assumption about the order among flows.
    ARBITRARY = 2

    @classmethod
    def from_string(cls, value: str) -> "Multiplexing":
        """Parse a case-insensitive name (``"fifo"``, ``"ARBITRARY"``).

        Raises:
            ValueError: If the string doesn't match any member.
        """
        return _parse_enum(cls, value, "multiplexing")


class MuxDiscipline(IntEnum):
    """How an analysis decides the multiplexing of each server."""

    #: Every server is treated as FIFO.
    GLOBAL_FIFO = 1
    #: Every server is treated as arbitrary multiplexing.
    GLOBAL_ARBITRARY = 2
    #: Each server's own `Multiplexing` attribute applies.
    SERVER_LOCAL = 3

    @classmethod
    def from_string(cls, value: str) -> "MuxDiscipline":
        """Parse a case-insensitive name (``"server_local"``).

        Raises:
            ValueError: If the string doesn't match any member.
        """
        return _parse_enum(cls, value, "multiplexing discipline")


class ArrivalBoundMethod(IntEnum):
    """Techniques to bound the arrivals of a flow aggregate at a server."""

    #: Output bound computed hop by hop from the source.
    PBOO_PER_HOP = 1
    #: Left-over curves of a shared upstream segment concatenated first,
    #: so the aggregate pays its burst only once on that segment.
    PBOO_CONCATENATION = 2

    @classmethod
    def from_string(cls, value: str) -> "ArrivalBoundMethod":
        """Parse a case-insensitive name (``"pboo_per_hop"``).

        Raises:
            ValueError: If the string doesn't match any member.
        """
        return _parse_enum(cls, value, "arrival bound method")
