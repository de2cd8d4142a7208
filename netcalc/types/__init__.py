"""Shared enums for NetCalc."""

from netcalc.types.base import ArrivalBoundMethod, Multiplexing, MuxDiscipline

__all__ = ["ArrivalBoundMethod", "Multiplexing", "MuxDiscipline"]
