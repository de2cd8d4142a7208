"""Server graph model."""

from __future__ import annotations

from netcalc.model.network import Flow, Server, ServerGraph
from netcalc.model.path import Path

__all__ = ["Flow", "Path", "Server", "ServerGraph"]
