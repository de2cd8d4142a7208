"""Exception types raised by NetCalc.

Errors derive from the builtin exception a caller would already expect
(``ValueError`` for bad input, ``OverflowError`` for capacity limits), so
code that catches the builtin keeps working.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from netcalc.results.bounds import PartialTrace


class ParseError(ValueError):
    """A numeric literal could not be parsed."""


class TopologyError(ValueError):
    """The server graph or a flow path is inconsistent."""


class ConfigurationError(ValueError):
    """An analysis was configured in a way it cannot honour."""


class NumOverflowError(OverflowError):
    """A bounded numeric representation exceeded its range."""


class AnalysisError(RuntimeError):
    """A traversal aborted before every server of the path was processed.

    Attributes:
        partial: Diagnostics recorded for the servers processed before the
            failure. ``partial.complete`` is always False; the trace carries
            no final delay or backlog bound.
    """

    def __init__(self, message: str, partial: Optional[PartialTrace] = None):
        super().__init__(message)
        self.partial = partial
