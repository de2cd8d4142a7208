"""Configuration classes for NetCalc analyses."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, FrozenSet, Iterable, Optional, Union

from netcalc.exceptions import ConfigurationError
from netcalc.numbers.factory import NumBackend
from netcalc.types.base import ArrivalBoundMethod, Multiplexing, MuxDiscipline

if TYPE_CHECKING:
    from netcalc.model.network import Server


def _default_methods() -> FrozenSet[ArrivalBoundMethod]:
    return frozenset(ArrivalBoundMethod)


@dataclass(frozen=True)
class AnalysisConfig:
    """Settings shared by every analysis run.

    Attributes:
        multiplexing: How the multiplexing of each server is decided.
        arrival_bound_methods: Techniques whose arrival bounds are all
            computed; the analyses keep the tightest resulting bound.
        num_backend: Expected numeric representation. When set, an analysis
            refuses a graph built with another representation.
    """

    multiplexing: MuxDiscipline = MuxDiscipline.SERVER_LOCAL
    arrival_bound_methods: FrozenSet[ArrivalBoundMethod] = field(
        default_factory=_default_methods
    )
    num_backend: Optional[NumBackend] = None

    def __post_init__(self) -> None:
        """Normalize string inputs and validate the method set.

        Raises:
            ConfigurationError: If a value cannot be interpreted or no
                arrival bound method is selected.
        """
        try:
            if isinstance(self.multiplexing, str):
                object.__setattr__(
                    self, "multiplexing", MuxDiscipline.from_string(self.multiplexing)
                )
            methods = self.arrival_bound_methods
            if isinstance(methods, (str, ArrivalBoundMethod)):
                methods = [methods]
            object.__setattr__(
                self,
                "arrival_bound_methods",
                frozenset(
                    ArrivalBoundMethod.from_string(m) if isinstance(m, str) else m
                    for m in methods
                ),
            )
            if isinstance(self.num_backend, str):
                object.__setattr__(
                    self, "num_backend", NumBackend.from_string(self.num_backend)
                )
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        if not isinstance(self.multiplexing, MuxDiscipline):
            raise ConfigurationError(f"Invalid multiplexing: {self.multiplexing!r}")
        if not self.arrival_bound_methods:
            raise ConfigurationError("At least one arrival bound method is required")

    def configured_fifo(self, server: "Server") -> bool:
        """Return True if the configuration alone makes ``server`` FIFO.

        The single-flow rule is applied by the analyses on top of this.
        """
        if self.multiplexing == MuxDiscipline.GLOBAL_FIFO:
            return True
        if self.multiplexing == MuxDiscipline.SERVER_LOCAL:
            return server.multiplexing == Multiplexing.FIFO
        return False

    def with_multiplexing(self, multiplexing: Union[MuxDiscipline, str]) -> "AnalysisConfig":
        """Return a copy with another multiplexing discipline."""
        return replace(self, multiplexing=multiplexing)

    def with_methods(
        self, methods: Iterable[Union[ArrivalBoundMethod, str]]
    ) -> "AnalysisConfig":
        """Return a copy with another set of arrival bound methods."""
        return replace(self, arrival_bound_methods=frozenset(methods))


# Default configuration instance
DEFAULT_CONFIG = AnalysisConfig()
