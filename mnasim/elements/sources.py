from __future__ import annotations
from dataclasses import dataclass

from .base import (
    Array,
    Element,
    NodeId,
    Polarity,
    Terminal,
    require_finite,
    require_non_negative,
    stamp_branch,
    stamp_conductance,
    stamp_injection,
)


@dataclass
class DCVoltageSource(Element):
    """
    Independent DC voltage source, V(n_plus) - V(n_minus) = voltage.

    The branch current reported by the solver is the current entering
    n_plus from the external circuit. A small series resistance may be given
    to keep the matrix regular when several ideal branches form a loop; it
    also makes the source usable by the nodal solver.
    """
    name: str
    n_plus: NodeId
    n_minus: NodeId
    voltage: float
    series_resistance_ohms: float = 0.0
    index: int | None = None

    def __post_init__(self) -> None:
        require_finite(self.name, "voltage", self.voltage)
        require_non_negative(self.name, "series resistance", self.series_resistance_ohms)
        Element.__init__(
            self,
            self.name,
            (Terminal(self.n_plus, Polarity.POSITIVE), Terminal(self.n_minus, Polarity.NEGATIVE)),
        )

    def is_extra_variable(self) -> bool:
        return True

    def stamp(self, A: Array, z: Array, n: int, m: int) -> None:
        k = self._require_index(m)
        stamp_branch(A, z, n, k, self.terminals(), self.dc_voltage(), self.series_resistance_ohms)

    def dc_voltage(self) -> float:
        return self.voltage

    def resistance(self) -> float:
        return self.series_resistance_ohms

    def impedance(self, frequency: float) -> complex:
        return complex(self.series_resistance_ohms, 0.0)


@dataclass
class DCCurrentSource(Element):
    """
    Independent DC current source.

    The current leaves the source through n_plus into the attached node and
    returns through n_minus.
    """
    name: str
    n_plus: NodeId
    n_minus: NodeId
    current: float
    parallel_resistance_ohms: float = 0.0

    def __post_init__(self) -> None:
        require_finite(self.name, "current", self.current)
        require_non_negative(self.name, "parallel resistance", self.parallel_resistance_ohms)
        Element.__init__(
            self,
            self.name,
            (Terminal(self.n_plus, Polarity.POSITIVE), Terminal(self.n_minus, Polarity.NEGATIVE)),
        )

    def stamp(self, A: Array, z: Array, n: int, m: int) -> None:
        plus, minus = self.terminals()
        stamp_conductance(A, plus.node, minus.node, self.conductance())
        for terminal in self.terminals():
            stamp_injection(z, terminal, self.norton_current())

    def dc_current(self) -> float:
        return self.current

    def resistance(self) -> float:
        return self.parallel_resistance_ohms

    def impedance(self, frequency: float) -> complex:
        return complex(self.parallel_resistance_ohms, 0.0)


@dataclass
class ACVoltageSource(Element):
    """
    Sinusoidal voltage source described by its phasor.

    It takes no part in the DC operating point; the phasor and the source
    impedance are only reported through the frequency-domain queries.
    """
    name: str
    n_plus: NodeId
    n_minus: NodeId
    voltage: complex
    source_impedance: complex = 0j

    def __post_init__(self) -> None:
        require_finite(self.name, "voltage", self.voltage)
        require_finite(self.name, "source impedance", self.source_impedance)
        Element.__init__(
            self,
            self.name,
            (Terminal(self.n_plus, Polarity.POSITIVE), Terminal(self.n_minus, Polarity.NEGATIVE)),
        )

    def stamp(self, A: Array, z: Array, n: int, m: int) -> None:
        return None

    def ac_voltage(self) -> complex:
        return complex(self.voltage)

    def resistance(self) -> float:
        return 0.0

    def impedance(self, frequency: float) -> complex:
        return complex(self.source_impedance)
