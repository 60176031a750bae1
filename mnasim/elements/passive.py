from __future__ import annotations
from dataclasses import dataclass
import math

from mnasim.utils import angular_frequency
from .base import (
    Array,
    Element,
    NodeId,
    Polarity,
    Terminal,
    require_non_negative,
    require_positive,
    stamp_branch,
    stamp_conductance,
)

# Leakage used to model a capacitor as an open circuit at DC. Large enough to
# be negligible next to ordinary circuit conductances, small enough to keep
# the matrix well conditioned in float64.
DEFAULT_OPEN_RESISTANCE = 1e9


@dataclass
class Resistor(Element):
    name: str
    n_plus: NodeId
    n_minus: NodeId
    resistance_ohms: float

    def __post_init__(self) -> None:
        require_positive(self.name, "resistance", self.resistance_ohms)
        Element.__init__(
            self,
            self.name,
            (Terminal(self.n_plus, Polarity.NEUTRAL), Terminal(self.n_minus, Polarity.NEUTRAL)),
        )

    def stamp(self, A: Array, z: Array, n: int, m: int) -> None:
        plus, minus = self.terminals()
        stamp_conductance(A, plus.node, minus.node, self.conductance())

    def resistance(self) -> float:
        return self.resistance_ohms

    def impedance(self, frequency: float) -> complex:
        """R + j0, independent of frequency."""
        return complex(self.resistance_ohms, 0.0)


@dataclass
class Capacitor(Element):
    """
    Ideal capacitor.

    At DC it is an open circuit, stamped as a very large resistance
    (`open_resistance_ohms`) so that a node reached only through capacitors
    still has a path to ground.
    """
    name: str
    n_plus: NodeId
    n_minus: NodeId
    capacitance_f: float
    open_resistance_ohms: float = DEFAULT_OPEN_RESISTANCE

    def __post_init__(self) -> None:
        require_positive(self.name, "capacitance", self.capacitance_f)
        require_positive(self.name, "open-circuit resistance", self.open_resistance_ohms)
        Element.__init__(
            self,
            self.name,
            (Terminal(self.n_plus, Polarity.NEUTRAL), Terminal(self.n_minus, Polarity.NEUTRAL)),
        )

    def stamp(self, A: Array, z: Array, n: int, m: int) -> None:
        plus, minus = self.terminals()
        stamp_conductance(A, plus.node, minus.node, self.conductance())

    def resistance(self) -> float:
        return self.open_resistance_ohms

    def impedance(self, frequency: float) -> complex:
        """0 - j/(ωC); unbounded (-j·inf) at DC."""
        omega = angular_frequency(frequency)
        if omega == 0:
            return complex(0.0, -math.inf)
        return complex(0.0, -1.0 / (omega * self.capacitance_f))

    def admittance(self, frequency: float) -> complex:
        return complex(0.0, angular_frequency(frequency) * self.capacitance_f)


@dataclass
class Inductor(Element):
    """
    Inductor with optional series resistance.

    At DC it is a short circuit: stamped as a 0 V source with its own
    branch-current unknown, so it needs an auxiliary index.
    """
    name: str
    n_plus: NodeId
    n_minus: NodeId
    inductance_h: float
    series_resistance_ohms: float = 0.0
    index: int | None = None

    def __post_init__(self) -> None:
        require_positive(self.name, "inductance", self.inductance_h)
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

    def resistance(self) -> float:
        return self.series_resistance_ohms

    def impedance(self, frequency: float) -> complex:
        """R_series + jωL."""
        omega = angular_frequency(frequency)
        return complex(self.series_resistance_ohms, omega * self.inductance_h)
