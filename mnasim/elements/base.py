from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple
import cmath
import numpy as np

from mnasim.errors import AuxiliaryIndexError, CircuitValidationError

Array = np.ndarray


@dataclass(frozen=True)
class NodeId:
    """
    Handle to a node of a Circuit.

    Ids are handed out sequentially by Circuit.push_node(). Index 0 is the
    ground reference and never appears in the unknown vector.
    """
    index: int

    def __post_init__(self) -> None:
        if self.index < 0:
            raise CircuitValidationError(f"Node index must be non-negative, got {self.index}.")

    @property
    def is_ground(self) -> bool:
        return self.index == 0

    @property
    def row(self) -> int | None:
        """Row/column of this node in the MNA system, None for ground."""
        return None if self.index == 0 else self.index - 1


class Polarity(Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"

    @property
    def sign(self) -> float:
        return -1.0 if self is Polarity.NEGATIVE else 1.0


@dataclass(frozen=True)
class Terminal:
    node: NodeId
    polarity: Polarity = Polarity.NEUTRAL

    @property
    def sign(self) -> float:
        return self.polarity.sign


def stamp_conductance(A: Array, node_a: NodeId, node_b: NodeId, conductance: float) -> None:
    """
    Add a conductance between two nodes to the G block.
    """
    if conductance == 0:
        return
    ia = node_a.row
    ib = node_b.row
    if ia is not None:
        A[ia, ia] += conductance
    if ib is not None:
        A[ib, ib] += conductance
    if ia is not None and ib is not None:
        A[ia, ib] -= conductance
        A[ib, ia] -= conductance


def stamp_injection(z: Array, terminal: Terminal, current: float) -> None:
    """
    Add a current entering the terminal's node, scaled by the terminal sign.
    """
    row = terminal.node.row
    if row is None:
        return
    z[row] += terminal.sign * current


def stamp_branch(
    A: Array,
    z: Array,
    n: int,
    index: int,
    terminals: Iterable[Terminal],
    voltage: float,
    resistance: float = 0.0,
) -> None:
    """
    Stamp a branch-current unknown into the B, C, D blocks and the e vector.

    The auxiliary row encodes s0*v0 + s1*v1 - R*j = V, where j is the current
    entering the positive terminal and leaving through the negative one.
    """
    k = n - 1 + index
    for terminal in terminals:
        row = terminal.node.row
        if row is None:
            continue
        A[row, k] += terminal.sign
        A[k, row] += terminal.sign
    z[k] += voltage
    if resistance:
        A[k, k] -= resistance


def require_positive(name: str, quantity: str, value: float) -> None:
    if not value > 0:
        raise CircuitValidationError(f"{name}: {quantity} must be positive, got {value}.")


def require_non_negative(name: str, quantity: str, value: float) -> None:
    if value < 0:
        raise CircuitValidationError(f"{name}: {quantity} must be non-negative, got {value}.")


def require_finite(name: str, quantity: str, value: complex) -> None:
    if not cmath.isfinite(complex(value)):
        raise CircuitValidationError(f"{name}: {quantity} must be finite, got {value}.")


class Element(ABC):
    """
    Base class for two-terminal devices stamped into the MNA system.

    Subclasses that need a branch-current unknown return True from
    is_extra_variable(); the owning Circuit then assigns them an auxiliary
    index in [0, m).
    """

    index: int | None = None
    # Circuit this element was added to, set by Circuit.add_element.
    owner = None

    def __init__(self, name: str, terminals: Tuple[Terminal, Terminal]) -> None:
        for terminal in terminals:
            if not isinstance(terminal.node, NodeId):
                raise CircuitValidationError(f"{name}: terminals must be connected to NodeId values.")
        self.name = name
        self._terminals = tuple(terminals)

    def __setattr__(self, attr: str, value) -> None:
        # Connections are fixed once the terminals are built.
        if attr in ("n_plus", "n_minus") and "_terminals" in self.__dict__:
            raise AttributeError(f"{self.name}: terminals cannot be reconnected after construction.")
        super().__setattr__(attr, value)

    def terminals(self) -> Tuple[Terminal, ...]:
        return self._terminals

    @abstractmethod
    def stamp(self, A: Array, z: Array, n: int, m: int) -> None:
        """
        Add this element's contribution to A and z.

        A is square of size n-1+m and z has the same length, where n counts
        the nodes including ground and m the auxiliary unknowns. Stamps only
        accumulate, so the order in which elements are stamped is irrelevant.
        """

    def is_extra_variable(self) -> bool:
        return False

    def is_ideal(self) -> bool:
        """True for zero-impedance branches that only MNA can represent."""
        return self.is_extra_variable() and self.resistance() == 0

    def dc_voltage(self) -> float:
        return 0.0

    def dc_current(self) -> float:
        return 0.0

    def ac_voltage(self) -> complex:
        return 0j

    def ac_current(self) -> complex:
        return 0j

    def norton_current(self) -> float:
        """Independent current plus the source-equivalent current V*G."""
        return self.dc_current() + self.dc_voltage() * self.conductance()

    @abstractmethod
    def resistance(self) -> float:
        ...

    def conductance(self) -> float:
        resistance = self.resistance()
        if resistance == 0:
            return 0.0
        return 1.0 / resistance

    @abstractmethod
    def impedance(self, frequency: float) -> complex:
        """Impedance at `frequency`, in hertz."""

    def admittance(self, frequency: float) -> complex:
        impedance = self.impedance(frequency)
        if impedance == 0:
            return 0j
        return 1.0 / impedance

    def _require_index(self, m: int) -> int:
        if self.index is None or not 0 <= self.index < m:
            raise AuxiliaryIndexError(
                f"{self.name}: auxiliary index {self.index} outside [0, {m})."
            )
        return self.index
