"""
DC operating point analysis.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Tuple
import logging
import warnings

import numpy as np
from scipy.linalg import LinAlgError, LinAlgWarning, lu_factor, lu_solve

from mnasim.circuit import Circuit
from mnasim.elements.base import Array, Element, NodeId
from mnasim.elements.passive import Capacitor
from mnasim.errors import DegenerateCircuitError, SingularSystemError
from .mna import MnaSystem, assemble

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DCOptions:
    """
    Configuration for the DC solvers.

    Attributes:
        cond_threshold: Largest accepted 2-norm condition number of the
            system matrix; above it the system is reported as singular.
        open_circuit_margin: Required ratio between the smallest ordinary
            conductance and a capacitor's open-circuit leakage.
        check_open_circuit: Log a warning when a capacitor leakage violates
            open_circuit_margin.
    """
    cond_threshold: float = 1e14
    open_circuit_margin: float = 1e3
    check_open_circuit: bool = True


def solve_dense(A: Array, z: Array, options: DCOptions) -> Array:
    """
    Solve A x = z with a dense LU decomposition.

    Raises:
        SingularSystemError: if A is singular, too ill-conditioned, or the
            solution is not finite.
    """
    try:
        cond = float(np.linalg.cond(A))
    except LinAlgError as exc:
        raise SingularSystemError("Condition number of the circuit matrix cannot be computed.") from exc
    if not np.isfinite(cond) or cond > options.cond_threshold:
        raise SingularSystemError(
            f"Circuit matrix is singular or ill-conditioned (cond={cond:.3g}, "
            f"threshold={options.cond_threshold:.3g}). Check for floating nodes "
            "or conflicting ideal sources."
        )
    with warnings.catch_warnings():
        warnings.simplefilter("error", LinAlgWarning)
        try:
            x = lu_solve(lu_factor(A), z)
        except (LinAlgError, LinAlgWarning) as exc:
            raise SingularSystemError("Circuit matrix is singular.") from exc
    if not np.all(np.isfinite(x)):
        raise SingularSystemError("Circuit solution is not finite.")
    return x


def check_open_circuits(circuit: Circuit, options: DCOptions) -> None:
    """
    Warn when a capacitor's DC leakage is not negligible next to the other
    conductances of the circuit.
    """
    elements = circuit.elements()
    others = [
        e.conductance()
        for e in elements
        if not isinstance(e, Capacitor) and e.conductance() > 0
    ]
    if not others:
        return
    g_min = min(others)
    for element in elements:
        if not isinstance(element, Capacitor):
            continue
        if element.conductance() * options.open_circuit_margin > g_min:
            logger.warning(
                "Capacitor '%s' open-circuit resistance %.3g ohm is not negligible "
                "next to the smallest circuit conductance %.3g S.",
                element.name,
                element.open_resistance_ohms,
                g_min,
            )


def _run(circuit: Circuit, options: DCOptions | None) -> Tuple[Array, MnaSystem]:
    options = options or DCOptions()
    n = circuit.node_count()
    if n < 2:
        raise DegenerateCircuitError(
            f"At least one non-ground node is required, circuit has {n} node(s)."
        )
    circuit.validate_aux_indices()
    if options.check_open_circuit:
        check_open_circuits(circuit, options)
    system = assemble(circuit)
    x = solve_dense(system.A, system.z, options)
    logger.debug("Solved DC operating point with %d unknowns.", system.size)
    return x, system


def dc_operating_point(circuit: Circuit, options: DCOptions | None = None) -> Array:
    """
    Solve the DC operating point of `circuit`.

    Returns:
        Vector of length n-1+m: voltages of nodes 1..n-1, followed by the
        branch currents of the elements with an auxiliary index, ordered by
        that index. A branch current is the current entering the element's
        positive terminal from the circuit.

    Raises:
        DegenerateCircuitError: the circuit has no non-ground node.
        AuxiliaryIndexError: auxiliary indices are duplicated or gapped.
        SingularSystemError: the system cannot be solved reliably.
    """
    x, _ = _run(circuit, options)
    return x


@dataclass
class OperatingPoint:
    """
    DC solution of a circuit, addressed by node and element name.
    """
    vector: Array
    system: MnaSystem
    elements: Dict[str, Element]

    @property
    def node_count(self) -> int:
        return self.system.n

    @property
    def aux_count(self) -> int:
        return self.system.m

    def node_voltage(self, node: NodeId) -> float:
        if node.is_ground:
            return 0.0
        if node.index >= self.system.n:
            raise KeyError(f"Unknown node {node.index}.")
        return float(self.vector[node.row])

    def node_voltages(self) -> Dict[NodeId, float]:
        return {NodeId(k): self.node_voltage(NodeId(k)) for k in range(self.system.n)}

    def branch_currents(self) -> Array:
        return self.vector[self.system.n - 1 :]

    def branch_voltage(self, element_name: str) -> float:
        t0, t1 = self._element(element_name).terminals()
        return self.node_voltage(t0.node) - self.node_voltage(t1.node)

    def branch_current(self, element_name: str) -> float:
        """
        Current through the element, entering at its first terminal.

        For sources this is the current entering the positive terminal, so a
        source delivering power reports a negative current.
        """
        element = self._element(element_name)
        if element.is_extra_variable():
            return float(self.vector[self.system.n - 1 + element.index])
        first = element.terminals()[0]
        v = self.branch_voltage(element_name)
        return v * element.conductance() - first.sign * element.norton_current()

    def branch_power(self, element_name: str) -> float:
        """Power absorbed by the element (negative when it delivers power)."""
        return self.branch_voltage(element_name) * self.branch_current(element_name)

    def kcl_residuals(self) -> Array:
        """
        Net current leaving each non-ground node minus the independent
        injections. Zero, within rounding, for a valid solution.
        """
        rows = self.system.n - 1
        return self.system.A[:rows] @ self.vector - self.system.z[:rows]

    def _element(self, name: str) -> Element:
        if name not in self.elements:
            raise KeyError(f"Component '{name}' not present in the circuit.")
        return self.elements[name]


def operating_point(circuit: Circuit, options: DCOptions | None = None) -> OperatingPoint:
    """
    Solve the DC operating point and wrap it for named access.
    """
    x, system = _run(circuit, options)
    return OperatingPoint(
        vector=x,
        system=system,
        elements={e.name: e for e in circuit.elements()},
    )
