"""
Plain nodal analysis on the graph projection of a circuit.

No branch-current unknowns are introduced: every edge must be expressible as
a conductance plus a source-equivalent current, so ideal voltage sources and
inductors need a nonzero series resistance here.
"""

from __future__ import annotations
import logging

import numpy as np

from mnasim.circuit import Circuit
from mnasim.elements.base import Array
from mnasim.errors import CircuitValidationError, DegenerateCircuitError
from mnasim.network.graph import CircuitGraph
from .dc_op import DCOptions, solve_dense

logger = logging.getLogger(__name__)


def dc_nodal(circuit: Circuit | CircuitGraph, options: DCOptions | None = None) -> Array:
    """
    Solve the node voltages of a circuit without auxiliary unknowns.

    Each non-ground vertex sums, over its incident edges, the edge
    conductance on the diagonal, minus the conductance towards a non-ground
    neighbour, and s * (I + V * G) on the right-hand side, where s is the
    sign of the edge's terminal on that vertex. The current-source
    convention is the same as for the MNA solver.

    Returns:
        Voltages of the non-ground nodes, in node order.

    Raises:
        CircuitValidationError: an edge is an ideal (zero-impedance) branch.
        DegenerateCircuitError: there is no non-ground node.
        SingularSystemError: the conductance matrix cannot be solved.
    """
    options = options or DCOptions()
    graph = circuit if isinstance(circuit, CircuitGraph) else CircuitGraph.from_circuit(circuit)

    for edge in graph.edges:
        if edge.element.is_ideal():
            raise CircuitValidationError(
                f"Element '{edge.element.name}' is an ideal branch; give it a series "
                "resistance or use the MNA solver."
            )

    vertices = graph.non_ground()
    size = len(vertices)
    if size == 0:
        raise DegenerateCircuitError("At least one non-ground node is required.")
    rows = {v.node: i for i, v in enumerate(vertices)}

    G = np.zeros((size, size), dtype=float)
    currents = np.zeros(size, dtype=float)

    for vertex in vertices:
        r = rows[vertex.node]
        for edge, terminal in graph.incident(vertex.node):
            element = edge.element
            g = element.conductance()
            currents[r] += terminal.sign * element.norton_current()
            G[r, r] += g
            neighbour = edge.other(terminal).node
            if neighbour in rows:
                G[r, rows[neighbour]] -= g

    logger.debug("Assembled nodal system of size %d from %d edges.", size, len(graph.edges))
    return solve_dense(G, currents, options)
