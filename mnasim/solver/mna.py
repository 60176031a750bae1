"""
Modified Nodal Analysis assembly.

For n nodes (ground included) and m branch-current unknowns the assembled
system has the block form

    [ G  B ] [v]   [i]
    [ C  D ] [j] = [e]

with G of size (n-1)x(n-1), v the non-ground node voltages and j the branch
currents ordered by auxiliary index.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence
import logging

import numpy as np

from mnasim.circuit import Circuit
from mnasim.elements.base import Array

logger = logging.getLogger(__name__)


@dataclass
class MnaSystem:
    """
    Assembled MNA matrix A and right-hand side z.

    Attributes:
        A: System matrix, shape (n-1+m, n-1+m).
        z: Right-hand side, length n-1+m.
        n: Number of nodes including ground.
        m: Number of branch-current unknowns.
    """
    A: Array
    z: Array
    n: int
    m: int

    @property
    def size(self) -> int:
        return self.n - 1 + self.m

    @property
    def G(self) -> Array:
        return self.A[: self.n - 1, : self.n - 1]

    @property
    def B(self) -> Array:
        return self.A[: self.n - 1, self.n - 1 :]

    @property
    def C(self) -> Array:
        return self.A[self.n - 1 :, : self.n - 1]

    @property
    def D(self) -> Array:
        return self.A[self.n - 1 :, self.n - 1 :]

    @property
    def i(self) -> Array:
        return self.z[: self.n - 1]

    @property
    def e(self) -> Array:
        return self.z[self.n - 1 :]


def assemble(circuit: Circuit, order: Sequence[int] | None = None) -> MnaSystem:
    """
    Stamp every element of `circuit` into a freshly allocated system.

    Args:
        circuit: Circuit to assemble. It is only read.
        order: Optional permutation of element positions giving the stamping
            order. Stamps accumulate, so any order yields the same system up
            to floating-point summation order.

    Returns:
        The assembled MnaSystem.
    """
    elements = circuit.elements()
    if order is not None:
        if sorted(order) != list(range(len(elements))):
            raise ValueError("order must be a permutation of the element positions.")
        elements = tuple(elements[pos] for pos in order)

    n = circuit.node_count()
    m = circuit.aux_count()
    size = n - 1 + m
    A = np.zeros((size, size), dtype=float)
    z = np.zeros(size, dtype=float)

    for element in elements:
        element.stamp(A, z, n, m)

    logger.debug("Assembled MNA system: %d nodes, %d branch unknowns, size %d.", n, m, size)
    return MnaSystem(A=A, z=z, n=n, m=m)
