from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple
import numpy as np

from mnasim.circuit import Circuit
from mnasim.elements.base import Element, NodeId, Terminal


@dataclass(frozen=True)
class Vertex:
    """
    A node of the circuit seen as a graph vertex.

    Attributes:
        node: Node handle in the originating circuit.
        is_ground: Whether this vertex is the reference node.
    """
    node: NodeId
    is_ground: bool = False


@dataclass(frozen=True, eq=False)
class Edge:
    """
    An element seen as an undirected edge between its two terminal nodes.
    """
    element: Element
    ends: Tuple[Terminal, Terminal]

    def other(self, terminal: Terminal) -> Terminal:
        """Return the opposite end of the edge."""
        return self.ends[1] if terminal is self.ends[0] else self.ends[0]


@dataclass
class CircuitGraph:
    """
    Read-only graph projection of a Circuit.

    Vertices are nodes (exactly one flagged as ground), edges are elements.
    Several edges may join the same pair of vertices.

    Attributes:
        vertices: Mapping node index -> Vertex.
        edges: Edges in circuit element order.
    """
    vertices: Dict[int, Vertex] = field(default_factory=dict)
    edges: List[Edge] = field(default_factory=list)

    @classmethod
    def from_circuit(cls, circuit: Circuit) -> CircuitGraph:
        """
        Build the projection of `circuit`. Later changes to the circuit are
        not reflected.
        """
        graph = cls()
        for node in circuit.nodes():
            graph.vertices[node.index] = Vertex(node=node, is_ground=node.is_ground)
        for element in circuit.elements():
            t0, t1 = element.terminals()
            graph.edges.append(Edge(element=element, ends=(t0, t1)))
        return graph

    @property
    def ground(self) -> Vertex:
        for vertex in self.vertices.values():
            if vertex.is_ground:
                return vertex
        raise KeyError("Graph has no ground vertex.")

    def non_ground(self) -> List[Vertex]:
        """Non-ground vertices in node order."""
        return [self.vertices[k] for k in sorted(self.vertices) if not self.vertices[k].is_ground]

    def incident(self, node: NodeId) -> Iterator[Tuple[Edge, Terminal]]:
        """
        Yield every edge touching `node` together with the terminal that sits
        on it. A self-loop is yielded once per end.
        """
        for edge in self.edges:
            for terminal in edge.ends:
                if terminal.node == node:
                    yield edge, terminal

    def degree(self, node: NodeId) -> int:
        return sum(1 for _ in self.incident(node))

    def incidence_matrix(self) -> tuple[np.ndarray, list[NodeId], list[str]]:
        """
        Compute the node-edge incidence matrix.

        - Rows correspond to non-ground nodes, columns to edges.
        - A[i, j] = +1 if edge j leaves node i through its first terminal.
        - A[i, j] = -1 if edge j enters node i through its second terminal.

        Returns:
            Tuple (A, node order, element names in column order).
        """
        nodes = [v.node for v in self.non_ground()]
        rows = {node: i for i, node in enumerate(nodes)}
        names = [edge.element.name for edge in self.edges]
        A = np.zeros((len(nodes), len(self.edges)), dtype=float)
        for j, edge in enumerate(self.edges):
            src, dst = edge.ends
            if src.node in rows:
                A[rows[src.node], j] += 1.0
            if dst.node in rows:
                A[rows[dst.node], j] -= 1.0
        return A, nodes, names
