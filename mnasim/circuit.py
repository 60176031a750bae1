from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from mnasim.elements.base import Element, NodeId
from mnasim.errors import AuxiliaryIndexError, CircuitValidationError

GROUND = NodeId(0)


@dataclass
class Circuit:
    """
    Node registry plus the ordered list of elements connecting the nodes.

    Nodes are created with push_node(); the first one is ground. Elements that
    need a branch-current unknown receive their auxiliary index here, in the
    order they are added, so indices are always distinct and span [0, m).
    """

    _nodes: List[NodeId] = field(default_factory=list, init=False, repr=False)
    _elements: List[Element] = field(default_factory=list, init=False, repr=False)
    _by_name: Dict[str, Element] = field(default_factory=dict, init=False, repr=False)
    _aux_count: int = field(default=0, init=False, repr=False)

    @property
    def ground(self) -> NodeId:
        return GROUND

    def push_node(self) -> NodeId:
        node = NodeId(len(self._nodes))
        self._nodes.append(node)
        return node

    def add_element(self, element: Element) -> None:
        if element.owner is not None:
            raise CircuitValidationError(f"Element '{element.name}' already belongs to a circuit.")
        if element.name in self._by_name:
            raise CircuitValidationError(f"Element '{element.name}' already exists.")
        for terminal in element.terminals():
            if not self.has_node(terminal.node):
                raise CircuitValidationError(
                    f"Element '{element.name}' references unknown node {terminal.node.index}."
                )
        if element.is_extra_variable():
            self._assign_index(element)
        elif element.index is not None:
            raise AuxiliaryIndexError(
                f"Element '{element.name}' has no branch-current unknown but carries index {element.index}."
            )
        self._elements.append(element)
        self._by_name[element.name] = element
        element.owner = self

    def _assign_index(self, element: Element) -> None:
        expected = self._aux_count
        if element.index is None:
            element.index = expected
        elif element.index != expected:
            raise AuxiliaryIndexError(
                f"Element '{element.name}' carries auxiliary index {element.index}, "
                f"next free index is {expected}."
            )
        self._aux_count += 1

    def has_node(self, node: NodeId) -> bool:
        return 0 <= node.index < len(self._nodes)

    def node_count(self) -> int:
        return len(self._nodes)

    def nodes(self) -> Tuple[NodeId, ...]:
        return tuple(self._nodes)

    def elements(self) -> Tuple[Element, ...]:
        return tuple(self._elements)

    def element(self, name: str) -> Element:
        if name not in self._by_name:
            raise KeyError(f"Component '{name}' not present in the circuit.")
        return self._by_name[name]

    def aux_count(self) -> int:
        return sum(1 for e in self._elements if e.is_extra_variable())

    def validate_aux_indices(self) -> None:
        """
        Check that auxiliary indices are distinct and span [0, m) without gaps.
        """
        m = self.aux_count()
        seen: Dict[int, str] = {}
        for element in self._elements:
            if not element.is_extra_variable():
                continue
            k = element.index
            if k is None or not 0 <= k < m:
                raise AuxiliaryIndexError(f"Element '{element.name}': auxiliary index {k} outside [0, {m}).")
            if k in seen:
                raise AuxiliaryIndexError(
                    f"Elements '{seen[k]}' and '{element.name}' share auxiliary index {k}."
                )
            seen[k] = element.name
