from .graph import CircuitGraph, Edge, Vertex  # noqa: F401
