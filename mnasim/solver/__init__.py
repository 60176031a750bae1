"""
DC solvers: MNA assembly, operating point and the plain nodal variant.
"""

from .mna import MnaSystem, assemble  # noqa: F401
from .dc_op import (  # noqa: F401
    DCOptions,
    OperatingPoint,
    dc_operating_point,
    operating_point,
    solve_dense,
)
from .nodal import dc_nodal  # noqa: F401

__all__ = [
    "MnaSystem",
    "assemble",
    "DCOptions",
    "OperatingPoint",
    "dc_operating_point",
    "operating_point",
    "solve_dense",
    "dc_nodal",
]
