"""
DC operating point solver for linear circuits based on Modified Nodal Analysis.
"""

from .circuit import Circuit, GROUND  # noqa: F401
from .elements import (  # noqa: F401
    ACVoltageSource,
    Capacitor,
    DCCurrentSource,
    DCVoltageSource,
    Element,
    Inductor,
    NodeId,
    Polarity,
    Resistor,
    Terminal,
)
from .errors import (  # noqa: F401
    AuxiliaryIndexError,
    CircuitValidationError,
    DegenerateCircuitError,
    RunnerError,
    SingularSystemError,
)
from .solver import DCOptions, OperatingPoint, dc_nodal, dc_operating_point, operating_point  # noqa: F401
from . import utils  # noqa: F401

__all__ = [
    "Circuit",
    "GROUND",
    "NodeId",
    "Polarity",
    "Terminal",
    "Element",
    "Resistor",
    "Capacitor",
    "Inductor",
    "DCVoltageSource",
    "DCCurrentSource",
    "ACVoltageSource",
    "DCOptions",
    "OperatingPoint",
    "dc_operating_point",
    "operating_point",
    "dc_nodal",
    "AuxiliaryIndexError",
    "CircuitValidationError",
    "DegenerateCircuitError",
    "RunnerError",
    "SingularSystemError",
    "utils",
]
