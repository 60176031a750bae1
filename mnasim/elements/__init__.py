from .base import Element, NodeId, Polarity, Terminal  # noqa: F401
from .passive import DEFAULT_OPEN_RESISTANCE, Resistor, Capacitor, Inductor  # noqa: F401
from .sources import (  # noqa: F401
    ACVoltageSource,
    DCCurrentSource,
    DCVoltageSource,
)
