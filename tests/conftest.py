"""
Shared circuit fixtures for the test suite.
"""

import pytest

from mnasim import Circuit, DCCurrentSource, DCVoltageSource, Resistor


def build_three_node(series_resistance=0.0):
    """
    Three non-ground nodes: 2 Ω and 4 Ω from v1 to ground, a 10 V source
    from v1 (-) to v2 (+), 6 Ω from v2 to ground, 2 Ω from v2 to v3 and a
    3 A source driving current into v3.
    """
    circuit = Circuit()
    gnd = circuit.push_node()
    v1 = circuit.push_node()
    v2 = circuit.push_node()
    v3 = circuit.push_node()
    circuit.add_element(Resistor("R1", v1, gnd, 2.0))
    circuit.add_element(Resistor("R2", v1, gnd, 4.0))
    circuit.add_element(DCVoltageSource("V1", v2, v1, 10.0, series_resistance_ohms=series_resistance))
    circuit.add_element(Resistor("R3", v2, gnd, 6.0))
    circuit.add_element(Resistor("R4", v2, v3, 2.0))
    circuit.add_element(DCCurrentSource("I1", v3, gnd, 3.0))
    return circuit


@pytest.fixture
def three_node_circuit():
    return build_three_node()


@pytest.fixture
def two_node_circuit():
    """10 V source between v1 and v2 with 2 Ω, 4 Ω, 2 Ω resistors and a 3 A source."""
    circuit = Circuit()
    gnd = circuit.push_node()
    v1 = circuit.push_node()
    v2 = circuit.push_node()
    circuit.add_element(DCVoltageSource("V1", v1, v2, 10.0))
    circuit.add_element(Resistor("R1", v1, gnd, 2.0))
    circuit.add_element(Resistor("R2", v1, v2, 4.0))
    circuit.add_element(Resistor("R3", v2, gnd, 2.0))
    circuit.add_element(DCCurrentSource("I1", v1, gnd, 3.0))
    return circuit
