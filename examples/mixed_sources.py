"""
DC operating point example (mixed sources).

Circuit:
    v1 -> (2 Ω || 4 Ω) -> ground
    V1 (10 V) from v1 (-) to v2 (+)
    v2 -> 6 Ω -> ground, v2 -> 2 Ω -> v3
    I1 (3 A) driven into v3 from ground

The script solves the circuit with the MNA solver and with the plain nodal
solver (giving V1 a small series resistance), then reports node voltages,
branch currents and the power balance.
"""

import sys
from pathlib import Path

project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from mnasim import Circuit, DCCurrentSource, DCVoltageSource, Resistor
from mnasim.solver import dc_nodal, operating_point


def build(series_resistance: float = 0.0) -> Circuit:
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


def main() -> None:
    circuit = build()
    op = operating_point(circuit)

    for node, voltage in op.node_voltages().items():
        print(f"V(node {node.index}) = {voltage:.3f} V")

    for element in circuit.elements():
        current = op.branch_current(element.name)
        power = op.branch_power(element.name)
        print(f"{element.name}: I = {current:.3f} A, P = {power:.3f} W")

    total = sum(op.branch_power(e.name) for e in circuit.elements())
    print(f"Sum of absorbed power: {total:.6f} W")

    nodal = dc_nodal(build(series_resistance=1e-6))
    print("Nodal solver voltages:", ", ".join(f"{v:.3f}" for v in nodal))


if __name__ == "__main__":
    main()
