import logging

import numpy as np
import pytest

from mnasim import (
    Capacitor,
    Circuit,
    DCCurrentSource,
    DCOptions,
    DCVoltageSource,
    DegenerateCircuitError,
    Inductor,
    NodeId,
    Resistor,
    SingularSystemError,
    dc_operating_point,
    operating_point,
)


def _assert_kcl(circuit, op, tol=1e-9):
    """Sum of branch currents leaving every non-ground node is zero."""
    for node in circuit.nodes()[1:]:
        total = 0.0
        for element in circuit.elements():
            t0, t1 = element.terminals()
            current = op.branch_current(element.name)
            if t0.node == node:
                total += current
            if t1.node == node:
                total -= current
        assert abs(total) < tol, f"KCL violated at node {node.index}: {total}"


def test_voltage_source_with_resistor():
    circuit = Circuit()
    v0 = circuit.push_node()
    v1 = circuit.push_node()
    circuit.add_element(Resistor("R1", v1, v0, 2.0))
    circuit.add_element(DCVoltageSource("V1", v1, v0, 10.0))

    x = dc_operating_point(circuit)

    assert len(x) == 2
    assert x[0] == pytest.approx(10.0, abs=0.01)
    assert x[1] == pytest.approx(-5.0, abs=0.01)


def test_current_source_with_resistor():
    # The source drives current out of its positive terminal (ground here),
    # so it pulls 10 A out of v1.
    circuit = Circuit()
    v0 = circuit.push_node()
    v1 = circuit.push_node()
    circuit.add_element(Resistor("R1", v1, v0, 2.0))
    circuit.add_element(DCCurrentSource("I1", v0, v1, 10.0))

    x = dc_operating_point(circuit)

    assert len(x) == 1
    assert x[0] == pytest.approx(-20.0, abs=0.01)


def test_current_source_reversed():
    circuit = Circuit()
    v0 = circuit.push_node()
    v1 = circuit.push_node()
    circuit.add_element(Resistor("R1", v1, v0, 2.0))
    circuit.add_element(DCCurrentSource("I1", v1, v0, 10.0))

    assert dc_operating_point(circuit)[0] == pytest.approx(20.0, abs=0.01)


def test_mixed_sources_two_nodes(two_node_circuit):
    x = dc_operating_point(two_node_circuit)

    assert len(x) == 3
    assert np.allclose(x, [8.0, -2.0, -3.5], atol=0.01)


def test_mixed_sources_three_nodes(three_node_circuit):
    x = dc_operating_point(three_node_circuit)

    assert len(x) == 4
    assert np.allclose(x[:3], [1.45, 11.46, 17.46], atol=0.01)


def test_capacitor_blocks_dc():
    circuit = Circuit()
    v0 = circuit.push_node()
    v1 = circuit.push_node()
    v2 = circuit.push_node()
    circuit.add_element(DCVoltageSource("V1", v1, v0, 10.0))
    circuit.add_element(Resistor("R1", v1, v2, 10.0))
    circuit.add_element(Capacitor("C1", v2, v0, 1.0))

    x = dc_operating_point(circuit)

    assert len(x) == 3
    assert x[0] == pytest.approx(10.0, abs=0.01)
    assert x[1] == pytest.approx(10.0, abs=0.01)
    assert x[2] == pytest.approx(0.0, abs=0.01)


def test_inductor_shorts_at_dc():
    circuit = Circuit()
    v0 = circuit.push_node()
    v1 = circuit.push_node()
    v2 = circuit.push_node()
    circuit.add_element(DCVoltageSource("V1", v1, v0, 10.0))
    circuit.add_element(Resistor("R1", v1, v2, 10.0))
    circuit.add_element(Inductor("L1", v2, v0, 1.0))

    x = dc_operating_point(circuit)

    assert len(x) == 4
    assert x[0] == pytest.approx(10.0, abs=0.01)
    assert x[1] == pytest.approx(0.0, abs=0.01)
    assert x[2] == pytest.approx(-1.0, abs=0.01)
    assert x[3] == pytest.approx(1.0, abs=0.01)


def test_voltage_source_series_resistance():
    circuit = Circuit()
    gnd = circuit.push_node()
    v1 = circuit.push_node()
    circuit.add_element(DCVoltageSource("V1", v1, gnd, 10.0, series_resistance_ohms=1.0))
    circuit.add_element(Resistor("R1", v1, gnd, 4.0))

    op = operating_point(circuit)

    assert op.node_voltage(v1) == pytest.approx(8.0)
    assert op.branch_current("V1") == pytest.approx(-2.0)


def test_parallel_resistors_match_equivalent():
    def build(resistors):
        circuit = Circuit()
        gnd = circuit.push_node()
        v1 = circuit.push_node()
        v2 = circuit.push_node()
        v3 = circuit.push_node()
        circuit.add_element(DCVoltageSource("V1", v1, gnd, 10.0))
        circuit.add_element(Resistor("Rs", v1, v2, 1.0))
        for k, value in enumerate(resistors):
            circuit.add_element(Resistor(f"Rp{k}", v2, v3, value))
        circuit.add_element(Resistor("Rl", v3, gnd, 4.0))
        return circuit

    r1, r2 = 3.0, 6.0
    parallel = dc_operating_point(build([r1, r2]))
    single = dc_operating_point(build([r1 * r2 / (r1 + r2)]))

    assert np.allclose(parallel, single, rtol=1e-12, atol=1e-12)


def test_kcl_holds_at_every_node(three_node_circuit, two_node_circuit):
    for circuit in (three_node_circuit, two_node_circuit):
        op = operating_point(circuit)
        _assert_kcl(circuit, op)
        assert np.allclose(op.kcl_residuals(), 0.0, atol=1e-9)


def test_kcl_with_reactive_elements():
    circuit = Circuit()
    gnd = circuit.push_node()
    v1 = circuit.push_node()
    v2 = circuit.push_node()
    v3 = circuit.push_node()
    circuit.add_element(DCVoltageSource("V1", v1, gnd, 5.0))
    circuit.add_element(Resistor("R1", v1, v2, 100.0))
    circuit.add_element(Inductor("L1", v2, v3, 1e-3, series_resistance_ohms=2.0))
    circuit.add_element(Resistor("R2", v3, gnd, 50.0))
    circuit.add_element(Capacitor("C1", v2, gnd, 1e-6))
    circuit.add_element(DCCurrentSource("I1", gnd, v3, 0.01, parallel_resistance_ohms=1e3))

    op = operating_point(circuit)

    _assert_kcl(circuit, op)


def test_power_balance(three_node_circuit):
    op = operating_point(three_node_circuit)
    total = sum(op.branch_power(e.name) for e in three_node_circuit.elements())
    assert total == pytest.approx(0.0, abs=1e-9)
    assert op.branch_power("R1") > 0.0


def test_operating_point_accessors(three_node_circuit):
    op = operating_point(three_node_circuit)
    gnd, v1, v2, v3 = three_node_circuit.nodes()

    assert op.node_count == 4
    assert op.aux_count == 1
    assert op.node_voltage(gnd) == 0.0
    assert op.node_voltage(v3) == pytest.approx(17.4545, abs=1e-3)
    voltages = op.node_voltages()
    assert voltages[gnd] == 0.0
    assert voltages[v2] == pytest.approx(op.vector[1])
    assert op.branch_voltage("V1") == pytest.approx(10.0)
    assert op.branch_current("R4") == pytest.approx(-3.0)
    assert op.branch_current("I1") == pytest.approx(-3.0)
    assert np.allclose(op.branch_currents(), op.vector[3:])
    with pytest.raises(KeyError):
        op.branch_current("missing")


def test_solving_does_not_mutate_circuit(three_node_circuit):
    first = dc_operating_point(three_node_circuit)
    second = dc_operating_point(three_node_circuit)
    assert np.array_equal(first, second)


def test_conflicting_voltage_sources_are_singular():
    circuit = Circuit()
    gnd = circuit.push_node()
    v1 = circuit.push_node()
    circuit.add_element(DCVoltageSource("V1", v1, gnd, 10.0))
    circuit.add_element(DCVoltageSource("V2", v1, gnd, 5.0))
    circuit.add_element(Resistor("R1", v1, gnd, 1.0))

    with pytest.raises(SingularSystemError):
        dc_operating_point(circuit)


def test_loop_of_ideal_inductors_is_singular():
    circuit = Circuit()
    gnd = circuit.push_node()
    v1 = circuit.push_node()
    circuit.add_element(DCCurrentSource("I1", v1, gnd, 1.0))
    circuit.add_element(Inductor("L1", v1, gnd, 1e-3))
    circuit.add_element(Inductor("L2", v1, gnd, 2e-3))

    with pytest.raises(SingularSystemError):
        dc_operating_point(circuit)


def test_series_resistance_breaks_ideal_loop():
    circuit = Circuit()
    gnd = circuit.push_node()
    v1 = circuit.push_node()
    circuit.add_element(DCCurrentSource("I1", v1, gnd, 1.0))
    circuit.add_element(Inductor("L1", v1, gnd, 1e-3, series_resistance_ohms=1.0))
    circuit.add_element(Inductor("L2", v1, gnd, 2e-3, series_resistance_ohms=1.0))

    op = operating_point(circuit)

    assert op.branch_current("L1") == pytest.approx(0.5)
    assert op.branch_current("L2") == pytest.approx(0.5)


def test_floating_node_is_singular():
    circuit = Circuit()
    gnd = circuit.push_node()
    v1 = circuit.push_node()
    v2 = circuit.push_node()
    v3 = circuit.push_node()
    circuit.add_element(Resistor("R1", v1, gnd, 1.0))
    circuit.add_element(Resistor("R2", v2, v3, 1.0))

    with pytest.raises(SingularSystemError):
        dc_operating_point(circuit)


def test_ill_conditioning_threshold_is_configurable():
    circuit = Circuit()
    gnd = circuit.push_node()
    v1 = circuit.push_node()
    v2 = circuit.push_node()
    circuit.add_element(Resistor("R1", v1, gnd, 1.0))
    circuit.add_element(Resistor("R2", v2, gnd, 1e6))

    assert np.allclose(dc_operating_point(circuit), 0.0)
    with pytest.raises(SingularSystemError):
        dc_operating_point(circuit, DCOptions(cond_threshold=1e3))


@pytest.mark.parametrize("n_nodes", [0, 1])
def test_degenerate_circuit(n_nodes):
    circuit = Circuit()
    for _ in range(n_nodes):
        circuit.push_node()

    with pytest.raises(DegenerateCircuitError):
        dc_operating_point(circuit)


def test_leaky_capacitor_logs_warning(caplog):
    circuit = Circuit()
    gnd = circuit.push_node()
    v1 = circuit.push_node()
    circuit.add_element(DCVoltageSource("V1", v1, gnd, 1.0))
    circuit.add_element(Resistor("R1", v1, gnd, 10.0))
    circuit.add_element(Capacitor("C1", v1, gnd, 1e-6, open_resistance_ohms=100.0))

    with caplog.at_level(logging.WARNING, logger="mnasim.solver.dc_op"):
        dc_operating_point(circuit)

    assert "C1" in caplog.text


def test_default_capacitor_does_not_warn(caplog):
    circuit = Circuit()
    gnd = circuit.push_node()
    v1 = circuit.push_node()
    circuit.add_element(DCVoltageSource("V1", v1, gnd, 1.0))
    circuit.add_element(Resistor("R1", v1, gnd, 10.0))
    circuit.add_element(Capacitor("C1", v1, gnd, 1e-6))

    with caplog.at_level(logging.WARNING, logger="mnasim.solver.dc_op"):
        dc_operating_point(circuit)

    assert caplog.records == []


def test_rejected_reconnection_leaves_circuit_solvable():
    circuit = Circuit()
    gnd = circuit.push_node()
    v1 = circuit.push_node()
    resistor = Resistor("R1", v1, gnd, 2.0)
    source = DCCurrentSource("I1", v1, gnd, 1.0, parallel_resistance_ohms=2.0)
    circuit.add_element(resistor)
    circuit.add_element(source)

    with pytest.raises(AttributeError):
        resistor.n_plus = NodeId(5)
    with pytest.raises(AttributeError):
        source.n_minus = NodeId(5)

    x = dc_operating_point(circuit)
    assert x[0] == pytest.approx(1.0)
