import pytest

from zkcircom.circuit import CircomCircuit, assemble, evaluate_lc
from zkcircom.errors import LengthMismatchError
from zkcircom.field import FR, CURVE_ORDER
from zkcircom.r1cs import parse_r1cs

from test_r1cs import SAMPLE


class TestAssemble:
    def test_public_inputs(self, multiplier_r1cs):
        circuit = assemble(multiplier_r1cs, [1, 33, 3, 11])
        assert circuit.public_inputs == [FR(33)]

    def test_zero_output(self, multiplier_r1cs):
        circuit = assemble(multiplier_r1cs, [1, 0, 0, 5])
        assert circuit.public_inputs == [FR(0)]
        assert circuit.is_satisfied()

    def test_values_converted(self, multiplier_r1cs):
        circuit = assemble(multiplier_r1cs, [1, -1, 1, -1])
        assert circuit.full_assignment == (FR(1), FR(CURVE_ORDER - 1), FR(1), FR(CURVE_ORDER - 1))

    def test_length_mismatch(self, multiplier_r1cs):
        with pytest.raises(LengthMismatchError):
            assemble(multiplier_r1cs, [1, 33, 3])

    def test_no_validation(self, multiplier_r1cs):
        circuit = assemble(multiplier_r1cs, [1, 34, 3, 11])
        assert not circuit.is_satisfied()
        assert circuit.unsatisfied_constraints() == [0]

    def test_evaluations(self, multiplier_r1cs):
        circuit = assemble(multiplier_r1cs, [1, 33, 3, 11])
        assert circuit.evaluations == [(FR(3), FR(11), FR(33))]

    def test_immutable_witness(self, multiplier_r1cs):
        witness = [1, 33, 3, 11]
        circuit = assemble(multiplier_r1cs, witness)
        witness[1] = 0
        assert circuit.public_inputs == [FR(33)]


class TestSampleSystem:
    def test_public_count(self):
        r1cs = parse_r1cs(SAMPLE)
        circuit = assemble(r1cs, list(range(1, 8)))
        # 1 output + 2 public inputs, wire 0 excluded
        assert circuit.public_inputs == [FR(2), FR(3), FR(4)]
        assert len(circuit.evaluations) == 3


class TestWithoutWitness:
    def test_requires_witness(self, multiplier_r1cs):
        circuit = CircomCircuit(multiplier_r1cs)
        assert not circuit.has_witness
        with pytest.raises(LengthMismatchError):
            circuit.public_inputs


def test_evaluate_lc():
    lc = ((0, FR(2)), (2, FR(3)))
    assert evaluate_lc(lc, [FR(1), FR(0), FR(5)]) == FR(17)
    assert evaluate_lc((), [FR(1)]) == FR(0)
