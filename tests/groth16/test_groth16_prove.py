import pytest

from zkcircom.errors import EncodingError, LengthMismatchError
from zkcircom.field import FR, CURVE_ORDER, is_on_g1, is_on_g2
from zkcircom.groth16 import Proof, prove, verify
from zkcircom.groth16.proving import calculate_h, evaluate_constraints
from zkcircom.groth16.verifying import prepare_inputs
from zkcircom.zkey import parse_zkey

from conftest import PROVER_R, PROVER_S


@pytest.fixture(scope="module")
def proof(multiplier_pk):
    return prove(multiplier_pk, [1, 33, 3, 11], r=PROVER_R, s=PROVER_S)


class TestProve:
    def test_points_on_curve(self, proof):
        assert is_on_g1(proof.a)
        assert is_on_g2(proof.b)
        assert is_on_g1(proof.c)

    def test_deterministic_with_fixed_blinding(self, multiplier_pk, proof):
        again = prove(multiplier_pk, [FR(1), FR(33), FR(3), FR(11)], r=PROVER_R, s=PROVER_S)
        assert again == proof

    def test_random_blinding(self, multiplier_pk, proof):
        other = prove(multiplier_pk, [1, 33, 3, 11])
        assert other != proof
        assert verify(multiplier_pk.verifying_key, other, [33])

    def test_length_mismatch(self, multiplier_pk):
        with pytest.raises(LengthMismatchError):
            prove(multiplier_pk, [1, 33, 3])

    def test_constraint_rows(self, multiplier_pk):
        witness = [FR(1), FR(33), FR(3), FR(11)]
        a_t, b_t, c_t = evaluate_constraints(multiplier_pk, witness)
        # row 0: a·b, rows 1-2: public bindings, row 3: padding
        assert a_t == [FR(3), FR(1), FR(33), FR(0)]
        assert b_t == [FR(11), FR(0), FR(0), FR(0)]
        assert c_t == [FR(33), FR(0), FR(0), FR(0)]

    def test_h_length(self, multiplier_pk):
        h = calculate_h(multiplier_pk, [FR(1), FR(33), FR(3), FR(11)])
        assert len(h) == multiplier_pk.domain_size


class TestVerify:
    def test_valid(self, multiplier_pk, proof):
        assert verify(multiplier_pk.verifying_key, proof, [33])

    def test_field_element_inputs(self, multiplier_pk, proof):
        assert verify(multiplier_pk.verifying_key, proof, [FR(33)])

    def test_wrong_public_input(self, multiplier_pk, proof):
        assert not verify(multiplier_pk.verifying_key, proof, [34])

    def test_zero_output(self, multiplier_pk):
        proof = prove(multiplier_pk, [1, 0, 0, 5], r=PROVER_R, s=PROVER_S)
        assert verify(multiplier_pk.verifying_key, proof, [0])

    def test_unsatisfied_witness(self, multiplier_pk):
        proof = prove(multiplier_pk, [1, 34, 3, 11], r=PROVER_R, s=PROVER_S)
        assert not verify(multiplier_pk.verifying_key, proof, [34])

    def test_tampered_proof(self, multiplier_pk, proof):
        forged = Proof(a=proof.a, b=proof.b, c=proof.a)
        assert not verify(multiplier_pk.verifying_key, forged, [33])

    def test_unreduced_public_input(self, multiplier_pk, proof):
        with pytest.raises(EncodingError):
            verify(multiplier_pk.verifying_key, proof, [33 + CURVE_ORDER])
        with pytest.raises(EncodingError):
            verify(multiplier_pk.verifying_key, proof, [-1])

    def test_input_count(self, multiplier_pk, proof):
        with pytest.raises(LengthMismatchError):
            verify(multiplier_pk.verifying_key, proof, [])
        with pytest.raises(LengthMismatchError):
            prepare_inputs(multiplier_pk.verifying_key, [33, 1])


def test_prove_with_parsed_key(multiplier_zkey_bytes):
    pk = parse_zkey(multiplier_zkey_bytes)
    proof = prove(pk, [1, 77, 7, 11])
    assert verify(pk.verifying_key, proof, [77])
