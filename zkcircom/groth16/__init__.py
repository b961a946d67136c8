from zkcircom.groth16.proving import Proof, prove, prove_circuit
from zkcircom.groth16.setup import ToxicWaste, generate_proving_key
from zkcircom.groth16.verifying import verify

__all__ = [
    "Proof",
    "prove",
    "prove_circuit",
    "ToxicWaste",
    "generate_proving_key",
    "verify",
]
