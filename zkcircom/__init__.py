"""
zkcircom
========

circom/snarkjs artifacts on a py_ecc Groth16 backend:

    .r1cs ─► parse_r1cs ─┐
    .wasm ─► WitnessCalculator ─► assemble ─► prove ─► ethereum / serializers
    .zkey ─► parse_zkey ─────────────────────┘
"""

from zkcircom.builder import CircomBuilder, CircomConfig
from zkcircom.circuit import CircomCircuit, assemble
from zkcircom.config import BN128, CurveConfig, EngineConfig
from zkcircom.errors import (
    CurveMismatchError,
    EncodingError,
    FormatError,
    LengthMismatchError,
    TruncatedError,
    UnknownSignalError,
    WireIndexOutOfRangeError,
    WitnessComputationError,
    ZkCircomError,
)
from zkcircom.groth16 import Proof, generate_proving_key, prove, prove_circuit, verify
from zkcircom.r1cs import R1CS, parse_r1cs, write_r1cs
from zkcircom.symbols import SymbolTable, parse_symbols
from zkcircom.witness import WasmSandbox, WitnessCalculator, WitnessHooks
from zkcircom.zkey import ProvingKey, VerifyingKey, parse_zkey, write_zkey

__version__ = "0.1.0"
