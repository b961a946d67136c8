"""
Circuit builder
===============

Convenience wrapper around the witness calculator and the assembler.

Example usage:
    >>> cfg = CircomConfig.from_bytes(wasm_bytes, r1cs_bytes)
    >>> builder = CircomBuilder(cfg)
    >>> builder.push_input("a", 3)
    >>> builder.push_input("b", 11)
    >>> empty = builder.setup()       # for generate_proving_key
    >>> circuit = builder.build()     # witness computed and assembled
"""

from collections import OrderedDict

from zkcircom.circuit import CircomCircuit, assemble
from zkcircom.config import BN128, EngineConfig
from zkcircom.r1cs import parse_r1cs
from zkcircom.witness import WasmSandbox, WitnessCalculator


class CircomConfig:
    """Constraint system + witness calculator of one circuit."""

    def __init__(self, r1cs, calculator, sanity_check=False):
        self.r1cs = r1cs
        self.calculator = calculator
        self.sanity_check = sanity_check

    @classmethod
    def from_bytes(cls, wasm_bytes, r1cs_bytes, curve=BN128, config=None, hooks=None):
        config = config or EngineConfig.from_env()
        sandbox = WasmSandbox(wasm_bytes, memory_pages=config.memory_pages)
        calculator = WitnessCalculator(sandbox, curve=curve, hooks=hooks, config=config)
        return cls(parse_r1cs(r1cs_bytes, curve=curve), calculator, config.sanity_check)


class CircomBuilder:
    def __init__(self, cfg):
        self.cfg = cfg
        self.inputs = OrderedDict()

    def push_input(self, name, value):
        """Append ``value`` to the input ``name``; repeated pushes build an array."""
        self.inputs.setdefault(name, []).append(value)

    def setup(self):
        return CircomCircuit(self.cfg.r1cs)

    def build(self):
        witness = self.cfg.calculator.calculate_witness(self.inputs, self.cfg.sanity_check)
        return assemble(self.cfg.r1cs, witness)
