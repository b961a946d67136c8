from zkcircom.witness.calculator import WitnessCalculator, WitnessHooks, flatten
from zkcircom.witness.fnv import fnv
from zkcircom.witness.memory import SandboxMemory
from zkcircom.witness.sandbox import Sandbox, WasmSandbox

__all__ = [
    "WitnessCalculator",
    "WitnessHooks",
    "flatten",
    "fnv",
    "SandboxMemory",
    "Sandbox",
    "WasmSandbox",
]
