"""
Witness calculator
==================

Drives a circom witness program: feeds named inputs, lets the program
propagate every signal, and reads back the full witness vector.

**Protocol** (one ``calculate_witness`` call):

  1. remember the allocation cursor; ``init(sanity_check)``
  2. allocate one offset slot and one field slot
  3. for every named input:
       (msb, lsb) = fnv1a_64(name)
       getSignalOffset32(p_offset, 0, msb, lsb) → base offset
       for each flattened value i: write it to the field slot,
       setSignal(0, 0, base + i, p_fr)
  4. read getNVars() field slots through getPWitness(i)
  5. restore the allocation cursor (on success or failure)

Example usage:
    >>> wc = WitnessCalculator(WasmSandbox(open("multiplier.wasm", "rb").read()))
    >>> wc.calculate_witness({"a": 3, "b": 11})
    [1, 33, 3, 11]
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from zkcircom.codec import FieldCodec, int_from_le
from zkcircom.config import BN128, EngineConfig
from zkcircom.errors import CurveMismatchError, UnknownSignalError, WitnessComputationError
from zkcircom.field import FR
from zkcircom.witness.fnv import fnv
from zkcircom.witness.memory import SandboxMemory

logger = logging.getLogger(__name__)

ERROR_ASSERT_FAILURE = 7


@dataclass
class WitnessHooks:
    """Optional observers of the witness program. Values are field integers."""

    on_get_signal: Optional[Callable[[int, int], None]] = None
    on_set_signal: Optional[Callable[[int, int], None]] = None
    on_start_component: Optional[Callable[[int], None]] = None
    on_finish_component: Optional[Callable[[int], None]] = None
    on_log: Optional[Callable[[int], None]] = None

    @property
    def enabled(self):
        return any(
            h is not None
            for h in (
                self.on_get_signal,
                self.on_set_signal,
                self.on_start_component,
                self.on_finish_component,
                self.on_log,
            )
        )


def _to_int(value):
    if isinstance(value, str):
        value = value.strip()
        return int(value, 16) if value.lower().startswith(("0x", "-0x")) else int(value)
    return int(value)


def flatten(values):
    """Row-major flattening of a scalar or nested list of scalars."""
    if isinstance(values, (list, tuple)):
        out = []
        for v in values:
            out.extend(flatten(v))
        return out
    return [_to_int(values)]


class WitnessCalculator:
    """Computes witnesses with one sandboxed circom program.

    Not safe for concurrent use: every call mutates the sandbox memory.

    Args:
        sandbox: a :class:`~zkcircom.witness.sandbox.Sandbox`
        curve: the field the program must be compiled for
        hooks: optional :class:`WitnessHooks`
        config: :class:`~zkcircom.config.EngineConfig` (sanity check default)

    Raises:
        CurveMismatchError: the program's prime is not ``curve.r``
    """

    def __init__(self, sandbox, curve=BN128, hooks=None, config=None):
        self.sandbox = sandbox
        self.curve = curve
        self.hooks = hooks or WitnessHooks()
        self.config = config or EngineConfig()

        self.n32 = (sandbox.get_fr_len() >> 2) - 2
        if self.n32 <= 0:
            raise WitnessComputationError(-1, f"invalid field slot length {sandbox.get_fr_len()}")
        prime = int_from_le(sandbox.read_memory(sandbox.get_p_raw_prime(), self.n32 * 4))
        if prime != curve.r:
            raise CurveMismatchError(
                f"witness program prime 0x{prime:x} is not the {curve.name} scalar field",
                data={"prime": hex(prime), "curve": curve.name},
            )
        self.prime = prime
        self.codec = FieldCodec(prime, self.n32)
        self.n64 = self.codec.n64
        self.memory = SandboxMemory(sandbox, self.codec)
        self.n_vars = sandbox.get_n_vars()
        sandbox.bind(self)
        logger.debug("witness program: n32=%d n64=%d n_vars=%d", self.n32, self.n64, self.n_vars)

    # ─────────────────────────────────────────────────────────────────
    # Witness computation
    # ─────────────────────────────────────────────────────────────────

    def _run(self, inputs, sanity_check):
        sanity = sanity_check or self.config.sanity_check or self.hooks.enabled
        self.sandbox.init(sanity)

        p_sig_offset = self.memory.alloc_u32()
        p_fr = self.memory.alloc_fr()

        for name, values in inputs.items():
            msb, lsb = fnv(name)
            try:
                self.sandbox.get_signal_offset32(p_sig_offset, 0, msb, lsb)
            except WitnessComputationError as e:
                raise UnknownSignalError(name, data={"hash": f"{msb:08x}{lsb:08x}"}) from e
            sig_offset = self.memory.read_u32(p_sig_offset)
            flat = flatten(values)
            logger.debug("input %s: offset %d, %d values", name, sig_offset, len(flat))
            for i, value in enumerate(flat):
                self.memory.write_fr(p_fr, value % self.prime)
                self.sandbox.set_signal(0, 0, sig_offset + i, p_fr)

    def calculate_witness(self, inputs, sanity_check=False):
        """Witness vector for ``inputs`` as canonical integers.

        Args:
            inputs: mapping of signal name → scalar or nested list
            sanity_check: ask the program to verify its own constraints

        Raises:
            UnknownSignalError, WitnessComputationError
        """
        old_free_pos = self.memory.free_pos()
        try:
            self._run(inputs, sanity_check)
            n_vars = self.sandbox.get_n_vars()
            witness = [self.memory.read_fr(self.sandbox.get_p_witness(i)) for i in range(n_vars)]
        finally:
            self.memory.set_free_pos(old_free_pos)
        logger.debug("computed witness of %d signals", len(witness))
        return witness

    def calculate_witness_element(self, inputs, sanity_check=False):
        return [FR(w) for w in self.calculate_witness(inputs, sanity_check)]

    def calculate_bin_witness(self, inputs, sanity_check=False):
        """Raw witness buffer: ``n_vars`` elements of ``n64 * 8`` bytes each."""
        old_free_pos = self.memory.free_pos()
        try:
            self._run(inputs, sanity_check)
            ptr = self.sandbox.get_witness_buffer()
            length = self.sandbox.get_n_vars() * self.n64 * 8
            return self.sandbox.read_memory(ptr, length)
        finally:
            self.memory.set_free_pos(old_free_pos)

    # ─────────────────────────────────────────────────────────────────
    # Runtime imports
    # ─────────────────────────────────────────────────────────────────

    def runtime_error(self, code, pstr, a, b, c, d):
        message = self.memory.read_cstr(pstr) if pstr else ""
        if code == ERROR_ASSERT_FAILURE:
            operands = (self.memory.read_fr(b), self.memory.read_fr(c))
            message = f"{message} {operands[0]} != {operands[1]}".strip()
        else:
            operands = (a, b, c, d)
            message = f"{message} {a} {b} {c} {d}".strip()
        logger.debug("witness program error %d: %s", code, message)
        raise WitnessComputationError(code, message, operands)

    def runtime_log(self, p):
        if self.hooks.on_log is not None:
            self.hooks.on_log(self.memory.read_fr(p))

    def runtime_log_get_signal(self, signal, p):
        if self.hooks.on_get_signal is not None:
            self.hooks.on_get_signal(signal, self.memory.read_fr(p))

    def runtime_log_set_signal(self, signal, p):
        if self.hooks.on_set_signal is not None:
            self.hooks.on_set_signal(signal, self.memory.read_fr(p))

    def runtime_log_start_component(self, c):
        if self.hooks.on_start_component is not None:
            self.hooks.on_start_component(c)

    def runtime_log_finish_component(self, c):
        if self.hooks.on_finish_component is not None:
            self.hooks.on_finish_component(c)
