"""
Witness program sandbox
=======================

The export table a circom (1.x ABI) witness program offers the host, and
a concrete adapter running the WebAssembly module on ``wasmtime``.

**Exports** (called by the host):

    init(sanity_check)
    getSignalOffset32(p_sig_offset, component, hash_msb, hash_lsb)
    setSignal(c_idx, component, signal, p_val)
    getPWitness(index) -> ptr
    getFrLen() -> bytes per field slot
    getPRawPrime() -> ptr to the prime limbs
    getNVars() -> witness length
    getWitnessBuffer() -> ptr to the binary witness

**Imports** (called by the program): ``env.memory`` and the ``runtime``
functions ``error``, ``log``, ``logGetSignal``, ``logSetSignal``,
``logStartComponent``, ``logFinishComponent``. These are forwarded to a
bound *host* object (see :meth:`Sandbox.bind`).
"""

import abc
import logging

import wasmtime

from zkcircom.errors import WitnessComputationError

logger = logging.getLogger(__name__)

I32 = 0xFFFFFFFF


class Sandbox(abc.ABC):
    """Export table of a witness program plus raw memory access."""

    host = None

    def bind(self, host):
        """Route runtime imports to ``host``.

        ``host`` implements ``runtime_error(code, pstr, a, b, c, d)``,
        ``runtime_log(p)``, ``runtime_log_get_signal(signal, p)``,
        ``runtime_log_set_signal(signal, p)``,
        ``runtime_log_start_component(c)`` and
        ``runtime_log_finish_component(c)``.
        """
        self.host = host

    @abc.abstractmethod
    def init(self, sanity_check): ...

    @abc.abstractmethod
    def get_signal_offset32(self, p_sig_offset, component, hash_msb, hash_lsb): ...

    @abc.abstractmethod
    def set_signal(self, c_idx, component, signal, p_val): ...

    @abc.abstractmethod
    def get_p_witness(self, index): ...

    @abc.abstractmethod
    def get_fr_len(self): ...

    @abc.abstractmethod
    def get_p_raw_prime(self): ...

    @abc.abstractmethod
    def get_n_vars(self): ...

    @abc.abstractmethod
    def get_witness_buffer(self): ...

    @abc.abstractmethod
    def read_memory(self, ptr, length): ...

    @abc.abstractmethod
    def write_memory(self, ptr, data): ...

    # ── runtime imports ──

    def _error(self, code, pstr, a, b, c, d):
        if self.host is not None:
            self.host.runtime_error(code, pstr, a, b, c, d)
        raise WitnessComputationError(code, operands=(a, b, c, d))

    def _log(self, p):
        if self.host is not None:
            self.host.runtime_log(p)

    def _log_get_signal(self, signal, p):
        if self.host is not None:
            self.host.runtime_log_get_signal(signal, p)

    def _log_set_signal(self, signal, p):
        if self.host is not None:
            self.host.runtime_log_set_signal(signal, p)

    def _log_start_component(self, c):
        if self.host is not None:
            self.host.runtime_log_start_component(c)

    def _log_finish_component(self, c):
        if self.host is not None:
            self.host.runtime_log_finish_component(c)


class WasmSandbox(Sandbox):
    """Circom witness program instantiated on wasmtime.

    Args:
        module_bytes: the ``.wasm`` (or ``.wat``) produced by circom
        memory_pages: initial size of the imported memory, 64 KiB pages

    Raises:
        WitnessComputationError: the module does not compile or link
    """

    def __init__(self, module_bytes, memory_pages=2000):
        self._pending = None
        self._engine = wasmtime.Engine()
        self._store = wasmtime.Store(self._engine)
        try:
            module = wasmtime.Module(self._engine, module_bytes)
        except wasmtime.WasmtimeError as e:
            raise WitnessComputationError(-1, f"invalid witness program: {e}") from e

        self._memory = wasmtime.Memory(
            self._store, wasmtime.MemoryType(wasmtime.Limits(memory_pages, None))
        )

        linker = wasmtime.Linker(self._engine)
        linker.define(self._store, "env", "memory", self._memory)
        i32 = wasmtime.ValType.i32()
        runtime = {
            "error": ([i32] * 6, self._error),
            "log": ([i32], self._log),
            "logGetSignal": ([i32, i32], self._log_get_signal),
            "logSetSignal": ([i32, i32], self._log_set_signal),
            "logStartComponent": ([i32], self._log_start_component),
            "logFinishComponent": ([i32], self._log_finish_component),
        }
        for name, (params, func) in runtime.items():
            linker.define_func("runtime", name, wasmtime.FuncType(params, []), self._guard(func))

        try:
            instance = linker.instantiate(self._store, module)
        except (wasmtime.WasmtimeError, wasmtime.Trap) as e:
            raise WitnessComputationError(-1, f"cannot instantiate witness program: {e}") from e
        self._exports = instance.exports(self._store)
        logger.debug("instantiated witness program with %d memory pages", memory_pages)

    def _guard(self, func):
        # remember host exceptions so they surface instead of the wasm trap
        def callback(*args):
            try:
                func(*args)
            except Exception as e:
                self._pending = e
                raise
        return callback

    def _call(self, name, *args):
        try:
            func = self._exports[name]
        except KeyError:
            raise WitnessComputationError(-1, f"witness program does not export {name!r}") from None
        self._pending = None
        try:
            result = func(self._store, *args)
        except (wasmtime.Trap, wasmtime.WasmtimeError) as e:
            pending, self._pending = self._pending, None
            if pending is not None:
                raise pending from e
            raise WitnessComputationError(-1, f"{name} trapped: {e}") from e
        except WitnessComputationError:
            self._pending = None
            raise
        return None if result is None else result & I32

    def init(self, sanity_check):
        self._call("init", 1 if sanity_check else 0)

    def get_signal_offset32(self, p_sig_offset, component, hash_msb, hash_lsb):
        self._call("getSignalOffset32", p_sig_offset, component, _i32(hash_msb), _i32(hash_lsb))

    def set_signal(self, c_idx, component, signal, p_val):
        self._call("setSignal", c_idx, component, signal, p_val)

    def get_p_witness(self, index):
        return self._call("getPWitness", index)

    def get_fr_len(self):
        return self._call("getFrLen")

    def get_p_raw_prime(self):
        return self._call("getPRawPrime")

    def get_n_vars(self):
        return self._call("getNVars")

    def get_witness_buffer(self):
        return self._call("getWitnessBuffer")

    def read_memory(self, ptr, length):
        self._check_bounds(ptr, length)
        return bytes(self._memory.read(self._store, ptr, ptr + length))

    def write_memory(self, ptr, data):
        self._check_bounds(ptr, len(data))
        self._memory.write(self._store, bytes(data), ptr)

    def _check_bounds(self, ptr, length):
        size = self._memory.data_len(self._store)
        if ptr < 0 or ptr + length > size:
            raise WitnessComputationError(
                -1,
                f"memory access [{ptr}, {ptr + length}) outside {size} bytes",
                data={"ptr": ptr, "length": length},
            )


def _i32(value):
    """Reinterpret an unsigned 32-bit value as a wasm i32 argument."""
    value &= I32
    return value - (1 << 32) if value & 0x80000000 else value
