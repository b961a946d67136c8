"""
wasmtime adapter tests with a hand-written witness program.

The module below implements the circom export table for ``c <== a * b``
restricted to short-form (31-bit) inputs: signals live in 40-byte slots
at 256 + 40·i, the product is written back in short form.
"""
import pytest

from zkcircom.builder import CircomBuilder, CircomConfig
from zkcircom.config import EngineConfig
from zkcircom.errors import UnknownSignalError, WitnessComputationError
from zkcircom.field import FR
from zkcircom.groth16 import prove_circuit, verify
from zkcircom.witness import WasmSandbox, WitnessCalculator, WitnessHooks

MULTIPLIER_WAT = r"""
(module
  (import "env" "memory" (memory 1))
  (import "runtime" "error" (func $error (param i32 i32 i32 i32 i32 i32)))
  (import "runtime" "log" (func $log (param i32)))
  (import "runtime" "logGetSignal" (func $logGetSignal (param i32 i32)))
  (import "runtime" "logSetSignal" (func $logSetSignal (param i32 i32)))
  (import "runtime" "logStartComponent" (func $logStartComponent (param i32)))
  (import "runtime" "logFinishComponent" (func $logFinishComponent (param i32)))

  (global $sanity (mut i32) (i32.const 0))

  (data (i32.const 0) "\00\04\00\00")
  (data (i32.const 16) "\01\00\00\f0\93\f5\e1\43\91\70\b9\79\48\e8\33\28\5d\58\81\81\b6\45\50\b8\29\a0\31\e1\72\4e\64\30")
  (data (i32.const 64) "Signal not found\00")

  (func $slot (param $i i32) (result i32)
    (i32.add (i32.const 256) (i32.mul (local.get $i) (i32.const 40))))

  (func (export "init") (param $s i32)
    (global.set $sanity (local.get $s))
    (memory.fill (i32.const 256) (i32.const 0) (i32.const 160))
    (i32.store (i32.const 256) (i32.const 1)))

  (func (export "getFrLen") (result i32) (i32.const 40))
  (func (export "getPRawPrime") (result i32) (i32.const 16))
  (func (export "getNVars") (result i32) (i32.const 4))
  (func (export "getWitnessBuffer") (result i32) (i32.const 256))

  (func (export "getPWitness") (param $i i32) (result i32)
    (call $slot (local.get $i)))

  (func (export "getSignalOffset32")
        (param $p i32) (param $c i32) (param $msb i32) (param $lsb i32)
    (if (i32.and (i32.eq (local.get $msb) (i32.const 0xaf63dc4c))
                 (i32.eq (local.get $lsb) (i32.const 0x8601ec8c)))
      (then (i32.store (local.get $p) (i32.const 2)) (return)))
    (if (i32.and (i32.eq (local.get $msb) (i32.const 0xaf63df4c))
                 (i32.eq (local.get $lsb) (i32.const 0x8601f1a5)))
      (then (i32.store (local.get $p) (i32.const 3)) (return)))
    (call $error (i32.const 1) (i32.const 64)
                 (local.get $msb) (local.get $lsb) (i32.const 0) (i32.const 0))
    (unreachable))

  (func (export "setSignal")
        (param $cIdx i32) (param $c i32) (param $sig i32) (param $p i32)
    (memory.copy (call $slot (local.get $sig)) (local.get $p) (i32.const 40))
    (if (global.get $sanity)
      (then (call $logSetSignal (local.get $sig) (local.get $p))))
    (i32.store (call $slot (i32.const 1))
      (i32.mul (i32.load (call $slot (i32.const 2)))
               (i32.load (call $slot (i32.const 3))))))
)
"""


@pytest.fixture
def sandbox():
    return WasmSandbox(MULTIPLIER_WAT, memory_pages=1)


class TestWasmSandbox:
    def test_exports(self, sandbox):
        assert sandbox.get_fr_len() == 40
        assert sandbox.get_n_vars() == 4
        assert sandbox.get_p_raw_prime() == 16

    def test_memory_roundtrip(self, sandbox):
        sandbox.write_memory(2048, b"\x01\x02\x03")
        assert sandbox.read_memory(2048, 3) == b"\x01\x02\x03"

    def test_memory_bounds(self, sandbox):
        with pytest.raises(WitnessComputationError):
            sandbox.read_memory(65536 - 2, 4)

    def test_missing_export(self, sandbox):
        with pytest.raises(WitnessComputationError):
            sandbox._call("getWitness", 0)

    def test_invalid_module(self):
        with pytest.raises(WitnessComputationError):
            WasmSandbox(b"\x00asm\x01\x00\x00\x00garbage", memory_pages=1)


class TestWasmWitness:
    def test_multiplier(self, sandbox):
        wc = WitnessCalculator(sandbox)
        assert wc.calculate_witness({"a": 3, "b": 11}) == [1, 33, 3, 11]

    def test_zero(self, sandbox):
        wc = WitnessCalculator(sandbox)
        assert wc.calculate_witness({"a": 0, "b": 5}) == [1, 0, 0, 5]

    def test_cursor_restored(self, sandbox):
        wc = WitnessCalculator(sandbox)
        before = wc.memory.free_pos()
        wc.calculate_witness({"a": 3, "b": 11})
        assert wc.memory.free_pos() == before == 1024

    def test_unknown_signal(self, sandbox):
        wc = WitnessCalculator(sandbox)
        with pytest.raises(UnknownSignalError):
            wc.calculate_witness({"c": 1})

    def test_set_signal_hook(self, sandbox):
        seen = []
        wc = WitnessCalculator(sandbox, hooks=WitnessHooks(on_set_signal=lambda s, v: seen.append((s, v))))
        wc.calculate_witness({"a": 3, "b": 11})
        assert seen == [(2, 3), (3, 11)]


class TestBuilder:
    @pytest.fixture
    def cfg(self, multiplier_r1cs_bytes):
        return CircomConfig.from_bytes(
            MULTIPLIER_WAT, multiplier_r1cs_bytes, config=EngineConfig(memory_pages=1)
        )

    def test_build(self, cfg):
        builder = CircomBuilder(cfg)
        builder.push_input("a", 3)
        builder.push_input("b", 11)
        circuit = builder.build()
        assert circuit.full_assignment == (FR(1), FR(33), FR(3), FR(11))
        assert circuit.public_inputs == [FR(33)]
        assert circuit.is_satisfied()

    def test_setup_has_no_witness(self, cfg):
        circuit = CircomBuilder(cfg).setup()
        assert not circuit.has_witness
        assert circuit.r1cs.n_wires == 4

    def test_prove_built_circuit(self, cfg, multiplier_pk):
        builder = CircomBuilder(cfg)
        builder.push_input("a", 3)
        builder.push_input("b", 11)
        circuit = builder.build()
        proof = prove_circuit(multiplier_pk, circuit)
        assert verify(multiplier_pk.verifying_key, proof, circuit.public_inputs)
