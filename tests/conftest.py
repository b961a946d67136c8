import sys
import os
import struct
import pytest

# put the project root on sys.path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from zkcircom.codec import FieldCodec
from zkcircom.field import FR, CURVE_ORDER
from zkcircom.groth16.setup import ToxicWaste, generate_proving_key
from zkcircom.r1cs import R1CS, write_r1cs
from zkcircom.witness.fnv import fnv
from zkcircom.witness.sandbox import Sandbox
from zkcircom.zkey import write_zkey


# ── test constants ──
TOXIC_TAU = 3721
TOXIC_ALPHA = 3926
TOXIC_BETA = 3604
TOXIC_GAMMA = 2971
TOXIC_DELTA = 1357

PROVER_R = 4106
PROVER_S = 4565

# scalar field of BLS12-381, for curve mismatch tests
BLS12_381_R = 0x73EDA753299D7D483339D80809A1D80553BDA402FFFE5BFEFFFFFFFF00000001

ERROR_SIGNAL_NOT_FOUND = 1
ERROR_ASSERT_FAILURE = 7


class FakeSandbox(Sandbox):
    """In-memory witness program for ``c <== a * b``.

    Signals / wires: [one, c, a, b]. Mirrors the circom export table and
    memory conventions (allocation cursor at word 0, prime limbs, field
    slots), so the real calculator protocol runs against it.
    """

    CURSOR_START = 1024
    P_PRIME = 16
    P_MESSAGE = 128
    P_WITNESS = 4096
    P_WITNESS_BUFFER = 8192

    def __init__(self, prime=CURVE_ORDER, n32=8, fail_assert=False, signals=("c", "a", "b")):
        self.memory = bytearray(65536)
        self.prime = prime
        self.n32 = n32
        self.codec = FieldCodec(prime, n32)
        self.fail_assert = fail_assert
        self.offsets = {fnv(name): i + 1 for i, name in enumerate(signals)}
        self.values = {}
        self.sanity = None
        self.init_calls = 0
        self.set_calls = []

        struct.pack_into("<I", self.memory, 0, self.CURSOR_START)
        self.write_memory(self.P_PRIME, prime.to_bytes(n32 * 4, "little"))
        self.write_memory(self.P_MESSAGE, b"Assert Failed\x00")

    # ── memory ──

    def read_memory(self, ptr, length):
        assert 0 <= ptr and ptr + length <= len(self.memory)
        return bytes(self.memory[ptr:ptr + length])

    def write_memory(self, ptr, data):
        assert 0 <= ptr and ptr + len(data) <= len(self.memory)
        self.memory[ptr:ptr + len(data)] = data

    def free_pos(self):
        return struct.unpack_from("<I", self.memory, 0)[0]

    # ── exports ──

    def init(self, sanity_check):
        self.sanity = bool(sanity_check)
        self.init_calls += 1
        self.values = {0: 1}
        self.set_calls = []

    def get_fr_len(self):
        return (self.n32 + 2) * 4

    def get_p_raw_prime(self):
        return self.P_PRIME

    def get_n_vars(self):
        return 4

    def get_signal_offset32(self, p_sig_offset, component, hash_msb, hash_lsb):
        offset = self.offsets.get((hash_msb, hash_lsb))
        if offset is None:
            self._error(ERROR_SIGNAL_NOT_FOUND, 0, hash_msb, hash_lsb, 0, 0)
        struct.pack_into("<I", self.memory, p_sig_offset, offset)

    def set_signal(self, c_idx, component, signal, p_val):
        value = self.codec.decode(self.read_memory(p_val, self.codec.size))
        self.values[signal] = value
        self.set_calls.append((signal, value))
        if self.sanity:
            self._log_set_signal(signal, p_val)
        if 2 in self.values and 3 in self.values and 1 not in self.values:
            self._compute()

    def _compute(self):
        self._log_start_component(0)
        c = (self.values[2] * self.values[3]) % self.prime
        self.values[1] = c
        p_c = self.P_WITNESS + 1 * self.codec.size
        self.write_memory(p_c, self.codec.encode(c))
        if self.fail_assert:
            p_other = self.P_WITNESS + 8 * self.codec.size
            self.write_memory(p_other, self.codec.encode(c + 1))
            self._error(ERROR_ASSERT_FAILURE, self.P_MESSAGE, 0, p_c, p_other, 0)
        if self.sanity:
            self._log_set_signal(1, p_c)
        self._log_finish_component(0)

    def get_p_witness(self, index):
        ptr = self.P_WITNESS + index * self.codec.size
        # alternate slot encodings so both decode paths are exercised
        value = self.values.get(index, 0)
        self.write_memory(ptr, self.codec.encode(value, montgomery=bool(index % 2)))
        return ptr

    def get_witness_buffer(self):
        n8 = self.codec.n64 * 8
        data = b"".join(self.values.get(i, 0).to_bytes(n8, "little") for i in range(4))
        self.write_memory(self.P_WITNESS_BUFFER, data)
        return self.P_WITNESS_BUFFER


@pytest.fixture
def fake_sandbox():
    return FakeSandbox()


@pytest.fixture
def make_sandbox():
    return FakeSandbox


def make_multiplier_r1cs():
    """``c <== a * b`` with wires [one, c, a, b] and c public."""
    constraint = (
        ((2, FR(1)),),
        ((3, FR(1)),),
        ((1, FR(1)),),
    )
    return R1CS(
        field_size=32,
        prime=CURVE_ORDER,
        n_wires=4,
        n_pub_out=1,
        n_pub_in=0,
        n_prv_in=2,
        n_labels=4,
        constraints=(constraint,),
        wire_to_label=(0, 1, 2, 3),
    )


@pytest.fixture(scope="session")
def multiplier_r1cs():
    return make_multiplier_r1cs()


@pytest.fixture(scope="session")
def multiplier_r1cs_bytes(multiplier_r1cs):
    return write_r1cs(multiplier_r1cs)


@pytest.fixture(scope="session")
def toxic():
    return ToxicWaste(
        tau=FR(TOXIC_TAU),
        alpha=FR(TOXIC_ALPHA),
        beta=FR(TOXIC_BETA),
        gamma=FR(TOXIC_GAMMA),
        delta=FR(TOXIC_DELTA),
    )


@pytest.fixture(scope="session")
def multiplier_pk(multiplier_r1cs, toxic):
    return generate_proving_key(multiplier_r1cs, toxic)


@pytest.fixture(scope="session")
def multiplier_zkey_bytes(multiplier_pk):
    return write_zkey(multiplier_pk)
