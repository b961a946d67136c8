"""
Field codec
===========

Conversions between raw little-endian representations and canonical
field integers.

**Container scalars** (``.zkey`` / ``.r1cs``):
  Fixed-width little-endian integers, optionally in Montgomery form.
  snarkjs stores curve coordinates as x·R mod q and zkey coefficients as
  v·R² mod r (R = 2^(8·n8)), so decoding divides by R once or twice.

**Sandbox slots** (witness program linear memory):
  A field element occupies ``n32 * 4 + 8`` bytes:

    word0   short value (signed 32-bit, prime-complemented when negative)
    word1   type flags: bit 31 = long form, bit 30 = Montgomery form
    limbs   n32 little-endian 32-bit words, least significant first

  Encoding picks one of three forms by magnitude:

    v < 2^31                 short positive   word0 = v
    v >= prime - 2^31        short negative   word0 = v - prime + 2^32
    otherwise                long normal      word1 = 0x80000000, limbs = v

Example usage:
    >>> codec = FieldCodec(CURVE_ORDER, 8)
    >>> codec.decode(codec.encode(CURVE_ORDER - 1))
    21888242871839275222246405745257275088548364400416034343698204186575808495616
"""

import struct

SHORT_MAX = 0x80000000
TWO_32 = 0x100000000
LONG_FLAG = 0x80000000
MONTGOMERY_FLAG = 0x40000000
MASK32 = 0xFFFFFFFF


# ─────────────────────────────────────────────────────────────────────
# Little-endian integers and Montgomery form
# ─────────────────────────────────────────────────────────────────────

def int_from_le(data):
    return int.from_bytes(bytes(data), "little")


def int_to_le(value, n8):
    return int(value).to_bytes(n8, "little")


def montgomery_radix(n8):
    return 1 << (8 * n8)


def from_montgomery(raw, modulus, n8, rounds=1):
    """raw · R^-rounds mod modulus."""
    r_inv = pow(montgomery_radix(n8), -1, modulus)
    return (raw * pow(r_inv, rounds, modulus)) % modulus


def to_montgomery(value, modulus, n8, rounds=1):
    """value · R^rounds mod modulus."""
    r = montgomery_radix(n8) % modulus
    return (value * pow(r, rounds, modulus)) % modulus


# ─────────────────────────────────────────────────────────────────────
# Sandbox slot codec
# ─────────────────────────────────────────────────────────────────────

class FieldCodec:
    """Encoder/decoder for witness-program field slots.

    Attributes:
        prime: field modulus reported by the witness program
        n32: number of 32-bit limbs per element
        n64: number of 64-bit words needed for the prime
        r_inv: inverse of the Montgomery radix 2^(64·n64) mod prime
        size: bytes per slot (n32·4 + 8)
    """

    def __init__(self, prime, n32):
        if n32 <= 0:
            raise ValueError(f"n32 must be positive: {n32}")
        self.prime = prime
        self.n32 = n32
        self.n64 = (prime.bit_length() - 1) // 64 + 1
        self.radix = 1 << (self.n64 * 64)
        self.r_inv = pow(self.radix, -1, prime)
        self.size = n32 * 4 + 8
        self.short_min = prime - SHORT_MAX

    def __repr__(self):
        return f"FieldCodec(prime=0x{self.prime:x}, n32={self.n32})"

    # ── limbs ──

    def encode_limbs(self, value):
        return [(value >> (32 * i)) & MASK32 for i in range(self.n32)]

    def decode_limbs(self, limbs, montgomery=False):
        num = 0
        for limb in reversed(limbs):
            num = (num << 32) | (limb & MASK32)
        if montgomery:
            return (num * self.r_inv) % self.prime
        return num % self.prime

    # ── slots ──

    def encode(self, value, montgomery=False):
        v = int(value) % self.prime
        if not montgomery:
            if v < SHORT_MAX:
                return self._pack(v, 0, [0] * self.n32)
            if v >= self.short_min:
                return self._pack(v - self.prime + TWO_32, 0, [0] * self.n32)
            return self._pack(0, LONG_FLAG, self.encode_limbs(v))
        mont = (v * self.radix) % self.prime
        return self._pack(0, LONG_FLAG | MONTGOMERY_FLAG, self.encode_limbs(mont))

    def decode(self, data):
        if len(data) < 8:
            raise ValueError(f"field slot needs at least 8 bytes, got {len(data)}")
        word0, word1 = struct.unpack_from("<II", data, 0)
        if word1 & LONG_FLAG:
            if len(data) < self.size:
                raise ValueError(f"long field slot needs {self.size} bytes, got {len(data)}")
            limbs = struct.unpack_from(f"<{self.n32}I", data, 8)
            return self.decode_limbs(limbs, montgomery=bool(word1 & MONTGOMERY_FLAG))
        if word0 & SHORT_MAX:
            return (self.prime + word0 - TWO_32) % self.prime
        return word0

    def _pack(self, word0, word1, limbs):
        return struct.pack(f"<II{self.n32}I", word0, word1, *limbs)
