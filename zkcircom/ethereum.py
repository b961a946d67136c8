"""
EVM compatibility layer
=======================

Re-encodes Groth16 proofs, verifying keys and public inputs as the
``uint256`` tuples expected by Solidity Groth16 verifier contracts
(snarkjs ``verifier.sol``).

**Layout**:
  - every scalar is a 256-bit big-endian word
  - G1 = (x, y)
  - G2 = ([x.c0, x.c1], [y.c0, y.c1]) in memory, but the Solidity tuple
    puts the c1 limb first: ([x.c1, x.c0], [y.c1, y.c0])
  - the point at infinity is (0, 0)

Example usage:
    >>> p = Proof.from_backend(groth16_proof)
    >>> data = calldata(p, Inputs.from_backend([33]))
    >>> Proof.from_bytes(p.to_bytes()) == p
    True
"""

from dataclasses import dataclass
from typing import Tuple

from eth_abi import encode

from zkcircom.errors import EncodingError
from zkcircom.field import CURVE_ORDER, FIELD_MODULUS, FQ, FQ2, is_on_g1, is_on_g2
from zkcircom.groth16.proving import Proof as BackendProof
from zkcircom.zkey import VerifyingKey as BackendVerifyingKey

WORD = 32


def _word(value):
    return int(value).to_bytes(WORD, "big")


def _words(data, count):
    if len(data) != count * WORD:
        raise EncodingError(
            f"expected {count * WORD} bytes, got {len(data)}",
            data={"length": len(data), "expected": count * WORD},
        )
    return [int.from_bytes(data[i * WORD:(i + 1) * WORD], "big") for i in range(count)]


def _check_fq(value):
    if not 0 <= value < FIELD_MODULUS:
        raise EncodingError(f"coordinate {value} is outside the base field", data={"value": hex(value)})
    return value


def _pair(values, what):
    values = tuple(int(v) for v in values)
    if len(values) != 2:
        raise EncodingError(f"{what} needs 2 components, got {len(values)}")
    return values


# ─────────────────────────────────────────────────────────────────────
# Curve points
# ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class G1:
    x: int
    y: int

    def __post_init__(self):
        object.__setattr__(self, "x", _check_fq(int(self.x)))
        object.__setattr__(self, "y", _check_fq(int(self.y)))

    @classmethod
    def from_backend(cls, point):
        if point is None:
            return cls(0, 0)
        return cls(int(point[0]), int(point[1]))

    def to_backend(self):
        if self.x == 0 and self.y == 0:
            return None
        point = (FQ(self.x), FQ(self.y))
        if not is_on_g1(point):
            raise EncodingError("G1 point is not on the curve", data={"x": hex(self.x)})
        return point

    def as_tuple(self):
        return (self.x, self.y)

    def to_bytes(self):
        return _word(self.x) + _word(self.y)

    @classmethod
    def from_bytes(cls, data):
        return cls(*_words(data, 2))


@dataclass(frozen=True)
class G2:
    """``x`` and ``y`` are (c0, c1) pairs."""

    x: Tuple[int, int]
    y: Tuple[int, int]

    def __post_init__(self):
        object.__setattr__(self, "x", _pair(self.x, "G2 x"))
        object.__setattr__(self, "y", _pair(self.y, "G2 y"))
        for v in self.x + self.y:
            _check_fq(v)

    @classmethod
    def from_backend(cls, point):
        if point is None:
            return cls((0, 0), (0, 0))
        x, y = point
        return cls(tuple(int(c) for c in x.coeffs), tuple(int(c) for c in y.coeffs))

    def to_backend(self):
        if not any(self.x + self.y):
            return None
        point = (FQ2(list(self.x)), FQ2(list(self.y)))
        if not is_on_g2(point):
            raise EncodingError("G2 point is not on the curve", data={"x": [hex(v) for v in self.x]})
        return point

    def as_tuple(self):
        # c1 limb first
        return ((self.x[1], self.x[0]), (self.y[1], self.y[0]))

    def to_bytes(self):
        (x1, x0), (y1, y0) = self.as_tuple()
        return _word(x1) + _word(x0) + _word(y1) + _word(y0)

    @classmethod
    def from_bytes(cls, data):
        x1, x0, y1, y0 = _words(data, 4)
        return cls((x0, x1), (y0, y1))


# ─────────────────────────────────────────────────────────────────────
# Proof / verifying key / inputs
# ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Proof:
    a: G1
    b: G2
    c: G1

    SIZE = 8 * WORD

    @classmethod
    def from_backend(cls, proof):
        return cls(G1.from_backend(proof.a), G2.from_backend(proof.b), G1.from_backend(proof.c))

    def to_backend(self):
        return BackendProof(a=self.a.to_backend(), b=self.b.to_backend(), c=self.c.to_backend())

    def as_tuple(self):
        return (self.a.as_tuple(), self.b.as_tuple(), self.c.as_tuple())

    def to_bytes(self):
        return self.a.to_bytes() + self.b.to_bytes() + self.c.to_bytes()

    @classmethod
    def from_bytes(cls, data):
        if len(data) != cls.SIZE:
            raise EncodingError(f"proof needs {cls.SIZE} bytes, got {len(data)}")
        return cls(
            G1.from_bytes(data[:64]),
            G2.from_bytes(data[64:192]),
            G1.from_bytes(data[192:]),
        )


@dataclass(frozen=True)
class VerifyingKey:
    alpha1: G1
    beta2: G2
    gamma2: G2
    delta2: G2
    ic: Tuple[G1, ...]

    HEADER_SIZE = 14 * WORD

    def __post_init__(self):
        object.__setattr__(self, "ic", tuple(self.ic))
        if not self.ic:
            raise EncodingError("verifying key needs at least one IC point")

    @classmethod
    def from_backend(cls, vk):
        return cls(
            alpha1=G1.from_backend(vk.alpha_g1),
            beta2=G2.from_backend(vk.beta_g2),
            gamma2=G2.from_backend(vk.gamma_g2),
            delta2=G2.from_backend(vk.delta_g2),
            ic=tuple(G1.from_backend(p) for p in vk.gamma_abc_g1),
        )

    def to_backend(self):
        return BackendVerifyingKey(
            alpha_g1=self.alpha1.to_backend(),
            beta_g2=self.beta2.to_backend(),
            gamma_g2=self.gamma2.to_backend(),
            delta_g2=self.delta2.to_backend(),
            gamma_abc_g1=tuple(p.to_backend() for p in self.ic),
        )

    def as_tuple(self):
        return (
            self.alpha1.as_tuple(),
            self.beta2.as_tuple(),
            self.gamma2.as_tuple(),
            self.delta2.as_tuple(),
            [p.as_tuple() for p in self.ic],
        )

    def to_bytes(self):
        out = self.alpha1.to_bytes() + self.beta2.to_bytes()
        out += self.gamma2.to_bytes() + self.delta2.to_bytes()
        return out + b"".join(p.to_bytes() for p in self.ic)

    @classmethod
    def from_bytes(cls, data):
        tail = len(data) - cls.HEADER_SIZE
        if tail < 64 or tail % 64:
            raise EncodingError(
                f"verifying key length {len(data)} is not {cls.HEADER_SIZE} + k·64 (k ≥ 1)",
                data={"length": len(data)},
            )
        return cls(
            alpha1=G1.from_bytes(data[:64]),
            beta2=G2.from_bytes(data[64:192]),
            gamma2=G2.from_bytes(data[192:320]),
            delta2=G2.from_bytes(data[320:448]),
            ic=tuple(G1.from_bytes(data[i:i + 64]) for i in range(448, len(data), 64)),
        )


@dataclass(frozen=True)
class Inputs:
    values: Tuple[int, ...]

    def __post_init__(self):
        values = tuple(int(v) for v in self.values)
        for v in values:
            if not 0 <= v < CURVE_ORDER:
                raise EncodingError(f"public input {v} is outside the scalar field")
        object.__setattr__(self, "values", values)

    @classmethod
    def from_backend(cls, values):
        return cls(tuple(int(v) for v in values))

    def to_backend(self):
        return list(self.values)

    def as_tuple(self):
        return self.values

    def to_bytes(self):
        return b"".join(_word(v) for v in self.values)

    @classmethod
    def from_bytes(cls, data):
        if len(data) % WORD:
            raise EncodingError(f"input bytes {len(data)} are not a multiple of {WORD}")
        return cls(tuple(_words(data, len(data) // WORD)))


def to_hex(obj):
    return "0x" + obj.to_bytes().hex()


def calldata(proof, inputs):
    """ABI-encoded arguments of ``verifyProof(a, b, c, input)``."""
    a, b, c = proof.as_tuple()
    types = ["uint256[2]", "uint256[2][2]", "uint256[2]"]
    args = [list(a), [list(b[0]), list(b[1])], list(c)]
    if inputs.values:
        types.append(f"uint256[{len(inputs.values)}]")
        args.append(list(inputs.values))
    return encode(types, args)
