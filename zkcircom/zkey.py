"""
snarkjs ZKey container
======================

Reader and writer for Groth16 proving keys in snarkjs' ``.zkey`` format.

Each zkey file is broken into sections (all integers little-endian):

    1  Header         u32 prover type (1 = Groth16)
    2  HeaderGroth    u32 n8q | q | u32 n8r | r
                      u32 nVars | u32 nPublic | u32 domainSize
                      alpha1 | beta1 | beta2 | gamma2 | delta1 | delta2
    3  IC             (nPublic + 1) G1
    4  Coefs          u32 n | n × (u32 matrix | u32 constraint | u32 signal | Fr)
    5  PointsA        nVars G1
    6  PointsB1       nVars G1
    7  PointsB2       nVars G2
    8  PointsC        (nVars - nPublic - 1) G1
    9  PointsH        domainSize G1
    10 Contributions  (ignored)

**Encodings**:
  - base field coordinates: n8q bytes, Montgomery form (x·R mod q)
  - G1: x | y;  G2: x.c0 | x.c1 | y.c0 | y.c1
  - all-zero coordinates: point at infinity
  - Coefs values: Montgomery form applied twice (v·R² mod r)

Parsing never returns a partial key: the section table and every section
length are validated before the first point is decoded.

Example usage:
    >>> pk = parse_zkey(open("circuit_final.zkey", "rb").read())
    >>> pk.n_vars, pk.n_public, pk.domain_size
    (4, 1, 4)
"""

import logging
import struct
from dataclasses import dataclass
from typing import Any, Tuple

from zkcircom.binfile import BinFile, write_binfile
from zkcircom.codec import from_montgomery, int_from_le, int_to_le, to_montgomery
from zkcircom.config import BN128
from zkcircom.errors import CurveMismatchError, FormatError, WireIndexOutOfRangeError
from zkcircom.field import FQ, FQ2, FR, is_on_g1, is_on_g2, log2

logger = logging.getLogger(__name__)

MAGIC = b"zkey"
VERSION = 1

PROVER_GROTH16 = 1

SECTION_HEADER = 1
SECTION_GROTH_HEADER = 2
SECTION_IC = 3
SECTION_COEFS = 4
SECTION_POINTS_A = 5
SECTION_POINTS_B1 = 6
SECTION_POINTS_B2 = 7
SECTION_POINTS_C = 8
SECTION_POINTS_H = 9
SECTION_CONTRIBUTIONS = 10

MATRIX_A = 0
MATRIX_B = 1

# (matrix, constraint, signal, value)
Coefficient = Tuple[int, int, int, FR]


@dataclass(frozen=True)
class VerifyingKey:
    alpha_g1: Any
    beta_g2: Any
    gamma_g2: Any
    delta_g2: Any
    gamma_abc_g1: Tuple[Any, ...]

    @property
    def n_public(self):
        return len(self.gamma_abc_g1) - 1


@dataclass(frozen=True)
class ProvingKey:
    """Groth16 proving key in snarkjs layout.

    Attributes:
        vk: verification material embedded in the key
        a_query, b_g1_query, b_g2_query: one point per signal
        l_query: private-signal points (section 8, "C")
        h_query: odd-coset Lagrange points of the doubled domain
        coefficients: A/B matrix entries, including the public-input rows
    """

    vk: VerifyingKey
    beta_g1: Any
    delta_g1: Any
    a_query: Tuple[Any, ...]
    b_g1_query: Tuple[Any, ...]
    b_g2_query: Tuple[Any, ...]
    l_query: Tuple[Any, ...]
    h_query: Tuple[Any, ...]
    coefficients: Tuple[Coefficient, ...]
    n_vars: int
    n_public: int
    domain_size: int
    q: int = BN128.q
    r: int = BN128.r
    n8q: int = BN128.n8q
    n8r: int = BN128.n8r

    @property
    def power(self):
        return log2(self.domain_size)

    @property
    def verifying_key(self):
        return self.vk


# ─────────────────────────────────────────────────────────────────────
# Point codec
# ─────────────────────────────────────────────────────────────────────

def _fq(raw, curve):
    return from_montgomery(int_from_le(raw), curve.q, curve.n8q)


def decode_g1(raw, curve=BN128):
    n8 = curve.n8q
    x = _fq(raw[:n8], curve)
    y = _fq(raw[n8:2 * n8], curve)
    if x == 0 and y == 0:
        return None
    point = (FQ(x), FQ(y))
    if not is_on_g1(point):
        raise FormatError("G1 point is not on the curve", data={"x": hex(x), "y": hex(y)})
    return point


def decode_g2(raw, curve=BN128):
    n8 = curve.n8q
    x0, x1, y0, y1 = (_fq(raw[i * n8:(i + 1) * n8], curve) for i in range(4))
    if x0 == 0 and x1 == 0 and y0 == 0 and y1 == 0:
        return None
    point = (FQ2([x0, x1]), FQ2([y0, y1]))
    if not is_on_g2(point):
        raise FormatError("G2 point is not on the curve", data={"x": [hex(x0), hex(x1)]})
    return point


def encode_g1(point, curve=BN128):
    if point is None:
        return bytes(curve.g1_size)
    return b"".join(
        int_to_le(to_montgomery(int(c), curve.q, curve.n8q), curve.n8q) for c in point
    )


def encode_g2(point, curve=BN128):
    if point is None:
        return bytes(curve.g2_size)
    out = b""
    for coord in point:
        for c in coord.coeffs:
            out += int_to_le(to_montgomery(int(c), curve.q, curve.n8q), curve.n8q)
    return out


def decode_coefficient(raw, curve=BN128):
    # stored as v·R² mod r
    return FR(from_montgomery(int_from_le(raw), curve.r, curve.n8r, rounds=2))


def encode_coefficient(value, curve=BN128):
    return int_to_le(to_montgomery(int(value), curve.r, curve.n8r, rounds=2), curve.n8r)


# ─────────────────────────────────────────────────────────────────────
# Reader
# ─────────────────────────────────────────────────────────────────────

class _GrothHeader:
    pass


def _read_header_scalars(binfile, curve):
    reader = binfile.reader(SECTION_HEADER)
    prover = reader.u32()
    if prover != PROVER_GROTH16:
        raise FormatError(f"unsupported prover type {prover}", data={"prover": prover})

    reader = binfile.reader(SECTION_GROTH_HEADER)
    h = _GrothHeader()
    h.n8q = reader.u32()
    if h.n8q != curve.n8q:
        raise CurveMismatchError(
            f"zkey base field uses {h.n8q}-byte elements, {curve.name} uses {curve.n8q}",
            data={"n8q": h.n8q},
        )
    h.q = int_from_le(reader.read(h.n8q))
    h.n8r = reader.u32()
    if h.n8r != curve.n8r:
        raise CurveMismatchError(
            f"zkey scalar field uses {h.n8r}-byte elements, {curve.name} uses {curve.n8r}",
            data={"n8r": h.n8r},
        )
    h.r = int_from_le(reader.read(h.n8r))
    if h.q != curve.q or h.r != curve.r:
        raise CurveMismatchError(
            f"zkey curve (q=0x{h.q:x}) is not {curve.name}",
            data={"q": hex(h.q), "r": hex(h.r), "curve": curve.name},
        )
    h.n_vars = reader.u32()
    h.n_public = reader.u32()
    h.domain_size = reader.u32()
    if h.domain_size == 0 or h.domain_size & (h.domain_size - 1):
        raise FormatError(f"domain size {h.domain_size} is not a power of two")
    if h.n_public + 1 > h.n_vars:
        raise FormatError(f"{h.n_public} public signals exceed {h.n_vars} variables")
    expected = 3 * curve.g1_size + 3 * curve.g2_size
    if reader.remaining != expected:
        raise FormatError(
            f"groth header carries {reader.remaining} bytes of points, expected {expected}"
        )
    h.reader = reader
    return h


def _check_points_section(binfile, section_id, count, width):
    size = binfile.section(section_id).size
    if size % width:
        raise FormatError(
            f"section {section_id} length {size} is not a multiple of {width}",
            data={"section": section_id, "size": size},
        )
    if size // width != count:
        raise FormatError(
            f"section {section_id} holds {size // width} points, expected {count}",
            data={"section": section_id, "points": size // width, "expected": count},
        )


def _check_layout(binfile, h, curve):
    g1, g2 = curve.g1_size, curve.g2_size
    _check_points_section(binfile, SECTION_IC, h.n_public + 1, g1)
    _check_points_section(binfile, SECTION_POINTS_A, h.n_vars, g1)
    _check_points_section(binfile, SECTION_POINTS_B1, h.n_vars, g1)
    _check_points_section(binfile, SECTION_POINTS_B2, h.n_vars, g2)
    _check_points_section(binfile, SECTION_POINTS_C, h.n_vars - h.n_public - 1, g1)
    _check_points_section(binfile, SECTION_POINTS_H, h.domain_size, g1)

    section = binfile.section(SECTION_COEFS)
    if section.size < 4:
        raise FormatError("coefficient section has no count")
    (n_coefs,) = struct.unpack_from("<I", binfile.data, section.offset)
    if section.size != 4 + n_coefs * (12 + curve.n8r):
        raise FormatError(
            f"coefficient section length {section.size} does not fit {n_coefs} entries",
            data={"size": section.size, "count": n_coefs},
        )


def _read_points(binfile, section_id, width, decode, curve):
    reader = binfile.reader(section_id)
    points = []
    while reader.remaining:
        points.append(decode(reader.read(width), curve))
    return tuple(points)


def _read_coefficients(binfile, h, curve):
    reader = binfile.reader(SECTION_COEFS)
    n_coefs = reader.u32()
    coefs = []
    for _ in range(n_coefs):
        matrix, constraint, signal = struct.unpack("<III", reader.read(12))
        if matrix not in (MATRIX_A, MATRIX_B):
            raise FormatError(f"coefficient for unknown matrix {matrix}", data={"matrix": matrix})
        if constraint >= h.domain_size:
            raise FormatError(
                f"coefficient row {constraint} outside domain of {h.domain_size}",
                data={"constraint": constraint},
            )
        if signal >= h.n_vars:
            raise WireIndexOutOfRangeError(
                f"coefficient references signal {signal} of {h.n_vars}",
                data={"signal": signal, "n_vars": h.n_vars},
            )
        coefs.append((matrix, constraint, signal, decode_coefficient(reader.read(curve.n8r), curve)))
    return tuple(coefs)


def parse_zkey(data, curve=BN128):
    """Parse a Groth16 ``.zkey`` container into a :class:`ProvingKey`.

    Raises:
        FormatError: bad magic/version/prover type or section layout
        TruncatedError: a declared section runs past the end of the buffer
        CurveMismatchError: q / r differ from the configured curve
    """
    binfile = BinFile(data, MAGIC, versions=(VERSION,))
    h = _read_header_scalars(binfile, curve)
    _check_layout(binfile, h, curve)

    reader = h.reader
    alpha_g1 = decode_g1(reader.read(curve.g1_size), curve)
    beta_g1 = decode_g1(reader.read(curve.g1_size), curve)
    beta_g2 = decode_g2(reader.read(curve.g2_size), curve)
    gamma_g2 = decode_g2(reader.read(curve.g2_size), curve)
    delta_g1 = decode_g1(reader.read(curve.g1_size), curve)
    delta_g2 = decode_g2(reader.read(curve.g2_size), curve)

    ic = _read_points(binfile, SECTION_IC, curve.g1_size, decode_g1, curve)
    vk = VerifyingKey(
        alpha_g1=alpha_g1,
        beta_g2=beta_g2,
        gamma_g2=gamma_g2,
        delta_g2=delta_g2,
        gamma_abc_g1=ic,
    )

    pk = ProvingKey(
        vk=vk,
        beta_g1=beta_g1,
        delta_g1=delta_g1,
        a_query=_read_points(binfile, SECTION_POINTS_A, curve.g1_size, decode_g1, curve),
        b_g1_query=_read_points(binfile, SECTION_POINTS_B1, curve.g1_size, decode_g1, curve),
        b_g2_query=_read_points(binfile, SECTION_POINTS_B2, curve.g2_size, decode_g2, curve),
        l_query=_read_points(binfile, SECTION_POINTS_C, curve.g1_size, decode_g1, curve),
        h_query=_read_points(binfile, SECTION_POINTS_H, curve.g1_size, decode_g1, curve),
        coefficients=_read_coefficients(binfile, h, curve),
        n_vars=h.n_vars,
        n_public=h.n_public,
        domain_size=h.domain_size,
        q=h.q,
        r=h.r,
        n8q=h.n8q,
        n8r=h.n8r,
    )
    logger.info(
        "parsed zkey: %d vars, %d public, domain 2^%d, %d coefficients",
        pk.n_vars, pk.n_public, pk.power, len(pk.coefficients),
    )
    return pk


# ─────────────────────────────────────────────────────────────────────
# Writer
# ─────────────────────────────────────────────────────────────────────

def write_zkey(pk, curve=BN128):
    """Serialize a :class:`ProvingKey` into the zkey v1 layout."""
    header = struct.pack("<I", PROVER_GROTH16)

    groth = bytearray(struct.pack("<I", curve.n8q))
    groth += int_to_le(curve.q, curve.n8q)
    groth += struct.pack("<I", curve.n8r)
    groth += int_to_le(curve.r, curve.n8r)
    groth += struct.pack("<III", pk.n_vars, pk.n_public, pk.domain_size)
    groth += encode_g1(pk.vk.alpha_g1, curve)
    groth += encode_g1(pk.beta_g1, curve)
    groth += encode_g2(pk.vk.beta_g2, curve)
    groth += encode_g2(pk.vk.gamma_g2, curve)
    groth += encode_g1(pk.delta_g1, curve)
    groth += encode_g2(pk.vk.delta_g2, curve)

    coefs = bytearray(struct.pack("<I", len(pk.coefficients)))
    for matrix, constraint, signal, value in pk.coefficients:
        coefs += struct.pack("<III", matrix, constraint, signal)
        coefs += encode_coefficient(value, curve)

    def g1s(points):
        return b"".join(encode_g1(p, curve) for p in points)

    return write_binfile(MAGIC, [
        (SECTION_HEADER, header),
        (SECTION_GROTH_HEADER, bytes(groth)),
        (SECTION_IC, g1s(pk.vk.gamma_abc_g1)),
        (SECTION_COEFS, bytes(coefs)),
        (SECTION_POINTS_A, g1s(pk.a_query)),
        (SECTION_POINTS_B1, g1s(pk.b_g1_query)),
        (SECTION_POINTS_B2, b"".join(encode_g2(p, curve) for p in pk.b_g2_query)),
        (SECTION_POINTS_C, g1s(pk.l_query)),
        (SECTION_POINTS_H, g1s(pk.h_query)),
    ])
