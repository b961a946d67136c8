"""
circom R1CS container
=====================

Reader and writer for circom's binary constraint-system format (v1).

    "r1cs" | u32 version | u32 n_sections | sections...

    1  Header       u32 field_size | prime (field_size bytes)
                    u32 n_wires | u32 n_pub_out | u32 n_pub_in | u32 n_prv_in
                    u64 n_labels | u32 n_constraints
    2  Constraints  n_constraints × (A | B | C)
                    each linear combination: u32 n | n × (u32 wire | Fr)
    3  Wire2Label   n_wires × u64 label id

Field elements are canonical (not Montgomery) little-endian integers.

**Wire layout**:
  wire 0 is the constant one, then the public outputs, the public inputs,
  the private inputs and finally the internal signals:

    [one, pub_out..., pub_in..., prv_in..., aux...]

  so ``num_inputs = 1 + n_pub_out + n_pub_in`` wires are public.

Example usage:
    >>> r1cs = parse_r1cs(open("multiplier.r1cs", "rb").read())
    >>> r1cs.n_wires, r1cs.num_inputs
    (4, 2)
"""

import logging
import struct
from dataclasses import dataclass
from typing import Tuple

from zkcircom.binfile import BinFile, write_binfile
from zkcircom.codec import int_from_le, int_to_le
from zkcircom.config import BN128
from zkcircom.errors import CurveMismatchError, FormatError, WireIndexOutOfRangeError
from zkcircom.field import FR

logger = logging.getLogger(__name__)

MAGIC = b"r1cs"
VERSION = 1

SECTION_HEADER = 1
SECTION_CONSTRAINTS = 2
SECTION_WIRE2LABEL = 3

# (wire, coefficient)
Term = Tuple[int, FR]
LinearCombination = Tuple[Term, ...]
Constraint = Tuple[LinearCombination, LinearCombination, LinearCombination]


@dataclass(frozen=True)
class R1CS:
    """Parsed constraint system.

    Attributes:
        constraints: (A, B, C) triples in file order; A·w × B·w = C·w
        wire_to_label: label id of every wire (wire 0 → label 0)
    """

    field_size: int
    prime: int
    n_wires: int
    n_pub_out: int
    n_pub_in: int
    n_prv_in: int
    n_labels: int
    constraints: Tuple[Constraint, ...]
    wire_to_label: Tuple[int, ...]
    version: int = VERSION

    @property
    def n_constraints(self):
        return len(self.constraints)

    @property
    def n_public(self):
        """Public signals, excluding the constant wire."""
        return self.n_pub_out + self.n_pub_in

    @property
    def num_inputs(self):
        """Public wires including the constant wire 0."""
        return 1 + self.n_public

    @property
    def num_aux(self):
        return self.n_wires - self.num_inputs

    def label_of(self, wire):
        return self.wire_to_label[wire]


# ─────────────────────────────────────────────────────────────────────
# Reader
# ─────────────────────────────────────────────────────────────────────

def _read_header(reader, curve):
    field_size = reader.u32()
    if field_size != curve.n8r:
        raise FormatError(
            f"only {curve.n8r}-byte fields are supported, got {field_size}",
            data={"field_size": field_size},
        )
    if reader.section.size != 32 + field_size:
        raise FormatError(
            f"invalid header section size {reader.section.size}",
            data={"size": reader.section.size},
        )
    prime = int_from_le(reader.read(field_size))
    if prime != curve.r:
        raise CurveMismatchError(
            f"r1cs prime 0x{prime:x} is not the {curve.name} scalar field",
            data={"prime": hex(prime), "curve": curve.name},
        )
    n_wires = reader.u32()
    n_pub_out = reader.u32()
    n_pub_in = reader.u32()
    n_prv_in = reader.u32()
    n_labels = reader.u64()
    n_constraints = reader.u32()
    if 1 + n_pub_out + n_pub_in + n_prv_in > n_wires:
        raise FormatError(
            f"{n_wires} wires cannot hold {n_pub_out + n_pub_in + n_prv_in} inputs/outputs",
            data={"n_wires": n_wires},
        )
    return field_size, prime, n_wires, n_pub_out, n_pub_in, n_prv_in, n_labels, n_constraints


def _read_lc(reader, n_wires, field_size, index):
    n_terms = reader.u32()
    terms = []
    for _ in range(n_terms):
        wire = reader.u32()
        if wire >= n_wires:
            raise WireIndexOutOfRangeError(
                f"constraint {index} references wire {wire} of {n_wires}",
                data={"constraint": index, "wire": wire, "n_wires": n_wires},
            )
        # canonical integer, reduced on construction
        terms.append((wire, FR(int_from_le(reader.read(field_size)))))
    return tuple(terms)


def _read_wire_map(reader, n_wires):
    if reader.section.size != n_wires * 8:
        raise FormatError(
            f"invalid wire map size {reader.section.size} for {n_wires} wires",
            data={"size": reader.section.size, "n_wires": n_wires},
        )
    labels = struct.unpack(f"<{n_wires}Q", reader.read(n_wires * 8))
    if n_wires and labels[0] != 0:
        raise FormatError("wire 0 must map to label 0", data={"label": labels[0]})
    return labels


def parse_r1cs(data, curve=BN128):
    """Parse an ``.r1cs`` container.

    Args:
        data: container bytes
        curve: configured curve; the header prime must be its scalar field

    Returns:
        R1CS

    Raises:
        FormatError, TruncatedError, CurveMismatchError, WireIndexOutOfRangeError
    """
    binfile = BinFile(data, MAGIC, versions=(VERSION,))

    reader = binfile.reader(SECTION_HEADER)
    (field_size, prime, n_wires, n_pub_out, n_pub_in,
     n_prv_in, n_labels, n_constraints) = _read_header(reader, curve)

    reader = binfile.reader(SECTION_CONSTRAINTS)
    constraints = []
    for i in range(n_constraints):
        a = _read_lc(reader, n_wires, field_size, i)
        b = _read_lc(reader, n_wires, field_size, i)
        c = _read_lc(reader, n_wires, field_size, i)
        constraints.append((a, b, c))
    reader.expect_end()

    wire_to_label = _read_wire_map(binfile.reader(SECTION_WIRE2LABEL), n_wires)

    r1cs = R1CS(
        field_size=field_size,
        prime=prime,
        n_wires=n_wires,
        n_pub_out=n_pub_out,
        n_pub_in=n_pub_in,
        n_prv_in=n_prv_in,
        n_labels=n_labels,
        constraints=tuple(constraints),
        wire_to_label=tuple(wire_to_label),
        version=binfile.version,
    )
    logger.info(
        "parsed r1cs: %d wires (%d public), %d constraints",
        r1cs.n_wires, r1cs.n_public, r1cs.n_constraints,
    )
    return r1cs


# ─────────────────────────────────────────────────────────────────────
# Writer
# ─────────────────────────────────────────────────────────────────────

def _write_lc(lc, field_size):
    out = bytearray(struct.pack("<I", len(lc)))
    for wire, coeff in lc:
        out += struct.pack("<I", wire)
        out += int_to_le(int(coeff), field_size)
    return out


def write_r1cs(r1cs):
    """Serialize an R1CS back into the v1 container format."""
    header = bytearray(struct.pack("<I", r1cs.field_size))
    header += int_to_le(r1cs.prime, r1cs.field_size)
    header += struct.pack(
        "<IIIIQI",
        r1cs.n_wires, r1cs.n_pub_out, r1cs.n_pub_in, r1cs.n_prv_in,
        r1cs.n_labels, r1cs.n_constraints,
    )

    body = bytearray()
    for a, b, c in r1cs.constraints:
        body += _write_lc(a, r1cs.field_size)
        body += _write_lc(b, r1cs.field_size)
        body += _write_lc(c, r1cs.field_size)

    wire_map = struct.pack(f"<{r1cs.n_wires}Q", *r1cs.wire_to_label)

    return write_binfile(MAGIC, [
        (SECTION_HEADER, bytes(header)),
        (SECTION_CONSTRAINTS, bytes(body)),
        (SECTION_WIRE2LABEL, wire_map),
    ], version=r1cs.version)
