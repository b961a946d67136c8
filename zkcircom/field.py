"""
BN254 field and curve primitives
================================

Basic algebra shared by the container parsers, the Groth16 backend and the
EVM encoder.

**Finite field FR**:
  The scalar field of bn128 (circom's default prime). Witness values,
  constraint coefficients and Groth16 scalars all live here.
  - order r ≈ 2^254
  - r - 1 = 2^28 × m (m odd) → roots of unity up to order 2^28

**Base field FQ / FQ2**:
  Coordinates of G1 (FQ) and G2 (FQ2) points. py_ecc represents affine
  points as tuples of these and the point at infinity as ``None``.

**Roots of unity**:
  The Groth16 prover interpolates over H = {1, ω, ..., ω^(n-1)} and
  evaluates on the odd coset of the doubled domain.

Example usage:
    >>> from zkcircom.field import FR, G1, ec_mul
    >>> FR(3) * FR(7)
    21
    >>> P = ec_mul(G1, 5)
"""

from py_ecc.fields import bn128_FQ as FQ
from py_ecc.fields import bn128_FQ2 as FQ2
from py_ecc import bn128


# ─────────────────────────────────────────────────────────────────────
# Finite field FR
# ─────────────────────────────────────────────────────────────────────

class FR(FQ):
    """Element of the bn128 scalar field (modulus ``bn128.curve_order``).

    Inherits py_ecc's FQ so +, -, *, /, ** are modular.

    Example:
        >>> x = FR(3)
        >>> x * x           # FR(9)
        >>> FR(1) / FR(3)   # modular inverse of 3
    """
    field_modulus = bn128.curve_order


CURVE_ORDER = bn128.curve_order
FIELD_MODULUS = bn128.field_modulus

# Largest power of two dividing r - 1
TWO_ADICITY = 28


# ─────────────────────────────────────────────────────────────────────
# Curve constants and operations
# ─────────────────────────────────────────────────────────────────────

G1 = bn128.G1
G2 = bn128.G2


def ec_mul(point, scalar):
    """Scalar multiplication ``scalar · point`` on G1 or G2."""
    if isinstance(scalar, FR):
        scalar = int(scalar)
    return bn128.multiply(point, scalar % CURVE_ORDER)


def ec_add(p1, p2):
    return bn128.add(p1, p2)


def ec_neg(point):
    return bn128.neg(point)


def ec_pairing(g2_point, g1_point):
    """Optimal Ate pairing e(G1, G2).

    Note:
        py_ecc takes the arguments in (G2, G1) order.
    """
    return bn128.pairing(g2_point, g1_point)


def ec_msm(points, scalars):
    """Multi-scalar multiplication Σ scalar_i · point_i.

    Zero scalars and points at infinity are skipped.
    """
    acc = None
    for point, scalar in zip(points, scalars):
        k = int(scalar) % CURVE_ORDER
        if point is None or k == 0:
            continue
        acc = bn128.add(acc, bn128.multiply(point, k))
    return acc


def is_on_g1(point):
    return point is None or bn128.is_on_curve(point, bn128.b)


def is_on_g2(point):
    return point is None or bn128.is_on_curve(point, bn128.b2)


# ─────────────────────────────────────────────────────────────────────
# Roots of unity
# ─────────────────────────────────────────────────────────────────────

def get_root_of_unity(n):
    """Primitive n-th root of unity ω = 5^((r-1)/n).

    Matches the ``Fr.w[k]`` table of ffjavascript/snarkjs, so evaluation
    domains agree with keys produced by snarkjs.

    Raises:
        ValueError: n is not a power of two or exceeds 2^28
    """
    if n < 1 or (n & (n - 1)) != 0:
        raise ValueError(f"n must be a power of two: {n}")
    if n > (1 << TWO_ADICITY):
        raise ValueError(f"n must be at most 2^{TWO_ADICITY}: {n}")
    if n == 1:
        return FR(1)

    g = FR(5)
    exponent = (CURVE_ORDER - 1) // n
    return g ** exponent


def get_roots_of_unity(n):
    """[1, ω, ω², ..., ω^(n-1)] for the n-th root of unity ω."""
    omega = get_root_of_unity(n)
    roots = []
    current = FR(1)
    for _ in range(n):
        roots.append(current)
        current = current * omega
    return roots


def log2(n):
    """Exponent of a power of two (0 for n = 1)."""
    if n < 1 or (n & (n - 1)) != 0:
        raise ValueError(f"n must be a power of two: {n}")
    return n.bit_length() - 1
