"""
Groth16 prover
==============

snarkjs-compatible proving from a :class:`~zkcircom.zkey.ProvingKey` and a
full witness w.

**Polynomial part** (h):

    A_T[i] = Σ coef·w over matrix-A entries of row i     (likewise B_T)
    C_T[i] = A_T[i] · B_T[i]
    A, B, C ← IFFT over the n-th roots; evaluate on the odd coset ω_2n·H
    h = Σ H_i · (A·B - C)(ω_2n^(2i+1))

**Proof elements** (r, s blinding scalars):

    π_A  = α₁ + Σ w_j·A_j + r·δ₁
    π_B  = β₂ + Σ w_j·B2_j + s·δ₂
    π_B₁ = β₁ + Σ w_j·B1_j + s·δ₁
    π_C  = Σ_{j>ℓ} w_j·C_j + h + s·π_A + r·π_B₁ - r·s·δ₁
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Any

from zkcircom.errors import LengthMismatchError
from zkcircom.field import FR, CURVE_ORDER, ec_add, ec_msm, ec_mul, ec_neg, get_root_of_unity
from zkcircom.polynomial import coset_fft, ifft
from zkcircom.zkey import MATRIX_A

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Proof:
    a: Any
    b: Any
    c: Any


def evaluate_constraints(pk, witness):
    """(A_T, B_T, C_T) row evaluations over the domain."""
    n = pk.domain_size
    a_t = [FR(0)] * n
    b_t = [FR(0)] * n
    for matrix, row, signal, value in pk.coefficients:
        target = a_t if matrix == MATRIX_A else b_t
        target[row] += value * witness[signal]
    c_t = [x * y for x, y in zip(a_t, b_t)]
    return a_t, b_t, c_t


def calculate_h(pk, witness):
    """Coset evaluations of A·B - C, ready for the H query."""
    n = pk.domain_size
    omega = get_root_of_unity(n)
    shift = get_root_of_unity(2 * n)

    a_t, b_t, c_t = evaluate_constraints(pk, witness)

    def to_odd_coset(evals):
        return coset_fft(ifft(evals, omega), omega, shift)

    a_odd = to_odd_coset(a_t)
    b_odd = to_odd_coset(b_t)
    c_odd = to_odd_coset(c_t)
    return [a * b - c for a, b, c in zip(a_odd, b_odd, c_odd)]


def _random_scalar():
    return FR(secrets.randbelow(CURVE_ORDER))


def prove(pk, witness, r=None, s=None):
    """Create a Groth16 proof.

    Args:
        pk: proving key
        witness: full assignment indexed by signal (wire 0 = 1)
        r, s: blinding scalars; random when omitted

    Raises:
        LengthMismatchError: ``len(witness) != pk.n_vars``
    """
    if len(witness) != pk.n_vars:
        raise LengthMismatchError(
            f"witness has {len(witness)} values, proving key expects {pk.n_vars}",
            data={"witness": len(witness), "n_vars": pk.n_vars},
        )
    w = [x if isinstance(x, FR) else FR(int(x)) for x in witness]
    r = _random_scalar() if r is None else FR(int(r))
    s = _random_scalar() if s is None else FR(int(s))

    h = ec_msm(pk.h_query, calculate_h(pk, w))

    vk = pk.vk
    pi_a = ec_add(ec_add(vk.alpha_g1, ec_msm(pk.a_query, w)), ec_mul(pk.delta_g1, r))
    pi_b = ec_add(ec_add(vk.beta_g2, ec_msm(pk.b_g2_query, w)), ec_mul(vk.delta_g2, s))
    pi_b1 = ec_add(ec_add(pk.beta_g1, ec_msm(pk.b_g1_query, w)), ec_mul(pk.delta_g1, s))

    pi_c = ec_msm(pk.l_query, w[pk.n_public + 1:])
    pi_c = ec_add(pi_c, h)
    pi_c = ec_add(pi_c, ec_mul(pi_a, s))
    pi_c = ec_add(pi_c, ec_mul(pi_b1, r))
    pi_c = ec_add(pi_c, ec_neg(ec_mul(pk.delta_g1, r * s)))

    logger.info("groth16 proof created for %d signals", pk.n_vars)
    return Proof(a=pi_a, b=pi_b, c=pi_c)


def prove_circuit(pk, circuit, r=None, s=None):
    """Prove an assembled :class:`~zkcircom.circuit.CircomCircuit`."""
    return prove(pk, circuit.full_assignment, r=r, s=s)
