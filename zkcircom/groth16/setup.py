"""
Groth16 setup
=============

Single-party key generation for an R1CS, producing a proving key in the
same layout snarkjs writes to ``.zkey`` files.

**Domain**:
  H = {1, ω, ..., ω^(n-1)}, n = next power of two ≥ n_constraints + n_public + 1.
  Rows 0..n_constraints-1 hold the constraints; rows n_constraints + s
  hold ``A[s] = 1`` for every public wire s (including wire 0), which
  binds the public inputs to the proof.

**QAP at τ** (Lagrange basis L_i over H):

    u_j(τ) = Σ_i A[i][j]·L_i(τ)     v_j(τ) = Σ_i B[i][j]·L_i(τ)     w_j(τ) = Σ_i C[i][j]·L_i(τ)
    L_i(τ) = (τ^n - 1)/n · ω^i/(τ - ω^i)

**Key material**:
  - IC_j  = (β·u_j + α·v_j + w_j)/γ · G1      j ≤ n_public
  - C_j   = (β·u_j + α·v_j + w_j)/δ · G1      j > n_public
  - A_j = u_j·G1,  B1_j = v_j·G1,  B2_j = v_j·G2
  - H_i   = (τ^2n - 1)/2n · x_i/(τ - x_i)/δ · G1,  x_i = ω_2n^(2i+1)

  The H points are the Lagrange basis of the odd coset of the doubled
  domain, scaled by Z(τ)/(Z(x_i)·δ); the prover feeds them the coset
  evaluations of A·B - C directly.

Example usage:
    >>> pk = generate_proving_key(r1cs)
    >>> pk.domain_size
    4
"""

import logging
import secrets
from collections import namedtuple

from zkcircom.field import FR, CURVE_ORDER, G1, G2, ec_mul, get_root_of_unity, get_roots_of_unity
from zkcircom.zkey import MATRIX_A, MATRIX_B, ProvingKey, VerifyingKey

logger = logging.getLogger(__name__)

ToxicWaste = namedtuple("ToxicWaste", ["tau", "alpha", "beta", "gamma", "delta"])


def random_toxic_waste():
    """Fresh non-zero (τ, α, β, γ, δ)."""
    return ToxicWaste(*(FR(secrets.randbelow(CURVE_ORDER - 1) + 1) for _ in range(5)))


def domain_size_for(r1cs):
    n = 1
    while n < r1cs.n_constraints + r1cs.n_public + 1:
        n <<= 1
    return n


def build_coefficients(r1cs):
    """A/B coefficient entries ``(matrix, row, signal, value)`` in zkey order."""
    coefs = []
    for i, (a, b, _) in enumerate(r1cs.constraints):
        for wire, value in a:
            coefs.append((MATRIX_A, i, wire, value))
        for wire, value in b:
            coefs.append((MATRIX_B, i, wire, value))
    for s in range(r1cs.n_public + 1):
        coefs.append((MATRIX_A, r1cs.n_constraints + s, s, FR(1)))
    return coefs


def lagrange_at(tau, n):
    """[L_0(τ), ..., L_{n-1}(τ)] over the n-th roots of unity."""
    roots = get_roots_of_unity(n)
    z = (tau ** n - FR(1)) / FR(n)
    return [z * w / (tau - w) for w in roots]


def qap_at(r1cs, tau, n):
    """(u, v, w) evaluated at τ, one value per wire."""
    lagrange = lagrange_at(tau, n)
    u = [FR(0)] * r1cs.n_wires
    v = [FR(0)] * r1cs.n_wires
    w = [FR(0)] * r1cs.n_wires

    for matrix, row, wire, value in build_coefficients(r1cs):
        target = u if matrix == MATRIX_A else v
        target[wire] += value * lagrange[row]
    for i, (_, _, c) in enumerate(r1cs.constraints):
        for wire, value in c:
            w[wire] += value * lagrange[i]
    return u, v, w


def h_query_at(tau, delta, n):
    omega_2n = get_root_of_unity(2 * n)
    omega_sq = omega_2n * omega_2n
    z = (tau ** (2 * n) - FR(1)) / FR(2 * n) / delta
    points = []
    x = omega_2n
    for _ in range(n):
        points.append(ec_mul(G1, z * x / (tau - x)))
        x = x * omega_sq
    return points


def generate_proving_key(r1cs, toxic=None):
    """Circuit-specific Groth16 setup.

    Args:
        r1cs: parsed constraint system
        toxic: optional :class:`ToxicWaste`; random when omitted

    Returns:
        ProvingKey
    """
    toxic = toxic or random_toxic_waste()
    tau, alpha, beta, gamma, delta = (FR(int(x)) for x in toxic)
    n = domain_size_for(r1cs)
    n_pub = r1cs.n_public
    logger.info(
        "groth16 setup: %d wires, %d constraints, domain %d",
        r1cs.n_wires, r1cs.n_constraints, n,
    )

    u, v, w = qap_at(r1cs, tau, n)

    ic = []
    l_query = []
    for j in range(r1cs.n_wires):
        k = beta * u[j] + alpha * v[j] + w[j]
        if j <= n_pub:
            ic.append(ec_mul(G1, k / gamma))
        else:
            l_query.append(ec_mul(G1, k / delta))

    vk = VerifyingKey(
        alpha_g1=ec_mul(G1, alpha),
        beta_g2=ec_mul(G2, beta),
        gamma_g2=ec_mul(G2, gamma),
        delta_g2=ec_mul(G2, delta),
        gamma_abc_g1=tuple(ic),
    )
    return ProvingKey(
        vk=vk,
        beta_g1=ec_mul(G1, beta),
        delta_g1=ec_mul(G1, delta),
        a_query=tuple(ec_mul(G1, x) for x in u),
        b_g1_query=tuple(ec_mul(G1, x) for x in v),
        b_g2_query=tuple(ec_mul(G2, x) for x in v),
        l_query=tuple(l_query),
        h_query=tuple(h_query_at(tau, delta, n)),
        coefficients=tuple(build_coefficients(r1cs)),
        n_vars=r1cs.n_wires,
        n_public=n_pub,
        domain_size=n,
    )
