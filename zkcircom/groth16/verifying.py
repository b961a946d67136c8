"""
Groth16 verifier
================

    e(π_A, π_B) = e(α₁, β₂) · e(IC₀ + Σ xᵢ·ICᵢ, γ₂) · e(π_C, δ₂)

where x are the public inputs (wire 0 excluded).
"""

import logging

from zkcircom.errors import EncodingError, LengthMismatchError
from zkcircom.field import CURVE_ORDER, ec_add, ec_msm, ec_pairing

logger = logging.getLogger(__name__)


def prepare_inputs(vk, public_inputs):
    """IC₀ + Σ xᵢ·ICᵢ.

    Raises:
        LengthMismatchError: wrong number of public inputs
        EncodingError: an input is not a canonical field element
    """
    if len(public_inputs) != vk.n_public:
        raise LengthMismatchError(
            f"got {len(public_inputs)} public inputs, verifying key expects {vk.n_public}",
            data={"inputs": len(public_inputs), "expected": vk.n_public},
        )
    scalars = [int(x) for x in public_inputs]
    for i, x in enumerate(scalars):
        if not 0 <= x < CURVE_ORDER:
            raise EncodingError(
                f"public input {i} is outside the scalar field",
                data={"index": i, "value": hex(x)},
            )
    return ec_add(vk.gamma_abc_g1[0], ec_msm(vk.gamma_abc_g1[1:], scalars))


def lhs(proof):
    return ec_pairing(proof.b, proof.a)


def rhs(vk, proof, prepared):
    return (
        ec_pairing(vk.beta_g2, vk.alpha_g1)
        * ec_pairing(vk.gamma_g2, prepared)
        * ec_pairing(vk.delta_g2, proof.c)
    )


def verify(vk, proof, public_inputs):
    """Check a Groth16 proof.

    Raises:
        LengthMismatchError: wrong number of public inputs
        EncodingError: a public input is not below the scalar field order
    """
    prepared = prepare_inputs(vk, public_inputs)
    ok = lhs(proof) == rhs(vk, proof, prepared)
    logger.info("groth16 verification %s", "passed" if ok else "failed")
    return ok
