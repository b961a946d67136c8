"""
Circuit assembler
=================

Pairs a parsed constraint system with a computed witness into a provable
instance.

For every constraint (A, B, C) and witness w:

    ⟨A, w⟩ · ⟨B, w⟩ = ⟨C, w⟩

The first ``num_inputs`` wires form the public part; wire 0 is the
constant 1 and is not reported as a public input.
"""

import logging
from typing import Optional, Sequence

from zkcircom.errors import LengthMismatchError
from zkcircom.field import FR

logger = logging.getLogger(__name__)


def evaluate_lc(lc, witness):
    """⟨lc, w⟩ = Σ coeff · w[wire]."""
    acc = FR(0)
    for wire, coeff in lc:
        acc += coeff * witness[wire]
    return acc


class CircomCircuit:
    """A constraint system plus (optionally) its witness.

    Without a witness the instance is only good for key generation.
    """

    def __init__(self, r1cs, witness: Optional[Sequence[FR]] = None):
        self.r1cs = r1cs
        self._witness = None if witness is None else tuple(witness)

    @property
    def has_witness(self):
        return self._witness is not None

    @property
    def full_assignment(self):
        return self._require_witness()

    @property
    def public_inputs(self):
        return list(self._require_witness()[1:self.r1cs.num_inputs])

    @property
    def evaluations(self):
        w = self._require_witness()
        return [
            (evaluate_lc(a, w), evaluate_lc(b, w), evaluate_lc(c, w))
            for a, b, c in self.r1cs.constraints
        ]

    def unsatisfied_constraints(self):
        """Indices of constraints with ⟨A,w⟩·⟨B,w⟩ ≠ ⟨C,w⟩."""
        return [i for i, (a, b, c) in enumerate(self.evaluations) if a * b != c]

    def is_satisfied(self):
        return not self.unsatisfied_constraints()

    def _require_witness(self):
        if self._witness is None:
            raise LengthMismatchError("circuit has no witness assigned")
        return self._witness


def assemble(r1cs, witness):
    """Bind ``witness`` (indexed by wire) to ``r1cs``.

    No satisfiability check is performed; see
    :meth:`CircomCircuit.is_satisfied`.

    Raises:
        LengthMismatchError: ``len(witness) != r1cs.n_wires``
    """
    if len(witness) != r1cs.n_wires:
        raise LengthMismatchError(
            f"witness has {len(witness)} values, constraint system has {r1cs.n_wires} wires",
            data={"witness": len(witness), "wires": r1cs.n_wires},
        )
    values = [w if isinstance(w, FR) else FR(int(w)) for w in witness]
    logger.debug("assembled circuit: %d wires, %d public", r1cs.n_wires, r1cs.n_public)
    return CircomCircuit(r1cs, values)
