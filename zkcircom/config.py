"""
zkcircom configuration
======================

Two small configuration surfaces:

**CurveConfig**:
  The curve every container and witness program is checked against.
  Only BN254 (``bn128`` in circom/snarkjs and py_ecc naming) is compiled
  in; a container or witness program built for any other field is
  rejected with ``CurveMismatchError``.

**EngineConfig**:
  Knobs of the witness sandbox. Defaults can be overridden via
  environment variables:

    ZKCIRCOM_SANITY_CHECK=1          # run the witness program with checks on
    ZKCIRCOM_WASM_MEMORY_PAGES=2000  # initial linear memory, 64 KiB pages
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from py_ecc import bn128


@dataclass(frozen=True)
class CurveConfig:
    """Field parameters of a pairing-friendly curve.

    Attributes:
        name: circom/snarkjs curve name
        q: base field modulus (curve point coordinates)
        r: scalar field modulus (group order, witness values)
        n8q: bytes per base field element
        n8r: bytes per scalar field element
    """

    name: str
    q: int
    r: int
    n8q: int
    n8r: int

    @property
    def g1_size(self) -> int:
        return 2 * self.n8q

    @property
    def g2_size(self) -> int:
        return 4 * self.n8q


BN128 = CurveConfig(
    name="bn128",
    q=bn128.field_modulus,
    r=bn128.curve_order,
    n8q=32,
    n8r=32,
)


_TRUE = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUE


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw.strip(), 0)
    except ValueError as e:
        raise ValueError(f"Invalid integer for {name}: {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class EngineConfig:
    sanity_check: bool = False
    memory_pages: int = 2000

    @classmethod
    def from_env(cls) -> "EngineConfig":
        return cls(
            sanity_check=_env_bool("ZKCIRCOM_SANITY_CHECK", cls.sanity_check),
            memory_pages=_env_int("ZKCIRCOM_WASM_MEMORY_PAGES", cls.memory_pages),
        )
