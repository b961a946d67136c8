"""
zkcircom errors
===============

Typed exception hierarchy shared by the container parsers, the witness
engine, the circuit assembler and the EVM encoder.

All errors expose:
- .code : stable machine-readable code (snake_case)
- .data : optional structured payload (dict)

Every error is fatal for the current operation: parsers and the witness
engine never return partial results.

    >>> from zkcircom.errors import TruncatedError
    >>> raise TruncatedError("section 5 runs past end of buffer", data={"section": 5})
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence


class ZkCircomError(Exception):
    """Base class for every error raised by zkcircom."""

    default_code = "zkcircom_error"

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        data: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.data: Dict[str, Any] = dict(data) if data else {}

    def __str__(self) -> str:
        if self.message:
            return f"{self.code}: {self.message}"
        return self.code


class FormatError(ZkCircomError):
    """Malformed or unsupported container header or section layout."""

    default_code = "format_error"


class TruncatedError(FormatError):
    """The buffer ends before a declared section (or table entry) does."""

    default_code = "truncated"


class CurveMismatchError(ZkCircomError):
    """An embedded field modulus disagrees with the configured curve."""

    default_code = "curve_mismatch"


class WireIndexOutOfRangeError(ZkCircomError):
    """A linear-combination term references a wire >= the declared wire count."""

    default_code = "wire_index_out_of_range"


class LengthMismatchError(ZkCircomError):
    """Witness / public-input length disagrees with the constraint system or key."""

    default_code = "length_mismatch"


class UnknownSignalError(ZkCircomError):
    """A named input does not match any signal of the witness program."""

    default_code = "unknown_signal"

    def __init__(self, name: str, message: str = "", **kwargs: Any) -> None:
        super().__init__(message or f"signal {name!r} not found in witness program", **kwargs)
        self.name = name


class WitnessComputationError(ZkCircomError):
    """The sandbox reported an error while computing the witness.

    Carries the sandbox diagnostic code and its operand values.
    """

    default_code = "witness_computation"

    def __init__(
        self,
        error_code: int,
        message: str = "",
        operands: Sequence[Any] = (),
        **kwargs: Any,
    ) -> None:
        super().__init__(message or f"witness program error {error_code}", **kwargs)
        self.error_code = error_code
        self.operands = tuple(operands)


class EncodingError(ZkCircomError):
    """Compatibility re-encoding was given an input of the wrong shape."""

    default_code = "encoding_error"


__all__ = [
    "ZkCircomError",
    "FormatError",
    "TruncatedError",
    "CurveMismatchError",
    "WireIndexOutOfRangeError",
    "LengthMismatchError",
    "UnknownSignalError",
    "WitnessComputationError",
    "EncodingError",
]
