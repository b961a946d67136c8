"""
Radix-2 FFT over FR
===================

Evaluation ↔ coefficient conversion used by the Groth16 prover.

**FFT / IFFT (Number Theoretic Transform)**:
  - FFT: coefficients → evaluations on {1, ω, ..., ω^(n-1)}
  - IFFT: evaluations → coefficients (interpolation)
  Iterative Cooley-Tukey with a bit-reversal permutation.

**Coset FFT**:
  Evaluations on k·H = {k, k·ω, ..., k·ω^(n-1)}. The prover evaluates
  a(x)·b(x) - c(x) on the odd coset of the doubled domain, where the
  vanishing polynomial x^n - 1 is the constant -2.

Example usage:
    >>> w = get_root_of_unity(4)
    >>> evals = fft([FR(1), FR(2), FR(3), FR(0)], w)
    >>> ifft(evals, w)
    [1, 2, 3, 0]
"""

from zkcircom.field import FR, log2


def _as_fr(values):
    return [v if isinstance(v, FR) else FR(v) for v in values]


def _bit_reverse(values):
    n = len(values)
    bits = log2(n)
    out = list(values)
    for i in range(n):
        j = int(format(i, f"0{bits}b")[::-1], 2) if bits else 0
        if i < j:
            out[i], out[j] = out[j], out[i]
    return out


def fft(coeffs, omega):
    """Evaluate the polynomial with the given coefficients on the powers of ω.

    Args:
        coeffs: [c₀, ..., c_{n-1}] (length a power of two)
        omega: primitive n-th root of unity

    Returns:
        list[FR]: [p(1), p(ω), ..., p(ω^{n-1})]
    """
    n = len(coeffs)
    if n == 0 or n & (n - 1):
        raise ValueError(f"FFT length must be a power of two: {n}")

    values = _bit_reverse(_as_fr(coeffs))
    size = 2
    while size <= n:
        half = size // 2
        step = omega ** (n // size)
        for start in range(0, n, size):
            w = FR(1)
            for j in range(start, start + half):
                u = values[j]
                v = values[j + half] * w
                values[j] = u + v
                values[j + half] = u - v
                w *= step
        size *= 2
    return values


def ifft(evals, omega):
    """Interpolate: inverse of :func:`fft`.

    F⁻¹ = (1/n) · F(ω⁻¹)
    """
    scale = FR(1) / FR(len(evals))
    return [x * scale for x in fft(evals, FR(1) / omega)]


def shift_coeffs(coeffs, k):
    """cᵢ → kⁱ · cᵢ, i.e. the coefficients of p(k·x)."""
    out = []
    power = FR(1)
    for c in _as_fr(coeffs):
        out.append(c * power)
        power *= k
    return out


def coset_fft(coeffs, omega, k):
    """Evaluate on the coset k·H."""
    return fft(shift_coeffs(coeffs, k), omega)
