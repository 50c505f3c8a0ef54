"""Narrow a Real to fixed-width integers and IEEE-754 floats."""

import logging

import numpy as np

from .formats import FP32, FP64, Semantics, native_of, pack

logger = logging.getLogger(__name__)

# Extra bits requested beyond the target significand on the first attempt.
GUARD_BITS = 32
# A value this close to a tie is rounded as the tie it approximates.
MAX_GUARD_BITS = 1024


def round_half_even(m: int, bits: int) -> int:
    """m / 2**bits rounded to nearest, ties to even. m must be non-negative."""
    q = m >> bits
    rem = m & ((1 << bits) - 1)
    half = 1 << (bits - 1)
    if rem > half or (rem == half and q & 1):
        q += 1
    return q


def _is_half(m: int, bits: int) -> bool:
    return m & ((1 << bits) - 1) == 1 << (bits - 1)


def _round(x, sem: Semantics, guard: int):
    """Round x to sem using guard extra bits.

    Returns the bit pattern and whether the guard bits read exactly one half.
    The approximation is within one unit of the true value, so that is the
    only remainder for which the true value may lie on either side of a tie.
    """
    target = sem.precision + guard
    # Approximations at this precision resolve guard bits below the smallest
    # subnormal; anything finer cannot change the result.
    floor_p = sem.subnormal_scale + guard

    p = 0
    a = x.approximate(p)
    n = abs(a).bit_length()
    while n < target and p < floor_p:
        p = min(p + target - n, floor_p)
        logger.debug("materialize: precision %d", p)
        a = x.approximate(p)
        n = abs(a).bit_length()

    sign = 1 if a < 0 else 0
    m = abs(a)
    if n > target:
        # Coarsening a valid approximation keeps it valid.
        m >>= n - target
        p -= n - target
    elif n < target:
        # Subnormal or zero: m counts 2**-guard units of the smallest
        # subnormal. A carry into the implicit bit gives the smallest normal.
        return pack(sem, sign, 0, round_half_even(m, guard)), _is_half(m, guard)

    sig = round_half_even(m, guard)
    exp = guard - p + sem.bias + sem.fraction_bits
    if sig >> sem.precision:
        sig >>= 1
        exp += 1
    if exp >= sem.max_exponent:
        return pack(sem, sign, sem.max_exponent, 0), _is_half(m, guard)
    return pack(sem, sign, exp, sig - sem.implicit_bit), _is_half(m, guard)


def to_bits(x, sem: Semantics) -> int:
    """The bit pattern of x rounded to the nearest value of sem.

    Values that look like a tie are re-approximated with twice the guard bits
    until the tie breaks or MAX_GUARD_BITS is reached.
    """
    guard = GUARD_BITS
    bits, tie = _round(x, sem, guard)
    while tie and guard < MAX_GUARD_BITS:
        guard *= 2
        logger.debug("materialize: near tie, retrying with %d guard bits", guard)
        bits, tie = _round(x, sem, guard)
    return bits


def to_native(x, sem: Semantics):
    return native_of(sem, to_bits(x, sem))


def to_f32(x) -> np.float32:
    return to_native(x, FP32)


def to_f64(x) -> float:
    return float(to_native(x, FP64))


def _wrap(n: int, width: int) -> int:
    """Two's complement truncation of n to width bits."""
    half = 1 << (width - 1)
    return ((n + half) & ((1 << width) - 1)) - half


def to_int(x) -> int:
    """approximate(0): within one of the true value, not rounded."""
    return x.approximate(0)


def int32(x) -> int:
    return _wrap(to_int(x), 32)


def int64(x) -> int:
    return _wrap(to_int(x), 64)
