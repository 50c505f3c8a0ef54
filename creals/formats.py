"""IEEE-754 binary interchange formats and their bit layouts."""

from typing import NamedTuple, Tuple

import numpy as np

from .errors import NoNativeTypeError, NonFiniteError


class Semantics(NamedTuple):
    """A binary floating-point format.

    exponent is the width of the biased exponent field. precision is the
    number of significand bits including the implicit integer bit, so the
    stored fraction field is precision - 1 bits wide.
    """

    exponent: int
    precision: int

    @property
    def bias(self) -> int:
        return (1 << (self.exponent - 1)) - 1

    @property
    def fraction_bits(self) -> int:
        return self.precision - 1

    @property
    def width(self) -> int:
        return 1 + self.exponent + self.fraction_bits

    @property
    def max_exponent(self) -> int:
        """The all-ones exponent field, reserved for infinities and NaNs."""
        return (1 << self.exponent) - 1

    @property
    def implicit_bit(self) -> int:
        return 1 << self.fraction_bits

    @property
    def subnormal_scale(self) -> int:
        """p such that the smallest subnormal is 2^-p."""
        return self.bias + self.precision - 2

    def __repr__(self):
        return f"Semantics {{ exponent: {self.exponent}, precision: {self.precision} }}"


# Parameters match IEEE 754 standard formats
BF16 = Semantics(8, 8)  # BFloat16
FP16 = Semantics(5, 11)  # Half precision
FP32 = Semantics(8, 24)  # Single precision
FP64 = Semantics(11, 53)  # Double precision

# Formats numpy can hold natively: (unsigned view, float dtype)
_NATIVE = {
    FP16: (np.uint16, np.float16),
    FP32: (np.uint32, np.float32),
    FP64: (np.uint64, np.float64),
}


def split(sem: Semantics, bits: int) -> Tuple[int, int, int]:
    """Split a bit pattern into (sign, biased exponent, fraction)."""
    sign = (bits >> (sem.width - 1)) & 1
    exp = (bits >> sem.fraction_bits) & sem.max_exponent
    frac = bits & (sem.implicit_bit - 1)
    return sign, exp, frac


def pack(sem: Semantics, sign: int, exp: int, frac: int) -> int:
    """Pack using addition so a carry out of the fraction bumps the exponent."""
    return (sign << (sem.width - 1)) + (exp << sem.fraction_bits) + frac


def decompose(sem: Semantics, bits: int) -> Tuple[int, int]:
    """Return (mantissa, exponent) with value == mantissa * 2**exponent exactly.

    The mantissa carries the sign. Subnormals and zeros use the minimum
    exponent and no implicit bit.
    """
    sign, exp, frac = split(sem, bits)
    if exp == sem.max_exponent:
        raise NonFiniteError(sem, bits)
    if exp != 0:
        mantissa = frac | sem.implicit_bit
        exponent = exp - sem.bias - sem.fraction_bits
    else:
        mantissa = frac
        exponent = 1 - sem.bias - sem.fraction_bits
    return (-mantissa if sign else mantissa), exponent


def native_types(sem: Semantics):
    try:
        return _NATIVE[sem]
    except KeyError:
        raise NoNativeTypeError(sem) from None


def bits_of(sem: Semantics, value) -> int:
    """The bit pattern of value after conversion to the native type of sem."""
    uint, dtype = native_types(sem)
    return int(np.asarray(value, dtype=dtype).view(uint))


def native_of(sem: Semantics, bits: int):
    """The numpy scalar whose bit pattern is bits."""
    uint, dtype = native_types(sem)
    return np.asarray(bits, dtype=uint).view(dtype)[()]
