"""Shared helpers for the creals test suite."""

import random
from fractions import Fraction

import pytest

from creals import FP32, FP64, Constant, FloatLeaf, Inverse, Negative, Product, Sum

SEED = 0xC4EA1


@pytest.fixture
def rng() -> random.Random:
    return random.Random(SEED)


def exact(node) -> Fraction:
    """The value a node denotes, computed independently with Fractions."""
    if isinstance(node, Constant):
        return Fraction(node.value)
    if isinstance(node, FloatLeaf):
        return node.mantissa * Fraction(2) ** node.exponent
    if isinstance(node, Sum):
        return exact(node.left) + exact(node.right)
    if isinstance(node, Negative):
        return -exact(node.operand)
    if isinstance(node, Product):
        return exact(node.left) * exact(node.right)
    if isinstance(node, Inverse):
        return 1 / exact(node.operand)
    raise TypeError(type(node).__name__)


def within_one(node, p: int, value: Fraction = None) -> bool:
    """True if node.approximate(p) meets |N - x * 2**p| < 1."""
    if value is None:
        value = exact(node)
    return abs(node.approximate(p) - value * Fraction(2) ** p) < 1


# Exponents and significands likely to trigger edge cases, derived from the
# format so one table serves every width.
SPECIAL_SIGS = ["zero", "one", "two", "half", "top", "max", "max-1"]


def _special_exp(rng: random.Random, sem) -> int:
    return rng.choice([
        0,  # subnormal / zero
        1,  # smallest normal
        2,
        sem.bias - 1,  # 0.5 .. 1.0
        sem.bias,  # 1.0 .. 2.0
        sem.bias + 1,
        sem.bias + sem.fraction_bits,  # ulp == 1
        sem.max_exponent - 2,
        sem.max_exponent - 1,  # largest finite
    ])


def _special_sig(rng: random.Random, sem) -> int:
    top = sem.implicit_bit - 1
    return {
        "zero": 0,
        "one": 1,
        "two": 2,
        "half": sem.implicit_bit >> 1,
        "top": top & ~((1 << (sem.fraction_bits // 2)) - 1),
        "max": top,
        "max-1": top - 1,
    }[rng.choice(SPECIAL_SIGS)]


def weighted_bits(rng: random.Random, sem, exp_range=None) -> int:
    """A finite bit pattern weighted toward boundary cases.

    exp_range limits the biased exponent to an inclusive (low, high) pair.
    """
    low, high = exp_range or (0, sem.max_exponent - 1)

    def special_exp():
        exp = _special_exp(rng, sem)
        return exp if low <= exp <= high else rng.randint(low, high)

    r = rng.randint(0, 99)
    if r < 30:
        # 30%: special exponent + random significand
        exp = special_exp()
        sig = rng.randint(0, sem.implicit_bit - 1)
    elif r < 50:
        # 20%: random exponent + special significand
        exp = rng.randint(low, high)
        sig = _special_sig(rng, sem)
    elif r < 60:
        # 10%: special exponent + special significand
        exp = special_exp()
        sig = _special_sig(rng, sem)
    else:
        # 40%: fully random
        exp = rng.randint(low, high)
        sig = rng.randint(0, sem.implicit_bit - 1)
    sign = rng.randint(0, 1)
    return (sign << (sem.width - 1)) | (exp << sem.fraction_bits) | sig


def weighted_f32(rng, exp_range=None) -> int:
    return weighted_bits(rng, FP32, exp_range)


def weighted_f64(rng, exp_range=None) -> int:
    return weighted_bits(rng, FP64, exp_range)
