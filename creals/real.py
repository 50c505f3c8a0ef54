"""Constructive real numbers.

A Real denotes an exact real number x and answers approximate(p) with an
integer N such that |N - x * 2**p| < 1. Larger p asks for more bits; p is
usually negative for coarse answers about large numbers and positive for
fine answers about small ones.

Reals are immutable expression graphs. Leaves hold exact values; combinators
hold references to their operands and derive their approximations from
operand approximations at adaptively chosen precisions. Every combinator
remembers its most precise approximation so far and answers coarser requests
from it.
"""

import logging
from abc import ABC, abstractmethod
from typing import Generator, Optional, Tuple

import numpy as np

from . import config, materialize
from .cache import ApproximationCache
from .errors import DivisionDivergedError
from .evaluate import evaluate
from .formats import FP16, FP32, FP64, Semantics, bits_of, decompose

logger = logging.getLogger(__name__)

# What a combinator's compute() yields to the evaluator: (operand, precision)
Request = Tuple["Real", int]
Steps = Generator[Request, int, int]


def _shift(n: int, k: int) -> int:
    """n * 2**k, rounded toward negative infinity."""
    return n << k if k >= 0 else n >> -k


class Real(ABC):
    __slots__ = ()

    # Leaves have no cache; the evaluator calls scaled() on them directly.
    cache: Optional[ApproximationCache] = None

    def approximate(self, p: int) -> int:
        """Return N with |N - x * 2**p| < 1."""
        return evaluate(self, p)

    @property
    @abstractmethod
    def msd(self) -> Optional[int]:
        """bit_length of the last approximation minus its precision.

        An estimate of floor(log2(|x|)) + 1, or None before the first query.
        """

    @classmethod
    def of(cls, value) -> "Real":
        if isinstance(value, Real):
            return value
        if isinstance(value, (bool, np.bool_)):
            raise TypeError(f"cannot make a Real from {type(value).__name__}")
        if isinstance(value, (int, np.integer)):
            return from_int(int(value))
        if isinstance(value, np.float32):
            return from_f32(value)
        if isinstance(value, np.float16):
            return from_bits(FP16, bits_of(FP16, value))
        if isinstance(value, (float, np.floating)):
            return from_f64(float(value))
        raise TypeError(f"cannot make a Real from {type(value).__name__}")

    # Combinators

    def add(self, other: "Real") -> "Real":
        return Sum(self, other)

    def negate(self) -> "Real":
        return Negative(self)

    def subtract(self, other: "Real") -> "Real":
        return self.add(other.negate())

    def multiply(self, other: "Real") -> "Real":
        return Product(self, other)

    def inverse(self) -> "Real":
        return Inverse(self)

    def divide(self, other: "Real") -> "Real":
        return Product(self, other.inverse())

    def __add__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else self.add(other)

    def __radd__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else other.add(self)

    def __sub__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else self.subtract(other)

    def __rsub__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else other.subtract(self)

    def __mul__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else self.multiply(other)

    def __rmul__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else other.multiply(self)

    def __truediv__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else self.divide(other)

    def __rtruediv__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else other.divide(self)

    def __neg__(self):
        return self.negate()

    def __pos__(self):
        return self

    # Narrowing

    def to_int(self) -> int:
        return materialize.to_int(self)

    def int32(self) -> int:
        return materialize.int32(self)

    def int64(self) -> int:
        return materialize.int64(self)

    def to_bits(self, sem: Semantics) -> int:
        return materialize.to_bits(self, sem)

    def to_float(self, sem: Semantics):
        return materialize.to_native(self, sem)

    def to_f32(self) -> np.float32:
        return materialize.to_f32(self)

    def to_f64(self) -> float:
        return materialize.to_f64(self)

    def __int__(self):
        return self.to_int()

    def __float__(self):
        return self.to_f64()


def _coerce(value) -> Optional[Real]:
    try:
        return Real.of(value)
    except TypeError:
        return None


# Leaves


class Leaf(Real):
    __slots__ = ()

    @abstractmethod
    def scaled(self, p: int) -> int:
        """The exact value times 2**p, floored."""

    def approximate(self, p: int) -> int:
        return self.scaled(p)


class Constant(Leaf):
    """An exact integer."""

    __slots__ = ("value",)

    def __init__(self, value: int):
        self.value = value

    def scaled(self, p: int) -> int:
        return _shift(self.value, p)

    @property
    def msd(self) -> int:
        return abs(self.value).bit_length()

    def __repr__(self):
        return f"Constant({self.value})"


class FloatLeaf(Leaf):
    """The exact dyadic value mantissa * 2**exponent of a finite float.

    The sign lives in the mantissa, so -0.0 and +0.0 give the same leaf and
    a negative zero narrows back to +0.0.
    """

    __slots__ = ("mantissa", "exponent")

    def __init__(self, mantissa: int, exponent: int):
        self.mantissa = mantissa
        self.exponent = exponent

    @classmethod
    def from_bits(cls, sem: Semantics, bits: int) -> "FloatLeaf":
        return cls(*decompose(sem, bits))

    def scaled(self, p: int) -> int:
        return _shift(self.mantissa, p + self.exponent)

    @property
    def msd(self) -> int:
        return abs(self.mantissa).bit_length() + self.exponent

    def __repr__(self):
        return f"FloatLeaf({self.mantissa}, {self.exponent})"


def from_int(n: int) -> Real:
    return Constant(n)


def from_bits(sem: Semantics, bits: int) -> Real:
    return FloatLeaf.from_bits(sem, bits)


def from_f32(value) -> Real:
    """The exact value of value rounded to single precision."""
    return from_bits(FP32, bits_of(FP32, value))


def from_f64(value) -> Real:
    return from_bits(FP64, bits_of(FP64, value))


# Combinators


class Combinator(Real):
    """A node whose approximations are computed from its operands.

    Subclasses implement compute() as a generator of operand requests; the
    shared ApproximationCache answers repeated and coarser queries.
    """

    __slots__ = ("cache",)

    def __init__(self):
        self.cache = ApproximationCache()

    @abstractmethod
    def compute(self, p: int) -> Steps:
        """Yield (operand, precision) requests; return the approximation at p."""

    @property
    def msd(self) -> Optional[int]:
        return self.cache.msd


class Sum(Combinator):
    __slots__ = ("left", "right")

    def __init__(self, left: Real, right: Real):
        super().__init__()
        self.left = left
        self.right = right

    def compute(self, p: int) -> Steps:
        # Each operand is off by less than a unit at p + 3, so the sum is off
        # by less than two; the +1 keeps the floor shift within one unit at p.
        a = yield self.left, p + 3
        b = yield self.right, p + 3
        return (a + b + 1) >> 3

    def __repr__(self):
        return f"Sum({self.left!r}, {self.right!r})"


class Negative(Combinator):
    __slots__ = ("operand",)

    def __init__(self, operand: Real):
        super().__init__()
        self.operand = operand

    def compute(self, p: int) -> Steps:
        a = yield self.operand, p
        return -a

    def __repr__(self):
        return f"Negative({self.operand!r})"


class Product(Combinator):
    __slots__ = ("left", "right")

    PADDING = 4
    # Approximations with fewer significant bits than this are too close to
    # zero to tell how much precision the other operand needs.
    MIN_BITS = 3

    def __init__(self, left: Real, right: Real):
        super().__init__()
        self.left = left
        self.right = right

    def compute(self, p: int) -> Steps:
        target = p + self.PADDING
        lp = target // 2
        rp = target - lp
        a = yield self.left, lp
        b = yield self.right, rp
        # An operand that is still tiny at the full target precision adds
        # nothing at p; the corrections below still bound its error.
        while abs(a).bit_length() < self.MIN_BITS and lp < target:
            lp += 1
            a = yield self.left, lp
        while abs(b).bit_length() < self.MIN_BITS and rp < target:
            rp += 1
            b = yield self.right, rp

        # The error of b is multiplied by |a| and vice versa, so a large
        # left value needs a finer right approximation.
        extra = lp + rp - p
        left_missing = abs(a).bit_length() + 4 - extra
        if left_missing > 0:
            rp += left_missing
            extra += left_missing
            logger.debug("product: right operand to precision %d", rp)
            b = yield self.right, rp
        right_missing = abs(b).bit_length() + 3 - extra
        if right_missing > 0:
            lp += right_missing
            extra += right_missing
            logger.debug("product: left operand to precision %d", lp)
            a = yield self.left, lp

        # Propagated error is now under half a unit at p; round the rest.
        return (a * b + (1 << (extra - 1))) >> extra

    def __repr__(self):
        return f"Product({self.left!r}, {self.right!r})"


class Inverse(Combinator):
    __slots__ = ("operand",)

    MIN_BITS = 2

    def __init__(self, operand: Real):
        super().__init__()
        self.operand = operand

    def _check(self, q: int):
        if q > config.MAX_PRECISION:
            logger.warning("inverse: operand still indistinguishable from zero at precision %d", q)
            raise DivisionDivergedError(self.operand, q)

    def compute(self, p: int) -> Steps:
        q = 0
        a = yield self.operand, q
        while abs(a).bit_length() < self.MIN_BITS:
            q = 2 * q + 1
            self._check(q)
            logger.debug("inverse: probing operand at precision %d", q)
            a = yield self.operand, q

        # With |a| >= 2**(n-1) the quotient is off by less than
        # 2**(p + q - 2n + 3); keep that under half a unit.
        # The operand is known to be nonzero here, so refinement is unbounded.
        deficit = p + q - 2 * abs(a).bit_length() + 4
        while deficit > 0:
            q += deficit
            logger.debug("inverse: operand to precision %d", q)
            a = yield self.operand, q
            deficit = p + q - 2 * abs(a).bit_length() + 4

        if p + q < 0:
            return 0
        magnitude = abs(a)
        n = ((1 << (p + q + 1)) + magnitude) // (2 * magnitude)
        return -n if a < 0 else n

    def __repr__(self):
        return f"Inverse({self.operand!r})"
