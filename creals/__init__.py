#!/usr/bin/env python3
"""
creals: Constructive Real Numbers

This library represents real numbers as expression graphs that can produce
an integer approximation to any requested binary precision with a guaranteed
error bound: approximate(p) returns N with |N - x * 2**p| < 1. Values are
built from exact integers and floats and combined with +, -, *, / and
inverse; they can be narrowed to IEEE 754 floats with correct rounding.

Examples:
    >>> from creals import from_int, from_f64
    >>> x = from_int(42) + from_int(13)
    >>> x.approximate(1)
    110
    >>> x.approximate(-2)
    13

    >>> big = from_int(1 << 62) * from_int(1 << 62)
    >>> (big + 1 - big).int64()
    1

    >>> from_f64(0.1).inverse().inverse().to_f64()
    0.1
    >>> float((from_int(1) / 3).to_f32())
    0.3333333432674408

Constants:
    BF16, FP16, FP32, FP64: Standard floating-point formats
    Real, Semantics: Classes for representing real numbers and float formats
    from_int, from_f32, from_f64, from_bits: Constructors for leaf values
"""

from .errors import DivisionDivergedError, NonFiniteError, NoNativeTypeError, RealError
from .formats import BF16, FP16, FP32, FP64, Semantics
from .real import (
    Constant,
    FloatLeaf,
    Inverse,
    Negative,
    Product,
    Real,
    Sum,
    from_bits,
    from_f32,
    from_f64,
    from_int,
)

version = "0.1.0"
