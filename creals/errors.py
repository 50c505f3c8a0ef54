class RealError(ArithmeticError):
    """All exceptions raised by this package subclass from this."""


class NonFiniteError(RealError, ValueError):
    """A leaf was built from an infinity or a NaN.

    Takes the format and the offending bit pattern.
    """

    @property
    def semantics(self):
        return self.args[0]

    @property
    def bits(self):
        return self.args[1]

    def __str__(self):
        return f"non-finite bit pattern {self.bits:#x} in {self.semantics!r}"


class DivisionDivergedError(RealError, ZeroDivisionError):
    """An inverse could not separate its operand from zero.

    Takes the operand node and the last precision it was approximated at.
    """

    @property
    def operand(self):
        return self.args[0]

    @property
    def precision(self):
        return self.args[1]

    def __str__(self):
        return (f"division diverged: operand not distinguishable from zero "
                f"at precision {self.precision}")


class NoNativeTypeError(RealError, TypeError):
    """The format has no native numpy scalar type."""

    def __str__(self):
        return f"no native type for {self.args[0]!r}"
