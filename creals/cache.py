import threading
from typing import Optional


class ApproximationCache:
    """The most recent (precision, value) pair computed for a node.

    Any request at or below the cached precision is answered by shifting the
    cached value right; dropping low bits of a valid approximation leaves a
    valid one. The lock is held by the evaluator across lookup, compute and
    store, so readers never see a torn pair.
    """

    __slots__ = ("lock", "precision", "value", "valid")

    def __init__(self):
        self.lock = threading.Lock()
        self.precision = 0
        self.value = 0
        self.valid = False

    def lookup(self, p: int) -> Optional[int]:
        if self.valid and p <= self.precision:
            return self.value >> (self.precision - p)
        return None

    def store(self, p: int, value: int):
        self.precision = p
        self.value = value
        self.valid = True

    @property
    def msd(self) -> Optional[int]:
        with self.lock:
            if not self.valid:
                return None
            return abs(self.value).bit_length() - self.precision
