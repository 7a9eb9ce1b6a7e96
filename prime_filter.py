# prime_filter.py

from __future__ import annotations
from typing import Optional

import numpy as np

# widest value the sieve may hold by default (unsigned 64-bit)
U64_MAX: int = int(np.iinfo(np.uint64).max)


def width_limit(bits: int) -> Optional[int]:
    """Largest unsigned value representable in `bits` bits; 0 means unbounded."""
    if bits < 0:
        raise ValueError(f"bits must be >= 0, got {bits}")
    if bits == 0:
        return None
    return (1 << bits) - 1


class PrimeOverflowError(ArithmeticError):
    """A sieve value left the configured integer width."""

    def __init__(self, value: int, limit: int, what: str = "value"):
        super().__init__(f"{what} {value} exceeds integer limit {limit}")
        self.value = value
        self.limit = limit


class Filter:
    """
    Multiples of one prime `base`, starting at base^2 and stepping by base.
    Smaller multiples are already covered by the filters of smaller primes.
    """

    __slots__ = ("base", "state")

    def __init__(self, base: int, limit: Optional[int] = U64_MAX):
        square = base * base
        if limit is not None and square > limit:
            raise PrimeOverflowError(square, limit, what=f"square of {base}")
        self.base: int = base
        self.state: int = square

    @property
    def activation(self) -> int:
        return self.base * self.base

    def advance(self) -> int:
        self.state += self.base
        return self.state

    def matches_or_advance_to(self, n: int) -> bool:
        """Catch up to n (never moving backwards) and report whether n is a multiple."""
        while self.state < n:
            self.advance()
        return self.state == n

    def __repr__(self) -> str:
        return f"Filter(base={self.base}, state={self.state})"
