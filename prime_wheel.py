# prime_wheel.py

from __future__ import annotations
import logging
from math import gcd, prod
from typing import Iterator, Optional, Sequence, Tuple

import numpy as np

from prime_filter import U64_MAX, PrimeOverflowError

logger = logging.getLogger(__name__)

DEFAULT_WHEEL_PRIMES: Tuple[int, ...] = (2, 3, 5, 7)

# 2*3*5*7*11*13*17; the next wheel (9699690) costs far more to build than it saves
MAX_WHEEL_MODULUS: int = 510510
MAX_WHEEL_PRIMES: int = 7


def _coprime_residues(modulus: int) -> np.ndarray:
    """Integers in [1, modulus + 1] sharing no factor with modulus."""
    if modulus > MAX_WHEEL_MODULUS:
        raise ValueError(f"wheel modulus {modulus} exceeds {MAX_WHEEL_MODULUS}")
    r = np.arange(1, modulus + 2, dtype=np.int64)
    return r[np.gcd(r, modulus) == 1]


def _gaps(residues: np.ndarray) -> Tuple[int, ...]:
    return tuple(int(g) for g in np.diff(residues))


def wheel_gaps(primes: Sequence[int]) -> Tuple[int, ...]:
    """
    Distances between consecutive integers coprime to prod(primes), over one
    full turn starting at 1. The gaps sum to the modulus, so the pattern
    repeats additively forever.
    """
    return _gaps(_coprime_residues(prod(primes)))


class Wheel:
    """
    Candidate source that skips multiples of a small fixed prime set.
    With no primes it is a plain +1 counter.
    """

    def __init__(self, primes: Sequence[int] = DEFAULT_WHEEL_PRIMES, seed: int = 1,
                 limit: Optional[int] = U64_MAX):
        self.primes: Tuple[int, ...] = tuple(primes)
        self.modulus: int = prod(self.primes)
        residues = _coprime_residues(self.modulus)
        if gcd(seed, self.modulus) != 1:
            raise ValueError(f"seed {seed} is not coprime to {self.modulus}")
        self.gaps: Tuple[int, ...] = _gaps(residues)
        # cursor sits on the gap that leads away from the seed
        self.position: int = int(np.searchsorted(residues, (seed - 1) % self.modulus + 1))
        self.value: int = seed
        self.limit = limit
        logger.debug("wheel %s: modulus=%d, %d candidates per turn",
                     self.primes, self.modulus, len(self.gaps))

    def next(self) -> int:
        value = self.value + self.gaps[self.position]
        if self.limit is not None and value > self.limit:
            raise PrimeOverflowError(value, self.limit, what="wheel candidate")
        self.position += 1
        if self.position == len(self.gaps):
            self.position = 0
        self.value = value
        return value

    __next__ = next

    def __iter__(self) -> Iterator[int]:
        return self
