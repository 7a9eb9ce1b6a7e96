from math import isqrt

import pytest


def _is_prime(n: int) -> bool:
    """Plain trial division, independent of the sieve."""
    if n < 2:
        return False
    for d in range(2, isqrt(n) + 1):
        if n % d == 0:
            return False
    return True


@pytest.fixture
def is_prime():
    return _is_prime
