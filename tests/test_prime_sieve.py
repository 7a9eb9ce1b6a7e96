from itertools import islice

import pytest

from prime_filter import PrimeOverflowError
from prime_sieve import (
    STRATEGIES,
    Filter,
    HeapActiveSet,
    IncrementalSieve,
    LinearActiveSet,
    leading_primes,
    nth,
    skip,
    take,
)

WHEELS = [(), (2,), (2, 3), (2, 3, 5, 7), (2, 3, 5, 7, 11, 13)]


@pytest.fixture(params=sorted(STRATEGIES))
def strategy(request):
    return request.param


def test_first_five():
    assert take(5) == [2, 3, 5, 7, 11]


@pytest.mark.parametrize("wheel", WHEELS)
def test_first_thousand_are_prime_and_increasing(strategy, wheel, is_prime):
    primes = take(1000, strategy=strategy, wheel_primes=wheel)
    assert len(primes) == 1000
    assert all(is_prime(p) for p in primes)
    assert all(a < b for a, b in zip(primes, primes[1:]))


def test_no_prime_is_missed(is_prime):
    primes = take(1229)
    assert primes == [n for n in range(10_000) if is_prime(n)]


@pytest.mark.parametrize("wheel", [(), (2, 3, 5, 7)])
def test_strategies_agree(wheel):
    linear = take(5000, strategy="linear", wheel_primes=wheel)
    heap = take(5000, strategy="heap", wheel_primes=wheel)
    assert linear == heap


def test_wheel_does_not_change_the_sequence():
    assert take(3000, wheel_primes=()) == take(3000, wheel_primes=(2, 3, 5, 7, 11))


@pytest.mark.parametrize("index, expected", [(0, 2), (4, 11), (10_000, 104743), (99_999, 1299709)])
def test_nth(index, expected):
    assert nth(index) == expected


@pytest.mark.slow
def test_millionth_prime():
    assert nth(999_999) == 15485863


def test_step_reports_composites_as_none():
    s = IncrementalSieve(wheel_primes=())
    assert [s.step() for _ in range(8)] == [2, 3, None, 5, None, 7, None, None]
    assert s.state == 9


def test_filters_wait_until_their_square():
    s = IncrementalSieve(wheel_primes=())
    assert [s.produce_next() for _ in range(3)] == [2, 3, 5]
    # only 4 has been reached, so only the filter for 2 is active
    assert len(s.active) == 1
    assert [f.base for f in s.pending] == [3, 5]
    assert s.produce_next() == 7
    assert len(s.active) == 1
    assert s.produce_next() == 11
    assert len(s.active) == 2
    assert [f.base for f in s.pending] == [5, 7, 11]


def test_wheel_primes_get_no_filters():
    s = IncrementalSieve()
    assert [s.produce_next() for _ in range(4)] == [2, 3, 5, 7]
    assert s.candidates == 0
    assert not s.pending
    assert s.produce_next() == 11
    assert s.candidates == 1
    assert [f.base for f in s.pending] == [11]


def test_fresh_instance_restarts():
    s = IncrementalSieve()
    first = list(islice(s, 50))
    assert list(islice(s, 5)) == [233, 239, 241, 251, 257]
    assert list(islice(IncrementalSieve(), 50)) == first


def test_iteration_protocol():
    s = IncrementalSieve()
    assert iter(s) is s
    assert next(s) == 2
    assert next(s) == 3


def test_skip_and_take():
    s = skip(10, IncrementalSieve())
    assert s.produce_next() == 31
    assert take(0) == []
    with pytest.raises(ValueError):
        take(-1)
    with pytest.raises(ValueError):
        skip(-1, IncrementalSieve())


def test_stats():
    s = IncrementalSieve(strategy="linear", wheel_primes=())
    skip(25, s)
    stats = s.stats()
    assert stats["strategy"] == "linear"
    assert stats["wheel"] == []
    assert stats["primes_found"] == 25
    assert stats["last_candidate"] == 97
    assert stats["candidates"] == 96
    # 2, 3, 5 and 7 are active once 49 has been reached
    assert stats["active_filters"] == 4
    assert stats["pending_filters"] == 21


@pytest.mark.parametrize("wheel", [(), (2, 3, 5, 7)])
def test_overflow_surfaces(wheel):
    s = IncrementalSieve(wheel_primes=wheel, limit=100)
    assert [s.produce_next() for _ in range(4)] == [2, 3, 5, 7]
    # 11 * 11 no longer fits
    with pytest.raises(PrimeOverflowError):
        s.produce_next()


def test_unbounded_limit():
    s = IncrementalSieve(limit=None)
    assert skip(100, s).produce_next() == 547


@pytest.mark.parametrize("wheel", [(3,), (2, 5), (2, 3, 7)])
def test_wheel_must_be_leading_primes(wheel):
    with pytest.raises(ValueError):
        IncrementalSieve(wheel_primes=wheel)


def test_unknown_strategy():
    with pytest.raises(ValueError):
        IncrementalSieve(strategy="bogus")


def test_leading_primes():
    assert leading_primes(0) == ()
    assert leading_primes(6) == (2, 3, 5, 7, 11, 13)


@pytest.mark.parametrize("active_cls", [LinearActiveSet, HeapActiveSet])
def test_active_sets(active_cls):
    active = active_cls()
    assert not active.matches(5)
    active.add(Filter(2))
    active.add(Filter(3))
    assert len(active) == 2
    assert active.matches(6)
    assert not active.matches(7)
    assert active.matches(9)
    assert not active.matches(11)


def test_heap_stops_at_first_match():
    active = HeapActiveSet()
    for p in (2, 3, 5):
        active.add(Filter(p))
    assert active.matches(30)
    # the filter that hit 30 first is still sitting on it
    assert active.heap[0][0] == 30
    assert not active.matches(31)
    assert all(state > 31 for state, _, _ in active.heap)


def test_oversized_wheel_rejected_by_sieve():
    with pytest.raises(ValueError):
        IncrementalSieve(wheel_primes=leading_primes(10))
