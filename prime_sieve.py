#!/usr/bin/env python3
"""
Incremental Prime Sieve — library and CLI

An unbounded, forward-only prime generator. Every discovered prime p gets a
Filter walking its multiples from p^2; a filter waits in a FIFO pending queue
until the candidate reaches p^2, then joins the active set that decides
compositeness. Candidates come from a Wheel that skips multiples of the
leading primes.

Usage examples:
  - First 100 primes:
      python prime_sieve.py

  - The 1,000,000th prime (0-indexed 999999), with statistics:
      python prime_sieve.py --skip 999999 --count 1 --stats

  - Linear-scan active set, no wheel, stats written as JSON:
      python prime_sieve.py --count 10000 --quiet --strategy linear --wheel 0 \
        --stats-json run_stats.json
"""

from __future__ import annotations
import argparse
import datetime
import heapq
import json
import logging
import sys
import time
from collections import deque
from itertools import islice
from typing import Deque, Dict, Iterator, List, Optional, Sequence, Tuple, Type

from prime_filter import U64_MAX, Filter, PrimeOverflowError, width_limit
from prime_wheel import DEFAULT_WHEEL_PRIMES, MAX_WHEEL_PRIMES, Wheel

logger = logging.getLogger(__name__)


def leading_primes(count: int) -> Tuple[int, ...]:
    """The first `count` primes, by trial division (meant for wheel sizes)."""
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    found: List[int] = []
    n = 1
    while len(found) < count:
        n += 1
        if all(n % p for p in found):
            found.append(n)
    return tuple(found)


# ------------------------- Active filter sets -------------------------

class LinearActiveSet:
    """Unordered active filters; every candidate is checked against each one."""

    def __init__(self):
        self.filters: List[Filter] = []

    def add(self, f: Filter) -> None:
        self.filters.append(f)

    def matches(self, n: int) -> bool:
        return any(f.matches_or_advance_to(n) for f in self.filters)

    def __len__(self) -> int:
        return len(self.filters)


class HeapActiveSet:
    """
    Active filters in a min-heap keyed by (state, base). Only filters whose
    state has fallen behind the candidate are touched.
    """

    def __init__(self):
        # bases are distinct primes, so the Filter itself is never compared
        self.heap: List[Tuple[int, int, Filter]] = []

    def add(self, f: Filter) -> None:
        heapq.heappush(self.heap, (f.state, f.base, f))

    def matches(self, n: int) -> bool:
        heap = self.heap
        while heap:
            state, base, f = heap[0]
            if state > n:
                return False
            if state == n:
                return True
            heapq.heapreplace(heap, (f.advance(), base, f))
        return False

    def __len__(self) -> int:
        return len(self.heap)


STRATEGIES: Dict[str, Type] = {
    "heap": HeapActiveSet,
    "linear": LinearActiveSet,
}


# ------------------------- Generator -------------------------

class IncrementalSieve:
    """
    Lazy, infinite, strictly increasing sequence of primes starting at 2.
    A fresh instance restarts from the beginning; there is no rewind.
    """

    def __init__(self, wheel_primes: Sequence[int] = DEFAULT_WHEEL_PRIMES,
                 strategy: str = "heap", limit: Optional[int] = U64_MAX):
        wheel_primes = tuple(wheel_primes)
        if wheel_primes != leading_primes(len(wheel_primes)):
            raise ValueError(f"wheel primes must be the leading primes, got {wheel_primes}")
        try:
            active_cls = STRATEGIES[strategy]
        except KeyError:
            raise ValueError(f"unknown strategy {strategy!r}, "
                             f"expected one of {sorted(STRATEGIES)}") from None

        self.strategy: str = strategy
        self.limit: Optional[int] = limit
        self.wheel = Wheel(wheel_primes, seed=1, limit=limit)
        self.active = active_cls()
        self.pending: Deque[Filter] = deque()
        # the wheel never produces these, so they go out first
        self._head: Deque[int] = deque(wheel_primes)
        # stats
        self.candidates: int = 0
        self.primes_found: int = 0
        logger.debug("sieve: strategy=%s wheel=%s limit=%s", strategy, wheel_primes, limit)

    @property
    def state(self) -> int:
        """Last candidate pulled from the wheel."""
        return self.wheel.value

    def step(self) -> Optional[int]:
        """Test one candidate. Returns it if prime, None if composite."""
        if self._head:
            self.primes_found += 1
            return self._head.popleft()

        n = self.wheel.next()
        self.candidates += 1

        if self.active.matches(n):
            return None

        # n is the square of a queued prime: it starts filtering from here
        if self.pending and self.pending[0].activation == n:
            f = self.pending.popleft()
            self.active.add(f)
            logger.debug("activated filter %d at %d", f.base, n)
            return None

        self.pending.append(Filter(n, self.limit))
        self.primes_found += 1
        return n

    def produce_next(self) -> int:
        p = self.step()
        while p is None:
            p = self.step()
        return p

    __next__ = produce_next

    def __iter__(self) -> Iterator[int]:
        return self

    def stats(self) -> Dict[str, object]:
        return {
            "strategy": self.strategy,
            "wheel": list(self.wheel.primes),
            "candidates": self.candidates,
            "primes_found": self.primes_found,
            "last_candidate": self.state,
            "active_filters": len(self.active),
            "pending_filters": len(self.pending),
        }


# ------------------------- Consumer helpers -------------------------

def skip(count: int, sieve: IncrementalSieve) -> IncrementalSieve:
    """Advance `sieve` past `count` primes and hand it back."""
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    for _ in range(count):
        sieve.produce_next()
    return sieve


def take(count: int, **kwargs) -> List[int]:
    """First `count` primes from a fresh sieve."""
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    return list(islice(IncrementalSieve(**kwargs), count))


def nth(index: int, **kwargs) -> int:
    """The prime at 0-based `index` (nth(0) == 2)."""
    return skip(index, IncrementalSieve(**kwargs)).produce_next()


# ------------------------- CLI -------------------------

def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Incremental Prime Sieve — unbounded prime enumerator.")
    p.add_argument("--count", type=int, default=100, help="Number of primes to emit (default 100).")
    p.add_argument("--skip", type=int, default=0, help="Skip this many primes first (default 0).")
    p.add_argument("--strategy", choices=sorted(STRATEGIES), default="heap",
                   help="Active filter set: heap (default) or linear scan.")
    p.add_argument("--wheel", type=int, default=len(DEFAULT_WHEEL_PRIMES),
                   choices=range(0, MAX_WHEEL_PRIMES + 1), metavar=f"0..{MAX_WHEEL_PRIMES}",
                   help="Number of leading primes in the wheel, 0 disables it (default 4 -> 210).")
    p.add_argument("--bits", type=int, default=64, help="Integer width, 0 for unbounded (default 64).")
    p.add_argument("--quiet", action="store_true", help="Do not print the primes.")
    p.add_argument("--stats", action="store_true", help="Print simple statistics at end.")
    p.add_argument("--stats-json", type=str, default=None, help="Optional stats JSON path.")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = build_arg_parser()
    args = ap.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s - %(levelname)s - %(message)s")

    if args.count < 0 or args.skip < 0:
        ap.error("--count and --skip must be >= 0")

    t0 = time.perf_counter()
    try:
        sieve = IncrementalSieve(wheel_primes=leading_primes(args.wheel),
                                 strategy=args.strategy,
                                 limit=width_limit(args.bits))
        skip(args.skip, sieve)
        for p in islice(sieve, args.count):
            if not args.quiet:
                print(p)
    except (PrimeOverflowError, ValueError) as e:
        logger.error("Error: %s", e)
        return 1
    elapsed = time.perf_counter() - t0

    stats = sieve.stats()
    stats["elapsed_seconds"] = elapsed

    if args.stats:
        print("--- stats ---")
        print(f"strategy        : {stats['strategy']}")
        print(f"wheel           : {stats['wheel']}")
        print(f"candidates      : {stats['candidates']}")
        print(f"primes found    : {stats['primes_found']}")
        print(f"last candidate  : {stats['last_candidate']}")
        print(f"active filters  : {stats['active_filters']}")
        print(f"pending filters : {stats['pending_filters']}")
        print(f"elapsed         : {elapsed:.3f}s")

    if args.stats_json:
        stats["timestamp"] = datetime.datetime.now(datetime.timezone.utc).isoformat()
        stats["config"] = {"count": args.count, "skip": args.skip, "bits": args.bits}
        with open(args.stats_json, "w") as jf:
            json.dump(stats, jf, indent=2)
        logger.info("saved %s", args.stats_json)

    return 0


if __name__ == "__main__":
    sys.exit(main())
