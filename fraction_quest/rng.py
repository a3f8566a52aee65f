from __future__ import annotations

import time
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

_MULTIPLIER = 1103515245
_INCREMENT = 12345
_MASK = 0x7FFFFFFF  # 2**31 - 1


class LcgRandom:
    """Linear congruential generator with a portable, bit-exact stream.

    ``s' = (s * 1103515245 + 12345) mod 2**31`` and each draw is
    ``s' / (2**31 - 1)``.  Python integers never overflow, so masking after
    the multiply reproduces the reference sequence for any integer seed.
    """

    def __init__(self, seed: int) -> None:
        self._seed = int(seed)
        self._state = int(seed)

    @property
    def seed(self) -> int:
        return self._seed

    def next_float(self) -> float:
        self._state = (self._state * _MULTIPLIER + _INCREMENT) & _MASK
        return self._state / _MASK

    def random_int(self, lo: int, hi: int) -> int:
        """Inclusive integer in ``[lo, hi]``."""

        if hi < lo:
            raise ValueError(f"empty range [{lo}, {hi}]")
        value = int(self.next_float() * (hi - lo + 1)) + lo
        # A state of exactly 2**31 - 1 draws 1.0.
        return min(value, hi)

    def random_choice(self, seq: Sequence[T]) -> T:
        if not seq:
            raise ValueError("cannot choose from an empty sequence")
        idx = int(self.next_float() * len(seq))
        return seq[min(idx, len(seq) - 1)]


def wall_clock_seed() -> int:
    """Production seed: epoch milliseconds, so every call differs."""

    return time.time_ns() // 1_000_000
