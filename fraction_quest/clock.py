"""Time source for the game timer and deferred level completion.

Only seconds on a monotonic axis matter here; wall-clock time is used for
problem seeds (``rng.wall_clock_seed``) and analytics timestamps instead.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float:
        """Seconds since an arbitrary fixed origin; never goes backwards."""


class RealClock:
    def now(self) -> float:
        return time.monotonic()
