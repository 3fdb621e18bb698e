"""RNG system — seeded per-key random streams.

Each key ("slot", "roulette", "shuffle", "shop", ...) owns an independent
stream derived from the game seed, so adding a draw in one subsystem never
shifts the outcomes of another. A whole run is reproducible from its seed.
"""

from __future__ import annotations

import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


def new_seed() -> str:
    """Generate a fresh 8-character seed string."""
    return "%08X" % random.SystemRandom().getrandbits(32)


class RNGState:
    """Manages per-key random streams for one game."""

    def __init__(self, seed: Optional[str] = None):
        self.seed = seed if seed is not None else new_seed()
        self._streams: dict[str, random.Random] = {}

    def _stream(self, key: str) -> random.Random:
        if key not in self._streams:
            self._streams[key] = random.Random(f"{key}:{self.seed}")
        return self._streams[key]

    def random(self, key: str) -> float:
        """Next uniform value in [0, 1) for the given key."""
        return self._stream(key).random()

    def pseudorandom_int(self, key: str, min_val: int, max_val: int) -> int:
        """Get a random integer in [min_val, max_val] inclusive."""
        return self._stream(key).randint(min_val, max_val)

    def random_element(self, key: str, lst: Sequence[T]) -> T:
        """Pick a random element from a list."""
        if not lst:
            raise ValueError("Cannot pick from empty list")
        return lst[self.pseudorandom_int(key, 0, len(lst) - 1)]

    def shuffle(self, key: str, lst: Sequence[T]) -> list[T]:
        """Fisher-Yates shuffle, returns new list."""
        result = list(lst)
        self._stream(key).shuffle(result)
        return result

    def copy(self) -> "RNGState":
        """Independent copy that continues every stream from the same point."""
        new = RNGState(self.seed)
        for key, stream in self._streams.items():
            clone = random.Random()
            clone.setstate(stream.getstate())
            new._streams[key] = clone
        return new
