"""
Seeded random stream used by noise permutation and scatter sampling.

Based on Johannes Baagøe's Alea generator. It is pure Python, so a given seed
produces the same sequence on every platform and NumPy release; neither
Python's ``random`` nor NumPy's generators are used for anything that has to
be reproducible.
"""

from typing import List, MutableSequence, TypeVar, Union

T = TypeVar("T")

_TWO_POW_32 = 0x100000000
_TWO_POW_MINUS_32 = 2.3283064365386963e-10


def _uint32(n) -> int:
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class _Mash:
    """Alea's string hash; each call folds more characters into the state."""

    def __init__(self):
        self.n = 0xEFC8249D

    def __call__(self, data) -> float:
        for char in str(data):
            self.n += ord(char)
            h = 0.02519603282416938 * self.n
            self.n = _uint32(h)
            h -= self.n
            h *= self.n
            self.n = _uint32(h)
            h -= self.n
            self.n += h * _TWO_POW_32
        return _uint32(self.n) * _TWO_POW_MINUS_32


class AleaPRNG:
    """
    Deterministic random stream.

    Args:
        seed: Integer or string seed. Integers are hashed through their
            decimal representation, so ``AleaPRNG(42)`` and ``AleaPRNG("42")``
            produce the same stream.
    """

    def __init__(self, seed: Union[int, str]):
        self.seed = seed
        self.draws = 0

        mash = _Mash()
        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1

        self.s0 -= mash(seed)
        if self.s0 < 0:
            self.s0 += 1
        self.s1 -= mash(seed)
        if self.s1 < 0:
            self.s1 += 1
        self.s2 -= mash(seed)
        if self.s2 < 0:
            self.s2 += 1

    def random(self) -> float:
        """Next value in [0, 1)."""
        self.draws += 1
        t = 2091639 * self.s0 + self.c * _TWO_POW_MINUS_32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def uniform(self, low: float, high: float) -> float:
        """Value between ``low`` and ``high``; the bounds may be given in either order."""
        return low + (high - low) * self.random()

    def randint(self, low: int, high: int) -> int:
        """Integer in [low, high] inclusive."""
        return low + int(self.random() * (high - low + 1))

    def shuffle(self, items: MutableSequence[T]) -> None:
        """Fisher-Yates shuffle in place."""
        for i in range(len(items) - 1, 0, -1):
            j = int(self.random() * (i + 1))
            items[i], items[j] = items[j], items[i]

    def permutation(self, n: int) -> List[int]:
        """Shuffled ``list(range(n))``."""
        values = list(range(n))
        self.shuffle(values)
        return values
