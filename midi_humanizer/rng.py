"""Seeded multiply-with-carry generator.

The humanizer threads one instance per run through every random
decision, so identical input and seed give identical output. State
words are kept as signed 32-bit integers, which keeps every draw in
[0, 1) and bit-identical to other implementations of the same
generator.
"""

import time

from .constants import DEFAULT_MWC_Z

_MASK = 0xFFFFFFFF
_TWO_32 = 4294967296


def _int32(value: int) -> int:
    value &= _MASK
    return value - _TWO_32 if value & 0x80000000 else value


def default_seed() -> int:
    """Low-entropy seed derived from the clock; not reproducible."""
    return int(time.time() * 1000) % 10000


class MultiplyWithCarry:
    """Marsaglia multiply-with-carry generator over two 32-bit words.

    Attributes:
        seed: Seed the generator was created with.
        calls: Number of values drawn so far.
    """

    def __init__(self, seed: int = None):
        if seed is None:
            seed = default_seed()
        self.seed = int(seed)
        self._w = _int32(self.seed)
        self._z = DEFAULT_MWC_Z
        self.calls = 0

    def random(self) -> float:
        """Next value in [0, 1)."""
        self._z = _int32(36969 * (self._z & 0xFFFF) + (self._z >> 16))
        self._w = _int32(18000 * (self._w & 0xFFFF) + (self._w >> 16))
        self.calls += 1
        return _int32((self._z << 16) + self._w) / _TWO_32 + 0.5

    __call__ = random

    def centered(self) -> float:
        """Next value in [-0.5, 0.5)."""
        return self.random() - 0.5
