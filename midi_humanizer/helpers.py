"""Helper functions for analysis and humanization.

Utility functions for note naming, tick/second conversion, pitch-class
sets, chord distance and value clamping.
"""

import bisect
import math
from typing import Iterable, List, Tuple

from .constants import NOTE_NAMES, DEFAULT_BPM, DEFAULT_TEMPO_US


def note_name(pitch: int) -> str:
    """Convert MIDI pitch to note name (e.g., 60 -> 'C4')."""
    octave = (pitch // 12) - 1
    return f"{NOTE_NAMES[pitch % 12]}{octave}"


def ticks_to_seconds(ticks: float, ticks_per_quarter: int,
                     bpm: float = DEFAULT_BPM) -> float:
    """Convert ticks to seconds at a constant tempo."""
    if ticks_per_quarter <= 0 or bpm <= 0:
        return 0.0
    return ticks / ticks_per_quarter * (60.0 / bpm)


def mean(values) -> float:
    values = list(values)
    return sum(values) / len(values) if values else 0.0


def pitch_class_set(pitches: Iterable[int]) -> Tuple[int, ...]:
    """Sorted, de-duplicated pitch classes of the given pitches."""
    return tuple(sorted({pitch % 12 for pitch in pitches}))


def jaccard_distance(first, second) -> float:
    """Distance between two pitch-class sets: 1 - |A & B| / |A | B|."""
    union = set(first) | set(second)
    if not union:
        return 0.0
    return 1.0 - len(set(first) & set(second)) / len(union)


def clamp(value, low, high):
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round halves upward (2.5 -> 3, -2.5 -> -2), unlike round()."""
    return int(math.floor(value + 0.5))


class TempoMap:
    """Piecewise-constant tempo map for tick to second conversion.

    Built from (tick, microseconds-per-quarter) changes. Without any
    change the map runs at 120 BPM.
    """

    def __init__(self, ticks_per_quarter: int, changes: Iterable[Tuple[int, int]] = ()):
        self.ticks_per_quarter = ticks_per_quarter
        ordered = sorted(changes, key=lambda change: change[0])
        if not ordered or ordered[0][0] > 0:
            ordered.insert(0, (0, DEFAULT_TEMPO_US))

        self._ticks: List[int] = []
        self._tempos: List[int] = []
        self._seconds: List[float] = []
        elapsed = 0.0
        for tick, tempo in ordered:
            if self._ticks:
                if tick == self._ticks[-1]:
                    # Later change at the same tick wins
                    self._tempos[-1] = tempo
                    continue
                elapsed += self._span(tick - self._ticks[-1], self._tempos[-1])
            self._ticks.append(tick)
            self._tempos.append(tempo)
            self._seconds.append(elapsed)

    def _span(self, ticks: float, tempo: int) -> float:
        if self.ticks_per_quarter <= 0:
            return 0.0
        return ticks * tempo / 1_000_000 / self.ticks_per_quarter

    def seconds_at(self, tick: float) -> float:
        """Absolute time in seconds of a tick position."""
        idx = bisect.bisect_right(self._ticks, tick) - 1
        idx = max(idx, 0)
        return self._seconds[idx] + self._span(tick - self._ticks[idx], self._tempos[idx])

    def __len__(self) -> int:
        return len(self._ticks)
