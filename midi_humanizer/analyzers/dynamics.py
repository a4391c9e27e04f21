"""Dynamics analysis: velocity level, range, trend and phrase peaks."""

from typing import List, Optional

from ..constants import DYNAMICS_TREND_THRESHOLD, DynamicTrend
from ..helpers import mean
from ..models import DynamicPeak, DynamicsSummary, PhraseSegment
from .base import BaseAnalyzer


def velocity_trend(velocities: List[int]) -> DynamicTrend:
    """Compare the first and last thirds of a velocity sequence."""
    third = len(velocities) // 3
    if len(velocities) < 2 or third == 0:
        return DynamicTrend.STABLE

    difference = mean(velocities[-third:]) - mean(velocities[:third])
    if difference > DYNAMICS_TREND_THRESHOLD:
        return DynamicTrend.CRESCENDO
    if difference < -DYNAMICS_TREND_THRESHOLD:
        return DynamicTrend.DIMINUENDO
    return DynamicTrend.STABLE


class DynamicsAnalyzer(BaseAnalyzer):
    """Velocity statistics of one track.

    Args:
        phrases: Detected phrases; used to locate the loudest note of each.
    """

    def __init__(self, *args, phrases: Optional[List[PhraseSegment]] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.phrases = phrases or []

    def analyze(self) -> Optional[DynamicsSummary]:
        if not self.notes:
            return None
        velocities = [note.velocity for note in self.notes]
        return DynamicsSummary(
            average_velocity=mean(velocities),
            dynamic_range=max(velocities) - min(velocities),
            trend=velocity_trend(velocities),
            peaks=self.phrase_peaks(),
        )

    def phrase_peaks(self) -> List[DynamicPeak]:
        """Loudest note of every phrase; the earliest one wins ties."""
        peaks = []
        last = len(self.phrases) - 1
        for idx, phrase in enumerate(self.phrases):
            # Phrases are half-open except the last, which also owns its end
            inside = [note for note in self.notes
                      if phrase.start <= note.start_time < phrase.end
                      or (idx == last and note.start_time == phrase.end)]
            if not inside:
                continue
            loudest = max(inside, key=lambda note: note.velocity)
            peaks.append(DynamicPeak(
                phrase_index=idx,
                time=loudest.start_time,
                velocity=loudest.velocity,
                position=phrase.position(loudest.start_time),
            ))
        return peaks
