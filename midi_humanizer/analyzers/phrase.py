"""Phrase boundary detection.

Three independent detectors propose boundary times:

- musical: shifts in average pitch and note length, or a reversal of
  melodic direction, between the windows before and after a note;
- rest: unusually long gaps between consecutive notes;
- harmonic: sharp pitch-class changes between adjacent windows.

The candidates are fused by weighted voting and the track's note events
are partitioned at the surviving boundaries. Very short phrases are then
merged into a neighbour.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List

from ..constants import (
    MUSICAL_WINDOW_MIN, MUSICAL_WINDOW_MAX, MUSICAL_PITCH_CHANGE_MIN,
    MUSICAL_DURATION_CHANGE_MIN, MUSICAL_DIRECTION_MIN,
    MUSICAL_DIRECTION_BONUS, MUSICAL_SCORE_THRESHOLD,
    MUSICAL_WEIGHT, REST_WEIGHT, HARMONIC_WEIGHT, FUSION_THRESHOLD,
    PhraseDetectionMode,
)
from ..helpers import clamp, mean
from ..models import PhraseSegment
from .base import BaseAnalyzer
from .harmonic import ChordAnalyzer

logger = logging.getLogger(__name__)


def fuse_boundaries(weighted: Iterable) -> List[int]:
    """Combine (boundaries, weight) pairs by summing weights per tick.

    Ticks whose accumulated weight reaches the fusion threshold survive,
    sorted ascending. A detector listing the same tick twice votes twice.
    """
    scores: Dict[int, int] = defaultdict(int)
    for boundaries, weight in weighted:
        for tick in boundaries:
            scores[tick] += weight
    return sorted(tick for tick, score in scores.items() if score >= FUSION_THRESHOLD)


class PhraseDetector(BaseAnalyzer):
    """Detects phrases in one track.

    Attributes:
        mode: AUTO fuses all detectors; any other mode trusts only the
            named detector's candidates.
    """

    def __init__(self, *args, mode: PhraseDetectionMode = PhraseDetectionMode.AUTO, **kwargs):
        super().__init__(*args, **kwargs)
        self.mode = mode

    def analyze(self) -> List[PhraseSegment]:
        return self.detect_phrases()

    def detect_phrases(self) -> List[PhraseSegment]:
        """Detect, partition and clean up the phrases of the track."""
        if not self.notes:
            return []

        boundaries = self.detect_boundaries()
        phrases = self.partition(boundaries)
        merged = self.merge_short_phrases(phrases)
        logger.debug(
            "Phrase detection (%s): %d boundaries, %d phrases, %d after merging",
            self.mode.value, len(boundaries), len(phrases), len(merged),
        )
        return merged

    def detect_boundaries(self) -> List[int]:
        if self.mode is PhraseDetectionMode.MUSICAL:
            return sorted(set(self.musical_boundaries()))
        if self.mode is PhraseDetectionMode.REST:
            return sorted(set(self.rest_boundaries()))
        if self.mode is PhraseDetectionMode.HARMONIC:
            return sorted(set(self.harmonic_boundaries()))

        musical = self.musical_boundaries()
        rest = self.rest_boundaries()
        harmonic = self.harmonic_boundaries()
        logger.debug(
            "Boundary candidates: musical=%d rest=%d harmonic=%d",
            len(musical), len(rest), len(harmonic),
        )
        return fuse_boundaries([
            (musical, MUSICAL_WEIGHT),
            (rest, REST_WEIGHT),
            (harmonic, HARMONIC_WEIGHT),
        ])

    # -----------------------------------------------------------------
    # Detectors
    # -----------------------------------------------------------------

    def musical_boundaries(self) -> List[int]:
        """Onsets where the melody changes register, pace or direction."""
        notes = self.notes
        if len(notes) < 4:
            return []

        window = clamp(len(notes) // 4, MUSICAL_WINDOW_MIN, MUSICAL_WINDOW_MAX)
        boundaries = []
        for i in range(window, len(notes) - window):
            before = notes[i - window:i]
            after = notes[i:i + window]

            pitch_change = abs(mean(n.pitch for n in after) - mean(n.pitch for n in before))
            before_duration = mean(n.duration for n in before)
            after_duration = mean(n.duration for n in after)
            longest = max(before_duration, after_duration)
            duration_change = abs(after_duration - before_duration) / longest if longest > 0 else 0.0

            score = 0.0
            if pitch_change > MUSICAL_PITCH_CHANGE_MIN:
                score += pitch_change / 12
            if duration_change > MUSICAL_DURATION_CHANGE_MIN:
                score += duration_change

            before_trend = before[-1].pitch - before[0].pitch
            after_trend = after[-1].pitch - after[0].pitch
            if (abs(before_trend) > MUSICAL_DIRECTION_MIN
                    and abs(after_trend) > MUSICAL_DIRECTION_MIN
                    and (before_trend > 0) != (after_trend > 0)):
                score += MUSICAL_DIRECTION_BONUS

            if score > MUSICAL_SCORE_THRESHOLD:
                boundaries.append(notes[i].start_time)
        return boundaries

    def rest_boundaries(self) -> List[int]:
        """Onsets following a gap of at least twice the average note spacing."""
        notes = self.notes
        if len(notes) < 2:
            return []

        span = self.last_end - self.first_start
        min_rest = span / len(notes) * 2
        boundaries = []
        for current, following in zip(notes, notes[1:]):
            if following.start_time - current.end_time >= min_rest:
                boundaries.append(following.start_time)
        return boundaries

    def harmonic_boundaries(self) -> List[int]:
        analyzer = ChordAnalyzer(
            self.notes, ticks_per_quarter=self.ticks_per_quarter,
            style=self.style, settings=self.settings,
        )
        return analyzer.harmonic_boundaries()

    # -----------------------------------------------------------------
    # Phrase building
    # -----------------------------------------------------------------

    def partition(self, boundaries: List[int]) -> List[PhraseSegment]:
        """Split the note events at the boundaries, starting from tick 0.

        Spans without any note event are dropped, so phrases never overlap
        but may leave gaps. The last phrase ends at the last note release.
        """
        last_end = self.last_end
        if not boundaries:
            return [PhraseSegment(0, last_end, list(self.events))]

        phrases = []
        start = 0
        for boundary in boundaries:
            span_events = [e for e in self.events if start <= e.time < boundary]
            if span_events:
                phrases.append(PhraseSegment(start, boundary, span_events))
            start = boundary

        tail = [e for e in self.events if e.time >= start]
        if tail:
            phrases.append(PhraseSegment(start, max(last_end, start), tail))
        return phrases

    def merge_short_phrases(self, phrases: List[PhraseSegment]) -> List[PhraseSegment]:
        """Merge phrases shorter than the minimum length into a neighbour.

        A short phrase joins its predecessor; a short first phrase is
        carried into the next one instead.
        """
        min_seconds = self.settings.min_phrase_seconds
        result: List[PhraseSegment] = []
        carry = None

        for phrase in phrases:
            if carry is not None:
                phrase = PhraseSegment(carry.start, phrase.end, carry.events + phrase.events)
                carry = None

            if self.to_seconds(phrase.duration) >= min_seconds:
                result.append(phrase)
            elif result:
                previous = result[-1]
                previous.end = phrase.end
                previous.events = previous.events + phrase.events
            else:
                carry = phrase

        if carry is not None:
            # The whole track is shorter than one phrase
            result.append(carry)
        return result
