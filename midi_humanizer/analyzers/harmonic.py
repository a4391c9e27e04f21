"""Harmonic analysis: chord windows, chord quality and harmonic boundaries.

Chords are read from fixed windows over the track. The same pitch-class
reduction drives the harmonic boundary detector, which marks a boundary
wherever consecutive windows share few pitch classes.
"""

import logging
from typing import List, Optional, Sequence

from ..constants import (
    HARMONIC_MIN_NOTES, HARMONIC_DISTANCE_THRESHOLD, ChordQuality,
)
from ..helpers import pitch_class_set, jaccard_distance
from ..models import ChordSegment, Note
from .base import BaseAnalyzer

logger = logging.getLogger(__name__)


def classify_chord(pitch_classes: Sequence[int]):
    """Return (quality, root) for a sorted pitch-class set.

    Intervals are measured from the lowest pitch class, which is also
    taken as the root; no inversion detection is attempted.
    """
    if not pitch_classes:
        return ChordQuality.UNKNOWN, 0
    root = pitch_classes[0]
    intervals = {(pc - root) % 12 for pc in pitch_classes}

    if {4, 7} <= intervals:
        quality = ChordQuality.MAJOR
    elif {3, 7} <= intervals:
        quality = ChordQuality.MINOR
    elif {3, 6} <= intervals:
        quality = ChordQuality.DIMINISHED
    else:
        quality = ChordQuality.UNKNOWN
    return quality, root


class ChordAnalyzer(BaseAnalyzer):
    """Chord progression and harmonic-change detection for one track."""

    def analyze(self) -> List[ChordSegment]:
        return self.chord_progression()

    def identify_chord(self, notes: List[Note], time: int,
                       duration: int) -> Optional[ChordSegment]:
        """Chord formed by the given notes, or None if fewer than 2 pitch classes."""
        pitch_classes = pitch_class_set(note.pitch for note in notes)
        if len(pitch_classes) < 2:
            return None
        quality, root = classify_chord(pitch_classes)
        return ChordSegment(
            time=time,
            duration=duration,
            pitch_classes=pitch_classes,
            quality=quality,
            root=root,
        )

    def chord_progression(self) -> List[ChordSegment]:
        """Chords of consecutive fixed windows from first onset to last release."""
        if not self.notes:
            return []

        window = self.settings.chord_window_ticks
        chords = []
        end = self.last_end
        time = self.first_start
        while time < end:
            sounding = self.notes_overlapping(time, time + window)
            if len(sounding) >= 2:
                chord = self.identify_chord(sounding, time, window)
                if chord is not None:
                    chords.append(chord)
            time += window

        logger.debug("Detected %d chords over %d notes", len(chords), len(self.notes))
        return chords

    def harmonic_boundaries(self) -> List[int]:
        """Window starts where the pitch-class content changes sharply."""
        if len(self.notes) < HARMONIC_MIN_NOTES:
            return []

        stride = self.settings.harmonic_stride_ticks
        boundaries = []
        previous = None
        end = self.last_end
        time = self.first_start
        while time < end:
            sounding = self.notes_overlapping(time, time + stride)
            if len(sounding) >= 2:
                current = pitch_class_set(note.pitch for note in sounding)
                if previous is not None and jaccard_distance(previous, current) > HARMONIC_DISTANCE_THRESHOLD:
                    boundaries.append(time)
                previous = current
            time += stride
        return boundaries
