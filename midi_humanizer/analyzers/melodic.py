"""Melodic analysis: top-voice extraction and contour.

The melody is approximated by the highest note among notes that start
together, which works well for piano-style textures.
"""

from typing import List, Optional

from ..constants import CONTOUR_THRESHOLD, Contour
from ..helpers import mean
from ..models import MelodySummary, Note
from .base import BaseAnalyzer


def melodic_contour(melody: List[Note]) -> List[Contour]:
    """Up/down/same step labels between consecutive melody notes."""
    contour = []
    for previous, current in zip(melody, melody[1:]):
        interval = current.pitch - previous.pitch
        if interval > CONTOUR_THRESHOLD:
            contour.append(Contour.UP)
        elif interval < -CONTOUR_THRESHOLD:
            contour.append(Contour.DOWN)
        else:
            contour.append(Contour.SAME)
    return contour


class MelodicAnalyzer(BaseAnalyzer):
    """Melody line, range and contour of one track."""

    def analyze(self) -> Optional[MelodySummary]:
        melody = self.melody_notes()
        if not melody:
            return None
        pitches = [note.pitch for note in melody]
        return MelodySummary(
            range=max(pitches) - min(pitches),
            average_pitch=mean(pitches),
            contour=tuple(melodic_contour(melody)),
        )

    def melody_notes(self) -> List[Note]:
        """Notes that are the highest among notes starting near them."""
        tolerance = self.settings.melody_onset_tolerance
        melody = []
        for note in self.notes:
            highest = max(
                other.pitch for other in self.notes
                if abs(other.start_time - note.start_time) < tolerance
            )
            if note.pitch == highest:
                melody.append(note)
        return melody
