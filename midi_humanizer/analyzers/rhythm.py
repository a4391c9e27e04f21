"""Rhythm analysis: note length and style groove flags."""

from typing import Optional

from ..constants import Style
from ..helpers import mean
from ..models import RhythmSummary
from .base import BaseAnalyzer


class RhythmAnalyzer(BaseAnalyzer):
    """Average note duration plus swing/syncopation flags.

    The groove flags come from the requested style rather than from the
    notes: only jazz swings, and jazz and pop both count as syncopated.
    """

    def analyze(self) -> Optional[RhythmSummary]:
        if not self.notes:
            return None
        return RhythmSummary(
            average_duration=mean(note.duration for note in self.notes),
            swing=self.style is Style.JAZZ,
            syncopation=self.style in (Style.JAZZ, Style.POP),
        )
