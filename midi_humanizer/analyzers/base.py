"""Base analyzer class with shared utilities.

Provides common initialization and tick/second conversion used by all
domain-specific structure analyzers.
"""

from typing import List, Optional

from ..config import AnalysisSettings
from ..constants import DEFAULT_TICKS_PER_QUARTER, Style
from ..helpers import ticks_to_seconds
from ..models import Note, MidiEvent


class BaseAnalyzer:
    """Common base for all domain-specific analyzers.

    Attributes:
        notes: Notes of one track sorted by start time.
        events: NoteOn/NoteOff events of the same track, in track order.
        ticks_per_quarter: Song resolution.
        style: Performance style of the run.
        settings: Window sizes and thresholds.
    """

    def __init__(
        self,
        notes: List[Note],
        events: Optional[List[MidiEvent]] = None,
        ticks_per_quarter: int = DEFAULT_TICKS_PER_QUARTER,
        style: Style = Style.DEFAULT,
        settings: Optional[AnalysisSettings] = None,
    ):
        self.notes = notes
        self.events = events or []
        self.ticks_per_quarter = ticks_per_quarter
        self.style = style
        self.settings = settings or AnalysisSettings()

    def analyze(self):
        """Run the analysis for this domain. Override in subclasses."""
        raise NotImplementedError

    @property
    def first_start(self) -> int:
        return min((note.start_time for note in self.notes), default=0)

    @property
    def last_end(self) -> int:
        return max((note.end_time for note in self.notes), default=0)

    def to_seconds(self, ticks: float) -> float:
        """Ticks to seconds at the assumed constant tempo."""
        return ticks_to_seconds(ticks, self.ticks_per_quarter, self.settings.assumed_bpm)

    def notes_overlapping(self, start: int, end: int) -> List[Note]:
        """Notes sounding anywhere inside [start, end)."""
        return [note for note in self.notes
                if note.start_time < end and note.end_time > start]
