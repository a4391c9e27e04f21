"""StructureAnalyzer - Orchestrator for the per-track structure analyzers.

Extracts the notes of a track once, then delegates to the chord, phrase,
melody, rhythm and dynamics analyzers and bundles their results into a
TrackAnalysis. ``analyze_song`` runs it over every track of a song.
"""

import logging
from typing import Optional

from .analyzers import (
    ChordAnalyzer, PhraseDetector, MelodicAnalyzer,
    RhythmAnalyzer, DynamicsAnalyzer,
)
from .config import AnalysisSettings, HumanizationConfig
from .constants import DEFAULT_TICKS_PER_QUARTER, Style, PhraseDetectionMode
from .models import Song, SongAnalysis, Track, TrackAnalysis
from .notes import extract_notes, note_events

logger = logging.getLogger(__name__)


class StructureAnalyzer:
    """Musical structure analysis of a single track.

    Analysis is total: a track without notes yields an empty
    TrackAnalysis instead of an error.
    """

    def __init__(
        self,
        track: Track,
        ticks_per_quarter: int = DEFAULT_TICKS_PER_QUARTER,
        style: Style = Style.DEFAULT,
        settings: Optional[AnalysisSettings] = None,
        phrase_mode: PhraseDetectionMode = PhraseDetectionMode.AUTO,
    ):
        self.track = track
        self.notes = extract_notes(track)
        self.events = note_events(track)
        self.ticks_per_quarter = ticks_per_quarter
        self.style = style
        self.settings = settings or AnalysisSettings()
        self.phrase_mode = phrase_mode

    def analyze(self) -> TrackAnalysis:
        """Run all analyses and return the combined result."""
        if not self.notes:
            return TrackAnalysis()

        common_args = dict(
            notes=self.notes,
            events=self.events,
            ticks_per_quarter=self.ticks_per_quarter,
            style=self.style,
            settings=self.settings,
        )

        phrases = PhraseDetector(mode=self.phrase_mode, **common_args).analyze()
        result = TrackAnalysis(
            phrases=phrases,
            chords=ChordAnalyzer(**common_args).analyze(),
            melody=MelodicAnalyzer(**common_args).analyze(),
            rhythm=RhythmAnalyzer(**common_args).analyze(),
            dynamics=DynamicsAnalyzer(phrases=phrases, **common_args).analyze(),
            note_count=len(self.notes),
        )
        logger.debug(
            "Track analysis: %d notes, %d phrases, %d chords",
            result.note_count, len(result.phrases), len(result.chords),
        )
        return result


def analyze_song(song: Song, config: Optional[HumanizationConfig] = None,
                 settings: Optional[AnalysisSettings] = None) -> SongAnalysis:
    """Analyze every track of a song.

    Args:
        song: Decoded song.
        config: Run configuration; supplies style and phrase detection mode.
        settings: Analyzer windows and thresholds.
    """
    config = config or HumanizationConfig()
    settings = settings or AnalysisSettings()
    tpq = song.ticks_per_quarter_note

    tracks = [
        StructureAnalyzer(
            track, tpq, style=config.style, settings=settings,
            phrase_mode=config.phrase_detection_mode,
        ).analyze()
        for track in song.tracks
    ]
    analysis = SongAnalysis(tracks=tracks, ticks_per_quarter_note=tpq, bpm=settings.assumed_bpm)
    logger.info(
        "Analyzed %d tracks: %d phrases, %d chords",
        len(tracks), analysis.total_phrases, len(analysis.chords),
    )
    return analysis
