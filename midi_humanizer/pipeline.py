"""End-to-end humanization pipeline.

decode -> analyze every track -> humanize every track -> encode. The
codec bounds the pipeline: a decode failure aborts before any analysis
runs. Analysis and humanization never raise on a decoded song.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .analyzer import analyze_song
from .codec import decode_song, encode_song
from .config import AnalysisSettings, HumanizationConfig
from .humanizer import Humanizer
from .loader import load_midi, save_midi
from .models import Note, Song, SongAnalysis
from .notes import extract_notes
from .rng import MultiplyWithCarry

logger = logging.getLogger(__name__)


@dataclass
class HumanizeResult:
    """Output of one humanization run.

    Attributes:
        song: Humanized song.
        analysis: Structure analysis of the source song.
        source: The untouched input song.
        config: Configuration of the run.
        seed: Seed actually used (drawn from the clock when none was given).
    """
    song: Song
    analysis: SongAnalysis
    source: Song
    config: HumanizationConfig
    seed: int

    def note_lists(self) -> Tuple[List[Note], List[Note]]:
        """All notes (before, after), each sorted by start time."""
        before = [note for track in self.source.tracks for note in extract_notes(track)]
        after = [note for track in self.song.tracks for note in extract_notes(track)]
        before.sort(key=lambda note: note.start_time)
        after.sort(key=lambda note: note.start_time)
        return before, after


def humanize(song: Song, config: Optional[HumanizationConfig] = None,
             settings: Optional[AnalysisSettings] = None) -> HumanizeResult:
    """Analyze and humanize a song.

    The input song is never modified; the result holds new Track values.
    One random generator is shared by all tracks, in track order.
    """
    config = config or HumanizationConfig()
    settings = settings or AnalysisSettings()
    rng = MultiplyWithCarry(config.seed)
    logger.info(
        "Humanizing %d tracks (style=%s, intensity=%.2f, seed=%d)",
        len(song.tracks), config.style.value, config.intensity, rng.seed,
    )

    analysis = analyze_song(song, config, settings)
    humanizer = Humanizer(config, song.ticks_per_quarter_note, rng=rng, settings=settings)
    tracks = tuple(
        humanizer.humanize_track(track, track_analysis)
        for track, track_analysis in zip(song.tracks, analysis.tracks)
    )
    result = Song(header=song.header, tracks=tracks)
    return HumanizeResult(song=result, analysis=analysis, source=song,
                          config=config, seed=rng.seed)


def humanize_bytes(data: bytes, config: Optional[HumanizationConfig] = None,
                   settings: Optional[AnalysisSettings] = None) -> Tuple[bytes, HumanizeResult]:
    """Decode, humanize and re-encode a Standard MIDI File buffer.

    Raises:
        FormatError, TruncatedEventError: ``data`` is not valid SMF.
    """
    song = decode_song(data)
    result = humanize(song, config, settings)
    return encode_song(result.song), result


def humanize_file(source: Union[str, Path], destination: Union[str, Path],
                  config: Optional[HumanizationConfig] = None,
                  settings: Optional[AnalysisSettings] = None) -> HumanizeResult:
    """Humanize a MIDI file on disk and write the result."""
    song = load_midi(source)
    result = humanize(song, config, settings)
    size = save_midi(result.song, destination)
    logger.info("Wrote %s (%d bytes)", destination, size)
    return result
