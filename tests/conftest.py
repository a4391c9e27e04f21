"""Shared test fixtures and helpers for midi_humanizer tests."""

import sys
from pathlib import Path
from typing import List, Sequence, Tuple

# Ensure the repository root is on the path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from midi_humanizer import (
    NoteOn, NoteOff, ControlChange, ProgramChange, PitchBend,
    ChannelPressure, PolyAftertouch, MetaEvent, SetTempo, TimeSignature,
    SysEx, Track, SongHeader, Song, Note,
    HumanizationConfig, AnalysisSettings, Style, PhraseDetectionMode,
    ChordQuality, DynamicTrend, Contour, EventKind,
    FormatError, TruncatedEventError, MidiError,
    decode_song, encode_song, extract_notes,
)
from midi_humanizer.constants import META_END_OF_TRACK


def end_of_track(time: int) -> MetaEvent:
    return MetaEvent(time=time, meta_type=META_END_OF_TRACK)


def note_pair(start: int, pitch: int, duration: int = 480,
              velocity: int = 80, channel: int = 0) -> List:
    """NoteOn/NoteOff events for one note."""
    return [
        NoteOn(time=start, channel=channel, note=pitch, velocity=velocity),
        NoteOff(time=start + duration, channel=channel, note=pitch),
    ]


def make_track(events: Sequence, end: bool = True) -> Track:
    """Track from events in any order, stably sorted by time.

    Appends End-of-Track at the last event time unless ``end`` is False.
    """
    ordered = sorted(events, key=lambda event: event.time)
    if end:
        ordered.append(end_of_track(ordered[-1].time if ordered else 0))
    return Track(tuple(ordered))


def make_notes_track(notes: Sequence[Tuple[int, int, int]], velocity: int = 80) -> Track:
    """Track from (start, pitch, duration) triples."""
    events = []
    for start, pitch, duration in notes:
        events.extend(note_pair(start, pitch, duration, velocity))
    return make_track(events)


def make_song(*tracks: Track, ticks_per_quarter: int = 480, format_type: int = 1) -> Song:
    return Song(
        header=SongHeader(format_type=format_type, track_count=len(tracks),
                          ticks_per_quarter_note=ticks_per_quarter),
        tracks=tuple(tracks),
    )


def make_note(start: int, pitch: int, duration: int = 480, velocity: int = 80) -> Note:
    return Note(pitch=pitch, velocity=velocity, start_time=start,
                end_time=start + duration)


def scale_melody(count: int = 16, start_pitch: int = 60, step: int = 480,
                 duration: int = 400) -> List[Tuple[int, int, int]]:
    """Ascending C major scale run as (start, pitch, duration) triples."""
    offsets = [0, 2, 4, 5, 7, 9, 11, 12]
    return [
        (i * step, start_pitch + offsets[i % 8] + 12 * (i // 8), duration)
        for i in range(count)
    ]


def header_chunk(format_type: int = 0, tracks: int = 1, division: int = 480) -> bytes:
    return (b"MThd" + (6).to_bytes(4, "big") + format_type.to_bytes(2, "big")
            + tracks.to_bytes(2, "big") + division.to_bytes(2, "big"))


def track_chunk(payload: bytes) -> bytes:
    return b"MTrk" + len(payload).to_bytes(4, "big") + payload


def minimal_smf() -> bytes:
    """Format 0 file: middle C, velocity 80, one quarter note at 480 tpq."""
    payload = bytes([
        0x00, 0x90, 60, 80,          # NoteOn at 0
        0x83, 0x60, 0x80, 60, 0,     # NoteOff after 480 ticks
        0x00, 0xFF, 0x2F, 0x00,      # End of track
    ])
    return header_chunk() + track_chunk(payload)
