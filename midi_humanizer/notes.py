"""Note extraction: pair NoteOn/NoteOff events into Note entities.

Also flattens a song into playback notes with tick and second timing.
"""

from typing import Dict, List, Tuple

from .constants import DEFAULT_BPM
from .helpers import TempoMap, ticks_to_seconds
from .models import (
    Note, NoteOn, PlaybackNote, Song, Track, MidiEvent, SetTempo,
    is_note_on, is_note_off,
)


def extract_notes(track: Track) -> List[Note]:
    """Pair note-on and note-off events of a track.

    Keeps the most recent unmatched NoteOn per (pitch, channel). A second
    NoteOn on the same key before any NoteOff replaces the pending one, so
    overlapping same-pitch notes collapse into the later note. NoteOffs
    with nothing pending are dropped.

    Returns:
        Notes sorted by start time; ties keep event order.
    """
    pending: Dict[Tuple[int, int], NoteOn] = {}
    notes: List[Note] = []

    for event in track:
        if is_note_on(event):
            pending[(event.note, event.channel)] = event
        elif is_note_off(event):
            note_on = pending.pop((event.note, event.channel), None)
            if note_on is None:
                continue
            notes.append(Note(
                pitch=note_on.note,
                velocity=note_on.velocity,
                start_time=note_on.time,
                end_time=max(note_on.time, event.time),
                channel=note_on.channel,
            ))

    notes.sort(key=lambda note: note.start_time)
    return notes


def note_events(track: Track) -> List[MidiEvent]:
    """NoteOn and NoteOff events of a track (velocity-0 NoteOns included)."""
    return [event for event in track if is_note_on(event) or is_note_off(event)]


def tempo_map(song: Song) -> TempoMap:
    """Tempo map from every SetTempo event in the song."""
    changes = [
        (event.time, event.tempo)
        for track in song.tracks
        for event in track
        if isinstance(event, SetTempo)
    ]
    return TempoMap(song.ticks_per_quarter_note, changes)


def playback_notes(song: Song, honor_tempo: bool = False,
                   bpm: float = DEFAULT_BPM) -> List[PlaybackNote]:
    """Flatten all tracks into time-ordered playback notes.

    Args:
        song: Source song.
        honor_tempo: Convert ticks to seconds through the song's tempo
            events instead of a constant tempo.
        bpm: Constant tempo used when ``honor_tempo`` is False.
    """
    tpq = song.ticks_per_quarter_note
    tempo = tempo_map(song) if honor_tempo else None

    def to_seconds(tick: int) -> float:
        if tempo is not None:
            return tempo.seconds_at(tick)
        return ticks_to_seconds(tick, tpq, bpm)

    result = []
    for track in song.tracks:
        for note in extract_notes(track):
            start = to_seconds(note.start_time)
            result.append(PlaybackNote(
                pitch=note.pitch,
                velocity=note.velocity,
                start_ticks=note.start_time,
                duration_ticks=note.duration,
                start_seconds=start,
                duration_seconds=to_seconds(note.end_time) - start,
            ))
    result.sort(key=lambda note: note.start_ticks)
    return result
