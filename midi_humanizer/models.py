"""Data classes for the MIDI event model and structure analysis.

Events are a tagged union of frozen dataclasses: each kind carries only
its own fields plus an absolute ``time`` in ticks. Songs and tracks are
immutable values, so transforms always build new ones.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Iterator, List, Optional, Tuple, Union

from .constants import (
    NOTE_OFF, NOTE_ON, POLY_AFTERTOUCH, CONTROL_CHANGE, PROGRAM_CHANGE,
    CHANNEL_PRESSURE, PITCH_BEND, META_SET_TEMPO, META_TIME_SIGNATURE,
    META_END_OF_TRACK, DEFAULT_TICKS_PER_QUARTER,
    EventKind, ChordQuality, DynamicTrend, Contour,
)


# =============================================================================
# EVENTS
# =============================================================================

@dataclass(frozen=True)
class ChannelEvent:
    """Common fields of every channel voice message."""
    time: int
    channel: int

    message_type: ClassVar[int] = 0

    @property
    def status(self) -> int:
        return self.message_type | (self.channel & 0x0F)


@dataclass(frozen=True)
class NoteOn(ChannelEvent):
    note: int
    velocity: int

    kind: ClassVar[EventKind] = EventKind.NOTE_ON
    message_type: ClassVar[int] = NOTE_ON


@dataclass(frozen=True)
class NoteOff(ChannelEvent):
    note: int
    velocity: int = 0

    kind: ClassVar[EventKind] = EventKind.NOTE_OFF
    message_type: ClassVar[int] = NOTE_OFF


@dataclass(frozen=True)
class PolyAftertouch(ChannelEvent):
    note: int
    pressure: int

    kind: ClassVar[EventKind] = EventKind.POLY_AFTERTOUCH
    message_type: ClassVar[int] = POLY_AFTERTOUCH


@dataclass(frozen=True)
class ControlChange(ChannelEvent):
    controller: int
    value: int

    kind: ClassVar[EventKind] = EventKind.CONTROL_CHANGE
    message_type: ClassVar[int] = CONTROL_CHANGE


@dataclass(frozen=True)
class ProgramChange(ChannelEvent):
    program: int

    kind: ClassVar[EventKind] = EventKind.PROGRAM_CHANGE
    message_type: ClassVar[int] = PROGRAM_CHANGE


@dataclass(frozen=True)
class ChannelPressure(ChannelEvent):
    pressure: int

    kind: ClassVar[EventKind] = EventKind.CHANNEL_PRESSURE
    message_type: ClassVar[int] = CHANNEL_PRESSURE


@dataclass(frozen=True)
class PitchBend(ChannelEvent):
    value: int  # 14-bit, 8192 = centre

    kind: ClassVar[EventKind] = EventKind.PITCH_BEND
    message_type: ClassVar[int] = PITCH_BEND


@dataclass(frozen=True)
class MetaEvent:
    """Meta event kept as raw bytes (text, key signature, end of track...)."""
    time: int
    meta_type: int
    data: bytes = b""

    kind: ClassVar[EventKind] = EventKind.META


@dataclass(frozen=True)
class SetTempo:
    """Tempo meta event (0x51), microseconds per quarter note."""
    time: int
    tempo: int

    kind: ClassVar[EventKind] = EventKind.META
    meta_type: ClassVar[int] = META_SET_TEMPO

    @property
    def data(self) -> bytes:
        return self.tempo.to_bytes(3, "big")

    @property
    def bpm(self) -> float:
        return 60_000_000 / self.tempo if self.tempo else 0.0


@dataclass(frozen=True)
class TimeSignature:
    """Time signature meta event (0x58)."""
    time: int
    numerator: int
    denominator: int
    clocks_per_click: int = 24
    thirty_seconds_per_quarter: int = 8

    kind: ClassVar[EventKind] = EventKind.META
    meta_type: ClassVar[int] = META_TIME_SIGNATURE

    @property
    def data(self) -> bytes:
        power = max(0, self.denominator.bit_length() - 1)
        return bytes([
            self.numerator & 0xFF, power & 0xFF,
            self.clocks_per_click & 0xFF, self.thirty_seconds_per_quarter & 0xFF,
        ])


@dataclass(frozen=True)
class SysEx:
    """System exclusive event; ``status`` is 0xF0 or 0xF7."""
    time: int
    status: int
    data: bytes = b""

    kind: ClassVar[EventKind] = EventKind.SYSEX


MidiEvent = Union[
    NoteOn, NoteOff, PolyAftertouch, ControlChange, ProgramChange,
    ChannelPressure, PitchBend, MetaEvent, SetTempo, TimeSignature, SysEx,
]


def is_note_on(event) -> bool:
    """True for a sounding NoteOn (velocity > 0)."""
    return event.kind is EventKind.NOTE_ON and event.velocity > 0


def is_note_off(event) -> bool:
    """True for an explicit NoteOff or a NoteOn with velocity 0."""
    return (event.kind is EventKind.NOTE_OFF
            or (event.kind is EventKind.NOTE_ON and event.velocity == 0))


def is_end_of_track(event) -> bool:
    return event.kind is EventKind.META and event.meta_type == META_END_OF_TRACK


# =============================================================================
# SONG
# =============================================================================

@dataclass(frozen=True)
class Track:
    """Ordered, immutable sequence of events."""
    events: Tuple[MidiEvent, ...] = ()

    def __iter__(self) -> Iterator[MidiEvent]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def __getitem__(self, index):
        return self.events[index]

    @property
    def end_time(self) -> int:
        return max((event.time for event in self.events), default=0)


@dataclass(frozen=True)
class SongHeader:
    format_type: int = 1
    track_count: int = 0
    ticks_per_quarter_note: int = DEFAULT_TICKS_PER_QUARTER


@dataclass(frozen=True)
class Song:
    """A decoded Standard MIDI File. Owns its tracks exclusively."""
    header: SongHeader
    tracks: Tuple[Track, ...] = ()

    @property
    def ticks_per_quarter_note(self) -> int:
        return self.header.ticks_per_quarter_note


# =============================================================================
# DERIVED ENTITIES
# =============================================================================

@dataclass(frozen=True)
class Note:
    """A paired NoteOn/NoteOff."""
    pitch: int
    velocity: int
    start_time: int
    end_time: int
    channel: int = 0

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time

    @property
    def pitch_class(self) -> int:
        return self.pitch % 12


@dataclass(frozen=True)
class PlaybackNote:
    """Flattened note for the playback collaborator."""
    pitch: int
    velocity: int
    start_ticks: int
    duration_ticks: int
    start_seconds: float
    duration_seconds: float


@dataclass(frozen=True)
class ChordSegment:
    time: int
    duration: int
    pitch_classes: Tuple[int, ...]
    quality: ChordQuality
    root: int

    @property
    def end(self) -> int:
        return self.time + self.duration

    def contains(self, tick: int) -> bool:
        return self.time <= tick < self.end


@dataclass
class PhraseSegment:
    """A contiguous span of a track judged to be one musical unit."""
    start: int
    end: int
    events: List[MidiEvent] = field(default_factory=list)

    @property
    def duration(self) -> int:
        return self.end - self.start

    def position(self, tick: int) -> float:
        """Relative position (0.0-1.0) of a tick inside the phrase."""
        if self.end <= self.start:
            return 0.0
        return (tick - self.start) / (self.end - self.start)


@dataclass
class MelodySummary:
    range: int
    average_pitch: float
    contour: Tuple[Contour, ...] = ()


@dataclass
class RhythmSummary:
    average_duration: float
    swing: bool = False
    syncopation: bool = False

    @property
    def has_groove(self) -> bool:
        return self.swing or self.syncopation


@dataclass
class DynamicPeak:
    """Loudest note of a phrase and where it sits in the phrase."""
    phrase_index: int
    time: int
    velocity: int
    position: float

    @property
    def placement(self) -> str:
        if self.position < 0.3:
            return "early"
        if self.position > 0.7:
            return "late"
        return "middle"


@dataclass
class DynamicsSummary:
    average_velocity: float
    dynamic_range: int
    trend: DynamicTrend = DynamicTrend.STABLE
    peaks: List[DynamicPeak] = field(default_factory=list)


@dataclass
class TrackAnalysis:
    """Complete analysis of one track."""
    phrases: List[PhraseSegment] = field(default_factory=list)
    chords: List[ChordSegment] = field(default_factory=list)
    melody: Optional[MelodySummary] = None
    rhythm: Optional[RhythmSummary] = None
    dynamics: Optional[DynamicsSummary] = None
    note_count: int = 0

    def phrase_at(self, tick: int) -> Tuple[int, Optional[PhraseSegment]]:
        """Return (index, phrase) of the first phrase spanning a tick."""
        for idx, phrase in enumerate(self.phrases):
            if phrase.start <= tick <= phrase.end:
                return idx, phrase
        return -1, None

    def chord_at(self, tick: int) -> Optional[ChordSegment]:
        for chord in self.chords:
            if chord.contains(tick):
                return chord
        return None


@dataclass
class SongAnalysis:
    """Per-track analyses of a song plus aggregate views."""
    tracks: List[TrackAnalysis] = field(default_factory=list)
    ticks_per_quarter_note: int = DEFAULT_TICKS_PER_QUARTER
    bpm: float = 120.0

    @property
    def phrases(self) -> List[PhraseSegment]:
        return [phrase for track in self.tracks for phrase in track.phrases]

    @property
    def total_phrases(self) -> int:
        return len(self.phrases)

    @property
    def average_phrase_seconds(self) -> float:
        phrases = self.phrases
        if not phrases or self.ticks_per_quarter_note <= 0 or self.bpm <= 0:
            return 0.0
        seconds_per_tick = 60.0 / (self.bpm * self.ticks_per_quarter_note)
        total = sum(phrase.duration for phrase in phrases)
        return total / len(phrases) * seconds_per_tick

    @property
    def chords(self) -> List[ChordSegment]:
        return [chord for track in self.tracks for chord in track.chords]
