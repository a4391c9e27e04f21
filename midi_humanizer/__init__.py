"""midi_humanizer - Style-aware, reproducible humanization of MIDI files."""

from .constants import (
    DEFAULT_TICKS_PER_QUARTER, DEFAULT_BPM, NOTE_NAMES,
    EventKind, Style, PhraseDetectionMode, ChordQuality, DynamicTrend, Contour,
)
from .errors import MidiError, FormatError, TruncatedEventError
from .models import (
    NoteOn, NoteOff, PolyAftertouch, ControlChange, ProgramChange,
    ChannelPressure, PitchBend, MetaEvent, SetTempo, TimeSignature, SysEx,
    Track, SongHeader, Song, Note, PlaybackNote, ChordSegment, PhraseSegment,
    MelodySummary, RhythmSummary, DynamicPeak, DynamicsSummary,
    TrackAnalysis, SongAnalysis,
)
from .helpers import note_name, ticks_to_seconds, TempoMap
from .codec import decode_song, encode_song, read_vlq, write_vlq
from .loader import load_midi, save_midi
from .notes import extract_notes, playback_notes
from .config import HumanizationConfig, AnalysisSettings, load_config_file
from .profiles import StyleProfile, STYLE_PROFILES
from .rng import MultiplyWithCarry
from .analyzer import StructureAnalyzer, analyze_song
from .humanizer import Humanizer
from .pipeline import HumanizeResult, humanize, humanize_bytes, humanize_file
from .formatter import OutputFormatter

__all__ = [
    'DEFAULT_TICKS_PER_QUARTER', 'DEFAULT_BPM', 'NOTE_NAMES',
    'EventKind', 'Style', 'PhraseDetectionMode', 'ChordQuality',
    'DynamicTrend', 'Contour',
    'MidiError', 'FormatError', 'TruncatedEventError',
    'NoteOn', 'NoteOff', 'PolyAftertouch', 'ControlChange', 'ProgramChange',
    'ChannelPressure', 'PitchBend', 'MetaEvent', 'SetTempo', 'TimeSignature',
    'SysEx', 'Track', 'SongHeader', 'Song', 'Note', 'PlaybackNote',
    'ChordSegment', 'PhraseSegment', 'MelodySummary', 'RhythmSummary',
    'DynamicPeak', 'DynamicsSummary', 'TrackAnalysis', 'SongAnalysis',
    'note_name', 'ticks_to_seconds', 'TempoMap',
    'decode_song', 'encode_song', 'read_vlq', 'write_vlq',
    'load_midi', 'save_midi', 'extract_notes', 'playback_notes',
    'HumanizationConfig', 'AnalysisSettings', 'load_config_file',
    'StyleProfile', 'STYLE_PROFILES', 'MultiplyWithCarry',
    'StructureAnalyzer', 'analyze_song', 'Humanizer',
    'HumanizeResult', 'humanize', 'humanize_bytes', 'humanize_file',
    'OutputFormatter',
]
