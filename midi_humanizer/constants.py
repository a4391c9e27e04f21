"""Constants and enums for MIDI decoding, analysis and humanization.

Status bytes, meta types, analysis window sizes, detector weights
and the style/mode enums shared across the package.
"""

from enum import Enum


# =============================================================================
# FILE FORMAT
# =============================================================================

HEADER_TAG = b"MThd"
TRACK_TAG = b"MTrk"
HEADER_LENGTH = 6
CHUNK_PREFIX_LENGTH = 8
MAX_VLQ_BYTES = 4
MAX_VLQ_VALUE = 0x0FFFFFFF

# Channel message types (high nibble of the status byte)
NOTE_OFF = 0x80
NOTE_ON = 0x90
POLY_AFTERTOUCH = 0xA0
CONTROL_CHANGE = 0xB0
PROGRAM_CHANGE = 0xC0
CHANNEL_PRESSURE = 0xD0
PITCH_BEND = 0xE0

# Channel messages carrying a single data byte
SINGLE_DATA_BYTE_TYPES = {PROGRAM_CHANGE, CHANNEL_PRESSURE}

META_STATUS = 0xFF
SYSEX_START = 0xF0
SYSEX_ESCAPE = 0xF7

META_SET_TEMPO = 0x51
META_TIME_SIGNATURE = 0x58
META_END_OF_TRACK = 0x2F

MIN_VELOCITY = 1
MAX_VELOCITY = 127


# =============================================================================
# TIMING
# =============================================================================

DEFAULT_TICKS_PER_QUARTER = 480
DEFAULT_BPM = 120.0
DEFAULT_TEMPO_US = 500000  # microseconds per quarter at 120 BPM
NOTE_NAMES = ['C', 'C#', 'D', 'D#', 'E', 'F', 'F#', 'G', 'G#', 'A', 'A#', 'B']


# =============================================================================
# ANALYSIS
# =============================================================================

CHORD_WINDOW_TICKS = 960        # 2 beats at 480 tpq, tempo independent
HARMONIC_STRIDE_TICKS = 480
MELODY_ONSET_TOLERANCE = 50     # ticks
CONTOUR_THRESHOLD = 2           # semitones
MIN_PHRASE_SECONDS = 0.5
DYNAMICS_TREND_THRESHOLD = 5

# Musical boundary detector
MUSICAL_WINDOW_MIN = 3
MUSICAL_WINDOW_MAX = 8
MUSICAL_PITCH_CHANGE_MIN = 3
MUSICAL_DURATION_CHANGE_MIN = 0.3
MUSICAL_DIRECTION_MIN = 2
MUSICAL_DIRECTION_BONUS = 0.5
MUSICAL_SCORE_THRESHOLD = 0.6

HARMONIC_MIN_NOTES = 6
HARMONIC_DISTANCE_THRESHOLD = 0.5

# Boundary fusion
MUSICAL_WEIGHT = 3
REST_WEIGHT = 2
HARMONIC_WEIGHT = 1
FUSION_THRESHOLD = 2


# =============================================================================
# HUMANIZATION
# =============================================================================

DEFAULT_MWC_Z = 987654321
MAX_TIMING_ADJUSTMENT = 40
MAX_TIMING_BEAT_FRACTION = 0.08
DRIFT_LIMIT = 50
DRIFT_FEEDBACK = 0.1
DRIFT_WEIGHT = 0.3
SWING_GRID_TICKS = 48
MIN_EVENT_SPACING = 3
PHRASE_BREATH_SECONDS = 2.0


# =============================================================================
# ENUMS
# =============================================================================

class EventKind(Enum):
    NOTE_ON = "note_on"
    NOTE_OFF = "note_off"
    CONTROL_CHANGE = "control_change"
    PROGRAM_CHANGE = "program_change"
    PITCH_BEND = "pitch_bend"
    POLY_AFTERTOUCH = "poly_aftertouch"
    CHANNEL_PRESSURE = "channel_pressure"
    META = "meta"
    SYSEX = "sysex"


class Style(Enum):
    CLASSICAL = "classical"
    POP = "pop"
    JAZZ = "jazz"
    DEFAULT = "default"


class PhraseDetectionMode(Enum):
    AUTO = "auto"
    MUSICAL = "musical"
    REST = "rest"
    HARMONIC = "harmonic"


class ChordQuality(Enum):
    MAJOR = "major"
    MINOR = "minor"
    DIMINISHED = "diminished"
    UNKNOWN = "unknown"


class DynamicTrend(Enum):
    CRESCENDO = "crescendo"
    DIMINUENDO = "diminuendo"
    STABLE = "stable"


class Contour(Enum):
    UP = "up"
    DOWN = "down"
    SAME = "same"
