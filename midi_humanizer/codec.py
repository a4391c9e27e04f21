"""Standard MIDI File codec.

Decodes the chunk-based SMF container into immutable Song values and
encodes them back. Decoding honours running status and parses tempo
and time-signature meta events; encoding always writes explicit status
bytes and guarantees an End-of-Track event per track.
"""

import logging
from typing import List, Tuple

from .constants import (
    HEADER_TAG, TRACK_TAG, HEADER_LENGTH, CHUNK_PREFIX_LENGTH,
    MAX_VLQ_BYTES, MAX_VLQ_VALUE,
    NOTE_OFF, NOTE_ON, POLY_AFTERTOUCH, CONTROL_CHANGE, PROGRAM_CHANGE,
    CHANNEL_PRESSURE, PITCH_BEND, SINGLE_DATA_BYTE_TYPES,
    META_STATUS, SYSEX_START, SYSEX_ESCAPE,
    META_SET_TEMPO, META_TIME_SIGNATURE, META_END_OF_TRACK,
    EventKind,
)
from .errors import FormatError, TruncatedEventError
from .helpers import round_half_up
from .models import (
    Song, SongHeader, Track, MidiEvent,
    NoteOn, NoteOff, PolyAftertouch, ControlChange, ProgramChange,
    ChannelPressure, PitchBend, MetaEvent, SetTempo, TimeSignature, SysEx,
    is_end_of_track,
)

logger = logging.getLogger(__name__)


# =============================================================================
# VARIABLE-LENGTH QUANTITIES
# =============================================================================

def read_vlq(data: bytes, offset: int, end: int = None) -> Tuple[int, int]:
    """Read a variable-length quantity.

    Args:
        data: Source buffer.
        offset: Position of the first VLQ byte.
        end: Exclusive bound the quantity must not cross
            (defaults to the buffer length).

    Returns:
        Tuple of (value, offset just past the quantity).

    Raises:
        TruncatedEventError: The quantity runs past ``end``.
        FormatError: The quantity is longer than 4 bytes.
    """
    if end is None:
        end = len(data)
    value = 0
    for _ in range(MAX_VLQ_BYTES):
        if offset >= end:
            raise TruncatedEventError(
                "variable-length quantity runs past end of track", offset)
        byte = data[offset]
        offset += 1
        value = (value << 7) | (byte & 0x7F)
        if not byte & 0x80:
            return value, offset
    raise FormatError("variable-length quantity longer than 4 bytes", offset)


def write_vlq(value: int) -> bytes:
    """Encode a non-negative integer as a variable-length quantity."""
    if value < 0 or value > MAX_VLQ_VALUE:
        raise ValueError(f"value out of VLQ range: {value}")
    buffer = [value & 0x7F]
    value >>= 7
    while value:
        buffer.append((value & 0x7F) | 0x80)
        value >>= 7
    return bytes(reversed(buffer))


# =============================================================================
# DECODING
# =============================================================================

def _take(data: bytes, offset: int, count: int, end: int) -> bytes:
    if offset + count > end:
        raise TruncatedEventError(
            f"event needs {count} byte(s) past end of track", offset)
    return data[offset:offset + count]


def _decode_channel_event(data: bytes, offset: int, end: int,
                          time: int, status: int) -> Tuple[MidiEvent, int]:
    message_type = status & 0xF0
    channel = status & 0x0F
    size = 1 if message_type in SINGLE_DATA_BYTE_TYPES else 2
    payload = _take(data, offset, size, end)
    offset += size

    if message_type == NOTE_ON:
        event = NoteOn(time, channel, payload[0], payload[1])
    elif message_type == NOTE_OFF:
        event = NoteOff(time, channel, payload[0], payload[1])
    elif message_type == POLY_AFTERTOUCH:
        event = PolyAftertouch(time, channel, payload[0], payload[1])
    elif message_type == CONTROL_CHANGE:
        event = ControlChange(time, channel, payload[0], payload[1])
    elif message_type == PROGRAM_CHANGE:
        event = ProgramChange(time, channel, payload[0])
    elif message_type == CHANNEL_PRESSURE:
        event = ChannelPressure(time, channel, payload[0])
    else:
        event = PitchBend(time, channel, (payload[1] << 7) | payload[0])
    return event, offset


def _decode_meta_event(data: bytes, offset: int, end: int,
                       time: int) -> Tuple[MidiEvent, int]:
    meta_type = _take(data, offset, 1, end)[0]
    length, offset = read_vlq(data, offset + 1, end)
    payload = bytes(_take(data, offset, length, end))
    offset += length

    if meta_type == META_SET_TEMPO and length == 3:
        return SetTempo(time, int.from_bytes(payload, "big")), offset
    if meta_type == META_TIME_SIGNATURE and length == 4:
        return TimeSignature(
            time,
            numerator=payload[0],
            denominator=2 ** payload[1],
            clocks_per_click=payload[2],
            thirty_seconds_per_quarter=payload[3],
        ), offset
    return MetaEvent(time, meta_type, payload), offset


def decode_track(data: bytes, start: int, end: int) -> Track:
    """Decode the event stream of one track chunk.

    Args:
        data: Whole file buffer.
        start: Offset of the first event (just past the chunk prefix).
        end: Offset just past the chunk's declared length.

    Returns:
        Track with absolute event times.
    """
    events: List[MidiEvent] = []
    offset = start
    now = 0
    running_status = None

    while offset < end:
        delta, offset = read_vlq(data, offset, end)
        now += delta
        if offset >= end:
            raise TruncatedEventError("event status missing at end of track", offset)

        status = data[offset]
        if status < 0x80:
            if running_status is None:
                raise FormatError("data byte without running status", offset)
            status = running_status
        else:
            offset += 1

        if status < SYSEX_START:
            running_status = status
            event, offset = _decode_channel_event(data, offset, end, now, status)
        elif status == META_STATUS:
            event, offset = _decode_meta_event(data, offset, end, now)
        elif status in (SYSEX_START, SYSEX_ESCAPE):
            length, offset = read_vlq(data, offset, end)
            payload = bytes(_take(data, offset, length, end))
            offset += length
            event = SysEx(now, status, payload)
        else:
            raise FormatError(f"unsupported status byte 0x{status:02X}", offset - 1)

        events.append(event)

    return Track(tuple(events))


def decode_song(data: bytes) -> Song:
    """Decode a Standard MIDI File.

    Args:
        data: Complete file contents. The buffer is copied, never retained.

    Returns:
        Decoded Song.

    Raises:
        FormatError: Missing/incorrect chunk tags, chunk lengths that
            overrun the buffer, or unsupported header fields.
        TruncatedEventError: An event runs past its track chunk.
    """
    data = bytes(data)
    if data[:4] != HEADER_TAG:
        raise FormatError("missing MThd header chunk", 0)
    if len(data) < CHUNK_PREFIX_LENGTH + HEADER_LENGTH:
        raise FormatError("header chunk is truncated", len(data))

    header_length = int.from_bytes(data[4:8], "big")
    if header_length < HEADER_LENGTH:
        raise FormatError(f"header chunk too short ({header_length} bytes)", 4)
    if CHUNK_PREFIX_LENGTH + header_length > len(data):
        raise FormatError("header chunk length overruns buffer", 4)

    format_type = int.from_bytes(data[8:10], "big")
    track_count = int.from_bytes(data[10:12], "big")
    division = int.from_bytes(data[12:14], "big")
    if division & 0x8000:
        raise FormatError("SMPTE time division is not supported", 12)
    if division == 0:
        raise FormatError("time division of zero ticks per quarter note", 12)

    offset = CHUNK_PREFIX_LENGTH + header_length
    tracks = []
    for index in range(track_count):
        if offset + CHUNK_PREFIX_LENGTH > len(data):
            raise FormatError(f"track {index}: missing MTrk chunk", offset)
        if data[offset:offset + 4] != TRACK_TAG:
            raise FormatError(f"track {index}: expected MTrk chunk", offset)
        length = int.from_bytes(data[offset + 4:offset + 8], "big")
        start = offset + CHUNK_PREFIX_LENGTH
        end = start + length
        if end > len(data):
            raise FormatError(f"track {index}: chunk length overruns buffer", offset + 4)
        tracks.append(decode_track(data, start, end))
        offset = end

    logger.debug("Decoded %d track(s), format %d, %d tpq",
                 len(tracks), format_type, division)
    return Song(
        header=SongHeader(format_type, track_count, division),
        tracks=tuple(tracks),
    )


# =============================================================================
# ENCODING
# =============================================================================

def encode_event(event: MidiEvent) -> bytes:
    """Encode one event (status and data bytes, no delta-time)."""
    kind = event.kind
    if kind in (EventKind.NOTE_ON, EventKind.NOTE_OFF):
        return bytes([event.status, event.note & 0x7F, event.velocity & 0x7F])
    if kind == EventKind.POLY_AFTERTOUCH:
        return bytes([event.status, event.note & 0x7F, event.pressure & 0x7F])
    if kind == EventKind.CONTROL_CHANGE:
        return bytes([event.status, event.controller & 0x7F, event.value & 0x7F])
    if kind == EventKind.PROGRAM_CHANGE:
        return bytes([event.status, event.program & 0x7F])
    if kind == EventKind.CHANNEL_PRESSURE:
        return bytes([event.status, event.pressure & 0x7F])
    if kind == EventKind.PITCH_BEND:
        return bytes([event.status, event.value & 0x7F, (event.value >> 7) & 0x7F])
    if kind == EventKind.META:
        payload = bytes(event.data)
        return bytes([META_STATUS, event.meta_type & 0xFF]) + write_vlq(len(payload)) + payload
    payload = bytes(event.data)
    return bytes([event.status]) + write_vlq(len(payload)) + payload


def encode_track(track: Track) -> bytes:
    """Encode a track as a complete MTrk chunk."""
    body = bytearray()
    previous = 0
    for event in track:
        delta = max(0, round_half_up(event.time - previous))
        body += write_vlq(delta)
        body += encode_event(event)
        previous = event.time

    if not any(is_end_of_track(event) for event in track):
        body += write_vlq(0)
        body += bytes([META_STATUS, META_END_OF_TRACK, 0])

    return TRACK_TAG + len(body).to_bytes(4, "big") + bytes(body)


def encode_song(song: Song) -> bytes:
    """Encode a Song as a Standard MIDI File."""
    header = song.header
    chunks = [
        HEADER_TAG,
        HEADER_LENGTH.to_bytes(4, "big"),
        (header.format_type & 0xFFFF).to_bytes(2, "big"),
        len(song.tracks).to_bytes(2, "big"),
        (header.ticks_per_quarter_note & 0x7FFF).to_bytes(2, "big"),
    ]
    chunks.extend(encode_track(track) for track in song.tracks)
    return b"".join(chunks)
