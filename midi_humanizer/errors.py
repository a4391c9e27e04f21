"""Exceptions raised while decoding Standard MIDI Files."""


class MidiError(Exception):
    """Base class for MIDI decoding failures.

    Attributes:
        offset: Byte offset in the input buffer where decoding stopped,
            or None when not tied to a position.
    """

    def __init__(self, message: str, offset: int = None):
        super().__init__(message)
        self.offset = offset


class FormatError(MidiError):
    """Missing or wrong chunk tag, bad chunk length, or invalid status byte."""


class TruncatedEventError(MidiError):
    """An event runs past the end of its track chunk."""
