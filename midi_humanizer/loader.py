"""File loading functions for MIDI songs.

Read and write Standard MIDI Files through the codec.
"""

from pathlib import Path
from typing import Union

from .codec import decode_song, encode_song
from .models import Song

PathLike = Union[str, Path]


def load_midi(filepath: PathLike) -> Song:
    """Load a Standard MIDI File.

    Args:
        filepath: Path to the .mid file.

    Returns:
        Decoded Song.

    Raises:
        FormatError, TruncatedEventError: The file is not valid SMF.
        OSError: The file cannot be read.
    """
    with open(filepath, 'rb') as file_handle:
        data = file_handle.read()
    return decode_song(data)


def save_midi(song: Song, filepath: PathLike) -> int:
    """Encode a song and write it to disk.

    Returns:
        Number of bytes written.
    """
    data = encode_song(song)
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'wb') as file_handle:
        file_handle.write(data)
    return len(data)
