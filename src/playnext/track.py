"""Track model shared by the filter, selection and history modules."""

import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TrackStatus(str, Enum):
    """Playback status of a library track."""

    UNKNOWN = "unknown"
    AVAILABLE = "available"
    PLAYING = "playing"
    MISSING = "missing"


def artist_hash(name: Optional[str]) -> int:
    """Hash an artist name into a 32-bit identity.

    Case-insensitive; accented Latin letters fold to their base letter so
    "Beyoncé" and "beyonce" share a hash. Empty or missing names hash to 0,
    which callers treat as "no artist".

    Args:
        name: Artist name as read from the file's tags

    Returns:
        Unsigned 32-bit hash (0 for no artist)
    """
    if not name:
        return 0

    value = 0
    for char in name:
        if ord(char) >= 128:
            decomposed = unicodedata.normalize("NFKD", char)
            char = decomposed[0] if decomposed else char
        char = char.lower()

        # Shift-add hash (x33 + c) with a zero seed
        value = ((value << 5) + value + ord(char)) & 0xFFFFFFFF

    return value


@dataclass(eq=False)
class Track:
    """A library track and its playback statistics.

    Tracks compare by identity: the same object is shared between the
    library and any history list that references it.
    """

    track_id: str
    path: str = ""
    title: Optional[str] = None
    artist: Optional[str] = None
    album_artist: Optional[str] = None
    status: TrackStatus = TrackStatus.AVAILABLE

    # Statistics
    rating: int = 0  # 0 = unrated, else 1-100
    score: float = 50.0  # 0.0-100.0
    play_count: int = 0
    skip_count: int = 0
    last_played: int = 0  # Unix seconds, 0 = never

    # Player flags
    queued: bool = False
    stop_after: bool = False

    @property
    def artist_hash(self) -> int:
        """Artist identity, preferring the album artist over the track artist."""
        value = artist_hash(self.album_artist)
        if value == 0:
            value = artist_hash(self.artist)
        return value

    @property
    def is_available(self) -> bool:
        return self.status == TrackStatus.AVAILABLE

    @property
    def display_name(self) -> str:
        """Name for log messages; never empty."""
        if self.title:
            return f"{self.artist} - {self.title}" if self.artist else self.title
        return self.path or self.track_id
