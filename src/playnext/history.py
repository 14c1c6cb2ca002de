"""Play history tracking.

Keeps the bounded lists the selection depends on: tracks played before
(newest first), recent artists (newest first), tracks chosen to play next and
the tracks queued by the listener. Only this module mutates them; the filter
and selection code receive them read-only.
"""

import logging
from typing import Iterable, Optional

from .track import Track

logger = logging.getLogger(__name__)

# Maximum amount of items to keep (0 means no limit)
PLAYED_ITEMS_LIMIT = 100
PLAYED_ARTISTS_LIMIT = 50


def trim_to(items: list, limit: int) -> list:
    """Keep the first `limit` items of a list in place.

    Args:
        items: List to trim (newest first)
        limit: Number of items to keep; 0 means no limit

    Returns:
        The dropped tail (oldest items), empty if nothing was trimmed
    """
    if limit <= 0 or len(items) <= limit:
        return []

    dropped = items[limit:]
    del items[limit:]
    return dropped


class PlayHistory:
    """History lists and the currently playing slot for one player."""

    def __init__(
        self,
        played_limit: int = PLAYED_ITEMS_LIMIT,
        artists_limit: int = PLAYED_ARTISTS_LIMIT
    ):
        self.played_limit = played_limit
        self.artists_limit = artists_limit

        self.previously_played: list[Track] = []
        self.recent_artists: list[int] = []
        self.upcoming: list[Track] = []
        self.queue: list[Track] = []
        self.current: Optional[Track] = None

    @property
    def previous(self) -> Optional[Track]:
        """Most recently played track."""
        return self.previously_played[0] if self.previously_played else None

    # Queue

    def add_to_queue(self, track: Track) -> None:
        """Append a track to the listener's queue.

        The same track may be queued more than once; each request plays.
        """
        self.queue.append(track)
        track.queued = True
        logger.debug(f"Queued {track.display_name} ({len(self.queue)} in queue)")

    def remove_from_queue(self, track: Optional[Track]) -> bool:
        """Remove the first queued occurrence of a track.

        The queued flag is only cleared once no occurrence is left.

        Returns:
            True if the track was in the queue
        """
        if track is None:
            return False

        if track not in self.queue:
            return False

        self.queue.remove(track)
        if track not in self.queue:
            track.queued = False

        return True

    def peek_queue(self) -> Optional[Track]:
        return self.queue[0] if self.queue else None

    def pop_queue(self) -> Optional[Track]:
        """Take the first track off the queue."""
        track = self.peek_queue()
        self.remove_from_queue(track)
        return track

    # Upcoming

    def add_upcoming(self, track: Optional[Track], front: bool = False) -> bool:
        if track is None or track in self.upcoming:
            return False

        if front:
            self.upcoming.insert(0, track)
        else:
            self.upcoming.append(track)
        return True

    def remove_upcoming(self, track: Track) -> bool:
        if track not in self.upcoming:
            return False
        self.upcoming.remove(track)
        return True

    def peek_upcoming(self) -> Optional[Track]:
        return self.upcoming[0] if self.upcoming else None

    def clear_upcoming(self) -> None:
        self.upcoming.clear()

    # Playback

    def mark_playing(self, track: Track) -> None:
        self.current = track
        logger.debug(f"Now playing {track.display_name}")

    def record_played(self, track: Track) -> None:
        """Move a played track to the front of the play history.

        Also folds its artist into the recent artists and clears the current
        slot. Both lists are trimmed to their limits.
        """
        self._push_previous(track)

        artist = track.artist_hash
        if artist != 0:
            self.recent_artists.insert(0, artist)

        if self.current is track:
            self.current = None

        self.trim()

    def revert_to_previous(self) -> Optional[Track]:
        """Step back to the last played track.

        The currently playing track (if any) becomes the next one to play.

        Returns:
            The track to play now, or None if there is no history
        """
        if not self.previously_played:
            logger.info("No previous songs to play")
            return None

        track = self.previously_played.pop(0)

        if self.current is not None:
            self.remove_upcoming(self.current)
            self.add_upcoming(self.current, front=True)
            self.current = None

        logger.debug(f"Reverted to {track.display_name}")
        return track

    # Maintenance

    def trim(self) -> None:
        dropped = trim_to(self.previously_played, self.played_limit)
        if dropped:
            logger.debug(f"Dropped {len(dropped)} tracks from the play history")
        trim_to(self.recent_artists, self.artists_limit)

    def restore(self, previously_played: Iterable[Track]) -> None:
        """Seed the play history from persisted state (newest first)."""
        self.previously_played.clear()
        self.recent_artists.clear()

        for track in previously_played:
            if track in self.previously_played:
                continue
            self.previously_played.append(track)
            if track.artist_hash != 0:
                self.recent_artists.append(track.artist_hash)

        self.trim()
        logger.info(f"Restored {len(self.previously_played)} tracks of play history")

    def reset(self) -> None:
        for track in self.queue:
            track.queued = False

        self.previously_played.clear()
        self.recent_artists.clear()
        self.upcoming.clear()
        self.queue.clear()
        self.current = None

    def _push_previous(self, track: Track) -> None:
        # A replayed track moves to the front instead of appearing twice
        if track in self.previously_played:
            self.previously_played.remove(track)
        self.previously_played.insert(0, track)
