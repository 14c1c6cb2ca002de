"""
Next-track engine

Ties the pieces together for one player: keeps the play history, refills
the upcoming slot through the filter and selection code, and applies
statistics updates after every play or skip. The host calls it
synchronously from its event loop and gets plain values back; nothing is
emitted behind its back.
"""
import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from .filtering import FilterConfig
from .history import PlayHistory
from .selection import ProbabilityConfig, choose_new_song
from .statistics import PlaybackPolicy, current_timestamp, update_after_playback
from .track import Track, TrackStatus

if TYPE_CHECKING:
    from .config import PlaynextConfig

logger = logging.getLogger(__name__)


@dataclass
class SongsChanged:
    """Snapshot of the previous, current and next track for the host UI."""

    previous: Optional[Track]
    current: Optional[Track]
    next: Optional[Track]


class Engine:
    """Next-track decision engine for one player."""

    def __init__(
        self,
        library: Iterable[Track] = (),
        filter_config: Optional[FilterConfig] = None,
        probability_config: Optional[ProbabilityConfig] = None,
        policy: Optional[PlaybackPolicy] = None,
        clock: Callable[[], int] = current_timestamp,
        rng: Optional[random.Random] = None,
        history: Optional[PlayHistory] = None
    ):
        """
        Args:
            library: Tracks to choose from (borrowed, not copied per track)
            filter_config: Candidate filter; None keeps every available track
            probability_config: Draw modifiers; defaults to plain uniform draws
            policy: Statistics gating settings
            clock: Source of "now" in Unix seconds
            rng: Random source for draws
            history: Existing history state to continue from
        """
        self.library: list[Track] = list(library)
        self.filter_config = filter_config
        self.probability_config = probability_config if probability_config is not None else ProbabilityConfig()
        self.policy = policy if policy is not None else PlaybackPolicy()
        self.clock = clock
        self.rng = rng if rng is not None else random.Random()
        self.history = history if history is not None else PlayHistory()

        logger.info(f"Engine initialized with {len(self.library)} tracks")

    @classmethod
    def from_config(cls, settings: "PlaynextConfig", library: Iterable[Track] = (), **kwargs) -> "Engine":
        """Build an engine from a PlaynextConfig."""
        seed = settings.playback.rng_seed
        kwargs.setdefault("rng", random.Random(seed) if seed is not None else None)
        return cls(
            library,
            filter_config=settings.filter.to_filter_config(),
            probability_config=settings.probability.to_probability_config(),
            policy=settings.playback.to_policy(),
            **kwargs
        )

    # State

    @property
    def incognito(self) -> bool:
        return self.policy.incognito

    @incognito.setter
    def incognito(self, enable: bool) -> None:
        self.policy.incognito = enable

    @property
    def current(self) -> Optional[Track]:
        return self.history.current

    def set_library(self, tracks: Iterable[Track]) -> None:
        self.library = list(tracks)
        logger.info(f"Library replaced ({len(self.library)} tracks)")

    def settings_updated(
        self,
        filter_config: Optional[FilterConfig] = None,
        probability_config: Optional[ProbabilityConfig] = None
    ) -> SongsChanged:
        """Apply new configuration and recompute the upcoming track."""
        if filter_config is not None:
            self.filter_config = filter_config
        if probability_config is not None:
            self.probability_config = probability_config
        return self.refresh_upcoming()

    def reset(self) -> None:
        self.history.reset()

    # Queue

    def add_to_queue(self, track: Track) -> None:
        self.history.add_to_queue(track)

    def remove_from_queue(self, track: Track) -> bool:
        return self.history.remove_from_queue(track)

    def toggle_queue(self, track: Track) -> bool:
        """Queue a track, or dequeue it if already queued. Returns the new state."""
        if track.queued:
            self.history.remove_from_queue(track)
        else:
            self.history.add_to_queue(track)
        return track.queued

    # Selection

    def choose_new_song(self) -> Optional[Track]:
        """Run the filter and draw for a new track to play next."""
        if not self.library:
            logger.info("Library is empty")
            return None

        current = self.history.current
        candidates = [track for track in self.library if track is not current]
        if not candidates:
            logger.info("Current song is the only song present")
            return None

        # The playing track's artist counts as the most recent one
        recent_artists = list(self.history.recent_artists)
        if current is not None and current.artist_hash != 0:
            recent_artists.insert(0, current.artist_hash)

        return choose_new_song(
            candidates,
            self.history.previously_played,
            self.history.upcoming,
            recent_artists,
            self.filter_config,
            self.probability_config,
            rng=self.rng,
            now=self.clock(),
        )

    def next_song(self) -> Optional[Track]:
        """Track lined up to play next, choosing one if none is."""
        while True:
            track = self.history.peek_upcoming()
            if track is None:
                break
            if track in self.library:
                return track
            # Removed from the library since it was chosen
            logger.debug(f"{track.display_name} left the library; choosing again")
            self.history.remove_upcoming(track)

        track = self.choose_new_song()
        self.history.add_upcoming(track)
        return track

    def advance(self) -> Optional[Track]:
        """Take the track to play now: the queue first, then the upcoming track."""
        track = self.history.pop_queue()
        if track is not None:
            return track

        track = self.next_song()
        if track is not None:
            self.history.remove_upcoming(track)
        else:
            logger.info("No qualified songs to play")
        return track

    def sync(self) -> None:
        """Do the deferred work: refill the upcoming slot and trim histories."""
        if not self.history.upcoming:
            self.history.add_upcoming(self.choose_new_song())
        self.trim_histories()

    def refresh_upcoming(self) -> SongsChanged:
        """Discard and recompute the upcoming track."""
        self.history.clear_upcoming()
        self.sync()
        return self.songs_updated(playback_active=self.history.current is not None)

    def trim_histories(self) -> None:
        self.history.trim()

    # Playback events

    def mark_playing(self, track: Track) -> None:
        """Make a track the current one; a replaced current track becomes available again."""
        previous = self.history.current
        if previous is not None and previous is not track and previous.status == TrackStatus.PLAYING:
            previous.status = TrackStatus.AVAILABLE

        self.history.mark_playing(track)
        track.status = TrackStatus.PLAYING

    def record_played(self, track: Track, played_fraction: float, skip_score_update: bool = False) -> None:
        """
        Register a finished or skipped play

        The current slot is only cleared when `track` is the current track;
        recording a different track leaves the current one playing.

        Args:
            track: Track that stopped playing
            played_fraction: Portion that was played (0.0-1.0)
            skip_score_update: Leave the score alone (e.g. playback failed)
        """
        if not 0.0 <= played_fraction <= 1.0:
            logger.warning(f"Invalid played fraction {played_fraction} for {track.display_name}; play not recorded")
            return

        current = self.history.current
        if current is not None and current is not track:
            logger.debug(f"Recorded {track.display_name} while {current.display_name} is current")

        self.history.record_played(track)

        if track.status == TrackStatus.PLAYING:
            track.status = TrackStatus.AVAILABLE

        # One timestamp for every statistic touched by this event
        now = self.clock()
        update_after_playback(track, played_fraction, self.policy, now, skip_score_update)

    def revert_to_previous(self) -> Optional[Track]:
        """Go back to the last played track; the current one plays next."""
        current = self.history.current
        track = self.history.revert_to_previous()

        if current is not None and current.status == TrackStatus.PLAYING:
            current.status = TrackStatus.AVAILABLE
        return track

    def songs_updated(self, playback_active: bool) -> SongsChanged:
        """Report the previous, current and next track.

        The queue takes priority over the upcoming track, which is only
        reported while playing. Nothing is next if playback stops after the
        current track.
        """
        current = self.history.current
        next_track = self.next_song() if playback_active else None

        queued = self.history.peek_queue()
        if queued is not None:
            next_track = queued

        if current is not None and current.stop_after:
            next_track = None

        return SongsChanged(previous=self.history.previous, current=current, next=next_track)
