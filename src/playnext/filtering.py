"""
Candidate filtering for next-track selection.

Narrows the library down to the tracks that qualify for the weighted draw.
The stages run in a fixed order and the order matters: the percentage of
recent tracks to remove is taken from what is left after the earlier stages.
With 10 tracks, 1 removed by a statistic filter and 50% recency removal,
4 tracks are removed (50% of 9), not 5.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .statistics import (
    current_timestamp,
    last_played_is_valid,
    play_count_is_valid,
    rating_is_valid,
    score_is_valid,
    skip_count_is_valid,
)
from .track import Track

logger = logging.getLogger(__name__)


@dataclass
class FilterConfig:
    """Parameters that decide which tracks qualify for selection.

    Statistic filters only apply when enabled and their bounds are valid;
    an enabled filter with unusable bounds is skipped, never treated as
    "exclude everything".
    """

    # Diversity and recency
    recent_artists: int = 0  # How many recent artists to exclude
    remove_recents_amount: int = 0
    remove_recents_percentage: float = 0.0  # Of the tracks left after the earlier stages

    # Statistic filters
    use_rating: bool = False
    use_score: bool = False
    use_play_count: bool = False
    use_skip_count: bool = False
    use_last_played: bool = False

    rating_include_zero: bool = True  # Keep unrated tracks
    play_count_invert: bool = False
    skip_count_invert: bool = False
    last_played_invert: bool = False

    rating_min: int = 0
    rating_max: int = 100
    score_min: float = 0.0
    score_max: float = 100.0
    play_count_threshold: int = 0
    skip_count_threshold: int = 0
    last_played_threshold: int = 0  # Seconds since last played

    @property
    def rating_active(self) -> bool:
        if not self.use_rating:
            return False
        if (self.rating_min <= 0 or self.rating_max <= 0
                or not rating_is_valid(self.rating_min) or not rating_is_valid(self.rating_max)
                or self.rating_min > self.rating_max):
            logger.warning(f"Rating filter bounds [{self.rating_min}, {self.rating_max}] are unusable; filter skipped")
            return False
        return True

    @property
    def score_active(self) -> bool:
        if not self.use_score:
            return False
        if (self.score_min <= 0.0 or self.score_max <= 0.0
                or not score_is_valid(self.score_min) or not score_is_valid(self.score_max)
                or self.score_min > self.score_max):
            logger.warning(f"Score filter bounds [{self.score_min}, {self.score_max}] are unusable; filter skipped")
            return False
        return True

    @property
    def play_count_active(self) -> bool:
        if not self.use_play_count:
            return False
        if self.play_count_threshold <= 0 or not play_count_is_valid(self.play_count_threshold):
            logger.warning(f"Play count threshold {self.play_count_threshold} is unusable; filter skipped")
            return False
        return True

    @property
    def skip_count_active(self) -> bool:
        if not self.use_skip_count:
            return False
        if self.skip_count_threshold <= 0 or not skip_count_is_valid(self.skip_count_threshold):
            logger.warning(f"Skip count threshold {self.skip_count_threshold} is unusable; filter skipped")
            return False
        return True

    @property
    def last_played_active(self) -> bool:
        if not self.use_last_played:
            return False
        if self.last_played_threshold <= 0 or not last_played_is_valid(self.last_played_threshold):
            logger.warning(f"Last played threshold {self.last_played_threshold} is unusable; filter skipped")
            return False
        return True


def filter_candidates(
    candidates: Sequence[Track],
    previously_played: Sequence[Track],
    upcoming: Sequence[Track],
    recent_artists: Sequence[int],
    config: Optional[FilterConfig],
    now: Optional[int] = None
) -> list[Track]:
    """
    Run the full filter pipeline over a candidate set

    Args:
        candidates: Tracks to filter (left untouched)
        previously_played: Play history, newest first
        upcoming: Tracks already chosen to play next
        recent_artists: Artist hashes, newest first
        config: Filter parameters; None disables filtering
        now: Current Unix time (defaults to the wall clock)

    Returns:
        Tracks that qualify, in library order (empty if none do)
    """
    if not candidates:
        logger.info("No songs to filter (empty list)")
        return []

    if config is None:
        logger.info("Nothing to filter (no filter configuration)")
        return list(candidates)

    if now is None:
        now = current_timestamp()

    filtered = remove_unavailable(candidates)
    filtered = remove_recent_artists(filtered, recent_artists, config.recent_artists)
    filtered = filter_by_statistics(filtered, config, now)

    # Recency budget is computed from what the earlier stages left over
    amount = percentage_of(len(filtered), config.remove_recents_percentage)
    amount += config.remove_recents_amount
    filtered = remove_recents(filtered, previously_played, upcoming, amount)

    if not filtered:
        logger.info("All songs are filtered out; no qualified songs")
        return []

    logger.info(f"{len(filtered)} of {len(candidates)} songs qualify")
    return filtered


def remove_unavailable(tracks: Iterable[Track]) -> list[Track]:
    """Drop every track that cannot be played right now."""
    kept = []
    for track in tracks:
        if track.is_available:
            kept.append(track)
        else:
            logger.debug(f"Filtered out {track.display_name} because it is not available ({track.status.value})")
    return kept


def remove_recent_artists(tracks: list[Track], recent_artists: Sequence[int], amount: int) -> list[Track]:
    """Drop tracks by any of the `amount` most recent artists."""
    if not tracks or not recent_artists or amount <= 0:
        logger.info("No songs to remove that match any recent artist")
        return tracks

    excluded = {value for value in recent_artists[:amount] if value != 0}

    kept = []
    for track in tracks:
        artist = track.artist_hash
        if artist != 0 and artist in excluded:
            logger.debug(f"Filtered out {track.display_name} by artist {track.album_artist or track.artist}")
        else:
            kept.append(track)
    return kept


def filter_by_statistics(tracks: list[Track], config: FilterConfig, now: int) -> list[Track]:
    """Apply the enabled statistic filters; the first failing one removes a track."""
    rating_on = config.rating_active
    score_on = config.score_active
    play_count_on = config.play_count_active
    skip_count_on = config.skip_count_active
    last_played_on = config.last_played_active

    if not any((rating_on, score_on, play_count_on, skip_count_on, last_played_on)):
        return tracks

    kept = []
    for track in tracks:
        name = track.display_name

        if rating_on:
            rating = track.rating
            keep_unrated = config.rating_include_zero and rating == 0
            if not rating_is_valid(rating) or (
                not keep_unrated and not config.rating_min <= rating <= config.rating_max
            ):
                logger.debug(f"Song {name} filtered out by rating {rating}")
                continue

        if score_on:
            score = track.score
            if not score_is_valid(score) or not config.score_min <= score <= config.score_max:
                logger.debug(f"Song {name} filtered out by score {score:.2f}")
                continue

        if play_count_on:
            play_count = track.play_count
            if not play_count_is_valid(play_count) or _outside_threshold(
                play_count, config.play_count_threshold, config.play_count_invert
            ):
                logger.debug(f"Song {name} filtered out by play count {play_count}")
                continue

        if skip_count_on:
            skip_count = track.skip_count
            if not skip_count_is_valid(skip_count) or _outside_threshold(
                skip_count, config.skip_count_threshold, config.skip_count_invert
            ):
                logger.debug(f"Song {name} filtered out by skip count {skip_count}")
                continue

        if last_played_on:
            last_played = track.last_played
            if not last_played_is_valid(last_played) or _outside_threshold(
                abs(now - last_played), config.last_played_threshold, config.last_played_invert
            ):
                logger.debug(f"Song {name} filtered out by last played {last_played}")
                continue

        kept.append(track)

    return kept


def _outside_threshold(value: int, threshold: int, invert: bool) -> bool:
    # Normal: keep values at or above the threshold; inverted: at or below
    if invert:
        return value > threshold
    return value < threshold


def remove_recents(
    tracks: list[Track],
    previously_played: Sequence[Track],
    upcoming: Sequence[Track],
    amount: int
) -> list[Track]:
    """
    Remove up to `amount` recently played or already scheduled tracks

    Upcoming tracks go first, then the play history (newest first), then the
    most recently played of the remaining candidates. Upcoming and history
    entries count toward `amount` even when the track is no longer a
    candidate: the budget is how many recent plays to suppress, including
    ones an earlier stage already removed.

    Args:
        tracks: Candidates left by the earlier stages
        previously_played: Play history, newest first
        upcoming: Tracks already chosen to play next
        amount: Maximum number of removals

    Returns:
        Remaining candidates, in their original order
    """
    if not tracks or amount <= 0:
        logger.info("No recent items to remove")
        return tracks

    logger.info(f"Removing {amount} recently played songs")

    removed: set[Track] = set()
    count = 0

    for track in upcoming:
        if count >= amount:
            break
        if track is None:
            continue
        logger.debug(f"Filtered out previously selected {track.display_name}")
        removed.add(track)
        count += 1

    for track in previously_played:
        if count >= amount:
            break
        if track is None:
            continue
        logger.debug(f"Filtered out recently played {track.display_name}")
        removed.add(track)
        count += 1

    if count < amount:
        remaining = [track for track in tracks if track not in removed]
        remaining.sort(key=lambda track: track.last_played, reverse=True)

        for track in remaining:
            if count >= amount:
                break
            # Never played tracks are not recent; sorted last, so stop here
            if track.last_played <= 0:
                break
            logger.debug(f"Filtered out {track.display_name} by last played {track.last_played}")
            removed.add(track)
            count += 1

    if count == 0:
        logger.info("Did not remove any recently played songs")
    elif count < amount:
        logger.info(f"Only removed {count} of the recently played songs")

    return [track for track in tracks if track not in removed]


def percentage_of(total: int, percentage: float) -> int:
    """Whole number of items making up `percentage` percent of `total`, rounded down."""
    if total <= 0 or percentage <= 0.0:
        return 0
    if percentage >= 100.0:
        return total
    return int(total * percentage / 100.0)
