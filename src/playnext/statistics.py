"""Track statistics: validators and bounded update rules.

Every update validates the resulting value before touching the track. An
out-of-range result is logged and the value left as it was; nothing is
silently clamped except the averaged score, which is bounded by construction.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .track import Track

logger = logging.getLogger(__name__)

RATING_MIN = 0
RATING_MAX = 100
SCORE_MIN = 0.0
SCORE_MAX = 100.0
COUNT_MIN = 0
LAST_PLAYED_MIN = 0


def current_timestamp() -> int:
    """Wall-clock time in whole Unix seconds."""
    return int(time.time())


@dataclass
class PlaybackPolicy:
    """Settings that gate statistics updates after a play or skip."""

    min_played_fraction: float = 0.2  # Below this, a play is too short to count
    full_played_fraction: float = 0.8  # At or above this, a play counts as complete
    incognito: bool = False


# Validators

def rating_is_valid(rating: int) -> bool:
    if RATING_MIN <= rating <= RATING_MAX:
        return True
    logger.debug(f"Rating {rating} is invalid")
    return False


def score_is_valid(score: float) -> bool:
    if SCORE_MIN <= score <= SCORE_MAX:
        return True
    logger.debug(f"Score {score} is invalid")
    return False


def play_count_is_valid(play_count: int) -> bool:
    if play_count >= COUNT_MIN:
        return True
    logger.debug(f"Play count {play_count} is invalid")
    return False


def skip_count_is_valid(skip_count: int) -> bool:
    if skip_count >= COUNT_MIN:
        return True
    logger.debug(f"Skip count {skip_count} is invalid")
    return False


def last_played_is_valid(last_played: int) -> bool:
    if last_played >= LAST_PLAYED_MIN:
        return True
    logger.debug(f"Last played {last_played} is invalid")
    return False


def invert_rating(rating: int) -> int:
    """Mirror a rating within its range; unrated (0) stays unrated."""
    if not rating_is_valid(rating) or rating == 0:
        return 0
    return (RATING_MAX - rating) + RATING_MIN


def invert_score(score: float) -> float:
    """Mirror a score within its range."""
    if not score_is_valid(score):
        return 0.0
    return (SCORE_MAX - score) + SCORE_MIN


# Direct updates

def update_rating(
    track: Track,
    rating: Optional[int] = None,
    increase: int = 0,
    reset: bool = False
) -> bool:
    """Set, shift or reset a track's rating.

    Args:
        track: Track to alter
        rating: New rating (1-100); takes precedence over increase
        increase: Amount to add (negative to decrease) when no rating is given
        reset: Reset the rating to 0 (unrated)

    Returns:
        True if the rating was stored
    """
    name = track.display_name

    if reset:
        value = 0
        logger.debug(f"Rating of {name} has been reset to {value}")
    elif rating is not None:
        if rating == 0 or not rating_is_valid(rating):
            logger.warning(f"Invalid rating {rating} for {name}; rating is (still) {track.rating}")
            return False
        value = rating
        logger.debug(f"Rating of {name} is now set to {value}")
    elif -RATING_MAX <= increase <= RATING_MAX:
        value = track.rating + increase
        if value <= RATING_MIN or value > RATING_MAX:
            logger.warning(f"Increasing rating of {name} resulted in an invalid value {value}; value is unchanged")
            return False
        logger.debug(f"Rating of {name} is increased by {increase} to {value}")
    else:
        logger.warning(f"No valid parameters in attempt to update rating of {name}; rating is (still) {track.rating}")
        return False

    track.rating = value
    return True


def update_score(
    track: Track,
    score: Optional[float] = None,
    increase: float = 0.0,
    reset: bool = False
) -> bool:
    """Set, shift or reset a track's score.

    Args:
        track: Track to alter
        score: New score (0.0-100.0); takes precedence over increase
        increase: Amount to add (negative to decrease) when no score is given
        reset: Reset the score to 0.0

    Returns:
        True if the score was stored
    """
    name = track.display_name

    if reset:
        value = 0.0
        logger.debug(f"Score of {name} has been reset to {value}")
    elif score is not None:
        if not score_is_valid(score):
            logger.warning(f"Invalid score {score} for {name}; score is (still) {track.score}")
            return False
        value = float(score)
        logger.debug(f"Score of {name} is now set to {value:.2f}")
    elif -SCORE_MAX <= increase <= SCORE_MAX:
        value = track.score + increase
        if not SCORE_MIN <= value <= SCORE_MAX:
            logger.warning(f"Increasing score of {name} resulted in an invalid value {value:.2f}; value is unchanged")
            return False
        logger.debug(f"Score of {name} is increased by {increase:.2f} to {value:.2f}")
    else:
        logger.warning(f"No valid parameters in attempt to update score of {name}; score is (still) {track.score}")
        return False

    track.score = value
    return True


def update_play_count(
    track: Track,
    play_count: Optional[int] = None,
    increase: int = 0,
    reset: bool = False
) -> bool:
    """Set, shift or reset a track's play count. Returns True if stored."""
    name = track.display_name

    if reset:
        value = 0
        logger.debug(f"Play count of {name} has been reset to {value}")
    elif play_count is not None:
        if not play_count_is_valid(play_count):
            logger.warning(f"Invalid play count {play_count} for {name}; value is unchanged")
            return False
        value = play_count
        logger.debug(f"Play count of {name} is now set to {value}")
    else:
        value = track.play_count + increase
        if value < COUNT_MIN:
            logger.warning(f"Increasing play count of {name} resulted in an invalid value {value}; value is unchanged")
            return False
        logger.debug(f"Play count of {name} is increased by {increase} to {value}")

    track.play_count = value
    return True


def update_skip_count(
    track: Track,
    skip_count: Optional[int] = None,
    increase: int = 0,
    reset: bool = False
) -> bool:
    """Set, shift or reset a track's skip count. Returns True if stored."""
    name = track.display_name

    if reset:
        value = 0
        logger.debug(f"Skip count of {name} has been reset to {value}")
    elif skip_count is not None:
        if not skip_count_is_valid(skip_count):
            logger.warning(f"Invalid skip count {skip_count} for {name}; value is unchanged")
            return False
        value = skip_count
        logger.debug(f"Skip count of {name} is now set to {value}")
    else:
        value = track.skip_count + increase
        if value < COUNT_MIN:
            logger.warning(f"Increasing skip count of {name} resulted in an invalid value {value}; value is unchanged")
            return False
        logger.debug(f"Skip count of {name} is increased by {increase} to {value}")

    track.skip_count = value
    return True


def update_last_played(
    track: Track,
    last_played: Optional[int] = None,
    increase: int = 0,
    reset: bool = False
) -> bool:
    """Set, shift or reset a track's last played timestamp.

    A shifted timestamp must stay after the epoch; shifting to exactly 0
    would read as "never played" and is refused.
    """
    name = track.display_name

    if reset:
        value = 0
        logger.debug(f"Last played of {name} has been reset to {value}")
    elif last_played is not None:
        if not last_played_is_valid(last_played):
            logger.warning(f"Invalid last played {last_played} for {name}; value is unchanged")
            return False
        value = last_played
        logger.debug(f"Last played of {name} is now set to {value}")
    else:
        value = track.last_played + increase
        if value <= LAST_PLAYED_MIN:
            logger.warning(f"Increasing last played of {name} resulted in an invalid value {value}; value is unchanged")
            return False
        logger.debug(f"Last played of {name} is increased by {increase} to {value}")

    track.last_played = value
    return True


# Playback-driven updates

def modify_and_update_score(track: Track, played_fraction: float, policy: PlaybackPolicy) -> bool:
    """Fold a play into the track's score as a play-count weighted average.

    Must run before the play count is incremented: the pre-increment count
    is the weight of the old score.
    """
    if policy.incognito:
        logger.info("Incognito mode active; not updating score")
        return False

    if not 0.0 <= played_fraction <= 1.0:
        logger.info(f"Invalid played fraction {played_fraction}; not updating score")
        return False

    if played_fraction >= policy.full_played_fraction:
        logger.debug(f"Over full played fraction setting; using a fraction of 1.0 instead of {played_fraction:.2f}")
        played_fraction = 1.0

    old_score = track.score
    if not score_is_valid(old_score):
        logger.warning(f"Invalid score {old_score} of {track.display_name}; not updating score")
        return False

    play_count = track.play_count
    if play_count <= COUNT_MIN:
        new_score = (old_score + played_fraction * 100.0) / 2.0
    else:
        new_score = (old_score * play_count + played_fraction * 100.0) / (play_count + 1)

    return update_score(track, score=min(max(new_score, SCORE_MIN), SCORE_MAX))


def modify_and_update_play_count(
    track: Track,
    played_fraction: float,
    policy: PlaybackPolicy,
    decrease: bool = False
) -> bool:
    if policy.incognito:
        logger.info("Incognito mode active; not updating play count")
        return False

    if played_fraction < policy.min_played_fraction:
        logger.info("Below minimum played fraction; not updating play count")
        return False

    return update_play_count(track, increase=-1 if decrease else 1)


def modify_and_update_skip_count(
    track: Track,
    played_fraction: float,
    policy: PlaybackPolicy,
    decrease: bool = False
) -> bool:
    if policy.incognito:
        logger.info("Incognito mode active; not updating skip count")
        return False

    if played_fraction < policy.min_played_fraction:
        logger.info("Below minimum played fraction; not updating skip count")
        return False

    # Nearly complete plays are not skips; the listener may just be
    # skipping the silence at the end
    if played_fraction > policy.full_played_fraction:
        logger.info("Above full played fraction; not updating skip count")
        return False

    return update_skip_count(track, increase=-1 if decrease else 1)


def modify_and_update_last_played(
    track: Track,
    played_fraction: float,
    policy: PlaybackPolicy,
    timestamp: Optional[int] = None,
    clock: Callable[[], int] = current_timestamp
) -> bool:
    if policy.incognito:
        logger.info("Incognito mode active; not updating last played")
        return False

    if played_fraction < policy.min_played_fraction:
        logger.info("Below minimum played fraction; not updating last played")
        return False

    if not timestamp:
        timestamp = clock()

    return update_last_played(track, last_played=timestamp)


def update_after_playback(
    track: Track,
    played_fraction: float,
    policy: PlaybackPolicy,
    timestamp: int,
    skip_score_update: bool = False
) -> None:
    """Apply a finished or skipped play to all statistics of a track.

    Args:
        track: Track that was played
        played_fraction: Portion of the track that was played (0.0-1.0)
        policy: Gating settings
        timestamp: "Now", captured once by the caller for the whole event
        skip_score_update: Leave the score untouched (e.g. playback error)
    """
    if policy.incognito:
        logger.info(f"Incognito mode active; statistics of {track.display_name} are unchanged")
        return

    if not skip_score_update:
        modify_and_update_score(track, played_fraction, policy)
    modify_and_update_play_count(track, played_fraction, policy)
    modify_and_update_skip_count(track, played_fraction, policy)
    modify_and_update_last_played(track, played_fraction, policy, timestamp=timestamp)
