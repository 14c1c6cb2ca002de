"""
Weighted random track selection

Every qualified track gets a number of entries computed from its statistics;
a single draw over all entries picks the winner. Entries are integers: each
multiplier is scaled by ENTRY_SCALE so small contributions survive without
comparing floats against zero.
"""
import logging
import math
import random
from dataclasses import dataclass
from typing import Optional, Sequence

from .filtering import FilterConfig, filter_candidates
from .statistics import (
    current_timestamp,
    invert_rating,
    invert_score,
    last_played_is_valid,
    play_count_is_valid,
    rating_is_valid,
    score_is_valid,
    skip_count_is_valid,
)
from .track import Track

logger = logging.getLogger(__name__)

ENTRY_SCALE = 1000
ENTRY_RANGE = 100  # Ceiling of the curves
COUNT_CURVE_SHAPE = 100  # Count at which the count curve reaches half the range
TIME_CURVE_SHAPE = 5616  # sqrt(one year) ~ 5616, so the time curve peaks at the cap
ONE_YEAR = 365 * 24 * 60 * 60


@dataclass
class ProbabilityConfig:
    """Which statistics shape a track's chance, and how strongly."""

    use_rating: bool = False
    use_score: bool = False
    use_play_count: bool = False
    use_skip_count: bool = False
    use_last_played: bool = False

    invert_rating: bool = False
    invert_score: bool = False
    invert_play_count: bool = False
    invert_skip_count: bool = False
    invert_last_played: bool = False

    default_rating: int = 0  # Used for unrated tracks

    rating_multiplier: float = 1.0
    score_multiplier: float = 1.0
    play_count_multiplier: float = 1.0
    skip_count_multiplier: float = 1.0
    last_played_multiplier: float = 1.0


@dataclass
class EntryModifiers:
    """Integer factors derived from a ProbabilityConfig; 0 disables a modifier."""

    default_rating: int = 0
    rating_factor: int = 0
    invert_rating: bool = False
    score_factor: int = 0
    invert_score: bool = False
    play_count_factor: int = 0
    invert_play_count: bool = False
    skip_count_factor: int = 0
    invert_skip_count: bool = False
    last_played_factor: int = 0
    invert_last_played: bool = False

    @classmethod
    def from_config(cls, config: ProbabilityConfig) -> "EntryModifiers":
        modifiers = cls()

        if config.use_rating and config.rating_multiplier > 0.0:
            modifiers.rating_factor = int(config.rating_multiplier * ENTRY_SCALE)
            modifiers.invert_rating = config.invert_rating
            modifiers.default_rating = config.default_rating
            logger.info(f"Probability: use rating (invert: {config.invert_rating})")

        if config.use_score and config.score_multiplier > 0.0:
            modifiers.score_factor = int(config.score_multiplier * ENTRY_SCALE)
            modifiers.invert_score = config.invert_score
            logger.info(f"Probability: use score (invert: {config.invert_score})")

        if config.use_play_count and config.play_count_multiplier > 0.0:
            modifiers.play_count_factor = int(config.play_count_multiplier * ENTRY_SCALE)
            modifiers.invert_play_count = config.invert_play_count
            logger.info(f"Probability: use play count (invert: {config.invert_play_count})")

        if config.use_skip_count and config.skip_count_multiplier > 0.0:
            modifiers.skip_count_factor = int(config.skip_count_multiplier * ENTRY_SCALE)
            modifiers.invert_skip_count = config.invert_skip_count
            logger.info(f"Probability: use skip count (invert: {config.invert_skip_count})")

        if config.use_last_played and config.last_played_multiplier > 0.0:
            modifiers.last_played_factor = int(config.last_played_multiplier * ENTRY_SCALE)
            modifiers.invert_last_played = config.invert_last_played
            logger.info(f"Probability: use last played (invert: {config.invert_last_played})")

        return modifiers


@dataclass
class WeightedEntry:
    track: Track
    entries: int


# Curves

def rational_curve(x: float, a: float = COUNT_CURVE_SHAPE, r: float = ENTRY_RANGE, invert: bool = False) -> float:
    """
    Saturating curve for counts

    f(x) = r - a*r / (x + a), or a*r / (x + a) inverted. Passes through the
    origin (r when inverted), reaches r/2 at x = a and never exceeds r.
    """
    if a <= 0 or r <= 0 or x < 0:
        logger.warning(f"Invalid curve input (x={x}, a={a}, r={r})")
        return 0.0

    if invert:
        return (a * r) / (x + a)
    return r - (a * r) / (x + a)


def sqrt_curve(x: float, a: float = TIME_CURVE_SHAPE, r: float = ENTRY_RANGE, invert: bool = False) -> float:
    """
    Saturating curve for durations

    f(x) = r*sqrt(x) / a, or r - r*sqrt(x) / a inverted. Reaches r at x = a**2;
    inputs are expected to be capped below that.
    """
    if a <= 0 or r <= 0 or x < 0:
        logger.warning(f"Invalid curve input (x={x}, a={a}, r={r})")
        return 0.0

    value = (r * math.sqrt(x)) / a
    value = min(value, r)
    if invert:
        return r - value
    return value


def count_entries(count: int, invert: bool = False) -> float:
    return rational_curve(count, invert=invert)


def time_since_entries(seconds: int, invert: bool = False) -> float:
    # Anything older than a year has the maximum effect
    return sqrt_curve(min(seconds, ONE_YEAR), invert=invert)


# Entry calculation

def track_entries(track: Track, modifiers: EntryModifiers, now: int) -> float:
    """Sum of all enabled modifier contributions for one track (unrounded)."""
    entries = 0.0

    if modifiers.rating_factor:
        rating = track.rating
        if rating_is_valid(rating):
            if modifiers.invert_rating:
                rating = invert_rating(rating)
            elif rating == 0:
                rating = modifiers.default_rating
            entries += rating * modifiers.rating_factor

    if modifiers.score_factor:
        score = track.score
        if score_is_valid(score):
            if modifiers.invert_score:
                score = invert_score(score)
            entries += score * modifiers.score_factor

    if modifiers.play_count_factor:
        play_count = track.play_count
        if play_count_is_valid(play_count):
            entries += count_entries(play_count, modifiers.invert_play_count) * modifiers.play_count_factor

    if modifiers.skip_count_factor:
        skip_count = track.skip_count
        if skip_count_is_valid(skip_count):
            entries += count_entries(skip_count, modifiers.invert_skip_count) * modifiers.skip_count_factor

    if modifiers.last_played_factor:
        last_played = track.last_played
        if last_played_is_valid(last_played):
            since = abs(now - last_played)
            entries += time_since_entries(since, modifiers.invert_last_played) * modifiers.last_played_factor

    return entries


def calculate_entries(
    tracks: Sequence[Track],
    modifiers: EntryModifiers,
    now: Optional[int] = None
) -> list[WeightedEntry]:
    """
    Build the weighted entry list for one draw

    Args:
        tracks: Filtered candidates
        modifiers: Integer factors for each statistic
        now: Current Unix time (defaults to the wall clock)

    Returns:
        One entry per qualified track; negative totals are disqualified and
        a zero total still gets a single entry
    """
    if now is None:
        now = current_timestamp()

    weighted = []
    for track in tracks:
        if not track.is_available:
            logger.debug(f"{track.display_name} is not available; not scored")
            continue

        total = track_entries(track, modifiers, now)
        if total < 0:
            logger.debug(f"{track.display_name} disqualified ({total:.0f} entries)")
            continue

        entries = int(total)
        if entries == 0:
            entries = 1

        logger.debug(f"Song <{track.display_name}> has {entries} {'entry' if entries == 1 else 'entries'}")
        weighted.append(WeightedEntry(track, entries))

    return weighted


# Draw

def draw_winner(weighted: Sequence[WeightedEntry], value: int) -> Optional[Track]:
    """Track whose cumulative entry range contains `value` (1-based)."""
    cumulative = 0
    for item in weighted:
        if item.entries <= 0:
            logger.debug(f"Invalid entry count {item.entries}")
            continue
        cumulative += item.entries
        if cumulative >= value:
            return item.track
    return None


def pick_winner(weighted: Sequence[WeightedEntry], rng: Optional[random.Random] = None) -> Optional[Track]:
    total = sum(item.entries for item in weighted if item.entries > 0)
    if total <= 0:
        logger.info("No qualified songs")
        return None

    value = (rng or random).randint(1, total)
    winner = draw_winner(weighted, value)

    if winner is None:
        logger.warning(f"Failed to draw a winner (entry {value}/{total})")
        return None

    logger.info(f"Winner (entry {value}/{total}): {winner.display_name}")
    return winner


def select_track(
    filtered: Sequence[Track],
    config: Optional[ProbabilityConfig],
    rng: Optional[random.Random] = None,
    now: Optional[int] = None
) -> Optional[Track]:
    """
    Draw one track from already filtered candidates

    Args:
        filtered: Candidates left by the filter pipeline
        config: Probability modifiers; None means nothing can be chosen
        rng: Random source (module-level random if omitted)
        now: Current Unix time (defaults to the wall clock)

    Returns:
        The winning track, or None if there is nothing to choose from
    """
    if not filtered:
        logger.info("No songs to choose from")
        return None

    if config is None:
        logger.info("No probability configuration; not choosing a song")
        return None

    modifiers = EntryModifiers.from_config(config)
    weighted = calculate_entries(filtered, modifiers, now)
    return pick_winner(weighted, rng)


def choose_new_song(
    candidates: Sequence[Track],
    previously_played: Sequence[Track],
    upcoming: Sequence[Track],
    recent_artists: Sequence[int],
    filter_config: Optional[FilterConfig],
    probability_config: Optional[ProbabilityConfig],
    rng: Optional[random.Random] = None,
    now: Optional[int] = None
) -> Optional[Track]:
    """Filter the candidates, then draw a winner from what qualifies."""
    if not candidates:
        return None

    if now is None:
        now = current_timestamp()

    filtered = list(candidates)
    if filter_config is not None:
        filtered = filter_candidates(filtered, previously_played, upcoming, recent_artists, filter_config, now)

    if probability_config is None:
        return None

    return select_track(filtered, probability_config, rng, now)
