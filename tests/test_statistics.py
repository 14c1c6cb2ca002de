"""Tests for statistics validation and update rules."""

import pytest

from conftest import NOW, make_track
from playnext.statistics import (
    PlaybackPolicy,
    invert_rating,
    invert_score,
    last_played_is_valid,
    modify_and_update_last_played,
    modify_and_update_play_count,
    modify_and_update_score,
    modify_and_update_skip_count,
    play_count_is_valid,
    rating_is_valid,
    score_is_valid,
    update_after_playback,
    update_last_played,
    update_play_count,
    update_rating,
    update_score,
    update_skip_count,
)


@pytest.fixture
def policy():
    return PlaybackPolicy(min_played_fraction=0.2, full_played_fraction=0.8)


class TestValidators:
    """Range checks for every statistic."""

    def test_rating_range(self):
        assert rating_is_valid(0)
        assert rating_is_valid(100)
        assert not rating_is_valid(-1)
        assert not rating_is_valid(101)

    def test_score_range(self):
        assert score_is_valid(0.0)
        assert score_is_valid(100.0)
        assert not score_is_valid(-0.1)
        assert not score_is_valid(100.1)

    def test_counts_non_negative(self):
        assert play_count_is_valid(0)
        assert not play_count_is_valid(-1)

    def test_last_played_non_negative(self):
        assert last_played_is_valid(0)
        assert last_played_is_valid(NOW)
        assert not last_played_is_valid(-5)

    def test_invert_rating(self):
        assert invert_rating(80) == 20
        assert invert_rating(100) == 0
        assert invert_rating(0) == 0  # Unrated stays unrated

    def test_invert_score(self):
        assert invert_score(25.0) == 75.0
        assert invert_score(0.0) == 100.0


class TestUpdateRating:
    """Setting, shifting and resetting ratings."""

    def test_set_rating(self):
        track = make_track()
        assert update_rating(track, rating=70)
        assert track.rating == 70

    def test_set_zero_rating_refused(self):
        """0 means unrated and can only be reached by reset."""
        track = make_track(rating=40)
        assert not update_rating(track, rating=0)
        assert track.rating == 40

    def test_set_out_of_range_refused(self):
        track = make_track(rating=40)
        assert not update_rating(track, rating=101)
        assert track.rating == 40

    def test_increase(self):
        track = make_track(rating=40)
        assert update_rating(track, increase=15)
        assert track.rating == 55

    def test_increase_past_max_refused(self):
        track = make_track(rating=95)
        assert not update_rating(track, increase=10)
        assert track.rating == 95

    def test_decrease_to_zero_refused(self):
        track = make_track(rating=10)
        assert not update_rating(track, increase=-10)
        assert track.rating == 10

    def test_reset(self):
        track = make_track(rating=90)
        assert update_rating(track, reset=True)
        assert track.rating == 0


class TestUpdateScore:
    """Setting, shifting and resetting scores."""

    def test_set_score(self):
        track = make_track()
        assert update_score(track, score=33.5)
        assert track.score == 33.5

    def test_set_zero_score(self):
        track = make_track(score=60.0)
        assert update_score(track, score=0.0)
        assert track.score == 0.0

    def test_set_out_of_range_refused(self):
        track = make_track(score=60.0)
        assert not update_score(track, score=150.0)
        assert track.score == 60.0

    def test_increase_out_of_range_refused(self):
        track = make_track(score=50.0)
        assert not update_score(track, increase=60.0)
        assert track.score == 50.0

    def test_increase(self):
        track = make_track(score=50.0)
        assert update_score(track, increase=-20.0)
        assert track.score == 30.0

    def test_reset(self):
        track = make_track(score=80.0)
        assert update_score(track, reset=True)
        assert track.score == 0.0


class TestUpdateCounts:
    """Play and skip counts never go negative."""

    def test_play_count_increase(self):
        track = make_track(play_count=3)
        assert update_play_count(track, increase=1)
        assert track.play_count == 4

    def test_play_count_below_zero_refused(self):
        track = make_track(play_count=0)
        assert not update_play_count(track, increase=-1)
        assert track.play_count == 0

    def test_play_count_set_and_reset(self):
        track = make_track(play_count=3)
        assert update_play_count(track, play_count=10)
        assert track.play_count == 10
        assert update_play_count(track, reset=True)
        assert track.play_count == 0

    def test_skip_count_set_negative_refused(self):
        track = make_track(skip_count=2)
        assert not update_skip_count(track, skip_count=-1)
        assert track.skip_count == 2

    def test_skip_count_decrease(self):
        track = make_track(skip_count=2)
        assert update_skip_count(track, increase=-1)
        assert track.skip_count == 1


class TestUpdateLastPlayed:
    """Last played timestamps."""

    def test_set(self):
        track = make_track()
        assert update_last_played(track, last_played=NOW)
        assert track.last_played == NOW

    def test_shift_to_epoch_refused(self):
        track = make_track(last_played=100)
        assert not update_last_played(track, increase=-100)
        assert track.last_played == 100

    def test_shift(self):
        track = make_track(last_played=NOW)
        assert update_last_played(track, increase=-3600)
        assert track.last_played == NOW - 3600

    def test_reset(self):
        track = make_track(last_played=NOW)
        assert update_last_played(track, reset=True)
        assert track.last_played == 0


class TestModifyAndUpdateScore:
    """Score as a play-count weighted average of played fractions."""

    def test_first_play_averages_with_old_score(self, policy):
        track = make_track(score=50.0, play_count=0)
        assert modify_and_update_score(track, 1.0, policy)
        assert track.score == 75.0

    def test_over_full_fraction_counts_as_complete(self, policy):
        track = make_track(score=50.0, play_count=0)
        modify_and_update_score(track, 0.9, policy)
        assert track.score == 75.0

    def test_partial_play(self, policy):
        track = make_track(score=50.0, play_count=0)
        modify_and_update_score(track, 0.5, policy)
        assert track.score == 50.0

    def test_weighted_by_play_count(self, policy):
        track = make_track(score=40.0, play_count=3)
        modify_and_update_score(track, 0.0, policy)
        assert track.score == pytest.approx(30.0)

    def test_invalid_fraction_refused(self, policy):
        track = make_track(score=50.0)
        assert not modify_and_update_score(track, 1.5, policy)
        assert track.score == 50.0

    def test_invalid_stored_score_refused(self, policy):
        track = make_track(score=120.0)
        assert not modify_and_update_score(track, 1.0, policy)
        assert track.score == 120.0

    def test_score_before_play_count(self, policy):
        """The pre-increment play count weighs the old score."""
        track = make_track(score=50.0, play_count=0)
        modify_and_update_score(track, 1.0, policy)
        modify_and_update_play_count(track, 1.0, policy)
        assert track.score == 75.0
        assert track.play_count == 1

    def test_update_order_changes_result(self, policy):
        """Incrementing the play count first gives the old score more weight."""
        score_first = make_track(score=50.0, play_count=1)
        modify_and_update_score(score_first, 1.0, policy)
        modify_and_update_play_count(score_first, 1.0, policy)

        count_first = make_track(score=50.0, play_count=1)
        modify_and_update_play_count(count_first, 1.0, policy)
        modify_and_update_score(count_first, 1.0, policy)

        assert score_first.score == 75.0
        assert count_first.score == pytest.approx(200.0 / 3.0)


class TestModifyAndUpdateCounts:
    """Gating by the minimum and full played fractions."""

    def test_play_count_below_minimum(self, policy):
        track = make_track()
        assert not modify_and_update_play_count(track, 0.1, policy)
        assert track.play_count == 0

    def test_play_count_counted(self, policy):
        track = make_track()
        assert modify_and_update_play_count(track, 0.2, policy)
        assert track.play_count == 1

    def test_play_count_decrease(self, policy):
        track = make_track(play_count=2)
        assert modify_and_update_play_count(track, 1.0, policy, decrease=True)
        assert track.play_count == 1

    def test_skip_between_fractions(self, policy):
        track = make_track()
        assert modify_and_update_skip_count(track, 0.5, policy)
        assert track.skip_count == 1

    def test_skip_at_full_fraction_still_counts(self, policy):
        track = make_track()
        assert modify_and_update_skip_count(track, 0.8, policy)
        assert track.skip_count == 1

    def test_nearly_complete_play_is_not_a_skip(self, policy):
        track = make_track()
        assert not modify_and_update_skip_count(track, 0.95, policy)
        assert track.skip_count == 0

    def test_short_play_is_not_a_skip(self, policy):
        track = make_track()
        assert not modify_and_update_skip_count(track, 0.1, policy)
        assert track.skip_count == 0

    def test_last_played_uses_timestamp(self, policy):
        track = make_track()
        assert modify_and_update_last_played(track, 0.5, policy, timestamp=NOW)
        assert track.last_played == NOW

    def test_last_played_falls_back_to_clock(self, policy):
        track = make_track()
        assert modify_and_update_last_played(track, 0.5, policy, clock=lambda: NOW + 5)
        assert track.last_played == NOW + 5

    def test_last_played_below_minimum(self, policy):
        track = make_track()
        assert not modify_and_update_last_played(track, 0.1, policy, timestamp=NOW)
        assert track.last_played == 0


class TestIncognito:
    """Incognito mode leaves every statistic alone."""

    def test_no_statistic_changes(self):
        policy = PlaybackPolicy(incognito=True)
        track = make_track(score=50.0, play_count=2, skip_count=1, last_played=NOW - 10)

        update_after_playback(track, 0.5, policy, NOW)

        assert track.score == 50.0
        assert track.play_count == 2
        assert track.skip_count == 1
        assert track.last_played == NOW - 10

    def test_individual_updates_refused(self):
        policy = PlaybackPolicy(incognito=True)
        track = make_track()
        assert not modify_and_update_score(track, 1.0, policy)
        assert not modify_and_update_play_count(track, 1.0, policy)
        assert not modify_and_update_skip_count(track, 0.5, policy)
        assert not modify_and_update_last_played(track, 1.0, policy, timestamp=NOW)


class TestUpdateAfterPlayback:
    """All statistics applied for one event."""

    def test_complete_play(self, policy):
        track = make_track(score=50.0)
        update_after_playback(track, 1.0, policy, NOW)
        assert track.score == 75.0
        assert track.play_count == 1
        assert track.skip_count == 0
        assert track.last_played == NOW

    def test_skip(self, policy):
        track = make_track(score=50.0)
        update_after_playback(track, 0.5, policy, NOW)
        assert track.score == 50.0
        assert track.play_count == 1
        assert track.skip_count == 1
        assert track.last_played == NOW

    def test_skip_score_update(self, policy):
        track = make_track(score=50.0)
        update_after_playback(track, 1.0, policy, NOW, skip_score_update=True)
        assert track.score == 50.0
        assert track.play_count == 1

    def test_too_short_only_moves_score(self, policy):
        track = make_track(score=50.0)
        update_after_playback(track, 0.1, policy, NOW)
        assert track.score == pytest.approx(30.0)
        assert track.play_count == 0
        assert track.skip_count == 0
        assert track.last_played == 0
