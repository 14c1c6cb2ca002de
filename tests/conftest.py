"""Shared test fixtures and utilities for all tests."""

import random

import pytest

from playnext.track import Track

NOW = 1_700_000_000
DAY = 24 * 60 * 60


def make_track(track_id="t1", artist=None, **kwargs):
    """Create a test Track with a path and title derived from its id."""
    kwargs.setdefault("path", f"/music/{track_id}.mp3")
    kwargs.setdefault("title", f"Title {track_id}")
    return Track(track_id=track_id, artist=artist, **kwargs)


@pytest.fixture
def clock():
    """Fixed clock returning NOW."""
    return lambda: NOW


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def library():
    """Five available tracks by five different artists."""
    return [make_track(f"t{i}", artist=f"Artist {i}") for i in range(1, 6)]
