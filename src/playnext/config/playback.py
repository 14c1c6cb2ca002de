"""Playback statistics configuration."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..statistics import PlaybackPolicy


class PlaybackSettings(BaseSettings):
    """When a play counts toward a track's statistics.

    Environment variables:
        PLAYNEXT_MIN_PLAYED_FRACTION: Shorter plays do not count
        PLAYNEXT_FULL_PLAYED_FRACTION: Longer plays count as complete
        PLAYNEXT_INCOGNITO: Leave all statistics untouched
        PLAYNEXT_RNG_SEED: Fixed seed for reproducible draws
    """

    model_config = SettingsConfigDict(
        env_prefix="PLAYNEXT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    min_played_fraction: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Only update play count and last played if played more than this fraction"
    )
    full_played_fraction: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="A song counts as fully played beyond this fraction"
    )
    incognito: bool = Field(default=False)
    rng_seed: Optional[int] = Field(default=None)

    def to_policy(self) -> PlaybackPolicy:
        return PlaybackPolicy(
            min_played_fraction=self.min_played_fraction,
            full_played_fraction=self.full_played_fraction,
            incognito=self.incognito,
        )
