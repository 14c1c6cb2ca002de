"""Candidate filter configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..filtering import FilterConfig


class FilterSettings(BaseSettings):
    """Which tracks qualify for the next draw.

    Environment variables:
        PLAYNEXT_FILTER_RECENT_ARTISTS: Recent artists to exclude
        PLAYNEXT_FILTER_REMOVE_RECENTS_AMOUNT: Fixed number of recent tracks to exclude
        PLAYNEXT_FILTER_REMOVE_RECENTS_PERCENTAGE: Share of candidates to exclude as recent
        PLAYNEXT_FILTER_USE_RATING, PLAYNEXT_FILTER_RATING_MIN, ...: Statistic filters
    """

    model_config = SettingsConfigDict(
        env_prefix="PLAYNEXT_FILTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    recent_artists: int = Field(default=0, ge=0, le=25, description="Remove songs by this many recent artists")
    remove_recents_amount: int = Field(default=0, ge=0, le=100, description="Recent songs to remove")
    remove_recents_percentage: float = Field(
        default=50.0,
        ge=0.0,
        le=100.0,
        description="Recent songs to remove, as a percentage of the qualified songs"
    )

    use_rating: bool = Field(default=True)
    use_score: bool = Field(default=True)
    use_play_count: bool = Field(default=False)
    use_skip_count: bool = Field(default=False)
    use_last_played: bool = Field(default=False)

    rating_include_zero: bool = Field(default=True, description="Keep songs without a rating")
    play_count_invert: bool = Field(default=False)
    skip_count_invert: bool = Field(default=False)
    last_played_invert: bool = Field(default=False)

    rating_min: int = Field(default=50, ge=0, le=100)
    rating_max: int = Field(default=100, ge=0, le=100)
    score_min: float = Field(default=25.0, ge=0.0, le=100.0)
    score_max: float = Field(default=100.0, ge=0.0, le=100.0)
    play_count_threshold: int = Field(default=0, ge=0)
    skip_count_threshold: int = Field(default=0, ge=0)
    last_played_threshold: int = Field(default=0, ge=0, description="Seconds since last played")

    def to_filter_config(self) -> FilterConfig:
        return FilterConfig(**self.model_dump())
