"""Selection probability configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..selection import ProbabilityConfig


class ProbabilitySettings(BaseSettings):
    """How track statistics weigh into the draw.

    Environment variables:
        PLAYNEXT_PROBABILITY_USE_RATING: Rating modifies probability
        PLAYNEXT_PROBABILITY_INVERT_RATING: Favor low ratings instead
        PLAYNEXT_PROBABILITY_RATING_MULTIPLIER: Weight of the rating (0-10)
        (same pattern for score, play_count, skip_count, last_played)
        PLAYNEXT_PROBABILITY_DEFAULT_RATING: Rating assumed for unrated songs
    """

    model_config = SettingsConfigDict(
        env_prefix="PLAYNEXT_PROBABILITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    use_rating: bool = Field(default=True)
    use_score: bool = Field(default=False)
    use_play_count: bool = Field(default=False)
    use_skip_count: bool = Field(default=False)
    use_last_played: bool = Field(default=True)

    invert_rating: bool = Field(default=False)
    invert_score: bool = Field(default=False)
    invert_play_count: bool = Field(default=False)
    invert_skip_count: bool = Field(default=True, description="Frequently skipped songs get fewer entries")
    invert_last_played: bool = Field(default=False)

    default_rating: int = Field(default=0, ge=0, le=100)

    rating_multiplier: float = Field(default=1.0, ge=0.0, le=10.0)
    score_multiplier: float = Field(default=1.0, ge=0.0, le=10.0)
    play_count_multiplier: float = Field(default=1.0, ge=0.0, le=10.0)
    skip_count_multiplier: float = Field(default=1.0, ge=0.0, le=10.0)
    last_played_multiplier: float = Field(default=1.0, ge=0.0, le=10.0)

    def to_probability_config(self) -> ProbabilityConfig:
        return ProbabilityConfig(**self.model_dump())
