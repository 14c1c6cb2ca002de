"""Configuration composition root."""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .filter import FilterSettings
from .paths import PathsConfig
from .playback import PlaybackSettings
from .probability import ProbabilitySettings


class PlaynextConfig(BaseSettings):
    """Root configuration composing the domain configs.

    Nested values can also be set through the root, e.g.
    PLAYNEXT_FILTER__RECENT_ARTISTS=3.
    """

    model_config = SettingsConfigDict(
        env_prefix="PLAYNEXT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    paths: PathsConfig = Field(default_factory=PathsConfig)
    filter: FilterSettings = Field(default_factory=FilterSettings)
    probability: ProbabilitySettings = Field(default_factory=ProbabilitySettings)
    playback: PlaybackSettings = Field(default_factory=PlaybackSettings)
