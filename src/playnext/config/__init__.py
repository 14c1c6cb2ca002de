"""Configuration package for playnext.

Usage:
    from playnext.config import config

    config.filter.to_filter_config()
    config.probability.to_probability_config()
    config.playback.to_policy()
    config.paths.db_path
"""

from .base import PlaynextConfig
from .filter import FilterSettings
from .paths import PathsConfig
from .playback import PlaybackSettings
from .probability import ProbabilitySettings

# Global singleton
config = PlaynextConfig()

__all__ = [
    "config",
    "PlaynextConfig",
    "FilterSettings",
    "PathsConfig",
    "PlaybackSettings",
    "ProbabilitySettings",
]
