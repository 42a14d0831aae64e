"""
Configuration management for the well-being correlation pipeline.

Loads environment variables and provides configuration settings.
"""

import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class Config:
    """Configuration settings for the join-filter-correlate pipeline."""

    # Key normalization
    year_min: int = 2011
    year_max: int = 2021

    # Join
    require_unique_keys: bool = True

    # Analysis configuration
    min_observations: int = 3
    min_pairs: int = 3
    round_digits: int = 3
    round_before_compare: bool = False

    # Logging
    log_level: str = "INFO"
    verbose: bool = True

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create a Config instance from environment variables.

        Optional environment variables:
        - WELLBEING_YEAR_MIN / WELLBEING_YEAR_MAX: inclusive year range
        - WELLBEING_MIN_OBSERVATIONS: valid Cantril rows needed per entity
        - WELLBEING_MIN_PAIRS: valid pairs needed per entity and predictor
        - WELLBEING_ROUND_DIGITS: decimals used when reporting
        - WELLBEING_REQUIRE_UNIQUE_KEYS: reject duplicate (code, year) keys
        - WELLBEING_ROUND_BEFORE_COMPARE: rank on rounded means (legacy)

        Returns:
            Config: Configuration instance
        """
        year_min = int(os.getenv("WELLBEING_YEAR_MIN", "2011"))
        year_max = int(os.getenv("WELLBEING_YEAR_MAX", "2021"))
        if year_min > year_max:
            raise ValueError(
                f"WELLBEING_YEAR_MIN ({year_min}) must not exceed "
                f"WELLBEING_YEAR_MAX ({year_max})."
            )

        return cls(
            year_min=year_min,
            year_max=year_max,
            require_unique_keys=_env_flag("WELLBEING_REQUIRE_UNIQUE_KEYS", "true"),
            min_observations=int(os.getenv("WELLBEING_MIN_OBSERVATIONS", "3")),
            min_pairs=int(os.getenv("WELLBEING_MIN_PAIRS", "3")),
            round_digits=int(os.getenv("WELLBEING_ROUND_DIGITS", "3")),
            round_before_compare=_env_flag("WELLBEING_ROUND_BEFORE_COMPARE", "false"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            verbose=_env_flag("VERBOSE", "true"),
        )


# Global config instance (lazy loaded)
_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Config: Global configuration object
    """
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() re-reads the environment."""
    global _config
    _config = None
