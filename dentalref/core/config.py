"""
DentalRef - Configuration
=========================

Two layers:

- ``EngineConfig``: tunable constants of the scoring engine (top-N sizes,
  comparison bounds, category score cap). Plain dataclass, passed
  explicitly to the functions that need it.
- ``Settings``: process settings read from the environment (data
  directory, cache TTL and capacity, logging). A ``.env`` file is loaded
  once on first access.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from dentalref.shared.exceptions import ConfigurationError

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


# =============================================================================
# ENGINE
# =============================================================================

@dataclass(frozen=True)
class EngineConfig:
    """Scoring engine constants."""

    # Ranking
    default_top_n: int = 6
    best_recommendation_size: int = 3
    category_score_cap: int = 5

    # Relevance linking
    related_limit: int = 5
    preventive_limit: int = 3

    # Comparison bounds
    min_comparison: int = 2
    max_comparison: int = 4

    def __post_init__(self):
        if self.min_comparison < 1 or self.max_comparison < self.min_comparison:
            raise ConfigurationError(
                f"Invalid comparison bounds: {self.min_comparison}..{self.max_comparison}"
            )
        if self.default_top_n < 1 or self.best_recommendation_size < 1:
            raise ConfigurationError("Top-N sizes must be positive")


DEFAULT_ENGINE_CONFIG = EngineConfig()


# =============================================================================
# SETTINGS
# =============================================================================

def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'") from e
    if value < minimum:
        raise ConfigurationError(f"{name} must be at least {minimum}, got {value}")
    return value


@dataclass
class Settings:
    """Application settings from environment."""

    # Data
    data_dir: Path = field(
        default_factory=lambda: Path(os.getenv("DENTALREF_DATA_DIR") or DEFAULT_DATA_DIR)
    )

    # Cache
    cache_ttl_seconds: int = field(
        default_factory=lambda: _env_int("DENTALREF_CACHE_TTL_SECONDS", 3600)
    )
    cache_capacity: int = field(
        default_factory=lambda: _env_int("DENTALREF_CACHE_CAPACITY", 16, minimum=1)
    )

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    log_format: str = field(default_factory=lambda: os.getenv("LOG_FORMAT", "").lower())
    environment: str = field(
        default_factory=lambda: os.getenv("ENVIRONMENT", "development").lower()
    )

    @property
    def json_logs(self) -> Optional[bool]:
        """True/False when LOG_FORMAT forces a renderer, None to follow ENVIRONMENT."""
        if self.log_format == "json":
            return True
        if self.log_format in ("console", "text"):
            return False
        return None


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings."""
    load_dotenv()
    return Settings()
