# backend/agenda/services/availability/config.py
"""
Engine configuration for availability calculation.
"""

from dataclasses import dataclass
from functools import lru_cache

from ...config import settings


# Hard cap on days visited by one scan, whatever the caller asks for
SCAN_HARD_CAP_DAYS = 90


@dataclass(frozen=True)
class EngineConfig:
    """
    Configuration for the availability engine.

    Attributes:
        scan_max_days: Days visited by a scan before giving up (<= 90)
        scan_workers: Size of the day scanner worker pool (1 = sequential)
        default_timezone: Zone used when a workspace zone is missing or unknown
    """
    scan_max_days: int = SCAN_HARD_CAP_DAYS
    scan_workers: int = 4
    default_timezone: str = settings.default_timezone

    def __post_init__(self):
        """Validate configuration."""
        if not 1 <= self.scan_max_days <= SCAN_HARD_CAP_DAYS:
            raise ValueError(
                f"scan_max_days must be between 1 and {SCAN_HARD_CAP_DAYS}, got {self.scan_max_days}"
            )
        if self.scan_workers < 1:
            raise ValueError(f"scan_workers must be >= 1, got {self.scan_workers}")


@lru_cache
def get_engine_config() -> EngineConfig:
    """Get engine configuration (singleton), read from settings."""
    return EngineConfig(
        scan_max_days=settings.scan_max_days,
        scan_workers=settings.scan_workers,
        default_timezone=settings.default_timezone,
    )


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
