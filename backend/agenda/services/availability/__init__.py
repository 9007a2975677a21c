# backend/agenda/services/availability/__init__.py
"""
Availability engine.

compute_day_slots: slots of one service on one day (available or blocked)
compute_available_days: next days with at least one available slot
"""

from .calculator import calculate_day_slots, compute_day_slots, resolve_booking_context
from .config import EngineConfig, get_engine_config
from .errors import (
    AvailabilityError,
    DataSourceError,
    NotFoundError,
    ScanCancelled,
    ServiceNotFound,
    ValidationError,
    WorkspaceNotFound,
)
from .repository import AvailabilityRepository, SqlAlchemyAvailabilityRepository
from .scanner import compute_available_days, iter_day_results
from .timezone import NoonOffsetResolver, TimezoneOffsetResolver
from .types import TimeSlot, WorkspaceConfig

__all__ = [
    "AvailabilityError",
    "AvailabilityRepository",
    "DataSourceError",
    "EngineConfig",
    "NoonOffsetResolver",
    "NotFoundError",
    "ScanCancelled",
    "ServiceNotFound",
    "SqlAlchemyAvailabilityRepository",
    "TimeSlot",
    "TimezoneOffsetResolver",
    "ValidationError",
    "WorkspaceConfig",
    "WorkspaceNotFound",
    "calculate_day_slots",
    "compute_available_days",
    "compute_day_slots",
    "get_engine_config",
    "iter_day_results",
    "resolve_booking_context",
]
