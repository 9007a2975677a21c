# backend/agenda/services/availability/types.py
"""
Read-only snapshots the engine computes over.

All instants are timezone-aware UTC datetimes.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


DEFAULT_SLOT_INTERVAL_MINUTES = 15


class AppointmentStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"
    PENDING_PAYMENT = "PENDING_PAYMENT"


# Only these statuses occupy the calendar
BLOCKING_STATUSES: tuple[AppointmentStatus, ...] = (
    AppointmentStatus.PENDING,
    AppointmentStatus.CONFIRMED,
)


@dataclass(frozen=True)
class WorkspaceConfig:
    """
    Workspace-level scheduling parameters.

    Attributes:
        min_lead_time_minutes: Minimum notice before a slot can start
        buffer_minutes: Gap required after every appointment
        max_booking_days_ahead: Booking horizon in days
        slot_interval_minutes: Step between candidate slot starts
        timezone: IANA zone name of the workspace calendar
    """
    min_lead_time_minutes: int
    max_booking_days_ahead: int
    timezone: str
    buffer_minutes: int = 0
    slot_interval_minutes: int = DEFAULT_SLOT_INTERVAL_MINUTES

    def __post_init__(self):
        if self.min_lead_time_minutes < 0:
            raise ValueError(f"min_lead_time_minutes must be >= 0, got {self.min_lead_time_minutes}")
        if self.buffer_minutes < 0:
            raise ValueError(f"buffer_minutes must be >= 0, got {self.buffer_minutes}")
        if self.max_booking_days_ahead <= 0:
            raise ValueError(f"max_booking_days_ahead must be > 0, got {self.max_booking_days_ahead}")
        if self.slot_interval_minutes <= 0:
            raise ValueError(f"slot_interval_minutes must be > 0, got {self.slot_interval_minutes}")


@dataclass(frozen=True)
class ServiceInfo:
    id: str
    workspace_id: str
    duration_minutes: int
    is_active: bool = True


@dataclass(frozen=True)
class ScheduleRule:
    """Recurring weekly business window, in minutes since local midnight."""
    day_of_week: int  # 0 = Sunday, 6 = Saturday
    start_time_minutes: int
    end_time_minutes: int
    is_active: bool = True


@dataclass(frozen=True)
class TimeOff:
    start_at: datetime
    end_at: datetime


@dataclass(frozen=True)
class Appointment:
    start_at: datetime
    end_at: datetime
    status: AppointmentStatus = AppointmentStatus.CONFIRMED


@dataclass(frozen=True)
class DayRange:
    """Half-open [start, end) UTC range of one local calendar day."""
    start: datetime
    end: datetime

    def contained_by(self, start: datetime, end: datetime) -> bool:
        return start <= self.start and end >= self.end


@dataclass(frozen=True)
class TimeSlot:
    start_at: datetime
    end_at: datetime
    available: bool


@dataclass(frozen=True)
class DayResult:
    """Slots computed for one scanned day."""
    date: date
    slots: list[TimeSlot]

    @property
    def is_open(self) -> bool:
        return any(slot.available for slot in self.slots)


@dataclass(frozen=True)
class BookingContext:
    """Workspace config and service, resolved once per request."""
    workspace_id: str
    config: WorkspaceConfig
    service: ServiceInfo
