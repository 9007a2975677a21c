# backend/agenda/services/availability/overlap.py
"""
Overlap detection against time-off and existing appointments.

All intervals are half-open: [a, b) and [c, d) overlap iff a < d and b > c.
Touching intervals (b == c) do not overlap.
"""

from datetime import datetime, timedelta

from .types import Appointment, DayRange, TimeOff


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open interval overlap test."""
    return a_start < b_end and a_end > b_start


class ExclusionSet:
    """Time-off intervals touching one local day."""

    def __init__(self, day: DayRange, time_off: list[TimeOff]):
        self.day = day
        self.intervals = [
            (off.start_at, off.end_at)
            for off in time_off
            if overlaps(off.start_at, off.end_at, day.start, day.end)
        ]

    @property
    def closes_full_day(self) -> bool:
        """True when a single interval covers the whole day."""
        return any(self.day.contained_by(start, end) for start, end in self.intervals)

    def blocks(self, slot_start: datetime, slot_end: datetime) -> bool:
        return any(overlaps(slot_start, slot_end, start, end) for start, end in self.intervals)


class ConflictIndex:
    """
    Blocking intervals of existing appointments.

    Each appointment blocks [start_at, end_at + buffer); the buffer is only
    appended after the end, never before the start.
    """

    def __init__(self, appointments: list[Appointment], buffer_minutes: int = 0):
        buffer = timedelta(minutes=buffer_minutes)
        self.intervals = sorted(
            (appt.start_at, appt.end_at + buffer) for appt in appointments
        )

    def blocks(self, slot_start: datetime, slot_end: datetime) -> bool:
        for start, end in self.intervals:
            if start >= slot_end:
                # sorted by start: nothing later can overlap
                return False
            if end > slot_start:
                return True
        return False
