# backend/agenda/services/availability/calculator.py
"""
Slot generation for one service on one calendar day.

Produces TimeSlot(start_at, end_at, available) in UTC.

Contains:
✓ schedule rules of the weekday (split shifts allowed)
✓ min_lead_time_minutes (candidates too close to now are omitted)
✓ time-off (full-day closure short-circuits, partial overlap blocks)
✓ existing PENDING/CONFIRMED appointments + buffer_minutes

Does NOT:
✗ write anything (booking creation is the caller's job)
✗ model a DST transition inside the day (see timezone.py)
"""

import logging
from datetime import date, datetime, timedelta, timezone

from .config import minutes_to_time_str
from .errors import ServiceNotFound, ValidationError, WorkspaceNotFound
from .overlap import ConflictIndex, ExclusionSet
from .repository import AvailabilityRepository
from .timezone import (
    NoonOffsetResolver,
    TimezoneOffsetResolver,
    as_utc,
    day_of_week,
    local_day_bounds,
    local_midnight_utc,
    parse_date,
)
from .types import BLOCKING_STATUSES, BookingContext, TimeSlot

logger = logging.getLogger(__name__)


def resolve_booking_context(
    repo: AvailabilityRepository,
    workspace_id: str,
    service_id: str,
) -> BookingContext:
    """
    Load workspace config and the active service of that workspace.

    Raises:
        ValidationError: missing ids
        WorkspaceNotFound: unknown workspace
        ServiceNotFound: service missing, inactive or owned by another workspace
    """
    if not workspace_id or not str(workspace_id).strip():
        raise ValidationError("workspaceId is required")
    if not service_id or not str(service_id).strip():
        raise ValidationError("serviceId is required")

    config = repo.get_workspace_config(workspace_id)
    if config is None:
        raise WorkspaceNotFound()

    service = repo.get_service(workspace_id, service_id)
    if service is None or not service.is_active:
        raise ServiceNotFound()

    return BookingContext(workspace_id=workspace_id, config=config, service=service)


def compute_day_slots(
    repo: AvailabilityRepository,
    workspace_id: str,
    service_id: str,
    target_date: str | date,
    now: datetime | None = None,
    offset_resolver: TimezoneOffsetResolver | None = None,
) -> list[TimeSlot]:
    """
    Ordered slots for a service on a date ("YYYY-MM-DD", workspace calendar).

    Returns:
        List of TimeSlot. Empty list = no slots (closed, fully off, too far ahead).
    """
    day = parse_date(target_date)
    context = resolve_booking_context(repo, workspace_id, service_id)
    return calculate_day_slots(repo, context, day, now, offset_resolver)


def calculate_day_slots(
    repo: AvailabilityRepository,
    context: BookingContext,
    target_date: date,
    now: datetime | None = None,
    offset_resolver: TimezoneOffsetResolver | None = None,
) -> list[TimeSlot]:
    """Slot generation for an already resolved workspace/service pair."""
    config = context.config
    now = as_utc(now or datetime.now(timezone.utc))
    resolver = offset_resolver or NoonOffsetResolver()
    workspace_id = context.workspace_id

    # Step 1: Resolve the day in UTC
    offset = resolver.offset_minutes(config.timezone, target_date)
    day = local_day_bounds(target_date, offset)

    # Step 2: Booking horizon ("too far ahead" is an empty day, not an error)
    if day.start > now + timedelta(days=config.max_booking_days_ahead):
        logger.debug(f"workspace={workspace_id} date={target_date}: beyond booking horizon")
        return []

    # Step 3: Business hours of the weekday
    rules = sorted(
        (rule for rule in repo.get_schedule_rules(workspace_id, day_of_week(target_date)) if rule.is_active),
        key=lambda rule: rule.start_time_minutes,
    )
    if not rules:
        logger.debug(f"workspace={workspace_id} date={target_date}: no schedule rules")
        return []

    # Step 4: Time-off
    exclusions = ExclusionSet(day, repo.get_time_off(workspace_id, day))
    if exclusions.closes_full_day:
        logger.debug(f"workspace={workspace_id} date={target_date}: full-day time off")
        return []

    # Step 5: Existing bookings
    conflicts = ConflictIndex(
        repo.get_appointments(workspace_id, day, BLOCKING_STATUSES),
        config.buffer_minutes,
    )

    # Step 6: Generate slots
    midnight = local_midnight_utc(target_date)
    min_start = now + timedelta(minutes=config.min_lead_time_minutes)
    duration_min = context.service.duration_minutes
    duration = timedelta(minutes=duration_min)
    step = config.slot_interval_minutes
    slots: list[TimeSlot] = []

    for rule in rules:
        current = rule.start_time_minutes
        while current + duration_min <= rule.end_time_minutes:
            slot_start = midnight + timedelta(minutes=current + offset)
            slot_end = slot_start + duration

            # Lead time: omitted, never emitted as unavailable
            if slot_start < min_start:
                current += step
                continue

            available = not (
                exclusions.blocks(slot_start, slot_end)
                or conflicts.blocks(slot_start, slot_end)
            )
            slots.append(TimeSlot(start_at=slot_start, end_at=slot_end, available=available))
            current += step

    if logger.isEnabledFor(logging.DEBUG):
        shifts = ", ".join(
            f"{minutes_to_time_str(r.start_time_minutes)}-{minutes_to_time_str(r.end_time_minutes)}"
            for r in rules
        )
        open_count = sum(1 for s in slots if s.available)
        logger.debug(
            f"workspace={workspace_id} date={target_date}: "
            f"{len(slots)} slots, {open_count} available (shifts {shifts})"
        )

    return slots
