# backend/agenda/routers/availability.py
"""
Availability API endpoints (public, no authentication).

GET /availability/slots - Slots of a service on one day
GET /availability/days  - Next days with at least one available slot
"""

import asyncio
import logging
import threading
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, Request

from ..database import SessionLocal
from ..schemas.availability import ErrorOut, TimeSlotOut
from ..services.availability import (
    AvailabilityRepository,
    SqlAlchemyAvailabilityRepository,
    compute_available_days,
    compute_day_slots,
)
from ..services.availability.config import SCAN_HARD_CAP_DAYS
from ..services.availability.scanner import DEFAULT_DAYS_LIMIT
from ..services.availability.timezone import format_instant

logger = logging.getLogger(__name__)

# How often a running days scan checks whether the client is still there
DISCONNECT_POLL_SECONDS = 0.1

router = APIRouter(
    prefix="/availability",
    tags=["availability"],
    responses={
        400: {"model": ErrorOut},
        404: {"model": ErrorOut},
        503: {"model": ErrorOut},
    },
)


def get_repository() -> AvailabilityRepository:
    return SqlAlchemyAvailabilityRepository(SessionLocal)


def get_now() -> datetime:
    return datetime.now(timezone.utc)


@router.get("/slots", response_model=list[TimeSlotOut])
def get_slots(
    workspace_id: str | None = Query(None, alias="workspaceId"),
    service_id: str | None = Query(None, alias="serviceId"),
    target_date: str | None = Query(None, alias="date"),
    repo: AvailabilityRepository = Depends(get_repository),
    now: datetime = Depends(get_now),
):
    """Get all slots of a service on a date, each marked available or blocked."""
    slots = compute_day_slots(repo, workspace_id, service_id, target_date, now=now)
    return [
        TimeSlotOut(
            start_at=format_instant(slot.start_at),
            end_at=format_instant(slot.end_at),
            available=slot.available,
        )
        for slot in slots
    ]


@router.get("/days", response_model=list[str])
async def get_days(
    request: Request,
    workspace_id: str | None = Query(None, alias="workspaceId"),
    service_id: str | None = Query(None, alias="serviceId"),
    from_date: str | None = Query(None, alias="from"),
    limit: int = Query(DEFAULT_DAYS_LIMIT, ge=1, le=SCAN_HARD_CAP_DAYS),
    repo: AvailabilityRepository = Depends(get_repository),
    now: datetime = Depends(get_now),
):
    """Get the next days (YYYY-MM-DD) that have at least one available slot."""
    cancel_event = threading.Event()
    scan = asyncio.ensure_future(
        asyncio.to_thread(
            compute_available_days,
            repo,
            workspace_id,
            service_id,
            from_date,
            limit,
            now=now,
            cancel_event=cancel_event,
        )
    )
    try:
        while True:
            done, _ = await asyncio.wait({scan}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return scan.result()
            if await request.is_disconnected():
                logger.info(f"Client disconnected, cancelling days scan for workspace={workspace_id}")
                cancel_event.set()
                # Raises ScanCancelled once in-flight days are drained
                return await scan
    finally:
        cancel_event.set()
        if not scan.done():
            await asyncio.wait({scan})
