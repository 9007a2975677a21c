# backend/agenda/services/availability/scanner.py
"""
Day scanner: next days with at least one available slot.

iter_day_results() is a lazy, finite generator over consecutive days,
bounded by the 90-day hard cap. Days may be computed on a small thread pool;
results are still yielded in date order, so the output is identical to a
sequential scan.

Cancellation: once cancel_event is set no further day is submitted and
ScanCancelled is raised; partial results are discarded. Closing the
generator (limit reached, error, cancellation) cancels queued days and waits
for in-flight fetches before returning.
"""

import logging
import threading
from collections import deque
from collections.abc import Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import date, datetime, timedelta, timezone

from .calculator import calculate_day_slots, resolve_booking_context
from .config import SCAN_HARD_CAP_DAYS, get_engine_config
from .errors import ScanCancelled, ValidationError
from .repository import AvailabilityRepository
from .timezone import TimezoneOffsetResolver, as_utc, parse_date
from .types import BookingContext, DayResult

logger = logging.getLogger(__name__)

DEFAULT_DAYS_LIMIT = 30


def compute_available_days(
    repo: AvailabilityRepository,
    workspace_id: str,
    service_id: str,
    from_date: str | date,
    limit: int = DEFAULT_DAYS_LIMIT,
    now: datetime | None = None,
    offset_resolver: TimezoneOffsetResolver | None = None,
    cancel_event: threading.Event | None = None,
    max_workers: int | None = None,
    max_days: int | None = None,
) -> list[str]:
    """
    Find up to `limit` days with at least one available slot.

    Scans consecutive days from `from_date`, never more than 90.

    Returns:
        Ordered "YYYY-MM-DD" strings, fewer than `limit` if the cap is hit.

    Raises:
        ValidationError: bad date or limit
        NotFoundError: unknown workspace or inactive service
        DataSourceError: any day failed to load (the whole scan fails)
        ScanCancelled: cancel_event was set during the scan
    """
    start = parse_date(from_date)
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValidationError(f"limit must be a positive integer, got {limit!r}")

    engine_config = get_engine_config()
    context = resolve_booking_context(repo, workspace_id, service_id)

    results = iter_day_results(
        repo,
        context,
        start,
        now=as_utc(now or datetime.now(timezone.utc)),
        offset_resolver=offset_resolver,
        cancel_event=cancel_event,
        max_workers=max_workers or engine_config.scan_workers,
        max_days=max_days or engine_config.scan_max_days,
    )

    open_days: list[str] = []
    scanned = 0
    try:
        for result in results:
            scanned += 1
            if result.is_open:
                open_days.append(result.date.isoformat())
                if len(open_days) >= limit:
                    break
    finally:
        results.close()

    logger.info(
        f"workspace={workspace_id} service={service_id} from={start}: "
        f"{len(open_days)}/{limit} open days in {scanned} scanned"
    )
    return open_days


def iter_day_results(
    repo: AvailabilityRepository,
    context: BookingContext,
    from_date: date,
    now: datetime,
    offset_resolver: TimezoneOffsetResolver | None = None,
    cancel_event: threading.Event | None = None,
    max_workers: int = 1,
    max_days: int = SCAN_HARD_CAP_DAYS,
) -> Iterator[DayResult]:
    """
    Yield DayResult for consecutive days starting at from_date.

    At most min(max_days, 90) days are produced. With max_workers > 1 up to
    max_workers days are fetched ahead of the consumer.
    """
    days = [from_date + timedelta(days=i) for i in range(min(max_days, SCAN_HARD_CAP_DAYS))]

    def compute(day: date) -> DayResult:
        return DayResult(date=day, slots=calculate_day_slots(repo, context, day, now, offset_resolver))

    if max_workers <= 1:
        for day in days:
            _raise_if_cancelled(cancel_event)
            yield compute(day)
        return

    executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="day-scan")
    pending: deque[Future] = deque()
    next_index = 0
    try:
        while pending or next_index < len(days):
            while next_index < len(days) and len(pending) < max_workers:
                _raise_if_cancelled(cancel_event)
                pending.append(executor.submit(compute, days[next_index]))
                next_index += 1

            result = pending.popleft().result()
            _raise_if_cancelled(cancel_event)
            yield result
    finally:
        for future in pending:
            future.cancel()
        executor.shutdown(wait=True, cancel_futures=True)


def _raise_if_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ScanCancelled()
