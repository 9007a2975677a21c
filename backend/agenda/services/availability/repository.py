# backend/agenda/services/availability/repository.py
"""
Tenant-scoped read access for the availability engine.

Every method takes the workspace id as a mandatory argument and puts it in
the query predicate. There is no lookup by entity id alone.
"""

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .config import get_engine_config
from .errors import DataSourceError
from .types import (
    DEFAULT_SLOT_INTERVAL_MINUTES,
    Appointment,
    AppointmentStatus,
    DayRange,
    ScheduleRule,
    ServiceInfo,
    TimeOff,
    WorkspaceConfig,
)


class AvailabilityRepository(Protocol):
    def get_workspace_config(self, workspace_id: str) -> WorkspaceConfig | None: ...

    def get_service(self, workspace_id: str, service_id: str) -> ServiceInfo | None: ...

    def get_schedule_rules(self, workspace_id: str, day_of_week: int) -> list[ScheduleRule]: ...

    def get_time_off(self, workspace_id: str, day_range: DayRange) -> list[TimeOff]: ...

    def get_appointments(
        self,
        workspace_id: str,
        day_range: DayRange,
        statuses: Iterable[AppointmentStatus],
    ) -> list[Appointment]: ...


class SqlAlchemyAvailabilityRepository:
    """
    Repository over the SQLAlchemy models.

    Opens one short-lived session per call, so a single instance can be
    shared by the day scanner worker threads.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _read(self, what: str, query):
        db: Session = self.session_factory()
        try:
            return query(db)
        except SQLAlchemyError as exc:
            raise DataSourceError(f"Failed to load {what}") from exc
        except ValueError as exc:
            # row violates a domain invariant (e.g. max_booking_days_ahead = 0)
            raise DataSourceError(f"Invalid {what} data") from exc
        finally:
            db.close()

    def get_workspace_config(self, workspace_id: str) -> WorkspaceConfig | None:
        from ...models.generated import Workspaces

        def query(db: Session):
            row = db.query(Workspaces).filter(Workspaces.id == workspace_id).first()
            if row is None:
                return None
            return WorkspaceConfig(
                min_lead_time_minutes=row.min_lead_time_minutes or 0,
                buffer_minutes=row.buffer_minutes or 0,
                max_booking_days_ahead=row.max_booking_days_ahead,
                slot_interval_minutes=row.slot_interval_minutes or DEFAULT_SLOT_INTERVAL_MINUTES,
                timezone=row.timezone or get_engine_config().default_timezone,
            )

        return self._read("workspace", query)

    def get_service(self, workspace_id: str, service_id: str) -> ServiceInfo | None:
        """Active service by id, within the workspace, in one query."""
        from ...models.generated import Services

        def query(db: Session):
            row = db.query(Services).filter(
                Services.id == service_id,
                Services.workspace_id == workspace_id,
                Services.is_active.is_(True),
            ).first()
            if row is None:
                return None
            return ServiceInfo(
                id=row.id,
                workspace_id=row.workspace_id,
                duration_minutes=row.duration_minutes,
                is_active=bool(row.is_active),
            )

        return self._read("service", query)

    def get_schedule_rules(self, workspace_id: str, day_of_week: int) -> list[ScheduleRule]:
        """Active rules for the weekday, ordered by start time."""
        from ...models.generated import ScheduleRules

        def query(db: Session):
            rows = (
                db.query(ScheduleRules)
                .filter(
                    ScheduleRules.workspace_id == workspace_id,
                    ScheduleRules.day_of_week == day_of_week,
                    ScheduleRules.is_active.is_(True),
                )
                .order_by(ScheduleRules.start_time_minutes.asc())
                .all()
            )
            return [
                ScheduleRule(
                    day_of_week=row.day_of_week,
                    start_time_minutes=row.start_time_minutes,
                    end_time_minutes=row.end_time_minutes,
                    is_active=bool(row.is_active),
                )
                for row in rows
            ]

        return self._read("schedule rules", query)

    def get_time_off(self, workspace_id: str, day_range: DayRange) -> list[TimeOff]:
        """Time-off overlapping [day_range.start, day_range.end)."""
        from ...models.generated import TimeOff as TimeOffRow

        start, end = _to_db(day_range.start), _to_db(day_range.end)

        def query(db: Session):
            rows = (
                db.query(TimeOffRow)
                .filter(
                    TimeOffRow.workspace_id == workspace_id,
                    TimeOffRow.start_at < end,
                    TimeOffRow.end_at > start,
                )
                .order_by(TimeOffRow.start_at.asc())
                .all()
            )
            return [TimeOff(start_at=_from_db(row.start_at), end_at=_from_db(row.end_at)) for row in rows]

        return self._read("time off", query)

    def get_appointments(
        self,
        workspace_id: str,
        day_range: DayRange,
        statuses: Iterable[AppointmentStatus],
    ) -> list[Appointment]:
        """Appointments starting inside the day, ordered by start."""
        from ...models.generated import Appointments

        start, end = _to_db(day_range.start), _to_db(day_range.end)
        status_values = [AppointmentStatus(s).value for s in statuses]

        def query(db: Session):
            rows = (
                db.query(Appointments)
                .filter(
                    Appointments.workspace_id == workspace_id,
                    Appointments.status.in_(status_values),
                    Appointments.start_at >= start,
                    Appointments.start_at < end,
                )
                .order_by(Appointments.start_at.asc())
                .all()
            )
            return [
                Appointment(
                    start_at=_from_db(row.start_at),
                    end_at=_from_db(row.end_at),
                    status=AppointmentStatus(row.status),
                )
                for row in rows
            ]

        return self._read("appointments", query)


# ── Helpers ──────────────────────────────────────────────────────────────


def _to_db(value: datetime) -> datetime:
    """Aware instant -> naive UTC, the storage convention."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _from_db(value: datetime) -> datetime:
    """Stored instant -> aware UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
