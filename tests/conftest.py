import threading
from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import sessionmaker

from agenda.database import build_engine
from agenda.models.generated import Base
from agenda.services.availability.types import (
    Appointment,
    AppointmentStatus,
    ScheduleRule,
    ServiceInfo,
    TimeOff,
    WorkspaceConfig,
)

UTC = timezone.utc

WORKSPACE_ID = "ws-1"
SERVICE_ID = "svc-1"

# Friday; 2030-03-04 is the following Monday
NOW = datetime(2030, 3, 1, 12, 0, tzinfo=UTC)
MONDAY = date(2030, 3, 4)


def time_str_to_minutes(value: str) -> int:
    hour, minute = value.split(":")
    return int(hour) * 60 + int(minute)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=UTC)


def sao_paulo(day: date, hhmm: str) -> datetime:
    """Sao Paulo wall clock (UTC-03:00, no DST) as an aware UTC instant."""
    return datetime.combine(day, datetime.min.time(), tzinfo=UTC) + timedelta(
        minutes=time_str_to_minutes(hhmm) + 180
    )


def rule(day_of_week: int, start: str, end: str, is_active: bool = True) -> ScheduleRule:
    return ScheduleRule(
        day_of_week=day_of_week,
        start_time_minutes=time_str_to_minutes(start),
        end_time_minutes=time_str_to_minutes(end),
        is_active=is_active,
    )


class FakeRepository:
    """In-memory repository; stores everything per workspace and counts calls."""

    def __init__(self):
        self.configs: dict[str, WorkspaceConfig] = {}
        self.services: dict[tuple[str, str], ServiceInfo] = {}
        self.rules: dict[str, list[ScheduleRule]] = {}
        self.time_off: dict[str, list[TimeOff]] = {}
        self.appointments: dict[str, list[Appointment]] = {}
        self.calls: dict[str, int] = {}
        self.fail_on_day: date | None = None
        self.on_rules_fetch = None
        self._lock = threading.Lock()

    def _count(self, name: str) -> None:
        with self._lock:
            self.calls[name] = self.calls.get(name, 0) + 1

    # ── setup ────────────────────────────────────────────────────────────

    def add_workspace(self, workspace_id: str = WORKSPACE_ID, **overrides) -> WorkspaceConfig:
        values = dict(
            min_lead_time_minutes=0,
            buffer_minutes=0,
            max_booking_days_ahead=60,
            slot_interval_minutes=30,
            timezone="America/Sao_Paulo",
        )
        values.update(overrides)
        self.configs[workspace_id] = WorkspaceConfig(**values)
        return self.configs[workspace_id]

    def add_service(self, workspace_id=WORKSPACE_ID, service_id=SERVICE_ID, duration=30, is_active=True):
        self.services[(workspace_id, service_id)] = ServiceInfo(
            id=service_id, workspace_id=workspace_id, duration_minutes=duration, is_active=is_active
        )

    def add_rule(self, r: ScheduleRule, workspace_id: str = WORKSPACE_ID):
        self.rules.setdefault(workspace_id, []).append(r)

    def add_time_off(self, start: datetime, end: datetime, workspace_id: str = WORKSPACE_ID):
        self.time_off.setdefault(workspace_id, []).append(TimeOff(start_at=start, end_at=end))

    def add_appointment(self, start, end, status=AppointmentStatus.CONFIRMED, workspace_id=WORKSPACE_ID):
        self.appointments.setdefault(workspace_id, []).append(
            Appointment(start_at=start, end_at=end, status=status)
        )

    # ── AvailabilityRepository ───────────────────────────────────────────

    def get_workspace_config(self, workspace_id):
        self._count("get_workspace_config")
        return self.configs.get(workspace_id)

    def get_service(self, workspace_id, service_id):
        self._count("get_service")
        return self.services.get((workspace_id, service_id))

    def get_schedule_rules(self, workspace_id, day_of_week):
        self._count("get_schedule_rules")
        if self.on_rules_fetch is not None:
            self.on_rules_fetch(self.calls["get_schedule_rules"])
        return [r for r in self.rules.get(workspace_id, []) if r.day_of_week == day_of_week]

    def get_time_off(self, workspace_id, day_range):
        self._count("get_time_off")
        if self.fail_on_day is not None and day_range.start.date() >= self.fail_on_day:
            from agenda.services.availability.errors import DataSourceError
            raise DataSourceError("time off store unavailable")
        return [
            off for off in self.time_off.get(workspace_id, [])
            if off.start_at < day_range.end and off.end_at > day_range.start
        ]

    def get_appointments(self, workspace_id, day_range, statuses):
        self._count("get_appointments")
        statuses = set(statuses)
        return sorted(
            (
                appt for appt in self.appointments.get(workspace_id, [])
                if appt.status in statuses and day_range.start <= appt.start_at < day_range.end
            ),
            key=lambda appt: appt.start_at,
        )


@pytest.fixture
def repo() -> FakeRepository:
    """Scenario A workspace: Sao Paulo, Monday 09:00-12:00, 30 min grid and service."""
    fake = FakeRepository()
    fake.add_workspace()
    fake.add_service()
    fake.add_rule(rule(1, "09:00", "12:00"))
    return fake


@pytest.fixture
def session_factory(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'agenda.db'}")
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()
