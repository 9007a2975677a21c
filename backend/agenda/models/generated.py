from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Text, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Workspaces(Base):
    __tablename__ = 'workspaces'

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    slug = Column(Text, nullable=False, unique=True)
    timezone = Column(Text, nullable=False, server_default=text("'America/Sao_Paulo'"))
    min_lead_time_minutes = Column(Integer, nullable=False, server_default=text('120'))
    buffer_minutes = Column(Integer, nullable=False, server_default=text('10'))
    max_booking_days_ahead = Column(Integer, nullable=False, server_default=text('60'))
    cancel_min_minutes = Column(Integer, nullable=False, server_default=text('120'))
    slot_interval_minutes = Column(Integer, nullable=False, server_default=text('15'))
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    services = relationship('Services', back_populates='workspace')
    schedule_rules = relationship('ScheduleRules', back_populates='workspace')
    time_off = relationship('TimeOff', back_populates='workspace')
    appointments = relationship('Appointments', back_populates='workspace')


class Services(Base):
    __tablename__ = 'services'

    id = Column(Text, primary_key=True)
    workspace_id = Column(ForeignKey('workspaces.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(Text, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    price_cents = Column(Integer, nullable=False, server_default=text('0'))
    is_active = Column(Boolean, nullable=False, server_default=text('1'))
    description = Column(Text)

    workspace = relationship('Workspaces', back_populates='services')


class ScheduleRules(Base):
    __tablename__ = 'schedule_rules'
    __table_args__ = (
        Index('ix_schedule_rules_workspace_day', 'workspace_id', 'day_of_week'),
    )

    id = Column(Text, primary_key=True)
    workspace_id = Column(ForeignKey('workspaces.id', ondelete='CASCADE'), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday, 6 = Saturday
    start_time_minutes = Column(Integer, nullable=False)
    end_time_minutes = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, server_default=text('1'))

    workspace = relationship('Workspaces', back_populates='schedule_rules')


class TimeOff(Base):
    __tablename__ = 'time_off'
    __table_args__ = (
        Index('ix_time_off_workspace_range', 'workspace_id', 'start_at', 'end_at'),
    )

    id = Column(Text, primary_key=True)
    workspace_id = Column(ForeignKey('workspaces.id', ondelete='CASCADE'), nullable=False)
    start_at = Column(DateTime, nullable=False)  # naive UTC
    end_at = Column(DateTime, nullable=False)  # naive UTC
    reason = Column(Text)

    workspace = relationship('Workspaces', back_populates='time_off')


class Appointments(Base):
    __tablename__ = 'appointments'
    __table_args__ = (
        Index('ix_appointments_workspace_start', 'workspace_id', 'start_at'),
    )

    id = Column(Text, primary_key=True)
    workspace_id = Column(ForeignKey('workspaces.id', ondelete='CASCADE'), nullable=False)
    client_id = Column(Text, nullable=False)
    start_at = Column(DateTime, nullable=False)  # naive UTC
    end_at = Column(DateTime, nullable=False)  # naive UTC
    status = Column(Text, nullable=False, server_default=text("'PENDING'"))
    booked_via = Column(Text, nullable=False, server_default=text("'admin'"))
    cancel_reason = Column(Text)

    workspace = relationship('Workspaces', back_populates='appointments')
