from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Column,
    String,
    DateTime,
    Date,
    Boolean,
    ForeignKey,
    Table,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from ..db import Base


ADMIN_ROLE = "admin"


# Association table for many-to-many DailyReport<->User (shift managers)
report_shift_managers = Table(
    "report_shift_managers",
    Base.metadata,
    Column("report_id", Integer, ForeignKey("daily_reports.id"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
    UniqueConstraint("report_id", "user_id", name="uq_report_shift_manager"),
)

# Association table for many-to-many DailyReport<->EventTitle
report_event_titles = Table(
    "report_event_titles",
    Base.metadata,
    Column("report_id", Integer, ForeignKey("daily_reports.id"), primary_key=True),
    Column("event_title_id", Integer, ForeignKey("event_titles.id"), primary_key=True),
    UniqueConstraint("report_id", "event_title_id", name="uq_report_event_title"),
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    role: Mapped[str] = mapped_column(String(50), nullable=False, default="user")  # admin|user|...

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


class ShiftHours(Base):
    __tablename__ = "shift_hours"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # Display strings such as "08:00"; never parsed
    start_time: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    end_time: Mapped[str] = mapped_column(String(20), nullable=False, default="")


class EventTitle(Base):
    __tablename__ = "event_titles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)


class DailyReport(Base):
    __tablename__ = "daily_reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    report_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    shift_hours_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("shift_hours.id"))
    health_power_sources: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    health_humidity_temp: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    health_fire_system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_by: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    creator = relationship("User", foreign_keys=[created_by])
    shift_hours = relationship("ShiftHours")


class EventPart3(Base):
    __tablename__ = "report_events_part3"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    report_id: Mapped[int] = mapped_column(Integer, ForeignKey("daily_reports.id"), nullable=False, index=True)
    event_summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    trigger_info: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Only the HH:MM part is meaningful; the date is the 1970-01-01 anchor
    start_time: Mapped[Optional[datetime]] = mapped_column(DateTime)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime)
    rca_number: Mapped[str] = mapped_column(String(100), nullable=False, default="")


class EventPart4(Base):
    __tablename__ = "report_events_part4"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    report_id: Mapped[int] = mapped_column(Integer, ForeignKey("daily_reports.id"), nullable=False, index=True)
    event_summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    trigger_info: Mapped[str] = mapped_column(Text, nullable=False, default="")
    start_time: Mapped[Optional[datetime]] = mapped_column(DateTime)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime)
