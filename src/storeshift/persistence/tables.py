"""Relational schema for stores, staffing data and schedule assignments.

The partial unique index on ``schedule_assignments`` is what keeps two
concurrent requests from both assigning a member on the same date: only one
ASSIGNED row per (store, member, date) can ever be committed.
"""

from __future__ import annotations

import datetime
import uuid
from typing import Optional

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    UniqueConstraint,
    create_engine,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

ASSIGNED_ONLY = text("status = 'ASSIGNED'")


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Base(DeclarativeBase):
    """Metadata for every schedule table."""

    pass


class StoreRow(Base):
    __tablename__ = "stores"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class JobRoleRow(Base):
    __tablename__ = "store_job_roles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    store_id: Mapped[str] = mapped_column(ForeignKey("stores.id"), nullable=False, index=True)
    code: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    name: Mapped[str] = mapped_column(String(80), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


member_job_roles = Table(
    "member_job_roles",
    Base.metadata,
    Column("member_id", ForeignKey("store_members.id"), primary_key=True),
    Column("job_role_id", ForeignKey("store_job_roles.id"), primary_key=True),
)


class MemberRow(Base):
    __tablename__ = "store_members"
    __table_args__ = (
        # One active membership per (store, account); guests have no account
        Index(
            "uq_store_members_active_account",
            "store_id",
            "user_id",
            unique=True,
            sqlite_where=text("active = 1 AND user_id IS NOT NULL"),
            postgresql_where=text("active AND user_id IS NOT NULL"),
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    store_id: Mapped[str] = mapped_column(ForeignKey("stores.id"), nullable=False, index=True)
    user_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    is_guest: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class WorkItemRow(Base):
    __tablename__ = "work_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    store_id: Mapped[str] = mapped_column(ForeignKey("stores.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    start_min: Mapped[int] = mapped_column(Integer, nullable=False)
    end_min: Mapped[int] = mapped_column(Integer, nullable=False)
    unpaid_break_min: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_headcount: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    role_hint: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class WorkItemRequiredRoleRow(Base):
    __tablename__ = "work_item_required_roles"

    work_item_id: Mapped[str] = mapped_column(ForeignKey("work_items.id"), primary_key=True)
    job_role_id: Mapped[str] = mapped_column(ForeignKey("store_job_roles.id"), primary_key=True)
    min_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class BusinessHourRow(Base):
    __tablename__ = "store_business_hours"
    __table_args__ = (UniqueConstraint("store_id", "weekday", name="uq_business_hours_store_weekday"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[str] = mapped_column(ForeignKey("stores.id"), nullable=False)
    weekday: Mapped[int] = mapped_column(Integer, nullable=False)  # 0 = Sunday
    open_min: Mapped[int] = mapped_column(Integer, nullable=False)
    close_min: Mapped[int] = mapped_column(Integer, nullable=False)


class UnavailabilityRow(Base):
    __tablename__ = "user_availability"
    __table_args__ = (
        UniqueConstraint("store_id", "member_id", "date", name="uq_user_availability_member_date"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    store_id: Mapped[str] = mapped_column(ForeignKey("stores.id"), nullable=False, index=True)
    member_id: Mapped[str] = mapped_column(ForeignKey("store_members.id"), nullable=False)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    has_time_restriction: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    start_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    end_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


class AssignmentRow(Base):
    __tablename__ = "schedule_assignments"
    __table_args__ = (
        Index(
            "uq_schedule_assignments_member_day_assigned",
            "store_id",
            "member_id",
            "date",
            unique=True,
            sqlite_where=ASSIGNED_ONLY,
            postgresql_where=ASSIGNED_ONLY,
        ),
        Index("ix_schedule_assignments_store_date", "store_id", "date"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    store_id: Mapped[str] = mapped_column(ForeignKey("stores.id"), nullable=False)
    member_id: Mapped[str] = mapped_column(ForeignKey("store_members.id"), nullable=False)
    work_item_id: Mapped[str] = mapped_column(ForeignKey("work_items.id"), nullable=False)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="ASSIGNED")
    notes: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across sessions."""
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            echo=echo,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, echo=echo, future=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False, future=True)


def init_database(engine: Engine) -> None:
    Base.metadata.create_all(engine)
