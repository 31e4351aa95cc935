# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from leave_engine.models.base import TimestampMixin, UUIDBase
from leave_engine.models.enums import LeaveStatus


class LeaveType(UUIDBase, table=True):
    """A kind of leave offered by the organization (vacation, sick, ...)."""

    __tablename__ = "leave_type"

    name: str = Field(max_length=255, unique=True)
    description: str | None = None
    color_scheme: str | None = Field(default=None, max_length=50)
    requires_approval: bool = Field(default=True, sa_column_kwargs={"server_default": sa.text("true")})


class LeaveRecord(UUIDBase, TimestampMixin, table=True):
    """A leave request admitted by the engine, with approval workflow state."""

    __tablename__ = "leave_record"
    __table_args__ = (
        sa.CheckConstraint("end_date >= start_date", name="ck_leave_record_date_order"),
        sa.Index("ix_leave_record_employee_status_start", "employee_id", "status", "start_date"),
    )

    employee_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("employee.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    leave_type_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_type.id"), nullable=False),
    )
    start_date: date
    end_date: date
    status: str = Field(
        default=LeaveStatus.PENDING, max_length=50, index=True, sa_column_kwargs={"server_default": "pending"}
    )
    reason: str | None = None
    approved_by: uuid.UUID | None = None
    approved_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    comments: str | None = None
