# ruff: noqa: TC003
from __future__ import annotations

from datetime import date

import sqlalchemy as sa
from sqlmodel import Field

from leave_engine.models.base import TimestampMixin, UUIDBase
from leave_engine.models.enums import EmploymentStatus

MAX_CARRYOVER_DAYS = 48


class Employee(UUIDBase, TimestampMixin, table=True):
    """Employee profile fields the leave engine reads and writes."""

    __tablename__ = "employee"
    __table_args__ = (
        sa.CheckConstraint(
            f"carried_forward_days >= 0 AND carried_forward_days <= {MAX_CARRYOVER_DAYS}",
            name="ck_employee_carried_forward_range",
        ),
        sa.Index("ix_employee_status_hiring", "employment_status", "hiring_date"),
    )

    first_name: str = Field(default="", max_length=255)
    last_name: str = Field(default="", max_length=255)
    email: str | None = Field(default=None, max_length=255)
    hiring_date: date | None = None
    carried_forward_days: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    employment_status: str = Field(
        default=EmploymentStatus.ACTIVE,
        max_length=50,
        sa_column_kwargs={"server_default": "active"},
    )
