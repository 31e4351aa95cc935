# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

import sqlalchemy as sa
from sqlmodel import Field

from leave_engine.models.base import TimestampMixin, UUIDBase


class CarryoverEntry(UUIDBase, TimestampMixin, table=True):
    """Append-only record of every write to an employee's carried-forward days.

    SYSTEM entries are keyed by the leave year they close, which makes the
    year-end rollover idempotent. ADMIN entries leave the key empty so any
    number of manual overrides can be recorded.
    """

    __tablename__ = "carryover_entry"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "leave_year_start", "source", name="uq_carryover_idempotency"),
    )

    employee_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("employee.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    leave_year_start: date | None = None
    leave_year_end: date | None = None
    previous_balance: int | None = None
    requested_days: int | None = None
    carried_forward: int
    source: str = Field(max_length=50)
    actor_id: uuid.UUID | None = None
