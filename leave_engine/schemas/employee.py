# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from leave_engine.models.enums import EmploymentStatus


class EmployeeRecord(BaseModel):
    """The subset of an employee profile the leave engine depends on."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: uuid.UUID
    hiring_date: date | None
    carried_forward_days: int = Field(default=0, ge=0)
    employment_status: EmploymentStatus


class ActiveEmployee(BaseModel):
    """An active employee with a hiring date, as listed for carryover runs."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: uuid.UUID
    hiring_date: date
    first_name: str = ""
    last_name: str = ""
    carried_forward_days: int = 0

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or "Unknown"
