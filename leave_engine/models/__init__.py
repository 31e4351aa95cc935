from sqlmodel import SQLModel

from leave_engine.models.audit import AuditLog
from leave_engine.models.base import TimestampMixin, UUIDBase
from leave_engine.models.carryover import CarryoverEntry
from leave_engine.models.employee import Employee
from leave_engine.models.enums import (
    AuditAction,
    AuditEntityType,
    CarryoverSource,
    EmploymentStatus,
    LeaveStatus,
)
from leave_engine.models.leave import LeaveRecord, LeaveType

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "CarryoverEntry",
    "CarryoverSource",
    "Employee",
    "EmploymentStatus",
    "LeaveRecord",
    "LeaveStatus",
    "LeaveType",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
]
