from __future__ import annotations

import enum


class LeaveStatus(enum.StrEnum):
    """State machine for leave records.

    The engine only creates PENDING records; every other transition belongs
    to the approval workflow.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class EmploymentStatus(enum.StrEnum):
    """Employment state; only active employees take part in carryover."""

    ACTIVE = "active"
    TERMINATED = "terminated"


class CarryoverSource(enum.StrEnum):
    """Origin of a carryover entry."""

    SYSTEM = "SYSTEM"
    ADMIN = "ADMIN"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    EMPLOYEE = "EMPLOYEE"
    LEAVE_RECORD = "LEAVE_RECORD"
    CARRYOVER = "CARRYOVER"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    CARRYOVER = "CARRYOVER"
    MANUAL_CARRYOVER = "MANUAL_CARRYOVER"
