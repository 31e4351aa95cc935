"""Seed script for development data.

Run with:  python -m leave_engine.seed

Creates the standard leave types and a handful of employees. Existing rows
with the same ids are left untouched, so the script can be run repeatedly.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leave_engine.db import dispose_engine, get_session_factory
from leave_engine.models.employee import Employee
from leave_engine.models.enums import EmploymentStatus
from leave_engine.models.leave import LeaveType

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

LEAVE_TYPES = [
    {"name": "Vacation", "description": "Planned annual leave", "color_scheme": "blue"},
    {"name": "Sick Leave", "description": "Illness or medical appointments", "color_scheme": "red"},
    {"name": "Personal", "description": "Personal matters", "color_scheme": "purple"},
    {"name": "Casual", "description": "Short notice leave", "color_scheme": "green"},
]

# Well-known employee UUIDs
ALICE_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")
BOB_ID = uuid.UUID("00000000-0000-0000-0000-000000000003")
CAROL_ID = uuid.UUID("00000000-0000-0000-0000-000000000004")
DAVE_ID = uuid.UUID("00000000-0000-0000-0000-000000000005")

EMPLOYEES = [
    {
        "id": ALICE_ID,
        "first_name": "Alice",
        "last_name": "Johnson",
        "email": "alice.johnson@example.com",
        "hiring_date": date(2023, 3, 10),
        "carried_forward_days": 10,
    },
    {
        "id": BOB_ID,
        "first_name": "Bob",
        "last_name": "Smith",
        "email": "bob.smith@example.com",
        "hiring_date": date(2020, 2, 29),
    },
    {
        "id": CAROL_ID,
        "first_name": "Carol",
        "last_name": "Williams",
        "email": "carol.williams@example.com",
        "hiring_date": date(2019, 11, 4),
        "carried_forward_days": 48,
    },
    {
        # No hiring date: balance reads report MissingHiringDate.
        "id": DAVE_ID,
        "first_name": "Dave",
        "last_name": "Brown",
        "email": "dave.brown@example.com",
        "hiring_date": None,
    },
]


async def seed_leave_types(session: AsyncSession) -> int:
    """Insert missing leave types by name. Returns the number inserted."""
    result = await session.execute(select(col(LeaveType.name)))
    existing = {row[0] for row in result.all()}
    created = 0
    for data in LEAVE_TYPES:
        if data["name"] in existing:
            continue
        session.add(LeaveType(**data))
        created += 1
    await session.flush()
    return created


async def seed_employees(session: AsyncSession) -> int:
    """Insert missing employees by id. Returns the number inserted."""
    result = await session.execute(select(col(Employee.id)))
    existing = {row[0] for row in result.all()}
    created = 0
    for data in EMPLOYEES:
        if data["id"] in existing:
            continue
        session.add(Employee(employment_status=EmploymentStatus.ACTIVE.value, **data))
        created += 1
    await session.flush()
    return created


async def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    factory = get_session_factory()
    async with factory() as session:
        types_created = await seed_leave_types(session)
        employees_created = await seed_employees(session)
        await session.commit()
    await dispose_engine()
    logger.info("Seeded %d leave types and %d employees", types_created, employees_created)


if __name__ == "__main__":
    asyncio.run(main())
