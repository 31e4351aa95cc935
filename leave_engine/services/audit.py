from __future__ import annotations

import enum
import logging
import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from leave_engine.models.audit import AuditLog

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlmodel import SQLModel

    from leave_engine.models.enums import AuditAction, AuditEntityType

logger = logging.getLogger(__name__)

# Actor recorded for mutations no person initiated (scheduled carryover runs).
SYSTEM_ACTOR = uuid.UUID(int=0)


def _json_safe(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def model_to_audit_dict(model: SQLModel) -> dict[str, Any]:
    """Snapshot every column of a row for the audit trail."""
    return values_to_audit_dict(**model.model_dump())


def values_to_audit_dict(**values: Any) -> dict[str, Any]:
    """Snapshot selected field values, e.g. the one column an update touches."""
    return {key: _json_safe(value) for key, value in values.items()}


async def write_audit_log(
    session: AsyncSession,
    *,
    actor_id: uuid.UUID,
    entity_type: AuditEntityType,
    entity_id: uuid.UUID,
    action: AuditAction,
    before_json: dict[str, Any] | None = None,
    after_json: dict[str, Any] | None = None,
) -> AuditLog:
    """Stage an audit entry in the caller's transaction; it commits or rolls back with the change."""
    entry = AuditLog(
        actor_id=actor_id,
        entity_type=entity_type.value,
        entity_id=entity_id,
        action=action.value,
        before_json=before_json,
        after_json=after_json,
    )
    session.add(entry)
    logger.debug("Audit %s %s=%s by actor=%s", action.value, entity_type.value, entity_id, actor_id)
    return entry
