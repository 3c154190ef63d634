from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlmodel import col

from leavedesk.models.audit import AuditLog
from leavedesk.models.enums import AuditEntityType

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.models.enums import AuditAction
    from leavedesk.models.leave import LeavePeriod


def period_to_audit_dict(period: LeavePeriod) -> dict[str, Any]:
    """Serialize a leave period to a JSON-safe dict for audit logging.

    Signatures are image payloads; only their presence is recorded.
    """
    data: dict[str, Any] = {}
    for key, value in period.model_dump().items():
        if key == "signature":
            data[key] = value is not None
        elif isinstance(value, uuid.UUID):
            data[key] = str(value)
        elif isinstance(value, (datetime, date)):
            data[key] = value.isoformat()
        else:
            data[key] = value
    return data


def record_period_change(
    session: AsyncSession,
    *,
    actor_id: uuid.UUID,
    period: LeavePeriod,
    action: AuditAction,
    before_json: dict[str, Any] | None = None,
    after_json: dict[str, Any] | None = None,
) -> AuditLog:
    """Add an immutable audit entry for ``period`` to the caller's transaction."""
    entry = AuditLog(
        actor_id=actor_id,
        entity_type=AuditEntityType.LEAVE_PERIOD.value,
        entity_id=period.id,
        request_group_id=period.group_key,
        action=action.value,
        before_json=before_json,
        after_json=after_json,
    )
    session.add(entry)
    return entry


async def list_group_entries(session: AsyncSession, group_key: uuid.UUID) -> list[AuditLog]:
    """Audit entries of one request, oldest first."""
    result = await session.execute(
        select(AuditLog)
        .where(col(AuditLog.request_group_id) == group_key)
        .order_by(col(AuditLog.created_at), col(AuditLog.id))
    )
    return list(result.scalars().all())
