from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import Any, Dict, Optional
import uuid

from invoicedesk.models.audit_log import AuditLog as AuditLogModel


def _jsonable(details: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if details is None:
        return None
    return {k: (str(v) if isinstance(v, uuid.UUID) else v) for k, v in details.items()}


def add_entry(
    db: AsyncSession,
    *,
    organization_id: uuid.UUID,
    user_id: Optional[uuid.UUID],
    action: str,
    entity_type: str,
    entity_id: Optional[uuid.UUID] = None,
    details: Optional[Dict[str, Any]] = None,
) -> AuditLogModel:
    """
    Stage an audit entry in the current transaction. The caller commits it
    together with the change it describes.
    """
    entry = AuditLogModel(
        organization_id=organization_id,
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=_jsonable(details),
    )
    db.add(entry)
    return entry


async def get_entries(
    db: AsyncSession,
    *,
    organization_id: uuid.UUID,
    entity_type: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> list[AuditLogModel]:
    query = select(AuditLogModel).filter(AuditLogModel.organization_id == organization_id)
    if entity_type:
        query = query.filter(AuditLogModel.entity_type == entity_type)
    query = query.order_by(AuditLogModel.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()
