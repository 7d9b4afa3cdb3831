from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Any, Optional
import uuid

from invoicedesk import crud, models, schemas
from invoicedesk.db.session import get_db
from invoicedesk.api import deps

router = APIRouter()

@router.get("/", response_model=List[schemas.AuditLog])
async def read_audit_logs(
    *,
    db: AsyncSession = Depends(get_db),
    organization_id: uuid.UUID = Query(...),
    entity_type: Optional[str] = Query(None, description="e.g. invoice, payment, invoice_costing"),
    skip: int = 0,
    limit: int = 100,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=organization_id, current_user=current_user)
    deps.require_permission(membership, "audit_logs", "view")
    return await crud.audit_log.get_entries(
        db, organization_id=organization_id, entity_type=entity_type, skip=skip, limit=limit
    )
