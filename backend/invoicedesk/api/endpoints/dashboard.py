from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Optional
from datetime import date
import uuid

from invoicedesk import crud, models, schemas
from invoicedesk.db.session import get_db
from invoicedesk.api import deps

router = APIRouter()

@router.get("/stats", response_model=schemas.DashboardStats)
async def read_dashboard_stats(
    *,
    db: AsyncSession = Depends(get_db),
    organization_id: uuid.UUID = Query(..., description="The ID of the organization to fetch stats for"),
    date_from: Optional[date] = Query(None, description="Start date for filtering (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, description="End date for filtering (YYYY-MM-DD)"),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Retrieve dashboard statistics for an organization. Costing total and
    gross profit are only filled for roles allowed to see profit.
    """
    membership = await deps.get_org_membership(db=db, org_id=organization_id, current_user=current_user)
    deps.require_permission(membership, "dashboard", "view")

    stats = await crud.dashboard.get_dashboard_stats(
        db=db,
        organization_id=organization_id,
        date_from=date_from,
        date_to=date_to,
        include_profit=membership.costing.can_view_profit,
    )
    stats["currency"] = membership.organization.currency
    return stats
