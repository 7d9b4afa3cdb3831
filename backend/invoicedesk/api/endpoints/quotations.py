from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Any, Optional
import uuid

from invoicedesk import crud, models, schemas
from invoicedesk.db.session import get_db
from invoicedesk.api import deps

router = APIRouter()

async def _get_quotation_for_user(
    db: AsyncSession, quotation_id: uuid.UUID, current_user: models.User
) -> tuple[models.Quotation, deps.OrgMembership]:
    quotation = await crud.quotation.get_quotation(db, quotation_id=quotation_id)
    if not quotation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quotation not found")
    try:
        membership = await deps.get_org_membership(db=db, org_id=quotation.organization_id, current_user=current_user)
    except HTTPException:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quotation not found")
    return quotation, membership

@router.post("/", response_model=schemas.Quotation, status_code=status.HTTP_201_CREATED)
async def create_new_quotation(
    *,
    db: AsyncSession = Depends(get_db),
    quotation_in: schemas.QuotationCreate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=quotation_in.organization_id, current_user=current_user)
    deps.require_permission(membership, "quotations", "create")
    await deps.ensure_subscription_allows(db, membership, schemas.LimitTypeEnum.QUOTATIONS)
    try:
        return await crud.quotation.create_quotation(
            db, quotation_in=quotation_in, organization=membership.organization, created_by=current_user.id
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/", response_model=List[schemas.QuotationSummary])
async def read_quotations(
    *,
    db: AsyncSession = Depends(get_db),
    organization_id: uuid.UUID = Query(...),
    status_filter: Optional[schemas.QuotationStatusEnum] = Query(None, alias="status"),
    customer_id: Optional[uuid.UUID] = None,
    search: Optional[str] = Query(None, description="Matches the quotation number"),
    skip: int = 0,
    limit: int = 100,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=organization_id, current_user=current_user)
    deps.require_permission(membership, "quotations", "view")
    return await crud.quotation.get_quotations(
        db, organization_id=organization_id, status=status_filter, customer_id=customer_id,
        search=search, skip=skip, limit=limit,
    )

@router.get("/{quotation_id}", response_model=schemas.Quotation)
async def read_quotation_by_id(
    quotation_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    quotation, membership = await _get_quotation_for_user(db, quotation_id, current_user)
    deps.require_permission(membership, "quotations", "view")
    return quotation

@router.put("/{quotation_id}", response_model=schemas.Quotation)
async def update_existing_quotation(
    quotation_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    quotation_in: schemas.QuotationUpdate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    quotation, membership = await _get_quotation_for_user(db, quotation_id, current_user)
    deps.require_permission(membership, "quotations", "edit")
    try:
        return await crud.quotation.update_quotation(db, db_obj=quotation, quotation_in=quotation_in)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.put("/{quotation_id}/status", response_model=schemas.Quotation)
async def update_quotation_status(
    quotation_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    status_in: schemas.QuotationStatusUpdate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    quotation, membership = await _get_quotation_for_user(db, quotation_id, current_user)
    deps.require_permission(membership, "quotations", "edit")
    return await crud.quotation.update_status(db, db_obj=quotation, status=status_in.status, user_id=current_user.id)

@router.post("/{quotation_id}/convert", response_model=schemas.Invoice, status_code=status.HTTP_201_CREATED)
async def convert_quotation_to_invoice(
    quotation_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Create an invoice from the quotation's items and amounts, dated today,
    and mark the quotation accepted.
    """
    quotation, membership = await _get_quotation_for_user(db, quotation_id, current_user)
    deps.require_permission(membership, "invoices", "create")
    await deps.ensure_subscription_allows(db, membership, schemas.LimitTypeEnum.INVOICES)
    try:
        return await crud.quotation.convert_to_invoice(
            db, db_obj=quotation, organization=membership.organization, user_id=current_user.id
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/{quotation_id}", response_model=schemas.Quotation)
async def delete_existing_quotation(
    quotation_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    quotation, membership = await _get_quotation_for_user(db, quotation_id, current_user)
    deps.require_permission(membership, "quotations", "delete")
    deleted = schemas.Quotation.model_validate(quotation)
    await crud.quotation.delete_quotation(db, db_obj=quotation)
    return deleted
