from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Any, Optional
import uuid

from invoicedesk import crud, models, schemas
from invoicedesk.db.session import get_db
from invoicedesk.api import deps

router = APIRouter()

async def _get_calculation_for_user(
    db: AsyncSession, calculation_id: uuid.UUID, current_user: models.User
) -> tuple[models.PriceCalculation, deps.OrgMembership]:
    calculation = await crud.price_calculation.get_price_calculation(db, calculation_id=calculation_id)
    if not calculation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Price calculation not found")
    try:
        membership = await deps.get_org_membership(db=db, org_id=calculation.organization_id, current_user=current_user)
    except HTTPException:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Price calculation not found")
    return calculation, membership

@router.post("/", response_model=schemas.PriceCalculation, status_code=status.HTTP_201_CREATED)
async def create_price_calculation(
    *,
    db: AsyncSession = Depends(get_db),
    calculation_in: schemas.PriceCalculationCreate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Create a price calculation. Costing total, margin, final price and
    price per piece are computed on save.
    """
    membership = await deps.get_org_membership(db=db, org_id=calculation_in.organization_id, current_user=current_user)
    deps.require_permission(membership, "price_calculations", "create")
    try:
        return await crud.price_calculation.create_price_calculation(
            db, calculation_in=calculation_in, created_by=current_user.id
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/", response_model=List[schemas.PriceCalculationSummary])
async def read_price_calculations(
    *,
    db: AsyncSession = Depends(get_db),
    organization_id: uuid.UUID = Query(...),
    customer_id: Optional[uuid.UUID] = None,
    search: Optional[str] = Query(None, description="Matches the job description"),
    skip: int = 0,
    limit: int = 100,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=organization_id, current_user=current_user)
    deps.require_permission(membership, "price_calculations", "view")
    return await crud.price_calculation.get_price_calculations(
        db, organization_id=organization_id, customer_id=customer_id, search=search, skip=skip, limit=limit
    )

@router.get("/{calculation_id}", response_model=schemas.PriceCalculation)
async def read_price_calculation(
    calculation_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    calculation, membership = await _get_calculation_for_user(db, calculation_id, current_user)
    deps.require_permission(membership, "price_calculations", "view")
    return calculation

@router.put("/{calculation_id}", response_model=schemas.PriceCalculation)
async def update_price_calculation(
    calculation_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    calculation_in: schemas.PriceCalculationUpdate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    calculation, membership = await _get_calculation_for_user(db, calculation_id, current_user)
    deps.require_permission(membership, "price_calculations", "edit")
    try:
        return await crud.price_calculation.update_price_calculation(db, db_obj=calculation, obj_in=calculation_in)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/{calculation_id}", response_model=schemas.PriceCalculation)
async def delete_price_calculation(
    calculation_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    calculation, membership = await _get_calculation_for_user(db, calculation_id, current_user)
    deps.require_permission(membership, "price_calculations", "delete")
    return await crud.price_calculation.delete_price_calculation(db, db_obj=calculation)

@router.post("/{calculation_id}/convert", response_model=schemas.PriceCalculationConverted, status_code=status.HTTP_201_CREATED)
async def convert_price_calculation(
    calculation_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    convert_in: schemas.PriceCalculationConvert,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Create a one-item quotation or invoice from the calculation.
    """
    calculation, membership = await _get_calculation_for_user(db, calculation_id, current_user)
    module = "quotations" if convert_in.target == "quotation" else "invoices"
    limit_type = schemas.LimitTypeEnum.QUOTATIONS if convert_in.target == "quotation" else schemas.LimitTypeEnum.INVOICES
    deps.require_permission(membership, module, "create")
    await deps.ensure_subscription_allows(db, membership, limit_type)
    try:
        document_id, document_number = await crud.price_calculation.convert(
            db, db_obj=calculation, target=convert_in.target,
            organization=membership.organization, user_id=current_user.id,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return schemas.PriceCalculationConverted(
        target=convert_in.target, document_id=document_id, document_number=document_number
    )
