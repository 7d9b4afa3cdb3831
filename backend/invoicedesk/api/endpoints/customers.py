from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Any, Optional
import uuid

from invoicedesk import crud, models, schemas
from invoicedesk.db.session import get_db
from invoicedesk.api import deps

router = APIRouter()

async def _get_customer_for_user(
    db: AsyncSession, customer_id: uuid.UUID, current_user: models.User
) -> tuple[models.Customer, deps.OrgMembership]:
    customer = await crud.customer.get_customer(db, customer_id=customer_id)
    if not customer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    try:
        membership = await deps.get_org_membership(db=db, org_id=customer.organization_id, current_user=current_user)
    except HTTPException:
        # Customers of other organizations look missing
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    return customer, membership

@router.post("/", response_model=schemas.Customer, status_code=status.HTTP_201_CREATED)
async def create_new_customer(
    *,
    db: AsyncSession = Depends(get_db),
    customer_in: schemas.CustomerCreate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Create a new customer in an organization the current user belongs to.
    """
    membership = await deps.get_org_membership(db=db, org_id=customer_in.organization_id, current_user=current_user)
    deps.require_permission(membership, "customers", "create")
    await deps.ensure_subscription_allows(db, membership, schemas.LimitTypeEnum.CUSTOMERS)
    try:
        return await crud.customer.create_customer(db=db, customer_in=customer_in)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/", response_model=List[schemas.CustomerSummary])
async def read_customers_for_organization(
    *,
    db: AsyncSession = Depends(get_db),
    organization_id: uuid.UUID = Query(..., description="The ID of the organization to fetch customers for"),
    search: Optional[str] = Query(None, description="Matches name, company or phone"),
    skip: int = 0,
    limit: int = 100,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=organization_id, current_user=current_user)
    deps.require_permission(membership, "customers", "view")
    return await crud.customer.get_customers_by_organization(
        db, organization_id=organization_id, search=search, skip=skip, limit=limit
    )

@router.get("/{customer_id}", response_model=schemas.Customer)
async def read_customer_by_id(
    customer_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    customer, membership = await _get_customer_for_user(db, customer_id, current_user)
    deps.require_permission(membership, "customers", "view")
    return customer

@router.put("/{customer_id}", response_model=schemas.Customer)
async def update_existing_customer(
    customer_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    customer_in: schemas.CustomerUpdate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    customer, membership = await _get_customer_for_user(db, customer_id, current_user)
    deps.require_permission(membership, "customers", "edit")
    try:
        return await crud.customer.update_customer(db=db, db_obj=customer, obj_in=customer_in)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/{customer_id}", response_model=schemas.Customer)
async def delete_existing_customer(
    customer_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Delete a customer. Customers with invoices cannot be deleted.
    """
    customer, membership = await _get_customer_for_user(db, customer_id, current_user)
    deps.require_permission(membership, "customers", "delete")
    try:
        return await crud.customer.delete_customer(db=db, db_obj=customer)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
