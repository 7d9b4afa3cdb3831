from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Any, Optional
import uuid

from invoicedesk import crud, models, schemas
from invoicedesk.db.session import get_db
from invoicedesk.api import deps

router = APIRouter()

async def _get_item_template_for_user(
    db: AsyncSession, template_id: uuid.UUID, current_user: models.User
) -> tuple[models.CostingItemTemplate, deps.OrgMembership]:
    template = await crud.costing_item_template.get_item_template(db, template_id=template_id)
    if not template:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item template not found")
    try:
        membership = await deps.get_org_membership(db=db, org_id=template.organization_id, current_user=current_user)
    except HTTPException:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item template not found")
    return template, membership

@router.get("/", response_model=List[schemas.CostingItemTemplate])
async def read_item_templates(
    *,
    db: AsyncSession = Depends(get_db),
    organization_id: uuid.UUID = Query(...),
    include_inactive: bool = True,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=organization_id, current_user=current_user)
    deps.require_template_permission(membership, "view")
    return await crud.costing_item_template.get_item_templates(
        db, organization_id=organization_id, include_inactive=include_inactive
    )

@router.get("/lookup", response_model=Optional[schemas.CostingItemTemplate])
async def lookup_item_template(
    *,
    db: AsyncSession = Depends(get_db),
    organization_id: uuid.UUID = Query(...),
    item_name: str = Query(..., min_length=1),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    The active template for an item name, or null when there is none.
    """
    membership = await deps.get_org_membership(db=db, org_id=organization_id, current_user=current_user)
    deps.require_template_permission(membership, "view")
    return await crud.costing_item_template.get_item_template_by_name(
        db, organization_id=organization_id, item_name=item_name
    )

@router.post("/", response_model=schemas.CostingItemTemplate, status_code=status.HTTP_201_CREATED)
async def create_item_template(
    *,
    db: AsyncSession = Depends(get_db),
    template_in: schemas.CostingItemTemplateCreate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=template_in.organization_id, current_user=current_user)
    deps.require_template_permission(membership, "edit")
    try:
        return await crud.costing_item_template.create_item_template(
            db, template_in=template_in, created_by=current_user.id
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/{template_id}", response_model=schemas.CostingItemTemplate)
async def read_item_template(
    template_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    template, membership = await _get_item_template_for_user(db, template_id, current_user)
    deps.require_template_permission(membership, "view")
    return template

@router.put("/{template_id}", response_model=schemas.CostingItemTemplate)
async def update_item_template(
    template_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    template_in: schemas.CostingItemTemplateUpdate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Update an item template. Rows are replaced only when sent; send
    is_active to toggle it.
    """
    template, membership = await _get_item_template_for_user(db, template_id, current_user)
    deps.require_template_permission(membership, "edit")
    try:
        return await crud.costing_item_template.update_item_template(db, db_obj=template, obj_in=template_in)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/{template_id}", response_model=schemas.CostingItemTemplate)
async def delete_item_template(
    template_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    template, membership = await _get_item_template_for_user(db, template_id, current_user)
    deps.require_template_permission(membership, "edit")
    deleted = schemas.CostingItemTemplate.model_validate(template)
    await crud.costing_item_template.delete_item_template(db, db_obj=template)
    return deleted
