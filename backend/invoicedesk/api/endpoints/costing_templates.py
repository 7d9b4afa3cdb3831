from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Any, Optional
import uuid

from invoicedesk import crud, models, schemas
from invoicedesk.db.session import get_db
from invoicedesk.api import deps

router = APIRouter()

async def _get_template_for_user(
    db: AsyncSession, template_id: uuid.UUID, current_user: models.User
) -> tuple[models.CostingTemplate, deps.OrgMembership]:
    template = await crud.costing_template.get_template(db, template_id=template_id)
    if not template:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Costing template not found")
    try:
        membership = await deps.get_org_membership(db=db, org_id=template.organization_id, current_user=current_user)
    except HTTPException:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Costing template not found")
    return template, membership

@router.get("/", response_model=List[schemas.CostingTemplate])
async def read_costing_templates(
    *,
    db: AsyncSession = Depends(get_db),
    organization_id: uuid.UUID = Query(...),
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=organization_id, current_user=current_user)
    deps.require_template_permission(membership, "view")
    return await crud.costing_template.get_templates(
        db, organization_id=organization_id, search=search, skip=skip, limit=limit
    )

@router.post("/", response_model=schemas.CostingTemplate, status_code=status.HTTP_201_CREATED)
async def create_costing_template(
    *,
    db: AsyncSession = Depends(get_db),
    template_in: schemas.CostingTemplateCreate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=template_in.organization_id, current_user=current_user)
    deps.require_template_permission(membership, "edit")
    try:
        return await crud.costing_template.create_template_from_schema(
            db, template_in=template_in, created_by=current_user.id
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/from-invoice", response_model=schemas.CostingTemplate, status_code=status.HTTP_201_CREATED)
async def create_costing_template_from_invoice(
    *,
    db: AsyncSession = Depends(get_db),
    template_in: schemas.CostingTemplateFromInvoice,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Save an invoice's persisted costing rows, or one line item's rows, as a
    reusable template.
    """
    invoice, membership = await deps.get_invoice_with_membership(
        db=db, invoice_id=template_in.invoice_id, current_user=current_user
    )
    deps.require_template_permission(membership, "edit")
    rows = await crud.costing.get_costing_rows(db, invoice_id=invoice.id)
    if template_in.invoice_item_id:
        rows = [r for r in rows if r.invoice_item_id == template_in.invoice_item_id]
    try:
        return await crud.costing_template.create_template(
            db,
            organization_id=invoice.organization_id,
            name=template_in.name,
            description=template_in.description,
            rows=rows,
            created_by=current_user.id,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/{template_id}", response_model=schemas.CostingTemplate)
async def read_costing_template(
    template_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    template, membership = await _get_template_for_user(db, template_id, current_user)
    deps.require_template_permission(membership, "view")
    return template

@router.put("/{template_id}", response_model=schemas.CostingTemplate)
async def update_costing_template(
    template_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    template_in: schemas.CostingTemplateUpdate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    template, membership = await _get_template_for_user(db, template_id, current_user)
    deps.require_template_permission(membership, "edit")
    try:
        return await crud.costing_template.update_template(db, db_obj=template, obj_in=template_in)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/{template_id}", response_model=schemas.CostingTemplate)
async def delete_costing_template(
    template_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    template, membership = await _get_template_for_user(db, template_id, current_user)
    deps.require_template_permission(membership, "edit")
    return await crud.costing_template.delete_template(db, db_obj=template)
