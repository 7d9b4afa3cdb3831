from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Iterable, Optional
import logging
import uuid

from invoicedesk import crud, models, schemas
from invoicedesk.core.errors import CostingError
from invoicedesk.core.permissions import CostingPermissions
from invoicedesk.db.session import get_db
from invoicedesk.api import deps
from invoicedesk.services.costing import CostingRowDraft, CostingWorkspace
from invoicedesk.services.pricing import to_costing_rows

logger = logging.getLogger(__name__)

router = APIRouter()


def _row_out(invoice: models.Invoice, row: CostingRowDraft) -> schemas.CostingRow:
    return schemas.CostingRow(invoice_id=invoice.id, **row.to_dict())

def _costing_response(
    invoice: models.Invoice, workspace: CostingWorkspace, permissions: CostingPermissions
) -> schemas.InvoiceCosting:
    groups = [
        schemas.CostingItemGroup(
            invoice_item_id=group.item.id,
            item_no=group.item_no,
            description=group.item.description,
            item_total=group.item.total,
            status=group.status,
            subtotal=group.subtotal,
            rows=[_row_out(invoice, r) for r in group.rows],
        )
        for group in workspace.grouped()
    ]
    profit = None
    if permissions.can_view_profit:
        margin = workspace.profit_margin()
        if margin is not None:
            profit = schemas.ProfitMarginOut(
                costing_total=margin.costing_total,
                profit=margin.profit,
                margin_percent=margin.margin_percent,
                is_positive=margin.is_positive,
            )
    return schemas.InvoiceCosting(
        invoice_id=invoice.id,
        invoice_total=workspace.invoice_total,
        rows=[_row_out(invoice, r) for r in workspace.rows],
        groups=groups,
        unassigned_rows=[_row_out(invoice, r) for r in workspace.unassigned_rows()],
        costing_total=workspace.grand_total(),
        profit=profit,
        permissions=schemas.CostingPermissionsOut(
            can_view=permissions.can_view,
            can_edit=permissions.can_edit,
            can_save=permissions.can_save,
            can_reset=permissions.can_reset,
            can_view_profit=permissions.can_view_profit,
            is_read_only=permissions.is_read_only,
        ),
    )

async def _save_workspace(
    db: AsyncSession,
    *,
    invoice: models.Invoice,
    workspace: CostingWorkspace,
    permissions: CostingPermissions,
    user_id: uuid.UUID,
    allow_empty: bool = False,
    action: str = "costing.saved",
    details: Optional[dict] = None,
) -> schemas.InvoiceCosting:
    """
    Persist the workspace draft and answer with the saved state.
    """
    try:
        payload = workspace.build_save_payload(allow_empty=allow_empty)
    except CostingError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    saved = await crud.costing.replace_costing_items(
        db, invoice=invoice, rows=payload, user_id=user_id, action=action, details=details
    )
    workspace.mark_saved(saved)
    return _costing_response(invoice, workspace, permissions)

def _load(workspace: CostingWorkspace, rows: Iterable[Any], mode: schemas.TemplateLoadModeEnum, item_id: Optional[uuid.UUID]) -> None:
    try:
        workspace.load_template(rows, mode, item_id)
    except CostingError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/invoices/{invoice_id}/costing", response_model=schemas.InvoiceCosting)
async def read_invoice_costing(
    invoice_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Costing rows of an invoice grouped per line item, with the profit margin
    for roles allowed to see it.
    """
    invoice, membership = await deps.get_invoice_with_membership(db=db, invoice_id=invoice_id, current_user=current_user)
    permissions = deps.require_costing(membership, "view")
    workspace = await crud.costing.load_workspace(db, invoice=invoice)
    return _costing_response(invoice, workspace, permissions)

@router.put("/invoices/{invoice_id}/costing", response_model=schemas.InvoiceCosting)
async def save_invoice_costing(
    invoice_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    costing_in: schemas.CostingSave,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Replace every costing row of the invoice. Rows without an item type are
    dropped; at least one valid row is required.
    """
    invoice, membership = await deps.get_invoice_with_membership(db=db, invoice_id=invoice_id, current_user=current_user)
    permissions = deps.require_costing(membership, "save")
    workspace = await crud.costing.load_workspace(db, invoice=invoice)
    try:
        workspace.replace_rows(costing_in.items)
    except CostingError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return await _save_workspace(db, invoice=invoice, workspace=workspace, permissions=permissions, user_id=current_user.id)

@router.delete("/invoices/{invoice_id}/costing", response_model=schemas.InvoiceCosting)
async def reset_invoice_costing(
    invoice_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    invoice_item_id: Optional[uuid.UUID] = Query(None, description="Reset only this line item"),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    invoice, membership = await deps.get_invoice_with_membership(db=db, invoice_id=invoice_id, current_user=current_user)
    permissions = deps.require_costing(membership, "reset")
    workspace = await crud.costing.load_workspace(db, invoice=invoice)
    try:
        if invoice_item_id:
            removed = workspace.reset_item(invoice_item_id)
        else:
            removed = workspace.reset_all()
    except CostingError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    logger.info(f"Resetting costing of invoice {invoice.invoice_number}: {removed} rows removed")
    return await _save_workspace(
        db, invoice=invoice, workspace=workspace, permissions=permissions, user_id=current_user.id,
        allow_empty=True, action="costing.reset",
        details={"invoice_item_id": invoice_item_id, "removed": removed},
    )

@router.post("/invoices/{invoice_id}/costing/apply-template", response_model=schemas.InvoiceCosting)
async def apply_costing_template(
    invoice_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    apply_in: schemas.ApplyCostingTemplate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Load a saved costing template in replace or append mode, for one line
    item or for the whole invoice, and save the result.
    """
    invoice, membership = await deps.get_invoice_with_membership(db=db, invoice_id=invoice_id, current_user=current_user)
    permissions = deps.require_costing(membership, "save")
    deps.require_template_permission(membership, "view")
    template = await crud.costing_template.get_template(db, template_id=apply_in.template_id)
    if not template or template.organization_id != invoice.organization_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Costing template not found")

    workspace = await crud.costing.load_workspace(db, invoice=invoice)
    _load(workspace, template.items or [], apply_in.mode, apply_in.invoice_item_id)
    return await _save_workspace(
        db, invoice=invoice, workspace=workspace, permissions=permissions, user_id=current_user.id,
        action="costing.template_applied",
        details={"template": template.name, "mode": apply_in.mode.value, "invoice_item_id": apply_in.invoice_item_id},
    )

@router.post("/invoices/{invoice_id}/costing/apply-item-template", response_model=schemas.InvoiceCosting)
async def apply_costing_item_template(
    invoice_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    apply_in: schemas.ApplyItemTemplate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    invoice, membership = await deps.get_invoice_with_membership(db=db, invoice_id=invoice_id, current_user=current_user)
    permissions = deps.require_costing(membership, "save")
    template = await crud.costing_item_template.get_item_template_by_name(
        db, organization_id=invoice.organization_id, item_name=apply_in.item_name
    )
    if not template:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No item template found for '{apply_in.item_name}'")

    workspace = await crud.costing.load_workspace(db, invoice=invoice)
    try:
        workspace.apply_item_template(template, apply_in.invoice_item_id)
    except CostingError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return await _save_workspace(
        db, invoice=invoice, workspace=workspace, permissions=permissions, user_id=current_user.id,
        action="costing.item_template_applied",
        details={"item_template": template.item_name, "invoice_item_id": apply_in.invoice_item_id},
    )

@router.post("/invoices/{invoice_id}/costing/import-price-calculation", response_model=schemas.InvoiceCosting)
async def import_price_calculation(
    invoice_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    import_in: schemas.ImportPriceCalculation,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Turn a price calculation's non-zero cost lines into costing rows.
    """
    invoice, membership = await deps.get_invoice_with_membership(db=db, invoice_id=invoice_id, current_user=current_user)
    permissions = deps.require_costing(membership, "save")
    calculation = await crud.price_calculation.get_price_calculation(db, calculation_id=import_in.price_calculation_id)
    if not calculation or calculation.organization_id != invoice.organization_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Price calculation not found")

    rows = to_costing_rows(calculation)
    if not rows:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Price calculation has no cost lines to import")
    workspace = await crud.costing.load_workspace(db, invoice=invoice)
    _load(workspace, rows, import_in.mode, import_in.invoice_item_id)
    return await _save_workspace(
        db, invoice=invoice, workspace=workspace, permissions=permissions, user_id=current_user.id,
        action="costing.price_calculation_imported",
        details={"price_calculation_id": calculation.id, "mode": import_in.mode.value},
    )

@router.get("/costing/summary", response_model=schemas.CostingSummary)
async def read_costing_summary(
    *,
    db: AsyncSession = Depends(get_db),
    organization_id: uuid.UUID = Query(...),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=organization_id, current_user=current_user)
    deps.require_costing(membership, "view_profit")
    return await crud.costing.get_costing_summary(db, organization_id=organization_id)
