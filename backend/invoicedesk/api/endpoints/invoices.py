from fastapi import APIRouter, Depends, HTTPException, status, Query
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Any, Optional
from datetime import date
from pathlib import Path
import logging
import uuid

from jinja2 import Environment, FileSystemLoader, select_autoescape

from invoicedesk import crud, models, schemas
from invoicedesk.db.session import get_db
from invoicedesk.api import deps

logger = logging.getLogger(__name__)

router = APIRouter()

TEMPLATE_DIR = Path(__file__).resolve().parent.parent.parent / "templates"
jinja_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(['html', 'xml'])
)


@router.post("/", response_model=schemas.Invoice, status_code=status.HTTP_201_CREATED)
async def create_new_invoice(
    *,
    db: AsyncSession = Depends(get_db),
    invoice_in: schemas.InvoiceCreate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Create an invoice. Without an invoice_number the organization's next
    number is used.
    """
    membership = await deps.get_org_membership(db=db, org_id=invoice_in.organization_id, current_user=current_user)
    deps.require_permission(membership, "invoices", "create")
    await deps.ensure_subscription_allows(db, membership, schemas.LimitTypeEnum.INVOICES)
    try:
        return await crud.invoice.create_invoice(
            db, invoice_in=invoice_in, organization=membership.organization, created_by=current_user.id
        )
    except ValueError as e:
        logger.warning(f"Invoice creation rejected: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/", response_model=List[schemas.InvoiceSummary])
async def read_invoices(
    *,
    db: AsyncSession = Depends(get_db),
    organization_id: uuid.UUID = Query(...),
    status_filter: Optional[schemas.InvoiceDisplayStatusEnum] = Query(None, alias="status"),
    customer_id: Optional[uuid.UUID] = None,
    search: Optional[str] = Query(None, description="Invoice number or customer name"),
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=organization_id, current_user=current_user)
    deps.require_permission(membership, "invoices", "view")
    return await crud.invoice.get_invoices(
        db, organization_id=organization_id, status=status_filter, customer_id=customer_id,
        search=search, date_from=date_from, date_to=date_to, skip=skip, limit=limit,
    )

@router.get("/next-number", response_model=schemas.InvoiceNumberPreview)
async def preview_next_invoice_number(
    *,
    db: AsyncSession = Depends(get_db),
    organization_id: uuid.UUID = Query(...),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    The number the next invoice will get. Nothing is reserved.
    """
    membership = await deps.get_org_membership(db=db, org_id=organization_id, current_user=current_user)
    deps.require_permission(membership, "invoices", "view")
    number = await crud.invoice.preview_next_number(db, organization=membership.organization)
    return schemas.InvoiceNumberPreview(next_invoice_number=number)

@router.get("/{invoice_id}", response_model=schemas.Invoice)
async def read_invoice_by_id(
    invoice_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    invoice, membership = await deps.get_invoice_with_membership(db=db, invoice_id=invoice_id, current_user=current_user)
    deps.require_permission(membership, "invoices", "view")
    return invoice

@router.put("/{invoice_id}", response_model=schemas.Invoice)
async def update_existing_invoice(
    invoice_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    invoice_in: schemas.InvoiceUpdate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Update an invoice. Sending items replaces them; items sent with their
    existing id keep their costing rows.
    """
    invoice, membership = await deps.get_invoice_with_membership(db=db, invoice_id=invoice_id, current_user=current_user)
    deps.require_permission(membership, "invoices", "edit")
    try:
        return await crud.invoice.update_invoice(db, db_obj=invoice, invoice_in=invoice_in, user_id=current_user.id)
    except ValueError as e:
        logger.warning(f"Invoice {invoice.invoice_number} update rejected: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/{invoice_id}", response_model=schemas.Invoice)
async def delete_existing_invoice(
    invoice_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    force: bool = Query(False, description="Also delete recorded payments (owner only)"),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    invoice, membership = await deps.get_invoice_with_membership(db=db, invoice_id=invoice_id, current_user=current_user)
    deps.require_permission(membership, "invoices", "delete")
    if force:
        deps.require_role(membership, schemas.OrgRoleEnum.OWNER)
    # Serialize before the row is gone
    deleted = schemas.Invoice.model_validate(invoice)
    try:
        await crud.invoice.delete_invoice(db, db_obj=invoice, force=force, user_id=current_user.id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return deleted

@router.get("/{invoice_id}/print", response_class=HTMLResponse)
async def print_invoice(
    invoice_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> HTMLResponse:
    """
    Customer-facing HTML rendition of an invoice. Costing data is never part
    of the template context.
    """
    invoice, membership = await deps.get_invoice_with_membership(db=db, invoice_id=invoice_id, current_user=current_user)
    deps.require_permission(membership, "invoices", "view")

    template_context = {
        "invoice": schemas.Invoice.model_validate(invoice).model_dump(mode="json"),
        "customer": schemas.Customer.model_validate(invoice.customer).model_dump(mode="json"),
        "organization": schemas.Organization.model_validate(membership.organization).model_dump(mode="json"),
    }
    try:
        template = jinja_env.get_template("invoice_print.html")
        html_content = template.render(template_context)
    except Exception as e:
        logger.error(f"Error rendering print template for invoice {invoice.invoice_number}: {e}")
        raise HTTPException(status_code=500, detail="Error generating invoice: template rendering failed.")
    return HTMLResponse(content=html_content)
