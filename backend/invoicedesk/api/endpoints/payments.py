from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Any, Optional
from datetime import date
import logging
import uuid

from invoicedesk import crud, models, schemas
from invoicedesk.core.errors import PaymentError
from invoicedesk.db.session import get_db
from invoicedesk.api import deps

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/invoices/{invoice_id}/payments", response_model=schemas.PaymentReceipt, status_code=status.HTTP_201_CREATED)
async def record_invoice_payment(
    invoice_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    payment_in: schemas.PaymentCreate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Record a payment against an invoice and return its new balance.
    """
    invoice, membership = await deps.get_invoice_with_membership(db=db, invoice_id=invoice_id, current_user=current_user)
    deps.require_permission(membership, "payments", "create")
    try:
        payment = await crud.payment.record_payment(db, invoice=invoice, payment_in=payment_in, user_id=current_user.id)
    except PaymentError as e:
        logger.warning(f"Payment on invoice {invoice.invoice_number} rejected: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return schemas.PaymentReceipt(
        payment=schemas.Payment.model_validate(payment),
        invoice_id=invoice.id,
        paid_amount=invoice.paid_amount,
        due_amount=invoice.due_amount,
        status=invoice.display_status.value,
    )

@router.get("/invoices/{invoice_id}/payments", response_model=List[schemas.Payment])
async def read_invoice_payments(
    invoice_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    invoice, membership = await deps.get_invoice_with_membership(db=db, invoice_id=invoice_id, current_user=current_user)
    deps.require_permission(membership, "payments", "view")
    return await crud.payment.get_payments_for_invoice(db, invoice_id=invoice.id)

@router.get("/payments/", response_model=List[schemas.PaymentListEntry])
async def read_payments(
    *,
    db: AsyncSession = Depends(get_db),
    organization_id: uuid.UUID = Query(...),
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=organization_id, current_user=current_user)
    deps.require_permission(membership, "payments", "view")
    return await crud.payment.get_payments(
        db, organization_id=organization_id, date_from=date_from, date_to=date_to, skip=skip, limit=limit
    )

@router.get("/payments/stats", response_model=schemas.PaymentStats)
async def read_payment_stats(
    *,
    db: AsyncSession = Depends(get_db),
    organization_id: uuid.UUID = Query(...),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Collections this month and today, plus pending and overdue amounts.
    """
    membership = await deps.get_org_membership(db=db, org_id=organization_id, current_user=current_user)
    deps.require_permission(membership, "payments", "view")
    return await crud.payment.get_payment_stats(db, organization_id=organization_id)

@router.delete("/payments/{payment_id}", response_model=schemas.Payment)
async def delete_existing_payment(
    payment_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    payment = await crud.payment.get_payment(db, payment_id=payment_id)
    if not payment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
    try:
        membership = await deps.get_org_membership(db=db, org_id=payment.organization_id, current_user=current_user)
    except HTTPException:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
    deps.require_permission(membership, "payments", "delete")
    deleted = schemas.Payment.model_validate(payment)
    await crud.payment.delete_payment(db, db_obj=payment, user_id=current_user.id)
    return deleted
