from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func
import logging
import uuid
from datetime import date
from typing import List, Optional

from invoicedesk.core.errors import PaymentError
from invoicedesk.models.invoice import Invoice as InvoiceModel
from invoicedesk.models.payment import InvoicePayment as PaymentModel
from invoicedesk.schemas.payment import PaymentCreate
from invoicedesk.services.invoice_status import round_currency, stored_status
from invoicedesk.crud import crud_audit_log

logger = logging.getLogger(__name__)


async def get_payment(db: AsyncSession, payment_id: uuid.UUID) -> Optional[PaymentModel]:
    result = await db.execute(select(PaymentModel).filter(PaymentModel.id == payment_id))
    return result.scalars().first()

async def get_payments_for_invoice(db: AsyncSession, *, invoice_id: uuid.UUID) -> List[PaymentModel]:
    result = await db.execute(
        select(PaymentModel)
        .filter(PaymentModel.invoice_id == invoice_id)
        .order_by(PaymentModel.payment_date.desc(), PaymentModel.created_at.desc())
    )
    return result.unique().scalars().all()

async def get_payments(
    db: AsyncSession, *, organization_id: uuid.UUID,
    date_from: Optional[date] = None, date_to: Optional[date] = None,
    skip: int = 0, limit: int = 100
) -> List[PaymentModel]:
    """
    Payments across all invoices of an organization, newest first.
    """
    query = select(PaymentModel).filter(PaymentModel.organization_id == organization_id)
    if date_from: query = query.filter(PaymentModel.payment_date >= date_from)
    if date_to: query = query.filter(PaymentModel.payment_date <= date_to)
    query = query.order_by(PaymentModel.payment_date.desc(), PaymentModel.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(query)
    return result.unique().scalars().all()

async def record_payment(
    db: AsyncSession, *, invoice: InvoiceModel, payment_in: PaymentCreate, user_id: Optional[uuid.UUID]
) -> PaymentModel:
    """
    Record a payment against an invoice. The payment row, the invoice's paid
    amount and status, and the audit entry are committed together.
    Raises PaymentError for amounts that are not positive or exceed the due amount.
    """
    amount = round_currency(payment_in.amount)
    if amount <= 0:
        raise PaymentError("Payment amount must be greater than zero")
    remaining = round_currency(invoice.total - invoice.paid_amount)
    if amount > remaining:
        raise PaymentError("Payment amount cannot exceed remaining due amount")

    db_obj = PaymentModel(
        **payment_in.model_dump(exclude={"amount"}),
        amount=amount,
        invoice_id=invoice.id,
        organization_id=invoice.organization_id,
        created_by=user_id,
    )
    db.add(db_obj)

    invoice.paid_amount = round_currency(invoice.paid_amount + amount)
    invoice.status = stored_status(invoice.total, invoice.paid_amount)
    db.add(invoice)
    await db.flush()

    crud_audit_log.add_entry(
        db, organization_id=invoice.organization_id, user_id=user_id, action="payment.recorded",
        entity_type="payment", entity_id=db_obj.id,
        details={"invoice_id": invoice.id, "invoice_number": invoice.invoice_number, "amount": amount,
                 "method": payment_in.payment_method.value},
    )
    await db.commit()
    await db.refresh(db_obj)
    await db.refresh(invoice)
    logger.info(f"Payment of {amount} recorded on invoice {invoice.invoice_number} (now {invoice.status.value})")
    return db_obj

async def delete_payment(db: AsyncSession, *, db_obj: PaymentModel, user_id: Optional[uuid.UUID]) -> PaymentModel:
    """
    Remove a payment and take its amount off the invoice.
    """
    invoice = db_obj.invoice
    invoice.paid_amount = max(0.0, round_currency(invoice.paid_amount - db_obj.amount))
    invoice.status = stored_status(invoice.total, invoice.paid_amount)
    db.add(invoice)

    crud_audit_log.add_entry(
        db, organization_id=db_obj.organization_id, user_id=user_id, action="payment.deleted",
        entity_type="payment", entity_id=db_obj.id,
        details={"invoice_id": invoice.id, "invoice_number": invoice.invoice_number, "amount": db_obj.amount},
    )
    await db.delete(db_obj)
    await db.commit()
    await db.refresh(invoice)
    logger.info(f"Payment {db_obj.id} of {db_obj.amount} removed from invoice {invoice.invoice_number}")
    return db_obj

async def get_payment_stats(db: AsyncSession, *, organization_id: uuid.UUID, today: Optional[date] = None) -> dict:
    today = today or date.today()
    month_start = today.replace(day=1)

    result = await db.execute(
        select(func.coalesce(func.sum(PaymentModel.amount), 0.0))
        .filter(PaymentModel.organization_id == organization_id)
        .filter(PaymentModel.payment_date >= month_start)
        .filter(PaymentModel.payment_date <= today)
    )
    month_total = result.scalar_one()

    result = await db.execute(
        select(func.coalesce(func.sum(PaymentModel.amount), 0.0))
        .filter(PaymentModel.organization_id == organization_id)
        .filter(PaymentModel.payment_date == today)
    )
    today_total = result.scalar_one()

    result = await db.execute(
        select(InvoiceModel.total, InvoiceModel.paid_amount, InvoiceModel.due_date)
        .filter(InvoiceModel.organization_id == organization_id)
        .filter(InvoiceModel.paid_amount < InvoiceModel.total)
    )
    pending_due = overdue = 0.0
    for total, paid, due_date in result.all():
        due = max(0.0, round_currency(total - paid))
        pending_due += due
        if due_date and due_date < today:
            overdue += due

    return {
        "total_received_this_month": round_currency(month_total),
        "today_collections": round_currency(today_total),
        "pending_due": round_currency(pending_due),
        "overdue_amount": round_currency(overdue),
    }
