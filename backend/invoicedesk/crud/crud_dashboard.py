from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func, and_
import uuid
from datetime import date
from typing import Optional

from invoicedesk.models.invoice import Invoice as InvoiceModel
from invoicedesk.models.customer import Customer as CustomerModel
from invoicedesk.models.quotation import Quotation as QuotationModel
from invoicedesk.schemas.quotation import QuotationStatusEnum
from invoicedesk.services.invoice_status import round_currency
from invoicedesk.crud import crud_costing

async def get_dashboard_stats(
    db: AsyncSession,
    *,
    organization_id: uuid.UUID,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    include_profit: bool = False,
) -> dict: # Returns a dictionary that can be validated by DashboardStats schema

    query_filters = [InvoiceModel.organization_id == organization_id]
    if date_from:
        query_filters.append(InvoiceModel.invoice_date >= date_from)
    if date_to:
        query_filters.append(InvoiceModel.invoice_date <= date_to)

    # --- Invoiced, collected and count in one pass ---
    totals_result = await db.execute(
        select(
            func.coalesce(func.sum(InvoiceModel.total), 0.0),
            func.coalesce(func.sum(InvoiceModel.paid_amount), 0.0),
            func.count(InvoiceModel.id),
        ).filter(and_(*query_filters))
    )
    total_invoiced, total_collected, invoice_count = totals_result.one()

    # --- Outstanding: only the unpaid part of invoices still owing ---
    outstanding_result = await db.execute(
        select(func.coalesce(func.sum(InvoiceModel.total - InvoiceModel.paid_amount), 0.0)).filter(
            and_(*query_filters, InvoiceModel.paid_amount < InvoiceModel.total)
        )
    )
    total_outstanding = outstanding_result.scalar_one()

    # --- Overdue: still owing and past the due date ---
    today = date.today()
    overdue_result = await db.execute(
        select(func.count(InvoiceModel.id)).filter(
            and_(
                *query_filters,
                InvoiceModel.paid_amount < InvoiceModel.total,
                InvoiceModel.due_date.is_not(None),
                InvoiceModel.due_date < today,
            )
        )
    )
    overdue_count = overdue_result.scalar_one()

    customer_result = await db.execute(
        select(func.count(CustomerModel.id)).filter(CustomerModel.organization_id == organization_id)
    )
    pending_result = await db.execute(
        select(func.count(QuotationModel.id))
        .filter(QuotationModel.organization_id == organization_id)
        .filter(QuotationModel.status == QuotationStatusEnum.PENDING)
    )

    stats = {
        "total_invoiced": round_currency(total_invoiced),
        "total_collected": round_currency(total_collected),
        "total_outstanding": round_currency(total_outstanding),
        "invoice_count": invoice_count,
        "overdue_count": overdue_count,
        "customer_count": customer_result.scalar_one(),
        "pending_quotations": pending_result.scalar_one(),
        "costing_total": None,
        "gross_profit": None,
    }

    # --- Profit over invoices with costing, for roles allowed to see it ---
    if include_profit:
        invoice_result = await db.execute(
            select(InvoiceModel.id, InvoiceModel.total).filter(and_(*query_filters))
        )
        invoice_totals = {invoice_id: total for invoice_id, total in invoice_result.all()}
        costs = await crud_costing.get_costing_totals(db, organization_id=organization_id, invoice_ids=list(invoice_totals))
        costing_total = round_currency(sum(costs.values()))
        revenue = round_currency(sum(invoice_totals[i] for i in costs))
        stats["costing_total"] = costing_total
        stats["gross_profit"] = round_currency(revenue - costing_total)

    return stats
