from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import delete, func
import logging
import uuid
from typing import Iterable, List, Optional

from invoicedesk.models.costing import InvoiceCostingItem as CostingItemModel
from invoicedesk.models.invoice import Invoice as InvoiceModel
from invoicedesk.services.costing import CostingRowDraft, CostingWorkspace, line_total, profit_margin
from invoicedesk.services.invoice_status import round_currency
from invoicedesk.crud import crud_audit_log

logger = logging.getLogger(__name__)


async def get_costing_rows(db: AsyncSession, *, invoice_id: uuid.UUID) -> List[CostingItemModel]:
    result = await db.execute(
        select(CostingItemModel)
        .filter(CostingItemModel.invoice_id == invoice_id)
        .order_by(CostingItemModel.sort_order, CostingItemModel.created_at)
    )
    return result.scalars().all()

async def load_workspace(db: AsyncSession, *, invoice: InvoiceModel) -> CostingWorkspace:
    """
    Workspace over the invoice's line items with the persisted rows as baseline.
    """
    rows = await get_costing_rows(db, invoice_id=invoice.id)
    return CostingWorkspace(invoice.items, rows, invoice.total)

async def replace_costing_items(
    db: AsyncSession,
    *,
    invoice: InvoiceModel,
    rows: Iterable[CostingRowDraft],
    user_id: Optional[uuid.UUID],
    action: str = "costing.saved",
    details: Optional[dict] = None,
) -> List[CostingItemModel]:
    """
    Delete every costing row of the invoice and insert the given ones in a
    single transaction. line_total is recomputed here.
    """
    await db.execute(
        delete(CostingItemModel)
        .where(CostingItemModel.invoice_id == invoice.id)
        .execution_options(synchronize_session=False)
    )

    new_rows = []
    for index, row in enumerate(rows):
        new_rows.append(CostingItemModel(
            id=uuid.uuid4(),
            invoice_id=invoice.id,
            organization_id=invoice.organization_id,
            invoice_item_id=row.invoice_item_id,
            item_no=row.item_no,
            item_type=row.item_type,
            description=row.description,
            quantity=row.quantity,
            price=row.price,
            line_total=line_total(row.quantity, row.price),
            sort_order=index,
        ))
    db.add_all(new_rows)

    total = round(sum(r.line_total for r in new_rows), 2)
    crud_audit_log.add_entry(
        db, organization_id=invoice.organization_id, user_id=user_id, action=action,
        entity_type="invoice_costing", entity_id=invoice.id,
        details={"invoice_number": invoice.invoice_number, "rows": len(new_rows), "costing_total": total, **(details or {})},
    )
    await db.commit()
    logger.info(f"Costing for invoice {invoice.invoice_number} saved: {len(new_rows)} rows, total {total}")
    return await get_costing_rows(db, invoice_id=invoice.id)

async def get_costing_totals(db: AsyncSession, *, organization_id: uuid.UUID, invoice_ids: Optional[List[uuid.UUID]] = None) -> dict:
    """
    Costing total per invoice id, for invoices that have costing rows.
    """
    query = (
        select(CostingItemModel.invoice_id, func.sum(CostingItemModel.line_total))
        .filter(CostingItemModel.organization_id == organization_id)
        .group_by(CostingItemModel.invoice_id)
    )
    if invoice_ids is not None:
        query = query.filter(CostingItemModel.invoice_id.in_(invoice_ids))
    result = await db.execute(query)
    return {invoice_id: round_currency(total) for invoice_id, total in result.all()}

async def get_costing_summary(db: AsyncSession, *, organization_id: uuid.UUID) -> dict:
    """
    Revenue, costing and profit per costed invoice, plus overall totals.
    """
    totals = await get_costing_totals(db, organization_id=organization_id)
    entries = []
    if totals:
        result = await db.execute(
            select(InvoiceModel.id, InvoiceModel.invoice_number, InvoiceModel.total)
            .filter(InvoiceModel.organization_id == organization_id)
            .filter(InvoiceModel.id.in_(list(totals)))
            .order_by(InvoiceModel.invoice_date.desc(), InvoiceModel.invoice_number.desc())
        )
        for invoice_id, invoice_number, invoice_total in result.all():
            cost = totals[invoice_id]
            margin = profit_margin(invoice_total, cost)
            entries.append({
                "invoice_id": invoice_id,
                "invoice_number": invoice_number,
                "invoice_total": round_currency(invoice_total),
                "costing_total": cost,
                "profit": round_currency(invoice_total - cost),
                "margin_percent": margin.margin_percent if margin else None,
            })

    total_revenue = round_currency(sum(e["invoice_total"] for e in entries))
    total_costing = round_currency(sum(e["costing_total"] for e in entries))
    overall = profit_margin(total_revenue, total_costing)
    return {
        "invoices": entries,
        "total_revenue": total_revenue,
        "total_costing": total_costing,
        "total_profit": round_currency(total_revenue - total_costing),
        "overall_margin_percent": overall.margin_percent if overall else None,
    }
